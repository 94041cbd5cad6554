from dataclasses import replace

import pytest

from blocks import Column, Table
from chrome import footer_plan, header_plan, page_label, stamp_footers
from page_canvas import ImageOp, TextOp
from pagination import paginate
from render_context import LOGO_KEY, LoadedImage


def _texts(ops):
    return [op.text for op in ops if isinstance(op, TextOp)]


def test_page_label():
    assert page_label(2, 5) == "Page 2 of 5"


def test_header_without_logo_uses_name_placeholder(ctx):
    plan = header_plan(ctx)
    assert not any(isinstance(op, ImageOp) for op in plan.ops)
    assert _texts(plan.ops).count(ctx.identity.name) == 1
    assert "COMMERCIAL PROPOSAL" in _texts(plan.ops)
    assert plan.height == ctx.geometry.header_band


def test_header_with_logo_draws_image(ctx):
    with_logo = replace(ctx, images={LOGO_KEY: LoadedImage(b"png", 200, 100)})
    images = [op for op in header_plan(with_logo).ops if isinstance(op, ImageOp)]
    assert len(images) == 1
    assert _texts(header_plan(with_logo).ops).count(ctx.identity.name) == 1
    assert images[0].w == pytest.approx(40)
    assert images[0].h == pytest.approx(20)


def test_header_is_stateless(ctx):
    assert header_plan(ctx) == header_plan(ctx)


def test_footer_contents(ctx):
    texts = _texts(footer_plan(ctx, 1, 3).ops)
    assert "Page 1 of 3" in texts
    assert f"GSTIN: {ctx.identity.tax_id}" in texts
    assert any("Web: www.acme.example" in t for t in texts)


def test_stamp_footers_numbers_every_page(ctx):
    table = Table("ITEMS", (Column("A"),), tuple((str(i),) for i in range(100)))
    sealed = paginate([table], ctx)
    final = stamp_footers(sealed)
    n = final.page_count
    assert n == len(sealed) > 1
    for i, page in enumerate(final.pages, start=1):
        labels = [t for t in _texts(page.ops) if t.startswith("Page ")]
        assert labels == [f"Page {i} of {n}"]


def test_footer_is_drawn_inside_bottom_band(ctx):
    sealed = paginate([], ctx)
    final = stamp_footers(sealed)
    footer_ops = final.pages[0].ops[len(sealed.pages[0].ops):]
    assert footer_ops
    top = ctx.geometry.footer_top
    assert all(op.y >= top for op in footer_ops if hasattr(op, "y"))
