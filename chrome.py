# chrome.py
from __future__ import annotations

from formatting import compact_address, format_phone
from page_canvas import FinalDocument, FinalPage, ImageOp, RectOp, RenderPlan, SealedPages, TextOp
from render_context import LOGO_KEY, RenderContext
from text_metrics import FontSpec, truncate_lines, wrap_lines

HEADER_INFO_W = 280
LOGO_MAX = 40


def page_label(page: int, total: int) -> str:
    return f"Page {page} of {total}"


def _text(ops, text, font: FontSpec, x, y, width, color, align="left"):
    ops.append(TextOp(text, x, y, width, font.name, font.size, color, align, font.line_height))
    return y + font.line_height


# -----------------------------
# Header band (every page, pass 1)
# -----------------------------
def header_plan(ctx: RenderContext) -> RenderPlan:
    """
    Identity and document title band. Depends only on the context, so it can
    be drawn again on every new page without any bookkeeping.
    """
    g = ctx.geometry
    p = ctx.palette
    identity = ctx.identity
    ops = []

    info_x = g.page_width - g.margin_right - HEADER_INFO_W
    logo = ctx.logo
    if logo is not None:
        w, h = logo.fit(LOGO_MAX, LOGO_MAX)
        ops.append(ImageOp(LOGO_KEY, g.content_left, 0, w, h))
        y = _text(ops, identity.name, ctx.font(10, "bold"), info_x, 0, HEADER_INFO_W, p.primary, "right")
    else:
        # the name stands in for the logo and is not repeated in the info block
        _text(ops, identity.name, ctx.font(14, "bold"), g.content_left, 12, g.content_width / 2, p.primary)
        y = 0

    small = ctx.font(7, leading=8)
    address = compact_address(identity.address, max_lines=2)
    for line in truncate_lines(wrap_lines(address, small, HEADER_INFO_W), 2, small, HEADER_INFO_W):
        y = _text(ops, line, small, info_x, y, HEADER_INFO_W, p.muted, "right")

    contact = []
    if identity.phone:
        contact.append(f"Ph: {format_phone(identity.phone)}")
    if identity.email:
        contact.append(f"Email: {identity.email}")
    if contact:
        _text(ops, " | ".join(contact), small, info_x, y, HEADER_INFO_W, p.muted, "right")

    _text(ops, ctx.title, ctx.font(18, "bold"), g.content_left, 46, g.content_width, p.accent, "center")

    ops.append(RectOp(g.content_left, g.header_band - 4, g.content_width, 3, p.accent, None))
    ops.append(RectOp(g.content_left, g.header_band - 1, g.content_width * 0.4, 1, p.accent_light, None))
    return RenderPlan(g.header_band, tuple(ops))


# -----------------------------
# Footer band (pass 2, needs the page count)
# -----------------------------
def footer_plan(ctx: RenderContext, page: int, total: int) -> RenderPlan:
    g = ctx.geometry
    p = ctx.palette
    identity = ctx.identity
    ops = [
        RectOp(0, 0, g.page_width, g.footer_band, p.bg_soft, None),
        RectOp(0, 0, g.page_width, 3, p.accent, None),
        RectOp(0, 0, g.page_width * 0.3, 1, p.accent_light, None),
    ]

    small = ctx.font(7, leading=8.5)
    y = _text(ops, identity.name, ctx.font(9, "bold", leading=12), 0, 8, g.page_width, p.primary, "center")

    address = compact_address(identity.address)
    if address:
        line = truncate_lines(wrap_lines(address, small, g.content_width), 1, small, g.content_width)[0]
        y = _text(ops, line, small, g.content_left, y, g.content_width, p.muted, "center")

    contact = []
    if identity.phone:
        contact.append(f"Phone: {format_phone(identity.phone)}")
    if identity.email:
        contact.append(f"Email: {identity.email}")
    if identity.website:
        contact.append(f"Web: {identity.website}")
    if contact:
        y = _text(ops, " | ".join(contact), small, 0, y, g.page_width, p.muted, "center")
    if identity.tax_id:
        _text(ops, f"GSTIN: {identity.tax_id}", small, 0, y, g.page_width, p.muted, "center")

    _text(ops, page_label(page, total), small, g.content_left, g.footer_band - small.line_height - 1,
          g.content_width, p.muted, "center")
    return RenderPlan(g.footer_band, tuple(ops))


def stamp_footers(sealed: SealedPages) -> FinalDocument:
    """Pass 2: give every sealed page its footer now that the page count is known."""
    ctx = sealed.context
    total = len(sealed.pages)
    top = ctx.geometry.footer_top
    pages = []
    for i, page in enumerate(sealed.pages):
        footer = footer_plan(ctx, i + 1, total).translated(0, top)
        pages.append(FinalPage(page.index, page.ops + footer.ops, page.placements))
    return FinalDocument(tuple(pages), ctx)
