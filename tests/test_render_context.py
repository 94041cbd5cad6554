import logging

import pytest

from conftest import make_document
from layout_errors import ResourceUnavailableError
from models import CompanyIdentity, DocumentKind
from render_context import (
    FontSet,
    Palette,
    RenderContextBuilder,
    chrome_title,
    load_image,
    register_font,
)


def test_defaults(document):
    ctx = RenderContextBuilder().for_document(document).build()
    assert ctx.title == "COMMERCIAL PROPOSAL"
    assert ctx.fonts == FontSet()
    assert ctx.currency_prefix == "Rs. "
    assert ctx.document_label == document.number
    assert ctx.logo is None


def test_invoice_title():
    assert chrome_title(DocumentKind.INVOICE) == "TAX INVOICE"
    ctx = RenderContextBuilder().for_document(make_document(kind=DocumentKind.INVOICE)).build()
    assert ctx.title == "TAX INVOICE"


def test_missing_logo_falls_back_with_warning(document, caplog):
    with caplog.at_level(logging.WARNING):
        ctx = RenderContextBuilder().for_document(document).with_logo("/no/such/logo.png").build()
    assert ctx.logo is None
    assert "Logo unavailable" in caplog.text


def test_missing_font_falls_back(document, caplog):
    with caplog.at_level(logging.WARNING):
        ctx = RenderContextBuilder().for_document(document).with_fonts(bold="/no/such/font.ttf").build()
    assert ctx.fonts.bold == "Helvetica-Bold"
    assert "Falling back" in caplog.text


def test_default_company_name_fills_blank_identity():
    doc = make_document(company=CompanyIdentity(name=""))
    ctx = RenderContextBuilder().for_document(doc).with_default_company("Fallback Ltd").build()
    assert ctx.identity.name == "Fallback Ltd"


def test_builds_are_independent(document):
    a = RenderContextBuilder().for_document(document).with_currency("$").build()
    b = RenderContextBuilder().for_document(document).build()
    assert a.currency_prefix == "$"
    assert b.currency_prefix == "Rs. "


def test_palette_resolves_roles_and_hex():
    p = Palette()
    assert p.resolve("accent") == p.accent
    assert p.resolve("#123456") == "#123456"
    assert p.resolve(None) is None


def test_load_image_reads_size(tmp_path):
    pil = pytest.importorskip("PIL.Image")
    path = tmp_path / "logo.png"
    pil.new("RGB", (120, 60), color="white").save(path)
    image = load_image(str(path))
    assert (image.width, image.height) == (120, 60)


def test_load_image_rejects_garbage(tmp_path):
    path = tmp_path / "logo.png"
    path.write_bytes(b"not an image")
    with pytest.raises(ResourceUnavailableError):
        load_image(str(path))


def test_register_font_missing_file():
    with pytest.raises(ResourceUnavailableError):
        register_font("Doc-Missing", "/no/such/font.ttf")


def test_custom_palette(document):
    palette = Palette(accent="#ff0000")
    ctx = RenderContextBuilder().for_document(document).with_palette(palette).build()
    assert ctx.color("accent") == "#ff0000"
