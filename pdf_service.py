# pdf_service.py
import logging
import os
from datetime import date

from chrome import stamp_footers
from config import Config
from document_assembler import assemble_blocks
from formatting import safe_filename
from models import Document
from page_canvas import FinalDocument, SealedPages
from pagination import paginate
from pdf_writer import write_pdf
from render_context import RenderContext, RenderContextBuilder

logger = logging.getLogger(__name__)

__all__ = [
    "build_context",
    "render_content",
    "stamp_footers",
    "render_final",
    "render_document",
    "pdf_path_for",
    "generate_and_store_pdf",
]


def build_context(document: Document, **overrides) -> RenderContext:
    """
    RenderContext for one render call, wired from Config. Keyword overrides
    (logo_path, currency_prefix, title, palette, font paths) win over the environment.
    """
    builder = (
        RenderContextBuilder()
        .for_document(document)
        .with_default_company(overrides.get("default_company", Config.DEFAULT_COMPANY_NAME))
        .with_logo(overrides.get("logo_path", Config.LOGO_PATH))
        .with_fonts(
            regular=overrides.get("font_regular", Config.FONT_REGULAR_PATH),
            bold=overrides.get("font_bold", Config.FONT_BOLD_PATH),
            italic=overrides.get("font_italic", Config.FONT_ITALIC_PATH),
        )
        .with_currency(overrides.get("currency_prefix", Config.CURRENCY_PREFIX))
    )
    if overrides.get("title"):
        builder = builder.with_title(overrides["title"])
    if overrides.get("palette") is not None:
        builder = builder.with_palette(overrides["palette"])
    return builder.build()


def render_content(document: Document, ctx: RenderContext | None = None) -> SealedPages:
    """Pass 1: assemble the blocks and lay them out. Footers are not drawn yet."""
    ctx = ctx or build_context(document)
    blocks = assemble_blocks(document, ctx, payment_terms=Config.DEFAULT_PAYMENT_TERMS)
    return paginate(blocks, ctx)


def render_final(document: Document, ctx: RenderContext | None = None) -> FinalDocument:
    return stamp_footers(render_content(document, ctx))


def render_document(document: Document, ctx: RenderContext | None = None) -> bytes:
    final = render_final(document, ctx)
    data = write_pdf(final)
    logger.info("Rendered %s %s: %d page(s), %d bytes",
                document.kind.value, document.number or "(no number)", final.page_count, len(data))
    return data


def pdf_path_for(document: Document, exports_dir: str | None = None) -> str:
    # exports/<year>/<number>.pdf
    year = str(document.year or date.today().year)
    year_dir = os.path.join(exports_dir or Config.EXPORTS_DIR, year)
    return os.path.abspath(os.path.join(year_dir, f"{safe_filename(document.number)}.pdf"))


def generate_and_store_pdf(document: Document, exports_dir: str | None = None) -> str:
    """
    Render `document` and write it under the exports directory.

    Returns: absolute pdf path on disk.
    """
    pdf_path = pdf_path_for(document, exports_dir)
    os.makedirs(os.path.dirname(pdf_path), exist_ok=True)

    data = render_document(document)
    with open(pdf_path, "wb") as fh:
        fh.write(data)
    return pdf_path
