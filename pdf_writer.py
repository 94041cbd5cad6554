# pdf_writer.py
from __future__ import annotations

import io

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from page_canvas import FinalDocument, ImageOp, LineOp, RectOp, TextOp


def _baseline(op: TextOp, page_h: float) -> float:
    # ops carry the top of the line box; reportlab wants a bottom-up baseline
    line_h = op.line_height or op.size * 1.25
    top_pad = (line_h - op.size) / 2
    return page_h - (op.y + top_pad + pdfmetrics.getAscent(op.font, op.size))


def _draw_text(pdf, op: TextOp, page_h: float) -> None:
    if not op.text:
        return
    y = _baseline(op, page_h)
    pdf.setFont(op.font, op.size)
    pdf.setFillColor(colors.HexColor(op.color))
    if op.align == "right":
        pdf.drawRightString(op.x + op.width, y, op.text)
    elif op.align == "center":
        pdf.drawCentredString(op.x + op.width / 2, y, op.text)
    else:
        pdf.drawString(op.x, y, op.text)


def _draw_rect(pdf, op: RectOp, page_h: float) -> None:
    if not op.fill and not op.stroke:
        return
    if op.fill:
        pdf.setFillColor(colors.HexColor(op.fill))
    if op.stroke:
        pdf.setStrokeColor(colors.HexColor(op.stroke))
        pdf.setLineWidth(op.line_width)
    y = page_h - (op.y + op.h)
    stroke = 1 if op.stroke else 0
    fill = 1 if op.fill else 0
    if op.radius > 0:
        pdf.roundRect(op.x, y, op.w, op.h, op.radius, stroke=stroke, fill=fill)
    else:
        pdf.rect(op.x, y, op.w, op.h, stroke=stroke, fill=fill)


def _draw_line(pdf, op: LineOp, page_h: float) -> None:
    pdf.setStrokeColor(colors.HexColor(op.color))
    pdf.setLineWidth(op.line_width)
    pdf.line(op.x1, page_h - op.y1, op.x2, page_h - op.y2)


def write_pdf(final: FinalDocument) -> bytes:
    """
    Replay every page's draw operations onto a reportlab canvas.
    `invariant=1` keeps the output byte-identical for identical input
    (no timestamps or random document ids).
    """
    ctx = final.context
    g = ctx.geometry
    page_h = g.page_height

    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=(g.page_width, page_h), invariant=1)
    label = f" - {ctx.document_label}" if ctx.document_label else ""
    pdf.setTitle(f"{ctx.title.title()}{label}")
    if ctx.identity.name:
        pdf.setAuthor(ctx.identity.name)

    readers = {}
    for page in final.pages:
        for op in page.ops:
            if isinstance(op, TextOp):
                _draw_text(pdf, op, page_h)
            elif isinstance(op, RectOp):
                _draw_rect(pdf, op, page_h)
            elif isinstance(op, LineOp):
                _draw_line(pdf, op, page_h)
            elif isinstance(op, ImageOp):
                image = ctx.images.get(op.resource)
                if image is None:
                    continue
                if op.resource not in readers:
                    readers[op.resource] = ImageReader(io.BytesIO(image.data))
                pdf.drawImage(readers[op.resource], op.x, page_h - (op.y + op.h),
                              width=op.w, height=op.h, mask="auto")
            else:
                raise TypeError(f"unknown draw op: {type(op).__name__}")
        pdf.showPage()

    pdf.save()
    return buf.getvalue()
