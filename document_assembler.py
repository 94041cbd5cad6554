# document_assembler.py
from __future__ import annotations

import logging
from decimal import Decimal

from annexes import BomAnnex, SlaAnnex, TimelineAnnex, Unparseable, decode_annexes, parse_terms
from blocks import BoxedSection, Column, LabelValueRow, PageBreakHint, Table, TextBlock, TwoColumnGrid
from formatting import format_date, format_phone, format_quantity, money
from models import Document
from render_context import RenderContext
from text_metrics import fit_text

logger = logging.getLogger(__name__)

DASH = "—"
DEFAULT_PAYMENT_TERMS = "30 days from the date of Invoice"
DEFAULT_VALIDITY_DAYS = 15
COVER_ABSTRACT_H = 200
TOTALS_W = 280
INFO_LABEL_W = 120


def _heading(text: str, size: float = 11, space_after: float = 6) -> TextBlock:
    return TextBlock(text, size=size, weight="bold", color="primary", space_after=space_after, keep_with_next=True)


def _row(label: str, value: str, **kw) -> LabelValueRow:
    return LabelValueRow(label, value or DASH, **kw)


# -----------------------------
# Cover
# -----------------------------
def _cover(document: Document, ctx: RenderContext) -> list:
    company = ctx.identity.name
    client = document.bill_to.name or DASH
    abstract = document.abstract or (
        f"This commercial proposal outlines a comprehensive solution designed to address the specific "
        f"needs of {client} in enhancing their operations and achieving strategic objectives."
    )
    # the abstract is clipped so the cover stays a single page
    width = ctx.geometry.content_width - 30
    abstract = "\n".join(fit_text(abstract, ctx.font(10.5), width, COVER_ABSTRACT_H))
    return [
        TextBlock((company or "").lower(), size=40, weight="bold", color="primary", align="center", space_after=30),
        TextBlock("Commercial Proposal", size=26, weight="bold", color="accent", align="center", space_after=8),
        TextBlock("for", size=20, color="muted", align="center", space_after=8),
        TextBlock(client, size=24, weight="bold", color="text", align="center", space_after=60),
        TextBlock("Abstract", size=16, weight="bold", color="text", align="center", space_after=12, keep_with_next=True),
        TextBlock(abstract, size=10.5, color="muted", indent=30, space_after=40),
        TextBlock(f"Prepared by: {document.prepared_by or company}", size=10, weight="bold",
                  color="accent", align="right"),
        PageBreakHint(),
    ]


# -----------------------------
# Document info
# -----------------------------
def _validity(document: Document) -> str:
    if document.valid_until:
        return f"Valid until {format_date(document.valid_until)}"
    return f"{document.validity_days or DEFAULT_VALIDITY_DAYS} days from the quote date"


def _info_box(document: Document, ctx: RenderContext, payment_terms: str) -> BoxedSection:
    kw = {"label_width": INFO_LABEL_W}
    if document.is_invoice:
        rows = [
            _row("Invoice No.:", document.number, **kw),
            _row("Invoice Date:", format_date(document.issue_date), **kw),
            _row("Due Date:", format_date(document.due_date), **kw),
        ]
        if document.quote_number:
            rows.append(_row("Quote No.:", document.quote_number, **kw))
        title = "INVOICE DETAILS"
    else:
        rows = [
            _row("Company Name:", ctx.identity.name, **kw),
            _row("Quote No.:", document.number, **kw),
        ]
        if document.reference_number:
            rows.append(_row("Reference No.:", document.reference_number, **kw))
        rows += [
            _row("Date:", format_date(document.issue_date), **kw),
            _row("Payment Terms:", document.payment_terms or payment_terms, **kw),
            _row("Quote Validity:", _validity(document), **kw),
        ]
        title = "QUOTE DETAILS"
    return BoxedSection(title, body=tuple(rows), fill="bg_soft", space_after=14)


# -----------------------------
# Parties
# -----------------------------
def _party_grid(document: Document) -> TwoColumnGrid:
    bill = document.bill_to
    kw = {"label_width": 80, "label_color": "text"}

    left = [_heading("Bill To:"), _row("Name:", bill.name, **kw)]
    if bill.address:
        left.append(_row("Address:", bill.address, **kw))
    left += [
        _row("Phone No.:", format_phone(bill.phone), **kw),
        _row("Email ID:", bill.email, value_color="primary_light", **kw),
        _row("GSTIN:", bill.tax_id, **kw),
    ]
    attn = document.attention_to or bill.contact_person
    if attn:
        left.append(_row("Attn to:", attn, **kw))

    ship = document.ship_to
    ship_name = (ship.name if ship else "") or bill.name
    ship_address = (ship.address if ship else "") or bill.address
    right = [_heading("Ship To:"), _row("Name:", ship_name, **kw)]
    if ship_address:
        right.append(_row("Address:", ship_address, **kw))

    return TwoColumnGrid(tuple(left), tuple(right), gap=16, left_ratio=0.5, space_after=14)


# -----------------------------
# Line items
# -----------------------------
ITEM_COLUMNS = (
    Column("SN", fixed=35, align="center"),
    Column("Product Description", weight=1),
    Column("Qty", fixed=50, align="center"),
    Column("Unit Price", fixed=95, align="right"),
    Column("Subtotal", fixed=100, align="right"),
)


def _items(document: Document, ctx: RenderContext) -> list:
    title = "PRODUCTS & SERVICES"
    if not document.items:
        what = "invoice" if document.is_invoice else "quote"
        return [
            _heading(title),
            TextBlock(f"No items added to this {what}.", size=10, weight="italic", color="muted",
                      align="center", space_after=14),
        ]
    rows = tuple(
        (
            str(i),
            item.description or DASH,
            format_quantity(item.quantity),
            money(item.unit_price, ctx.currency_prefix),
            money(item.subtotal, ctx.currency_prefix),
        )
        for i, item in enumerate(document.items, start=1)
    )
    return [Table(title, ITEM_COLUMNS, rows, continuation_title=f"{title} (contd.)", space_after=14)]


# -----------------------------
# Totals
# -----------------------------
def totals_lines(document: Document) -> list[tuple[str, Decimal, str]]:
    """(label, signed amount, colour role); zero or negative adjustments are left out."""
    lines = [("Subtotal:", document.subtotal, "text")]
    if document.discount > 0:
        lines.append(("Discount:", -document.discount, "danger"))
    if document.shipping > 0:
        lines.append(("Shipping & Handling:", document.shipping, "text"))
    for tax in document.taxes:
        if tax.amount > 0:
            label = tax.label if tax.label.endswith(":") else f"{tax.label}:"
            lines.append((label, tax.amount, "text"))
    return lines


def _totals_box(document: Document, ctx: RenderContext) -> BoxedSection:
    rows = tuple(
        LabelValueRow(label, money(amount, ctx.currency_prefix), label_width=130,
                      value_color=color, value_align="right")
        for label, amount, color in totals_lines(document)
    )
    return BoxedSection(
        "FINANCIAL SUMMARY",
        body=rows,
        width=TOTALS_W,
        align="right",
        total=LabelValueRow("TOTAL AMOUNT:", money(document.total, ctx.currency_prefix)),
        space_after=16,
    )


def _payment_status_box(document: Document, ctx: RenderContext) -> BoxedSection:
    status = (document.payment_status or "pending").lower()
    color = {"paid": "success", "partial": "warning"}.get(status, "danger")
    rows = (
        LabelValueRow("Status:", status.upper(), label_width=90, value_color=color, value_weight="bold"),
        LabelValueRow("Paid:", money(document.paid_amount, ctx.currency_prefix), label_width=90),
        LabelValueRow("Balance Due:", money(document.balance_due, ctx.currency_prefix), label_width=90),
    )
    return BoxedSection("PAYMENT STATUS", body=rows, width=TOTALS_W, align="right", fill="bg_soft", space_after=16)


# -----------------------------
# Notes, signatory, terms
# -----------------------------
def _notes_and_signatory(document: Document, ctx: RenderContext) -> TwoColumnGrid:
    notes = BoxedSection(
        "Special notes and instructions",
        body=document.notes or DASH,
        min_height=90,
        fill="notes_fill",
        border="notes_border",
        title_fill=None,
        body_color="notes_text",
    )
    signatory = BoxedSection(
        f"For {ctx.identity.name},",
        min_height=90,
        title_fill=None,
        signature_label="Authorized Signatory",
    )
    return TwoColumnGrid((notes,), (signatory,), gap=16, left_ratio=0.6, space_after=14)


TERMS_COLUMNS = (
    Column("SN", fixed=35, align="center"),
    Column("Parameters", fixed=160),
    Column("Details", weight=1),
)


def _terms(document: Document) -> list:
    rows = parse_terms(document.terms)
    if not rows:
        return []
    cells = tuple((str(i), r.param or DASH, r.details or DASH) for i, r in enumerate(rows, start=1))
    return [Table("Terms & Conditions", TERMS_COLUMNS, cells, title_size=10, space_after=14)]


# -----------------------------
# Annexes
# -----------------------------
BOM_COLUMNS = (
    Column("Module", fixed=120),
    Column("Description", weight=1),
    Column("Qty", fixed=60, align="center"),
)


def _bom_blocks(annex: BomAnnex, number: int) -> list:
    blocks = [_heading(f"Annexure {number} – Bill of Materials")]
    for entry in annex.entries:
        if entry.components:
            rows = tuple((c.module or DASH, c.description or DASH, c.qty or DASH) for c in entry.components)
        else:
            # unstructured entry: show whatever descriptive fields it has
            qty = " ".join(part for part in (entry.quantity or "1", entry.unit) if part)
            guessed = [("Base", entry.description or DASH, qty)]
            if entry.manufacturer:
                guessed.append(("Manufacturer", entry.manufacturer, ""))
            if entry.specifications:
                guessed.append(("Specifications", entry.specifications, ""))
            if entry.notes:
                guessed.append(("Notes", entry.notes, ""))
            rows = tuple(guessed)
        blocks.append(Table(entry.heading, BOM_COLUMNS, rows, size=8.5, title_size=10, space_after=12))
    return blocks


SLA_METRIC_COLUMNS = (
    Column("Metric", weight=1.2),
    Column("Description", weight=2),
    Column("Target", weight=1),
    Column("Measurement", weight=1.2),
    Column("Penalty", weight=1),
)


def _sla_blocks(annex: SlaAnnex, number: int) -> list:
    blocks = [_heading(f"Annexure {number} – Service Level Agreement")]
    if annex.overview:
        blocks.append(TextBlock(annex.overview, space_after=10))
    commitments = annex.commitments()
    if commitments:
        rows = tuple(LabelValueRow(f"{label}:", value, label_width=110) for label, value in commitments)
        blocks.append(BoxedSection("Service Commitments", body=rows, fill="bg_soft", space_after=12))
    if annex.metrics:
        rows = tuple(
            (m.name or DASH, m.description or DASH, m.target or DASH, m.measurement or DASH, m.penalty or DASH)
            for m in annex.metrics
        )
        blocks.append(Table("Performance Metrics", SLA_METRIC_COLUMNS, rows, size=8.5, title_size=10,
                            space_after=12))
    if annex.escalation_process:
        blocks.append(_heading("Escalation Process", size=10, space_after=4))
        blocks.append(TextBlock(annex.escalation_process, space_after=12))
    return blocks


MILESTONE_COLUMNS = (
    Column("SN", fixed=30, align="center"),
    Column("Milestone", weight=2),
    Column("Schedule", weight=1.4),
    Column("Status", fixed=65),
    Column("Deliverables", weight=2),
)


def _milestone_row(i: int, m) -> tuple:
    name = "\n".join(part for part in (m.name or DASH, m.description) if part)
    dates = " – ".join(part for part in (m.start_date, m.end_date) if part)
    schedule = "\n".join(part for part in (dates, m.duration) if part) or DASH
    deliverables = m.deliverables
    if m.dependencies:
        deliverables = "\n".join(part for part in (deliverables, f"Depends on: {m.dependencies}") if part)
    return (str(i), name, schedule, m.status.title() or DASH, deliverables or DASH)


def _timeline_blocks(annex: TimelineAnnex, number: int) -> list:
    blocks = [_heading(f"Annexure {number} – Project Timeline")]
    if annex.project_overview:
        blocks.append(TextBlock(annex.project_overview, space_after=10))
    dates = [("Start Date:", annex.start_date), ("End Date:", annex.end_date)]
    dates = [(label, value) for label, value in dates if value]
    for i, (label, value) in enumerate(dates):
        gap = 8 if i == len(dates) - 1 else 0
        blocks.append(LabelValueRow(label, value, label_width=90, space_after=gap))
    if annex.milestones:
        rows = tuple(_milestone_row(i, m) for i, m in enumerate(annex.milestones, start=1))
        blocks.append(Table("Milestones", MILESTONE_COLUMNS, rows, size=8.5, title_size=10, space_after=12))
    return blocks


def _annex_blocks(document: Document) -> list:
    blocks = []
    number = 0
    for annex in decode_annexes(document):
        if isinstance(annex, Unparseable):
            logger.warning("Skipping %s annex of %s: %s", annex.kind, document.number or "document", annex.reason)
            continue
        number += 1
        if isinstance(annex, BomAnnex):
            blocks += _bom_blocks(annex, number)
        elif isinstance(annex, SlaAnnex):
            blocks += _sla_blocks(annex, number)
        elif isinstance(annex, TimelineAnnex):
            blocks += _timeline_blocks(annex, number)
    return blocks


# -----------------------------
# Entry point
# -----------------------------
def assemble_blocks(document: Document, ctx: RenderContext, payment_terms: str = DEFAULT_PAYMENT_TERMS) -> list:
    """The document's sections as one ordered block list, ready for pagination."""
    blocks = []
    if document.include_cover:
        blocks += _cover(document, ctx)
    blocks.append(_info_box(document, ctx, payment_terms))
    blocks.append(_party_grid(document))
    blocks += _items(document, ctx)
    blocks.append(_totals_box(document, ctx))
    if document.is_invoice:
        blocks.append(_payment_status_box(document, ctx))
    blocks.append(_notes_and_signatory(document, ctx))
    blocks += _terms(document)
    blocks += _annex_blocks(document)
    return blocks
