import json
import logging
from decimal import Decimal

from blocks import BoxedSection, PageBreakHint, Table, TextBlock, TwoColumnGrid
from conftest import make_document
from document_assembler import assemble_blocks, totals_lines
from models import DocumentKind, TaxLine


def _totals(blocks):
    return next(b for b in blocks if isinstance(b, BoxedSection) and b.title == "FINANCIAL SUMMARY")


def _labels(box):
    return [row.label for row in box.body]


def _all_text(blocks):
    out = []
    for b in blocks:
        if isinstance(b, TextBlock):
            out.append(b.text)
        elif isinstance(b, Table):
            out.append(b.title)
        elif isinstance(b, BoxedSection):
            out.append(b.title)
    return out


class TestOrder:

    def test_fixed_section_order(self, document, ctx):
        blocks = assemble_blocks(document, ctx)
        assert isinstance(blocks[0], BoxedSection) and blocks[0].title == "QUOTE DETAILS"
        assert isinstance(blocks[1], TwoColumnGrid)
        assert isinstance(blocks[2], Table) and blocks[2].title == "PRODUCTS & SERVICES"
        assert blocks[3].title == "FINANCIAL SUMMARY"
        assert isinstance(blocks[4], TwoColumnGrid)

    def test_cover_only_when_requested(self, ctx):
        blocks = assemble_blocks(make_document(include_cover=True, abstract="About this offer"), ctx)
        assert "About this offer" in _all_text(blocks)
        cover_end = next(i for i, b in enumerate(blocks) if isinstance(b, PageBreakHint))
        assert blocks[cover_end + 1].title == "QUOTE DETAILS"
        assert not any(isinstance(b, PageBreakHint) for b in assemble_blocks(make_document(), ctx))

    def test_no_items_notice(self, ctx):
        blocks = assemble_blocks(make_document(n_items=0), ctx)
        assert "No items added to this quote." in _all_text(blocks)
        assert not any(isinstance(b, Table) and b.title == "PRODUCTS & SERVICES" for b in blocks)

    def test_terms_table(self, ctx):
        blocks = assemble_blocks(make_document(terms="Taxes: extra\nDelivery - 4 weeks"), ctx)
        terms = next(b for b in blocks if isinstance(b, Table) and b.title == "Terms & Conditions")
        assert terms.rows == (("1", "Taxes", "extra"), ("2", "Delivery", "4 weeks"))

    def test_invoice_has_payment_status(self, ctx):
        doc = make_document(kind=DocumentKind.INVOICE, number="INV-1", paid_amount=Decimal("100"),
                            payment_status="partial")
        blocks = assemble_blocks(doc, ctx)
        titles = _all_text(blocks)
        assert "INVOICE DETAILS" in titles
        status = next(b for b in blocks if isinstance(b, BoxedSection) and b.title == "PAYMENT STATUS")
        assert status.body[0].value == "PARTIAL"
        assert status.body[0].value_color == "warning"


class TestTotals:

    def test_zero_lines_are_suppressed(self, document, ctx):
        labels = _labels(_totals(assemble_blocks(document, ctx)))
        assert labels == ["Subtotal:", "CGST (9%):", "SGST (9%):"]

    def test_discount_present_shipping_absent(self, ctx):
        doc = make_document(discount=Decimal("500"))
        box = _totals(assemble_blocks(doc, ctx))
        assert "Discount:" in _labels(box)
        assert not any("Shipping" in label for label in _labels(box))
        discount = box.body[1]
        assert discount.value == "-Rs. 500.00"
        assert discount.value_color == "danger"

    def test_shipping_and_igst(self):
        doc = make_document(shipping=Decimal("250"), taxes=(TaxLine("IGST (18%)", Decimal("10")),
                                                            TaxLine("CGST (9%)", Decimal("0"))))
        labels = [label for label, _amount, _color in totals_lines(doc)]
        assert labels == ["Subtotal:", "Shipping & Handling:", "IGST (18%):"]

    def test_total_band(self, document, ctx):
        box = _totals(assemble_blocks(document, ctx))
        assert box.total.label == "TOTAL AMOUNT:"
        assert box.width == 280 and box.align == "right"


class TestAnnexes:

    def test_absent_bom_emits_nothing(self, document, ctx):
        texts = _all_text(assemble_blocks(document, ctx))
        assert not any("Annexure" in t or "Bill of Materials" in t for t in texts)

    def test_empty_bom_emits_nothing(self, ctx):
        texts = _all_text(assemble_blocks(make_document(bom="[]"), ctx))
        assert not any("Annexure" in t for t in texts)

    def test_malformed_bom_is_dropped_with_warning(self, ctx, caplog):
        with caplog.at_level(logging.WARNING):
            blocks = assemble_blocks(make_document(bom="{broken", sla={"overview": "Gold"}), ctx)
        texts = _all_text(blocks)
        assert "Annexure 1 – Service Level Agreement" in texts
        assert not any("Bill of Materials" in t for t in texts)
        assert "Skipping bom annex" in caplog.text

    def test_annexes_numbered_in_order(self, ctx):
        doc = make_document(
            bom=json.dumps([{"partNumber": "SRV-1", "description": "Server", "specifications": "2U"}]),
            sla={"responseTime": "4h"},
            timeline={"milestones": [{"name": "Kickoff", "startDate": "2026-11-01"}]},
        )
        texts = _all_text(assemble_blocks(doc, ctx))
        headings = [t for t in texts if t.startswith("Annexure")]
        assert headings == [
            "Annexure 1 – Bill of Materials",
            "Annexure 2 – Service Level Agreement",
            "Annexure 3 – Project Timeline",
        ]

    def test_unstructured_bom_entry_rows(self, ctx):
        doc = make_document(bom=[{"partNumber": "SRV-1", "description": "Server", "specifications": "2U"}])
        table = next(b for b in assemble_blocks(doc, ctx) if isinstance(b, Table) and b.title == "SRV-1")
        assert table.rows == (("Base", "Server", "1"), ("Specifications", "2U", ""))
