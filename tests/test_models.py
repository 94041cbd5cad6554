from datetime import date
from decimal import Decimal

from models import Document, DocumentKind


def _row(**extra):
    data = {
        "kind": "quote",
        "quote_number": "Q-2026-0007",
        "quote_date": "2026-03-04T10:00:00Z",
        "company": {"name": "Acme", "gstin": "29ABCDE1234F1Z5"},
        "client": {
            "name": "Globex",
            "billing_address": "1 Main St",
            "shipping_address": "2 Dock Rd",
            "contact_person": "R. Iyer",
        },
        "items": [
            {"description": "Second", "quantity": "1", "unit_price": "5", "subtotal": "5", "sort_order": 2},
            {"description": "First", "quantity": "2", "unit_price": "10", "subtotal": "20", "sort_order": 1},
        ],
        "subtotal": "25",
        "cgst": "2.25",
        "sgst": "2.25",
        "total": "29.50",
    }
    data.update(extra)
    return data


def test_from_dict_maps_joined_row():
    doc = Document.from_dict(_row())
    assert doc.kind == DocumentKind.QUOTE
    assert doc.number == "Q-2026-0007"
    assert doc.issue_date == date(2026, 3, 4)
    assert doc.company.tax_id == "29ABCDE1234F1Z5"
    assert doc.bill_to.address == "1 Main St"
    assert doc.ship_to.address == "2 Dock Rd"
    assert doc.ship_to.name == "Globex"
    assert doc.total == Decimal("29.50")


def test_from_dict_orders_items_by_sort_order():
    doc = Document.from_dict(_row())
    assert [it.description for it in doc.items] == ["First", "Second"]


def test_from_dict_turns_gst_columns_into_tax_lines():
    doc = Document.from_dict(_row())
    assert [t.label for t in doc.taxes] == ["CGST (9%)", "SGST (9%)"]
    assert all(t.amount == Decimal("2.25") for t in doc.taxes)


def test_from_dict_invoice_number_wins():
    doc = Document.from_dict(_row(kind="invoice", invoice_number="INV-9", paid_amount="10"))
    assert doc.is_invoice
    assert doc.number == "INV-9"
    assert doc.quote_number == "Q-2026-0007"
    assert doc.balance_due == Decimal("19.50")


def test_from_dict_without_shipping_address_has_no_ship_to():
    data = _row()
    data["client"].pop("shipping_address")
    assert Document.from_dict(data).ship_to is None


def test_year():
    assert Document.from_dict(_row()).year == 2026
