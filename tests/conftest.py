import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

# Put the repo root on sys.path so the flat modules import without installing
ROOT = Path(__file__).resolve().parent.parent
if ROOT.as_posix() not in sys.path:
    sys.path.insert(0, ROOT.as_posix())

from models import CompanyIdentity, Document, DocumentKind, LineItem, Party, TaxLine  # noqa: E402
from render_context import RenderContextBuilder  # noqa: E402


COMPANY = CompanyIdentity(
    name="Acme Systems Pvt Ltd",
    address="12 Industrial Estate\nBengaluru 560001",
    phone="9876543210",
    email="sales@acme.example",
    website="www.acme.example",
    tax_id="29ABCDE1234F1Z5",
)

CLIENT = Party(
    name="Globex Corporation",
    address="44 Ring Road, Pune",
    phone="9123456789",
    email="buyer@globex.example",
    tax_id="27XYZAB9876C1Z2",
)


def make_items(n: int, description: str = "Rack server 2U") -> tuple:
    return tuple(
        LineItem(
            description=f"{description} #{i}",
            quantity=Decimal("2"),
            unit_price=Decimal("1500.00"),
            subtotal=Decimal("3000.00"),
        )
        for i in range(1, n + 1)
    )


def make_document(n_items: int = 3, **overrides) -> Document:
    items = make_items(n_items)
    subtotal = sum((it.subtotal for it in items), Decimal("0"))
    fields = dict(
        kind=DocumentKind.QUOTE,
        number="Q-2026-0042",
        issue_date=date(2026, 10, 19),
        company=COMPANY,
        bill_to=CLIENT,
        items=items,
        subtotal=subtotal,
        taxes=(TaxLine("CGST (9%)", subtotal * Decimal("0.09")), TaxLine("SGST (9%)", subtotal * Decimal("0.09"))),
        total=subtotal * Decimal("1.18"),
        notes="Delivery within three weeks of purchase order.",
    )
    fields.update(overrides)
    return Document(**fields)


@pytest.fixture
def document():
    return make_document()


@pytest.fixture
def ctx(document):
    return RenderContextBuilder().for_document(document).build()
