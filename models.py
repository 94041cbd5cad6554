# models.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from formatting import to_decimal


# -----------------------------
# Enums
# -----------------------------
class DocumentKind(str, Enum):
    QUOTE = "quote"
    INVOICE = "invoice"


# -----------------------------
# Parties
# -----------------------------
@dataclass(frozen=True)
class CompanyIdentity:
    name: str
    address: str = ""
    phone: str = ""
    email: str = ""
    website: str = ""
    tax_id: str = ""


@dataclass(frozen=True)
class Party:
    name: str
    address: str = ""
    phone: str = ""
    email: str = ""
    tax_id: str = ""
    contact_person: str = ""


# -----------------------------
# Lines
# -----------------------------
@dataclass(frozen=True)
class LineItem:
    """
    One priced row of the document. `subtotal` comes from upstream and is
    rendered as-is; it is never recomputed from quantity * unit_price here.
    """
    description: str
    quantity: Decimal
    unit_price: Decimal
    subtotal: Decimal


@dataclass(frozen=True)
class TaxLine:
    label: str
    amount: Decimal


# -----------------------------
# Document
# -----------------------------
@dataclass(frozen=True)
class Document:
    kind: DocumentKind
    number: str
    issue_date: Optional[date]
    company: CompanyIdentity
    bill_to: Party
    ship_to: Optional[Party] = None
    items: tuple[LineItem, ...] = ()

    subtotal: Decimal = Decimal("0")
    discount: Decimal = Decimal("0")
    shipping: Decimal = Decimal("0")
    taxes: tuple[TaxLine, ...] = ()
    total: Decimal = Decimal("0")

    notes: str = ""
    terms: str = ""

    # Optional annexes, stored as serialized JSON (or an already decoded value).
    # They may be malformed; see annexes.py.
    bom: Any = None
    sla: Any = None
    timeline: Any = None

    reference_number: str = ""
    attention_to: str = ""
    validity_days: Optional[int] = None
    valid_until: Optional[date] = None
    payment_terms: str = ""
    prepared_by: str = ""
    abstract: str = ""
    include_cover: bool = False

    # Invoice only
    quote_number: str = ""
    due_date: Optional[date] = None
    paid_amount: Decimal = Decimal("0")
    payment_status: str = ""

    @property
    def is_invoice(self) -> bool:
        return self.kind == DocumentKind.INVOICE

    @property
    def year(self) -> Optional[int]:
        return self.issue_date.year if self.issue_date else None

    @property
    def balance_due(self) -> Decimal:
        return self.total - self.paid_amount

    @classmethod
    def from_dict(cls, data: dict) -> "Document":
        """
        Build a Document from a joined row mapping (quote + client + items +
        company settings), e.g. one JSON export per document.
        """
        company_raw = data.get("company") or {}
        client_raw = data.get("client") or data.get("bill_to") or {}
        ship_raw = data.get("ship_to")

        company = CompanyIdentity(
            name=_s(company_raw.get("name")),
            address=_s(company_raw.get("address")),
            phone=_s(company_raw.get("phone")),
            email=_s(company_raw.get("email")),
            website=_s(company_raw.get("website")),
            tax_id=_s(company_raw.get("tax_id") or company_raw.get("gstin")),
        )
        bill_to = Party(
            name=_s(client_raw.get("name")),
            address=_s(client_raw.get("billing_address") or client_raw.get("address")),
            phone=_s(client_raw.get("phone")),
            email=_s(client_raw.get("email")),
            tax_id=_s(client_raw.get("tax_id") or client_raw.get("gstin")),
            contact_person=_s(client_raw.get("contact_person")),
        )
        if isinstance(ship_raw, dict):
            ship_to = Party(
                name=_s(ship_raw.get("name")) or bill_to.name,
                address=_s(ship_raw.get("address")),
                phone=_s(ship_raw.get("phone")),
                email=_s(ship_raw.get("email")),
            )
        elif _s(client_raw.get("shipping_address")):
            ship_to = Party(name=bill_to.name, address=_s(client_raw.get("shipping_address")))
        else:
            ship_to = None

        items = tuple(
            LineItem(
                description=_s(it.get("description")),
                quantity=to_decimal(it.get("quantity", 1)),
                unit_price=to_decimal(it.get("unit_price")),
                subtotal=to_decimal(it.get("subtotal")),
            )
            for it in sorted(data.get("items") or [], key=lambda it: it.get("sort_order") or 0)
        )

        taxes: list[TaxLine] = []
        for raw_tax in data.get("taxes") or []:
            taxes.append(TaxLine(label=_s(raw_tax.get("label")), amount=to_decimal(raw_tax.get("amount"))))
        for key, label in (("cgst", "CGST (9%)"), ("sgst", "SGST (9%)"), ("igst", "IGST (18%)")):
            if key in data:
                taxes.append(TaxLine(label=label, amount=to_decimal(data.get(key))))

        validity = data.get("validity_days")
        return cls(
            kind=DocumentKind(_s(data.get("kind")) or "quote"),
            number=_s(data.get("number") or data.get("invoice_number") or data.get("quote_number")),
            issue_date=_date(data.get("issue_date") or data.get("quote_date")),
            company=company,
            bill_to=bill_to,
            ship_to=ship_to,
            items=items,
            subtotal=to_decimal(data.get("subtotal")),
            discount=to_decimal(data.get("discount")),
            shipping=to_decimal(data.get("shipping") or data.get("shipping_charges")),
            taxes=tuple(taxes),
            total=to_decimal(data.get("total")),
            notes=_s(data.get("notes")),
            terms=_s(data.get("terms") or data.get("terms_and_conditions")),
            bom=data.get("bom") or data.get("bom_section"),
            sla=data.get("sla") or data.get("sla_section"),
            timeline=data.get("timeline") or data.get("timeline_section"),
            reference_number=_s(data.get("reference_number")),
            attention_to=_s(data.get("attention_to")),
            validity_days=int(validity) if validity not in (None, "") else None,
            valid_until=_date(data.get("valid_until")),
            payment_terms=_s(data.get("payment_terms")),
            prepared_by=_s(data.get("prepared_by")),
            abstract=_s(data.get("abstract")),
            include_cover=bool(data.get("include_cover", False)),
            quote_number=_s(data.get("quote_ref") or (data.get("quote_number") if data.get("invoice_number") else "")),
            due_date=_date(data.get("due_date")),
            paid_amount=to_decimal(data.get("paid_amount")),
            payment_status=_s(data.get("payment_status")),
        )


def _s(value) -> str:
    return str(value).strip() if value is not None else ""


def _date(value) -> Optional[date]:
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return date.fromisoformat(text[:10])
