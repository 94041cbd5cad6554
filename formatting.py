# formatting.py
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation


def to_decimal(x) -> Decimal:
    if isinstance(x, Decimal):
        return x
    if x is None or x == "":
        return Decimal("0")
    try:
        return Decimal(str(x).replace(",", "").strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")


def money(x, prefix: str = "Rs. ") -> str:
    value = to_decimal(x)
    if value < 0:
        return f"-{prefix}{-value:,.2f}"
    return f"{prefix}{value:,.2f}"


def format_quantity(x) -> str:
    value = to_decimal(x)
    if value == value.to_integral_value():
        return str(int(value))
    return f"{value.normalize():f}"


def format_date(value: date | datetime | None) -> str:
    # 19 Oct 2026
    if value is None:
        return ""
    return f"{value.day} {value.strftime('%b %Y')}"


def format_phone(phone: str | None) -> str:
    raw = (phone or "").strip()
    if not raw:
        return ""
    digits = re.sub(r"\D", "", raw)
    if len(digits) == 10 and not raw.startswith("+"):
        return f"{digits[:5]} {digits[5:]}"
    if len(digits) == 12 and digits.startswith("91"):
        return f"+91 {digits[2:7]} {digits[7:]}"
    return re.sub(r"\s+", " ", raw)


def safe_filename(name: str) -> str:
    # strip characters not allowed on Windows/mac paths
    return re.sub(r'[\\/*?:"<>|]', "", (name or "")).strip() or "Document"


def address_lines(address: str | None) -> list[str]:
    return [ln.strip() for ln in re.split(r"[\r\n]+", address or "") if ln.strip()]


def compact_address(address: str | None, max_lines: int | None = None) -> str:
    lines = address_lines(address)
    if max_lines is not None:
        lines = lines[:max_lines]
    return ", ".join(lines)
