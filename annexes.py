# annexes.py
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

from layout_errors import MalformedAnnexError

# Annexes arrive as serialized JSON text (or an already decoded value) and are
# decoded exactly once, before layout. Renderers only ever see these types.


# -----------------------------
# BOM
# -----------------------------
@dataclass(frozen=True)
class BomComponent:
    module: str
    description: str
    qty: str


@dataclass(frozen=True)
class BomEntry:
    heading: str
    part_number: str = ""
    description: str = ""
    manufacturer: str = ""
    quantity: str = ""
    unit: str = ""
    specifications: str = ""
    notes: str = ""
    components: tuple[BomComponent, ...] = ()


@dataclass(frozen=True)
class BomAnnex:
    entries: tuple[BomEntry, ...]


# -----------------------------
# SLA
# -----------------------------
@dataclass(frozen=True)
class SlaMetric:
    name: str
    description: str = ""
    target: str = ""
    measurement: str = ""
    penalty: str = ""


@dataclass(frozen=True)
class SlaAnnex:
    overview: str = ""
    response_time: str = ""
    resolution_time: str = ""
    availability: str = ""
    support_hours: str = ""
    escalation_process: str = ""
    metrics: tuple[SlaMetric, ...] = ()

    def commitments(self) -> list[tuple[str, str]]:
        """Non-empty (label, value) pairs in display order."""
        pairs = [
            ("Response Time", self.response_time),
            ("Resolution Time", self.resolution_time),
            ("Availability", self.availability),
            ("Support Hours", self.support_hours),
        ]
        return [(label, value) for label, value in pairs if value]

    @property
    def is_empty(self) -> bool:
        return not (self.overview or self.escalation_process or self.metrics or self.commitments())


# -----------------------------
# Timeline
# -----------------------------
@dataclass(frozen=True)
class Milestone:
    name: str
    description: str = ""
    start_date: str = ""
    end_date: str = ""
    duration: str = ""
    status: str = ""
    deliverables: str = ""
    dependencies: str = ""


@dataclass(frozen=True)
class TimelineAnnex:
    project_overview: str = ""
    start_date: str = ""
    end_date: str = ""
    milestones: tuple[Milestone, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not (self.project_overview or self.start_date or self.end_date or self.milestones)


@dataclass(frozen=True)
class Unparseable:
    kind: str
    reason: str


ParsedAnnex = Union[BomAnnex, SlaAnnex, TimelineAnnex, Unparseable]


# -----------------------------
# Decoding helpers
# -----------------------------
def _load(raw: Any):
    """None for absent/blank input, otherwise the decoded JSON value."""
    if raw is None:
        return None
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedAnnexError(f"invalid JSON: {e.msg} at line {e.lineno} column {e.colno}") from e
        except (ValueError, RecursionError) as e:
            raise MalformedAnnexError(f"undecodable JSON: {e}") from e
    return raw


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(_text(v) for v in value if _text(v))
    if isinstance(value, dict):
        raise MalformedAnnexError("expected a text value, got an object")
    return str(value).strip()


def _objects(value, what: str) -> list[dict]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedAnnexError(f"{what} must be a list")
    for i, item in enumerate(value):
        if not isinstance(item, dict):
            raise MalformedAnnexError(f"{what}[{i}] must be an object")
    return value


def _bom_entry(idx: int, raw: dict) -> BomEntry:
    heading = _text(raw.get("title") or raw.get("partNumber") or raw.get("product")) or f"Item {idx + 1}"
    components = tuple(
        BomComponent(
            module=_text(c.get("module")),
            description=_text(c.get("description")),
            qty=_text(c.get("qty", c.get("quantity"))),
        )
        for c in _objects(raw.get("components") or raw.get("rows"), "components")
    )
    return BomEntry(
        heading=heading,
        part_number=_text(raw.get("partNumber")),
        description=_text(raw.get("description") or raw.get("title")),
        manufacturer=_text(raw.get("manufacturer")),
        quantity=_text(raw.get("quantity")),
        unit=_text(raw.get("unitOfMeasure")),
        specifications=_text(raw.get("specifications")),
        notes=_text(raw.get("notes")),
        components=components,
    )


def _decode_bom(raw) -> Optional[BomAnnex]:
    data = _load(raw)
    if isinstance(data, dict):
        data = data.get("items")
    if data is None:
        return None
    entries = tuple(_bom_entry(i, item) for i, item in enumerate(_objects(data, "BOM")))
    return BomAnnex(entries) if entries else None


def _decode_sla(raw) -> Optional[SlaAnnex]:
    data = _load(raw)
    if data is None:
        return None
    if not isinstance(data, dict):
        raise MalformedAnnexError("SLA must be an object")
    sla = SlaAnnex(
        overview=_text(data.get("overview")),
        response_time=_text(data.get("responseTime")),
        resolution_time=_text(data.get("resolutionTime")),
        availability=_text(data.get("availability")),
        support_hours=_text(data.get("supportHours")),
        escalation_process=_text(data.get("escalationProcess")),
        metrics=tuple(
            SlaMetric(
                name=_text(m.get("name")),
                description=_text(m.get("description")),
                target=_text(m.get("target")),
                measurement=_text(m.get("measurement")),
                penalty=_text(m.get("penalty")),
            )
            for m in _objects(data.get("metrics"), "metrics")
        ),
    )
    return None if sla.is_empty else sla


def _decode_timeline(raw) -> Optional[TimelineAnnex]:
    data = _load(raw)
    if data is None:
        return None
    if not isinstance(data, dict):
        raise MalformedAnnexError("timeline must be an object")
    timeline = TimelineAnnex(
        project_overview=_text(data.get("projectOverview")),
        start_date=_text(data.get("startDate")),
        end_date=_text(data.get("endDate")),
        milestones=tuple(
            Milestone(
                name=_text(m.get("name")),
                description=_text(m.get("description")),
                start_date=_text(m.get("startDate")),
                end_date=_text(m.get("endDate")),
                duration=_text(m.get("duration")),
                status=_text(m.get("status")),
                deliverables=_text(m.get("deliverables")),
                dependencies=_text(m.get("dependencies")),
            )
            for m in _objects(data.get("milestones"), "milestones")
        ),
    )
    return None if timeline.is_empty else timeline


def _guarded(kind: str, decoder, raw) -> Optional[ParsedAnnex]:
    try:
        return decoder(raw)
    except MalformedAnnexError as e:
        return Unparseable(kind, str(e))


# -----------------------------
# Public API
# -----------------------------
def decode_bom(raw) -> Optional[ParsedAnnex]:
    return _guarded("bom", _decode_bom, raw)


def decode_sla(raw) -> Optional[ParsedAnnex]:
    return _guarded("sla", _decode_sla, raw)


def decode_timeline(raw) -> Optional[ParsedAnnex]:
    return _guarded("timeline", _decode_timeline, raw)


def decode_annexes(document) -> list[ParsedAnnex]:
    """Present annexes in display order (BOM, SLA, Timeline); absent ones are left out."""
    decoded = (
        decode_bom(document.bom),
        decode_sla(document.sla),
        decode_timeline(document.timeline),
    )
    return [annex for annex in decoded if annex is not None]


# -----------------------------
# Terms
# -----------------------------
@dataclass(frozen=True)
class TermRow:
    param: str
    details: str


_BULLET = re.compile(r"^(?:[-*•]|\d+[.)])\s*")


def parse_terms(terms: str) -> list[TermRow]:
    """
    One row per non-blank line. Accepts "Taxes: extra as applicable",
    "Delivery - 3-4 weeks from PO" and bulleted variants; anything else is
    split after its first word.
    """
    rows = []
    for line in (terms or "").splitlines():
        line = line.strip()
        if not line:
            continue
        clean = _BULLET.sub("", line, count=1)
        if ":" in clean:
            param, _, details = clean.partition(":")
        elif " - " in clean:
            param, _, details = clean.partition(" - ")
        elif " " in clean:
            param, _, details = clean.partition(" ")
        else:
            param, details = clean, ""
        rows.append(TermRow(param.strip(), details.strip()))
    return rows
