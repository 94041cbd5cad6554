# text_metrics.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import NamedTuple, Optional

from reportlab.pdfbase.pdfmetrics import stringWidth

ELLIPSIS = "..."


@dataclass(frozen=True)
class FontSpec:
    name: str
    size: float
    leading: Optional[float] = None

    @property
    def line_height(self) -> float:
        return self.leading if self.leading is not None else round(self.size * 1.25, 2)

    def width_of(self, text: str) -> float:
        return stringWidth(text, self.name, self.size)


class TextMeasure(NamedTuple):
    lines: list[str]
    line_count: int
    height: float


def _split_long_token(token: str, font: FontSpec, max_width: float) -> list[str]:
    """Break a single long token (like an email or URL) into width-safe chunks."""
    if font.width_of(token) <= max_width:
        return [token]
    chunks = []
    remaining = token
    while remaining:
        lo, hi = 1, len(remaining)
        fit = 1
        while lo <= hi:
            mid = (lo + hi) // 2
            if font.width_of(remaining[:mid]) <= max_width:
                fit = mid
                lo = mid + 1
            else:
                hi = mid - 1
        chunks.append(remaining[:fit])
        remaining = remaining[fit:]
    return chunks


def _wrap_segment(segment: str, font: FontSpec, max_width: float) -> list[str]:
    words = segment.split()
    if not words:
        return [""]

    expanded_words = []
    for w in words:
        expanded_words.extend(_split_long_token(w, font, max_width))

    lines = []
    current = ""
    for w in expanded_words:
        test = current + (" " if current else "") + w
        if font.width_of(test) <= max_width:
            current = test
        else:
            if current:
                lines.append(current)
            current = w
    if current:
        lines.append(current)
    return lines


def wrap_lines(text, font: FontSpec, max_width: float) -> list[str]:
    """
    Wrap `text` to `max_width` points. Forced line breaks are honoured first:
    every segment is wrapped on its own and an empty segment stays a blank
    line. Empty input gives no lines at all.
    """
    raw = "" if text is None else str(text)
    if raw.strip() == "":
        return []
    if max_width <= 0:
        return raw.splitlines()

    lines: list[str] = []
    for segment in re.split(r"\r\n|\r|\n", raw.strip("\r\n")):
        lines.extend(_wrap_segment(segment, font, max_width))
    return lines


def measure(text, font: FontSpec, max_width: float) -> TextMeasure:
    lines = wrap_lines(text, font, max_width)
    return TextMeasure(lines, len(lines), len(lines) * font.line_height)


def lines_height(line_count: int, font: FontSpec) -> float:
    return max(0, line_count) * font.line_height


def max_lines_for(height: float, font: FontSpec) -> int:
    if height <= 0:
        return 0
    # tolerate float noise so that an exact fit is not lost to rounding
    return int((height + 1e-6) // font.line_height)


def truncate_lines(lines: list[str], max_lines: int, font: FontSpec, max_width: float) -> list[str]:
    if max_lines <= 0:
        return []
    if len(lines) <= max_lines:
        return list(lines)
    kept = list(lines[:max_lines])
    last = kept[-1].rstrip()
    while last and font.width_of(last + ELLIPSIS) > max_width:
        last = last[:-1].rstrip()
    kept[-1] = last + ELLIPSIS
    return kept


def fit_text(text, font: FontSpec, max_width: float, max_height: float) -> list[str]:
    lines = wrap_lines(text, font, max_width)
    return truncate_lines(lines, max_lines_for(max_height, font), font, max_width)
