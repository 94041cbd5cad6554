# blocks.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

# Blocks are plain data. Renderers turn them into RenderPlans; only the
# pagination controller decides where a plan lands on a page.


@dataclass(frozen=True)
class TextBlock:
    text: str
    size: float = 9.0
    weight: str = "regular"      # regular | bold | italic
    color: str = "text"
    align: str = "left"
    indent: float = 0.0
    space_after: float = 0.0
    keep_with_next: bool = False


@dataclass(frozen=True)
class LabelValueRow:
    label: str
    value: str
    label_width: float = 120.0
    size: float = 9.0
    label_color: str = "muted"
    value_color: str = "text"
    value_weight: str = "regular"
    value_align: str = "left"
    space_after: float = 0.0


@dataclass(frozen=True)
class TwoColumnGrid:
    left: tuple
    right: tuple
    gap: float = 16.0
    left_ratio: float = 0.5
    space_after: float = 0.0


@dataclass(frozen=True)
class Column:
    title: str
    weight: float = 1.0
    align: str = "left"
    fixed: Optional[float] = None   # absolute width in points, wins over weight


@dataclass(frozen=True)
class Table:
    title: str
    columns: tuple
    rows: tuple
    continuation_title: str = ""
    size: float = 9.0
    title_size: float = 11.0
    zebra: bool = True
    space_after: float = 0.0

    @property
    def continued_title(self) -> str:
        if self.continuation_title:
            return self.continuation_title
        return f"{self.title} (contd.)" if self.title else ""


@dataclass(frozen=True)
class BoxedSection:
    title: str
    body: Union[str, tuple] = ""         # free text or a tuple of LabelValueRow
    min_height: float = 0.0
    width: Optional[float] = None          # None = full available width
    align: str = "left"                    # left | right
    fill: Optional[str] = "white"
    border: Optional[str] = "border"
    title_fill: Optional[str] = "title_fill"
    title_color: str = "primary"
    body_color: str = "text"
    body_size: float = 9.0
    total: Optional[LabelValueRow] = None  # emphasised band at the bottom
    signature_label: str = ""
    space_after: float = 0.0


@dataclass(frozen=True)
class PageBreakHint:
    space_after: float = 0.0


Block = Union[TextBlock, LabelValueRow, TwoColumnGrid, Table, BoxedSection, PageBreakHint]
