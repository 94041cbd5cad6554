# page_canvas.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Optional, Union

from reportlab.lib.pagesizes import A4

# -----------------------------
# Page geometry (engine constants, not configuration)
# -----------------------------
PAGE_W, PAGE_H = A4
MARGIN_LEFT = 35
MARGIN_RIGHT = 35
MARGIN_TOP = 20
MARGIN_BOTTOM = 65
HEADER_BAND_H = 85
FOOTER_BAND_H = 55

# float slack used by every "does it fit" comparison
EPSILON = 1e-6


@dataclass(frozen=True)
class PageGeometry:
    page_width: float = PAGE_W
    page_height: float = PAGE_H
    margin_left: float = MARGIN_LEFT
    margin_right: float = MARGIN_RIGHT
    margin_top: float = MARGIN_TOP
    margin_bottom: float = MARGIN_BOTTOM
    header_band: float = HEADER_BAND_H
    footer_band: float = FOOTER_BAND_H

    @property
    def content_left(self) -> float:
        return self.margin_left

    @property
    def content_width(self) -> float:
        return self.page_width - self.margin_left - self.margin_right

    @property
    def content_top(self) -> float:
        return self.margin_top + self.header_band

    @property
    def content_bottom(self) -> float:
        return self.page_height - self.margin_bottom

    @property
    def content_height(self) -> float:
        return self.content_bottom - self.content_top

    @property
    def footer_top(self) -> float:
        return self.page_height - self.footer_band


# -----------------------------
# Draw operations
# Coordinates are top-down: y grows towards the bottom of the page.
# -----------------------------
@dataclass(frozen=True)
class TextOp:
    text: str
    x: float
    y: float              # top of the line box
    width: float
    font: str
    size: float
    color: str = "#000000"
    align: str = "left"   # left | right | center
    line_height: float = 0.0

    def translated(self, dx: float, dy: float) -> "TextOp":
        return replace(self, x=self.x + dx, y=self.y + dy)


@dataclass(frozen=True)
class RectOp:
    x: float
    y: float
    w: float
    h: float
    fill: Optional[str] = None
    stroke: Optional[str] = None
    line_width: float = 0.5
    radius: float = 0.0

    def translated(self, dx: float, dy: float) -> "RectOp":
        return replace(self, x=self.x + dx, y=self.y + dy)


@dataclass(frozen=True)
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = "#000000"
    line_width: float = 0.5

    def translated(self, dx: float, dy: float) -> "LineOp":
        return replace(self, x1=self.x1 + dx, y1=self.y1 + dy, x2=self.x2 + dx, y2=self.y2 + dy)


@dataclass(frozen=True)
class ImageOp:
    resource: str         # key into RenderContext.images
    x: float
    y: float
    w: float
    h: float

    def translated(self, dx: float, dy: float) -> "ImageOp":
        return replace(self, x=self.x + dx, y=self.y + dy)


DrawOp = Union[TextOp, RectOp, LineOp, ImageOp]


@dataclass(frozen=True)
class RenderPlan:
    """Height a block consumes plus the operations that draw it, relative to (0, 0)."""
    height: float
    ops: tuple = ()

    @classmethod
    def empty(cls) -> "RenderPlan":
        return cls(0.0, ())

    def translated(self, dx: float, dy: float) -> "RenderPlan":
        if dx == 0 and dy == 0:
            return self
        return RenderPlan(self.height, tuple(op.translated(dx, dy) for op in self.ops))

    def stacked(self, other: "RenderPlan", gap: float = 0.0) -> "RenderPlan":
        offset = self.height + gap
        return RenderPlan(offset + other.height, self.ops + other.translated(0, offset).ops)


# -----------------------------
# Page bookkeeping
# -----------------------------
@dataclass(frozen=True)
class Placement:
    kind: str
    y: float
    height: float

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass
class PageRecord:
    index: int
    ops: list = field(default_factory=list)
    placements: list = field(default_factory=list)

    def seal(self) -> "SealedPage":
        return SealedPage(self.index, tuple(self.ops), tuple(self.placements))


@dataclass(frozen=True)
class SealedPage:
    index: int
    ops: tuple
    placements: tuple


@dataclass(frozen=True)
class SealedPages:
    """Output of pass 1: content only, no footers yet."""
    pages: tuple
    context: Any

    def __len__(self) -> int:
        return len(self.pages)


@dataclass(frozen=True)
class FinalPage:
    index: int
    ops: tuple
    placements: tuple = ()


@dataclass(frozen=True)
class FinalDocument:
    """Output of pass 2: every page carries its footer."""
    pages: tuple
    context: Any

    @property
    def page_count(self) -> int:
        return len(self.pages)


# -----------------------------
# Recording canvas
# -----------------------------
class PageCanvas:
    """
    Records draw operations page by page. Nothing is written to a PDF here;
    sealed pages are replayed by pdf_writer once the footers are stamped.
    """

    def __init__(self, geometry: PageGeometry, header: Optional[Callable[[], RenderPlan]] = None):
        self.geometry = geometry
        self._header = header
        self._sealed: list[SealedPage] = []
        self._current: Optional[PageRecord] = None

    @property
    def page_count(self) -> int:
        return len(self._sealed) + (1 if self._current is not None else 0)

    @property
    def current(self) -> PageRecord:
        if self._current is None:
            raise RuntimeError("no open page; call new_page() first")
        return self._current

    def new_page(self) -> float:
        """Seal the open page, open a fresh one with its header band, return the content top."""
        if self._current is not None:
            self._sealed.append(self._current.seal())
        self._current = PageRecord(index=len(self._sealed))
        if self._header is not None:
            self.apply(self._header(), 0.0, self.geometry.margin_top)
        return self.geometry.content_top

    # primitives
    def draw_text(self, text, x, y, width, *, font="Helvetica", size=9, color="#000000", align="left"):
        self.current.ops.append(TextOp(str(text), x, y, width, font, size, color, align, size * 1.25))

    def draw_rect(self, x, y, w, h, *, fill=None, stroke=None, line_width=0.5, radius=0.0):
        self.current.ops.append(RectOp(x, y, w, h, fill, stroke, line_width, radius))

    def draw_line(self, x1, y1, x2, y2, *, color="#000000", line_width=0.5):
        self.current.ops.append(LineOp(x1, y1, x2, y2, color, line_width))

    def draw_image(self, resource, x, y, w, h):
        self.current.ops.append(ImageOp(resource, x, y, w, h))

    def apply(self, plan: RenderPlan, x: float, y: float, kind: Optional[str] = None) -> None:
        self.current.ops.extend(op.translated(x, y) for op in plan.ops)
        if kind is not None:
            self.current.placements.append(Placement(kind, y, plan.height))

    def seal(self, context: Any = None) -> SealedPages:
        if self._current is not None:
            self._sealed.append(self._current.seal())
            self._current = None
        return SealedPages(tuple(self._sealed), context)
