# pagination.py
from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Optional

from block_renderers import (
    plan_block,
    plan_label_value,
    plan_table,
    split_boxed_section,
    split_text_block,
)
from blocks import BoxedSection, LabelValueRow, PageBreakHint, Table, TextBlock, TwoColumnGrid
from chrome import header_plan
from layout_errors import CursorInvariantError, NegativeHeightError
from page_canvas import EPSILON, PageCanvas, RenderPlan, SealedPages
from render_context import RenderContext

logger = logging.getLogger(__name__)

# A flowing block is only started at the bottom of a page when at least this
# much of it can be shown there; otherwise it moves to the next page whole.
MIN_FLOW_HEIGHT = 40.0


@dataclass
class Cursor:
    page_index: int
    y: float


class PaginationController:
    """
    Places blocks on pages. This is the only place that moves the cursor:
    renderers return plans, the controller decides where (and on which page)
    each plan is applied.
    """

    def __init__(self, ctx: RenderContext):
        self.ctx = ctx
        self.geometry = ctx.geometry
        self.width = ctx.geometry.content_width
        self.canvas = PageCanvas(ctx.geometry, header=lambda: header_plan(ctx))
        self.cursor: Optional[Cursor] = None

    # -----------------------------
    # Cursor bookkeeping
    # -----------------------------
    @property
    def remaining(self) -> float:
        return self.geometry.content_bottom - self.cursor.y

    @property
    def capacity(self) -> float:
        """Height available on a freshly opened page."""
        return self.geometry.content_height

    @property
    def page_is_empty(self) -> bool:
        return abs(self.cursor.y - self.geometry.content_top) < EPSILON

    def fits(self, height: float) -> bool:
        return height <= self.remaining + EPSILON

    def _check_cursor(self) -> None:
        g = self.geometry
        y = self.cursor.y
        if not (g.margin_top - EPSILON <= y <= g.content_bottom + EPSILON):
            raise CursorInvariantError(
                f"cursor y={y:.2f} on page {self.cursor.page_index + 1} is outside "
                f"[{g.margin_top:.2f}, {g.content_bottom:.2f}]"
            )

    def open_page(self) -> None:
        top = self.canvas.new_page()
        index = self.canvas.page_count - 1
        self.cursor = Cursor(page_index=index, y=top)
        self._check_cursor()

    def _apply(self, plan: RenderPlan, kind: str) -> None:
        if plan.height < 0:
            raise NegativeHeightError(f"{kind} produced height {plan.height:.2f}")
        self._check_cursor()
        if self.cursor.y + plan.height > self.geometry.content_bottom + EPSILON:
            raise CursorInvariantError(
                f"{kind} of height {plan.height:.2f} at y={self.cursor.y:.2f} overflows "
                f"page {self.cursor.page_index + 1}"
            )
        self.canvas.apply(plan, self.geometry.content_left, self.cursor.y, kind=kind)
        self.cursor.y += plan.height
        self._check_cursor()

    def _space(self, gap: float) -> None:
        if gap > 0:
            self.cursor.y = min(self.cursor.y + gap, self.geometry.content_bottom)

    # -----------------------------
    # Main loop
    # -----------------------------
    def run(self, blocks) -> SealedPages:
        self.open_page()
        queue = deque(blocks)
        while queue:
            block = queue.popleft()
            following = queue[0] if queue else None

            if isinstance(block, PageBreakHint):
                if not self.page_is_empty:
                    self.open_page()
            elif isinstance(block, Table):
                self._place_table(block)
            elif isinstance(block, TwoColumnGrid):
                if self._place_grid(block, queue):
                    continue
            elif isinstance(block, LabelValueRow):
                self._place_row(block)
            elif isinstance(block, (TextBlock, BoxedSection)):
                if self._place_flowing(block, following, queue):
                    continue
            else:
                raise TypeError(f"unknown block type: {type(block).__name__}")

            self._space(getattr(block, "space_after", 0.0))

        sealed = self.canvas.seal(self.ctx)
        logger.debug("Laid out %s on %d page(s)", self.ctx.document_label or "document", len(sealed))
        return sealed

    # -----------------------------
    # Block placement
    # -----------------------------
    def _lead_height(self, block) -> float:
        """Smallest part of `block` that must follow a keep-with-next title on the same page."""
        if block is None or isinstance(block, PageBreakHint):
            return 0.0
        if isinstance(block, Table):
            return plan_table(block, self.ctx, self.width).lead_height
        plan = plan_block(block, self.ctx, self.width)
        return min(plan.height, MIN_FLOW_HEIGHT)

    def _place_atomic(self, plan: RenderPlan, kind: str) -> None:
        if not self.fits(plan.height) and not self.page_is_empty:
            self.open_page()
        self._apply(plan, kind)

    def _place_row(self, row: LabelValueRow) -> None:
        plan = plan_label_value(row, self.ctx, self.width)
        if plan.height > self.capacity:
            plan = plan_label_value(row, self.ctx, self.width, max_height=self.capacity)
        self._place_atomic(plan, "row")

    def _place_grid(self, grid: TwoColumnGrid, queue: deque) -> bool:
        """Returns True when the grid was broken up and queued instead of placed."""
        plan = plan_block(grid, self.ctx, self.width)
        if plan.height <= self.capacity + EPSILON:
            self._place_atomic(plan, "grid")
            return False
        # too tall for any page: lay the columns out one after the other
        logger.debug("Grid of height %.1f exceeds a page, stacking its columns", plan.height)
        spacer = TextBlock("", space_after=grid.space_after)
        queue.extendleft(reversed(tuple(grid.left) + tuple(grid.right) + (spacer,)))
        return True

    def _place_flowing(self, block, following, queue: deque) -> bool:
        """Returns True when only part of the block was placed and the rest was queued."""
        kind = "text" if isinstance(block, TextBlock) else "box"
        plan = plan_block(block, self.ctx, self.width)

        required = plan.height
        if isinstance(block, TextBlock) and block.keep_with_next:
            required += block.space_after + self._lead_height(following)

        if required <= self.remaining + EPSILON:
            self._apply(plan, kind)
            return False
        if plan.height <= self.capacity + EPSILON:
            # atomic: move the whole block to a fresh page
            if not self.page_is_empty:
                self.open_page()
            self._apply(plan, kind)
            return False

        # taller than a whole page: fill what is left here and continue on the next page
        if self.remaining < MIN_FLOW_HEIGHT and not self.page_is_empty:
            self.open_page()
        split = split_text_block if isinstance(block, TextBlock) else split_boxed_section
        head, remainder = split(block, self.ctx, self.width, self.remaining)
        if head is None:
            if self.page_is_empty:
                raise CursorInvariantError(f"{kind} cannot fit any content on an empty page")
            self.open_page()
            head, remainder = split(block, self.ctx, self.width, self.remaining)
            if head is None:
                raise CursorInvariantError(f"{kind} cannot fit any content on an empty page")
        self._apply(head, kind)
        if remainder is None:
            return False
        self.open_page()
        queue.appendleft(remainder)
        return True

    def _place_table(self, table: Table) -> None:
        probe = plan_table(table, self.ctx, self.width)
        max_row = self.capacity - probe.continuation_title.height - probe.header.height
        layout = plan_table(table, self.ctx, self.width, max_row_height=max_row)

        # the title and header never end a page on their own
        if not self.fits(layout.lead_height) and not self.page_is_empty:
            self.open_page()
        self._apply(layout.title, "table-title")
        self._apply(layout.header, "table-header")

        for row in layout.rows:
            if not self.fits(row.height):
                self.open_page()
                self._apply(layout.continuation_title, "table-title")
                self._apply(layout.header, "table-header")
            self._apply(row, "table-row")
        self._apply(layout.closing, "table-end")


def paginate(blocks, ctx: RenderContext) -> SealedPages:
    return PaginationController(ctx).run(blocks)
