# block_renderers.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from blocks import BoxedSection, LabelValueRow, PageBreakHint, Table, TextBlock, TwoColumnGrid
from page_canvas import LineOp, RectOp, RenderPlan, TextOp
from render_context import RenderContext
from text_metrics import FontSpec, lines_height, max_lines_for, truncate_lines, wrap_lines

logger = logging.getLogger(__name__)

# Spacing around text; row and box heights are derived from these plus the
# line height of the font in use.
CELL_PAD_X = 6
CELL_PAD_Y = 6
HEADER_PAD_Y = 8.5
ROW_GAP = 4.5
BOX_PAD_X = 12
BOX_PAD_Y = 8
TITLE_PAD_Y = 7
TITLE_GAP = 6
SIGNATURE_SPACE = 34
DASH = "—"


# -----------------------------
# Small helpers
# -----------------------------
def _line_ops(lines, font: FontSpec, x, y, width, color, align="left") -> list:
    ops = []
    lh = font.line_height
    for i, line in enumerate(lines):
        ops.append(TextOp(line, x, y + i * lh, width, font.name, font.size, color, align, lh))
    return ops


def _contd(title: str) -> str:
    if not title or title.endswith("(contd.)"):
        return title
    return f"{title} (contd.)"


# -----------------------------
# TextBlock
# -----------------------------
def _text_font(block: TextBlock, ctx: RenderContext) -> FontSpec:
    return ctx.font(block.size, block.weight)


def text_lines(block: TextBlock, ctx: RenderContext, width: float) -> list[str]:
    return wrap_lines(block.text, _text_font(block, ctx), width - block.indent)


def _plan_text_lines(block: TextBlock, ctx: RenderContext, width: float, lines) -> RenderPlan:
    font = _text_font(block, ctx)
    ops = _line_ops(lines, font, block.indent, 0, width - block.indent, ctx.color(block.color), block.align)
    return RenderPlan(lines_height(len(lines), font), tuple(ops))


def plan_text(block: TextBlock, ctx: RenderContext, width: float) -> RenderPlan:
    return _plan_text_lines(block, ctx, width, text_lines(block, ctx, width))


def split_text_block(block: TextBlock, ctx: RenderContext, width: float, available: float):
    """
    Split a paragraph at a line boundary. Returns (head_plan, remainder);
    head_plan is None when not even one line fits, remainder is None when
    everything fits.
    """
    lines = text_lines(block, ctx, width)
    n = max_lines_for(available, _text_font(block, ctx))
    if n <= 0:
        return None, block
    if n >= len(lines):
        return _plan_text_lines(block, ctx, width, lines), None
    head = _plan_text_lines(block, ctx, width, lines[:n])
    return head, replace(block, text="\n".join(lines[n:]))


# -----------------------------
# LabelValueRow
# -----------------------------
def _row_columns(row: LabelValueRow, width: float) -> tuple[float, float, float]:
    label_w = min(row.label_width, width * 0.45)
    value_x = label_w + 5
    return label_w, value_x, max(1.0, width - value_x)


def plan_label_value(row: LabelValueRow, ctx: RenderContext, width: float,
                     max_height: Optional[float] = None) -> RenderPlan:
    label_font = ctx.font(row.size, "bold")
    value_font = ctx.font(row.size, row.value_weight)
    label_w, value_x, value_w = _row_columns(row, width)

    label_lines = wrap_lines(row.label, label_font, label_w - 4) or [""]
    value_lines = wrap_lines(row.value, value_font, value_w) or [DASH]

    if max_height is not None:
        keep = max(1, max_lines_for(max_height - ROW_GAP, value_font))
        value_lines = truncate_lines(value_lines, keep, value_font, value_w)
        label_lines = truncate_lines(label_lines, keep, label_font, label_w - 4)

    ops = _line_ops(label_lines, label_font, 0, 0, label_w, ctx.color(row.label_color))
    ops += _line_ops(value_lines, value_font, value_x, 0, value_w, ctx.color(row.value_color), row.value_align)
    height = max(lines_height(len(label_lines), label_font), lines_height(len(value_lines), value_font)) + ROW_GAP
    return RenderPlan(height, tuple(ops))


def split_label_value(row: LabelValueRow, ctx: RenderContext, width: float, available: float):
    """
    Break a row at a value line boundary so that the head fits `available`.
    The remainder keeps the rest of the value under an empty label.
    Returns (head_row, remainder_row), or (None, row) when not even one line fits
    or the value has a single line.
    """
    label_font = ctx.font(row.size, "bold")
    value_font = ctx.font(row.size, row.value_weight)
    label_w, _value_x, value_w = _row_columns(row, width)
    value_lines = wrap_lines(row.value, value_font, value_w)
    n = min(max_lines_for(available - ROW_GAP, value_font), len(value_lines) - 1)
    if n <= 0:
        return None, row
    label_lines = truncate_lines(wrap_lines(row.label, label_font, label_w - 4), n, label_font, label_w - 4)
    head = replace(row, label="\n".join(label_lines), value="\n".join(value_lines[:n]), space_after=0.0)
    return head, replace(row, label="", value="\n".join(value_lines[n:]))


def _plan_rows(rows, ctx: RenderContext, width: float) -> RenderPlan:
    plan = RenderPlan.empty()
    pending_gap = 0.0
    for row in rows:
        plan = plan.stacked(plan_label_value(row, ctx, width), pending_gap if plan.ops else 0)
        pending_gap = row.space_after
    return plan


# -----------------------------
# TwoColumnGrid
# -----------------------------
def grid_widths(grid: TwoColumnGrid, width: float) -> tuple[float, float]:
    usable = max(0.0, width - grid.gap)
    left_w = usable * grid.left_ratio
    return left_w, usable - left_w


def _plan_column(blocks, ctx: RenderContext, width: float) -> RenderPlan:
    plan = RenderPlan.empty()
    pending_gap = 0.0
    for block in blocks:
        child = plan_block(block, ctx, width)
        plan = plan.stacked(child, pending_gap if plan.ops else 0)
        pending_gap = getattr(block, "space_after", 0.0)
    return plan


def plan_two_column(grid: TwoColumnGrid, ctx: RenderContext, width: float) -> RenderPlan:
    left_w, right_w = grid_widths(grid, width)
    left = _plan_column(grid.left, ctx, left_w)
    right = _plan_column(grid.right, ctx, right_w).translated(left_w + grid.gap, 0)
    return RenderPlan(max(left.height, right.height), left.ops + right.ops)


# -----------------------------
# BoxedSection
# -----------------------------
def _box_frame(box: BoxedSection, width: float) -> tuple[float, float]:
    box_w = min(box.width or width, width)
    x0 = width - box_w if box.align == "right" else 0.0
    return x0, box_w


def _title_height(box: BoxedSection, ctx: RenderContext) -> float:
    if not box.title:
        return 0.0
    return ctx.font(box.body_size + 0.5, "bold").line_height + 2 * TITLE_PAD_Y


def _body_font(box: BoxedSection, ctx: RenderContext) -> FontSpec:
    return ctx.font(box.body_size, "regular", leading=round(box.body_size * 1.45, 2))


def _total_height(box: BoxedSection, ctx: RenderContext) -> float:
    if box.total is None:
        return 0.0
    return ctx.font(box.total.size + 1, "bold").line_height + 2 * BOX_PAD_Y


def _signature_height(box: BoxedSection, ctx: RenderContext) -> float:
    if not box.signature_label:
        return 0.0
    return SIGNATURE_SPACE + ctx.font(box.body_size).line_height + BOX_PAD_Y


def box_body_lines(box: BoxedSection, ctx: RenderContext, width: float) -> list[str]:
    _x0, box_w = _box_frame(box, width)
    return wrap_lines(box.body, _body_font(box, ctx), box_w - 2 * BOX_PAD_X)


def _plan_box(box: BoxedSection, ctx: RenderContext, width: float, body: RenderPlan) -> RenderPlan:
    x0, box_w = _box_frame(box, width)
    title_h = _title_height(box, ctx)
    sig_h = _signature_height(box, ctx)
    total_h = _total_height(box, ctx)

    body_top = title_h + BOX_PAD_Y
    inner = body_top + body.height + BOX_PAD_Y + sig_h + total_h
    height = max(box.min_height, inner)

    ops = [RectOp(x0, 0, box_w, height, ctx.color(box.fill), ctx.color(box.border), 0.75)]
    if box.title:
        title_font = ctx.font(box.body_size + 0.5, "bold")
        if box.title_fill:
            ops.append(RectOp(x0, 0, box_w, title_h, ctx.color(box.title_fill), None))
        ops += _line_ops([box.title], title_font, x0 + BOX_PAD_X, TITLE_PAD_Y,
                         box_w - 2 * BOX_PAD_X, ctx.color(box.title_color))
    ops += body.translated(x0 + BOX_PAD_X, body_top).ops

    if box.signature_label:
        sig_font = ctx.font(box.body_size)
        line_y = height - total_h - BOX_PAD_Y - sig_font.line_height - 4
        ops.append(LineOp(x0 + 20, line_y, x0 + box_w - 20, line_y, ctx.color("text"), 0.8))
        ops += _line_ops([box.signature_label], sig_font, x0 + 20, line_y + 4, box_w - 40, ctx.color("text"))

    if box.total is not None:
        band_y = height - total_h
        label_font = ctx.font(box.total.size + 1, "bold")
        ops.append(RectOp(x0, band_y, box_w, total_h, ctx.color("primary"), None))
        ops += _line_ops([box.total.label], label_font, x0 + BOX_PAD_X, band_y + BOX_PAD_Y,
                         box_w / 2, ctx.color("white"))
        ops += _line_ops([box.total.value], label_font, x0 + box_w / 2, band_y + BOX_PAD_Y,
                         box_w / 2 - BOX_PAD_X, ctx.color("white"), "right")

    return RenderPlan(height, tuple(ops))


def _box_body_plan(box: BoxedSection, ctx: RenderContext, width: float, lines=None) -> RenderPlan:
    _x0, box_w = _box_frame(box, width)
    inner_w = box_w - 2 * BOX_PAD_X
    if isinstance(box.body, tuple):
        return _plan_rows(box.body, ctx, inner_w)
    font = _body_font(box, ctx)
    if lines is None:
        lines = wrap_lines(box.body, font, inner_w)
    return RenderPlan(lines_height(len(lines), font),
                      tuple(_line_ops(lines, font, 0, 0, inner_w, ctx.color(box.body_color))))


def plan_boxed_section(box: BoxedSection, ctx: RenderContext, width: float) -> RenderPlan:
    return _plan_box(box, ctx, width, _box_body_plan(box, ctx, width))


def split_boxed_section(box: BoxedSection, ctx: RenderContext, width: float, available: float):
    """
    Split a box whose body does not fit in `available`. The head keeps the
    title and as much body as fits; the remainder carries a "(contd.)" title,
    the rest of the body, the signature and the total band.
    Returns (head_plan, remainder) like split_text_block.
    """
    head_box = replace(box, min_height=0.0, signature_label="", total=None)
    chrome_h = _title_height(box, ctx) + 2 * BOX_PAD_Y
    room = available - chrome_h

    if isinstance(box.body, tuple):
        inner_w = _box_frame(box, width)[1] - 2 * BOX_PAD_X
        fitted = 0
        used = 0.0
        for row in box.body:
            row_h = plan_label_value(row, ctx, inner_w).height
            if used + row_h > room:
                break
            used += row_h + row.space_after
            fitted += 1
        # the last part always keeps at least one row next to the signature and total
        fitted = min(fitted, len(box.body) - 1)
        if fitted > 0:
            head = plan_boxed_section(replace(head_box, body=box.body[:fitted]), ctx, width)
            rest = box.body[fitted:]
        else:
            # the leading row alone is too tall: continue its value on the next part
            head_row, rest_row = split_label_value(box.body[0], ctx, inner_w, room)
            if head_row is None:
                return None, box
            head = plan_boxed_section(replace(head_box, body=(head_row,)), ctx, width)
            rest = (rest_row,) + box.body[1:]
        return head, replace(box, title=_contd(box.title), body=rest, min_height=0.0)

    font = _body_font(box, ctx)
    lines = box_body_lines(box, ctx, width)
    n = min(max_lines_for(room, font), len(lines) - 1)
    if n <= 0:
        return None, box
    head = _plan_box(head_box, ctx, width, _box_body_plan(head_box, ctx, width, lines[:n]))
    remainder = replace(box, title=_contd(box.title), body="\n".join(lines[n:]), min_height=0.0)
    return head, remainder


# -----------------------------
# Table
# -----------------------------
@dataclass(frozen=True)
class TablePlan:
    title: RenderPlan
    continuation_title: RenderPlan
    header: RenderPlan
    rows: tuple
    closing: RenderPlan

    @property
    def lead_height(self) -> float:
        first_row = self.rows[0].height if self.rows else 0.0
        return self.title.height + self.header.height + first_row

    def as_plan(self) -> RenderPlan:
        plan = self.title.stacked(self.header)
        for row in self.rows:
            plan = plan.stacked(row)
        return plan.stacked(self.closing)


def column_widths(columns, width: float) -> list[float]:
    fixed = sum(c.fixed for c in columns if c.fixed is not None)
    flexible = [c for c in columns if c.fixed is None]
    total_weight = sum(c.weight for c in flexible) or 1.0
    remaining = max(0.0, width - fixed)
    widths = [c.fixed if c.fixed is not None else remaining * c.weight / total_weight for c in columns]
    # last column absorbs rounding so the table spans exactly `width`
    if widths:
        widths[-1] = width - sum(widths[:-1])
    return widths


def _plan_table_title(text: str, table: Table, ctx: RenderContext, width: float) -> RenderPlan:
    if not text:
        return RenderPlan.empty()
    font = ctx.font(table.title_size, "bold")
    ops = _line_ops([text], font, 0, 0, width, ctx.color("primary"))
    return RenderPlan(font.line_height + TITLE_GAP, tuple(ops))


def _plan_table_header(table: Table, ctx: RenderContext, width: float, widths) -> RenderPlan:
    font = ctx.font(table.size, "bold")
    height = font.line_height + 2 * HEADER_PAD_Y
    ops = [RectOp(0, 0, width, height, ctx.color("primary"), None)]
    x = 0.0
    for col, col_w in zip(table.columns, widths):
        ops += _line_ops([col.title], font, x + CELL_PAD_X, HEADER_PAD_Y, col_w - 2 * CELL_PAD_X,
                         ctx.color("white"), col.align)
        x += col_w
    return RenderPlan(height, tuple(ops))


def _plan_table_row(index: int, cells, table: Table, ctx: RenderContext, width: float, widths,
                    max_row_height: Optional[float]) -> RenderPlan:
    font = ctx.font(table.size)
    lh = font.line_height
    cells = list(cells) + [""] * (len(widths) - len(cells))
    wrapped = []
    for col_w, cell in zip(widths, cells):
        wrapped.append(wrap_lines(cell, font, col_w - 2 * CELL_PAD_X) or [""])

    tallest = max((len(lines) for lines in wrapped), default=1)
    if max_row_height is not None and lines_height(tallest, font) + 2 * CELL_PAD_Y > max_row_height:
        keep = max(1, max_lines_for(max_row_height - 2 * CELL_PAD_Y, font))
        logger.warning(
            "Table %r row %d needs %d lines, more than a page holds; truncated to %d",
            table.title, index + 1, tallest, keep,
        )
        wrapped = [
            truncate_lines(lines, keep, font, col_w - 2 * CELL_PAD_X)
            for lines, col_w in zip(wrapped, widths)
        ]
        tallest = keep

    height = lines_height(tallest, font) + 2 * CELL_PAD_Y
    ops = []
    if table.zebra:
        ops.append(RectOp(0, 0, width, height, ctx.color("bg_alt" if index % 2 == 0 else "white"), None))
    ops.append(LineOp(0, height, width, height, ctx.color("border"), 0.5))

    x = 0.0
    for col, col_w, lines in zip(table.columns, widths, wrapped):
        if len(lines) == 1:
            y = (height - lh) / 2
        else:
            y = CELL_PAD_Y
        ops += _line_ops(lines, font, x + CELL_PAD_X, y, col_w - 2 * CELL_PAD_X, ctx.color("text"), col.align)
        x += col_w
    return RenderPlan(height, tuple(ops))


def plan_table(table: Table, ctx: RenderContext, width: float,
               max_row_height: Optional[float] = None) -> TablePlan:
    widths = column_widths(table.columns, width)
    rows = tuple(
        _plan_table_row(i, cells, table, ctx, width, widths, max_row_height)
        for i, cells in enumerate(table.rows)
    )
    closing = RenderPlan(0.0, (LineOp(0, 0, width, 0, ctx.color("primary"), 1.5),))
    return TablePlan(
        title=_plan_table_title(table.title, table, ctx, width),
        continuation_title=_plan_table_title(table.continued_title, table, ctx, width),
        header=_plan_table_header(table, ctx, width, widths),
        rows=rows,
        closing=closing,
    )


# -----------------------------
# Dispatch
# -----------------------------
def plan_block(block, ctx: RenderContext, width: float) -> RenderPlan:
    if isinstance(block, TextBlock):
        return plan_text(block, ctx, width)
    if isinstance(block, LabelValueRow):
        return plan_label_value(block, ctx, width)
    if isinstance(block, TwoColumnGrid):
        return plan_two_column(block, ctx, width)
    if isinstance(block, BoxedSection):
        return plan_boxed_section(block, ctx, width)
    if isinstance(block, Table):
        return plan_table(block, ctx, width).as_plan()
    if isinstance(block, PageBreakHint):
        return RenderPlan.empty()
    raise TypeError(f"unknown block type: {type(block).__name__}")
