"""Deterministic single-page layout of a material test report.

``layout_report`` turns report data plus rendered chart images into an
ordered list of positioned draw ops.  It never draws and never reflows: the
page is A4, each region has a fixed size, and content that does not fit
is truncated.  Each section function takes a ``LayoutCursor`` and returns
``(ops, next_cursor)``.

Page regions, top to bottom::

    header band     logo | title | date
    field grid      one or more titled sections (row-major or column-flow)
    results box     chart image | "Results" property table
    footer          comments, signatories, remarks, address
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from ..report_theme import REPORT_COLORS
from .draw_ops import DrawCircle, DrawImage, DrawLine, DrawOp, DrawRect, DrawText
from .errors import MissingResourceError
from .fields import NormalizedField, normalize, simplify_value
from .pdf_layout import (
    Box,
    LayoutCursor,
    Page,
    centered_text_top,
    fit_rect_preserve_aspect,
)
from .report_data import ChartImage, ReportData
from .resources import ReportResources, image_size
from .text_metrics import ellipsize, fit_lines, line_height
from .variants import (
    ANCHOR_CONTENT,
    CLASSIC,
    FOOTER_COMPACT,
    ROW_MAJOR,
    InfoSection,
    LayoutVariant,
)

LOGGER = logging.getLogger(__name__)

LOGO_W = 80.0
LOGO_H = 30.0
TITLE_SIZE = 12.0
TITLE_BOX_W = 300.0
DATE_SIZE = 10.0
DATE_BOX_W = 90.0

SECTION_TITLE_SIZE = 10.0
RESULTS_TITLE_SIZE = 12.0
RESULTS_HEADING_SPACE = 25.0
GRAPH_CAPTION_H = 20.0
GRAPH_CAPTION_SIZE = 9.0
GRAPH_PLACEHOLDER_SIZE = 16.0
TABLE_TOP_OFFSET = 40.0
TABLE_BOTTOM_RESERVE = 50.0
TABLE_HEADER_SIZE = 8.0
TABLE_BODY_SIZE = 7.0
PROPERTIES_PLACEHOLDER = "Calculated\nproperties\npart"

FOOTER_ROW_H = 25.0
FOOTER_COMMENTS_H = 75.0
FOOTER_LEFT_RATIO = 0.7
FOOTER_TEXT_SIZE = 8.0
FOOTER_SMALL_SIZE = 7.0
REMARK_BULLET_R = 5.0


def format_report_date(day: date) -> str:
    """``DD Mon YYYY`` with English month abbreviations regardless of locale."""
    months = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
    return f"{day.day:02d} {months[day.month - 1]} {day.year}"


def _match_key(key: str) -> str:
    return "".join(ch for ch in key.lower() if ch.isalnum())


@dataclass(frozen=True, slots=True)
class _Ctx:
    page: Page
    variant: LayoutVariant
    res: ReportResources
    report_date: date

    @property
    def font(self) -> str:
        return self.res.font

    @property
    def bold(self) -> str:
        return self.res.font_bold


# -- primitives -----------------------------------------------------------------


def _text_line(
    ctx: _Ctx,
    box: Box,
    text: str,
    *,
    size: float,
    section: str,
    bold: bool = False,
    align: str = "left",
    color: str = REPORT_COLORS["ink"],
    pad_x: float = 0.0,
) -> DrawText:
    """One ellipsised line vertically centred in *box*."""
    font = ctx.bold if bold else ctx.font
    width = max(0.0, box.width - 2 * pad_x)
    return DrawText(
        x=box.x + pad_x,
        y=centered_text_top(box.y, box.height, size),
        width=width,
        height=line_height(size),
        text=ellipsize(text, font, size, width),
        font=font,
        size=size,
        color=color,
        align=align,
        section=section,
    )


def _text_block(
    ctx: _Ctx,
    box: Box,
    text: str,
    *,
    size: float,
    section: str,
    max_lines: int,
    bold: bool = False,
    align: str = "left",
    color: str = REPORT_COLORS["ink"],
    leading: float | None = None,
    valign: str = "middle",
) -> list[DrawText]:
    """Wrapped text inside *box*, capped at *max_lines* and at what the box height holds."""
    font = ctx.bold if bold else ctx.font
    leading = leading if leading is not None else line_height(size)
    fits = max(1, int((box.height + leading - size) // leading)) if box.height > 0 else 1
    lines = fit_lines(text, font, size, box.width, min(max_lines, fits))
    block_h = size + leading * (len(lines) - 1)
    top = box.y + (box.height - block_h) / 2 if valign == "middle" else box.y
    return [
        DrawText(
            x=box.x,
            y=top + i * leading,
            width=box.width,
            height=line_height(size),
            text=line,
            font=font,
            size=size,
            color=color,
            align=align,
            section=section,
        )
        for i, line in enumerate(lines)
    ]


def _cell(box: Box, section: str, fill: str | None = None, line_width: float = 0.5) -> DrawRect:
    return DrawRect(
        box.x,
        box.y,
        box.width,
        box.height,
        fill=fill,
        stroke=REPORT_COLORS["border"],
        line_width=line_width,
        section=section,
    )


# -- header ---------------------------------------------------------------------


def layout_header(
    report: ReportData, ctx: _Ctx, cursor: LayoutCursor
) -> tuple[list[DrawOp], LayoutCursor]:
    page, variant = ctx.page, ctx.variant
    top = variant.header_top
    try:
        logo_px = image_size(ctx.res.logo_bytes)
    except ValueError as exc:
        raise MissingResourceError("Logo image is unreadable") from exc

    lx, ly, lw, lh = fit_rect_preserve_aspect(*logo_px, page.margin, top, LOGO_W, LOGO_H)
    ops: list[DrawOp] = [
        DrawImage(lx, ly, lw, lh, ctx.res.logo_bytes, name="logo", section="header.logo")
    ]

    title = simplify_value(report.test_info.get(variant.title_field)).strip() or variant.default_title
    if variant.title_align == "left":
        title_x = page.margin + LOGO_W + 15
        title_box = Box(title_x, top, page.content_right - DATE_BOX_W - 10 - title_x, LOGO_H)
    else:
        title_box = Box(page.width / 2 - TITLE_BOX_W / 2, top, TITLE_BOX_W, LOGO_H)
    ops.append(
        _text_line(
            ctx,
            title_box,
            title,
            size=TITLE_SIZE,
            bold=True,
            align=variant.title_align,
            color=REPORT_COLORS["text_primary"],
            section="header.title",
        )
    )
    date_box = Box(page.content_right - DATE_BOX_W, top, DATE_BOX_W, LOGO_H)
    ops.append(
        _text_line(
            ctx,
            date_box,
            format_report_date(ctx.report_date),
            size=DATE_SIZE,
            align="right",
            color=REPORT_COLORS["text_primary"],
            section="header.date",
        )
    )
    bottom = max(cursor.y, variant.header_height)
    if variant.header_rule:
        ops.append(
            DrawLine(
                page.margin,
                bottom - 8,
                page.content_right,
                bottom - 8,
                color=REPORT_COLORS["text_heading"],
                line_width=1.0,
                section="header.rule",
            )
        )
    return ops, LayoutCursor(bottom)


# -- field grid -----------------------------------------------------------------


def assign_shortest_column(
    advances: Sequence[float], columns: int, start_y: float = 0.0
) -> tuple[list[tuple[int, float]], list[float]]:
    """Place items of the given heights into the currently shortest column.

    Returns ``(placements, cursors)``: one ``(column, top_y)`` per item and
    the final per-column cursors.  Ties go to the leftmost column.  After
    every placement ``max(cursors) - min(cursors)`` is at most the largest
    advance placed so far.
    """
    cursors = [start_y] * max(1, columns)
    placements: list[tuple[int, float]] = []
    for advance in advances:
        col = min(range(len(cursors)), key=cursors.__getitem__)
        placements.append((col, cursors[col]))
        cursors[col] += advance
    return placements, cursors


def _select_fields(
    section: InfoSection, remaining: list[NormalizedField]
) -> list[NormalizedField]:
    if section.keys is None:
        return list(remaining)
    by_key = {_match_key(f.key): f for f in remaining}
    picked: list[NormalizedField] = []
    for key in section.keys:
        match = by_key.pop(_match_key(key), None)
        if match is not None:
            picked.append(match)
    return picked


def _section_title(ctx: _Ctx, section: InfoSection, y: float) -> list[DrawOp]:
    page = ctx.page
    bar = Box(page.margin, y, page.content_width, ctx.variant.section_title_height)
    return [
        _cell(bar, "info.section", fill=REPORT_COLORS["section_bg"]),
        _text_line(
            ctx,
            bar,
            section.title,
            size=SECTION_TITLE_SIZE,
            bold=True,
            color=REPORT_COLORS["text_heading"],
            pad_x=5,
            section="info.section.title",
        ),
    ]


def _row_major_grid(
    ctx: _Ctx, section: InfoSection, fields: Sequence[NormalizedField], top: float
) -> tuple[list[DrawOp], float]:
    variant, page = ctx.variant, ctx.page
    size = variant.field_font_size
    row_h = variant.row_height
    col_w = page.content_width / max(1, section.columns)
    ops: list[DrawOp] = []
    for index, field in enumerate(fields):
        row, col = divmod(index, max(1, section.columns))
        cell = Box(page.margin + col * col_w, top + row * row_h, col_w, row_h)
        label_box = Box(cell.x + 3, cell.y, col_w * variant.label_ratio - 5, row_h)
        value_box = Box(
            cell.x + 3 + col_w * variant.label_ratio,
            cell.y,
            col_w * (1 - variant.label_ratio) - 5,
            row_h,
        )
        ops.append(_cell(cell, "info.cell", fill=REPORT_COLORS["surface"]))
        ops.append(
            _text_line(ctx, label_box, field.label, size=size, bold=True, section="info.label")
        )
        ops.append(_text_line(ctx, value_box, field.value, size=size, section="info.value"))
    rows = math.ceil(len(fields) / max(1, section.columns))
    return ops, top + rows * row_h


def _column_flow_grid(
    ctx: _Ctx, section: InfoSection, fields: Sequence[NormalizedField], top: float
) -> tuple[list[DrawOp], float]:
    variant, page = ctx.variant, ctx.page
    size = variant.field_font_size
    leading = line_height(size)
    columns = max(1, section.columns)
    col_w = page.content_width / columns
    label_w = min(variant.label_width, col_w * 0.5)
    value_w = max(10.0, col_w - label_w - 9)
    pad = 3.0

    blocks: list[tuple[list[str], list[str]]] = []
    advances: list[float] = []
    for field in fields:
        label_lines = fit_lines(field.label, ctx.bold, size, label_w - pad, 2)
        value_lines = fit_lines(field.value, ctx.font, size, value_w, variant.value_max_lines)
        blocks.append((label_lines, value_lines))
        advances.append(max(len(label_lines), len(value_lines)) * leading + variant.field_spacing)

    placements, cursors = assign_shortest_column(advances, columns, top + pad)
    bottom = max(cursors) + pad - variant.field_spacing
    ops: list[DrawOp] = [_cell(Box(page.margin, top, page.content_width, bottom - top), "info.frame")]
    for col in range(1, columns):
        x = page.margin + col * col_w
        ops.append(DrawLine(x, top, x, bottom, color=REPORT_COLORS["border"], section="info.grid"))
    for (col, y), (label_lines, value_lines) in zip(placements, blocks):
        x = page.margin + col * col_w + pad
        for i, line in enumerate(label_lines):
            ops.append(
                DrawText(
                    x, y + i * leading, label_w - pad, leading, line,
                    font=ctx.bold, size=size, section="info.label",
                )
            )
        for i, line in enumerate(value_lines):
            ops.append(
                DrawText(
                    x + label_w, y + i * leading, value_w, leading, line,
                    font=ctx.font, size=size, section="info.value",
                )
            )
    return ops, bottom


def layout_field_grid(
    fields: Sequence[NormalizedField], ctx: _Ctx, cursor: LayoutCursor
) -> tuple[list[DrawOp], LayoutCursor]:
    variant = ctx.variant
    ops: list[DrawOp] = []
    remaining = list(fields)
    y = cursor.y
    for section in variant.info_sections:
        picked = _select_fields(section, remaining)
        if not picked:
            continue
        picked_ids = {id(f) for f in picked}
        remaining = [f for f in remaining if id(f) not in picked_ids]
        ops.extend(_section_title(ctx, section, y))
        y += variant.section_title_height
        if section.fill == ROW_MAJOR:
            grid_ops, y = _row_major_grid(ctx, section, picked, y)
        else:
            grid_ops, y = _column_flow_grid(ctx, section, picked, y)
        ops.extend(grid_ops)
        y += variant.section_spacing
    if remaining:
        LOGGER.debug("%d test info field(s) matched no section and were left out", len(remaining))
    return ops, LayoutCursor(y)


# -- results box ----------------------------------------------------------------


def _graph_ops(ctx: _Ctx, box: Box, charts: Sequence[ChartImage]) -> list[DrawOp]:
    pad = ctx.variant.graph_padding
    for chart in charts[: ctx.variant.graph_slots]:
        try:
            src_w, src_h = image_size(chart.image_bytes)
        except ValueError:
            LOGGER.warning("Chart %r has unreadable image data; showing placeholder", chart.title)
            continue
        caption_h = GRAPH_CAPTION_H if chart.title else 0.0
        area = Box(box.x + pad, box.y + pad, box.width - 2 * pad, box.height - 2 * pad - caption_h)
        x, y, w, h = fit_rect_preserve_aspect(src_w, src_h, area.x, area.y, area.width, area.height)
        ops: list[DrawOp] = [
            DrawImage(x, y, w, h, chart.image_bytes, name=chart.title, section="results.graph")
        ]
        if chart.title:
            caption = Box(box.x, box.bottom - GRAPH_CAPTION_H, box.width, GRAPH_CAPTION_H)
            ops.append(
                _text_line(
                    ctx,
                    caption,
                    chart.title,
                    size=GRAPH_CAPTION_SIZE,
                    align="center",
                    pad_x=pad,
                    section="results.graph.caption",
                )
            )
        return ops
    return [
        _text_line(
            ctx,
            box,
            "Graph Data",
            size=GRAPH_PLACEHOLDER_SIZE,
            align="center",
            color=REPORT_COLORS["text_muted"],
            section="results.graph.placeholder",
        )
    ]


def table_row_height(variant: LayoutVariant, count: int) -> float:
    available = variant.results_box_height - TABLE_BOTTOM_RESERVE
    return max(variant.min_row_height, min(variant.max_row_height, available / (count + 1)))


def _properties_ops(
    ctx: _Ctx, box: Box, properties: Sequence[NormalizedField]
) -> list[DrawOp]:
    variant = ctx.variant
    heading = Box(box.x, box.y + 10, box.width, RESULTS_TITLE_SIZE + 4)
    ops: list[DrawOp] = [
        _text_line(
            ctx,
            heading,
            "Results",
            size=RESULTS_TITLE_SIZE,
            bold=True,
            align="center",
            section="results.heading",
        )
    ]
    if not properties:
        placeholder = Box(box.x + 10, box.y + TABLE_TOP_OFFSET, box.width - 20,
                          box.height - TABLE_TOP_OFFSET - 10)
        ops.extend(
            _text_block(
                ctx,
                placeholder,
                PROPERTIES_PLACEHOLDER,
                size=GRAPH_PLACEHOLDER_SIZE,
                max_lines=4,
                align="center",
                leading=GRAPH_PLACEHOLDER_SIZE + 10,
                color=REPORT_COLORS["text_muted"],
                section="results.properties.placeholder",
            )
        )
        return ops

    shown = list(properties[: variant.max_properties])
    if len(properties) > len(shown):
        LOGGER.debug(
            "Showing %d of %d calculated properties", len(shown), len(properties)
        )
    row_h = table_row_height(variant, len(shown))
    table_x = box.x + 10
    table_w = box.width - 20
    col_w = table_w / 2
    leading = line_height(TABLE_BODY_SIZE)
    y = box.y + TABLE_TOP_OFFSET

    header = Box(table_x, y, table_w, row_h)
    ops.append(_cell(header, "results.table.header", fill=REPORT_COLORS["table_header_bg"]))
    ops.append(
        DrawLine(table_x + col_w, y, table_x + col_w, y + row_h, section="results.table.grid")
    )
    for text, x in (("Property", table_x), ("Value", table_x + col_w)):
        ops.append(
            _text_line(
                ctx,
                Box(x, y, col_w, row_h),
                text,
                size=TABLE_HEADER_SIZE,
                bold=True,
                pad_x=5,
                section="results.table.header.text",
            )
        )

    row_y = y + row_h
    for index, prop in enumerate(shown):
        if row_y + row_h > box.bottom:
            LOGGER.debug("Results table full; dropped %d row(s)", len(shown) - index)
            break
        ops.append(_cell(Box(table_x, row_y, table_w, row_h), "results.table.row"))
        ops.append(
            DrawLine(
                table_x + col_w, row_y, table_x + col_w, row_y + row_h,
                section="results.table.grid",
            )
        )
        for text, x in ((prop.name, table_x), (prop.value, table_x + col_w)):
            ops.extend(
                _text_block(
                    ctx,
                    Box(x + 5, row_y + 2, col_w - 10, row_h - 4),
                    text,
                    size=TABLE_BODY_SIZE,
                    max_lines=max(1, int((row_h - 4) // leading)),
                    section="results.table.cell",
                )
            )
        row_y += row_h
    return ops


def layout_results(
    properties: Sequence[NormalizedField],
    charts: Sequence[ChartImage],
    ctx: _Ctx,
    cursor: LayoutCursor,
) -> tuple[list[DrawOp], LayoutCursor]:
    page, variant = ctx.page, ctx.variant
    y = cursor.y + variant.results_gap
    ops: list[DrawOp] = [
        DrawText(
            page.margin, y, page.content_width, line_height(RESULTS_TITLE_SIZE),
            variant.results_title, font=ctx.bold, size=RESULTS_TITLE_SIZE,
            section="results.title",
        ),
        DrawLine(
            page.margin, y + RESULTS_TITLE_SIZE + 4, page.content_right, y + RESULTS_TITLE_SIZE + 4,
            line_width=2.0, section="results.title.rule",
        ),
    ]
    y += RESULTS_HEADING_SPACE
    box = Box(page.margin, y, page.content_width, variant.results_box_height)
    graph_box, table_box = box.split_ratio(variant.graph_ratio)
    ops.append(_cell(graph_box, "results.frame", line_width=1.0))
    ops.append(_cell(table_box, "results.frame", line_width=1.0))
    ops.extend(_graph_ops(ctx, graph_box, charts))
    ops.extend(_properties_ops(ctx, table_box, properties))
    return ops, LayoutCursor(box.bottom)


# -- footer ---------------------------------------------------------------------


def _footer_top(ctx: _Ctx, cursor: LayoutCursor, height: float) -> float:
    page, variant = ctx.page, ctx.variant
    if variant.footer_anchor == ANCHOR_CONTENT:
        top = cursor.y + variant.footer_gap
        if top + height > page.height:
            LOGGER.warning(
                "Footer runs past the page bottom by %.1fpt", top + height - page.height
            )
        return top
    top = page.height - variant.footer_offset
    if cursor.y > top:
        LOGGER.warning("Report content overlaps the footer by %.1fpt", cursor.y - top)
    return top


def _label_value_cell(
    ctx: _Ctx, box: Box, label: str, value: str, section: str
) -> list[DrawOp]:
    half = box.width / 2
    return [
        _cell(box, section),
        _text_line(
            ctx, Box(box.x, box.y, half, box.height), label,
            size=FOOTER_TEXT_SIZE, bold=True, pad_x=4, section=f"{section}.label",
        ),
        _text_line(
            ctx, Box(box.x + half, box.y, half, box.height), value,
            size=FOOTER_TEXT_SIZE, pad_x=4, section=f"{section}.value",
        ),
    ]


def _remark_ops(ctx: _Ctx, row: Box, number: int, text: str) -> list[DrawOp]:
    cx = row.x + 10
    cy = row.center_y
    return [
        _cell(row, "footer.remark"),
        DrawCircle(cx, cy, REMARK_BULLET_R, section="footer.remark.bullet"),
        _text_line(
            ctx,
            Box(cx - REMARK_BULLET_R, cy - REMARK_BULLET_R, 2 * REMARK_BULLET_R, 2 * REMARK_BULLET_R),
            str(number),
            size=FOOTER_SMALL_SIZE,
            align="center",
            section="footer.remark.number",
        ),
        *_text_block(
            ctx,
            Box(row.x + 20, row.y + 2, row.width - 25, row.height - 4),
            text,
            size=FOOTER_TEXT_SIZE,
            max_lines=2,
            section="footer.remark.text",
        ),
    ]


def _signatory_footer(ctx: _Ctx, cursor: LayoutCursor) -> tuple[list[DrawOp], LayoutCursor]:
    page, res = ctx.page, ctx.res
    remarks = list(res.remarks)
    rows = max(7, 5 + len(remarks))
    top = _footer_top(ctx, cursor, rows * FOOTER_ROW_H)
    left_w = page.content_width * FOOTER_LEFT_RATIO
    right_w = page.content_width - left_w
    x0 = page.margin
    x1 = x0 + left_w

    def right_row(index: int) -> Box:
        return Box(x1, top + index * FOOTER_ROW_H, right_w, FOOTER_ROW_H)

    comments_head = Box(x0, top, left_w, FOOTER_ROW_H)
    company_head = right_row(0)
    ops: list[DrawOp] = [
        _cell(comments_head, "footer.comments", fill=REPORT_COLORS["section_bg"]),
        *_text_block(
            ctx,
            comments_head.inset(5, 2),
            res.comments_heading,
            size=FOOTER_TEXT_SIZE,
            max_lines=2,
            section="footer.comments.heading",
        ),
        _cell(company_head, "footer.company", fill=REPORT_COLORS["section_bg"]),
        _text_line(
            ctx,
            company_head,
            f"For and on behalf of {res.company_name}",
            size=9,
            bold=True,
            align="center",
            pad_x=4,
            section="footer.company.heading",
        ),
        _cell(Box(x0, top + FOOTER_ROW_H, left_w, FOOTER_COMMENTS_H), "footer.comments.body"),
    ]
    signatories = (
        ("Approved by:", res.approver),
        ("Position Held:", res.approver_position),
        ("Signature:", ""),
        ("Date Reported:", ctx.report_date.strftime("%d.%m.%Y")),
        ("Report Issue No:", res.issue_number),
    )
    for index, (label, value) in enumerate(signatories, start=1):
        ops.extend(_label_value_cell(ctx, right_row(index), label, value, "footer.signatory"))

    address_box = right_row(len(signatories) + 1)
    ops.append(_cell(address_box, "footer.address"))
    ops.extend(
        _text_block(
            ctx,
            address_box.inset(4, 1),
            res.company_address,
            size=FOOTER_SMALL_SIZE,
            max_lines=3,
            leading=FOOTER_SMALL_SIZE + 1,
            align="center",
            section="footer.address.text",
        )
    )

    remarks_head = Box(x0, top + 4 * FOOTER_ROW_H, left_w, FOOTER_ROW_H)
    ops.append(_cell(remarks_head, "footer.remarks"))
    ops.append(
        _text_line(
            ctx, remarks_head, "Remarks", size=9, bold=True, pad_x=5,
            section="footer.remarks.heading",
        )
    )
    for index, remark in enumerate(remarks):
        row = Box(x0, top + (5 + index) * FOOTER_ROW_H, left_w, FOOTER_ROW_H)
        ops.extend(_remark_ops(ctx, row, index + 1, remark))
    return ops, LayoutCursor(top + rows * FOOTER_ROW_H)


def _compact_footer(ctx: _Ctx, cursor: LayoutCursor) -> tuple[list[DrawOp], LayoutCursor]:
    page, res = ctx.page, ctx.res
    row_h = 20.0
    remarks = list(res.remarks)
    height = row_h * (2 + len(remarks))
    top = _footer_top(ctx, cursor, height)
    x0 = page.margin
    third = page.content_width / 3
    ops: list[DrawOp] = []
    cells = (
        ("Approved by:", f"{res.approver}, {res.approver_position}".strip(", ")),
        ("Date Reported:", ctx.report_date.strftime("%d.%m.%Y")),
        ("Report Issue No:", res.issue_number),
    )
    for index, (label, value) in enumerate(cells):
        box = Box(x0 + index * third, top, third, row_h)
        ops.extend(_label_value_cell(ctx, box, label, value, "footer.signatory"))
    for index, remark in enumerate(remarks):
        row = Box(x0, top + (1 + index) * row_h, page.content_width, row_h)
        ops.extend(_remark_ops(ctx, row, index + 1, remark))
    address_box = Box(x0, top + (1 + len(remarks)) * row_h, page.content_width, row_h)
    ops.append(
        _text_line(
            ctx,
            address_box,
            f"For and on behalf of {res.company_name}. {res.company_address}".strip(),
            size=FOOTER_SMALL_SIZE,
            align="center",
            color=REPORT_COLORS["text_muted"],
            section="footer.address.text",
        )
    )
    return ops, LayoutCursor(top + height)


def layout_footer(ctx: _Ctx, cursor: LayoutCursor) -> tuple[list[DrawOp], LayoutCursor]:
    if ctx.variant.footer_style == FOOTER_COMPACT:
        return _compact_footer(ctx, cursor)
    return _signatory_footer(ctx, cursor)


# -- entry point ----------------------------------------------------------------


def layout_report(
    report: ReportData,
    charts: Sequence[ChartImage] = (),
    *,
    resources: ReportResources,
    variant: LayoutVariant = CLASSIC,
    page: Page | None = None,
    report_date: date | None = None,
) -> list[DrawOp]:
    """Lay out one report page.

    Only an unreadable logo raises (``MissingResourceError``); every other
    gap in the data degrades to a placeholder or a truncated value.
    """
    ctx = _Ctx(
        page=page or Page(),
        variant=variant,
        res=resources,
        report_date=report_date or date.today(),
    )
    ops: list[DrawOp] = []
    cursor = LayoutCursor(ctx.page.margin)
    for step in (
        lambda c: layout_header(report, ctx, c),
        lambda c: layout_field_grid(normalize(report.test_info), ctx, c),
        lambda c: layout_results(normalize(report.calculated_properties), charts, ctx, c),
        lambda c: layout_footer(ctx, c),
    ):
        section_ops, cursor = step(cursor)
        ops.extend(section_ops)
    LOGGER.debug("Laid out report variant=%s ops=%d end_y=%.1f", variant.name, len(ops), cursor.y)
    return ops
