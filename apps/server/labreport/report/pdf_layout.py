"""Page geometry and aspect-ratio helpers for the report layout.

Pure-maths utilities that keep the layout code focused on content rather
than coordinate arithmetic.  Everything here is immutable; section functions
derive new boxes and cursors instead of moving shared state.
"""

from __future__ import annotations

from dataclasses import dataclass

from reportlab.lib.pagesizes import A4

PAGE_MARGIN = 25.0


@dataclass(frozen=True, slots=True)
class Page:
    width: float = A4[0]
    height: float = A4[1]
    margin: float = PAGE_MARGIN

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def content_left(self) -> float:
        return self.margin

    @property
    def content_right(self) -> float:
        return self.width - self.margin

    @property
    def content_bottom(self) -> float:
        return self.height - self.margin


@dataclass(frozen=True, slots=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    def inset(self, dx: float, dy: float | None = None) -> Box:
        dy = dx if dy is None else dy
        return Box(
            self.x + dx,
            self.y + dy,
            max(0.0, self.width - 2 * dx),
            max(0.0, self.height - 2 * dy),
        )

    def split_ratio(self, ratio: float) -> tuple[Box, Box]:
        """Split left/right with the left part taking *ratio* of the width."""
        left_w = self.width * min(1.0, max(0.0, ratio))
        return (
            Box(self.x, self.y, left_w, self.height),
            Box(self.x + left_w, self.y, self.width - left_w, self.height),
        )

    def split_columns(self, count: int) -> list[Box]:
        count = max(1, count)
        col_w = self.width / count
        return [Box(self.x + i * col_w, self.y, col_w, self.height) for i in range(count)]

    def contains(self, other: Box, tolerance: float = 1e-6) -> bool:
        return (
            other.x >= self.x - tolerance
            and other.y >= self.y - tolerance
            and other.right <= self.right + tolerance
            and other.bottom <= self.bottom + tolerance
        )


@dataclass(frozen=True, slots=True)
class LayoutCursor:
    """Vertical position threaded through the section layout functions."""

    y: float

    def advance(self, dy: float) -> LayoutCursor:
        return LayoutCursor(self.y + dy)


def fit_rect_preserve_aspect(
    src_w: float,
    src_h: float,
    box_x: float,
    box_y: float,
    box_w: float,
    box_h: float,
) -> tuple[float, float, float, float]:
    """Return (x, y, w, h) fitted and centred inside box while preserving src aspect."""
    if src_w <= 0 or src_h <= 0:
        return box_x, box_y, box_w, box_h
    src_ratio = src_w / src_h
    box_ratio = box_w / box_h if box_h else src_ratio
    if box_ratio > src_ratio:
        h = box_h
        w = h * src_ratio
        x = box_x + (box_w - w) / 2
        y = box_y
    else:
        w = box_w
        h = w / src_ratio
        x = box_x
        y = box_y + (box_h - h) / 2
    return x, y, w, h


def centered_text_top(box_y: float, box_h: float, font_size: float) -> float:
    """Top of a single text line of *font_size* centred vertically in a box."""
    return box_y + (box_h - font_size) / 2
