"""Positioned drawing instructions produced by the layout engine.

All coordinates are page points measured from the top-left corner, y
growing downwards.  The PDF renderer flips them into ReportLab's space.
Every op carries a ``section`` tag (``"header.title"``,
``"results.table.row"``, ...) so a page can be inspected per region.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class DrawText:
    """One already-wrapped, already-truncated line of text.

    ``y`` is the top of the line box; the renderer places the baseline at
    ``y + ascent``.  ``width`` bounds the line and anchors centre/right
    alignment.
    """

    x: float
    y: float
    width: float
    height: float
    text: str
    font: str = "Helvetica"
    size: float = 9.0
    color: str = "#000000"
    align: str = "left"
    section: str = ""


@dataclass(frozen=True, slots=True)
class DrawRect:
    x: float
    y: float
    width: float
    height: float
    fill: str | None = None
    stroke: str | None = "#000000"
    line_width: float = 0.5
    section: str = ""


@dataclass(frozen=True, slots=True)
class DrawLine:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str = "#000000"
    line_width: float = 0.5
    section: str = ""

    @property
    def x(self) -> float:
        return min(self.x1, self.x2)

    @property
    def y(self) -> float:
        return min(self.y1, self.y2)

    @property
    def width(self) -> float:
        return abs(self.x2 - self.x1)

    @property
    def height(self) -> float:
        return abs(self.y2 - self.y1)


@dataclass(frozen=True, slots=True)
class DrawImage:
    x: float
    y: float
    width: float
    height: float
    image_bytes: bytes = field(repr=False)
    name: str = ""
    section: str = ""


@dataclass(frozen=True, slots=True)
class DrawCircle:
    cx: float
    cy: float
    radius: float
    stroke: str | None = "#000000"
    fill: str | None = None
    line_width: float = 0.5
    section: str = ""

    @property
    def x(self) -> float:
        return self.cx - self.radius

    @property
    def y(self) -> float:
        return self.cy - self.radius

    @property
    def width(self) -> float:
        return 2 * self.radius

    @property
    def height(self) -> float:
        return 2 * self.radius


DrawOp = DrawText | DrawRect | DrawLine | DrawImage | DrawCircle


def ops_in_section(ops: Iterable[DrawOp], prefix: str) -> list[DrawOp]:
    """Ops whose section equals *prefix* or lies beneath it (``prefix.*``)."""
    return [
        op for op in ops if op.section == prefix or op.section.startswith(f"{prefix}.")
    ]


def texts(ops: Iterable[DrawOp]) -> list[str]:
    return [op.text for op in ops if isinstance(op, DrawText)]
