"""Chart rendering: chart specs to PNG bytes.

Charts are drawn with matplotlib's object-oriented API on an Agg canvas (no
pyplot global state, so worker threads do not share figures).  A render
that fails or exceeds its deadline is replaced by a Pillow-drawn
placeholder so one bad chart never sinks the whole report.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Sequence
from concurrent.futures import TimeoutError as FutureTimeoutError
from io import BytesIO

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.colors import is_color_like
from matplotlib.figure import Figure
from PIL import Image, ImageDraw, ImageFont

from ..report_theme import REPORT_COLORS, REPORT_PLOT_COLORS
from ..worker_pool import WorkerPool
from .errors import RenderTimeoutError
from .report_data import ChartImage, ChartSeries, ChartSpec

LOGGER = logging.getLogger(__name__)

PLACEHOLDER_HEADLINE = "Chart unavailable"

_CSS_RGB_RE = re.compile(
    r"rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)"
)

RenderFn = Callable[[ChartSpec, int, int, int], bytes]


def css_color(value: str | None, fallback: str) -> str | tuple[float, float, float, float]:
    """Map a Chart.js colour (``rgba(54, 162, 235, 1)``, hex, name) to matplotlib."""
    if not value:
        return fallback
    text = value.strip().lower()
    match = _CSS_RGB_RE.fullmatch(text)
    if match:
        r, g, b = (min(255.0, float(part)) / 255.0 for part in match.group(1, 2, 3))
        alpha = float(match.group(4)) if match.group(4) is not None else 1.0
        return (r, g, b, min(1.0, max(0.0, alpha)))
    if is_color_like(text):
        return text
    return fallback


def _x_values(spec: ChartSpec, count: int) -> list[float]:
    """Numeric x positions: the labels themselves when all are numbers, else indices."""
    if spec.chart_type == "scatter" and len(spec.labels) >= count:
        try:
            return [float(label) for label in spec.labels[:count]]
        except ValueError:
            pass
    return [float(i) for i in range(count)]


def _series_color(series: ChartSeries, index: int) -> str | tuple[float, float, float, float]:
    fallback = REPORT_PLOT_COLORS[index % len(REPORT_PLOT_COLORS)]
    return css_color(series.border_color or series.background_color, fallback)


def _draw_pie(ax, spec: ChartSpec) -> None:
    series = next(s for s in spec.datasets if s.numeric_points())
    slices = [
        (spec.labels[i] if i < len(spec.labels) else f"#{i + 1}", value)
        for i, value in enumerate(series.data)
        if value is not None and value > 0
    ]
    if not slices:
        raise ValueError("pie chart has no positive values")
    labels, values = zip(*slices)
    colors = [REPORT_PLOT_COLORS[i % len(REPORT_PLOT_COLORS)] for i in range(len(values))]
    ax.pie(values, labels=labels, colors=colors, autopct="%1.1f%%", textprops={"fontsize": 8})
    ax.set_aspect("equal")


def _draw_xy(ax, spec: ChartSpec) -> None:
    series_list = [s for s in spec.datasets if s.numeric_points()]
    count = max(len(s.data) for s in series_list)
    xs = _x_values(spec, count)
    bar_w = 0.8 / len(series_list)
    for index, series in enumerate(series_list):
        color = _series_color(series, index)
        ys = [math.nan if v is None else v for v in series.data]
        ys += [math.nan] * (count - len(ys))
        label = series.label or None
        if spec.chart_type == "bar":
            offset = (index - (len(series_list) - 1) / 2) * bar_w
            ax.bar([x + offset for x in xs], ys, width=bar_w, color=color, label=label)
        elif spec.chart_type == "scatter":
            ax.scatter(xs, ys, color=color, s=18, label=label)
        else:
            point = css_color(series.point_color, color)
            ax.plot(xs, ys, color=color, marker="o", markersize=3.5, markerfacecolor=point,
                    linewidth=1.5, label=label)
    if spec.labels and spec.chart_type != "scatter":
        step = max(1, math.ceil(len(spec.labels) / 12))
        ticks = list(range(0, min(count, len(spec.labels)), step))
        ax.set_xticks(ticks)
        ax.set_xticklabels([spec.labels[i] for i in ticks], fontsize=8, rotation=0)
    ax.set_xlabel(spec.x_axis_label, fontsize=9)
    ax.set_ylabel(spec.y_axis_label, fontsize=9)
    if spec.begin_at_zero:
        ax.set_ylim(bottom=0)
    ax.grid(True, alpha=0.3)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    if any(s.label for s in series_list):
        ax.legend(fontsize=8, loc="best", frameon=False)


def render_chart_png(spec: ChartSpec, width_px: int, height_px: int, dpi: int) -> bytes:
    """Render *spec* to PNG bytes of exactly ``width_px`` x ``height_px``.

    Raises ``ValueError`` when the spec holds nothing numeric to draw.
    """
    if not spec.has_data():
        raise ValueError(f"chart {spec.title!r} has no numeric data")
    fig = Figure(figsize=(width_px / dpi, height_px / dpi), dpi=dpi, facecolor="white")
    FigureCanvasAgg(fig)
    ax = fig.add_subplot(111)
    if spec.chart_type == "pie":
        _draw_pie(ax, spec)
    else:
        _draw_xy(ax, spec)
    ax.set_title(spec.title, fontsize=11, fontweight="bold")
    fig.tight_layout()
    buf = BytesIO()
    fig.savefig(buf, format="png", dpi=dpi, facecolor="white")
    return buf.getvalue()


def placeholder_png(title: str, reason: str, width_px: int, height_px: int) -> bytes:
    """Deterministic stand-in image naming the chart and why it is missing."""
    image = Image.new("RGB", (max(1, width_px), max(1, height_px)), REPORT_COLORS["placeholder_bg"])
    draw = ImageDraw.Draw(image)
    draw.rectangle(
        (0, 0, image.width - 1, image.height - 1),
        outline=REPORT_COLORS["placeholder_border"],
        width=2,
    )
    font = ImageFont.load_default()
    lines = [
        (PLACEHOLDER_HEADLINE, REPORT_COLORS["text_primary"]),
        (title, REPORT_COLORS["text_muted"]),
        (reason, REPORT_COLORS["error"]),
    ]
    heights = [draw.textbbox((0, 0), text, font=font)[3] for text, _ in lines]
    gap = 8
    y = (image.height - (sum(heights) + gap * (len(lines) - 1))) / 2
    for (text, color), line_h in zip(lines, heights):
        left, _, right, _ = draw.textbbox((0, 0), text, font=font)
        draw.text(((image.width - (right - left)) / 2, y), text, fill=color, font=font)
        y += line_h + gap
    buf = BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


class ChartRenderer:
    """Renders chart specs on a worker pool with a per-chart deadline."""

    def __init__(
        self,
        pool: WorkerPool,
        *,
        width_px: int = 800,
        height_px: int = 400,
        dpi: int = 100,
        timeout_s: float = 10.0,
        render_fn: RenderFn = render_chart_png,
    ) -> None:
        self._pool = pool
        self.width_px = width_px
        self.height_px = height_px
        self.dpi = dpi
        self.timeout_s = timeout_s
        self._render_fn = render_fn

    def _render_within_deadline(self, spec: ChartSpec) -> bytes:
        try:
            return self._pool.run(
                self._render_fn,
                spec,
                self.width_px,
                self.height_px,
                self.dpi,
                timeout_s=self.timeout_s,
            )
        except FutureTimeoutError as exc:
            raise RenderTimeoutError(
                f"chart {spec.title!r} exceeded {self.timeout_s:g}s"
            ) from exc

    def placeholder(self, spec: ChartSpec, reason: str) -> ChartImage:
        return ChartImage(
            title=spec.title,
            image_bytes=placeholder_png(spec.title, reason, self.width_px, self.height_px),
            placeholder=True,
            error=reason,
        )

    def render(self, spec: ChartSpec) -> ChartImage:
        try:
            png = self._render_within_deadline(spec)
        except RenderTimeoutError as exc:
            LOGGER.warning("Chart render timed out: %s", exc)
            return self.placeholder(spec, "Rendering timed out")
        except Exception:
            LOGGER.warning("Chart render failed for %r", spec.title, exc_info=True)
            return self.placeholder(spec, "Rendering failed")
        return ChartImage(title=spec.title, image_bytes=png)

    def render_all(self, specs: Sequence[ChartSpec]) -> list[ChartImage]:
        return [self.render(spec) for spec in specs]
