"""Report input model.

``ReportData.from_dict`` accepts the camelCase payload shared by the HTTP API,
the CLI and the extraction service, and degrades malformed optional sections
to empty values instead of raising.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

LOGGER = logging.getLogger(__name__)

CHART_TYPES = ("line", "bar", "pie", "scatter")
DEFAULT_CHART_TITLE = "Chart"


def _as_float_or_none(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        out = float(value)
    elif isinstance(value, str):
        try:
            out = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return out if math.isfinite(out) else None


def _as_mapping(value: object, section: str) -> dict[str, Any]:
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return {str(k): v for k, v in value.items()}
    LOGGER.debug("Ignoring %s: expected an object, got %s", section, type(value).__name__)
    return {}


def _as_text(value: object, default: str = "") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _as_color(value: object) -> str | None:
    # Chart.js allows a per-point colour list; the first entry stands for the series.
    if isinstance(value, list):
        value = value[0] if value else None
    if not isinstance(value, str):
        return None
    return value.strip() or None


@dataclass
class ChartSeries:
    label: str = ""
    data: list[float | None] = field(default_factory=list)
    border_color: str | None = None
    background_color: str | None = None
    point_color: str | None = None

    @classmethod
    def from_dict(cls, raw: object) -> ChartSeries | None:
        if not isinstance(raw, Mapping):
            return None
        points = raw.get("data")
        if not isinstance(points, list):
            points = []
        data = [_as_float_or_none(point) for point in points]
        dropped = sum(1 for point, value in zip(points, data) if value is None and point is not None)
        if dropped:
            LOGGER.debug("Series %r: %d non-numeric point(s) left as gaps", raw.get("label"), dropped)
        return cls(
            label=_as_text(raw.get("label")),
            data=data,
            border_color=_as_color(raw.get("borderColor")),
            background_color=_as_color(raw.get("backgroundColor")),
            point_color=_as_color(raw.get("pointBackgroundColor")),
        )

    def numeric_points(self) -> int:
        return sum(1 for value in self.data if value is not None)


@dataclass
class ChartSpec:
    title: str = DEFAULT_CHART_TITLE
    chart_type: str = "line"
    x_axis_label: str = ""
    y_axis_label: str = ""
    labels: list[str] = field(default_factory=list)
    datasets: list[ChartSeries] = field(default_factory=list)
    begin_at_zero: bool = False

    @classmethod
    def from_dict(cls, raw: object) -> ChartSpec | None:
        if not isinstance(raw, Mapping):
            return None
        chart_type = _as_text(raw.get("type"), "line").lower()
        if chart_type not in CHART_TYPES:
            LOGGER.debug("Unknown chart type %r, drawing as line", chart_type)
            chart_type = "line"
        labels = raw.get("labels")
        datasets_raw = raw.get("datasets")
        datasets: list[ChartSeries] = []
        if isinstance(datasets_raw, list):
            for item in datasets_raw:
                series = ChartSeries.from_dict(item)
                if series is not None:
                    datasets.append(series)
        return cls(
            title=_as_text(raw.get("title"), DEFAULT_CHART_TITLE),
            chart_type=chart_type,
            x_axis_label=_as_text(raw.get("xAxisLabel")),
            y_axis_label=_as_text(raw.get("yAxisLabel")),
            labels=[_as_text(label) for label in labels] if isinstance(labels, list) else [],
            datasets=datasets,
            begin_at_zero=bool(raw.get("beginAtZero", False)),
        )

    def has_data(self) -> bool:
        return any(series.numeric_points() for series in self.datasets)


@dataclass
class ChartImage:
    """Rendered chart PNG; ``placeholder`` marks a substitute for a failed render."""

    title: str
    image_bytes: bytes = field(repr=False)
    placeholder: bool = False
    error: str | None = None


@dataclass
class ReportData:
    test_info: dict[str, Any] = field(default_factory=dict)
    calculated_properties: dict[str, Any] = field(default_factory=dict)
    graph_specs: list[ChartSpec] = field(default_factory=list)
    analysis: str | None = None
    analyzed_data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: object, graph_specs: object = None) -> ReportData:
        """Build from the wire payload.

        *graph_specs*, when given, overrides any ``graphSpecs``/``graphData``
        list embedded in *payload*.
        """
        if not isinstance(payload, Mapping):
            LOGGER.debug("Report payload is %s, not an object", type(payload).__name__)
            payload = {}
        specs_raw = graph_specs
        if specs_raw is None:
            specs_raw = payload.get("graphSpecs", payload.get("graphData"))
        specs: list[ChartSpec] = []
        if isinstance(specs_raw, list):
            for item in specs_raw:
                spec = ChartSpec.from_dict(item)
                if spec is not None:
                    specs.append(spec)
        analysis = payload.get("analysis")
        return cls(
            test_info=_as_mapping(payload.get("testInfo"), "testInfo"),
            calculated_properties=_as_mapping(
                payload.get("calculatedProperties"), "calculatedProperties"
            ),
            graph_specs=specs,
            analysis=str(analysis) if analysis is not None else None,
            analyzed_data=_as_mapping(payload.get("analyzedData"), "analyzedData"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Wire form of the data as returned to API clients."""
        return {
            "testInfo": dict(self.test_info),
            "calculatedProperties": dict(self.calculated_properties),
            "analyzedData": dict(self.analyzed_data),
            "analysis": self.analysis,
            "graphData": [
                {
                    "title": spec.title,
                    "type": spec.chart_type,
                    "xAxisLabel": spec.x_axis_label,
                    "yAxisLabel": spec.y_axis_label,
                    "labels": list(spec.labels),
                    "beginAtZero": spec.begin_at_zero,
                    "datasets": [
                        {
                            "label": series.label,
                            "data": list(series.data),
                            "borderColor": series.border_color,
                            "backgroundColor": series.background_color,
                            "pointBackgroundColor": series.point_color,
                        }
                        for series in spec.datasets
                    ],
                }
                for spec in self.graph_specs
            ],
        }
