from __future__ import annotations

import threading
from datetime import date
from io import BytesIO

import pytest
from PIL import Image

from labreport.report.charts import ChartRenderer, css_color, placeholder_png, render_chart_png
from labreport.report.layout import layout_report
from labreport.report.report_data import ChartSeries, ChartSpec, ReportData
from labreport.worker_pool import WorkerPool


def _size(png: bytes) -> tuple[int, int]:
    with Image.open(BytesIO(png)) as image:
        return image.size


def _spec(chart_type: str = "line", **kwargs) -> ChartSpec:
    defaults = dict(
        title="Stress-Strain Curve",
        chart_type=chart_type,
        x_axis_label="Strain (%)",
        y_axis_label="Stress (MPa)",
        labels=["0", "0.5", "1.0", "1.5", "2.0"],
        datasets=[
            ChartSeries(
                label="Specimen A",
                data=[0.0, 120.0, None, 260.0, 255.0],
                border_color="rgba(54, 162, 235, 1)",
            )
        ],
    )
    defaults.update(kwargs)
    return ChartSpec(**defaults)


@pytest.fixture
def pool():
    pool = WorkerPool(max_workers=2)
    yield pool
    pool.shutdown(wait=False)


@pytest.mark.parametrize("chart_type", ["line", "bar", "scatter", "pie"])
def test_render_chart_png_has_requested_size(chart_type: str) -> None:
    png = render_chart_png(_spec(chart_type), 400, 200, 50)
    assert png.startswith(b"\x89PNG")
    assert _size(png) == (400, 200)


def test_render_chart_png_multiple_series_bar() -> None:
    spec = _spec(
        "bar",
        datasets=[
            ChartSeries(label="A", data=[1, 2, 3]),
            ChartSeries(label="B", data=[3, 2, 1], background_color="#ff6384"),
        ],
        labels=["x", "y", "z"],
        begin_at_zero=True,
    )
    assert _size(render_chart_png(spec, 300, 150, 50)) == (300, 150)


def test_render_chart_png_without_numeric_data_raises() -> None:
    spec = _spec(datasets=[ChartSeries(label="empty", data=[None, None])])
    with pytest.raises(ValueError, match="no numeric data"):
        render_chart_png(spec, 200, 100, 50)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("rgba(255, 0, 0, 0.5)", (1.0, 0.0, 0.0, 0.5)),
        ("rgb(0, 255, 0)", (0.0, 1.0, 0.0, 1.0)),
        ("#123456", "#123456"),
        ("steelblue", "steelblue"),
        ("not-a-colour", "#000000"),
        (None, "#000000"),
    ],
)
def test_css_color(value, expected) -> None:
    assert css_color(value, "#000000") == expected


def test_placeholder_png_is_deterministic() -> None:
    first = placeholder_png("Grading curve", "Rendering timed out", 320, 160)
    second = placeholder_png("Grading curve", "Rendering timed out", 320, 160)
    assert first == second
    assert _size(first) == (320, 160)


def test_renderer_returns_image(pool: WorkerPool) -> None:
    renderer = ChartRenderer(pool, width_px=300, height_px=150, dpi=50, timeout_s=30)
    image = renderer.render(_spec())
    assert image.placeholder is False
    assert image.error is None
    assert image.title == "Stress-Strain Curve"
    assert _size(image.image_bytes) == (300, 150)


def test_renderer_timeout_yields_placeholder(pool: WorkerPool) -> None:
    release = threading.Event()

    def _hang(spec, width_px, height_px, dpi):
        release.wait(5.0)
        return b""

    renderer = ChartRenderer(pool, width_px=200, height_px=100, timeout_s=0.05, render_fn=_hang)
    try:
        image = renderer.render(_spec())
    finally:
        release.set()
    assert image.placeholder is True
    assert image.error == "Rendering timed out"
    assert _size(image.image_bytes) == (200, 100)
    assert pool.stats()["timed_out_tasks"] == 1


def test_renderer_failure_yields_placeholder(pool: WorkerPool) -> None:
    def _boom(spec, width_px, height_px, dpi):
        raise RuntimeError("backend exploded")

    renderer = ChartRenderer(pool, width_px=200, height_px=100, render_fn=_boom)
    image = renderer.render(_spec())
    assert image.placeholder is True
    assert image.error == "Rendering failed"


def test_timed_out_chart_still_lays_out_as_image(pool: WorkerPool, resources) -> None:
    release = threading.Event()

    def _hang(spec, width_px, height_px, dpi):
        release.wait(5.0)
        return b""

    renderer = ChartRenderer(pool, width_px=200, height_px=100, timeout_s=0.05, render_fn=_hang)
    try:
        charts = renderer.render_all([_spec()])
    finally:
        release.set()
    ops = layout_report(
        ReportData(test_info={"testType": "Tensile"}),
        charts,
        resources=resources,
        report_date=date(2025, 1, 1),
    )
    graph = [op for op in ops if op.section == "results.graph"]
    assert len(graph) == 1
    assert graph[0].image_bytes == charts[0].image_bytes
