from __future__ import annotations

import logging
from datetime import date
from io import BytesIO
from pathlib import Path

import pytest
from conftest import extract_pdf_text
from pypdf import PdfReader

from labreport.report import pdf_builder
from labreport.report.charts import ChartRenderer
from labreport.report.errors import MissingResourceError, ReportGenerationError
from labreport.report.pdf_builder import ReportGenerator, build_report_pdf
from labreport.report.report_data import ReportData
from labreport.report.resources import (
    ReportResources,
    _register_font,
    load_logo,
    load_resources,
)
from labreport.report.variants import VARIANTS, get_variant
from labreport.temp_store import TempFileStore
from labreport.worker_pool import WorkerPool


@pytest.fixture
def renderer():
    pool = WorkerPool(max_workers=1)
    yield ChartRenderer(pool, width_px=400, height_px=200, dpi=50, timeout_s=30)
    pool.shutdown(wait=False)


def test_water_content_report_pdf(water_content_payload, resources, renderer) -> None:
    report = ReportData.from_dict(water_content_payload)
    pdf = build_report_pdf(
        report,
        resources=resources,
        chart_renderer=renderer,
        report_date=date(2025, 3, 7),
    )
    assert pdf.startswith(b"%PDF-")
    reader = PdfReader(BytesIO(pdf))
    assert len(reader.pages) == 1
    box = reader.pages[0].mediabox
    assert float(box.width) == pytest.approx(595.2756, abs=0.01)
    assert float(box.height) == pytest.approx(841.8898, abs=0.01)
    assert reader.metadata.title == "Water Content"

    text = extract_pdf_text(pdf)
    for expected in (
        "Water Content",
        "07 Mar 2025",
        "Sample Id:",
        "BH01-D2",
        "Test Result",
        "Moisture Content",
        "12.4 %",
        "Moisture by sample",
        "Remarks",
    ):
        assert expected in text


@pytest.mark.parametrize("variant_name", sorted(VARIANTS))
def test_every_variant_renders_single_page(variant_name, water_content_payload, resources) -> None:
    pdf = build_report_pdf(
        ReportData.from_dict(water_content_payload),
        resources=resources,
        variant=get_variant(variant_name),
        report_date=date(2025, 3, 7),
    )
    assert len(PdfReader(BytesIO(pdf)).pages) == 1


def test_empty_report_still_renders(resources) -> None:
    pdf = build_report_pdf(ReportData(), resources=resources, report_date=date(2025, 1, 2))
    text = extract_pdf_text(pdf)
    assert "Material Test Report" in text
    assert "Graph Data" in text


def test_unexpected_failure_is_wrapped(monkeypatch, caplog, resources) -> None:
    def _broken(*args, **kwargs):
        raise RuntimeError("canvas exploded")

    monkeypatch.setattr(pdf_builder, "render_pdf", _broken)
    with caplog.at_level(logging.ERROR, logger="labreport.report.pdf_builder"):
        with pytest.raises(ReportGenerationError) as excinfo:
            build_report_pdf(ReportData(), resources=resources)
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert "PDF generation failed." in caplog.text


def test_unreadable_logo_propagates_as_missing_resource() -> None:
    broken = ReportResources(logo_bytes=b"definitely not a png", logo_size=(10, 10))
    with pytest.raises(MissingResourceError):
        build_report_pdf(ReportData(), resources=broken)


def test_generator_keeps_copy_in_temp_store(tmp_path: Path, water_content_payload, resources) -> None:
    store = TempFileStore(tmp_path / "temp")
    generator = ReportGenerator(resources, None, default_variant="compact", temp_store=store)
    generated = generator.generate(ReportData.from_dict(water_content_payload))
    assert generated.path is not None
    assert generated.path.parent == store.directory
    assert generated.path.name.startswith("test_report_")
    assert generated.path.read_bytes() == generated.pdf_bytes
    assert generated.pdf_base64.startswith("JVBERi0")  # "%PDF-"


def test_generator_rejects_unknown_variant(resources) -> None:
    generator = ReportGenerator(resources, None)
    with pytest.raises(ValueError, match="landscape"):
        generator.generate(ReportData(), variant="landscape")


def test_generator_wraps_temp_store_failures(tmp_path: Path, resources) -> None:
    store = TempFileStore(tmp_path / "temp")
    generator = ReportGenerator(resources, None, temp_store=store)
    store.directory.rmdir()
    (tmp_path / "temp").write_text("now a file", encoding="utf-8")
    with pytest.raises(ReportGenerationError, match="store"):
        generator.generate(ReportData())


def test_load_resources_uses_bundled_logo() -> None:
    res = load_resources()
    assert res.logo_bytes.startswith(b"\x89PNG")
    assert res.logo_size[0] > 0 and res.logo_size[1] > 0
    assert res.font == "Helvetica"


def test_load_logo_missing_file(tmp_path: Path) -> None:
    with pytest.raises(MissingResourceError, match="not found"):
        load_logo(tmp_path / "missing.png")


def test_load_logo_unreadable_file(tmp_path: Path) -> None:
    path = tmp_path / "logo.png"
    path.write_bytes(b"garbage")
    with pytest.raises(MissingResourceError, match="unreadable"):
        load_logo(path)


def test_register_font_missing_file(tmp_path: Path) -> None:
    with pytest.raises(MissingResourceError, match="Font file not found"):
        _register_font("LabReport-Test-Missing", tmp_path / "nope.ttf", "Helvetica")


def test_register_font_without_path_uses_fallback() -> None:
    assert _register_font("LabReport-Unused", None, "Helvetica-Bold") == "Helvetica-Bold"
