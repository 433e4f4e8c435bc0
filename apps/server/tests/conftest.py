"""Shared fixtures and helpers for the labreport test suite."""

from __future__ import annotations

import os
import time
from io import BytesIO
from pathlib import Path
from typing import Any

import pytest
import yaml

os.environ.setdefault("LABREPORT_DISABLE_AUTO_APP", "1")

from labreport.report.resources import ReportResources  # noqa: E402


def wait_until(predicate, timeout_s: float = 2.0, step_s: float = 0.02) -> bool:
    """Poll *predicate* until it returns truthy, or *timeout_s* expires."""
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(step_s)
    return False


# ---------------------------------------------------------------------------
# PDF / image helpers
# ---------------------------------------------------------------------------


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """Extract all text from a PDF byte string using pypdf."""
    from pypdf import PdfReader

    reader = PdfReader(BytesIO(pdf_bytes))
    return "\n".join((page.extract_text() or "") for page in reader.pages)


def png_bytes(width: int, height: int, color: str = "#3366cc") -> bytes:
    from PIL import Image

    buf = BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def write_config(path: Path, payload: dict[str, Any]) -> Path:
    path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def logo_png() -> bytes:
    return png_bytes(160, 60, "#003366")


@pytest.fixture
def chart_png() -> bytes:
    return png_bytes(800, 400)


@pytest.fixture
def resources(logo_png: bytes) -> ReportResources:
    return ReportResources(logo_bytes=logo_png, logo_size=(160, 60))


@pytest.fixture
def water_content_payload() -> dict[str, Any]:
    return {
        "testInfo": {
            "testType": "Water Content",
            "sampleId": "BH01-D2",
            "client": "Thames Civils Ltd",
            "testStandard": "BS 1377-2:2022",
            "dateTested": "2025-03-07",
        },
        "calculatedProperties": {"moistureContent": "12.4 %"},
        "graphSpecs": [
            {
                "title": "Moisture by sample",
                "type": "line",
                "xAxisLabel": "Sample",
                "yAxisLabel": "Moisture (%)",
                "labels": ["1", "2", "3", "4", "5"],
                "datasets": [
                    {
                        "label": "Moisture",
                        "data": [11.9, 12.2, 12.4, 12.8, 12.6],
                        "borderColor": "rgba(54, 162, 235, 1)",
                    }
                ],
            }
        ],
    }


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Config YAML keeping every writable path inside *tmp_path*."""
    return write_config(
        tmp_path / "config.yaml",
        {
            "auth": {
                "db_path": "data/accounts.db",
                "jwt_secret_env": "LABREPORT_TEST_JWT",
                "bcrypt_rounds": 4,
            },
            "temp": {"dir": "temp", "max_age_s": 3600, "sweep_interval_s": 3600},
            "charts": {"width_px": 400, "height_px": 200, "dpi": 50, "timeout_s": 20},
            "extraction": {"api_key_env": "LABREPORT_TEST_OPENAI_KEY"},
        },
    )
