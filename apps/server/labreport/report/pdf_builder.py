"""Report PDF generation: charts, layout and canvas rendering in one call."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from ..temp_store import TempFileStore
from .charts import ChartRenderer
from .errors import ReportGenerationError
from .fields import simplify_value
from .layout import layout_report
from .pdf_layout import Page
from .pdf_renderer import render_pdf
from .report_data import ReportData
from .resources import ReportResources
from .variants import LayoutVariant, get_variant

LOGGER = logging.getLogger(__name__)


def build_report_pdf(
    report: ReportData,
    *,
    resources: ReportResources,
    chart_renderer: ChartRenderer | None = None,
    variant: LayoutVariant | None = None,
    page: Page | None = None,
    report_date: date | None = None,
) -> bytes:
    """Render *report* to PDF bytes.

    Chart failures are absorbed by the renderer's placeholders.  Resource
    errors propagate unchanged; anything else unexpected is logged and
    re-raised as ``ReportGenerationError``.
    """
    variant = variant or get_variant(None)
    page = page or Page()
    try:
        charts = []
        if chart_renderer is not None and report.graph_specs:
            charts = chart_renderer.render_all(report.graph_specs[: variant.graph_slots])
        ops = layout_report(
            report,
            charts,
            resources=resources,
            variant=variant,
            page=page,
            report_date=report_date,
        )
        title = simplify_value(report.test_info.get(variant.title_field)) or variant.default_title
        return render_pdf(ops, page, title=title, author=resources.company_name)
    except ReportGenerationError:
        raise
    except Exception as exc:
        LOGGER.error("PDF generation failed.", exc_info=True)
        raise ReportGenerationError("PDF generation failed") from exc


@dataclass
class GeneratedReport:
    pdf_bytes: bytes = field(repr=False)
    path: Path | None = None

    @property
    def pdf_base64(self) -> str:
        return base64.b64encode(self.pdf_bytes).decode("ascii")


class ReportGenerator:
    """Long-lived report service used by the HTTP routes and the CLI."""

    def __init__(
        self,
        resources: ReportResources,
        chart_renderer: ChartRenderer | None,
        *,
        default_variant: str = "classic",
        temp_store: TempFileStore | None = None,
    ) -> None:
        self.resources = resources
        self.chart_renderer = chart_renderer
        self.default_variant = get_variant(default_variant)
        self.temp_store = temp_store

    def generate(
        self,
        report: ReportData,
        *,
        variant: str | None = None,
        report_date: date | None = None,
    ) -> GeneratedReport:
        """Build the PDF and, when a temp store is attached, keep a copy on disk.

        Raises ``ValueError`` for an unknown variant name.
        """
        layout_variant = get_variant(variant) if variant else self.default_variant
        pdf_bytes = build_report_pdf(
            report,
            resources=self.resources,
            chart_renderer=self.chart_renderer,
            variant=layout_variant,
            report_date=report_date,
        )
        path = None
        if self.temp_store is not None:
            try:
                path = self.temp_store.write(pdf_bytes)
            except OSError as exc:
                LOGGER.error("Could not store generated report.", exc_info=True)
                raise ReportGenerationError("Could not store generated report") from exc
        LOGGER.info(
            "Generated report variant=%s bytes=%d path=%s",
            layout_variant.name,
            len(pdf_bytes),
            path,
        )
        return GeneratedReport(pdf_bytes=pdf_bytes, path=path)
