"""labreport.report – field normalisation, page layout and PDF rendering."""

from .errors import MissingResourceError, RenderTimeoutError, ReportGenerationError
from .fields import NormalizedField, format_label, normalize, simplify_value
from .layout import layout_report
from .pdf_builder import GeneratedReport, ReportGenerator, build_report_pdf
from .report_data import ChartImage, ChartSeries, ChartSpec, ReportData
from .variants import VARIANTS, LayoutVariant, get_variant

__all__ = [
    "VARIANTS",
    "ChartImage",
    "ChartSeries",
    "ChartSpec",
    "GeneratedReport",
    "LayoutVariant",
    "MissingResourceError",
    "NormalizedField",
    "RenderTimeoutError",
    "ReportData",
    "ReportGenerationError",
    "ReportGenerator",
    "build_report_pdf",
    "format_label",
    "get_variant",
    "layout_report",
    "normalize",
    "simplify_value",
]
