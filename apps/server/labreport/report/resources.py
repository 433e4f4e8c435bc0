"""Static report resources: logo image, fonts and the laboratory's boilerplate."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import Path

from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

from ..config import DEFAULT_CONFIG, DEFAULT_LOGO_PATH, ReportConfig
from .errors import MissingResourceError

LOGGER = logging.getLogger(__name__)

REGULAR_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
CUSTOM_REGULAR_FONT = "LabReport-Regular"
CUSTOM_BOLD_FONT = "LabReport-Bold"

_REPORT_DEFAULTS = DEFAULT_CONFIG["report"]


@dataclass(frozen=True)
class ReportResources:
    logo_bytes: bytes = field(repr=False)
    logo_size: tuple[int, int]
    font: str = REGULAR_FONT
    font_bold: str = BOLD_FONT
    company_name: str = _REPORT_DEFAULTS["company_name"]
    company_address: str = _REPORT_DEFAULTS["company_address"]
    approver: str = _REPORT_DEFAULTS["approver"]
    approver_position: str = _REPORT_DEFAULTS["approver_position"]
    issue_number: str = _REPORT_DEFAULTS["issue_number"]
    comments_heading: str = _REPORT_DEFAULTS["comments_heading"]
    remarks: tuple[str, ...] = tuple(_REPORT_DEFAULTS["remarks"])


def image_size(data: bytes) -> tuple[int, int]:
    """Pixel size of an encoded image; raises ``ValueError`` if unreadable."""
    if not data:
        raise ValueError("empty image data")
    try:
        width, height = ImageReader(BytesIO(data)).getSize()
    except Exception as exc:  # ReportLab wraps PIL errors in its own types
        raise ValueError(f"unreadable image: {exc}") from exc
    if width <= 0 or height <= 0:
        raise ValueError(f"image has no area ({width}x{height})")
    return int(width), int(height)


def load_logo(path: Path) -> tuple[bytes, tuple[int, int]]:
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise MissingResourceError(f"Logo image not found: {path}") from exc
    try:
        size = image_size(data)
    except ValueError as exc:
        raise MissingResourceError(f"Logo image is unreadable: {path}") from exc
    return data, size


def _register_font(name: str, path: Path | None, fallback: str) -> str:
    if path is None:
        return fallback
    if name in pdfmetrics.getRegisteredFontNames():
        return name
    if not path.is_file():
        raise MissingResourceError(f"Font file not found: {path}")
    try:
        pdfmetrics.registerFont(TTFont(name, str(path)))
    except Exception as exc:  # TTFError and friends
        raise MissingResourceError(f"Font file is not a usable TrueType font: {path}") from exc
    LOGGER.info("Registered report font %s from %s", name, path)
    return name


def load_resources(cfg: ReportConfig | None = None) -> ReportResources:
    """Load and validate everything the layout needs before the first request."""
    if cfg is None:
        logo_bytes, logo_size = load_logo(DEFAULT_LOGO_PATH)
        return ReportResources(logo_bytes=logo_bytes, logo_size=logo_size)
    logo_bytes, logo_size = load_logo(cfg.logo_path)
    return ReportResources(
        logo_bytes=logo_bytes,
        logo_size=logo_size,
        font=_register_font(CUSTOM_REGULAR_FONT, cfg.font_regular_path, REGULAR_FONT),
        font_bold=_register_font(CUSTOM_BOLD_FONT, cfg.font_bold_path, BOLD_FONT),
        company_name=cfg.company_name,
        company_address=cfg.company_address,
        approver=cfg.approver,
        approver_position=cfg.approver_position,
        issue_number=cfg.issue_number,
        comments_heading=cfg.comments_heading,
        remarks=tuple(cfg.remarks),
    )
