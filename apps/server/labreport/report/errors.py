"""Exceptions raised while turning report data into a PDF."""

from __future__ import annotations


class ReportGenerationError(RuntimeError):
    """Report generation failed; the request cannot produce a PDF."""


class MissingResourceError(ReportGenerationError):
    """A required static resource (logo, font file) is missing or unreadable."""


class RenderTimeoutError(TimeoutError):
    """A chart did not finish rendering within its deadline."""
