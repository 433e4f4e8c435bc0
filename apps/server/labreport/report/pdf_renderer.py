"""Replay layout draw ops onto a ReportLab canvas."""

from __future__ import annotations

from collections.abc import Iterable
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen.canvas import Canvas

from .draw_ops import DrawCircle, DrawImage, DrawLine, DrawOp, DrawRect, DrawText
from .pdf_layout import Page


def _hex(c: str) -> colors.Color:
    return colors.HexColor(c)


def _draw_text(c: Canvas, op: DrawText, page_h: float) -> None:
    if not op.text:
        return
    baseline = page_h - (op.y + pdfmetrics.getAscent(op.font, op.size))
    c.setFillColor(_hex(op.color))
    c.setFont(op.font, op.size)
    if op.align == "center":
        c.drawCentredString(op.x + op.width / 2, baseline, op.text)
    elif op.align == "right":
        c.drawRightString(op.x + op.width, baseline, op.text)
    else:
        c.drawString(op.x, baseline, op.text)


def _draw_rect(c: Canvas, op: DrawRect, page_h: float) -> None:
    if op.fill:
        c.setFillColor(_hex(op.fill))
    if op.stroke:
        c.setStrokeColor(_hex(op.stroke))
        c.setLineWidth(op.line_width)
    c.rect(
        op.x,
        page_h - op.y - op.height,
        op.width,
        op.height,
        stroke=1 if op.stroke else 0,
        fill=1 if op.fill else 0,
    )


def _draw_line(c: Canvas, op: DrawLine, page_h: float) -> None:
    c.setStrokeColor(_hex(op.color))
    c.setLineWidth(op.line_width)
    c.line(op.x1, page_h - op.y1, op.x2, page_h - op.y2)


def _draw_circle(c: Canvas, op: DrawCircle, page_h: float) -> None:
    if op.fill:
        c.setFillColor(_hex(op.fill))
    if op.stroke:
        c.setStrokeColor(_hex(op.stroke))
        c.setLineWidth(op.line_width)
    c.circle(op.cx, page_h - op.cy, op.radius, stroke=1 if op.stroke else 0, fill=1 if op.fill else 0)


def _draw_image(c: Canvas, op: DrawImage, page_h: float) -> None:
    c.drawImage(
        ImageReader(BytesIO(op.image_bytes)),
        op.x,
        page_h - op.y - op.height,
        width=op.width,
        height=op.height,
        mask="auto",
    )


_DISPATCH = {
    DrawText: _draw_text,
    DrawRect: _draw_rect,
    DrawLine: _draw_line,
    DrawCircle: _draw_circle,
    DrawImage: _draw_image,
}


def render_pdf(
    ops: Iterable[DrawOp],
    page: Page | None = None,
    *,
    title: str = "Material Test Report",
    author: str = "",
) -> bytes:
    """Draw *ops* on a single page and return the PDF bytes."""
    page = page or Page()
    buf = BytesIO()
    c = Canvas(buf, pagesize=(page.width, page.height), pageCompression=0)
    c.setTitle(title)
    if author:
        c.setAuthor(author)
    for op in ops:
        c.saveState()
        _DISPATCH[type(op)](c, op, page.height)
        c.restoreState()
    c.showPage()
    c.save()
    return buf.getvalue()
