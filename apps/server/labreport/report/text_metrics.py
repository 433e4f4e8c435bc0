"""Font-metric text fitting: measure, wrap and ellipsise strings.

Widths come from ReportLab's font metrics so the layout engine agrees with
what the canvas will actually draw.
"""

from __future__ import annotations

from reportlab.pdfbase.pdfmetrics import stringWidth

ELLIPSIS = "…"


def text_width(text: str, font: str, size: float) -> float:
    return stringWidth(text, font, size)


def line_height(size: float) -> float:
    return size + 2


def _truncate(text: str, font: str, size: float, max_width: float) -> str:
    """Longest prefix of *text* that still fits with ``…`` appended."""
    if text_width(ELLIPSIS, font, size) > max_width:
        return ""
    lo, hi = 0, len(text)
    # binary search on prefix length; width is monotonic in prefix length
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if text_width(text[:mid].rstrip() + ELLIPSIS, font, size) <= max_width:
            lo = mid
        else:
            hi = mid - 1
    return text[:lo].rstrip() + ELLIPSIS


def ellipsize(text: str, font: str, size: float, max_width: float) -> str:
    """Return *text* unchanged if it fits, else the longest prefix + ``…`` that does."""
    if text_width(text, font, size) <= max_width:
        return text
    return _truncate(text, font, size, max_width)


def _break_word(word: str, font: str, size: float, max_width: float) -> list[str]:
    pieces: list[str] = []
    current = ""
    for char in word:
        if current and text_width(current + char, font, size) > max_width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def wrap_text(text: str, font: str, size: float, max_width: float) -> list[str]:
    """Greedy word wrap honouring explicit newlines; over-long words are split."""
    lines: list[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue
        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if text_width(candidate, font, size) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            if text_width(word, font, size) <= max_width:
                current = word
            else:
                *full, current = _break_word(word, font, size, max_width)
                lines.extend(full)
        lines.append(current)
    return lines or [""]


def fit_lines(
    text: str,
    font: str,
    size: float,
    max_width: float,
    max_lines: int,
) -> list[str]:
    """Wrap *text* into at most *max_lines*, ellipsising the last kept line."""
    lines = wrap_text(text, font, size, max_width)
    max_lines = max(1, max_lines)
    if len(lines) <= max_lines:
        return lines
    kept = lines[:max_lines]
    kept[-1] = _truncate(f"{kept[-1]} {lines[max_lines]}".strip(), font, size, max_width)
    return kept
