from __future__ import annotations

import pytest

from labreport.report.pdf_layout import Box, LayoutCursor, Page, fit_rect_preserve_aspect
from labreport.report.text_metrics import (
    ELLIPSIS,
    ellipsize,
    fit_lines,
    line_height,
    text_width,
    wrap_text,
)

FONT = "Helvetica"


def test_ellipsize_keeps_fitting_text() -> None:
    assert ellipsize("Short", FONT, 9, 200) == "Short"


def test_ellipsize_truncates_to_width() -> None:
    text = "A very long description of the sample as received at the laboratory"
    out = ellipsize(text, FONT, 9, 80)
    assert out.endswith(ELLIPSIS)
    assert text_width(out, FONT, 9) <= 80
    assert text.startswith(out[:-1].rstrip())


def test_ellipsize_narrower_than_ellipsis() -> None:
    assert ellipsize("anything", FONT, 9, 1) == ""


def test_wrap_text_respects_width() -> None:
    text = "Specimen failed in shear at the upper third of the sample " * 4
    lines = wrap_text(text, FONT, 8, 120)
    assert len(lines) > 1
    assert all(text_width(line, FONT, 8) <= 120 for line in lines)
    assert " ".join(lines).split() == text.split()


def test_wrap_text_honours_newlines() -> None:
    assert wrap_text("Calculated\nproperties\npart", FONT, 16, 500) == [
        "Calculated",
        "properties",
        "part",
    ]


def test_wrap_text_splits_overlong_words() -> None:
    lines = wrap_text("X" * 60, FONT, 10, 50)
    assert len(lines) > 1
    assert "".join(lines) == "X" * 60
    assert all(text_width(line, FONT, 10) <= 50 for line in lines)


def test_wrap_text_empty() -> None:
    assert wrap_text("", FONT, 9, 100) == [""]


def test_fit_lines_caps_and_marks_truncation() -> None:
    text = "word " * 100
    lines = fit_lines(text, FONT, 7, 90, 3)
    assert len(lines) == 3
    assert lines[-1].endswith(ELLIPSIS)
    assert lines[-1].count(ELLIPSIS) == 1
    assert all(text_width(line, FONT, 7) <= 90 for line in lines)


def test_fit_lines_untouched_when_short() -> None:
    assert fit_lines("two words", FONT, 7, 90, 3) == ["two words"]


def test_line_height() -> None:
    assert line_height(7) == 9


def test_page_content_area() -> None:
    page = Page()
    assert page.content_width == pytest.approx(page.width - 50)
    assert page.content_right == pytest.approx(page.width - 25)
    assert page.content_bottom == pytest.approx(page.height - 25)


def test_box_splits() -> None:
    left, right = Box(10, 20, 100, 50).split_ratio(0.7)
    assert left.width == pytest.approx(70)
    assert right.x == pytest.approx(80)
    assert right.right == pytest.approx(110)
    cols = Box(0, 0, 90, 10).split_columns(3)
    assert [c.x for c in cols] == [0, 30, 60]
    assert Box(0, 0, 100, 100).contains(Box(10, 10, 80, 80).inset(5))
    assert not Box(0, 0, 100, 100).contains(Box(50, 50, 60, 10))


def test_cursor_is_immutable() -> None:
    cursor = LayoutCursor(10)
    moved = cursor.advance(5)
    assert cursor.y == 10
    assert moved.y == 15


@pytest.mark.parametrize(
    ("src", "box", "expected"),
    [
        ((200, 100), (0, 0, 100, 100), (0, 25, 100, 50)),
        ((100, 200), (0, 0, 100, 100), (25, 0, 50, 100)),
        ((0, 10), (5, 5, 20, 20), (5, 5, 20, 20)),
    ],
)
def test_fit_rect_preserve_aspect(src, box, expected) -> None:
    assert fit_rect_preserve_aspect(*src, *box) == pytest.approx(expected)
