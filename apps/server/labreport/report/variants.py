"""Layout variants: one layout engine, several page configurations.

A ``LayoutVariant`` holds every measurement and policy the engine needs, so
adding a page style means adding an entry to ``VARIANTS`` rather than a new
layout code path.
"""

from __future__ import annotations

from dataclasses import dataclass

ROW_MAJOR = "row_major"
SHORTEST_COLUMN = "shortest_column"

FOOTER_SIGNATORY = "signatory"
FOOTER_COMPACT = "compact"

ANCHOR_PAGE = "page"
ANCHOR_CONTENT = "content"


@dataclass(frozen=True, slots=True)
class InfoSection:
    """One titled block of the field grid.

    ``keys=None`` takes every field not claimed by an earlier section;
    otherwise only fields whose key matches one of ``keys`` (compared
    case-insensitively, ignoring separators) in the listed order.
    """

    title: str
    columns: int = 2
    fill: str = ROW_MAJOR
    keys: tuple[str, ...] | None = None


@dataclass(frozen=True, slots=True)
class LayoutVariant:
    name: str
    # header band, measured from the top of the page
    header_top: float = 35.0
    header_height: float = 75.0
    header_rule: bool = False
    title_align: str = "center"
    title_field: str = "testType"
    default_title: str = "Material Test Report"
    # field grid
    info_sections: tuple[InfoSection, ...] = (InfoSection("Test Information"),)
    section_title_height: float = 20.0
    section_spacing: float = 6.0
    row_height: float = 15.0
    label_ratio: float = 0.4
    label_width: float = 80.0
    field_font_size: float = 7.0
    field_spacing: float = 4.0
    value_max_lines: int = 3
    # results box
    results_gap: float = 20.0
    results_title: str = "Test Result"
    results_box_height: float = 300.0
    graph_ratio: float = 0.7
    graph_padding: float = 10.0
    graph_slots: int = 1
    min_row_height: float = 25.0
    max_row_height: float = 30.0
    max_properties: int = 6
    # footer
    footer_style: str = FOOTER_SIGNATORY
    footer_anchor: str = ANCHOR_PAGE
    footer_offset: float = 245.0
    footer_gap: float = 20.0


PROJECT_KEYS = (
    "client",
    "clientName",
    "project",
    "projectName",
    "projectNumber",
    "jobNumber",
    "site",
    "siteName",
    "location",
    "contractor",
    "engineer",
    "reportNumber",
)

CLASSIC = LayoutVariant(name="classic")

BALANCED = LayoutVariant(
    name="balanced",
    header_height=95.0,
    header_rule=True,
    title_align="left",
    info_sections=(
        InfoSection("Project Details", columns=3, fill=SHORTEST_COLUMN, keys=PROJECT_KEYS),
        InfoSection("Sample Information", columns=2, fill=SHORTEST_COLUMN),
    ),
    results_box_height=240.0,
    graph_ratio=0.6,
    max_row_height=28.0,
)

COMPACT = LayoutVariant(
    name="compact",
    header_height=60.0,
    info_sections=(InfoSection("Test Information", columns=2, fill=SHORTEST_COLUMN),),
    value_max_lines=2,
    results_gap=14.0,
    results_box_height=260.0,
    footer_style=FOOTER_COMPACT,
    footer_anchor=ANCHOR_CONTENT,
)

VARIANTS: dict[str, LayoutVariant] = {
    variant.name: variant for variant in (CLASSIC, BALANCED, COMPACT)
}
DEFAULT_VARIANT = CLASSIC.name


def get_variant(name: str | None) -> LayoutVariant:
    """Look up a variant by name; ``None``/empty means the default."""
    key = (name or DEFAULT_VARIANT).strip().lower()
    try:
        return VARIANTS[key]
    except KeyError:
        known = ", ".join(sorted(VARIANTS))
        raise ValueError(f"Unknown layout variant {name!r}; expected one of: {known}") from None
