from __future__ import annotations

# Print-friendly palette matching the laboratory's paper forms.
REPORT_COLORS = {
    "ink": "#000000",
    "text_primary": "#333333",
    "text_heading": "#003366",
    "text_muted": "#666666",
    "border": "#000000",
    "surface": "#ffffff",
    "section_bg": "#e6e6e6",
    "table_header_bg": "#e6e6e6",
    "placeholder_bg": "#f4f4f4",
    "placeholder_border": "#b0b0b0",
    "error": "#c5221f",
}

# Fallback series colours when a chart spec carries no styling hints.
REPORT_PLOT_COLORS = [
    "#36a2eb",
    "#ff6384",
    "#4bc0c0",
    "#ff9f40",
    "#9966ff",
    "#c9cbcf",
]
