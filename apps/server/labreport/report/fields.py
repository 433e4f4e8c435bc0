"""Turn schema-free test data into display-ready ``(label, value)`` pairs.

Keys coming back from the extraction model are camelCase identifiers
(``moistureContent``, ``CBRValue``) and values can be any JSON shape.  The
layout engine only ever sees strings, so everything is flattened here.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass

_WORD_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SEPARATOR_RE = re.compile(r"[_\-\s]+")

# Beyond this magnitude float integrality says nothing useful about the input.
_MAX_EXACT_FLOAT = 2**53


@dataclass(frozen=True, slots=True)
class NormalizedField:
    label: str
    value: str
    key: str = ""

    @property
    def name(self) -> str:
        """Label without its trailing colon, as used in the results table."""
        return self.label[:-1] if self.label.endswith(":") else self.label


def format_label(key: object) -> str:
    """``"testType"`` -> ``"Test Type:"``; acronym runs stay together."""
    text = _SEPARATOR_RE.sub(" ", str(key))
    text = _WORD_BOUNDARY_RE.sub(" ", text)
    text = " ".join(text.split())
    if not text:
        return ""
    text = text[0].upper() + text[1:]
    if text.endswith(":"):
        return text
    return f"{text}:"


def _number_text(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < _MAX_EXACT_FLOAT:
        return str(int(value))
    return repr(value)


def _json_text(value: object) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)
    except (TypeError, ValueError):
        # circular containers
        return str(value)


def simplify_value(value: object) -> str:
    """Collapse any JSON-ish value into a single display string.

    Never raises.  Strings pass through unchanged, so applying it twice gives
    the same result as applying it once.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _number_text(value)
    if isinstance(value, (list, tuple)):
        parts = []
        for item in value:
            if isinstance(item, (Mapping, list, tuple)):
                parts.append(_json_text(item))
            else:
                parts.append(simplify_value(item))
        return ", ".join(parts)
    if isinstance(value, Mapping):
        if "value" in value:
            return simplify_value(value["value"])
        if not value:
            return ""
        return _json_text(dict(value))
    try:
        return str(value)
    except Exception:  # noqa: BLE001 - broken __str__ on foreign objects
        return repr(value)


def normalize(mapping: object) -> list[NormalizedField]:
    """Ordered ``NormalizedField`` list for *mapping*; non-mappings give ``[]``."""
    if not isinstance(mapping, Mapping):
        return []
    return [
        NormalizedField(label=format_label(key), value=simplify_value(value), key=str(key))
        for key, value in mapping.items()
    ]
