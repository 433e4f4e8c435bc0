from __future__ import annotations

import math

import pytest

from labreport.report.fields import NormalizedField, format_label, normalize, simplify_value


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        ("testType", "Test Type:"),
        ("youngModulus", "Young Modulus:"),
        ("moistureContent", "Moisture Content:"),
        ("CBRValue", "CBR Value:"),
        ("sample_id", "Sample id:"),
        ("liquid-limit", "Liquid limit:"),
        ("Depth", "Depth:"),
        ("sample2Depth", "Sample2 Depth:"),
        ("  spaced   key ", "Spaced key:"),
    ],
)
def test_format_label(key: str, expected: str) -> None:
    assert format_label(key) == expected


def test_format_label_does_not_double_colon() -> None:
    assert format_label("Remarks:") == "Remarks:"


def test_format_label_empty_key() -> None:
    assert format_label("") == ""


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ""),
        ("12.4 %", "12.4 %"),
        (True, "true"),
        (False, "false"),
        (42, "42"),
        (12.0, "12"),
        (12.5, "12.5"),
        (-0.25, "-0.25"),
        (math.nan, "NaN"),
        (math.inf, "Infinity"),
        (-math.inf, "-Infinity"),
        ([1, 2, 3], "1, 2, 3"),
        (["a", None, True], "a, , true"),
        ([{"a": 1}, [2, 3]], '{"a":1}, [2,3]'),
        ({"value": 7.0, "unit": "kN"}, "7"),
        ({"value": {"value": "deep"}}, "deep"),
        ({}, ""),
        ({"min": 1, "max": 2}, '{"min":1,"max":2}'),
        ((1.5, 2), "1.5, 2"),
    ],
)
def test_simplify_value(value: object, expected: str) -> None:
    assert simplify_value(value) == expected


def test_simplify_value_is_idempotent() -> None:
    samples = [
        None,
        "text",
        0,
        3.0,
        1e20,
        [1, {"x": [1, 2]}],
        {"value": [1, 2]},
        {"nested": {"a": None}},
        math.nan,
        object(),
    ]
    for sample in samples:
        once = simplify_value(sample)
        assert isinstance(once, str)
        assert simplify_value(once) == once


def test_simplify_value_never_raises_on_circular_structures() -> None:
    loop: dict[str, object] = {}
    loop["self"] = loop
    assert isinstance(simplify_value(loop), str)
    items: list[object] = []
    items.append(items)
    assert isinstance(simplify_value(items), str)


def test_simplify_value_falls_back_for_unserialisable_objects() -> None:
    class Opaque:
        def __str__(self) -> str:
            return "opaque"

    assert simplify_value(Opaque()) == "opaque"
    assert simplify_value({"payload": Opaque()}) == '{"payload":"opaque"}'


def test_normalize_preserves_insertion_order() -> None:
    fields = normalize({"zeta": 1, "alpha": 2, "middleKey": {"value": 3}})
    assert [f.label for f in fields] == ["Zeta:", "Alpha:", "Middle Key:"]
    assert [f.value for f in fields] == ["1", "2", "3"]
    assert [f.key for f in fields] == ["zeta", "alpha", "middleKey"]


def test_normalize_non_mapping_is_empty() -> None:
    assert normalize(None) == []
    assert normalize(["a", "b"]) == []
    assert normalize("testType") == []


def test_normalized_field_name_drops_colon() -> None:
    assert NormalizedField(label="Moisture Content:", value="12.4").name == "Moisture Content"
