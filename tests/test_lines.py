from __future__ import annotations

from pydantic import ValidationError
import pytest

from fencelight.config import HighlightLines
from fencelight.lines import (
    LineSpec,
    format_line_numbers,
    parse_line_numbers,
    parse_line_specs,
)


def test_parse_line_numbers_expands_ranges() -> None:
    assert parse_line_numbers("1,3-5") == [1, 3, 4, 5]


def test_parse_line_numbers_skips_invalid_segments() -> None:
    assert parse_line_numbers("a,2,5-3,0,4,-1,7-") == [2, 4]


def test_parse_line_numbers_tolerates_spaces() -> None:
    assert parse_line_numbers(" 1 , 3 - 4 ") == [1, 3, 4]


def test_parse_line_numbers_empty() -> None:
    assert parse_line_numbers("") == []
    assert parse_line_numbers(None) == []


def test_format_line_numbers_is_canonical() -> None:
    assert format_line_numbers([5, 1, 3, 4, 4]) == "1,3-5"
    assert format_line_numbers([]) == ""


def test_line_numbers_survive_a_format_round_trip() -> None:
    numbers = parse_line_numbers("2,9-11,4,3")

    assert parse_line_numbers(format_line_numbers(numbers)) == sorted(set(numbers))


def test_line_spec_accepts_ints_and_strings() -> None:
    config = HighlightLines(lines=[1, "3-5"])

    assert config.lines == [LineSpec(start=1, end=1), LineSpec(start=3, end=5)]
    assert config.line_numbers() == [1, 3, 4, 5]
    assert 4 in config.lines[1]
    assert str(config.lines[1]) == "3-5"


def test_line_spec_rejects_reversed_and_zero_ranges() -> None:
    with pytest.raises(ValidationError):
        LineSpec(start=5, end=3)
    with pytest.raises(ValidationError):
        HighlightLines(lines=[0])
    with pytest.raises(ValidationError):
        HighlightLines(lines=["4-2"])


def test_parse_line_specs_preserves_order() -> None:
    specs = parse_line_specs("7,1-2")

    assert [str(spec) for spec in specs] == ["7", "1-2"]


def test_parse_line_numbers_skips_non_ascii_digits() -> None:
    assert parse_line_numbers("1,²,3") == [1, 3]
    assert parse_line_numbers("١-٣,4") == [4]
