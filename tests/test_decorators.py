from __future__ import annotations

import shlex

from fencelight.decorators import decorator_flag, parse_decorators


def test_parse_decorators_reads_values_and_flags() -> None:
    attributes = parse_decorators(
        'pre_class="a b" highlight_lines="1,3-5" theme=nord include_highlights'
    )

    assert attributes == {
        "pre_class": "a b",
        "highlight_lines": "1,3-5",
        "theme": "nord",
        "include_highlights": "true",
    }


def test_parse_decorators_empty_metadata_is_none() -> None:
    assert parse_decorators(None) is None
    assert parse_decorators("") is None
    assert parse_decorators("   ") is None


def test_parse_decorators_unbalanced_quote_is_none() -> None:
    assert parse_decorators('pre_class="a b') is None


def test_parse_decorators_last_duplicate_wins() -> None:
    assert parse_decorators("theme=nord theme=monokai") == {"theme": "monokai"}


def test_parse_decorators_keeps_empty_values() -> None:
    assert parse_decorators('highlight_lines_style=""') == {"highlight_lines_style": ""}


def test_parse_decorators_keeps_hash_characters() -> None:
    attributes = parse_decorators('highlight_lines_style="color: #ff0000;"')

    assert attributes == {"highlight_lines_style": "color: #ff0000;"}


def test_parse_decorators_is_stable_when_reserialized() -> None:
    first = parse_decorators('pre_class="x y" theme=dracula highlight_lines=2-4')
    assert first is not None

    serialized = " ".join(f"{key}={shlex.quote(value)}" for key, value in first.items())

    assert parse_decorators(serialized) == first


def test_decorator_flag_reads_false_values() -> None:
    assert decorator_flag({"include_highlights": "true"}, "include_highlights") is True
    assert decorator_flag({"include_highlights": "Off"}, "include_highlights") is False
    assert decorator_flag({"include_highlights": "0"}, "include_highlights") is False
    assert decorator_flag({}, "include_highlights") is None
    assert decorator_flag(None, "include_highlights") is None


def test_parse_decorators_drops_empty_keys() -> None:
    assert parse_decorators("=foo theme=nord") == {"theme": "nord"}
    assert parse_decorators("=foo") is None
