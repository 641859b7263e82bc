from __future__ import annotations

from pygments.token import Keyword, Literal, Name, String, Text, Token

from fencelight.highlighter import (
    PLAINTEXT,
    guess_language,
    highlight_events,
    scope_for_token,
)


def test_guess_language_resolves_aliases() -> None:
    assert guess_language("rs").id == "rust"
    assert guess_language("Python").id == "python"
    assert guess_language("language-python").id == "python"


def test_guess_language_falls_back_to_plaintext() -> None:
    assert guess_language("definitely-not-a-language") is PLAINTEXT
    assert guess_language(None) is PLAINTEXT
    assert guess_language("text") is PLAINTEXT
    assert guess_language("") is PLAINTEXT


def test_guess_language_sniffs_shebang() -> None:
    language = guess_language(None, "#!/usr/bin/env python3\nprint('hi')\n")

    assert language.id == "python"


def test_explicit_hint_beats_shebang() -> None:
    assert guess_language("bash", "#!/usr/bin/env python3\n").id == "bash"


def test_scope_for_token_drops_literal_level() -> None:
    assert scope_for_token(String.Double) == "string.double"
    assert scope_for_token(Literal) == "literal"
    assert scope_for_token(Keyword) == "keyword"
    assert scope_for_token(Name.Function) == "name.function"


def test_scope_for_token_ignores_text() -> None:
    assert scope_for_token(Text) is None
    assert scope_for_token(Text.Whitespace) is None
    assert scope_for_token(Token) is None


def test_highlight_events_are_ordered_and_in_bounds() -> None:
    source = "def greet(name):\n    return f'hello {name}'\n"
    events = list(highlight_events(source, guess_language("python")))

    assert events
    previous_end = 0
    for event in events:
        assert previous_end <= event.start < event.end <= len(source)
        assert source[event.start : event.end].strip()
        previous_end = event.end


def test_highlight_events_tag_keywords() -> None:
    source = "def f():\n    pass\n"
    events = list(highlight_events(source, guess_language("python")))

    assert events[0].start == 0
    assert events[0].end == 3
    assert events[0].scope == "keyword"


def test_highlight_events_plaintext_and_empty_source() -> None:
    assert list(highlight_events("hello", PLAINTEXT)) == []
    assert list(highlight_events("", guess_language("python"))) == []
