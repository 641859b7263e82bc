"""Decorator mini-language found in fenced code block info strings.

A fence such as::

    ```rust pre_class="a b" highlight_lines="1,3-5" theme=nord include_highlights

carries, after the language, a list of shell-quoted ``key=value`` tokens and
bare flags. :func:`parse_decorators` turns that metadata into a flat mapping
where bare flags are stored with the value ``"true"``.
"""

from __future__ import annotations

from collections.abc import Mapping
import logging
import shlex


logger = logging.getLogger(__name__)

DecoratorAttributes = Mapping[str, str]

PRE_CLASS = "pre_class"
THEME = "theme"
INCLUDE_HIGHLIGHTS = "include_highlights"
HIGHLIGHT_LINES = "highlight_lines"
HIGHLIGHT_LINES_STYLE = "highlight_lines_style"
HIGHLIGHT_LINES_CLASS = "highlight_lines_class"

_FALSE_VALUES = frozenset({"false", "0", "no", "off"})


def _tokenize(metadata: str) -> list[str]:
    lexer = shlex.shlex(metadata, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    return list(lexer)


def parse_decorators(metadata: str | None) -> dict[str, str] | None:
    """Parse decorator metadata into an attribute map.

    Returns ``None`` when the metadata is empty, tokenizes to nothing, or uses
    quoting that cannot be tokenized. Later duplicates overwrite earlier ones.
    """
    if not metadata or not metadata.strip():
        return None

    try:
        tokens = _tokenize(metadata)
    except ValueError as exc:
        logger.debug("Ignoring malformed decorators %r: %s", metadata, exc)
        return None

    attributes: dict[str, str] = {}
    for token in tokens:
        key, separator, value = token.partition("=")
        key = key.strip()
        if not key:
            continue
        attributes[key] = value if separator else "true"

    return attributes or None


def decorator_flag(attributes: DecoratorAttributes | None, name: str) -> bool | None:
    """Return the boolean reading of a flag decorator, or ``None`` when absent."""
    if not attributes or name not in attributes:
        return None
    return attributes[name].strip().lower() not in _FALSE_VALUES


__all__ = [
    "HIGHLIGHT_LINES",
    "HIGHLIGHT_LINES_CLASS",
    "HIGHLIGHT_LINES_STYLE",
    "INCLUDE_HIGHLIGHTS",
    "PRE_CLASS",
    "THEME",
    "DecoratorAttributes",
    "decorator_flag",
    "parse_decorators",
]
