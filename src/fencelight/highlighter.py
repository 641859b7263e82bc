"""Pygments integration: language detection and highlight scope events."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from functools import lru_cache
import re

from pygments.lexer import Lexer
from pygments.lexers import ClassNotFound, TextLexer, get_lexer_by_name
from pygments.token import Literal, Text, Token, _TokenType


PLAINTEXT_ID = "plaintext"
_PLAINTEXT_HINTS = frozenset({"", "plaintext", "plain", "text", "txt"})
_SHEBANG = re.compile(r"^#!\s*(?P<path>\S+)(?:\s+(?P<arg>\S+))?")


@dataclass(frozen=True, slots=True)
class Language:
    """Concrete language identifier backed by a Pygments lexer class."""

    id: str
    name: str
    lexer_class: type[Lexer] = field(compare=False, repr=False)

    @property
    def is_plaintext(self) -> bool:
        return self.id == PLAINTEXT_ID

    def lexer(self) -> Lexer:
        """Return a lexer that keeps the source untouched so offsets line up."""
        return self.lexer_class(stripnl=False, stripall=False, ensurenl=False)


PLAINTEXT = Language(PLAINTEXT_ID, "Plain Text", TextLexer)


@dataclass(frozen=True, slots=True)
class HighlightEvent:
    """A highlighted slice ``source[start:end]`` tagged with a scope name."""

    start: int
    end: int
    scope: str


@lru_cache(maxsize=256)
def _language_for_alias(alias: str) -> Language:
    if alias in _PLAINTEXT_HINTS:
        return PLAINTEXT
    try:
        lexer = get_lexer_by_name(alias)
    except ClassNotFound:
        return PLAINTEXT
    if isinstance(lexer, TextLexer):
        return PLAINTEXT
    identifier = lexer.aliases[0] if lexer.aliases else alias
    return Language(identifier, lexer.name, type(lexer))


def _sniff_shebang(source: str) -> str | None:
    first_line = source.split("\n", 1)[0]
    match = _SHEBANG.match(first_line)
    if match is None:
        return None
    interpreter = match.group("path").rsplit("/", 1)[-1]
    if interpreter == "env":
        interpreter = match.group("arg") or ""
    interpreter = interpreter.rstrip("0123456789.")
    return interpreter or None


def guess_language(hint: str | None, source: str = "") -> Language:
    """Resolve a language hint (and optionally a shebang line) to a language.

    Unknown hints fall back to plain text; this function never raises.
    """
    alias = (hint or "").strip().lower()
    if alias.startswith("language-"):
        alias = alias[len("language-") :]

    if alias:
        return _language_for_alias(alias)

    sniffed = _sniff_shebang(source) if source else None
    if sniffed:
        return _language_for_alias(sniffed)
    return PLAINTEXT


@lru_cache(maxsize=512)
def scope_for_token(token_type: _TokenType) -> str | None:
    """Return the dotted scope name for a Pygments token type.

    Plain text and whitespace tokens have no scope: they are rendered as gaps.
    """
    if token_type in Text or token_type is Token:
        return None
    parts = list(token_type)
    if token_type in Literal and len(parts) > 1:
        parts = parts[1:]
    return ".".join(part.lower() for part in parts)


def highlight_events(source: str, language: Language) -> Iterator[HighlightEvent]:
    """Yield ordered, non-overlapping highlight events for ``source``.

    Slices between events (and after the last one) carry no highlight and must
    be copied through verbatim by the caller.
    """
    if language.is_plaintext or not source:
        return

    for index, token_type, value in language.lexer().get_tokens_unprocessed(source):
        if not value:
            continue
        scope = scope_for_token(token_type)
        if scope is None:
            continue
        yield HighlightEvent(index, index + len(value), scope)


__all__ = [
    "PLAINTEXT",
    "PLAINTEXT_ID",
    "HighlightEvent",
    "Language",
    "guess_language",
    "highlight_events",
    "scope_for_token",
]
