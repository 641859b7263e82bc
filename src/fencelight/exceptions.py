"""Exception hierarchy for the code-fence rendering adapter."""

from __future__ import annotations


class FenceRenderingError(RuntimeError):
    """Base exception for code-fence rendering failures."""


class FormattingError(FenceRenderingError):
    """Raised when a code block cannot be formatted by the selected backend."""


class SourceEncodingError(FormattingError):
    """Raised when text arrives as bytes that are not valid UTF-8."""


class ConfigurationError(FenceRenderingError):
    """Raised when a formatter configuration cannot be loaded or validated."""


class ThemeNotFoundError(LookupError):
    """Raised by the theme registry when a name does not match any theme."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown theme: {name!r}")
        self.name = name


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "ConfigurationError",
    "FenceRenderingError",
    "FormattingError",
    "SourceEncodingError",
    "ThemeNotFoundError",
    "exception_hint",
    "exception_messages",
]
