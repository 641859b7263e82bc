"""Primary public API for fencelight."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from fencelight.adapter import AdapterState, FenceAdapter
from fencelight.backends import (
    InlineBackend,
    LinkedBackend,
    MultiThemesBackend,
    TerminalBackend,
    build_backend,
)
from fencelight.config import (
    FormatterConfig,
    HighlightLines,
    HtmlElement,
    HtmlInlineConfig,
    HtmlLinkedConfig,
    HtmlMultiThemesConfig,
    LinkedHighlightLines,
    TerminalConfig,
    load_formatter_config,
)
from fencelight.decorators import parse_decorators
from fencelight.exceptions import (
    ConfigurationError,
    FenceRenderingError,
    FormattingError,
    SourceEncodingError,
    ThemeNotFoundError,
)
from fencelight.extension import FencelightExtension, render_markdown
from fencelight.highlighter import Language, guess_language, highlight_events
from fencelight.lines import LineSpec, format_line_numbers, parse_line_numbers
from fencelight.themes import DEFAULT_THEME, Style, Theme, ThemeRegistry


try:
    __version__ = _pkg_version("fencelight")
except PackageNotFoundError:
    __version__ = "0.0.0"


__all__ = [
    "DEFAULT_THEME",
    "AdapterState",
    "ConfigurationError",
    "FenceAdapter",
    "FenceRenderingError",
    "FencelightExtension",
    "FormatterConfig",
    "FormattingError",
    "HighlightLines",
    "HtmlElement",
    "HtmlInlineConfig",
    "HtmlLinkedConfig",
    "HtmlMultiThemesConfig",
    "InlineBackend",
    "Language",
    "LineSpec",
    "LinkedBackend",
    "LinkedHighlightLines",
    "MultiThemesBackend",
    "SourceEncodingError",
    "Style",
    "TerminalBackend",
    "TerminalConfig",
    "Theme",
    "ThemeNotFoundError",
    "ThemeRegistry",
    "__version__",
    "build_backend",
    "format_line_numbers",
    "guess_language",
    "highlight_events",
    "load_formatter_config",
    "parse_decorators",
    "parse_line_numbers",
    "render_markdown",
]
