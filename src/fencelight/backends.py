"""Output backends turning highlight events into markup or ANSI text.

All backends consume the same resolved values (language, theme, emphasised
lines, highlight events) and only differ in how a token and a line are
written:

- :class:`InlineBackend` embeds theme colours as ``style`` attributes.
- :class:`LinkedBackend` emits scope class names for an external stylesheet.
- :class:`MultiThemesBackend` emits CSS custom properties for several themes.
- :class:`TerminalBackend` emits ANSI escape sequences and no tags at all.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from html import escape

from rich.color import ColorParseError, ColorSystem
from rich.errors import StyleSyntaxError
from rich.style import Style as AnsiStyle

from .config import (
    FormatterConfig,
    HtmlElement,
    HtmlInlineConfig,
    HtmlLinkedConfig,
    HtmlMultiThemesConfig,
    TerminalConfig,
)
from .exceptions import FormattingError
from .highlighter import HighlightEvent, Language
from .resolve import HighlightLineConfig, resolve_multi_themes
from .themes import NORMAL_SCOPE, Style, Theme, ThemeRegistry


BASE_PRE_CLASS = "fencelight"


def split_lines(body: str) -> list[str]:
    """Split on newlines; a final newline ends the last line instead of opening one."""
    lines = body.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


class Backend:
    """Shared event walk; subclasses decide how tokens and lines are written."""

    def open_pre_tag(self, pre_class: str | None) -> str:
        return ""

    def open_code_tag(self, language: Language) -> str:
        return ""

    def close(self) -> str:
        return ""

    def render_gap(self, text: str) -> str:
        return text

    def render_token(self, text: str, scope: str, language: Language) -> str:
        raise NotImplementedError

    def render_lines(self, body: str, highlight_lines: HighlightLineConfig | None) -> str:
        return body

    def render_source(
        self,
        source: str,
        events: Iterable[HighlightEvent],
        language: Language,
    ) -> str:
        """Render ``source`` token by token, copying unhighlighted gaps through."""
        pieces: list[str] = []
        last_end = 0
        for event in events:
            start = max(event.start, last_end)
            if start > last_end:
                pieces.append(self.render_gap(source[last_end:start]))
            if event.end > start:
                pieces.append(self.render_token(source[start : event.end], event.scope, language))
                last_end = event.end
        if last_end < len(source):
            pieces.append(self.render_gap(source[last_end:]))
        return "".join(pieces)


class HtmlBackend(Backend):
    """Common ``<pre>``/``<code>`` structure and per-line wrappers."""

    def __init__(self, *, header: HtmlElement | None = None) -> None:
        self.header = header

    def pre_style(self) -> str | None:
        return None

    def open_pre_tag(self, pre_class: str | None) -> str:
        classes = " ".join(part for part in (BASE_PRE_CLASS, pre_class) if part)
        style = self.pre_style()
        style_attr = f' style="{escape(style)}"' if style else ""
        header = self.header.open_tag if self.header else ""
        return f'{header}<pre class="{escape(classes)}"{style_attr}>'

    def open_code_tag(self, language: Language) -> str:
        return f'<code class="language-{escape(language.id)}" translate="no" tabindex="0">'

    def close(self) -> str:
        return self.header.close_tag if self.header else ""

    def render_gap(self, text: str) -> str:
        return escape(text)

    def render_token(self, text: str, scope: str, language: Language) -> str:
        if language.is_plaintext:
            return escape(text)
        segments = text.split("\n")
        return "\n".join(
            self.render_span(segment, scope) if segment.strip() else escape(segment)
            for segment in segments
        )

    def render_span(self, text: str, scope: str) -> str:
        raise NotImplementedError

    def render_line(
        self,
        number: int,
        line: str,
        highlight_lines: HighlightLineConfig | None,
    ) -> str:
        classes = "line"
        style_attr = ""
        if highlight_lines is not None and number in highlight_lines:
            if highlight_lines.class_name:
                classes = f"{classes} {highlight_lines.class_name}"
            if highlight_lines.style:
                style_attr = f' style="{escape(highlight_lines.style)}"'
        return f'<div class="{escape(classes)}"{style_attr} data-line="{number}">{line}\n</div>'

    def render_lines(self, body: str, highlight_lines: HighlightLineConfig | None) -> str:
        return "".join(
            self.render_line(number, line, highlight_lines)
            for number, line in enumerate(split_lines(body), start=1)
        )


def _span(text: str, attributes: list[tuple[str, str]]) -> str:
    if not attributes:
        return escape(text)
    rendered = "".join(f' {name}="{escape(value)}"' for name, value in attributes)
    return f"<span{rendered}>{escape(text)}</span>"


class InlineBackend(HtmlBackend):
    def __init__(
        self,
        theme: Theme,
        *,
        italic: bool = False,
        include_highlights: bool = False,
        header: HtmlElement | None = None,
    ) -> None:
        super().__init__(header=header)
        self.theme = theme
        self.italic = italic
        self.include_highlights = include_highlights

    def pre_style(self) -> str | None:
        normal = self.theme.highlights.get(NORMAL_SCOPE)
        if normal is None:
            return None
        return Style(fg=normal.fg, bg=normal.bg).css() or None

    def render_span(self, text: str, scope: str) -> str:
        attributes: list[tuple[str, str]] = []
        if self.include_highlights:
            attributes.append(("data-highlight", scope))
        style = self.theme.get_style(scope)
        css = style.css(italic=self.italic) if style is not None else ""
        if css:
            attributes.append(("style", css))
        return _span(text, attributes)


class LinkedBackend(HtmlBackend):
    def render_span(self, text: str, scope: str) -> str:
        return _span(text, [("class", scope.replace(".", "-"))])


class MultiThemesBackend(HtmlBackend):
    def __init__(
        self,
        themes: Mapping[str, Theme],
        *,
        default_theme: str | None = None,
        css_variable_prefix: str = "--fencelight",
        italic: bool = False,
        include_highlights: bool = False,
        header: HtmlElement | None = None,
    ) -> None:
        super().__init__(header=header)
        self.themes = dict(themes)
        self.default_theme = default_theme
        self.prefix = css_variable_prefix
        self.italic = italic
        self.include_highlights = include_highlights

    def _variables(self, label: str, style: Style) -> list[str]:
        name = f"{self.prefix}-{label}"
        declarations: list[str] = []
        for prop, value in style.declarations(italic=self.italic):
            if prop == "color":
                declarations.append(f"{name}: {value};")
            elif prop == "background-color":
                declarations.append(f"{name}-bg: {value};")
            else:
                declarations.append(f"{name}-{prop}: {value};")
        return declarations

    def _declarations(self, scope: str) -> list[str]:
        declarations: list[str] = []
        if self.default_theme is not None:
            style = self.themes[self.default_theme].get_style(scope)
            if style is not None:
                declarations.extend(
                    f"{prop}: {value};" for prop, value in style.declarations(italic=self.italic)
                )
        for label, theme in self.themes.items():
            style = theme.get_style(scope)
            if style is not None:
                declarations.extend(self._variables(label, style))
        return declarations

    def pre_style(self) -> str | None:
        declarations = self._declarations(NORMAL_SCOPE)
        return " ".join(declarations) or None

    def render_span(self, text: str, scope: str) -> str:
        attributes: list[tuple[str, str]] = []
        if self.include_highlights:
            attributes.append(("data-highlight", scope))
        declarations = self._declarations(scope)
        if declarations:
            attributes.append(("style", " ".join(declarations)))
        return _span(text, attributes)


def _ansi_style(style: Style) -> AnsiStyle:
    options = {
        "bold": style.bold or None,
        "italic": style.italic or None,
        "underline": style.text_decoration.underline is not None or None,
        "strike": style.text_decoration.strikethrough or None,
    }
    try:
        return AnsiStyle(color=style.fg, **options)
    except (ColorParseError, StyleSyntaxError):
        return AnsiStyle(**options)


class TerminalBackend(Backend):
    """ANSI output; there is no ``<pre>``/``<code>`` structure in a terminal."""

    def __init__(self, theme: Theme, *, color_system: ColorSystem = ColorSystem.TRUECOLOR) -> None:
        self.theme = theme
        self.color_system = color_system

    def render_token(self, text: str, scope: str, language: Language) -> str:
        style = self.theme.get_style(scope)
        if style is None:
            return text
        ansi = _ansi_style(style)
        if not ansi:
            return text
        return "\n".join(
            ansi.render(segment, color_system=self.color_system) if segment else segment
            for segment in text.split("\n")
        )


def build_backend(
    config: FormatterConfig,
    *,
    theme: Theme | None,
    include_highlights: bool = False,
    registry: ThemeRegistry | None = None,
) -> Backend:
    """Instantiate the backend matching ``config`` with resolved block settings.

    Raises :class:`FormattingError` when the configuration cannot produce a
    backend, such as a multi-theme setup whose default theme is not declared.
    """
    if isinstance(config, HtmlLinkedConfig):
        return LinkedBackend(header=config.header)
    if isinstance(config, HtmlMultiThemesConfig):
        return MultiThemesBackend(
            resolve_multi_themes(config, registry),
            default_theme=config.default_theme,
            css_variable_prefix=config.css_variable_prefix,
            italic=config.italic,
            include_highlights=include_highlights,
            header=config.header,
        )
    if theme is None:
        raise FormattingError(f"The {config.formatter} formatter requires a theme.")
    if isinstance(config, HtmlInlineConfig):
        return InlineBackend(
            theme,
            italic=config.italic,
            include_highlights=include_highlights,
            header=config.header,
        )
    if isinstance(config, TerminalConfig):
        return TerminalBackend(theme)
    raise FormattingError(f"Unsupported formatter configuration: {type(config).__name__}")


__all__ = [
    "BASE_PRE_CLASS",
    "Backend",
    "HtmlBackend",
    "InlineBackend",
    "LinkedBackend",
    "MultiThemesBackend",
    "TerminalBackend",
    "build_backend",
    "split_lines",
]
