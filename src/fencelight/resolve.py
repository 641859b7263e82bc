"""Resolution of per-block rendering settings.

Every setting follows the same precedence: a decorator on the fence wins over
the formatter configuration, which wins over the built-in default. The
functions here turn the loosely typed decorator map into plain values so the
backends never look at decorator strings themselves.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

from .config import (
    DEFAULT_HIGHLIGHT_CLASS,
    THEME_STYLE,
    FormatterConfig,
    HtmlLinkedConfig,
    HtmlMultiThemesConfig,
    TerminalConfig,
)
from .decorators import (
    HIGHLIGHT_LINES,
    HIGHLIGHT_LINES_CLASS,
    HIGHLIGHT_LINES_STYLE,
    INCLUDE_HIGHLIGHTS,
    PRE_CLASS,
    THEME,
    DecoratorAttributes,
    decorator_flag,
)
from .exceptions import FormattingError
from .lines import LineSpec, expand_line_specs, parse_line_specs
from .themes import (
    DEFAULT_THEME,
    HIGHLIGHTED_SCOPE,
    Theme,
    ThemeRegistry,
    default_registry,
    resolve_theme_reference,
)


logger = logging.getLogger(__name__)

LIGHT_HIGHLIGHT_BACKGROUND = "#e7eaf0"
DARK_HIGHLIGHT_BACKGROUND = "#3b4252"


@dataclass(frozen=True, slots=True)
class HighlightLineConfig:
    """Lines to emphasise in one code block and how to mark them."""

    ranges: tuple[LineSpec, ...] = ()
    style: str | None = None
    class_name: str | None = None

    @property
    def lines(self) -> tuple[int, ...]:
        return tuple(expand_line_specs(self.ranges))

    def __contains__(self, line: object) -> bool:
        return any(line in spec for spec in self.ranges)


def _default_theme(registry: ThemeRegistry) -> Theme:
    return registry.get(DEFAULT_THEME)


def _configured_theme(config: FormatterConfig, registry: ThemeRegistry) -> Theme | None:
    if isinstance(config, HtmlLinkedConfig):
        return None
    if isinstance(config, HtmlMultiThemesConfig):
        label = config.default_theme
        if label is None and config.themes:
            label = next(iter(config.themes))
        if label is None or label not in config.themes:
            return None
        return resolve_theme_reference(config.themes[label], registry)
    return resolve_theme_reference(config.theme, registry)


def resolve_theme(
    config: FormatterConfig,
    attributes: DecoratorAttributes | None,
    registry: ThemeRegistry | None = None,
) -> Theme | None:
    """Return the effective theme for a block.

    Only the linked formatter resolves to ``None``; every other formatter
    receives the decorator theme, the configured theme, or the default theme.
    """
    if isinstance(config, HtmlLinkedConfig):
        return None
    registry = registry or default_registry

    name = attributes.get(THEME) if attributes else None
    if name:
        theme = resolve_theme_reference(name, registry)
        if theme is not None:
            return theme
        logger.debug("Ignoring unknown theme decorator %r", name)

    return _configured_theme(config, registry) or _default_theme(registry)


def resolve_multi_themes(
    config: HtmlMultiThemesConfig,
    registry: ThemeRegistry | None = None,
) -> dict[str, Theme]:
    """Materialise every theme declared by a multi-theme formatter."""
    if not config.themes:
        raise FormattingError("The html_multi_themes formatter requires at least one theme.")
    if config.default_theme is not None and config.default_theme not in config.themes:
        raise FormattingError(
            f"Default theme '{config.default_theme}' is not one of the configured themes: "
            f"{', '.join(config.themes)}."
        )

    registry = registry or default_registry
    themes: dict[str, Theme] = {}
    for label, reference in config.themes.items():
        theme = resolve_theme_reference(reference, registry)
        if theme is None:
            logger.debug("Theme %r for %r is unknown, using %s", reference, label, DEFAULT_THEME)
            theme = _default_theme(registry)
        themes[label] = theme
    return themes


def resolve_pre_class(
    config: FormatterConfig,
    attributes: DecoratorAttributes | None,
) -> str | None:
    """Return the extra ``<pre>`` classes for a block."""
    if attributes and attributes.get(PRE_CLASS):
        return attributes[PRE_CLASS]
    if isinstance(config, TerminalConfig):
        return None
    return config.pre_class


def resolve_include_highlights(
    config: FormatterConfig,
    attributes: DecoratorAttributes | None,
) -> bool:
    flag = decorator_flag(attributes, INCLUDE_HIGHLIGHTS)
    if flag is not None:
        return flag
    return bool(getattr(config, "include_highlights", False))


def theme_highlight_style(theme: Theme | None) -> str:
    """Return the CSS for emphasised lines derived from ``theme``.

    Themes without a ``highlighted`` scope get a fixed background picked from
    their light or dark appearance.
    """
    if theme is not None:
        style = theme.highlights.get(HIGHLIGHTED_SCOPE)
        if style is not None:
            css = style.css()
            if css:
                return css
    is_light = theme is not None and theme.is_light
    background = LIGHT_HIGHLIGHT_BACKGROUND if is_light else DARK_HIGHLIGHT_BACKGROUND
    return f"background-color: {background};"


def _style_value(value: str | None, theme: Theme | None, *, linked: bool) -> str | None:
    if value is None or not value.strip():
        return None
    if value.strip() == THEME_STYLE:
        return None if linked else theme_highlight_style(theme)
    return value


def resolve_highlight_lines(
    config: FormatterConfig,
    attributes: DecoratorAttributes | None,
    theme: Theme | None,
) -> HighlightLineConfig | None:
    """Return the emphasised lines for a block, or ``None`` when there are none.

    A ``highlight_lines`` decorator replaces the formatter configuration
    entirely. Without ``highlight_lines_style`` the style is derived from the
    theme, except for the linked formatter which only marks lines with a class.
    """
    if isinstance(config, TerminalConfig):
        return None
    linked = isinstance(config, HtmlLinkedConfig)

    if attributes and HIGHLIGHT_LINES in attributes:
        ranges = tuple(parse_line_specs(attributes[HIGHLIGHT_LINES]))
        class_name = attributes.get(HIGHLIGHT_LINES_CLASS) or (
            DEFAULT_HIGHLIGHT_CLASS if linked else None
        )
        style = _style_value(
            attributes.get(HIGHLIGHT_LINES_STYLE, THEME_STYLE), theme, linked=linked
        )
        return HighlightLineConfig(ranges, style, class_name)

    configured = config.highlight_lines
    if configured is None:
        return None
    ranges = tuple(configured.lines)
    if linked:
        return HighlightLineConfig(ranges, None, configured.class_name)
    style = _style_value(configured.style, theme, linked=False)
    return HighlightLineConfig(ranges, style, configured.class_name)


__all__ = [
    "DARK_HIGHLIGHT_BACKGROUND",
    "LIGHT_HIGHLIGHT_BACKGROUND",
    "HighlightLineConfig",
    "resolve_highlight_lines",
    "resolve_include_highlights",
    "resolve_multi_themes",
    "resolve_pre_class",
    "resolve_theme",
    "theme_highlight_style",
]
