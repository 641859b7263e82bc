"""Theme models and the registry that resolves theme names.

Themes map highlight scope names (``keyword.declaration``, ``string``...) to
visual styles. They either come from Pygments styles, looked up by name through
:class:`ThemeRegistry`, or are written inline in the formatter configuration.

Two scopes have a special meaning:

``normal``
: Foreground and background of the whole code block.

``highlighted``
: Style applied to emphasised lines when their style is derived from the
  theme.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from functools import lru_cache
import logging
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pygments.styles import get_all_styles, get_style_by_name
from pygments.token import Text, Token
from pygments.util import ClassNotFound

from .exceptions import ThemeNotFoundError
from .highlighter import scope_for_token


logger = logging.getLogger(__name__)

DEFAULT_THEME = "one-dark"
NORMAL_SCOPE = "normal"
HIGHLIGHTED_SCOPE = "highlighted"

_HEX_COLOR = re.compile(r"^#?(?P<hex>[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def normalize_color(value: str | None) -> str | None:
    """Normalise hexadecimal colours to ``#rrggbb``; keep other CSS colours as-is."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    match = _HEX_COLOR.match(value)
    if match is None:
        return value
    digits = match.group("hex").lower()
    if len(digits) == 3:
        digits = "".join(char * 2 for char in digits)
    return f"#{digits}"


class Appearance(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class UnderlineStyle(str, Enum):
    SOLID = "solid"
    WAVY = "wavy"
    DOUBLE = "double"
    DOTTED = "dotted"
    DASHED = "dashed"


class TextDecoration(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    underline: UnderlineStyle | None = None
    strikethrough: bool = False

    def css(self) -> str | None:
        lines: list[str] = []
        if self.underline is not None:
            lines.append("underline")
        if self.strikethrough:
            lines.append("line-through")
        if not lines:
            return None
        if self.underline not in (None, UnderlineStyle.SOLID):
            lines.append(self.underline.value)
        return " ".join(lines)


class Style(BaseModel):
    """Visual style attached to a highlight scope."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    fg: str | None = None
    bg: str | None = None
    bold: bool = False
    italic: bool = False
    text_decoration: TextDecoration = Field(default_factory=TextDecoration)

    @field_validator("fg", "bg")
    @classmethod
    def _normalize(cls, value: str | None) -> str | None:
        return normalize_color(value)

    def declarations(self, *, italic: bool = True) -> list[tuple[str, str]]:
        """Return the CSS ``(property, value)`` pairs describing this style."""
        pairs: list[tuple[str, str]] = []
        if self.fg:
            pairs.append(("color", self.fg))
        if self.bg:
            pairs.append(("background-color", self.bg))
        if self.bold:
            pairs.append(("font-weight", "bold"))
        if self.italic and italic:
            pairs.append(("font-style", "italic"))
        decoration = self.text_decoration.css()
        if decoration:
            pairs.append(("text-decoration", decoration))
        return pairs

    def css(self, *, italic: bool = True) -> str:
        return " ".join(f"{name}: {value};" for name, value in self.declarations(italic=italic))


class Theme(BaseModel):
    """Named collection of scope styles with a light or dark appearance."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    appearance: Appearance = Appearance.DARK
    highlights: dict[str, Style] = Field(default_factory=dict)

    @property
    def is_light(self) -> bool:
        return self.appearance is Appearance.LIGHT or "light" in self.name.lower()

    def get_style(self, scope: str) -> Style | None:
        """Return the style for ``scope``, falling back to its parent scopes."""
        candidate = scope
        while candidate:
            style = self.highlights.get(candidate)
            if style is not None:
                return style
            candidate, _, _ = candidate.rpartition(".")
        return None


ThemeReference = Theme | str


def _luminance(color: str) -> float:
    digits = color.lstrip("#")
    red, green, blue = (int(digits[index : index + 2], 16) / 255 for index in (0, 2, 4))
    return 0.2126 * red + 0.7152 * green + 0.0722 * blue


def _pygments_color(value: str | None) -> str | None:
    if not value or value.startswith("ansi"):
        return None
    return normalize_color(value)


def _style_from_definition(definition: Mapping[str, object]) -> Style:
    return Style(
        fg=_pygments_color(definition.get("color")),  # type: ignore[arg-type]
        bg=_pygments_color(definition.get("bgcolor")),  # type: ignore[arg-type]
        bold=bool(definition.get("bold")),
        italic=bool(definition.get("italic")),
        text_decoration=TextDecoration(
            underline=UnderlineStyle.SOLID if definition.get("underline") else None
        ),
    )


def _key(name: str) -> str:
    return name.strip().lower().replace("-", "_")


@lru_cache(maxsize=1)
def _pygments_style_names() -> dict[str, str]:
    return {_key(name): name for name in get_all_styles()}


@lru_cache(maxsize=64)
def _load_pygments_theme(style_name: str) -> Theme:
    try:
        style_cls = get_style_by_name(style_name)
    except ClassNotFound as exc:
        raise ThemeNotFoundError(style_name) from exc

    highlights: dict[str, Style] = {}
    for token_type, definition in style_cls:
        scope = scope_for_token(token_type)
        if scope is None:
            continue
        style = _style_from_definition(definition)
        if style != Style():
            highlights[scope] = style

    background = _pygments_color(style_cls.background_color)
    text_definition = style_cls.style_for_token(Text)
    foreground = _pygments_color(text_definition.get("color")) or _pygments_color(
        style_cls.style_for_token(Token).get("color")
    )
    highlights[NORMAL_SCOPE] = Style(fg=foreground, bg=background)

    highlight_color = vars(style_cls).get("highlight_color")
    if highlight_color:
        highlights[HIGHLIGHTED_SCOPE] = Style(bg=_pygments_color(highlight_color))

    is_light = background is None or not background.startswith("#")
    if not is_light:
        is_light = _luminance(background) > 0.5
    return Theme(
        name=style_name,
        appearance=Appearance.LIGHT if is_light else Appearance.DARK,
        highlights=highlights,
    )


class ThemeRegistry:
    """Resolve theme names to :class:`Theme` values.

    Names are matched case-insensitively with ``_`` and ``-`` treated alike.
    Additional themes passed at construction take precedence over Pygments
    styles of the same name. The registry is read-only once built.
    """

    def __init__(self, themes: Iterable[Theme] = ()) -> None:
        self._themes = {_key(theme.name): theme for theme in themes}

    def get(self, name: str) -> Theme:
        key = _key(name)
        theme = self._themes.get(key)
        if theme is not None:
            return theme
        style_name = _pygments_style_names().get(key)
        if style_name is None:
            raise ThemeNotFoundError(name)
        return _load_pygments_theme(style_name)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        key = _key(name)
        return key in self._themes or key in _pygments_style_names()

    def names(self) -> list[str]:
        custom = [theme.name for theme in self._themes.values()]
        builtin = [
            name for key, name in _pygments_style_names().items() if key not in self._themes
        ]
        return sorted(custom + builtin)


default_registry = ThemeRegistry()


def resolve_theme_reference(
    reference: ThemeReference | None,
    registry: ThemeRegistry | None = None,
) -> Theme | None:
    """Materialise a theme reference, returning ``None`` for unknown names."""
    if reference is None or isinstance(reference, Theme):
        return reference
    registry = registry or default_registry
    try:
        return registry.get(reference)
    except ThemeNotFoundError:
        logger.debug("Unknown theme %r, falling back", reference)
        return None


__all__ = [
    "DEFAULT_THEME",
    "HIGHLIGHTED_SCOPE",
    "NORMAL_SCOPE",
    "Appearance",
    "Style",
    "TextDecoration",
    "Theme",
    "ThemeReference",
    "ThemeRegistry",
    "UnderlineStyle",
    "default_registry",
    "normalize_color",
    "resolve_theme_reference",
]
