"""Formatter configuration models.

HtmlInlineConfig

`theme` (`Theme | str | None`)
: Theme used to compute inline colours. Either a registry name such as
  `"monokai"` or a full inline theme definition. Falls back to
  `DEFAULT_THEME` when omitted or unknown.

`pre_class` (`str | None`)
: Extra CSS classes appended to the `<pre>` element.

`italic` (`bool`)
: Emit `font-style: italic` for scopes the theme marks as italic.

`include_highlights` (`bool`)
: Add a `data-highlight` attribute holding the raw scope name to each span.

`highlight_lines` (`HighlightLines | None`)
: Lines emphasised in every code block unless a block sets its own
  `highlight_lines` decorator.

`header` (`HtmlElement | None`)
: Markup emitted before the `<pre>` element (`open_tag`) and after the code
  block (`close_tag`).

HtmlLinkedConfig

`pre_class`, `header`
: Same as above.

`highlight_lines` (`LinkedHighlightLines | None`)
: Lines emphasised with a CSS class (`highlighted` by default); colours are
  left to an external stylesheet.

HtmlMultiThemesConfig

`themes` (`dict[str, Theme | str]`)
: Themes keyed by a label (`light`, `dark`...) exposed as CSS custom properties.

`default_theme` (`str | None`)
: Label of the theme whose colours are also emitted as plain `color` values.

`css_variable_prefix` (`str`)
: Prefix of the generated custom properties.

`pre_class`, `italic`, `include_highlights`, `highlight_lines`, `header`
: Same as for `HtmlInlineConfig`.

TerminalConfig

`theme` (`Theme | str | None`)
: Theme used to compute ANSI colours.
"""

from __future__ import annotations

from collections.abc import Mapping
import json
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
import yaml

from .exceptions import ConfigurationError
from .lines import LineSpec, expand_line_specs
from .themes import ThemeReference


THEME_STYLE = "theme"
DEFAULT_HIGHLIGHT_CLASS = "highlighted"
DEFAULT_CSS_VARIABLE_PREFIX = "--fencelight"


class HtmlElement(BaseModel):
    """Pair of HTML fragments wrapped around a rendered code block."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    open_tag: str
    close_tag: str


class HighlightLines(BaseModel):
    """Emphasised lines for the inline-styled formatters.

    `style` is either the keyword `theme` (derive from the theme), a literal
    CSS declaration string, or `None` for no inline style.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    lines: list[LineSpec] = Field(default_factory=list)
    style: str | None = THEME_STYLE
    class_name: str | None = Field(default=None, alias="class")

    def line_numbers(self) -> list[int]:
        return expand_line_specs(self.lines)


class LinkedHighlightLines(BaseModel):
    """Emphasised lines for the class-linked formatter."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    lines: list[LineSpec] = Field(default_factory=list)
    class_name: str = Field(default=DEFAULT_HIGHLIGHT_CLASS, alias="class")

    def line_numbers(self) -> list[int]:
        return expand_line_specs(self.lines)


class _FormatterBase(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class HtmlInlineConfig(_FormatterBase):
    formatter: Literal["html_inline"] = "html_inline"
    theme: ThemeReference | None = None
    pre_class: str | None = None
    italic: bool = False
    include_highlights: bool = False
    highlight_lines: HighlightLines | None = None
    header: HtmlElement | None = None


class HtmlLinkedConfig(_FormatterBase):
    formatter: Literal["html_linked"] = "html_linked"
    pre_class: str | None = None
    highlight_lines: LinkedHighlightLines | None = None
    header: HtmlElement | None = None


class HtmlMultiThemesConfig(_FormatterBase):
    formatter: Literal["html_multi_themes"] = "html_multi_themes"
    themes: dict[str, ThemeReference] = Field(default_factory=dict)
    default_theme: str | None = None
    css_variable_prefix: str = DEFAULT_CSS_VARIABLE_PREFIX
    pre_class: str | None = None
    italic: bool = False
    include_highlights: bool = False
    highlight_lines: HighlightLines | None = None
    header: HtmlElement | None = None


class TerminalConfig(_FormatterBase):
    formatter: Literal["terminal"] = "terminal"
    theme: ThemeReference | None = None


FormatterConfig = Annotated[
    HtmlInlineConfig | HtmlLinkedConfig | HtmlMultiThemesConfig | TerminalConfig,
    Field(discriminator="formatter"),
]

_FORMATTER_ADAPTER: TypeAdapter[Any] = TypeAdapter(FormatterConfig)
_FORMATTER_NAMES = frozenset({"html_inline", "html_linked", "html_multi_themes", "terminal"})
_CONFIG_TYPES = (HtmlInlineConfig, HtmlLinkedConfig, HtmlMultiThemesConfig, TerminalConfig)


def _read_config_file(path: Path) -> Any:
    try:
        payload = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Unable to read formatter configuration '{path}': {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            return json.loads(payload)
        return yaml.safe_load(payload) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Unable to parse formatter configuration '{path}': {exc}") from exc


def load_formatter_config(source: Any = None) -> FormatterConfig:
    """Build a formatter configuration from a mapping, a name, or a file.

    ``None`` selects the default inline formatter. A string naming a formatter
    (``"html_linked"``) selects it with default options; any other string or
    :class:`~pathlib.Path` is read as a YAML or JSON document.
    """
    if source is None:
        return HtmlInlineConfig()
    if isinstance(source, _CONFIG_TYPES):
        return source

    payload: Any = source
    if isinstance(source, str) and source in _FORMATTER_NAMES:
        payload = {"formatter": source}
    elif isinstance(source, (str, Path)):
        payload = _read_config_file(Path(source))

    if isinstance(payload, Mapping):
        payload = dict(payload)
        payload.setdefault("formatter", "html_inline")

    try:
        return _FORMATTER_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid formatter configuration: {exc}") from exc


__all__ = [
    "DEFAULT_CSS_VARIABLE_PREFIX",
    "DEFAULT_HIGHLIGHT_CLASS",
    "THEME_STYLE",
    "FormatterConfig",
    "HighlightLines",
    "HtmlElement",
    "HtmlInlineConfig",
    "HtmlLinkedConfig",
    "HtmlMultiThemesConfig",
    "LinkedHighlightLines",
    "TerminalConfig",
    "load_formatter_config",
]
