from __future__ import annotations

import json
from pathlib import Path

from pydantic import ValidationError
import pytest

from fencelight.config import (
    DEFAULT_CSS_VARIABLE_PREFIX,
    HtmlElement,
    HtmlInlineConfig,
    HtmlLinkedConfig,
    HtmlMultiThemesConfig,
    TerminalConfig,
    load_formatter_config,
)
from fencelight.exceptions import ConfigurationError
from fencelight.themes import Theme


def test_default_config_is_inline() -> None:
    config = load_formatter_config()

    assert isinstance(config, HtmlInlineConfig)
    assert config.theme is None
    assert config.highlight_lines is None


def test_formatter_name_selects_defaults() -> None:
    assert isinstance(load_formatter_config("html_linked"), HtmlLinkedConfig)
    assert isinstance(load_formatter_config("terminal"), TerminalConfig)


def test_config_instances_pass_through() -> None:
    config = TerminalConfig(theme="monokai")

    assert load_formatter_config(config) is config


def test_mapping_defaults_to_inline() -> None:
    config = load_formatter_config(
        {"theme": "nord", "highlight_lines": {"lines": [1, "3-4"], "class": "hl"}}
    )

    assert isinstance(config, HtmlInlineConfig)
    assert config.theme == "nord"
    assert config.highlight_lines is not None
    assert config.highlight_lines.line_numbers() == [1, 3, 4]
    assert config.highlight_lines.class_name == "hl"
    assert config.highlight_lines.style == "theme"


def test_inline_theme_definition() -> None:
    config = load_formatter_config(
        {
            "formatter": "terminal",
            "theme": {"name": "tiny", "highlights": {"keyword": {"fg": "#f00", "bold": True}}},
        }
    )

    assert isinstance(config.theme, Theme)
    assert config.theme.highlights["keyword"].fg == "#ff0000"


def test_multi_themes_defaults() -> None:
    config = load_formatter_config(
        {"formatter": "html_multi_themes", "themes": {"light": "default", "dark": "one-dark"}}
    )

    assert isinstance(config, HtmlMultiThemesConfig)
    assert config.css_variable_prefix == DEFAULT_CSS_VARIABLE_PREFIX
    assert list(config.themes) == ["light", "dark"]


def test_yaml_file(tmp_path: Path) -> None:
    path = tmp_path / "fences.yml"
    path.write_text(
        "formatter: html_linked\n"
        "pre_class: code\n"
        "header:\n"
        "  open_tag: <figure>\n"
        "  close_tag: </figure>\n",
        encoding="utf-8",
    )

    config = load_formatter_config(path)

    assert isinstance(config, HtmlLinkedConfig)
    assert config.pre_class == "code"
    assert config.header == HtmlElement(open_tag="<figure>", close_tag="</figure>")


def test_json_file(tmp_path: Path) -> None:
    path = tmp_path / "fences.json"
    path.write_text(json.dumps({"formatter": "terminal", "theme": "monokai"}), encoding="utf-8")

    config = load_formatter_config(str(path))

    assert isinstance(config, TerminalConfig)
    assert config.theme == "monokai"


def test_unknown_option_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="Invalid formatter configuration"):
        load_formatter_config({"formatter": "html_linked", "theme": "nord"})


def test_unknown_formatter_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        load_formatter_config({"formatter": "latex"})


def test_missing_file_is_reported(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Unable to read"):
        load_formatter_config(tmp_path / "missing.yml")


def test_malformed_yaml_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "broken.yml"
    path.write_text("formatter: [html_inline\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Unable to parse"):
        load_formatter_config(path)


def test_configs_are_frozen() -> None:
    config = HtmlInlineConfig()

    with pytest.raises(ValidationError):
        config.italic = True  # type: ignore[misc]
