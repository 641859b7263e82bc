from __future__ import annotations

from pathlib import Path

import markdown
from markdown import Markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor
import pytest

from fencelight.config import HtmlLinkedConfig
from fencelight.exceptions import FenceRenderingError
from fencelight.extension import FencelightExtension, render_markdown, split_info_string


def test_split_info_string() -> None:
    assert split_info_string("rust") == ("rust", "")
    assert split_info_string(' rust  pre_class="a b" ') == ("rust", 'pre_class="a b"')
    assert split_info_string("theme=nord") == (None, "theme=nord")
    assert split_info_string("") == (None, "")


def test_render_markdown_highlights_fences() -> None:
    html = render_markdown("Intro\n\n```python\ndef f():\n    pass\n```\n\nOutro\n")

    assert "<p>Intro</p>" in html
    assert "<p>Outro</p>" in html
    assert '<pre class="fencelight"' in html
    assert '<code class="language-python" translate="no" tabindex="0">' in html
    assert '<span style="color: #c678dd;">def</span>' in html
    assert html.count("</code></pre>") == 1


def test_render_markdown_applies_decorators() -> None:
    source = '```python pre_class="wide" highlight_lines="2"\na = 1\nb = 2\n```\n'

    html = render_markdown(source, "html_linked")

    assert '<pre class="fencelight wide">' in html
    assert '<div class="line highlighted" data-line="2">' in html


def test_render_markdown_tilde_fence_without_language() -> None:
    html = render_markdown("~~~~\n<raw> & text\n~~~~\n", HtmlLinkedConfig())

    assert '<code class="language-plaintext"' in html
    assert "&lt;raw&gt; &amp; text" in html
    assert "<span" not in html


def test_unclosed_fence_is_left_alone() -> None:
    html = render_markdown("```python\nprint(1)\n", "html_linked")

    assert "fencelight" not in html


def test_closing_fence_must_be_long_enough() -> None:
    html = render_markdown("````text\n```\nstill code\n````\n", "html_linked")

    assert html.count('<div class="line"') == 2
    assert "still code" in html


def test_without_pre_lang_language_comes_from_code_tag() -> None:
    html = render_markdown(
        '```python pre_class="ignored"\npass\n```\n',
        "html_linked",
        pre_lang=False,
    )

    assert '<pre class="fencelight">' in html
    assert '<code class="language-python"' in html


def test_full_info_string_disabled_drops_decorators() -> None:
    html = render_markdown(
        '```python highlight_lines="1"\npass\n```\n',
        "html_linked",
        full_info_string=False,
    )

    assert "highlighted" not in html


def test_header_close_tag_follows_block() -> None:
    formatter = {"header": {"open_tag": "<figure>", "close_tag": "</figure>"}}

    html = render_markdown("```text\nx\n```\n", formatter)

    assert "</code></pre></figure>" in html


def test_extension_registers_with_markdown(tmp_path: Path) -> None:
    config = tmp_path / "fences.yml"
    config.write_text("formatter: html_linked\n", encoding="utf-8")

    md = markdown.Markdown(extensions=[FencelightExtension(formatter=str(config))])
    html = md.convert("```python\npass\n```\n")

    assert '<span class="keyword">pass</span>' in html


class _FailingPreprocessor(Preprocessor):
    def run(self, lines: list[str]) -> list[str]:  # type: ignore[override]
        try:
            int("not a number")
        except ValueError as exc:
            raise RuntimeError("broken preprocessor") from exc
        return lines


class _FailingExtension(Extension):
    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        md.preprocessors.register(_FailingPreprocessor(md), "failing", 5)


def test_render_markdown_wraps_library_errors() -> None:
    with pytest.raises(FenceRenderingError, match="invalid literal for int") as exc_info:
        render_markdown("text\n", extensions=[_FailingExtension()])

    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_render_markdown_keeps_fence_errors() -> None:
    formatter = {"formatter": "html_multi_themes", "themes": {}}

    with pytest.raises(FenceRenderingError, match="at least one theme"):
        render_markdown("```python\npass\n```\n", formatter)
