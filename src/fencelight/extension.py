"""Python-Markdown extension rendering fenced code blocks through :class:`FenceAdapter`.

The preprocessor plays the host renderer: it finds backtick and tilde fences,
splits their info string into a language and decorator metadata, and drives
the three adapter callbacks before stashing the resulting HTML.
"""

from __future__ import annotations

from collections.abc import Iterable
import re
from typing import Any

from markdown import Markdown
from markdown.extensions import Extension
from markdown.preprocessors import Preprocessor

from .adapter import CLASS_ATTRIBUTE, LANG_ATTRIBUTE, META_ATTRIBUTE, FenceAdapter
from .exceptions import FenceRenderingError, exception_hint


FENCE_OPEN = re.compile(r"^(?P<indent> {0,3})(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>.*?)[ \t]*$")


def split_info_string(info: str) -> tuple[str | None, str]:
    """Split a fence info string into its language and decorator metadata.

    A first word containing ``=`` is already a decorator, so the fence has no
    language.
    """
    info = info.strip()
    if not info:
        return None, ""
    parts = info.split(None, 1)
    first = parts[0]
    rest = parts[1].strip() if len(parts) > 1 else ""
    if "=" in first:
        return None, info
    return first, rest


class _FencePreprocessor(Preprocessor):
    """Replace fenced code blocks with stashed, highlighted HTML."""

    def __init__(
        self,
        md: Markdown,
        adapter: FenceAdapter,
        *,
        pre_lang: bool = True,
        full_info_string: bool = True,
    ) -> None:
        super().__init__(md)
        self.adapter = adapter
        self.pre_lang = pre_lang
        self.full_info_string = full_info_string

    def run(self, lines: list[str]) -> list[str]:  # type: ignore[override]
        result: list[str] = []
        index = 0
        length = len(lines)

        while index < length:
            line = lines[index]
            match = FENCE_OPEN.match(line)
            if match is None or self._invalid_info(match):
                result.append(line)
                index += 1
                continue

            closing = self._find_closing(lines, index + 1, match.group("fence"))
            if closing is None:
                result.append(line)
                index += 1
                continue

            indent = len(match.group("indent"))
            code = "".join(
                self._strip_indent(code_line, indent) + "\n"
                for code_line in lines[index + 1 : closing]
            )
            html = self._render_block(match.group("info"), code)
            result.extend(["", self.md.htmlStash.store(html), ""])
            index = closing + 1

        return result

    def _invalid_info(self, match: re.Match[str]) -> bool:
        return match.group("fence").startswith("`") and "`" in match.group("info")

    def _find_closing(self, lines: list[str], start: int, fence: str) -> int | None:
        closing = re.compile(rf"^ {{0,3}}{re.escape(fence[0])}{{{len(fence)},}}[ \t]*$")
        for index in range(start, len(lines)):
            if closing.match(lines[index]):
                return index
        return None

    def _strip_indent(self, line: str, indent: int) -> str:
        removable = len(line) - len(line.lstrip(" "))
        return line[min(indent, removable) :]

    def _render_block(self, info: str, code: str) -> str:
        language, metadata = split_info_string(info)
        meta = metadata if self.full_info_string else ""

        pre_attributes: dict[str, str] = {}
        code_attributes: dict[str, str] = {}
        if self.pre_lang:
            if language:
                pre_attributes[LANG_ATTRIBUTE] = language
            if meta:
                pre_attributes[META_ATTRIBUTE] = meta
        else:
            if language:
                code_attributes[CLASS_ATTRIBUTE] = f"language-{language}"
            if meta:
                code_attributes[META_ATTRIBUTE] = meta

        adapter = self.adapter
        parts = [
            adapter.write_pre_tag(pre_attributes),
            adapter.write_code_tag(code_attributes),
            adapter.write_highlighted(language, code),
        ]
        if adapter.emits_markup:
            parts.append("</code></pre>")
        parts.append(adapter.write_footer())
        return "".join(parts)


class FencelightExtension(Extension):
    """Register the fenced code preprocessor ahead of ``fenced_code``."""

    def __init__(self, **kwargs: object) -> None:
        self.config = {
            "formatter": [
                {},
                "Formatter configuration: a mapping, a formatter name, or a YAML/JSON file.",
            ],
            "pre_lang": [True, "Pass the language on the <pre> callback instead of the <code> one."],
            "full_info_string": [True, "Forward decorator metadata to the adapter."],
        }
        super().__init__(**kwargs)

    def extendMarkdown(self, md: Markdown) -> None:  # type: ignore[override]  # noqa: N802
        adapter = FenceAdapter(self.getConfig("formatter") or None)
        processor = _FencePreprocessor(
            md,
            adapter,
            pre_lang=bool(self.getConfig("pre_lang")),
            full_info_string=bool(self.getConfig("full_info_string")),
        )
        md.preprocessors.register(processor, "fencelight_fences", 26)
        md.registerExtension(self)


def render_markdown(
    source: str,
    formatter: Any = None,
    *,
    extensions: Iterable[str | Extension] = (),
    pre_lang: bool = True,
    full_info_string: bool = True,
) -> str:
    """Convert a Markdown document to HTML with highlighted code fences."""
    fences = FencelightExtension(
        formatter=formatter or {},
        pre_lang=pre_lang,
        full_info_string=full_info_string,
    )
    try:
        processor = Markdown(extensions=[fences, *extensions])
        return processor.convert(source)
    except FenceRenderingError:
        raise
    except Exception as exc:
        raise FenceRenderingError(
            f"Failed to convert Markdown source: {exception_hint(exc)}"
        ) from exc


def makeExtension(  # noqa: N802 - Markdown expects this entry point name
    **kwargs: object,
) -> FencelightExtension:  # pragma: no cover - entry point
    return FencelightExtension(**kwargs)


__all__ = ["FencelightExtension", "makeExtension", "render_markdown", "split_info_string"]
