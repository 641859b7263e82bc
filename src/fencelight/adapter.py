"""Code-fence adapter driven by a host renderer through three callbacks.

For every fenced code block the host calls, in order:

1. :meth:`FenceAdapter.write_pre_tag` with the attributes it resolved for the
   wrapper element (often ``lang`` and ``data-meta``);
2. :meth:`FenceAdapter.write_code_tag` with the attributes of the code
   element (often ``class="language-xyz"``);
3. :meth:`FenceAdapter.write_highlighted` with a language hint and the source.

No single call carries the whole picture, so the adapter keeps the decorator
attributes and the detected language between calls. Each call also works when
the previous ones did not run, e.g. for untagged code.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
import logging
from threading import Lock
from typing import Any

from .backends import Backend, build_backend
from .config import FormatterConfig, TerminalConfig, load_formatter_config
from .decorators import parse_decorators
from .exceptions import SourceEncodingError
from .highlighter import PLAINTEXT, Language, guess_language, highlight_events
from .resolve import (
    resolve_highlight_lines,
    resolve_include_highlights,
    resolve_pre_class,
    resolve_theme,
)
from .themes import Theme, ThemeRegistry, default_registry


logger = logging.getLogger(__name__)

META_ATTRIBUTE = "data-meta"
LANG_ATTRIBUTE = "lang"
CLASS_ATTRIBUTE = "class"
LANGUAGE_CLASS_PREFIX = "language-"

Attributes = Mapping[str, str | bytes]


@dataclass(slots=True)
class AdapterState:
    """Context accumulated for the code block currently being rendered."""

    attributes: dict[str, str] | None = None
    language: Language | None = None


def _decode(value: str | bytes, what: str) -> str:
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SourceEncodingError(f"The {what} is not valid UTF-8: {exc}") from exc
    return value


def _decode_attributes(attributes: Attributes | None) -> dict[str, str]:
    if not attributes:
        return {}
    return {key: _decode(value, f"'{key}' attribute") for key, value in attributes.items()}


def _language_from_attributes(attributes: Mapping[str, str]) -> Language | None:
    lang = attributes.get(LANG_ATTRIBUTE)
    if lang:
        return guess_language(lang)
    for cls in attributes.get(CLASS_ATTRIBUTE, "").split():
        if cls.startswith(LANGUAGE_CLASS_PREFIX):
            return guess_language(cls[len(LANGUAGE_CLASS_PREFIX) :])
    return None


class FenceAdapter:
    """Render fenced code blocks with the configured backend.

    One adapter is meant to be shared for the rendering of a whole document.
    The per-block state is guarded by a lock so concurrent callers never observe
    half-updated state, but blocks are expected to be rendered one at a time.
    """

    def __init__(
        self,
        formatter: FormatterConfig | Mapping[str, Any] | str | None = None,
        *,
        registry: ThemeRegistry | None = None,
    ) -> None:
        self.config: FormatterConfig = load_formatter_config(formatter)
        self.registry = registry or default_registry
        self._state = AdapterState()
        self._lock = Lock()

    @property
    def state(self) -> AdapterState:
        """Return a snapshot of the current block state."""
        with self._lock:
            return replace(self._state)

    @property
    def emits_markup(self) -> bool:
        """Whether the output is HTML that the host must close with ``</code></pre>``."""
        return not isinstance(self.config, TerminalConfig)

    def _backend(
        self,
        attributes: Mapping[str, str] | None,
        theme: Theme | None = None,
    ) -> Backend:
        if theme is None:
            theme = resolve_theme(self.config, attributes, self.registry)
        return build_backend(
            self.config,
            theme=theme,
            include_highlights=resolve_include_highlights(self.config, attributes),
            registry=self.registry,
        )

    def write_pre_tag(self, attributes: Attributes | None = None) -> str:
        """Start a new block and return the opening wrapper markup."""
        values = _decode_attributes(attributes)
        decorators = parse_decorators(values.get(META_ATTRIBUTE))
        lang = values.get(LANG_ATTRIBUTE)
        language = guess_language(lang) if lang else None

        with self._lock:
            self._state = AdapterState(attributes=decorators, language=language)

        backend = self._backend(decorators)
        return backend.open_pre_tag(resolve_pre_class(self.config, decorators))

    def write_code_tag(self, attributes: Attributes | None = None) -> str:
        """Return the opening code element tagged with the effective language."""
        values = _decode_attributes(attributes)
        decorators = parse_decorators(values.get(META_ATTRIBUTE))
        derived = _language_from_attributes(values)

        with self._lock:
            if decorators is not None:
                self._state.attributes = decorators
            if self._state.language is None and derived is not None:
                self._state.language = derived
            language = self._state.language or PLAINTEXT
            decorators = self._state.attributes

        backend = self._backend(decorators)
        return backend.open_code_tag(language)

    def write_highlighted(self, language: str | None, source: str | bytes) -> str:
        """Return the highlighted, line-wrapped body of the current block.

        This ends the block: the stored state is cleared afterwards.
        """
        text = _decode(source, "source")

        with self._lock:
            stored_language = self._state.language
            decorators = self._state.attributes

        effective = stored_language or guess_language(language, text)
        theme = resolve_theme(self.config, decorators, self.registry)
        backend = self._backend(decorators, theme)

        body = backend.render_source(text, highlight_events(text, effective), effective)
        highlight_lines = resolve_highlight_lines(self.config, decorators, theme)
        output = backend.render_lines(body, highlight_lines)

        with self._lock:
            self._state = AdapterState()
        logger.debug("Rendered %d characters of %s", len(text), effective.id)
        return output

    def write_footer(self) -> str:
        """Return the markup closing the configured header, if any."""
        return self._backend(None).close()


__all__ = [
    "CLASS_ATTRIBUTE",
    "LANG_ATTRIBUTE",
    "META_ATTRIBUTE",
    "AdapterState",
    "FenceAdapter",
]
