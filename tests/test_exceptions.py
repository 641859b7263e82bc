from __future__ import annotations

from fencelight.exceptions import (
    FenceRenderingError,
    FormattingError,
    exception_hint,
    exception_messages,
)


def test_exception_messages_follow_the_cause_chain() -> None:
    try:
        try:
            raise ValueError("bad highlight range\nsecond line")
        except ValueError as exc:
            raise FormattingError("Unable to format block") from exc
    except FormattingError as exc:
        messages = exception_messages(exc)

    assert messages == ["Unable to format block", "bad highlight range"]


def test_exception_hint_returns_the_innermost_message() -> None:
    try:
        raise FenceRenderingError("outer") from FormattingError("inner cause")
    except FenceRenderingError as exc:
        assert exception_hint(exc) == "inner cause"


def test_exception_hint_without_message() -> None:
    assert exception_hint(FenceRenderingError()) is None
