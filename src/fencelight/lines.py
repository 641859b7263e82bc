"""Line numbers and inclusive line ranges used to emphasise code lines."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class LineSpec(BaseModel):
    """Closed interval ``[start, end]`` of 1-based line numbers."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    start: int
    end: int

    @model_validator(mode="before")
    @classmethod
    def _coerce(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("line numbers must be integers")
        if isinstance(value, int):
            return {"start": value, "end": value}
        if isinstance(value, str):
            specs = parse_line_specs(value)
            if len(specs) != 1:
                raise ValueError(f"invalid line range: {value!r}")
            return {"start": specs[0].start, "end": specs[0].end}
        return value

    @model_validator(mode="after")
    def _check_order(self) -> LineSpec:
        if self.start < 1 or self.end < self.start:
            raise ValueError(f"invalid line range: {self.start}-{self.end}")
        return self

    def __contains__(self, line: object) -> bool:
        return isinstance(line, int) and self.start <= line <= self.end

    def lines(self) -> range:
        return range(self.start, self.end + 1)

    def __str__(self) -> str:
        if self.start == self.end:
            return str(self.start)
        return f"{self.start}-{self.end}"


def _parse_number(text: str) -> int | None:
    text = text.strip()
    if not (text.isascii() and text.isdigit()):
        return None
    number = int(text)
    return number if number >= 1 else None


def parse_line_specs(spec: str | None) -> list[LineSpec]:
    """Parse ``"1,3-5"`` into line specs, skipping malformed segments."""
    if not spec:
        return []

    specs: list[LineSpec] = []
    for part in spec.split(","):
        start_text, separator, end_text = part.partition("-")
        start = _parse_number(start_text)
        end = _parse_number(end_text) if separator else start
        if start is None or end is None or end < start:
            continue
        specs.append(LineSpec.model_construct(start=start, end=end))
    return specs


def expand_line_specs(specs: Iterable[LineSpec]) -> list[int]:
    """Return every line number named by ``specs`` in order of appearance."""
    lines: list[int] = []
    for spec in specs:
        lines.extend(spec.lines())
    return lines


def parse_line_numbers(spec: str | None) -> list[int]:
    """Parse a line-range string straight into the ordered line numbers."""
    return expand_line_specs(parse_line_specs(spec))


def format_line_numbers(values: Iterable[int]) -> str:
    """Render line numbers canonically, collapsing consecutive runs to ranges."""
    sorted_vals = sorted(set(values))
    if not sorted_vals:
        return ""
    ranges: list[str] = []
    start = end = sorted_vals[0]
    for num in sorted_vals[1:]:
        if num == end + 1:
            end = num
        else:
            ranges.append(f"{start}-{end}" if start != end else str(start))
            start = end = num
    ranges.append(f"{start}-{end}" if start != end else str(start))
    return ",".join(ranges)


__all__ = [
    "LineSpec",
    "expand_line_specs",
    "format_line_numbers",
    "parse_line_numbers",
    "parse_line_specs",
]
