"""Structured helpers for representing inclusive line spans."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator


@dataclass(slots=True, frozen=True)
class LineRange:
    """Inclusive span of 1-based line numbers.

    Unlike a selection, the bounds are never swapped: a range whose ``end``
    precedes its ``start`` is simply empty.
    """

    start: int
    end: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", self._coerce_number(self.start, "start"))
        object.__setattr__(self, "end", self._coerce_number(self.end, "end"))

    @staticmethod
    def _coerce_number(value: Any, label: str) -> int:
        if isinstance(value, bool):
            raise ValueError(f"LineRange {label} must be an integer")
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"LineRange {label} must be an integer") from exc

    def __len__(self) -> int:
        return max(0, self.end - self.start + 1)

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end + 1))

    def __contains__(self, number: object) -> bool:
        return isinstance(number, int) and self.start <= number <= self.end

    @property
    def is_empty(self) -> bool:
        return self.end < self.start

    def clamp(self, *, lower: int = 1, upper: int) -> LineRange:
        """Intersect the span with ``[lower, upper]`` (may become empty)."""

        return LineRange(start=max(lower, self.start), end=min(upper, self.end))


__all__ = ["LineRange"]
