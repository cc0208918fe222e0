"""Inclusive line ranges used by the range-based corrector.

A Range records where a copy member's lines landed inside its including
file, or which lines of the generated unit a precompiler expansion
occupies. Ranges are immutable; the helpers return updated copies.
"""

from dataclasses import dataclass, replace
from typing import Optional, Union

Number = Union[int, float]


@dataclass(frozen=True)
class Range:
    """Inclusive interval ``[low, high]`` of line numbers.

    ``file_id`` tags ranges that describe an included copy member.
    """

    low: Number
    high: Number
    file_id: Optional[Number] = None


def with_high(rng: Range, high: Number) -> Range:
    return replace(rng, high=high)


def with_file_id(rng: Range, file_id: Number) -> Range:
    return replace(rng, file_id=file_id)


def length(rng: Range) -> Number:
    """Number of lines covered by the range."""
    return rng.high - rng.low + 1


def contains(rng: Range, line: Number) -> bool:
    return rng.low <= line <= rng.high


def is_after(rng: Range, line: Number) -> bool:
    """True when ``line`` is at or after the range's low bound."""
    return line >= rng.low
