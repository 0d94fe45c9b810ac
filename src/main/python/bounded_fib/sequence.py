"""
Seeded Fibonacci sequence generation.

The sequence always starts with the two seed terms ``1, 1``. Generation for a
given ``count`` emits the seeds followed by one term per step from ``2`` up to
``count - 2`` inclusive, so ``generate(10)`` yields
``1, 1, 2, 3, 5, 8, 13, 21, 34``.

Counts are capped at ``MAX_COUNT``. The last term for that count has about
4180 decimal digits, which keeps every term convertible to text under the
interpreter's default int string conversion limit of 4300 digits.
"""

import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional

from bounded_fib.errors import ArithmeticOverflow, CountLimitExceeded

logger = logging.getLogger(__name__)

SEED_TERMS = (1, 1)
ARROW = " -> "
MAX_COUNT = 20000


def _check_non_negative(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{name.capitalize()} must be a non-negative integer")


def _check_width(width: Optional[int]) -> None:
    if width is None:
        return
    if isinstance(width, bool) or not isinstance(width, int) or width <= 0:
        raise ValueError("Width must be a positive integer or None")


def check_max_count(max_count: Any) -> None:
    _check_non_negative("max count", max_count)
    if max_count > MAX_COUNT:
        raise ValueError(f"Max count must not exceed {MAX_COUNT}")


def max_position(max_count: int) -> int:
    """Last position reachable by a sequence of ``max_count``; the seeds are always allowed."""
    return max(max_count - 2, 1)


def _advance(prev: int, curr: int, step: int, width: Optional[int]) -> int:
    nxt = prev + curr
    if width is not None and nxt.bit_length() > width:
        raise ArithmeticOverflow(width, step, nxt)
    return nxt


def _iterate(count: int, width: Optional[int]) -> Iterator[int]:
    prev, curr = SEED_TERMS
    yield prev
    yield curr
    for step in range(2, count - 1):
        nxt = _advance(prev, curr, step, width)
        yield nxt
        prev, curr = curr, nxt


def generate(count: int, width: Optional[int] = None, max_count: int = MAX_COUNT) -> Iterator[int]:
    """
    Generate the seeded sequence bounded by ``count``.

    Args:
        count: Length parameter. Values below 2 produce only the seed terms.
        width: Optional unsigned bit width every term must fit in. ``None``
            means arbitrary precision.
        max_count: Largest accepted ``count``, at most ``MAX_COUNT``.

    Returns:
        A lazy iterator over the terms, seed terms included.

    Raises:
        ValueError: If ``count``, ``width`` or ``max_count`` is invalid.
            Raised immediately, not on first iteration.
        CountLimitExceeded: If ``count`` is above ``max_count``. Also raised
            immediately.
        ArithmeticOverflow: While iterating, if a term exceeds ``width`` bits.
    """
    _check_non_negative("count", count)
    _check_width(width)
    check_max_count(max_count)
    if count > max_count:
        raise CountLimitExceeded("count", count, max_count)
    return _iterate(count, width)


def term(position: int, width: Optional[int] = None, max_count: int = MAX_COUNT) -> int:
    """
    Calculate the term at a 0-based position of the seeded sequence.

    Args:
        position: Position in the sequence; positions 0 and 1 are the seeds.
        width: Optional unsigned bit width, as for :func:`generate`.
        max_count: Positions are limited to those a sequence of this count reaches.

    Returns:
        The term at ``position``.
    """
    _check_non_negative("position", position)
    _check_width(width)
    check_max_count(max_count)
    if position > max_position(max_count):
        raise CountLimitExceeded("position", position, max_position(max_count))

    prev, curr = SEED_TERMS
    if position < 2:
        return SEED_TERMS[position]
    for step in range(2, position + 1):
        prev, curr = curr, _advance(prev, curr, step, width)
    return curr


def render(terms: Iterable[int], separator: str = ARROW) -> str:
    """Join terms into the human-readable arrow format, e.g. ``1 -> 1 -> 2``."""
    return separator.join(str(value) for value in terms)


class SequenceGenerator:
    """
    A configured sequence generator.

    Holds a default ``count``, ``width`` and ``max_count`` so callers such as
    the console and the gRPC service can share one configuration and override
    it per call. Overrides never change the stored defaults.
    """

    def __init__(self, count: int = 10, width: Optional[int] = None, max_count: int = MAX_COUNT):
        """
        Initialize the generator.

        Args:
            count: Default length parameter used when a call does not pass one
            width: Default unsigned bit width, or None for arbitrary precision
            max_count: Largest count accepted, at most ``MAX_COUNT``
        """
        _check_non_negative("count", count)
        _check_width(width)
        check_max_count(max_count)
        if count > max_count:
            raise CountLimitExceeded("count", count, max_count)
        self.count = count
        self.width = width
        self.max_count = max_count

    def generate(self, count: Optional[int] = None, width: Optional[int] = None) -> List[int]:
        """Return the full sequence for ``count`` (or the default count) as a list."""
        count = self.count if count is None else count
        width = self.width if width is None else width
        terms = list(generate(count, width, self.max_count))
        logger.debug(f"Generated {len(terms)} terms for count {count}")
        return terms

    def render(self, count: Optional[int] = None) -> str:
        return render(self.generate(count))

    def term(self, position: int, width: Optional[int] = None) -> int:
        return term(position, self.width if width is None else width, self.max_count)

    def process(self, config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Generate a sequence, applying configuration overrides to this call only.

        Args:
            config: Optional overrides for ``count`` and ``width``

        Returns:
            Dictionary with the count, width, terms and rendered text
        """
        config = config or {}
        count = config.get("count", self.count)
        width = config.get("width", self.width)

        sequence = self.generate(count, width)
        return {
            "count": count,
            "width": width,
            "sequence": sequence,
            "rendered": render(sequence),
        }
