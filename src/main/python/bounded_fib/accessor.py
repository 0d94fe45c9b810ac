"""
Bounds-checked access into a fixed collection.

An access runs through parse, validate and retrieve steps exactly once. A
failure at any step is reported as a typed error rather than an unchecked
index.
"""

import enum
import logging
import re
from dataclasses import dataclass
from typing import Any, Generic, Iterable, Optional, Tuple, TypeVar, Union

from bounded_fib.errors import BoundedFibError, IndexOutOfRange, ParseError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_COLLECTION = (1, 2, 3, 4, 5)

_INDEX_PATTERN = re.compile(r"\+?[0-9]+", re.ASCII)


class AccessState(enum.Enum):
    AWAITING_INPUT = "awaiting_input"
    PARSED = "parsed"
    VALIDATED = "validated"
    RESOLVED = "resolved"
    REJECTED = "rejected"


@dataclass(frozen=True)
class AccessResult(Generic[T]):
    """Outcome of a single access attempt. ``state`` is RESOLVED or REJECTED."""

    state: AccessState
    raw: Any
    index: Optional[int] = None
    value: Optional[T] = None
    error: Optional[BoundedFibError] = None

    @property
    def ok(self) -> bool:
        return self.state is AccessState.RESOLVED


def parse_index(raw: Union[str, int]) -> int:
    """
    Parse index text into a non-negative integer.

    Surrounding whitespace is ignored. Only ASCII digits with an optional
    leading ``+`` are accepted.

    Args:
        raw: The index text, or an already parsed non-negative int

    Returns:
        The parsed index

    Raises:
        ParseError: If ``raw`` is not a valid non-negative integer literal
    """
    if isinstance(raw, int) and not isinstance(raw, bool):
        if raw < 0:
            raise ParseError(str(raw))
        return raw
    if not isinstance(raw, str):
        raise ParseError(repr(raw), f"Index must be text, got {type(raw).__name__}")

    text = raw.strip()
    if not _INDEX_PATTERN.fullmatch(text):
        raise ParseError(raw)
    try:
        return int(text)
    except ValueError:
        # literal longer than the interpreter's int conversion limit
        raise ParseError(raw[:32] + "...", "Index entered is too large to parse")


class BoundedIndexAccessor(Generic[T]):
    """
    Validated indexing into an immutable collection.
    """

    def __init__(self, collection: Iterable[T] = DEFAULT_COLLECTION):
        self.collection: Tuple[T, ...] = tuple(collection)

    def __len__(self) -> int:
        return len(self.collection)

    def validate(self, index: int) -> int:
        if not 0 <= index < len(self.collection):
            raise IndexOutOfRange(index, len(self.collection))
        return index

    def access(self, raw_index: Union[str, int]) -> T:
        """
        Parse, validate and retrieve.

        Args:
            raw_index: Index text as entered by the user

        Returns:
            The element at the parsed index

        Raises:
            ParseError: If the text is not a non-negative integer
            IndexOutOfRange: If the index is not below the collection length
        """
        index = self.validate(parse_index(raw_index))
        value = self.collection[index]
        logger.debug(f"Resolved index {index} to {value!r}")
        return value

    def try_access(self, raw_index: Union[str, int]) -> AccessResult[T]:
        """Like :meth:`access`, but report failures in the result instead of raising."""
        state = AccessState.AWAITING_INPUT
        index = None
        try:
            index = parse_index(raw_index)
            state = AccessState.PARSED
            self.validate(index)
            state = AccessState.VALIDATED
        except (ParseError, IndexOutOfRange) as e:
            logger.debug(f"Rejected index {raw_index!r} after state {state.name}: {e}")
            return AccessResult(AccessState.REJECTED, raw_index, index=index, error=e)

        return AccessResult(AccessState.RESOLVED, raw_index, index=index, value=self.collection[index])


def access(collection: Iterable[T], raw_index: Union[str, int]) -> T:
    """Return ``collection[raw_index]`` after parsing and bounds-checking the index."""
    return BoundedIndexAccessor(collection).access(raw_index)
