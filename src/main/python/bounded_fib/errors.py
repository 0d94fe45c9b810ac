"""
Error types raised by the bounded Fibonacci module.
"""

from typing import Optional


class BoundedFibError(Exception):
    """Base class for all errors raised by this package."""


class ParseError(BoundedFibError, ValueError):
    """The index text is not a valid non-negative integer literal."""

    def __init__(self, raw: str, message: Optional[str] = None):
        self.raw = raw
        super().__init__(message or f"Index entered was not a number: {raw!r}")


class IndexOutOfRange(BoundedFibError, IndexError):
    """The index falls outside ``[0, length)``."""

    def __init__(self, index: int, length: int):
        self.index = index
        self.length = length
        super().__init__(f"Index {index} is out of range for a collection of length {length}")


class ArithmeticOverflow(BoundedFibError, OverflowError):
    """A sequence term does not fit in the requested unsigned width."""

    def __init__(self, width: int, step: int, value: int):
        self.width = width
        self.step = step
        self.value = value
        super().__init__(f"Term {value} at step {step} does not fit in {width} bits")


class ConfigurationError(BoundedFibError, ValueError):
    """A configuration value is missing or has the wrong type."""


class CountLimitExceeded(BoundedFibError, ValueError):
    """A count or position is above the configured maximum."""

    def __init__(self, name: str, requested: int, limit: int):
        self.name = name
        self.requested = requested
        self.limit = limit
        super().__init__(f"{name.capitalize()} {requested} exceeds the maximum of {limit}")
