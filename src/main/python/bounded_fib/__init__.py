"""
Bounded Fibonacci module.

This module provides a seeded Fibonacci sequence generator, a bounds-checked
index accessor, and a gRPC service that exposes both.
"""

from bounded_fib.accessor import AccessResult, AccessState, BoundedIndexAccessor, access, parse_index
from bounded_fib.errors import (
    ArithmeticOverflow,
    BoundedFibError,
    ConfigurationError,
    CountLimitExceeded,
    IndexOutOfRange,
    ParseError,
)
from bounded_fib.sequence import MAX_COUNT, SequenceGenerator, generate, render, term

__version__ = "1.0.0"

__all__ = [
    "AccessResult",
    "AccessState",
    "ArithmeticOverflow",
    "BoundedFibError",
    "BoundedIndexAccessor",
    "ConfigurationError",
    "CountLimitExceeded",
    "IndexOutOfRange",
    "MAX_COUNT",
    "ParseError",
    "SequenceGenerator",
    "access",
    "generate",
    "parse_index",
    "render",
    "term",
]
