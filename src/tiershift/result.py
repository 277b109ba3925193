"""
Result type for explicit error handling.

Every fallible operation in the console core (compiling a mask, calling the
storage backend, writing a policy) returns ``Result[T, E]`` instead of raising,
so callers handle both outcomes with an exhaustive ``match``.

Usage:
    >>> def parse_days(raw: str) -> Result[int, str]:
    ...     if not raw.isdigit():
    ...         return Failure(f"not a number: {raw}")
    ...     return Success(int(raw))
    ...
    >>> match parse_days("7"):
    ...     case Success(days):
    ...         print(f"Restoring for {days} days")
    ...     case Failure(error):
    ...         print(f"Error: {error}")
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar


T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Represents a successful result containing a value of type T."""

    value: T


@dataclass(frozen=True)
class Failure(Generic[E]):
    """Represents a failed result containing an error of type E."""

    error: E


Result = Success[T] | Failure[E]


def partition_results(
    results: list[Result[T, E]],
) -> tuple[list[T], list[E]]:
    """
    Partition a list of Results into successes and failures.

    Used to summarise a batch once every key has been attempted.

    Args:
        results: List of Result values to partition

    Returns:
        Tuple of (successes, failures)
    """
    successes: list[T] = [result.value for result in results if isinstance(result, Success)]
    failures: list[E] = [result.error for result in results if isinstance(result, Failure)]
    return (successes, failures)
