"""Error kinds raised by mappers and energy error terms.

- InvalidConfiguration: construction-time (missing mapper, bad mass, mismatched
  mapper dimensions, negative indices).
- InvalidArgument: evaluate-time (length mismatch, non-positive dt, wrong vector
  dimension).
- StateIndexError: a state or gradient vector shorter than a mapper's index range.

All subclass ValueError; StateIndexError is also an IndexError.
"""
from __future__ import annotations

__all__ = ["InvalidConfiguration", "InvalidArgument", "StateIndexError"]


class InvalidConfiguration(ValueError):
    """Raised when an object is constructed from unusable parameters."""


class InvalidArgument(ValueError):
    """Raised when an operation is called with unusable arguments."""


class StateIndexError(InvalidArgument, IndexError):
    """Raised when a state-space vector is too short for a mapper."""

    def __init__(self, length: int, required: int) -> None:
        super().__init__(f"state-space vector of length {length} is too short; need at least {required}")
        self.length = int(length)
        self.required = int(required)
