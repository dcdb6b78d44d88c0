"""Functors for quantities that vary with time.

Times are plain floats in seconds. Vector values are 1-D float64 numpy arrays;
every call to at() returns a fresh array.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

__all__ = ["TimeVaryingScalar", "TimeVaryingVector3"]


class TimeVaryingScalar(ABC):
    """A scalar property that is a function of time."""

    @abstractmethod
    def at(self, t: float) -> float:
        """Value of the property at time t."""


class TimeVaryingVector3(ABC):
    """A 3D vector property that is a function of time."""

    @abstractmethod
    def at(self, t: float) -> np.ndarray:
        """Value of the property at time t; shape (3,)."""
