"""Energy error terms for implicit time-stepping.

A term quantifies how inconsistent a candidate end-of-step state is with the
state at the start of the step, as an energy-like non-negative scalar, and adds
the gradient of that scalar (with respect to the candidate state) into a
caller-owned buffer. A solver sums many terms and searches for the candidate
state of minimum total error.

EnergyErrorTerm is the single-state form: the error of one state against fixed
data (for example a measured position at a given time).

evaluate() validates its arguments here, once, then delegates to _evaluate().
Concrete terms check mapper agreement at construction so that _evaluate() does
no validation of its own.
"""
from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np

from .errors import InvalidArgument, StateIndexError
from .mapper import GradientBuffer, ObjectStateSpaceMapper, as_gradient_buffer, as_state

__all__ = ["EnergyErrorTerm", "TimeStepEnergyErrorTerm", "validate_step"]


def validate_step(state0: object, state: object, dt: float) -> Tuple[np.ndarray, np.ndarray, float]:
    """
    Validate a (state0, state, dt) triple.

    - state0 and state are 1-D with equal, positive length.
    - dt > 0 and finite.

    Returns the coerced (state0, state, dt).
    """
    s0 = as_state(state0, "state0")
    s = as_state(state, "state")
    if s0.shape[0] != s.shape[0]:
        raise InvalidArgument(
            f"state0 and state must have the same length; got {s0.shape[0]} and {s.shape[0]}"
        )
    if s.shape[0] == 0:
        raise InvalidArgument("state0 and state must not be empty")
    try:
        step = float(dt)
    except (TypeError, ValueError) as e:
        raise InvalidArgument("dt must be a real number") from e
    if not (step > 0.0 and math.isfinite(step)):
        raise InvalidArgument(f"dt must be a positive finite float; got {step}")
    return s0, s, step


class _MappedTerm(ABC):
    @abstractmethod
    def mappers(self) -> Tuple[ObjectStateSpaceMapper, ...]:
        """The state-space mappers this term reads and writes through."""

    def is_valid_for_dimension(self, n: int) -> bool:
        return all(m.is_valid_for_dimension(n) for m in self.mappers())

    @property
    def minimum_state_space_dimension(self) -> int:
        return max(m.minimum_state_space_dimension for m in self.mappers())

    def _checked_buffer(self, dedx: object, n: int) -> GradientBuffer:
        buf = as_gradient_buffer(dedx)
        if len(buf) != n:
            raise InvalidArgument(f"dedx must have the same length as state; got {len(buf)} and {n}")
        if not self.is_valid_for_dimension(n):
            raise StateIndexError(n, self.minimum_state_space_dimension)
        return buf


class EnergyErrorTerm(_MappedTerm):
    """One additive term of an energy error function of a single state."""

    def evaluate(self, dedx: GradientBuffer, state: object) -> float:
        """
        Compute this term's energy error for state and add its gradient into dedx.

        Raises InvalidArgument for an empty state or a dedx of another length,
        and StateIndexError when the state is too short for the mappers.
        """
        s = as_state(state)
        if s.shape[0] == 0:
            raise InvalidArgument("state must not be empty")
        buf = self._checked_buffer(dedx, s.shape[0])
        return float(self._evaluate(buf, s))

    @abstractmethod
    def _evaluate(self, dedx: GradientBuffer, state: np.ndarray) -> float:
        """Term-specific computation on already validated arguments."""


class TimeStepEnergyErrorTerm(_MappedTerm):
    """One additive term of a time-step energy error function."""

    def evaluate(self, dedx: GradientBuffer, state0: object, state: object, dt: float) -> float:
        """
        Compute this term's energy error and add its gradient into dedx.

        Parameters
        ----------
        dedx : np.ndarray or mutable sequence
            Writable 1-D float array, or a mutable sequence of reals such as a
            list, same length as the states. Gradient contributions are
            added; existing contents are kept.
        state0 : array-like
            State-space vector at the start of the time step.
        state : array-like
            Candidate state-space vector at the end of the time step.
        dt : float
            Size of the time step; positive.

        Returns
        -------
        float
            The energy error; non-negative.

        Raises
        ------
        InvalidArgument
            Length mismatch between state0, state and dedx, or non-positive dt.
        StateIndexError
            The states are too short for this term's mappers.
        """
        s0, s, step = validate_step(state0, state, dt)
        buf = self._checked_buffer(dedx, s.shape[0])
        return float(self._evaluate(buf, s0, s, step))

    @abstractmethod
    def _evaluate(self, dedx: GradientBuffer, state0: np.ndarray, state: np.ndarray, dt: float) -> float:
        """Term-specific computation on already validated arguments."""
