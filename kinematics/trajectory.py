"""Particle trajectories: position, velocity and acceleration as functions of time.

Invariants
- velocity is the time derivative of position; acceleration that of velocity.
- HarmonicParticleTrajectory derives both exactly, once, at construction.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Tuple

import numpy as np

from solver.errors import InvalidArgument, InvalidConfiguration
from timevarying.base import TimeVaryingVector3
from timevarying.harmonic import HarmonicVector3

__all__ = ["ParticleTrajectory", "HarmonicParticleTrajectory"]


class ParticleTrajectory(ABC):
    """Trajectory of a point particle."""

    @property
    @abstractmethod
    def position(self) -> TimeVaryingVector3:
        ...

    @property
    @abstractmethod
    def velocity(self) -> TimeVaryingVector3:
        ...

    @property
    @abstractmethod
    def acceleration(self) -> TimeVaryingVector3:
        ...

    def sample(self, times: Iterable[float]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Sample the trajectory at each of the given times.

        Returns (positions, velocities, accelerations), each of shape (len(times), 3).
        """
        ts = np.asarray(list(times), dtype=float)
        if ts.ndim != 1:
            raise InvalidArgument(f"times must be 1-D; got shape {ts.shape}")
        out = np.empty((3, ts.shape[0], 3), dtype=float)
        for k, t in enumerate(ts):
            out[0, k] = self.position.at(t)
            out[1, k] = self.velocity.at(t)
            out[2, k] = self.acceleration.at(t)
        return out[0], out[1], out[2]


class HarmonicParticleTrajectory(ParticleTrajectory):
    """A particle trajectory whose position is a HarmonicVector3."""

    def __init__(self, position: HarmonicVector3) -> None:
        if position is None:
            raise InvalidConfiguration("position must not be None")
        if not isinstance(position, HarmonicVector3):
            raise InvalidConfiguration(f"position must be a HarmonicVector3; got {type(position).__name__}")
        self._position = position
        self._velocity = position.time_derivative()
        self._acceleration = self._velocity.time_derivative()

    @property
    def position(self) -> HarmonicVector3:
        return self._position

    @property
    def velocity(self) -> HarmonicVector3:
        return self._velocity

    @property
    def acceleration(self) -> HarmonicVector3:
        return self._acceleration

    def __repr__(self) -> str:
        return f"HarmonicParticleTrajectory({self._position!r})"
