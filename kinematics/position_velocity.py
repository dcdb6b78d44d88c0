"""Position/velocity consistency error term (trapezoidal rule).

Over a time step dt the displacement implies an average velocity
    x_rate = (x − x0) / dt
while the trapezoidal rule predicts
    v_mean = (v + v0) / 2.
The mismatch ve = x_rate − v_mean is zero exactly for states consistent with
trapezoidal integration of velocity. It is scaled to a kinetic energy,

    e = ½·m·|ve|²
    ∂e/∂x = m·ve / dt
    ∂e/∂v = −½·m·ve

so it can be summed with other energy error terms.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from solver.errors import InvalidConfiguration
from solver.mapper import GradientBuffer, VectorStateSpaceMapper
from solver.term import TimeStepEnergyErrorTerm, validate_step
from telemetry.logging import log_term_constructed

__all__ = ["PositionVelocityError"]


@dataclass(frozen=True)
class PositionVelocityError(TimeStepEnergyErrorTerm):
    """
    Energy error term for the consistency of position and velocity components.

    mass: reference mass scale, converting the velocity mismatch into an energy.
    position_mapper, velocity_mapper: mappers of equal dimension locating the
    position and velocity vectors in the state-space vector.
    """

    mass: float
    position_mapper: VectorStateSpaceMapper
    velocity_mapper: VectorStateSpaceMapper

    def __post_init__(self) -> None:
        if isinstance(self.mass, bool):
            raise InvalidConfiguration(f"mass must be a real number; got {self.mass!r}")
        try:
            m = float(self.mass)
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration("mass must be a real number") from e
        if not (m > 0.0 and math.isfinite(m)):
            raise InvalidConfiguration(f"mass must be a positive finite float; got {m}")
        object.__setattr__(self, "mass", m)

        for name in ("position_mapper", "velocity_mapper"):
            mapper = getattr(self, name)
            if mapper is None:
                raise InvalidConfiguration(f"{name} must not be None")
            if not isinstance(mapper, VectorStateSpaceMapper):
                raise InvalidConfiguration(
                    f"{name} must be a VectorStateSpaceMapper; got {type(mapper).__name__}"
                )
        if self.position_mapper.dimension != self.velocity_mapper.dimension:
            raise InvalidConfiguration(
                "position_mapper and velocity_mapper must have the same dimension; "
                f"got {self.position_mapper.dimension} and {self.velocity_mapper.dimension}"
            )
        log_term_constructed(
            self,
            mass=m,
            dimension=self.space_dimension,
            position=self.position_mapper,
            velocity=self.velocity_mapper,
        )

    @property
    def space_dimension(self) -> int:
        return self.position_mapper.dimension

    def mappers(self) -> Tuple[VectorStateSpaceMapper, ...]:
        return (self.position_mapper, self.velocity_mapper)

    def velocity_error(self, state0: object, state: object, dt: float) -> np.ndarray:
        """The velocity mismatch ve for a time step; writes nothing."""
        s0, s, step = validate_step(state0, state, dt)
        return self._velocity_error(s0, s, step)

    def _velocity_error(self, state0: np.ndarray, state: np.ndarray, dt: float) -> np.ndarray:
        x0 = self.position_mapper.to_object(state0)
        v0 = self.velocity_mapper.to_object(state0)
        x = self.position_mapper.to_object(state)
        v = self.velocity_mapper.to_object(state)

        x_rate = (x - x0) / dt
        v_mean = 0.5 * (v + v0)
        return x_rate - v_mean

    def _evaluate(self, dedx: GradientBuffer, state0: np.ndarray, state: np.ndarray, dt: float) -> float:
        ve = self._velocity_error(state0, state, dt)
        e = 0.5 * self.mass * float(np.dot(ve, ve))

        self.position_mapper.from_vector(dedx, (self.mass / dt) * ve)
        self.velocity_mapper.from_vector(dedx, (-0.5 * self.mass) * ve)
        return e
