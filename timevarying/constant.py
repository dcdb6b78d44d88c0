"""Time-varying quantities that do not actually vary."""
from __future__ import annotations

import numpy as np

from solver.errors import InvalidConfiguration
from .base import TimeVaryingScalar, TimeVaryingVector3

__all__ = ["ConstantScalar", "ConstantVector3"]


class ConstantScalar(TimeVaryingScalar):
    def __init__(self, value: float) -> None:
        try:
            self._value = float(value)
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration("value must be a real number") from e

    @property
    def value(self) -> float:
        return self._value

    def at(self, t: float) -> float:
        return self._value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConstantScalar):
            return NotImplemented
        return self._value == other._value

    def __hash__(self) -> int:
        return hash(("ConstantScalar", self._value))

    def __repr__(self) -> str:
        return f"ConstantScalar({self._value!r})"


class ConstantVector3(TimeVaryingVector3):
    def __init__(self, value) -> None:
        if value is None:
            raise InvalidConfiguration("value must not be None")
        v = np.array(value, dtype=float)
        if v.shape != (3,):
            raise InvalidConfiguration(f"value must have shape (3,); got {v.shape}")
        v.setflags(write=False)
        self._value = v

    @property
    def value(self) -> np.ndarray:
        return self._value

    def at(self, t: float) -> np.ndarray:
        return self._value.copy()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConstantVector3):
            return NotImplemented
        return self._value.tobytes() == other._value.tobytes()

    def __hash__(self) -> int:
        return hash(("ConstantVector3", self._value.tobytes()))

    def __repr__(self) -> str:
        return f"ConstantVector3({self._value.tolist()!r})"
