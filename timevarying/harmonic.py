"""Damped-harmonic time-varying quantities.

The variation with time is

    f(t) = f0 + f1·τ + f2·τ² + exp(we·τ)·(f3·cos(wh·τ) + f4·sin(wh·τ)),   τ = t − t0

that is, constant-acceleration motion superposed with an exponentially growing
(we > 0) or decaying (we < 0) oscillation. JerkingHarmonicScalar adds a cubic
(jerk) term f3·τ³ to the scalar form, with the oscillation amplitudes renamed fc
and fs; its derivative is a HarmonicScalar.

Derivative (exact, closed under the same form):
    (f0, f1, f2, f3, f4) -> (f1, 2·f2, 0, we·f3 + wh·f4, we·f4 − wh·f3)
with t0, we and wh unchanged.
"""
from __future__ import annotations

import math
from typing import Tuple

import numpy as np

from solver.errors import InvalidConfiguration
from .base import TimeVaryingScalar, TimeVaryingVector3

__all__ = ["HarmonicScalar", "JerkingHarmonicScalar", "HarmonicVector3"]


def _finite_float(x: object, name: str) -> float:
    try:
        val = float(x)  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise InvalidConfiguration(f"{name} must be a real number") from e
    if not math.isfinite(val):
        raise InvalidConfiguration(f"{name} must be finite, got {val}")
    return val


def _vector3(x: object, name: str) -> np.ndarray:
    if x is None:
        raise InvalidConfiguration(f"{name} must not be None")
    v = np.array(x, dtype=float)
    if v.shape != (3,):
        raise InvalidConfiguration(f"{name} must have shape (3,); got {v.shape}")
    if not np.all(np.isfinite(v)):
        raise InvalidConfiguration(f"{name} must contain finite values")
    v.setflags(write=False)
    return v


def _oscillation_derivative(f3, f4, we: float, wh: float):
    """Coefficients of d/dt[exp(we·τ)(f3·cos + f4·sin)] in the same basis."""
    return we * f3 + wh * f4, we * f4 - wh * f3


class HarmonicScalar(TimeVaryingScalar):
    """Scalar quantity with damped-harmonic variation."""

    def __init__(
        self,
        t0: float,
        f0: float,
        f1: float,
        f2: float,
        f3: float,
        f4: float,
        we: float,
        wh: float,
    ) -> None:
        self._t0 = _finite_float(t0, "t0")
        self._terms: Tuple[float, ...] = tuple(
            _finite_float(f, name) for f, name in zip((f0, f1, f2, f3, f4), ("f0", "f1", "f2", "f3", "f4"))
        )
        self._we = _finite_float(we, "we")
        self._wh = _finite_float(wh, "wh")

    @property
    def t0(self) -> float:
        return self._t0

    @property
    def f0(self) -> float:
        return self._terms[0]

    @property
    def f1(self) -> float:
        return self._terms[1]

    @property
    def f2(self) -> float:
        return self._terms[2]

    @property
    def f3(self) -> float:
        return self._terms[3]

    @property
    def f4(self) -> float:
        return self._terms[4]

    @property
    def we(self) -> float:
        return self._we

    @property
    def wh(self) -> float:
        return self._wh

    def at(self, t: float) -> float:
        tau = float(t) - self._t0
        f0, f1, f2, f3, f4 = self._terms
        alpha = self._wh * tau
        envelope = math.exp(self._we * tau)
        return f0 + f1 * tau + f2 * tau * tau + envelope * (f3 * math.cos(alpha) + f4 * math.sin(alpha))

    def time_derivative(self) -> "HarmonicScalar":
        f0, f1, f2, f3, f4 = self._terms
        d3, d4 = _oscillation_derivative(f3, f4, self._we, self._wh)
        return HarmonicScalar(self._t0, f1, 2.0 * f2, 0.0, d3, d4, self._we, self._wh)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HarmonicScalar):
            return NotImplemented
        return (self._t0, self._terms, self._we, self._wh) == (other._t0, other._terms, other._we, other._wh)

    def __hash__(self) -> int:
        return hash((self._t0, self._terms, self._we, self._wh))

    def __repr__(self) -> str:
        f0, f1, f2, f3, f4 = self._terms
        return (
            f"HarmonicScalar(t0={self._t0!r}, f0={f0!r}, f1={f1!r}, f2={f2!r}, "
            f"f3={f3!r}, f4={f4!r}, we={self._we!r}, wh={self._wh!r})"
        )


class JerkingHarmonicScalar(TimeVaryingScalar):
    """
    Scalar quantity with damped-harmonic variation and a constant jerk:

        f(t) = f0 + f1·τ + f2·τ² + f3·τ³ + exp(we·τ)·(fc·cos(wh·τ) + fs·sin(wh·τ))
    """

    def __init__(
        self,
        t0: float,
        f0: float,
        f1: float,
        f2: float,
        f3: float,
        fc: float,
        fs: float,
        we: float,
        wh: float,
    ) -> None:
        self._t0 = _finite_float(t0, "t0")
        self._polynomial: Tuple[float, ...] = tuple(
            _finite_float(f, name) for f, name in zip((f0, f1, f2, f3), ("f0", "f1", "f2", "f3"))
        )
        self._fc = _finite_float(fc, "fc")
        self._fs = _finite_float(fs, "fs")
        self._we = _finite_float(we, "we")
        self._wh = _finite_float(wh, "wh")

    @property
    def t0(self) -> float:
        return self._t0

    @property
    def f0(self) -> float:
        return self._polynomial[0]

    @property
    def f1(self) -> float:
        return self._polynomial[1]

    @property
    def f2(self) -> float:
        return self._polynomial[2]

    @property
    def f3(self) -> float:
        """The cubic (jerk) coefficient."""
        return self._polynomial[3]

    @property
    def fc(self) -> float:
        return self._fc

    @property
    def fs(self) -> float:
        return self._fs

    @property
    def we(self) -> float:
        return self._we

    @property
    def wh(self) -> float:
        return self._wh

    def at(self, t: float) -> float:
        tau = float(t) - self._t0
        f0, f1, f2, f3 = self._polynomial
        alpha = self._wh * tau
        envelope = math.exp(self._we * tau)
        polynomial = f0 + tau * (f1 + tau * (f2 + tau * f3))
        return polynomial + envelope * (self._fc * math.cos(alpha) + self._fs * math.sin(alpha))

    def time_derivative(self) -> HarmonicScalar:
        """Exact first time derivative; the cubic term drops to the quadratic slot."""
        f0, f1, f2, f3 = self._polynomial
        dc, ds = _oscillation_derivative(self._fc, self._fs, self._we, self._wh)
        return HarmonicScalar(self._t0, f1, 2.0 * f2, 3.0 * f3, dc, ds, self._we, self._wh)

    def _key(self):
        return (self._t0, self._polynomial, self._fc, self._fs, self._we, self._wh)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JerkingHarmonicScalar):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        f0, f1, f2, f3 = self._polynomial
        return (
            f"JerkingHarmonicScalar(t0={self._t0!r}, f0={f0!r}, f1={f1!r}, f2={f2!r}, f3={f3!r}, "
            f"fc={self._fc!r}, fs={self._fs!r}, we={self._we!r}, wh={self._wh!r})"
        )


class HarmonicVector3(TimeVaryingVector3):
    """
    3D vector quantity with damped-harmonic variation.

    Parameters
    ----------
    t0 : float
        Time origin in seconds.
    f0, f1, f2 : array-like, shape (3,)
        Constant, linear (velocity) and quadratic (acceleration) terms.
    f3, f4 : array-like, shape (3,)
        Cosine and sine amplitudes of the oscillation.
    we : float
        Exponential rate (s⁻¹); negative for decay, positive for growth.
    wh : float
        Angular frequency of the oscillation (rad·s⁻¹).

    Coefficient arrays are copied and stored read-only.
    """

    def __init__(self, t0: float, f0, f1, f2, f3, f4, we: float, wh: float) -> None:
        self._t0 = _finite_float(t0, "t0")
        self._terms: Tuple[np.ndarray, ...] = tuple(
            _vector3(f, name) for f, name in zip((f0, f1, f2, f3, f4), ("f0", "f1", "f2", "f3", "f4"))
        )
        self._we = _finite_float(we, "we")
        self._wh = _finite_float(wh, "wh")

    @property
    def t0(self) -> float:
        return self._t0

    @property
    def f0(self) -> np.ndarray:
        return self._terms[0]

    @property
    def f1(self) -> np.ndarray:
        return self._terms[1]

    @property
    def f2(self) -> np.ndarray:
        return self._terms[2]

    @property
    def f3(self) -> np.ndarray:
        return self._terms[3]

    @property
    def f4(self) -> np.ndarray:
        return self._terms[4]

    @property
    def we(self) -> float:
        return self._we

    @property
    def wh(self) -> float:
        return self._wh

    def at(self, t: float) -> np.ndarray:
        tau = float(t) - self._t0
        f0, f1, f2, f3, f4 = self._terms
        alpha = self._wh * tau
        envelope = math.exp(self._we * tau)
        return f0 + f1 * tau + f2 * (tau * tau) + envelope * (math.cos(alpha) * f3 + math.sin(alpha) * f4)

    def time_derivative(self) -> "HarmonicVector3":
        """Exact first time derivative, itself a HarmonicVector3."""
        f0, f1, f2, f3, f4 = self._terms
        d3, d4 = _oscillation_derivative(f3, f4, self._we, self._wh)
        return HarmonicVector3(self._t0, f1, 2.0 * f2, np.zeros(3), d3, d4, self._we, self._wh)

    def _key(self):
        return (self._t0, tuple(f.tobytes() for f in self._terms), self._we, self._wh)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HarmonicVector3):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        f0, f1, f2, f3, f4 = (f.tolist() for f in self._terms)
        return (
            f"HarmonicVector3(t0={self._t0!r}, f0={f0!r}, f1={f1!r}, f2={f2!r}, "
            f"f3={f3!r}, f4={f4!r}, we={self._we!r}, wh={self._wh!r})"
        )
