"""Energy error of a HarmonicVector3 against a known value at a known time.

For a target value f at time t and a candidate HarmonicVector3 with
parameters (t0, f0..f4, we, wh), with τ = t − t0,

    E   = exp(we·τ),  c = cos(wh·τ),  s = sin(wh·τ)
    fa  = f0 + f1·τ + f2·τ² + E·(c·f3 + s·f4)
    fe  = fa − f
    e   = scale·|fe|²

and, writing g = 2·scale·fe,

    ∂e/∂f0 = g          ∂e/∂f1 = τ·g        ∂e/∂f2 = τ²·g
    ∂e/∂f3 = E·c·g      ∂e/∂f4 = E·s·g
    ∂e/∂we = g·(τ·E·(c·f3 + s·f4))
    ∂e/∂wh = g·(τ·E·(c·f4 − s·f3))
    ∂e/∂t0 = −g·fa'(t)

Several value terms for one quantity (e.g. a trajectory observed at several
times) are summed with HarmonicVector3ValueAndGradients.total() and written
into the state-space gradient through a HarmonicVector3Mapper.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Sequence, Tuple

import numpy as np

from telemetry.logging import log_term_constructed
from timevarying.harmonic import HarmonicVector3
from .errors import InvalidArgument, InvalidConfiguration
from .mapper import GradientBuffer, HarmonicVector3Mapper
from .term import EnergyErrorTerm

__all__ = [
    "HarmonicVector3ValueAndGradients",
    "HarmonicVector3ValueTerm",
    "HarmonicVector3EnergyError",
]


def _gradient3(x: object, name: str) -> np.ndarray:
    v = np.array(x, dtype=float)
    if v.shape != (3,):
        raise InvalidArgument(f"{name} must have shape (3,); got {v.shape}")
    v.setflags(write=False)
    return v


@dataclass(frozen=True, eq=False)
class HarmonicVector3ValueAndGradients:
    """An energy error and its gradient with respect to each HarmonicVector3 parameter."""

    e: float
    dedf0: np.ndarray
    dedf1: np.ndarray
    dedf2: np.ndarray
    dedf3: np.ndarray
    dedf4: np.ndarray
    dedwe: float
    dedwh: float
    dedt0: float = 0.0

    def __post_init__(self) -> None:
        for name in ("e", "dedwe", "dedwh", "dedt0"):
            object.__setattr__(self, name, float(getattr(self, name)))
        for name in ("dedf0", "dedf1", "dedf2", "dedf3", "dedf4"):
            object.__setattr__(self, name, _gradient3(getattr(self, name), name))

    @property
    def dedf(self) -> Tuple[np.ndarray, ...]:
        return (self.dedf0, self.dedf1, self.dedf2, self.dedf3, self.dedf4)

    @staticmethod
    def zero() -> "HarmonicVector3ValueAndGradients":
        z = np.zeros(3)
        return HarmonicVector3ValueAndGradients(0.0, z, z, z, z, z, 0.0, 0.0, 0.0)

    @staticmethod
    def total(values: Iterable["HarmonicVector3ValueAndGradients"]) -> "HarmonicVector3ValueAndGradients":
        """Component-wise sum; the zero value for no values."""
        e = dedwe = dedwh = dedt0 = 0.0
        dedf = np.zeros((5, 3))
        for v in values:
            e += v.e
            dedwe += v.dedwe
            dedwh += v.dedwh
            dedt0 += v.dedt0
            dedf += np.stack(v.dedf)
        return HarmonicVector3ValueAndGradients(e, *dedf, dedwe, dedwh, dedt0)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HarmonicVector3ValueAndGradients):
            return NotImplemented
        return (self.e, self.dedwe, self.dedwh, self.dedt0) == (
            other.e,
            other.dedwe,
            other.dedwh,
            other.dedt0,
        ) and all(np.array_equal(a, b) for a, b in zip(self.dedf, other.dedf))

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True, eq=False)
class HarmonicVector3ValueTerm:
    """
    Error of a HarmonicVector3 against the value `target` at time `t`.

    scale: positive weight converting the squared mismatch into an energy.
    Calling the term with a HarmonicVector3 returns its
    HarmonicVector3ValueAndGradients.
    """

    scale: float
    t: float
    target: np.ndarray

    def __post_init__(self) -> None:
        if isinstance(self.scale, bool):
            raise InvalidConfiguration(f"scale must be a real number; got {self.scale!r}")
        try:
            scale = float(self.scale)
            t = float(self.t)
        except (TypeError, ValueError) as e:
            raise InvalidConfiguration("scale and t must be real numbers") from e
        if not (scale > 0.0 and math.isfinite(scale)):
            raise InvalidConfiguration(f"scale must be a positive finite float; got {scale}")
        if not math.isfinite(t):
            raise InvalidConfiguration(f"t must be finite; got {t}")
        if self.target is None:
            raise InvalidConfiguration("target must not be None")
        target = np.array(self.target, dtype=float)
        if target.shape != (3,) or not np.all(np.isfinite(target)):
            raise InvalidConfiguration(f"target must be a finite vector of shape (3,); got {target!r}")
        target.setflags(write=False)
        object.__setattr__(self, "scale", scale)
        object.__setattr__(self, "t", t)
        object.__setattr__(self, "target", target)

    def __call__(self, actual: HarmonicVector3) -> HarmonicVector3ValueAndGradients:
        if not isinstance(actual, HarmonicVector3):
            raise InvalidArgument(f"actual must be a HarmonicVector3; got {type(actual).__name__}")
        tau = self.t - actual.t0
        envelope = math.exp(actual.we * tau)
        alpha = actual.wh * tau
        c = math.cos(alpha)
        s = math.sin(alpha)
        f0, f1, f2, f3, f4 = actual.f0, actual.f1, actual.f2, actual.f3, actual.f4

        oscillation = c * f3 + s * f4
        quadrature = c * f4 - s * f3
        fa = f0 + tau * f1 + (tau * tau) * f2 + envelope * oscillation
        fe = fa - self.target
        g = (2.0 * self.scale) * fe
        rate = f1 + (2.0 * tau) * f2 + envelope * (actual.we * oscillation + actual.wh * quadrature)

        return HarmonicVector3ValueAndGradients(
            e=self.scale * float(np.dot(fe, fe)),
            dedf0=g,
            dedf1=tau * g,
            dedf2=(tau * tau) * g,
            dedf3=(envelope * c) * g,
            dedf4=(envelope * s) * g,
            dedwe=float(np.dot(g, (tau * envelope) * oscillation)),
            dedwh=float(np.dot(g, (tau * envelope) * quadrature)),
            dedt0=-float(np.dot(g, rate)),
        )

    def __repr__(self) -> str:
        return f"HarmonicVector3ValueTerm(scale={self.scale!r}, t={self.t!r}, target={self.target.tolist()!r})"


HarmonicValueFunction = Callable[[HarmonicVector3], HarmonicVector3ValueAndGradients]


@dataclass(frozen=True)
class HarmonicVector3EnergyError(EnergyErrorTerm):
    """
    Sum of value terms for the HarmonicVector3 that `mapper` locates in the state.

    Each term maps a HarmonicVector3 to a HarmonicVector3ValueAndGradients
    (HarmonicVector3ValueTerm or any callable of that shape).
    """

    mapper: HarmonicVector3Mapper
    terms: Sequence[HarmonicValueFunction]

    def __post_init__(self) -> None:
        if not isinstance(self.mapper, HarmonicVector3Mapper):
            raise InvalidConfiguration(
                f"mapper must be a HarmonicVector3Mapper; got {type(self.mapper).__name__}"
            )
        if self.terms is None:
            raise InvalidConfiguration("terms must not be None")
        terms = tuple(self.terms)
        for k, term in enumerate(terms):
            if not callable(term):
                raise InvalidConfiguration(f"terms[{k}] must be callable; got {term!r}")
        object.__setattr__(self, "terms", terms)
        log_term_constructed(self, mapper=self.mapper, terms=len(terms))

    def mappers(self) -> Tuple[HarmonicVector3Mapper, ...]:
        return (self.mapper,)

    def value_and_gradients(self, state: object) -> HarmonicVector3ValueAndGradients:
        """Summed value and parameter gradients for state; writes nothing."""
        actual = self.mapper.to_object(state)
        return HarmonicVector3ValueAndGradients.total(term(actual) for term in self.terms)

    def _evaluate(self, dedx: GradientBuffer, state: np.ndarray) -> float:
        total = self.value_and_gradients(state)
        self.mapper.from_gradients(dedx, total.dedt0, total.dedf, total.dedwe, total.dedwh)
        return total.e
