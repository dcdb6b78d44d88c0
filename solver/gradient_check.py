"""Finite-difference verification of energy error term gradients.

check_gradient() evaluates a term's analytic gradient into a fresh zero buffer
and compares it with a central-difference gradient of the returned energy:

    g_i ≈ (e(state + h·u_i) − e(state − h·u_i)) / (2h)

The central-difference truncation error is O(h²). Results are logged as
one line through telemetry.logging.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from telemetry.logging import log_gradient_check
from .errors import InvalidArgument, InvalidConfiguration
from .term import TimeStepEnergyErrorTerm, validate_step

__all__ = ["GradientCheckConfig", "GradientCheckResult", "numeric_gradient", "check_gradient"]


@dataclass(frozen=True)
class GradientCheckConfig:
    step: float = 1e-6       # > 0 finite; central-difference half width h
    rtol: float = 1e-5       # >= 0
    atol: float = 1e-7       # >= 0

    def __post_init__(self) -> None:
        if not (float(self.step) > 0.0 and math.isfinite(float(self.step))):
            raise InvalidConfiguration("step must be a positive finite float")
        if not (float(self.rtol) >= 0.0 and math.isfinite(float(self.rtol))):
            raise InvalidConfiguration("rtol must be a non-negative finite float")
        if not (float(self.atol) >= 0.0 and math.isfinite(float(self.atol))):
            raise InvalidConfiguration("atol must be a non-negative finite float")


@dataclass(frozen=True)
class GradientCheckResult:
    value: float
    analytic: np.ndarray
    numeric: np.ndarray
    max_abs_error: float
    passed: bool


def numeric_gradient(
    term: TimeStepEnergyErrorTerm,
    state0: object,
    state: object,
    dt: float,
    step: float = 1e-6,
) -> np.ndarray:
    """Central-difference gradient of term's energy with respect to each component of state."""
    if not (step > 0 and math.isfinite(step)):
        raise InvalidArgument(f"step must be a positive finite float; got {step}")
    s0, s, h_dt = validate_step(state0, state, dt)
    n = s.shape[0]
    scratch = np.zeros(n, dtype=float)
    shifted = s.copy()
    grad = np.empty(n, dtype=float)
    for i in range(n):
        shifted[i] = s[i] + step
        e_plus = term.evaluate(scratch, s0, shifted, h_dt)
        shifted[i] = s[i] - step
        e_minus = term.evaluate(scratch, s0, shifted, h_dt)
        shifted[i] = s[i]
        grad[i] = (e_plus - e_minus) / (2.0 * step)
    return grad


def check_gradient(
    term: TimeStepEnergyErrorTerm,
    state0: object,
    state: object,
    dt: float,
    config: Optional[GradientCheckConfig] = None,
    label: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> GradientCheckResult:
    """
    Compare term's analytic gradient with a numeric one.

    Passes when |analytic − numeric| <= atol + rtol·|numeric| component-wise.
    """
    cfg = config or GradientCheckConfig()
    s0, s, h_dt = validate_step(state0, state, dt)
    analytic = np.zeros(s.shape[0], dtype=float)
    value = term.evaluate(analytic, s0, s, h_dt)
    numeric = numeric_gradient(term, s0, s, h_dt, step=cfg.step)

    abs_err = np.abs(analytic - numeric)
    max_abs_error = float(np.max(abs_err))
    passed = bool(np.all(abs_err <= cfg.atol + cfg.rtol * np.abs(numeric)))
    result = GradientCheckResult(
        value=value,
        analytic=analytic,
        numeric=numeric,
        max_abs_error=max_abs_error,
        passed=passed,
    )
    log_gradient_check(result, label=label, logger=logger)
    return result
