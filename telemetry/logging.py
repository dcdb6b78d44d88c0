"""Structured logging for energy error terms and their gradient checks.

Records are single lines of sorted key=value fields so that runs can be
grepped and diffed:

    gradient_check label=pv components=6 max_abs_error=3.1e-10 passed=true value=0.42
    term PositionVelocityError dimension=3 mass=2 position=... velocity=...

Invariants
- Idempotent handler installation per logger.
- get_logger() only changes a logger's level when asked to, so a level set by
  the caller (e.g. DEBUG while investigating a term) survives later lookups.
- Floats are formatted deterministically with 10 significant digits.

Public API
- get_logger(name="mc-physics", level=None) -> logging.Logger
- format_fields(fields) -> str
- log_gradient_check(result, label=None, step=None, logger=None) -> None
- log_term_constructed(term, logger=None, **fields) -> None
"""
from __future__ import annotations

import logging
import math
from typing import Any, Mapping

import numpy as np

DEFAULT_LOGGER_NAME = "mc-physics"


def get_logger(name: str = DEFAULT_LOGGER_NAME, level: int | None = None) -> logging.Logger:
    """
    Return a logger with a concise formatter.

    Installs at most one StreamHandler, marked by _mc_physics_handler. A new
    logger starts at INFO; an explicit level is applied every time.
    """
    logger = logging.getLogger(name)
    logger.propagate = False  # avoid duplicate logs through root

    has_handler = any(getattr(h, "_mc_physics_handler", False) for h in logger.handlers)
    if not has_handler:
        handler = logging.StreamHandler()
        handler._mc_physics_handler = True  # type: ignore[attr-defined]
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(name)s %(levelname)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        logger.addHandler(handler)
        if level is None and logger.level == logging.NOTSET:
            logger.setLevel(logging.INFO)
    if level is not None:
        logger.setLevel(int(level))
    return logger


def _format_value(x: object) -> str:
    if isinstance(x, (bool, np.bool_)):
        return "true" if x else "false"
    if isinstance(x, (int, np.integer)):
        return str(int(x))
    if isinstance(x, (float, np.floating)):
        return f"{float(x):.10g}"
    return repr(x)


def format_fields(fields: Mapping[str, Any]) -> str:
    """Format a mapping as "k1=v1 k2=v2 ..." with keys sorted."""
    parts: list[str] = []
    for k in sorted(fields.keys()):
        if not isinstance(k, str) or not k:
            raise ValueError("field keys must be non-empty strings")
        parts.append(f"{k}={_format_value(fields[k])}")
    return " ".join(parts)


def log_gradient_check(
    result: Any,
    label: str | None = None,
    step: int | None = None,
    logger: logging.Logger | None = None,
) -> None:
    """
    Log the outcome of a gradient check.

    `result` needs value, analytic, max_abs_error and passed attributes
    (solver.gradient_check.GradientCheckResult). Passing checks log at INFO,
    failing ones at WARNING.
    """
    fields: dict[str, Any] = {
        "value": float(result.value),
        "max_abs_error": float(result.max_abs_error),
        "passed": bool(result.passed),
        "components": int(np.size(result.analytic)),
    }
    if label is not None:
        if not isinstance(label, str) or not label:
            raise ValueError("label must be a non-empty string")
        fields["label"] = label
    if step is not None:
        s = float(step)
        if not math.isfinite(s):
            raise ValueError(f"step must be finite, got {s}")
        fields["step"] = int(s)
    lg = logger if logger is not None else get_logger()
    level = logging.INFO if fields["passed"] else logging.WARNING
    lg.log(level, "gradient_check " + format_fields(fields))


def log_term_constructed(term: object, logger: logging.Logger | None = None, **fields: Any) -> None:
    """Log a DEBUG line describing a newly constructed energy error term."""
    lg = logger if logger is not None else get_logger()
    if not lg.isEnabledFor(logging.DEBUG):
        return
    msg = f"term {type(term).__name__}"
    if fields:
        msg += " " + format_fields(fields)
    lg.debug(msg)


__all__ = [
    "DEFAULT_LOGGER_NAME",
    "get_logger",
    "format_fields",
    "log_gradient_check",
    "log_term_constructed",
]
