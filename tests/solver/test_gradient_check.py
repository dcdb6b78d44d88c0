import logging

import numpy as np
import pytest

from kinematics.position_velocity import PositionVelocityError
from solver.errors import InvalidConfiguration
from solver.gradient_check import GradientCheckConfig, check_gradient, numeric_gradient
from solver.mapper import Vector1StateSpaceMapper, Vector3StateSpaceMapper
from solver.term import TimeStepEnergyErrorTerm


class _WrongSign(TimeStepEnergyErrorTerm):
    """e = ½|x|², but reports the gradient with the wrong sign."""

    def __init__(self) -> None:
        self._x = Vector1StateSpaceMapper(0)

    def mappers(self):
        return (self._x,)

    def _evaluate(self, dedx, state0, state, dt):
        x = self._x.to_object(state)
        self._x.from_vector(dedx, -x)
        return 0.5 * float(np.dot(x, x))


def _term():
    return PositionVelocityError(2.5, Vector3StateSpaceMapper(0), Vector3StateSpaceMapper(3))


def test_numeric_gradient_shape():
    rng = np.random.default_rng(3)
    g = numeric_gradient(_term(), rng.normal(size=6), rng.normal(size=6), 0.4, step=1e-5)
    assert g.shape == (6,)


def test_check_gradient_passes_for_position_velocity_error(caplog):
    rng = np.random.default_rng(5)
    logger = logging.getLogger("test-gradient-check")
    logger.setLevel(logging.INFO)
    with caplog.at_level(logging.INFO, logger="test-gradient-check"):
        result = check_gradient(
            _term(),
            rng.normal(size=6),
            rng.normal(size=6),
            0.3,
            config=GradientCheckConfig(step=1e-5, rtol=1e-6, atol=1e-6),
            label="pv3",
            logger=logger,
        )
    assert result.passed
    assert result.value > 0.0
    assert result.max_abs_error < 1e-5
    assert np.allclose(result.analytic, result.numeric, rtol=1e-6, atol=1e-6)
    (message,) = [r.getMessage() for r in caplog.records]
    assert message.startswith("gradient_check components=6 label=pv3 max_abs_error=")
    assert "passed=true" in message


def test_check_gradient_detects_wrong_gradient():
    logger = logging.getLogger("test-gradient-check")
    result = check_gradient(_WrongSign(), [1.0, 0.0], [2.0, 0.0], 1.0, logger=logger)
    assert not result.passed
    assert result.max_abs_error == pytest.approx(4.0, rel=1e-6)


@pytest.mark.parametrize(
    "kwargs",
    [{"step": 0.0}, {"step": float("nan")}, {"rtol": -1.0}, {"atol": float("inf")}],
)
def test_gradient_check_config_validation(kwargs):
    with pytest.raises(InvalidConfiguration):
        GradientCheckConfig(**kwargs)


def test_failed_check_logs_a_warning(caplog):
    logger = logging.getLogger("test-gradient-check")
    with caplog.at_level(logging.INFO, logger="test-gradient-check"):
        check_gradient(_WrongSign(), [1.0, 0.0], [2.0, 0.0], 1.0, logger=logger)
    (record,) = caplog.records
    assert record.levelno == logging.WARNING
    assert "passed=false" in record.getMessage()
