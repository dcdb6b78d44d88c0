import numpy as np
import pytest

from kinematics.position_velocity import PositionVelocityError
from solver.errors import InvalidArgument, InvalidConfiguration, StateIndexError
from solver.mapper import IndexedVectorMapper, Vector1StateSpaceMapper, Vector3StateSpaceMapper


def _term_1d(mass: float = 2.0) -> PositionVelocityError:
    return PositionVelocityError(mass, Vector1StateSpaceMapper(0), Vector1StateSpaceMapper(1))


def _term_3d(mass: float) -> PositionVelocityError:
    # State layout: [x(3), v(3)]
    return PositionVelocityError(mass, Vector3StateSpaceMapper(0), Vector3StateSpaceMapper(3))


def _energy_and_gradient(term, state0, state, dt):
    dedx = np.zeros(len(state), dtype=float)
    e = term.evaluate(dedx, state0, state, dt)
    return e, dedx


def test_consistent_1d_state_has_zero_error():
    e, dedx = _energy_and_gradient(_term_1d(), [0.0, 1.0], [1.0, 1.0], 1.0)
    assert e == 0.0
    assert np.array_equal(dedx, [0.0, 0.0])


def test_inconsistent_1d_state():
    # x_rate = 2, v_mean = 1, ve = 1
    e, dedx = _energy_and_gradient(_term_1d(), [0.0, 1.0], [2.0, 1.0], 1.0)
    assert e == pytest.approx(1.0)
    assert np.allclose(dedx, [2.0, -1.0])


def test_list_gradient_buffer_is_updated_in_place():
    dedx = [0.0, 0.0]
    e = _term_1d().evaluate(dedx, [0.0, 1.0], [2.0, 1.0], 1.0)
    assert e == pytest.approx(1.0)
    assert dedx == pytest.approx([2.0, -1.0])


def test_list_gradient_buffer_keeps_existing_contents():
    dedx = [1.0, 1.0]
    _term_1d().evaluate(dedx, [0.0, 1.0], [2.0, 1.0], 1.0)
    assert dedx == pytest.approx([3.0, 0.0])


def test_tuple_gradient_buffer_is_rejected():
    with pytest.raises(InvalidArgument, match="dedx"):
        _term_1d().evaluate((0.0, 0.0), [0.0, 1.0], [2.0, 1.0], 1.0)


def test_velocity_error_writes_nothing():
    term = _term_1d()
    ve = term.velocity_error([0.0, 1.0], [2.0, 1.0], 1.0)
    assert np.allclose(ve, [1.0])


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_zero_error_for_trapezoidal_consistent_state(seed):
    rng = np.random.default_rng(seed)
    x0 = rng.normal(size=3)
    v0 = rng.normal(size=3)
    dt = float(rng.uniform(0.01, 2.0))
    state0 = np.concatenate([x0, v0])
    state = np.concatenate([x0 + v0 * dt, v0])

    e, dedx = _energy_and_gradient(_term_3d(float(rng.uniform(0.1, 10.0))), state0, state, dt)
    assert e == pytest.approx(0.0, abs=1e-20)
    assert np.allclose(dedx, 0.0, atol=1e-10)


@pytest.mark.parametrize("seed", [10, 11, 12, 13, 14])
def test_gradient_matches_central_differences(seed):
    rng = np.random.default_rng(seed)
    mass = float(rng.uniform(0.5, 5.0))
    dt = float(rng.uniform(0.1, 2.0))
    state0 = rng.normal(size=6)
    state = rng.normal(size=6)
    term = _term_3d(mass)

    e, analytic = _energy_and_gradient(term, state0, state, dt)
    assert e >= 0.0

    h = 1e-5
    scratch = np.zeros(6)
    numeric = np.empty(6)
    for i in range(6):
        up = state.copy()
        up[i] += h
        down = state.copy()
        down[i] -= h
        numeric[i] = (term.evaluate(scratch, state0, up, dt) - term.evaluate(scratch, state0, down, dt)) / (2 * h)
    assert np.allclose(analytic, numeric, rtol=1e-6, atol=1e-6)


def test_gradient_is_added_to_existing_contents():
    term = _term_1d()
    dedx = np.array([10.0, 20.0])
    term.evaluate(dedx, [0.0, 1.0], [2.0, 1.0], 1.0)
    assert np.allclose(dedx, [12.0, 19.0])
    term.evaluate(dedx, [0.0, 1.0], [2.0, 1.0], 1.0)
    assert np.allclose(dedx, [14.0, 18.0])


def test_terms_with_disjoint_mappers_share_a_buffer():
    # Two 1-D particles: [x_a, v_a, x_b, v_b]
    a = PositionVelocityError(2.0, Vector1StateSpaceMapper(0), Vector1StateSpaceMapper(1))
    b = PositionVelocityError(4.0, Vector1StateSpaceMapper(2), Vector1StateSpaceMapper(3))
    state0 = np.array([0.0, 1.0, 0.0, 0.0])
    state = np.array([2.0, 1.0, 1.0, 0.0])

    dedx = np.zeros(4)
    e_a = a.evaluate(dedx, state0, state, 1.0)
    e_b = b.evaluate(dedx, state0, state, 1.0)

    _, only_a = _energy_and_gradient(a, state0, state, 1.0)
    _, only_b = _energy_and_gradient(b, state0, state, 1.0)
    assert e_a == pytest.approx(1.0)
    assert e_b == pytest.approx(2.0)
    assert np.allclose(dedx[:2], only_a[:2])
    assert np.allclose(dedx[2:], only_b[2:])
    assert np.allclose(only_a[2:], 0.0)
    assert np.allclose(only_b[:2], 0.0)


def test_indexed_mappers_give_same_result_as_contiguous():
    state0 = np.array([0.1, 0.2, 0.3, 1.0, 2.0, 3.0])
    state = np.array([1.1, 2.2, 3.3, 1.5, 2.5, 3.5])
    contiguous = _term_3d(3.0)
    indexed = PositionVelocityError(3.0, IndexedVectorMapper([0, 1, 2]), IndexedVectorMapper([3, 4, 5]))
    e1, g1 = _energy_and_gradient(contiguous, state0, state, 0.5)
    e2, g2 = _energy_and_gradient(indexed, state0, state, 0.5)
    assert e1 == pytest.approx(e2)
    assert np.allclose(g1, g2)


def test_is_valid_for_dimension_requires_both_mappers():
    term = PositionVelocityError(1.0, Vector3StateSpaceMapper(0), Vector3StateSpaceMapper(5))
    for n in range(0, 12):
        expected = term.position_mapper.is_valid_for_dimension(n) and term.velocity_mapper.is_valid_for_dimension(n)
        assert term.is_valid_for_dimension(n) is expected
    assert not term.is_valid_for_dimension(7)
    assert term.is_valid_for_dimension(8)
    assert term.minimum_state_space_dimension == 8


def test_space_dimension_and_mass():
    term = _term_3d(2)
    assert term.space_dimension == 3
    assert isinstance(term.mass, float) and term.mass == 2.0


def test_mismatched_mapper_dimensions():
    with pytest.raises(InvalidConfiguration):
        PositionVelocityError(1.0, Vector3StateSpaceMapper(0), Vector1StateSpaceMapper(3))
    with pytest.raises(InvalidConfiguration):
        PositionVelocityError(1.0, IndexedVectorMapper([0, 1]), Vector3StateSpaceMapper(2))


@pytest.mark.parametrize("mass", [0.0, -1.0, float("inf"), float("-inf"), float("nan"), None, "heavy", True])
def test_bad_mass(mass):
    with pytest.raises(InvalidConfiguration):
        PositionVelocityError(mass, Vector1StateSpaceMapper(0), Vector1StateSpaceMapper(1))


def test_missing_mapper():
    with pytest.raises(InvalidConfiguration):
        PositionVelocityError(1.0, None, Vector1StateSpaceMapper(1))
    with pytest.raises(InvalidConfiguration):
        PositionVelocityError(1.0, Vector1StateSpaceMapper(0), None)


def test_evaluate_length_mismatch():
    term = _term_1d()
    with pytest.raises(InvalidArgument, match="same length"):
        term.evaluate(np.zeros(2), [0.0, 1.0], [0.0, 1.0, 2.0], 1.0)
    with pytest.raises(InvalidArgument, match="dedx"):
        term.evaluate(np.zeros(3), [0.0, 1.0], [0.0, 1.0], 1.0)
    with pytest.raises(InvalidArgument, match="empty"):
        term.evaluate(np.zeros(0), [], [], 1.0)


@pytest.mark.parametrize("dt", [0.0, -0.5, float("nan"), float("inf")])
def test_evaluate_bad_time_step(dt):
    with pytest.raises(InvalidArgument, match="dt"):
        _term_1d().evaluate(np.zeros(2), [0.0, 1.0], [1.0, 1.0], dt)


def test_evaluate_state_too_short_for_mappers():
    term = PositionVelocityError(1.0, Vector1StateSpaceMapper(0), Vector1StateSpaceMapper(3))
    with pytest.raises(StateIndexError):
        term.evaluate(np.zeros(3), np.zeros(3), np.zeros(3), 1.0)


def test_failed_evaluate_leaves_buffer_untouched():
    dedx = np.array([1.0, 2.0])
    with pytest.raises(InvalidArgument):
        _term_1d().evaluate(dedx, [0.0, 1.0], [2.0, 1.0], 0.0)
    assert np.array_equal(dedx, [1.0, 2.0])


def test_term_is_immutable():
    term = _term_1d()
    with pytest.raises(AttributeError):
        term.mass = 3.0  # type: ignore[misc]
