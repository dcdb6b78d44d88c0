"""Solver-side contracts: state-space mappers and energy error terms.

Exports:
- InvalidConfiguration, InvalidArgument, StateIndexError
- ObjectStateSpaceMapper, VectorStateSpaceMapper and the concrete mappers
- EnergyErrorTerm, TimeStepEnergyErrorTerm, validate_step
- GradientCheckConfig, GradientCheckResult, numeric_gradient, check_gradient
- HarmonicVector3ValueTerm, HarmonicVector3ValueAndGradients, HarmonicVector3EnergyError

Helper internals (also exported for terms defined elsewhere):
- as_state, as_gradient_buffer
"""
from .errors import InvalidArgument, InvalidConfiguration, StateIndexError
from .mapper import (
    ObjectStateSpaceMapper,
    VectorStateSpaceMapper,
    ContiguousVectorMapper,
    Vector1StateSpaceMapper,
    Vector3StateSpaceMapper,
    IndexedVectorMapper,
    TimeMapper,
    HarmonicVector3Mapper,
    GradientBuffer,
    as_state,
    as_gradient_buffer,
)
from .term import EnergyErrorTerm, TimeStepEnergyErrorTerm, validate_step
from .gradient_check import GradientCheckConfig, GradientCheckResult, numeric_gradient, check_gradient
from .harmonic_value import HarmonicVector3EnergyError, HarmonicVector3ValueAndGradients, HarmonicVector3ValueTerm

__all__ = [
    "InvalidArgument",
    "InvalidConfiguration",
    "StateIndexError",
    "ObjectStateSpaceMapper",
    "VectorStateSpaceMapper",
    "ContiguousVectorMapper",
    "Vector1StateSpaceMapper",
    "Vector3StateSpaceMapper",
    "IndexedVectorMapper",
    "TimeMapper",
    "HarmonicVector3Mapper",
    "GradientBuffer",
    "as_state",
    "as_gradient_buffer",
    "EnergyErrorTerm",
    "TimeStepEnergyErrorTerm",
    "validate_step",
    "GradientCheckConfig",
    "GradientCheckResult",
    "numeric_gradient",
    "check_gradient",
    "HarmonicVector3ValueAndGradients",
    "HarmonicVector3ValueTerm",
    "HarmonicVector3EnergyError",
]
