"""Time-varying scalar and 3D vector quantities.

Exports:
- TimeVaryingScalar, TimeVaryingVector3 (abstract functors with at(t))
- ConstantScalar, ConstantVector3
- HarmonicScalar, HarmonicVector3 (damped-harmonic closed forms with exact time_derivative())
- JerkingHarmonicScalar (HarmonicScalar plus a cubic term; derivative is a HarmonicScalar)
"""
from .base import TimeVaryingScalar, TimeVaryingVector3
from .constant import ConstantScalar, ConstantVector3
from .harmonic import HarmonicScalar, HarmonicVector3, JerkingHarmonicScalar

__all__ = [
    "TimeVaryingScalar",
    "TimeVaryingVector3",
    "ConstantScalar",
    "ConstantVector3",
    "HarmonicScalar",
    "JerkingHarmonicScalar",
    "HarmonicVector3",
]
