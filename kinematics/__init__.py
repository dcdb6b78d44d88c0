"""Kinematics: particle trajectories and the position/velocity error term."""
from .position_velocity import PositionVelocityError
from .trajectory import ParticleTrajectory, HarmonicParticleTrajectory

__all__ = ["PositionVelocityError", "ParticleTrajectory", "HarmonicParticleTrajectory"]
