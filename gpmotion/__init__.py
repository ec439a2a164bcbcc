"""Gaussian process motion priors and interpolators, Lie groups, and arm and point-robot kinematics."""

__version__ = "0.1.0"

__all__ = ["arm", "gputils", "interpolator", "lie", "point_robot", "prior"]