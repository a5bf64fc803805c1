"""Typed errors raised by the curvature engine. No engine imports."""

from __future__ import annotations


class CurvatureError(ValueError):
    """Base class for every error the engine raises."""


class InsufficientData(CurvatureError):
    """Too few samples (or distinct positions) to resolve a frequency."""


class DegenerateSignal(CurvatureError):
    """Signal too short for the requested operation."""


class InvalidConfiguration(CurvatureError):
    """Configuration value or input outside its valid range."""


class InvalidPrior(InvalidConfiguration):
    """Malformed prior constraint (inverted bounds, weight outside [0, 1])."""


class ResolutionMismatch(InvalidConfiguration):
    """Array length disagrees with the grid the belief was created for."""
