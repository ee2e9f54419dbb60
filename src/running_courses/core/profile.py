"""Elevation profile statistics over a course's sampled midpoints."""

import numpy as np

from ..models import ElevationAnalysis, Midpoint


def profile_changes(midpoints: list[Midpoint]) -> np.ndarray:
    """Signed elevation change between consecutive midpoints (meters)."""
    elevations = np.array([mp.elevation for mp in midpoints], dtype=np.float64)
    return np.diff(elevations)


def direction_reversals(changes: np.ndarray) -> int:
    """Number of times the profile switches between climbing and descending."""
    signs = np.sign(changes)
    signs = signs[signs != 0]
    if signs.size < 2:
        return 0
    return int(np.count_nonzero(signs[1:] != signs[:-1]))


def analyze_profile(midpoints: list[Midpoint]) -> ElevationAnalysis:
    changes = profile_changes(midpoints)
    if changes.size == 0:
        return ElevationAnalysis(average_change=0.0, total_ascent=0.0, total_descent=0.0)
    return ElevationAnalysis(
        average_change=round(float(np.mean(np.abs(changes))), 2),
        total_ascent=round(float(changes[changes > 0].sum()), 2),
        total_descent=round(float(-changes[changes < 0].sum()), 2),
    )
