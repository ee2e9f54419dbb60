"""Tests for elevation profile statistics."""
import numpy as np

from running_courses.core.profile import analyze_profile, direction_reversals, profile_changes
from running_courses.models import Midpoint


def _mids(*elevations):
    return [Midpoint(lat=0, lon=0, elevation=e) for e in elevations]


def test_profile_changes_between_consecutive_midpoints():
    np.testing.assert_allclose(profile_changes(_mids(10, 14, 12)), [4.0, -2.0])


def test_analyze_profile_totals():
    stats = analyze_profile(_mids(10, 14, 12))
    assert stats.average_change == 3.0
    assert stats.total_ascent == 4.0
    assert stats.total_descent == 2.0


def test_flat_profile_is_all_zero():
    stats = analyze_profile(_mids(5, 5, 5))
    assert (stats.average_change, stats.total_ascent, stats.total_descent) == (0.0, 0.0, 0.0)
    assert direction_reversals(profile_changes(_mids(5, 5, 5))) == 0


def test_direction_reversals_ignore_flat_steps():
    assert direction_reversals(np.array([1.0, 0.0, 2.0])) == 0
    assert direction_reversals(np.array([1.0, -1.0, 1.0])) == 2


def test_single_midpoint_has_no_changes():
    stats = analyze_profile(_mids(7))
    assert stats.total_ascent == 0.0
