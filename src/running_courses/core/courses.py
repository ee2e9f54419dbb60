"""Course generation: twelve radial out-and-back courses around a center."""

from ..models import (
    COURSE_COUNT,
    MIDPOINT_FRACTIONS,
    SECTOR_DEGREES,
    Coordinate,
    Course,
    CourseSet,
    Midpoint,
)
from .geo import bearing, destination, distance


def _check_radius(radius_m: float) -> None:
    if not radius_m > 0:
        raise ValueError(f"radius_m must be greater than 0, got {radius_m}")


def generate_twelve_endpoints(center: Coordinate, radius_m: float) -> list[Coordinate]:
    """Endpoints on the circle of radius_m at bearings 0, 30, ..., 330."""
    _check_radius(radius_m)
    return [destination(center, radius_m, k * SECTOR_DEGREES) for k in range(COURSE_COUNT)]


def divide_segment(start: Coordinate, end: Coordinate) -> list[Coordinate]:
    """Points at 25%, 50% and 75% along the great-circle path start -> end."""
    heading = bearing(start, end)
    length = distance(start, end)
    return [destination(start, length * f, heading) for f in MIDPOINT_FRACTIONS]


def build_courses(center: Coordinate, radius_m: float) -> list[Course]:
    """One course per 30 degree sector, midpoint elevations initialized to 0."""
    courses = []
    for i, end in enumerate(generate_twelve_endpoints(center, radius_m)):
        midpoints = [Midpoint(lat=p.lat, lon=p.lon, elevation=0.0) for p in divide_segment(center, end)]
        courses.append(Course(
            id=i + 1,
            angle=i * SECTOR_DEGREES,
            start=center,
            end=end,
            midpoints=midpoints,
        ))
    return courses


def build_course_set(center: Coordinate, radius_m: float) -> CourseSet:
    """Build the request-scoped CourseSet for a one-way radius in meters."""
    return CourseSet(
        base=center,
        radius_km=radius_m / 1000,
        radius_m=radius_m,
        courses=build_courses(center, radius_m),
    )
