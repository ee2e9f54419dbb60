"""Elevation lookup (Google Maps Elevation API) and course midpoint enrichment."""

import logging
from abc import ABC, abstractmethod
from typing import Sequence

import httpx
from pydantic import ValidationError

from ..errors import BatchLimitExceeded, UpstreamServiceError
from ..models import Coordinate, CourseSet, ElevationPoint

logger = logging.getLogger(__name__)

GOOGLE_ELEVATION_URL = "https://maps.googleapis.com/maps/api/elevation/json"
DEFAULT_MAX_BATCH = 512


class ElevationService(ABC):
    """Batch elevation lookup.

    Results come back in the same order as the requested coordinates.
    """

    max_batch_size: int = DEFAULT_MAX_BATCH

    @abstractmethod
    async def get_elevations(self, coordinates: Sequence[Coordinate]) -> list[ElevationPoint]:
        ...

    @property
    def is_configured(self) -> bool:
        return True

    def check_batch(self, count: int) -> None:
        if count > self.max_batch_size:
            raise BatchLimitExceeded(count, self.max_batch_size)


class GoogleElevationClient(ElevationService):
    def __init__(self, api_key: str, max_batch_size: int = DEFAULT_MAX_BATCH, timeout_s: float = 10.0):
        self.api_key = api_key
        self.max_batch_size = max_batch_size
        self.timeout_s = timeout_s

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def get_elevations(self, coordinates: Sequence[Coordinate]) -> list[ElevationPoint]:
        if not coordinates:
            return []
        self.check_batch(len(coordinates))
        if not self.api_key:
            raise UpstreamServiceError("elevation", "GOOGLE_MAPS_API_KEY is not configured")

        locations = "|".join(f"{c.lat},{c.lon}" for c in coordinates)
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                response = await client.get(
                    GOOGLE_ELEVATION_URL,
                    params={"locations": locations, "key": self.api_key},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamServiceError(
                "elevation", f"HTTP {exc.response.status_code}", status=exc.response.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamServiceError("elevation", f"request failed: {exc}") from exc
        except ValueError as exc:
            raise UpstreamServiceError("elevation", f"response is not valid JSON: {exc}") from exc

        status = data.get("status") if isinstance(data, dict) else None
        if status != "OK":
            raise UpstreamServiceError("elevation", f"API status {status}")

        try:
            points = [
                ElevationPoint(
                    latitude=r["location"]["lat"],
                    longitude=r["location"]["lng"],
                    elevation=r["elevation"],
                )
                for r in data.get("results", [])
            ]
        except (KeyError, TypeError, ValidationError) as exc:
            raise UpstreamServiceError("elevation", f"unexpected result shape: {exc}") from exc

        if len(points) != len(coordinates):
            raise UpstreamServiceError(
                "elevation", f"requested {len(coordinates)} points, got {len(points)}"
            )
        return points


def flatten_midpoints(course_set: CourseSet) -> list[tuple[int, int, Coordinate]]:
    """All (course_id, point_index, coordinate) triples in course then point order."""
    return [
        (course.id, index, Coordinate(lat=mp.lat, lon=mp.lon))
        for course in course_set.courses
        for index, mp in enumerate(course.midpoints)
    ]


async def enrich_elevations(course_set: CourseSet, service: ElevationService) -> CourseSet:
    """Fill every midpoint elevation with a single batched lookup.

    The service's ordering contract is what ties result i back to the
    (course_id, point_index) that produced request i. Nothing is written
    unless the whole batch succeeded.
    """
    tagged = flatten_midpoints(course_set)
    service.check_batch(len(tagged))

    logger.info("Fetching elevations for %d midpoints", len(tagged))
    results = await service.get_elevations([coord for _, _, coord in tagged])
    if len(results) != len(tagged):
        raise UpstreamServiceError(
            "elevation", f"requested {len(tagged)} points, got {len(results)}"
        )

    by_id = {course.id: course for course in course_set.courses}
    for (course_id, index, _), point in zip(tagged, results):
        by_id[course_id].midpoints[index].elevation = round(point.elevation, 2)

    logger.debug("Elevations applied to %d courses", len(by_id))
    return course_set
