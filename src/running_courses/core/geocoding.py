"""Reverse geocoding (Kakao Local API) and course endpoint address enrichment."""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

import httpx
from pydantic import ValidationError

from ..errors import UpstreamServiceError
from ..models import (
    AddressedPoint,
    AddressInfo,
    Coordinate,
    CoordinateWithAddress,
    CourseSet,
    EnrichedCourse,
    coordinate_key,
)

logger = logging.getLogger(__name__)

KAKAO_COORD2ADDRESS_URL = "https://dapi.kakao.com/v2/local/geo/coord2address.json"
DEFAULT_DELAY_S = 0.1


class GeocodingService(ABC):
    """Single-coordinate reverse geocoding. ``None`` means no address found."""

    @abstractmethod
    async def get_address(self, lat: float, lon: float) -> Optional[AddressInfo]:
        ...

    @property
    def is_configured(self) -> bool:
        return True


class KakaoGeocodingClient(GeocodingService):
    def __init__(self, api_key: str, timeout_s: float = 10.0):
        self.api_key = api_key
        self.timeout_s = timeout_s

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def get_address(self, lat: float, lon: float) -> Optional[AddressInfo]:
        if not self.api_key:
            raise UpstreamServiceError("geocoding", "KAKAO_REST_API_KEY is not configured")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s,
                headers={"Authorization": f"KakaoAK {self.api_key}"},
            ) as client:
                response = await client.get(KAKAO_COORD2ADDRESS_URL, params={"x": lon, "y": lat})
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamServiceError(
                "geocoding", f"HTTP {exc.response.status_code}", status=exc.response.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamServiceError("geocoding", f"request failed: {exc}") from exc
        except ValueError as exc:
            raise UpstreamServiceError("geocoding", f"response is not valid JSON: {exc}") from exc

        documents = (data.get("documents") if isinstance(data, dict) else None) or []
        if not documents:
            logger.debug("No address found for (%s, %s)", lat, lon)
            return None

        doc = documents[0]
        try:
            return AddressInfo(**doc["address"], road_address=doc.get("road_address"))
        except (KeyError, TypeError, ValidationError) as exc:
            raise UpstreamServiceError("geocoding", f"unexpected document shape: {exc}") from exc


def unique_endpoints(course_set: CourseSet) -> list[Coordinate]:
    """The shared start followed by every distinct course end, first seen first."""
    seen: set[str] = set()
    unique = []
    for coord in [course_set.base] + [c.end for c in course_set.courses]:
        key = coordinate_key(coord.lat, coord.lon)
        if key not in seen:
            seen.add(key)
            unique.append(coord)
    return unique


async def lookup_addresses(
    coordinates: Sequence[Coordinate],
    service: GeocodingService,
    delay_s: float = DEFAULT_DELAY_S,
) -> list[CoordinateWithAddress]:
    """Look up each coordinate one at a time, pausing delay_s between calls.

    A failed lookup leaves that coordinate without an address and the loop
    moves on.
    """
    results = []
    total = len(coordinates)
    for i, coord in enumerate(coordinates):
        logger.debug("Reverse geocoding %d/%d: (%.6f, %.6f)", i + 1, total, coord.lat, coord.lon)
        try:
            address = await service.get_address(coord.lat, coord.lon)
        except Exception as exc:
            logger.warning("Address lookup failed for (%s, %s): %s", coord.lat, coord.lon, exc)
            address = None
        results.append(CoordinateWithAddress(lat=coord.lat, lon=coord.lon, address=address))

        if i < total - 1:
            await asyncio.sleep(delay_s)
    return results


async def resolve_addresses(
    course_set: CourseSet,
    service: GeocodingService,
    delay_s: float = DEFAULT_DELAY_S,
) -> dict[str, str]:
    """Map coordinate key -> address_name for every endpoint that resolved."""
    coordinates = unique_endpoints(course_set)
    logger.info("Resolving addresses for %d unique endpoints", len(coordinates))
    looked_up = await lookup_addresses(coordinates, service, delay_s=delay_s)
    return {
        coordinate_key(item.lat, item.lon): item.address.address_name
        for item in looked_up
        if item.address is not None
    }


def merge_addresses(course_set: CourseSet, address_map: dict[str, str]) -> list[EnrichedCourse]:
    """Course views with start/end address names attached; the set is unchanged."""

    def addressed(coord: Coordinate) -> AddressedPoint:
        return AddressedPoint(
            lat=coord.lat,
            lon=coord.lon,
            address_name=address_map.get(coordinate_key(coord.lat, coord.lon)),
        )

    return [
        EnrichedCourse(
            id=course.id,
            angle=course.angle,
            start=addressed(course.start),
            end=addressed(course.end),
            midpoints=[mp.model_copy() for mp in course.midpoints],
        )
        for course in course_set.courses
    ]
