"""Request pipeline: geometry -> elevation -> addresses -> ranking -> course cards."""

import json
import logging
import math
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from ..config import Settings
from ..errors import CourseServiceError, InternalError, InvalidRequestError, PipelineTimeout
from ..models import (
    Coordinate,
    CourseCard,
    CourseGenerationRequest,
    CourseGenerationResponse,
    CourseSet,
    EnrichedCourse,
    ErrorResponse,
    GenerationMetadata,
    RecommendationSet,
    Waypoint,
)
from .courses import build_course_set
from .deadline import run_with_deadline
from .elevation import ElevationService, enrich_elevations
from .geocoding import GeocodingService, merge_addresses, resolve_addresses
from .recommend import RecommendationEngine

logger = logging.getLogger(__name__)

PACE_MIN_PER_KM = 5
REQUIRED_FIELDS = ("latitude", "longitude", "distance_km")


def validate_request(payload: dict[str, Any]) -> CourseGenerationRequest:
    """Check the inbound payload: all three fields present, numeric and in range."""
    missing = [name for name in REQUIRED_FIELDS if payload.get(name) is None]
    if missing:
        raise InvalidRequestError(f"latitude, longitude and distance_km are required (missing: {', '.join(missing)})")

    for name in REQUIRED_FIELDS:
        value = payload[name]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            raise InvalidRequestError(f"{name} must be a finite number, got {value!r}")

    try:
        return CourseGenerationRequest(**{name: payload[name] for name in REQUIRED_FIELDS})
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise InvalidRequestError(f"Invalid course request: {details}") from exc


def estimated_minutes(distance_km: float, rank: int) -> int:
    return round(distance_km * PACE_MIN_PER_KM + rank)


def to_course_cards(
    recommendations: RecommendationSet,
    courses: list[EnrichedCourse],
    distance_km: float,
) -> list[CourseCard]:
    """Join each recommendation with its source course's end point."""
    by_id = {c.id: c for c in courses}
    cards = []
    for rec in recommendations.recommendations:
        course = by_id.get(rec.course_id)
        waypoints = [Waypoint(latitude=course.end.lat, longitude=course.end.lon)] if course else []
        cards.append(CourseCard(
            course_id=rec.course_id,
            rank=rec.rank,
            name=f"Course {rec.rank}",
            distance=f"{distance_km:g} km",
            estimated_time=f"{estimated_minutes(distance_km, rec.rank)} min",
            summary=rec.summary,
            reason=rec.reason,
            elevation_analysis=rec.elevation_analysis,
            scores=rec.scores,
            waypoints=waypoints,
        ))
    return cards


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


class CoursePipeline:
    def __init__(
        self,
        elevation: ElevationService,
        geocoder: GeocodingService,
        engine: RecommendationEngine,
        settings: Optional[Settings] = None,
    ):
        self.elevation = elevation
        self.geocoder = geocoder
        self.engine = engine
        self.settings = settings or Settings()

    async def run(self, request: CourseGenerationRequest) -> CourseGenerationResponse:
        """Run every stage in order for one validated request."""
        started = time.monotonic()
        base = Coordinate(lat=request.latitude, lon=request.longitude)
        radius_m = (request.distance_km / 2) * 1000

        course_set = build_course_set(base, radius_m)
        logger.info(
            "Generated %d courses around (%s, %s), radius %.0fm",
            len(course_set.courses), base.lat, base.lon, radius_m,
        )

        await enrich_elevations(course_set, self.elevation)
        address_map = await resolve_addresses(
            course_set, self.geocoder, delay_s=self.settings.geocode_delay_s
        )
        enriched = merge_addresses(course_set, address_map)

        logger.info("Ranking %d courses", len(enriched))
        recommendations = await self.engine.recommend(enriched)
        self._dump(course_set, enriched, recommendations)

        return CourseGenerationResponse(
            courses=to_course_cards(recommendations, enriched, request.distance_km),
            base_position=Waypoint(latitude=request.latitude, longitude=request.longitude),
            metadata=GenerationMetadata(
                total_courses=len(enriched),
                radius_km=course_set.radius_km,
                generated_at=datetime.now(timezone.utc).isoformat(),
                elapsed_ms=_elapsed_ms(started),
            ),
        )

    async def generate(self, payload: dict[str, Any]) -> CourseGenerationResponse | ErrorResponse:
        """Validate and run under the outer deadline, turning failures into ErrorResponse."""
        started = time.monotonic()
        try:
            request = validate_request(payload)
            return await run_with_deadline(
                self.run(request), self.settings.pipeline_timeout_s, PipelineTimeout
            )
        except CourseServiceError as exc:
            return self._error(exc, started)
        except Exception as exc:
            logger.exception("Unexpected course generation failure")
            return self._error(InternalError(f"Course generation failed: {exc}"), started)

    def _error(self, exc: CourseServiceError, started: float) -> ErrorResponse:
        message = exc.message
        if exc.status_code == 503:
            message = f"AI service unavailable: {exc.message}"
        logger.warning("Course generation failed (%s, %d): %s", exc.kind, exc.status_code, exc.message)
        return ErrorResponse(
            message=message,
            kind=exc.kind,
            status_code=exc.status_code,
            elapsed_ms=_elapsed_ms(started),
        )

    def _dump(
        self,
        course_set: CourseSet,
        enriched: list[EnrichedCourse],
        recommendations: RecommendationSet,
    ) -> None:
        dump_dir: Optional[Path] = self.settings.debug_dump_dir
        if dump_dir is None:
            return
        complete = {
            "base": course_set.base.model_dump(),
            "radiusKm": course_set.radius_km,
            "radiusM": course_set.radius_m,
            "courses": [c.model_dump() for c in enriched],
        }
        try:
            dump_dir.mkdir(parents=True, exist_ok=True)
            (dump_dir / "output-complete.json").write_text(
                json.dumps(complete, ensure_ascii=False, indent=2), encoding="utf-8"
            )
            (dump_dir / "course-recommendations.json").write_text(
                recommendations.model_dump_json(by_alias=True, indent=2), encoding="utf-8"
            )
        except OSError as exc:
            logger.warning("Could not write debug dump to %s: %s", dump_dir, exc)
