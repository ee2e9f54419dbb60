"""Course tools: generate_running_courses, preview_courses."""

import json
import logging

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations
from pydantic import ValidationError

from ..state import state
from ..models import Coordinate
from ..core.courses import build_course_set
from ._prereqs import require_services

logger = logging.getLogger(__name__)


def register_course_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
    async def generate_running_courses(
        latitude: float | None = None,
        longitude: float | None = None,
        distance_km: float | None = None,
    ) -> str:
        """Generate 12 out-and-back running courses and return the 3 most runnable.

        Courses radiate every 30° from the start point. Each is sampled for
        elevation, its endpoints are reverse geocoded, and a language model
        ranks them by how gentle and steady the elevation profile is.

        **Prior:** If you don't know the user's position, call locate_me first.

        Returns JSON: on success ``{"success": true, "courses": [...],
        "basePosition": {...}, "metadata": {...}}``; on failure
        ``{"success": false, "message", "kind", "statusCode", "elapsedMs"}``.

        Args:
            latitude: Start latitude (degrees).
            longitude: Start longitude (degrees).
            distance_km: Desired round-trip distance in km. Each course runs
                out distance_km / 2 and back.
        """
        try:
            require_services(state, elevation=True, geocoding=True, model=True)
        except ValueError as e:
            return f"Error: {e}"

        response = await state.pipeline().generate({
            "latitude": latitude,
            "longitude": longitude,
            "distance_km": distance_km,
        })
        return json.dumps(
            response.model_dump(by_alias=True, exclude_none=True),
            ensure_ascii=False,
            indent=2,
        )

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))
    def preview_courses(latitude: float, longitude: float, radius_km: float = 5.0) -> str:
        """Compute the 12 course endpoints and their 25/50/75% midpoints offline.

        No external services are called and elevations are all 0. Useful to
        check the geometry before running generate_running_courses.

        Args:
            latitude: Center latitude (degrees).
            longitude: Center longitude (degrees).
            radius_km: One-way radius in km (default 5, i.e. a 10 km round trip).
        """
        if not radius_km > 0:
            return "Error: radius_km must be greater than 0."
        try:
            center = Coordinate(lat=latitude, lon=longitude)
        except ValidationError as e:
            return f"Error: invalid center coordinate: {e.errors()[0]['msg']}"

        course_set = build_course_set(center, radius_km * 1000)
        logger.debug("Previewed %d courses around (%s, %s)", len(course_set.courses), latitude, longitude)
        return course_set.model_dump_json(by_alias=True, indent=2)
