"""Lookup tools: get_elevations, get_elevation, reverse_geocode, locate_me."""

import json
import logging

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from ..state import state
from ..errors import CourseServiceError
from ..models import Coordinate
from ._prereqs import require_services

logger = logging.getLogger(__name__)


def _validate_locations(locations: list[dict]) -> list[Coordinate]:
    """Raise ValueError unless every location has numeric, in-range lat and lon."""
    coords = []
    for i, loc in enumerate(locations):
        lat, lon = loc.get("lat"), loc.get("lon")
        if isinstance(lat, bool) or isinstance(lon, bool) or not isinstance(lat, (int, float)) or not isinstance(lon, (int, float)):
            raise ValueError(f"Location {i} must have numeric 'lat' and 'lon' values.")
        if not -90 <= lat <= 90:
            raise ValueError(f"Location {i}: latitude must be between -90 and 90.")
        if not -180 <= lon <= 180:
            raise ValueError(f"Location {i}: longitude must be between -180 and 180.")
        coords.append(Coordinate(lat=lat, lon=lon))
    return coords


def register_lookup_tools(mcp: FastMCP):

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
    async def get_elevations(locations: list[dict]) -> str:
        """Look up elevations (meters) for a batch of coordinates in one call.

        Results are returned in the same order as the input.

        Args:
            locations: List of {"lat": float, "lon": float}. At most 512 entries
                (the elevation service's batch limit).
        """
        try:
            require_services(state, elevation=True)
        except ValueError as e:
            return f"Error: {e}"
        if not locations:
            return "Error: locations must contain at least one {lat, lon} entry."
        limit = state.elevation.max_batch_size
        if len(locations) > limit:
            return f"Error: At most {limit} locations can be looked up at once (got {len(locations)})."
        try:
            coords = _validate_locations(locations)
        except ValueError as e:
            return f"Error: {e}"

        try:
            points = await state.elevation.get_elevations(coords)
        except CourseServiceError as e:
            return f"Error: {e}"

        return json.dumps({
            "success": True,
            "count": len(points),
            "elevations": [p.model_dump() for p in points],
        }, indent=2)

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
    async def get_elevation(lat: float, lon: float) -> str:
        """Look up the elevation (meters) of a single coordinate.

        Args:
            lat: Latitude (degrees, -90 to 90).
            lon: Longitude (degrees, -180 to 180).
        """
        try:
            require_services(state, elevation=True)
            coords = _validate_locations([{"lat": lat, "lon": lon}])
        except ValueError as e:
            return f"Error: {e}"

        try:
            points = await state.elevation.get_elevations(coords)
        except CourseServiceError as e:
            return f"Error: {e}"
        return json.dumps({"success": True, "elevation": points[0].model_dump()}, indent=2)

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
    async def reverse_geocode(lat: float, lon: float) -> str:
        """Resolve a coordinate to a street / lot address.

        Args:
            lat: Latitude (degrees).
            lon: Longitude (degrees).
        """
        try:
            require_services(state, geocoding=True)
            _validate_locations([{"lat": lat, "lon": lon}])
        except ValueError as e:
            return f"Error: {e}"

        try:
            address = await state.geocoder.get_address(lat, lon)
        except CourseServiceError as e:
            return f"Error: {e}"
        if address is None:
            return f"No address found for ({lat}, {lon})."
        return address.model_dump_json(indent=2, exclude_none=True)

    @mcp.tool(annotations=ToolAnnotations(readOnlyHint=True, openWorldHint=True))
    async def locate_me(
        wifi_access_points: list[dict] | None = None,
        cell_towers: list[dict] | None = None,
    ) -> str:
        """Estimate the current position from IP address (and optional radio data).

        **Next:** generate_running_courses with the returned latitude/longitude.

        Args:
            wifi_access_points: Optional list of {"macAddress", "signalStrength"}.
            cell_towers: Optional list of {"cellId", "locationAreaCode",
                "mobileCountryCode", "mobileNetworkCode"}.
        """
        try:
            require_services(state, geolocation=True)
        except ValueError as e:
            return f"Error: {e}"

        try:
            position = await state.geolocator.locate(
                wifi_access_points=wifi_access_points, cell_towers=cell_towers,
            )
        except CourseServiceError as e:
            return f"Error: {e}"
        return position.model_dump_json(indent=2)
