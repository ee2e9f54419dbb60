"""Approximate device location via the Google Geolocation API."""

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ..errors import UpstreamServiceError
from ..models import Position

logger = logging.getLogger(__name__)

GOOGLE_GEOLOCATION_URL = "https://www.googleapis.com/geolocation/v1/geolocate"


class GoogleGeolocationClient:
    def __init__(self, api_key: str, timeout_s: float = 10.0):
        self.api_key = api_key
        self.timeout_s = timeout_s

    async def locate(
        self,
        wifi_access_points: Optional[list[dict]] = None,
        cell_towers: Optional[list[dict]] = None,
    ) -> Position:
        """Locate from the caller's IP, refined by Wi-Fi / cell data when given."""
        if not self.api_key:
            raise UpstreamServiceError("geolocation", "GOOGLE_MAPS_API_KEY is not configured")

        body: dict = {"considerIp": True}
        if wifi_access_points:
            body["wifiAccessPoints"] = wifi_access_points
        if cell_towers:
            body["cellTowers"] = cell_towers

        try:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                response = await client.post(
                    GOOGLE_GEOLOCATION_URL, params={"key": self.api_key}, json=body
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamServiceError(
                "geolocation", f"HTTP {exc.response.status_code}", status=exc.response.status_code
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamServiceError("geolocation", f"request failed: {exc}") from exc
        except ValueError as exc:
            raise UpstreamServiceError("geolocation", f"response is not valid JSON: {exc}") from exc

        try:
            position = Position(
                latitude=data["location"]["lat"],
                longitude=data["location"]["lng"],
                accuracy=data.get("accuracy"),
            )
        except (KeyError, TypeError, ValidationError) as exc:
            raise UpstreamServiceError("geolocation", f"unexpected response shape: {exc}") from exc

        logger.debug("Located at (%s, %s) +/- %sm", position.latitude, position.longitude, position.accuracy)
        return position
