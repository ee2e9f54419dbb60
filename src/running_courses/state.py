"""Process-wide service wiring for the running-courses MCP server.

Holds the settings and the external-service clients built from them. Clients
carry only their own configuration; every request builds its own course set
and lookup maps, so nothing here changes while requests run.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from running_courses.config import Settings
from running_courses.core.elevation import ElevationService, GoogleElevationClient
from running_courses.core.geocoding import GeocodingService, KakaoGeocodingClient
from running_courses.core.geolocation import GoogleGeolocationClient
from running_courses.core.llm import GeminiClient, TextModel
from running_courses.core.pipeline import CoursePipeline
from running_courses.core.recommend import RecommendationEngine


class ServiceState(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    settings: Settings
    elevation: ElevationService
    geocoder: GeocodingService
    model: TextModel
    geolocator: Optional[GoogleGeolocationClient] = None
    started_at: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceState":
        return cls(
            settings=settings,
            elevation=GoogleElevationClient(
                api_key=settings.google_maps_api_key,
                max_batch_size=settings.elevation_max_batch,
                timeout_s=settings.http_timeout_s,
            ),
            geocoder=KakaoGeocodingClient(
                api_key=settings.kakao_rest_api_key,
                timeout_s=settings.http_timeout_s,
            ),
            model=GeminiClient(
                api_key=settings.gemini_api_key,
                model=settings.gemini_model,
                timeout_s=settings.llm_timeout_s + 5.0,
            ),
            geolocator=GoogleGeolocationClient(
                api_key=settings.google_maps_api_key,
                timeout_s=settings.http_timeout_s,
            ),
        )

    def engine(self) -> RecommendationEngine:
        return RecommendationEngine(
            self.model,
            timeout_s=self.settings.llm_timeout_s,
            max_attempts=self.settings.llm_max_attempts,
            backoff_s=self.settings.llm_backoff_s,
        )

    def pipeline(self) -> CoursePipeline:
        return CoursePipeline(
            elevation=self.elevation,
            geocoder=self.geocoder,
            engine=self.engine(),
            settings=self.settings,
        )

    def summary(self) -> dict:
        s = self.settings
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "started_at": self.started_at,
            "services": {
                "elevation": self.elevation.is_configured,
                "geocoding": self.geocoder.is_configured,
                "model": self.model.is_configured,
                "geolocation": bool(self.geolocator and self.geolocator.api_key),
            },
            "credentials": s.masked_keys(),
            "limits": {
                "elevation_max_batch": s.elevation_max_batch,
                "geocode_delay_s": s.geocode_delay_s,
                "llm_timeout_s": s.llm_timeout_s,
                "llm_max_attempts": s.llm_max_attempts,
                "pipeline_timeout_s": s.pipeline_timeout_s,
            },
            "debug_dump_dir": str(s.debug_dump_dir) if s.debug_dump_dir else None,
        }


# Global service state, one per MCP server process
state = ServiceState.from_settings(Settings())
