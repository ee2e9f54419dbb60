"""Runtime configuration read once from the environment (and .env files)."""

from pathlib import Path
from typing import Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    google_maps_api_key: str = Field(default="", validation_alias="GOOGLE_MAPS_API_KEY")
    kakao_rest_api_key: str = Field(default="", validation_alias="KAKAO_REST_API_KEY")
    gemini_api_key: str = Field(default="", validation_alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-1.5-flash", validation_alias="GEMINI_MODEL")

    elevation_max_batch: int = Field(default=512, gt=0, validation_alias="ELEVATION_MAX_BATCH")
    geocode_delay_s: float = Field(default=0.1, ge=0, validation_alias="GEOCODE_DELAY_S")
    http_timeout_s: float = Field(default=10.0, gt=0, validation_alias="HTTP_TIMEOUT_S")

    llm_timeout_s: float = Field(default=8.5, gt=0, validation_alias="LLM_TIMEOUT_S")
    llm_max_attempts: int = Field(default=2, ge=1, le=5, validation_alias="LLM_MAX_ATTEMPTS")
    llm_backoff_s: float = Field(default=0.5, ge=0, validation_alias="LLM_BACKOFF_S")
    pipeline_timeout_s: float = Field(default=25.0, gt=0, validation_alias="PIPELINE_TIMEOUT_S")

    debug_dump_dir: Optional[Path] = Field(default=None, validation_alias="DEBUG_DUMP_DIR")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def llm_worst_case_s(self) -> float:
        return (
            self.llm_timeout_s * self.llm_max_attempts
            + self.llm_backoff_s * (self.llm_max_attempts - 1)
        )

    @model_validator(mode="after")
    def check_outer_deadline_is_looser(self) -> "Settings":
        if self.pipeline_timeout_s <= self.llm_worst_case_s:
            raise ValueError(
                f"pipeline_timeout_s ({self.pipeline_timeout_s}) must exceed the model "
                f"stage worst case ({self.llm_worst_case_s:.1f}s)"
            )
        return self

    def masked_keys(self) -> dict[str, str]:
        """Credential presence for status output, never the full secret."""
        keys = {
            "GOOGLE_MAPS_API_KEY": self.google_maps_api_key,
            "KAKAO_REST_API_KEY": self.kakao_rest_api_key,
            "GEMINI_API_KEY": self.gemini_api_key,
        }
        return {name: f"{value[:8]}..." if value else "undefined" for name, value in keys.items()}
