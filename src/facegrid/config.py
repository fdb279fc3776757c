"""Environment-based configuration for FaceGrid."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from facegrid.ml.face_detector import DetectorParams


class Settings(BaseSettings):
    """Application settings loaded from FACEGRID_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FACEGRID_",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8083
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Authentication (None = disabled)
    api_key: str | None = None

    # Concurrency
    max_concurrent: int = Field(default=2, ge=1)
    queue_timeout: float = Field(default=5.0, gt=0)

    # Input limits
    max_image_pixels: int = Field(default=16_777_216, ge=1)
    max_file_size: int = Field(default=20_971_520, ge=1)

    # Detector tunables
    grid_divisor: int = Field(default=8, ge=1)
    score_threshold: float = Field(default=0.3, ge=0.0, le=1.0)
    min_cluster_size: int = Field(default=3, ge=1)
    distance_multiplier: float = Field(default=2.0, ge=0.0)

    def detector_params(self) -> DetectorParams:
        """Build the immutable tunables passed to each detection call."""
        return DetectorParams(
            grid_divisor=self.grid_divisor,
            score_threshold=self.score_threshold,
            min_cluster_size=self.min_cluster_size,
            distance_multiplier=self.distance_multiplier,
        )


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
