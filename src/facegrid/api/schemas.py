"""Pydantic request/response schemas for the FaceGrid API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class DetectedFace(BaseModel):
    """A single candidate face in pixel coordinates of the submitted image."""

    x: int = Field(description="Left edge of the bounding box in pixels")
    y: int = Field(description="Top edge of the bounding box in pixels")
    width: int = Field(ge=0, description="Bounding box width in pixels")
    height: int = Field(ge=0, description="Bounding box height in pixels")
    confidence: float = Field(ge=0.0, le=1.0, description="Mean skin-tone score of the merged regions")


class DetectFacesResponse(BaseModel):
    """Response for the face detection endpoints."""

    width: int
    height: int
    count: int = Field(description="Number of faces found; 0 is a normal result")
    faces: list[DetectedFace]


class DetectorInfo(BaseModel):
    """Active detector tunables."""

    name: str
    grid_divisor: int
    score_threshold: float
    min_cluster_size: int
    distance_multiplier: float


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    concurrent_requests: int
    queue_depth: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
