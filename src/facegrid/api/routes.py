"""API route definitions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, Query, Request, UploadFile, status
from fastapi.responses import JSONResponse

from facegrid.api.middleware import verify_api_key
from facegrid.api.schemas import (
    DetectedFace,
    DetectFacesResponse,
    DetectorInfo,
    ErrorResponse,
    HealthResponse,
)
from facegrid.ml.preprocessing import ImageTooLargeError, decode_image, to_pixel_buffer

if TYPE_CHECKING:
    from facegrid.config import Settings
    from facegrid.ml.aggregation import FaceBox
    from facegrid.ml.inference import DetectionPool
    from facegrid.ml.scanner import PixelBuffer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", dependencies=[Depends(verify_api_key)])

_DETECT_RESPONSES: dict[int | str, dict[str, object]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: {"model": ErrorResponse},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
}


def _get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def _get_detection_pool(request: Request) -> DetectionPool:
    pool: DetectionPool = request.app.state.detection_pool
    return pool


def _error(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


def _to_response(faces: list[FaceBox], width: int, height: int) -> DetectFacesResponse:
    return DetectFacesResponse(
        width=width,
        height=height,
        count=len(faces),
        faces=[
            DetectedFace(x=f.x, y=f.y, width=f.width, height=f.height, confidence=f.confidence) for f in faces
        ],
    )


async def _run_detection(request: Request, pixels: PixelBuffer, width: int, height: int) -> JSONResponse:
    pool = _get_detection_pool(request)
    try:
        faces = await pool.detect(pixels, width, height)
    except TimeoutError:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Detection queue is full, retry later")
    return JSONResponse(content=_to_response(faces, width, height).model_dump())


@router.post(
    "/detect-faces",
    response_model=DetectFacesResponse,
    responses=_DETECT_RESPONSES,
    summary="Detect faces in an uploaded image",
)
async def detect_faces(request: Request, file: UploadFile) -> JSONResponse:
    """Decode an uploaded image and report skin-tone face candidates."""
    settings = _get_settings(request)
    content = await file.read()
    if len(content) > settings.max_file_size:
        return _error(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, f"File exceeds {settings.max_file_size} bytes")

    try:
        image = decode_image(content, settings.max_image_pixels)
    except ImageTooLargeError as exc:
        return _error(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, str(exc))
    except ValueError as exc:
        logger.info("Rejected upload %r: %s", file.filename, exc)
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    pixels, width, height = to_pixel_buffer(image)
    return await _run_detection(request, pixels, width, height)


@router.post(
    "/detect-faces/raw",
    response_model=DetectFacesResponse,
    responses=_DETECT_RESPONSES,
    summary="Detect faces in a raw RGBA buffer",
)
async def detect_faces_raw(
    request: Request,
    width: Annotated[int, Query(ge=1, description="Image width in pixels")],
    height: Annotated[int, Query(ge=1, description="Image height in pixels")],
) -> JSONResponse:
    """Run detection on a request body of row-major RGBA bytes.

    The body length is not checked against width * height; pixels outside the
    body are skipped during scanning.
    """
    settings = _get_settings(request)
    if width * height > settings.max_image_pixels:
        return _error(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"Image is {width}x{height}, exceeds limit of {settings.max_image_pixels} pixels",
        )
    body = await request.body()
    if len(body) > settings.max_file_size:
        return _error(status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, f"Body exceeds {settings.max_file_size} bytes")
    return await _run_detection(request, body, width, height)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health(request: Request) -> HealthResponse:
    """Return service health status."""
    pool = _get_detection_pool(request)
    return HealthResponse(
        status="ok",
        concurrent_requests=pool.active_count,
        queue_depth=pool.queue_depth,
    )


@router.get(
    "/detector",
    response_model=DetectorInfo,
    summary="Show detector tunables",
)
async def detector_info(request: Request) -> DetectorInfo:
    """Return the tunables every detection pass runs with."""
    settings = _get_settings(request)
    params = settings.detector_params()
    return DetectorInfo(
        name=_get_detection_pool(request).detector.model_name,
        grid_divisor=params.grid_divisor,
        score_threshold=params.score_threshold,
        min_cluster_size=params.min_cluster_size,
        distance_multiplier=params.distance_multiplier,
    )
