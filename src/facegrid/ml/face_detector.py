"""Skin-tone heuristic face detector.

Pipeline: scanner -> clusterer -> aggregator. Each pass is a pure function of
its input buffer and an immutable DetectorParams, so one detector instance can
serve concurrent calls as long as each call owns its buffer.
"""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import numpy as np

from facegrid.ml.aggregation import MIN_CLUSTER_SIZE, aggregate
from facegrid.ml.clustering import cluster_regions
from facegrid.ml.scanner import grid_size_for, scan

if TYPE_CHECKING:
    from facegrid.ml.aggregation import FaceBox
    from facegrid.ml.scanner import PixelBuffer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectorParams:
    """Tunables for one detection pass."""

    grid_divisor: int = 8
    score_threshold: float = 0.3
    min_cluster_size: int = MIN_CLUSTER_SIZE
    distance_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if self.grid_divisor < 1:
            raise ValueError(f"grid_divisor must be >= 1, got {self.grid_divisor}")
        if not 0.0 <= self.score_threshold <= 1.0:
            raise ValueError(f"score_threshold must be within [0, 1], got {self.score_threshold}")
        if self.min_cluster_size < 1:
            raise ValueError(f"min_cluster_size must be >= 1, got {self.min_cluster_size}")
        if self.distance_multiplier < 0:
            raise ValueError(f"distance_multiplier must be >= 0, got {self.distance_multiplier}")


DEFAULT_PARAMS = DetectorParams()


class FaceDetector(Protocol):
    """Protocol for face detectors working on raw RGBA buffers."""

    @property
    def model_name(self) -> str:
        """Return the detector identifier string."""
        ...

    def detect(self, image_data: PixelBuffer | None, width: int, height: int) -> list[FaceBox]:
        """Detect faces in an image.

        Args:
            image_data: Row-major RGBA bytes, 4 per pixel.
            width: Image width in pixels.
            height: Image height in pixels.

        Returns:
            Face boxes in pixel coordinates; empty when nothing was found.
        """
        ...


def _as_dimension(name: str, value: object) -> int:
    """Return value as a plain int; accepts any integer type such as numpy.int64."""
    # bool is an int subclass but never a meaningful image dimension.
    if isinstance(value, (bool, np.bool_)):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")
    try:
        return operator.index(value)  # type: ignore[arg-type]
    except TypeError:
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}") from None


class SkinToneFaceDetector:
    """Finds skin-colored blobs and reports them as candidate faces."""

    def __init__(self, params: DetectorParams = DEFAULT_PARAMS) -> None:
        self._params = params

    @property
    def model_name(self) -> str:
        return "skin_tone_grid"

    @property
    def params(self) -> DetectorParams:
        return self._params

    def detect(self, image_data: PixelBuffer | None, width: int, height: int) -> list[FaceBox]:
        """Run one detection pass over an RGBA buffer.

        Raises:
            TypeError: If width or height is not an integer.
        """
        width = _as_dimension("width", width)
        height = _as_dimension("height", height)

        params = self._params
        regions = scan(
            image_data,
            width,
            height,
            grid_divisor=params.grid_divisor,
            score_threshold=params.score_threshold,
        )
        if not regions:
            logger.debug("No skin regions in %dx%d image", width, height)
            return []

        threshold = params.distance_multiplier * grid_size_for(width, height, params.grid_divisor)
        clusters = cluster_regions(regions, threshold)
        faces = aggregate(clusters, params.min_cluster_size)

        logger.debug(
            "Detection pass on %dx%d: %d regions, %d clusters, %d faces",
            width,
            height,
            len(regions),
            len(clusters),
            len(faces),
        )
        return faces


def detect(
    image_data: PixelBuffer | None,
    width: int,
    height: int,
    params: DetectorParams | None = None,
) -> list[FaceBox]:
    """Detect faces in an RGBA buffer with the given (or default) tunables."""
    return SkinToneFaceDetector(params or DEFAULT_PARAMS).detect(image_data, width, height)
