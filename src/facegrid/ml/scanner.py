"""Region scanner: slides a square window over an RGBA buffer on a half-overlap grid.

Window scores come from two summed-area tables built once per buffer: one
counting skin pixels, one counting pixels that were actually sampled. A pixel
is sampled only when its R, G and B bytes all lie inside the buffer, so a
buffer shorter than width * height * 4 simply contributes fewer samples.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from facegrid.ml.skin_tone import skin_tone_mask

BYTES_PER_PIXEL = 4

PixelBuffer = bytes | bytearray | memoryview | Sequence[int]


@dataclass(frozen=True)
class ScoredRegion:
    """A square scan window and the fraction of its pixels classified as skin.

    (x, y) is the top-left corner in pixel space, size is the side length.
    """

    x: int
    y: int
    size: int
    score: float


def grid_size_for(width: int, height: int, grid_divisor: int) -> int:
    """Return the window side (and stride basis) for an image of the given size."""
    return min(width, height) // grid_divisor


def _as_byte_array(pixels: PixelBuffer) -> NDArray[np.uint8]:
    # Zero-copy view for bytes-like input.
    if isinstance(pixels, (bytes, bytearray, memoryview)):
        return np.frombuffer(pixels, dtype=np.uint8)
    return np.asarray(pixels, dtype=np.uint8)


class _SkinCounts:
    """Summed-area tables over the part of the image the buffer covers."""

    def __init__(self, pixels: PixelBuffer, width: int) -> None:
        data = _as_byte_array(pixels)
        # Pixel k is readable when its blue byte 4k + 2 is inside the buffer.
        readable = (len(data) + 1) // BYTES_PER_PIXEL

        self.rows = -(-readable // width)
        self.cols = width if self.rows > 1 else readable

        skin = np.zeros(self.rows * self.cols, dtype=np.int64)
        sampled = np.zeros(self.rows * self.cols, dtype=np.int64)
        skin[:readable] = skin_tone_mask(
            data[0::BYTES_PER_PIXEL][:readable],
            data[1::BYTES_PER_PIXEL][:readable],
            data[2::BYTES_PER_PIXEL][:readable],
        )
        sampled[:readable] = 1

        self._skin = self._summed_area(skin)
        self._sampled = self._summed_area(sampled)

    def _summed_area(self, flat: NDArray[np.int64]) -> NDArray[np.int64]:
        table = np.zeros((self.rows + 1, self.cols + 1), dtype=np.int64)
        table[1:, 1:] = flat.reshape(self.rows, self.cols).cumsum(axis=0).cumsum(axis=1)
        return table

    @staticmethod
    def _window_sums(
        table: NDArray[np.int64], y0: NDArray[np.int64], y1: NDArray[np.int64], x0: NDArray[np.int64], x1: NDArray[np.int64]
    ) -> NDArray[np.int64]:
        return table[y1, x1] - table[y0, x1] - table[y1, x0] + table[y0, x0]

    def scores(self, xs: NDArray[np.int64], ys: NDArray[np.int64], size: int) -> NDArray[np.float64]:
        """Score every window whose origin is in ys x xs; shape (len(ys), len(xs))."""
        y0 = np.clip(ys, 0, self.rows)[:, np.newaxis]
        y1 = np.clip(ys + size, 0, self.rows)[:, np.newaxis]
        x0 = np.clip(xs, 0, self.cols)[np.newaxis, :]
        x1 = np.clip(xs + size, 0, self.cols)[np.newaxis, :]

        skin = self._window_sums(self._skin, y0, y1, x0, x1)
        sampled = self._window_sums(self._sampled, y0, y1, x0, x1)
        return np.divide(skin, sampled, out=np.zeros(skin.shape, dtype=np.float64), where=sampled > 0)


def score_region(pixels: PixelBuffer, width: int, start_x: int, start_y: int, size: int) -> float:
    """Return the skin-pixel ratio of one window.

    Pixels whose RGB bytes fall outside the buffer, and columns outside
    [0, width), are skipped. Returns 0.0 when nothing could be sampled.
    """
    if width <= 0 or size <= 0 or len(pixels) == 0:
        return 0.0
    counts = _SkinCounts(pixels, width)
    scores = counts.scores(np.array([start_x]), np.array([start_y]), size)
    return float(scores[0, 0])


def scan(
    pixels: PixelBuffer | None,
    width: int,
    height: int,
    *,
    grid_divisor: int = 8,
    score_threshold: float = 0.3,
) -> list[ScoredRegion]:
    """Score every grid window and keep those above the threshold.

    Args:
        pixels: Row-major RGBA bytes, 4 per pixel. Read but never retained.
        width: Image width in pixels.
        height: Image height in pixels.
        grid_divisor: The window side is min(width, height) // grid_divisor.
        score_threshold: Regions are emitted only when score > threshold.

    Returns:
        Regions in scan order (row by row, left to right).
    """
    if pixels is None or len(pixels) == 0:
        return []

    grid_size = grid_size_for(width, height, grid_divisor)
    if grid_size <= 0:
        return []
    stride = max(grid_size // 2, 1)

    counts = _SkinCounts(pixels, width)
    # Windows starting past the covered rows or columns sample nothing.
    ys = np.arange(0, min(height - grid_size, counts.rows), stride, dtype=np.int64)
    xs = np.arange(0, min(width - grid_size, counts.cols), stride, dtype=np.int64)
    if len(ys) == 0 or len(xs) == 0:
        return []

    scores = counts.scores(xs, ys, grid_size)
    regions: list[ScoredRegion] = []
    for row, col in zip(*np.nonzero(scores > score_threshold), strict=True):
        regions.append(ScoredRegion(x=int(xs[col]), y=int(ys[row]), size=grid_size, score=float(scores[row, col])))
    return regions
