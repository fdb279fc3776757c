"""Tests for the grid region scanner."""

from __future__ import annotations

import time

import pytest

from facegrid.ml.scanner import ScoredRegion, grid_size_for, scan, score_region

SKIN = (200, 150, 120)
BLUE = (0, 0, 255)


def _solid(width: int, height: int, rgb: tuple[int, int, int]) -> bytes:
    return bytes((*rgb, 255)) * (width * height)


def _rows(width: int, rows: list[tuple[int, int, int]]) -> bytes:
    return b"".join(bytes((*rgb, 255)) * width for rgb in rows)


class TestGridSize:
    def test_uses_short_side(self) -> None:
        assert grid_size_for(128, 64, 8) == 8
        assert grid_size_for(64, 128, 8) == 8

    def test_small_image_has_zero_grid(self) -> None:
        assert grid_size_for(7, 100, 8) == 0


class TestScoreRegion:
    def test_fraction_of_skin_pixels(self) -> None:
        pixels = _rows(10, [SKIN] * 3 + [BLUE] * 7)
        assert score_region(pixels, 10, 0, 0, 10) == pytest.approx(0.3)

    def test_rows_past_buffer_are_not_sampled(self) -> None:
        # 4 rows of skin declared as a taller image: only real rows count.
        pixels = _solid(8, 4, SKIN)
        assert score_region(pixels, 8, 0, 2, 8) == 1.0

    def test_nothing_sampled_scores_zero(self) -> None:
        pixels = _solid(8, 4, SKIN)
        assert score_region(pixels, 8, 0, 10, 4) == 0.0

    def test_empty_buffer_scores_zero(self) -> None:
        assert score_region(b"", 8, 0, 0, 4) == 0.0

    def test_pixel_needs_rgb_bytes_inside_buffer(self) -> None:
        # Blue pixel then skin pixel in a 2x1 image.
        pixels = bytes((*BLUE, 255, *SKIN, 255))
        assert score_region(pixels, 2, 0, 0, 2) == 0.5
        # Missing alpha byte: the skin pixel is still sampled.
        assert score_region(pixels[:-1], 2, 0, 0, 2) == 0.5
        # Missing blue byte as well: the skin pixel is skipped.
        assert score_region(pixels[:-2], 2, 0, 0, 2) == 0.0

    def test_negative_origin_is_clipped(self) -> None:
        pixels = _rows(4, [SKIN, BLUE, BLUE, BLUE])
        # Window rows -2..1 cover only real rows 0 (skin) and 1 (blue).
        assert score_region(pixels, 4, 0, -2, 4) == 0.5

    def test_window_past_right_edge_of_short_buffer(self) -> None:
        # Only 3 pixels delivered for a declared 100-pixel-wide row.
        pixels = _solid(3, 1, SKIN)
        assert score_region(pixels, 100, 0, 0, 50) == 1.0
        assert score_region(pixels, 100, 10, 0, 50) == 0.0


class TestScan:
    def test_solid_skin_scores_every_window(self) -> None:
        regions = scan(_solid(64, 64, SKIN), 64, 64)

        # grid 8, stride 4, origins 0..52 on both axes
        assert len(regions) == 14 * 14
        assert all(r.score == 1.0 for r in regions)
        assert all(r.size == 8 for r in regions)
        assert regions[0] == ScoredRegion(x=0, y=0, size=8, score=1.0)
        assert regions[-1].x == 52
        assert regions[-1].y == 52

    def test_scan_order_is_row_major(self) -> None:
        regions = scan(_solid(64, 64, SKIN), 64, 64)
        origins = [(r.y, r.x) for r in regions]
        assert origins == sorted(origins)

    def test_solid_blue_yields_nothing(self) -> None:
        assert scan(_solid(64, 64, BLUE), 64, 64) == []

    def test_threshold_is_strict(self) -> None:
        pixels = _solid(16, 16, SKIN)
        assert len(scan(pixels, 16, 16)) == 14 * 14
        assert scan(pixels, 16, 16, score_threshold=1.0) == []

    @pytest.mark.parametrize(("width", "height"), [(0, 0), (64, 64), (-5, 10), (1, 1)])
    def test_empty_buffer(self, width: int, height: int) -> None:
        assert scan(b"", width, height) == []

    def test_none_buffer(self) -> None:
        assert scan(None, 64, 64) == []

    def test_image_smaller_than_grid(self) -> None:
        assert scan(_solid(7, 7, SKIN), 7, 7) == []

    def test_negative_dimensions(self) -> None:
        assert scan(_solid(8, 8, SKIN), -64, 64) == []

    def test_truncated_buffer_only_scans_present_rows(self) -> None:
        # Declared 64x64 but only 32 rows delivered.
        pixels = _solid(64, 32, SKIN)
        regions = scan(pixels, 64, 64)

        assert regions
        assert max(r.y for r in regions) == 28
        assert all(r.score == 1.0 for r in regions)

    def test_accepts_bytearray_and_memoryview(self) -> None:
        pixels = _solid(64, 64, SKIN)
        expected = scan(pixels, 64, 64)
        assert scan(bytearray(pixels), 64, 64) == expected
        assert scan(memoryview(pixels), 64, 64) == expected

    def test_accepts_int_sequence(self) -> None:
        pixels = _solid(64, 64, SKIN)
        assert scan(list(pixels), 64, 64) == scan(pixels, 64, 64)

    def test_tiny_buffer_with_huge_declared_size_is_fast(self) -> None:
        started = time.monotonic()
        regions = scan(_solid(4, 1, SKIN), 40_000_000, 40_000_000)
        elapsed = time.monotonic() - started

        assert regions == [ScoredRegion(x=0, y=0, size=5_000_000, score=1.0)]
        assert elapsed < 1.0

    def test_custom_grid_divisor(self) -> None:
        regions = scan(_solid(64, 64, SKIN), 64, 64, grid_divisor=4)
        assert {r.size for r in regions} == {16}
        # stride 8, origins 0..40
        assert len(regions) == 6 * 6
