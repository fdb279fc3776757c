"""Tests for seed clustering of scored regions."""

from __future__ import annotations

from facegrid.ml.clustering import cluster_regions, corner_distance
from facegrid.ml.scanner import ScoredRegion


def _region(x: int, y: int, size: int = 8, score: float = 1.0) -> ScoredRegion:
    return ScoredRegion(x=x, y=y, size=size, score=score)


class TestCornerDistance:
    def test_uses_top_left_corners(self) -> None:
        assert corner_distance(_region(0, 0, size=8), _region(3, 4, size=100)) == 5.0


class TestClusterRegions:
    def test_empty_input(self) -> None:
        assert cluster_regions([], 16.0) == []

    def test_single_region(self) -> None:
        only = _region(0, 0)
        assert cluster_regions([only], 16.0) == [[only]]

    def test_distance_equal_to_threshold_does_not_join(self) -> None:
        a, b, c = _region(0, 0), _region(16, 0), _region(0, 16)
        clusters = cluster_regions([a, b, c], 16.0)
        assert clusters == [[a], [b], [c]]

    def test_distance_just_below_threshold_joins(self) -> None:
        a, b = _region(0, 0), _region(15, 0)
        assert cluster_regions([a, b], 16.0) == [[a, b]]

    def test_membership_is_relative_to_seed_only(self) -> None:
        # c is close to b but not to the seed a, so it starts its own cluster.
        a, b, c = _region(0, 0), _region(10, 0), _region(20, 0)
        clusters = cluster_regions([a, b, c], 15.0)
        assert clusters == [[a, b], [c]]

    def test_clusters_follow_seed_discovery_order(self) -> None:
        far1, near, far2 = _region(30, 30), _region(0, 0), _region(31, 30)
        clusters = cluster_regions([far1, near, far2], 5.0)
        assert clusters[0][0] is far1
        assert clusters[0][1] is far2
        assert clusters[1] == [near]

    def test_every_region_in_exactly_one_cluster(self) -> None:
        regions = [_region(x, y) for y in range(0, 60, 4) for x in range(0, 60, 4)]
        clusters = cluster_regions(regions, 16.0)

        flat = [id(r) for cluster in clusters for r in cluster]
        assert len(flat) == len(regions)
        assert set(flat) == {id(r) for r in regions}
        assert all(cluster for cluster in clusters)

    def test_zero_threshold_makes_singletons(self) -> None:
        regions = [_region(0, 0), _region(0, 0)]
        assert cluster_regions(regions, 0.0) == [[regions[0]], [regions[1]]]
