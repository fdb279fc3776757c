"""Greedy seed clustering of scored regions.

Each cluster is grown around a single seed: a region joins when its corner is
closer than the threshold to the seed's corner. Membership is not transitive
through regions that joined earlier, so two regions both near a third but far
from the seed end up in different clusters. This is the grouping the detector
reports on and is kept as-is.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from facegrid.ml.scanner import ScoredRegion

if TYPE_CHECKING:
    from collections.abc import Sequence

Cluster = list[ScoredRegion]


def corner_distance(a: ScoredRegion, b: ScoredRegion) -> float:
    """Euclidean distance between the top-left corners of two regions."""
    return math.hypot(a.x - b.x, a.y - b.y)


def cluster_regions(regions: Sequence[ScoredRegion], threshold: float) -> list[Cluster]:
    """Partition regions into seed clusters.

    Args:
        regions: Scored regions in scan order.
        threshold: Strict upper bound on seed-to-member corner distance.

    Returns:
        Clusters in seed-discovery order; each starts with its seed and every
        input region appears in exactly one cluster.
    """
    clusters: list[Cluster] = []
    used: set[int] = set()

    for i, seed in enumerate(regions):
        if i in used:
            continue
        used.add(i)
        cluster: Cluster = [seed]

        for j in range(i + 1, len(regions)):
            if j in used:
                continue
            if corner_distance(seed, regions[j]) < threshold:
                cluster.append(regions[j])
                used.add(j)

        clusters.append(cluster)

    return clusters
