"""Reduce region clusters to face bounding boxes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from facegrid.ml.clustering import Cluster

MIN_CLUSTER_SIZE: int = 3


@dataclass(frozen=True)
class FaceBox:
    """A candidate face: axis-aligned box in pixel space plus mean region score."""

    x: int
    y: int
    width: int
    height: int
    confidence: float


def face_bounds(cluster: Cluster) -> FaceBox:
    """Return the box enclosing every region of a non-empty cluster."""
    min_x = min(region.x for region in cluster)
    min_y = min(region.y for region in cluster)
    max_x = max(region.x + region.size for region in cluster)
    max_y = max(region.y + region.size for region in cluster)
    total_score = sum(region.score for region in cluster)

    return FaceBox(
        x=min_x,
        y=min_y,
        width=max_x - min_x,
        height=max_y - min_y,
        confidence=total_score / len(cluster),
    )


def aggregate(clusters: Sequence[Cluster], min_cluster_size: int = MIN_CLUSTER_SIZE) -> list[FaceBox]:
    """Turn each large-enough cluster into a FaceBox, keeping cluster order.

    Clusters with fewer than min_cluster_size regions are dropped.
    """
    return [face_bounds(cluster) for cluster in clusters if len(cluster) >= min_cluster_size]
