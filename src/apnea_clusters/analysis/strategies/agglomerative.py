"""Single-linkage agglomerative clustering over the chronological event chain."""

import logging

from collections.abc import Sequence

from apnea_clusters.analysis.events import sort_events
from apnea_clusters.analysis.types import (
    ApneaEvent,
    Cluster,
    ClusterList,
    ClusterParams,
    FlgSample,
)

logger = logging.getLogger(__name__)

__all__ = ["cluster_agglomerative"]


def cluster_agglomerative(
    events: Sequence[ApneaEvent],
    flg_samples: Sequence[FlgSample],
    params: ClusterParams,
) -> ClusterList:
    """
    Merge chronologically adjacent events linked by a short gap.

    In one dimension single linkage reduces to cutting the sorted chain
    wherever the silent gap (next onset minus previous event end) exceeds
    ``params.linkage_threshold_sec``. FLG samples are ignored.

    Args:
        events: Scored apnea events (any order)
        flg_samples: Unused; accepted for a uniform strategy signature
        params: Uses linkage_threshold_sec

    Returns:
        Non-overlapping clusters in chronological order
    """
    if not events:
        return ClusterList()

    sorted_events = sort_events(events)
    clusters = ClusterList()
    current = [sorted_events[0]]

    for event in sorted_events[1:]:
        gap = (event.timestamp - current[-1].end).total_seconds()
        if gap > params.linkage_threshold_sec:
            clusters.append(Cluster.from_events(current))
            current = [event]
        else:
            current.append(event)

    clusters.append(Cluster.from_events(current))

    logger.debug(
        f"Agglomerative clustering (threshold={params.linkage_threshold_sec}s): "
        f"{len(sorted_events)} events -> {len(clusters)} clusters"
    )
    return clusters
