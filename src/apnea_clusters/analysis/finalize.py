"""Business-threshold filter for reported clusters."""

import logging

from collections.abc import Iterable

from apnea_clusters.analysis.metrics import total_apnea_duration
from apnea_clusters.analysis.types import Cluster, FinalizeThresholds

logger = logging.getLogger(__name__)

__all__ = ["finalize_clusters", "is_valid_cluster"]


def is_valid_cluster(cluster: Cluster, thresholds: FinalizeThresholds) -> bool:
    """Whether a cluster meets the count, total-duration and window caps."""
    return (
        cluster.count >= thresholds.min_count
        and total_apnea_duration(cluster) >= thresholds.min_total_sec
        and cluster.duration_sec <= thresholds.max_cluster_sec
    )


def finalize_clusters(
    clusters: Iterable[Cluster], thresholds: FinalizeThresholds | None = None
) -> list[Cluster]:
    """
    Drop clusters that fail the business thresholds.

    Pure and order-preserving; retained clusters are returned as-is.
    Applying it twice with the same thresholds gives the same result.

    Args:
        clusters: Raw or annotated clusters
        thresholds: Minimum count/total seconds and maximum window
            (application defaults when None)

    Returns:
        Retained clusters in input order
    """
    thresholds = thresholds or FinalizeThresholds()
    clusters = list(clusters)
    kept = [c for c in clusters if is_valid_cluster(c, thresholds)]

    logger.debug(
        f"Finalized {len(kept)} of {len(clusters)} clusters "
        f"(min_count={thresholds.min_count}, "
        f"min_total_sec={thresholds.min_total_sec}, "
        f"max_cluster_sec={thresholds.max_cluster_sec})"
    )
    return kept
