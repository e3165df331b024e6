"""
Cluster metrics and composite severity scoring.

Metrics apply to clusters from any strategy. Severity is a positively
weighted sum of four normalized terms:

- total apnea time (minutes-scale, relative to SeverityConstants.DURATION_ALERT_SEC)
- event density over the raw event span
- duration-weighted density over the raw event span
- boundary extension beyond the raw span

Severity densities are measured over the raw span (first onset to last
event end); FLG edge growth only moves the extension term.
"""

import logging

from collections.abc import Iterable, Sequence

from apnea_clusters.analysis.types import (
    Cluster,
    ClusterList,
    FlgSample,
    FlgWindowSummary,
)
from apnea_clusters.analysis.utils import rate_per_minute
from apnea_clusters.constants import SeverityConstants as SC

logger = logging.getLogger(__name__)

__all__ = [
    "annotate_cluster",
    "annotate_clusters",
    "compute_cluster_severity",
    "compute_density",
    "compute_severity",
    "compute_weighted_density",
    "extension_sec",
    "rank_clusters",
    "summarize_flg_window",
    "total_apnea_duration",
]


def total_apnea_duration(cluster: Cluster) -> float:
    """Sum of member event durations (seconds)."""
    return float(sum(event.duration_sec for event in cluster.events))


def compute_density(cluster: Cluster) -> float:
    """Events per minute over the cluster window."""
    return rate_per_minute(cluster.count, cluster.duration_sec)


def compute_weighted_density(cluster: Cluster) -> float:
    """Event-seconds per minute over the cluster window."""
    return rate_per_minute(total_apnea_duration(cluster), cluster.duration_sec)


def extension_sec(cluster: Cluster) -> float:
    """Seconds the window was grown beyond the raw event span."""
    before = (cluster.raw_start - cluster.start).total_seconds()
    after = (cluster.end - cluster.raw_end).total_seconds()
    return max(0.0, before) + max(0.0, after)


def compute_severity(
    total_apnea_sec: float,
    density: float,
    weighted_density: float,
    extension: float,
) -> float:
    """
    Combine severity terms into one non-negative score.

    Strictly increasing in each argument while the others are held fixed.

    Args:
        total_apnea_sec: Sum of event durations (seconds)
        density: Events per minute
        weighted_density: Event-seconds per minute
        extension: Boundary extension beyond the raw span (seconds)

    Returns:
        Severity score (0 for an empty contribution on every term)
    """
    score = (
        SC.TOTAL_DURATION_WEIGHT * total_apnea_sec / SC.DURATION_ALERT_SEC
        + SC.DENSITY_WEIGHT * density / SC.DENSITY_REFERENCE
        + SC.WEIGHTED_DENSITY_WEIGHT * weighted_density / SC.WEIGHTED_DENSITY_REFERENCE
        + SC.EXTENSION_WEIGHT * extension / SC.DURATION_ALERT_SEC
    )
    return max(0.0, float(score))


def compute_cluster_severity(cluster: Cluster) -> float:
    """Severity of a cluster from its events and window."""
    total = total_apnea_duration(cluster)
    raw_span = (cluster.raw_end - cluster.raw_start).total_seconds()
    return compute_severity(
        total_apnea_sec=total,
        density=rate_per_minute(cluster.count, raw_span),
        weighted_density=rate_per_minute(total, raw_span),
        extension=extension_sec(cluster),
    )


def annotate_cluster(cluster: Cluster) -> Cluster:
    """Return a copy of the cluster with metric and severity fields filled."""
    return cluster.model_copy(
        update={
            "total_apnea_duration_sec": total_apnea_duration(cluster),
            "density": compute_density(cluster),
            "weighted_density": compute_weighted_density(cluster),
            "severity": compute_cluster_severity(cluster),
        }
    )


def annotate_clusters(clusters: Sequence[Cluster]) -> ClusterList:
    """Annotate every cluster, keeping order and any strategy metadata."""
    meta = clusters.meta if isinstance(clusters, ClusterList) else None
    return ClusterList((annotate_cluster(c) for c in clusters), meta=meta)


def rank_clusters(clusters: Iterable[Cluster]) -> list[Cluster]:
    """Clusters ordered by severity, highest first (ties keep input order)."""
    return sorted(clusters, key=lambda c: c.severity, reverse=True)


def summarize_flg_window(
    cluster: Cluster, flg_samples: Iterable[FlgSample]
) -> FlgWindowSummary | None:
    """
    Summarize FLG readings that fall inside a cluster window.

    Returns:
        FlgWindowSummary, or None when no reading lies in [start, end]
    """
    levels = [
        sample.level
        for sample in flg_samples
        if cluster.start <= sample.timestamp <= cluster.end
    ]
    if not levels:
        return None

    return FlgWindowSummary(
        sample_count=len(levels),
        min_level=min(levels),
        max_level=max(levels),
        mean_level=sum(levels) / len(levels),
    )
