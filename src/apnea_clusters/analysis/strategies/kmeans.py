"""
K-means temporal clustering of apnea events.

Runs 1-D Lloyd's iteration over event onsets expressed as epoch seconds.
Centroids start evenly spaced across the observed time range, which keeps
the result deterministic for a given input.
"""

import logging

from collections.abc import Sequence

import numpy as np

from apnea_clusters.analysis.events import sort_events
from apnea_clusters.analysis.types import (
    ApneaEvent,
    Cluster,
    ClusterList,
    ClusterParams,
    FlgSample,
    KMeansMeta,
)
from apnea_clusters.constants import ClusteringConstants as CC
from apnea_clusters.errors import InvalidParameterError

logger = logging.getLogger(__name__)

__all__ = ["cluster_kmeans", "is_k_overspecified"]


def is_k_overspecified(k: int, event_count: int) -> bool:
    """Whether k is large enough relative to the events to force singletons."""
    return k > event_count / CC.KMEANS_OVERSPECIFIED_DIVISOR


def cluster_kmeans(
    events: Sequence[ApneaEvent],
    flg_samples: Sequence[FlgSample],
    params: ClusterParams,
) -> ClusterList:
    """
    Partition events into at most k temporal groups.

    Args:
        events: Scored apnea events (any order)
        flg_samples: Unused; k-means has no notion of FLG bridging
        params: Uses k and max_iterations

    Returns:
        One cluster per non-empty partition, chronological, with ``meta``
        holding convergence diagnostics

    Raises:
        InvalidParameterError: If k < 1
    """
    k = params.k
    if k < 1:
        raise InvalidParameterError(f"k must be at least 1, got {k}", parameter="k")

    if not events:
        return ClusterList(
            meta=KMeansMeta(
                converged=True,
                iterations=0,
                max_iterations_reached=False,
                wcss=0.0,
                k_overspecified=False,
            )
        )

    sorted_events = sort_events(events)
    times = np.array([e.timestamp.timestamp() for e in sorted_events], dtype=float)

    centroids = _initial_centroids(times, k)
    assignments = _assign(times, centroids)
    centroids = _update_centroids(times, assignments, centroids)
    converged = False
    iterations = 1

    while iterations < params.max_iterations:
        iterations += 1
        new_assignments = _assign(times, centroids)

        if np.array_equal(new_assignments, assignments):
            converged = True
            break

        assignments = new_assignments
        centroids = _update_centroids(times, assignments, centroids)

    max_iterations_reached = not converged
    if max_iterations_reached:
        logger.warning(
            f"k-means did not converge within {params.max_iterations} iterations "
            f"(k={k}, events={len(sorted_events)}); returning best-effort partition"
        )

    wcss = float(np.sum((times - centroids[assignments]) ** 2))
    k_overspecified = is_k_overspecified(k, len(sorted_events))
    if k_overspecified:
        logger.debug(
            f"k={k} is high for {len(sorted_events)} events; expect singleton clusters"
        )

    clusters = ClusterList(
        _build_clusters(sorted_events, assignments),
        meta=KMeansMeta(
            converged=converged,
            iterations=iterations,
            max_iterations_reached=max_iterations_reached,
            wcss=wcss,
            k_overspecified=k_overspecified,
        ),
    )

    logger.debug(
        f"k-means (k={k}): {len(sorted_events)} events -> {len(clusters)} clusters "
        f"in {iterations} iterations, wcss={wcss:.1f}"
    )
    return clusters


def _initial_centroids(times: np.ndarray, k: int) -> np.ndarray:
    """Evenly spaced centroids spanning the observed range."""
    if k == 1:
        return np.array([times.mean()])
    return np.linspace(times.min(), times.max(), k)


def _assign(times: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid for each timestamp (ties go to the lower)."""
    distances = np.abs(times[:, None] - centroids[None, :])
    result: np.ndarray = np.argmin(distances, axis=1)
    return result


def _update_centroids(
    times: np.ndarray, assignments: np.ndarray, centroids: np.ndarray
) -> np.ndarray:
    """Mean of each partition; empty partitions keep their previous centroid."""
    updated = centroids.copy()
    for idx in range(len(centroids)):
        members = times[assignments == idx]
        if members.size:
            updated[idx] = members.mean()
    return updated


def _build_clusters(
    sorted_events: list[ApneaEvent], assignments: np.ndarray
) -> list[Cluster]:
    """One cluster per non-empty partition, ordered by first event."""
    partitions: dict[int, list[ApneaEvent]] = {}
    for event, label in zip(sorted_events, assignments):
        partitions.setdefault(int(label), []).append(event)

    clusters = [Cluster.from_events(members) for members in partitions.values()]
    clusters.sort(key=lambda c: c.start)
    return clusters
