"""
Clustering strategy registry.

Maps each ClusterAlgorithm to a function with the uniform signature
``(events, flg_samples, params) -> ClusterList``.
"""

import logging

from collections.abc import Callable, Sequence

from apnea_clusters.analysis.types import (
    ApneaEvent,
    ClusterList,
    ClusterParams,
    FlgSample,
)
from apnea_clusters.constants import DEFAULT_CLUSTER_ALGORITHM, ClusterAlgorithm
from apnea_clusters.errors import InvalidParameterError

from .agglomerative import cluster_agglomerative
from .bridged import cluster_bridged
from .kmeans import cluster_kmeans

logger = logging.getLogger(__name__)

__all__ = [
    "AVAILABLE_ALGORITHMS",
    "DEFAULT_CLUSTER_ALGORITHM",
    "ClusterStrategy",
    "cluster_agglomerative",
    "cluster_apnea_events",
    "cluster_bridged",
    "cluster_kmeans",
    "get_strategy",
    "resolve_algorithm",
]

ClusterStrategy = Callable[
    [Sequence[ApneaEvent], Sequence[FlgSample], ClusterParams], ClusterList
]

AVAILABLE_ALGORITHMS: dict[ClusterAlgorithm, ClusterStrategy] = {
    ClusterAlgorithm.BRIDGED: cluster_bridged,
    ClusterAlgorithm.KMEANS: cluster_kmeans,
    ClusterAlgorithm.AGGLOMERATIVE: cluster_agglomerative,
}


def resolve_algorithm(name: str | ClusterAlgorithm) -> ClusterAlgorithm:
    """
    Convert an algorithm name to its enum member.

    Raises:
        InvalidParameterError: If the name is not a known algorithm
    """
    try:
        return ClusterAlgorithm(name)
    except ValueError:
        available = [algorithm.value for algorithm in ClusterAlgorithm]
        raise InvalidParameterError(
            f"Unsupported clustering algorithm {name!r}. Available: {available}",
            parameter="algorithm",
        ) from None


def get_strategy(name: str | ClusterAlgorithm) -> ClusterStrategy:
    """
    Look up a clustering strategy by name.

    Args:
        name: Algorithm name (e.g., "bridged", "kmeans")

    Returns:
        Strategy function

    Raises:
        InvalidParameterError: If the name is not a known algorithm
    """
    return AVAILABLE_ALGORITHMS[resolve_algorithm(name)]


def cluster_apnea_events(
    algorithm: str | ClusterAlgorithm,
    events: Sequence[ApneaEvent],
    flg_samples: Sequence[FlgSample],
    params: ClusterParams | None = None,
) -> ClusterList:
    """
    Cluster apnea events with the selected strategy.

    Args:
        algorithm: "bridged", "kmeans" or "agglomerative"
        events: Scored apnea events
        flg_samples: FLG readings (used by the bridged strategy only)
        params: Clustering parameters (defaults when None)

    Returns:
        Raw clusters without metrics; k-means results carry ``meta``

    Raises:
        InvalidParameterError: For an unknown algorithm or invalid parameters
    """
    strategy = get_strategy(algorithm)
    params = params or ClusterParams()

    logger.debug(
        f"Clustering {len(events)} events and {len(flg_samples)} FLG samples "
        f"with {resolve_algorithm(algorithm).value}"
    )
    return strategy(events, flg_samples, params)
