"""
Analysis service orchestrating the cluster pipeline.

Runs detail-row extraction, clustering, metric annotation, finalization and
false-negative detection in one synchronous call. The service holds only
its frozen parameters; cancellation and staleness belong to the caller.
"""

import logging
import time

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from apnea_clusters.analysis.events import extract_events
from apnea_clusters.analysis.false_negatives import (
    detect_false_negatives_from_samples,
)
from apnea_clusters.analysis.finalize import finalize_clusters
from apnea_clusters.analysis.metrics import annotate_clusters
from apnea_clusters.analysis.presets import get_false_negative_options
from apnea_clusters.analysis.strategies import cluster_apnea_events
from apnea_clusters.analysis.types import (
    AnalysisResult,
    ApneaEvent,
    ClusterParams,
    DetailRow,
    FalseNegativeOptions,
    FinalizeThresholds,
    FlgSample,
)

logger = logging.getLogger(__name__)

__all__ = ["AnalysisResult", "ClusterAnalysisService", "analyze_details"]


class ClusterAnalysisService:
    """
    Service for running apnea cluster analysis on detail rows.

    Example:
        >>> service = ClusterAnalysisService(ClusterParams(algorithm="kmeans", k=2))
        >>> result = service.analyze_details(rows)
        >>> print(f"{len(result.clusters)} clusters, "
        ...       f"{len(result.false_negatives)} possible false negatives")
    """

    def __init__(
        self,
        params: ClusterParams | None = None,
        thresholds: FinalizeThresholds | None = None,
        fn_options: FalseNegativeOptions | None = None,
    ):
        """
        Initialize the service.

        Args:
            params: Clustering parameters (defaults when None)
            thresholds: Finalizer thresholds (application defaults when None)
            fn_options: False-negative options (balanced preset when None)
        """
        self.params = params or ClusterParams()
        self.thresholds = thresholds or FinalizeThresholds()
        self.fn_options = fn_options or get_false_negative_options()

    @classmethod
    def from_config(cls) -> "ClusterAnalysisService":
        """
        Build a service from ~/.apnea_clusters/config.toml.

        Uses [clustering], [finalize] and the [false_negatives] preset;
        anything unset keeps its default.

        Raises:
            InvalidParameterError: If the configured preset is unknown
            pydantic.ValidationError: If a configured value is out of range
        """
        from apnea_clusters.config import load_settings

        settings = load_settings()
        logger.debug(
            f"Loaded analysis settings: algorithm={settings.clustering.algorithm}, "
            f"preset={settings.false_negatives.preset}"
        )
        return cls(
            params=settings.clustering,
            thresholds=settings.finalize,
            fn_options=get_false_negative_options(settings.false_negatives.preset),
        )

    def analyze_events(
        self, events: Sequence[ApneaEvent], flg_samples: Sequence[FlgSample]
    ) -> AnalysisResult:
        """
        Run the full pipeline on extracted events and FLG samples.

        Raises:
            InvalidParameterError: For an unknown algorithm or invalid parameters
        """
        start_time = time.perf_counter()

        raw = cluster_apnea_events(
            self.params.algorithm, events, flg_samples, self.params
        )
        clusters = finalize_clusters(annotate_clusters(raw), self.thresholds)
        false_negatives = detect_false_negatives_from_samples(
            flg_samples, events, self.fn_options
        )

        elapsed_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            f"Cluster analysis ({self.params.algorithm}): {len(events)} events -> "
            f"{len(raw)} raw / {len(clusters)} final clusters, "
            f"{len(false_negatives)} false negatives in {elapsed_ms}ms"
        )

        return AnalysisResult(
            algorithm=self.params.algorithm,
            total_events=len(events),
            total_flg_samples=len(flg_samples),
            raw_cluster_count=len(raw),
            clusters=clusters,
            false_negatives=false_negatives,
            kmeans_meta=raw.meta,
        )

    def analyze_details(
        self, rows: Iterable[DetailRow | Mapping[str, Any]]
    ) -> AnalysisResult:
        """
        Run the full pipeline on detail rows.

        Args:
            rows: Detail rows or mappings with DateTime/Event/Data/Duration keys

        Returns:
            AnalysisResult with finalized clusters and false negatives
        """
        events, flg_samples = extract_events(rows)
        return self.analyze_events(events, flg_samples)


def analyze_details(
    rows: Iterable[DetailRow | Mapping[str, Any]],
    params: ClusterParams | None = None,
    thresholds: FinalizeThresholds | None = None,
    fn_options: FalseNegativeOptions | None = None,
) -> AnalysisResult:
    """Run the full cluster pipeline on detail rows with the given settings."""
    service = ClusterAnalysisService(
        params=params, thresholds=thresholds, fn_options=fn_options
    )
    return service.analyze_details(rows)
