"""Apnea event clustering, severity scoring and false-negative detection."""

from apnea_clusters.analysis.events import extract_events
from apnea_clusters.analysis.export import clusters_to_csv
from apnea_clusters.analysis.false_negatives import (
    detect_false_negatives,
    detect_false_negatives_from_samples,
)
from apnea_clusters.analysis.finalize import finalize_clusters
from apnea_clusters.analysis.metrics import (
    annotate_clusters,
    rank_clusters,
    summarize_flg_window,
)
from apnea_clusters.analysis.presets import get_false_negative_options
from apnea_clusters.analysis.service import ClusterAnalysisService, analyze_details
from apnea_clusters.analysis.strategies import cluster_apnea_events
from apnea_clusters.analysis.types import (
    AnalysisResult,
    ApneaEvent,
    Cluster,
    ClusterList,
    ClusterParams,
    DetailRow,
    FalseNegativeCandidate,
    FalseNegativeOptions,
    FinalizeThresholds,
    FlgSample,
    KMeansMeta,
)

__all__ = [
    "AnalysisResult",
    "ApneaEvent",
    "Cluster",
    "ClusterAnalysisService",
    "ClusterList",
    "ClusterParams",
    "DetailRow",
    "FalseNegativeCandidate",
    "FalseNegativeOptions",
    "FinalizeThresholds",
    "FlgSample",
    "KMeansMeta",
    "analyze_details",
    "annotate_clusters",
    "cluster_apnea_events",
    "clusters_to_csv",
    "detect_false_negatives",
    "detect_false_negatives_from_samples",
    "extract_events",
    "finalize_clusters",
    "get_false_negative_options",
    "rank_clusters",
    "summarize_flg_window",
]
