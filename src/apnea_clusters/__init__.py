"""
apnea-clusters: apnea event cluster analysis for CPAP therapy logs.

Groups scored apnea events into clusters (FLG-bridged, k-means or
single-linkage), scores their severity, and flags sustained flow-limitation
windows that the device did not score.
"""

from apnea_clusters.analysis import (
    ClusterAnalysisService,
    analyze_details,
    cluster_apnea_events,
    clusters_to_csv,
    detect_false_negatives,
    finalize_clusters,
)
from apnea_clusters.logging_config import setup_logging

__all__ = [
    "ClusterAnalysisService",
    "analyze_details",
    "cluster_apnea_events",
    "clusters_to_csv",
    "detect_false_negatives",
    "finalize_clusters",
    "setup_logging",
]
