"""
Constants for apnea cluster analysis.

Thresholds follow the ResMed FlowLim (FLG) channel conventions: a
dimensionless index where 0.0 is a round, open-airway breath and 1.0 is a
fully flattened waveform.
"""

from enum import Enum
from pathlib import Path

# ============================================================================
# Clustering Algorithms
# ============================================================================


class ClusterAlgorithm(str, Enum):
    """Selectable apnea clustering strategies."""

    BRIDGED = "bridged"  # Gap + FLG bridging with hysteresis edge extension
    KMEANS = "kmeans"  # 1-D Lloyd's iteration over event timestamps
    AGGLOMERATIVE = "agglomerative"  # Single-linkage on the chronological chain


DEFAULT_CLUSTER_ALGORITHM = ClusterAlgorithm.BRIDGED


# ============================================================================
# Analysis Algorithm Constants
# ============================================================================


class ClusteringConstants:
    """Constants for apnea event clustering (strategies/*.py)."""

    # Spans 1.5-2 periodic breathing cycles (45-90s loop gain)
    APNEA_GAP_SEC = 120.0

    # Mild-to-moderate flow limitation, incomplete recovery between events
    FLG_BRIDGE_THRESHOLD = 0.1

    # Max spacing between FLG readings in one run
    FLG_CLUSTER_GAP_SEC = 60.0

    EDGE_ENTER_THRESHOLD = 0.5
    EDGE_EXIT_THRESHOLD = 0.35
    EDGE_MIN_DURATION_SEC = 10.0

    KMEANS_K = 3
    KMEANS_MAX_ITERATIONS = 100
    # k above event_count / divisor is flagged as overspecified
    KMEANS_OVERSPECIFIED_DIVISOR = 3

    SINGLE_LINK_GAP_SEC = APNEA_GAP_SEC


class FinalizeConstants:
    """Business thresholds for valid clusters (finalize.py)."""

    MIN_EVENTS = 3
    MIN_TOTAL_APNEA_SEC = 60.0
    MAX_CLUSTER_DURATION_SEC = 230.0


class SeverityConstants:
    """Weights for the composite cluster severity score (metrics.py)."""

    # Scale references for normalizing each term
    DURATION_ALERT_SEC = 120.0
    COUNT_ALERT = 5

    TOTAL_DURATION_WEIGHT = 1.0
    DENSITY_WEIGHT = 0.5
    WEIGHTED_DENSITY_WEIGHT = 0.5
    EXTENSION_WEIGHT = 0.25

    # Density of COUNT_ALERT events packed into DURATION_ALERT_SEC
    DENSITY_REFERENCE = COUNT_ALERT / (DURATION_ALERT_SEC / 60.0)
    # Fully apneic window: 60 event-seconds per minute
    WEIGHTED_DENSITY_REFERENCE = 60.0


class FalseNegativeConstants:
    """Constants for false-negative detection (false_negatives.py)."""

    FL_THRESHOLD = ClusteringConstants.FLG_BRIDGE_THRESHOLD
    PEAK_FLG_LEVEL_MIN = 0.95
    GAP_SEC = ClusteringConstants.FLG_CLUSTER_GAP_SEC
    MIN_DURATION_SEC = FinalizeConstants.MIN_TOTAL_APNEA_SEC
    MAX_DURATION_SEC = 600.0
    ABSENCE_GUARD_SEC = 5.0

    STRICT_FALLBACK_FL_THRESHOLD = 0.9
    STRICT_PEAK_FLG_LEVEL_MIN = 0.98
    STRICT_MIN_DURATION_SEC = 120.0

    BALANCED_MIN_DURATION_SEC = 60.0

    LENIENT_BASE_FL_THRESHOLD = 0.5
    LENIENT_BRIDGE_SCALE = 0.8
    LENIENT_PEAK_FLG_LEVEL_MIN = 0.85
    LENIENT_MIN_DURATION_SEC = 45.0


# ============================================================================
# Detail Row Event Names
# ============================================================================

EVENT_CLEAR_AIRWAY = "ClearAirway"
EVENT_OBSTRUCTIVE = "Obstructive"
EVENT_MIXED = "Mixed"
EVENT_FLG = "FLG"

# Scored events that count as apneas for clustering and absence checks
APNEA_EVENT_NAMES = frozenset({EVENT_CLEAR_AIRWAY, EVENT_OBSTRUCTIVE, EVENT_MIXED})

# ============================================================================
# Default Settings
# ============================================================================

DEFAULT_CONFIG_DIR = Path.home() / ".apnea_clusters"
DEFAULT_CONFIG_FILE = "config.toml"

# Logging configuration
DEFAULT_LOG_DIR = DEFAULT_CONFIG_DIR / "logs"
DEFAULT_LOG_FILE = "apnea_clusters.log"
DEFAULT_LOG_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_LOG_BACKUP_COUNT = 5

# Time calculations
SECONDS_PER_MINUTE = 60.0
