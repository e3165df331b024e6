"""Predefined false-negative detection presets."""

from apnea_clusters.analysis.types import FalseNegativeOptions
from apnea_clusters.constants import ClusteringConstants as CC
from apnea_clusters.constants import FalseNegativeConstants as FNC
from apnea_clusters.errors import InvalidParameterError

__all__ = [
    "AVAILABLE_PRESETS",
    "BALANCED_PRESET",
    "DEFAULT_PRESET",
    "LENIENT_PRESET",
    "STRICT_PRESET",
    "get_false_negative_options",
]

# ============================================================================
# Strict: high FLG floor, near-certain peaks, long windows
# ============================================================================

STRICT_PRESET = FalseNegativeOptions(
    fl_threshold=max(FNC.STRICT_FALLBACK_FL_THRESHOLD, CC.FLG_BRIDGE_THRESHOLD),
    peak_flg_level_min=FNC.STRICT_PEAK_FLG_LEVEL_MIN,  # 0.98
    gap_sec=CC.FLG_CLUSTER_GAP_SEC,
    min_duration_sec=FNC.STRICT_MIN_DURATION_SEC,  # 120 seconds
)

# ============================================================================
# Balanced: application default
# ============================================================================

BALANCED_PRESET = FalseNegativeOptions(
    fl_threshold=CC.FLG_BRIDGE_THRESHOLD,
    peak_flg_level_min=FNC.PEAK_FLG_LEVEL_MIN,  # 0.95
    gap_sec=CC.FLG_CLUSTER_GAP_SEC,
    min_duration_sec=FNC.BALANCED_MIN_DURATION_SEC,  # 60 seconds
)

# ============================================================================
# Lenient: more recall at the cost of precision
# ============================================================================

LENIENT_PRESET = FalseNegativeOptions(
    fl_threshold=max(
        FNC.LENIENT_BASE_FL_THRESHOLD,
        CC.FLG_BRIDGE_THRESHOLD * FNC.LENIENT_BRIDGE_SCALE,
    ),
    peak_flg_level_min=FNC.LENIENT_PEAK_FLG_LEVEL_MIN,  # 0.85
    gap_sec=CC.FLG_CLUSTER_GAP_SEC,
    min_duration_sec=FNC.LENIENT_MIN_DURATION_SEC,  # 45 seconds
)

# ============================================================================
# Preset Registry
# ============================================================================

AVAILABLE_PRESETS: dict[str, FalseNegativeOptions] = {
    "strict": STRICT_PRESET,
    "balanced": BALANCED_PRESET,
    "lenient": LENIENT_PRESET,
}

DEFAULT_PRESET = "balanced"


def get_false_negative_options(name: str = DEFAULT_PRESET) -> FalseNegativeOptions:
    """
    Look up a false-negative preset by name.

    Args:
        name: "strict", "balanced" or "lenient"

    Returns:
        Frozen FalseNegativeOptions for the preset

    Raises:
        InvalidParameterError: If the preset name is not recognized
    """
    if name not in AVAILABLE_PRESETS:
        raise InvalidParameterError(
            f"Unknown false-negative preset: {name}. "
            f"Available: {list(AVAILABLE_PRESETS.keys())}",
            parameter="preset",
        )
    return AVAILABLE_PRESETS[name]
