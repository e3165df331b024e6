"""Analysis utility functions."""

from apnea_clusters.constants import SECONDS_PER_MINUTE


def rate_per_minute(amount: float, window_sec: float) -> float:
    """
    Express an amount as a per-minute rate over a window.

    Args:
        amount: Event count or event-seconds
        window_sec: Window length in seconds

    Returns:
        Amount per minute; a zero-length window yields the amount itself
    """
    if window_sec <= 0:
        return float(amount)
    return amount / (window_sec / SECONDS_PER_MINUTE)
