"""Exceptions raised by the apnea cluster analysis core."""


class ClusterAnalysisError(Exception):
    """Base exception for cluster analysis errors."""


class InvalidParameterError(ClusterAnalysisError, ValueError):
    """
    Raised when a caller supplies an unusable parameter.

    Covers unknown algorithm or preset names, a non-positive k, and
    inverted hysteresis thresholds (edge_exit >= edge_enter).
    """

    def __init__(self, message: str, parameter: str | None = None):
        super().__init__(message)
        self.parameter = parameter
