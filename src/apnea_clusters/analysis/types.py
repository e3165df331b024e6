"""Apnea cluster analysis type definitions."""

from collections.abc import Iterable
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

from apnea_clusters.analysis.utils import rate_per_minute
from apnea_clusters.constants import (
    DEFAULT_CLUSTER_ALGORITHM,
    ClusteringConstants as CC,
    FalseNegativeConstants as FNC,
    FinalizeConstants as FC,
)

# ============================================================================
# Input Types
# ============================================================================


class ApneaEvent(BaseModel):
    """
    Scored apnea event from the device event log.

    Attributes:
        timestamp: Event onset
        duration_sec: Event duration (seconds)
        event_type: Detail-row event name (ClearAirway, Obstructive, Mixed)
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(description="Event onset")
    duration_sec: float = Field(ge=0, description="Event duration (seconds)")
    event_type: str | None = Field(default=None, description="Scored event type")

    @property
    def end(self) -> datetime:
        """Event offset (onset plus duration)."""
        return self.timestamp + timedelta(seconds=self.duration_sec)


class FlgSample(BaseModel):
    """
    Flow limitation graph reading.

    Attributes:
        timestamp: Sample time
        level: FlowLim index (roughly 0-1, can exceed 1)
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(description="Sample time")
    level: float = Field(ge=0, description="FlowLim index")


class DetailRow(BaseModel):
    """
    One row of a device detail export.

    Accepts either field names or the export's column headers
    (``DateTime``, ``Event``, ``Data/Duration``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: datetime = Field(alias="DateTime", description="Row time")
    event: str = Field(alias="Event", description="Event name (FLG, Obstructive...)")
    value: float = Field(
        alias="Data/Duration", description="FLG level or event duration (seconds)"
    )


# ============================================================================
# Cluster Types
# ============================================================================


class Cluster(BaseModel):
    """
    Group of temporally related apnea events.

    Densities and total apnea time are filled when the cluster is built;
    severity stays at zero until the metrics step annotates the cluster.

    Attributes:
        start: Window start (may precede the first event after edge extension)
        end: Window end (may follow the last event's end after edge extension)
        duration_sec: Window length (seconds)
        count: Number of events
        events: Member events in chronological order
        density: Events per minute over the window
        weighted_density: Event-seconds per minute over the window
        total_apnea_duration_sec: Sum of member event durations (seconds)
        severity: Composite severity score
    """

    start: datetime = Field(description="Window start")
    end: datetime = Field(description="Window end")
    duration_sec: float = Field(ge=0, description="Window length (seconds)")
    count: int = Field(ge=1, description="Number of events")
    events: list[ApneaEvent] = Field(description="Member events, chronological")
    density: float = Field(default=0.0, ge=0, description="Events per minute")
    weighted_density: float = Field(
        default=0.0, ge=0, description="Event-seconds per minute"
    )
    total_apnea_duration_sec: float = Field(
        default=0.0, ge=0, description="Sum of event durations (seconds)"
    )
    severity: float = Field(default=0.0, ge=0, description="Composite severity")

    @classmethod
    def from_events(
        cls,
        events: list[ApneaEvent],
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> "Cluster":
        """
        Build a cluster spanning first event onset to last event offset.

        Fills total apnea time plus event and duration-weighted densities
        over the window.

        Args:
            events: Chronologically sorted, non-empty member events
            start: Override window start (edge extension)
            end: Override window end (edge extension)
        """
        window_start = start if start is not None else events[0].timestamp
        window_end = end if end is not None else events[-1].end
        duration_sec = (window_end - window_start).total_seconds()
        total_sec = float(sum(event.duration_sec for event in events))
        return cls(
            start=window_start,
            end=window_end,
            duration_sec=duration_sec,
            count=len(events),
            events=list(events),
            density=rate_per_minute(len(events), duration_sec),
            weighted_density=rate_per_minute(total_sec, duration_sec),
            total_apnea_duration_sec=total_sec,
        )

    @property
    def raw_start(self) -> datetime:
        """First event onset, before any edge extension."""
        return self.events[0].timestamp

    @property
    def raw_end(self) -> datetime:
        """Last event offset, before any edge extension."""
        return self.events[-1].end


class KMeansMeta(BaseModel):
    """
    Convergence diagnostics for a k-means run.

    Attributes:
        converged: Assignments stabilised before the iteration cap
        iterations: Assignment/update loops executed
        max_iterations_reached: Cap hit without stable assignments
        wcss: Within-cluster sum of squares (seconds squared)
        k_overspecified: k exceeds a third of the event count
    """

    converged: bool = Field(description="Assignments stabilised")
    iterations: int = Field(ge=0, description="Loops executed")
    max_iterations_reached: bool = Field(description="Iteration cap hit")
    wcss: float = Field(ge=0, description="Within-cluster sum of squares (s^2)")
    k_overspecified: bool = Field(description="k likely yields singleton clusters")


class ClusterList(list[Cluster]):
    """
    List of clusters with optional strategy metadata.

    Only k-means attaches ``meta``; it describes the whole run, not any
    single cluster.
    """

    def __init__(
        self, clusters: Iterable[Cluster] = (), meta: KMeansMeta | None = None
    ):
        super().__init__(clusters)
        self.meta = meta


class FalseNegativeCandidate(BaseModel):
    """
    Sustained high-FLG window with no scored apnea nearby.

    Attributes:
        start: First qualifying FLG sample time
        end: Last qualifying FLG sample time
        duration_sec: Window length (seconds)
        peak_flg_level: Highest FLG level in the window
    """

    start: datetime = Field(description="Window start")
    end: datetime = Field(description="Window end")
    duration_sec: float = Field(ge=0, description="Window length (seconds)")
    peak_flg_level: float = Field(ge=0, description="Peak FLG level")


class FlgWindowSummary(BaseModel):
    """FLG statistics for samples inside a cluster window."""

    sample_count: int = Field(ge=1, description="Samples inside the window")
    min_level: float = Field(ge=0, description="Lowest FLG level")
    max_level: float = Field(ge=0, description="Highest FLG level")
    mean_level: float = Field(ge=0, description="Mean FLG level")


# ============================================================================
# Parameter Types
# ============================================================================


class ClusterParams(BaseModel):
    """
    Clustering parameters for every strategy.

    Each strategy reads only the fields it needs. Cross-field rules
    (hysteresis ordering, k >= 1, known algorithm) are checked by the
    strategies so they raise InvalidParameterError rather than a
    validation error.
    """

    model_config = ConfigDict(frozen=True)

    algorithm: str = Field(
        default=DEFAULT_CLUSTER_ALGORITHM.value, description="Strategy name"
    )

    # Bridged strategy
    gap_sec: float = Field(
        default=CC.APNEA_GAP_SEC, ge=0, description="Max silent gap (seconds)"
    )
    bridge_threshold: float = Field(
        default=CC.FLG_BRIDGE_THRESHOLD, ge=0, description="FLG bridge level"
    )
    bridge_sec: float = Field(
        default=CC.FLG_CLUSTER_GAP_SEC, ge=0, description="FLG run gap (seconds)"
    )
    edge_enter: float = Field(
        default=CC.EDGE_ENTER_THRESHOLD, ge=0, description="Edge entry FLG level"
    )
    edge_exit: float = Field(
        default=CC.EDGE_EXIT_THRESHOLD, ge=0, description="Edge exit FLG level"
    )
    edge_min_dur_sec: float = Field(
        default=CC.EDGE_MIN_DURATION_SEC, ge=0, description="Min edge run (seconds)"
    )
    min_density: float | None = Field(
        default=None, ge=0, description="Min events per minute"
    )

    # K-means strategy
    k: int = Field(default=CC.KMEANS_K, description="Target cluster count")
    max_iterations: int = Field(
        default=CC.KMEANS_MAX_ITERATIONS, ge=1, description="Iteration cap"
    )

    # Agglomerative strategy
    linkage_threshold_sec: float = Field(
        default=CC.SINGLE_LINK_GAP_SEC, ge=0, description="Max linkage gap (seconds)"
    )


class FinalizeThresholds(BaseModel):
    """Business thresholds a cluster must meet to be reported."""

    model_config = ConfigDict(frozen=True)

    min_count: int = Field(default=FC.MIN_EVENTS, ge=1, description="Min events")
    min_total_sec: float = Field(
        default=FC.MIN_TOTAL_APNEA_SEC, ge=0, description="Min apnea seconds"
    )
    max_cluster_sec: float = Field(
        default=FC.MAX_CLUSTER_DURATION_SEC, ge=0, description="Max window seconds"
    )


class FalseNegativeOptions(BaseModel):
    """Parameters for false-negative detection."""

    model_config = ConfigDict(frozen=True)

    fl_threshold: float = Field(
        default=FNC.FL_THRESHOLD, ge=0, description="Min FLG level considered"
    )
    peak_flg_level_min: float = Field(
        default=FNC.PEAK_FLG_LEVEL_MIN, ge=0, description="Confidence gate"
    )
    gap_sec: float = Field(
        default=FNC.GAP_SEC, ge=0, description="Max sample gap (seconds)"
    )
    min_duration_sec: float = Field(
        default=FNC.MIN_DURATION_SEC, ge=0, description="Min window (seconds)"
    )
    max_duration_sec: float = Field(
        default=FNC.MAX_DURATION_SEC, ge=0, description="Max window (seconds)"
    )
    absence_guard_sec: float = Field(
        default=FNC.ABSENCE_GUARD_SEC,
        ge=0,
        description="Padding around the window checked for scored events",
    )


# ============================================================================
# Pipeline Result
# ============================================================================


class AnalysisResult(BaseModel):
    """Results from one detail-row analysis."""

    algorithm: str = Field(description="Clustering strategy used")
    total_events: int = Field(ge=0, description="Scored apnea events analyzed")
    total_flg_samples: int = Field(ge=0, description="FLG readings analyzed")
    raw_cluster_count: int = Field(ge=0, description="Clusters before finalizing")
    clusters: list[Cluster] = Field(description="Finalized, annotated clusters")
    false_negatives: list[FalseNegativeCandidate] = Field(
        description="Likely unscored apnea windows"
    )
    kmeans_meta: KMeansMeta | None = Field(
        default=None, description="k-means diagnostics (k-means only)"
    )
