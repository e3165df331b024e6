"""
FLG run construction for bridging and boundary extension.

Bridge runs group consecutive FLG readings at or above a single threshold.
Edge runs use a two-threshold hysteresis state machine: a run starts when a
reading reaches the enter level, survives dips down to the exit level, and
only anchors a boundary extension once it has lasted the minimum duration.
"""

import logging

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from apnea_clusters.analysis.types import FlgSample
from apnea_clusters.errors import InvalidParameterError

logger = logging.getLogger(__name__)

__all__ = [
    "EdgeRunTracker",
    "EdgeState",
    "FlgRun",
    "build_edge_runs",
    "build_threshold_runs",
]


@dataclass
class FlgRun:
    """Chronological run of FLG samples."""

    samples: list[FlgSample] = field(default_factory=list)

    @property
    def start(self) -> datetime:
        return self.samples[0].timestamp

    @property
    def end(self) -> datetime:
        return self.samples[-1].timestamp

    @property
    def duration_sec(self) -> float:
        return (self.end - self.start).total_seconds()

    def overlaps(self, window_start: datetime, window_end: datetime) -> bool:
        """Whether any part of the run falls inside [window_start, window_end]."""
        return self.start <= window_end and self.end >= window_start


def build_threshold_runs(
    samples: Iterable[FlgSample], threshold: float, max_gap_sec: float
) -> list[FlgRun]:
    """
    Group readings at or above ``threshold`` into runs.

    Consecutive qualifying readings stay in one run while their spacing is
    at most ``max_gap_sec``.

    Args:
        samples: Chronologically sorted FLG samples
        threshold: Minimum FLG level for a reading to qualify
        max_gap_sec: Maximum spacing between readings in one run

    Returns:
        Runs in chronological order
    """
    runs: list[FlgRun] = []
    current: FlgRun | None = None

    for sample in samples:
        if sample.level < threshold:
            continue
        if current is not None:
            gap = (sample.timestamp - current.end).total_seconds()
            if gap <= max_gap_sec:
                current.samples.append(sample)
                continue
            runs.append(current)
        current = FlgRun(samples=[sample])

    if current is not None:
        runs.append(current)

    return runs


class EdgeState(str, Enum):
    """Hysteresis states while scanning FLG readings for edge runs."""

    BELOW = "below"  # No open run
    RISING = "rising"  # Entered, not yet long enough to count
    SUSTAINED = "sustained"  # At or above enter level, long enough
    FALLING = "falling"  # Dipped below enter level, still at or above exit


class EdgeRunTracker:
    """
    Incremental hysteresis edge detector.

    Feed samples in chronological order; ``feed`` returns a completed
    qualifying run whenever one closes. Call ``close`` after the last sample
    to flush an open run.

    Example:
        >>> tracker = EdgeRunTracker(
        ...     enter_level=0.5, exit_level=0.35, max_gap_sec=60, min_duration_sec=10
        ... )
        >>> runs = [r for s in samples if (r := tracker.feed(s))]
        >>> if (last := tracker.close()):
        ...     runs.append(last)
    """

    def __init__(
        self,
        enter_level: float,
        exit_level: float,
        max_gap_sec: float,
        min_duration_sec: float,
    ):
        """
        Initialize the tracker.

        Args:
            enter_level: FLG level that opens a run
            exit_level: FLG level below which an open run closes (< enter_level)
            max_gap_sec: Maximum spacing between readings in one run
            min_duration_sec: Minimum run span for the run to be emitted

        Raises:
            InvalidParameterError: If exit_level >= enter_level
        """
        if exit_level >= enter_level:
            raise InvalidParameterError(
                f"Edge exit threshold ({exit_level}) must be below "
                f"enter threshold ({enter_level})",
                parameter="edge_exit",
            )
        self.enter_level = enter_level
        self.exit_level = exit_level
        self.max_gap_sec = max_gap_sec
        self.min_duration_sec = min_duration_sec
        self.state = EdgeState.BELOW
        self._run: FlgRun | None = None

    def feed(self, sample: FlgSample) -> FlgRun | None:
        """
        Advance the state machine by one reading.

        Returns:
            The run closed by this reading if it qualifies, otherwise None
        """
        closed: FlgRun | None = None

        if self._run is not None:
            gap = (sample.timestamp - self._run.end).total_seconds()
            if gap > self.max_gap_sec or sample.level < self.exit_level:
                closed = self.close()
            else:
                self._run.samples.append(sample)
                self.state = self._classify(self._run, sample)
                return None

        if sample.level >= self.enter_level:
            self._run = FlgRun(samples=[sample])
            self.state = self._classify(self._run, sample)

        return closed

    def close(self) -> FlgRun | None:
        """Close any open run, returning it if it lasted long enough."""
        run = self._run
        self._run = None
        self.state = EdgeState.BELOW

        if run is None or run.duration_sec < self.min_duration_sec:
            return None
        return run

    def _classify(self, run: FlgRun, sample: FlgSample) -> EdgeState:
        if sample.level < self.enter_level:
            return EdgeState.FALLING
        if run.duration_sec >= self.min_duration_sec:
            return EdgeState.SUSTAINED
        return EdgeState.RISING


def build_edge_runs(
    samples: Iterable[FlgSample],
    enter_level: float,
    exit_level: float,
    max_gap_sec: float,
    min_duration_sec: float,
) -> list[FlgRun]:
    """
    Build qualifying boundary-extension runs with hysteresis.

    Args:
        samples: Chronologically sorted FLG samples
        enter_level: FLG level that opens a run
        exit_level: FLG level below which a run closes
        max_gap_sec: Maximum spacing between readings in one run
        min_duration_sec: Minimum run span to qualify

    Returns:
        Qualifying runs in chronological order
    """
    tracker = EdgeRunTracker(
        enter_level=enter_level,
        exit_level=exit_level,
        max_gap_sec=max_gap_sec,
        min_duration_sec=min_duration_sec,
    )
    runs: list[FlgRun] = []

    for sample in samples:
        run = tracker.feed(sample)
        if run is not None:
            runs.append(run)

    last = tracker.close()
    if last is not None:
        runs.append(last)

    logger.debug(
        f"Built {len(runs)} edge runs (enter={enter_level}, exit={exit_level})"
    )
    return runs
