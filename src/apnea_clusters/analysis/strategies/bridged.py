"""
FLG-bridged apnea clustering with hysteresis boundary extension.

Events are grouped greedily by the silent gap between one event's end and
the next event's onset. Gaps longer than ``gap_sec`` are still bridged when
they are short enough (``bridge_sec``) and elevated flow limitation persists
across them. Each resulting cluster is then grown to the nearest sustained
high-FLG edge run on either side.
"""

import logging

from collections.abc import Sequence
from datetime import datetime

from apnea_clusters.analysis.events import sort_events, sort_flg_samples
from apnea_clusters.analysis.flg_runs import (
    FlgRun,
    build_edge_runs,
    build_threshold_runs,
)
from apnea_clusters.analysis.metrics import compute_density
from apnea_clusters.analysis.types import (
    ApneaEvent,
    Cluster,
    ClusterList,
    ClusterParams,
    FlgSample,
)

logger = logging.getLogger(__name__)

__all__ = ["cluster_bridged"]


def cluster_bridged(
    events: Sequence[ApneaEvent],
    flg_samples: Sequence[FlgSample],
    params: ClusterParams,
) -> ClusterList:
    """
    Cluster apnea events, bridging gaps through sustained FLG.

    Args:
        events: Scored apnea events (any order)
        flg_samples: FLG readings (any order, may be empty)
        params: Uses gap_sec, bridge_threshold, bridge_sec, edge_enter,
            edge_exit, edge_min_dur_sec and min_density

    Returns:
        Non-overlapping clusters in chronological order

    Raises:
        InvalidParameterError: If edge_exit >= edge_enter
    """
    sorted_flg = sort_flg_samples(flg_samples)

    # Built before the empty check so inverted thresholds always raise
    edge_runs = build_edge_runs(
        sorted_flg,
        enter_level=params.edge_enter,
        exit_level=params.edge_exit,
        max_gap_sec=params.bridge_sec,
        min_duration_sec=params.edge_min_dur_sec,
    )

    if not events:
        return ClusterList()

    bridge_runs = build_threshold_runs(
        sorted_flg, params.bridge_threshold, params.bridge_sec
    )
    groups = _group_events(sort_events(events), bridge_runs, params)

    clusters = ClusterList(_extend_boundaries(groups, edge_runs, params.gap_sec))

    if params.min_density is not None:
        kept = [c for c in clusters if compute_density(c) >= params.min_density]
        logger.debug(
            f"min_density={params.min_density} dropped "
            f"{len(clusters) - len(kept)} of {len(clusters)} clusters"
        )
        clusters = ClusterList(kept)

    logger.debug(
        f"Bridged clustering: {len(events)} events -> {len(clusters)} clusters "
        f"({len(bridge_runs)} bridge runs, {len(edge_runs)} edge runs)"
    )
    return clusters


def _group_events(
    events: list[ApneaEvent],
    bridge_runs: list[FlgRun],
    params: ClusterParams,
) -> list[list[ApneaEvent]]:
    """Greedy left-to-right grouping by silent gap or FLG bridge."""
    groups: list[list[ApneaEvent]] = []
    current = [events[0]]

    for event in events[1:]:
        prev_end = current[-1].end
        gap = (event.timestamp - prev_end).total_seconds()

        if gap <= params.gap_sec or _is_bridged(
            prev_end, event.timestamp, gap, bridge_runs, params.bridge_sec
        ):
            current.append(event)
        else:
            groups.append(current)
            current = [event]

    groups.append(current)
    return groups


def _is_bridged(
    gap_start: datetime,
    gap_end: datetime,
    gap_sec: float,
    bridge_runs: list[FlgRun],
    bridge_sec: float,
) -> bool:
    if gap_sec > bridge_sec:
        return False
    return any(run.overlaps(gap_start, gap_end) for run in bridge_runs)


def _extend_boundaries(
    groups: list[list[ApneaEvent]],
    edge_runs: list[FlgRun],
    gap_sec: float,
) -> list[Cluster]:
    """
    Grow each group's window to the nearest qualifying edge run.

    Extensions are clamped so a window never reaches past the previous
    cluster's final end or the next cluster's first event.
    """
    clusters: list[Cluster] = []

    for i, group in enumerate(groups):
        raw_start = group[0].timestamp
        raw_end = group[-1].end

        start = raw_start
        before = _nearest_run_before(edge_runs, raw_start, gap_sec)
        if before is not None:
            start = before.start
            if clusters:
                start = max(start, clusters[-1].end)

        end = raw_end
        after = _nearest_run_after(edge_runs, raw_end, gap_sec)
        if after is not None:
            end = after.end
            if i + 1 < len(groups):
                end = min(end, groups[i + 1][0].timestamp)

        clusters.append(Cluster.from_events(group, start=start, end=end))

    return clusters


def _nearest_run_before(
    runs: list[FlgRun], start: datetime, max_gap_sec: float
) -> FlgRun | None:
    """Latest-ending run that ends at or before ``start`` within the gap."""
    candidates = [
        run
        for run in runs
        if run.end <= start and (start - run.end).total_seconds() <= max_gap_sec
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda run: run.end)


def _nearest_run_after(
    runs: list[FlgRun], end: datetime, max_gap_sec: float
) -> FlgRun | None:
    """Earliest-starting run that starts at or after ``end`` within the gap."""
    candidates = [
        run
        for run in runs
        if run.start >= end and (run.start - end).total_seconds() <= max_gap_sec
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda run: run.start)
