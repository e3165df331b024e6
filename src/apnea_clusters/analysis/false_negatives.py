"""
Detection of likely unscored apnea activity.

Sustained high flow limitation with no scored apnea nearby suggests the
device under-detected events. FLG readings above a threshold are grouped by
time gap; a group is reported when its span is within bounds, no scored
apnea falls inside it (padded by a small guard), and its peak FLG level
clears the confidence gate.
"""

import logging

from bisect import bisect_left
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timedelta
from typing import Any

from apnea_clusters.analysis.events import extract_events, sort_flg_samples
from apnea_clusters.analysis.types import (
    ApneaEvent,
    DetailRow,
    FalseNegativeCandidate,
    FalseNegativeOptions,
    FlgSample,
)

logger = logging.getLogger(__name__)

__all__ = [
    "detect_false_negatives",
    "detect_false_negatives_from_samples",
]


def detect_false_negatives(
    detail_rows: Iterable[DetailRow | Mapping[str, Any]],
    options: FalseNegativeOptions | None = None,
) -> list[FalseNegativeCandidate]:
    """
    Find FLG-only windows in a full set of detail rows.

    Args:
        detail_rows: Detail rows (FLG readings plus scored events)
        options: Detection thresholds (balanced defaults when None)

    Returns:
        Candidates in chronological order
    """
    apneas, flg_samples = extract_events(detail_rows)
    return detect_false_negatives_from_samples(flg_samples, apneas, options)


def detect_false_negatives_from_samples(
    flg_samples: Sequence[FlgSample],
    apnea_events: Sequence[ApneaEvent],
    options: FalseNegativeOptions | None = None,
) -> list[FalseNegativeCandidate]:
    """
    Find FLG-only windows from already extracted samples and events.

    Args:
        flg_samples: FLG readings (any order)
        apnea_events: Scored apnea events used for the absence check
        options: Detection thresholds (balanced defaults when None)

    Returns:
        Candidates in chronological order
    """
    options = options or FalseNegativeOptions()

    high = sort_flg_samples(s for s in flg_samples if s.level >= options.fl_threshold)
    groups = _group_by_gap(high, options.gap_sec)
    scored_times = sorted(event.timestamp for event in apnea_events)
    guard = timedelta(seconds=options.absence_guard_sec)

    candidates: list[FalseNegativeCandidate] = []
    for group in groups:
        candidate = FalseNegativeCandidate(
            start=group[0].timestamp,
            end=group[-1].timestamp,
            duration_sec=(group[-1].timestamp - group[0].timestamp).total_seconds(),
            peak_flg_level=max(sample.level for sample in group),
        )

        if not (
            options.min_duration_sec
            <= candidate.duration_sec
            <= options.max_duration_sec
        ):
            continue
        if _has_scored_event(
            scored_times, candidate.start - guard, candidate.end + guard
        ):
            continue
        if candidate.peak_flg_level < options.peak_flg_level_min:
            continue

        candidates.append(candidate)

    logger.debug(
        f"False-negative scan: {len(high)} FLG readings >= {options.fl_threshold}, "
        f"{len(groups)} groups, {len(candidates)} candidates"
    )
    return candidates


def _group_by_gap(samples: list[FlgSample], gap_sec: float) -> list[list[FlgSample]]:
    groups: list[list[FlgSample]] = []
    for sample in samples:
        if (
            groups
            and (sample.timestamp - groups[-1][-1].timestamp).total_seconds()
            <= gap_sec
        ):
            groups[-1].append(sample)
        else:
            groups.append([sample])
    return groups


def _has_scored_event(
    scored_times: list[datetime], window_start: datetime, window_end: datetime
) -> bool:
    idx = bisect_left(scored_times, window_start)
    return idx < len(scored_times) and scored_times[idx] <= window_end
