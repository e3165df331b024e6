"""Event normalization and extraction from detail rows."""

import logging

from collections.abc import Iterable, Mapping
from typing import Any

from apnea_clusters.analysis.types import ApneaEvent, DetailRow, FlgSample
from apnea_clusters.constants import APNEA_EVENT_NAMES, EVENT_FLG

logger = logging.getLogger(__name__)

__all__ = [
    "coerce_detail_rows",
    "extract_events",
    "sort_events",
    "sort_flg_samples",
]


def sort_events(events: Iterable[ApneaEvent]) -> list[ApneaEvent]:
    """Return apnea events in chronological order (stable)."""
    return sorted(events, key=lambda event: event.timestamp)


def sort_flg_samples(samples: Iterable[FlgSample]) -> list[FlgSample]:
    """Return FLG samples in chronological order (stable)."""
    return sorted(samples, key=lambda sample: sample.timestamp)


def coerce_detail_rows(
    rows: Iterable[DetailRow | Mapping[str, Any]],
) -> list[DetailRow]:
    """
    Convert mappings keyed by export headers into DetailRow models.

    Rows that are already DetailRow instances pass through unchanged.
    """
    return [
        row if isinstance(row, DetailRow) else DetailRow.model_validate(row)
        for row in rows
    ]


def extract_events(
    rows: Iterable[DetailRow | Mapping[str, Any]],
) -> tuple[list[ApneaEvent], list[FlgSample]]:
    """
    Split detail rows into scored apnea events and FLG samples.

    ClearAirway, Obstructive and Mixed rows become ApneaEvents (the row value
    is the duration); FLG rows become FlgSamples (the row value is the level).
    All other rows are ignored.

    Args:
        rows: Detail rows or mappings with DateTime/Event/Data/Duration keys

    Returns:
        Tuple of (apnea_events, flg_samples), each chronologically sorted
    """
    apneas: list[ApneaEvent] = []
    flg_samples: list[FlgSample] = []

    for row in coerce_detail_rows(rows):
        if row.event in APNEA_EVENT_NAMES:
            apneas.append(
                ApneaEvent(
                    timestamp=row.timestamp,
                    duration_sec=row.value,
                    event_type=row.event,
                )
            )
        elif row.event == EVENT_FLG:
            flg_samples.append(FlgSample(timestamp=row.timestamp, level=row.value))

    logger.debug(
        f"Extracted {len(apneas)} apnea events and {len(flg_samples)} FLG samples"
    )
    return sort_events(apneas), sort_flg_samples(flg_samples)
