"""CSV export of finalized clusters."""

import csv
import io

from collections.abc import Iterable

from apnea_clusters.analysis.types import Cluster

__all__ = ["CSV_HEADER", "clusters_to_csv"]

CSV_HEADER = ("index", "start", "end", "durationSec", "count", "severity")


def _format_number(value: float) -> int | float:
    """Whole-valued floats render without a trailing '.0'."""
    if float(value).is_integer():
        return int(value)
    return value


def clusters_to_csv(clusters: Iterable[Cluster]) -> str:
    """
    Render clusters as CSV text.

    One header row followed by one row per cluster in input order.
    Timestamps are ISO-8601 and whole-valued numbers are written as
    integers (60, not 60.0); rows are separated by ``\\n`` with no trailing
    newline. Indexes start at 1.

    Args:
        clusters: Finalized clusters

    Returns:
        CSV document as a string
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for index, cluster in enumerate(clusters, start=1):
        writer.writerow(
            [
                index,
                cluster.start.isoformat(),
                cluster.end.isoformat(),
                _format_number(cluster.duration_sec),
                cluster.count,
                _format_number(cluster.severity),
            ]
        )

    return buffer.getvalue().rstrip("\n")
