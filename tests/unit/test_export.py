"""
Tests for CSV export of clusters.
"""

import pytest

from apnea_clusters.analysis.export import CSV_HEADER, clusters_to_csv
from apnea_clusters.analysis.metrics import annotate_clusters
from apnea_clusters.analysis.types import Cluster
from tests.helpers.synthetic_data import generate_apnea_burst, make_event, make_events


class TestClustersToCsv:
    """Test CSV rendering."""

    def test_header_only(self):
        assert clusters_to_csv([]) == ",".join(CSV_HEADER)

    def test_single_cluster(self):
        cluster = Cluster.from_events([make_event(0, 10)])

        lines = clusters_to_csv([cluster]).split("\n")

        assert len(lines) == 2
        assert lines[0] == "index,start,end,durationSec,count,severity"
        fields = lines[1].split(",")
        assert fields[0] == "1"
        assert fields[1] == cluster.start.isoformat()
        assert fields[2] == cluster.end.isoformat()
        assert fields[3] == "10"
        assert fields[4] == "1"
        assert fields[5] == "0"

    def test_whole_seconds_written_as_integers(self):
        events = make_events([(0, 10), (20, 10), (40, 10)])
        cluster = Cluster.from_events(events).model_copy(update={"severity": 1.2345})

        row = clusters_to_csv([cluster]).split("\n")[1]

        assert cluster.duration_sec == 50.0
        assert ",50,3," in row
        assert 1.23 < float(row.split(",")[5]) < 1.24

    def test_fractional_duration_kept(self):
        cluster = Cluster.from_events([make_event(0, 12.5)])

        row = clusters_to_csv([cluster]).split("\n")[1]

        assert row.split(",")[3] == "12.5"

    def test_rows_follow_input_order(self):
        clusters = annotate_clusters(
            [
                Cluster.from_events(generate_apnea_burst(3000, 3)),
                Cluster.from_events(generate_apnea_burst(0, 5)),
            ]
        )

        text = clusters_to_csv(clusters)
        lines = text.split("\n")

        assert not text.endswith("\n")
        assert [line.split(",")[0] for line in lines[1:]] == ["1", "2"]
        assert [line.split(",")[4] for line in lines[1:]] == ["3", "5"]
        assert float(lines[2].split(",")[5]) == pytest.approx(clusters[1].severity)
