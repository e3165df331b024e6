"""
Tests for k-means temporal clustering.
"""

import logging

import pytest

from apnea_clusters.analysis.strategies.kmeans import (
    cluster_kmeans,
    is_k_overspecified,
)
from apnea_clusters.analysis.types import ClusterParams
from apnea_clusters.errors import InvalidParameterError
from tests.helpers.synthetic_data import make_events

ONE_DAY = 86400


class TestKMeansClustering:
    """Test partitioning and convergence diagnostics."""

    @pytest.fixture
    def two_nights(self):
        return make_events(
            [
                (0, 10),
                (60, 10),
                (120, 10),
                (ONE_DAY, 10),
                (ONE_DAY + 60, 10),
                (ONE_DAY + 120, 10),
            ]
        )

    def test_separated_groups_converge(self, two_nights):
        clusters = cluster_kmeans(two_nights, [], ClusterParams(k=2))

        assert clusters.meta is not None
        assert clusters.meta.converged
        assert not clusters.meta.max_iterations_reached
        assert clusters.meta.iterations < 100
        assert not clusters.meta.k_overspecified
        assert [c.count for c in clusters] == [3, 3]
        assert sum(c.count for c in clusters) == len(two_nights)
        assert clusters[0].start < clusters[1].start

    def test_wcss(self, two_nights):
        clusters = cluster_kmeans(two_nights, [], ClusterParams(k=2))

        # Each group is centred on its middle event: 60^2 + 0 + 60^2 per group
        assert clusters.meta.wcss == pytest.approx(14400, rel=1e-6)

    def test_iteration_cap_warns(self, two_nights, caplog):
        with caplog.at_level(logging.WARNING):
            clusters = cluster_kmeans(
                two_nights, [], ClusterParams(k=2, max_iterations=1)
            )

        assert not clusters.meta.converged
        assert clusters.meta.max_iterations_reached
        assert clusters.meta.iterations == 1
        assert "did not converge" in caplog.text
        assert sum(c.count for c in clusters) == len(two_nights)

    def test_single_cluster(self, two_nights):
        clusters = cluster_kmeans(two_nights, [], ClusterParams(k=1))

        assert len(clusters) == 1
        assert clusters[0].count == 6
        assert clusters.meta.converged

    def test_k_larger_than_events(self):
        events = make_events([(0, 10), (500, 10)])

        clusters = cluster_kmeans(events, [], ClusterParams(k=5))

        assert 1 <= len(clusters) <= 2
        assert sum(c.count for c in clusters) == 2
        assert clusters.meta.k_overspecified

    @pytest.mark.parametrize("k", [0, -3])
    def test_invalid_k(self, k):
        with pytest.raises(InvalidParameterError) as exc_info:
            cluster_kmeans(make_events([(0, 10)]), [], ClusterParams(k=k))

        assert exc_info.value.parameter == "k"

    def test_empty_events(self):
        clusters = cluster_kmeans([], [], ClusterParams(k=3))

        assert clusters == []
        assert clusters.meta.converged
        assert clusters.meta.iterations == 0
        assert clusters.meta.wcss == 0


class TestOverspecification:
    """Test the k-to-event-count heuristic."""

    @pytest.mark.parametrize(
        "k,event_count,expected",
        [
            (2, 6, False),
            (3, 6, True),
            (3, 100, False),
            (1, 1, True),
            (3, 9, False),
            (4, 9, True),
            (6, 12, True),
        ],
    )
    def test_is_k_overspecified(self, k, event_count, expected):
        assert is_k_overspecified(k, event_count) is expected

    def test_run_flags_k_above_a_third(self):
        events = make_events([(i * 60, 10) for i in range(9)])

        clusters = cluster_kmeans(events, [], ClusterParams(k=4))

        assert clusters.meta.k_overspecified
        assert sum(c.count for c in clusters) == 9

    def test_run_with_moderate_k_not_flagged(self):
        events = make_events([(i * 60, 10) for i in range(6)])

        clusters = cluster_kmeans(events, [], ClusterParams(k=2))

        assert not clusters.meta.k_overspecified
