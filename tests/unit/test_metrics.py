"""
Tests for cluster metrics, severity scoring and ranking.
"""

import pytest

from apnea_clusters.analysis.metrics import (
    annotate_cluster,
    annotate_clusters,
    compute_cluster_severity,
    compute_density,
    compute_severity,
    compute_weighted_density,
    extension_sec,
    rank_clusters,
    summarize_flg_window,
    total_apnea_duration,
)
from apnea_clusters.analysis.types import Cluster, ClusterList, KMeansMeta
from tests.helpers.synthetic_data import at, make_event, make_events, make_flg


@pytest.fixture
def pair_cluster():
    """Two 10s events spanning one minute."""
    return Cluster.from_events(make_events([(0, 10), (50, 10)]))


class TestDensity:
    """Test per-minute rates over the cluster window."""

    def test_density(self, pair_cluster):
        assert pair_cluster.duration_sec == 60
        assert compute_density(pair_cluster) == pytest.approx(2.0)
        assert compute_weighted_density(pair_cluster) == pytest.approx(20.0)
        assert total_apnea_duration(pair_cluster) == 20

    def test_built_cluster_carries_rates(self, pair_cluster):
        assert pair_cluster.density == compute_density(pair_cluster)
        assert pair_cluster.weighted_density == compute_weighted_density(pair_cluster)
        assert pair_cluster.total_apnea_duration_sec == 20

    def test_zero_length_window(self):
        cluster = Cluster.from_events([make_event(0, 0)])

        assert cluster.duration_sec == 0
        assert compute_density(cluster) == 1.0
        assert compute_weighted_density(cluster) == 0.0
        assert compute_cluster_severity(cluster) > 0


@pytest.mark.business_logic
class TestSeverity:
    """Test composite severity scoring."""

    BASE = {
        "total_apnea_sec": 60.0,
        "density": 1.0,
        "weighted_density": 10.0,
        "extension": 5.0,
    }

    @pytest.mark.parametrize("term", list(BASE))
    def test_strictly_increasing_in_each_term(self, term):
        baseline = compute_severity(**self.BASE)
        bumped = compute_severity(**{**self.BASE, term: self.BASE[term] + 1})

        assert bumped > baseline

    def test_all_zero_terms(self):
        assert compute_severity(0, 0, 0, 0) == 0.0

    def test_extension_raises_severity(self):
        events = make_events([(0, 10), (50, 10)])
        raw = Cluster.from_events(events)
        extended = Cluster.from_events(events, start=at(-30), end=at(80))

        assert extension_sec(raw) == 0
        assert extension_sec(extended) == 50
        assert compute_cluster_severity(extended) > compute_cluster_severity(raw)

    def test_denser_cluster_scores_higher(self):
        sparse = Cluster.from_events(make_events([(0, 10), (100, 10), (200, 10)]))
        dense = Cluster.from_events(make_events([(0, 10), (20, 10), (40, 10)]))

        assert compute_cluster_severity(dense) > compute_cluster_severity(sparse)


class TestAnnotation:
    """Test filling derived fields on clusters."""

    def test_annotate_cluster(self, pair_cluster):
        annotated = annotate_cluster(pair_cluster)

        assert annotated.total_apnea_duration_sec == 20
        assert annotated.density == pytest.approx(2.0)
        assert annotated.weighted_density == pytest.approx(20.0)
        assert annotated.severity == pytest.approx(
            compute_cluster_severity(pair_cluster)
        )
        assert pair_cluster.severity == 0.0

    def test_annotate_clusters_keeps_meta(self, pair_cluster):
        meta = KMeansMeta(
            converged=True,
            iterations=2,
            max_iterations_reached=False,
            wcss=0.0,
            k_overspecified=False,
        )

        annotated = annotate_clusters(ClusterList([pair_cluster], meta=meta))

        assert annotated.meta is meta
        assert annotated[0].severity > 0

    def test_annotate_plain_list(self, pair_cluster):
        annotated = annotate_clusters([pair_cluster])

        assert annotated.meta is None
        assert len(annotated) == 1


class TestRanking:
    """Test severity ordering."""

    def test_rank_descending(self, pair_cluster):
        low = pair_cluster.model_copy(update={"severity": 1.0})
        high = pair_cluster.model_copy(update={"severity": 3.0})
        mid = pair_cluster.model_copy(update={"severity": 2.0})

        ranked = rank_clusters([low, high, mid])

        assert [c.severity for c in ranked] == [3.0, 2.0, 1.0]

    def test_ties_keep_input_order(self, pair_cluster):
        first = pair_cluster.model_copy(update={"severity": 1.0})
        second = Cluster.from_events([make_event(500, 10)]).model_copy(
            update={"severity": 1.0}
        )

        assert rank_clusters([first, second]) == [first, second]


class TestFlgWindowSummary:
    """Test FLG statistics inside a cluster window."""

    def test_summary(self, pair_cluster):
        flg = make_flg([(-10, 0.9), (0, 0.2), (30, 0.6), (60, 0.4), (90, 1.0)])

        summary = summarize_flg_window(pair_cluster, flg)

        assert summary is not None
        assert summary.sample_count == 3
        assert summary.min_level == 0.2
        assert summary.max_level == 0.6
        assert summary.mean_level == pytest.approx(0.4)

    def test_no_samples_in_window(self, pair_cluster):
        assert summarize_flg_window(pair_cluster, make_flg([(200, 0.5)])) is None
