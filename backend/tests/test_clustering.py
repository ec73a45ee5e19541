import pytest

from labguard.config import SurveillancePolicy
from labguard.surveillance import detect_geographic_clusters
from labguard.surveillance.clustering import density_tier
from labguard.surveillance.models import SurveillanceSample

DALLAS = (32.7767, -96.7970)
# roughly 1 km of latitude
KM_LAT = 1 / 111.19


def _positive(pool_id, lat=None, lng=None, week=30):
    return SurveillanceSample(
        pool_id=pool_id, result="positive", latitude=lat, longitude=lng, collection_week=week
    )


def test_single_positive_yields_no_clusters(policy):
    report = detect_geographic_clusters(
        [_positive("P1", *DALLAS), SurveillanceSample(pool_id="N1", result="negative", collection_week=30)],
        policy,
    )
    assert report.cluster_count == 0
    assert report.clusters == []
    assert report.total_positive_samples == 1


def test_nearby_positives_form_one_cluster(policy):
    lat, lng = DALLAS
    samples = [
        _positive("P1", lat, lng),
        _positive("P2", lat + 0.1 * KM_LAT, lng),
        _positive("P3", lat - 0.1 * KM_LAT, lng),
    ]
    report = detect_geographic_clusters(samples, policy)
    assert report.cluster_count == 1
    cluster = report.clusters[0]
    assert cluster.cluster_id == 1
    assert cluster.pool_ids == ["P1", "P2", "P3"]
    assert cluster.sample_count == 3
    assert cluster.center_lat == pytest.approx(lat, abs=1e-6)
    assert cluster.radius_km == pytest.approx(0.1, abs=0.005)
    # radius below the floor, density uses min_radius_km
    assert cluster.risk_level == "high"


def test_distant_positives_do_not_cluster(policy):
    lat, lng = DALLAS
    samples = [_positive("P1", lat, lng), _positive("P2", lat + 1.0, lng)]
    report = detect_geographic_clusters(samples, policy)
    assert report.cluster_count == 0


def test_linkage_is_transitive(policy):
    lat, lng = DALLAS
    samples = [
        _positive("A", lat, lng),
        _positive("Far", lat + 1.0, lng),
        _positive("B", lat + 2 * KM_LAT, lng),
        _positive("C", lat + 4 * KM_LAT, lng),
    ]
    report = detect_geographic_clusters(samples, policy)
    assert report.cluster_count == 1
    assert report.clusters[0].pool_ids == ["A", "B", "C"]
    # 3 pools over a 2 km radius
    assert report.clusters[0].risk_level == "low"


def test_unlocated_positives_are_counted_not_clustered(policy):
    lat, lng = DALLAS
    samples = [_positive("P1", lat, lng), _positive("P2"), _positive("P3", lat, None)]
    report = detect_geographic_clusters(samples, policy)
    assert report.total_positive_samples == 3
    assert report.unlocated_positive_samples == 2
    assert report.cluster_count == 0


def test_min_cluster_size_policy():
    lat, lng = DALLAS
    samples = [_positive("P1", lat, lng), _positive("P2", lat + 0.1 * KM_LAT, lng)]
    report = detect_geographic_clusters(samples, SurveillancePolicy(min_cluster_size=3))
    assert report.cluster_count == 0


@pytest.mark.parametrize("density,tier", [(1.0, "high"), (0.99, "medium"), (0.25, "medium"), (0.1, "low")])
def test_density_tiers(policy, density, tier):
    assert density_tier(density, policy) == tier
