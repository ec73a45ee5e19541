from labguard.compliance.models import InvalidSubmission
from labguard.surveillance import analyze_payload, analyze_surveillance
from labguard.surveillance.models import SurveillanceAnalysis, SurveillanceSample

KM_LAT = 1 / 111.19


def _batch():
    lat, lng = 32.7767, -96.7970
    samples = []
    for week, positives in zip(range(26, 31), [1, 1, 1, 6, 2]):
        for i in range(positives):
            samples.append(
                SurveillanceSample(
                    pool_id=f"W{week}-P{i}",
                    result="positive",
                    latitude=lat + i * 0.2 * KM_LAT,
                    longitude=lng,
                    collection_week=week,
                )
            )
        for i in range(4):
            samples.append(
                SurveillanceSample(pool_id=f"W{week}-N{i}", result="negative", collection_week=week)
            )
    return samples


def test_parallel_matches_inline(policy):
    samples = _batch()
    parallel = analyze_surveillance(samples, policy=policy, parallel=True)
    inline = analyze_surveillance(samples, policy=policy, parallel=False)
    assert parallel.model_dump_json() == inline.model_dump_json()


def test_full_analysis(policy):
    analysis = analyze_surveillance(_batch(), policy=policy)
    assert analysis.metrics.total_pools == 31
    assert analysis.metrics.positive_pools == 11
    assert analysis.geographic_clusters.cluster_count == 1
    assert [a.week for a in analysis.temporal_patterns.anomalies] == [29]
    # 35.48% positive + cluster + anomaly
    assert analysis.risk_assessment.risk_score == 100
    assert analysis.risk_assessment.risk_level == "high"
    assert analysis.report_narrative.startswith("During the reporting period, 31 mosquito pools")
    assert [item.type for item in analysis.recommendations] == [
        "geographic",
        "temporal",
        "surveillance",
    ]


def test_supplied_metrics_are_used(policy):
    payload = {
        "samples": [
            {"pool_id": "P1", "result": "negative", "collection_week": 10},
        ],
        "metrics": {"total_pools": 50, "positive_pools": 10, "positivity_rate": 20.0},
    }
    analysis = analyze_payload(payload, policy=policy)
    assert isinstance(analysis, SurveillanceAnalysis)
    assert analysis.metrics.positivity_rate == 20.0
    assert analysis.risk_assessment.risk_score == 40
    assert analysis.temporal_patterns.trend == "insufficient_data"


def test_invalid_payload(policy):
    payload = {"samples": [{"pool_id": "P1", "result": "maybe", "collection_week": 0}]}
    outcome = analyze_payload(payload, policy=policy)
    assert isinstance(outcome, InvalidSubmission)
    assert outcome.kind == "surveillance"
    assert len(outcome.errors) == 2
