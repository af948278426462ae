"""Tests for genome_insight.accuracy."""

import pytest

from genome_insight.accuracy import (
    AccuracyMetric,
    calculate_accuracy_metrics,
    filter_sensitivity,
    nearest_titv_expectation,
    overall_reliability,
    phred_error_probability,
    variant_call_accuracy,
)
from genome_insight.annotator import match_pharmacogenes
from genome_insight.quality_metrics import QualityMetrics, calculate_quality_metrics
from genome_insight.vcf_parser import parse_vcf_text


def _accuracy(text):
    variants = parse_vcf_text(text).variants
    metrics = calculate_quality_metrics(variants)
    return calculate_accuracy_metrics(variants, metrics, match_pharmacogenes(variants))


def test_phred_conversion_is_capped():
    assert phred_error_probability(30) == pytest.approx(1e-3)
    assert phred_error_probability(100) == pytest.approx(1e-6)


@pytest.mark.parametrize("observed, expected", [
    (2.1, (2.1, "WGS")),
    (2.0, (2.1, "WGS")),
    (2.8, (2.8, "WES")),
    (3.5, (2.8, "WES")),
])
def test_nearest_titv_expectation(observed, expected):
    assert nearest_titv_expectation(observed) == expected


def test_titv_scenario_scores_maximal(titv_vcf):
    acc = _accuracy(titv_vcf)
    assert acc.ti_tv_accuracy.value == 100.0
    assert acc.ti_tv_accuracy.method == "Gaussian deviation from expected WGS ratio"
    assert acc.variant_call_accuracy.value == 100.0
    assert acc.genotype_accuracy.method == "Phred-scale genotype quality conversion"
    assert acc.filter_sensitivity.value == 85.0
    assert acc.pharmacogene_confidence.value == 0


def test_missing_quality_degrades_to_zero(make_vcf, make_line):
    variants = parse_vcf_text(make_vcf([make_line(qual=".")])).variants
    metric = variant_call_accuracy(variants)
    assert metric.value == 0
    assert metric.method == "No quality scores available"


def test_genotype_accuracy_estimated_without_gq(make_vcf, make_line):
    acc = _accuracy(make_vcf([make_line(qual="100", fmt="GT", sample="0/1")]))
    # pass rate 1.0 * 0.6 + min(100/200, 1) * 0.4
    assert acc.genotype_accuracy.value == 80.0
    assert acc.genotype_accuracy.method.startswith("Estimated from QUAL")


@pytest.mark.parametrize("passed, total, expected", [
    (92, 100, 100.0),
    (70, 100, 80.0),
    (40, 100, 48.0),
])
def test_filter_sensitivity_bands(passed, total, expected):
    metrics = QualityMetrics(total_variants=total, passed_variants=passed,
                             failed_variants=total - passed)
    assert filter_sensitivity(metrics).value == pytest.approx(expected)


def test_filter_sensitivity_empty():
    assert filter_sensitivity(QualityMetrics()).value == 0


def test_overall_reliability_renormalises_over_active_dimensions():
    dims = [
        AccuracyMetric(90, "", ""),
        AccuracyMetric(0, "", ""),
        AccuracyMetric(0, "", ""),
        AccuracyMetric(0, "", ""),
        AccuracyMetric(80, "", ""),
    ]
    overall = overall_reliability(dims)
    assert overall.value == pytest.approx(86.0)
    assert overall.method == "Weighted composite (VCA:60%, PGx:40%)"


def test_overall_reliability_without_data():
    overall = overall_reliability([AccuracyMetric(0, "", "")] * 5)
    assert overall.value == 0
    assert overall.detail == "All accuracy dimensions returned 0"


def test_all_values_within_bounds(scenario_a_vcf):
    acc = _accuracy(scenario_a_vcf)
    for metric in (acc.variant_call_accuracy, acc.genotype_accuracy, acc.ti_tv_accuracy,
                   acc.filter_sensitivity, acc.pharmacogene_confidence, acc.overall_reliability):
        assert 0 <= metric.value <= 100
