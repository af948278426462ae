"""Tests for genome_insight.quality_metrics."""

import math

import pytest

from genome_insight.quality_metrics import calculate_quality_metrics, zygosity
from genome_insight.vcf_parser import parse_vcf_text


def _metrics(text):
    return calculate_quality_metrics(parse_vcf_text(text).variants)


def test_titv_ratio_of_21_to_10(titv_vcf):
    m = _metrics(titv_vcf)
    assert m.total_variants == 100
    assert m.transition_count == 63
    assert m.transversion_count == 30
    assert m.ti_tv_ratio == 2.1
    assert m.snp_count == 93
    assert m.indel_count == 7


def test_quality_summary_statistics(make_vcf, make_line):
    m = _metrics(make_vcf([
        make_line(pos=1, qual="10", filt="PASS"),
        make_line(pos=2, qual="20", filt="PASS"),
        make_line(pos=3, qual="30", filt="q10"),
        make_line(pos=4, qual="40", filt="."),
    ]))
    assert m.passed_variants == 3
    assert m.failed_variants == 1
    assert m.pass_rate == 0.75
    assert m.average_quality == 25
    # order statistics at floor(n * p), no interpolation
    assert m.median_quality == 30
    assert m.q1_quality == 20
    assert m.q3_quality == 40
    assert (m.min_quality, m.max_quality) == (10, 40)
    assert m.quality_std_dev == pytest.approx(math.sqrt(500 / 3))
    assert [b["count"] for b in m.quality_distribution] == [1, 3, 0, 0, 0, 0]


def test_zero_quality_is_excluded_from_statistics(make_vcf, make_line):
    m = _metrics(make_vcf([make_line(pos=1, qual="."), make_line(pos=2, qual="60")]))
    assert m.total_variants == 2
    assert m.average_quality == 60
    assert m.quality_std_dev == 0.0


def test_multi_allelic_sites_classify_each_alt(make_vcf, make_line):
    m = _metrics(make_vcf([make_line(ref="A", alt="G,T"), make_line(pos=2, ref="A", alt="*")]))
    assert m.multi_allelic_count == 1
    assert m.snp_count == 2
    assert m.transition_count == 1
    assert m.transversion_count == 1
    assert m.ti_tv_ratio == 1.0


def test_zygosity_balance(make_vcf, make_line):
    m = _metrics(make_vcf([
        make_line(pos=1, sample="0/1:99:30"),
        make_line(pos=2, sample="0|1:99:30"),
        make_line(pos=3, sample="1/2:99:30"),
        make_line(pos=4, sample="1/1:99:30"),
        make_line(pos=5, sample="./.:99:30"),
    ]))
    assert m.het_count == 3
    assert m.hom_alt_count == 1
    assert m.het_hom_ratio == 3.0


@pytest.mark.parametrize("gt, expected", [
    ("0/1", "het"),
    ("1|0", "het"),
    ("1/1", "hom_alt"),
    ("2|2", "hom_alt"),
    ("0/0", "other"),
    ("./.", "other"),
    ("1", "other"),
])
def test_zygosity(gt, expected):
    assert zygosity(gt) == expected


def test_chromosome_distribution_is_numerically_sorted(make_vcf, make_line):
    m = _metrics(make_vcf([
        make_line(chrom="chr10"),
        make_line(chrom="chrX"),
        make_line(chrom="chr2"),
        make_line(chrom="chr1"),
        make_line(chrom="chr2", pos=2),
    ]))
    assert m.chromosome_distribution == [
        {"chromosome": "chr1", "count": 1},
        {"chromosome": "chr2", "count": 2},
        {"chromosome": "chr10", "count": 1},
        {"chromosome": "chrX", "count": 1},
    ]


def test_read_depth_and_annotation_counts(make_vcf, make_line):
    m = _metrics(make_vcf([
        make_line(pos=1, vid="rs1", sample="0/1:99:20"),
        make_line(pos=2, vid=".", sample="0/1:99:40"),
        make_line(pos=3, vid="esv3", sample="0/1:99:0"),
    ]))
    assert m.average_read_depth == 30
    assert m.db_snp_annotated == 1
    assert m.novel_variants == 1


def test_empty_input_yields_zeroes():
    m = calculate_quality_metrics([])
    assert m.total_variants == 0
    assert m.pass_rate == 0.0
    assert m.median_quality == 0.0
    assert m.ti_tv_ratio == 0.0
    assert m.het_hom_ratio == 0.0
    assert all(b["count"] == 0 for b in m.quality_distribution)


def test_extreme_quality_values_do_not_overflow(make_vcf, make_line):
    m = _metrics(make_vcf([
        make_line(pos=100, qual="1e200"),
        make_line(pos=200, qual="1"),
    ]))
    assert m.max_quality == 1e200
    assert math.isfinite(m.average_quality)
    assert m.quality_std_dev == pytest.approx(1e200 / math.sqrt(2))
