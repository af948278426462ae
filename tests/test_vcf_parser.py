"""Tests for genome_insight.vcf_parser."""

import pytest

from genome_insight.vcf_parser import (
    VCFValidationError,
    parse_vcf,
    parse_vcf_text,
    validate_vcf_text,
)


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def test_missing_fileformat_header_is_rejected(make_line):
    text = "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n" + make_line() + "\n"
    with pytest.raises(VCFValidationError, match=r"Missing VCF header \(##fileformat=VCFv4.x\)"):
        validate_vcf_text(text)


def test_missing_column_header_is_rejected(make_line):
    text = "##fileformat=VCFv4.2\n" + make_line() + "\n"
    with pytest.raises(VCFValidationError, match=r"Missing column header \(#CHROM\)"):
        validate_vcf_text(text)


def test_header_only_file_has_no_variant_data(make_vcf):
    with pytest.raises(VCFValidationError) as excinfo:
        validate_vcf_text(make_vcf([]))
    assert str(excinfo.value) == "VCF file contains no variant data"


def test_validation_error_is_a_value_error():
    assert issubclass(VCFValidationError, ValueError)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def test_parses_core_columns_and_sample_fields(make_vcf, make_line):
    text = make_vcf([
        make_line(chrom="chr22", pos=42524947, vid="rs3892097", ref="C", alt="T",
                  qual="812.5", filt="PASS", info="DP=40", sample="0|1:42:40"),
    ])
    result = parse_vcf_text(text)
    assert len(result.variants) == 1
    v = result.variants[0]
    assert v.chrom == "chr22"
    assert v.pos == 42524947
    assert v.variant_id == "rs3892097"
    assert (v.ref, v.alt) == ("C", "T")
    assert v.quality == 812.5
    assert v.passed
    assert v.genotype == "0|1"
    assert v.genotype_quality == 42.0
    assert v.read_depth == 40


def test_missing_and_unparseable_values_degrade(make_vcf, make_line):
    text = make_vcf([
        make_line(vid="", qual=".", filt="", info="", sample="./.:.:"),
        make_line(pos=1001, qual="abc", sample="1/1:nan:12x"),
    ])
    first, second = parse_vcf_text(text).variants
    assert first.variant_id == "."
    assert first.quality == 0.0
    assert first.filter == "."
    assert first.info == "."
    assert first.genotype == "./."
    assert first.genotype_quality is None
    assert first.read_depth is None
    assert second.quality == 0.0
    assert second.genotype_quality is None
    assert second.read_depth == 12


def test_short_and_bad_position_lines_are_skipped_and_counted(make_vcf, make_line):
    text = make_vcf([
        "1\t100\trs1\tA",
        make_line(pos=200),
        "1\tnot-a-number\trs2\tA\tG\t50\tPASS\t.",
    ])
    result = parse_vcf_text(text)
    assert [v.pos for v in result.variants] == [200]
    assert result.metadata.skipped_lines == 2


def test_sites_only_lines_have_no_sample_fields(make_vcf, make_line):
    result = parse_vcf_text(make_vcf([make_line(fmt="")]))
    v = result.variants[0]
    assert v.genotype is None
    assert v.genotype_quality is None
    assert v.read_depth is None


def test_first_format_layout_is_used_for_whole_file(make_vcf, make_line):
    text = make_vcf([
        make_line(pos=100, fmt="GT:DP", sample="0/1:25"),
        make_line(pos=200, fmt="DP:GT", sample="30:1/1"),
    ])
    _, second = parse_vcf_text(text).variants
    # later FORMAT columns are not re-read
    assert second.genotype == "30"
    assert second.read_depth == 1


def test_crlf_line_endings_are_tolerated(make_vcf, make_line):
    text = make_vcf([make_line(pos=100), make_line(pos=200)]).replace("\n", "\r\n")
    variants = parse_vcf_text(text).variants
    assert [v.pos for v in variants] == [100, 200]
    assert variants[1].read_depth == 30


def test_file_order_is_preserved(make_vcf, make_line):
    text = make_vcf([make_line(chrom="2", pos=5), make_line(chrom="1", pos=9)])
    assert [(v.chrom, v.pos) for v in parse_vcf_text(text).variants] == [("2", 5), ("1", 9)]


def test_metadata_is_extracted(make_vcf, make_line):
    meta = parse_vcf_text(make_vcf([make_line()])).metadata
    assert meta.file_format == "VCFv4.2"
    assert meta.source == "unit-test"
    assert meta.reference == "GRCh38"
    assert meta.info_fields == ["DP", "AF"]
    assert meta.filter_fields == ["q10"]
    assert meta.contig_count == 2
    assert meta.sample_names == ["SAMPLE1"]


def test_non_pass_filter_is_not_passed(make_vcf, make_line):
    v = parse_vcf_text(make_vcf([make_line(filt="q10")])).variants[0]
    assert not v.passed


# ---------------------------------------------------------------------------
# File helper
# ---------------------------------------------------------------------------

def test_parse_vcf_reads_and_validates(tmp_path, scenario_a_vcf):
    path = tmp_path / "sample.vcf"
    path.write_text(scenario_a_vcf)
    result = parse_vcf(str(path))
    assert len(result.variants) == 1


def test_parse_vcf_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_vcf(str(tmp_path / "absent.vcf"))
