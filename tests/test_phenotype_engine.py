"""Tests for the per-gene phenotype rules."""

import pytest

from genome_insight.pgx_reference import PHARMA_GENE_DB, TARGET_GENES
from genome_insight.phenotype_engine import (
    CLASSIFIED_GENES,
    PHENOTYPE_IM,
    PHENOTYPE_NM,
    PHENOTYPE_PM,
    RISK_HIGH,
    RISK_LOW,
    RISK_MODERATE,
    classify_phenotype,
)


def test_every_reference_gene_has_a_rule():
    assert set(CLASSIFIED_GENES) == set(TARGET_GENES)
    assert len(PHARMA_GENE_DB) == 12


def test_unknown_gene_raises():
    with pytest.raises(KeyError):
        classify_phenotype("ABCB1", [], {}, 0)


@pytest.mark.parametrize("matched, expected", [
    (["rs3892097", "rs5030655"], (PHENOTYPE_PM, RISK_HIGH)),
    (["rs3892097", "rs1065852"], (PHENOTYPE_PM, RISK_HIGH)),
    (["rs3892097"], (PHENOTYPE_IM, RISK_MODERATE)),
    (["rs1065852", "rs28371706"], (PHENOTYPE_IM, RISK_MODERATE)),
    (["rs28371725"], ("Normal Metabolizer (one decreased allele)", RISK_LOW)),
    (["rs16947"], (PHENOTYPE_NM, RISK_LOW)),
])
def test_cyp2d6(matched, expected):
    assert tuple(classify_phenotype("CYP2D6", matched, {}, 0)) == expected


def test_cyp2d6_positional_only():
    call = classify_phenotype("CYP2D6", [], {}, 3)
    assert call.phenotype == "Normal Metabolizer (no known functional variants)"
    assert call.risk == RISK_LOW


@pytest.mark.parametrize("matched, expected", [
    (["rs4244285", "rs4986893"], (PHENOTYPE_PM, RISK_HIGH)),
    (["rs4244285"], (PHENOTYPE_IM, RISK_MODERATE)),
    (["rs12248560"], ("Rapid/Ultrarapid Metabolizer", RISK_MODERATE)),
    (["rs4244285", "rs12248560"], ("Normal Metabolizer (conflicting alleles)", RISK_LOW)),
])
def test_cyp2c19(matched, expected):
    assert tuple(classify_phenotype("CYP2C19", matched, {}, 0)) == expected


def test_tpmt_counts_any_marker():
    assert classify_phenotype("TPMT", ["rs1800462", "rs1142345"], {}, 0).risk == RISK_HIGH
    assert classify_phenotype("TPMT", ["rs1800584"], {}, 0).risk == RISK_MODERATE


def test_dpyd_critical_marker_is_high_risk():
    call = classify_phenotype("DPYD", ["rs3918290"], {}, 0)
    assert call.phenotype.startswith("DPD Deficient")
    assert call.risk == RISK_HIGH


@pytest.mark.parametrize("gt, expected_risk", [
    ("1/1", RISK_HIGH),
    ("1|1", RISK_HIGH),
    ("0/1", RISK_MODERATE),
    ("1|0", RISK_MODERATE),
])
def test_vkorc1_zygosity(gt, expected_risk):
    call = classify_phenotype("VKORC1", ["rs9923231"], {"rs9923231": gt}, 0)
    assert call.risk == expected_risk


def test_vkorc1_without_genotype_is_intermediate():
    call = classify_phenotype("VKORC1", ["rs9934438"], {}, 0)
    assert call == ("Intermediate Warfarin Sensitivity", RISK_MODERATE)


def test_slco1b1_homozygous_is_poor_transporter():
    call = classify_phenotype("SLCO1B1", ["rs4149056"], {"rs4149056": "1/1"}, 0)
    assert call.phenotype.startswith("Poor Transporter")
    assert call.risk == RISK_HIGH


def test_nat2_tiers():
    assert classify_phenotype("NAT2", ["rs1801280", "rs1799930"], {}, 0).phenotype == "Slow Acetylator"
    assert classify_phenotype("NAT2", ["rs1208"], {}, 0) == ("Rapid Acetylator", RISK_LOW)
    assert classify_phenotype("NAT2", [], {}, 2) == ("Normal Acetylator", RISK_LOW)


@pytest.mark.parametrize("matched, expected", [
    (["rs1057910", "rs9332131"], (PHENOTYPE_PM, RISK_HIGH)),
    (["rs1057910"], (PHENOTYPE_IM, RISK_MODERATE)),
    (["rs9332131", "rs1799853"], (PHENOTYPE_IM, RISK_MODERATE)),
    (["rs1799853", "rs7900194"], (PHENOTYPE_IM, RISK_MODERATE)),
    (["rs28371686"], ("Normal Metabolizer (one decreased allele)", RISK_LOW)),
    ([], (PHENOTYPE_NM, RISK_LOW)),
])
def test_cyp2c9(matched, expected):
    assert tuple(classify_phenotype("CYP2C9", matched, {}, 0)) == expected


@pytest.mark.parametrize("matched, expected", [
    (["rs35599367", "rs4986910"], (PHENOTYPE_PM, RISK_HIGH)),
    (["rs55785340"], (PHENOTYPE_IM, RISK_MODERATE)),
    (["rs35599367", "rs2740574"], (PHENOTYPE_IM, RISK_MODERATE)),
    (["rs2740574"], ("Increased Expression", RISK_MODERATE)),
    ([], (PHENOTYPE_NM, RISK_LOW)),
])
def test_cyp3a4(matched, expected):
    assert tuple(classify_phenotype("CYP3A4", matched, {}, 0)) == expected


@pytest.mark.parametrize("matched, expected", [
    (["rs776746", "rs10264272"], ("Non-expressor (CYP3A5*3/*3)", RISK_MODERATE)),
    (["rs41303343"], ("Intermediate Expressor", RISK_LOW)),
    ([], ("Expressor (*1/*1)", RISK_LOW)),
])
def test_cyp3a5(matched, expected):
    assert tuple(classify_phenotype("CYP3A5", matched, {}, 0)) == expected


@pytest.mark.parametrize("matched, expected", [
    (["rs3918290"], ("DPD Deficient - CONTRAINDICATED for fluoropyrimidines", RISK_HIGH)),
    (["rs55886062", "rs67376798"], ("DPD Deficient - CONTRAINDICATED for fluoropyrimidines", RISK_HIGH)),
    (["rs67376798", "rs56038477"], ("Intermediate DPD Activity", RISK_HIGH)),
    (["rs75017182"], ("Possible Decreased DPD Activity", RISK_MODERATE)),
    ([], ("Normal DPD Activity", RISK_LOW)),
])
def test_dpyd(matched, expected):
    assert tuple(classify_phenotype("DPYD", matched, {}, 0)) == expected


@pytest.mark.parametrize("matched, expected", [
    (["rs8175347", "rs4148323"], ("Poor Metabolizer (UGT1A1 deficient)", RISK_HIGH)),
    (["rs8175347"], (PHENOTYPE_IM, RISK_MODERATE)),
    (["rs4148323"], (PHENOTYPE_IM, RISK_MODERATE)),
    ([], (PHENOTYPE_NM, RISK_LOW)),
])
def test_ugt1a1(matched, expected):
    assert tuple(classify_phenotype("UGT1A1", matched, {}, 0)) == expected


@pytest.mark.parametrize("matched, expected", [
    (["rs28399499"], (PHENOTYPE_PM, RISK_HIGH)),
    (["rs28399499", "rs2279343"], (PHENOTYPE_PM, RISK_HIGH)),
    (["rs3745274"], (PHENOTYPE_IM, RISK_MODERATE)),
    (["rs3745274", "rs2279343"], ("Rapid Metabolizer", RISK_MODERATE)),
    (["rs2279343"], ("Rapid Metabolizer", RISK_MODERATE)),
    ([], (PHENOTYPE_NM, RISK_LOW)),
])
def test_cyp2b6(matched, expected):
    assert tuple(classify_phenotype("CYP2B6", matched, {}, 0)) == expected
