"""
judging.py
==========
Weighted multi-criterion quality score for a VCF.

  Criterion            Weight  Included when
  data completeness    0.15    always
  variant quality      0.30    file has variants
  coverage depth       0.20    always (estimated when DP is absent)
  Ti/Tv ratio          0.15    any SNP evidence
  clinical relevance   0.20    always

Weights are renormalised over the criteria that apply, so a file without
SNPs is scored out of the remaining 0.85 rather than penalised with a zero.

Grade:       ≥85 A, ≥70 B, ≥50 C, ≥35 D, else F
Confidence:  ≥75 High, ≥45 Medium, else Low
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from genome_insight.accuracy import nearest_titv_expectation
from genome_insight.annotator import GeneFinding
from genome_insight.numeric import fmt_num, gaussian_score, round_int
from genome_insight.pgx_reference import LOCI_BY_GENE, PHARMA_GENE_DB
from genome_insight.phenotype_engine import RISK_HIGH
from genome_insight.quality_metrics import QualityMetrics
from genome_insight.vcf_parser import Variant, VCFMetadata

logger = logging.getLogger(__name__)

WEIGHT_COMPLETENESS = 0.15
WEIGHT_QUALITY      = 0.30
WEIGHT_COVERAGE     = 0.20
WEIGHT_TITV         = 0.15
WEIGHT_CLINICAL     = 0.20

TITV_SCORE_SIGMA = 0.4

GRADE_THRESHOLDS: Tuple[Tuple[int, str], ...] = ((85, "A"), (70, "B"), (50, "C"), (35, "D"))
CONFIDENCE_THRESHOLDS: Tuple[Tuple[int, str], ...] = ((75, "High"), (45, "Medium"))


@dataclass
class CriterionScore:
    score: int
    label: str
    detail: str
    raw_metrics: List[str] = field(default_factory=list)


@dataclass
class JudgingCriteria:
    overall_score: int
    data_completeness: CriterionScore
    variant_quality: CriterionScore
    coverage_depth: CriterionScore
    ti_tv_ratio_score: CriterionScore
    clinical_relevance: CriterionScore
    grade: str
    confidence_level: str
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)


def _pct(part: float, whole: float) -> str:
    return f"{part / whole * 100:.1f}"


# ---------------------------------------------------------------------------
# Criteria
# ---------------------------------------------------------------------------

def score_data_completeness(variants: Sequence[Variant], metadata: VCFMetadata) -> CriterionScore:
    total = len(variants) or 1
    with_id = sum(1 for v in variants if v.variant_id not in (".", ""))
    with_filter = sum(1 for v in variants if v.filter not in (".", ""))
    with_info = sum(1 for v in variants if v.info not in (".", ""))
    with_gt = sum(1 for v in variants if v.genotype is not None)
    with_dp = sum(1 for v in variants if v.read_depth is not None and v.read_depth > 0)

    # ID / FILTER / INFO make up a 75-point core, GT / DP a 25-point bonus
    core = (with_id * 25 + with_filter * 25 + with_info * 25) / total
    bonus = (with_gt * 15 + with_dp * 10) / total
    score = round_int(core + bonus)
    if variants:
        score = max(score, 35)

    if score >= 80:
        label = "Excellent"
    elif score >= 60:
        label = "Good"
    elif score >= 40:
        label = "Fair"
    else:
        label = "Poor"

    return CriterionScore(
        score       = min(score, 100),
        label       = label,
        detail      = (
            f"{len(variants)} variants, {len(metadata.info_fields)} INFO fields, "
            f"{len(metadata.sample_names)} sample(s)"
        ),
        raw_metrics = [
            f"rsID annotation: {_pct(with_id, total)}% ({with_id}/{total})",
            f"FILTER field: {_pct(with_filter, total)}% ({with_filter}/{total})",
            f"INFO field: {_pct(with_info, total)}% ({with_info}/{total})",
            f"Genotype (GT): {_pct(with_gt, total)}% ({with_gt}/{total})",
            f"Read Depth (DP): {_pct(with_dp, total)}% ({with_dp}/{total})",
        ],
    )


def _median_quality_factor(median: float) -> float:
    if median >= 100:
        return 35
    if median >= 50:
        return 25 + (median - 50) / 50 * 10
    if median >= 20:
        return 15 + (median - 20) / 30 * 10
    return min(median / 20, 1) * 15


def _iqr_factor(metrics: QualityMetrics) -> int:
    if metrics.median_quality == 0:
        return 0
    cv = (metrics.q3_quality - metrics.q1_quality) / metrics.median_quality
    if cv < 0.5:
        return 20
    if cv < 1.0:
        return 17
    if cv < 2.0:
        return 12
    return 8


def score_variant_quality(variants: Sequence[Variant], metrics: QualityMetrics) -> CriterionScore:
    if metrics.total_variants == 0:
        return CriterionScore(0, "No Data", "No variants", [])

    total = metrics.total_variants
    high_qual_fraction = sum(1 for v in variants if v.quality >= 20) / total * 25
    pass_rate_factor = metrics.passed_variants / total * 20
    score = round_int(
        _median_quality_factor(metrics.median_quality)
        + _iqr_factor(metrics)
        + high_qual_fraction
        + pass_rate_factor
    )

    if score >= 80:
        label = "Excellent"
    elif score >= 60:
        label = "Good"
    elif score >= 40:
        label = "Moderate"
    else:
        label = "Low"

    q30 = sum(1 for v in variants if v.quality >= 30)
    return CriterionScore(
        score       = min(score, 100),
        label       = label,
        detail      = f"Median QUAL={metrics.median_quality:.1f}, Std Dev={metrics.quality_std_dev:.1f}",
        raw_metrics = [
            f"Median QUAL: {metrics.median_quality:.1f}",
            f"IQR: {metrics.q1_quality:.1f} - {metrics.q3_quality:.1f}",
            f"Std Dev: {metrics.quality_std_dev:.1f}",
            f"QUAL >= 30: {_pct(q30, total)}%",
            f"Pass rate: {_pct(metrics.passed_variants, total)}%",
        ],
    )


def score_coverage_depth(variants: Sequence[Variant], metrics: QualityMetrics) -> CriterionScore:
    dp_count = sum(1 for v in variants if v.read_depth is not None and v.read_depth > 0)

    if dp_count == 0:
        # no DP: pipelines that emit PASS calls generally had adequate coverage
        pass_rate = metrics.pass_rate
        score = round_int(pass_rate * 70 + min(metrics.total_variants / 500, 1) * 30)
        return CriterionScore(
            score       = min(max(score, 40), 100),
            label       = "Moderate" if score >= 60 else "Estimated",
            detail      = (
                f"No DP field. Estimated from pass rate ({pass_rate * 100:.1f}%) and variant volume"
            ),
            raw_metrics = [
                "Read depth data: Not available",
                f"Filter pass rate: {pass_rate * 100:.1f}%",
                f"Total variants: {metrics.total_variants}",
            ],
        )

    avg_dp = metrics.average_read_depth
    if avg_dp >= 30:
        score = 85 + min((avg_dp - 30) / 70, 1) * 15
        label = "High"
    elif avg_dp >= 20:
        score = 70 + (avg_dp - 20) / 10 * 15
        label = "Adequate"
    elif avg_dp >= 10:
        score = 50 + (avg_dp - 10) / 10 * 20
        label = "Low"
    else:
        score = avg_dp / 10 * 50
        label = "Very Low"

    return CriterionScore(
        score       = round_int(min(score, 100)),
        label       = label,
        detail      = f"Mean depth: {avg_dp:.1f}x across {dp_count} variants",
        raw_metrics = [
            f"Mean read depth: {avg_dp:.1f}x",
            f"Variants with DP: {dp_count}/{len(variants)}",
            "Target: 30x (WGS) / 100x (WES)",
        ],
    )


def score_ti_tv_ratio(metrics: QualityMetrics) -> CriterionScore:
    if metrics.snp_evidence == 0:
        return CriterionScore(0, "N/A", "No SNPs detected", ["No SNP data"])

    observed = metrics.ti_tv_ratio
    expected, seq_type = nearest_titv_expectation(observed)
    deviation = abs(observed - expected)
    score = round_int(gaussian_score(deviation, TITV_SCORE_SIGMA))

    if score >= 85:
        label = "Normal"
    elif score >= 60:
        label = "Acceptable"
    elif score >= 40:
        label = "Marginal"
    else:
        label = "Anomalous"

    return CriterionScore(
        score       = min(score, 100),
        label       = label,
        detail      = f"Ti/Tv={fmt_num(observed)} (expected ~{fmt_num(expected)} for {seq_type})",
        raw_metrics = [
            f"Observed Ti/Tv: {fmt_num(observed)}",
            f"Expected ({seq_type}): {fmt_num(expected)}",
            f"Transitions: {metrics.transition_count}",
            f"Transversions: {metrics.transversion_count}",
            f"Deviation: {deviation:.3f}",
        ],
    )


def score_clinical_relevance(findings: Sequence[GeneFinding]) -> CriterionScore:
    gene_count = len(findings)
    high_risk = sum(1 for f in findings if f.risk_level == RISK_HIGH)
    rsid_matches = sum(len(f.matched_ids) for f in findings)
    avg_confidence = sum(f.confidence for f in findings) / gene_count if gene_count else 0.0
    affected_drugs = sum(len(LOCI_BY_GENE[f.gene].drugs) for f in findings if f.gene in LOCI_BY_GENE)

    gene_factor = min(gene_count / 3, 1) * 30
    rsid_factor = min(rsid_matches / 4, 1) * 25
    confidence_factor = avg_confidence / 100 * 25
    risk_factor = (15 if high_risk else 8 if gene_count else 0) + min(gene_count / 2, 1) * 5

    score = round_int(gene_factor + rsid_factor + confidence_factor + risk_factor)

    if score >= 80:
        label = "High"
    elif score >= 60:
        label = "Moderate"
    elif score >= 35:
        label = "Limited"
    else:
        label = "Minimal"

    return CriterionScore(
        score       = min(score, 100),
        label       = label,
        detail      = (
            f"{gene_count} gene(s), {rsid_matches} rsID match(es), "
            f"avg confidence {round_int(avg_confidence)}%"
        ),
        raw_metrics = [
            f"Pharmacogenes detected: {gene_count}/{len(PHARMA_GENE_DB)}",
            f"rsID matches: {rsid_matches}",
            f"High-risk genes: {high_risk}",
            f"Avg gene confidence: {avg_confidence:.1f}%",
            f"Total affected drugs: {affected_drugs}",
        ],
    )


# ---------------------------------------------------------------------------
# Overall score
# ---------------------------------------------------------------------------

def grade_for(score: float) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def confidence_for(score: float) -> str:
    for threshold, level in CONFIDENCE_THRESHOLDS:
        if score >= threshold:
            return level
    return "Low"


def weighted_overall(parts: Sequence[Tuple[float, float]]) -> int:
    """Round the (score, weight) weighted sum after renormalising the weights."""
    total_weight = sum(w for _, w in parts)
    return round_int(sum(s * (w / total_weight) for s, w in parts))


def _commentary(
    metrics: QualityMetrics,
    findings: Sequence[GeneFinding],
    completeness: CriterionScore,
    quality: CriterionScore,
    coverage: CriterionScore,
    titv: CriterionScore,
    clinical: CriterionScore,
) -> Tuple[List[str], List[str]]:
    strengths: List[str] = []
    weaknesses: List[str] = []

    median = round_int(metrics.median_quality)
    if quality.score >= 75:
        strengths.append(f"Strong variant quality (median QUAL={median}) supports reliable calls")
    elif quality.score < 50:
        weaknesses.append(f"Low variant quality (median QUAL={median}) may reduce reliability")

    if coverage.score >= 75:
        strengths.append("Good coverage depth supports confident variant calling")
    elif coverage.score < 50:
        weaknesses.append("Limited read depth reduces confidence in heterozygous calls")

    ratio = fmt_num(metrics.ti_tv_ratio)
    if titv.score >= 75:
        strengths.append(f"Ti/Tv ratio ({ratio}) consistent with high-quality data")
    elif titv.score < 50:
        weaknesses.append(f"Ti/Tv ratio ({ratio}) deviates from expected, suggesting artifacts")

    if clinical.score >= 70:
        strengths.append(f"{len(findings)} pharmacogene(s) detected with rsID-level evidence")
    elif not findings:
        weaknesses.append(
            "No pharmacogene variants detected - VCF may lack coverage in pharmacogene regions"
        )
    else:
        rsid_matches = sum(len(f.matched_ids) for f in findings)
        weaknesses.append(f"Limited pharmacogene evidence ({rsid_matches} rsID matches)")

    if completeness.score >= 70:
        strengths.append("Well-annotated VCF with comprehensive field population")
    else:
        weaknesses.append("Incomplete annotation limits analysis depth")

    if metrics.db_snp_annotated > 0:
        strengths.append(f"{metrics.db_snp_annotated} dbSNP-annotated variants for clinical reference")

    het_hom = metrics.het_hom_ratio
    if het_hom > 0 and 1.2 <= het_hom <= 2.5:
        strengths.append(f"Het/Hom ratio ({fmt_num(het_hom)}) within normal diploid range")
    elif het_hom > 0 and (het_hom < 1.0 or het_hom > 3.0):
        weaknesses.append(f"Unusual Het/Hom ratio ({fmt_num(het_hom)}) may indicate sample issues")

    return strengths, weaknesses


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def calculate_judging_criteria(
    variants: Sequence[Variant],
    metrics: QualityMetrics,
    findings: Sequence[GeneFinding],
    metadata: VCFMetadata,
) -> JudgingCriteria:
    completeness = score_data_completeness(variants, metadata)
    quality = score_variant_quality(variants, metrics)
    coverage = score_coverage_depth(variants, metrics)
    titv = score_ti_tv_ratio(metrics)
    clinical = score_clinical_relevance(findings)

    # criteria without their precondition are dropped, not scored as zero
    parts: List[Tuple[float, float]] = [(completeness.score, WEIGHT_COMPLETENESS)]
    if variants:
        parts.append((quality.score, WEIGHT_QUALITY))
    parts.append((coverage.score, WEIGHT_COVERAGE))
    if metrics.snp_evidence > 0:
        parts.append((titv.score, WEIGHT_TITV))
    parts.append((clinical.score, WEIGHT_CLINICAL))

    overall = weighted_overall(parts)
    strengths, weaknesses = _commentary(
        metrics, findings, completeness, quality, coverage, titv, clinical,
    )

    logger.info("Judging complete — overall %d (%s)", overall, grade_for(overall))

    return JudgingCriteria(
        overall_score      = overall,
        data_completeness  = completeness,
        variant_quality    = quality,
        coverage_depth     = coverage,
        ti_tv_ratio_score  = titv,
        clinical_relevance = clinical,
        grade              = grade_for(overall),
        confidence_level   = confidence_for(overall),
        strengths          = strengths,
        weaknesses         = weaknesses,
    )
