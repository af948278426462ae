"""
pipeline.py
===========
End-to-end analysis of one VCF text buffer:

  validate → parse → match pharmacogenes → quality → accuracy → judging
           → risk → insights → AnalysisResult

Every stage after matching is a pure function of (variants, findings), so
the same input always yields the same result apart from the caller-supplied
``file_name`` / ``upload_time`` record-keeping fields.

Also builds the standardised per-drug report consumed by ``/api/predict``.
"""

from __future__ import annotations

import dataclasses
import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from genome_insight.accuracy import AccuracyMetrics, calculate_accuracy_metrics
from genome_insight.annotator import GeneFinding, match_pharmacogenes
from genome_insight.insights import DataValueInsight, generate_data_value_insights
from genome_insight.judging import JudgingCriteria, calculate_judging_criteria
from genome_insight.pgx_reference import DRUG_GENE_MAP, LOCI_BY_GENE
from genome_insight.phenotype_engine import PHENOTYPE_NM, RISK_HIGH, RISK_LOW, RISK_MODERATE
from genome_insight.quality_metrics import QualityMetrics, calculate_quality_metrics
from genome_insight.risk_classifier import (
    LABEL_CONTRAINDICATED, RiskAssessment, calculate_risk_assessment,
    drug_risk_label, related_findings, risk_to_severity,
)
from genome_insight.vcf_parser import Variant, VCFMetadata, parse_vcf_text, validate_vcf_text

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "genome_data.vcf"
REPORT_VARIANT_LIMIT = 10
MAX_REPORT_CONFIDENCE = 0.95


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    moment = moment or datetime.now(UTC)
    return moment.astimezone(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")


@dataclass
class AnalysisResult:
    file_name: str
    upload_time: str
    total_variants: int
    variants: List[Variant]
    pharmacogenes: List[GeneFinding]
    risk_assessment: RiskAssessment
    quality_metrics: QualityMetrics
    judging_criteria: JudgingCriteria
    accuracy_metrics: AccuracyMetrics
    data_value_insights: List[DataValueInsight] = field(default_factory=list)
    vcf_metadata: Optional[VCFMetadata] = None

    def to_dict(self, include_variants: bool = True) -> Dict[str, Any]:
        data = dataclasses.asdict(self)
        if not include_variants:
            data.pop("variants")
        return data


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def analyze_vcf_text(
    text: str,
    file_name: str = DEFAULT_FILE_NAME,
    upload_time: Optional[datetime] = None,
) -> AnalysisResult:
    """
    Validate, parse and fully analyse a VCF held in memory.

    Raises:
        VCFValidationError: when the buffer fails the three structural checks.
    """
    validate_vcf_text(text)
    parsed = parse_vcf_text(text)
    variants = parsed.variants

    findings = match_pharmacogenes(variants)
    risk = calculate_risk_assessment(findings)
    metrics = calculate_quality_metrics(variants)
    judging = calculate_judging_criteria(variants, metrics, findings, parsed.metadata)
    accuracy = calculate_accuracy_metrics(variants, metrics, findings)
    insights = generate_data_value_insights(metrics, findings, risk, accuracy)

    logger.info(
        "Analysed %s — %d variants, %d gene(s), grade %s, risk %s",
        file_name, len(variants), len(findings), judging.grade, risk.overall_risk,
    )

    return AnalysisResult(
        file_name           = file_name,
        upload_time         = utc_timestamp(upload_time),
        total_variants      = len(variants),
        variants            = variants,
        pharmacogenes       = findings,
        risk_assessment     = risk,
        quality_metrics     = metrics,
        judging_criteria    = judging,
        accuracy_metrics    = accuracy,
        data_value_insights = insights,
        vcf_metadata        = parsed.metadata,
    )


def analyze_vcf_file(filepath: str, upload_time: Optional[datetime] = None) -> AnalysisResult:
    with open(filepath, encoding="utf-8", errors="replace") as fh:
        text = fh.read()
    return analyze_vcf_text(text, file_name=filepath.replace("\\", "/").rsplit("/", 1)[-1],
                            upload_time=upload_time)


# ---------------------------------------------------------------------------
# Standardised per-drug report
# ---------------------------------------------------------------------------

def new_patient_id() -> str:
    return f"PATIENT_{uuid.uuid4().hex[:7].upper()}"


def _diplotype(detected: List[GeneFinding]) -> str:
    """
    Best-effort diplotype: reference allele paired with the first matched star
    allele.  Phase is not resolved, so positional-only evidence is reported
    as indeterminate.
    """
    if not detected:
        return "*1/*1"
    first = detected[0]
    if not first.matched_ids:
        return "Indeterminate"
    marker = LOCI_BY_GENE[first.gene].markers[first.matched_ids[0]]
    return f"*1/{marker.allele.split(' ')[0]}"


def build_drug_report(
    result: AnalysisResult,
    drug: str,
    patient_id: Optional[str] = None,
    explanation: str = "",
) -> Dict[str, Any]:
    """Shape one drug's findings into the standardised report dict."""
    related = DRUG_GENE_MAP.get(drug.upper(), ())
    detected = related_findings(drug, result.pharmacogenes)

    if detected:
        primary_gene = detected[0].gene
        # any detected gene lifts severity to at least "high"
        any_high = any(f.risk_level == RISK_HIGH for f in detected)
        severity = risk_to_severity(RISK_HIGH if any_high else RISK_MODERATE)
        confidence = sum(f.confidence for f in detected) / len(detected) / 100
    else:
        primary_gene = related[0] if related else "UNKNOWN"
        severity = risk_to_severity(RISK_LOW)
        confidence = 0.5

    label = drug_risk_label(detected)
    genes = "/".join(f.gene for f in detected)
    metrics = result.quality_metrics

    if detected:
        summary = (
            f"Detected {len(detected)} pharmacogene variant(s) affecting {drug} metabolism. "
            "Clinical review recommended."
        )
    else:
        summary = (
            f"No significant pharmacogene variants detected for {drug}. "
            "Standard dosing protocols are expected to be appropriate."
        )

    return {
        "patient_id": patient_id or new_patient_id(),
        "drug":       drug,
        "timestamp":  utc_timestamp(),
        "risk_assessment": {
            "risk_label":       label,
            "confidence_score": min(confidence, MAX_REPORT_CONFIDENCE),
            "severity":         severity,
        },
        "pharmacogenomic_profile": {
            "primary_gene": primary_gene,
            "diplotype":    _diplotype(detected),
            "phenotype":    detected[0].phenotype if detected else PHENOTYPE_NM,
            "detected_variants": [
                {"rsid": v.variant_id, "chromosome": v.chrom, "position": v.pos,
                 "ref": v.ref, "alt": v.alt}
                for v in result.variants if v.variant_id.startswith("rs")
            ][:REPORT_VARIANT_LIMIT],
        },
        "clinical_recommendation": {
            "dosage_adjustment":   bool(detected),
            "monitoring_required": bool(detected),
            "monitoring_type":     "Therapeutic Drug Monitoring (TDM)" if detected else None,
            "contraindicated":     label == LABEL_CONTRAINDICATED,
            "notes": "; ".join(
                f"{f.gene}: {f.phenotype} ({f.recommendations[0]})" for f in detected
            ),
        },
        "llm_generated_explanation": {
            "summary": explanation or summary,
            "clinical_implications": "; ".join(
                f"{f.gene} {f.phenotype} may affect {drug} pharmacokinetics" for f in detected
            ),
            "dosing_recommendations": (
                f"Consider dose adjustment based on {genes} phenotype" if detected
                else "Standard dosing appropriate"
            ),
            "monitoring_recommendations": (
                "Therapeutic drug monitoring recommended; monitor for treatment response "
                "and adverse effects" if detected else "Standard clinical monitoring"
            ),
        },
        "quality_metrics": {
            "vcf_parsing_success": True,
            "total_variants":      result.total_variants,
            "passed_variants":     metrics.passed_variants,
            "average_quality":     metrics.average_quality,
            "median_quality":      metrics.median_quality,
            "snp_count":           metrics.snp_count,
            "indel_count":         metrics.indel_count,
            "confidence_score":    result.judging_criteria.overall_score,
        },
    }
