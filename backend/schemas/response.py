"""
schemas/response.py
===================
Pydantic v2 models for every JSON body the API returns.

PredictResponse is the standardised per-drug report; AnalyzeResponse mirrors
the full engine result so the client can render every panel from one call.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


def _utc_now() -> str:
    return datetime.now(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Per-drug report (/api/predict)
# ---------------------------------------------------------------------------

class DetectedVariant(BaseModel):
    rsid: str
    chromosome: str
    position: int
    ref: str
    alt: str


class RiskAssessment(BaseModel):
    risk_label: str           # "Safe" | "Adjust Dosage" | "Toxic" | "Contraindicated"
    confidence_score: float = Field(ge=0.0, le=1.0)
    severity: str             # "none" | "low" | "high" | "critical"


class PharmacoGenomicProfile(BaseModel):
    primary_gene: str
    diplotype: str
    phenotype: str
    detected_variants: List[DetectedVariant] = Field(default_factory=list)


class ClinicalRecommendation(BaseModel):
    dosage_adjustment: bool
    monitoring_required: bool
    monitoring_type: Optional[str] = None
    contraindicated: bool = False
    notes: str = ""


class LLMExplanation(BaseModel):
    summary: str
    clinical_implications: str = ""
    dosing_recommendations: str = ""
    monitoring_recommendations: str = ""


class QualityMetrics(BaseModel):
    vcf_parsing_success: bool
    total_variants: int
    passed_variants: int
    average_quality: float
    median_quality: float
    snp_count: int
    indel_count: int
    confidence_score: int = Field(ge=0, le=100)


class PredictResponse(BaseModel):
    patient_id: str
    drug: str
    timestamp: str = Field(default_factory=_utc_now)
    risk_assessment: RiskAssessment
    pharmacogenomic_profile: PharmacoGenomicProfile
    clinical_recommendation: ClinicalRecommendation
    llm_generated_explanation: LLMExplanation
    quality_metrics: QualityMetrics

    @field_validator("timestamp", mode="before")
    @classmethod
    def _ensure_utc_string(cls, v: Any) -> str:
        if isinstance(v, datetime):
            return v.astimezone(UTC).isoformat(timespec="seconds").replace("+00:00", "Z")
        return str(v)


# ---------------------------------------------------------------------------
# Full analysis (/api/analyze)
# ---------------------------------------------------------------------------

class VariantOut(BaseModel):
    chrom: str
    pos: int
    variant_id: str
    ref: str
    alt: str
    quality: float
    filter: str
    info: str
    genotype: Optional[str] = None
    genotype_quality: Optional[float] = None
    read_depth: Optional[int] = None


class GeneFindingOut(BaseModel):
    gene: str
    phenotype: str
    risk_level: str
    evidence: List[str]
    recommendations: List[str]
    matched_ids: List[str]
    position_matches: int
    total_markers_checked: int
    confidence: int = Field(ge=0, le=100)


class OverallRiskAssessment(BaseModel):
    overall_risk: str
    affected_drugs: List[str]
    clinical_significance: str
    risk_factors: List[str]


class CriterionScoreOut(BaseModel):
    score: int = Field(ge=0, le=100)
    label: str
    detail: str
    raw_metrics: List[str]


class JudgingCriteriaOut(BaseModel):
    overall_score: int = Field(ge=0, le=100)
    data_completeness: CriterionScoreOut
    variant_quality: CriterionScoreOut
    coverage_depth: CriterionScoreOut
    ti_tv_ratio_score: CriterionScoreOut
    clinical_relevance: CriterionScoreOut
    grade: str
    confidence_level: str
    strengths: List[str]
    weaknesses: List[str]


class AccuracyMetricOut(BaseModel):
    value: float = Field(ge=0, le=100)
    method: str
    detail: str


class AccuracyMetricsOut(BaseModel):
    variant_call_accuracy: AccuracyMetricOut
    genotype_accuracy: AccuracyMetricOut
    ti_tv_accuracy: AccuracyMetricOut
    filter_sensitivity: AccuracyMetricOut
    pharmacogene_confidence: AccuracyMetricOut
    overall_reliability: AccuracyMetricOut


class InsightOut(BaseModel):
    category: str
    title: str
    description: str
    impact: str
    metric: str


class DrugFindingOut(BaseModel):
    drug: str
    related_genes: List[str]
    detected_genes: List[GeneFindingOut]
    risk_level: str
    confidence: int = Field(ge=0, le=100)
    recommendation: str
    clinical_note: str


class AnalyzeResponse(BaseModel):
    file_name: str
    upload_time: str
    total_variants: int
    variants: List[VariantOut] = Field(default_factory=list)
    pharmacogenes: List[GeneFindingOut]
    risk_assessment: OverallRiskAssessment
    quality_metrics: Dict[str, Any]
    judging_criteria: JudgingCriteriaOut
    accuracy_metrics: AccuracyMetricsOut
    data_value_insights: List[InsightOut]
    vcf_metadata: Dict[str, Any]
    drug_findings: List[DrugFindingOut] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Narrative (/api/explain)
# ---------------------------------------------------------------------------

class ExplainRequest(BaseModel):
    pharmacogenes: List[GeneFindingOut]
    risk_assessment: OverallRiskAssessment
    variants: List[VariantOut] = Field(default_factory=list)


class ExplainResponse(BaseModel):
    explanation: str


# ---------------------------------------------------------------------------
# Error response
# ---------------------------------------------------------------------------

class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    timestamp: str = Field(default_factory=_utc_now)
