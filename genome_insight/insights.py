"""
insights.py
===========
Plain-language "data value" insights summarising what a particular file
offers: variant landscape, pharmacogene evidence, medication impact,
sequencing reliability, actionable findings and dbSNP annotation coverage.

Every insight is derived from the file's own metrics, so two different files
never produce the same set of descriptions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from genome_insight.accuracy import AccuracyMetrics
from genome_insight.annotator import GeneFinding
from genome_insight.numeric import fmt_num
from genome_insight.pgx_reference import PHARMA_GENE_DB
from genome_insight.phenotype_engine import RISK_HIGH
from genome_insight.quality_metrics import QualityMetrics
from genome_insight.risk_classifier import RiskAssessment

IMPACT_HIGH   = "high"
IMPACT_MEDIUM = "medium"
IMPACT_LOW    = "low"


@dataclass
class DataValueInsight:
    category: str
    title: str
    description: str
    impact: str                 # "high" | "medium" | "low"
    metric: str


def _variant_landscape(metrics: QualityMetrics) -> DataValueInsight:
    total = metrics.total_variants
    if total > 500:
        verdict, impact = "Comprehensive genomic profile suitable for pharmacogenomic analysis.", IMPACT_HIGH
    elif total > 100:
        verdict, impact = "Moderate coverage - key pharmacogenes may be partially represented.", IMPACT_MEDIUM
    else:
        verdict, impact = "Limited variant set - results should be interpreted with caution.", IMPACT_LOW

    het_hom = fmt_num(metrics.het_hom_ratio) if metrics.het_hom_ratio else "N/A"
    return DataValueInsight(
        category    = "Genomic Coverage",
        title       = "Variant Landscape",
        description = (
            f"{total:,} genetic variants across {len(metrics.chromosome_distribution)} chromosomes: "
            f"{metrics.snp_count:,} SNPs, {metrics.indel_count:,} indels, "
            f"{metrics.multi_allelic_count} multi-allelic sites. Het/Hom ratio: {het_hom}. {verdict}"
        ),
        impact      = impact,
        metric      = f"{total:,} variants",
    )


def _pharmacogene_insight(findings: Sequence[GeneFinding]) -> DataValueInsight:
    total_genes = len(PHARMA_GENE_DB)
    if not findings:
        return DataValueInsight(
            category    = "Precision Medicine",
            title       = "Pharmacogene Coverage",
            description = (
                f"No known pharmacogene variants detected among {total_genes} genes screened. "
                "This may indicate (a) normal/wild-type genotype across all loci, "
                "(b) insufficient coverage in pharmacogene regions, or (c) variants not "
                "annotated with rsIDs. Consider re-analysis with annotated VCF."
            ),
            impact      = IMPACT_LOW,
            metric      = f"0/{total_genes} genes",
        )

    rsid_total = sum(len(f.matched_ids) for f in findings)
    position_only = sum(1 for f in findings if not f.matched_ids)
    genes = ", ".join(f"{f.gene} ({f.phenotype})" for f in findings)
    position_note = f", {position_only} gene(s) by position only" if position_only else ""
    return DataValueInsight(
        category    = "Precision Medicine",
        title       = "Pharmacogene Discovery",
        description = (
            f"{len(findings)} pharmacogene(s) detected: {genes}. Evidence: {rsid_total} known "
            f"rsID variant(s){position_note}. Each gene influences specific drug metabolism pathways."
        ),
        impact      = IMPACT_HIGH if any(f.risk_level == RISK_HIGH for f in findings) else IMPACT_MEDIUM,
        metric      = f"{len(findings)} genes",
    )


def _medication_impact(findings: Sequence[GeneFinding], risk: RiskAssessment) -> DataValueInsight:
    drugs = risk.affected_drugs
    more = f" and {len(drugs) - 5} others" if len(drugs) > 5 else ""
    confirmed = sum(1 for f in findings if f.matched_ids)
    if len(drugs) > 5:
        impact = IMPACT_HIGH
    elif len(drugs) > 2:
        impact = IMPACT_MEDIUM
    else:
        impact = IMPACT_LOW
    return DataValueInsight(
        category    = "Drug Safety",
        title       = "Medication Impact",
        description = (
            f"{len(drugs)} medications may require dose adjustments: {', '.join(drugs[:5])}{more}. "
            f"Based on detected pharmacogene variants with {confirmed} rsID-confirmed gene(s)."
        ),
        impact      = impact,
        metric      = f"{len(drugs)} drugs",
    )


def _sequencing_reliability(metrics: QualityMetrics, accuracy: AccuracyMetrics) -> DataValueInsight:
    vca = accuracy.variant_call_accuracy
    pass_pct = metrics.passed_variants / max(metrics.total_variants, 1) * 100

    ratio = metrics.ti_tv_ratio
    if ratio > 0:
        where = "within expected range" if 1.8 <= ratio <= 3.2 else "outside expected range"
        titv = f"Ti/Tv ratio: {fmt_num(ratio)} ({where})."
    else:
        titv = "No Ti/Tv ratio available."
    depth = f"{metrics.average_read_depth:.1f}x" if metrics.average_read_depth > 0 else "N/A"

    if vca.value >= 99:
        impact = IMPACT_HIGH
    elif vca.value >= 90:
        impact = IMPACT_MEDIUM
    else:
        impact = IMPACT_LOW
    return DataValueInsight(
        category    = "Data Quality",
        title       = "Sequencing Reliability",
        description = (
            f"Variant call accuracy: {vca.value:.1f}% ({vca.method}). "
            f"Filter pass rate: {pass_pct:.1f}%. {titv} Avg read depth: {depth}."
        ),
        impact      = impact,
        metric      = f"{vca.value:.1f}% accuracy",
    )


def _actionable_findings(risk: RiskAssessment) -> DataValueInsight:
    factors = risk.risk_factors
    more = f" and {len(factors) - 2} more" if len(factors) > 2 else ""
    return DataValueInsight(
        category    = "Clinical Alert",
        title       = "Actionable Findings",
        description = (
            f"{len(factors)} risk factor(s) identified: {'; '.join(factors[:2])}{more}. "
            "Clinical review recommended."
        ),
        impact      = IMPACT_HIGH if risk.overall_risk == RISK_HIGH else IMPACT_MEDIUM,
        metric      = f"{len(factors)} factors",
    )


def _dbsnp_coverage(metrics: QualityMetrics) -> DataValueInsight:
    rate = metrics.db_snp_annotated / max(metrics.total_variants, 1) * 100
    rate_text = f"{rate:.1f}"
    # thresholds apply to the displayed (one-decimal) rate
    shown = float(rate_text)
    if shown > 80:
        verdict = "High annotation rate enables confident pharmacogenomic interpretation."
    elif shown > 30:
        verdict = "Moderate annotation - some variants may lack clinical context."
    else:
        verdict = "Low annotation rate - consider re-annotating with Ensembl VEP or SnpEff."
    return DataValueInsight(
        category    = "Annotation",
        title       = "dbSNP Coverage",
        description = (
            f"{metrics.db_snp_annotated:,} variants ({rate_text}%) have dbSNP annotations. "
            f"{metrics.novel_variants:,} novel variants without database records. {verdict}"
        ),
        impact      = IMPACT_HIGH if shown > 50 else IMPACT_MEDIUM,
        metric      = f"{rate_text}% annotated",
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_data_value_insights(
    metrics: QualityMetrics,
    findings: Sequence[GeneFinding],
    risk: RiskAssessment,
    accuracy: AccuracyMetrics,
) -> List[DataValueInsight]:
    insights = [_variant_landscape(metrics), _pharmacogene_insight(findings)]
    if risk.affected_drugs:
        insights.append(_medication_impact(findings, risk))
    insights.append(_sequencing_reliability(metrics, accuracy))
    if risk.risk_factors:
        insights.append(_actionable_findings(risk))
    if metrics.db_snp_annotated > 0 or metrics.novel_variants > 0:
        insights.append(_dbsnp_coverage(metrics))
    return insights
