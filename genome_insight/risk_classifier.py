"""
risk_classifier.py
==================
Roll per-gene findings up into an overall risk tier and per-drug findings.

Overall escalation:
  any high-risk gene            → high
  two or more moderate genes    → high
  one moderate gene             → moderate
  otherwise                     → low

Per-drug labels for the standardised report:
  no related gene detected                      → Safe
  high-risk gene whose phenotype says "poor"    → Contraindicated
  other high-risk gene                          → Toxic
  moderate-risk gene                            → Adjust Dosage
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from genome_insight.annotator import GeneFinding
from genome_insight.numeric import round_int
from genome_insight.pgx_reference import DRUG_GENE_MAP, LOCI_BY_GENE, PHARMA_GENE_DB
from genome_insight.phenotype_engine import RISK_HIGH, RISK_LOW, RISK_MODERATE

logger = logging.getLogger(__name__)

# Severity mapping for the standardised report
SEVERITY_BY_RISK: Dict[str, str] = {
    RISK_HIGH:     "critical",
    RISK_MODERATE: "high",
    RISK_LOW:      "low",
}

LABEL_SAFE            = "Safe"
LABEL_ADJUST          = "Adjust Dosage"
LABEL_TOXIC           = "Toxic"
LABEL_CONTRAINDICATED = "Contraindicated"


@dataclass
class RiskAssessment:
    overall_risk: str
    affected_drugs: List[str] = field(default_factory=list)
    clinical_significance: str = ""
    risk_factors: List[str] = field(default_factory=list)


@dataclass
class DrugFinding:
    drug: str
    related_genes: List[str]
    detected_genes: List[GeneFinding]
    risk_level: str
    confidence: int
    recommendation: str
    clinical_note: str


# ---------------------------------------------------------------------------
# Overall assessment
# ---------------------------------------------------------------------------

def overall_risk_for(findings: Sequence[GeneFinding]) -> str:
    high = sum(1 for f in findings if f.risk_level == RISK_HIGH)
    moderate = sum(1 for f in findings if f.risk_level == RISK_MODERATE)
    if high > 0 or moderate >= 2:
        return RISK_HIGH
    if moderate > 0:
        return RISK_MODERATE
    return RISK_LOW


def calculate_risk_assessment(findings: Sequence[GeneFinding]) -> RiskAssessment:
    high_genes = [f for f in findings if f.risk_level == RISK_HIGH]
    moderate_genes = [f for f in findings if f.risk_level == RISK_MODERATE]
    overall = overall_risk_for(findings)

    affected: List[str] = []
    for finding in findings:
        locus = LOCI_BY_GENE.get(finding.gene)
        if locus is None:
            continue
        for drug in locus.drugs:
            if drug not in affected:
                affected.append(drug)

    risk_factors: List[str] = []
    for f in high_genes:
        risk_factors.append(
            f"{f.gene}: {f.phenotype} ({len(f.matched_ids)} known variant(s), "
            f"confidence: {f.confidence}%)"
        )
    for f in moderate_genes:
        support = ", ".join(f.matched_ids) if f.matched_ids else f"{f.position_matches} positional match(es)"
        risk_factors.append(f"{f.gene}: {f.phenotype} ({support})")

    if not findings:
        significance = (
            f"No known pharmacogene variants detected among {len(PHARMA_GENE_DB)} genes analyzed. "
            "Standard care pathway appropriate. Note: absence of detected variants does not "
            "rule out all pharmacogenomic interactions."
        )
    else:
        if overall == RISK_HIGH:
            action = "Urgent clinical review recommended."
        elif overall == RISK_MODERATE:
            action = "Clinical consultation advised for dose adjustments."
        else:
            action = "Standard care with monitoring."
        significance = (
            f"Identified {len(findings)} pharmacogene(s): {', '.join(f.gene for f in findings)}. "
            f"{len(high_genes)} high-risk, {len(moderate_genes)} moderate-risk finding(s). {action}"
        )

    logger.info("Overall risk %s — %d gene(s), %d affected drug(s)", overall, len(findings), len(affected))

    return RiskAssessment(
        overall_risk          = overall,
        affected_drugs        = affected,
        clinical_significance = significance,
        risk_factors          = risk_factors,
    )


# ---------------------------------------------------------------------------
# Per-drug analysis
# ---------------------------------------------------------------------------

def related_findings(drug: str, findings: Sequence[GeneFinding]) -> List[GeneFinding]:
    """Findings for genes that govern ``drug``, in findings order."""
    related = DRUG_GENE_MAP.get(drug.upper(), ())
    return [f for f in findings if f.gene in related]


def analyze_drug(drug: str, findings: Sequence[GeneFinding]) -> DrugFinding:
    related = list(DRUG_GENE_MAP.get(drug.upper(), ()))
    detected = related_findings(drug, findings)

    if any(f.risk_level == RISK_HIGH for f in detected):
        risk = RISK_HIGH
    elif any(f.risk_level == RISK_MODERATE for f in detected):
        risk = RISK_MODERATE
    else:
        risk = RISK_LOW

    confidence = round_int(sum(f.confidence for f in detected) / len(detected)) if detected else 0
    genes = ", ".join(related)
    details = "; ".join(f"{f.gene}: {f.phenotype}" for f in detected)

    if not detected:
        recommendation = (
            f"No pharmacogene variants detected for {drug}-related genes ({genes}). "
            "Standard dosing appropriate based on available data."
        )
        note = (
            f"Absence of detected variants in {genes} suggests standard {drug} metabolism. "
            "However, this does not rule out all pharmacogenomic interactions. "
            "Consider targeted testing if adverse effects occur."
        )
    elif risk == RISK_HIGH:
        recommendation = (
            f"HIGH RISK: Significant variant(s) detected in {details}. Avoid {drug} or use "
            "alternative medication. Urgent clinical consultation recommended."
        )
        per_gene = " ".join(
            f"{f.gene} shows {f.phenotype} with {len(f.matched_ids)} rsID match(es) "
            f"at {f.confidence}% confidence."
            for f in detected
        )
        note = (
            f"Critical pharmacogenomic finding for {drug}. {per_gene} "
            "Dose adjustment or alternative therapy strongly recommended."
        )
    elif risk == RISK_MODERATE:
        recommendation = (
            f"MODERATE RISK: Variant(s) detected in {details}. Consider dose adjustment for "
            f"{drug}. Therapeutic drug monitoring advised."
        )
        per_gene = " ".join(f"{f.gene}: {f.phenotype}." for f in detected)
        note = (
            f"Pharmacogene variant(s) may affect {drug} metabolism. {per_gene} "
            "Monitor therapeutic response and consider pharmacokinetic testing."
        )
    else:
        recommendation = (
            f"LOW RISK: Detected genes show normal function. Standard {drug} dosing "
            "expected to be appropriate."
        )
        note = (
            f"Normal metabolizer status for {drug}-related genes. "
            "Standard prescribing protocols apply."
        )

    return DrugFinding(
        drug           = drug,
        related_genes  = related,
        detected_genes = detected,
        risk_level     = risk,
        confidence     = confidence,
        recommendation = recommendation,
        clinical_note  = note,
    )


def analyze_drugs(drugs: Sequence[str], findings: Sequence[GeneFinding]) -> List[DrugFinding]:
    """One DrugFinding per requested drug, in request order."""
    return [analyze_drug(drug, findings) for drug in drugs]


def drug_risk_label(detected: Sequence[GeneFinding]) -> str:
    if not detected:
        return LABEL_SAFE
    high = [f for f in detected if f.risk_level == RISK_HIGH]
    if any("poor" in f.phenotype.lower() for f in high):
        return LABEL_CONTRAINDICATED
    if high:
        return LABEL_TOXIC
    if any(f.risk_level == RISK_MODERATE for f in detected):
        return LABEL_ADJUST
    return LABEL_SAFE


def risk_to_severity(risk: str) -> str:
    return SEVERITY_BY_RISK.get(risk, "none")
