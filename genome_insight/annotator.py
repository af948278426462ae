"""
annotator.py
============
Cross-reference parsed variants against the pharmacogene loci table and
emit one GeneFinding per gene that has any evidence.

Two independent evidence sources per locus:
  1. rsID match     — a variant's ID column names one of the locus's known
                      markers (high confidence).  When several variants carry
                      the same rsID, the last one in file order wins.
  2. position match — the variant lies inside the locus window; variants
                      whose ID is not a known marker are reported as novel.

Genes with neither kind of evidence are omitted (not reported as normal).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from genome_insight.pgx_reference import PHARMA_GENE_DB, Locus, normalize_chrom
from genome_insight.phenotype_engine import (
    RISK_HIGH, RISK_MODERATE, classify_phenotype,
)
from genome_insight.vcf_parser import Variant

logger = logging.getLogger(__name__)

MAX_EVIDENCE = 20


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass
class GeneFinding:
    """Per-gene evidence, phenotype call and recommendations."""

    gene: str
    phenotype: str
    risk_level: str                     # "low" | "moderate" | "high"
    evidence: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    matched_ids: List[str] = field(default_factory=list)
    position_matches: int = 0
    total_markers_checked: int = 0
    confidence: int = 0                 # 0–100


# ---------------------------------------------------------------------------
# Core matching function
# ---------------------------------------------------------------------------

def match_pharmacogenes(
    variants: Sequence[Variant],
    database: Iterable[Locus] = PHARMA_GENE_DB,
) -> List[GeneFinding]:
    """
    Match variants against every locus in ``database``.

    Returns findings in database order.
    """
    by_rsid = _index_by_rsid(variants)
    by_chrom: Dict[str, List[Variant]] = {}
    for v in variants:
        by_chrom.setdefault(normalize_chrom(v.chrom), []).append(v)

    findings: List[GeneFinding] = []
    for locus in database:
        finding = _match_locus(locus, by_rsid, by_chrom.get(locus.chrom, []))
        if finding is not None:
            findings.append(finding)

    logger.info(
        "Pharmacogene matching complete — %d/%d variants indexed by rsID, genes found: %s",
        len(by_rsid), len(variants), [f.gene for f in findings],
    )
    return findings


def gene_confidence(id_matches: int, position_matches: int) -> int:
    """rsID evidence outweighs positional evidence; both are capped."""
    if id_matches > 0:
        return min(40 + id_matches * 20, 95)
    if position_matches > 0:
        return min(15 + position_matches * 3, 50)
    return 0


def gene_recommendations(gene: str, phenotype: str, risk: str, drugs: Sequence[str]) -> List[str]:
    if risk == RISK_HIGH:
        return [
            f"ALERT: Significant {gene} variant(s) detected - clinical action required",
            f"Avoid or adjust doses of: {', '.join(drugs[:4])}",
            "Urgent pharmacist/physician consultation recommended",
        ]
    if risk == RISK_MODERATE:
        return [
            f"{gene} {phenotype} - dose adjustments may be needed",
            f"Monitor response to: {', '.join(drugs[:3])}",
            "Consider therapeutic drug monitoring",
        ]
    recs = [f"Standard dosing appropriate for {gene} substrate drugs"]
    if drugs:
        recs.append(f"Applies to: {', '.join(drugs[:3])}")
    return recs


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _index_by_rsid(variants: Sequence[Variant]) -> Dict[str, Variant]:
    index: Dict[str, Variant] = {}
    for v in variants:
        if not v.variant_id.startswith("rs"):
            continue
        for rsid in v.variant_id.split(";"):
            if rsid.startswith("rs"):
                index[rsid] = v     # last write wins
    return index


def _match_locus(
    locus: Locus,
    by_rsid: Dict[str, Variant],
    chrom_variants: Sequence[Variant],
) -> Optional[GeneFinding]:
    matched_ids: List[str] = []
    evidence: List[str] = []
    genotypes: Dict[str, str] = {}

    for rsid, marker in locus.markers.items():
        v = by_rsid.get(rsid)
        if v is None:
            continue
        matched_ids.append(rsid)
        evidence.append(f"{rsid} ({marker.allele}: {marker.effect})")
        if v.genotype:
            genotypes[rsid] = v.genotype

    position_matches = 0
    for v in chrom_variants:
        if not locus.start <= v.pos <= locus.end:
            continue
        position_matches += 1
        if v.variant_id not in locus.markers:
            evidence.append(
                f"{normalize_chrom(v.chrom)}:{v.pos} {v.ref}>{v.alt} (novel in {locus.gene} region)"
            )

    if not matched_ids and position_matches == 0:
        return None

    call = classify_phenotype(locus.gene, matched_ids, genotypes, position_matches)
    logger.debug(
        "Gene %s → %s (%s), %d rsID / %d positional matches",
        locus.gene, call.phenotype, call.risk, len(matched_ids), position_matches,
    )

    return GeneFinding(
        gene                  = locus.gene,
        phenotype             = call.phenotype,
        risk_level            = call.risk,
        evidence              = evidence[:MAX_EVIDENCE],
        recommendations       = gene_recommendations(locus.gene, call.phenotype, call.risk, locus.drugs),
        matched_ids           = matched_ids,
        position_matches      = position_matches,
        total_markers_checked = len(locus.markers),
        confidence            = gene_confidence(len(matched_ids), position_matches),
    )
