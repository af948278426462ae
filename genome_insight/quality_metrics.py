"""
quality_metrics.py
==================
Distributional statistics over every parsed variant: filter pass counts,
QUAL summary statistics, histograms, SNP / indel / Ti-Tv classification,
zygosity balance, read depth and dbSNP annotation rate.

QUAL statistics only consider variants with QUAL > 0 (many callers emit 0 or
'.' when they have no calibrated score).
"""

from __future__ import annotations

import functools
import logging
import math
import statistics
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from genome_insight.numeric import index_quantile, leading_int, round_half_up
from genome_insight.vcf_parser import Variant

logger = logging.getLogger(__name__)

TRANSITIONS = frozenset({("A", "G"), ("G", "A"), ("C", "T"), ("T", "C")})

# (label, inclusive lower bound, exclusive upper bound)
QUALITY_BUCKETS = (
    ("0-20",    0,   20),
    ("20-50",   20,  50),
    ("50-100",  50,  100),
    ("100-200", 100, 200),
    ("200-500", 200, 500),
    ("500+",    500, math.inf),
)


@dataclass
class QualityMetrics:
    total_variants: int = 0
    passed_variants: int = 0
    failed_variants: int = 0
    average_quality: float = 0.0
    median_quality: float = 0.0
    q1_quality: float = 0.0
    q3_quality: float = 0.0
    min_quality: float = 0.0
    max_quality: float = 0.0
    quality_std_dev: float = 0.0
    quality_distribution: List[Dict[str, object]] = field(default_factory=list)
    chromosome_distribution: List[Dict[str, object]] = field(default_factory=list)
    transition_count: int = 0
    transversion_count: int = 0
    ti_tv_ratio: float = 0.0
    snp_count: int = 0
    indel_count: int = 0
    multi_allelic_count: int = 0
    het_count: int = 0
    hom_alt_count: int = 0
    het_hom_ratio: float = 0.0
    average_read_depth: float = 0.0
    db_snp_annotated: int = 0
    novel_variants: int = 0

    @property
    def pass_rate(self) -> float:
        return self.passed_variants / self.total_variants if self.total_variants else 0.0

    @property
    def snp_evidence(self) -> int:
        return self.transition_count + self.transversion_count


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def zygosity(genotype: str) -> str:
    """'het' | 'hom_alt' | 'other' for a diploid GT string."""
    alleles = genotype.replace("|", "/", 1).split("/")
    if len(alleles) != 2:
        return "other"
    a1, a2 = alleles
    if a1 != a2 and any(a not in ("0", ".") for a in alleles):
        return "het"
    if a1 == a2 and a1 not in ("0", "."):
        return "hom_alt"
    return "other"


def _compare_chrom(a: str, b: str) -> int:
    a_num = leading_int(a.replace("chr", "", 1))
    b_num = leading_int(b.replace("chr", "", 1))
    if a_num is not None and b_num is not None:
        return a_num - b_num
    return (a > b) - (a < b)


def _std_dev(values: Sequence[float]) -> float:
    # exact rational arithmetic: QUAL values near the float limit must not overflow
    if len(values) < 2:
        return 0.0
    return statistics.stdev(values)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def calculate_quality_metrics(variants: Sequence[Variant]) -> QualityMetrics:
    qualities = [v.quality for v in variants if v.quality > 0]
    sorted_q = sorted(qualities)

    passed = sum(1 for v in variants if v.passed)

    transitions = transversions = snps = indels = multi_allelic = 0
    het = hom_alt = 0
    chrom_counts: Dict[str, int] = {}

    for v in variants:
        chrom_counts[v.chrom] = chrom_counts.get(v.chrom, 0) + 1

        alts = v.alt.split(",")
        if len(alts) > 1:
            multi_allelic += 1

        if v.genotype:
            zyg = zygosity(v.genotype)
            if zyg == "het":
                het += 1
            elif zyg == "hom_alt":
                hom_alt += 1

        for alt in alts:
            if alt in (".", "*"):
                continue
            if len(v.ref) == 1 and len(alt) == 1:
                snps += 1
                if (v.ref, alt) in TRANSITIONS:
                    transitions += 1
                else:
                    transversions += 1
            else:
                indels += 1

    mean = statistics.mean(qualities) if qualities else 0.0
    depths = [v.read_depth for v in variants if v.read_depth is not None and v.read_depth > 0]

    chrom_names = sorted(chrom_counts, key=functools.cmp_to_key(_compare_chrom))

    metrics = QualityMetrics(
        total_variants          = len(variants),
        passed_variants         = passed,
        failed_variants         = len(variants) - passed,
        average_quality         = mean,
        median_quality          = index_quantile(sorted_q, 0.5),
        q1_quality              = index_quantile(sorted_q, 0.25),
        q3_quality              = index_quantile(sorted_q, 0.75),
        min_quality             = sorted_q[0] if sorted_q else 0.0,
        max_quality             = sorted_q[-1] if sorted_q else 0.0,
        quality_std_dev         = _std_dev(qualities),
        quality_distribution    = [
            {"range": label, "count": sum(1 for q in qualities if lo <= q < hi)}
            for label, lo, hi in QUALITY_BUCKETS
        ],
        chromosome_distribution = [
            {"chromosome": c, "count": chrom_counts[c]} for c in chrom_names
        ],
        transition_count        = transitions,
        transversion_count      = transversions,
        ti_tv_ratio             = round_half_up(transitions / transversions, 2) if transversions else 0.0,
        snp_count               = snps,
        indel_count             = indels,
        multi_allelic_count     = multi_allelic,
        het_count               = het,
        hom_alt_count           = hom_alt,
        het_hom_ratio           = round_half_up(het / hom_alt, 2) if hom_alt else 0.0,
        average_read_depth      = sum(depths) / len(depths) if depths else 0.0,
        db_snp_annotated        = sum(1 for v in variants if v.variant_id.startswith("rs")),
        novel_variants          = sum(1 for v in variants if v.variant_id in (".", "")),
    )

    logger.debug(
        "Quality metrics: %d variants, %d passed, Ti/Tv=%.2f",
        metrics.total_variants, metrics.passed_variants, metrics.ti_tv_ratio,
    )
    return metrics
