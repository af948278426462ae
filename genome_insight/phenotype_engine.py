"""
phenotype_engine.py
===================
Translate the rsIDs matched for one gene into a (phenotype, risk tier) call.

Each gene has its own rule.  The general pattern: split the matched markers
into functional classes (loss-of-function / decreased / increased), then
apply the gene's thresholds:

  CYP2D6  : ≥2 LoF → PM/high, LoF + decreased → PM/high, 1 LoF → IM/moderate,
            ≥2 decreased → IM/moderate, 1 decreased → NM (one decreased)/low
  CYP2C19 : ≥2 LoF → PM/high, 1 LoF → IM/moderate, *17 only → RM-UM/moderate
  VKORC1  : rs9923231 / rs9934438, escalated to high when rs9923231 is homozygous
  SLCO1B1 : rs4149056, escalated to high when homozygous
  …

The rule set is closed: one function per gene in the reference table,
selected by gene symbol.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Mapping, NamedTuple, Sequence

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Risk tiers / shared phenotype strings
# ---------------------------------------------------------------------------
RISK_LOW      = "low"
RISK_MODERATE = "moderate"
RISK_HIGH     = "high"

PHENOTYPE_PM = "Poor Metabolizer"
PHENOTYPE_IM = "Intermediate Metabolizer"
PHENOTYPE_NM = "Normal Metabolizer"
PHENOTYPE_RM = "Rapid Metabolizer"
PHENOTYPE_NM_ONE_DECREASED = "Normal Metabolizer (one decreased allele)"


class PhenotypeCall(NamedTuple):
    phenotype: str
    risk: str


Rule = Callable[[Sequence[str], Mapping[str, str], int], PhenotypeCall]


def _count(matched: Sequence[str], ids: Sequence[str]) -> int:
    return sum(1 for rs in matched if rs in ids)


def _is_homozygous(genotypes: Mapping[str, str], rsid: str) -> bool:
    # No reference allele anywhere in the call ("1/1", "1|1")
    gt = genotypes.get(rsid)
    return bool(gt) and "0" not in gt


# ---------------------------------------------------------------------------
# Per-gene rules
# ---------------------------------------------------------------------------

def _cyp2d6(matched, genotypes, position_matches) -> PhenotypeCall:
    lof = _count(matched, ("rs3892097", "rs5030655"))
    dec = _count(matched, ("rs1065852", "rs28371706", "rs28371725"))
    if lof >= 2:
        return PhenotypeCall(PHENOTYPE_PM, RISK_HIGH)
    if lof == 1 and dec >= 1:
        return PhenotypeCall(PHENOTYPE_PM, RISK_HIGH)
    if lof == 1:
        return PhenotypeCall(PHENOTYPE_IM, RISK_MODERATE)
    if dec >= 2:
        return PhenotypeCall(PHENOTYPE_IM, RISK_MODERATE)
    if dec == 1:
        return PhenotypeCall(PHENOTYPE_NM_ONE_DECREASED, RISK_LOW)
    if position_matches > 0 and not matched:
        return PhenotypeCall("Normal Metabolizer (no known functional variants)", RISK_LOW)
    return PhenotypeCall(PHENOTYPE_NM, RISK_LOW)


def _cyp2c19(matched, genotypes, position_matches) -> PhenotypeCall:
    lof = _count(matched, ("rs4244285", "rs4986893", "rs28399504",
                           "rs56337013", "rs72552267", "rs72558186"))
    gof = _count(matched, ("rs12248560",))
    if lof >= 2:
        return PhenotypeCall(PHENOTYPE_PM, RISK_HIGH)
    if lof == 1 and gof == 0:
        return PhenotypeCall(PHENOTYPE_IM, RISK_MODERATE)
    if gof >= 1 and lof == 0:
        return PhenotypeCall("Rapid/Ultrarapid Metabolizer", RISK_MODERATE)
    if gof >= 1 and lof >= 1:
        return PhenotypeCall("Normal Metabolizer (conflicting alleles)", RISK_LOW)
    return PhenotypeCall(PHENOTYPE_NM, RISK_LOW)


def _cyp2c9(matched, genotypes, position_matches) -> PhenotypeCall:
    lof = _count(matched, ("rs1057910", "rs9332131"))
    dec = _count(matched, ("rs1799853", "rs28371686", "rs7900194", "rs28371685"))
    if lof >= 2:
        return PhenotypeCall(PHENOTYPE_PM, RISK_HIGH)
    if lof >= 1:
        return PhenotypeCall(PHENOTYPE_IM, RISK_MODERATE)
    if dec >= 2:
        return PhenotypeCall(PHENOTYPE_IM, RISK_MODERATE)
    if dec == 1:
        return PhenotypeCall(PHENOTYPE_NM_ONE_DECREASED, RISK_LOW)
    return PhenotypeCall(PHENOTYPE_NM, RISK_LOW)


def _cyp3a4(matched, genotypes, position_matches) -> PhenotypeCall:
    dec = _count(matched, ("rs35599367", "rs55785340", "rs4986910"))
    inc = _count(matched, ("rs2740574",))
    if dec >= 2:
        return PhenotypeCall(PHENOTYPE_PM, RISK_HIGH)
    if dec == 1:
        return PhenotypeCall(PHENOTYPE_IM, RISK_MODERATE)
    if inc >= 1:
        return PhenotypeCall("Increased Expression", RISK_MODERATE)
    return PhenotypeCall(PHENOTYPE_NM, RISK_LOW)


def _cyp3a5(matched, genotypes, position_matches) -> PhenotypeCall:
    non_expressor = _count(matched, ("rs776746", "rs10264272", "rs41303343"))
    if non_expressor >= 2:
        return PhenotypeCall("Non-expressor (CYP3A5*3/*3)", RISK_MODERATE)
    if non_expressor == 1:
        return PhenotypeCall("Intermediate Expressor", RISK_LOW)
    return PhenotypeCall("Expressor (*1/*1)", RISK_LOW)


def _tpmt(matched, genotypes, position_matches) -> PhenotypeCall:
    # every catalogued TPMT marker is non-functional
    if len(matched) >= 2:
        return PhenotypeCall("Poor Metabolizer (TPMT deficient)", RISK_HIGH)
    if len(matched) == 1:
        return PhenotypeCall(PHENOTYPE_IM, RISK_MODERATE)
    return PhenotypeCall(PHENOTYPE_NM, RISK_LOW)


def _dpyd(matched, genotypes, position_matches) -> PhenotypeCall:
    critical = _count(matched, ("rs3918290", "rs55886062"))
    dec = _count(matched, ("rs67376798", "rs56038477", "rs75017182"))
    if critical >= 1:
        return PhenotypeCall("DPD Deficient - CONTRAINDICATED for fluoropyrimidines", RISK_HIGH)
    if dec >= 2:
        return PhenotypeCall("Intermediate DPD Activity", RISK_HIGH)
    if dec == 1:
        return PhenotypeCall("Possible Decreased DPD Activity", RISK_MODERATE)
    return PhenotypeCall("Normal DPD Activity", RISK_LOW)


def _vkorc1(matched, genotypes, position_matches) -> PhenotypeCall:
    sensitive = "rs9923231" in matched or "rs9934438" in matched
    if sensitive and _is_homozygous(genotypes, "rs9923231"):
        return PhenotypeCall("High Warfarin Sensitivity (homozygous)", RISK_HIGH)
    if sensitive:
        return PhenotypeCall("Intermediate Warfarin Sensitivity", RISK_MODERATE)
    return PhenotypeCall("Normal Warfarin Sensitivity", RISK_LOW)


def _slco1b1(matched, genotypes, position_matches) -> PhenotypeCall:
    if "rs4149056" in matched:
        if _is_homozygous(genotypes, "rs4149056"):
            return PhenotypeCall("Poor Transporter - HIGH statin myopathy risk", RISK_HIGH)
        return PhenotypeCall("Intermediate Transporter - increased myopathy risk", RISK_MODERATE)
    return PhenotypeCall("Normal Transporter Function", RISK_LOW)


def _ugt1a1(matched, genotypes, position_matches) -> PhenotypeCall:
    reduced = _count(matched, ("rs8175347", "rs4148323"))
    if reduced >= 2:
        return PhenotypeCall("Poor Metabolizer (UGT1A1 deficient)", RISK_HIGH)
    if reduced == 1:
        return PhenotypeCall(PHENOTYPE_IM, RISK_MODERATE)
    return PhenotypeCall(PHENOTYPE_NM, RISK_LOW)


def _cyp2b6(matched, genotypes, position_matches) -> PhenotypeCall:
    lof = _count(matched, ("rs28399499",))
    dec = _count(matched, ("rs3745274",))
    inc = _count(matched, ("rs2279343",))
    if lof >= 1:
        return PhenotypeCall(PHENOTYPE_PM, RISK_HIGH)
    if dec >= 1 and inc == 0:
        return PhenotypeCall(PHENOTYPE_IM, RISK_MODERATE)
    if inc >= 1:
        return PhenotypeCall(PHENOTYPE_RM, RISK_MODERATE)
    return PhenotypeCall(PHENOTYPE_NM, RISK_LOW)


def _nat2(matched, genotypes, position_matches) -> PhenotypeCall:
    slow = _count(matched, ("rs1801280", "rs1799930", "rs1799931"))
    rapid = _count(matched, ("rs1208",))
    if slow >= 2:
        return PhenotypeCall("Slow Acetylator", RISK_HIGH)
    if slow == 1:
        return PhenotypeCall("Intermediate Acetylator", RISK_MODERATE)
    if rapid >= 1:
        return PhenotypeCall("Rapid Acetylator", RISK_LOW)
    return PhenotypeCall("Normal Acetylator", RISK_LOW)


_RULES: Dict[str, Rule] = {
    "CYP2D6":  _cyp2d6,
    "CYP2C19": _cyp2c19,
    "CYP2C9":  _cyp2c9,
    "CYP3A4":  _cyp3a4,
    "CYP3A5":  _cyp3a5,
    "TPMT":    _tpmt,
    "DPYD":    _dpyd,
    "VKORC1":  _vkorc1,
    "SLCO1B1": _slco1b1,
    "UGT1A1":  _ugt1a1,
    "CYP2B6":  _cyp2b6,
    "NAT2":    _nat2,
}

CLASSIFIED_GENES = tuple(_RULES)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def classify_phenotype(
    gene: str,
    matched_ids: Sequence[str],
    genotypes: Mapping[str, str],
    position_matches: int,
) -> PhenotypeCall:
    """
    Apply the gene's classification rule.

    Parameters
    ----------
    gene             : pharmacogene symbol (e.g. "CYP2D6")
    matched_ids      : known marker rsIDs found in the input
    genotypes        : rsID → raw GT string, for matched markers that carry one
    position_matches : number of variants inside the gene window

    Raises KeyError for a gene outside the reference table.
    """
    try:
        rule = _RULES[gene]
    except KeyError:
        raise KeyError(f"No phenotype rule for gene {gene!r}") from None
    return rule(matched_ids, genotypes, position_matches)
