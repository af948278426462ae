"""
pgx_reference.py
================
Static pharmacogene loci table: genomic window, known marker rsIDs (star
allele, functional effect, integer risk weight) and the drugs each gene
affects.

Chromosomes are stored without the 'chr' prefix; variant chromosomes are
normalised the same way before comparison.  Ranges mix GRCh37 / GRCh38 the
way the curated source does, and are inclusive on both ends.

The table is a tuple of frozen records and is never written after import, so
it is safe to share between concurrent analyses.
"""

from types import MappingProxyType
from typing import Dict, Mapping, NamedTuple, Tuple

# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

class KnownMarker(NamedTuple):
    allele: str
    effect: str
    risk_weight: int


class Locus(NamedTuple):
    gene: str
    chrom: str
    start: int
    end: int
    markers: Mapping[str, KnownMarker]   # rsID → marker, catalog order kept
    drugs: Tuple[str, ...]


def _locus(gene: str, chrom: str, start: int, end: int,
           markers: Dict[str, Tuple[str, str, int]], drugs: Tuple[str, ...]) -> Locus:
    frozen = MappingProxyType({rs: KnownMarker(*m) for rs, m in markers.items()})
    return Locus(gene, chrom, start, end, frozen, drugs)


# ---------------------------------------------------------------------------
# Loci (order is significant: findings are reported in this order)
# Source: PharmGKB / CPIC star-allele definitions
# ---------------------------------------------------------------------------

PHARMA_GENE_DB: Tuple[Locus, ...] = (

    # ── CYP2D6 ──────────────────────────────────────────────────────────────
    _locus("CYP2D6", "22", 42522500, 42528400, {
        "rs3892097":  ("*4",         "Non-functional",              3),
        "rs5030655":  ("*6",         "Non-functional (frameshift)", 3),
        "rs16947":    ("*2",         "Normal function",             0),
        "rs1065852":  ("*10",        "Decreased function",          2),
        "rs28371706": ("*17",        "Decreased function",          2),
        "rs1135840":  ("*2/*10 tag", "Variable",                    1),
        "rs28371725": ("*41",        "Decreased function",          2),
    }, ("Codeine", "Tramadol", "Venlafaxine", "Risperidone", "Aripiprazole",
        "Tamoxifen", "Ondansetron")),

    # ── CYP2C19 ─────────────────────────────────────────────────────────────
    _locus("CYP2C19", "10", 96521657, 96612830, {
        "rs4244285":  ("*2",  "Non-functional (splicing defect)", 3),
        "rs4986893":  ("*3",  "Non-functional (premature stop)",  3),
        "rs12248560": ("*17", "Increased function (ultrarapid)",  2),
        "rs28399504": ("*4",  "Non-functional",                   3),
        "rs56337013": ("*5",  "Non-functional",                   3),
        "rs72552267": ("*6",  "Non-functional",                   3),
        "rs72558186": ("*7",  "Non-functional",                   3),
    }, ("Clopidogrel", "Omeprazole", "Escitalopram", "Sertraline",
        "Voriconazole", "Pantoprazole")),

    # ── CYP2C9 ──────────────────────────────────────────────────────────────
    _locus("CYP2C9", "10", 96698415, 96749148, {
        "rs1799853":  ("*2",  "Decreased function",         2),
        "rs1057910":  ("*3",  "Decreased function (major)", 3),
        "rs28371686": ("*5",  "Decreased function",         2),
        "rs9332131":  ("*6",  "Non-functional",             3),
        "rs7900194":  ("*8",  "Decreased function",         2),
        "rs28371685": ("*11", "Decreased function",         2),
    }, ("Warfarin", "Phenytoin", "Celecoxib", "Flurbiprofen", "Losartan")),

    # ── CYP3A4 ──────────────────────────────────────────────────────────────
    _locus("CYP3A4", "7", 99354582, 99381811, {
        "rs35599367": ("*22", "Decreased expression", 2),
        "rs2740574":  ("*1B", "Increased expression", 1),
        "rs55785340": ("*2",  "Decreased function",   2),
        "rs4986910":  ("*3",  "Decreased function",   2),
    }, ("Atorvastatin", "Simvastatin", "Clarithromycin", "Cyclosporine",
        "Tacrolimus", "Midazolam")),

    # ── CYP3A5 ──────────────────────────────────────────────────────────────
    _locus("CYP3A5", "7", 99245000, 99277000, {
        "rs776746":   ("*3", "Non-expressor (most common)", 1),
        "rs10264272": ("*6", "Non-expressor",               1),
        "rs41303343": ("*7", "Non-expressor",               1),
    }, ("Tacrolimus", "Cyclosporine", "Sirolimus")),

    # ── TPMT ────────────────────────────────────────────────────────────────
    _locus("TPMT", "6", 18128542, 18155374, {
        "rs1800462": ("*2",  "Non-functional", 3),
        "rs1800460": ("*3B", "Non-functional", 3),
        "rs1142345": ("*3C", "Non-functional", 3),
        "rs1800584": ("*4",  "Non-functional", 3),
    }, ("Azathioprine", "Mercaptopurine", "6-Thioguanine")),

    # ── DPYD ────────────────────────────────────────────────────────────────
    _locus("DPYD", "1", 97543299, 98386615, {
        "rs3918290":  ("*2A (IVS14+1G>A)", "Non-functional (splice site)", 4),
        "rs55886062": ("*13",              "Non-functional",               4),
        "rs67376798": ("D949V",            "Decreased function",           3),
        "rs56038477": ("HapB3 tag",        "Decreased function",           2),
        "rs75017182": ("HapB3 causal",     "Decreased function",           2),
    }, ("Fluorouracil (5-FU)", "Capecitabine", "Tegafur")),

    # ── VKORC1 ──────────────────────────────────────────────────────────────
    _locus("VKORC1", "16", 31102175, 31106699, {
        "rs9923231": ("-1639G>A", "Reduced VKORC1 expression (warfarin sensitive)", 3),
        "rs9934438": ("1173C>T",  "Reduced expression (LD with -1639)",             2),
        "rs8050894": ("1542G>C",  "Haplotype tag",                                  1),
    }, ("Warfarin", "Acenocoumarol", "Phenprocoumon")),

    # ── SLCO1B1 ─────────────────────────────────────────────────────────────
    _locus("SLCO1B1", "12", 21284127, 21392730, {
        "rs4149056": ("*5 (Val174Ala)",  "Decreased transport (statin myopathy risk)", 3),
        "rs2306283": ("*1B (Asn130Asp)", "Increased function",                         1),
        "rs4149015": ("*1A tag",         "Normal",                                     0),
    }, ("Simvastatin", "Atorvastatin", "Rosuvastatin", "Pravastatin", "Methotrexate")),

    # ── UGT1A1 ──────────────────────────────────────────────────────────────
    _locus("UGT1A1", "2", 234668879, 234681945, {
        "rs8175347": ("*28 (TA repeat)", "Reduced glucuronidation (Gilbert syndrome)", 2),
        "rs4148323": ("*6 (G71R)",       "Reduced function",                           2),
        "rs887829":  ("*80",             "Reduced expression (LD with *28)",           1),
    }, ("Irinotecan", "Atazanavir", "Belinostat")),

    # ── CYP2B6 ──────────────────────────────────────────────────────────────
    _locus("CYP2B6", "19", 41497153, 41524301, {
        "rs3745274":  ("*6 (Q172H)", "Decreased function", 2),
        "rs2279343":  ("*4 (K262R)", "Increased function", 1),
        "rs28399499": ("*18",        "Non-functional",     3),
    }, ("Efavirenz", "Nevirapine", "Methadone", "Bupropion", "Cyclophosphamide")),

    # ── NAT2 ────────────────────────────────────────────────────────────────
    _locus("NAT2", "8", 18248755, 18258728, {
        "rs1801280": ("*5 (Ile114Thr)",     "Slow acetylator",  2),
        "rs1799930": ("*6 (Arg197Gln)",     "Slow acetylator",  2),
        "rs1208":    ("*4 tag (Lys268Arg)", "Rapid acetylator", 1),
        "rs1799931": ("*7 (Gly286Glu)",     "Slow acetylator",  2),
    }, ("Isoniazid", "Hydralazine", "Procainamide", "Sulfasalazine")),
)

LOCI_BY_GENE: Mapping[str, Locus] = MappingProxyType({l.gene: l for l in PHARMA_GENE_DB})

# All pharmacogenes we actively analyze
TARGET_GENES = tuple(LOCI_BY_GENE)


# ---------------------------------------------------------------------------
# Drug catalog used by the per-drug analyzer
# ---------------------------------------------------------------------------

# Drug → genes in the table that govern its response
DRUG_GENE_MAP: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "CODEINE":       ("CYP2D6",),
    "WARFARIN":      ("CYP2C9", "VKORC1"),
    "CLOPIDOGREL":   ("CYP2C19",),
    "SIMVASTATIN":   ("CYP3A4", "SLCO1B1"),
    "AZATHIOPRINE":  ("TPMT",),
    "FLUOROURACIL":  ("DPYD",),
})

# Supported drug display names (canonical uppercase keys → display name)
SUPPORTED_DRUGS = {
    "CODEINE":      "Codeine",
    "WARFARIN":     "Warfarin",
    "CLOPIDOGREL":  "Clopidogrel",
    "SIMVASTATIN":  "Simvastatin",
    "AZATHIOPRINE": "Azathioprine",
    "FLUOROURACIL": "Fluorouracil",
}


def normalize_chrom(chrom: str) -> str:
    """'chr22' / 'CHR22' / '22' → '22'."""
    if chrom[:3].lower() == "chr":
        return chrom[3:]
    return chrom
