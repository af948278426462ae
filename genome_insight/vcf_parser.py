"""
vcf_parser.py
=============
Parse VCF text (VCFv4.x) into an ordered list of Variant records plus the
file-level metadata declared in its header.

Parsing is deliberately tolerant:
  • data lines with fewer than 5 tab-separated fields are skipped
  • an unparseable QUAL becomes 0, an unparseable GQ / DP is left unset
  • the FORMAT layout of the first sample-bearing line is trusted for the
    whole file (files whose FORMAT column changes per record will have
    GT/GQ/DP read from the wrong sub-field, a known limitation)

Structural problems (no ##fileformat header, no #CHROM line, no data line)
are the only fatal errors and raise VCFValidationError.
"""

from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from genome_insight.numeric import leading_int

logger = logging.getLogger(__name__)

MIN_DATA_FIELDS = 5
SAMPLE_COLUMN = 9          # 0-based index of the first sample column
PASS_FILTERS = ("PASS", ".")

_ID_RE = re.compile(r"ID=([^,]+)")


class VCFValidationError(ValueError):
    """Raised when the input is not structurally a VCF file."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Variant:
    chrom: str
    pos: int                  # 1-based genomic position
    variant_id: str           # rsID(s) from the ID column ('rs1;rs2'), or '.'
    ref: str
    alt: str                  # comma-joined for multi-allelic sites
    quality: float            # QUAL, 0.0 when missing or unparseable
    filter: str = "."
    info: str = "."
    genotype: Optional[str] = None          # raw GT e.g. "0|1"
    genotype_quality: Optional[float] = None
    read_depth: Optional[int] = None

    @property
    def passed(self) -> bool:
        return self.filter in PASS_FILTERS


@dataclass
class VCFMetadata:
    file_format: str = ""
    source: str = ""
    reference: str = ""
    sample_names: List[str] = field(default_factory=list)
    info_fields: List[str] = field(default_factory=list)
    filter_fields: List[str] = field(default_factory=list)
    contig_count: int = 0
    skipped_lines: int = 0    # malformed data lines dropped by the parser


@dataclass
class ParseResult:
    variants: List[Variant]
    metadata: VCFMetadata


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_vcf_text(text: str) -> None:
    """
    Confirm the text is structurally a VCF file.

    Raises VCFValidationError with a human-readable message for the first
    failed check: format-version header, column header, at least one data line.
    """
    lines = text.split("\n")
    if not any(line.startswith("##fileformat=VCFv") for line in lines):
        raise VCFValidationError(
            "Invalid VCF file format. Missing VCF header (##fileformat=VCFv4.x)"
        )
    if not any(line.startswith("#CHROM") for line in lines):
        raise VCFValidationError(
            "Invalid VCF file format. Missing column header (#CHROM)"
        )
    if not any(not line.startswith("#") and line.strip() for line in lines):
        raise VCFValidationError("VCF file contains no variant data")


# ---------------------------------------------------------------------------
# Utility helpers
# ---------------------------------------------------------------------------

def _parse_quality(raw: str) -> float:
    if not raw or raw == ".":
        return 0.0
    try:
        value = float(raw)
    except ValueError:
        return 0.0
    return value if math.isfinite(value) else 0.0


def _parse_optional_float(raw: str) -> Optional[float]:
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def _sample_value(sample_values: List[str], format_index: Dict[str, int], key: str) -> str:
    idx = format_index.get(key)
    if idx is None or idx >= len(sample_values):
        return ""
    return sample_values[idx]


def _extract_metadata(lines: List[str]) -> VCFMetadata:
    meta = VCFMetadata()
    for line in lines:
        if line.startswith("##fileformat="):
            meta.file_format = line[len("##fileformat="):]
        elif line.startswith("##source="):
            meta.source = line[len("##source="):]
        elif line.startswith("##reference="):
            meta.reference = line[len("##reference="):]
        elif line.startswith("##INFO="):
            match = _ID_RE.search(line)
            if match:
                meta.info_fields.append(match.group(1))
        elif line.startswith("##FILTER="):
            match = _ID_RE.search(line)
            if match:
                meta.filter_fields.append(match.group(1))
        elif line.startswith("##contig="):
            meta.contig_count += 1
        elif line.startswith("#CHROM"):
            cols = line.split("\t")
            meta.sample_names.extend(c.strip() for c in cols[SAMPLE_COLUMN:])
    return meta


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse_vcf_text(text: str) -> ParseResult:
    """
    Parse raw VCF text into variants (file order preserved) and metadata.

    Does not validate; call validate_vcf_text() first when the input is
    untrusted.
    """
    lines = [raw.rstrip("\r") for raw in text.split("\n")]
    metadata = _extract_metadata(lines)

    variants: List[Variant] = []
    format_index: Dict[str, int] = {}

    for line in lines:
        if line.startswith("#") or not line.strip():
            continue

        cols = line.split("\t")
        if len(cols) < MIN_DATA_FIELDS:
            metadata.skipped_lines += 1
            continue

        pos = leading_int(cols[1])
        # positions are integers; a record without one is skipped and counted
        if pos is None:
            metadata.skipped_lines += 1
            continue

        # First sample-bearing line fixes the FORMAT layout for the file
        if len(cols) > SAMPLE_COLUMN and cols[8] and not format_index:
            format_index = {key: i for i, key in enumerate(cols[8].split(":"))}

        sample_field = cols[SAMPLE_COLUMN] if len(cols) > SAMPLE_COLUMN else ""
        sample_values = sample_field.split(":") if sample_field else []

        genotype = _sample_value(sample_values, format_index, "GT") or None

        gq_raw = _sample_value(sample_values, format_index, "GQ")
        genotype_quality = _parse_optional_float(gq_raw) if gq_raw else None

        dp_raw = _sample_value(sample_values, format_index, "DP")
        read_depth = leading_int(dp_raw) if dp_raw else None

        variants.append(Variant(
            chrom=cols[0],
            pos=pos,
            variant_id=cols[2] or ".",
            ref=cols[3],
            alt=cols[4],
            quality=_parse_quality(cols[5] if len(cols) > 5 else ""),
            filter=(cols[6] if len(cols) > 6 else "") or ".",
            info=(cols[7] if len(cols) > 7 else "") or ".",
            genotype=genotype,
            genotype_quality=genotype_quality,
            read_depth=read_depth,
        ))

    logger.info(
        "Parsed %d variants (%d malformed lines skipped, %d samples)",
        len(variants), metadata.skipped_lines, len(metadata.sample_names),
    )
    return ParseResult(variants=variants, metadata=metadata)


def parse_vcf(filepath: str) -> ParseResult:
    """Read, validate and parse a VCF file from disk."""
    if not os.path.isfile(filepath):
        raise FileNotFoundError(f"VCF file not found: {filepath}")

    with open(filepath, "r", encoding="utf-8", errors="replace") as fh:
        text = fh.read()

    validate_vcf_text(text)
    return parse_vcf_text(text)
