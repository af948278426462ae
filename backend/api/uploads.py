"""
api/uploads.py
==============
Request helpers shared by the upload endpoints: size budget, decoding and
drug-list parsing.
"""

from __future__ import annotations

import logging
import os
from typing import List

from fastapi import HTTPException, UploadFile, status

from genome_insight.pgx_reference import SUPPORTED_DRUGS

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_MB = 5.0


def max_upload_bytes() -> int:
    raw = os.getenv("MAX_UPLOAD_MB", "").strip().strip('"').strip("'")
    try:
        megabytes = float(raw) if raw else DEFAULT_MAX_UPLOAD_MB
    except ValueError:
        logger.warning("Ignoring invalid MAX_UPLOAD_MB=%r", raw)
        megabytes = DEFAULT_MAX_UPLOAD_MB
    return int(megabytes * 1024 * 1024)


async def read_vcf_upload(vcf_file: UploadFile) -> str:
    """Read the upload, enforce the size budget and decode it as text."""
    content = await vcf_file.read()
    limit = max_upload_bytes()
    if len(content) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=(
                f"VCF file exceeds {limit / (1024 * 1024):g} MB limit "
                f"({len(content) / 1e6:.2f} MB uploaded)."
            ),
        )
    return content.decode("utf-8", errors="replace")


def parse_drug_list(drugs: str) -> List[str]:
    """
    'codeine, Warfarin' → ['Codeine', 'Warfarin'] (display names).

    Raises 422 for names outside the supported catalog.
    """
    requested = [d.strip().upper() for d in drugs.split(",") if d.strip()]
    unknown = [d for d in requested if d not in SUPPORTED_DRUGS]
    if unknown:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=(
                f"Unsupported drug(s): {', '.join(unknown)}. "
                f"Supported: {', '.join(SUPPORTED_DRUGS.values())}."
            ),
        )

    ordered: List[str] = []
    for key in requested:
        name = SUPPORTED_DRUGS[key]
        if name not in ordered:
            ordered.append(name)
    return ordered
