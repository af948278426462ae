"""
api/analyze.py
==============
POST /api/analyze
-----------------
Multipart form:
  • vcf_file : UploadFile (.vcf, ≤ MAX_UPLOAD_MB)
  • drugs    : str, optional (comma-separated, e.g. "Codeine,Warfarin")

Runs the full engine and returns every derived panel plus one drug finding
per requested drug.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status

from backend.api.uploads import parse_drug_list, read_vcf_upload
from backend.schemas.response import AnalyzeResponse
from genome_insight.pipeline import DEFAULT_FILE_NAME, analyze_vcf_text
from genome_insight.risk_classifier import analyze_drugs
from genome_insight.vcf_parser import VCFValidationError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/analyze", response_model=AnalyzeResponse)
async def analyze(
    vcf_file: UploadFile = File(..., description="VCF file"),
    drugs: str = Form("", description="Comma-separated drug names"),
    include_variants: bool = Form(True, description="Include the per-variant list"),
):
    """Analyse a VCF upload end to end."""
    text = await read_vcf_upload(vcf_file)
    drug_list = parse_drug_list(drugs)

    try:
        result = await asyncio.to_thread(
            analyze_vcf_text, text, vcf_file.filename or DEFAULT_FILE_NAME,
        )
    except VCFValidationError as exc:
        logger.info("Rejected upload %s: %s", vcf_file.filename, exc)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    payload = result.to_dict(include_variants=include_variants)
    payload["drug_findings"] = [
        dataclasses.asdict(f) for f in analyze_drugs(drug_list, result.pharmacogenes)
    ]
    return AnalyzeResponse.model_validate(payload)
