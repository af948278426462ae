"""
api/predict.py
==============
POST /api/predict
-----------------
Accepts a multipart/form-data request with:
  • vcf_file   : UploadFile (.vcf, ≤ MAX_UPLOAD_MB)
  • drugs      : str  (comma-separated drug names, e.g. "Codeine,Warfarin")
  • patient_id : str, optional (generated as PATIENT_XXXXXXX when absent)
  • explain    : bool, optional (ask the narrative collaborator for the summary)

One PredictResponse is returned per requested drug.
If multiple drugs are requested the endpoint returns a JSON array.
"""

from __future__ import annotations

import asyncio
import logging
from typing import List

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status

from backend.api.uploads import parse_drug_list, read_vcf_upload
from backend.schemas.response import PredictResponse
from genome_insight.pipeline import (
    DEFAULT_FILE_NAME, analyze_vcf_text, build_drug_report, new_patient_id,
)
from genome_insight.risk_classifier import related_findings
from genome_insight.vcf_parser import VCFValidationError
from narrative.llm_engine import generate_clinical_explanation

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/predict")
async def predict(
    vcf_file: UploadFile = File(..., description="VCF file"),
    drugs: str = Form(..., description="Comma-separated drug names"),
    patient_id: str = Form("", description="Patient identifier"),
    explain: bool = Form(False, description="Generate a narrative summary per drug"),
):
    """Run the analysis and emit one standardised report per drug."""
    text = await read_vcf_upload(vcf_file)
    drug_list = parse_drug_list(drugs)
    if not drug_list:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="No valid drug names provided.",
        )

    try:
        result = await asyncio.to_thread(
            analyze_vcf_text, text, vcf_file.filename or DEFAULT_FILE_NAME,
        )
    except VCFValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc

    pid = patient_id.strip() or new_patient_id()
    reports: List[PredictResponse] = []

    for drug in drug_list:
        explanation = ""
        if explain:
            explanation = await asyncio.to_thread(
                generate_clinical_explanation,
                related_findings(drug, result.pharmacogenes),
                result.risk_assessment,
            )
        report = build_drug_report(result, drug, patient_id=pid, explanation=explanation)
        reports.append(PredictResponse.model_validate(report))

    logger.info("Predicted %d drug report(s) for %s", len(reports), pid)

    # Return single object if one drug, array if multiple
    if len(reports) == 1:
        return reports[0].model_dump()

    return [r.model_dump() for r in reports]
