"""
api/explain.py
==============
POST /api/explain — clinical narrative for findings the client already has.
"""

from __future__ import annotations

import asyncio

from fastapi import APIRouter

from backend.schemas.response import ExplainRequest, ExplainResponse
from narrative.llm_engine import generate_clinical_explanation

router = APIRouter()


@router.post("/api/explain", response_model=ExplainResponse)
async def explain(body: ExplainRequest) -> ExplainResponse:
    text = await asyncio.to_thread(
        generate_clinical_explanation,
        [g.model_dump() for g in body.pharmacogenes],
        body.risk_assessment.model_dump(),
        [v.model_dump() for v in body.variants],
    )
    return ExplainResponse(explanation=text)
