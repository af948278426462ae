"""
api/health.py
=============
GET /api/health — liveness probe and reference-table summary.
"""

from fastapi import APIRouter

from genome_insight import __version__
from genome_insight.pgx_reference import PHARMA_GENE_DB, SUPPORTED_DRUGS
from narrative.llm_engine import llm_configured

router = APIRouter()


@router.get("/api/health")
async def health_check():
    """Return service status and reference data summary."""
    return {
        "status":          "ok",
        "api_version":     __version__,
        "loci":            len(PHARMA_GENE_DB),
        "supported_drugs": list(SUPPORTED_DRUGS.values()),
        "llm_configured":  llm_configured(),
    }
