"""
main.py
=======
FastAPI application entry point for genome-insight.

Run locally:
  uvicorn backend.main:app --reload --port 8000

The engine is pure and stateless, so the lifespan handler only logs the
reference data it serves; there are no singletons to warm up.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv  # type: ignore
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from backend.api.analyze import router as analyze_router
from backend.api.explain import router as explain_router
from backend.api.health import router as health_router
from backend.api.predict import router as predict_router
from backend.schemas.response import ErrorResponse
from genome_insight import __version__
from genome_insight.pgx_reference import PHARMA_GENE_DB

# Load .env from project root (one level above this file's package)
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan: startup / shutdown
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "genome-insight backend starting up (%d pharmacogene loci)…", len(PHARMA_GENE_DB),
    )
    yield
    logger.info("genome-insight backend shutting down.")


# ---------------------------------------------------------------------------
# Error bodies
# ---------------------------------------------------------------------------

async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = ErrorResponse(error=_error_title(exc.status_code), detail=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    body = ErrorResponse(error="Invalid request", detail=str(exc.errors()))
    return JSONResponse(status_code=422, content=body.model_dump())


def _error_title(status_code: int) -> str:
    if status_code == 413:
        return "File too large"
    if status_code == 422:
        return "Invalid input"
    if status_code == 404:
        return "Not found"
    return "Request failed"


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app() -> FastAPI:
    app = FastAPI(
        title       = "genome-insight API",
        description = (
            "VCF pharmacogenomic analysis — variant parsing, pharmacogene "
            "matching, quality scoring, risk assessment and clinical narrative."
        ),
        version     = __version__,
        docs_url    = "/docs",
        redoc_url   = "/redoc",
        lifespan    = lifespan,
    )

    # ── CORS ──────────────────────────────────────────────────────────────
    origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    frontend = os.getenv("FRONTEND_URL", "").strip()
    if frontend:
        origins.append(frontend)
    app.add_middleware(
        CORSMiddleware,
        allow_origins     = origins,
        allow_credentials = True,
        allow_methods     = ["*"],
        allow_headers     = ["*"],
    )

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)

    # ── Routers ───────────────────────────────────────────────────────────
    app.include_router(health_router)
    app.include_router(analyze_router)
    app.include_router(predict_router)
    app.include_router(explain_router)

    return app


app = create_app()
