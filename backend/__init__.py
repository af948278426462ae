"""
backend — FastAPI application package.

Routers: api/health.py, api/analyze.py, api/predict.py, api/explain.py
Schemas: schemas/response.py
Entry point: main.py → run with `uvicorn backend.main:app --reload`
"""
