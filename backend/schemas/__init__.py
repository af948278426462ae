# backend/schemas/__init__.py
from backend.schemas.response import (
    AnalyzeResponse,
    ClinicalRecommendation,
    DetectedVariant,
    ErrorResponse,
    ExplainRequest,
    ExplainResponse,
    LLMExplanation,
    PharmacoGenomicProfile,
    PredictResponse,
    QualityMetrics,
    RiskAssessment,
)

__all__ = [
    "AnalyzeResponse", "ClinicalRecommendation", "DetectedVariant", "ErrorResponse",
    "ExplainRequest", "ExplainResponse", "LLMExplanation", "PharmacoGenomicProfile",
    "PredictResponse", "QualityMetrics", "RiskAssessment",
]
