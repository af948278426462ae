from narrative.llm_engine import fallback_explanation, generate_clinical_explanation

__all__ = ["fallback_explanation", "generate_clinical_explanation"]
