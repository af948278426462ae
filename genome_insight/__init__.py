"""
genome_insight
==============
Pharmacogenomic and data-quality analysis of VCF files.
"""

from genome_insight.pipeline import AnalysisResult, analyze_vcf_file, analyze_vcf_text, build_drug_report
from genome_insight.risk_classifier import analyze_drugs
from genome_insight.vcf_parser import VCFValidationError, parse_vcf_text, validate_vcf_text

__version__ = "1.0.0"

__all__ = [
    "AnalysisResult",
    "VCFValidationError",
    "analyze_drugs",
    "analyze_vcf_file",
    "analyze_vcf_text",
    "build_drug_report",
    "parse_vcf_text",
    "validate_vcf_text",
]
