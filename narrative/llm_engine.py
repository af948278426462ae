"""
llm_engine.py
=============
Clinical narrative for a finished analysis via any OpenAI-compatible chat
completion endpoint.

Configuration (read at call time, surrounding quotes stripped):
  • LLM_API_KEY          : bearer key; unset → templated fallback report
  • LLM_BASE_URL         : default https://api.openai.com/v1
  • LLM_MODEL            : default gpt-4
  • LLM_MODEL_FALLBACKS  : comma-separated models tried after the primary
  • LLM_TIMEOUT          : request timeout in seconds, default 60

generate_clinical_explanation() never raises: any remote failure degrades to
the deterministic fallback report.  An authorization failure disables the
remote call for the rest of the process.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

_llm_auth_disabled: bool = False

VARIANT_SAMPLE_LIMIT = 10
SCREENED_GENES = (
    "CYP2D6, CYP2C19, CYP2C9, CYP3A4, CYP3A5, TPMT, DPYD, VKORC1, SLCO1B1, "
    "UGT1A1, CYP2B6, and NAT2"
)


def _clean_env(name: str, default: str = "") -> str:
    value = os.getenv(name, default)
    return value.strip().strip('"').strip("'")


def _is_auth_error(exc: Exception) -> bool:
    status_code = getattr(exc, "status_code", None)
    if status_code in (401, 403):
        return True

    response = getattr(exc, "response", None)
    if response is not None and getattr(response, "status_code", None) in (401, 403):
        return True

    text = str(exc).lower()
    return "403" in text or "401" in text or "forbidden" in text or "unauthor" in text


def llm_configured() -> bool:
    if _llm_auth_disabled:
        return False

    api_key = _clean_env("LLM_API_KEY", "")
    if not api_key or api_key.startswith("your_"):
        return False

    return True


def _timeout() -> float:
    try:
        return float(_clean_env("LLM_TIMEOUT", "60"))
    except ValueError:
        return 60.0


def _candidate_models() -> List[str]:
    """Return ordered model fallback list for chat completions."""
    primary = _clean_env("LLM_MODEL", "gpt-4")
    fallback_env = _clean_env("LLM_MODEL_FALLBACKS", "")
    fallbacks = [item.strip() for item in fallback_env.split(",") if item.strip()]

    unique: List[str] = []
    for model in [primary, *fallbacks]:
        if model and model not in unique:
            unique.append(model)
    return unique


def _as_dict(item: Any) -> Dict[str, Any]:
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return dataclasses.asdict(item)
    return dict(item)


# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

_SYSTEM_PROMPT = (
    "You are a clinical pharmacist expert in pharmacogenomics. Provide clear, "
    "evidence-based clinical recommendations based on genetic analysis results."
)

_USER_PROMPT_TEMPLATE = """Based on the following pharmacogenomic analysis results, provide clinical recommendations:

PHARMACOGENES IDENTIFIED:
{genes}

OVERALL RISK ASSESSMENT: {overall_risk}
AFFECTED DRUGS: {affected_drugs}
CLINICAL SIGNIFICANCE: {significance}
{variant_block}
Please provide:
1. Summary of key findings
2. Clinical implications for drug metabolism
3. Specific dosing recommendations
4. Monitoring recommendations
5. Important contraindications or drug interactions"""


def build_prompt(
    findings: Sequence[Mapping[str, Any]],
    risk: Mapping[str, Any],
    variant_sample: Optional[Sequence[Mapping[str, Any]]] = None,
) -> str:
    genes = "\n".join(
        f"{f.get('gene')}: {f.get('phenotype')} - Recommendations: "
        f"{', '.join(f.get('recommendations') or [])}"
        for f in findings
    ) or "None detected"

    variant_block = ""
    if variant_sample:
        lines = [
            f"  {v.get('variant_id', '.')} {v.get('chrom')}:{v.get('pos')} "
            f"{v.get('ref')}>{v.get('alt')} GT={v.get('genotype') or 'NA'}"
            for v in list(variant_sample)[:VARIANT_SAMPLE_LIMIT]
        ]
        variant_block = "\nVARIANT SAMPLE:\n" + "\n".join(lines) + "\n"

    return _USER_PROMPT_TEMPLATE.format(
        genes          = genes,
        overall_risk   = risk.get("overall_risk", "unknown"),
        affected_drugs = ", ".join(risk.get("affected_drugs") or []),
        significance   = risk.get("clinical_significance", ""),
        variant_block  = variant_block,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_clinical_explanation(
    findings: Sequence[Any],
    risk: Any,
    variant_sample: Optional[Sequence[Any]] = None,
) -> str:
    """
    Produce the clinical narrative for an analysis.

    Parameters
    ----------
    findings        : GeneFinding objects or their dict form
    risk            : RiskAssessment object or its dict form
    variant_sample  : optional Variant objects / dicts included in the prompt

    Returns
    -------
    Narrative text; the templated fallback when the remote model is
    unavailable.
    """
    global _llm_auth_disabled

    finding_dicts = [_as_dict(f) for f in findings]
    risk_dict = _as_dict(risk)

    if not llm_configured():
        logger.info("LLM_API_KEY not configured; using templated explanation")
        return fallback_explanation(finding_dicts, risk_dict)

    sample = [_as_dict(v) for v in variant_sample] if variant_sample else None
    prompt = build_prompt(finding_dicts, risk_dict, sample)

    try:
        return _call_chat_completion(_SYSTEM_PROMPT, prompt)
    except Exception as exc:
        if _is_auth_error(exc):
            if not _llm_auth_disabled:
                logger.warning(
                    "LLM authorization failed (%s). Disabling remote LLM for this process and using fallback explanation.",
                    exc,
                )
            _llm_auth_disabled = True
            return fallback_explanation(finding_dicts, risk_dict)

        logger.error("LLM call failed: %s", exc, exc_info=True)
        return fallback_explanation(finding_dicts, risk_dict)


# ---------------------------------------------------------------------------
# OpenAI-compatible caller
# ---------------------------------------------------------------------------

def _call_chat_completion(system_prompt: str, user_prompt: str) -> str:
    if _llm_auth_disabled:
        raise RuntimeError("LLM disabled due to prior authorization failure.")

    from openai import OpenAI  # type: ignore

    client = OpenAI(
        base_url = _clean_env("LLM_BASE_URL", "https://api.openai.com/v1"),
        api_key  = _clean_env("LLM_API_KEY", ""),
        timeout  = _timeout(),
    )

    model_errors: List[str] = []
    for model in _candidate_models():
        try:
            completion = client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=0.7,
                max_tokens=1000,
                stream=True,
            )

            output_parts: List[str] = []
            for chunk in completion:
                if not getattr(chunk, "choices", None):
                    continue
                delta = chunk.choices[0].delta
                if delta is None:
                    continue
                content = getattr(delta, "content", None)
                if content is not None:
                    output_parts.append(str(content))

            output_text = "".join(output_parts).strip()
            if output_text:
                logger.info("LLM model selected: %s", model)
                return output_text

            model_errors.append(f"{model}: empty response")
            logger.warning("LLM model returned empty response: %s", model)
        except Exception as exc:
            if _is_auth_error(exc):
                raise
            model_errors.append(f"{model}: {exc}")
            logger.warning("LLM model failed (%s): %s", model, exc)

    raise RuntimeError("All candidate models failed. " + " | ".join(model_errors))


# ---------------------------------------------------------------------------
# Fallback when LLM is unavailable
# ---------------------------------------------------------------------------

def fallback_explanation(findings: Sequence[Mapping[str, Any]], risk: Mapping[str, Any]) -> str:
    """Deterministic plain-text report assembled from the analysis itself."""
    overall = str(risk.get("overall_risk", "unknown")).upper()
    significance = risk.get("clinical_significance", "")

    if not findings:
        return f"""CLINICAL PHARMACOGENOMIC ANALYSIS REPORT

KEY FINDINGS:
• No known pharmacogene variants detected across 12 screened loci
• Overall Risk Level: {overall}
• VCF data was analyzed for variants in {SCREENED_GENES}

INTERPRETATION:
{significance}

POSSIBLE EXPLANATIONS:
• All pharmacogene loci may carry wild-type (normal) alleles
• VCF may lack coverage in key pharmacogene genomic regions
• Variants may not be annotated with rsIDs needed for matching

RECOMMENDATIONS:
1. Standard dosing protocols are appropriate based on current data
2. Consider targeted pharmacogenomic panel testing for comprehensive coverage
3. Re-annotate VCF using Ensembl VEP or SnpEff for improved rsID coverage

Note: This analysis is for educational purposes. Absence of detected variants does not guarantee normal drug metabolism."""

    gene_lines = "\n".join(
        f"• {f.get('gene')} ({f.get('phenotype')}): {len(f.get('matched_ids') or [])} rsID match(es), "
        f"{f.get('position_matches', 0)} positional variant(s), confidence {f.get('confidence', 'N/A')}%"
        for f in findings
    )
    high = sum(1 for f in findings if f.get("risk_level") == "high")
    moderate = sum(1 for f in findings if f.get("risk_level") == "moderate")

    factors = risk.get("risk_factors") or []
    factor_block = ""
    if factors:
        factor_block = "RISK FACTORS:\n" + "\n".join(f"• {f}" for f in factors) + "\n"

    drugs = risk.get("affected_drugs") or []
    drug_text = ", ".join(drugs) if drugs else "No specific medications identified"

    recs = "\n".join(
        f"• {f.get('gene')}: {(f.get('recommendations') or ['No recommendation'])[0]}"
        for f in findings
    )

    return f"""CLINICAL PHARMACOGENOMIC ANALYSIS REPORT

KEY FINDINGS:
• Identified {len(findings)} pharmacogene(s) with variant evidence
• Overall Risk Level: {overall}
• {high} high-risk, {moderate} moderate-risk finding(s)

GENE-LEVEL ANALYSIS:
{gene_lines}

CLINICAL IMPLICATIONS:
{significance}

{factor_block}AFFECTED MEDICATIONS:
{drug_text}

RECOMMENDATIONS:
{recs}

NEXT STEPS:
1. Review results with your healthcare provider
2. Check current medications against identified pharmacogene interactions
3. Consider therapeutic drug monitoring for affected medications
4. Update your medication records with pharmacogenomic data

Note: This analysis is for educational purposes. Consult your healthcare provider for clinical decisions."""
