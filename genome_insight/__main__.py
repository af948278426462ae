"""
Command-line entry point.

  python -m genome_insight <path-to.vcf> [--drugs CODEINE,WARFARIN] [--no-variants]

Prints the full analysis as JSON.  Exit code 2 when the file is missing or
fails VCF validation.
"""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from genome_insight.pipeline import analyze_vcf_file
from genome_insight.risk_classifier import analyze_drugs
from genome_insight.vcf_parser import VCFValidationError


def _parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="genome_insight",
        description="Pharmacogenomic and quality analysis of a VCF file.",
    )
    parser.add_argument("path", help="VCF file to analyse")
    parser.add_argument("--drugs", default="", help="comma-separated drug names, e.g. CODEINE,WARFARIN")
    parser.add_argument("--no-variants", action="store_true", help="omit the per-variant list from the output")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    path = Path(args.path)
    if not path.exists():
        print(f"File not found: {path}", file=sys.stderr)
        return 2

    try:
        result = analyze_vcf_file(str(path))
    except VCFValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    payload = result.to_dict(include_variants=not args.no_variants)
    drugs = [d.strip() for d in args.drugs.split(",") if d.strip()]
    if drugs:
        payload["drug_findings"] = [
            dataclasses.asdict(f) for f in analyze_drugs(drugs, result.pharmacogenes)
        ]

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
