"""Shared VCF builders for the test suite."""

from __future__ import annotations

from typing import Callable, Iterable, List

import pytest

HEADER_LINES: List[str] = [
    "##fileformat=VCFv4.2",
    "##source=unit-test",
    "##reference=GRCh38",
    '##INFO=<ID=DP,Number=1,Type=Integer,Description="Total Depth">',
    '##INFO=<ID=AF,Number=A,Type=Float,Description="Allele Frequency">',
    '##FILTER=<ID=q10,Description="Quality below 10">',
    "##contig=<ID=22>",
    "##contig=<ID=10>",
    "#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\tFORMAT\tSAMPLE1",
]


def vcf_line(
    chrom: str = "1",
    pos: int = 1000,
    vid: str = ".",
    ref: str = "A",
    alt: str = "G",
    qual: str = "50",
    filt: str = "PASS",
    info: str = "DP=30",
    fmt: str = "GT:GQ:DP",
    sample: str = "0/1:99:30",
) -> str:
    cols = [chrom, str(pos), vid, ref, alt, qual, filt, info]
    if fmt:
        cols += [fmt, sample]
    return "\t".join(cols)


def build_vcf(lines: Iterable[str], header: Iterable[str] = HEADER_LINES) -> str:
    return "\n".join([*header, *lines]) + "\n"


@pytest.fixture
def make_line() -> Callable[..., str]:
    return vcf_line


@pytest.fixture
def make_vcf() -> Callable[..., str]:
    return build_vcf


@pytest.fixture
def scenario_a_vcf() -> str:
    """One homozygous PASS SNP carrying CYP2D6*4 (rs3892097)."""
    return build_vcf([
        vcf_line(chrom="22", pos=42524947, vid="rs3892097", ref="C", alt="T",
                 qual="50", sample="1/1:99:35"),
    ])


@pytest.fixture
def no_findings_vcf() -> str:
    """A handful of variants far from every pharmacogene locus."""
    return build_vcf([
        vcf_line(chrom="3", pos=1000 + i, vid=f"rs{900000 + i}", ref="A", alt="G")
        for i in range(5)
    ])


@pytest.fixture
def titv_vcf() -> str:
    """100 variants: 63 transitions, 30 transversions, 7 indels (Ti/Tv 2.1)."""
    lines = []
    pos = 5000
    for _ in range(63):
        lines.append(vcf_line(chrom="3", pos=pos, ref="A", alt="G"))
        pos += 10
    for _ in range(30):
        lines.append(vcf_line(chrom="3", pos=pos, ref="A", alt="C"))
        pos += 10
    for _ in range(7):
        lines.append(vcf_line(chrom="3", pos=pos, ref="A", alt="AT"))
        pos += 10
    return build_vcf(lines)
