"""Tests for `python -m genome_insight`."""

import json

from genome_insight.__main__ import main


def test_prints_analysis_json(tmp_path, capsys, scenario_a_vcf):
    path = tmp_path / "sample.vcf"
    path.write_text(scenario_a_vcf)
    assert main([str(path), "--drugs", "Codeine,Warfarin", "--no-variants"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["file_name"] == "sample.vcf"
    assert "variants" not in payload
    assert [d["drug"] for d in payload["drug_findings"]] == ["Codeine", "Warfarin"]


def test_missing_file_exits_2(tmp_path, capsys):
    assert main([str(tmp_path / "absent.vcf")]) == 2
    assert "File not found" in capsys.readouterr().err


def test_invalid_file_exits_2(tmp_path, capsys):
    path = tmp_path / "bad.vcf"
    path.write_text("hello\n")
    assert main([str(path)]) == 2
    assert "Missing VCF header" in capsys.readouterr().err
