"""HTTP surface tests using FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from backend.main import app


@pytest.fixture
def client(monkeypatch):
    monkeypatch.delenv("LLM_API_KEY", raising=False)
    monkeypatch.delenv("MAX_UPLOAD_MB", raising=False)
    return TestClient(app)


def _upload(text, name="sample.vcf"):
    return {"vcf_file": (name, text.encode("utf-8"), "text/plain")}


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["loci"] == 12
    assert "Codeine" in body["supported_drugs"]
    assert body["llm_configured"] is False


def test_analyze_returns_full_result(client, scenario_a_vcf):
    resp = client.post("/api/analyze", files=_upload(scenario_a_vcf), data={"drugs": "codeine, warfarin"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["file_name"] == "sample.vcf"
    assert body["total_variants"] == 1
    assert len(body["variants"]) == 1
    assert body["pharmacogenes"][0]["gene"] == "CYP2D6"
    assert body["risk_assessment"]["overall_risk"] == "moderate"
    assert body["judging_criteria"]["grade"] in "ABCDF"
    assert [d["drug"] for d in body["drug_findings"]] == ["Codeine", "Warfarin"]
    assert body["drug_findings"][0]["risk_level"] == "moderate"


def test_analyze_can_omit_variants(client, scenario_a_vcf):
    resp = client.post(
        "/api/analyze", files=_upload(scenario_a_vcf), data={"include_variants": "false"},
    )
    assert resp.status_code == 200
    assert resp.json()["variants"] == []


def test_analyze_rejects_invalid_vcf(client):
    resp = client.post("/api/analyze", files=_upload("not a vcf\n"))
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "Invalid input"
    assert "Missing VCF header" in body["detail"]


def test_analyze_rejects_unknown_drug(client, scenario_a_vcf):
    resp = client.post("/api/analyze", files=_upload(scenario_a_vcf), data={"drugs": "aspirin"})
    assert resp.status_code == 422
    assert "Unsupported drug(s): ASPIRIN" in resp.json()["detail"]


def test_upload_size_budget(client, monkeypatch, titv_vcf):
    monkeypatch.setenv("MAX_UPLOAD_MB", "0.001")
    resp = client.post("/api/analyze", files=_upload(titv_vcf))
    assert resp.status_code == 413
    assert resp.json()["error"] == "File too large"


def test_predict_single_drug(client, scenario_a_vcf):
    resp = client.post(
        "/api/predict",
        files=_upload(scenario_a_vcf),
        data={"drugs": "Codeine", "patient_id": "PATIENT_001"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["patient_id"] == "PATIENT_001"
    assert body["drug"] == "Codeine"
    assert body["risk_assessment"]["risk_label"] == "Adjust Dosage"
    assert body["pharmacogenomic_profile"]["primary_gene"] == "CYP2D6"
    assert body["timestamp"].endswith("Z")


def test_predict_multiple_drugs_returns_list(client, scenario_a_vcf):
    resp = client.post(
        "/api/predict",
        files=_upload(scenario_a_vcf),
        data={"drugs": "Codeine,Simvastatin", "explain": "true"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [r["drug"] for r in body] == ["Codeine", "Simvastatin"]
    assert body[0]["patient_id"] == body[1]["patient_id"]
    assert body[0]["llm_generated_explanation"]["summary"].startswith(
        "CLINICAL PHARMACOGENOMIC ANALYSIS REPORT"
    )


def test_predict_requires_drugs(client, scenario_a_vcf):
    resp = client.post("/api/predict", files=_upload(scenario_a_vcf))
    assert resp.status_code == 422
    assert resp.json()["error"] == "Invalid request"


def test_explain_round_trip(client, scenario_a_vcf):
    analysis = client.post("/api/analyze", files=_upload(scenario_a_vcf)).json()
    resp = client.post("/api/explain", json={
        "pharmacogenes": analysis["pharmacogenes"],
        "risk_assessment": analysis["risk_assessment"],
        "variants": analysis["variants"],
    })
    assert resp.status_code == 200
    assert "GENE-LEVEL ANALYSIS" in resp.json()["explanation"]


def test_explain_rejects_missing_fields(client):
    resp = client.post("/api/explain", json={"pharmacogenes": []})
    assert resp.status_code == 422
