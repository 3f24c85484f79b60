"""Integration tests for API endpoints"""

import io
import json
import uuid
import zipfile
import pytest
from pathlib import Path
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session
from cresus_dossier.api import main
from cresus_dossier.config import settings
from cresus_dossier.infrastructure.database.repositories import DossierRepository
from cresus_dossier.infrastructure.security import AdvisorAuthService


@pytest.fixture
def dossier_form() -> dict:
    """Intake as typed in the browser: euro amounts with decimal commas"""
    return {
        "contact": {"last_name": "Martin", "first_name": "Claire", "email": "claire.martin@example.fr"},
        "consents": {"data_processing": True},
        "income": {"salaries": "1 800", "allowances": "250,00"},
        "housing": {"rent": "650", "energy": 80},
        "children": {"schooling": "50"},
        "other": {"transport": "60"},
        "insurance": {"home": "20"},
        "taxes": {"income_tax": "40"},
        "consumer": [{"creditor": "Cofidis", "monthly_payment": "150", "remaining_principal": "3 200"}],
        "other_debts": [{"creditor": "EDF", "monthly_payment": "30", "arrears": "450"}],
    }


def submit(client: TestClient, form: dict, files=None):
    return client.post(
        "/v1/dossiers",
        data={"meta": json.dumps(form)},
        files=files or [],
    )


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.parametrize("enabled,expected_calls", [(True, 1), (False, 0)])
def test_startup_creates_tables_when_enabled(monkeypatch, enabled: bool, expected_calls: int):
    """Test tables are created at startup only when auto creation is enabled"""
    calls = []
    monkeypatch.setattr(settings, "auto_create_tables", enabled)
    monkeypatch.setattr(main, "init_db", lambda: calls.append(True))

    with TestClient(main.create_app()) as client:
        assert client.get("/health").status_code == 200

    assert len(calls) == expected_calls


def test_metrics_endpoint(client: TestClient, dossier_form: dict):
    """Test Prometheus metrics endpoint"""
    submit(client, dossier_form)
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "cresus_dossier_submissions_total" in response.text


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"


def test_form_options(client: TestClient):
    response = client.get("/v1/form/options")

    assert response.status_code == 200
    data = response.json()
    assert len(data["steps"]) == 8
    assert data["amount_sections"]["income"][0] == {"key": "salaries", "label": "Salaires / Retraites"}
    assert "Locataire" in data["housing_statuses"]


# Submission

def test_submit_dossier(client: TestClient, dossier_form: dict, storage_dir: Path):
    """Test POST /v1/dossiers stores the document and its attachments"""
    response = submit(
        client,
        dossier_form,
        files=[
            ("files", ("bulletin.pdf", b"%PDF bulletin", "application/pdf")),
            ("files", ("quittance.jpg", b"jpeg", "image/jpeg")),
        ],
    )

    assert response.status_code == 201
    data = response.json()
    assert data["totals"] == {
        "total_income_cents": 205000,
        "total_expenses_cents": 90000,
        "total_credits_cents": 15000,
        "residual_cents": 100000,
    }
    assert [a["name"] for a in data["attachments"]] == ["bulletin.pdf", "quittance.jpg"]
    assert data["failed_attachments"] == []
    stored = [p.name for p in storage_dir.rglob("*.pdf")]
    assert len(stored) == 1 and stored[0].endswith("_0_bulletin.pdf")


def test_submit_with_failing_attachment(client: TestClient, dossier_form: dict):
    """Test one failing upload is reported while the dossier is still stored"""
    response = submit(
        client,
        dossier_form,
        files=[
            ("files", ("FAIL.pdf", b"a", "application/pdf")),
            ("files", ("avis.pdf", b"b", "application/pdf")),
        ],
    )

    assert response.status_code == 201
    data = response.json()
    assert data["failed_attachments"] == ["FAIL.pdf"]
    assert [a["name"] for a in data["attachments"]] == ["avis.pdf"]


def test_submit_without_consent(client: TestClient, dossier_form: dict):
    dossier_form["consents"]["data_processing"] = False
    response = submit(client, dossier_form)
    assert response.status_code == 422


def test_submit_invalid_meta(client: TestClient):
    assert client.post("/v1/dossiers", data={"meta": "{not json"}).status_code == 422
    assert submit(client, {"income": {"unknown_line": 10}}).status_code == 422


def test_submit_huge_amount(client: TestClient, dossier_form: dict):
    """Test an amount beyond the default decimal precision is still converted"""
    dossier_form["income"] = {"salaries": "1e30"}

    response = submit(client, dossier_form)

    assert response.status_code == 201
    assert response.json()["totals"]["total_income_cents"] == 10**32


# Drafts

def test_draft_walkthrough(client: TestClient):
    """Test the step-by-step intake from consent to submission"""
    response = client.post("/v1/drafts")
    assert response.status_code == 201
    state = response.json()
    draft_id = state["draft_id"]
    assert state["step"] == 0
    assert state["step_title"] == "Consentements RGPD & Médiation"
    assert state["total_steps"] == 8
    assert state["can_advance"] is False
    assert state["record"]["contact"]["civility"] == "Monsieur"
    assert state["record"]["income"]["salaries"] == 0

    # blocked until consent is given
    assert client.post(f"/v1/drafts/{draft_id}/next").status_code == 409

    response = client.put(f"/v1/drafts/{draft_id}/sections/consents", json={"data_processing": True})
    assert response.json()["can_advance"] is True
    assert client.post(f"/v1/drafts/{draft_id}/next").json()["step"] == 1

    client.put(f"/v1/drafts/{draft_id}/sections/contact", json={"last_name": "Petit", "first_name": "Louis"})
    response = client.put(f"/v1/drafts/{draft_id}/sections/income", json={"salaries": "1 500,50"})
    assert response.json()["section_totals"]["income"] == 150050

    response = client.put(
        f"/v1/drafts/{draft_id}/sections/mortgage",
        json=[{"creditor": "LCL", "monthly_payment": "500"}],
    )
    state = response.json()
    assert state["section_totals"]["credits"] == 50000
    assert state["totals"]["residual_cents"] == 150050 - 50000

    assert client.post(f"/v1/drafts/{draft_id}/previous").json()["step"] == 0
    assert client.post(f"/v1/drafts/{draft_id}/previous").json()["step"] == 0

    # resumed from the database
    assert client.get(f"/v1/drafts/{draft_id}").json()["record"]["contact"]["last_name"] == "Petit"

    response = client.post(
        f"/v1/drafts/{draft_id}/submit",
        files=[("files", ("releve.pdf", b"releve", "application/pdf"))],
    )
    assert response.status_code == 201
    assert response.json()["totals"]["residual_cents"] == 100050

    assert client.get(f"/v1/drafts/{draft_id}").status_code == 404


def test_draft_unknown_section(client: TestClient):
    draft_id = client.post("/v1/drafts").json()["draft_id"]
    assert client.put(f"/v1/drafts/{draft_id}/sections/files", json={}).status_code == 404


def test_draft_invalid_section_payload(client: TestClient):
    draft_id = client.post("/v1/drafts").json()["draft_id"]
    response = client.put(f"/v1/drafts/{draft_id}/sections/consents", json={"data_processing": "peut-être"})
    assert response.status_code == 422


def test_draft_submit_without_consent(client: TestClient):
    draft_id = client.post("/v1/drafts").json()["draft_id"]
    assert client.post(f"/v1/drafts/{draft_id}/submit").status_code == 422


def test_draft_not_found(client: TestClient):
    assert client.get(f"/v1/drafts/{uuid.uuid4()}").status_code == 404
    assert client.get("/v1/drafts/not-a-uuid").status_code == 400


# Advisor

def test_login(client: TestClient):
    """Test POST /v1/auth/login returns a bearer token"""
    response = client.post(
        "/v1/auth/login",
        json={"email": "Conseiller@Cresus.test", "password": "mot-de-passe-conseiller"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["expires_in"] == 12 * 3600
    assert data["access_token"]


def test_login_wrong_password(client: TestClient):
    response = client.post("/v1/auth/login", json={"email": "conseiller@cresus.test", "password": "faux"})
    assert response.status_code == 401


def test_advisor_endpoints_require_token(client: TestClient):
    assert client.get("/v1/advisor/dossiers").status_code == 401
    response = client.get("/v1/advisor/dossiers", headers={"Authorization": "Bearer invalide"})
    assert response.status_code == 401


def test_expired_token_is_refused(client: TestClient):
    token = AdvisorAuthService(expiration_hours=-1).create_token("conseiller@cresus.test")
    response = client.get("/v1/advisor/dossiers", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_list_and_search(client: TestClient, auth_headers: dict, dossier_form: dict):
    """Test newest first and case-insensitive search on first or last name"""
    submit(client, dossier_form)
    dossier_form["contact"] = {"last_name": "Durand", "first_name": "Martine"}
    submit(client, dossier_form)
    dossier_form["contact"] = {"last_name": "Petit", "first_name": "Louis"}
    submit(client, dossier_form)

    response = client.get("/v1/advisor/dossiers", headers=auth_headers)
    assert response.status_code == 200
    dossiers = response.json()["dossiers"]
    assert [d["last_name"] for d in dossiers] == ["Petit", "Durand", "Martin"]
    assert dossiers[0]["residual_cents"] == 100000
    assert dossiers[0]["created_at_label"] != "—"

    response = client.get("/v1/advisor/dossiers", params={"search": "MART"}, headers=auth_headers)
    assert sorted(d["last_name"] for d in response.json()["dossiers"]) == ["Durand", "Martin"]


def test_list_tolerates_null_contact_fields(client: TestClient, auth_headers: dict, db: Session):
    """Test a stored document with a null name is listed with an empty name"""
    dossier = DossierRepository(db).create_dossier({"contact": {"last_name": None, "first_name": "Claire"}})
    db.commit()

    response = client.get("/v1/advisor/dossiers", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["dossiers"][0]["last_name"] == ""
    assert response.json()["dossiers"][0]["first_name"] == "Claire"

    detail = client.get(f"/v1/advisor/dossiers/{dossier.id}", headers=auth_headers)
    assert detail.json()["display_name"] == "Claire"


def test_dossier_detail(client: TestClient, auth_headers: dict, dossier_form: dict):
    dossier_id = submit(client, dossier_form).json()["dossier_id"]

    response = client.get(f"/v1/advisor/dossiers/{dossier_id}", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["display_name"] == "Claire Martin"
    assert data["sections"][1]["title"] == "3.1 Logement / Maison"
    assert data["sections"][1]["total_cents"] == 73000
    assert data["debt_groups"][2]["debts"][0]["arrears"] == 45000
    assert data["totals"]["residual_cents"] == 100000
    assert data["totals_recomputed"] is False


def test_dossier_detail_errors(client: TestClient, auth_headers: dict):
    assert client.get("/v1/advisor/dossiers/abc", headers=auth_headers).status_code == 400
    assert client.get(f"/v1/advisor/dossiers/{uuid.uuid4()}", headers=auth_headers).status_code == 404


def test_delete_dossier_removes_attachments(
    client: TestClient, auth_headers: dict, dossier_form: dict, storage_dir: Path
):
    dossier_id = submit(
        client, dossier_form, files=[("files", ("bulletin.pdf", b"data", "application/pdf"))]
    ).json()["dossier_id"]

    response = client.delete(f"/v1/advisor/dossiers/{dossier_id}", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"dossier_id": dossier_id, "files_deleted": 1, "files_failed": 0}
    assert list(storage_dir.rglob("*.pdf")) == []
    assert client.get(f"/v1/advisor/dossiers/{dossier_id}", headers=auth_headers).status_code == 404


def test_export_pdf_report(client: TestClient, auth_headers: dict, dossier_form: dict):
    dossier_id = submit(client, dossier_form).json()["dossier_id"]

    response = client.get(f"/v1/advisor/dossiers/{dossier_id}/pdf", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert f"dossier-{dossier_id}.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_snapshot_and_template_pdf(client: TestClient, auth_headers: dict, dossier_form: dict):
    """Test the snapshot of a dossier renders through the fixed template"""
    dossier_id = submit(client, dossier_form).json()["dossier_id"]

    snapshot = client.get(f"/v1/advisor/dossiers/{dossier_id}/snapshot", headers=auth_headers).json()
    assert snapshot["identity"]["last_name"] == "Martin"
    assert snapshot["budget"]["rent"] == 65000

    response = client.post("/v1/advisor/pdf", json=snapshot, headers=auth_headers)
    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")
    assert "dossier-Martin.pdf" in response.headers["content-disposition"]

    assert client.post("/v1/advisor/pdf", json={}, headers=auth_headers).status_code == 200


def test_export_archive(client: TestClient, auth_headers: dict, dossier_form: dict):
    dossier_id = submit(
        client, dossier_form, files=[("files", ("bulletin.pdf", b"contenu", "application/pdf"))]
    ).json()["dossier_id"]

    response = client.get(f"/v1/advisor/dossiers/{dossier_id}/archive", headers=auth_headers)

    assert response.status_code == 200
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        assert sorted(archive.namelist()) == ["attachments/bulletin.pdf", "dossier.json"]
        assert archive.read("attachments/bulletin.pdf") == b"contenu"
