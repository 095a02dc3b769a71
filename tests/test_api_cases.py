"""
Tests para la API REST - Gestión de casos.

Valida endpoints:
- GET/POST /cases
- GET/PATCH/DELETE /cases/{case_id}
- POST /cases/{case_id}/status
- Documentos PDF (negociación por Accept y descargas)
"""
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from printer_repair.repositories.case_repository import CaseRepository

PAYLOAD = {
    "reference": "HP M404dn",
    "client_name": "Ana Ruiz",
    "client_tax_id": "123",
    "phone": "3000000000",
}

PDF = {"Accept": "application/pdf"}


def _create(client, **overrides):
    response = client.post("/cases", json={**PAYLOAD, **overrides})
    assert response.status_code == 201
    return response.json()


def test_api_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


# =========================================================
# ALTA
# =========================================================

def test_create_case_returns_json(client):
    data = _create(client)

    assert data["case_number"] == 1
    assert data["status"] == "pending"
    assert data["reference"] == "HP M404dn"
    assert data["delivered_at"] is None


def test_create_case_returns_intake_pdf_when_requested(client):
    response = client.post("/cases", json=PAYLOAD, headers=PDF)

    assert response.status_code == 201
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")
    assert 'filename="Registro_HP_M404dn_1.pdf"' in response.headers["content-disposition"]


def test_create_case_missing_field_is_400(client):
    response = client.post("/cases", json={**PAYLOAD, "client_name": "  "})

    assert response.status_code == 400
    body = response.json()
    assert body["error_code"] == "MISSING_FIELD"
    assert body["details"] == {"field": "client_name"}


def test_malformed_body_is_400(client):
    response = client.post("/cases", json={"reference": ["no", "texto"]})

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_store_unavailable_is_503(client):
    error = OperationalError("INSERT", {}, Exception("database is locked"))
    with patch.object(CaseRepository, "next_case_number", side_effect=error):
        response = client.post("/cases", json=PAYLOAD)

    assert response.status_code == 503
    assert response.json()["error_code"] == "PERSISTENCE_UNAVAILABLE"


# =========================================================
# CONSULTA
# =========================================================

def test_list_and_filters(client):
    first = _create(client, reference="Epson L3150", client_name="Luis")
    _create(client)
    client.post(f"/cases/{first['id']}/status", json={"status": "in_progress", "note": "revisión"})

    assert len(client.get("/cases").json()) == 2
    assert [c["reference"] for c in client.get("/cases", params={"status": "in_progress"}).json()] == [
        "Epson L3150"
    ]
    assert [c["client_name"] for c in client.get("/cases", params={"search": "luis"}).json()] == ["Luis"]


def test_list_invalid_status_is_400(client):
    response = client.get("/cases", params={"status": "archived"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_STATUS"


def test_get_unknown_case_is_404(client):
    response = client.get("/cases/no-existe")

    assert response.status_code == 404
    assert response.json()["error_code"] == "CASE_NOT_FOUND"


# =========================================================
# ESTADO
# =========================================================

def test_in_progress_requires_note(client):
    case = _create(client)

    response = client.post(f"/cases/{case['id']}/status", json={"status": "in_progress"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "MISSING_REQUIRED_NOTE"


def test_resolve_with_pdf_accept_returns_certificate(client):
    case = _create(client)

    response = client.post(
        f"/cases/{case['id']}/status",
        json={"status": "resolved", "note": "Cambio de fusor"},
        headers=PDF,
    )

    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")
    assert "Entrega_HP_M404dn_1.pdf" in response.headers["content-disposition"]

    stored = client.get(f"/cases/{case['id']}").json()
    assert stored["status"] == "resolved"
    assert stored["delivered_at"] is not None


def test_non_resolving_change_returns_json_even_with_pdf_accept(client):
    case = _create(client)

    response = client.post(
        f"/cases/{case['id']}/status",
        json={"status": "in_progress", "note": "replacing fuser"},
        headers=PDF,
    )

    assert response.status_code == 200
    assert "En Proceso: replacing fuser" in response.json()["notes"]


# =========================================================
# EDICIÓN / BORRADO
# =========================================================

def test_patch_edits_fields(client):
    case = _create(client)

    response = client.patch(f"/cases/{case['id']}", json={"phone": "3111111111"})

    assert response.status_code == 200
    assert response.json()["phone"] == "3111111111"


def test_patch_rejects_intake_date(client):
    case = _create(client)

    response = client.patch(f"/cases/{case['id']}", json={"intake_at": "2020-01-01T00:00:00"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "PROTECTED_FIELD"


@pytest.mark.parametrize("body", [{"reference": 123}, {"notes": ["x"]}])
def test_patch_with_non_text_value_is_400(client, body):
    case = _create(client)

    response = client.patch(f"/cases/{case['id']}", json=body)

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


def test_patch_trims_required_fields(client):
    case = _create(client)

    response = client.patch(f"/cases/{case['id']}", json={"reference": "  Epson L3150 "})

    assert response.json()["reference"] == "Epson L3150"


def test_delete_then_create_continues_numbering(client):
    first = _create(client)
    second = _create(client)

    response = client.delete(f"/cases/{first['id']}")
    assert response.status_code == 200
    assert client.get(f"/cases/{first['id']}").status_code == 404

    assert _create(client)["case_number"] == second["case_number"] + 1


def test_delete_unknown_is_404(client):
    assert client.delete("/cases/no-existe").status_code == 404


# =========================================================
# DOCUMENTOS
# =========================================================

def test_download_intake_receipt(client):
    case = _create(client)

    response = client.get(f"/cases/{case['id']}/intake-receipt")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"


def test_delivery_certificate_requires_resolution(client):
    case = _create(client)

    response = client.get(f"/cases/{case['id']}/delivery-certificate")

    assert response.status_code == 400
    assert response.json()["error_code"] == "CASE_NOT_RESOLVED"


def test_listing_report(client):
    _create(client)

    response = client.get("/cases/report", params={"search": "hp"})

    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")
    assert "Listado_" in response.headers["content-disposition"]
