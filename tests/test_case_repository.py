"""
Tests del repositorio de casos sobre SQLite en memoria.
"""
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from printer_repair.core.exceptions import (
    PersistenceException,
    PersistenceUnavailableException,
    ProtectedFieldException,
    ValidationException,
)
from printer_repair.models.case import PrinterCase
from printer_repair.models.case_schemas import CasePatch, CaseStatus
from printer_repair.repositories.case_repository import CaseRepository


@pytest.fixture
def repo(db_session):
    return CaseRepository(db_session)


def _create(repo, reference="HP M404dn", client_name="Ana Ruiz", tax_id="123", phone="3000000000", notes=None):
    return repo.create(reference, client_name, tax_id, phone, notes)


def test_first_case_gets_number_one(repo):
    case = _create(repo)

    assert case.case_number == 1
    assert case.status == "pending"
    assert case.notes == ""
    assert case.resolution_note == ""
    assert case.delivered_at is None
    assert case.intake_at is not None
    assert len(case.id) == 36


def test_case_numbers_strictly_increase(repo):
    numbers = [_create(repo, reference=f"Ref {i}").case_number for i in range(5)]

    assert numbers == [1, 2, 3, 4, 5]


def test_numbering_continues_from_current_maximum_after_delete(repo):
    first = _create(repo)
    _create(repo)
    third = _create(repo)

    assert repo.delete(first.id) is True
    assert _create(repo).case_number == third.case_number + 1


def test_duplicate_case_number_is_rejected(repo, db_session):
    _create(repo)

    # Dos altas que leen el mismo máximo: la segunda choca con UNIQUE
    with patch.object(CaseRepository, "next_case_number", return_value=1):
        with pytest.raises(PersistenceException) as exc:
            _create(repo, reference="Otra")

    assert not isinstance(exc.value, PersistenceUnavailableException)
    assert exc.value.code == "PERSISTENCE_ERROR"
    # La sesión sigue usable tras el rollback
    assert len(repo.list()) == 1


def test_get_by_id_unknown_returns_none(repo):
    assert repo.get_by_id("no-existe") is None


def test_list_orders_by_intake_desc(repo, db_session):
    old = _create(repo, reference="Vieja")
    new = _create(repo, reference="Nueva")
    old.intake_at = datetime(2026, 1, 1)
    new.intake_at = old.intake_at + timedelta(days=1)
    db_session.commit()

    assert [c.reference for c in repo.list()] == ["Nueva", "Vieja"]


def test_list_filters_by_status(repo):
    a = _create(repo, reference="A")
    _create(repo, reference="B")
    repo.update(a.id, CasePatch(status=CaseStatus.RESOLVED))

    resolved = repo.list(status=CaseStatus.RESOLVED)

    assert [c.reference for c in resolved] == ["A"]


@pytest.mark.parametrize("term", ["epson", "MARIA", "900-1", "311"])
def test_search_is_case_insensitive_across_fields(repo, term):
    _create(repo, reference="Epson L3150", client_name="Maria Gomez", tax_id="900-1", phone="311")
    _create(repo, reference="Brother", client_name="Luis", tax_id="77", phone="555")

    found = repo.list(search=term)

    assert [c.reference for c in found] == ["Epson L3150"]


def test_search_blank_returns_everything(repo):
    _create(repo)
    _create(repo)

    assert len(repo.list(search="   ")) == 2


def test_update_applies_only_present_fields(repo):
    case = _create(repo, notes="original")

    updated = repo.update(case.id, CasePatch(phone="999"))

    assert updated.phone == "999"
    assert updated.notes == "original"
    assert updated.reference == "HP M404dn"


def test_update_with_explicit_none_clears_notes(repo):
    case = _create(repo, notes="algo")

    updated = repo.update(case.id, CasePatch(notes=None))

    assert updated.notes == ""


def test_update_unknown_case_returns_none(repo):
    assert repo.update("no-existe", CasePatch(phone="1")) is None


def test_patch_rejects_identity_fields():
    with pytest.raises(ProtectedFieldException):
        CasePatch.from_fields({"intake_at": "2026-01-01T00:00:00"})

    with pytest.raises(ProtectedFieldException):
        CasePatch.from_fields({"id": "otro"})


def test_patch_rejects_unknown_fields():
    with pytest.raises(ValidationException) as exc:
        CasePatch.from_fields({"color": "rojo"})

    assert exc.value.details["fields"] == ["color"]


def test_patch_rejects_wrong_value_types():
    with pytest.raises(ValidationException) as exc:
        CasePatch.from_fields({"notes": ["x"]})

    assert exc.value.details["errors"][0]["loc"] == ["notes"]
    assert exc.value.original_error is not None


def test_delete_unknown_returns_false(repo):
    assert repo.delete("no-existe") is False


def test_delete_removes_row(repo, db_session):
    case = _create(repo)

    assert repo.delete(case.id) is True
    assert db_session.query(PrinterCase).count() == 0


def test_operational_error_is_reported_as_unavailable(repo, db_session):
    error = OperationalError("SELECT 1", {}, Exception("database is locked"))

    with patch.object(db_session, "commit", side_effect=error):
        with pytest.raises(PersistenceUnavailableException) as exc:
            _create(repo)

    assert exc.value.code == "PERSISTENCE_UNAVAILABLE"
    assert exc.value.original_error is error
