"""
Tests de la máquina de estados: función pura, sin BD.
"""
from datetime import datetime
from types import SimpleNamespace

import pytest

from printer_repair.core.exceptions import MissingRequiredNoteException
from printer_repair.models.case_schemas import CaseStatus
from printer_repair.services.state_machine import (
    CaseStateMachine,
    append_note_entry,
    require_note,
    requires_note,
)

# 14:30 UTC = 09:30 en Bogotá
NOW = datetime(2026, 10, 19, 14, 30)


@pytest.fixture
def machine():
    return CaseStateMachine("America/Bogota")


def _case(notes="", delivered_at=None):
    return SimpleNamespace(notes=notes, delivered_at=delivered_at)


def test_requires_note_only_for_progress_and_resolution():
    assert requires_note(CaseStatus.IN_PROGRESS)
    assert requires_note(CaseStatus.RESOLVED)
    assert not requires_note(CaseStatus.PENDING)


@pytest.mark.parametrize("note", [None, "", "   \n\t"])
def test_in_progress_without_note_fails(machine, note):
    with pytest.raises(MissingRequiredNoteException) as exc:
        machine.transition(_case(), CaseStatus.IN_PROGRESS, note, NOW)

    assert exc.value.code == "MISSING_REQUIRED_NOTE"
    assert exc.value.details["note_field"] == "process_note"


def test_resolved_without_note_fails(machine):
    with pytest.raises(MissingRequiredNoteException) as exc:
        machine.transition(_case(), CaseStatus.RESOLVED, "  ", NOW)

    assert exc.value.details["note_field"] == "resolution_note"


def test_pending_ignores_missing_note(machine):
    patch = machine.transition(_case(notes="algo"), CaseStatus.PENDING, None, NOW)

    assert patch.changes() == {"status": CaseStatus.PENDING, "status_changed_at": NOW}


def test_in_progress_appends_dated_entry_after_prior_notes(machine):
    patch = machine.transition(
        _case(notes="No enciende"), CaseStatus.IN_PROGRESS, "replacing fuser", NOW
    )

    assert patch.process_note == "replacing fuser"
    assert patch.notes.startswith("No enciende\n\n[")
    assert patch.notes.endswith("En Proceso: replacing fuser")
    assert "[19 oct. 2026, 09:30 a. m.]" in patch.notes
    assert patch.status is CaseStatus.IN_PROGRESS
    assert patch.status_changed_at == NOW


def test_in_progress_on_empty_notes_is_just_the_entry(machine):
    patch = machine.transition(_case(notes=""), CaseStatus.IN_PROGRESS, "diagnóstico", NOW)

    assert patch.notes == "[19 oct. 2026, 09:30 a. m.] En Proceso: diagnóstico"


def test_resolved_sets_delivery_date_when_absent(machine):
    patch = machine.transition(_case(), CaseStatus.RESOLVED, "  Fusor cambiado  ", NOW)

    assert patch.delivered_at == NOW
    # La nota se guarda tal cual
    assert patch.resolution_note == "  Fusor cambiado  "
    assert "notes" not in patch.changes()


def test_resolved_keeps_existing_delivery_date(machine):
    first = datetime(2026, 10, 1, 12, 0)
    patch = machine.transition(_case(delivered_at=first), CaseStatus.RESOLVED, "otra vez", NOW)

    assert "delivered_at" not in patch.changes()


def test_any_state_can_move_to_any_other(machine):
    for target in CaseStatus:
        patch = machine.transition(_case(), target, "nota", NOW)
        assert patch.status is target


def test_require_note_returns_note_verbatim():
    assert require_note(CaseStatus.RESOLVED, " ok ") == " ok "
    assert require_note(CaseStatus.PENDING, "   ") is None


def test_append_note_entry_strips_trailing_whitespace_of_history():
    result = append_note_entry("previo\n\n\n", "En Proceso", "x", "1 ene. 2026, 10:00 a. m.")

    assert result == "previo\n\n[1 ene. 2026, 10:00 a. m.] En Proceso: x"
