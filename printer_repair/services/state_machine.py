"""
Ciclo de vida del caso: pending -> in_progress -> resolved.

No hay grafo de transiciones: cualquier estado válido puede pedirse desde
cualquier otro. Lo que cambia según el destino son los efectos laterales:

- siempre: status_changed_at = ahora
- in_progress: nota obligatoria; se guarda en process_note y se añade a notes
  como entrada fechada "[fecha] En Proceso: nota"
- resolved: nota obligatoria en resolution_note; delivered_at = ahora si no
  estaba ya fijada
- pending: sin datos adicionales

La función de transición es pura: devuelve un CasePatch y no toca la BD.
"""
from datetime import datetime
from typing import Any, Optional

from printer_repair.core.dates import format_short
from printer_repair.core.exceptions import MissingRequiredNoteException
from printer_repair.models.case_schemas import CasePatch, CaseStatus

NOTE_FIELDS = {
    CaseStatus.IN_PROGRESS: "process_note",
    CaseStatus.RESOLVED: "resolution_note",
}


def requires_note(status: CaseStatus) -> bool:
    return status in NOTE_FIELDS


def require_note(status: CaseStatus, note: Optional[str]) -> Optional[str]:
    """
    Devuelve la nota tal cual llegó, o lanza si el estado la exige y está
    vacía (o solo tiene espacios).

    Raises:
        MissingRequiredNoteException
    """
    if not (note or "").strip():
        if requires_note(status):
            raise MissingRequiredNoteException(status.value, NOTE_FIELDS[status])
        return None
    return note


def append_note_entry(existing: Optional[str], label: str, text: str, stamp: str) -> str:
    """Añade "[stamp] label: text" tras las notas previas, separado por una línea en blanco."""
    entry = f"[{stamp}] {label}: {text}"
    previous = (existing or "").strip()
    if previous:
        return f"{previous}\n\n{entry}"
    return entry


class CaseStateMachine:
    """Calcula el parche de cada transición de estado."""

    def __init__(self, timezone_name: str):
        self.timezone_name = timezone_name

    def transition(
        self,
        case: Any,
        new_status: CaseStatus,
        note: Optional[str],
        now: datetime,
    ) -> CasePatch:
        """
        Args:
            case: Caso actual (se leen notes y delivered_at)
            new_status: Estado destino ya validado
            note: Nota de la transición (obligatoria para in_progress/resolved)
            now: Instante de la transición (UTC naive)

        Returns:
            CasePatch con status, status_changed_at y los efectos del destino
        """
        note = require_note(new_status, note)

        changes: dict[str, Any] = {
            "status": new_status,
            "status_changed_at": now,
        }

        if new_status is CaseStatus.IN_PROGRESS:
            changes["process_note"] = note
            changes["notes"] = append_note_entry(
                case.notes,
                CaseStatus.IN_PROGRESS.label,
                note,
                format_short(now, self.timezone_name),
            )

        elif new_status is CaseStatus.RESOLVED:
            changes["resolution_note"] = note
            if case.delivered_at is None:
                changes["delivered_at"] = now

        return CasePatch(**changes)
