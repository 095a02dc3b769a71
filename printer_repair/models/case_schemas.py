"""
Esquemas Pydantic del caso: enum de estados, payloads de entrada, vista de
salida y el parche explícito que aplica el repositorio.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from printer_repair.core.exceptions import (
    InvalidStatusException,
    ProtectedFieldException,
    ValidationException,
)


class CaseStatus(str, Enum):
    """
    Estado de un caso. Conjunto cerrado: cualquier estado puede pasar a
    cualquier otro, solo se valida la pertenencia.
    """
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @classmethod
    def parse(cls, value: Any) -> "CaseStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidStatusException(value) from None


STATUS_LABELS = {
    CaseStatus.PENDING: "Pendiente",
    CaseStatus.IN_PROGRESS: "En Proceso",
    CaseStatus.RESOLVED: "Resuelto",
}


# =========================================================
# ENTRADA
# =========================================================

class CaseCreateRequest(BaseModel):
    """
    Datos de ingreso. Los obligatorios se validan en el servicio para
    devolver siempre el mismo error (400) tanto si faltan como si vienen vacíos.
    """
    reference: str = ""
    client_name: str = ""
    client_tax_id: str = ""
    phone: str = ""
    notes: Optional[str] = None


class StatusChangeRequest(BaseModel):
    status: str = Field(..., description="pending | in_progress | resolved")
    note: Optional[str] = Field(
        None,
        description="Obligatoria para in_progress (descripción del proceso) y resolved (motivo de resolución)",
    )


# =========================================================
# SALIDA
# =========================================================

class CaseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    case_number: int
    reference: str
    client_name: str
    client_tax_id: str
    phone: str
    notes: str = ""
    intake_at: datetime
    delivered_at: Optional[datetime] = None
    status: CaseStatus
    status_changed_at: Optional[datetime] = None
    resolution_note: str = ""
    process_note: str = ""


# =========================================================
# PARCHE
# =========================================================

IMMUTABLE_FIELDS = frozenset({"id", "intake_at"})


class CasePatch(BaseModel):
    """
    Cambios parciales sobre un caso.

    Cada campo es opcional e independiente; solo se aplican los campos
    presentes en `model_fields_set`, de modo que `notes=None` no equivale a
    "no tocar notes". `id` e `intake_at` no existen aquí.
    """
    model_config = ConfigDict(extra="forbid")

    reference: Optional[str] = None
    client_name: Optional[str] = None
    client_tax_id: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[CaseStatus] = None
    status_changed_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    resolution_note: Optional[str] = None
    process_note: Optional[str] = None

    @classmethod
    def from_fields(cls, fields: Mapping[str, Any]) -> "CasePatch":
        """
        Construye un parche desde un dict arbitrario (ej: body de un PATCH).

        Raises:
            ProtectedFieldException: si incluye id o intake_at
            ValidationException: si incluye campos desconocidos o valores de
                tipo incorrecto
        """
        protected = IMMUTABLE_FIELDS.intersection(fields)
        if protected:
            raise ProtectedFieldException(sorted(protected))

        unknown = set(fields) - set(cls.model_fields)
        if unknown:
            raise ValidationException(
                f"Campos desconocidos: {', '.join(sorted(unknown))}",
                details={"fields": sorted(unknown)},
            )

        if "status" in fields and fields["status"] is not None:
            fields = {**fields, "status": CaseStatus.parse(fields["status"])}

        try:
            return cls(**fields)
        except PydanticValidationError as e:
            errors = [
                {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg")}
                for err in e.errors()
            ]
            raise ValidationException(
                "Solicitud inválida", details={"errors": errors}, original_error=e
            ) from e

    def changes(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.model_fields if name in self.model_fields_set}

    def apply_to(self, target: Any) -> None:
        for name, value in self.changes().items():
            if name == "status" and value is not None:
                value = value.value
            if value is None and name in _NOT_NULL_TEXT:
                value = ""
            setattr(target, name, value)


# Columnas NOT NULL que aceptan "limpiar" con None
_NOT_NULL_TEXT = frozenset({"notes", "resolution_note", "process_note"})
