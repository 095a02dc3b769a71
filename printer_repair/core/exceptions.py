"""
Sistema de excepciones estandarizado del servicio técnico.

Todas las excepciones del sistema heredan de PrinterRepairException y siguen
un formato consistente con:
- Código de error único
- Mensaje descriptivo
- Detalles adicionales (dict)
- Severity level

La capa HTTP traduce cada familia a un código de estado:
- ValidationException -> 400
- CaseNotFoundException -> 404
- PersistenceUnavailableException -> 503
- resto -> 500
"""
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(str, Enum):
    """Niveles de severidad para errores."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class PrinterRepairException(Exception):
    """
    Excepción base del sistema.

    Todas las excepciones custom deben heredar de esta clase.
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        original_error: Optional[Exception] = None
    ):
        """
        Args:
            code: Código único del error (ej: "CASE_NOT_FOUND")
            message: Mensaje descriptivo para humanos
            details: Detalles adicionales (dict)
            severity: Nivel de severidad
            original_error: Excepción original si es un wrap
        """
        self.code = code
        self.message = message
        self.details = details or {}
        self.severity = severity
        self.original_error = original_error

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convierte la excepción a diccionario (para API/logging)."""
        result = {
            "error_code": self.code,
            "message": self.message,
            "severity": self.severity.value,
            "details": self.details
        }

        if self.original_error:
            result["original_error"] = {
                "type": type(self.original_error).__name__,
                "message": str(self.original_error)
            }

        return result

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base


# =========================================================
# EXCEPCIONES DE VALIDACIÓN
# =========================================================

class ValidationException(PrinterRepairException):
    """Entrada inválida. Se devuelve al llamador, sin reintento."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.LOW)
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            **kwargs
        )


class MissingFieldException(ValidationException):
    """Campo obligatorio ausente o vacío."""

    def __init__(self, field: str, **kwargs):
        super().__init__(
            message=f"El campo '{field}' es obligatorio y no puede estar vacío",
            details={"field": field},
            **kwargs
        )
        self.code = "MISSING_FIELD"


class InvalidStatusException(ValidationException):
    """Estado fuera de pending / in_progress / resolved."""

    def __init__(self, status: Any, **kwargs):
        super().__init__(
            message=f"Estado inválido: {status!r}",
            details={"status": status, "allowed": ["pending", "in_progress", "resolved"]},
            **kwargs
        )
        self.code = "INVALID_STATUS"


class MissingRequiredNoteException(ValidationException):
    """Transición que exige nota sin nota."""

    def __init__(self, status: str, note_field: str, **kwargs):
        super().__init__(
            message=f"La transición a '{status}' requiere '{note_field}'",
            details={"status": status, "note_field": note_field},
            **kwargs
        )
        self.code = "MISSING_REQUIRED_NOTE"


class ProtectedFieldException(ValidationException):
    """Intento de modificar un campo inmutable o no editable."""

    def __init__(self, fields: list[str], **kwargs):
        super().__init__(
            message=f"Campos no editables: {', '.join(sorted(fields))}",
            details={"fields": sorted(fields)},
            **kwargs
        )
        self.code = "PROTECTED_FIELD"


class CaseNotResolvedException(ValidationException):
    """Acta de entrega solicitada para un caso no resuelto."""

    def __init__(self, case_id: str, status: str, **kwargs):
        super().__init__(
            message=f"El caso {case_id} no está resuelto (estado actual: {status})",
            details={"case_id": case_id, "status": status},
            **kwargs
        )
        self.code = "CASE_NOT_RESOLVED"


# =========================================================
# EXCEPCIONES DE BASE DE DATOS
# =========================================================

class CaseNotFoundException(PrinterRepairException):
    """Caso no encontrado en base de datos."""

    def __init__(self, case_id: str, **kwargs):
        super().__init__(
            code="CASE_NOT_FOUND",
            message=f"Caso no encontrado: {case_id}",
            details={"case_id": case_id},
            severity=ErrorSeverity.LOW,
            **kwargs
        )


class PersistenceException(PrinterRepairException):
    """La base de datos rechazó la operación (restricción, SQL inválido...)."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(
            code="PERSISTENCE_ERROR",
            message=message,
            **kwargs
        )


class PersistenceUnavailableException(PersistenceException):
    """No se pudo contactar con la base de datos."""

    def __init__(self, message: str = "Base de datos no disponible", **kwargs):
        super().__init__(
            message=message,
            severity=ErrorSeverity.CRITICAL,
            **kwargs
        )
        self.code = "PERSISTENCE_UNAVAILABLE"


# =========================================================
# EXCEPCIONES DE DOCUMENTOS
# =========================================================

class AssetLoadException(PrinterRepairException):
    """No se pudo cargar o decodificar el logo. Se recupera localmente."""

    def __init__(self, source: str, reason: str, **kwargs):
        super().__init__(
            code="ASSET_LOAD_FAILED",
            message=f"No se pudo cargar el recurso {source}: {reason}",
            details={"source": source, "reason": reason},
            severity=ErrorSeverity.LOW,
            **kwargs
        )


class DocumentGenerationException(PrinterRepairException):
    """Error al generar un documento PDF."""

    def __init__(self, document: str, **kwargs):
        super().__init__(
            code="DOCUMENT_GENERATION_ERROR",
            message=f"No se pudo generar el documento: {document}",
            details={"document": document},
            **kwargs
        )
