"""
Servicio de casos: orquesta repositorio, máquina de estados y documentos.

Flujos:
- Alta: valida campos obligatorios -> crea (número consecutivo) -> registro de ingreso
- Cambio de estado: carga -> parche de la máquina de estados -> actualiza ->
  acta de entrega solo al pasar a resolved
- Edición y borrado: validación y delegación al repositorio

Si el repositorio falla no se genera ningún documento.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional

from sqlalchemy.orm import Session

from printer_repair.core.config import Settings
from printer_repair.core.exceptions import (
    CaseNotFoundException,
    CaseNotResolvedException,
    DocumentGenerationException,
    MissingFieldException,
    PrinterRepairException,
    ProtectedFieldException,
    ValidationException,
)
from printer_repair.core.logger import StructuredLogger
from printer_repair.models.case import PrinterCase, utcnow
from printer_repair.models.case_schemas import CaseOut, CasePatch, CaseStatus
from printer_repair.reports.pdf import (
    Branding,
    load_logo,
    render_delivery_certificate,
    render_intake_receipt,
    render_listing_report,
)
from printer_repair.repositories.case_repository import CaseRepository
from printer_repair.services.base import BaseService
from printer_repair.services.state_machine import CaseStateMachine

REQUIRED_FIELDS = ("reference", "client_name", "client_tax_id", "phone")

# Nunca editables: identidad, fecha de ingreso y numeración
LOCKED_FIELDS = frozenset({"id", "intake_at", "case_number"})

# Solo cambian a través de change_status
STATUS_FIELDS = frozenset({"status", "status_changed_at", "delivered_at"})


@dataclass
class CaseDocument:
    """Resultado de una operación que puede producir un PDF."""
    case: CaseOut
    document: Optional[bytes] = None


class CaseService(BaseService):
    """
    Casos de uso del servicio técnico.

    Args:
        db: Sesión SQLAlchemy (una por request)
        settings: Configuración (branding, logo, zona horaria)
        logger: Logger estructurado
        logo_loader: Devuelve el logo listo para incrustar; por defecto lo
            carga desde settings.logo_source en cada documento
        clock: Hora actual en UTC naive
    """

    def __init__(
        self,
        db: Session,
        settings: Settings,
        logger: Optional[StructuredLogger] = None,
        logo_loader: Optional[Callable[[], Optional[bytes]]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        super().__init__(db, logger)
        self.settings = settings
        self.repository = CaseRepository(self.db)
        self.state_machine = CaseStateMachine(settings.timezone)
        self.branding = Branding(
            business_title=settings.business_title,
            contact_line=settings.business_contact_line,
            timezone=settings.timezone,
        )
        self.logo_loader = logo_loader or self._load_configured_logo
        self.clock = clock

    # =========================================================
    # LECTURA
    # =========================================================

    def get_case(self, case_id: str) -> CaseOut:
        return CaseOut.model_validate(self._get_or_404(case_id))

    def list_cases(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[CaseOut]:
        """
        Raises:
            InvalidStatusException: si status no es un estado válido
        """
        parsed = CaseStatus.parse(status) if status else None
        cases = self.repository.list(status=parsed, search=search)
        return [CaseOut.model_validate(c) for c in cases]

    # =========================================================
    # ALTA
    # =========================================================

    def create_case(self, fields: Mapping[str, Any]) -> CaseDocument:
        """
        Registra una impresora y genera el registro de ingreso.

        Raises:
            MissingFieldException: campo obligatorio vacío
            PersistenceException: la BD rechazó o no respondió
        """
        values = {name: _clean_required(fields, name) for name in REQUIRED_FIELDS}
        notes = fields.get("notes") or ""

        case = CaseOut.model_validate(self.repository.create(notes=notes, **values))

        self._log_info(
            f"Caso #{case.case_number} registrado",
            case_id=case.id,
            action="case_created",
            case_number=case.case_number,
        )

        document = self._render("registro de ingreso", case, render_intake_receipt)
        return CaseDocument(case=case, document=document)

    # =========================================================
    # ESTADO
    # =========================================================

    def change_status(
        self,
        case_id: str,
        new_status: Any,
        note: Optional[str] = None,
    ) -> CaseDocument:
        """
        Cambia el estado de un caso.

        Solo el paso a resolved produce documento (acta de entrega).

        Raises:
            CaseNotFoundException
            InvalidStatusException
            MissingRequiredNoteException
        """
        current = self._get_or_404(case_id)
        status = CaseStatus.parse(new_status)
        previous_status = current.status

        patch = self.state_machine.transition(current, status, note, self.clock())
        updated = self.repository.update(case_id, patch)
        if updated is None:
            raise CaseNotFoundException(case_id)
        case = CaseOut.model_validate(updated)

        self._log_info(
            f"Caso #{case.case_number}: {previous_status} -> {status.value}",
            case_id=case.id,
            action="status_changed",
            from_status=previous_status,
            to_status=status.value,
        )

        document = None
        if status is CaseStatus.RESOLVED:
            document = self._render("acta de entrega", case, render_delivery_certificate)
        return CaseDocument(case=case, document=document)

    # =========================================================
    # EDICIÓN / BORRADO
    # =========================================================

    def edit_case(self, case_id: str, fields: Mapping[str, Any]) -> CaseOut:
        """
        Edita datos del caso. No permite tocar identidad, fecha de ingreso,
        numeración ni campos de estado, ni vaciar campos obligatorios.

        Raises:
            ProtectedFieldException
            MissingFieldException
            ValidationException: campos desconocidos o de tipo incorrecto
            CaseNotFoundException
        """
        blocked = (LOCKED_FIELDS | STATUS_FIELDS).intersection(fields)
        if blocked:
            raise ProtectedFieldException(sorted(blocked))

        cleaned = {
            name: _clean_required(fields, name) for name in REQUIRED_FIELDS if name in fields
        }

        patch = CasePatch.from_fields({**fields, **cleaned})
        updated = self.repository.update(case_id, patch)
        if updated is None:
            raise CaseNotFoundException(case_id)

        self._log_info(
            "Caso editado",
            case_id=case_id,
            action="case_edited",
            fields=sorted(patch.changes()),
        )
        return CaseOut.model_validate(updated)

    def delete_case(self, case_id: str) -> None:
        if not self.repository.delete(case_id):
            raise CaseNotFoundException(case_id)
        self._log_info("Caso eliminado", case_id=case_id, action="case_deleted")

    # =========================================================
    # DOCUMENTOS BAJO DEMANDA
    # =========================================================

    def intake_receipt(self, case_id: str) -> CaseDocument:
        case = self.get_case(case_id)
        return CaseDocument(case, self._render("registro de ingreso", case, render_intake_receipt))

    def delivery_certificate(self, case_id: str) -> CaseDocument:
        """
        Raises:
            CaseNotResolvedException: el acta solo existe para casos resueltos
        """
        case = self.get_case(case_id)
        if case.status is not CaseStatus.RESOLVED:
            raise CaseNotResolvedException(case_id, case.status.value)
        return CaseDocument(case, self._render("acta de entrega", case, render_delivery_certificate))

    def listing_report(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> bytes:
        cases = self.list_cases(status=status, search=search)
        logo = self.logo_loader()
        try:
            document = render_listing_report(
                cases, self.branding, logo, generated_at=self.clock()
            )
        except Exception as e:
            raise self._handle_exception(
                DocumentGenerationException("listado de impresoras", original_error=e),
                "document_rendered",
            )

        self._log_info(
            "Listado generado",
            action="document_rendered",
            document="listado de impresoras",
            total=len(cases),
        )
        return document

    # =========================================================
    # INTERNOS
    # =========================================================

    def _get_or_404(self, case_id: str) -> PrinterCase:
        case = self.repository.get_by_id(case_id)
        if case is None:
            raise CaseNotFoundException(case_id)
        return case

    def _load_configured_logo(self) -> Optional[bytes]:
        return load_logo(
            self.settings.logo_source,
            timeout=self.settings.logo_timeout_seconds,
            logger=self.logger,
        )

    def _render(self, name: str, case: CaseOut, renderer: Callable[..., bytes]) -> bytes:
        """Carga el logo una vez y genera el documento del caso."""
        logo = self.logo_loader()
        try:
            document = renderer(case, self.branding, logo)
        except PrinterRepairException as e:
            raise self._handle_exception(e, "document_rendered", case_id=case.id)
        except Exception as e:
            raise self._handle_exception(
                DocumentGenerationException(name, original_error=e),
                "document_rendered",
                case_id=case.id,
            )

        self._log_info(
            f"Documento generado: {name}",
            case_id=case.id,
            action="document_rendered",
            document=name,
            size_bytes=len(document),
        )
        return document


def _clean_required(fields: Mapping[str, Any], name: str) -> str:
    value = fields.get(name)
    if value is not None and not isinstance(value, str):
        raise ValidationException(f"El campo '{name}' debe ser texto", details={"field": name})
    if value is None or not value.strip():
        raise MissingFieldException(name)
    return value.strip()
