"""
Persistencia de casos de servicio técnico.

Única puerta a la tabla printer_cases. Recibe la sesión por constructor:
nunca la busca en un global.
"""
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm import Session

from printer_repair.core.exceptions import (
    PersistenceException,
    PersistenceUnavailableException,
)
from printer_repair.models.case import PrinterCase, utcnow
from printer_repair.models.case_schemas import CasePatch, CaseStatus


class CaseRepository:
    """Repositorio de casos sobre una sesión SQLAlchemy."""

    def __init__(self, db: Session):
        self.db = db

    # =========================================================
    # LECTURA
    # =========================================================

    def list(
        self,
        status: Optional[CaseStatus] = None,
        search: Optional[str] = None,
    ) -> List[PrinterCase]:
        """
        Lista casos ordenados por fecha de ingreso (más recientes primero).

        Args:
            status: Filtra por estado exacto
            search: Texto buscado (sin distinguir mayúsculas) en referencia,
                cliente, NIT/CC y teléfono
        """
        try:
            query = self.db.query(PrinterCase)

            if status is not None:
                query = query.filter(PrinterCase.status == status.value)

            term = (search or "").strip().lower()
            if term:
                pattern = f"%{term}%"
                query = query.filter(
                    or_(
                        func.lower(PrinterCase.reference).like(pattern),
                        func.lower(PrinterCase.client_name).like(pattern),
                        func.lower(PrinterCase.client_tax_id).like(pattern),
                        func.lower(PrinterCase.phone).like(pattern),
                    )
                )

            return query.order_by(PrinterCase.intake_at.desc()).all()
        except SQLAlchemyError as e:
            raise self._translate(e, "listar casos")

    def get_by_id(self, case_id: str) -> Optional[PrinterCase]:
        try:
            return (
                self.db.query(PrinterCase)
                .filter(PrinterCase.id == case_id)
                .first()
            )
        except SQLAlchemyError as e:
            raise self._translate(e, "consultar caso")

    def next_case_number(self) -> int:
        """
        Siguiente número consecutivo: máximo actual + 1, o 1 si no hay casos.

        Se deriva de la tabla, no de un contador. Dos altas simultáneas
        pueden leer el mismo máximo; la restricción UNIQUE rechaza la segunda.
        """
        current = self.db.query(func.max(PrinterCase.case_number)).scalar()
        return (current or 0) + 1

    # =========================================================
    # ESCRITURA
    # =========================================================

    def create(
        self,
        reference: str,
        client_name: str,
        client_tax_id: str,
        phone: str,
        notes: Optional[str] = None,
    ) -> PrinterCase:
        """
        Crea un caso en estado pending con número consecutivo.

        Raises:
            PersistenceUnavailableException: BD inalcanzable
            PersistenceException: escritura rechazada
        """
        try:
            case = PrinterCase(
                case_number=self.next_case_number(),
                reference=reference,
                client_name=client_name,
                client_tax_id=client_tax_id,
                phone=phone,
                notes=notes or "",
                intake_at=utcnow(),
                status=CaseStatus.PENDING.value,
                resolution_note="",
                process_note="",
            )
            self.db.add(case)
            self.db.commit()
            self.db.refresh(case)
            return case
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._translate(e, "crear caso")

    def update(self, case_id: str, patch: CasePatch) -> Optional[PrinterCase]:
        """
        Aplica campo a campo los valores presentes en el parche.

        Returns:
            Caso actualizado o None si no existe
        """
        case = self.get_by_id(case_id)
        if case is None:
            return None

        try:
            patch.apply_to(case)
            self.db.commit()
            self.db.refresh(case)
            return case
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._translate(e, "actualizar caso")

    def delete(self, case_id: str) -> bool:
        """Borrado físico. False si el caso no existe."""
        case = self.get_by_id(case_id)
        if case is None:
            return False

        try:
            self.db.delete(case)
            self.db.commit()
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            raise self._translate(e, "eliminar caso")

    # =========================================================
    # ERRORES
    # =========================================================

    @staticmethod
    def _translate(error: SQLAlchemyError, operation: str) -> PersistenceException:
        if isinstance(error, IntegrityError):
            return PersistenceException(
                f"La base de datos rechazó la operación: {operation}",
                details={"operation": operation},
                original_error=error,
            )
        if isinstance(error, (OperationalError, InterfaceError)) or (
            isinstance(error, DBAPIError) and error.connection_invalidated
        ):
            return PersistenceUnavailableException(
                f"Base de datos no disponible al {operation}",
                details={"operation": operation},
                original_error=error,
            )
        return PersistenceException(
            f"Error de base de datos al {operation}",
            details={"operation": operation},
            original_error=error,
        )
