"""
Servicio base.

Proporciona funcionalidad común a todos los servicios:
- Logging estructurado
- Manejo de excepciones
- Acceso a base de datos
"""
from typing import Optional

from sqlalchemy.orm import Session

from printer_repair.core.exceptions import PrinterRepairException
from printer_repair.core.logger import StructuredLogger, get_logger


class BaseService:
    """
    Clase base para todos los servicios.

    Los servicios encapsulan la lógica de negocio y orquestan
    operaciones entre repositorio, máquina de estados y documentos.
    """

    def __init__(
        self,
        db: Session,
        logger: Optional[StructuredLogger] = None
    ):
        """
        Args:
            db: Sesión de base de datos
            logger: Logger estructurado (opcional)
        """
        self.db = db
        self.logger = logger or get_logger()

    def _log_info(self, message: str, **kwargs):
        self.logger.info(message, **kwargs)

    def _log_error(self, message: str, error: Optional[Exception] = None, **kwargs):
        self.logger.error(message, error=error, **kwargs)

    def _handle_exception(
        self,
        error: Exception,
        context: str,
        case_id: Optional[str] = None
    ) -> PrinterRepairException:
        """
        Registra la excepción y la devuelve dentro de la jerarquía del sistema.

        Args:
            error: Excepción original
            context: Operación donde ocurrió
            case_id: ID del caso (si aplica)

        Returns:
            PrinterRepairException (la misma si ya lo era)
        """
        if isinstance(error, PrinterRepairException):
            self._log_error(
                f"Error en {context}",
                error=error,
                case_id=case_id,
                action=context,
                error_code=error.code,
            )
            return error

        self._log_error(
            f"Error inesperado en {context}",
            error=error,
            case_id=case_id,
            action=context,
        )
        return PrinterRepairException(
            code="INTERNAL_ERROR",
            message=f"Error interno en {context}",
            details={"context": context},
            original_error=error
        )
