"""
Sistema de logging estructurado.

Formato JSON (o texto plano) con trazabilidad por caso.
"""
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional


class StructuredLogger:
    """
    Logger estructurado.

    Cada log incluye:
    - timestamp ISO8601
    - level (INFO/WARNING/ERROR)
    - case_id (si aplica)
    - action (tipo de acción)
    - message
    - extra_data (opcional)
    """

    def __init__(
        self,
        name: str,
        log_file: Optional[Path] = None,
        level: str = "INFO",
        log_format: str = "json",
    ):
        """
        Args:
            name: Nombre del logger (ej: "printer_repair")
            log_file: Ruta al archivo de log (opcional)
            level: Nivel mínimo
            log_format: "json" o "text"
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self.logger.handlers = []
        self.logger.propagate = False

        formatter: logging.Formatter = JsonFormatter() if log_format == "json" else TextFormatter()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def info(
        self, message: str, case_id: Optional[str] = None, action: Optional[str] = None, **extra
    ):
        self._log(logging.INFO, message, case_id, action, extra)

    def warning(
        self, message: str, case_id: Optional[str] = None, action: Optional[str] = None, **extra
    ):
        self._log(logging.WARNING, message, case_id, action, extra)

    def error(
        self,
        message: str,
        case_id: Optional[str] = None,
        action: Optional[str] = None,
        error: Optional[Exception] = None,
        **extra,
    ):
        if error:
            extra["error_type"] = type(error).__name__
            extra["error_message"] = str(error)
        self._log(logging.ERROR, message, case_id, action, extra)

    def _log(
        self,
        level: int,
        message: str,
        case_id: Optional[str],
        action: Optional[str],
        extra: dict[str, Any],
    ):
        log_data = {"case_id": case_id, "action": action, **extra}

        # Filtrar None values
        log_data = {k: v for k, v in log_data.items() if v is not None}

        self.logger.log(level, message, extra={"data": log_data})


class JsonFormatter(logging.Formatter):
    """Formatter que convierte logs a JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if hasattr(record, "data"):
            log_obj.update(record.data)

        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_obj, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Formato legible para desarrollo: `LEVEL logger: message key=value`."""

    def format(self, record: logging.LogRecord) -> str:
        line = f"{record.levelname} {record.name}: {record.getMessage()}"
        data = getattr(record, "data", None)
        if data:
            line += " " + " ".join(f"{k}={v}" for k, v in data.items())
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


_default_logger: Optional[StructuredLogger] = None


def configure_logging(
    log_file: Optional[Path] = None, level: str = "INFO", log_format: str = "json"
) -> StructuredLogger:
    """Reconfigura el logger por defecto (se llama en el arranque)."""
    global _default_logger
    _default_logger = StructuredLogger("printer_repair", log_file, level, log_format)
    return _default_logger


def get_logger() -> StructuredLogger:
    """Obtiene el logger por defecto; solo consola si no se configuró."""
    global _default_logger

    if _default_logger is None:
        _default_logger = StructuredLogger("printer_repair")

    return _default_logger
