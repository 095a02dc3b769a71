"""
Configuración del sistema con Pydantic Settings.

Centraliza:
- Entorno y conexión a base de datos
- Datos fijos del negocio que aparecen en los documentos
- Origen del logo
- Zona horaria para fechas visibles
- Logging
"""
from pathlib import Path
from typing import Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Configuración global del servicio técnico.

    Todas las variables se pueden sobrescribir con variables de entorno.
    """

    # =========================================================
    # ENTORNO
    # =========================================================

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Entorno de ejecución"
    )

    debug: bool = Field(default=False, description="Modo debug (solo para development)")

    app_name: str = Field(default="Gestión de Impresoras")

    app_version: str = Field(default="1.0.0")

    # =========================================================
    # DATABASE
    # =========================================================

    database_url: str = Field(
        default="sqlite:///./runtime/db/printer_repair.db",
        description="URL de conexión a base de datos",
    )

    # =========================================================
    # DOCUMENTOS
    # =========================================================

    business_title: str = Field(
        default="Servicio Técnico de Impresoras",
        description="Nombre del negocio (metadatos del PDF)",
    )

    business_contact_line: str = Field(
        default="601 000-0000    •    57 300-0000000    •    ventas@example.com    •    www.example.com",
        description="Línea de contacto al pie de cada documento",
    )

    logo_source: Optional[str] = Field(
        default="assets/logo.png",
        description="Ruta local o URL http(s) del logo; vacío para no usar logo",
    )

    logo_timeout_seconds: int = Field(
        default=5, ge=1, le=60, description="Timeout al descargar el logo por HTTP"
    )

    timezone: str = Field(
        default="America/Bogota",
        description="Zona horaria en la que se muestran las fechas",
    )

    # =========================================================
    # OBSERVABILIDAD
    # =========================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    log_format: Literal["json", "text"] = Field(default="json", description="Formato de logs")

    logs_dir: Optional[Path] = Field(
        default=None, description="Directorio de logs (solo consola si no se define)"
    )

    # =========================================================
    # VALIDACIONES CUSTOM
    # =========================================================

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Valida formato de URL de base de datos."""
        if not v.startswith(("sqlite://", "postgresql://", "postgresql+psycopg2://")):
            raise ValueError(
                "database_url debe empezar con sqlite://, postgresql:// o postgresql+psycopg2://"
            )
        return v

    @field_validator("debug")
    @classmethod
    def validate_debug(cls, v: bool, info) -> bool:
        """Debug debe estar deshabilitado en producción."""
        if info.data.get("environment") == "production" and v:
            raise ValueError("DEBUG debe estar deshabilitado en producción")
        return v

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """La zona debe existir en la base IANA (tzdata)."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Zona horaria desconocida: {v}") from None
        return v

    @field_validator("logo_source")
    @classmethod
    def blank_logo_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    # =========================================================
    # PROPIEDADES COMPUTADAS
    # =========================================================

    @property
    def uses_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def log_file(self) -> Optional[Path]:
        if self.logs_dir is None:
            return None
        return self.logs_dir / "printer_repair.log"

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_assignment=True,
        extra="ignore",
    )


# =========================================================
# INSTANCIA GLOBAL (SINGLETON)
# =========================================================

_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Obtiene la instancia global de configuración (singleton).

    Solo debe llamarse en el arranque (main / scripts); los servicios reciben
    la configuración por parámetro.
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """Recarga la configuración (útil para tests)."""
    global _settings
    _settings = None
    return get_settings()
