from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from printer_repair.api.cases import router as cases_router
from printer_repair.core.config import Settings, get_settings
from printer_repair.core.database import Base, build_engine, build_session_factory
from printer_repair.core.exceptions import (
    CaseNotFoundException,
    PersistenceUnavailableException,
    PrinterRepairException,
    ValidationException,
)
from printer_repair.core.logger import configure_logging

import printer_repair.models.case  # noqa: F401  registra printer_cases en Base.metadata


# =========================================================
# ERRORES -> HTTP
# =========================================================

def _status_for(exc: PrinterRepairException) -> int:
    if isinstance(exc, ValidationException):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, CaseNotFoundException):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, PersistenceUnavailableException):
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PrinterRepairException)
    async def handle_domain_error(request: Request, exc: PrinterRepairException):
        return JSONResponse(status_code=_status_for(exc), content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        # Body o query mal formados: mismo formato y código que el resto de validaciones
        errors = [
            {"loc": [str(part) for part in e.get("loc", ())], "msg": e.get("msg")}
            for e in exc.errors()
        ]
        error = ValidationException("Solicitud inválida", details={"errors": errors})
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error.to_dict())


# =========================================================
# FASTAPI APP (ENTRYPOINT ASGI)
# =========================================================

def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    Construye la aplicación.

    El engine y la session factory se crean aquí y se guardan en app.state;
    las dependencias los leen de ahí (no hay engine global).

    Args:
        settings: Configuración (por defecto get_settings())
        engine: Engine ya construido (tests)
    """
    settings = settings or get_settings()
    logger = configure_logging(settings.log_file, settings.log_level, settings.log_format)
    engine = engine or build_engine(settings.database_url, echo=settings.debug)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        Base.metadata.create_all(bind=engine)
        logger.info(
            f"{settings.app_name} {settings.app_version} iniciado",
            action="startup",
            environment=settings.environment,
        )
        yield
        engine.dispose()
        logger.info("Servicio detenido", action="shutdown")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)

    _register_exception_handlers(app)
    app.include_router(cases_router)

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app


# uvicorn printer_repair.main:create_app --factory
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
