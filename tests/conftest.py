"""Fixtures pytest: BD en memoria, servicio y cliente HTTP."""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from printer_repair.core.config import Settings
from printer_repair.core.database import Base
from printer_repair.core.logger import StructuredLogger
from printer_repair.main import create_app
from printer_repair.models.case import PrinterCase  # noqa: F401
from printer_repair.reports.pdf import Branding
from printer_repair.services.case_service import CaseService


@pytest.fixture
def settings():
    """Configuración aislada del .env local."""
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        logo_source=None,
        business_title="Taller de Prueba",
        business_contact_line="601 000-0000 - pruebas@example.com",
    )


@pytest.fixture
def branding(settings):
    return Branding(
        business_title=settings.business_title,
        contact_line=settings.business_contact_line,
        timezone=settings.timezone,
    )


@pytest.fixture(scope="function")
def db_session():
    """Sesión DB en memoria para tests."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, expire_on_commit=False)
    session = Session()

    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def log_file(tmp_path):
    return tmp_path / "printer_repair.log"


@pytest.fixture
def logger(log_file):
    return StructuredLogger("test.printer_repair", log_file)


@pytest.fixture
def service(db_session, settings, logger):
    return CaseService(db_session, settings, logger=logger, logo_loader=lambda: None)


@pytest.fixture
def client(settings):
    """
    TestClient sobre una BD en memoria compartida entre hilos (StaticPool):
    el servidor de pruebas atiende en otro hilo que el test.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    app = create_app(settings, engine=engine)
    app.state.logo_loader = lambda: None

    with TestClient(app) as test_client:
        yield test_client
