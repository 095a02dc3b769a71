from pathlib import Path

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Construye el engine de base de datos.

    No hay engine global: main.py lo crea en el arranque y lo inyecta.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {
            "check_same_thread": False,
            "timeout": 30,
        }
        _ensure_sqlite_dir(database_url)

    engine = create_engine(
        database_url,
        echo=echo,
        connect_args=connect_args,
        pool_pre_ping=True,
    )

    if database_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            try:
                cursor.execute("PRAGMA journal_mode=WAL")
                result = cursor.fetchone()
                if result and result[0].upper() != "WAL":
                    cursor.execute("PRAGMA journal_mode=DELETE")
                cursor.execute("PRAGMA synchronous=NORMAL")
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.execute("PRAGMA busy_timeout=30000")
            finally:
                cursor.close()

    return engine


def _ensure_sqlite_dir(database_url: str) -> None:
    # sqlite:///./runtime/db/x.db -> ./runtime/db
    if "///" not in database_url:
        return
    path = database_url.split("///", 1)[1]
    if not path or path.startswith(":memory:"):
        return
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )


# =========================================================
# FASTAPI DEPENDENCY
# =========================================================

def get_db(request: Request):
    """
    Dependency para FastAPI.
    Una sesión por request, creada desde la factory registrada en app.state.

    NO hace commit automático: el repositorio confirma cada escritura.
    """
    SessionLocal = request.app.state.session_factory
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
