from pathlib import Path

from dotenv import load_dotenv

from printer_repair.core.config import get_settings
from printer_repair.core.database import Base, build_engine
from printer_repair.models.case import PrinterCase  # noqa: F401, E402

BASE_DIR = Path(__file__).resolve().parent.parent.parent
load_dotenv(BASE_DIR / ".env")
# =========================================================
# INIT DB
# =========================================================

def main():
    """
    Inicializa la base de datos:
    - Crea las tablas definidas en los modelos
    - Muestra las tablas registradas en SQLAlchemy

    Para esquemas gestionados con migraciones usar `alembic upgrade head`.
    """
    settings = get_settings()
    engine = build_engine(settings.database_url)

    Base.metadata.create_all(bind=engine)

    tables = sorted(Base.metadata.tables.keys())

    print(f"✅ Tablas creadas / registradas en {settings.database_url}:")
    for table in tables:
        print(f"   - {table}")

    print(f"\n📊 Total tablas: {len(tables)}")
    engine.dispose()


if __name__ == "__main__":
    main()
