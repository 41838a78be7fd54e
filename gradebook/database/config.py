"""
Configuración de base de datos

Lee la URL de conexión de variables de entorno:
- DATABASE_URL: URL SQLAlchemy (default: sqlite:///./gradebook.db)
- DB_ECHO: "true" para registrar el SQL emitido
"""
import logging
import os
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .base import Base

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./gradebook.db"


class DatabaseConfig:
    """Engine y session factory de SQLAlchemy"""

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        self.database_url = database_url or os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
        if echo is None:
            echo = os.getenv("DB_ECHO", "false").lower() == "true"

        engine_kwargs = {"echo": echo}
        if self.database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in self.database_url or self.database_url == "sqlite://":
                # Una sola conexión para que la BD en memoria sobreviva entre sesiones
                engine_kwargs["poolclass"] = StaticPool

        self.engine: Engine = create_engine(self.database_url, **engine_kwargs)
        self.SessionLocal = sessionmaker(bind=self.engine, autocommit=False, autoflush=False)

        logger.info(
            "Database configured",
            extra={"dialect": self.engine.dialect.name}
        )

    def create_tables(self) -> None:
        # Importa los modelos para registrarlos en Base.metadata
        from . import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)

    def get_session(self) -> Session:
        return self.SessionLocal()


_db_config: Optional[DatabaseConfig] = None


def get_db_config() -> DatabaseConfig:
    global _db_config
    if _db_config is None:
        _db_config = DatabaseConfig()
    return _db_config


def init_database(database_url: Optional[str] = None, echo: Optional[bool] = None) -> DatabaseConfig:
    """Inicializa (o reemplaza) la configuración global y crea las tablas"""
    global _db_config
    _db_config = DatabaseConfig(database_url=database_url, echo=echo)
    _db_config.create_tables()
    return _db_config


def get_db_session() -> Generator[Session, None, None]:
    """Dependency de FastAPI: una sesión por request"""
    session = get_db_config().get_session()
    try:
        yield session
    finally:
        session.close()
