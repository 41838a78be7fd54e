"""
Aplicación FastAPI del registro académico

Variables de entorno:
- DATABASE_URL: URL de la base de datos (ver database/config.py)
- LOG_LEVEL: nivel de logging (default: INFO)
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from ..database.config import init_database
from .exceptions import GradebookAPIException, gradebook_exception_handler
from .routers import dashboard, grades, groups, metrics, observations, period_records

logger = logging.getLogger(__name__)


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(database_url: Optional[str] = None) -> FastAPI:
    """
    Construye la aplicación.

    Args:
        database_url: URL de la BD; si es None se usa DATABASE_URL
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_database(database_url)
        logger.info("Gradebook API started")
        yield
        logger.info("Gradebook API stopped")

    app = FastAPI(
        title="Gradebook API",
        description="Registro académico: calificaciones ponderadas y clasificación de riesgo",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_exception_handler(GradebookAPIException, gradebook_exception_handler)

    app.include_router(groups.router, prefix="/api/v1")
    app.include_router(period_records.router, prefix="/api/v1")
    app.include_router(period_records.admin_router, prefix="/api/v1")
    app.include_router(grades.router, prefix="/api/v1")
    app.include_router(dashboard.router, prefix="/api/v1")
    app.include_router(observations.router, prefix="/api/v1")
    app.include_router(metrics.router)

    @app.get("/health", tags=["Monitoring"])
    async def health():
        return {"status": "ok"}

    return app


configure_logging()
app = create_app()
