"""
Database package for the gradebook

Provides:
- SQLAlchemy database configuration
- Database session management
- Base model for ORM
- ORM models (GroupDB, StudentDB, PeriodRecordDB, StudentObservationDB)
- Repository pattern implementations
"""
from .config import DatabaseConfig, get_db_session, init_database, get_db_config
from .base import Base

# ORM Models
from .models import (
    GroupDB,
    StudentDB,
    PeriodRecordDB,
    StudentObservationDB,
)

# Repositories
from .repositories import (
    StudentRepository,
    GroupRepository,
    PeriodRecordRepository,
    ObservationRepository,
)

__all__ = [
    # Configuration
    "DatabaseConfig",
    "get_db_session",
    "init_database",
    "get_db_config",
    "Base",
    # ORM Models
    "GroupDB",
    "StudentDB",
    "PeriodRecordDB",
    "StudentObservationDB",
    # Repositories
    "StudentRepository",
    "GroupRepository",
    "PeriodRecordRepository",
    "ObservationRepository",
]
