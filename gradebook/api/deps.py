"""
Dependencias de FastAPI: sesión de BD, repositorios y validación de rutas
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from ..database.config import get_db_session
from ..database.models import GroupDB
from ..database.repositories import GroupRepository, ObservationRepository, PeriodRecordRepository, StudentRepository
from ..models.group import Group
from ..models.period import PartialId
from .exceptions import GroupNotFoundError, InvalidPeriodError


def get_db(db: Session = Depends(get_db_session)) -> Session:
    return db


def get_group_repository(db: Session = Depends(get_db)) -> GroupRepository:
    return GroupRepository(db)


def get_student_repository(db: Session = Depends(get_db)) -> StudentRepository:
    return StudentRepository(db)


def get_period_repository(db: Session = Depends(get_db)) -> PeriodRecordRepository:
    return PeriodRecordRepository(db)


def get_observation_repository(db: Session = Depends(get_db)) -> ObservationRepository:
    return ObservationRepository(db)


def parse_partial(partial_id: str) -> PartialId:
    try:
        return PartialId(partial_id)
    except ValueError:
        raise InvalidPeriodError(partial_id)


def get_group_or_404(group_repo: GroupRepository, group_id: str) -> GroupDB:
    group = group_repo.get_by_id(group_id)
    if group is None:
        raise GroupNotFoundError(group_id)
    return group


def ensure_group_exists(group_repo: GroupRepository, group_id: str) -> None:
    """Como get_group_or_404 pero sin cargar la lista de estudiantes"""
    if not group_repo.exists(group_id):
        raise GroupNotFoundError(group_id)


def to_group(group: GroupDB) -> Group:
    """Convierte el ORM a la forma que consume el motor"""
    return Group.model_validate(group)
