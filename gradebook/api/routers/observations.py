"""
Router para observaciones de conducta de un estudiante
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import SQLAlchemyError

from ...database.repositories import ObservationRepository, StudentRepository
from ...models.observation import StudentObservation
from ..deps import get_observation_repository, get_student_repository
from ..exceptions import DatabaseOperationError, ObservationNotFoundError, StudentNotFoundError
from ..schemas.common import APIResponse
from ..schemas.gradebook import FollowUpRequest, ObservationCreateRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/students/{student_id}/observations", tags=["Observations"])


def _ensure_student(student_repo: StudentRepository, student_id: str) -> None:
    if student_repo.get_by_id(student_id) is None:
        raise StudentNotFoundError(student_id)


@router.post(
    "",
    response_model=APIResponse[StudentObservation],
    status_code=status.HTTP_201_CREATED,
    summary="Registrar observación",
)
def create_observation(
    student_id: str,
    request: ObservationCreateRequest,
    student_repo: StudentRepository = Depends(get_student_repository),
    observation_repo: ObservationRepository = Depends(get_observation_repository),
):
    _ensure_student(student_repo, student_id)
    try:
        observation = observation_repo.create(student_id=student_id, **request.model_dump())
    except SQLAlchemyError as e:
        raise DatabaseOperationError("create observation", details=str(e))
    return APIResponse(message="Observation recorded", data=StudentObservation.model_validate(observation))


@router.get("", response_model=APIResponse[List[StudentObservation]], summary="Observaciones del estudiante")
def list_observations(
    student_id: str,
    student_repo: StudentRepository = Depends(get_student_repository),
    observation_repo: ObservationRepository = Depends(get_observation_repository),
):
    _ensure_student(student_repo, student_id)
    rows = observation_repo.get_by_student(student_id)
    return APIResponse(data=[StudentObservation.model_validate(o) for o in rows])


@router.put(
    "/{observation_id}/follow-up",
    response_model=APIResponse[StudentObservation],
    summary="Agregar seguimiento (y cerrar)",
)
def add_follow_up(
    student_id: str,
    observation_id: str,
    request: FollowUpRequest,
    observation_repo: ObservationRepository = Depends(get_observation_repository),
):
    observation = observation_repo.get_by_id(observation_id)
    if observation is None or observation.student_id != student_id:
        raise ObservationNotFoundError(observation_id)
    try:
        observation = observation_repo.add_follow_up(observation_id, request.update, request.is_closing)
    except SQLAlchemyError as e:
        raise DatabaseOperationError("add follow-up", details=str(e))

    if request.is_closing:
        logger.info("Observation closed", extra={"student_id": student_id, "observation_id": observation_id})
    return APIResponse(message="Follow-up added", data=StudentObservation.model_validate(observation))
