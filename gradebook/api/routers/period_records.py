"""
Router para la captura de datos de un parcial

Aquí vive la validación de captura (pesos <= 100, entregas no negativas);
el motor de calificaciones asume datos ya saneados.
"""
import logging
from typing import Callable

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError

from ...core.constants import MAX_GRADE
from ...core.metrics import data_entry_rejections_total
from ...database.repositories import GroupRepository, PeriodRecordRepository
from ...models.period import PeriodRecordBundle
from ..deps import ensure_group_exists, get_group_repository, get_period_repository, parse_partial
from ..exceptions import DatabaseOperationError, InvalidCriteriaError, InvalidGradeEntryError
from ..schemas.common import APIResponse
from ..schemas.gradebook import (
    ActivitiesUpdateRequest,
    ActivityRecordRequest,
    CriteriaUpdateRequest,
    DailyRecordRequest,
    FeedbackRequest,
    GradeEntryRequest,
    RecoveryGradeRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/groups/{group_id}/periods/{partial_id}", tags=["Period Records"])
admin_router = APIRouter(tags=["Period Records"])


def _write(operation: str, fn: Callable[[], object]) -> None:
    try:
        fn()
    except SQLAlchemyError as e:
        raise DatabaseOperationError(operation, details=str(e))


def _bundle_response(
    period_repo: PeriodRecordRepository,
    group_id: str,
    partial_id: str,
    message: str,
) -> APIResponse[PeriodRecordBundle]:
    return APIResponse(message=message, data=period_repo.get_bundle(group_id, partial_id))


@router.get("", response_model=APIResponse[PeriodRecordBundle], summary="Registros del parcial")
def get_period_records(
    group_id: str,
    partial_id: str,
    group_repo: GroupRepository = Depends(get_group_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
):
    partial = parse_partial(partial_id)
    ensure_group_exists(group_repo, group_id)
    # El paquete se crea vacío la primera vez que se accede
    period_repo.get_or_create(group_id, partial)
    return _bundle_response(period_repo, group_id, partial, "Period records loaded")


@router.put("/criteria", response_model=APIResponse[PeriodRecordBundle], summary="Definir criterios")
def update_criteria(
    group_id: str,
    partial_id: str,
    request: CriteriaUpdateRequest,
    group_repo: GroupRepository = Depends(get_group_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
):
    partial = parse_partial(partial_id)
    ensure_group_exists(group_repo, group_id)

    total_weight = sum(c.weight for c in request.criteria)
    if total_weight > MAX_GRADE:
        data_entry_rejections_total.labels(reason="weights_over_100").inc()
        raise InvalidCriteriaError(
            f"Criteria weights add up to {total_weight:g}, maximum is 100",
            details={"total_weight": total_weight},
        )

    ids = [c.id for c in request.criteria]
    if len(ids) != len(set(ids)):
        data_entry_rejections_total.labels(reason="duplicate_criterion").inc()
        raise InvalidCriteriaError("Criterion ids must be unique", details={"criterion_ids": ids})

    criteria = [c.to_criterion() for c in request.criteria]
    _write("set criteria", lambda: period_repo.set_criteria(group_id, partial, criteria))
    logger.info(
        "Criteria updated",
        extra={"group_id": group_id, "partial_id": partial.value, "criteria_count": len(criteria)}
    )
    return _bundle_response(period_repo, group_id, partial, "Criteria updated")


@router.put(
    "/grades/{student_id}/{criterion_id}",
    response_model=APIResponse[PeriodRecordBundle],
    summary="Capturar entrega de un criterio manual",
)
def update_grade(
    group_id: str,
    partial_id: str,
    student_id: str,
    criterion_id: str,
    request: GradeEntryRequest,
    group_repo: GroupRepository = Depends(get_group_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
):
    partial = parse_partial(partial_id)
    ensure_group_exists(group_repo, group_id)

    if request.delivered is not None and request.delivered < 0:
        data_entry_rejections_total.labels(reason="negative_delivered").inc()
        raise InvalidGradeEntryError(
            "Delivered count cannot be negative",
            details={"student_id": student_id, "criterion_id": criterion_id, "delivered": request.delivered},
        )

    _write(
        "set grade",
        lambda: period_repo.set_grade(group_id, partial, student_id, criterion_id, request.delivered),
    )
    return _bundle_response(period_repo, group_id, partial, "Grade updated")


@router.put("/attendance/{date}", response_model=APIResponse[PeriodRecordBundle], summary="Pase de lista")
def update_attendance(
    group_id: str,
    partial_id: str,
    date: str,
    request: DailyRecordRequest,
    group_repo: GroupRepository = Depends(get_group_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
):
    partial = parse_partial(partial_id)
    ensure_group_exists(group_repo, group_id)
    _write("set attendance", lambda: period_repo.set_attendance(group_id, partial, date, request.entries))
    return _bundle_response(period_repo, group_id, partial, "Attendance updated")


@router.put("/participations/{date}", response_model=APIResponse[PeriodRecordBundle], summary="Participaciones del día")
def update_participations(
    group_id: str,
    partial_id: str,
    date: str,
    request: DailyRecordRequest,
    group_repo: GroupRepository = Depends(get_group_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
):
    partial = parse_partial(partial_id)
    ensure_group_exists(group_repo, group_id)
    _write("set participations", lambda: period_repo.set_participations(group_id, partial, date, request.entries))
    return _bundle_response(period_repo, group_id, partial, "Participations updated")


@router.put("/activities", response_model=APIResponse[PeriodRecordBundle], summary="Actividades del parcial")
def update_activities(
    group_id: str,
    partial_id: str,
    request: ActivitiesUpdateRequest,
    group_repo: GroupRepository = Depends(get_group_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
):
    partial = parse_partial(partial_id)
    ensure_group_exists(group_repo, group_id)
    _write("set activities", lambda: period_repo.set_activities(group_id, partial, request.activities))
    return _bundle_response(period_repo, group_id, partial, "Activities updated")


@router.put(
    "/activity-records/{student_id}/{activity_id}",
    response_model=APIResponse[PeriodRecordBundle],
    summary="Marcar entrega de actividad",
)
def update_activity_record(
    group_id: str,
    partial_id: str,
    student_id: str,
    activity_id: str,
    request: ActivityRecordRequest,
    group_repo: GroupRepository = Depends(get_group_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
):
    partial = parse_partial(partial_id)
    ensure_group_exists(group_repo, group_id)
    _write(
        "set activity record",
        lambda: period_repo.set_activity_record(group_id, partial, student_id, activity_id, request.delivered),
    )
    return _bundle_response(period_repo, group_id, partial, "Activity record updated")


@router.put(
    "/recovery-grades/{student_id}",
    response_model=APIResponse[PeriodRecordBundle],
    summary="Calificación de recuperación",
)
def update_recovery_grade(
    group_id: str,
    partial_id: str,
    student_id: str,
    request: RecoveryGradeRequest,
    group_repo: GroupRepository = Depends(get_group_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
):
    partial = parse_partial(partial_id)
    ensure_group_exists(group_repo, group_id)
    _write(
        "set recovery grade",
        lambda: period_repo.set_recovery_grade(group_id, partial, student_id, request.grade, request.applied),
    )
    return _bundle_response(period_repo, group_id, partial, "Recovery grade updated")


@router.put(
    "/feedbacks/{student_id}",
    response_model=APIResponse[PeriodRecordBundle],
    summary="Retroalimentación del estudiante",
)
def update_feedback(
    group_id: str,
    partial_id: str,
    student_id: str,
    request: FeedbackRequest,
    group_repo: GroupRepository = Depends(get_group_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
):
    partial = parse_partial(partial_id)
    ensure_group_exists(group_repo, group_id)
    _write("set feedback", lambda: period_repo.set_feedback(group_id, partial, student_id, request.feedback))
    return _bundle_response(period_repo, group_id, partial, "Feedback updated")


@admin_router.delete("/period-records", response_model=APIResponse[dict], summary="Reiniciar registros")
def reset_period_records(period_repo: PeriodRecordRepository = Depends(get_period_repository)):
    deleted = 0

    def reset():
        nonlocal deleted
        deleted = period_repo.reset_all()

    _write("reset period records", reset)
    return APIResponse(message="All period records deleted", data={"deleted": deleted})
