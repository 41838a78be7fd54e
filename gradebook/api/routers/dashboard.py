"""
Router del tablero y estadísticas de grupo
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...core.aggregation import (
    GroupStatistics,
    calculate_group_averages,
    calculate_group_statistics,
    calculate_overall_participation,
    find_at_risk_students,
)
from ...core.metrics import grade_calculations_total
from ...database.repositories import GroupRepository, ObservationRepository, PeriodRecordRepository
from ..deps import (
    get_group_or_404,
    get_group_repository,
    get_observation_repository,
    get_period_repository,
    parse_partial,
    to_group,
)
from ..schemas.common import APIResponse
from ..schemas.gradebook import DashboardResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Dashboard"])


@router.get(
    "/dashboard",
    response_model=APIResponse[DashboardResponse],
    summary="Tablero del parcial activo",
    description="Promedios por grupo, estudiantes en riesgo y participación del grupo activo",
)
def get_dashboard(
    partial_id: str = Query("p1", description="Parcial activo"),
    active_group_id: Optional[str] = Query(None, description="Grupo activo para la tasa de participación"),
    group_repo: GroupRepository = Depends(get_group_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
):
    partial = parse_partial(partial_id)
    groups = [to_group(g) for g in group_repo.get_all()]
    bundles = period_repo.get_bundles_for_partial([g.id for g in groups], partial)

    overall_participation = None
    if active_group_id is not None:
        active_group = to_group(get_group_or_404(group_repo, active_group_id))
        overall_participation = calculate_overall_participation(
            active_group,
            period_repo.get_bundles_for_group(active_group_id).values(),
        )

    at_risk = find_at_risk_students(groups, bundles)
    grade_calculations_total.labels(view="dashboard").inc(sum(len(g.students) for g in groups))

    logger.info(
        "Dashboard computed",
        extra={
            "partial_id": partial.value,
            "group_count": len(groups),
            "at_risk_count": len(at_risk),
        }
    )

    return APIResponse(
        data=DashboardResponse(
            partial_id=partial.value,
            group_averages=calculate_group_averages(groups, bundles),
            at_risk_students=at_risk,
            overall_participation=overall_participation,
        )
    )


@router.get(
    "/groups/{group_id}/periods/{partial_id}/statistics",
    response_model=APIResponse[GroupStatistics],
    summary="Estadísticas del grupo en un parcial",
)
def get_group_statistics(
    group_id: str,
    partial_id: str,
    group_repo: GroupRepository = Depends(get_group_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
    observation_repo: ObservationRepository = Depends(get_observation_repository),
):
    partial = parse_partial(partial_id)
    group = to_group(get_group_or_404(group_repo, group_id))
    stats = calculate_group_statistics(
        group,
        period_repo.get_bundle(group_id, partial),
        observation_repo.get_by_students(s.id for s in group.students),
    )
    grade_calculations_total.labels(view="statistics").inc(stats.student_count)
    return APIResponse(data=stats)
