"""
Router para calificaciones calculadas

Cada lectura recalcula desde los registros actuales: nada se cachea.
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Query

from ...core.aggregation import (
    SemesterGrade,
    StudentReport,
    build_student_report,
    calculate_semester_grades,
)
from ...core.grade_calculator import calculate_detailed_final_grade
from ...core.metrics import grade_calculations_total, risk_classifications_total
from ...core.risk_classifier import calculate_attendance_summary, get_student_risk_level
from ...database.repositories import GroupRepository, PeriodRecordRepository, StudentRepository
from ..deps import (
    get_group_or_404,
    get_group_repository,
    get_period_repository,
    get_student_repository,
    parse_partial,
    to_group,
)
from ..exceptions import StudentNotFoundError
from ..schemas.common import APIResponse
from ..schemas.gradebook import StudentGradeResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Grades"])


@router.get(
    "/groups/{group_id}/periods/{partial_id}/students/{student_id}/grade",
    response_model=APIResponse[StudentGradeResponse],
    summary="Calificación y riesgo de un estudiante",
    description="Calificación final ponderada, desglose por criterio y nivel de riesgo del parcial",
)
def get_student_grade(
    group_id: str,
    partial_id: str,
    student_id: str,
    group_repo: GroupRepository = Depends(get_group_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
):
    partial = parse_partial(partial_id)
    group = get_group_or_404(group_repo, group_id)
    if not any(s.id == student_id for s in group.students):
        raise StudentNotFoundError(student_id)

    bundle = period_repo.get_bundle(group_id, partial)
    detailed = calculate_detailed_final_grade(student_id, bundle)
    risk = get_student_risk_level(detailed.final_grade, bundle.attendance, student_id)

    grade_calculations_total.labels(view="student").inc()
    risk_classifications_total.labels(level=risk.level.value).inc()

    return APIResponse(
        data=StudentGradeResponse(
            student_id=student_id,
            group_id=group_id,
            partial_id=partial.value,
            final_grade=detailed.final_grade,
            criteria_details=detailed.criteria_details,
            risk=risk,
            attendance=calculate_attendance_summary(bundle.attendance, student_id),
        )
    )


@router.get(
    "/groups/{group_id}/semester-evaluation",
    response_model=APIResponse[List[SemesterGrade]],
    summary="Evaluación semestral del grupo",
    description="Promedio de los parciales con calificaciones registradas, por estudiante",
)
def get_semester_evaluation(
    group_id: str,
    group_repo: GroupRepository = Depends(get_group_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
):
    group = get_group_or_404(group_repo, group_id)
    bundles = period_repo.get_bundles_for_group(group_id)

    students = sorted(group.students, key=lambda s: s.name)
    results = [calculate_semester_grades(s.id, bundles) for s in students]
    grade_calculations_total.labels(view="semester").inc(len(results))

    return APIResponse(data=results)


@router.get(
    "/students/{student_id}/report",
    response_model=APIResponse[StudentReport],
    summary="Reporte de un estudiante en todos sus grupos",
)
def get_student_report(
    student_id: str,
    partial_id: str = Query("p1", description="Parcial a reportar"),
    group_repo: GroupRepository = Depends(get_group_repository),
    student_repo: StudentRepository = Depends(get_student_repository),
    period_repo: PeriodRecordRepository = Depends(get_period_repository),
):
    partial = parse_partial(partial_id)
    if student_repo.get_by_id(student_id) is None:
        raise StudentNotFoundError(student_id)

    groups = group_repo.get_by_student(student_id)
    bundles = period_repo.get_bundles_for_partial([g.id for g in groups], partial)
    memberships = [(to_group(g), bundles.get(g.id)) for g in groups]

    report = build_student_report(student_id, memberships)
    grade_calculations_total.labels(view="report").inc(len(memberships))
    return APIResponse(data=report)
