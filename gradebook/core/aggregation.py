"""
Aggregation Layer - Vistas de grupo y de semestre

Aplica el Grade Calculator y el Risk Classifier sobre todos los estudiantes
de un grupo (promedios, estudiantes en riesgo, estadísticas) y sobre los tres
parciales de un estudiante (promedio semestral).

Funciones puras y totales: un paquete ausente o malformado se trata como
vacío (todos los conteos en cero), nunca como error.
"""
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple
import logging

from pydantic import BaseModel, Field

from ..models.criterion import CriteriaDetail
from ..models.group import Group
from ..models.observation import ObservationStats, StudentObservation
from ..models.period import PARTIALS, PartialId, PeriodRecordBundle
from ..models.risk import RiskLevel, StudentWithRisk
from .constants import (
    EMPTY_GROUP_AVERAGE,
    NO_DATA_ATTENDANCE_RATE,
    NO_DATA_PARTICIPATION_RATE,
    PARTICIPATION_BUCKETS,
    PASSING_GRADE,
    TOP_STUDENTS_LIMIT,
)
from .grade_calculator import (
    calculate_detailed_final_grade,
    calculate_final_grade,
    clamp_grade,
    participation_ratio,
)
from .risk_classifier import calculate_attendance_summary, get_student_risk_level, round_half_up

logger = logging.getLogger(__name__)

BundlesByGroup = Mapping[str, Optional[PeriodRecordBundle]]


# =============================================================================
# Resultados
# =============================================================================

class PeriodGrade(BaseModel):
    grade: float
    is_recovery: bool = False
    criteria_details: List[CriteriaDetail] = Field(default_factory=list)


class SemesterGrade(BaseModel):
    """Calificaciones de un estudiante en los tres parciales"""
    student_id: str
    p1: Optional[PeriodGrade] = None
    p2: Optional[PeriodGrade] = None
    p3: Optional[PeriodGrade] = None
    average: float = 0.0
    periods_counted: int = 0


class TopStudent(BaseModel):
    student_id: str
    name: str
    grade: float


class ParticipationBucket(BaseModel):
    name: str
    students: int = 0


class GroupStatistics(BaseModel):
    group_id: str
    subject: str
    student_count: int = 0
    average_grade: float = 0.0
    approved: int = 0
    failed: int = 0
    attendance_present: int = 0
    attendance_absent: int = 0
    attendance_rate: float = NO_DATA_ATTENDANCE_RATE
    risk_distribution: Dict[str, int] = Field(default_factory=dict)
    top_students: List[TopStudent] = Field(default_factory=list)
    participation_distribution: List[ParticipationBucket] = Field(default_factory=list)
    observation_stats: ObservationStats = Field(default_factory=ObservationStats)


class GroupInfo(BaseModel):
    subject: str
    semester: Optional[str] = None
    group_name: Optional[str] = None


class GroupGrade(BaseModel):
    group: str
    grade: float
    criteria_details: List[CriteriaDetail] = Field(default_factory=list)
    group_info: GroupInfo


class AttendanceCounts(BaseModel):
    p: int = 0
    a: int = 0
    total: int = 0


class StudentReport(BaseModel):
    """Contexto numérico de un estudiante para reportes y retroalimentación"""
    student_id: str
    average_grade: float = 0.0
    attendance: AttendanceCounts = Field(default_factory=AttendanceCounts)
    grades_by_group: List[GroupGrade] = Field(default_factory=list)


def _bundle_for(bundles: Mapping, key) -> PeriodRecordBundle:
    return PeriodRecordBundle.from_raw((bundles or {}).get(key))


# =============================================================================
# Vistas de grupo
# =============================================================================

def calculate_group_averages(
    groups: Sequence[Group],
    bundles_by_group: BundlesByGroup,
) -> Dict[str, float]:
    """
    Promedio de calificación final de cada grupo en el parcial activo.

    Un grupo sin estudiantes promedia 0.
    """
    averages: Dict[str, float] = {}
    for group in groups:
        bundle = _bundle_for(bundles_by_group, group.id)
        grades = [calculate_final_grade(s.id, bundle) for s in group.students]
        averages[group.id] = sum(grades) / len(grades) if grades else EMPTY_GROUP_AVERAGE
    return averages


def find_at_risk_students(
    groups: Sequence[Group],
    bundles_by_group: BundlesByGroup,
) -> List[StudentWithRisk]:
    """
    Estudiantes con riesgo medium o high en el parcial activo.

    Un estudiante inscrito en varios grupos aparece una sola vez: se conserva
    la clasificación del último grupo donde quedó en riesgo.
    """
    roster: Dict[str, StudentWithRisk] = {}
    for group in groups:
        bundle = _bundle_for(bundles_by_group, group.id)
        for student in group.students:
            final_grade = calculate_final_grade(student.id, bundle)
            risk = get_student_risk_level(final_grade, bundle.attendance, student.id)
            if risk.is_at_risk:
                roster[student.id] = StudentWithRisk(
                    **student.model_dump(),
                    calculated_risk=risk,
                    group_id=group.id,
                )

    logger.debug("At-risk roster computed", extra={"at_risk_count": len(roster)})
    return list(roster.values())


def calculate_overall_participation(
    group: Group,
    bundles: Iterable[Optional[PeriodRecordBundle]],
) -> int:
    """
    Tasa global de participación del grupo (0-100, entero).

    (asistencias presentes + participaciones) / (registros de asistencia +
    registros de participación) de los estudiantes del grupo. Sin datos
    devuelve 100.
    """
    student_ids = [s.id for s in group.students]
    opportunities = 0
    hits = 0
    for raw in bundles:
        bundle = PeriodRecordBundle.from_raw(raw)
        for record in (bundle.attendance, bundle.participations):
            for daily in record.values():
                for student_id in student_ids:
                    if student_id in daily:
                        opportunities += 1
                        if daily[student_id]:
                            hits += 1

    if opportunities == 0:
        return NO_DATA_PARTICIPATION_RATE
    return round_half_up(hits / opportunities * 100)


def _participation_bucket_index(rate: float) -> int:
    for index, (_, upper) in enumerate(PARTICIPATION_BUCKETS):
        if rate <= upper:
            return index
    return len(PARTICIPATION_BUCKETS) - 1


def calculate_group_statistics(
    group: Group,
    bundle: Optional[PeriodRecordBundle],
    observations_by_student: Optional[Mapping[str, List[StudentObservation]]] = None,
) -> GroupStatistics:
    """
    Estadísticas de un grupo en un parcial (aprobación, riesgo, asistencia).

    Las observaciones se cuentan completas, sin filtrar por parcial.
    """
    observations_by_student = observations_by_student or {}
    bundle = PeriodRecordBundle.from_raw(bundle)
    stats = GroupStatistics(
        group_id=group.id,
        subject=group.subject,
        student_count=len(group.students),
        risk_distribution={level.value: 0 for level in RiskLevel},
        participation_distribution=[ParticipationBucket(name=name) for name, _ in PARTICIPATION_BUCKETS],
    )

    graded: List[TopStudent] = []
    for student in group.students:
        final_grade = calculate_final_grade(student.id, bundle)
        graded.append(TopStudent(student_id=student.id, name=student.name, grade=final_grade))
        if final_grade >= PASSING_GRADE:
            stats.approved += 1
        else:
            stats.failed += 1

        risk = get_student_risk_level(final_grade, bundle.attendance, student.id)
        stats.risk_distribution[risk.level.value] += 1

        summary = calculate_attendance_summary(bundle.attendance, student.id)
        stats.attendance_present += summary.present
        stats.attendance_absent += summary.absent

        rate = participation_ratio(student.id, bundle) * 100
        stats.participation_distribution[_participation_bucket_index(rate)].students += 1

        observations = observations_by_student.get(student.id, [])
        stats.observation_stats.observations += len(observations)
        stats.observation_stats.canalizations += sum(1 for o in observations if o.requires_canalization)
        stats.observation_stats.follow_ups += sum(1 for o in observations if o.requires_follow_up)

    if graded:
        stats.average_grade = round(sum(s.grade for s in graded) / len(graded), 1)

    total_attendance = stats.attendance_present + stats.attendance_absent
    if total_attendance > 0:
        stats.attendance_rate = round(stats.attendance_present / total_attendance * 100, 1)

    graded.sort(key=lambda s: s.grade, reverse=True)
    stats.top_students = [
        TopStudent(student_id=s.student_id, name=s.name, grade=round(s.grade, 1))
        for s in graded[:TOP_STUDENTS_LIMIT]
    ]
    return stats


# =============================================================================
# Vistas de estudiante
# =============================================================================

def resolve_period_grade(
    student_id: str,
    bundle: Optional[PeriodRecordBundle],
) -> PeriodGrade:
    """
    Calificación de un parcial considerando recuperación.

    Una recuperación aplicada con valor reemplaza la calificación calculada.
    """
    bundle = PeriodRecordBundle.from_raw(bundle)
    detailed = calculate_detailed_final_grade(student_id, bundle)
    if bundle.has_applied_recovery(student_id):
        return PeriodGrade(
            grade=clamp_grade(bundle.recovery_grades[student_id].grade),
            is_recovery=True,
            criteria_details=detailed.criteria_details,
        )
    return PeriodGrade(grade=detailed.final_grade, criteria_details=detailed.criteria_details)


def calculate_semester_grades(
    student_id: str,
    bundles_by_period: Mapping,
) -> SemesterGrade:
    """
    Promedio semestral de un estudiante.

    Cuenta un parcial si tiene criterios con al menos una captura, o si este
    estudiante tiene una recuperación aplicada; los parciales sin datos no
    entran al denominador.

    Args:
        student_id: ID del estudiante
        bundles_by_period: PartialId (o 'p1'/'p2'/'p3') -> PeriodRecordBundle
    """
    normalized: Dict[PartialId, Optional[PeriodRecordBundle]] = {}
    for key, value in (bundles_by_period or {}).items():
        try:
            normalized[PartialId(key)] = value
        except ValueError:
            logger.debug("Ignoring unknown partial", extra={"partial_id": key})

    semester = SemesterGrade(student_id=student_id)
    grade_sum = 0.0
    for partial_id in PARTIALS:
        bundle = PeriodRecordBundle.from_raw(normalized.get(partial_id))
        # La recuperación de otro estudiante no incluye el parcial para este
        if not (bundle.has_recorded_grades() or bundle.has_applied_recovery(student_id)):
            continue
        period_grade = resolve_period_grade(student_id, bundle)
        setattr(semester, partial_id.value, period_grade)
        grade_sum += period_grade.grade
        semester.periods_counted += 1

    if semester.periods_counted > 0:
        semester.average = grade_sum / semester.periods_counted
    return semester


def build_student_report(
    student_id: str,
    memberships: Iterable[Tuple[Group, Optional[PeriodRecordBundle]]],
) -> StudentReport:
    """
    Reúne calificaciones y asistencia de un estudiante en todos sus grupos.

    Es la entrada estructurada que consumen los reportes y la generación de
    recomendaciones para estudiantes en riesgo.
    """
    report = StudentReport(student_id=student_id)
    for group, raw in memberships:
        bundle = PeriodRecordBundle.from_raw(raw)
        detailed = calculate_detailed_final_grade(student_id, bundle)
        report.grades_by_group.append(
            GroupGrade(
                group=group.subject,
                grade=detailed.final_grade,
                criteria_details=detailed.criteria_details,
                group_info=GroupInfo(
                    subject=group.subject,
                    semester=group.semester,
                    group_name=group.group_name,
                ),
            )
        )
        summary = calculate_attendance_summary(bundle.attendance, student_id)
        report.attendance.p += summary.present
        report.attendance.a += summary.absent
        report.attendance.total += summary.total

    if report.grades_by_group:
        report.average_grade = (
            sum(g.grade for g in report.grades_by_group) / len(report.grades_by_group)
        )
    return report
