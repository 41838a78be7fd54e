"""
Grade Calculator - Calificación final ponderada por criterio

Convierte el paquete de registros de un parcial y un estudiante en una
calificación final (0-100) y su desglose por criterio.

Todas las funciones son totales: ante datos ausentes usan las políticas de
`constants` en lugar de lanzar excepciones. La suma de pesos <= 100 y las
entregas no negativas se validan en la captura, no aquí.
"""
from typing import List, Optional
import logging

from pydantic import BaseModel, Field

from ..models.criterion import Criterion, CriteriaDetail
from ..models.period import PeriodRecordBundle
from .constants import (
    MIN_GRADE,
    MAX_GRADE,
    NO_ACTIVITIES_RATIO,
    NO_PARTICIPATION_DATA_RATIO,
    NO_EXPECTED_VALUE_RATIO,
)

logger = logging.getLogger(__name__)


class DetailedGrade(BaseModel):
    """Calificación final con desglose por criterio"""
    final_grade: float = 0.0
    criteria_details: List[CriteriaDetail] = Field(default_factory=list)


def clamp_grade(value: float) -> float:
    return max(MIN_GRADE, min(MAX_GRADE, value))


def activity_ratio(student_id: str, bundle: PeriodRecordBundle) -> float:
    """Actividades entregadas / actividades definidas en el parcial"""
    total_activities = len(bundle.activities)
    if total_activities == 0:
        return NO_ACTIVITIES_RATIO

    records = bundle.activity_records.get(student_id, {})
    activity_ids = {activity.id for activity in bundle.activities}
    delivered = sum(
        1 for activity_id, done in records.items()
        if done and activity_id in activity_ids
    )
    return delivered / total_activities


def participation_ratio(student_id: str, bundle: PeriodRecordBundle) -> float:
    """
    Participaciones / oportunidades de participar.

    Una oportunidad es una fecha con registro de participación en la que el
    estudiante tiene registro de asistencia (presente o ausente). Sin
    oportunidades se otorga crédito completo.
    """
    opportunities = [
        date for date in bundle.participations
        if student_id in bundle.attendance.get(date, {})
    ]
    if not opportunities:
        return NO_PARTICIPATION_DATA_RATIO

    participated = sum(
        1 for date in opportunities
        if bundle.participations[date].get(student_id) is True
    )
    return participated / len(opportunities)


def manual_ratio(student_id: str, criterion: Criterion, bundle: PeriodRecordBundle) -> float:
    """Entregado / esperado; entregas sin capturar cuentan como 0"""
    if criterion.expected_value <= 0:
        return NO_EXPECTED_VALUE_RATIO
    delivered = bundle.delivered(student_id, criterion.id) or 0
    return delivered / criterion.expected_value


def performance_ratio(student_id: str, criterion: Criterion, bundle: PeriodRecordBundle) -> float:
    if criterion.is_activity_based:
        return activity_ratio(student_id, bundle)
    if criterion.is_participation_based:
        return participation_ratio(student_id, bundle)
    return manual_ratio(student_id, criterion, bundle)


def calculate_detailed_final_grade(
    student_id: str,
    bundle: Optional[PeriodRecordBundle],
) -> DetailedGrade:
    """
    Calcula la calificación final de un estudiante en un parcial.

    earned_i = ratio_i * weight_i; final = clamp(sum(earned_i), 0, 100).
    Razones > 1 (sobre-entrega) se permiten antes de acotar el total.

    Args:
        student_id: ID del estudiante
        bundle: Registros del parcial (None se trata como vacío)

    Returns:
        DetailedGrade con la calificación y el desglose por criterio
    """
    bundle = PeriodRecordBundle.from_raw(bundle)
    if not bundle.criteria:
        return DetailedGrade()

    total_weight = sum(c.weight for c in bundle.criteria)
    if total_weight > MAX_GRADE:
        logger.debug(
            "Criteria weights exceed 100, final grade will be clamped",
            extra={"student_id": student_id, "total_weight": total_weight}
        )

    raw_grade = 0.0
    details: List[CriteriaDetail] = []
    for criterion in bundle.criteria:
        earned = performance_ratio(student_id, criterion, bundle) * criterion.weight
        raw_grade += earned
        details.append(CriteriaDetail(name=criterion.name, earned=earned, weight=criterion.weight))

    return DetailedGrade(final_grade=clamp_grade(raw_grade), criteria_details=details)


def calculate_final_grade(student_id: str, bundle: Optional[PeriodRecordBundle]) -> float:
    return calculate_detailed_final_grade(student_id, bundle).final_grade
