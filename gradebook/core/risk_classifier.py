"""
Risk Classifier - Nivel de riesgo académico por estudiante

Combina la calificación final con el porcentaje de ausencias para asignar
uno de tres niveles (low, medium, high) con un motivo legible.

Función pura: se recalcula en cada lectura, nunca se cachea.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional
import logging

from ..models.risk import AttendanceSummary, CalculatedRisk, RiskLevel
from .constants import (
    HIGH_RISK_GRADE_THRESHOLD,
    HIGH_RISK_ABSENCE_THRESHOLD,
    MEDIUM_RISK_GRADE_THRESHOLD,
    MEDIUM_RISK_ABSENCE_THRESHOLD,
    NO_ATTENDANCE_ABSENCE_PERCENTAGE,
    RISK_REASON_TEMPLATE,
    NO_RISK_REASON,
)

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Redondea a entero con medios hacia arriba (62.5 -> 63)"""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_percentage(value: float) -> str:
    return str(round_half_up(value))


def calculate_attendance_summary(
    attendance: Optional[Dict[str, Dict[str, bool]]],
    student_id: str,
) -> AttendanceSummary:
    """
    Resume la asistencia de un estudiante.

    Solo cuentan las fechas donde el estudiante tiene registro. Sin registros
    el porcentaje de ausencias es 0: sin datos no hay penalización.
    """
    present = 0
    absent = 0
    for daily in (attendance or {}).values():
        if not isinstance(daily, dict) or student_id not in daily:
            continue
        if daily[student_id] is False:
            absent += 1
        else:
            present += 1

    total = present + absent
    absence_percentage = (
        absent / total * 100 if total > 0 else NO_ATTENDANCE_ABSENCE_PERCENTAGE
    )
    return AttendanceSummary(
        present=present,
        absent=absent,
        total=total,
        absence_percentage=absence_percentage,
    )


def build_risk_reason(final_grade: float, absence_percentage: float) -> str:
    return RISK_REASON_TEMPLATE.format(
        grade=format_percentage(final_grade),
        absence=format_percentage(absence_percentage),
    )


def get_student_risk_level(
    final_grade: float,
    attendance: Optional[Dict[str, Dict[str, bool]]],
    student_id: str,
) -> CalculatedRisk:
    """
    Clasifica a un estudiante en un nivel de riesgo.

    Reglas (primera coincidencia gana):
    - grade < 70 o ausencias > 20% -> high
    - grade < 80 o ausencias > 10% -> medium
    - en otro caso -> low

    El nivel low reporta un texto fijo en lugar del motivo con cifras.

    Args:
        final_grade: Calificación final (0-100)
        attendance: Registro de asistencia del parcial (fecha -> estudiante -> bool)
        student_id: ID del estudiante

    Returns:
        CalculatedRisk con nivel y motivo
    """
    summary = calculate_attendance_summary(attendance, student_id)
    absence_percentage = summary.absence_percentage

    if final_grade < HIGH_RISK_GRADE_THRESHOLD or absence_percentage > HIGH_RISK_ABSENCE_THRESHOLD:
        level = RiskLevel.HIGH
    elif final_grade < MEDIUM_RISK_GRADE_THRESHOLD or absence_percentage > MEDIUM_RISK_ABSENCE_THRESHOLD:
        level = RiskLevel.MEDIUM
    else:
        return CalculatedRisk(level=RiskLevel.LOW, reason=NO_RISK_REASON)

    logger.debug(
        "Student classified at risk",
        extra={
            "student_id": student_id,
            "risk_level": level.value,
            "final_grade": final_grade,
            "absence_percentage": absence_percentage,
        }
    )
    return CalculatedRisk(level=level, reason=build_risk_reason(final_grade, absence_percentage))
