"""
Motor de calificaciones y clasificación de riesgo
"""
from .grade_calculator import (
    DetailedGrade,
    calculate_detailed_final_grade,
    calculate_final_grade,
)
from .risk_classifier import (
    calculate_attendance_summary,
    get_student_risk_level,
)
from .aggregation import (
    PeriodGrade,
    SemesterGrade,
    GroupStatistics,
    StudentReport,
    calculate_group_averages,
    find_at_risk_students,
    calculate_overall_participation,
    calculate_group_statistics,
    resolve_period_grade,
    calculate_semester_grades,
    build_student_report,
)

__all__ = [
    "DetailedGrade",
    "calculate_detailed_final_grade",
    "calculate_final_grade",
    "calculate_attendance_summary",
    "get_student_risk_level",
    "PeriodGrade",
    "SemesterGrade",
    "GroupStatistics",
    "StudentReport",
    "calculate_group_averages",
    "find_at_risk_students",
    "calculate_overall_participation",
    "calculate_group_statistics",
    "resolve_period_grade",
    "calculate_semester_grades",
    "build_student_report",
]
