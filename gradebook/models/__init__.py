"""
Modelos de dominio (pydantic) del registro académico
"""
from .criterion import (
    Criterion,
    CriterionInput,
    CriterionKind,
    CriteriaDetail,
    infer_kind_from_name,
)
from .period import (
    PartialId,
    PARTIALS,
    Activity,
    GradeDetail,
    RecoveryGrade,
    PeriodRecordBundle,
)
from .group import Student, Group
from .observation import FollowUpUpdate, ObservationStats, StudentObservation
from .risk import RiskLevel, CalculatedRisk, AttendanceSummary, StudentWithRisk

__all__ = [
    "Criterion",
    "CriterionInput",
    "CriterionKind",
    "CriteriaDetail",
    "infer_kind_from_name",
    "PartialId",
    "PARTIALS",
    "Activity",
    "GradeDetail",
    "RecoveryGrade",
    "PeriodRecordBundle",
    "Student",
    "Group",
    "FollowUpUpdate",
    "ObservationStats",
    "StudentObservation",
    "RiskLevel",
    "CalculatedRisk",
    "AttendanceSummary",
    "StudentWithRisk",
]
