"""
Paquete de registros de un parcial (PeriodRecordBundle)

Snapshot de solo lectura para el motor de calificaciones: criterios,
calificaciones manuales, asistencia, participaciones, actividades,
recuperaciones y retroalimentación de un (grupo, parcial).
"""
from enum import Enum
from typing import Any, Dict, List, Optional
import logging

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from .criterion import Criterion

logger = logging.getLogger(__name__)


class PartialId(str, Enum):
    """Parciales del semestre"""
    P1 = "p1"
    P2 = "p2"
    P3 = "p3"


PARTIALS: List[PartialId] = [PartialId.P1, PartialId.P2, PartialId.P3]

# date -> student_id -> bool. Un par ausente significa "sin registro", no False.
DailyRecord = Dict[str, Dict[str, bool]]


class GradeDetail(BaseModel):
    delivered: Optional[float] = None


class RecoveryGrade(BaseModel):
    grade: Optional[float] = None
    applied: bool = False


class Activity(BaseModel):
    id: str
    name: str = ""
    due_date: Optional[str] = Field(None, validation_alias=AliasChoices("due_date", "dueDate"))  # YYYY-MM-DD
    programmed_date: Optional[str] = Field(None, validation_alias=AliasChoices("programmed_date", "programmedDate"))  # YYYY-MM-DD


class PeriodRecordBundle(BaseModel):
    """
    Datos crudos de un grupo en un parcial.

    El motor nunca lo muta: solo lo lee. Se crea vacío la primera vez que se
    accede al par (grupo, parcial) y la captura lo va llenando.
    """
    criteria: List[Criterion] = Field(default_factory=list)
    grades: Dict[str, Dict[str, GradeDetail]] = Field(default_factory=dict)
    attendance: DailyRecord = Field(default_factory=dict)
    participations: DailyRecord = Field(default_factory=dict)
    activities: List[Activity] = Field(default_factory=list)
    activity_records: Dict[str, Dict[str, bool]] = Field(
        default_factory=dict, validation_alias=AliasChoices("activity_records", "activityRecords")
    )
    recovery_grades: Dict[str, RecoveryGrade] = Field(
        default_factory=dict, validation_alias=AliasChoices("recovery_grades", "recoveryGrades")
    )
    feedbacks: Dict[str, str] = Field(default_factory=dict)
    group_analysis: Optional[str] = Field(None, validation_alias=AliasChoices("group_analysis", "groupAnalysis"))

    @classmethod
    def empty(cls) -> "PeriodRecordBundle":
        return cls()

    @classmethod
    def from_raw(cls, raw: Any) -> "PeriodRecordBundle":
        """
        Construye un bundle desde datos crudos sin lanzar nunca.

        Datos ausentes o malformados producen un bundle vacío.
        """
        if isinstance(raw, cls):
            return raw
        if not isinstance(raw, dict):
            if raw is not None:
                logger.warning(
                    "Ignoring malformed period data",
                    extra={"raw_type": type(raw).__name__}
                )
            return cls.empty()
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            logger.warning(
                "Malformed period data treated as empty bundle",
                extra={"error_count": e.error_count()}
            )
            return cls.empty()

    def delivered(self, student_id: str, criterion_id: str) -> Optional[float]:
        detail = self.grades.get(student_id, {}).get(criterion_id)
        return detail.delivered if detail else None

    def has_recorded_grades(self) -> bool:
        """
        True si el parcial tiene al menos una calificación capturada.

        Cuenta entregas manuales, registros de actividades y participaciones;
        sin criterios no hay calificación que calcular.
        """
        if not self.criteria:
            return False
        for per_student in self.grades.values():
            if any(d.delivered is not None for d in per_student.values()):
                return True
        if any(self.activity_records.values()):
            return True
        return any(self.participations.values())

    def has_applied_recovery(self, student_id: str) -> bool:
        """Recuperación aplicada y con valor para este estudiante"""
        recovery = self.recovery_grades.get(student_id)
        return recovery is not None and recovery.applied and recovery.grade is not None
