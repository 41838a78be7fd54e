"""
Modelos de riesgo académico
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .group import Student


class RiskLevel(str, Enum):
    """Nivel de riesgo de un estudiante"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CalculatedRisk(BaseModel):
    """
    Resultado de clasificar un estudiante.

    Derivado, nunca se persiste: se recalcula en cada lectura.
    """
    level: RiskLevel
    reason: str

    @property
    def is_at_risk(self) -> bool:
        return self.level in (RiskLevel.MEDIUM, RiskLevel.HIGH)


class AttendanceSummary(BaseModel):
    present: int = 0
    absent: int = 0
    total: int = 0
    absence_percentage: float = 0.0


class StudentWithRisk(Student):
    calculated_risk: CalculatedRisk
    group_id: Optional[str] = None
