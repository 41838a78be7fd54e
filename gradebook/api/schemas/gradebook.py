"""
Schemas para la captura de datos y las vistas del registro académico
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ...models.criterion import CriteriaDetail, CriterionInput
from ...models.period import Activity, PartialId
from ...models.risk import AttendanceSummary, CalculatedRisk, StudentWithRisk


# =============================================================================
# SCHEMAS PARA GRUPOS Y ESTUDIANTES
# =============================================================================

class GroupCreateRequest(BaseModel):
    """Request para crear un grupo"""
    subject: str = Field(..., min_length=1)
    semester: Optional[str] = None
    group_name: Optional[str] = None
    facilitator: Optional[str] = None


class StudentCreateRequest(BaseModel):
    """Request para dar de alta un estudiante"""
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    tutor_name: Optional[str] = None
    tutor_phone: Optional[str] = None


class EnrolmentRequest(BaseModel):
    student_id: str


# =============================================================================
# SCHEMAS PARA CAPTURA DEL PARCIAL
# =============================================================================

class CriteriaUpdateRequest(BaseModel):
    """Criterios del parcial; la suma de pesos no puede exceder 100"""
    criteria: List[CriterionInput]


class GradeEntryRequest(BaseModel):
    delivered: Optional[float] = None


class DailyRecordRequest(BaseModel):
    """Registro de un día: student_id -> presente/participó"""
    entries: Dict[str, bool]


class ActivitiesUpdateRequest(BaseModel):
    activities: List[Activity]


class ActivityRecordRequest(BaseModel):
    delivered: bool


class RecoveryGradeRequest(BaseModel):
    grade: Optional[float] = Field(None, ge=0, le=100)
    applied: bool = False


class FeedbackRequest(BaseModel):
    feedback: str


# =============================================================================
# SCHEMAS PARA OBSERVACIONES
# =============================================================================

class ObservationCreateRequest(BaseModel):
    """Observación de conducta; no afecta la calificación"""
    partial_id: PartialId
    type: str = Field(..., min_length=1)
    details: str = ""
    requires_canalization: bool = False
    canalization_target: Optional[str] = None
    requires_follow_up: bool = False


class FollowUpRequest(BaseModel):
    update: str = Field(..., min_length=1)
    is_closing: bool = False


# =============================================================================
# SCHEMAS PARA VISTAS CALCULADAS
# =============================================================================

class StudentGradeResponse(BaseModel):
    """Calificación de un estudiante en un parcial con su riesgo"""
    student_id: str
    group_id: str
    partial_id: str
    final_grade: float
    criteria_details: List[CriteriaDetail]
    risk: CalculatedRisk
    attendance: AttendanceSummary


class DashboardResponse(BaseModel):
    """Métricas del tablero para el parcial activo"""
    partial_id: str
    group_averages: Dict[str, float]
    at_risk_students: List[StudentWithRisk]
    overall_participation: Optional[int] = None
