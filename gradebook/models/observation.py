"""
Observaciones de conducta de un estudiante

No intervienen en la calificación; alimentan las estadísticas del grupo
(observaciones, canalizaciones y seguimientos).
"""
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .period import PartialId

# Tipos sugeridos en la captura; se acepta cualquier texto
OBSERVATION_TYPES = [
    "Problema de conducta",
    "Episodio emocional",
    "Mérito",
    "Demérito",
    "Asesoría académica",
    "Otros",
]

CANALIZATION_TARGETS = [
    "Tutor",
    "Atención psicológica",
    "Directivo",
    "Padre/Madre/Tutor legal",
    "Otros",
]


class FollowUpUpdate(BaseModel):
    date: str  # ISO datetime
    update: str


class StudentObservation(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str = Field(validation_alias=AliasChoices("student_id", "studentId"))
    partial_id: PartialId = Field(validation_alias=AliasChoices("partial_id", "partialId"))
    date: str  # ISO datetime
    type: str
    details: str = ""
    requires_canalization: bool = Field(
        False, validation_alias=AliasChoices("requires_canalization", "requiresCanalization")
    )
    canalization_target: Optional[str] = Field(
        None, validation_alias=AliasChoices("canalization_target", "canalizationTarget")
    )
    requires_follow_up: bool = Field(
        False, validation_alias=AliasChoices("requires_follow_up", "requiresFollowUp")
    )
    follow_up_updates: List[FollowUpUpdate] = Field(
        default_factory=list, validation_alias=AliasChoices("follow_up_updates", "followUpUpdates")
    )
    is_closed: bool = Field(False, validation_alias=AliasChoices("is_closed", "isClosed"))


class ObservationStats(BaseModel):
    observations: int = 0
    canalizations: int = 0
    follow_ups: int = 0
