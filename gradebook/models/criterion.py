"""
Criterios de evaluación

Un criterio es un rubro ponderado (Examen, Actividades, Participación, ...)
que aporta a la calificación final de un parcial.
"""
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, model_validator


class CriterionKind(str, Enum):
    """Tipo de criterio: define qué fórmula se usa para su razón de desempeño"""
    MANUAL = "manual"
    ACTIVITY_BASED = "activity_based"
    PARTICIPATION_BASED = "participation_based"


# Nombres con los que la captura original identificaba criterios automáticos
LEGACY_KIND_BY_NAME: Dict[str, CriterionKind] = {
    "Actividades": CriterionKind.ACTIVITY_BASED,
    "Portafolio": CriterionKind.ACTIVITY_BASED,
    "Participación": CriterionKind.PARTICIPATION_BASED,
}


def infer_kind_from_name(name: str) -> CriterionKind:
    return LEGACY_KIND_BY_NAME.get((name or "").strip(), CriterionKind.MANUAL)


class Criterion(BaseModel):
    """
    Criterio de evaluación de un grupo para un parcial.

    `name` es solo de despliegue; la fórmula depende de `kind`. Cuando los
    datos crudos no traen `kind` se infiere una sola vez del nombre.
    """
    id: str
    name: str
    weight: float = 0.0  # Puntos porcentuales (0-100)
    expected_value: int = 0  # Sin significado si is_automated
    is_automated: bool = False
    kind: CriterionKind = CriterionKind.MANUAL

    @model_validator(mode="before")
    @classmethod
    def _fill_legacy_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        # Formato de almacenamiento original (camelCase)
        if "expectedValue" in data and "expected_value" not in data:
            data["expected_value"] = data.pop("expectedValue")
        if "isAutomated" in data and "is_automated" not in data:
            data["is_automated"] = data.pop("isAutomated")
        if data.get("expected_value") is None:
            data["expected_value"] = 0
        if data.get("is_automated") is None:
            data["is_automated"] = False
        if not data.get("kind"):
            data["kind"] = infer_kind_from_name(data.get("name", ""))
        return data

    @property
    def is_activity_based(self) -> bool:
        return self.kind == CriterionKind.ACTIVITY_BASED

    @property
    def is_participation_based(self) -> bool:
        return self.kind == CriterionKind.PARTICIPATION_BASED


class CriteriaDetail(BaseModel):
    """Desglose de un criterio en la calificación final"""
    name: str
    earned: float
    weight: float


class CriterionInput(BaseModel):
    """Criterio tal como llega de la captura (validado en la API)"""
    id: str
    name: str = Field(..., min_length=1)
    weight: float = Field(..., ge=0, le=100)
    expected_value: int = Field(0, ge=0)
    is_automated: bool = False
    kind: Optional[CriterionKind] = None

    def to_criterion(self) -> Criterion:
        return Criterion.model_validate(self.model_dump(exclude_none=True))
