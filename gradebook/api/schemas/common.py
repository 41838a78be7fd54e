"""
Schemas comunes de respuesta
"""
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Envoltorio estándar de respuestas de la API"""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
