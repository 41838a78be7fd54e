"""
Excepciones personalizadas para la API REST

El motor de calificaciones no lanza excepciones; estas cubren la captura de
datos y la búsqueda de recursos.
"""
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class GradebookAPIException(HTTPException):
    """Excepción base para la API del registro académico"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        headers: Optional[Dict[str, str]] = None,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.extra = extra or {}


class GroupNotFoundError(GradebookAPIException):
    """Grupo no encontrado"""

    def __init__(self, group_id: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Group '{group_id}' not found",
            error_code="GROUP_NOT_FOUND",
            extra={"group_id": group_id}
        )


class StudentNotFoundError(GradebookAPIException):
    """Estudiante no encontrado"""

    def __init__(self, student_id: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Student '{student_id}' not found",
            error_code="STUDENT_NOT_FOUND",
            extra={"student_id": student_id}
        )


class ObservationNotFoundError(GradebookAPIException):
    """Observación no encontrada"""

    def __init__(self, observation_id: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Observation '{observation_id}' not found",
            error_code="OBSERVATION_NOT_FOUND",
            extra={"observation_id": observation_id}
        )


class InvalidPeriodError(GradebookAPIException):
    """Parcial inválido"""

    def __init__(self, partial_id: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid partial '{partial_id}', expected one of p1, p2, p3",
            error_code="INVALID_PARTIAL",
            extra={"partial_id": partial_id}
        )


class InvalidCriteriaError(GradebookAPIException):
    """Criterios de evaluación inválidos (p. ej. pesos que suman más de 100)"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=message,
            error_code="INVALID_CRITERIA",
            extra=details or {}
        )


class InvalidGradeEntryError(GradebookAPIException):
    """Captura de calificación inválida"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=message,
            error_code="INVALID_GRADE_ENTRY",
            extra=details or {}
        )


class DatabaseOperationError(GradebookAPIException):
    """Error en operación de base de datos"""

    def __init__(self, operation: str, details: Optional[str] = None):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Database operation failed: {operation}",
            error_code="DATABASE_ERROR",
            extra={"operation": operation, "details": details}
        )


async def gradebook_exception_handler(request: Request, exc: GradebookAPIException) -> JSONResponse:
    """Serializa las excepciones de la API con su código de error"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error_code": exc.error_code,
            "detail": exc.detail,
            "extra": exc.extra,
        },
        headers=exc.headers,
    )
