"""
Constantes y políticas del motor de calificaciones

Los valores por defecto que sustituyen a datos ausentes están nombrados aquí
para que las pruebas los puedan verificar directamente.
"""
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Timestamp timezone-aware en UTC"""
    return datetime.now(timezone.utc)


# Rango de la calificación final
MIN_GRADE = 0.0
MAX_GRADE = 100.0

# Umbrales de riesgo (primera coincidencia gana: HIGH antes que MEDIUM)
HIGH_RISK_GRADE_THRESHOLD = 70.0
HIGH_RISK_ABSENCE_THRESHOLD = 20.0
MEDIUM_RISK_GRADE_THRESHOLD = 80.0
MEDIUM_RISK_ABSENCE_THRESHOLD = 10.0

# Calificación mínima aprobatoria
PASSING_GRADE = 70.0

# Políticas de datos ausentes
NO_ACTIVITIES_RATIO = 0.0
NO_PARTICIPATION_DATA_RATIO = 1.0  # Sin oportunidades no se penaliza
NO_EXPECTED_VALUE_RATIO = 0.0
NO_ATTENDANCE_ABSENCE_PERCENTAGE = 0.0
NO_DATA_PARTICIPATION_RATE = 100
NO_DATA_ATTENDANCE_RATE = 100.0
EMPTY_GROUP_AVERAGE = 0.0

# Textos del motivo de riesgo
RISK_REASON_TEMPLATE = "Promedio de {grade}% y {absence}% de ausencias."
NO_RISK_REASON = "Sin riesgo detectado"

# Estadísticas de grupo
TOP_STUDENTS_LIMIT = 5
PARTICIPATION_BUCKETS = (
    ("0-20%", 20),
    ("21-40%", 40),
    ("41-60%", 60),
    ("61-80%", 80),
    ("81-100%", 100),
)
