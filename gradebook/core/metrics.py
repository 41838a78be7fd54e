"""
Prometheus metrics del registro académico

Los contadores se incrementan en la capa API; el motor se mantiene puro.
"""
from prometheus_client import Counter

grade_calculations_total = Counter(
    "gradebook_grade_calculations_total",
    "Total de calificaciones finales calculadas",
    ["view"],
)

risk_classifications_total = Counter(
    "gradebook_risk_classifications_total",
    "Total de clasificaciones de riesgo por nivel",
    ["level"],
)

data_entry_rejections_total = Counter(
    "gradebook_data_entry_rejections_total",
    "Capturas rechazadas por validación",
    ["reason"],
)
