"""
Gradebook - registro académico para docentes

Motor de calificaciones ponderadas y clasificación de riesgo, con una capa
de persistencia (SQLAlchemy) y una API REST (FastAPI) a su alrededor.
"""
__version__ = "0.1.0"
