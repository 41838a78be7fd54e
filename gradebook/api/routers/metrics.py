"""
Endpoint de Prometheus para el registro académico

Expone los contadores definidos en core/metrics.py:
- gradebook_grade_calculations_total{view}
- gradebook_risk_classifications_total{level}
- gradebook_data_entry_rejections_total{reason}
"""
import logging

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Monitoring"])


@router.get(
    "/metrics",
    summary="Prometheus Metrics",
    description="Contadores de calificaciones calculadas, riesgos clasificados y capturas rechazadas",
    response_class=Response,
)
def get_metrics() -> Response:
    payload = generate_latest(REGISTRY)
    logger.debug("Metrics scraped", extra={"size_bytes": len(payload)})
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)
