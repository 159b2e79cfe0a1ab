"""Prometheus scrape endpoint."""

from fastapi import APIRouter, Response

from ..core.observability import get_prometheus_metrics

router = APIRouter(tags=["observability"])

PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


@router.get("/metrics", response_class=Response, summary="Prometheus Metrics")
async def metrics() -> Response:
    """Expose request and tour content counters in Prometheus text format."""
    return Response(content=get_prometheus_metrics(), media_type=PROMETHEUS_CONTENT_TYPE)
