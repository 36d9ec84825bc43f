from fastapi import APIRouter
from fastapi.responses import Response
from kink import di

from grafana_demo.infrastructure.observability import HTTPMetrics

from .methods import ANY_METHOD

router = APIRouter(tags=['observability'])


@router.api_route('/metrics', methods=ANY_METHOD)
async def get_metrics() -> Response:
    """Get all metrics in Prometheus format."""
    content, content_type = di[HTTPMetrics].render()

    return Response(content=content, media_type=content_type)
