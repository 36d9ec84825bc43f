from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from .methods import ANY_METHOD

router = APIRouter(tags=['health'])


@router.api_route('/health', methods=ANY_METHOD, response_class=PlainTextResponse)
async def health_check() -> str:
    """Liveness probe, always 200 regardless of chaos settings."""
    return 'ok'
