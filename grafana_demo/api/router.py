from fastapi import APIRouter

from .demo import router as demo_router
from .health import router as health_router
from .metrics import router as metrics_router

router = APIRouter()

# the demo router holds the catch-all route and must stay last
router.include_router(health_router)
router.include_router(metrics_router)
router.include_router(demo_router)
