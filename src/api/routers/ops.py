import logging

from fastapi import APIRouter, Depends, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from api.dependencies import get_services
from api.state import AppServices

router = APIRouter(tags=["ops"])
logger = logging.getLogger(__name__)


@router.get("/ping")
async def ping() -> dict:
    return {"message": "pong"}


@router.get("/health")
async def health_check(services: AppServices = Depends(get_services)) -> dict:
    """Health check endpoint for container orchestration."""
    health = {
        "status": "healthy",
        "llm_provider": services.settings.llm_provider,
    }

    if services.db is None:
        health["database"] = {"status": "not configured"}
        return health

    db_health = await services.db.health_check()
    health["database"] = db_health
    if db_health["status"] != "healthy":
        health["status"] = "degraded"
    return health


@router.get("/metrics")
async def metrics() -> Response:
    """
    Prometheus scrape endpoint.
    """
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
