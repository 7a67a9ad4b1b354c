"""Health router."""

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from backend.dependencies import get_orchestrator
from backend.models import HealthResponse
from marvin.core.orchestrator import CheckOrchestrator
from marvin.infrastructure.health import full_health_check

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(orchestrator: CheckOrchestrator = Depends(get_orchestrator)):
    """Health check: хранилище и бинарники checker'ов."""
    return await full_health_check(orchestrator.store, orchestrator.invoker.definitions)


@router.get("/metrics")
async def metrics():
    """Prometheus exposition."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
