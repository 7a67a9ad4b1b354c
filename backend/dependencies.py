"""Доступ к сервисам, созданным в lifespan (app.state)."""

from fastapi import HTTPException, Request

from marvin.core.orchestrator import CheckOrchestrator
from marvin.core.query import QueryService


def get_orchestrator(request: Request) -> CheckOrchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(503, "Orchestrator not initialized")
    return orchestrator


def get_query_service(request: Request) -> QueryService:
    query = getattr(request.app.state, "query", None)
    if query is None:
        raise HTTPException(503, "Query service not initialized")
    return query
