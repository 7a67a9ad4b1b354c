"""Results router: список, детали и дашборд."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from backend.dependencies import get_query_service
from backend.models import DashboardResponse, ResultModel, ResultsResponse
from marvin.core.errors import InvalidCheckerKind, NotFound, StoreUnavailable
from marvin.core.query import QueryService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["results"])


@router.get("/results", response_model=ResultsResponse)
async def list_results(
    checker: Optional[str] = None,
    limit: int = Query(20, ge=1, le=500),
    offset: int = Query(0, ge=0),
    query: QueryService = Depends(get_query_service),
):
    """
    Список результатов, новые первые.

    Ошибка чтения истории возвращается как 500 с явным полем error,
    чтобы «ничего не запускали» отличалось от «не смогли прочитать».
    """
    try:
        page = await query.list_results(checker, limit=limit, offset=offset)
    except InvalidCheckerKind as e:
        return JSONResponse(status_code=400, content={"error": e.message, "code": e.code})
    except StoreUnavailable as e:
        logger.error(f"Error reading results: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to read results",
                "details": e.message,
                "results": [],
                "total": 0,
                "page": offset // limit + 1,
                "pageSize": limit,
            },
        )

    return ResultsResponse(
        results=[r.to_dict() for r in page.results],
        total=page.total,
        page=page.page,
        page_size=page.page_size,
        skipped=page.skipped,
    )


@router.get("/results/{result_id}", response_model=ResultModel)
async def get_result(result_id: str, query: QueryService = Depends(get_query_service)):
    """Один результат по идентификатору."""
    try:
        result = await query.get_result(result_id)
    except NotFound:
        return JSONResponse(status_code=404, content={"error": "Result not found", "id": result_id})
    except StoreUnavailable as e:
        logger.error(f"Error reading result {result_id}: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to read result", "details": e.message})
    return result.to_dict()


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(query: QueryService = Depends(get_query_service)):
    """Агрегированная статистика по всем checker'ам."""
    try:
        data = await query.dashboard()
    except StoreUnavailable as e:
        logger.error(f"Error building dashboard: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to read results", "details": e.message})

    latest_time = data.latest_check_time
    return {
        "checkers": [stats.to_dict() for stats in data.checkers],
        "total_checks": data.total_checks,
        "latest_results": {name: r.to_dict() for name, r in data.latest_results.items()},
        "overall": data.overall.to_dict(),
        "pass_rate": data.pass_rate,
        "latest_check_time": latest_time.isoformat() if latest_time else None,
        "skipped": data.skipped,
    }
