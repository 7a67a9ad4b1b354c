"""Run-check router."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from backend.dependencies import get_orchestrator
from backend.models import RunCheckRequest, RunCheckResponse
from marvin.core.errors import ExecutionFailure, InvalidCheckerKind, StoreUnavailable, TimeoutExceeded
from marvin.core.orchestrator import CheckOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["checks"])


@router.post("/run-check", response_model=RunCheckResponse)
async def run_check(request: RunCheckRequest, orchestrator: CheckOrchestrator = Depends(get_orchestrator)):
    """
    Запустить checker и сохранить результат.

    Найденные проблемы — это 200, а не ошибка. 400 — неизвестный checker,
    500 — checker не отработал или не уложился в таймаут.
    """
    try:
        outcome = await orchestrator.run_check(request.checker, request.path)
    except InvalidCheckerKind as e:
        return JSONResponse(status_code=400, content={"error": e.message, "code": e.code})
    except (ExecutionFailure, TimeoutExceeded) as e:
        logger.error(f"Error running check: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to run check",
                "code": e.code,
                "details": e.message,
                "checker": e.checker,
                "path": e.path,
                "exitCode": getattr(e, "exit_code", None),
            },
        )
    except StoreUnavailable as e:
        logger.error(f"Check ran but result could not be saved: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to save result", "code": e.code, "details": e.message},
        )

    return {
        "success": True,
        "message": f"{outcome.record.checker.value} check completed successfully",
        "output": outcome.raw_output,
        "id": outcome.id,
    }
