"""
FastAPI backend для Marvin.

Сервисы (хранилище, invoker, оркестратор, запросы) создаются один раз
в lifespan и передаются в роутеры через app.state.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.config import Settings, get_settings
from backend.routers import checks, health, results
from marvin.core.invoker import CheckerInvoker, default_definitions
from marvin.core.orchestrator import CheckOrchestrator
from marvin.core.query import QueryService
from marvin.core.store import ResultStore

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_services(settings: Settings, runner=None) -> tuple:
    """Собрать store, оркестратор и query service из настроек."""
    project_root = settings.resolved_project_root()
    store = ResultStore(settings.resolved_results_dir()).initialize()

    invoker = CheckerInvoker(
        project_root=project_root,
        definitions=default_definitions(
            vale_path=settings.vale_path,
            markdownlint_path=settings.markdownlint_path,
            vale_min_alert_level=settings.vale_min_alert_level,
            vale_glob=settings.vale_glob,
            markdownlint_fix=settings.markdownlint_fix,
        ),
        runner=runner,
        default_timeout=settings.check_timeout_seconds,
    )

    orchestrator = CheckOrchestrator(invoker, store, default_target=settings.docs_root)
    return store, orchestrator, QueryService(store)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle: startup и shutdown."""
    # === STARTUP ===
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    store, orchestrator, query = build_services(settings)
    app.state.orchestrator = orchestrator
    app.state.query = query

    logger.info(f"🚀 Marvin API started, results in {store.results_dir}")
    logger.info(f"📄 Default docs root: {settings.docs_root}")

    yield

    # === SHUTDOWN ===
    logger.info("Marvin API stopped")


def create_app(settings: Optional[Settings] = None, runner=None) -> FastAPI:
    """
    Создать приложение.

    Без аргументов сервисы создаются в lifespan из get_settings();
    с settings — сразу (используется в тестах).
    """
    application = FastAPI(
        title="Marvin API",
        version="0.2.0",
        description="Documentation QA checks and result history",
        lifespan=lifespan if settings is None else None,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ==================== Подключение роутеров ====================

    application.include_router(health.router)
    application.include_router(results.router)
    application.include_router(checks.router)

    if settings is not None:
        _, application.state.orchestrator, application.state.query = build_services(settings, runner)

    return application


app = create_app()


# ==================== Run ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
