"""
Health checks: каталог результатов и наличие checker'ов в PATH.
"""

import asyncio
import logging
import os
import shutil
import time
from typing import Dict

from marvin.core.invoker import CheckerDefinition
from marvin.core.store import ResultStore

logger = logging.getLogger(__name__)


async def check_store(store: ResultStore) -> Dict:
    """Проверка каталога результатов. Отсутствующий каталог — это норма (история пуста)."""
    start_time = time.time()
    path = store.results_dir

    def probe() -> Dict:
        if not path.exists():
            return {"status": "healthy", "records": 0, "note": "no checks recorded yet"}
        if not path.is_dir() or not os.access(path, os.R_OK | os.X_OK):
            return {"status": "unhealthy", "error": f"{path} is not a readable directory"}
        records = sum(1 for name in os.listdir(path) if name.endswith(".json") and not name.startswith("."))
        return {"status": "healthy", "records": records}

    try:
        result = await asyncio.to_thread(probe)
    except OSError as e:
        logger.error(f"Store health check failed: {e}")
        return {"status": "unhealthy", "error": str(e)}

    result["latency_ms"] = round((time.time() - start_time) * 1000, 2)
    return result


def check_checker(definition: CheckerDefinition) -> Dict:
    """Проверка, что бинарник checker'а доступен."""
    resolved = shutil.which(definition.executable)
    if resolved is None:
        return {
            "status": "unhealthy",
            "error": f"{definition.executable} not found in PATH",
        }
    return {"status": "healthy", "path": resolved}


async def full_health_check(store: ResultStore, definitions: Dict) -> Dict:
    """Полная проверка всех компонентов"""
    results = {"store": await check_store(store)}
    for kind, definition in definitions.items():
        results[kind.value] = check_checker(definition)

    # Общий статус
    all_healthy = all(
        r.get("status") == "healthy"
        for r in results.values()
    )

    return {
        "status": "healthy" if all_healthy else "unhealthy",
        "components": results,
        "timestamp": time.time()
    }
