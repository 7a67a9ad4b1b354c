"""
Pytest configuration and fixtures.

Использование:
    pytest tests/ -v
"""

import os
import sys
from pathlib import Path

import pytest

# Корень проекта (там, где пакет marvin), для запуска без установки
sys.path.insert(0, str(Path(__file__).parent.parent))

from marvin.core.invoker import CheckerInvoker  # noqa: E402
from marvin.core.orchestrator import CheckOrchestrator  # noqa: E402
from marvin.core.query import QueryService  # noqa: E402
from marvin.core.store import ResultStore  # noqa: E402


# ═══════════════════════════════════════════════════════
# STORE
# ═══════════════════════════════════════════════════════

@pytest.fixture
def results_dir(tmp_path):
    """Каталог результатов (ещё не создан)."""
    return tmp_path / ".marvin" / "results"


@pytest.fixture
def store(results_dir):
    return ResultStore(results_dir).initialize()


@pytest.fixture
def query(store):
    return QueryService(store)


# ═══════════════════════════════════════════════════════
# ORCHESTRATION
# ═══════════════════════════════════════════════════════

@pytest.fixture
def project_root(tmp_path):
    root = tmp_path / "project"
    (root / "docs").mkdir(parents=True)
    return root


@pytest.fixture
def make_orchestrator(project_root, store):
    """Фабрика оркестратора поверх заданного FakeRunner."""
    def factory(runner, timeout: float = 5.0) -> CheckOrchestrator:
        invoker = CheckerInvoker(project_root=project_root, runner=runner, default_timeout=timeout)
        return CheckOrchestrator(invoker, store, default_target="docs")
    return factory


# ═══════════════════════════════════════════════════════
# MARKERS
# ═══════════════════════════════════════════════════════

def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "slow: mark test as slow"
    )


@pytest.fixture(autouse=True)
def _no_backend_env(monkeypatch):
    """Не подхватывать MARVIN_* из окружения разработчика."""
    for key in list(os.environ):
        if key.startswith("MARVIN_"):
            monkeypatch.delenv(key, raising=False)
