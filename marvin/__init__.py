"""
Marvin - documentation QA checks with a persistent result history.

Основные компоненты:
- CheckerInvoker: запуск vale / markdownlint с таймаутом и классификацией исхода
- CheckOrchestrator: запуск + парсинг + сохранение Result Record
- ResultStore: файловое хранилище результатов (один JSON на запуск)
- QueryService: список, фильтр, пагинация, агрегаты для дашборда
"""

from marvin.core.errors import (
    ExecutionFailure,
    InvalidCheckerKind,
    MarvinError,
    NotFound,
    StoreUnavailable,
    TimeoutExceeded,
)
from marvin.core.invoker import CheckerInvoker, InvocationOutcome, OutcomeKind
from marvin.core.orchestrator import CheckOrchestrator, RunOutcome
from marvin.core.query import QueryService, aggregate, calculate_pass_rate, group_issues_by_file
from marvin.core.store import ResultPage, ResultStore
from marvin.core.types import CheckerKind, Issue, ResultRecord, Severity, StoredResult, Summary

__version__ = "0.2.0"

__all__ = [
    # Основные классы
    "CheckerInvoker",
    "CheckOrchestrator",
    "ResultStore",
    "QueryService",

    # Модели данных
    "CheckerKind",
    "Severity",
    "Issue",
    "Summary",
    "ResultRecord",
    "StoredResult",
    "ResultPage",
    "RunOutcome",
    "InvocationOutcome",
    "OutcomeKind",

    # Запросы
    "group_issues_by_file",
    "calculate_pass_rate",
    "aggregate",

    # Ошибки
    "MarvinError",
    "InvalidCheckerKind",
    "TimeoutExceeded",
    "ExecutionFailure",
    "NotFound",
    "StoreUnavailable",

    # Версия
    "__version__",
]
