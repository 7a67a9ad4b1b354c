"""
Query Service: чтение истории проверок для дашборда.

Функции group_issues_by_file / calculate_pass_rate / aggregate чистые;
QueryService — тонкий фасад над ResultStore.
"""

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from marvin.core.store import ResultStore
from marvin.core.types import CheckerKind, Issue, ResultRecord, StoredResult, Summary
from marvin.infrastructure.metrics import corrupt_records

logger = logging.getLogger(__name__)


def group_issues_by_file(issues: Iterable[Issue]) -> Dict[str, List[Issue]]:
    """Сгруппировать находки по файлу, сохраняя исходный порядок внутри файла."""
    grouped: Dict[str, List[Issue]] = {}
    for issue in issues:
        grouped.setdefault(issue.file, []).append(issue)
    return grouped


def calculate_pass_rate(total_files: int, files_with_issues: int) -> int:
    """Процент файлов без находок; 100, если файлов нет."""
    if total_files == 0:
        return 100
    # Округление half-up, как Math.round на дашборде
    return math.floor(100 * (total_files - files_with_issues) / total_files + 0.5)


def aggregate(records: Iterable[ResultRecord]) -> Summary:
    """Поэлементная сумма Summary всех записей."""
    total = Summary()
    for record in records:
        total = total + record.summary
    return total


@dataclass
class ResultsPage:
    results: List[StoredResult]
    total: int
    page: int
    page_size: int
    skipped: int = 0


@dataclass
class CheckerStats:
    """Статистика по одному checker'у за всю историю."""

    name: str
    total_runs: int
    latest_run: datetime
    total_issues: int = 0
    error_count: int = 0
    warning_count: int = 0
    info_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "total_runs": self.total_runs,
            "latest_run": self.latest_run.isoformat(),
            "total_issues": self.total_issues,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
        }


@dataclass
class DashboardData:
    checkers: List[CheckerStats] = field(default_factory=list)
    total_checks: int = 0
    latest_results: Dict[str, StoredResult] = field(default_factory=dict)
    overall: Summary = field(default_factory=Summary)
    skipped: int = 0

    @property
    def pass_rate(self) -> int:
        return calculate_pass_rate(self.overall.total_files, self.overall.files_with_issues)

    @property
    def latest_check_time(self) -> Optional[datetime]:
        times = [r.record.timestamp for r in self.latest_results.values()]
        return max(times) if times else None


class QueryService:
    """Операции чтения поверх ResultStore."""

    def __init__(self, store: ResultStore):
        self.store = store

    async def list_results(
        self,
        checker: "CheckerKind | str | None" = None,
        limit: int = 20,
        offset: int = 0,
    ) -> ResultsPage:
        kind = CheckerKind.parse(checker) if checker else None
        page = await self.store.list(kind, limit=limit, offset=offset)
        corrupt_records.set(page.skipped)
        return ResultsPage(
            results=page.records,
            total=page.total,
            page=offset // limit + 1,
            page_size=limit,
            skipped=page.skipped,
        )

    async def get_result(self, record_id: str) -> StoredResult:
        record = await self.store.get_by_id(record_id)
        return StoredResult(id=record_id, record=record)

    async def dashboard(self) -> DashboardData:
        """
        Агрегаты для дашборда.

        Статистика считается по всем запускам, overall — только по
        последнему запуску каждого checker'а.
        """
        results, skipped = await self.store.list_all()
        corrupt_records.set(skipped)

        by_checker: Dict[str, List[StoredResult]] = {}
        # results уже отсортированы: новые первые
        for result in results:
            by_checker.setdefault(result.record.checker.value, []).append(result)

        data = DashboardData(total_checks=len(results), skipped=skipped)
        for name in sorted(by_checker, key=str.lower):
            runs = by_checker[name]
            totals = aggregate(r.record for r in runs)
            data.latest_results[name] = runs[0]
            data.checkers.append(CheckerStats(
                name=name,
                total_runs=len(runs),
                latest_run=runs[0].record.timestamp,
                total_issues=totals.total_issues,
                error_count=totals.error_count,
                warning_count=totals.warning_count,
                info_count=totals.info_count,
            ))

        data.overall = aggregate(r.record for r in data.latest_results.values())
        return data
