"""
Оркестратор проверок: Invoker -> парсер -> Result Record -> Store.

Features:
- Одиночный запуск checker'а с сохранением результата
- Параллельный запуск нескольких checker'ов
- Ни одной частичной записи при сбое или таймауте
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

from marvin.core.errors import ExecutionFailure, MarvinError, TimeoutExceeded
from marvin.core.invoker import CheckerInvoker
from marvin.core.parsers import OutputParseError, parse_output
from marvin.core.store import ResultStore
from marvin.core.types import CheckerKind, ResultRecord, utc_now
from marvin.infrastructure.metrics import check_duration, check_runs, issues_found

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOutcome:
    """Итог успешного запуска: сохранённая запись и сырой вывод checker'а."""

    id: str
    record: ResultRecord
    raw_output: str


class CheckOrchestrator:
    """Запускает checker'ы и сохраняет их результаты."""

    def __init__(self, invoker: CheckerInvoker, store: ResultStore, default_target: "str | Path" = "docs"):
        """
        Args:
            invoker: Запуск внешних checker'ов
            store: Хранилище результатов
            default_target: Корень документации, если путь не передан
        """
        self.invoker = invoker
        self.store = store
        self.default_target = str(default_target)

    async def run_check(self, checker: "CheckerKind | str", target_path: Optional[str] = None) -> RunOutcome:
        """
        Запустить checker и сохранить результат.

        Raises:
            InvalidCheckerKind: неизвестный checker
            ExecutionFailure: checker не отработал или выдал нечитаемый вывод
            TimeoutExceeded: checker убит по таймауту
            StoreUnavailable: не удалось записать результат
        """
        kind = CheckerKind.parse(checker)
        path = target_path or self.default_target

        logger.info(f"Starting {kind.value} check of {path}...")
        start_time = time.perf_counter()

        try:
            raw_output, outcome = await self.invoker.run(kind, path)
        except TimeoutExceeded:
            check_runs.labels(checker=kind.value, outcome="timeout").inc()
            logger.error(f"{kind.value} check of {path} timed out")
            raise
        finally:
            check_duration.labels(checker=kind.value).observe(time.perf_counter() - start_time)

        if not outcome.succeeded:
            check_runs.labels(checker=kind.value, outcome="failure").inc()
            logger.error(f"{kind.value} check of {path} failed: exit={outcome.exit_code} stderr={outcome.stderr.strip()[:200]}")
            raise ExecutionFailure(kind.value, path, outcome.exit_code, outcome.stderr)

        try:
            parsed = parse_output(kind, raw_output)
        except OutputParseError as e:
            check_runs.labels(checker=kind.value, outcome="failure").inc()
            logger.error(f"{kind.value} output could not be parsed: {e}")
            raise ExecutionFailure(kind.value, path, outcome.exit_code, outcome.stderr, reason=str(e)) from e

        record = ResultRecord(
            checker=kind,
            timestamp=utc_now(),
            path=path,
            summary=parsed.summary,
            issues=parsed.issues,
            metadata=self._metadata_for(kind, outcome.exit_code),
        )
        record_id = await self.store.save(record)

        check_runs.labels(checker=kind.value, outcome="success").inc()
        for severity, count in (
            ("error", record.summary.error_count),
            ("warning", record.summary.warning_count),
            ("info", record.summary.info_count),
        ):
            if count:
                issues_found.labels(checker=kind.value, severity=severity).inc(count)

        logger.info(
            f"Completed {kind.value}: {record.summary.total_issues} issues in "
            f"{record.summary.files_with_issues}/{record.summary.total_files} files, saved as {record_id}"
        )
        return RunOutcome(id=record_id, record=record, raw_output=raw_output)

    async def run_checks(
        self,
        checkers: Sequence["CheckerKind | str"],
        target_path: Optional[str] = None,
    ) -> List[Union[RunOutcome, MarvinError]]:
        """
        Запустить несколько checker'ов параллельно.

        Ошибка одного checker'а не отменяет остальные: на его месте в
        списке будет исключение MarvinError.
        """
        if not checkers:
            return []

        logger.info(f"Running {len(checkers)} checkers in parallel...")
        results = await asyncio.gather(
            *(self.run_check(checker, target_path) for checker in checkers),
            return_exceptions=True,
        )

        for checker, result in zip(checkers, results):
            # Неожиданные исключения не прячем
            if isinstance(result, BaseException) and not isinstance(result, MarvinError):
                raise result
            if isinstance(result, MarvinError):
                logger.warning(f"Checker {checker} failed: {result}")
        return list(results)

    def _metadata_for(self, kind: CheckerKind, exit_code: Optional[int]) -> dict:
        definition = self.invoker.definitions[kind]
        metadata = {
            "config_file": self.invoker.detect_config(kind) or "",
            "exit_code": exit_code,
        }
        if kind is CheckerKind.VALE:
            metadata["min_alert_level"] = definition.options.get("min_alert_level", "")
        else:
            metadata["fix_enabled"] = bool(definition.options.get("fix"))
        return metadata
