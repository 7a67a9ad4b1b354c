"""
Checker Invoker: запуск vale / markdownlint и классификация результата.

Ключевая тонкость: ненулевой exit code — не ошибка. Линтеры выходят с 1,
когда нашли проблемы. Поэтому:

- есть вывод с находками         -> Success (при любом exit code)
- exit code 0                    -> Success (чистый прогон может ничего не печатать)
- ненулевой код и пустой вывод   -> ExecutionFailure
- процесс не запустился          -> ExecutionFailure (exit_code=None)
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from marvin.core.errors import TimeoutExceeded
from marvin.core.runner import AsyncioProcessRunner, ProcessResult, ProcessRunner
from marvin.core.types import CheckerKind

logger = logging.getLogger(__name__)


class OutcomeKind(Enum):
    SUCCESS = "success"
    EXECUTION_FAILURE = "execution_failure"


@dataclass(frozen=True)
class InvocationOutcome:
    """Классифицированный исход запуска."""

    kind: OutcomeKind
    output: str = ""
    exit_code: Optional[int] = None
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS


def classify_outcome(findings_output: str, exit_code: Optional[int], stderr: str = "") -> InvocationOutcome:
    """Классифицировать исход запуска checker'а (см. docstring модуля)."""
    if findings_output.strip() or exit_code == 0:
        return InvocationOutcome(OutcomeKind.SUCCESS, output=findings_output, exit_code=exit_code, stderr=stderr)
    return InvocationOutcome(OutcomeKind.EXECUTION_FAILURE, exit_code=exit_code, stderr=stderr)


@dataclass
class CheckerDefinition:
    """Как вызывать конкретный checker."""

    kind: CheckerKind
    executable: str
    config_candidates: List[str]
    options: Dict[str, str] = field(default_factory=dict)

    def build_args(self, target_path: str, config_path: Optional[str]) -> List[str]:
        if self.kind is CheckerKind.VALE:
            args = [self.executable, "--output=JSON"]
            if config_path:
                args.append(f"--config={config_path}")
            if self.options.get("min_alert_level"):
                args.append(f"--minAlertLevel={self.options['min_alert_level']}")
            if self.options.get("glob"):
                args.append(f"--glob={self.options['glob']}")
            args.append(target_path)
            return args

        args = [self.executable]
        if config_path:
            args.extend(["--config", config_path])
        if self.options.get("fix"):
            args.append("--fix")
        args.extend([target_path, "--json"])
        return args

    def findings_output(self, result: ProcessResult) -> Tuple[str, str]:
        """
        Вернуть (поток с находками, диагностический поток).

        markdownlint печатает JSON в stderr, vale — в stdout.
        """
        if self.kind is CheckerKind.MARKDOWNLINT:
            if result.stderr.lstrip().startswith(("[", "{")):
                return result.stderr, result.stdout
        return result.stdout, result.stderr


def default_definitions(
    vale_path: str = "vale",
    markdownlint_path: str = "markdownlint",
    vale_min_alert_level: str = "suggestion",
    vale_glob: str = "",
    markdownlint_fix: bool = False,
) -> Dict[CheckerKind, CheckerDefinition]:
    return {
        CheckerKind.VALE: CheckerDefinition(
            kind=CheckerKind.VALE,
            executable=vale_path,
            config_candidates=[".vale.ini", "_vale.ini"],
            options={"min_alert_level": vale_min_alert_level, "glob": vale_glob},
        ),
        CheckerKind.MARKDOWNLINT: CheckerDefinition(
            kind=CheckerKind.MARKDOWNLINT,
            executable=markdownlint_path,
            config_candidates=[
                ".markdownlint.yaml",
                ".markdownlint.yml",
                ".markdownlint.json",
                ".markdownlintrc",
            ],
            options={"fix": "true" if markdownlint_fix else ""},
        ),
    }


class CheckerInvoker:
    """Запускает checker как subprocess с ограничением по времени."""

    def __init__(
        self,
        project_root: Path,
        definitions: Optional[Dict[CheckerKind, CheckerDefinition]] = None,
        runner: Optional[ProcessRunner] = None,
        default_timeout: float = 60.0,
    ):
        """
        Args:
            project_root: Где искать конфиги checker'ов (.vale.ini, .markdownlint.yaml)
            definitions: Описания checker'ов (по умолчанию vale и markdownlint из PATH)
            runner: Исполнитель процессов (подменяется в тестах)
            default_timeout: Таймаут по умолчанию, секунды
        """
        self.project_root = Path(project_root)
        self.definitions = definitions or default_definitions()
        self.runner = runner or AsyncioProcessRunner()
        self.default_timeout = default_timeout

    def detect_config(self, checker: CheckerKind) -> Optional[str]:
        """Найти конфиг checker'а в фиксированном месте относительно корня проекта."""
        for name in self.definitions[checker].config_candidates:
            candidate = self.project_root / name
            if candidate.is_file():
                return str(candidate)
        return None

    async def run(
        self,
        checker: "CheckerKind | str",
        target_path: str,
        config_path: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> Tuple[str, InvocationOutcome]:
        """
        Запустить checker.

        Returns:
            (сырой вывод с находками, классифицированный исход)

        Raises:
            InvalidCheckerKind: неизвестный checker (процесс не запускается)
            ValueError: пустой target_path
            TimeoutExceeded: процесс убит по таймауту
        """
        kind = CheckerKind.parse(checker)
        if not target_path or not str(target_path).strip():
            raise ValueError("target_path must be a non-empty path")

        definition = self.definitions[kind]
        config_path = config_path or self.detect_config(kind)
        timeout = self.default_timeout if timeout is None else timeout
        args = definition.build_args(str(target_path), config_path)

        try:
            result = await self.runner.run(args, timeout)
        except asyncio.TimeoutError:
            raise TimeoutExceeded(kind.value, str(target_path), timeout) from None
        except OSError as e:
            logger.error(f"Failed to spawn {definition.executable}: {e}")
            return "", classify_outcome("", None, stderr=str(e))

        output, diagnostics = definition.findings_output(result)
        outcome = classify_outcome(output, result.exit_code, stderr=diagnostics)
        logger.info(
            f"{kind.value} exited with {result.exit_code}: "
            f"{outcome.kind.value}, {len(output)} bytes of output"
        )
        return output, outcome
