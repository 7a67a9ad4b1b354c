"""
Запуск внешних процессов.

Узкий интерфейс run(args, timeout) -> ProcessResult, чтобы checker'ы
можно было подменять в тестах без запуска реальных процессов.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    """Захваченный вывод завершившегося процесса."""

    stdout: str
    stderr: str
    exit_code: int


class ProcessRunner(Protocol):
    async def run(self, args: Sequence[str], timeout: Optional[float]) -> ProcessResult:
        """
        Запустить процесс и дождаться завершения.

        Raises:
            asyncio.TimeoutError: процесс не завершился за timeout (и был убит)
            OSError: процесс не удалось запустить (например, нет бинарника)
        """
        ...


async def _kill(proc) -> None:
    """Убить процесс и дождаться его; уже завершившийся процесс не ошибка."""
    try:
        proc.kill()
    except ProcessLookupError:
        pass
    await proc.wait()


class AsyncioProcessRunner:
    """ProcessRunner на asyncio subprocess."""

    def __init__(self, cwd: Optional[str] = None):
        self.cwd = cwd

    async def run(self, args: Sequence[str], timeout: Optional[float]) -> ProcessResult:
        logger.debug(f"Spawning: {' '.join(args)}")
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=self.cwd,
        )

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            # Частичный вывод убитого процесса отбрасываем
            await _kill(proc)
            logger.warning(f"Killed {args[0]} (pid {proc.pid}) after {timeout}s")
            raise
        except BaseException:
            # Отмена задачи снаружи (например, соседняя ветка gather)
            await _kill(proc)
            logger.warning(f"Killed {args[0]} (pid {proc.pid}): run cancelled")
            raise

        return ProcessResult(
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
            exit_code=proc.returncode,
        )
