"""
Таксономия ошибок Marvin.

Каждая ошибка несёт машинный code и details для отображения пользователю.
"""

from typing import Any, Dict, List, Optional


class MarvinError(Exception):
    """Базовая ошибка проверки/хранилища."""

    code = "MARVIN_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class InvalidCheckerKind(MarvinError, ValueError):
    """Неизвестный checker, отклоняется до запуска процесса."""

    code = "INVALID_CHECKER"

    def __init__(self, checker: Any, known: List[str]):
        super().__init__(
            f"Invalid checker type {checker!r}. Must be one of: {', '.join(known)}",
            {"checker": checker, "known": known},
        )
        self.checker = checker


class TimeoutExceeded(MarvinError):
    """Checker не уложился в таймаут и был убит."""

    code = "TIMEOUT"

    def __init__(self, checker: str, path: str, timeout: float):
        super().__init__(
            f"{checker} check of {path} timed out after {timeout}s",
            {"checker": checker, "path": path, "timeout_seconds": timeout},
        )
        self.checker = checker
        self.path = path
        self.timeout = timeout


class ExecutionFailure(MarvinError):
    """Checker не смог отработать: нет вывода, нет бинарника, упал."""

    code = "EXECUTION_FAILURE"

    def __init__(
        self,
        checker: str,
        path: str,
        exit_code: Optional[int],
        stderr: str = "",
        reason: Optional[str] = None,
    ):
        cause = reason or stderr.strip() or "checker produced no output"
        super().__init__(
            f"{checker} check of {path} failed (exit code {exit_code}): {cause}",
            {"checker": checker, "path": path, "exit_code": exit_code, "stderr": stderr},
        )
        self.checker = checker
        self.path = path
        self.exit_code = exit_code
        self.stderr = stderr


class NotFound(MarvinError):
    """Результат с таким идентификатором не существует."""

    code = "NOT_FOUND"

    def __init__(self, result_id: str):
        super().__init__(f"Result not found: {result_id}", {"id": result_id})
        self.result_id = result_id


class StoreUnavailable(MarvinError):
    """Каталог результатов недоступен (в отличие от «ещё ничего не запускали»)."""

    code = "STORE_UNAVAILABLE"

    def __init__(self, location: str, cause: Exception):
        super().__init__(
            f"Results store at {location} is unavailable: {cause}",
            {"location": location, "cause": type(cause).__name__},
        )
        self.location = location
