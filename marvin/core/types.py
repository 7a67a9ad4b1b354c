"""
Модели данных результатов проверок документации.

Result Record — единица сохранённой истории: один завершённый запуск checker'а.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import re
from typing import Any, Dict, Iterable, List, Optional

from marvin.core.errors import InvalidCheckerKind


def _expect(value: Any, kind: type, name: str) -> Any:
    """Проверить тип поля из JSON; ValueError, если файл записи испорчен."""
    if not isinstance(value, kind):
        raise ValueError(f"{name} must be {kind.__name__}, got {type(value).__name__}")
    return value


class CheckerKind(Enum):
    """Поддерживаемые внешние checker'ы."""

    VALE = "vale"
    MARKDOWNLINT = "markdownlint"

    @classmethod
    def parse(cls, value: "str | CheckerKind") -> "CheckerKind":
        """Преобразовать строку в CheckerKind, иначе InvalidCheckerKind."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidCheckerKind(value, [k.value for k in cls]) from None


class Severity(Enum):
    """Уровень серьёзности находки."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Issue:
    """Одна находка checker'а."""

    file: str
    line: int
    column: int
    severity: Severity
    message: str
    rule: str
    context: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "file": self.file,
            "line": self.line,
            "column": self.column,
            "severity": self.severity.value,
            "message": self.message,
            "rule": self.rule,
        }
        # omitempty, как в исходном формате файлов
        if self.context:
            data["context"] = self.context
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Issue":
        _expect(data, dict, "issue")
        return cls(
            file=data["file"],
            line=int(data["line"]),
            column=int(data["column"]),
            severity=Severity(data["severity"]),
            message=data["message"],
            rule=data["rule"],
            context=data.get("context") or None,
        )


@dataclass(frozen=True)
class Summary:
    """Агрегированные счётчики по находкам одного запуска."""

    total_files: int = 0
    files_with_issues: int = 0
    total_issues: int = 0
    error_count: int = 0
    warning_count: int = 0
    info_count: int = 0

    @classmethod
    def from_issues(cls, issues: Iterable[Issue], total_files: int) -> "Summary":
        """
        Посчитать Summary по списку находок.

        Счётчики по severity всегда в сумме дают total_issues.
        """
        issues = list(issues)
        counts = {severity: 0 for severity in Severity}
        for issue in issues:
            counts[issue.severity] += 1

        files_with_issues = len({issue.file for issue in issues})
        return cls(
            total_files=max(total_files, files_with_issues),
            files_with_issues=files_with_issues,
            total_issues=len(issues),
            error_count=counts[Severity.ERROR],
            warning_count=counts[Severity.WARNING],
            info_count=counts[Severity.INFO],
        )

    def __add__(self, other: "Summary") -> "Summary":
        if not isinstance(other, Summary):
            return NotImplemented
        return Summary(
            total_files=self.total_files + other.total_files,
            files_with_issues=self.files_with_issues + other.files_with_issues,
            total_issues=self.total_issues + other.total_issues,
            error_count=self.error_count + other.error_count,
            warning_count=self.warning_count + other.warning_count,
            info_count=self.info_count + other.info_count,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_files": self.total_files,
            "files_with_issues": self.files_with_issues,
            "total_issues": self.total_issues,
            "error_count": self.error_count,
            "warning_count": self.warning_count,
            "info_count": self.info_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Summary":
        _expect(data, dict, "summary")
        return cls(**{key: int(data.get(key, 0)) for key in cls().to_dict()})


# Go пишет RFC 3339 с наносекундами: 2024-01-15T10:30:00.123456789Z
_FRACTION_RE = re.compile(r"\.(\d{6})\d+")


def parse_timestamp(value: str) -> datetime:
    """Разобрать ISO 8601 / RFC 3339 timestamp в aware datetime (UTC по умолчанию)."""
    text = _expect(value, str, "timestamp").strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(r".\1", text)
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ResultRecord:
    """Результат одного завершённого запуска checker'а."""

    checker: CheckerKind
    path: str
    summary: Summary
    issues: List[Issue] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        """Преобразовать в словарь для JSON."""
        return {
            "checker": self.checker.value,
            "timestamp": self.timestamp.isoformat(),
            "path": self.path,
            "summary": self.summary.to_dict(),
            "issues": [issue.to_dict() for issue in self.issues],
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResultRecord":
        """Собрать запись из JSON-словаря. Бросает KeyError/ValueError/TypeError на мусоре."""
        _expect(data, dict, "record")
        return cls(
            checker=CheckerKind.parse(data["checker"]),
            timestamp=parse_timestamp(data["timestamp"]),
            path=_expect(data["path"], str, "path"),
            summary=Summary.from_dict(data["summary"]),
            issues=[Issue.from_dict(item) for item in _expect(data.get("issues") or [], list, "issues")],
            metadata=dict(_expect(data.get("metadata") or {}, dict, "metadata")),
        )


@dataclass(frozen=True)
class StoredResult:
    """Запись вместе с идентификатором, выданным хранилищем."""

    id: str
    record: ResultRecord

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, **self.record.to_dict()}
