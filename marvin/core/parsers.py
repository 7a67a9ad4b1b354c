"""
Нормализация JSON-вывода checker'ов в Summary + список Issue.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from marvin.core.types import CheckerKind, Issue, Severity, Summary


class OutputParseError(ValueError):
    """Вывод checker'а не похож на его JSON-формат."""
    pass


@dataclass
class ParsedOutput:
    summary: Summary
    issues: List[Issue] = field(default_factory=list)


_VALE_SEVERITY = {
    "error": Severity.ERROR,
    "warning": Severity.WARNING,
    "suggestion": Severity.INFO,
}


def _load_json(raw_output: str, checker: str) -> Any:
    try:
        return json.loads(raw_output)
    except json.JSONDecodeError as e:
        snippet = raw_output.strip()[:200]
        raise OutputParseError(f"failed to parse {checker} output: {e} (output: {snippet})") from e


def _first_int(values: Any, default: int = 1) -> int:
    if isinstance(values, list) and values and isinstance(values[0], int) and values[0] > 0:
        return values[0]
    return default


def parse_vale_output(raw_output: str) -> ParsedOutput:
    """
    Vale: {"file.md": [{"Check", "Message", "Line", "Span", "Severity", "Match"}, ...]}

    Каждый ключ — просканированный файл.
    """
    if not raw_output.strip():
        return ParsedOutput(summary=Summary())

    data = _load_json(raw_output, "vale")
    if not isinstance(data, dict):
        raise OutputParseError(f"unexpected vale output type: {type(data).__name__}")

    issues = []
    for file_name, alerts in data.items():
        for alert in alerts or []:
            issues.append(Issue(
                file=file_name,
                line=int(alert.get("Line") or 1),
                column=_first_int(alert.get("Span")),
                severity=_VALE_SEVERITY.get(str(alert.get("Severity", "")).lower(), Severity.INFO),
                message=alert.get("Message", ""),
                rule=alert.get("Check", "unknown"),
                context=alert.get("Match") or None,
            ))

    return ParsedOutput(summary=Summary.from_issues(issues, total_files=len(data)), issues=issues)


def parse_markdownlint_output(raw_output: str) -> ParsedOutput:
    """
    markdownlint --json: [{"fileName", "lineNumber", "ruleNames", "ruleDescription",
    "errorDetail", "errorContext", "errorRange", "severity"}, ...]
    """
    if not raw_output.strip():
        return ParsedOutput(summary=Summary())

    data = _load_json(raw_output, "markdownlint")
    if not isinstance(data, list):
        raise OutputParseError(f"unexpected markdownlint output type: {type(data).__name__}")

    issues = []
    for entry in data:
        rule_names = entry.get("ruleNames") or []
        message = entry.get("ruleDescription", "")
        if entry.get("errorDetail"):
            message = f"{message}: {entry['errorDetail']}"

        issues.append(Issue(
            file=entry.get("fileName", ""),
            line=int(entry.get("lineNumber") or 1),
            column=_first_int(entry.get("errorRange")),
            # markdownlint знает только error/warning
            severity=Severity.ERROR if entry.get("severity") == "error" else Severity.WARNING,
            message=message,
            rule=rule_names[0] if rule_names else "unknown",
            context=entry.get("errorContext") or None,
        ))

    total_files = len({issue.file for issue in issues})
    return ParsedOutput(summary=Summary.from_issues(issues, total_files=total_files), issues=issues)


PARSERS: Dict[CheckerKind, Callable[[str], ParsedOutput]] = {
    CheckerKind.VALE: parse_vale_output,
    CheckerKind.MARKDOWNLINT: parse_markdownlint_output,
}


def parse_output(checker: CheckerKind, raw_output: str) -> ParsedOutput:
    try:
        return PARSERS[checker](raw_output)
    except OutputParseError:
        raise
    except (AttributeError, TypeError, ValueError) as e:
        # Валидный JSON, но не той формы (например, alert не объект)
        raise OutputParseError(f"malformed {checker.value} output: {e}") from e
