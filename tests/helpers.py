"""Общие фейки и фикстурные данные для тестов."""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from marvin.core.runner import ProcessResult
from marvin.core.types import CheckerKind, Issue, ResultRecord, Severity, Summary


VALE_OUTPUT = json.dumps({
    "docs/a.md": [
        {
            "Check": "Vale.Spelling",
            "Description": "",
            "Line": 3,
            "Link": "",
            "Message": "Did you really mean 'teh'?",
            "Severity": "error",
            "Span": [5, 7],
            "Match": "teh",
        },
        {
            "Check": "Microsoft.Passive",
            "Description": "",
            "Line": 10,
            "Link": "",
            "Message": "Avoid passive voice.",
            "Severity": "suggestion",
            "Span": [1, 12],
            "Match": "was written",
        },
    ],
    "docs/b.md": [
        {
            "Check": "Microsoft.We",
            "Description": "",
            "Line": 1,
            "Link": "",
            "Message": "Try to avoid using first-person plural like 'we'.",
            "Severity": "warning",
            "Span": [14, 15],
            "Match": "we",
        },
    ],
})


MARKDOWNLINT_OUTPUT = json.dumps([
    {
        "fileName": "docs/index.md",
        "lineNumber": 1,
        "ruleNames": ["MD041", "first-line-heading"],
        "ruleDescription": "First line in a file should be a top-level heading",
        "ruleInformation": "",
        "errorDetail": None,
        "errorContext": "Intro text",
        "errorRange": None,
        "fixInfo": None,
        "severity": "error",
    },
    {
        "fileName": "docs/guide.md",
        "lineNumber": 7,
        "ruleNames": ["MD013", "line-length"],
        "ruleDescription": "Line length",
        "ruleInformation": "",
        "errorDetail": "Expected: 80; Actual: 120",
        "errorContext": None,
        "errorRange": [81, 40],
        "fixInfo": None,
        "severity": "warning",
    },
    {
        "fileName": "docs/index.md",
        "lineNumber": 12,
        "ruleNames": ["MD009"],
        "ruleDescription": "Trailing spaces",
        "ruleInformation": "",
        "errorDetail": None,
        "errorContext": None,
        "errorRange": [20, 2],
        "fixInfo": {"deleteCount": 2},
        "severity": "warning",
    },
])


class FakeRunner:
    """ProcessRunner без реальных процессов."""

    def __init__(
        self,
        stdout: str = "",
        stderr: str = "",
        exit_code: int = 0,
        exc: Optional[BaseException] = None,
        delay: float = 0.0,
    ):
        self.stdout = stdout
        self.stderr = stderr
        self.exit_code = exit_code
        self.exc = exc
        self.delay = delay
        self.calls: List[List[str]] = []

    async def run(self, args: Sequence[str], timeout: Optional[float]) -> ProcessResult:
        self.calls.append(list(args))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return ProcessResult(stdout=self.stdout, stderr=self.stderr, exit_code=self.exit_code)


BASE_TIME = datetime(2025, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


def make_issue(file: str = "docs/a.md", severity: Severity = Severity.WARNING, line: int = 1) -> Issue:
    return Issue(file=file, line=line, column=1, severity=severity, message="msg", rule="R1")


def make_record(
    checker: CheckerKind = CheckerKind.VALE,
    minutes: int = 0,
    issues: Optional[List[Issue]] = None,
    total_files: int = 2,
) -> ResultRecord:
    issues = issues if issues is not None else [make_issue()]
    return ResultRecord(
        checker=checker,
        timestamp=BASE_TIME + timedelta(minutes=minutes),
        path="docs",
        summary=Summary.from_issues(issues, total_files=total_files),
        issues=issues,
        metadata={"config_file": ""},
    )
