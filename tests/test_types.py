"""Тесты моделей данных: Summary, Issue, ResultRecord."""

from datetime import datetime, timezone

import pytest
from hypothesis import given, settings, strategies as st

from marvin.core.errors import InvalidCheckerKind
from marvin.core.types import (
    CheckerKind,
    Issue,
    ResultRecord,
    Severity,
    Summary,
    parse_timestamp,
)
from helpers import make_issue, make_record


@st.composite
def issue_lists(draw):
    """Случайные списки находок по небольшому набору файлов."""
    files = st.sampled_from(["a.md", "b.md", "c.md", "dir/d.md"])
    return draw(st.lists(
        st.builds(
            Issue,
            file=files,
            line=st.integers(min_value=1, max_value=500),
            column=st.integers(min_value=1, max_value=120),
            severity=st.sampled_from(list(Severity)),
            message=st.text(max_size=30),
            rule=st.text(min_size=1, max_size=10),
        ),
        max_size=40,
    ))


class TestSummaryProperties:

    @settings(max_examples=100)
    @given(issues=issue_lists(), extra_files=st.integers(min_value=0, max_value=10))
    def test_severity_counts_sum_to_total(self, issues, extra_files):
        summary = Summary.from_issues(issues, total_files=extra_files)
        assert summary.total_issues == summary.error_count + summary.warning_count + summary.info_count
        assert summary.total_issues == len(issues)

    @settings(max_examples=100)
    @given(issues=issue_lists(), total_files=st.integers(min_value=0, max_value=10))
    def test_files_with_issues_never_exceeds_total(self, issues, total_files):
        summary = Summary.from_issues(issues, total_files=total_files)
        assert summary.files_with_issues <= summary.total_files
        assert summary.files_with_issues == len({i.file for i in issues})


def test_summary_addition_is_elementwise():
    a = Summary(4, 2, 5, 1, 3, 1)
    b = Summary(1, 1, 2, 0, 0, 2)
    assert a + b == Summary(5, 3, 7, 1, 3, 3)


def test_issue_is_immutable():
    issue = make_issue()
    with pytest.raises(AttributeError):
        issue.line = 5


def test_issue_context_omitted_when_empty():
    assert "context" not in make_issue().to_dict()
    issue = Issue("a.md", 1, 2, Severity.ERROR, "m", "R", context="teh")
    assert issue.to_dict()["context"] == "teh"


def test_checker_kind_parse():
    assert CheckerKind.parse("vale") is CheckerKind.VALE
    assert CheckerKind.parse(CheckerKind.MARKDOWNLINT) is CheckerKind.MARKDOWNLINT
    with pytest.raises(InvalidCheckerKind) as exc:
        CheckerKind.parse("eslint")
    assert exc.value.details["known"] == ["vale", "markdownlint"]


def test_record_dict_preserves_issue_order():
    issues = [make_issue("b.md", line=9), make_issue("a.md", line=1), make_issue("b.md", line=2)]
    record = make_record(issues=issues)
    restored = ResultRecord.from_dict(record.to_dict())
    assert [(i.file, i.line) for i in restored.issues] == [("b.md", 9), ("a.md", 1), ("b.md", 2)]
    assert restored.timestamp == record.timestamp
    assert restored.summary == record.summary


def test_parse_timestamp_accepts_go_rfc3339():
    parsed = parse_timestamp("2024-01-15T10:30:00.123456789Z")
    assert parsed == datetime(2024, 1, 15, 10, 30, 0, 123456, tzinfo=timezone.utc)


def test_parse_timestamp_with_offset():
    parsed = parse_timestamp("2024-01-15T12:30:00+02:00")
    assert parsed == datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc)


def test_from_dict_rejects_unknown_checker():
    data = make_record().to_dict()
    data["checker"] = "eslint"
    with pytest.raises(ValueError):
        ResultRecord.from_dict(data)
