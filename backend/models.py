"""Pydantic models for API requests and responses."""

from typing import List, Dict, Any, Optional
from pydantic import BaseModel, ConfigDict, Field


# ═══════════════════════════════════════════════════════
# Result Models
# ═══════════════════════════════════════════════════════

class IssueModel(BaseModel):
    """Single finding."""
    file: str = Field(..., description="File path relative to the checked root")
    line: int = Field(..., description="1-based line number")
    column: int = Field(..., description="1-based column number")
    severity: str = Field(..., description="error | warning | info")
    message: str = Field(..., description="Checker message")
    rule: str = Field(..., description="Rule identifier")
    context: Optional[str] = Field(None, description="Matched text or context snippet")


class SummaryModel(BaseModel):
    """Aggregate counters for one run."""
    total_files: int
    files_with_issues: int
    total_issues: int
    error_count: int
    warning_count: int
    info_count: int


class ResultModel(BaseModel):
    """Persisted result record with its store identifier."""
    id: str = Field(..., description="Store-assigned identifier")
    checker: str = Field(..., description="Checker name (vale/markdownlint)")
    timestamp: str = Field(..., description="Creation timestamp (ISO format)")
    path: str = Field(..., description="Checked path")
    summary: SummaryModel
    issues: List[IssueModel] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ResultsResponse(BaseModel):
    """Paginated results list."""
    model_config = ConfigDict(populate_by_name=True)

    results: List[ResultModel]
    total: int = Field(..., description="Matching records before pagination")
    page: int = Field(..., description="floor(offset/limit) + 1")
    page_size: int = Field(..., alias="pageSize")
    skipped: int = Field(0, description="Unreadable result files skipped while listing")


# ═══════════════════════════════════════════════════════
# Run Models
# ═══════════════════════════════════════════════════════

class RunCheckRequest(BaseModel):
    checker: str = Field(..., description="vale | markdownlint")
    path: Optional[str] = Field(None, description="Target path, defaults to the docs root")


class RunCheckResponse(BaseModel):
    success: bool
    message: str
    output: str = Field(..., description="Raw checker output")
    id: str = Field(..., description="Identifier of the stored result")


# ═══════════════════════════════════════════════════════
# Dashboard Models
# ═══════════════════════════════════════════════════════

class CheckerStatsModel(BaseModel):
    name: str
    total_runs: int
    latest_run: str
    total_issues: int
    error_count: int
    warning_count: int
    info_count: int


class DashboardResponse(BaseModel):
    checkers: List[CheckerStatsModel]
    total_checks: int
    latest_results: Dict[str, ResultModel]
    overall: SummaryModel
    pass_rate: int
    latest_check_time: Optional[str] = None
    skipped: int = 0


# ═══════════════════════════════════════════════════════
# Health Models
# ═══════════════════════════════════════════════════════

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Overall status")
    components: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    timestamp: float
