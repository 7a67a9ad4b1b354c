"""
CLI интерфейс для Marvin.

Ходит в backend по HTTP, использует Rich для вывода.
"""

import os
from typing import Optional

from dotenv import load_dotenv
import httpx
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
import typer

from marvin.core.query import calculate_pass_rate, group_issues_by_file
from marvin.core.types import Issue

# MARVIN_BACKEND_URL может прийти из .env
load_dotenv()

app = typer.Typer(
    name="marvin",
    help="Marvin CLI — проверки документации (vale, markdownlint) и история результатов"
)
console = Console()

BACKEND_URL = os.getenv("MARVIN_BACKEND_URL", "http://localhost:8000")

SEVERITY_STYLE = {"error": "red", "warning": "yellow", "info": "blue"}


def _client() -> httpx.Client:
    return httpx.Client(base_url=BACKEND_URL, timeout=10.0)


def _request(method: str, url: str, **kwargs) -> httpx.Response:
    """Запрос к backend; недоступный backend — выход с кодом 1."""
    try:
        with _client() as client:
            return client.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        console.print(f"[red]❌ Backend недоступен ({BACKEND_URL}): {e}[/]")
        raise typer.Exit(1)


def _fail(response: httpx.Response) -> None:
    try:
        data = response.json()
        message = data.get("details") or data.get("error") or response.text
    except ValueError:
        message = response.text
    console.print(f"[red]Ошибка ({response.status_code}): {message}[/]")
    raise typer.Exit(1)


@app.command()
def run(
    checker: str = typer.Argument(..., help="vale | markdownlint"),
    path: Optional[str] = typer.Argument(None, help="Путь для проверки (по умолчанию docs/)"),
):
    """▶️  Запустить проверку и сохранить результат."""
    with console.status(f"[bold blue]Running {checker}...[/]"):
        # Таймаут проверки задаёт backend, ждём чуть дольше
        response = _request("POST", "/run-check", json={"checker": checker, "path": path}, timeout=180.0)

    if response.status_code != 200:
        _fail(response)

    data = response.json()
    console.print(f"✅ {data['message']}")
    console.print(f"[dim]Результат сохранён: {data['id']}[/]")


@app.command()
def results(
    checker: Optional[str] = typer.Option(None, "--checker", "-c", help="Фильтр по checker'у"),
    limit: int = typer.Option(20, "--limit", "-n"),
    offset: int = typer.Option(0, "--offset"),
):
    """📋 Последние результаты проверок."""
    params = {"limit": limit, "offset": offset}
    if checker:
        params["checker"] = checker
    response = _request("GET", "/results", params=params)
    if response.status_code != 200:
        _fail(response)

    data = response.json()
    table = Table(title=f"Результаты (стр. {data['page']}, всего {data['total']})")
    table.add_column("ID", style="cyan")
    table.add_column("Checker")
    table.add_column("Когда", style="dim")
    table.add_column("Путь")
    table.add_column("Issues", justify="right")
    table.add_column("Pass rate", justify="right", style="green")

    for item in data["results"]:
        summary = item["summary"]
        table.add_row(
            item["id"],
            item["checker"],
            item["timestamp"],
            item["path"],
            str(summary["total_issues"]),
            f"{calculate_pass_rate(summary['total_files'], summary['files_with_issues'])}%",
        )
    console.print(table)

    if data.get("skipped"):
        console.print(f"[yellow]⚠️  Пропущено нечитаемых файлов: {data['skipped']}[/]")


@app.command()
def show(result_id: str):
    """🔍 Подробный отчёт по одному результату."""
    response = _request("GET", f"/results/{result_id}")
    if response.status_code == 404:
        console.print(f"[red]Результат не найден: {result_id}[/]")
        raise typer.Exit(1)
    if response.status_code != 200:
        _fail(response)

    data = response.json()
    summary = data["summary"]
    console.print(Panel(
        f"Path: {data['path']}\n"
        f"Files Scanned: {summary['total_files']}\n"
        f"Files with Issues: {summary['files_with_issues']}\n"
        f"Total Issues: {summary['total_issues']} "
        f"({summary['error_count']} errors, {summary['warning_count']} warnings, "
        f"{summary['info_count']} suggestions)",
        title=f"Marvin - {data['checker']} Results ({data['timestamp']})",
    ))

    issues = [Issue.from_dict(item) for item in data["issues"]]
    if not issues:
        console.print("[green]No issues found! ✓[/]")
        return

    for file_name, file_issues in group_issues_by_file(issues).items():
        console.print(f"\n[bold]{escape(file_name)}[/]")
        for issue in file_issues:
            style = SEVERITY_STYLE.get(issue.severity.value, "white")
            console.print(
                f"  {issue.line}:{issue.column} [{style}]{issue.severity.value}[/] "
                f"{escape(issue.message)} [dim]({escape(issue.rule)})[/]"
            )
            if issue.context:
                console.print(f"    [dim]Context: {escape(issue.context)}[/]")


@app.command()
def dashboard():
    """📊 Сводка по всем checker'ам."""
    response = _request("GET", "/dashboard")
    if response.status_code != 200:
        _fail(response)

    data = response.json()
    table = Table(title=f"📊 Проверок всего: {data['total_checks']}")
    table.add_column("Checker", style="cyan")
    table.add_column("Запусков", justify="right")
    table.add_column("Последний", style="dim")
    table.add_column("Errors", justify="right", style="red")
    table.add_column("Warnings", justify="right", style="yellow")
    table.add_column("Info", justify="right", style="blue")

    for stats in data["checkers"]:
        table.add_row(
            stats["name"],
            str(stats["total_runs"]),
            stats["latest_run"],
            str(stats["error_count"]),
            str(stats["warning_count"]),
            str(stats["info_count"]),
        )
    console.print(table)
    console.print(f"Pass rate (последние запуски): [bold green]{data['pass_rate']}%[/]")


@app.command()
def health():
    """🏥 Проверить статус системы."""
    response = _request("GET", "/health")
    data = response.json()

    status = "🟢" if data.get("status") == "healthy" else "🔴"
    console.print(f"{status} Backend: {data.get('status')}")
    for name, component in data.get("components", {}).items():
        mark = "🟢" if component.get("status") == "healthy" else "🔴"
        console.print(f"   {mark} {name}: {component.get('error') or component.get('path') or component.get('status')}")

    if data.get("status") != "healthy":
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
