"""Тесты Checker Invoker: аргументы, конфиги, классификация исхода, таймауты."""

import asyncio
import os
import sys

import pytest

from marvin.core.errors import InvalidCheckerKind, TimeoutExceeded
from marvin.core.invoker import CheckerInvoker, OutcomeKind, classify_outcome, default_definitions
from marvin.core.runner import AsyncioProcessRunner
from helpers import FakeRunner, MARKDOWNLINT_OUTPUT, VALE_OUTPUT


# ═══════════════════════════════════════════════════════
# CLASSIFICATION
# ═══════════════════════════════════════════════════════

class TestClassifyOutcome:

    def test_nonzero_exit_with_output_is_success(self):
        outcome = classify_outcome(VALE_OUTPUT, exit_code=1)
        assert outcome.kind is OutcomeKind.SUCCESS
        assert outcome.output == VALE_OUTPUT

    def test_nonzero_exit_without_output_is_failure(self):
        outcome = classify_outcome("", exit_code=1, stderr="E100 Runtime error")
        assert outcome.kind is OutcomeKind.EXECUTION_FAILURE
        assert outcome.exit_code == 1
        assert outcome.stderr == "E100 Runtime error"

    def test_whitespace_only_output_is_failure(self):
        assert classify_outcome("  \n", exit_code=2).kind is OutcomeKind.EXECUTION_FAILURE

    def test_clean_exit_without_output_is_success(self):
        assert classify_outcome("", exit_code=0).succeeded

    def test_spawn_failure_is_failure(self):
        outcome = classify_outcome("", exit_code=None, stderr="No such file")
        assert not outcome.succeeded
        assert outcome.exit_code is None


# ═══════════════════════════════════════════════════════
# INVOKER
# ═══════════════════════════════════════════════════════

@pytest.mark.asyncio
async def test_invalid_checker_does_not_spawn(project_root):
    runner = FakeRunner(stdout=VALE_OUTPUT)
    invoker = CheckerInvoker(project_root, runner=runner)

    with pytest.raises(InvalidCheckerKind):
        await invoker.run("eslint", "docs")
    assert runner.calls == []


@pytest.mark.asyncio
async def test_empty_target_rejected(project_root):
    runner = FakeRunner()
    invoker = CheckerInvoker(project_root, runner=runner)

    with pytest.raises(ValueError):
        await invoker.run("vale", "  ")
    assert runner.calls == []


@pytest.mark.asyncio
async def test_vale_args_with_detected_config(project_root):
    (project_root / ".vale.ini").write_text("StylesPath = styles\n")
    runner = FakeRunner(stdout=VALE_OUTPUT, exit_code=1)
    invoker = CheckerInvoker(project_root, runner=runner)

    output, outcome = await invoker.run("vale", "docs")

    assert outcome.succeeded
    assert output == VALE_OUTPUT
    args = runner.calls[0]
    assert args[0] == "vale"
    assert "--output=JSON" in args
    assert f"--config={project_root / '.vale.ini'}" in args
    assert "--minAlertLevel=suggestion" in args
    assert args[-1] == "docs"


@pytest.mark.asyncio
async def test_no_config_flag_without_config_file(project_root):
    runner = FakeRunner(stdout="[]")
    invoker = CheckerInvoker(project_root, runner=runner)

    await invoker.run("markdownlint", "docs")

    assert runner.calls[0] == ["markdownlint", "docs", "--json"]


@pytest.mark.asyncio
async def test_explicit_config_wins(project_root):
    (project_root / ".markdownlint.yaml").write_text("default: true\n")
    runner = FakeRunner(stdout="[]")
    invoker = CheckerInvoker(project_root, runner=runner)

    await invoker.run("markdownlint", "docs", config_path="custom.yaml")

    assert runner.calls[0] == ["markdownlint", "--config", "custom.yaml", "docs", "--json"]


@pytest.mark.asyncio
async def test_markdownlint_fix_flag(project_root):
    runner = FakeRunner(stdout="[]")
    invoker = CheckerInvoker(project_root, definitions=default_definitions(markdownlint_fix=True), runner=runner)

    await invoker.run("markdownlint", "docs", config_path="custom.yaml")

    assert runner.calls[0] == ["markdownlint", "--config", "custom.yaml", "--fix", "docs", "--json"]


@pytest.mark.asyncio
async def test_markdownlint_findings_on_stderr(project_root):
    """markdownlint печатает JSON в stderr и выходит с 1."""
    runner = FakeRunner(stdout="", stderr=MARKDOWNLINT_OUTPUT, exit_code=1)
    invoker = CheckerInvoker(project_root, runner=runner)

    output, outcome = await invoker.run("markdownlint", "docs")

    assert outcome.succeeded
    assert output == MARKDOWNLINT_OUTPUT


@pytest.mark.asyncio
async def test_markdownlint_plain_stderr_is_failure(project_root):
    runner = FakeRunner(stdout="", stderr="Error: ENOENT: no such file", exit_code=2)
    invoker = CheckerInvoker(project_root, runner=runner)

    output, outcome = await invoker.run("markdownlint", "missing")

    assert output == ""
    assert outcome.kind is OutcomeKind.EXECUTION_FAILURE
    assert outcome.exit_code == 2
    assert "ENOENT" in outcome.stderr


@pytest.mark.asyncio
async def test_missing_binary_is_execution_failure(project_root):
    runner = FakeRunner(exc=FileNotFoundError(2, "No such file or directory", "vale"))
    invoker = CheckerInvoker(project_root, runner=runner)

    output, outcome = await invoker.run("vale", "docs")

    assert output == ""
    assert outcome.kind is OutcomeKind.EXECUTION_FAILURE
    assert outcome.exit_code is None


@pytest.mark.asyncio
async def test_timeout_raises_timeout_exceeded(project_root):
    runner = FakeRunner(exc=asyncio.TimeoutError())
    invoker = CheckerInvoker(project_root, runner=runner, default_timeout=1.5)

    with pytest.raises(TimeoutExceeded) as exc:
        await invoker.run("vale", "docs")
    assert exc.value.timeout == 1.5
    assert exc.value.details["checker"] == "vale"


# ═══════════════════════════════════════════════════════
# REAL SUBPROCESS
# ═══════════════════════════════════════════════════════

@pytest.mark.slow
@pytest.mark.asyncio
async def test_runner_kills_process_on_timeout():
    runner = AsyncioProcessRunner()
    with pytest.raises(asyncio.TimeoutError):
        await runner.run([sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.5)


@pytest.mark.slow
@pytest.mark.asyncio
async def test_runner_captures_streams_separately():
    runner = AsyncioProcessRunner()
    result = await runner.run(
        [sys.executable, "-c", "import sys; print('out'); print('err', file=sys.stderr); sys.exit(1)"],
        timeout=10,
    )
    assert result.stdout.strip() == "out"
    assert result.stderr.strip() == "err"
    assert result.exit_code == 1


@pytest.mark.slow
@pytest.mark.asyncio
async def test_runner_missing_binary_raises_oserror():
    runner = AsyncioProcessRunner()
    with pytest.raises(OSError):
        await runner.run(["definitely-not-a-real-checker-binary"], timeout=5)


class _ExitedProcess:
    """Процесс, завершившийся между таймаутом и kill()."""

    pid = 4242
    returncode = 0

    def __init__(self):
        self.waited = False

    async def communicate(self):
        await asyncio.sleep(30)

    def kill(self):
        raise ProcessLookupError()

    async def wait(self):
        self.waited = True
        return 0


@pytest.mark.asyncio
async def test_runner_timeout_when_process_already_exited(monkeypatch):
    proc = _ExitedProcess()

    async def fake_exec(*args, **kwargs):
        return proc

    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake_exec)

    with pytest.raises(asyncio.TimeoutError):
        await AsyncioProcessRunner().run(["vale", "docs"], timeout=0.05)
    assert proc.waited


@pytest.mark.slow
@pytest.mark.asyncio
async def test_runner_kills_process_when_cancelled(tmp_path):
    pid_file = tmp_path / "child.pid"
    script = f"import os, time; open({str(pid_file)!r}, 'w').write(str(os.getpid())); time.sleep(30)"
    task = asyncio.create_task(AsyncioProcessRunner().run([sys.executable, "-c", script], timeout=60))

    for _ in range(100):
        if pid_file.exists() and pid_file.read_text():
            break
        await asyncio.sleep(0.05)
    pid = int(pid_file.read_text())

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    # процесс убит и уже собран
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)
