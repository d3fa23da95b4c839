"""Tests for foreground process execution."""

from __future__ import annotations

import logging
import subprocess
import sys

import pytest

from pants_spigot import _process
from pants_spigot._exceptions import ProcessFailedError
from pants_spigot._process import (
    DeferringRunner,
    ProcessRequest,
    ProcessResult,
    in_directory_argv,
    run_process,
    terminate_all,
)


def _python(code: str, **kwargs) -> ProcessRequest:
    return ProcessRequest(argv=(sys.executable, "-c", code), description="python", **kwargs)


class TestRunProcess:
    def test_captures_output(self):
        result = run_process(_python("import sys; print('out'); print('err', file=sys.stderr)"))
        assert result.exit_code == 0
        assert result.stdout.strip() == "out"
        assert result.stderr.strip() == "err"

    def test_runs_in_cwd(self, tmp_path):
        result = run_process(_python("import os; print(os.getcwd())", cwd=str(tmp_path)))
        assert result.stdout.strip() == str(tmp_path.resolve())

    def test_nonzero_exit_raises_with_output(self):
        with pytest.raises(ProcessFailedError) as exc_info:
            run_process(_python("import sys; print('broken', file=sys.stderr); sys.exit(3)"))
        assert exc_info.value.exit_code == 3
        assert "broken" in exc_info.value.stderr
        assert "broken" in str(exc_info.value)

    def test_missing_executable(self, tmp_path):
        request = ProcessRequest(
            argv=(str(tmp_path / "no-such-java"), "-version"),
            description="java",
        )
        with pytest.raises(ProcessFailedError) as exc_info:
            run_process(request)
        assert exc_info.value.exit_code == -1

    def test_output_logged_while_running(self, caplog):
        caplog.set_level(logging.INFO, logger="pants_spigot._process")
        code = "import sys; print('Downloading', flush=True); print('Applying patches', file=sys.stderr)"
        result = run_process(_python(code))
        assert "[python] Downloading" in caplog.text
        assert "[python] Applying patches" in caplog.text
        assert result.stdout == "Downloading\n"
        assert result.stderr == "Applying patches\n"

    def test_failure_keeps_streamed_output(self):
        code = "import sys\nfor i in range(3): print('step', i)\nsys.exit(1)"
        with pytest.raises(ProcessFailedError) as exc_info:
            run_process(_python(code))
        assert exc_info.value.stdout.splitlines() == ["step 0", "step 1", "step 2"]

    def test_process_untracked_after_exit(self):
        run_process(_python("pass"))
        assert not _process._live_processes


class _FakeProc:
    def __init__(self, exits_on_terminate=True):
        self.exits_on_terminate = exits_on_terminate
        self.returncode = None
        self.pid = 4242
        self.calls = []

    def poll(self):
        return self.returncode

    def terminate(self):
        self.calls.append("terminate")
        if self.exits_on_terminate:
            self.returncode = -15

    def kill(self):
        self.calls.append("kill")
        self.returncode = -9

    def wait(self, timeout=None):
        if self.returncode is None:
            raise subprocess.TimeoutExpired("server", timeout)
        return self.returncode


class TestTerminateAll:
    def test_terminates_live_processes(self, monkeypatch):
        proc = _FakeProc()
        monkeypatch.setattr(_process, "_live_processes", {proc})
        assert terminate_all() == 1
        assert proc.calls == ["terminate"]

    def test_kills_when_terminate_is_ignored(self, monkeypatch):
        proc = _FakeProc(exits_on_terminate=False)
        monkeypatch.setattr(_process, "_live_processes", {proc})
        monkeypatch.setattr(_process, "TERMINATE_GRACE_SECONDS", 0.01)
        terminate_all()
        assert proc.calls == ["terminate", "kill"]

    def test_already_exited_left_alone(self, monkeypatch):
        proc = _FakeProc()
        proc.returncode = 0
        monkeypatch.setattr(_process, "_live_processes", {proc})
        terminate_all()
        assert proc.calls == []

    def test_nothing_running(self, monkeypatch):
        monkeypatch.setattr(_process, "_live_processes", set())
        assert terminate_all() == 0


class TestDeferringRunner:
    def test_batch_requests_run_now(self):
        seen = []

        def runner(request):
            seen.append(request)
            return ProcessResult(0, stdout="built")

        deferring = DeferringRunner(runner)
        request = ProcessRequest(argv=("java", "-jar", "BuildTools.jar"), description="BuildTools")
        assert deferring(request).stdout == "built"
        assert seen == [request]
        assert deferring.deferred == []

    def test_interactive_requests_queued(self):
        def runner(request):
            raise AssertionError("interactive request must not run")

        deferring = DeferringRunner(runner)
        request = ProcessRequest(argv=("java", "-cp", "spigot.jar"), description="server", interactive=True)
        assert deferring(request).exit_code == 0
        assert deferring.deferred == [request]


class TestInDirectoryArgv:
    def test_no_cwd_unchanged(self):
        request = ProcessRequest(argv=("java", "-version"), description="java")
        assert in_directory_argv(request) == ("java", "-version")

    def test_runs_from_cwd(self, tmp_path):
        target = tmp_path / "server dir"
        target.mkdir()
        request = _python("import os, sys; print(os.getcwd(), sys.argv[1:])", cwd=str(target))
        wrapped = ProcessRequest(
            argv=in_directory_argv(request) + ("nogui",),
            description="wrapped",
        )
        result = run_process(wrapped)
        assert result.stdout.strip() == f"{target.resolve()} ['nogui']"
