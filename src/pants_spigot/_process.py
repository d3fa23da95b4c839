"""Foreground external process execution (no Pants dependencies).

Processes run to completion on the calling thread. Captured output is
logged line by line while the process runs. Every live process is
tracked so an interrupted orchestrator can terminate them all instead of
leaving an orphaned server behind.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from pants_spigot._exceptions import ProcessFailedError

logger = logging.getLogger(__name__)

TERMINATE_GRACE_SECONDS = 10.0

_live_processes: set[subprocess.Popen] = set()
_live_lock = threading.Lock()


@dataclass(frozen=True)
class ProcessRequest:
    """An external process to run in the foreground.

    ``interactive`` processes inherit stdin, stdout and stderr from the
    orchestrator so an operator can use the process console; otherwise
    output is captured and attached to any failure.
    """

    argv: tuple[str, ...]
    description: str
    cwd: Optional[str] = None
    interactive: bool = False


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    stdout: str = ""
    stderr: str = ""


ProcessRunner = Callable[[ProcessRequest], ProcessResult]


def run_process(request: ProcessRequest) -> ProcessResult:
    """Run ``request`` and block until it exits.

    Raises:
        ProcessFailedError: If the process cannot be started or exits non-zero.
    """
    logger.debug("Running %s: %s", request.description, " ".join(request.argv))
    pipe = None if request.interactive else subprocess.PIPE
    try:
        proc = subprocess.Popen(
            list(request.argv),
            cwd=request.cwd,
            stdin=None if request.interactive else subprocess.DEVNULL,
            stdout=pipe,
            stderr=pipe,
            text=True,
            bufsize=1,
        )
    except OSError as exc:
        raise ProcessFailedError(request.description, -1, stderr=str(exc)) from exc

    with _live_lock:
        _live_processes.add(proc)
    try:
        if request.interactive:
            proc.wait()
            stdout, stderr = "", ""
        else:
            stdout, stderr = _stream_output(proc, request.description)
    except BaseException:
        _terminate(proc)
        raise
    finally:
        with _live_lock:
            _live_processes.discard(proc)

    result = ProcessResult(proc.returncode, stdout or "", stderr or "")
    if result.exit_code != 0:
        raise ProcessFailedError(
            request.description,
            result.exit_code,
            stdout=result.stdout,
            stderr=result.stderr,
        )
    return result


def terminate_all() -> int:
    """Terminate every process started by run_process that is still alive.

    Returns the number of processes signalled.
    """
    with _live_lock:
        procs = list(_live_processes)
    for proc in procs:
        _terminate(proc)
    return len(procs)


def _terminate(proc: subprocess.Popen) -> None:
    if proc.poll() is not None:
        return
    logger.warning("Terminating process %s", proc.pid)
    proc.terminate()
    try:
        proc.wait(timeout=TERMINATE_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        logger.warning("Process %s did not exit, killing it", proc.pid)
        proc.kill()
        proc.wait()


def _stream_output(proc: subprocess.Popen, description: str) -> tuple[str, str]:
    """Log output lines as they arrive and return everything captured."""
    stderr_lines: list[str] = []
    reader = threading.Thread(
        target=_drain,
        args=(proc.stderr, stderr_lines, description),
        name=f"{description}-stderr",
        daemon=True,
    )
    reader.start()
    stdout_lines: list[str] = []
    _drain(proc.stdout, stdout_lines, description)
    reader.join()
    proc.wait()
    return "".join(stdout_lines), "".join(stderr_lines)


def _drain(stream, lines: list[str], description: str) -> None:
    with stream:
        for line in stream:
            lines.append(line)
            logger.info("[%s] %s", description, line.rstrip("\n"))


class DeferringRunner:
    """ProcessRunner that runs batch requests and queues interactive ones.

    A host that owns the operator's console, such as the spigot-debug goal
    running under pantsd, launches the queued requests itself once the
    task graph has finished.
    """

    def __init__(self, runner: ProcessRunner = run_process) -> None:
        self._runner = runner
        self.deferred: list[ProcessRequest] = []

    def __call__(self, request: ProcessRequest) -> ProcessResult:
        if not request.interactive:
            return self._runner(request)
        logger.debug("Deferring %s until the task graph finishes", request.description)
        self.deferred.append(request)
        return ProcessResult(exit_code=0)


def in_directory_argv(request: ProcessRequest) -> tuple[str, ...]:
    """argv that runs ``request`` from its cwd under a launcher that starts in the build root."""
    if request.cwd is None:
        return request.argv
    return ("/bin/sh", "-c", 'cd "$1" && shift && exec "$@"', "sh", request.cwd, *request.argv)
