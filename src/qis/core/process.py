"""Blocking subprocess helpers for modules that wrap external tools."""

from __future__ import annotations

import shutil
import subprocess
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import structlog

from qis.core.errors import ModuleError

log = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class ToolOutput:
    """Captured result of one tool invocation."""

    command: list[str]
    returncode: int
    stdout: str
    stderr: str
    duration_seconds: float


def require_executable(module: str, executable: str) -> str:
    """Resolve an executable on PATH or raise ModuleError."""
    resolved = shutil.which(executable)
    if resolved is None:
        raise ModuleError.tool_not_found(module, executable)
    return resolved


def run_tool(
    module: str,
    command: list[str],
    *,
    cwd: Path,
    timeout: float | None = None,
) -> ToolOutput:
    """Run a tool to completion and capture its output."""
    require_executable(module, command[0])
    log.debug("tool_invoked", module=module, command=command, cwd=str(cwd))

    start = time.perf_counter()
    try:
        proc = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise ModuleError.tool_timeout(module, command, timeout or 0.0) from e
    except OSError as e:
        raise ModuleError.tool_failed(module, command, str(e)) from e

    elapsed = time.perf_counter() - start
    log.debug("tool_finished", module=module, returncode=proc.returncode, elapsed_s=elapsed)
    return ToolOutput(
        command=command,
        returncode=proc.returncode,
        stdout=proc.stdout.decode(errors="replace"),
        stderr=proc.stderr.decode(errors="replace"),
        duration_seconds=elapsed,
    )


def stream_tool(
    module: str,
    command: list[str],
    *,
    cwd: Path,
    echo: Callable[[str], None],
    log_path: Path | None = None,
    timeout: float | None = None,
) -> int:
    """Run a tool, echoing its combined output line by line.

    Output is also written to ``log_path`` when given. A timeout kills the
    process and raises ModuleError.
    """
    require_executable(module, command[0])
    log.debug("tool_invoked", module=module, command=command, cwd=str(cwd))

    try:
        proc = subprocess.Popen(
            command,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
    except OSError as e:
        raise ModuleError.tool_failed(module, command, str(e)) from e

    timed_out = threading.Event()

    def _kill() -> None:
        timed_out.set()
        proc.kill()

    timer = threading.Timer(timeout, _kill) if timeout else None
    if timer is not None:
        timer.start()

    log_file = log_path.open("w", encoding="utf-8") if log_path is not None else None
    try:
        assert proc.stdout is not None
        for line in proc.stdout:
            echo(line)
            if log_file is not None:
                log_file.write(line)
        returncode = proc.wait()
    finally:
        if timer is not None:
            timer.cancel()
        if log_file is not None:
            log_file.close()

    if timed_out.is_set():
        raise ModuleError.tool_timeout(module, command, timeout or 0.0)

    log.debug("tool_finished", module=module, returncode=returncode)
    return returncode
