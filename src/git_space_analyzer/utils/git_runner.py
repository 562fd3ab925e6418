"""
Centralized Git command runner with dubious ownership handling.

Every git invocation made by the analyzer goes through this module so
that the "dubious ownership" guard, the output size ceiling and the
translation of process failures into analyzer errors live in one place.

Two execution styles are provided:
- run_git_command() buffers the complete output, refusing to hold more
  than max_output_bytes of it.
- stream_git_lines() yields output lines lazily for queries whose
  result is proportional to the size of the whole object store.
"""

import logging
import os
import subprocess
import tempfile
import threading
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from ..errors import (
    BackendUnavailableError,
    OutputLimitExceededError,
    QueryFailedError,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_OUTPUT_BYTES = 10 * 1024 * 1024
READ_CHUNK_SIZE = 64 * 1024


def get_git_environment(project_dir: Path) -> Dict[str, str]:
    """
    Get environment variables for git commands to handle dubious ownership.

    Registers the repository as a safe.directory through GIT_CONFIG_*
    variables, shifting any GIT_CONFIG_* entries inherited from the
    calling environment so they are preserved.

    Args:
        project_dir: Path to the repository

    Returns:
        Dictionary of environment variables for git commands
    """
    env = os.environ.copy()

    env["GIT_CONFIG_KEY_0"] = "safe.directory"
    env["GIT_CONFIG_VALUE_0"] = str(Path(project_dir).resolve())

    config_count = 1
    for key in os.environ:
        if not key.startswith("GIT_CONFIG_KEY_"):
            continue
        idx = key.replace("GIT_CONFIG_KEY_", "")
        if idx.isdigit():
            # Shift inherited entries to make room for safe.directory at index 0
            new_idx = int(idx) + 1
            env[f"GIT_CONFIG_KEY_{new_idx}"] = os.environ[key]
            if f"GIT_CONFIG_VALUE_{idx}" in os.environ:
                env[f"GIT_CONFIG_VALUE_{new_idx}"] = os.environ[
                    f"GIT_CONFIG_VALUE_{idx}"
                ]
            config_count = max(config_count, new_idx + 1)

    env["GIT_CONFIG_COUNT"] = str(config_count)
    return env


def _start_git_process(cmd: List[str], cwd: Path, stderr) -> subprocess.Popen:
    if not cmd or cmd[0] != "git":
        raise ValueError("Command must start with 'git'")

    logger.debug(f"Running: {' '.join(cmd)} (cwd={cwd})")
    try:
        return subprocess.Popen(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=stderr,
            env=get_git_environment(cwd),
        )
    except FileNotFoundError as e:
        raise BackendUnavailableError(f"Git executable not found: {e}") from e
    except OSError as e:
        raise BackendUnavailableError(
            f"Could not start git in {cwd}: {e}"
        ) from e


class _TimeoutGuard:
    """Kills a git process that outlives its timeout."""

    def __init__(self, process: subprocess.Popen, timeout: Optional[float]):
        self.process = process
        self.timeout = timeout
        self.expired = threading.Event()
        self._timer: Optional[threading.Timer] = None
        if timeout is not None:
            self._timer = threading.Timer(timeout, self._expire)
            self._timer.daemon = True
            self._timer.start()

    def _expire(self) -> None:
        self.expired.set()
        self.process.kill()

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()

    def check(self, cmd: List[str]) -> None:
        if self.expired.is_set():
            raise BackendUnavailableError(
                f"Git command timed out after {self.timeout}s: {' '.join(cmd)}"
            )


def _read_stderr(stderr_file) -> str:
    stderr_file.seek(0)
    return stderr_file.read().decode("utf-8", errors="replace")


def run_git_command(
    cmd: List[str],
    cwd: Path,
    timeout: Optional[float] = None,
    max_output_bytes: int = DEFAULT_MAX_OUTPUT_BYTES,
) -> str:
    """
    Run a git command and return its decoded, stripped standard output.

    Output is read incrementally; once more than max_output_bytes have
    arrived the process is killed and OutputLimitExceededError raised.

    Args:
        cmd: Git command as a list (e.g., ["git", "branch"])
        cwd: Working directory for the command
        timeout: Optional timeout in seconds
        max_output_bytes: Ceiling on the amount of stdout retained

    Returns:
        Command output with surrounding whitespace removed

    Raises:
        BackendUnavailableError: If git cannot be started or times out
        QueryFailedError: If git exits with a non-zero status
        OutputLimitExceededError: If the output exceeds max_output_bytes
    """
    with tempfile.TemporaryFile() as stderr_file:
        process = _start_git_process(cmd, cwd, stderr_file)
        guard = _TimeoutGuard(process, timeout)
        chunks: List[bytes] = []
        received = 0
        try:
            assert process.stdout is not None
            while True:
                chunk = process.stdout.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                received += len(chunk)
                if received > max_output_bytes:
                    process.kill()
                    process.wait()
                    raise OutputLimitExceededError(cmd, max_output_bytes)
                chunks.append(chunk)
            returncode = process.wait()
        finally:
            guard.cancel()
            if process.stdout is not None:
                process.stdout.close()

        guard.check(cmd)
        if returncode != 0:
            raise QueryFailedError(cmd, returncode, _read_stderr(stderr_file))

    return b"".join(chunks).decode("utf-8", errors="replace").strip()


def stream_git_lines(
    cmd: List[str],
    cwd: Path,
    timeout: Optional[float] = None,
) -> Iterator[str]:
    """
    Run a git command and yield its output line by line.

    The exit status is checked once the output is exhausted, so a
    failing command raises after the lines it did produce. Closing the
    iterator early terminates the git process.

    Raises:
        BackendUnavailableError: If git cannot be started or times out
        QueryFailedError: If git exits with a non-zero status
    """
    with tempfile.TemporaryFile() as stderr_file:
        process = _start_git_process(cmd, cwd, stderr_file)
        guard = _TimeoutGuard(process, timeout)
        finished = False
        try:
            assert process.stdout is not None
            for raw_line in process.stdout:
                line = raw_line.decode("utf-8", errors="replace").rstrip("\n")
                if line:
                    yield line
            returncode = process.wait()
            finished = True
        finally:
            guard.cancel()
            if not finished:
                process.kill()
                process.wait()
            if process.stdout is not None:
                process.stdout.close()

        guard.check(cmd)
        if returncode != 0:
            raise QueryFailedError(cmd, returncode, _read_stderr(stderr_file))


def is_git_repository(project_dir: Path) -> bool:
    """
    Check whether a directory carries a git repository marker.

    A `.git` directory marks a regular checkout; a `.git` file marks a
    worktree or submodule checkout.
    """
    project_dir = Path(project_dir)
    return project_dir.is_dir() and (project_dir / ".git").exists()
