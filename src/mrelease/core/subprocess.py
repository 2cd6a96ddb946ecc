"""Subprocess execution with enriched error reporting.

All external commands (git, grunt, gh, deploy scripts) run through
`run_subprocess_with_context` so failures carry the operation being
attempted along with the captured output.
"""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from mrelease.core.errors import ExecuteError

logger = logging.getLogger(__name__)


def _decode(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def run_subprocess_with_context(
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path | None = None,
    check: bool = True,
    **kwargs: Any,
) -> subprocess.CompletedProcess[str]:
    """Execute a command, converting failures into ExecuteError.

    Args:
        cmd: Command and arguments to execute
        operation_context: Human-readable description, e.g. "cherry-pick abc in sim-a"
        cwd: Working directory for command execution
        check: Whether a non-zero exit raises (default: True)
        **kwargs: Additional arguments passed to subprocess.run()

    Returns:
        CompletedProcess with text stdout/stderr

    Raises:
        ExecuteError: If the command fails or its binary is not found
    """
    logger.debug("Running %s (cwd=%s)", " ".join(cmd), cwd)
    try:
        return subprocess.run(
            list(cmd),
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=check,
            **kwargs,
        )
    except subprocess.CalledProcessError as e:
        cmd_str = " ".join(str(arg) for arg in cmd)
        stdout_text = _decode(e.stdout).strip()
        stderr_text = _decode(e.stderr).strip()

        error_msg = f"Failed to {operation_context}"
        error_msg += f"\nCommand: {cmd_str}"
        error_msg += f"\nExit code: {e.returncode}"
        if stdout_text:
            error_msg += f"\nstdout: {stdout_text}"
        if stderr_text:
            error_msg += f"\nstderr: {stderr_text}"

        raise ExecuteError(
            error_msg, exit_code=e.returncode, stdout=stdout_text, stderr=stderr_text
        ) from e
    except FileNotFoundError as e:
        cmd_str = " ".join(str(arg) for arg in cmd)
        error_msg = f"Command not found while trying to {operation_context}: {cmd[0]}"
        error_msg += f"\nFull command: {cmd_str}"
        raise ExecuteError(error_msg, exit_code=None) from e
