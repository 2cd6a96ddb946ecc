"""Tests for subprocess wrapper with rich error context."""

import subprocess
from pathlib import Path
from unittest.mock import Mock, patch

import pytest

from mrelease.core.errors import ExecuteError
from mrelease.core.subprocess import run_subprocess_with_context


def test_success_case_returns_completed_process() -> None:
    """Test that successful subprocess execution returns CompletedProcess."""
    with patch("mrelease.core.subprocess.subprocess.run") as mock_run:
        # Setup successful execution
        mock_result = Mock(spec=subprocess.CompletedProcess)
        mock_result.returncode = 0
        mock_result.stdout = "abc123\n"
        mock_result.stderr = ""
        mock_run.return_value = mock_result

        # Execute
        result = run_subprocess_with_context(
            ["git", "rev-parse", "HEAD"],
            operation_context="resolve HEAD in sim-a",
            cwd=Path("/repos/sim-a"),
        )

        # Verify
        assert result == mock_result
        mock_run.assert_called_once_with(
            ["git", "rev-parse", "HEAD"],
            cwd=Path("/repos/sim-a"),
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=True,
        )


def test_failure_includes_command_exit_code_and_output() -> None:
    """Test that a failed command raises ExecuteError with full context."""
    with patch("mrelease.core.subprocess.subprocess.run") as mock_run:
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=1,
            cmd=["git", "cherry-pick", "abc"],
            output="CONFLICT (content)",
            stderr="error: could not apply abc",
        )

        with pytest.raises(ExecuteError) as exc_info:
            run_subprocess_with_context(
                ["git", "cherry-pick", "abc"],
                operation_context="cherry-pick abc in joist",
                cwd=Path("/repos/joist"),
            )

        error = exc_info.value
        message = str(error)
        assert "Failed to cherry-pick abc in joist" in message
        assert "Command: git cherry-pick abc" in message
        assert "Exit code: 1" in message
        assert "stdout: CONFLICT (content)" in message
        assert "stderr: error: could not apply abc" in message
        assert error.exit_code == 1
        assert error.stderr == "error: could not apply abc"


def test_failure_with_empty_stderr_omits_stderr_line() -> None:
    """Test that subprocess failure with whitespace-only stderr omits the stderr line."""
    with patch("mrelease.core.subprocess.subprocess.run") as mock_run:
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=1,
            cmd=["grunt"],
            stderr="   \n  ",
        )

        with pytest.raises(ExecuteError) as exc_info:
            run_subprocess_with_context(["grunt"], operation_context="build sim-a")

        message = str(exc_info.value)
        assert "Failed to build sim-a" in message
        assert "stderr:" not in message
        assert "stdout:" not in message


def test_execute_error_is_a_runtime_error_with_chained_cause() -> None:
    """Test that the original CalledProcessError is preserved via exception chaining."""
    with patch("mrelease.core.subprocess.subprocess.run") as mock_run:
        original_error = subprocess.CalledProcessError(
            returncode=128,
            cmd=["git", "status"],
            stderr="fatal: not a git repository",
        )
        mock_run.side_effect = original_error

        with pytest.raises(RuntimeError) as exc_info:
            run_subprocess_with_context(["git", "status"], operation_context="check status")

        assert exc_info.value.__cause__ is original_error


def test_missing_binary_raises_execute_error_without_exit_code() -> None:
    """Test that a command that cannot start is reported as not found."""
    with patch("mrelease.core.subprocess.subprocess.run") as mock_run:
        mock_run.side_effect = FileNotFoundError("gh")

        with pytest.raises(ExecuteError) as exc_info:
            run_subprocess_with_context(
                ["gh", "issue", "create"], operation_context="create issue in sim-a"
            )

        assert exc_info.value.exit_code is None
        assert "Command not found while trying to create issue in sim-a: gh" in str(
            exc_info.value
        )


def test_check_false_returns_failed_result() -> None:
    """Test that check=False prevents exception on non-zero exit."""
    with patch("mrelease.core.subprocess.subprocess.run") as mock_run:
        mock_result = Mock(spec=subprocess.CompletedProcess)
        mock_result.returncode = 1
        mock_run.return_value = mock_result

        result = run_subprocess_with_context(
            ["git", "merge-base", "--is-ancestor", "a", "b"],
            operation_context="check ancestry",
            check=False,
            timeout=30,
        )

        assert result.returncode == 1
        mock_run.assert_called_once_with(
            ["git", "merge-base", "--is-ancestor", "a", "b"],
            cwd=None,
            capture_output=True,
            text=True,
            encoding="utf-8",
            check=False,
            timeout=30,
        )
