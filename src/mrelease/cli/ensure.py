"""CLI error handling utilities with styled output.

All errors use a red "Error:" prefix and exit with status 1.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TypeVar

import click

from mrelease.cli.output import user_output
from mrelease.core.errors import MaintenanceError

T = TypeVar("T")


class Ensure:
    """Helper class for asserting invariants with consistent error handling."""

    @staticmethod
    def invariant(condition: bool, error_message: str) -> None:
        """Ensure condition is true, otherwise output styled error and exit.

        Raises:
            SystemExit: If condition is false (with exit code 1)
        """
        if not condition:
            user_output(click.style("Error: ", fg="red") + error_message)
            raise SystemExit(1)

    @staticmethod
    def not_none(value: T | None, error_message: str) -> T:
        """Ensure value is not None, otherwise output styled error and exit."""
        if value is None:
            user_output(click.style("Error: ", fg="red") + error_message)
            raise SystemExit(1)
        return value

    @staticmethod
    def succeeds(operation: Callable[[], T]) -> T:
        """Run an engine operation, turning MaintenanceError into a styled exit."""
        with reported_errors():
            return operation()


@contextmanager
def reported_errors() -> Iterator[None]:
    """Report MaintenanceError (and failed commands) as a styled error and exit 1."""
    try:
        yield
    except (MaintenanceError, RuntimeError) as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from e
