"""Output helpers for CLI commands with clear intent.

- user_output: human-facing progress and errors, written to stderr
- machine_output: results meant for piping, written to stdout
"""

import logging

import click


def user_output(message: str = "", nl: bool = True) -> None:
    """Write a human-facing message to stderr."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", nl: bool = True) -> None:
    """Write a result line to stdout."""
    click.echo(message, nl=nl)


class ClickEchoHandler(logging.Handler):
    """Route log records through click so CliRunner captures them."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            if record.levelno >= logging.ERROR:
                message = click.style(message, fg="red")
            elif record.levelno >= logging.WARNING:
                message = click.style(message, fg="yellow")
            click.echo(message, err=True)
        except Exception:  # noqa: BLE001
            self.handleError(record)


def configure_logging(verbose: bool) -> None:
    """Configure the package logger for CLI use.

    Progress lines from `mrelease.core` are INFO; `--verbose` adds DEBUG
    output such as every executed command.
    """
    package_logger = logging.getLogger("mrelease")
    for handler in list(package_logger.handlers):
        if isinstance(handler, ClickEchoHandler):
            package_logger.removeHandler(handler)

    handler = ClickEchoHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    package_logger.propagate = False
