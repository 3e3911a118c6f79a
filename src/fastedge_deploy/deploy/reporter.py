"""Result sinks for deployment runs.

The orchestrators report through a ``Reporter``: named outputs consumed by
later workflow steps, a notice on success and one failure message.
``GitHubActionsReporter`` speaks the GitHub Actions workflow-command
protocol; outside of Actions outputs are printed as ``name=value`` lines.
"""

import os
from typing import Protocol

import typer

from ..logging import get_logger

logger = get_logger(__name__)


class Reporter(Protocol):
    """Protocol for deployment result sinks."""

    def set_output(self, name: str, value: object) -> None:
        """Publish a named output value."""
        ...

    def notice(self, message: str) -> None:
        """Publish a user-facing notice."""
        ...

    def set_failed(self, message: str) -> None:
        """Publish the terminal failure message of the run."""
        ...


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class GitHubActionsReporter:
    """Writes outputs to ``$GITHUB_OUTPUT`` and notices as workflow commands."""

    def __init__(self, output_path: str | None = None):
        self.output_path = output_path if output_path is not None else os.getenv("GITHUB_OUTPUT")
        self.outputs: dict[str, str] = {}
        self.failure: str | None = None

    def set_output(self, name: str, value: object) -> None:
        text = "" if value is None else str(value)
        self.outputs[name] = text
        logger.debug("output_set", name=name, value=text)
        if self.output_path:
            with open(self.output_path, "a", encoding="utf-8") as f:
                f.write(f"{name}={text}\n")
        else:
            typer.echo(f"{name}={text}")

    def notice(self, message: str) -> None:
        logger.info("notice", message=message)
        typer.echo(f"::notice::{_escape_data(message)}")

    def set_failed(self, message: str) -> None:
        self.failure = message
        typer.echo(f"::error::{_escape_data(message)}")
