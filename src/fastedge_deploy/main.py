import asyncio
import os
from typing import TypeVar

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
import typer

from fastedge_deploy.config import BaseSettings, DeployAppSettings, DeploySecretSettings
from fastedge_deploy.deploy import GitHubActionsReporter, run_deploy_app, run_deploy_secret
from fastedge_deploy.logging import setup_logging

app = typer.Typer(no_args_is_help=True)
console = Console()

S = TypeVar("S", bound=BaseSettings)

API_KEY_HELP = "FastEdge API key [env: INPUT_API_KEY]"
API_URL_HELP = "FastEdge API base URL [env: INPUT_API_URL]"


@app.callback()
def callback():
    """
    Deploy WebAssembly applications and secrets to FastEdge.

    Every option falls back to the matching INPUT_<NAME> environment variable.
    """


def _load_settings(settings_cls: type[S], **options: str | None) -> S:
    overrides = {name: value for name, value in options.items() if value is not None}
    try:
        settings = settings_cls(**overrides)
    except ValidationError as e:
        console.print(f"[bold red]Invalid configuration:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=2) from None
    setup_logging(settings.service_name, settings.log_format, settings.log_level)
    return settings


def _finish(exit_code: int, reporter: GitHubActionsReporter) -> None:
    if exit_code:
        raise typer.Exit(code=exit_code)
    if not os.getenv("GITHUB_ACTIONS"):
        console.print("[bold green]✓ Deployment finished[/bold green]")
        for name, value in reporter.outputs.items():
            console.print(f"{name}: [cyan]{value}[/cyan]")


@app.command("app")
def deploy_app_command(
    api_key: str | None = typer.Option(None, "--api-key", help=API_KEY_HELP),
    api_url: str | None = typer.Option(None, "--api-url", help=API_URL_HELP),
    wasm_file: str | None = typer.Option(
        None, "--wasm-file", "-w", help="Path to the .wasm binary"
    ),
    app_name: str | None = typer.Option(None, "--app-name", "-n", help="Application name"),
    app_id: str | None = typer.Option(None, "--app-id", help="Existing application ID"),
    env: str | None = typer.Option(None, "--env", help="JSON object of environment variables"),
    rsp_headers: str | None = typer.Option(
        None, "--rsp-headers", help="JSON object of response headers"
    ),
    secrets: str | None = typer.Option(None, "--secrets", help='JSON object {"NAME": {"id": 1}}'),
    comment: str | None = typer.Option(None, "--comment", help="Application comment"),
    log_format: str | None = typer.Option(None, "--log-format", help="console or json"),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),
):
    """Create or update an application, uploading the binary when it changed."""
    settings = _load_settings(
        DeployAppSettings,
        api_key=api_key,
        api_url=api_url,
        wasm_file=wasm_file,
        app_name=app_name,
        app_id=app_id,
        env=env,
        rsp_headers=rsp_headers,
        secrets=secrets,
        comment=comment,
        log_format=log_format,
        log_level=log_level,
    )
    reporter = GitHubActionsReporter()
    _finish(asyncio.run(run_deploy_app(settings, reporter)), reporter)


@app.command("secret")
def deploy_secret_command(
    api_key: str | None = typer.Option(None, "--api-key", help=API_KEY_HELP),
    api_url: str | None = typer.Option(None, "--api-url", help=API_URL_HELP),
    secret_name: str | None = typer.Option(None, "--secret-name", "-n", help="Secret name"),
    secret_id: str | None = typer.Option(None, "--secret-id", help="Existing secret ID"),
    secret: str | None = typer.Option(None, "--secret", help="Single value stored in slot 0"),
    secret_slots: str | None = typer.Option(
        None, "--secret-slots", help='JSON array [{"slot": 0, "value": "..."}]'
    ),
    comment: str | None = typer.Option(None, "--comment", help="Secret comment"),
    log_format: str | None = typer.Option(None, "--log-format", help="console or json"),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ERROR"),
):
    """Create or update a secret; slots no longer listed are deleted."""
    settings = _load_settings(
        DeploySecretSettings,
        api_key=api_key,
        api_url=api_url,
        secret_name=secret_name,
        secret_id=secret_id,
        secret=secret,
        secret_slots=secret_slots,
        comment=comment,
        log_format=log_format,
        log_level=log_level,
    )
    reporter = GitHubActionsReporter()
    _finish(asyncio.run(run_deploy_secret(settings, reporter)), reporter)


if __name__ == "__main__":
    app()
