"""Unified CLI entry point for addrgen.

Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml -> env vars (ADDRGEN_* with double underscores) -> CLI flags.
"""

from __future__ import annotations

from typing import Optional

import typer

from addrgen.cli.generate_cmd import generate
from addrgen.cli.history_cmd import history_app
from addrgen.cli.mail_cmd import mail_app
from addrgen.cli.settings_cmd import settings_app

try:
    from importlib.metadata import version

    VERSION = version("addrgen")
except Exception:
    VERSION = "unknown"

APP_HELP = (
    "addrgen: real address generator. "
    "Synthetic identities placed at real addresses near an IP or a chosen place, with history and a disposable inbox. "
    "Config precedence: settings.default.toml -> settings.<env>.toml -> settings.local.toml -> env vars (ADDRGEN_* with __) -> CLI flags."
)

app = typer.Typer(add_completion=True, help=APP_HELP)

app.command("generate")(generate)
app.add_typer(history_app, name="history")
app.add_typer(mail_app, name="mail")
app.add_typer(settings_app, name="settings")


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default: api.host)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default: api.port)."),
) -> None:
    """Run the web page and JSON API with uvicorn."""
    import uvicorn

    from addrgen.api.app import create_app
    from addrgen.settings import get_settings

    settings = get_settings()
    uvicorn.run(create_app(), host=host or settings.api.host, port=port or settings.api.port)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING or ERROR."),
) -> None:
    """Show help when no subcommand is provided."""
    if version:
        typer.echo(f"addrgen {VERSION}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    from addrgen.logging_config import configure_logging
    from addrgen.settings import get_settings

    configure_logging(log_level or get_settings().log_level)


if __name__ == "__main__":
    app()
