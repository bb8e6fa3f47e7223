"""Mini README: Entry point CLI for launching the Fleet Ledger service.

This script exposes a Typer CLI that starts the FastAPI application with
configurable host, port, and production flags. Settings fall back to
``FLEETLEDGER_`` environment variables when options are omitted.
"""

from __future__ import annotations

from typing import Optional

import typer
import uvicorn

from fleetledger.configuration import get_settings
from fleetledger.logging_utils import configure_root_logger

cli = typer.Typer(help="Launch and manage the Fleet Ledger bookkeeping service.")


@cli.command()
def run(
    host: Optional[str] = typer.Option(None, help="Interface the ledger API binds to."),
    port: Optional[int] = typer.Option(None, help="Port the ledger API listens on."),
    log_level: Optional[str] = typer.Option(None, help="Override FLEETLEDGER_LOG_LEVEL."),
    production: bool = typer.Option(False, help="Serve without auto-reload."),
) -> None:
    """Serve the ledger API with uvicorn."""

    settings = get_settings()
    bind_host = host or settings.interface_host
    bind_port = port or settings.interface_port
    level = (log_level or settings.log_level).upper()
    configure_root_logger(level)

    # Browsers cannot open the 0.0.0.0 sentinel, so point operators at localhost.
    browser_host = "127.0.0.1" if bind_host in {"0.0.0.0", "::"} else bind_host
    typer.echo(
        f"Starting Fleet Ledger on {bind_host}:{bind_port}.\n"
        f"API docs at http://{browser_host}:{bind_port}/docs"
    )
    uvicorn.run(
        "fleetledger.interface.web_app:create_application",
        host=bind_host,
        port=bind_port,
        factory=True,
        reload=not production,
        log_level=level.lower(),
    )


@cli.command("show-settings")
def show_settings() -> None:
    """Print the effective configuration."""

    settings = get_settings()
    for name, value in settings.model_dump().items():
        typer.echo(f"{name} = {value}")


if __name__ == "__main__":
    cli()
