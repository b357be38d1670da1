"""
cli.py - Typer command line

Usage:
    inkmatch serve --port 8787
    inkmatch serve --conf inkmatch.yaml --verbose
    inkmatch styles
    inkmatch version
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer
import uvicorn
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from inkmatch import APP_NAME, __version__
from inkmatch.catalog import TATTOO_STYLES
from inkmatch.config.logging import configure_logging
from inkmatch.config.settings import load_settings, set_settings

# Logs go to stderr; stdout stays clean for command output
console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name=APP_NAME,
    help="InkMatch MCP server - AI tattoo design previews",
    add_completion=False,
    no_args_is_help=True,
)


@app.command("serve", help="Start the MCP server over Streamable HTTP")
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Interface to bind (default 0.0.0.0)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to listen on (default 8787)"),
    conf: Path | None = typer.Option(
        None, "--conf", "-c", help="YAML config file (overrides $INKMATCH_CONFIG)"
    ),
    json_response: bool | None = typer.Option(
        None,
        "--json-response/--sse-response",
        help="Answer POSTs with plain JSON instead of an SSE stream",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    try:
        settings = load_settings(conf, host=host, port=port, json_response=json_response)
    except (ValidationError, ValueError, OSError) as e:
        err_console.print(Panel(f"[bold red]Invalid configuration:[/bold red] {e}", style="red"))
        raise typer.Exit(1) from e

    configure_logging(level=settings.log_level, verbose=verbose)
    set_settings(settings)

    from inkmatch.app import create_app

    err_console.print(
        Panel(
            f"[bold green]InkMatch MCP server on http://{settings.host}:{settings.port}"
            f"{settings.mcp_path}[/bold green]",
            style="green",
        )
    )
    try:
        uvicorn.run(
            create_app(settings),
            host=settings.host,
            port=settings.port,
            log_level="debug" if verbose else "warning",
        )
    except KeyboardInterrupt:
        sys.exit(0)


@app.command("styles", help="List the tattoo style catalog")
def styles():
    table = Table(title="Tattoo styles")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Description")
    for info in TATTOO_STYLES.values():
        table.add_row(info.key, info.name, info.description)
    console.print(table)


@app.command("version", help="Show the server version")
def version():
    console.print(f"{APP_NAME} {__version__}")


def main():
    """Entry point for the `inkmatch` console script."""
    app()


__all__ = ["app", "main"]
