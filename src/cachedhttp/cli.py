"""Typer command line tool for watching the cache at work against a live URL.

``cachedhttp get URL --repeat N`` sends N GET requests through a single
:class:`~cachedhttp.client.sync_client.CachedClient` backed by a private
in-memory store and prints one table row per attempt, showing whether the
body came from the cache. Useful for checking what ``Cache-Control`` an
origin sends and how long its responses stay fresh.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Library errors exit with their
:attr:`~cachedhttp.exceptions.CachedHttpError.exit_code`.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from cachedhttp import __version__
from cachedhttp.cache.store import MemoryCacheStore
from cachedhttp.client.sync_client import CachedClient
from cachedhttp.config import resolve_config
from cachedhttp.exceptions import CachedHttpError
from cachedhttp.exit_codes import EXIT_CANCELLED

app = typer.Typer(
    name="cachedhttp",
    help="Send cached HTTP requests and show which ones hit the cache.",
    no_args_is_help=True,
    add_completion=False,
)

_stdout = Console()
_stderr = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    """Route ``cachedhttp`` log records to stderr through Rich."""
    handler = RichHandler(console=_stderr, show_path=False)
    package_logger = logging.getLogger("cachedhttp")
    package_logger.handlers = [handler]
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


@app.command("get")
def get_command(
    url: str = typer.Argument(..., help="Absolute URL, or path when --base-url is set."),
    repeat: int = typer.Option(2, "--repeat", "-n", min=1, help="Number of GETs to send."),
    interval: float = typer.Option(
        0.0, "--interval", "-i", min=0.0, help="Seconds to wait between GETs."
    ),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Base URL for relative paths."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds."),
    config_path: Optional[str] = typer.Option(None, "--config", help="JSON config file."),
    show_body: bool = typer.Option(False, "--show-body", help="Print the last body to stdout."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log cache decisions to stderr."),
) -> None:
    """GET a URL several times and report which responses were served from cache."""
    _configure_logging(verbose)
    try:
        config = resolve_config(config_path, base_url=base_url, timeout=timeout)
    except CachedHttpError as exc:
        _stderr.print(f"[bold red]Error:[/bold red] {exc}")
        raise typer.Exit(code=exc.exit_code) from exc

    table = Table(title=f"GET {url}", show_header=True, header_style="bold cyan")
    for column in ("attempt", "status", "cached", "bytes", "elapsed"):
        table.add_column(column)

    body = ""
    with CachedClient(config, cache=MemoryCacheStore()) as client:
        for attempt in range(1, repeat + 1):
            if attempt > 1 and interval:
                time.sleep(interval)
            started = time.perf_counter()
            try:
                result = client.get(url)
            except CachedHttpError as exc:
                _stderr.print(f"[bold red]Error:[/bold red] {exc}")
                raise typer.Exit(code=exc.exit_code) from exc
            elapsed_ms = (time.perf_counter() - started) * 1000
            body = result.body
            table.add_row(
                str(attempt),
                str(result.status_code),
                "[green]yes[/green]" if result.was_cached else "no",
                str(len(result.body.encode("utf-8"))),
                f"{elapsed_ms:.1f} ms",
            )
        size = client.cache.count()

    _stderr.print(table)
    _stderr.print(f"[dim]{size} entr{'y' if size == 1 else 'ies'} cached[/dim]")
    if show_body:
        _stdout.print(body, markup=False, highlight=False)


@app.command("version")
def version_command() -> None:
    """Print the installed cachedhttp version."""
    typer.echo(f"cachedhttp {__version__}")


def main() -> None:
    """Console-script entry point for ``cachedhttp``."""
    try:
        app()
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)
