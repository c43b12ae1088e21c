"""Main CLI entry point."""

import importlib
import logging
import os
import socket
import sys
from pathlib import Path
from typing import Any, Optional

import rich_click as click
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from hxwire import __version__
from hxwire.core.component import Component
from hxwire.core.errors import BuildError
from hxwire.runtime.app import HxWire
from hxwire.runtime.page import Page

console = Console()

APP_ENV = "HXWIRE_APP"
DEBUG_ENV = "HXWIRE_DEBUG"

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.STYLE_HELPTEXT_FIRST = True
click.rich_click.STYLE_COMMANDS_TABLE_SHOW_LINES = False
click.rich_click.STYLE_COMMANDS_TABLE_PAD_EDGE = False
click.rich_click.STYLE_COMMANDS_TABLE_BOX = None
click.rich_click.STYLE_OPTIONS_TABLE_BOX = None
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = "Try running 'hxwire --help' for more information."
click.rich_click.STYLE_HEADER_TEXT = "bold cyan"
click.rich_click.STYLE_OPTION = "cyan"
click.rich_click.STYLE_SWITCH = "cyan"
click.rich_click.STYLE_METAVAR = "dim white"
click.rich_click.STYLE_USAGE_COMMAND = "cyan"
click.rich_click.STYLE_USAGE = "dim"

click.rich_click.COMMAND_GROUPS = {
    "hxwire": [
        {"name": "Serve", "commands": ["dev", "run"]},
        {"name": "Inspect", "commands": ["routes", "render"]},
    ]
}


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
    )


def import_app(app_str: str) -> Any:
    """Import application from string (e.g. 'main:app')."""
    if ":" not in app_str:
        raise click.BadParameter("App must be in format 'module:app'", param_hint="APP")

    module_name, app_name = app_str.split(":", 1)

    # Local modules are imported relative to the working directory
    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(
            f"Could not import module '{module_name}': {e}", param_hint="APP"
        )

    try:
        return getattr(module, app_name)
    except AttributeError:
        raise click.BadParameter(
            f"Attribute '{app_name}' not found in module '{module_name}'",
            param_hint="APP",
        )


def _discover_app_str() -> str:
    """Look for an ``app`` in main.py or app.py of the working directory."""
    cwd = Path(os.getcwd())
    for path in [cwd, cwd / "src"]:
        for filename in ["main.py", "app.py"]:
            if not (path / filename).exists():
                continue
            module_name = filename[:-3]
            if path.name == "src":
                module_name = f"src.{module_name}"
            return f"{module_name}:app"

    raise click.UsageError(
        "Could not auto-discover app. Please provide 'APP' argument (e.g. 'main:app')."
    )


def resolve_app(target: Any, debug: bool = False) -> HxWire:
    """Turn an imported object into an application.

    Accepts an :class:`HxWire`, a component, or a zero-argument factory
    returning either.
    """
    if isinstance(target, HxWire):
        return target
    if isinstance(target, Component):
        return HxWire(target, debug=debug)
    if callable(target):
        return resolve_app(target(), debug=debug)
    raise click.BadParameter(
        f"{target!r} is not an HxWire app or component", param_hint="APP"
    )


def create_app() -> HxWire:
    """Application factory used by uvicorn, configured from the environment."""
    app_str = os.environ.get(APP_ENV)
    if not app_str:
        raise RuntimeError(f"{APP_ENV} is not set")
    debug = os.environ.get(DEBUG_ENV, "").lower() in ("1", "true", "yes")
    return resolve_app(import_app(app_str), debug=debug)


def _load(app: Optional[str], debug: bool = False) -> HxWire:
    if not app:
        app = _discover_app_str()
        console.print(f"🔍 Auto-discovered app: [cyan]{app}[/]")
    try:
        return resolve_app(import_app(app), debug=debug)
    except BuildError as e:
        console.print("[bold red]Build failed[/]")
        console.print(str(e), markup=False)
        sys.exit(1)


def _find_available_port(host: str, port: int, max_attempts: int = 100) -> int:
    """Find an available port starting from 'port'."""
    for p in range(port, port + max_attempts):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind((host, p))
                return p
            except OSError:
                continue

    raise click.UsageError(
        f"Could not find an available port starting from {port} after {max_attempts} attempts."
    )


def _serve(
    app: Optional[str],
    host: str,
    port: int,
    debug: bool,
    log_level: str,
    **options: Any,
) -> None:
    import uvicorn

    if not app:
        app = _discover_app_str()
    # Build once in this process so errors are reported before serving
    _load(app, debug=debug)

    os.environ[APP_ENV] = app
    os.environ[DEBUG_ENV] = "1" if debug else ""
    uvicorn.run(
        "hxwire.cli.main:create_app",
        factory=True,
        host=host,
        port=port,
        log_config=None,
        log_level=log_level.lower(),
        **options,
    )


@click.group(
    help=f"""
[bold white on cyan] hxwire [/] [bold cyan]v{__version__}[/] Server-rendered htmx components.

Run [bold cyan]hxwire dev APP[/] to start a reloading development server.
Run [bold cyan]hxwire run APP[/] to start a production server.

[dim]APP is 'module:attribute' naming an HxWire app, a component, or a factory.
If not provided, hxwire looks for 'app' in main.py or app.py.[/dim]
"""
)
@click.version_option(__version__)
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str) -> None:
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    configure_logging(log_level)


@cli.command()
@click.argument("app", required=False)
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=3000, type=int, help="Port to bind to")
@click.option("--debug/--no-debug", default=True, help="Show error details in responses")
@click.pass_context
def dev(ctx: click.Context, app: Optional[str], host: str, port: int, debug: bool) -> None:
    """Start development server with auto-reload."""
    original_port = port
    port = _find_available_port(host, port)
    if port != original_port:
        console.print(
            f"⚠️  Port {original_port} is busy, using [bold cyan]{port}[/] instead."
        )
    console.print(
        f"🚀 Starting hxwire dev server on [link=http://{host}:{port}]http://{host}:{port}[/link]"
    )
    _serve(
        app,
        host,
        port,
        debug,
        ctx.obj["log_level"],
        reload=True,
        reload_dirs=[os.getcwd()],
    )


@cli.command()
@click.argument("app", required=False)
@click.option("--host", default="0.0.0.0", help="Host to bind to")
@click.option("--port", default=8000, type=int, help="Port to bind to")
@click.option("--workers", default=1, type=int, help="Number of worker processes")
@click.option("--no-access-log", is_flag=True, help="Disable access logging")
@click.pass_context
def run(
    ctx: click.Context,
    app: Optional[str],
    host: str,
    port: int,
    workers: int,
    no_access_log: bool,
) -> None:
    """Run production server using Uvicorn."""
    console.print(f"🚀 Starting [bold]production[/] server for [cyan]{app or 'auto'}[/]")
    console.print(
        f"🌍 Listening on [link=http://{host}:{port}]http://{host}:{port}[/link]"
    )
    _serve(
        app,
        host,
        port,
        False,
        ctx.obj["log_level"],
        workers=workers,
        access_log=not no_access_log,
    )


@cli.command()
@click.argument("app", required=False)
def routes(app: Optional[str]) -> None:
    """List the paths served by the application."""
    instance = _load(app)
    table = Table(header_style="bold magenta", box=None)
    table.add_column("Path", style="cyan")
    table.add_column("Kind")
    table.add_column("Middleware", justify="right")
    for path in sorted(instance.page.index):
        entry = instance.page.index[path]
        if path == "/":
            kind = "document"
        elif entry.handler is not None:
            kind = "handler"
        else:
            kind = "partial"
        table.add_row(path, kind, str(len(entry.middleware)))
    console.print(table)


@cli.command()
@click.argument("app", required=False)
@click.argument("path", required=False)
def render(app: Optional[str], path: Optional[str]) -> None:
    """Print the compiled template of every path, or of PATH."""
    if not app:
        app = _discover_app_str()
    target = import_app(app)
    if callable(target) and not isinstance(target, (Component, HxWire)):
        target = target()
    if isinstance(target, HxWire):
        page = target.page
    else:
        page = Page()
        page.add(target)
        errors = page.validate()
        if errors:
            for error_path, err in sorted(errors.items()):
                console.print(f"{error_path}: {err}", style="bold red", markup=False)
            sys.exit(1)

    sources = page.render()
    if path is not None:
        if path not in sources:
            raise click.BadParameter(f"No template at '{path}'", param_hint="PATH")
        sources = {path: sources[path]}
    for source_path, source in sources.items():
        console.rule(f"[cyan]{source_path}[/]")
        console.print(Syntax(source, "html+jinja", word_wrap=True))


if __name__ == "__main__":
    cli()
