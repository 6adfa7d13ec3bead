import asyncio
import logging
import shlex
from collections.abc import Sequence
from logging.handlers import RotatingFileHandler
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from litdoc import __version__
from litdoc.core.build_settings import BuildSettings
from litdoc.core.tasks import COMPILE, CONVERT, PUBLISH, default_task_graph, run_task
from litdoc.infrastructure.backend import Backend
from litdoc.infrastructure.backends.dry_run_backend import DryRunBackend
from litdoc.infrastructure.backends.local_backend import LocalBackend
from litdoc.infrastructure.config import get_config
from litdoc.infrastructure.errors import LitdocError
from litdoc.infrastructure.logging.log_paths import get_main_log_path

# Shared console for CLI output; stderr is resolved at write time
cli_console = Console(stderr=True)

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def setup_logging(log_level_name: str, console_logging: bool = False, log_file: str = ""):
    """Configure logging for litdoc.

    By default, logs go to a file in the system-appropriate log directory.
    Console logging can be enabled for debugging.

    Args:
        log_level_name: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        console_logging: If True, also log to console via Rich
        log_file: Explicit log file path; empty uses the system log directory
    """
    log_level = logging.getLevelName(log_level_name.upper())

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        if isinstance(handler, (RotatingFileHandler, RichHandler)):
            root_logger.removeHandler(handler)
            handler.close()

    # 10 MB max, keep 3 backups
    file_handler = RotatingFileHandler(
        get_main_log_path(log_file),
        maxBytes=10 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(file_handler)

    if console_logging:
        console_handler = RichHandler(
            console=cli_console,
            rich_tracebacks=True,
            show_path=False,
        )
        console_handler.setLevel(log_level)
        root_logger.addHandler(console_handler)

    root_logger.setLevel(logging.DEBUG)
    logging.getLogger("litdoc").setLevel(log_level)


def echo_command(argv: Sequence[str]) -> None:
    cli_console.print(f"$ {shlex.join(argv)}", markup=False, highlight=False, soft_wrap=True)


def create_backend(settings: BuildSettings, dry_run: bool) -> Backend:
    if dry_run:
        return DryRunBackend(echo=echo_command)
    return LocalBackend(echo=echo_command, timeout=settings.command_timeout)


def build_options(f):
    f = click.option(
        "--source-dir",
        "-s",
        type=click.Path(file_okay=False, path_type=Path),
        help="Directory containing the literate markdown sources.",
    )(f)
    f = click.option(
        "--target-dir",
        "-t",
        type=click.Path(file_okay=False, path_type=Path),
        help="Directory holding the compiled output files.",
    )(f)
    f = click.option("--compiler", help="Literate-doc compiler executable.")(f)
    f = click.option("--converter", help="Document converter executable.")(f)
    f = click.option(
        "--output-extension",
        help="Extension appended to every converted file (default: html).",
    )(f)
    f = click.option(
        "--dry-run",
        is_flag=True,
        help="Print the commands without running them.",
    )(f)
    f = click.option(
        "--log-level",
        type=click.Choice(LOG_LEVELS, case_sensitive=False),
        help="Set the logging level (default: from configuration).",
    )(f)
    f = click.option(
        "--console-log",
        is_flag=True,
        help="Also write log messages to the console.",
    )(f)
    return f


def run_build_task(
    task_name: str,
    with_dependencies: bool,
    source_dir,
    target_dir,
    compiler,
    converter,
    output_extension,
    dry_run,
    log_level,
    console_log,
):
    config = get_config(reload=True)
    setup_logging(
        log_level or config.logging.log_level,
        console_logging=console_log,
        log_file=config.logging.log_file,
    )

    try:
        settings = BuildSettings.from_config(
            config,
            source_dir=source_dir,
            target_dir=target_dir,
            compiler_executable=compiler,
            converter_executable=converter,
            output_extension=output_extension,
        )
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--output-extension") from e

    graph = default_task_graph(settings)
    backend = create_backend(settings, dry_run)
    try:
        asyncio.run(run_task(graph, task_name, backend, with_dependencies=with_dependencies))
    except LitdocError as e:
        logger.debug(f"Task '{task_name}' failed", exc_info=e)
        cli_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}", highlight=False)
        raise SystemExit(1) from e

    cli_console.print(f"[green]Task '{task_name}' completed.[/green]")


@click.group()
@click.version_option(__version__, prog_name="litdoc")
def cli():
    """Compile literate documentation and convert it to HTML."""


@cli.command(name="compile")
@build_options
def compile_docs(**options):
    """Run the literate-doc compiler on the source directory."""
    run_build_task(COMPILE, True, **options)


@cli.command()
@click.option(
    "--only",
    is_flag=True,
    help="Convert the existing target directory without compiling first.",
)
@build_options
def convert(only, **options):
    """Convert every compiled file to HTML (compiles first)."""
    run_build_task(CONVERT, not only, **options)


@cli.command()
@build_options
def publish(**options):
    """Compile, convert, and run the publish command."""
    run_build_task(PUBLISH, True, **options)


@cli.command()
@build_options
def build(**options):
    """Run the whole chain (same as 'publish')."""
    run_build_task(PUBLISH, True, **options)


@cli.command(name="tasks")
def list_tasks():
    """List the available tasks and their dependencies."""
    settings = BuildSettings.from_config(get_config(reload=True))
    graph = default_task_graph(settings)
    for task in graph.tasks.values():
        depends = f" (after: {', '.join(task.depends_on)})" if task.depends_on else ""
        click.echo(f"{task.name:<10}{task.description}{depends}")


@cli.group()
def config():
    """Manage litdoc configuration files."""
    pass


@config.command(name="init")
@click.option(
    "--location",
    type=click.Choice(["user", "project"], case_sensitive=False),
    default="user",
    help="Where to create the configuration file.",
)
@click.option(
    "--force",
    is_flag=True,
    help="Overwrite existing configuration file.",
)
def config_init(location, force):
    """Create an example configuration file.

    By default, it creates a user-level config file at
    ~/.config/litdoc/config.toml (or platform equivalent).

    Use --location=project to create a project-level config file at
    .litdoc/config.toml in the current directory.
    """
    from litdoc.infrastructure.config import (
        get_config_file_locations,
        write_example_config,
    )

    locations = get_config_file_locations()
    config_path = locations[location.lower()]

    if config_path.exists() and not force:
        click.echo(f"Configuration file already exists at {config_path}\nUse --force to overwrite.")
        return

    try:
        created_path = write_example_config(location=location.lower())
    except PermissionError as e:
        click.echo(f"✗ Error: Permission denied creating config file: {e}", err=True)
        raise SystemExit(1) from e
    click.echo(f"✓ Created configuration file: {created_path}")


@config.command(name="show")
def config_show():
    """Show current configuration values."""
    cfg = get_config(reload=True)

    click.echo("Current litdoc Configuration:")
    click.echo("=" * 60)

    click.echo("\n[Paths]")
    click.echo(f"  source_dir: {cfg.paths.source_dir}")
    click.echo(f"  target_dir: {cfg.paths.target_dir}")

    click.echo("\n[Compiler]")
    click.echo(f"  executable: {cfg.compiler.executable}")
    click.echo(f"  args: {shlex.join(cfg.compiler.args)}")
    for key, value in cfg.compiler.site_variables.items():
        click.echo(f"  site.{key}: {value}")

    click.echo("\n[Converter]")
    click.echo(f"  executable: {cfg.converter.executable}")
    click.echo(f"  output_extension: {cfg.converter.output_extension}")

    click.echo("\n[Publish]")
    click.echo(f"  command: {shlex.join(cfg.publish.command) or '(not set)'}")

    click.echo("\n[Execution]")
    click.echo(f"  command_timeout: {cfg.execution.command_timeout or '(not set)'}")

    click.echo("\n[Logging]")
    click.echo(f"  log_level: {cfg.logging.log_level}")
    click.echo(f"  log_file: {cfg.logging.log_file or '(system log directory)'}")


@config.command(name="locate")
def config_locate():
    """Show configuration file locations."""
    from litdoc.infrastructure.config import find_config_files, get_config_file_locations

    locations = get_config_file_locations()
    existing = find_config_files()

    click.echo("Configuration File Locations:")
    click.echo("=" * 60)

    for kind, title in (
        ("system", "System config (lowest priority)"),
        ("user", "User config"),
        ("project", "Project config (highest priority)"),
    ):
        click.echo(f"\n{title}:")
        click.echo(f"  Path: {existing[kind] or locations[kind]}")
        click.echo(f"  Status: {'✓ Exists' if existing[kind] else 'Not found'}")

    click.echo("\nPriority order (highest to lowest):")
    click.echo("  1. Environment variables")
    click.echo("  2. Project config (.litdoc/config.toml or litdoc.toml)")
    click.echo("  3. User config (~/.config/litdoc/config.toml)")
    click.echo("  4. System config (/etc/litdoc/config.toml)")
    click.echo("  5. Default values")


if __name__ == "__main__":
    cli()
