"""Main CLI entry point for gotestcraft."""

import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from ..adapters.golang.package_loader import PackageLoadError
from ..adapters.io.edit_writer import EditWriterError
from ..adapters.io.logging_setup import GOTESTCRAFT_THEME, LoggerManager, LogMode
from ..config.loader import ConfigLoader, ConfigurationError
from ..config.models import GoTestCraftConfig
from ..domain.edits import DocumentChange
from ..domain.errors import AddTestError
from .dependency_injection import DependencyError, create_dependency_container

logger = logging.getLogger(__name__)


class ClickContext:
    """Context object for Click commands."""

    def __init__(self) -> None:
        self.config: GoTestCraftConfig | None = None
        self.container: dict[str, Any] | None = None
        self.console: Console = Console(theme=GOTESTCRAFT_THEME)
        self.verbose: bool = False
        self.quiet: bool = False
        self.dry_run: bool = False


def display_error(
    console: Console, message: str, suggestions: list[str], title: str
) -> None:
    """Show an error panel with optional suggestions."""
    body = f"[error]{message}[/]"
    if suggestions:
        body += "\n\n" + "\n".join(f"• {s}" for s in suggestions)
    console.print(Panel(body, title=title, border_style="red"))


def position_to_range(
    src: bytes, line: int | None, column: int | None, offset: int | None
) -> tuple[int, int]:
    """
    Convert a CLI position to a byte range in src.

    A line without a column selects the whole line. Lines and columns are
    1-based; columns count bytes.
    """
    if offset is not None:
        if not 0 <= offset <= len(src):
            raise click.BadParameter(
                f"offset {offset} is outside the file ({len(src)} bytes)", param_hint="--offset"
            )
        return offset, offset

    if line is None:
        raise click.UsageError("exactly one of --line or --offset is required")
    lines = src.split(b"\n")
    if not 1 <= line <= len(lines):
        raise click.BadParameter(
            f"line {line} is outside the file ({len(lines)} lines)", param_hint="--line"
        )
    start = sum(len(text) + 1 for text in lines[: line - 1])
    if column is None:
        return start, start + len(lines[line - 1])
    if not 1 <= column <= len(lines[line - 1]) + 1:
        raise click.BadParameter(f"column {column} is outside line {line}", param_hint="--column")
    return start + column - 1, start + column - 1


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Reduce output: set log level to WARNING and hide INFO",
)
@click.option(
    "--dry-run", "--dry", is_flag=True, help="Preview changes without writing them"
)
@click.option(
    "--set",
    "overrides",
    multiple=True,
    metavar="KEY=VALUE",
    help="Override a configuration value, e.g. generation.fresh_test_name=false",
)
@click.pass_context
def app(
    ctx: click.Context,
    config: Path | None,
    verbose: bool,
    quiet: bool,
    dry_run: bool,
    overrides: tuple[str, ...],
) -> None:
    """gotestcraft - table-driven test scaffolds for Go functions and methods."""
    ctx.ensure_object(ClickContext)
    ctx.obj.verbose = verbose
    ctx.obj.quiet = quiet
    ctx.obj.dry_run = dry_run
    console = ctx.obj.console

    LoggerManager.setup_global_logging()

    try:
        loader = ConfigLoader(config)
        ctx.obj.config = loader.load_config(
            cli_overrides=loader.overrides_from_pairs(overrides)
        )

        LoggerManager.set_log_mode(
            LogMode(ctx.obj.config.logging.mode), verbose=verbose, quiet=quiet
        )
        LoggerManager.suppress_modules(
            ctx.obj.config.logging.suppress_modules, verbose=verbose
        )
        logger.debug("Debug mode enabled - verbose logging active")

        ctx.obj.container = create_dependency_container(ctx.obj.config, dry_run=dry_run)

    except ConfigurationError as e:
        display_error(
            console,
            f"Configuration error: {e}",
            [
                "Check if the configuration file exists and is readable",
                "Verify the configuration file format (TOML or YAML)",
                "Check GOTESTCRAFT_* environment variables for typos",
                "Check that --set values have the form section.key=value",
            ],
            "Configuration Failed",
        )
        sys.exit(1)
    except DependencyError as e:
        display_error(
            console,
            f"Dependency injection error: {e}",
            [
                "Check that tree-sitter and tree-sitter-go are installed",
                "Try reinstalling with 'pip install --force-reinstall gotestcraft'",
            ],
            "Initialization Failed",
        )
        sys.exit(1)


@app.command("add-test")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--line", "-l", type=click.IntRange(min=1), help="1-based line inside the target")
@click.option("--column", type=click.IntRange(min=1), help="1-based byte column on --line")
@click.option("--offset", "-o", type=click.IntRange(min=0), help="Byte offset inside the target")
@click.pass_context
def add_test(
    ctx: click.Context,
    file: Path,
    line: int | None,
    column: int | None,
    offset: int | None,
) -> None:
    """Add a table-driven test for the function or method at a position of FILE."""
    console = ctx.obj.console
    if (line is None) == (offset is None):
        raise click.UsageError("exactly one of --line or --offset is required")
    if column is not None and line is None:
        raise click.UsageError("--column requires --line")

    start, end = position_to_range(file.read_bytes(), line, column, offset)
    container = ctx.obj.container
    usecase = container["add_test_usecase"]
    writer = container["writer_adapter"]

    try:
        changes = usecase.add_test(file, start, end)
        written = writer.apply(changes, dry_run=ctx.obj.dry_run)
    except AddTestError as e:
        display_error(console, str(e), [], "Cannot Add Test")
        sys.exit(1)
    except (PackageLoadError, EditWriterError) as e:
        display_error(console, str(e), ["Try running with --verbose for more information"], "Failed")
        sys.exit(1)

    if not ctx.obj.quiet:
        _display_summary(console, changes)
    if ctx.obj.dry_run:
        for path in written:
            console.print(Panel(
                Syntax(writer.previews[path], "go", line_numbers=True),
                title=f"[path]{path}[/] (dry run)",
            ))
    elif not ctx.obj.quiet:
        for path in written:
            console.print(f"[success]Updated[/] [path]{path}[/]")


def _display_summary(console: Console, changes: list[DocumentChange]) -> None:
    table = Table(title="Document changes")
    table.add_column("Change")
    table.add_column("File", style="path")
    table.add_column("Edits", justify="right")
    for change in changes:
        table.add_row(change.kind, str(change.path), str(len(change.edits)))
    console.print(table)


if __name__ == "__main__":
    app()
