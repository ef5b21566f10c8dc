import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from reachlogic._engine import apply_configuration
from reachlogic._errors import LogicError
from reachlogic._model import ElementKind
from reachlogic._options import LogicalOptions, dump_logical_options, load_logical_options

from .config import ConfigError, ModelSource, ScriptSource, get_config, parse_model_source
from .loading import load_model

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

_FLAGGED_KINDS = (
    ("Requirements", ElementKind.REQUIREMENT),
    ("Techs", ElementKind.TECH),
    ("Helpers", ElementKind.HELPER),
    ("Obstacles", ElementKind.OBSTACLE),
    ("Strats", ElementKind.STRAT),
    ("Links", ElementKind.LINK),
)


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),  # noqa: FBT003
) -> None:
    """Reachlogic CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


def _resolve_model_source(path: str | None, model_var: str | None) -> ModelSource:
    """Pick the model given on the command line, else the one from pyproject.toml."""
    if path is not None:
        if ":" in path:
            return parse_model_source(path, Path.cwd())
        return ScriptSource(script=Path(path), name=model_var)

    config = get_config()
    if config.model is None:
        msg = "No model given and no [tool.reachlogic].model in pyproject.toml"
        raise ConfigError(msg)
    return config.model


def _resolve_options(options_path: Path | None) -> LogicalOptions:
    if options_path is None:
        options_path = get_config().options
    if options_path is None:
        logger.debug("No logical options file, using defaults")
        return LogicalOptions()
    err_console.print(f"[cyan]Loading logical options from:[/cyan] {options_path}")
    return load_logical_options(options_path)


def _flags_table(counts: dict[str, tuple[int, int, int, int]]) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Element", style="bold")
    table.add_column("Total", justify="right")
    table.add_column("Never", justify="right", style="red")
    table.add_column("Always", justify="right", style="green")
    table.add_column("Free", justify="right", style="yellow")
    for label, (total, never, always, free) in counts.items():
        table.add_row(label, str(total), str(never), str(always), str(free))
    return table


@app.command()
def flags(
    path: Annotated[
        str | None,
        typer.Argument(help="Path to Python script or module path (e.g., mygame.logic:model)"),
    ] = None,
    *,
    model_var: Annotated[
        str | None,
        typer.Option("--name", help="Name of the model variable (for script paths only)"),
    ] = None,
    options: Annotated[
        Path | None,
        typer.Option("--options", help="Path to a logical options TOML file"),
    ] = None,
    list_never: Annotated[
        bool,
        typer.Option("--list-never", help="List the strats made impossible by the options"),
    ] = False,
) -> None:
    """Compute the static logical flags of a model under logical options."""
    err_console.print()

    try:
        source = _resolve_model_source(path, model_var)
        err_console.print(f"[cyan]Loading model from:[/cyan] {source}")
        model = load_model(source)
        logical_options = _resolve_options(options)
        context = apply_configuration(model, logical_options)
    except (ConfigError, LogicError, ImportError, TypeError, ValueError) as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    properties = context.properties
    counts = {
        label: (
            properties.total(kind),
            properties.count(kind, "never"),
            properties.count(kind, "always"),
            properties.count(kind, "free"),
        )
        for label, kind in _FLAGGED_KINDS
    }
    table = _flags_table(counts)
    lock_never = properties.count(ElementKind.LOCK, "never")
    lock_relevant = properties.count(ElementKind.LOCK, "relevant")

    out_console.print(
        Panel(
            table,
            title="[bold]Logical flags[/bold]",
            subtitle=f"[dim]{len(model.locks)} locks: {lock_never} never, {lock_relevant} relevant[/dim]",
            border_style="cyan",
        ),
    )

    if list_never:
        never = context.never_strats()
        out_console.print()
        if never:
            out_console.print(f"[red]{len(never)} impossible strats:[/red]")
            for name in never:
                out_console.print(f"  {name}")
        else:
            out_console.print("[green]No impossible strats[/green]")


@app.command("options-template")
def options_template(
    output: Annotated[
        Path,
        typer.Argument(help="Path to output TOML file"),
    ] = Path("logical-options.toml"),
) -> None:
    """Write the default logical options to a TOML file."""
    output.parent.mkdir(parents=True, exist_ok=True)
    dump_logical_options(LogicalOptions(), output)
    err_console.print(f"[green]✓ Default logical options written to[/green] {output}")


def main() -> None:
    app()
