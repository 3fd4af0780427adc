"""CLI interface for envgate using Typer framework."""

import json as jsonlib
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from envgate import __description__, __version__
from envgate.config import load_config
from envgate.logging_setup import configure_logging
from envgate.validation import EnvValidator, Verdict

app = typer.Typer(
    name="envgate",
    help=__description__,
    add_completion=False,
    rich_markup_mode="rich"
)

console = Console()
log_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        console.print(f"envgate version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-V", callback=version_callback, help="Show version and exit")
    ] = False,
) -> None:
    """envgate - validate .env files against required keys and value policies."""


def _print_verdict(verdict: Verdict, file_path: Path, format: str) -> None:
    if format == "json":
        data = verdict.to_dict()
        data["file"] = str(file_path)
        console.print(jsonlib.dumps(data, indent=2), markup=False, highlight=False, soft_wrap=True)
    elif format == "markdown":
        console.print("# Validation Report")
        console.print(f"**File:** {escape(str(file_path))}")
        console.print(f"**Status:** {verdict.status.value}")
        console.print(f"**Exit Code:** {verdict.exit_code}")
        console.print()

        if verdict.counters:
            console.print("## Counters")
            for key, value in verdict.counters.items():
                console.print(f"- {key}: {value}")
            console.print()

        if verdict.violation:
            console.print("## Violation")
            console.print(f"- **{escape(verdict.violation.key)}** ({verdict.violation.policy}): {escape(verdict.violation.reason)}")
        elif verdict.missing_keys:
            console.print("## Missing Keys")
            for key in verdict.missing_keys:
                console.print(f"- {escape(key)}")
    else:  # table format
        status_color = "green" if verdict.ok else "red"
        console.print(f"[{status_color}]Validation Status: {verdict.status.value.upper()}[/{status_color}]")
        console.print(f"Exit Code: {verdict.exit_code}")

        if verdict.counters:
            console.print("\n[blue]Counters:[/blue]")
            counter_table = Table()
            counter_table.add_column("Metric", style="cyan")
            counter_table.add_column("Count", style="white", justify="right")

            for key, value in sorted(verdict.counters.items()):
                counter_table.add_row(key.replace("_", " ").title(), str(value))

            console.print(counter_table)

        if verdict.violation:
            console.print("\n[blue]Violation:[/blue]")
            issues_table = Table()
            issues_table.add_column("Key", style="cyan")
            issues_table.add_column("Policy", style="white")
            issues_table.add_column("Reason", style="white")
            issues_table.add_row(
                escape(verdict.violation.key), verdict.violation.policy, escape(verdict.violation.reason)
            )
            console.print(issues_table)
        elif verdict.missing_keys:
            console.print("\n[blue]Missing required keys:[/blue]")
            for key in verdict.missing_keys:
                console.print(f"  [red]-[/red] {escape(key)}")
        else:
            console.print("\n[green]No issues found![/green]")


@app.command()
def validate(
    path: Annotated[
        Path,
        typer.Argument(help="Path to the .env file")
    ] = Path(".env"),
    required: Annotated[
        Optional[list[str]],
        typer.Option("--required", "-k", help="Required key (repeatable); added to configured keys")
    ] = None,
    require_quotes: Annotated[
        bool,
        typer.Option("--require-quotes", help="Reject values that are not quoted in the file")
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Trace every key and policy match")
    ] = False,
    format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: table, json, markdown (default: table)")
    ] = "table",
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .envgate.json)")
    ] = None,
) -> None:
    """Validate a .env file against required keys and value policies."""
    valid_formats = ["table", "json", "markdown"]

    if format not in valid_formats:
        console.print(f"[red]Error:[/red] Invalid format '{escape(format)}'. Must be one of: {', '.join(valid_formats)}")
        raise typer.Exit(1)

    try:
        validator_config = load_config(config)
        updates = {
            "required_keys": [*validator_config.required_keys, *(required or [])],
            "require_quotes": validator_config.require_quotes or require_quotes,
            "verbose": validator_config.verbose or verbose,
        }
        validator_config = validator_config.model_copy(update=updates)

        logger = configure_logging(
            validator_config.logging.level, validator_config.verbose, console=log_console
        )
        validator = EnvValidator.from_config(validator_config, logger=logger)
        verdict = validator.validate_file(path)
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    _print_verdict(verdict, path, format)
    raise typer.Exit(verdict.exit_code)


@app.command()
def policies(
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Configuration file path (default: search for .envgate.json)")
    ] = None,
) -> None:
    """List the policies consulted during validation, in order."""
    try:
        validator = EnvValidator.from_config(load_config(config))
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    table = Table(title="Validation Policies")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Policy", style="cyan")
    table.add_column("Key", style="white")
    table.add_column("Source", style="dim")

    built_in_count = len(validator.built_ins)
    for index, policy in enumerate(validator.registry, start=1):
        source = "built-in" if index <= built_in_count else "config"
        table.add_row(str(index), escape(policy.name), escape(getattr(policy, "key", "*")), source)

    console.print(table)


if __name__ == "__main__":
    app()
