"""CLI for formstate."""

import asyncio
import json
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from formstate import __version__
from formstate.config import (
    ConfigError,
    FormStateConfig,
    configure_logging,
    get_config_path,
    get_formstate_home,
    get_remember_path,
    load_global_config,
)
from formstate.form import Form
from formstate.io import read_json
from formstate.remember import FileRememberStore, SnapshotValidationError, validate_document
from formstate.submission import SubmissionError, SubmitOptions
from formstate.transport import HttpxTransport

METHODS = ("get", "post", "put", "patch", "delete")

app = typer.Typer(
    name="formstate",
    help="Track form state and submit it over HTTP.",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"formstate version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show debug logs"),
    ] = False,
) -> None:
    """formstate: Track form state and submit it over HTTP."""
    ctx.obj = {"verbose": verbose}
    if verbose:
        configure_logging("DEBUG")


def _load_config(ctx: typer.Context) -> FormStateConfig:
    """Load the global config and apply its log level unless --verbose was given."""
    try:
        config = load_global_config()
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not (ctx.obj or {}).get("verbose"):
        configure_logging(config.log_level)
    return config


def _parse_pairs(pairs: list[str] | None, separator: str, what: str) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition(separator)
        if not sep or not key.strip():
            console.print(f"[red]Error:[/red] Invalid {what} {pair!r}, expected key{separator}value")
            raise typer.Exit(1)
        parsed[key.strip()] = value.strip()
    return parsed


def _parse_value(raw: str) -> Any:
    """Interpret a --set value as JSON, falling back to the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _print_state(form: Form) -> None:
    table = Table(title="Form state", show_header=True)
    table.add_column("Field")
    table.add_column("Value")
    for key, value in form.data().items():
        table.add_row(key, json.dumps(value, ensure_ascii=False))
    console.print(table)

    console.print(f"  Dirty: {form.is_dirty}")
    console.print(f"  Successful: {form.was_successful}")
    if form.error_message:
        console.print(f"  [red]Message:[/red] {form.error_message}")

    if form.errors:
        errors = Table(title="Errors", show_header=True)
        errors.add_column("Field")
        errors.add_column("Message", style="red")
        for field, message in form.errors.items():
            errors.add_row(field, message)
        console.print(errors)


@app.command()
def init(
    base_url: Annotated[
        str,
        typer.Option("--base-url", "-u", help="Base URL for relative submit URLs"),
    ] = "",
    timeout: Annotated[
        float,
        typer.Option("--timeout", "-t", help="Request timeout in seconds"),
    ] = 30.0,
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite existing config",
    ),
) -> None:
    """Initialize formstate global configuration.

    Creates:
      ~/.config/formstate/config.yaml
      ~/.config/formstate/remembered/
    """
    import yaml

    home = get_formstate_home()
    config_path = get_config_path()
    remember_path = home / "remembered"

    if config_path.exists() and not force:
        console.print(f"[yellow]Warning:[/yellow] Config already exists at {config_path}")
        console.print("Use --force to overwrite")
        raise typer.Exit(1)

    console.print(f"[bold]Initializing formstate at {home}[/bold]")
    home.mkdir(parents=True, exist_ok=True)
    remember_path.mkdir(parents=True, exist_ok=True)

    config = {
        "base_url": base_url,
        "timeout": timeout,
        "remember_path": str(remember_path),
    }
    with open(config_path, "w") as f:
        yaml.dump(config, f, sort_keys=False)
    console.print(f"  [green]✓[/green] Created config at {config_path}")


@app.command()
def submit(
    ctx: typer.Context,
    method: Annotated[
        str,
        typer.Argument(help="HTTP method: get, post, put, patch, delete"),
    ],
    url: Annotated[
        str,
        typer.Argument(help="Target URL (relative URLs use the configured base_url)"),
    ],
    data_path: Annotated[
        Path | None,
        typer.Option("--data", "-d", help="JSON file with the initial field values"),
    ] = None,
    set_values: Annotated[
        list[str] | None,
        typer.Option("--set", "-s", help="Edit a field before submitting (key=value)"),
    ] = None,
    remember_key: Annotated[
        str | None,
        typer.Option("--remember-key", "-r", help="Restore and persist the form under this key"),
    ] = None,
    headers: Annotated[
        list[str] | None,
        typer.Option("--header", "-H", help="Extra request header (Name: value)"),
    ] = None,
) -> None:
    """Submit a form and print the resulting state."""
    method = method.lower()
    if method not in METHODS:
        console.print(f"[red]Error:[/red] Unknown method: {method}")
        raise typer.Exit(1)

    config = _load_config(ctx)

    initial: dict[str, Any] = {}
    if data_path is not None:
        if not data_path.exists():
            console.print(f"[red]Error:[/red] Data file not found: {data_path}")
            raise typer.Exit(1)
        try:
            initial = read_json(data_path)
        except ValueError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
        if not isinstance(initial, dict):
            console.print("[red]Error:[/red] Data file must contain a JSON object")
            raise typer.Exit(1)

    store = FileRememberStore(get_remember_path(config)) if remember_key else None
    transport = HttpxTransport(
        base_url=config.base_url,
        timeout=config.timeout,
        headers=config.headers,
    )

    try:
        form = Form(initial, remember_key=remember_key, store=store, transport=transport)
        form.update({k: _parse_value(v) for k, v in _parse_pairs(set_values, "=", "field").items()})
    except (KeyError, SnapshotValidationError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    options = SubmitOptions(headers=_parse_pairs(headers, ":", "header"))

    console.print(f"[bold]formstate[/bold] v{__version__}")
    console.print(f"  {method.upper()} {url}")
    if remember_key:
        console.print(f"  Remember key: {remember_key}")

    failed = False
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Submitting...", total=None)
        try:
            response = asyncio.run(form.submit(method, url, options))
        except SubmissionError as e:
            failed = True
            console.print(f"\n[red]Submission failed:[/red] {e.message}")
        else:
            if response is None:
                console.print("\n[yellow]Submission was not completed[/yellow]")
            else:
                console.print(f"\n[green]✓ Submitted[/green] (status {response.status})")

    _print_state(form)

    if form.persist():
        console.print(f"  [green]✓[/green] Remembered as {remember_key}")

    if failed:
        raise typer.Exit(1)


@app.command()
def show(
    ctx: typer.Context,
    remember_key: Annotated[
        str,
        typer.Argument(help="Remember key of the snapshot"),
    ],
) -> None:
    """Print a remembered snapshot."""
    store = FileRememberStore(get_remember_path(_load_config(ctx)))

    try:
        snapshot = store.load(remember_key)
    except SnapshotValidationError as e:
        console.print(f"[red]Invalid:[/red] {e}")
        raise typer.Exit(1)

    if snapshot is None:
        console.print(f"[red]Error:[/red] No snapshot remembered as {remember_key}")
        raise typer.Exit(1)

    console.print_json(snapshot.model_dump_json())


@app.command()
def validate(
    snapshot_path: Annotated[
        Path,
        typer.Argument(help="Path to the snapshot file"),
    ],
) -> None:
    """Validate a snapshot file against the snapshot schema."""
    if not snapshot_path.exists():
        console.print(f"[red]Error:[/red] Snapshot file not found: {snapshot_path}")
        raise typer.Exit(1)

    try:
        validate_document(read_json(snapshot_path), source=str(snapshot_path))
    except (ValueError, SnapshotValidationError) as e:
        console.print(f"[red]Invalid:[/red] {e}")
        raise typer.Exit(1)

    console.print(f"[green]Valid:[/green] {snapshot_path}")


if __name__ == "__main__":
    app()
