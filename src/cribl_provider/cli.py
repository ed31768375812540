"""Typer CLI for the Cribl provider."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

import httpx
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cribl_provider.client.client import CriblClient
from cribl_provider.client.errors import CriblError
from cribl_provider.client.models import Build
from cribl_provider.config.loader import load_provider_config, load_resources
from cribl_provider.config.models import ProviderConfig, ResourceKind, ResourcesDocument
from cribl_provider.observability.health import Status, check_provider_health
from cribl_provider.observability.logging import LogLevel, configure_logging
from cribl_provider.provider import configure
from cribl_provider.reconcile.engine import (
    Action,
    ApplyResult,
    Diagnostic,
    PlannedChange,
    Reconciler,
    Severity,
)
from cribl_provider.reconcile.state import ProviderState, load_state, save_state
from cribl_provider.resources.factory import create_handlers
from cribl_provider.resources.system import SystemDataSource

T = TypeVar("T")

console = Console()
app = typer.Typer(name="cribl", help="Manage Cribl pipelines, outputs and inputs")

DEFAULT_STATE_PATH = "cribl.state.json"

_ACTION_STYLE = {
    Action.CREATE: "green",
    Action.UPDATE: "yellow",
    Action.DELETE: "red",
    Action.NOOP: "dim",
}


@app.callback()
def main(
    log_json: bool = typer.Option(False, "--log-json", help="Emit JSON log lines"),
    log_level: LogLevel = typer.Option(
        LogLevel.WARNING, "--log-level", case_sensitive=False, help="Log level"
    ),
) -> None:
    configure_logging(json_output=log_json, level=log_level)


def _load_provider(provider_config: str | None) -> ProviderConfig:
    try:
        return load_provider_config(Path(provider_config) if provider_config else None)
    except (OSError, TypeError, ValueError) as exc:
        console.print(f"[red]Provider config error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc


def _load_document(resources_path: str) -> ResourcesDocument:
    path = Path(resources_path)
    if not path.exists():
        console.print(f"[red]Resources file not found: {path}[/red]")
        raise typer.Exit(1)
    try:
        return load_resources(path)
    except (TypeError, ValueError) as exc:
        console.print(f"[red]Validation error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc


def _load_state(state_path: str) -> ProviderState:
    try:
        return load_state(state_path)
    except ValueError as exc:
        console.print(f"[red]State error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc


def _run(
    provider: ProviderConfig, work: Callable[[CriblClient], Awaitable[T]]
) -> T:
    """Configure a client, run *work* against it and close it."""

    async def _session() -> T:
        async with await configure(provider) as client:
            return await work(client)

    try:
        return asyncio.run(_session())
    except (CriblError, httpx.TransportError) as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1) from exc


def _print_changes(changes: list[PlannedChange], title: str) -> None:
    table = Table(title=title)
    table.add_column("Action")
    table.add_column("Kind", style="cyan")
    table.add_column("ID")
    for change in changes:
        style = _ACTION_STYLE[change.action]
        table.add_row(
            f"[{style}]{change.action}[/{style}]", change.kind, change.resource_id
        )
    console.print(table)


def _print_diagnostics(diagnostics: list[Diagnostic]) -> None:
    for d in diagnostics:
        target = escape(f" [{d.kind} {d.resource_id}]") if d.kind else ""
        style = "red" if d.severity == Severity.ERROR else "yellow"
        console.print(f"[{style}]{d.severity}:[/{style}] {d.summary}{target}")
        console.print(f"  {escape(d.detail)}")


def _finish(result: ApplyResult, state: ProviderState, state_path: str) -> None:
    # Partial progress is recorded even when some transitions failed.
    save_state(state, state_path)
    _print_diagnostics(result.diagnostics)
    if not result.ok:
        raise typer.Exit(1)


@app.command()
def validate(
    resources_path: str = typer.Argument(..., help="Path to resources YAML"),
) -> None:
    """Validate a resources document without contacting Cribl."""
    document = _load_document(resources_path)
    console.print("[green]Valid[/green]")
    for kind, resources in document.by_kind().items():
        console.print(f"  {kind}: {len(resources)}")
        for r in resources:
            console.print(f"    - {r.id}")


@app.command()
def plan(
    resources_path: str = typer.Argument(..., help="Path to resources YAML"),
    provider_config: str | None = typer.Option(
        None, "--provider-config", help="Provider YAML"
    ),
    state_path: str = typer.Option(DEFAULT_STATE_PATH, "--state", help="State file"),
    refresh: bool = typer.Option(True, "--refresh/--no-refresh", help="Re-read first"),
) -> None:
    """Show the changes apply would make."""
    document = _load_document(resources_path)
    provider = _load_provider(provider_config)
    state = _load_state(state_path)

    async def _plan(client: CriblClient) -> tuple[list[PlannedChange], list[Diagnostic]]:
        reconciler = Reconciler(create_handlers(client))
        diagnostics = await reconciler.refresh(state) if refresh else []
        return reconciler.plan(document, state), diagnostics

    changes, diagnostics = _run(provider, _plan)
    pending = [c for c in changes if c.action != Action.NOOP]
    if pending:
        _print_changes(pending, "Planned changes")
    else:
        console.print("[green]No changes.[/green]")
    _print_diagnostics(diagnostics)
    if not ApplyResult(diagnostics=diagnostics).ok:
        raise typer.Exit(1)


@app.command()
def apply(
    resources_path: str = typer.Argument(..., help="Path to resources YAML"),
    provider_config: str | None = typer.Option(
        None, "--provider-config", help="Provider YAML"
    ),
    state_path: str = typer.Option(DEFAULT_STATE_PATH, "--state", help="State file"),
    refresh: bool = typer.Option(True, "--refresh/--no-refresh", help="Re-read first"),
) -> None:
    """Create, update and delete remote objects to match the resources file."""
    document = _load_document(resources_path)
    provider = _load_provider(provider_config)
    state = _load_state(state_path)

    async def _apply(client: CriblClient) -> ApplyResult:
        reconciler = Reconciler(create_handlers(client))
        return await reconciler.apply(document, state, refresh=refresh)

    result = _run(provider, _apply)
    if result.applied:
        _print_changes(result.applied, "Applied changes")
    else:
        console.print("[green]No changes applied.[/green]")
    _finish(result, state, state_path)


@app.command("refresh")
def refresh_state(
    provider_config: str | None = typer.Option(
        None, "--provider-config", help="Provider YAML"
    ),
    state_path: str = typer.Option(DEFAULT_STATE_PATH, "--state", help="State file"),
) -> None:
    """Re-read every recorded resource and update the state file."""
    provider = _load_provider(provider_config)
    state = _load_state(state_path)

    async def _refresh(client: CriblClient) -> list[Diagnostic]:
        return await Reconciler(create_handlers(client)).refresh(state)

    diagnostics = _run(provider, _refresh)
    console.print(f"[green]Refreshed[/green] {len(state.resources)} resource(s)")
    _finish(ApplyResult(diagnostics=diagnostics), state, state_path)


@app.command("import")
def import_resource(
    kind: ResourceKind = typer.Argument(..., help="Resource kind"),
    resource_id: str = typer.Argument(..., help="Remote object id"),
    provider_config: str | None = typer.Option(
        None, "--provider-config", help="Provider YAML"
    ),
    state_path: str = typer.Option(DEFAULT_STATE_PATH, "--state", help="State file"),
) -> None:
    """Adopt an existing remote object into the state file."""
    provider = _load_provider(provider_config)
    state = _load_state(state_path)

    async def _import(client: CriblClient) -> bool:
        reconciler = Reconciler(create_handlers(client))
        return await reconciler.import_resource(kind, resource_id, state) is not None

    if not _run(provider, _import):
        console.print(f"[red]{kind} '{resource_id}' not found in Cribl[/red]")
        raise typer.Exit(1)
    save_state(state, state_path)
    console.print(f"[green]Imported[/green] {kind} '{resource_id}'")


@app.command()
def destroy(
    provider_config: str | None = typer.Option(
        None, "--provider-config", help="Provider YAML"
    ),
    state_path: str = typer.Option(DEFAULT_STATE_PATH, "--state", help="State file"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete every resource recorded in the state file."""
    provider = _load_provider(provider_config)
    state = _load_state(state_path)
    if not state.resources:
        console.print("[yellow]Nothing to destroy[/yellow]")
        return

    if not yes:
        confirm = typer.confirm(f"Destroy {len(state.resources)} resource(s)?")
        if not confirm:
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    async def _destroy(client: CriblClient) -> ApplyResult:
        return await Reconciler(create_handlers(client)).destroy(state)

    result = _run(provider, _destroy)
    if result.applied:
        _print_changes(result.applied, "Destroyed")
    _finish(result, state, state_path)


@app.command()
def system(
    provider_config: str | None = typer.Option(
        None, "--provider-config", help="Provider YAML"
    ),
) -> None:
    """Show Cribl build information."""
    provider = _load_provider(provider_config)

    async def _system(client: CriblClient) -> Build:
        return await SystemDataSource(client).read()

    build = _run(provider, _system)
    table = Table(title="Cribl Build")
    table.add_column("Hostname", style="cyan")
    table.add_column("Version")
    table.add_column("Branch")
    table.add_row(build.hostname, build.version, build.branch)
    console.print(table)


@app.command()
def health(
    provider_config: str | None = typer.Option(
        None, "--provider-config", help="Provider YAML"
    ),
) -> None:
    """Check that the management API is reachable and accepts our credentials."""
    provider = _load_provider(provider_config)
    result = _run(provider, check_provider_health)

    table = Table(title="Cribl Health")
    table.add_column("Component", style="cyan")
    table.add_column("Status")
    table.add_column("Detail")

    for c in result.components:
        style = "green" if c.status == Status.HEALTHY else "red"
        table.add_row(c.name, f"[{style}]{c.status}[/{style}]", escape(c.detail))

    console.print(table)
    if not result.healthy:
        raise typer.Exit(1)
