#!/usr/bin/env python3
"""
Command-line interface for the lifecycle toolkit.

Lets an operator list, restore and purge soft-deleted records of the
catalog collections.
"""

import asyncio
import logging
import sys
from typing import Any, Awaitable, Callable, Optional, Tuple, TypeVar

import click
import pandas as pd  # type: ignore[import-untyped]
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .access_control import Principal
from .catalog import build_default_registry, create_session_factory, init_database
from .config import get_config
from .soft_delete import LifecycleError, LifecycleService

console = Console()

T = TypeVar("T")


def _run(ctx: click.Context, call: Callable[[LifecycleService], Awaitable[T]]) -> T:
    """Run a service call against the configured database."""
    config = get_config()

    async def main() -> T:
        engine = await init_database(ctx.obj["database_url"])
        try:
            registry = build_default_registry(create_session_factory(engine))
            return await call(LifecycleService(registry, config=config))
        finally:
            await engine.dispose()

    try:
        return asyncio.run(main())
    except LifecycleError as e:
        console.print(f"[red]Error ({e.kind}): {e.message}[/red]")
        sys.exit(1)


def _actor(actor_id: Optional[str], actor_email: Optional[str]) -> Optional[Principal]:
    if not actor_id:
        return None
    return Principal(id=actor_id, email=actor_email or "", role="admin")


actor_options = [
    click.option("--actor-id", envvar="LIFECYCLE_ACTOR_ID", help="Acting user ID"),
    click.option("--actor-email", envvar="LIFECYCLE_ACTOR_EMAIL", help="Acting user email"),
]


def with_actor(func: Callable[..., Any]) -> Callable[..., Any]:
    for option in reversed(actor_options):
        func = option(func)
    return func


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option("--database-url", envvar="LIFECYCLE_DATABASE_URL", help="SQLAlchemy URL")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (defaults to configuration)",
)
@click.pass_context
def cli(ctx: click.Context, database_url: Optional[str], log_level: Optional[str]) -> None:
    """Lifecycle Toolkit - manage soft-deleted records across collections."""
    config = get_config()
    ctx.ensure_object(dict)
    ctx.obj["database_url"] = database_url or config.database_url

    logging.basicConfig(
        level=(log_level or config.log_level.value).upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )

    if ctx.invoked_subcommand is None:
        console.print(
            Panel.fit(
                f"[bold blue]Lifecycle Toolkit[/bold blue] v{__version__}\n"
                "[dim]Soft delete lifecycle management[/dim]\n\n"
                "Use [bold]lifecycle --help[/bold] to see available commands.",
                border_style="blue",
            )
        )


@cli.command("entities")
@click.pass_context
def entities(ctx: click.Context) -> None:
    """Show registered collections and their deleted record counts."""
    counts = _run(ctx, lambda service: service.deleted_counts())

    table = Table(title="Registered Collections")
    table.add_column("Entity", style="cyan")
    table.add_column("Deleted", style="yellow", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    console.print(table)


@cli.command("list")
@click.argument("entity")
@click.option("--page", default="1", help="Page number")
@click.option("--size", default=None, help="Page size")
@click.option("--format", type=click.Choice(["table", "json", "csv"]), default="table")
@click.pass_context
def list_deleted(
    ctx: click.Context, entity: str, page: str, size: Optional[str], format: str
) -> None:
    """List soft-deleted records of ENTITY."""
    result = _run(ctx, lambda service: service.list_deleted(entity, page, size))

    if format == "json":
        console.print_json(data=result.model_dump(mode="json", by_alias=True))
        return
    if format == "csv":
        print(pd.DataFrame(result.items).to_csv(index=False), end="")
        return

    if not result.items:
        console.print(f"[yellow]No deleted {entity} found[/yellow]")
        return

    table = Table(
        title=(
            f"Deleted {entity} (page {result.current} of {result.pages}, "
            f"{result.total} total)"
        )
    )
    table.add_column("ID", style="cyan")
    table.add_column("Label", style="green")
    table.add_column("Deleted At", style="yellow")
    table.add_column("Deleted By", style="magenta")

    for item in result.items:
        label = next(
            (
                str(item[key])
                for key in ("name", "title", "email", "code", "comment", "user_id")
                if item.get(key)
            ),
            "",
        )
        deleted_by = item.get("deleted_by") or {}
        table.add_row(
            item["id"],
            label,
            str(item.get("deleted_at") or ""),
            deleted_by.get("email") or deleted_by.get("id") or "[dim]system[/dim]",
        )

    console.print(table)


@cli.command("delete")
@click.argument("entity")
@click.argument("entity_id")
@with_actor
@click.pass_context
def soft_delete(
    ctx: click.Context,
    entity: str,
    entity_id: str,
    actor_id: Optional[str],
    actor_email: Optional[str],
) -> None:
    """Soft delete record ENTITY_ID of ENTITY."""
    actor = _actor(actor_id, actor_email)
    result = _run(ctx, lambda service: service.soft_delete_item(entity, entity_id, actor))
    console.print(f"[green]✓[/green] {result.message}: {entity} {entity_id}")


@cli.command("restore")
@click.argument("entity")
@click.argument("entity_id")
@with_actor
@click.pass_context
def restore(
    ctx: click.Context,
    entity: str,
    entity_id: str,
    actor_id: Optional[str],
    actor_email: Optional[str],
) -> None:
    """Restore soft-deleted record ENTITY_ID of ENTITY."""
    actor = _actor(actor_id, actor_email)
    result = _run(ctx, lambda service: service.restore(entity, entity_id, actor))
    console.print(f"[green]✓[/green] {result.message}: {entity} {entity_id}")


@cli.command("purge")
@click.argument("entity")
@click.argument("entity_id")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@with_actor
@click.pass_context
def purge(
    ctx: click.Context,
    entity: str,
    entity_id: str,
    yes: bool,
    actor_id: Optional[str],
    actor_email: Optional[str],
) -> None:
    """Permanently delete soft-deleted record ENTITY_ID of ENTITY."""
    if not yes:
        click.confirm(
            f"Permanently delete {entity} {entity_id}? This cannot be undone",
            abort=True,
        )
    actor = _actor(actor_id, actor_email)
    result = _run(ctx, lambda service: service.purge(entity, entity_id, actor))
    console.print(f"[green]✓[/green] {result.message}: {entity} {entity_id}")


def _print_skipped(skipped: Any) -> None:
    if skipped:
        console.print(f"[yellow]⚠ Skipped {len(skipped)} IDs:[/yellow]")
        for entity_id in skipped:
            console.print(f"  [yellow]• {entity_id}[/yellow]")


@cli.command("bulk-restore")
@click.argument("entity")
@click.argument("ids", nargs=-1, required=True)
@with_actor
@click.pass_context
def bulk_restore(
    ctx: click.Context,
    entity: str,
    ids: Tuple[str, ...],
    actor_id: Optional[str],
    actor_email: Optional[str],
) -> None:
    """Restore many soft-deleted records of ENTITY."""
    actor = _actor(actor_id, actor_email)
    result = _run(ctx, lambda service: service.bulk_restore(entity, ids, actor))
    console.print(f"[green]✓[/green] {result.message}")
    _print_skipped(result.skipped)


@cli.command("bulk-purge")
@click.argument("entity")
@click.argument("ids", nargs=-1, required=True)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@with_actor
@click.pass_context
def bulk_purge(
    ctx: click.Context,
    entity: str,
    ids: Tuple[str, ...],
    yes: bool,
    actor_id: Optional[str],
    actor_email: Optional[str],
) -> None:
    """Permanently delete many soft-deleted records of ENTITY."""
    if not yes:
        click.confirm(
            f"Permanently delete up to {len(ids)} {entity}? This cannot be undone",
            abort=True,
        )
    actor = _actor(actor_id, actor_email)
    result = _run(ctx, lambda service: service.bulk_purge(entity, ids, actor))
    console.print(f"[green]✓[/green] {result.message}")
    _print_skipped(result.skipped)


@cli.command("repair")
@click.argument("entity")
@with_actor
@click.pass_context
def repair(
    ctx: click.Context,
    entity: str,
    actor_id: Optional[str],
    actor_email: Optional[str],
) -> None:
    """Fix deletion metadata that contradicts the deleted flag on ENTITY."""
    actor = _actor(actor_id, actor_email)
    result = _run(ctx, lambda service: service.repair_metadata(entity, actor))
    console.print(f"[green]✓[/green] {result.message}")


@cli.group()
def config() -> None:
    """Inspect lifecycle toolkit configuration."""
    pass


@config.command("show")
@click.option("--format", type=click.Choice(["table", "json", "yaml"]), default="table")
def config_show(format: str) -> None:
    """Display current configuration."""
    config_dict = get_config().to_dict()

    if format == "json":
        console.print_json(data=config_dict)
    elif format == "yaml":
        import yaml  # type: ignore[import-untyped]

        console.print(yaml.safe_dump(config_dict, default_flow_style=False))
    else:
        table = Table(title="Lifecycle Configuration", show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        for setting, value in config_dict.items():
            if value is None:
                value = "[dim]Not configured[/dim]"
            table.add_row(setting, str(value))

        console.print(table)


if __name__ == "__main__":
    cli()
