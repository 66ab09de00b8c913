#!/usr/bin/env python3
"""
Command-line interface for the Bakery CMS persistence core.

Provides schema setup, soft delete administration and reporting tools for
operators.
"""

import sys
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List

import click
import pandas as pd  # type: ignore[import-untyped]
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from sqlalchemy import text
from sqlalchemy.orm import Session

from . import __version__
from .config import configure_logging, get_config
from .costing import calculate_product_cost
from .database import create_db_engine, get_session_factory, init_db
from .repositories import REPOSITORY_REGISTRY, create_service
from .soft_delete.scopes import Scope

console = Console()

ENTITY_CHOICE = click.Choice(sorted(REPOSITORY_REGISTRY))
SCOPE_CHOICE = click.Choice([scope.value for scope in Scope])

CONFIG_CATEGORIES = {
    "General": ["application_name", "environment"],
    "Database": ["database_url", "database_echo", "database_pool_size"],
    "Logging": ["log_level", "log_format"],
    "Soft Delete": [
        "cascade_delete_enabled",
        "enforce_active_uniqueness",
        "allow_hard_delete_of_active",
    ],
}


@contextmanager
def open_session() -> Iterator[Session]:
    """Open a session on the configured database."""
    engine = create_db_engine(get_config())
    session = get_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def _label(entity: Any) -> str:
    for attribute in ("name", "order_number"):
        value = getattr(entity, attribute, None)
        if value:
            return str(value)
    return "-"


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Bakery CMS - soft delete administration for the bakery database."""
    configure_logging(get_config())

    if ctx.invoked_subcommand is None:
        console.print(
            Panel.fit(
                f"[bold blue]Bakery CMS[/bold blue] v{__version__}\n"
                "[dim]Soft delete administration for the bakery database[/dim]\n\n"
                "Use [bold]bakery --help[/bold] to see available commands.",
                border_style="blue",
            )
        )


@cli.group()
def config() -> None:
    """Inspect configuration."""
    pass


@config.command("show")
@click.option("--format", type=click.Choice(["table", "json", "yaml"]), default="table")
def config_show(format: str) -> None:
    """Display current configuration."""
    try:
        config_dict = get_config().to_dict()

        if format == "json":
            console.print_json(data=config_dict)
        elif format == "yaml":
            import yaml  # type: ignore[import-untyped]

            console.print(yaml.dump(config_dict, default_flow_style=False))
        else:
            table = Table(title="Bakery CMS Configuration", show_header=True)
            table.add_column("Setting", style="cyan")
            table.add_column("Value", style="green")

            for category, settings in CONFIG_CATEGORIES.items():
                table.add_row(f"[bold]{category}[/bold]", "")
                for setting in settings:
                    value = config_dict.get(setting)
                    if value is None:
                        value = "[dim]Not configured[/dim]"
                    elif isinstance(value, bool):
                        value = "✓" if value else "✗"
                    table.add_row(f"  {setting}", str(value))

            console.print(table)

    except Exception as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        sys.exit(1)


@cli.group()
def db() -> None:
    """Manage the database schema."""
    pass


@db.command("init")
def db_init() -> None:
    """Create every table in the configured database."""
    try:
        engine = create_db_engine(get_config())
        try:
            init_db(engine)
        finally:
            engine.dispose()
        console.print("[green]✓[/green] Database schema created")
    except Exception as e:
        console.print(f"[red]Error creating schema: {e}[/red]")
        sys.exit(1)


@cli.group()
def entities() -> None:
    """List, delete, restore and purge rows."""
    pass


@entities.command("list")
@click.argument("entity_type", type=ENTITY_CHOICE)
@click.option("--scope", type=SCOPE_CHOICE, default=Scope.DEFAULT.value)
@click.option("--format", type=click.Choice(["table", "json", "csv"]), default="table")
def entities_list(entity_type: str, scope: str, format: str) -> None:
    """List rows of ENTITY_TYPE visible in a scope."""
    try:
        with open_session() as session:
            rows = create_service(session).list_entities(entity_type, scope=scope)

            if not rows:
                console.print(f"[yellow]No {entity_type} rows in scope {scope}[/yellow]")
                return

            if format == "json":
                console.print_json(data=[row.to_dict() for row in rows], default=str)
            elif format == "csv":
                df = pd.DataFrame([row.to_dict() for row in rows])
                print(df.to_csv(index=False))
            else:
                table = Table(title=f"{entity_type} ({scope}, {len(rows)} rows)")
                table.add_column("ID", style="cyan")
                table.add_column("Label", style="green")
                table.add_column("Deleted At", style="yellow")
                table.add_column("Deleted By Cascade Of", style="magenta")

                for row in rows:
                    origin = ""
                    if row.cascade_deleted_from_type:
                        origin = (
                            f"{row.cascade_deleted_from_type}:"
                            f"{row.cascade_deleted_from_id}"
                        )
                    deleted_at = (
                        row.deleted_at.strftime("%Y-%m-%d %H:%M:%S")
                        if row.deleted_at
                        else ""
                    )
                    table.add_row(row.id, _label(row), deleted_at, origin)

                console.print(table)

    except Exception as e:
        console.print(f"[red]Error listing {entity_type}: {e}[/red]")
        sys.exit(1)


@entities.command("delete")
@click.argument("entity_type", type=ENTITY_CHOICE)
@click.argument("entity_id")
def entities_delete(entity_type: str, entity_id: str) -> None:
    """Soft delete a row and its cascade dependents."""
    try:
        with open_session() as session:
            result = create_service(session).delete_entity(entity_type, entity_id)

        if not result.success:
            console.print(f"[yellow]No active {entity_type} {entity_id}[/yellow]")
            sys.exit(1)

        console.print(
            f"[green]✓[/green] Deleted {entity_type} {entity_id} "
            f"({result.records_affected} records affected)"
        )
        for ref in result.cascade_deleted:
            console.print(f"  [dim]• {ref.type} {ref.id}[/dim]")

    except Exception as e:
        console.print(f"[red]Error deleting {entity_type}: {e}[/red]")
        sys.exit(1)


@entities.command("restore")
@click.argument("entity_type", type=ENTITY_CHOICE)
@click.argument("entity_id")
@click.option(
    "--with-dependents",
    is_flag=True,
    help="Also restore the rows deleted by this row's cascade",
)
def entities_restore(entity_type: str, entity_id: str, with_dependents: bool) -> None:
    """Restore a soft deleted row."""
    try:
        with open_session() as session:
            result = create_service(session).restore_entity(
                entity_type, entity_id, with_dependents=with_dependents
            )

        if not result.success:
            console.print(f"[yellow]No deleted {entity_type} {entity_id}[/yellow]")
            sys.exit(1)

        console.print(
            f"[green]✓[/green] Restored {entity_type} {entity_id} "
            f"({result.records_restored} records restored)"
        )

    except Exception as e:
        console.print(f"[red]Error restoring {entity_type}: {e}[/red]")
        sys.exit(1)


@entities.command("purge")
@click.argument("entity_type", type=ENTITY_CHOICE)
@click.argument("entity_id")
@click.confirmation_option(prompt="Physically delete this row? This cannot be undone.")
def entities_purge(entity_type: str, entity_id: str) -> None:
    """Physically delete a row."""
    try:
        with open_session() as session:
            purged = create_service(session).purge_entity(entity_type, entity_id)

        if not purged:
            console.print(f"[yellow]No {entity_type} {entity_id}[/yellow]")
            sys.exit(1)

        console.print(f"[green]✓[/green] Purged {entity_type} {entity_id}")

    except Exception as e:
        console.print(f"[red]Error purging {entity_type}: {e}[/red]")
        sys.exit(1)


@cli.command()
@click.option("--format", type=click.Choice(["table", "json"]), default="table")
def report(format: str) -> None:
    """Show active and deleted row counts per entity type."""
    try:
        with open_session() as session:
            soft_delete_report = create_service(session).generate_report()

        if format == "json":
            console.print_json(soft_delete_report.model_dump_json())
            return

        table = Table(title="Soft Delete Report")
        table.add_column("Entity", style="cyan")
        table.add_column("Active", style="green", justify="right")
        table.add_column("Deleted", style="yellow", justify="right")

        for entity_type, counts in soft_delete_report.by_type.items():
            table.add_row(entity_type, str(counts.active), str(counts.deleted))
        table.add_row(
            "[bold]Total[/bold]",
            f"[bold]{soft_delete_report.total_active}[/bold]",
            f"[bold]{soft_delete_report.total_deleted}[/bold]",
        )

        console.print(table)

    except Exception as e:
        console.print(f"[red]Error generating report: {e}[/red]")
        sys.exit(1)


@cli.command()
@click.argument("product_id")
def cost(product_id: str) -> None:
    """Calculate the unit cost of a product from its recipe."""
    try:
        with open_session() as session:
            product_cost = calculate_product_cost(session, product_id)

        if product_cost is None:
            console.print(f"[yellow]No active product {product_id}[/yellow]")
            sys.exit(1)

        table = Table(title=f"Cost of {product_cost.product_name}")
        table.add_column("Stock Item", style="cyan")
        table.add_column("Quantity", justify="right")
        table.add_column("Brand", style="green")
        table.add_column("Unit Price", justify="right")
        table.add_column("Cost", justify="right", style="yellow")

        for item in product_cost.cost_breakdown:
            table.add_row(
                item.stock_item_name,
                f"{item.quantity} {item.unit_of_measure}",
                item.brand_name or "-",
                str(item.unit_price),
                str(item.total_cost),
            )

        console.print(table)
        console.print(f"[bold]Total cost:[/bold] {product_cost.total_cost}")

    except Exception as e:
        console.print(f"[red]Error calculating cost: {e}[/red]")
        sys.exit(1)


@cli.command()
def doctor() -> None:
    """Run diagnostic checks on the configuration and database."""
    console.print("[bold]Running Bakery CMS diagnostics...[/bold]\n")

    checks: List[Dict[str, Any]] = []

    try:
        config = get_config()
        checks.append({"name": "Configuration loaded", "ok": True})
    except Exception as e:
        console.print(f"[red]✗[/red] Configuration error: {e}")
        sys.exit(1)

    try:
        engine = create_db_engine(config)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        finally:
            engine.dispose()
        checks.append({"name": "Database connection", "ok": True})
    except Exception as e:
        checks.append({"name": f"Database connection: {e}", "ok": False})

    for check in checks:
        mark = "[green]✓[/green]" if check["ok"] else "[red]✗[/red]"
        console.print(f"{mark} {check['name']}")

    failed = sum(1 for check in checks if not check["ok"])
    if failed:
        console.print("\n[yellow]⚠ Some issues detected - review output above[/yellow]")
        sys.exit(1)
    console.print("\n[green]✓ All systems operational[/green]")


if __name__ == "__main__":
    cli()
