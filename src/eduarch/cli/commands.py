"""CLI commands for the EduArch domain store.

Commands:
- init-db: Create the database schema
- list: List records of a collection
- show: Show one record
- delete: Delete a record (restrict or cascade)
- config: Show the effective configuration
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from eduarch.config.app_config import load_app_config
from eduarch.store import DomainStore, StoreError

app = typer.Typer(
    name="eduarch",
    help="Domain store for the EduArch e-learning platform.",
    no_args_is_help=True,
)

console = Console()

# Columns shown by `list`, per collection
LIST_COLUMNS = {
    "users": ["id", "name", "email", "role"],
    "courses": ["id", "title", "teacher_id", "status"],
    "modules": ["id", "course_id", "order", "title"],
    "materials": ["id", "module_id", "order", "type", "title"],
    "assignments": ["id", "module_id", "title", "due_date", "total_points"],
    "submissions": ["id", "assignment_id", "student_id", "submitted_at", "grade"],
    "enrollments": ["id", "course_id", "student_id", "status", "progress"],
    "notifications": ["id", "user_id", "type", "title", "is_read"],
    "events": ["id", "title", "start_time", "end_time", "course_id"],
}

DbOption = typer.Option(None, "--db", help="Database file (default: from config)")


def _open_store(db: Path | None) -> DomainStore:
    return DomainStore(db)


def _check_collection(collection: str) -> None:
    if collection not in LIST_COLUMNS:
        console.print(f"[red]✗ Unknown collection '{collection}'[/red]")
        console.print(f"  Available: {', '.join(LIST_COLUMNS)}")
        raise typer.Exit(code=1)


def _parse_filters(raw: list[str]) -> dict[str, str]:
    filters = {}
    for item in raw:
        key, sep, value = item.partition("=")
        if not sep or not key:
            console.print(f"[red]✗ Invalid filter '{item}', expected field=value[/red]")
            raise typer.Exit(code=1)
        filters[key] = value
    return filters


def _format(value) -> str:
    if value is None:
        return "-"
    return str(getattr(value, "value", value))


@app.command(name="init-db")
def init_db_command(db: Path | None = DbOption) -> None:
    """Create the database schema (idempotent)."""
    store = _open_store(db)
    console.print(f"[green]✓ Database ready:[/green] {store.db_path}")


@app.command(name="list")
def list_records(
    collection: str = typer.Argument(..., help="users, courses, modules, ..."),
    where: list[str] = typer.Option([], "--where", "-w", help="Filter as field=value"),
    order_by: str | None = typer.Option(None, "--order-by", help="Sort field, -field for descending"),
    db: Path | None = DbOption,
) -> None:
    """List records of a collection."""
    _check_collection(collection)
    filters = _parse_filters(where)
    store = _open_store(db)

    try:
        records = store.repository(collection).list(order_by=order_by, **filters)
    except StoreError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    if not records:
        console.print(f"[yellow]No {collection} found[/yellow]")
        return

    columns = LIST_COLUMNS[collection]
    table = Table(title=f"{collection} ({len(records)})")
    for column in columns:
        table.add_column(column)
    for record in records:
        table.add_row(*(_format(getattr(record, c)) for c in columns))
    console.print(table)


@app.command()
def show(
    collection: str = typer.Argument(..., help="users, courses, modules, ..."),
    record_id: str = typer.Argument(..., help="Record id"),
    db: Path | None = DbOption,
) -> None:
    """Show every field of one record."""
    _check_collection(collection)
    store = _open_store(db)

    try:
        record = store.repository(collection).get(record_id)
    except StoreError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"\n[bold]{record_id}[/bold]")
    for key, value in record.to_dict().items():
        if key == "id":
            continue
        console.print(f"  [dim]{key}:[/dim] {_format(value)}")


@app.command()
def delete(
    collection: str = typer.Argument(..., help="users, courses, modules, ..."),
    record_id: str = typer.Argument(..., help="Record id"),
    cascade: bool = typer.Option(False, "--cascade", help="Also delete dependent records"),
    db: Path | None = DbOption,
) -> None:
    """Delete a record. Without --cascade the configured policy applies."""
    _check_collection(collection)
    store = _open_store(db)

    try:
        store.repository(collection).delete(record_id, cascade=True if cascade else None)
    except StoreError as e:
        console.print(f"[red]✗ {e}[/red]")
        dependents = getattr(e, "dependents", None)
        if dependents:
            console.print("  Use --cascade to delete dependents as well")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Deleted {record_id}[/green]")


@app.command()
def config() -> None:
    """Show the effective configuration."""
    cfg = load_app_config()
    console.print("\n[bold]EduArch configuration[/bold]\n")
    console.print(f"  [dim]database.path:[/dim]       {cfg.database.path}")
    console.print(f"  [dim]store.delete_policy:[/dim] {cfg.store.delete_policy}")
    console.print(f"  [dim]api.title:[/dim]           {cfg.api.title}")
    console.print(f"  [dim]api.cors_origins:[/dim]    {', '.join(cfg.api.cors_origins)}")


if __name__ == "__main__":
    app()
