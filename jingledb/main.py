#!/usr/bin/env python3
"""
Jingle catalogue graph tooling - command line entry point.

Usage:
    python -m jingledb.main setup-schema
    python -m jingledb.main import fabricas node-Fabrica-2025-11-18.csv
    python -m jingledb.main import jingles node-Jingle-2025-11-18.csv
    python -m jingledb.main reorder-appearances
    python -m jingledb.main create-constraint Cancion youtubeMusic --kind unique
    python -m jingledb.main generate-id jingle 5
    python -m jingledb.main normalize-date 25/12/2023
"""

import sys
from pathlib import Path

import click
from loguru import logger
from rich.console import Console
from rich.table import Table

from jingledb.database import GraphConfigurationError, create_client
from jingledb.ids import EntityKind, generate_ids
from jingledb.importers import IMPORTERS
from jingledb.normalizers import DateParseError, normalize_date, normalize_date_required
from jingledb.appearances import fabrica_exists, reorder_all_appearances, update_appearance_order
from jingledb.schema import (
    ConstraintKind,
    SchemaError,
    add_property_to_entity,
    create_constraint,
    create_relationship_type,
    drop_constraint,
    get_schema_info,
    setup_schema,
)
from jingledb.utils.logging import setup_logging


console = Console()


def _connect():
    try:
        return create_client()
    except GraphConfigurationError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write a rotating log to this file (default: LOG_FILE)",
)
def cli(debug, log_file):
    """Jingle catalogue graph tooling"""
    setup_logging(level="DEBUG" if debug else None, log_file=log_file)


@cli.command("setup-schema")
@click.option("--keep-existing", is_flag=True, help="Do not drop existing constraints first")
def setup_schema_command(keep_existing: bool):
    """Create constraints and indexes in the graph database."""
    console.print("\n[bold blue]Graph Schema Setup[/bold blue]\n")

    with _connect() as client:
        result = setup_schema(client, drop_existing=not keep_existing)

    table = Table()
    table.add_column("Dropped")
    table.add_column("Created")
    table.add_column("Failed")
    table.add_row(str(result.dropped), str(result.created), str(result.failed))
    console.print(table)

    for warning in result.warnings:
        console.print(f"[yellow]{warning}[/yellow]")


@cli.command("schema-info")
def schema_info_command():
    """Show labels, relationship types, constraints and indexes."""
    with _connect() as client:
        info = get_schema_info(client)

    console.print("\n[bold blue]Graph Schema[/bold blue]\n")
    console.print(f"[bold]Labels:[/bold] {', '.join(info['labels']) or '-'}")
    console.print(f"[bold]Relationship types:[/bold] {', '.join(info['relationship_types']) or '-'}")
    console.print(f"[bold]Property keys:[/bold] {len(info['property_keys'])}\n")

    for title, rows in (("Constraints", info["constraints"]), ("Indexes", info["indexes"])):
        table = Table(title=title)
        table.add_column("Name")
        table.add_column("Type")
        table.add_column("Labels/Types")
        table.add_column("Properties")
        for row in rows:
            table.add_row(
                str(row.get("name")),
                str(row.get("type")),
                ", ".join(row.get("labelsOrTypes") or []),
                ", ".join(row.get("properties") or []),
            )
        console.print(table)


@cli.command("create-constraint")
@click.argument("label")
@click.argument("prop", metavar="PROPERTY")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in ConstraintKind]),
    default=ConstraintKind.UNIQUE.value,
    show_default=True,
)
@click.option("--name", default=None, help="Constraint name (default: {label}_{property}_{kind})")
def create_constraint_command(label: str, prop: str, kind: str, name: str):
    """Create one constraint on LABEL.PROPERTY."""
    with _connect() as client:
        try:
            name = create_constraint(client, label, prop, kind, name)
        except SchemaError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
    console.print(f"[green]Constraint {name} created[/green]")


@cli.command("drop-constraint")
@click.argument("name")
@click.option("--if-exists", is_flag=True, help="Do not fail when the constraint is missing")
def drop_constraint_command(name: str, if_exists: bool):
    """Drop the constraint NAME."""
    with _connect() as client:
        try:
            drop_constraint(client, name, if_exists=if_exists)
        except SchemaError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
    console.print(f"[green]Constraint {name} dropped[/green]")


@cli.command("add-property")
@click.argument("label")
@click.argument("prop", metavar="PROPERTY")
@click.option("--type", "property_type", default="string", show_default=True, help="Use 'unique' to add a uniqueness constraint")
def add_property_command(label: str, prop: str, property_type: str):
    """Register PROPERTY on an existing node LABEL."""
    with _connect() as client:
        try:
            constraint = add_property_to_entity(client, label, prop, property_type)
        except SchemaError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
    console.print(f"[green]Property {prop} added to {label}[/green]")
    if constraint:
        console.print(f"Unique constraint: {constraint}")


@cli.command("create-relationship-type")
@click.argument("rel_type", metavar="TYPE")
@click.argument("start_label")
@click.argument("end_label")
def create_relationship_type_command(rel_type: str, start_label: str, end_label: str):
    """Register relationship TYPE from START_LABEL to END_LABEL."""
    with _connect() as client:
        try:
            created = create_relationship_type(client, rel_type, start_label, end_label)
        except SchemaError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
    if created:
        console.print(f"[green]Relationship type {rel_type} created[/green]")
    else:
        console.print(f"Relationship type {rel_type} already exists")


@cli.command("reorder-appearances")
@click.argument("fabrica_id", required=False)
def reorder_appearances_command(fabrica_id: str | None):
    """
    Recompute APPEARS_IN order by timestamp.

    Renumbers FABRICA_ID only when given, otherwise every Fabrica with appearances.
    """
    with _connect() as client:
        if fabrica_id:
            if not fabrica_exists(client, fabrica_id):
                console.print(f"[red]Fabrica {fabrica_id} not found[/red]")
                sys.exit(1)
            updated = update_appearance_order(client, fabrica_id)
            console.print(f"[green]Updated order for {updated} APPEARS_IN relationships in Fabrica {fabrica_id}[/green]")
            return

        summary = reorder_all_appearances(client)

    table = Table(title="APPEARS_IN Order")
    table.add_column("Fabricas")
    table.add_column("Succeeded")
    table.add_column("Relationships")
    table.add_column("Timestamp conflicts")
    table.add_column("Failed")
    table.add_row(
        str(summary.fabricas),
        str(summary.succeeded),
        str(summary.relationships),
        str(summary.conflicts),
        str(len(summary.failed)),
    )
    console.print(table)

    if summary.failed:
        console.print(f"[red]Failed Fabricas: {', '.join(summary.failed)}[/red]")
        sys.exit(1)

@cli.command("import")
@click.argument("entity", type=click.Choice(list(IMPORTERS.keys())))
@click.argument("filename")
@click.option("--batch-size", type=int, default=None, help="Rows per write transaction")
def import_command(entity: str, filename: str, batch_size: int):
    """
    Import a CSV export into the graph.

    FILENAME is resolved against the import directory unless it is an existing path.
    """
    console.print(f"\n[bold blue]{entity.capitalize()} CSV Import[/bold blue]")
    console.print(f"File: {filename}\n")

    importer_class = IMPORTERS[entity]

    with _connect() as client:
        try:
            result = importer_class(client=client, batch_size=batch_size).run(filename)
        except FileNotFoundError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
        except Exception as e:
            console.print(f"[red]Import failed: {e}[/red]")
            logger.exception(f"Error importing {filename}")
            sys.exit(1)

    console.print("\n[bold]Import Summary[/bold]")
    table = Table()
    table.add_column("Rows")
    table.add_column("Imported")
    table.add_column("Updated")
    table.add_column("Relationships")
    table.add_column("Duplicates")
    table.add_column("Errors")
    table.add_column("Duration")

    duration = f"{result.duration_seconds:.1f}s" if result.duration_seconds is not None else "-"
    table.add_row(
        str(result.rows_total),
        str(result.imported),
        str(result.updated),
        str(result.relationships_created),
        str(result.duplicates_skipped),
        str(result.errors),
        duration,
    )
    console.print(table)

    for message in result.error_messages:
        console.print(f"[red]{message}[/red]")

    if result.errors == 0:
        console.print("[green]Import completed successfully[/green]")
    else:
        console.print(f"[yellow]Import completed with {result.errors} error(s)[/yellow]")


@cli.command("generate-id")
@click.argument("entity_type", default="jingle")
@click.argument("count", type=int, default=1)
def generate_id_command(entity_type: str, count: int):
    """Generate IDs for ENTITY_TYPE (jingle, cancion, artista, tematica, usuario)."""
    try:
        kind = EntityKind.from_name(entity_type)
        ids = generate_ids(kind, count)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        console.print(f"Available types: {', '.join(EntityKind.names())}")
        sys.exit(1)

    console.print(f"\nGenerating {count} ID(s) for {kind.label}:\n")
    for new_id in ids:
        click.echo(new_id)


@cli.command("normalize-date")
@click.argument("value")
@click.option("--required", is_flag=True, help="Fail instead of printing nothing for invalid dates")
def normalize_date_command(value: str, required: bool):
    """Show the canonical UTC timestamp stored for VALUE."""
    if required:
        try:
            click.echo(normalize_date_required(value))
        except DateParseError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
        return

    iso = normalize_date(value)
    click.echo(iso if iso is not None else "null")


if __name__ == "__main__":
    cli()
