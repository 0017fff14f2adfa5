#!/usr/bin/env python3
"""
Procurement Cost Analytics — CLI entry point.

Usage examples:
  python main.py check                              # Verify data files and database
  python main.py search "mppt 60a"                  # Find components by description/model/brand
  python main.py cost 42                            # True unit cost history of component 42
  python main.py cost 42 --format csv -o out.csv    # Allocation rows as CSV
  python main.py cycles                             # Reorder cash cycles, fastest first
  python main.py cycles --format json

  python main.py import-db                          # Refresh the SQLite mirror from the CSVs
  python main.py --use-database cycles              # Analyse the mirror instead of the CSVs
"""
import logging
import sqlite3
import sys
from pathlib import Path

import click

from analytics import CashCycleAnalyzer, ComponentSearch, CostAllocator, Database, SnapshotLoader
from analytics.csv_manager import csv_manager
from analytics.loader import TABLE_FILES
from config import Config
from models.snapshot import DataSnapshot
from reports import (
    allocation_rows,
    cost_payload,
    cycle_payload,
    cycle_rows,
    render_report,
    write_csv,
)

OUTPUT_FORMATS = ["text", "json", "csv"]


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        datefmt="%H:%M:%S",
    )


def _config(ctx: click.Context) -> Config:
    return ctx.obj["config"]


def _load_snapshot(config: Config) -> DataSnapshot:
    if config.use_database:
        if not config.db_path.exists():
            click.echo(f"Error: database not found at {config.db_path} (run import-db first).", err=True)
            sys.exit(1)
        return Database(config.db_path).load_snapshot()

    if not config.data_dir.is_dir():
        click.echo(f"Error: data directory '{config.data_dir}' does not exist.", err=True)
        sys.exit(1)
    return SnapshotLoader(config.data_dir).load()


def _emit(text: str, output: str | None) -> None:
    if output:
        out = Path(output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text, encoding="utf-8")
        click.echo(f"Written to: {out}")
    else:
        click.echo(text, nl=False)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--data-dir", default=None, type=click.Path(), help="Directory holding the CSV exports")
@click.option("--db", "db_path", default=None, type=click.Path(), help="Path to the SQLite mirror")
@click.option("--use-database", is_flag=True, help="Read the SQLite mirror instead of the CSVs")
@click.option("--currency", default=None, help="Reporting currency of PO cost amounts (default: IDR)")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    data_dir: str | None,
    db_path: str | None,
    use_database: bool,
    currency: str | None,
) -> None:
    """Procurement Cost Analytics — true unit costs and reorder cash cycles."""
    _setup_logging(verbose)
    config = Config()
    if data_dir:
        config.data_dir = Path(data_dir)
    if db_path:
        config.db_path = Path(db_path)
    if use_database:
        config.use_database = True
    if currency:
        config.reporting_currency = currency.upper()

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config


# --------------------------------------------------------------------
# check command
# --------------------------------------------------------------------

@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Verify that the data files (and database mirror, if any) are ready."""
    config = _config(ctx)
    loader = SnapshotLoader(config.data_dir)

    click.echo("\n=== Analytics Setup Check ===\n")
    click.echo(f"  Data directory:  {config.data_dir}")
    click.echo(f"  Source:          {'database' if config.use_database else 'CSV files'}")
    click.echo(f"  Currency:        {config.reporting_currency}")
    click.echo()

    missing = 0
    for table, (file_name, _) in TABLE_FILES.items():
        info = csv_manager.get_metadata(loader.path_for(table))
        tick = "✓" if info["exists"] else "✗"
        count_str = f" ({info['rows']} rows)" if info["exists"] else " (file not found)"
        click.echo(f"  {file_name:<28} {tick}{count_str}")
        if not info["exists"]:
            missing += 1

    click.echo()
    if config.db_path.exists():
        counts = Database(config.db_path).counts()
        total = sum(counts.values())
        click.echo(f"  Database:                     ✓  {config.db_path} ({total} rows)")
    else:
        click.echo(f"  Database:                     ✗  {config.db_path} (not created)")
        if config.use_database:
            click.echo("  → Run: python main.py import-db")
    click.echo()

    if missing and not config.use_database:
        click.echo(f"  → {missing} table file(s) missing; they will load as empty tables.")
        click.echo()


# --------------------------------------------------------------------
# search command
# --------------------------------------------------------------------

@cli.command()
@click.argument("query")
@click.option("--limit", "-n", default=None, type=int, help="Maximum matches (default: SEARCH_LIMIT or 20)")
@click.pass_context
def search(ctx: click.Context, query: str, limit: int | None) -> None:
    """Find components whose description, supplier model, or brand matches QUERY."""
    config = _config(ctx)
    snapshot = _load_snapshot(config)

    finder = ComponentSearch(snapshot.components, fuzzy_threshold=config.component_fuzzy_threshold)
    matches = finder.search(query, limit=limit if limit is not None else config.search_limit)

    if not matches:
        click.echo(f"No components match '{query}'.")
        return
    for c in matches:
        extra = " · ".join(p for p in (c.brand, c.category) if p)
        click.echo(f"  {c.component_id:>6}  {c.supplier_model:<28} {c.internal_description}"
                   + (f"  ({extra})" if extra else ""))


# --------------------------------------------------------------------
# cost command
# --------------------------------------------------------------------

@cli.command()
@click.argument("component_id", type=int)
@click.option("--format", "fmt", type=click.Choice(OUTPUT_FORMATS), default="text", show_default=True)
@click.option("--output", "-o", default=None, type=click.Path(), help="Write the report to this file")
@click.option("--no-pretty", is_flag=True, help="Output compact (non-indented) JSON")
@click.pass_context
def cost(ctx: click.Context, component_id: int, fmt: str, output: str | None, no_pretty: bool) -> None:
    """Show quote history, true unit cost allocations, and PO costs of COMPONENT_ID."""
    config = _config(ctx)
    if no_pretty:
        config.pretty_json = False
    snapshot = _load_snapshot(config)

    result = CostAllocator(snapshot, config.reporting_currency).lookup(component_id)
    if result.component is None and not result.has_data:
        click.echo(f"Error: component {component_id} not found.", err=True)
        sys.exit(1)

    if fmt == "json":
        _emit(result.model_dump_json(indent=2 if config.pretty_json else None) + "\n", output)
    elif fmt == "csv":
        out = Path(output) if output else config.output_dir / f"cost_{component_id}.csv"
        write_csv(out, allocation_rows(result))
        click.echo(f"Written to: {out}")
    else:
        _emit(render_report("cost", cost_payload(result), config.report_template), output)

    if result.errors:
        click.echo(f"⚠  {len(result.errors)} row(s) skipped — see log for details.", err=True)


# --------------------------------------------------------------------
# cycles command
# --------------------------------------------------------------------

@cli.command()
@click.option("--format", "fmt", type=click.Choice(OUTPUT_FORMATS), default="text", show_default=True)
@click.option("--output", "-o", default=None, type=click.Path(), help="Write the report to this file")
@click.option("--no-pretty", is_flag=True, help="Output compact (non-indented) JSON")
@click.pass_context
def cycles(ctx: click.Context, fmt: str, output: str | None, no_pretty: bool) -> None:
    """
    Reorder cash cycles per component, fastest first.

    \b
    A PO is settled on its latest balance payment date; components with
    fewer than two settled POs are not listed.
    """
    config = _config(ctx)
    if no_pretty:
        config.pretty_json = False
    snapshot = _load_snapshot(config)

    report = CashCycleAnalyzer(snapshot).analyze()

    if fmt == "json":
        _emit(report.model_dump_json(indent=2 if config.pretty_json else None) + "\n", output)
    elif fmt == "csv":
        out = Path(output) if output else config.output_dir / "cash_cycles.csv"
        write_csv(out, cycle_rows(report))
        click.echo(f"Written to: {out}")
    else:
        _emit(render_report("cycles", cycle_payload(report), config.report_template), output)

    if report.errors:
        click.echo(f"⚠  {len(report.errors)} row(s) skipped — see log for details.", err=True)


# --------------------------------------------------------------------
# import-db command
# --------------------------------------------------------------------

@cli.command("import-db")
@click.pass_context
def import_db(ctx: click.Context) -> None:
    """Replace the SQLite mirror's contents with the CSV exports in the data directory."""
    config = _config(ctx)
    if not config.data_dir.is_dir():
        click.echo(f"Error: data directory '{config.data_dir}' does not exist.", err=True)
        sys.exit(1)

    snapshot = SnapshotLoader(config.data_dir).load()
    try:
        written = Database(config.db_path).import_snapshot(snapshot)
    except sqlite3.Error as e:
        click.echo(f"\n✗ Import failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"\n✓ Imported into {config.db_path}")
    for table, count in written.items():
        click.echo(f"  {table:<18} {count}")


if __name__ == "__main__":
    cli()
