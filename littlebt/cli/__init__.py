"""
LittleBT CLI Tool

Administrative commands for the relational store behind the emulator:
bootstrap the schema, inspect the table catalog, count rows and drop
tables. Any storage error ends the command with exit status 1.
"""

import logging
import platform

import click
from sqlalchemy.exc import SQLAlchemyError

from littlebt import __version__
from littlebt.config.settings import settings
from littlebt.error_mitigation.fail_fast import FailFastProxy
from littlebt.monitoring.observer import NullObserver, StoreObserver
from littlebt.monitoring.performance_metrics import PerformanceMetrics
from littlebt.storage.engine import create_store_engine
from littlebt.storage.models import describe_schema, initialize_schema
from littlebt.storage.sql_tables import SqlTables


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=settings.LOG_FORMAT)


def _open_tables(ctx) -> FailFastProxy:
    """Catalog for the configured database, wrapped in the fail-fast policy"""
    opts = ctx.obj
    if "tables" not in opts:
        engine = create_store_engine(opts["url"])
        if opts["verbose"]:
            opts["metrics"] = PerformanceMetrics()
            observer = StoreObserver(metrics=opts["metrics"], record_metrics=True)
        else:
            observer = NullObserver()
        opts["engine"] = engine
        opts["tables"] = FailFastProxy(SqlTables(engine, observer=observer))
    return opts["tables"]


def _close(opts) -> None:
    if "metrics" in opts:
        opts["metrics"].log_summary()
    if "engine" in opts:
        opts["engine"].dispose()


@click.group()
@click.option('--db-username', envvar='DB_USERNAME', default=None, help='Database user name')
@click.option('--db-password', envvar='DB_PASSWORD', default=None, help='Database user password')
@click.option('--db-host', envvar='DB_HOST', default=None, help='Database host')
@click.option('--db-port', envvar='DB_PORT', type=int, default=None, help='Database port')
@click.option('--db-name', envvar='DB_NAME', default=None, help='Database name')
@click.option('--db-sslmode', envvar='DB_SSLMODE', default=None, help='libpq sslmode, empty to leave unset')
@click.option('--database-url', envvar='DATABASE_URL', default=None,
              help='Full connection URL, overrides the individual parts')
@click.option('--log-level', default=settings.LOG_LEVEL, show_default=True, help='Logging level')
@click.option('-v', '--verbose', is_flag=True,
              help='Log every storage operation and a metrics summary on exit')
@click.pass_context
def littlebt(ctx, db_username, db_password, db_host, db_port, db_name, db_sslmode, database_url, log_level,
             verbose):
    """Manage the relational store behind the LittleBT emulator"""
    _configure_logging(log_level)
    url = settings.get_database_url(
        username=db_username,
        password=db_password,
        host=db_host,
        port=db_port,
        database=db_name,
        database_url=database_url,
        sslmode=db_sslmode,
    )
    ctx.ensure_object(dict)
    ctx.obj.update({"url": url, "verbose": verbose})
    ctx.call_on_close(lambda: _close(ctx.obj))


@littlebt.command('init-db')
@click.pass_context
def init_db(ctx):
    """Create rows_t and tables_t if they are missing"""
    engine = create_store_engine(ctx.obj["url"])
    try:
        initialize_schema(engine)
        for name, shape in describe_schema(engine).items():
            columns = ", ".join(col for col, _, _ in shape["columns"])
            click.echo(f"{name}: {columns} (primary key: {', '.join(shape['primary_key'])})")
    except SQLAlchemyError as e:
        click.echo(f"Error initializing schema: {e}", err=True)
        ctx.exit(1)
    finally:
        engine.dispose()


@littlebt.command('tables')
@click.pass_context
def list_tables(ctx):
    """List every table in the catalog"""
    tables = _open_tables(ctx).get_all()
    if not tables:
        click.echo("No tables found")
        return

    click.echo("Tables:")
    for table in tables:
        families = ", ".join(
            f"{cf.name}#{cf.order}" for cf in sorted(table.families.values(), key=lambda f: f.order)
        )
        click.echo(f"  - {table.parent}/{table.table_id} [{families}] next_order={table.counter}")


@littlebt.command('count')
@click.argument('parent')
@click.argument('table_id')
@click.pass_context
def count_rows(ctx, parent, table_id):
    """Print the exact number of rows of a table"""
    rows = FailFastProxy(_open_tables(ctx).rows_for(parent, table_id))
    click.echo(str(rows.count()))


@littlebt.command('drop-table')
@click.argument('parent')
@click.argument('table_id')
@click.option('--purge-rows', is_flag=True, help='Delete the table rows as well')
@click.pass_context
def drop_table(ctx, parent, table_id, purge_rows):
    """Remove a table from the catalog"""
    tables = _open_tables(ctx)
    table = tables.get(parent, table_id)
    if table is None:
        click.echo(f"Table not found: {parent}/{table_id}", err=True)
        ctx.exit(1)

    if purge_rows:
        tables.drop(table)
        click.echo(f"Dropped {parent}/{table_id} and its rows")
    else:
        tables.delete(table)
        click.echo(f"Dropped {parent}/{table_id}; rows were kept")


@littlebt.command('version')
def version():
    """Show version information"""
    click.echo(f"littlebt v{__version__} (built w/Python {platform.python_version()})")


if __name__ == '__main__':
    littlebt()
