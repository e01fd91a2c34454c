# Overview: Flask CLI command groups for bootstrap, shop status and end-of-day.

# backend/quickprint/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to quickprint.wsgi (PowerShell: $env:FLASK_APP="quickprint.wsgi").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables and the shop status row (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Shop status:
# - python -m flask shop status
# - python -m flask shop open
# - python -m flask shop close
#
# End of day:
# - python -m flask eod run [--date 2025-08-30] [--yes]
#   Archive the day's paid orders into the daily summary and purge them.
# - python -m flask eod summaries [--start 2025-08-01] [--end 2025-08-31]
#   Print daily summaries, newest first.

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import eod_service, summary_service, system_status_service
from .services.storage_service import CollaboratorError
from .time_utils import local_today


def _format_cents(cents: int) -> str:
    return f"{cents / 100:.2f}"


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create tables and the singleton shop status row."""
    db.create_all()
    status = system_status_service.get_system_status()
    click.echo(f"PASS Database ready (shop is {'online' if status.is_online else 'offline'})")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA! Stored files are not touched.
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('shop')
def shop_group():
    """Shop online/offline status."""


@shop_group.command('status')
@with_appcontext
def shop_status():
    status = system_status_service.get_system_status()
    click.echo("online" if status.is_online else "offline")


@shop_group.command('open')
@with_appcontext
def shop_open():
    system_status_service.set_online(True)
    click.echo("PASS Shop is online")


@shop_group.command('close')
@with_appcontext
def shop_close():
    system_status_service.set_online(False)
    click.echo("PASS Shop is offline")


@click.group('eod')
def eod_group():
    """End-of-day archival commands."""


@eod_group.command('run')
@click.option('--date', 'as_of', type=click.DateTime(formats=["%Y-%m-%d"]), default=None,
              help='Business date to close (default: today in the shop timezone)')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def run_eod(as_of, yes):
    """
    Archive a day's paid orders and delete them with their files.

    IRREVERSIBLE.
    """
    day = as_of.date() if as_of else local_today(summary_service.shop_timezone())
    if not yes:
        click.confirm(f"WARN This will archive and DELETE all paid orders of {day}. Continue?", abort=True)

    try:
        result = eod_service.run_end_of_day(day)
    except CollaboratorError as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"PASS {result.message()}: {result.docs_count} documents, "
        f"{_format_cents(result.income_cents)} income"
    )
    for failure in result.file_failures:
        click.echo(f"WARN file {failure['path']}: {failure['error']}")
    for failure in result.per_group_failures:
        click.echo(f"FAIL order {failure['order_code']}: {failure['error']}")


@eod_group.command('summaries')
@click.option('--start', type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.option('--end', type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@with_appcontext
def list_summaries(start, end):
    """Print daily summaries, newest first."""
    summaries = summary_service.list_daily_summaries(
        start.date() if start else None,
        end.date() if end else None,
    )
    if not summaries:
        click.echo("No summaries found.")
        return

    click.echo(f"{'DATE':<12}{'ORDERS':>8}{'DOCS':>8}{'INCOME':>12}")
    for s in summaries:
        click.echo(f"{s.date.isoformat():<12}{s.total_users:>8}{s.total_docs:>8}{_format_cents(s.total_income_cents):>12}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(shop_group)
    app.cli.add_command(eod_group)
