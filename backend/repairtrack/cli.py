# Overview: Flask CLI command groups for bootstrap, store management and inspection.

# backend/repairtrack/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to repairtrack (PowerShell: $env:FLASK_APP="repairtrack").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Create tables (if missing) and seed the default complaint catalog.
# - python -m flask system pipeline
#   Show the configured stage pipeline and ready stage.
#
# Stores:
# - python -m flask stores create --name "Main Street" --password "secret1"
#   Create a store login (prompts for the password if omitted).
# - python -m flask stores list
#
# Orders:
# - python -m flask orders next-serial --store-id 1
#   Show the serial number the next intake at that store would receive.
# - python -m flask orders list --store-id 1 [--completed]

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import OrderTrackingError
from .extensions import db
from .services import catalog_service, pricing_service, store_service
from .services.context import app_services, intake_service, lifecycle_manager, repository


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create tables and seed the default complaint catalog. Safe to re-run."""
    click.echo("START Initializing repair tracker...")
    db.create_all()
    click.echo("PASS Tables ready")

    added = catalog_service.seed_default_complaints(repository())
    click.echo(f"PASS Seeded {added} default complaints")
    click.echo("DONE")


@system_group.command('pipeline')
@with_appcontext
def show_pipeline():
    """Show the configured stage pipeline."""
    pipeline = app_services().pipeline
    click.echo(" -> ".join(pipeline.stages))
    click.echo(f"ready stage: {pipeline.ready_stage}")


@click.group('stores')
def stores_group():
    """Store management commands."""


@stores_group.command('create')
@click.option('--name', required=True, help='Store name (3+ characters)')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Store login password')
@with_appcontext
def create_store(name, password):
    """Create a store login. Bypasses the admin password (operator shell access)."""
    try:
        store = store_service.create_store(
            repository(),
            name=name,
            password=password,
            admin_password=current_app.config["ADMIN_PASSWORD"],
            expected_admin_password=current_app.config["ADMIN_PASSWORD"],
            rounds=current_app.config["BCRYPT_ROUNDS"],
        )
    except OrderTrackingError as exc:
        raise click.ClickException(str(exc))
    click.echo(f"PASS Created store: {store.name} (ID: {store.id})")


@stores_group.command('list')
@with_appcontext
def list_stores():
    """List stores."""
    stores = store_service.list_stores(repository())
    if not stores:
        click.echo("No stores found.")
        return
    for store in stores:
        click.echo(f"{store.id}\t{store.name}")


@click.group('orders')
def orders_group():
    """Order inspection commands."""


@orders_group.command('next-serial')
@click.option('--store-id', type=int, required=True)
@with_appcontext
def next_serial(store_id):
    """Show the serial number the next intake would receive."""
    click.echo(intake_service().next_serial(store_id))


@orders_group.command('list')
@click.option('--store-id', type=int, default=None, help='Limit to one store (default: all stores)')
@click.option('--completed', is_flag=True, help='Show completed orders instead of the active pipeline')
@with_appcontext
def list_orders(store_id, completed):
    """List orders with status and balance due."""
    manager = lifecycle_manager()
    orders = manager.completed_orders(store_id) if completed else manager.active_orders(store_id)
    if not orders:
        click.echo("No orders found.")
        return
    for order in orders:
        due = pricing_service.display_amount(order, pricing_service.balance_due(order))
        click.echo(f"{order.serial_number}\t{order.status}\t{order.customer_name}\tdue={due}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(stores_group)
    app.cli.add_command(orders_group)
