# Overview: Flask CLI command groups for bootstrap, cash drawer operations and catalog inspection.

# backend/posgo/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to posgo (PowerShell: $env:FLASK_APP="posgo").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create tables (if missing) and the store settings row from Config.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Cash drawer:
# - python -m flask shifts status
#   Show the open shift with its expected cash.
# - python -m flask shifts open --amount 100
#   Open a shift with a starting float.
# - python -m flask shifts movement --type OUT --amount 20 --description "Supplier"
#   Record cash put in or taken out of the drawer.
# - python -m flask shifts close --counted 215.5
#   Close the open shift and print the reconciliation.
#
# Catalog:
# - python -m flask products list [--low-stock 5]
#   List products with stock.
# - python -m flask products seed
#   Insert a few demo products (skipped when the catalog is not empty).

import click
from flask.cli import with_appcontext

from . import money
from .extensions import db
from .models import Product
from .services import inventory_service, shift_service
from .services.settings_service import get_settings
from .services.shift_service import ShiftError
from .validation import ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the PosGo database: schema and store settings.

    Idempotent; safe to run on an existing database.
    """
    click.echo("START Initializing PosGo...")

    db.create_all()
    click.echo("PASS Tables ready")

    settings = get_settings()
    mode = "included in prices" if settings.prices_include_tax else "added at checkout"
    click.echo(f"PASS Store: {settings.store_name} (tax {settings.tax_rate:.2%}, {mode}, currency {settings.currency})")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


# =============================================================================
# SHIFTS
# =============================================================================

@click.group('shifts')
def shifts_group():
    """Cash drawer shift commands."""


@shifts_group.command('status')
@with_appcontext
def shift_status():
    """Show the open shift, if any."""
    currency = get_settings().currency
    shift = shift_service.get_active_shift()
    if shift is None:
        click.echo("No open shift.")
        return

    snapshot = shift_service.shift_snapshot(shift)
    click.echo(f"Shift {shift.id} OPEN since {shift.opened_at}")
    click.echo(f"   Start:         {money.display(shift.start_amount, currency)}")
    click.echo(f"   Cash sales:    {money.display(snapshot['cash_sales'], currency)}")
    click.echo(f"   Digital sales: {money.display(snapshot['digital_sales'], currency)}")
    click.echo(f"   Cash in/out:   {money.display(snapshot['cash_in'], currency)} / {money.display(snapshot['cash_out'], currency)}")
    click.echo(f"   Expected cash: {money.display(snapshot['expected_cash'], currency)}")


@shifts_group.command('open')
@click.option('--amount', required=True, help='Starting float in the drawer')
@click.option('--notes', help='Optional notes')
@with_appcontext
def open_shift_cli(amount, notes):
    try:
        shift = shift_service.open_shift(amount, notes)
        click.echo(f"PASS Opened shift {shift.id} with {money.display(shift.start_amount, get_settings().currency)}")
    except (ValidationError, ShiftError) as e:
        click.echo(f"FAIL Error: {str(e)}")


@shifts_group.command('movement')
@click.option('--type', 'movement_type', type=click.Choice(['IN', 'OUT'], case_sensitive=False), required=True)
@click.option('--amount', required=True)
@click.option('--description', help='Reason for the movement')
@with_appcontext
def movement_cli(movement_type, amount, description):
    try:
        movement = shift_service.record_movement(movement_type, amount, description)
        click.echo(f"PASS Recorded {movement.type} {money.display(movement.amount, get_settings().currency)}")
    except (ValidationError, ShiftError) as e:
        click.echo(f"FAIL Error: {str(e)}")


@shifts_group.command('close')
@click.option('--counted', required=True, help='Cash counted in the drawer')
@click.option('--notes', help='Optional notes')
@with_appcontext
def close_shift_cli(counted, notes):
    currency = get_settings().currency
    try:
        report = shift_service.close_shift(counted, notes)
    except (ValidationError, ShiftError) as e:
        click.echo(f"FAIL Error: {str(e)}")
        return

    shift = report.shift
    click.echo(f"PASS Closed shift {shift.id}")
    click.echo(f"   Sales:         {len(report.sales)}")
    click.echo(f"   Expected cash: {money.display(shift.expected_amount, currency)}")
    click.echo(f"   Counted cash:  {money.display(shift.counted_amount, currency)}")
    click.echo(f"   Discrepancy:   {money.display(report.discrepancy, currency)}")
    click.echo(f"   Digital total: {money.display(shift.total_sales_digital, currency)}")


# =============================================================================
# PRODUCTS
# =============================================================================

@click.group('products')
def products_group():
    """Catalog inspection commands."""


@products_group.command('list')
@click.option('--category', help='Filter by category')
@click.option('--low-stock', type=int, help='Only products with stock <= value')
@with_appcontext
def list_products_cli(category, low_stock):
    products = inventory_service.list_products(category=category, low_stock=low_stock)
    if not products:
        click.echo("No products found.")
        return

    currency = get_settings().currency
    click.echo(f"\n{'ID':<5} {'Name':<30} {'Category':<12} {'Price':>10} {'Stock':>6}")
    click.echo("-" * 67)
    for p in products:
        click.echo(f"{p.id:<5} {p.name[:30]:<30} {p.category[:12]:<12} {money.display(p.price, currency):>10} {p.stock:>6}")
        for v in p.variants:
            click.echo(f"{'':<5}   - {v.name[:26]:<26} {'':<12} {money.display(v.price, currency):>10} {v.stock:>6}")


DEMO_PRODUCTS = [
    {"name": "Gaseosa 500ml", "category": "Bebidas", "price": 3.5, "cost": 2.0, "stock": 48, "barcode": "7750000000011"},
    {"name": "Galletas Soda", "category": "Snacks", "price": 1.2, "cost": 0.7, "stock": 60, "barcode": "7750000000028"},
    {"name": "Arroz 1kg", "category": "Abarrotes", "price": 4.8, "cost": 3.6, "stock": 3, "barcode": "7750000000035"},
    {
        "name": "Polo Basico",
        "category": "Ropa",
        "price": 35.0,
        "cost": 18.0,
        "variants": [
            {"name": "S", "price": 35.0, "stock": 4, "barcode": "7750000000042"},
            {"name": "M", "price": 35.0, "stock": 6, "barcode": "7750000000059"},
            {"name": "L", "price": 38.0, "stock": 2, "barcode": "7750000000066"},
        ],
    },
]


@products_group.command('seed')
@with_appcontext
def seed_products_cli():
    """Insert demo products into an empty catalog."""
    if db.session.query(Product).count():
        click.echo("SKIP Catalog is not empty")
        return

    for data in DEMO_PRODUCTS:
        product = inventory_service.create_product(**data)
        click.echo(f"PASS Created {product.name} (ID: {product.id}, stock {product.stock})")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(shifts_group)
    app.cli.add_command(products_group)
