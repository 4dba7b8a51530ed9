# Overview: Flask CLI command groups for bootstrap, seeding, and return processing.

# backend/pos_backoffice/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to pos_backoffice (PowerShell: $env:FLASK_APP="pos_backoffice").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Inventory:
# - python -m flask inventory add-variation --barcode A1 --quantity 5 --name "Blue Mug"
#   Register a product variation with starting stock.
# - python -m flask inventory list
#   List variations with on-hand stock.
#
# Orders:
# - python -m flask orders create --item A1:10.00:3 --item B2:4.50:1
#   Seed a completed order (BARCODE:PRICE:QUANTITY); amount defaults to the ledger total.
# - python -m flask orders show 1
#   Print an order's ledger and total.
#
# Returns:
# - python -m flask returns process --order-id 1 --item A1:2:defective
#   Process a return (BARCODE:QUANTITY:REASON) through the reconciliation service.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Order, ProductVariation
from .money import format_cents, to_cents
from .services import inventory_service, order_line_service, return_service
from .services.inventory_service import InventoryError
from .services.order_line_service import LedgerLine
from .services.return_service import ReturnError, StorageFailureError
from .validation import ConflictError, ReturnItemRequest


def _parse_order_item(raw: str) -> LedgerLine:
    parts = raw.split(":")
    if len(parts) != 3:
        raise click.BadParameter(f"Expected BARCODE:PRICE:QUANTITY, got {raw!r}")
    barcode, price, quantity = parts
    try:
        return LedgerLine(barcode=barcode.strip(), price_cents=to_cents(price), quantity=int(quantity))
    except ValueError:
        raise click.BadParameter(f"Invalid price or quantity in {raw!r}")


def _parse_return_item(raw: str) -> ReturnItemRequest:
    parts = raw.split(":", 2)
    if len(parts) != 3:
        raise click.BadParameter(f"Expected BARCODE:QUANTITY:REASON, got {raw!r}")
    barcode, quantity, reason = parts
    try:
        return ReturnItemRequest(barcode=barcode.strip(), quantity=int(quantity), reason=reason.strip())
    except ValueError:
        raise click.BadParameter(f"Invalid quantity in {raw!r}")


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database schema ready.")


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

    click.echo("PASS Database reset complete.")


@click.group('inventory')
def inventory_group():
    """Product variation stock commands."""


@inventory_group.command('add-variation')
@click.option('--barcode', required=True, help='Unique barcode')
@click.option('--quantity', type=int, default=0, show_default=True, help='Starting on-hand stock')
@click.option('--name', default=None, help='Display name')
@with_appcontext
def add_variation(barcode, quantity, name):
    """
    Register a product variation.

    Example:
        flask inventory add-variation --barcode A1 --quantity 5
    """
    try:
        variation = inventory_service.create_variation(barcode, quantity=quantity, name=name)
        db.session.commit()
    except (ConflictError, InventoryError) as e:
        db.session.rollback()
        raise click.ClickException(str(e))

    click.echo(f"PASS Created variation {variation.barcode} (ID: {variation.id}, quantity: {variation.quantity})")


@inventory_group.command('list')
@with_appcontext
def list_variations():
    """List all product variations with on-hand stock."""
    variations = db.session.query(ProductVariation).order_by(ProductVariation.barcode).all()

    if not variations:
        click.echo("No variations found.")
        return

    click.echo("\n" + "="*60)
    click.echo(f"{'ID':<5} {'Barcode':<20} {'Name':<25} {'Qty'}")
    click.echo("="*60)

    for variation in variations:
        click.echo(f"{variation.id:<5} {variation.barcode:<20} {(variation.name or '-'):<25} {variation.quantity}")


@click.group('orders')
def orders_group():
    """Order seeding and inspection commands."""


@orders_group.command('create')
@click.option('--item', 'raw_items', multiple=True, required=True, help='BARCODE:PRICE:QUANTITY (repeatable)')
@click.option('--amount', default=None, help='Order total; defaults to the ledger total')
@with_appcontext
def create_order_cli(raw_items, amount):
    """
    Seed a completed order.

    Example:
        flask orders create --item A1:10.00:3
    """
    lines = [_parse_order_item(raw) for raw in raw_items]
    amount_cents = None
    if amount is not None:
        try:
            amount_cents = to_cents(amount)
        except ValueError:
            raise click.BadParameter(f"Invalid amount {amount!r}")

    order = order_line_service.create_order(lines, amount_cents=amount_cents)
    db.session.commit()

    click.echo(f"PASS Created order {order.id} (total: {format_cents(order.amount_cents)})")


@orders_group.command('show')
@click.argument('order_id', type=int)
@with_appcontext
def show_order(order_id):
    """Print an order's line-item ledger and total."""
    order = db.session.get(Order, order_id)
    if order is None:
        raise click.ClickException(f"Order {order_id} not found")

    click.echo(f"Order {order.id}  total: {format_cents(order.amount_cents)}")
    for line in order_line_service.decode_ledger(order.items):
        click.echo(f"  {line.barcode:<20} {format_cents(line.price_cents):>10} x {line.quantity}")


@click.group('returns')
def returns_group():
    """Return processing commands."""


@returns_group.command('process')
@click.option('--order-id', type=int, required=True, help='Order to return against')
@click.option('--item', 'raw_items', multiple=True, required=True, help='BARCODE:QUANTITY:REASON (repeatable)')
@with_appcontext
def process_return_cli(order_id, raw_items):
    """
    Process a return through the reconciliation service.

    Example:
        flask returns process --order-id 1 --item A1:2:defective
    """
    items = [_parse_return_item(raw) for raw in raw_items]

    try:
        result = return_service.process_return(order_id, items)
    except (ReturnError, StorageFailureError) as e:
        raise click.ClickException(f"Failed to process return: {e}")

    click.echo(f"PASS Returned {format_cents(result.returned_amount_cents)} on order {result.order_id}")
    click.echo(f"     New total: {format_cents(result.new_total_cents)}")
    for line in result.remaining_items:
        click.echo(f"     {line.barcode:<20} {format_cents(line.price_cents):>10} x {line.quantity}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(inventory_group)
    app.cli.add_command(orders_group)
    app.cli.add_command(returns_group)
