# Overview: Flask CLI command groups for bootstrap, demo data and reports.

# backend/consignpos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables and the default store profile.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Demo data:
# - python -m flask seed demo
#   Three brands and four products, skipped if a brand of the same name exists.
#
# Reports:
# - python -m flask reports settlements [--month 2026-10] [--brand-id 1]
#   Print per-brand payout rows.
# - python -m flask reports export-csv [--month 2026-10] [--out sales.csv]
#   Write the sales CSV (stdout when --out is omitted).

import click
from flask.cli import with_appcontext

from .extensions import db
from .errors import ConsoleError
from .models import Brand
from .money import format_cents
from .services import brand_service, inventory_service, reporting_service, settlement_service
from .services.inventory_service import ProductIntake
from .services.settings_service import ensure_store_profile
from .services.settlement_service import DateRange
from .validation import ValidationError


DEMO_BRANDS = [
    {"name": "Urban Threadz", "contact_email": "contact@urbanthreadz.com", "contact_phone": "555-0101",
     "type": "EXCLUSIVE", "commission_rate": 15},
    {"name": "Luxe Leather", "contact_email": "sales@luxeleather.com", "contact_phone": "555-0202",
     "type": "NON_EXCLUSIVE", "commission_rate": 25},
    {"name": "EcoWear", "contact_email": "hello@ecowear.io", "contact_phone": "555-0303",
     "type": "EXCLUSIVE", "commission_rate": 12},
]

# (brand name, sku, name, size, category, cost, price, stock)
DEMO_PRODUCTS = [
    ("Urban Threadz", "UT-TSHIRT-M-BLK", "Classic Tee", "M", "Apparel", 1000, 3000, 50),
    ("Urban Threadz", "UT-TSHIRT-L-BLK", "Classic Tee", "L", "Apparel", 1000, 3000, 35),
    ("Luxe Leather", "LL-JACKET-L-BRN", "Bomber Jacket", "L", "Outerwear", 8000, 20000, 12),
    ("EcoWear", "EW-HOODIE-S-GRN", "Recycled Hoodie", "S", "Apparel", 2500, 6500, 5),
]


def _date_range(month):
    return DateRange.for_month(month) if month else DateRange.everything()


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """Create tables and the default store profile (safe to re-run)."""
    click.echo("START Initializing console...")
    db.create_all()
    profile = ensure_store_profile()
    db.session.commit()
    click.echo(f"PASS Store profile: {profile.name}")
    click.echo("DONE Console initialized. Sign in with any operator name.")


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


@click.group('seed')
def seed_group():
    """Demo data."""


@seed_group.command('demo')
@with_appcontext
def seed_demo():
    brands = {}
    for data in DEMO_BRANDS:
        existing = db.session.query(Brand).filter_by(name=data["name"]).first()
        if existing is not None:
            click.echo(f"WARN  Brand '{data['name']}' already exists, skipping...")
            continue
        brands[data["name"]] = brand_service.onboard_brand(dict(data), actor="seed")
        click.echo(f"PASS Onboarded brand: {data['name']}")

    for brand_name, sku, name, size, category, cost, price, stock in DEMO_PRODUCTS:
        brand = brands.get(brand_name)
        if brand is None:
            continue
        intake = ProductIntake(
            brand_id=brand.id,
            name=name,
            size=size,
            category=category,
            cost_price_cents=cost,
            selling_price_cents=price,
            stock=stock,
            sku_mode="manual",
            sku=sku,
        )
        try:
            product = inventory_service.create_product(intake, actor="seed")
        except ConsoleError as e:
            click.echo(f"FAIL {sku}: {e}")
            continue
        click.echo(f"PASS Added product: {product.sku} ({product.stock} units)")


@click.group('reports')
def reports_group():
    """Settlement and sales reports."""


@reports_group.command('settlements')
@click.option('--month', default=None, help='YYYY-MM (default: all time)')
@click.option('--brand-id', type=int, default=None)
@with_appcontext
def settlements_report(month, brand_id):
    try:
        report = settlement_service.settlement_report(
            date_range=_date_range(month), brand_id=brand_id, include_items=False
        )
    except (ConsoleError, ValidationError) as e:
        raise click.ClickException(str(e))

    click.echo("=" * 80)
    click.echo(f"{'Brand':<30} {'Rate':>6} {'Items':>6} {'Sales':>12} {'Commission':>12} {'Payout':>12}")
    click.echo("=" * 80)
    for row in report["rows"]:
        click.echo(
            f"{row['brand_name'][:30]:<30} {row['commission_rate']:>5g}% {row['items_sold']:>6} "
            f"{format_cents(row['total_sales_cents']):>12} {format_cents(row['store_commission_cents']):>12} "
            f"{format_cents(row['net_payable_cents']):>12}"
        )
    totals = report["totals"]
    click.echo("-" * 80)
    click.echo(
        f"{'TOTAL':<30} {'':>6} {totals['items_sold']:>6} {format_cents(totals['total_sales_cents']):>12} "
        f"{format_cents(totals['store_commission_cents']):>12} {format_cents(totals['net_payable_cents']):>12}"
    )


@reports_group.command('export-csv')
@click.option('--month', default=None, help='YYYY-MM (default: all time)')
@click.option('--out', 'out_path', type=click.Path(dir_okay=False, writable=True), default=None)
@with_appcontext
def export_csv(month, out_path):
    try:
        body = reporting_service.sales_csv(_date_range(month))
    except ValidationError as e:
        raise click.ClickException(str(e))

    if out_path is None:
        click.echo(body, nl=False)
        return
    with open(out_path, "w", encoding="utf-8", newline="") as fh:
        fh.write(body)
    click.echo(f"PASS Wrote {out_path}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(seed_group)
    app.cli.add_command(reports_group)
