# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/liquor_pos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables and the default admin/manager/cashier users.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed
#   Add demo items, customers and a promotion (skips rows that already exist).
# - python -m flask system cleanup-sessions --retention-days 30
#   Delete expired or revoked sessions older than the retention window.
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and active status.
# - python -m flask users create --username admin --password "Password123!" --role admin
#   Create a user (prompts if options are omitted).

from datetime import timedelta
from decimal import Decimal

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import POSError
from .extensions import db
from .models import Customer, Item, Promotion, User
from .permissions import ROLES
from .services.auth_service import create_user, PasswordValidationError
from .services import session_service
from .time_utils import utcnow

DEFAULT_PASSWORD = "Password123!"

DEMO_ITEMS = [
    # barcode, name, quantity, price, average_cost, size, category, supplier, units_per_case, case_cost, rank
    ("080432400432", "Glenfiddich 12 Year", 18, "54.99", "38.50", "750ml", "Whisky", "Southern Glazer's", 6, "231.00", 3),
    ("082000727606", "Smirnoff No. 21", 42, "14.99", "9.10", "750ml", "Vodka", "Diageo", 12, "109.20", 1),
    ("087000007727", "Bacardi Superior", 30, "15.99", "10.25", "750ml", "Rum", "Bacardi USA", 12, "123.00", 2),
    ("085000024218", "Kendall-Jackson Chardonnay", 7, "16.99", "11.40", "750ml", "Wine", "Jackson Family", 12, "136.80", 5),
    ("018200007712", "Budweiser 12pk", 5, "13.49", "9.75", "12x12oz", "Beer", "Anheuser-Busch", 2, "19.50", 4),
]

DEMO_CUSTOMERS = [
    ("Dana Whitfield", "555-0142", "dana@example.com"),
    ("Luis Ortega", "555-0178", None),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the POS: schema plus default users.

    Creates:
    - All tables (if missing)
    - Users: admin, manager, cashier
    - All passwords default to: "Password123!"

    SECURITY: Change passwords immediately in production!
    """
    click.echo("START Initializing POS...")
    db.create_all()

    rounds = current_app.config["BCRYPT_ROUNDS"]
    for role in ROLES:
        username = role
        if db.session.query(User).filter_by(username=username).first():
            click.echo(f"WARN  User '{username}' already exists, skipping...")
            continue
        try:
            create_user(username, DEFAULT_PASSWORD, role=role, rounds=rounds)
            click.echo(f"PASS Created user: {username} with role '{role}'")
        except POSError as e:
            click.echo(f"FAIL Failed to create user '{username}': {e.message}")

    click.echo("\nDefault Credentials (CHANGE IN PRODUCTION!):")
    for role in ROLES:
        click.echo(f"   {role:<9} / {DEFAULT_PASSWORD}")
    click.echo("")


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


@system_group.command('seed')
@with_appcontext
def seed():
    """Add demo catalog, customers and a week-long promotion."""
    created = 0
    for (barcode, name, quantity, price, average_cost, size, category,
         supplier, units_per_case, case_cost, rank) in DEMO_ITEMS:
        if db.session.query(Item).filter_by(barcode=barcode).first():
            continue
        db.session.add(Item(
            barcode=barcode,
            name=name,
            quantity=quantity,
            price=Decimal(price),
            average_cost=Decimal(average_cost),
            size=size,
            category=category,
            supplier=supplier,
            units_per_case=units_per_case,
            case_cost=Decimal(case_cost),
            rank=rank,
        ))
        created += 1

    for name, phone, email in DEMO_CUSTOMERS:
        if db.session.query(Customer).filter_by(phone=phone).first():
            continue
        db.session.add(Customer(name=name, phone=phone, email=email))
        created += 1

    promo_name = "Weekend Spirits"
    if not db.session.query(Promotion).filter_by(name=promo_name).first():
        today = utcnow().date()
        db.session.add(Promotion(
            name=promo_name,
            type="percentage",
            value=Decimal("10"),
            start_date=today,
            end_date=today + timedelta(days=7),
            applicable_items="Smirnoff No. 21, Bacardi Superior",
        ))
        created += 1

    db.session.commit()
    click.echo(f"PASS Seeded {created} rows")


@system_group.command('cleanup-sessions')
@click.option('--retention-days', type=int, default=30, show_default=True)
@with_appcontext
def cleanup_sessions(retention_days):
    """Delete expired or revoked sessions older than the retention window."""
    deleted = session_service.cleanup_expired_sessions(retention_days=retention_days)
    click.echo(f"PASS Deleted {deleted} sessions")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ROLES)), prompt=True, help='Role')
@with_appcontext
def create_user_cli(username, password, role):
    """
    Create a new user interactively.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    - At least one special character
    """
    try:
        create_user(username, password, role=role, rounds=current_app.config["BCRYPT_ROUNDS"])
        click.echo(f"PASS Created user: {username} with role '{role}'")
        click.echo("SECURITY Password securely hashed with bcrypt")
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {e.message}")
        click.echo("Requirements: 8+ chars, uppercase, lowercase, digit, special char")
    except POSError as e:
        click.echo(f"FAIL Failed to create user: {e.message}")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role."""
    users = db.session.query(User).order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*60)
    click.echo(f"{'ID':<5} {'Username':<20} {'Role':<10} {'Active'}")
    click.echo("="*60)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.username:<20} {user.role:<10} {active_str}")

    click.echo("="*60 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
