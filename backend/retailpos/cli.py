# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/retailpos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# Schema:
# - python -m flask db upgrade
#   Apply migrations (Flask-Migrate).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Admin bootstrap:
# - python -m flask admin bootstrap [--email admin@example.com --password secret]
#   Create the first ADMIN if none exists. Defaults to INIT_ADMIN_EMAIL / INIT_ADMIN_PASSWORD.
#
# User inspection:
# - python -m flask users list [--role CASHIER] [--store-id 1] [--include-deleted]
#   List users with role, store and deletion status.

import click
from flask import current_app
from flask.cli import with_appcontext

from .authorization import parse_role
from .errors import RetailError
from .extensions import db
from .models import User
from .services import auth


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


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
    click.echo("BUILD Creating all tables...")
    db.create_all()
    click.echo("PASS Database reset complete.")


@click.group('admin')
def admin_group():
    """Admin account provisioning."""


@admin_group.command('bootstrap')
@click.option('--email', default=None, help='Admin email (defaults to INIT_ADMIN_EMAIL)')
@click.option('--password', default=None, help='Admin password (defaults to INIT_ADMIN_PASSWORD)')
@with_appcontext
def bootstrap_admin(email, password):
    """
    Create the first ADMIN account if none exists.

    Idempotent: when an active admin already exists nothing is changed.
    """
    email = email or current_app.config.get("INIT_ADMIN_EMAIL")
    password = password or current_app.config.get("INIT_ADMIN_PASSWORD")

    if not email or not password:
        click.echo("FAIL Admin email and password required (options or INIT_ADMIN_EMAIL / INIT_ADMIN_PASSWORD)")
        raise SystemExit(1)

    try:
        admin, created = auth().bootstrap_admin(email, password)
    except RetailError as exc:
        click.echo(f"FAIL {exc.message}")
        raise SystemExit(1)

    if created:
        click.echo(f"PASS Created admin: {admin.email} (ID: {admin.id})")
    else:
        click.echo(f"WARN  Admin already exists: {admin.email} (ID: {admin.id}), skipping...")


@click.group('users')
def users_group():
    """User inspection commands."""


@users_group.command('list')
@click.option('--role', default=None, help='Filter by role (ADMIN, OWNER, MANAGER, CASHIER, CUSTOMER)')
@click.option('--store-id', type=int, default=None, help='Filter by store ID')
@click.option('--include-deleted', is_flag=True, help='Include soft-deleted users')
@with_appcontext
def list_users(role, store_id, include_deleted):
    """List users with role, store and deletion status."""
    query = db.session.query(User)
    if role:
        parsed = parse_role(role)
        if parsed is None:
            click.echo(f"FAIL Unknown role '{role}'")
            raise SystemExit(1)
        query = query.filter_by(role=parsed.value)
    if store_id is not None:
        query = query.filter_by(store_id=store_id)
    if not include_deleted:
        query = query.filter(User.deleted_at.is_(None))

    users = query.order_by(User.id).all()
    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Email':<35} {'Role':<10} {'Store':<8} {'Deleted'}")
    click.echo("="*80)

    for user in users:
        deleted_str = "Yes" if user.is_deleted else "No"
        store_str = str(user.store_id) if user.store_id is not None else "-"
        click.echo(f"{user.id:<5} {user.email:<35} {user.role:<10} {store_str:<8} {deleted_str}")

    click.echo("="*80 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(admin_group)
    app.cli.add_command(users_group)
