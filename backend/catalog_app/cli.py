# Overview: Flask CLI command group for loading, inspecting and securing the catalog service.

# backend/catalog_app/cli.py
# Commands (run from the repo root with FLASK_APP=backend/wsgi.py):
# - flask --app backend/wsgi.py catalog refresh [--type all|images|inventory|pending|products]
#   Load data from Google Sheets/Drive once and print the resulting counts.
# - flask catalog stats
#   Print cached counts (LOAD_ON_STARTUP must be on for these to be non-zero).
# - flask catalog hash-password
#   Prompt for an admin password and print its bcrypt hash for ADMIN_PASSWORD_HASH.

import click
from flask.cli import with_appcontext

from .extensions import catalog
from .services import refresh_service
from .services.auth_service import hash_password, validate_password_strength, PasswordValidationError
from .validation import CatalogError


@click.group("catalog")
def catalog_group():
    """Catalog data and admin credential commands."""


@catalog_group.command("refresh")
@click.option(
    "--type", "refresh_type",
    type=click.Choice(refresh_service.REFRESH_TYPES),
    default="all",
    show_default=True,
)
@with_appcontext
def refresh_command(refresh_type):
    """Reload cached data from Google Sheets and Drive."""
    try:
        result = refresh_service.refresh(refresh_type)
    except CatalogError as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Refreshed {result['type']}")
    _echo_counts(result)


@catalog_group.command("stats")
@with_appcontext
def stats_command():
    """Show what is currently cached."""
    _echo_counts(refresh_service.refresh_status())
    click.echo(f"  admin sessions: {len(catalog.sessions)}")


@catalog_group.command("hash-password")
@click.password_option("--password", prompt="Admin password")
def hash_password_command(password):
    """Print a bcrypt hash suitable for ADMIN_PASSWORD_HASH."""
    try:
        validate_password_strength(password)
    except PasswordValidationError as e:
        raise click.ClickException(str(e))
    click.echo(hash_password(password))


def _echo_counts(status: dict) -> None:
    click.echo(f"  products:  {status['productsCount']}")
    click.echo(f"  images:    {status['imagesCount']}")
    click.echo(f"  inventory: {status['inventoryCount']}")
    click.echo(f"  pending:   {status['pendingCount']}")
    click.echo(f"  last full refresh: {status['lastRefreshTime'] or 'never'}")


def register_commands(app):
    app.cli.add_command(catalog_group)
