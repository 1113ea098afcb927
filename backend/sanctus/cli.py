# Overview: Flask CLI command groups for bootstrap and permission inspection.

# backend/sanctus/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv and set JWT_SECRET.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init
#   Idempotent: creates tables, seeds the permission catalog and the five system roles.
#
# User bootstrap:
# - python -m flask users create --username admin --email admin@diocese.local --full-name "Diocese Admin" --role SUPER_ADMIN
#   Create a user (prompts for the password).
#
# Permission inspection:
# - python -m flask perms list --group FINANCE
#   List the permission catalog, optionally for one group.
# - python -m flask perms effective <username>
#   Show a user's effective permissions (role plus active overrides).

import click
from flask.cli import with_appcontext

from .errors import ApiError
from .extensions import db
from .models import Parish, User
from .permissions import ALL_ROLES, PermissionCategory
from .services import permission_service
from .services.auth_service import create_user


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create the schema and seed RBAC.

    Safe to re-run: existing permissions and roles are left untouched and
    system roles only receive their default permissions when first created.
    """
    click.echo("START Initializing parish system...")
    db.create_all()
    perm_count, role_count = permission_service.bootstrap_rbac()
    click.echo(f"PASS Created {perm_count} permissions, {role_count} system roles")
    click.echo("DONE Run 'flask users create' to add the first SUPER_ADMIN.")


@click.group('users')
def users_group():
    """User bootstrap commands."""


@users_group.command('create')
@click.option('--username', prompt=True)
@click.option('--email', prompt=True)
@click.option('--full-name', prompt=True)
@click.option('--role', type=click.Choice(ALL_ROLES), prompt=True)
@click.option('--parish-code', default=None, help='Home parish code (required unless SUPER_ADMIN)')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@with_appcontext
def create_user_cli(username, email, full_name, role, parish_code, password):
    """Create a user account."""
    parish_id = None
    if parish_code:
        parish = db.session.query(Parish).filter_by(parish_code=parish_code, deleted_at=None).first()
        if not parish:
            raise click.ClickException(f"Parish '{parish_code}' not found")
        parish_id = parish.id

    try:
        user = create_user(
            username=username,
            email=email,
            password=password,
            full_name=full_name,
            role=role,
            parish_id=parish_id,
        )
    except ApiError as e:
        raise click.ClickException(e.message)

    click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role}'")


@click.group('perms')
def perms_group():
    """Permission inspection commands."""


@perms_group.command('list')
@click.option('--group', type=click.Choice(PermissionCategory.ALL), help='Filter by permission group')
@with_appcontext
def list_permissions_cli(group):
    """List the permission catalog."""
    perms = permission_service.list_permissions(group)

    click.echo(f"\n{'Key':<24} {'Name':<30} {'Group'}")
    click.echo("-" * 80)
    for perm in perms:
        click.echo(f"{perm.permission_key:<24} {perm.display_name:<30} {perm.permission_group}")
    click.echo(f"\n Total: {len(perms)} permissions\n")


@perms_group.command('effective')
@click.argument('username')
@with_appcontext
def effective_permissions_cli(username):
    """Show a user's effective permissions."""
    user = db.session.query(User).filter_by(username=username, deleted_at=None).first()
    if not user:
        raise click.ClickException(f"User '{username}' not found")

    keys = sorted(permission_service.list_effective_permissions(user))
    click.echo(f"\n{user.username} ({user.role})")
    click.echo("-" * 40)
    for key in keys:
        click.echo(f"  {key}")
    click.echo(f"\n Total: {len(keys)} permissions\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
