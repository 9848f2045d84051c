"""
Flask CLI commands for database setup.

Commands:
- flask init-db: Create all tables
- flask create-user: Register a cashier or administrator
"""

import click
from sqlalchemy.exc import IntegrityError

from pos_backend import database
from pos_backend.models import AppUser, UserRole


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create every table of the schema."""
        database.create_schema()
        click.echo(click.style('Esquema creado.', fg='green'))

    @app.cli.command('create-user')
    @click.option('--username', prompt=True, help='Login name')
    @click.option('--full-name', prompt=True, help='Display name')
    @click.option('--role', type=click.Choice([r.value for r in UserRole]), default=UserRole.VENTAS.value, show_default=True)
    def create_user(username, full_name, role):
        """Register a user that can record sales and quotations."""
        session = database.get_session()
        username = username.strip()
        if not username:
            click.echo(click.style('El nombre de usuario es obligatorio.', fg='red'))
            return

        user = AppUser(username=username, full_name=full_name.strip() or username, role=role)
        session.add(user)
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            click.echo(click.style(f'Ya existe un usuario "{username}".', fg='red'))
            return

        click.echo(click.style(f'Usuario creado (ID {user.id}, rol {role}).', fg='green'))
