"""CLI tools for clinic administration."""

import click
from pydantic import ValidationError

from school_clinic.core.config import settings
from school_clinic.db.enums import Role
from school_clinic.db.init_db import init_db as bootstrap_store
from school_clinic.db.session import SessionLocal, engine
from school_clinic.schemas.user import PasswordReset, UserCreate
from school_clinic.services import auth_service, user_service
from school_clinic.services.errors import DuplicateError

ROLE_CHOICES = [role.value for role in Role]


@click.group()
def cli():
    """School clinic CLI tools."""
    pass


@cli.command("init-db")
def init_db():
    """Create tables, apply column migrations and seed the admin and settings rows."""
    bootstrap_store(engine)
    click.echo(f"✓ Database ready at {settings.DB_PATH}")


@cli.command("create-user")
@click.option("--username", required=True)
@click.option("--password", required=True, prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--role", type=click.Choice(ROLE_CHOICES), default=Role.SCHOOL_NURSE.value, show_default=True)
def create_user(username: str, password: str, role: str):
    """
    Create an account.

    Example:
        school-clinic create-user --username nurse1 --role "School Nurse"
    """
    try:
        data = UserCreate(username=username, password=password, role=role)
    except ValidationError as e:
        raise click.BadParameter(str(e))

    db = SessionLocal()
    try:
        user = user_service.create_user(db, data, actor_user_id=None)
        click.echo(f"✓ Created user {user.username} (id={user.id}, role={user.role})")
    except DuplicateError as e:
        click.echo(f"❌ {e}")
        raise SystemExit(1)
    finally:
        db.close()


@cli.command("reset-password")
@click.option("--username", required=True)
@click.option("--password", required=True, prompt=True, hide_input=True, confirmation_prompt=True)
def reset_password(username: str, password: str):
    """Set a new password and clear the lockout counter."""
    db = SessionLocal()
    try:
        user = auth_service.get_user_by_username(db, username)
        if not user:
            click.echo(f"❌ User '{username}' not found")
            raise SystemExit(1)
        user_service.reset_password(db, user.id, PasswordReset(password=password), actor_user_id=None)
        click.echo(f"✓ Password reset for {username}")
    finally:
        db.close()


@cli.command("unlock-user")
@click.option("--username", required=True)
def unlock_user(username: str):
    """Clear the failed-attempt counter without changing the password."""
    db = SessionLocal()
    try:
        user = auth_service.get_user_by_username(db, username)
        if not user:
            click.echo(f"❌ User '{username}' not found")
            raise SystemExit(1)
        user_service.unlock_user(db, user.id, actor_user_id=None)
        click.echo(f"✓ Unlocked {username}")
    finally:
        db.close()


@cli.command()
@click.option("--host", default=None, help="Bind address (default: HOST setting)")
@click.option("--port", default=None, type=int, help="Port (default: PORT setting)")
def serve(host: str | None, port: int | None):
    """Run the API server."""
    import uvicorn

    uvicorn.run(
        "school_clinic.main:app",
        host=host or settings.HOST,
        port=port or settings.PORT,
    )


if __name__ == "__main__":
    cli()
