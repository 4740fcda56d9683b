import click


@click.group()
def main() -> None:
    """Chatspace - workspaces for chat conversations."""


@main.command()
@click.option("--host", default=None, help="Bind host (default: from CHATSPACE_HOST or 0.0.0.0).")
@click.option("--port", default=None, type=int, help="Bind port (default: from CHATSPACE_PORT or 8000).")
@click.option("--reload", is_flag=True, default=False, help="Enable auto-reload for development.")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Start the workspace API server."""
    import uvicorn

    from chatspace.server.settings import get_settings

    settings = get_settings()

    uvicorn.run(
        "chatspace.server.app:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_level="warning",  # uvicorn's own logging is intercepted by loguru
    )


# ---------------------------------------------------------------------------
# Database management (Alembic, configured from CHATSPACE_DATABASE_URL)
# ---------------------------------------------------------------------------


def _alembic_config():
    """Alembic config for the migrations shipped inside the package."""
    from pathlib import Path

    from alembic.config import Config

    return Config(str(Path(__file__).parent / "server" / "alembic.ini"))


@main.group()
def db() -> None:
    """Database migration and management commands."""


@db.command()
@click.option("--revision", default="head", help="Target revision (default: head).")
@click.option("--sql", is_flag=True, default=False, help="Print the SQL instead of executing it.")
def upgrade(revision: str, sql: bool) -> None:
    """Apply migrations up to REVISION."""
    from alembic import command

    command.upgrade(_alembic_config(), revision, sql=sql)
    if not sql:
        click.echo(f"Database upgraded to {revision}.")


@db.command()
@click.option("--revision", default="-1", help="Target revision (default: -1, one step back).")
def downgrade(revision: str) -> None:
    """Revert migrations down to REVISION."""
    from alembic import command

    command.downgrade(_alembic_config(), revision)
    click.echo(f"Database downgraded to {revision}.")


@db.command()
@click.argument("message")
def migrate(message: str) -> None:
    """Autogenerate a migration from changes to the ORM tables."""
    from alembic import command

    command.revision(_alembic_config(), message=message, autogenerate=True)
    click.echo(f"Migration generated: {message}")


@db.command()
@click.argument("revision", default="head")
def stamp(revision: str) -> None:
    """Mark the database as being at REVISION without running migrations."""
    from alembic import command

    command.stamp(_alembic_config(), revision)
    click.echo(f"Database stamped at {revision}.")


@db.command()
def current() -> None:
    """Show the revision the database is at."""
    from alembic import command

    command.current(_alembic_config(), verbose=True)


@db.command()
def history() -> None:
    """List all known migrations."""
    from alembic import command

    command.history(_alembic_config(), verbose=True)


if __name__ == "__main__":
    main()
