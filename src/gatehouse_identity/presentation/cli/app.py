"""Gatehouse CLI application using Typer.

This module provides command-line utilities for operating the auth
layer: secret generation, schema creation and session maintenance.
"""

import asyncio
import logging
import secrets
import sys
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from gatehouse_auth import SessionService, SessionStats
from gatehouse_config.settings import get_settings
from gatehouse_identity.application.factories import AuthServiceFactory
from gatehouse_identity.infrastructure.persistence.sqlalchemy.init_db import (
    create_engine_from_settings,
    create_session_factory,
    create_tables,
    drop_tables,
)

T = TypeVar("T")

app = typer.Typer(
    name="gatehouse",
    help="Gatehouse - session and credential management CLI",
    no_args_is_help=True,
)
console = Console()

secrets_app = typer.Typer(
    name="secrets",
    help="Secret generation utilities",
    no_args_is_help=True,
)
db_app = typer.Typer(
    name="db",
    help="Database schema utilities",
    no_args_is_help=True,
)
sessions_app = typer.Typer(
    name="sessions",
    help="Session statistics and cleanup",
    no_args_is_help=True,
)
app.add_typer(secrets_app)
app.add_typer(db_app)
app.add_typer(sessions_app)


@lru_cache(maxsize=1)
def _configure_logging() -> None:
    """Configure logging once per process.

    Uses the level from settings and quiets noisy third-party loggers.
    """
    settings = get_settings()
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )

    logging.getLogger("gatehouse_auth").setLevel(log_level)
    logging.getLogger("gatehouse_identity").setLevel(log_level)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


async def _with_session_service(action: Callable[[SessionService], Awaitable[T]]) -> T:
    """Run ``action`` inside one committed transaction."""
    factory = AuthServiceFactory()
    engine = create_engine_from_settings(factory.settings)
    session_factory = create_session_factory(engine)
    try:
        async with session_factory() as session, session.begin():
            return await action(factory.session_service(session))
    finally:
        await engine.dispose()


@secrets_app.command("generate")
def generate_secrets() -> None:
    """Generate secure secrets for Gatehouse configuration.

    Copy the output to your .env file.
    """
    console.print("\n[bold green]Gatehouse Secret Generation[/bold green]")
    console.print("=" * 60)
    console.print(
        "\nGenerated secrets for your [bold].env[/bold] configuration file:\n"
    )

    # 64 bytes for a strong HS256 key
    jwt_secret = secrets.token_urlsafe(64)
    console.print(f"[cyan]JWT_SECRET_KEY[/cyan]={jwt_secret}")

    db_password = secrets.token_urlsafe(32)
    console.print(f"[cyan]POSTGRES_PASSWORD[/cyan]={db_password}")

    console.print("\n" + "=" * 60)
    console.print(
        "[yellow]Keep these secrets secure and never commit them "
        "to version control![/yellow]"
    )


@db_app.command("init")
def db_init() -> None:
    """Create all missing tables (sessions and every identity table)."""
    _configure_logging()
    tables = asyncio.run(create_tables())
    console.print("[green]Database schema is up to date[/green]")
    console.print(f"Tables: {', '.join(tables)}")


@db_app.command("reset")
def db_reset(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip the confirmation prompt",
    ),
) -> None:
    """Drop and recreate all tables. Every identity and session is lost."""
    if not yes:
        typer.confirm("Delete all identities and sessions?", abort=True)
    _configure_logging()

    async def _reset() -> None:
        engine = create_engine_from_settings()
        try:
            await drop_tables(engine)
            await create_tables(engine)
        finally:
            await engine.dispose()

    asyncio.run(_reset())
    console.print("[yellow]Database reset[/yellow]")


@sessions_app.command("stats")
def sessions_stats(
    entity: Optional[str] = typer.Option(
        None,
        "--entity",
        "-e",
        help="Only count sessions of this auth entity",
    ),
) -> None:
    """Show active session counts."""
    _configure_logging()
    stats: SessionStats = asyncio.run(
        _with_session_service(lambda service: service.get_session_stats(entity)),
    )

    table = Table(title="Active sessions")
    table.add_column("Auth entity", style="cyan")
    table.add_column("Active", justify="right")
    for name, count in sorted(stats.by_entity.items()):
        table.add_row(name, str(count))
    console.print(table)
    console.print(
        f"Total active: [bold]{stats.total_active}[/bold]  "
        f"Unique users: [bold]{stats.unique_users}[/bold]"
    )


@sessions_app.command("purge-expired")
def sessions_purge_expired() -> None:
    """Delete sessions past their expiry."""
    _configure_logging()
    deleted = asyncio.run(
        _with_session_service(lambda service: service.purge_expired_sessions()),
    )
    console.print(f"Deleted [bold]{deleted}[/bold] expired sessions")


@sessions_app.command("purge-inactive")
def sessions_purge_inactive(
    days: Optional[int] = typer.Option(
        None,
        "--days",
        "-d",
        min=1,
        help="Retention in days (default: SESSION_INACTIVE_RETENTION_DAYS)",
    ),
) -> None:
    """Delete inactive sessions idle for longer than the retention period."""
    _configure_logging()
    days_old = days or get_settings().session_inactive_retention_days
    deleted = asyncio.run(
        _with_session_service(
            lambda service: service.purge_inactive_sessions(days_old),
        ),
    )
    console.print(
        f"Deleted [bold]{deleted}[/bold] sessions inactive for over {days_old} days"
    )


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
