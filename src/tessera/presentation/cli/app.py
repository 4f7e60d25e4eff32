"""Tessera CLI application using Typer.

This module provides command-line utilities for the Tessera service:
secret and key generation for deployment configuration, and the
periodic cleanup of expired tokens and old audit entries.
"""

import asyncio
import secrets
from pathlib import Path

import typer
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from rich.console import Console
from rich.table import Table

from tessera.application.dtos import CleanupReport
from tessera.application.services import TokenMaintenanceService
from tessera.infrastructure.persistence.sqlalchemy import (
    AuditLogRepositorySQLAlchemy,
    create_engine,
    create_session_maker,
)
from tessera_auth.persistence.sqlalchemy import (
    RefreshTokenRepositorySQLAlchemy,
    TokenBlacklistRepositorySQLAlchemy,
)
from tessera_config.settings import get_settings

RSA_KEY_SIZE = 2048
PRIVATE_KEY_FILE = "jwt_private.pem"
PUBLIC_KEY_FILE = "jwt_public.pem"

app = typer.Typer(
    name="tessera",
    help="Tessera - authentication and token lifecycle service CLI",
    no_args_is_help=True,
)
console = Console()


secrets_app = typer.Typer(
    name="secrets",
    help="Secret and key generation utilities",
    no_args_is_help=True,
)
app.add_typer(secrets_app)

maintenance_app = typer.Typer(
    name="maintenance",
    help="Database housekeeping",
    no_args_is_help=True,
)
app.add_typer(maintenance_app)


def generate_rsa_keypair(key_size: int = RSA_KEY_SIZE) -> tuple[bytes, bytes]:
    """Generate an RSA keypair as (private PEM, public PEM)."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


@secrets_app.command("generate")
def generate_secrets() -> None:
    """Generate secure secrets for Tessera configuration.

    Copy the output to your .env file.
    """
    console.print("\n[bold green]Tessera Secret Generation[/bold green]")
    console.print("=" * 60)
    console.print(
        "\nGenerated secrets for your [bold].env[/bold] configuration file:\n"
    )

    # 64 bytes for HS256
    jwt_secret = secrets.token_urlsafe(64)
    console.print(f"[cyan]JWT_SECRET_KEY[/cyan]={jwt_secret}")

    db_password = secrets.token_urlsafe(32)
    console.print(f"[cyan]POSTGRES_PASSWORD[/cyan]={db_password}")

    gateway_secret = secrets.token_urlsafe(32)
    console.print(f"[cyan]GATEWAY_SHARED_SECRET[/cyan]={gateway_secret}")

    console.print("\n" + "=" * 60)
    console.print(
        "[yellow]Keep these secrets secure and never commit them "
        "to version control![/yellow]"
    )
    console.print(
        "[dim]Copy the above values to your config/.env (Docker) or "
        "config/.env.dev (local) file.[/dim]\n"
    )


@secrets_app.command("generate-rsa")
def generate_rsa(
    out_dir: Path = typer.Option(
        Path("config/keys"),
        "--out-dir",
        help="Directory for the PEM files",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite existing key files",
    ),
) -> None:
    """Generate an RSA keypair for RS256 token signing."""
    private_path = out_dir / PRIVATE_KEY_FILE
    public_path = out_dir / PUBLIC_KEY_FILE

    if not force and (private_path.exists() or public_path.exists()):
        console.print(
            f"[red]Key files already exist in {out_dir}. "
            "Use --force to overwrite.[/red]"
        )
        raise typer.Exit(code=1)

    private_pem, public_pem = generate_rsa_keypair()

    out_dir.mkdir(parents=True, exist_ok=True)
    private_path.write_bytes(private_pem)
    private_path.chmod(0o600)
    public_path.write_bytes(public_pem)

    console.print(f"[green]Wrote {private_path} and {public_path}[/green]")
    console.print("\nAdd to your [bold].env[/bold]:\n")
    console.print("[cyan]JWT_ALGORITHM[/cyan]=RS256")
    console.print(f"[cyan]JWT_PRIVATE_KEY_PATH[/cyan]={private_path.resolve()}")
    console.print(f"[cyan]JWT_PUBLIC_KEY_PATH[/cyan]={public_path.resolve()}\n")


async def _run_cleanup(database_url: str, retention_days: int) -> CleanupReport:
    engine = create_engine(database_url)
    try:
        async with create_session_maker(engine)() as session:
            service = TokenMaintenanceService(
                refresh_token_repository=RefreshTokenRepositorySQLAlchemy(session),
                token_blacklist_repository=TokenBlacklistRepositorySQLAlchemy(session),
                audit_log_repository=AuditLogRepositorySQLAlchemy(session),
            )
            report = await service.run(retention_days)
            await session.commit()
            return report
    finally:
        await engine.dispose()


def _report_table(report: CleanupReport) -> Table:
    table = Table(title="Cleanup report")
    table.add_column("Table", style="cyan")
    table.add_column("Rows removed", justify="right")
    table.add_row("refresh_tokens (expired)", str(report.expired_refresh_tokens))
    table.add_row("token_blacklist (expired)", str(report.expired_blacklist_entries))
    table.add_row("audit_logs (retention)", str(report.purged_audit_logs))
    table.add_row("[bold]total[/bold]", f"[bold]{report.total}[/bold]")
    return table


@maintenance_app.command("cleanup")
def cleanup(
    retention_days: int | None = typer.Option(
        None,
        "--retention-days",
        min=1,
        help="Purge audit entries older than this (default: AUDIT_RETENTION_DAYS)",
    ),
) -> None:
    """Delete expired tokens and audit entries past retention."""
    settings = get_settings()
    days = retention_days or settings.audit_retention_days

    with console.status("Cleaning up..."):
        report = asyncio.run(_run_cleanup(settings.database_url, days))

    console.print(_report_table(report))


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
