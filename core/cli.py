"""
Command-line interface for the storefront
"""
import click

from core.config import settings
from core.logging import get_logger
from database.base import Base
from database.session import SessionLocal, engine

logger = get_logger(__name__)


@click.group()
@click.version_option(version=settings.app_version)
def cli():
    """Storefront CLI - catalog, checkout and Stripe webhook service"""
    pass


def _create_tables():
    # Registers every model on Base.metadata
    import account_management.models  # noqa: F401
    import storefront.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


@cli.command()
def init_db():
    """Initialize database with tables"""
    click.echo("Creating database tables...")
    _create_tables()
    click.echo("Database initialized successfully!")


@cli.command()
def seed():
    """Create the admin user, starter products and payment config if missing"""
    from storefront.bootstrap import bootstrap_database

    _create_tables()
    with SessionLocal() as db:
        report = bootstrap_database(db, settings)

    if report.admin.created:
        click.echo(f"✓ Admin user '{report.admin.username}' created")
        if report.admin.generated_password:
            click.echo(f"  Generated password (shown once): {report.admin.generated_password}")
    else:
        click.echo("✓ Admin user already present")
    click.echo(f"✓ Products created: {report.products_created}")
    click.echo(f"✓ Payment config created: {report.payment_config_created}")


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to")
@click.option("--port", default=None, type=int, help="Port to bind to (defaults to PORT)")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def runserver(host: str, port, reload: bool):
    """Run the FastAPI development server"""
    import uvicorn

    port = port or settings.port
    click.echo(f"Starting {settings.app_name} server on {host}:{port}")
    click.echo(f"Environment: {settings.environment}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command()
def env_info():
    """Display environment information"""
    click.echo(f"{settings.app_name} v{settings.app_version}")
    click.echo(f"Environment: {settings.environment}")
    click.echo(f"Database: {settings.database_url}")
    click.echo(f"Base URL: {settings.base_url}")
    click.echo(f"Currency: {settings.currency}")
    click.echo(f"Webhook secret configured: {settings.webhook_secret_value is not None}")
    click.echo(f"Emails enabled: {settings.enable_emails}")


def main():
    """Main entry point"""
    cli()


if __name__ == "__main__":
    main()
