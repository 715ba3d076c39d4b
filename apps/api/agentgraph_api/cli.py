"""Command line entry points for the management API."""

import asyncio

import click
import uvicorn
from agentgraph_common.config.database import get_database

from agentgraph_api import models  # noqa: F401


@click.group()
def cli():
    """Agent graph management API: server and database commands."""


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind the server to")
@click.option("--port", default=8000, help="Port to bind the server to")
@click.option("--reload/--no-reload", default=False, help="Enable/disable auto-reload")
@click.option("--log-level", default="info", help="Logging level")
def serve(host: str, port: int, reload: bool, log_level: str):
    """Start the API server."""
    click.echo(f"Starting agent graph API on {host}:{port}")
    uvicorn.run(
        "agentgraph_api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


@cli.command("init-db")
def init_db():
    """Create every table that does not exist yet."""

    async def _create() -> None:
        database = get_database()
        try:
            await database.create_all()
        finally:
            await database.dispose()

    asyncio.run(_create())
    click.echo("Database schema created")


if __name__ == "__main__":
    cli()
