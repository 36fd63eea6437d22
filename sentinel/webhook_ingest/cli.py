"""CLI for GitHub webhook ingestion."""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from ..common import MetricsUnavailable, sign_payload
from ..models.queue import SecurityAnalysisQueue, create_redis_client
from .config import WebhookIngestConfig
from .metrics import QueueMetricsReporter

console = Console()


@click.group()
def cli():
    """Sentinel webhook ingestion CLI."""
    pass


@cli.command()
@click.option("--host", default=None, help="Host to bind to (overrides environment variable)")
@click.option("--port", default=None, type=int, help="Port to bind to (overrides environment variable)")
@click.option("--reload", is_flag=True, help="Enable auto-reload")
def serve(host, port, reload):
    """Start the GitHub webhook ingestion server."""
    config = WebhookIngestConfig.from_env()
    host = host or config.host
    port = port or config.port
    try:
        console.print("🚀 Starting webhook ingestion server...")
        console.print(f"📡 Host: {host}")
        console.print(f"🔌 Port: {port}")
        console.print(f"🔄 Reload: {reload}")

        import uvicorn
        uvicorn.run(
            "sentinel.webhook_ingest.server:app",
            host=host,
            port=port,
            reload=reload,
            log_level=config.log_level
        )

    except KeyboardInterrupt:
        console.print("⏹️  Server stopped by user")
    except Exception as e:
        console.print(f"❌ Server failed: {e}", style="red")
        sys.exit(1)


@cli.command()
def config():
    """Show current configuration."""
    try:
        config = WebhookIngestConfig.from_env()

        console.print("📋 Webhook Ingest Configuration:")
        console.print(f"  Webhook Secret: {'*' * len(config.webhook_secret) if config.webhook_secret else 'Not set'}")
        console.print(f"  Webhook Endpoint: {config.webhook_endpoint}")
        console.print(f"  Host: {config.host}")
        console.print(f"  Port: {config.port}")
        console.print(f"  Log Directory: {config.log_dir}")
        console.print(f"  Redis: {config.redis_host}:{config.redis_port}")
        console.print(f"  Redis Password: {'set' if config.redis_password else 'Not set'}")
        console.print(f"  Queue: {config.queue_name}")
        console.print(f"  Default Priority: {config.default_priority}")

    except Exception as e:
        console.print(f"❌ Failed to load configuration: {e}", style="red")
        sys.exit(1)


@cli.command()
def metrics():
    """Show job counts for the security-analysis queue."""
    config = WebhookIngestConfig.from_env()
    client = create_redis_client(config.redis_host, config.redis_port, config.redis_password)
    queue = SecurityAnalysisQueue(client, name=config.queue_name)
    try:
        snapshot = QueueMetricsReporter(queue).report()
    except MetricsUnavailable as e:
        console.print(f"❌ {e}", style="red")
        sys.exit(1)
    finally:
        queue.close()

    table = Table(title=f"Queue: {config.queue_name}")
    table.add_column("State", style="cyan")
    table.add_column("Jobs", justify="right")
    for state, count in snapshot.model_dump().items():
        table.add_row(state, str(count))
    console.print(table)


@cli.command()
@click.argument("payload_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--secret", envvar="GITHUB_WEBHOOK_SECRET", help="Shared webhook secret")
def sign(payload_file, secret):
    """Print the X-Hub-Signature-256 header for a payload file."""
    if not secret:
        console.print("❌ No secret given and GITHUB_WEBHOOK_SECRET is not set", style="red")
        sys.exit(1)
    click.echo(sign_payload(payload_file.read_bytes(), secret))


if __name__ == "__main__":
    cli()
