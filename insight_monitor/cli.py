"""
Command-line interface for insight-monitor.

Usage:
    insight-monitor serve                # Run the API (and fetch scheduler)
    insight-monitor init-db              # Create all tables
    insight-monitor fetch                # Run one social fetch cycle
    insight-monitor analyze-batch 12     # Generate and cache a batch analysis
    insight-monitor classify report.pdf  # Classify a local file, no database
    insight-monitor health               # Check dependencies
"""

import asyncio
import json
from pathlib import Path

import click

from insight_monitor.config.settings import get_settings
from insight_monitor.observability.logging import setup_logging
from insight_monitor.observability.metrics import get_metrics


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """Insight Monitor - document and social content analysis."""
    setup_logging("DEBUG" if debug else None)


@main.command()
@click.option("--host", default=None, help="API host (default from settings)")
@click.option("--port", default=None, type=int, help="API port (default from settings)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--metrics/--no-metrics", default=True, help="Enable metrics server")
def serve(host: str | None, port: int | None, reload: bool, metrics: bool) -> None:
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port

    if metrics:
        get_metrics().start_server()
        click.echo(f"Metrics available on http://localhost:{settings.metrics_port}/metrics")

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "insight_monitor.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


@main.command("init-db")
def init_db() -> None:
    """Initialize the database schema."""
    from insight_monitor.cache.repository import ResultCache
    from insight_monitor.social.repository import SocialRepository
    from insight_monitor.storage.database import Database
    from insight_monitor.storage.repository import DocumentRepository

    async def run():
        async with Database() as db:
            # Cache tables reference the document tables
            await DocumentRepository(db).create_tables()
            await ResultCache(db).create_tables()
            await SocialRepository(db).create_tables()

        click.echo("Database initialized successfully")

    asyncio.run(run())


@main.command()
def fetch() -> None:
    """Run one social fetch cycle and print its report."""
    from insight_monitor.social.acquisition import AcquisitionService
    from insight_monitor.social.client import SocialClient
    from insight_monitor.social.config import SocialConfig
    from insight_monitor.social.repository import SocialRepository
    from insight_monitor.social.schemas import CycleState, CycleTrigger
    from insight_monitor.social.synthetic import create_synthetic_source
    from insight_monitor.storage.database import Database

    async def run():
        config = SocialConfig()
        client = None
        if config.client_configured:
            client = SocialClient(
                bearer_token=config.bearer_token.get_secret_value(),
                base_url=config.api_base_url,
                timeout=config.request_timeout,
            )
        else:
            click.echo(click.style("SOCIAL_BEARER_TOKEN not set; no accounts will be fetched", fg="yellow"))

        try:
            async with Database() as db:
                service = AcquisitionService(
                    SocialRepository(db),
                    client=client,
                    synthetic=create_synthetic_source(config),
                    config=config,
                )
                report = await service.run_cycle(CycleTrigger.MANUAL)
        finally:
            if client is not None:
                await client.close()

        for result in report.accounts:
            if result.succeeded:
                click.echo(click.style(f"  ✓ @{result.handle}: {result.stored}/{result.fetched} new", fg="green"))
            else:
                click.echo(click.style(f"  ✗ @{result.handle}: {result.error}", fg="red"))
        if report.synthetic_posts:
            click.echo(click.style(f"  {report.synthetic_posts} synthetic sample posts stored", fg="yellow"))

        color = "green" if report.state == CycleState.COMPLETED else "yellow"
        click.echo(click.style(f"Cycle {report.state.value}: {report.posts_stored} posts stored", fg=color))

    asyncio.run(run())


@main.command("analyze-batch")
@click.argument("batch_id", type=int)
def analyze_batch(batch_id: int) -> None:
    """Generate and cache the analysis of a document batch."""
    from insight_monitor.analysis.client import AnalysisClient
    from insight_monitor.analysis.service import BatchAnalysisService
    from insight_monitor.cache.repository import ResultCache
    from insight_monitor.storage.database import Database
    from insight_monitor.storage.repository import BatchNotFoundError, DocumentRepository

    async def run():
        client = AnalysisClient()
        try:
            async with Database() as db:
                service = BatchAnalysisService(DocumentRepository(db), ResultCache(db), client)
                insight = await service.analyze_batch(batch_id)
        except BatchNotFoundError as e:
            raise click.ClickException(str(e))
        finally:
            await client.close()

        click.echo(json.dumps(insight.model_dump(mode="json"), indent=2))

    asyncio.run(run())


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--show-text/--no-show-text", default=False, help="Print the rendered text")
def classify(path: Path, show_text: bool) -> None:
    """Classify a local file the way uploads are classified."""
    from insight_monitor.extraction.classifier import classify as classify_bytes

    outcome = classify_bytes(path.read_bytes(), path.suffix, filename=path.name)

    color = "green" if outcome.is_analyzable else "yellow"
    click.echo(click.style(f"{path.name}: {outcome.kind}", fg=color))
    details = outcome.model_dump(mode="json", exclude={"kind", "text"})
    for key, value in details.items():
        click.echo(f"  {key}: {value}")

    if show_text:
        click.echo("-" * 40)
        click.echo(outcome.render())


@main.command()
def health() -> None:
    """Check health of all dependencies."""
    import structlog

    from insight_monitor.analysis.config import AnalysisConfig
    from insight_monitor.social.config import SocialConfig

    logger = structlog.get_logger()

    async def check():
        results: dict[str, bool] = {}

        try:
            from insight_monitor.storage.database import Database

            async with Database() as db:
                results["postgres"] = await db.health_check()
        except Exception as e:
            results["postgres"] = False
            logger.error("Postgres health check failed", error=str(e))

        results["analysis_configured"] = AnalysisConfig().openai_api_key is not None
        results["social_configured"] = SocialConfig().client_configured

        click.echo("\nHealth Check Results:")
        click.echo("-" * 40)
        for name, status in results.items():
            icon = "✓" if status else "✗"
            color = "green" if status else "red"
            click.echo(click.style(f"  {icon} {name}: {status}", fg=color))
        click.echo("-" * 40)

        if not results["postgres"]:
            raise SystemExit(1)
        click.echo(click.style("All core services healthy!", fg="green"))

    asyncio.run(check())


if __name__ == "__main__":
    main()
