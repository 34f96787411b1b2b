"""Main CLI entry point for yarn2mcp-publisher.

This module provides a command-line interface using Typer. `run` hosts the
long-lived scheduler:
1.  Loading configuration (yarn2mcp.config).
2.  Wiring the MCP and Yarn sources (yarn2mcp.sources).
3.  Publishing any missing stable, snapshot and mixed artifacts.
4.  Republishing snapshot and mixed artifacts once per day.

`publish` runs a single publish through the same idempotent path.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

import typer
from dotenv import find_dotenv, load_dotenv

# Load .env file if present (before any config access)
env_file = find_dotenv(usecwd=True)
if env_file:
    load_dotenv(env_file)
    logging.debug("Loaded environment from %s", env_file)

from .config import Settings, get_settings
from .pipeline import MappingPipeline
from .publisher import MavenPublisher
from .scheduler import PublishScheduler
from .sources import LocalMappingSource

app = typer.Typer(help="Yarn-over-MCP mapping publisher CLI")


def build_pipeline(settings: Settings) -> MappingPipeline:
    return MappingPipeline(
        mcp=LocalMappingSource.mcp(settings.CACHE_DIR),
        yarn=LocalMappingSource.yarn(settings.CACHE_DIR),
        publisher=MavenPublisher(settings.OUTPUT_DIR),
        corrections=settings.corrections(),
    )


@app.callback()
def main() -> None:  # pragma: no cover - simple callback
    """yarn2mcp-publisher CLI.

    Use a subcommand like 'run' to start the scheduler.
    """
    pass


@app.command(help="Publish missing artifacts, then republish snapshots daily. Runs until killed.")
def run() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    scheduler = PublishScheduler(
        build_pipeline(settings),
        mixed_version=settings.MIXED_VERSION,
        run_hour=settings.DAILY_RUN_HOUR_UTC,
    )
    typer.echo(f"Publishing mappings to {settings.OUTPUT_DIR}")
    asyncio.run(scheduler.run())


@app.command(help="Publish one artifact for VERSION unless it already exists.")
def publish(
    version: str = typer.Argument(..., help="Minecraft version to publish"),
    stable: bool = typer.Option(
        False, "--stable/--snapshot", help="Publish to the stable channel instead of today's snapshot"
    ),
    mixed: bool = typer.Option(
        False, "--mixed", help="Publish the mixed artifact (always a snapshot)"
    ),
    mixed_version: Optional[str] = typer.Option(
        None, help="Legacy MCP version for --mixed (overrides MIXED_VERSION)"
    ),
) -> None:
    if mixed and stable:
        raise typer.BadParameter("--mixed always publishes a snapshot; drop --stable")
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)
    pipeline = build_pipeline(settings)
    if mixed:
        written = asyncio.run(
            pipeline.publish_mixed_mappings(mixed_version or settings.MIXED_VERSION, version)
        )
    else:
        written = asyncio.run(pipeline.publish_mappings(version, stable))
    typer.echo("Published." if written else "Already published; nothing to do.")


if __name__ == "__main__":  # pragma: no cover
    app()
