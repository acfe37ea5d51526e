"""CLI command implementations for the Competitor Site Watch system."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

import click

from src.models.config import Config
from src.services.database import Database
from src.utils.logger import configure_logging

if TYPE_CHECKING:
    from src.models.change_event import ChangeEvent
    from src.models.run_summary import RunSummary


def _get_config() -> Config:
    """Load configuration from environment and .env file."""
    return Config()


def _get_db(config: Config) -> Database:
    """Initialize database with schema."""
    db = Database(db_path=config.database_path)
    db.init_db()
    return db


def _format_event(event: ChangeEvent) -> str:
    return f"[{event.significance.value}] {event.kind.value}: {event.description}"


def _print_run_summary(summary: RunSummary, results_path: Path) -> None:
    """Print a formatted summary of a site-check run."""
    click.echo("\n[SUCCESS] Site check complete")
    click.echo(f"  run_date: {summary.run_date}")
    click.echo(f"  pages_checked: {summary.pages_checked}")
    click.echo(f"  pages_failed: {summary.pages_failed}")
    click.echo(f"  real_changes: {summary.real_change_count}")
    click.echo(f"  duration_seconds: {summary.duration_seconds}")
    click.echo(f"  results: {results_path}")

    for change in summary.changes:
        click.echo(f"  {change.competitor_name} / {change.page_name} {_format_event(change.event)}")

    if summary.errors:
        click.echo(f"  Errors ({len(summary.errors)}):")
        for error in summary.errors[:10]:
            click.echo(f"    - {error}")
        if len(summary.errors) > 10:
            click.echo(f"    ... and {len(summary.errors) - 10} more")


@click.command()
@click.option("--competitors-file", default=None, help="Competitor config JSON (overrides config)")
@click.option("--output", "output_path", default=None, help="Where to write the results JSON")
@click.option(
    "--workers",
    default=None,
    type=click.IntRange(min=1, max=16),
    help="Pages checked concurrently",
)
@click.option(
    "--output-format",
    default="summary",
    type=click.Choice(["summary", "json"]),
    help="Output format",
)
def check_sites(
    competitors_file: str | None,
    output_path: str | None,
    workers: int | None,
    output_format: str,
) -> None:
    """Check every competitor page for changes and report them."""
    config = _get_config()
    configure_logging(config.log_level)

    from src.domains.monitoring.repositories.snapshot_repository import SnapshotRepository
    from src.domains.monitoring.services.site_monitor import SiteMonitor
    from src.services.competitor_loader import CompetitorConfigError, load_competitors
    from src.services.event_sink import build_event_sink
    from src.services.page_fetcher import PageFetcher
    from src.utils.rate_limit import RateLimiter
    from src.utils.retry import RetryPolicy

    try:
        competitors = load_competitors(competitors_file or config.competitors_file)
    except CompetitorConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    db = _get_db(config)
    fetcher = PageFetcher(
        policy=RetryPolicy(
            max_attempts=config.max_fetch_attempts,
            backoff_multiplier=config.backoff_multiplier,
        ),
        user_agent=config.user_agent,
        timeout=config.fetch_timeout_seconds,
    )
    monitor = SiteMonitor(
        fetcher=fetcher,
        snapshot_repo=SnapshotRepository(db),
        sink=build_event_sink(config.webhook_url, timeout=config.fetch_timeout_seconds),
        page_limiter=RateLimiter(config.page_delay_seconds),
        delivery_limiter=RateLimiter(config.delivery_delay_seconds),
        max_workers=workers or config.max_workers,
    )

    click.echo(f"[INFO] Checking {sum(len(c.pages) for c in competitors)} pages...", err=True)
    try:
        summary = monitor.run(competitors)
    finally:
        db.close()

    results_path = summary.write_json(output_path or config.results_path)

    if output_format == "json":
        click.echo(summary.model_dump_json(indent=2))
    else:
        _print_run_summary(summary, results_path)


@click.command()
@click.option("--competitors-file", default=None, help="Competitor config JSON (overrides config)")
def list_competitors(competitors_file: str | None) -> None:
    """List configured competitors and their watched pages."""
    config = _get_config()
    configure_logging(config.log_level)

    from src.services.competitor_loader import CompetitorConfigError, load_competitors

    try:
        competitors = load_competitors(competitors_file or config.competitors_file)
    except CompetitorConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if not competitors:
        click.echo("[INFO] No competitors configured.")
        return
    for competitor in competitors:
        click.echo(f"{competitor.name} ({competitor.id})")
        for page in competitor.pages:
            click.echo(f"  - {page.name}: {page.url}")


@click.command()
@click.argument("competitor_id")
@click.argument("page_name")
def show_snapshot(competitor_id: str, page_name: str) -> None:
    """Print the stored snapshot for one competitor page as JSON."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    from src.domains.monitoring.repositories.snapshot_repository import SnapshotRepository

    try:
        snapshot = SnapshotRepository(db).get_snapshot(competitor_id, page_name)
    finally:
        db.close()

    if snapshot is None:
        raise click.ClickException(f"No snapshot stored for {competitor_id} / {page_name}")
    click.echo(snapshot.model_dump_json(indent=2))


@click.command()
@click.argument("competitor_id")
@click.argument("page_name")
def reset_snapshot(competitor_id: str, page_name: str) -> None:
    """Forget the stored snapshot so the next run records a new baseline."""
    config = _get_config()
    configure_logging(config.log_level)
    db = _get_db(config)

    from src.domains.monitoring.repositories.snapshot_repository import SnapshotRepository

    try:
        deleted = SnapshotRepository(db).delete_snapshot(competitor_id, page_name)
    finally:
        db.close()

    if deleted:
        click.echo(f"[SUCCESS] Snapshot removed for {competitor_id} / {page_name}")
    else:
        click.echo(f"[INFO] No snapshot stored for {competitor_id} / {page_name}")


@click.command()
@click.argument("old_html", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("new_html", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output-format",
    default="summary",
    type=click.Choice(["summary", "json"]),
    help="Output format",
)
def diff_pages(old_html: Path, new_html: Path, output_format: str) -> None:
    """Run change detection on two local HTML files."""
    from src.domains.monitoring.core.change_detection import detect_changes
    from src.domains.monitoring.core.page_features import (
        ExtractionError,
        extract_page_snapshot,
    )

    try:
        previous = extract_page_snapshot(old_html.read_bytes())
        current = extract_page_snapshot(new_html.read_bytes())
    except ExtractionError as exc:
        raise click.ClickException(str(exc)) from exc

    events = detect_changes(previous, current)

    if output_format == "json":
        click.echo(json.dumps([event.model_dump(mode="json") for event in events], indent=2))
    elif not events:
        click.echo("[INFO] No significant changes.")
    else:
        click.echo(f"[INFO] Found {len(events)} change(s):")
        for event in events:
            click.echo(f"  {_format_event(event)}")
