"""CLI interface for schedctl."""

import json
import sys
import threading
from typing import Any, Dict, List, Optional

import click
from pydantic import TypeAdapter, ValidationError

from .backoff import backoff_window
from .commands import CommandDispatcher
from .log import configure_logging
from .models import Job
from .settings import SchedulerSettings
from .storage import MemoryStorage
from .worker import CycleReport, Worker, install_signal_handlers

_jobs_adapter = TypeAdapter(List[Job[Dict[str, Any]]])


def get_settings(**overrides: Any) -> SchedulerSettings:
    """Load settings from the environment, applying non-empty overrides."""
    return SchedulerSettings(**{k: v for k, v in overrides.items() if v is not None})


def load_jobs(path: str) -> List[Job[Dict[str, Any]]]:
    with open(path, "r", encoding="utf-8") as f:
        return _jobs_adapter.validate_python(json.load(f))


def _fail(message: str) -> None:
    click.echo(f"✗ {message}", err=True)
    sys.exit(1)


@click.group()
def cli():
    """SchedCTL - Retry-aware job scheduler"""
    pass


@cli.command()
@click.argument("jobs_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--once", is_flag=True, help="Run a single cycle and exit")
@click.option("--interval", type=float, default=None, help="Seconds between cycles")
@click.option("--max-retries", type=int, default=None, help="Attempts allowed per job")
def run(jobs_file: str, once: bool, interval: Optional[float], max_retries: Optional[int]):
    """Run the scheduler over jobs loaded from a JSON file.

    Each job runs the shell command in its payload.

    Example:
        schedctl run jobs.json --once
        schedctl run jobs.json --interval 5 --max-retries 3
    """
    try:
        settings = get_settings(interval_seconds=interval, max_retries=max_retries)
        jobs = load_jobs(jobs_file)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        _fail(f"Invalid JSON: {e}")
    except ValidationError as e:
        _fail(f"Invalid input: {e}")

    logger = configure_logging(settings.log_level, settings.log_json).getChild("worker")
    try:
        storage = MemoryStorage(jobs, completed_statuses=[settings.success_status])
        worker = Worker.from_settings(
            settings,
            repository=storage,
            dispatcher=CommandDispatcher(timeout=settings.command_timeout),
            logger=logger,
        )
    except (ValueError, OverflowError) as e:
        _fail(f"Error: {e}")

    if once:
        _echo_report(worker.run_once())
    else:
        stop_event = threading.Event()
        install_signal_handlers(stop_event)
        click.echo(f"Scheduler running every {settings.interval_seconds:g}s (Ctrl+C to stop)...")
        worker.run(stop_event)

    _echo_jobs(storage)


def _echo_report(report: CycleReport) -> None:
    if report.fetch_failed:
        click.echo("✗ Could not fetch pending jobs", err=True)
        return
    click.echo(
        f"Cycle: {report.fetched} pending, {report.dispatched} dispatched, "
        f"{report.dispatch_failures} failed, {report.skipped} skipped"
    )


def _echo_jobs(storage: MemoryStorage) -> None:
    records = storage.get_all_records()
    if not records:
        click.echo("No jobs found")
        return

    click.echo(f"\n{'ID':<20} {'Status':<12} {'Retries':<10} {'Last Attempt':<20}")
    click.echo("-" * 62)
    for record in records:
        job = record.job
        last = job.last_attempted_at.strftime("%Y-%m-%d %H:%M:%S") if job.last_attempted_at else "-"
        click.echo(f"{job.id:<20} {record.status or 'pending':<12} {job.retry_count:<10} {last:<20}")
    click.echo()


@cli.command()
@click.option("--interval", type=float, default=None, help="Seconds between cycles")
@click.option("--max-retries", type=int, default=None, help="Attempts allowed per job")
def backoff(interval: Optional[float], max_retries: Optional[int]):
    """Show the wait required before each retry.

    Example:
        schedctl backoff --interval 30 --max-retries 5
    """
    try:
        settings = get_settings(interval_seconds=interval, max_retries=max_retries)
    except ValidationError as e:
        _fail(f"Invalid value: {e}")

    try:
        windows = [backoff_window(settings.interval, n) for n in range(1, settings.max_retries)]
    except OverflowError:
        _fail(f"Interval too large: {settings.interval_seconds:g} seconds")

    click.echo(f"\n{'Retry':<10} {'Wait':<20}")
    click.echo("-" * 30)
    for retry_count, window in enumerate(windows, start=1):
        click.echo(f"{retry_count:<10} {str(window):<20}")
    click.echo()


@cli.group()
def config():
    """Manage configuration"""
    pass


@config.command()
def show():
    """Show current configuration.

    Values come from SCHEDCTL_* environment variables.

    Example:
        schedctl config show
    """
    try:
        cfg = get_settings()
    except ValidationError as e:
        _fail(f"Invalid configuration: {e}")

    click.echo("\nCurrent Configuration:")
    click.echo(f"  interval:        {cfg.interval_seconds:g} seconds")
    click.echo(f"  max-retries:     {cfg.max_retries}")
    click.echo(f"  success-status:  {cfg.success_status}")
    click.echo(f"  failure-status:  {cfg.failure_status}")
    click.echo(f"  command-timeout: {cfg.command_timeout:g} seconds")
    click.echo(f"  log-level:       {cfg.log_level}")
    click.echo()


if __name__ == "__main__":
    cli()
