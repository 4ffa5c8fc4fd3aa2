"""APScheduler-based interval scheduling for full exports."""

from __future__ import annotations

import logging

from apscheduler.events import EVENT_JOB_ERROR
from apscheduler.schedulers.blocking import BlockingScheduler

from scripts.auth_export.config import ExportConfig
from scripts.auth_export.context import ExportContext
from scripts.auth_export.logging_config import result_extra

logger = logging.getLogger("auth_export.scheduler")

JOB_ID = "firebase_auth_export"


def _export_job(context: ExportContext) -> None:
    """Ensure the table exists and copy every user. Failures are not retried."""
    from scripts.auth_export.cli import _run_command

    result = _run_command("export", context, ensure_table=True)
    logger.info(
        "Scheduled export finished: %s", result.status.value,
        extra=result_extra(result),
    )


def _on_job_error(event) -> None:
    """Log job execution errors."""
    logger.error(
        "Job %s raised an exception: %s",
        event.job_id,
        event.exception,
    )


def build_scheduler(config: ExportConfig, context: ExportContext) -> BlockingScheduler:
    scheduler = BlockingScheduler()
    scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
    scheduler.add_job(
        _export_job,
        "interval",
        minutes=config.scheduler.interval_min,
        args=[context],
        id=JOB_ID,
        max_instances=1,
        misfire_grace_time=config.scheduler.misfire_grace_time,
    )
    return scheduler


def start_scheduler(config: ExportConfig, context: ExportContext) -> None:
    """Start the blocking scheduler with the export job."""
    scheduler = build_scheduler(config, context)
    logger.info(
        "Starting scheduler with jobs: %s (every %d min)",
        [j.id for j in scheduler.get_jobs()],
        config.scheduler.interval_min,
    )
    scheduler.start()
