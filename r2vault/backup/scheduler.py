"""
Backup Scheduler - daily backup trigger with APScheduler.

Provides:
- One cron job, daily at BACKUP_HOUR:BACKUP_MINUTE (09:00 UTC by default)
- Backup runs in a worker thread so the host event loop keeps running
- Errors are logged, never propagated to the host process
- Re-entry guard: a trigger that fires while a run is in flight is skipped

There is no timeout and no cancellation: a hung upload keeps the guard set
until it returns.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from r2vault.backup.archive_uploader import ArchiveUploader, BackupResult
from r2vault.config import VaultConfig
from r2vault.errors import VaultError
from r2vault.logging_utils import log_event

logger = logging.getLogger(__name__)

DAILY_BACKUP_JOB_ID = "daily_backup"


@dataclass
class ScheduledJob:
    """Represents the scheduled backup job."""
    id: str
    schedule: str
    next_run: Optional[datetime] = None
    last_run: Optional[datetime] = None
    last_result: Optional[BackupResult] = None
    last_error: Optional[str] = None


class BackupScheduler:
    """
    Schedules the daily backup inside a long-lived asyncio process.

    Usage:
        scheduler = BackupScheduler(config)
        scheduler.schedule_daily_backup()
        scheduler.start()  # requires a running event loop
    """

    def __init__(
        self,
        config: VaultConfig,
        uploader: Optional[ArchiveUploader] = None,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.config = config
        self._uploader = uploader or ArchiveUploader(config)
        self._scheduler = scheduler
        self._job: Optional[ScheduledJob] = None
        self._in_progress = False
        self._running = False
        self._on_failure_callback: Optional[Callable] = None
        self._on_success_callback: Optional[Callable] = None

    def _get_scheduler(self) -> AsyncIOScheduler:
        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler(timezone=self.config.backup_timezone)
        return self._scheduler

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    @property
    def running(self) -> bool:
        return self._running

    def schedule_daily_backup(self) -> ScheduledJob:
        """Register the single daily backup job (replacing any previous one)."""
        hour, minute = self.config.backup_hour, self.config.backup_minute
        tz = self.config.backup_timezone

        trigger = CronTrigger(hour=hour, minute=minute, timezone=tz)
        self._get_scheduler().add_job(
            self._run_scheduled_backup,
            trigger,
            id=DAILY_BACKUP_JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )

        self._job = ScheduledJob(
            id=DAILY_BACKUP_JOB_ID,
            schedule=f"Daily at {hour:02d}:{minute:02d} {tz}",
            next_run=trigger.get_next_fire_time(None, datetime.now(timezone.utc)),
        )
        logger.info(f"Scheduled backup: {self._job.schedule}")
        return self._job

    async def _run_scheduled_backup(self) -> Optional[BackupResult]:
        """Execute one backup; never raises."""
        if self._in_progress:
            logger.warning("Previous backup still running, skipping this trigger")
            return None

        self._in_progress = True
        logger.info("Running scheduled backup")
        try:
            result = await asyncio.to_thread(self._uploader.run_backup)
        except Exception as e:
            fields = e.to_dict() if isinstance(e, VaultError) else {"message": str(e)}
            log_event(logger, logging.ERROR, f"Scheduled backup failed: {e}", error=fields)
            self._record(None, str(e))
            if self._on_failure_callback:
                await self._notify(self._on_failure_callback, e)
            return None
        finally:
            self._in_progress = False

        self._record(result, result.error)
        if result.success:
            log_event(
                logger, logging.INFO, f"Scheduled backup completed: {result.key}",
                **result.to_dict(),
            )
            callback = self._on_success_callback
        else:
            log_event(
                logger, logging.WARNING, f"Scheduled backup skipped: {result.status}",
                **result.to_dict(),
            )
            callback = self._on_failure_callback
        if callback:
            await self._notify(callback, result)
        return result

    def _record(self, result: Optional[BackupResult], error: Optional[str]) -> None:
        if self._job is None:
            return
        self._job.last_run = datetime.now(timezone.utc)
        self._job.last_result = result
        self._job.last_error = error
        job = self._scheduler.get_job(DAILY_BACKUP_JOB_ID) if self._scheduler else None
        if job is not None:
            self._job.next_run = getattr(job, "next_run_time", None)

    async def _notify(self, callback: Callable, arg) -> None:
        """Invoke a sync or async callback; its failures are only logged."""
        try:
            result = callback(arg)
            if asyncio.iscoroutine(result):
                await result
        except Exception as e:
            logger.error(f"Backup callback failed: {e}")

    async def run_backup_now(self) -> Optional[BackupResult]:
        """Run the job immediately, with the same guard and error handling."""
        return await self._run_scheduled_backup()

    def get_scheduled_jobs(self) -> list:
        return [self._job] if self._job else []

    def get_next_backup_time(self) -> Optional[datetime]:
        return self._job.next_run if self._job else None

    def on_failure(self, callback: Callable):
        """
        Set callback for runs that did not upload.

        Receives the exception when the backup raised, or the BackupResult
        when the run was skipped (missing credentials, no data).
        """
        self._on_failure_callback = callback

    def on_success(self, callback: Callable):
        """Set callback for uploaded backups only (receives the BackupResult)."""
        self._on_success_callback = callback

    def start(self):
        """Start the scheduler. Must be called with a running event loop."""
        self._get_scheduler().start()
        self._running = True
        logger.info("Backup scheduler started")

    def stop(self):
        """Stop the scheduler without waiting for a running job."""
        if self._scheduler is not None and self._running:
            self._scheduler.shutdown(wait=False)
        self._running = False
        logger.info("Backup scheduler stopped")


def init_scheduler(config: VaultConfig) -> BackupScheduler:
    """Create, schedule and start the backup scheduler for a host process."""
    logger.info("Initializing backup scheduler")
    scheduler = BackupScheduler(config)
    job = scheduler.schedule_daily_backup()
    scheduler.start()
    logger.info(f"Scheduler active (backup: {job.schedule})")
    return scheduler
