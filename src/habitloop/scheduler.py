"""Background scheduler for the daily reminder job."""

from __future__ import annotations

from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from .logging_config import get_logger

logger = get_logger("scheduler")

REMINDER_JOB_ID = "daily_reminders"


class ReminderScheduler:
    """Runs the reminder dispatch once a day at a fixed hour."""

    def __init__(self, dispatch: Callable[[], int], *, hour: int = 8) -> None:
        """Initialize the scheduler.

        Args:
            dispatch: Zero-argument callable sending today's reminders
            hour: Local hour the job fires at
        """
        self.dispatch = dispatch
        self.hour = hour
        self.scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None

    def start(self) -> None:
        """Start the background scheduler."""
        if self.scheduler is not None:
            logger.warning("Scheduler already running")
            return

        self.scheduler = BackgroundScheduler()
        self.scheduler.add_job(
            func=self._run_dispatch,
            trigger=CronTrigger(hour=self.hour, minute=0),
            id=REMINDER_JOB_ID,
            name="Daily Habit Reminders",
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info("Background scheduler started", extra={"reminder_hour": self.hour})

    def stop(self) -> None:
        """Stop the background scheduler gracefully."""
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=True)
            self.scheduler = None
            logger.info("Background scheduler stopped")

    def _run_dispatch(self) -> None:
        try:
            self.dispatch()
        except Exception as exc:
            logger.error(f"Reminder dispatch failed: {exc}", exc_info=True)
