"""Background scheduler for the daily expiry sweep and push notification cleanup."""
import logging
from typing import Optional

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from facility_admin.core.config import settings
from facility_admin.services.account_functions import expire_temporary_users
from facility_admin.services.push_notifications import cleanup_push_notifications

logger = logging.getLogger(__name__)


class ExpirySweepScheduler:
    """Runs the expiry sweep once a day and purges old push notification records every 24 hours."""

    def __init__(self, hour: Optional[int] = None, minute: Optional[int] = None, timezone: Optional[str] = None):
        """Initialize the scheduler."""
        self.hour = settings.EXPIRY_SWEEP_HOUR if hour is None else hour
        self.minute = settings.EXPIRY_SWEEP_MINUTE if minute is None else minute
        self.timezone = pytz.timezone(timezone or settings.EXPIRY_SWEEP_TIMEZONE)
        self.scheduler = AsyncIOScheduler(timezone=self.timezone)
        self.running = False

    async def start(self):
        """Start the scheduler."""
        if self.running:
            logger.warning("Scheduler is already running")
            return

        logger.info("Starting expiry sweep scheduler")

        self.scheduler.add_job(
            self.run_sweep,
            CronTrigger(hour=self.hour, minute=self.minute, timezone=self.timezone),
            id="expiry_sweep_job",
            name="Expire temporary users",
            replace_existing=True,
        )
        self.scheduler.add_job(
            self.run_push_cleanup,
            IntervalTrigger(hours=24, timezone=self.timezone),
            id="push_cleanup_job",
            name="Clean up push notification records",
            replace_existing=True,
        )

        self.scheduler.start()
        self.running = True
        logger.info(
            f"Expiry sweep scheduled daily at {self.hour:02d}:{self.minute:02d} {self.timezone.zone}"
        )

    async def stop(self):
        """Stop the scheduler."""
        if not self.running:
            return

        logger.info("Stopping expiry sweep scheduler")
        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("Expiry sweep scheduler stopped")

    async def run_sweep(self):
        """
        Run one sweep.

        Failures are logged; the next run happens on the following day.
        """
        logger.info("Running temporary user expiry sweep")
        try:
            result = await expire_temporary_users()
            logger.info(
                f"Expiry sweep finished: {result['expired']} expired, {result['disabled']} disabled"
            )
            return result
        except Exception as e:
            logger.error(f"Error in expiry sweep: {e}", exc_info=True)
            return None

    async def run_push_cleanup(self):
        """Run one push notification cleanup; failures are logged."""
        logger.info("Cleaning up old push notification records")
        try:
            return await cleanup_push_notifications()
        except Exception as e:
            logger.error(f"Error cleaning up push notifications: {e}", exc_info=True)
            return None


# Singleton instance
expiry_sweep_scheduler = ExpirySweepScheduler()
