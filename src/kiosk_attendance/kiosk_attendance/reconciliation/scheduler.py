from __future__ import annotations

import atexit
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from ..core.constants import DEFAULT_RECONCILE_HOUR_UTC, DEFAULT_RECONCILE_MINUTE_UTC
from .service import ReconciliationService

logger = logging.getLogger(__name__)

JOB_ID = "daily_missing_logout_check"


def build_scheduler(
    reconciliation: ReconciliationService,
    *,
    hour_utc: int = DEFAULT_RECONCILE_HOUR_UTC,
    minute_utc: int = DEFAULT_RECONCILE_MINUTE_UTC,
) -> BackgroundScheduler:
    """Daily job shortly after the 22:00 JST cutoff (13:30 UTC by default)."""

    def _run_daily() -> None:
        try:
            reconciliation.run(trigger_type="scheduled")
        except Exception:
            # Keep the scheduler thread alive; the next day retries.
            logger.exception("Scheduled missing-logout check failed")

    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        func=_run_daily,
        trigger=CronTrigger(hour=int(hour_utc), minute=int(minute_utc), timezone="UTC"),
        id=JOB_ID,
        name="Close forgotten logouts",
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    return scheduler


def start_scheduler(scheduler: BackgroundScheduler) -> None:
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    if not scheduler.running:
        scheduler.start()
        logger.info("Background scheduler started for the daily missing-logout check")
        atexit.register(lambda: scheduler.shutdown(wait=False))
