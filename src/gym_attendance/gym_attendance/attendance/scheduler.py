from __future__ import annotations

import atexit
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .reconciler import AutoCheckoutReconciler

logger = logging.getLogger(__name__)

JOB_ID = "auto_checkout_sweep"


def start_reconciler_scheduler(reconciler: AutoCheckoutReconciler, *, interval_minutes: int) -> BackgroundScheduler:
    """Run the auto-checkout sweep in the background every interval_minutes."""

    scheduler = BackgroundScheduler(daemon=True, timezone="UTC")
    scheduler.add_job(
        func=reconciler.sweep,
        trigger=IntervalTrigger(minutes=int(interval_minutes)),
        id=JOB_ID,
        name="Auto-checkout sweep",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info("auto-checkout scheduler started (every %s min)", interval_minutes)

    # Ensure scheduler shuts down when app stops
    atexit.register(lambda: scheduler.shutdown(wait=False) if scheduler.running else None)
    return scheduler
