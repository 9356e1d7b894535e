"""Background settlement worker.

Uses APScheduler to run the settlement sweep:
- every SETTLEMENT_INTERVAL_MINUTES, and
- once, soon after a booking is confirmed or cancelled (``request_sweep``).

On-demand requests share one job id and fire after a short delay, so a burst
of bookings collapses into a single pending sweep. The on-demand job allows a
second instance: a request made while a sweep is already running still gets
its own run once the delay passes, instead of being skipped until the next
periodic run. Overlapping sweeps are safe because each slot is settled in its
own versioned transaction.
"""
import logging
from datetime import datetime, timedelta

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MAX_INSTANCES, EVENT_JOB_MISSED
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from flask import current_app

from scheduling.settlement import run_settlement_sweep

logger = logging.getLogger(__name__)

EXTENSION_KEY = "settlement_scheduler"
PERIODIC_JOB_ID = "settlement_sweep"
ON_DEMAND_JOB_ID = "settlement_sweep_now"
ON_DEMAND_DELAY_SECONDS = 2


def _on_job_error(event):
    logger.error(
        "Scheduled job FAILED: job_id=%s error=%s",
        event.job_id, event.exception,
    )
    if event.traceback:
        logger.error("Traceback for job %s:\n%s", event.job_id, event.traceback)


def _on_job_missed(event):
    logger.warning(
        "Scheduled job MISSED: job_id=%s scheduled_run_time=%s",
        event.job_id,
        event.scheduled_run_time,
    )


def _on_job_skipped(event):
    logger.warning("Scheduled job SKIPPED (already running): job_id=%s", event.job_id)


def _sweep_job(app):
    with app.app_context():
        result = run_settlement_sweep()
        logger.info(
            "Settlement sweep done: scanned=%d settled=%d charged=%d failed=%d",
            result.scanned, result.settled_slots, result.charged, len(result.failed_slots),
        )


def init_scheduler(app):
    """Start the worker for this app. Called once from create_app()."""
    if EXTENSION_KEY in app.extensions:
        logger.warning("Settlement scheduler already initialized")
        return app.extensions[EXTENSION_KEY]

    scheduler = BackgroundScheduler(
        timezone=app.config.get("ACADEMY_TIMEZONE", "UTC"),
        job_defaults={
            "coalesce": True,
            "max_instances": 1,
            "misfire_grace_time": 60,
        },
    )
    scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
    scheduler.add_listener(_on_job_missed, EVENT_JOB_MISSED)
    scheduler.add_listener(_on_job_skipped, EVENT_JOB_MAX_INSTANCES)

    minutes = app.config.get("SETTLEMENT_INTERVAL_MINUTES", 15)
    scheduler.add_job(
        func=_sweep_job,
        args=[app],
        trigger=IntervalTrigger(minutes=minutes),
        id=PERIODIC_JOB_ID,
        name="Settle Elapsed Slots",
        replace_existing=True,
    )
    logger.info("Scheduled job: %s (every %d minutes)", PERIODIC_JOB_ID, minutes)

    scheduler.start()
    app.extensions[EXTENSION_KEY] = scheduler
    return scheduler


def shutdown_scheduler(app):
    scheduler = app.extensions.pop(EXTENSION_KEY, None)
    if scheduler is not None:
        scheduler.shutdown(wait=False)


def request_sweep() -> bool:
    """Queue a one-off sweep. Returns False when no worker is running."""
    scheduler = current_app.extensions.get(EXTENSION_KEY)
    if scheduler is None:
        logger.debug("Settlement scheduler disabled; sweep request ignored")
        return False

    scheduler.add_job(
        func=_sweep_job,
        args=[current_app._get_current_object()],
        id=ON_DEMAND_JOB_ID,
        name="Settle Elapsed Slots (on demand)",
        trigger="date",
        run_date=datetime.now(scheduler.timezone) + timedelta(seconds=ON_DEMAND_DELAY_SECONDS),
        max_instances=2,
        replace_existing=True,
    )
    return True
