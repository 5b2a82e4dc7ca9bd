"""
Background scheduler for periodic tasks.

- Purge expired sessions: every SESSION_PURGE_INTERVAL_MINUTES
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from recurate.core.config import settings
from recurate.services.session_store import session_store
import logging

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler()


def purge_expired_sessions_job() -> int:
    """
    Drop sessions whose idle timeout has passed.

    Requests already expire sessions lazily; this keeps abandoned ones from
    piling up in memory.
    """
    removed = session_store.purge_expired()
    if removed:
        logger.info(f"Session purge: removed {removed} expired session(s)")
    else:
        logger.debug("Session purge: nothing to remove")
    return removed


def start_scheduler():
    """
    Start the background scheduler.

    Called from the application lifespan on startup.
    """
    if not scheduler.running:
        scheduler.add_job(
            purge_expired_sessions_job,
            trigger=IntervalTrigger(minutes=settings.SESSION_PURGE_INTERVAL_MINUTES),
            id="purge_expired_sessions",
            name="Purge expired sessions",
            replace_existing=True
        )

        scheduler.start()
        logger.info(
            f"Background scheduler started. Session purge every "
            f"{settings.SESSION_PURGE_INTERVAL_MINUTES} minutes."
        )


def stop_scheduler():
    """
    Stop the background scheduler.

    Called from the application lifespan on shutdown.
    """
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped.")
