# scheduler.py
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from config import settings
from database import SessionLocal
from services.vendor_ledger import mark_overdue

logger = logging.getLogger(__name__)


async def overdue_sweep_job():
    """Mark bills and DUE payments past their due date as OVERDUE."""
    db = SessionLocal()
    try:
        counts = mark_overdue(db)
        db.commit()
        return counts
    except Exception:
        db.rollback()
        logger.exception("Overdue sweep failed")
        raise
    finally:
        db.close()


def setup_scheduler() -> AsyncIOScheduler:
    sch = AsyncIOScheduler(
        timezone=settings.SCHEDULER_TIMEZONE,
        job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 60},
    )
    sch.add_job(
        overdue_sweep_job,
        "interval",
        minutes=settings.OVERDUE_SWEEP_MINUTES,
        id="overdue_sweep",
        name="Mark overdue bills and payments",
        replace_existing=True,
    )
    sch.start()
    logger.info("Scheduler started (overdue sweep every %s min)", settings.OVERDUE_SWEEP_MINUTES)
    return sch
