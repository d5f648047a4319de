"""ARQ worker for loyalty service background tasks.

Run with: arq services.loyalty_service.worker.WorkerSettings
"""

from arq import cron
from libs.common.arq_config import get_redis_settings
from libs.common.logging import get_logger

logger = get_logger(__name__)


# ── Wrapper functions (ARQ requires top-level async callables) ──


async def task_expire_loyalty_points(ctx: dict):
    """Expire BBM Bucks earnings older than the expiry window."""
    from services.loyalty_service.tasks import expire_loyalty_points

    logger.info("Running: expire_loyalty_points")
    summary = await expire_loyalty_points()
    return summary.model_dump()


# ── Worker configuration ──


class WorkerSettings:
    """ARQ worker settings with cron job schedules."""

    redis_settings = get_redis_settings()

    functions = [
        task_expire_loyalty_points,
    ]

    cron_jobs = [
        # Daily at 00:30 UTC (06:00 IST)
        cron(
            task_expire_loyalty_points,
            hour=0,
            minute=30,
            run_at_startup=False,
        ),
    ]
