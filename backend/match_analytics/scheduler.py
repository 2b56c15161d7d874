import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from match_analytics.infrastructure.cache.cache_service import CacheService
from match_analytics.utils.time_utils import DEFAULT_TZ

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = 'cache_sweep'


class CacheMaintenanceScheduler:
    """Owns the timer that sweeps expired entries out of a cache."""

    def __init__(self, cache: CacheService, interval_seconds: int = 300):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.cache = cache
        self.interval_seconds = interval_seconds
        self.scheduler = AsyncIOScheduler(timezone=DEFAULT_TZ)

    def run_sweep(self) -> int:
        """Remove expired cache entries once."""
        try:
            removed = self.cache.cleanup_expired()
            if removed:
                logger.info(f"Cache sweep removed {removed} expired entries")
            return removed
        except Exception as e:
            logger.error(f"Error during cache sweep: {str(e)}", exc_info=True)
            return 0

    def start(self):
        """Start the periodic sweep. Must be called with a running event loop."""
        self.scheduler.add_job(
            self.run_sweep,
            trigger=IntervalTrigger(seconds=self.interval_seconds, timezone=DEFAULT_TZ),
            id=SWEEP_JOB_ID,
            name='Expired cache entry sweep',
            replace_existing=True,
            max_instances=1,
        )
        self.scheduler.start()
        logger.info(f"Scheduler started. Cache sweep every {self.interval_seconds}s")

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def shutdown(self):
        """Shutdown the scheduler gracefully."""
        if not self.scheduler.running:
            return
        try:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler shutdown successfully")
        except Exception as e:
            logger.error(f"Error shutting down scheduler: {str(e)}")
        # A stopped scheduler stays bound to its old event loop
        self.scheduler = AsyncIOScheduler(timezone=DEFAULT_TZ)
