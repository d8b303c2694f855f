"""
APScheduler wrapper for Radio Hub

Keeps station listings fresh in the background:
- BackgroundScheduler with one interval job
- Job starts paused; start()/stop() resume and pause it
- Graceful shutdown support

The refresh job runs at a configurable interval (default: 60 minutes).
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)


class RefreshScheduler:
    """Background station refresh

    Attributes:
        scheduler: BackgroundScheduler instance
        interval_minutes: Minutes between refreshes
    """

    def __init__(self, refresh_func, interval_minutes=60):
        """
        Args:
            refresh_func: Called with no arguments for each refresh
            interval_minutes: Minutes between refreshes (default: 60)
        """
        self.scheduler = BackgroundScheduler()
        self.interval_minutes = interval_minutes
        self.refresh_func = refresh_func
        self.job_id = 'station_refresh'

        self.scheduler.add_job(
            self._run_refresh,
            'interval',
            minutes=self.interval_minutes,
            id=self.job_id,
            name='Station List Refresh',
            next_run_time=None  # added paused
        )
        self.scheduler.start()
        logger.info(f"Scheduler initialized (interval: {interval_minutes} minutes)")

    def _run_refresh(self):
        try:
            logger.info("Starting scheduled station refresh")
            self.refresh_func()
            logger.info("Scheduled station refresh complete")
        except Exception as e:
            # A failed run must not kill the job
            logger.error(f"Error during scheduled refresh: {e}", exc_info=True)

    def start(self):
        """Resume the refresh job

        Returns:
            True if started, False if already running
        """
        if self.is_running():
            logger.info("Refresh job already running")
            return False

        self.scheduler.resume_job(self.job_id)
        logger.info("Refresh job started")
        return True

    def stop(self):
        """Pause the refresh job

        Returns:
            True if stopped, False if already paused
        """
        if not self.is_running():
            return False

        self.scheduler.pause_job(self.job_id)
        logger.info("Refresh job stopped")
        return True

    def is_running(self):
        job = self.scheduler.get_job(self.job_id)
        return job is not None and job.next_run_time is not None

    def run_now(self):
        """Run one refresh synchronously"""
        self._run_refresh()

    def shutdown(self, wait=True):
        logger.info("Shutting down scheduler...")
        self.scheduler.shutdown(wait=wait)
        logger.info("Scheduler shut down")
