import schedule
import threading
from typing import Callable, Optional
from dynamic_config.utils.logger import logger
from dynamic_config.config.settings import settings


class RefreshScheduler:
    """Run a refresh job on a repeating interval in a background thread"""

    def __init__(self, job: Callable[[], None], interval: float,
                 initial_delay: Optional[float] = None, tick: Optional[float] = None,
                 name: str = "refresh"):
        self.job = job
        self.interval = interval
        self.initial_delay = interval if initial_delay is None else initial_delay
        self.tick = tick if tick is not None else settings.get('refresh.tick_seconds', 1)
        self.name = name
        self.running = False
        self.thread = None

        # Private scheduler so providers never share or clear each other's jobs
        self._scheduler = schedule.Scheduler()
        self._stop_event = threading.Event()

    @property
    def jobs(self):
        return list(self._scheduler.jobs)

    def _run_job(self):
        """Internal method to run the job with error handling"""
        try:
            self.job()
        except Exception as e:
            logger.error(f"Error in scheduled {self.name}: {e}")

    def start(self):
        """Start the scheduler in a background thread"""
        if self.running:
            logger.warning(f"Scheduler '{self.name}' already running")
            return

        self.running = True
        self._stop_event.clear()
        self.thread = threading.Thread(
            target=self._run_scheduler, name=f"{self.name}-scheduler", daemon=True
        )
        self.thread.start()
        logger.debug(
            f"Scheduler '{self.name}' started: first run in {self.initial_delay}s, "
            f"then every {self.interval}s"
        )

    def stop(self):
        """Stop the scheduler"""
        self.running = False
        self._stop_event.set()
        if self.thread and self.thread is not threading.current_thread():
            self.thread.join()
        self._scheduler.clear()
        logger.debug(f"Scheduler '{self.name}' stopped")

    def _run_scheduler(self):
        """Internal scheduler loop"""
        # The first run is offset from the steady interval, so it is not a schedule job
        if self._stop_event.wait(self.initial_delay):
            return
        self._run_job()

        self._scheduler.every(self.interval).seconds.do(self._run_job)
        while not self._stop_event.is_set():
            self._scheduler.run_pending()
            self._stop_event.wait(self.tick)
