"""Background alert scheduler with hot restart on settings changes.

A supervisor loop launches one generation of background threads (dedup
eviction and the periodic check), waits until either the process shuts down
or the settings store signals a change, joins the generation and launches
the next one after a short delay.
"""
import logging
import threading

import schedule

logger = logging.getLogger("kubedeck.scheduler")


class AlertScheduler:
    def __init__(self, settings, check_cycle, tracker, cleanup_interval=3600,
                 restart_delay=1.0, tick_seconds=1.0):
        self.settings = settings
        self.check_cycle = check_cycle
        self.tracker = tracker
        self.cleanup_interval = cleanup_interval
        self.restart_delay = restart_delay
        self.tick_seconds = tick_seconds
        self._state_lock = threading.Lock()
        self._generations = 0
        self._running = False
        self._shutdown = threading.Event()
        self._thread = None
        self._check_job = None

    @classmethod
    def from_config(cls, config, settings, check_cycle, tracker):
        alerts = config["alerts"]
        return cls(
            settings, check_cycle, tracker,
            cleanup_interval=alerts.get("cleanup_interval", 3600),
            restart_delay=alerts.get("restart_delay", 1.0),
        )

    @property
    def is_running(self):
        with self._state_lock:
            return self._running

    @property
    def generations(self):
        with self._state_lock:
            return self._generations

    def _set_running(self, running):
        with self._state_lock:
            self._running = running

    def start(self):
        """Run the supervisor on a daemon thread."""
        if self._thread and self._thread.is_alive():
            return
        self._shutdown.clear()
        self._set_running(True)
        self._thread = threading.Thread(target=self.run, name="alert-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout=10):
        """Signal shutdown and wait for the current generation to finish."""
        self._shutdown.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(f"Scheduler did not stop within {timeout}s")
            else:
                self._thread = None
        logger.info("Scheduler stopped")

    def run(self):
        """Supervisor loop. Blocks until stop() is called."""
        self._set_running(True)
        try:
            while not self._shutdown.is_set():
                generation = self.settings.activate()
                with self._state_lock:
                    self._generations += 1
                    number = self._generations
                logger.info(f"Starting scheduler generation {number} "
                            f"(check every {self.settings.get_check_interval()}s)")

                stopping = threading.Event()
                workers = [
                    threading.Thread(target=self._eviction_task, args=(generation, stopping),
                                     name=f"dedup-eviction-{number}", daemon=True),
                    threading.Thread(target=self._check_task, args=(generation, stopping),
                                     name=f"alert-check-{number}", daemon=True),
                ]
                for worker in workers:
                    worker.start()

                while not (self._shutdown.is_set() or generation.is_set()):
                    self._shutdown.wait(self.tick_seconds)

                stopping.set()
                for worker in workers:
                    worker.join()

                if self._shutdown.is_set():
                    break
                logger.info(f"Settings changed, restarting in {self.restart_delay}s")
                self._shutdown.wait(self.restart_delay)
        finally:
            self.settings.deactivate()
            self._set_running(False)

    # ── generation tasks ─────────────────────────────

    def _eviction_task(self, generation, stopping):
        sched = schedule.Scheduler()
        sched.every(self.cleanup_interval).seconds.do(self._evict)
        self._loop(sched, generation, stopping)

    def _check_task(self, generation, stopping):
        self._run_cycle()

        sched = schedule.Scheduler()
        job = sched.every(self.settings.get_check_interval()).seconds
        self._check_job = job

        def tick():
            interval = self.settings.get_check_interval()
            if interval != job.interval:
                logger.info(f"Check interval changed {job.interval}s -> {interval}s")
                job.interval = interval
            self._run_cycle()

        job.do(tick)
        self._loop(sched, generation, stopping)

    def _loop(self, sched, generation, stopping):
        while not (stopping.is_set() or generation.is_set() or self._shutdown.is_set()):
            sched.run_pending()
            generation.wait(self.tick_seconds)
        sched.clear()

    def _evict(self):
        try:
            removed = self.tracker.evict_expired()
            if removed:
                logger.info(f"Evicted {removed} expired alert records")
        except Exception as e:
            logger.error(f"Dedup eviction failed: {e}", exc_info=True)

    def _run_cycle(self):
        try:
            self.check_cycle.run()
        except Exception as e:
            logger.error(f"Check cycle failed: {e}")
