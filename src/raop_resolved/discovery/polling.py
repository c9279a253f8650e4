"""
Base class for the blocking polling loops, each run on its own thread.
"""
from __future__ import annotations

import threading
from typing import Optional

import structlog


class PollingLoop:
    """Runs ``run_cycle`` every ``interval`` seconds on a daemon thread.

    There is no cancellation in the normal case: the loop lives as long as the
    process. ``stop_event`` is only consulted while sleeping between cycles,
    so an orderly shutdown (or a test) can end it after the current cycle.
    Subclasses end the loop for good by returning False from ``run_cycle``.
    """

    name = "polling-loop"

    def __init__(self, interval: float, stop_event: Optional[threading.Event] = None,
                 logger: Optional[structlog.BoundLogger] = None):
        self.interval = interval
        self.stop_event = stop_event or threading.Event()
        self.logger = logger or structlog.get_logger(__name__).bind(loop=self.name)
        self._thread: Optional[threading.Thread] = None

    def run_cycle(self) -> bool:
        raise NotImplementedError

    def run_forever(self) -> None:
        self.logger.info("Polling loop started.", interval=self.interval)
        while not self.stop_event.is_set():
            try:
                keep_running = self.run_cycle()
            except Exception as e:
                self.logger.exception("Unexpected error in polling cycle", error=str(e))
                keep_running = True
            if not keep_running:
                self.logger.info("Polling loop terminated.")
                return
            self.stop_event.wait(self.interval)
        self.logger.info("Polling loop stopped.")

    def start(self) -> threading.Thread:
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(target=self.run_forever, name=self.name, daemon=True)
            self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> None:
        self.stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
