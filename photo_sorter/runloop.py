"""Run loop for Photo Sorter.

Runs one sort pass at startup, then waits on the change-signal queue.
A signal newer than the start of the last pass triggers another pass;
older signals were already covered by that pass and are discarded, so a
burst of events collapses into at most one follow-up pass.

Stop requests are only acted on between passes, so a pass is never
interrupted mid-copy.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)

STATE_STARTING = "starting"
STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_STOPPED = "stopped"

# Wakes the loop when a stop is requested
_STOP = object()


class Sorter(Protocol):
    def run(self, seen: set[str]) -> tuple[set[str], bool]: ...


class Store(Protocol):
    def load(self) -> set[str]: ...

    def save(self, seen: set[str]) -> None: ...


class RunLoop:
    """Drives sort passes from change signals until asked to stop."""

    def __init__(
        self,
        sorter: Sorter,
        store: Store,
        signals: queue.Queue,
        clock: Callable[[], float] = time.time,
    ):
        self._sorter = sorter
        self._store = store
        self._signals = signals
        self._clock = clock
        self._stop_requested = threading.Event()
        self._state = STATE_STARTING
        self._seen: set[str] = set()
        self.last_run = 0.0
        self.passes = 0
        self.stop_reason = ""

    @property
    def state(self) -> str:
        return self._state

    def request_stop(self, reason: str = "stop request") -> None:
        """Ask the loop to stop once the current pass (if any) completes."""
        if self._stop_requested.is_set():
            return
        self.stop_reason = reason
        self._stop_requested.set()
        try:
            self._signals.put_nowait(_STOP)
        except queue.Full:
            # The loop checks the stop flag after every item it takes
            pass

    def run(self) -> None:
        """Run until a stop is requested.  Errors from a pass propagate."""
        self._seen = self._store.load()
        # Catch anything that changed before the watcher attached
        self._run_pass()

        while True:
            self._state = STATE_IDLE
            if self._stop_requested.is_set():
                break
            item = self._signals.get()
            if self._stop_requested.is_set():
                break
            if item is _STOP or item <= self.last_run:
                continue
            logger.info("Source directory did change")
            self._run_pass()

        self._state = STATE_STOPPED
        logger.info("Stopping due to %s", self.stop_reason)

    def _run_pass(self) -> None:
        self._state = STATE_RUNNING
        # Signals stamped at or before this point are covered by this pass
        self.last_run = self._clock()
        new_seen, _ = self._sorter.run(self._seen)
        self._store.save(new_seen)
        self._seen = new_seen
        self.passes += 1
