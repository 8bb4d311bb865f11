from __future__ import annotations

import logging
import queue
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class FrameScheduler(Protocol):
    def request_frame(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once, when the next frame is due."""
        raise NotImplementedError


class Dispatcher(Protocol):
    def submit(self, fn: Callable[[], Any], on_done: Callable[[Any], None]) -> None:
        """Run a single-shot job off the frame cadence and hand its result to ``on_done``."""
        raise NotImplementedError


class IntervalFrameScheduler:
    """Frame cadence on one long-lived worker thread.

    Callbacks run one after another, never closer together than ``1 / fps``
    seconds. Each poll reschedules itself, so polls never overlap.
    """

    def __init__(self, fps: int):
        self._interval = 1.0 / max(int(fps), 1)
        self._pending: "queue.Queue[Optional[Callable[[], None]]]" = queue.Queue()
        self._stopped = threading.Event()
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    def request_frame(self, callback: Callable[[], None]) -> None:
        if self._stopped.is_set():
            logger.debug("Frame requested after shutdown; ignored")
            return
        self._ensure_worker()
        self._pending.put(callback)

    def _ensure_worker(self) -> None:
        with self._lock:
            if self._thread is None:
                self._thread = threading.Thread(target=self._run, name="scan-frames", daemon=True)
                self._thread.start()

    def _run(self) -> None:
        next_due = time.monotonic()
        while True:
            callback = self._pending.get()
            if callback is None:
                return
            delay = next_due - time.monotonic()
            if delay > 0 and self._stopped.wait(delay):
                return
            next_due = time.monotonic() + self._interval
            try:
                callback()
            except Exception:
                logger.exception("Frame callback failed")

    def shutdown(self) -> None:
        self._stopped.set()
        self._pending.put(None)
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)


class ThreadDispatcher:
    def __init__(self):
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="checkin")

    def submit(self, fn: Callable[[], Any], on_done: Callable[[Any], None]) -> None:
        def _done(future: Future) -> None:
            error = future.exception()
            if error is not None:
                logger.error("Dispatched job failed: %s", error)
                return
            on_done(future.result())

        self._executor.submit(fn).add_done_callback(_done)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
