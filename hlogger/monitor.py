"""
Background memory threshold monitor.

One worker thread polls memory usage and calls `on_exceed(threshold_mb, usage_mb)`
whenever usage goes above the threshold, then cools down before polling again
so a process that stays above the threshold does not flood the log.

Lifecycle: idle -> running -> idle. start() while running and stop() while idle
are no-ops. stop() signals the worker and joins it before returning.
"""
import threading
from typing import Callable, Optional

from .memory import get_memory_usage_mb


class MemoryMonitor:
    """
    Polls memory usage on a daemon thread.

    Args:
        on_exceed: Called from the worker thread with (threshold_mb, usage_mb)
        read_usage: Returns current usage in MB (default: process RSS)
        poll_interval: Seconds between polls while under the threshold
        cooldown: Seconds to wait after reporting before polling again
    """

    def __init__(
        self,
        on_exceed: Callable[[int, float], None],
        read_usage: Callable[[], float] = get_memory_usage_mb,
        poll_interval: float = 0.01,
        cooldown: float = 1.0,
    ):
        self.on_exceed = on_exceed
        self.read_usage = read_usage
        self.poll_interval = poll_interval
        self.cooldown = cooldown

        self._state_lock = threading.Lock()
        self._cancel: Optional[threading.Event] = None
        self._worker: Optional[threading.Thread] = None
        self.threshold_mb: Optional[int] = None

    @property
    def running(self) -> bool:
        return self._worker is not None

    def start(self, threshold_mb: int) -> None:
        """Start polling against `threshold_mb`. Does nothing if already running."""
        with self._state_lock:
            if self._worker is not None:
                return
            self.threshold_mb = threshold_mb
            self._cancel = threading.Event()
            self._worker = threading.Thread(
                target=self._poll_loop,
                args=(threshold_mb, self._cancel),
                name="hlogger-memory-monitor",
                daemon=True,
            )
            self._worker.start()

    def stop(self) -> None:
        """Cancel the worker and wait for it to exit. Does nothing if idle."""
        with self._state_lock:
            worker, cancel = self._worker, self._cancel
            if worker is None:
                return
            self._worker = None
            self._cancel = None
            self.threshold_mb = None
            cancel.set()
        # Joined outside the lock: on_exceed may call stop() from the worker itself
        if worker is not threading.current_thread():
            worker.join()

    def _poll_loop(self, threshold_mb: int, cancel: threading.Event) -> None:
        """Worker body. Event.wait doubles as the sleep, so cancellation is prompt."""
        while not cancel.is_set():
            try:
                usage = self.read_usage()
                if usage > threshold_mb:
                    self.on_exceed(threshold_mb, usage)
                    cancel.wait(self.cooldown)
                    continue
            except Exception:
                # Don't let a failed reading or write kill the monitor
                pass
            cancel.wait(self.poll_interval)
