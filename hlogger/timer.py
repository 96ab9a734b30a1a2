"""Single shared stopwatch used by start_timer/stop_timer."""
import threading
import time


def format_elapsed(seconds: float) -> str:
    """Seconds with 3 decimals from one second up, milliseconds with 1 decimal below."""
    if seconds >= 1.0:
        return f"{seconds:.3f}s"
    return f"{seconds * 1000:.1f}ms"


class Stopwatch:
    """
    Restartable stopwatch.

    There is one span at a time: restart() overwrites whatever was running.
    Reading elapsed() does not stop it, so repeated reads are cumulative.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._started_at = time.perf_counter()

    def restart(self) -> None:
        with self._lock:
            self._started_at = time.perf_counter()

    def elapsed(self) -> float:
        with self._lock:
            return time.perf_counter() - self._started_at
