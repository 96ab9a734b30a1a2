"""
Memory usage readings for the logger.

Two views are available:
- get_memory_usage_mb(): resident set size of the whole process (psutil).
  This is what the memory monitor and log_memory_usage() report by default.
- get_traced_memory_mb(): memory allocated by Python objects, via tracemalloc.
  Useful to watch the Python heap alone; starts tracing on first call.
  Selected with log_memory_usage(source="traced").

Note:
    tracemalloc adds some overhead (~5-10%) once tracing starts, so it is
    never enabled unless get_traced_memory_mb() is called.
"""
import tracemalloc

import psutil

_process = None


def _bytes_to_mb(bytes_val: int) -> float:
    """Convert bytes to megabytes."""
    return bytes_val / (1024 * 1024)


def _current_process() -> psutil.Process:
    global _process
    if _process is None:
        _process = psutil.Process()
    return _process


def get_memory_usage_mb() -> float:
    """Resident memory of the current process in MB."""
    return _bytes_to_mb(_current_process().memory_info().rss)


def get_traced_memory_mb() -> float:
    """
    Memory currently held by Python allocations in MB.

    Note: tracemalloc.start() is only called when tracing is off, so this is
    safe to call repeatedly.
    """
    if not tracemalloc.is_tracing():
        tracemalloc.start()
    current, _ = tracemalloc.get_traced_memory()
    return _bytes_to_mb(current)


MEMORY_SOURCES = {
    "rss": get_memory_usage_mb,
    "traced": get_traced_memory_mb,
}


def read_memory_mb(source: str = "rss") -> float:
    """
    Current memory usage in MB from `source` ("rss" or "traced").

    Raises:
        ValueError: unknown source
    """
    try:
        reader = MEMORY_SOURCES[source]
    except KeyError:
        raise ValueError(f"Invalid memory source: {source}. Must be: rss or traced") from None
    return reader()
