"""
Leveled console and file logging with timing and memory monitoring.

This package provides logging using loguru with:
- Severity filtering (ALL, INFO, LOG, DEBUG, WARNING, ERROR, EXCEPTION, CRITICAL, NONE)
- Colored console output and an append-only log file, routed independently
- Optional caller location on every file record
- Structured object dumps
- A shared stopwatch reported at DEBUG level
- A background memory threshold monitor

Usage:
    import hlogger

    hlogger.set_log_level(hlogger.Severity.WARNING)
    hlogger.info("Not shown")
    hlogger.warning("Shown on the console and in hLogger.log")

    try:
        risky()
    except ValueError as e:
        hlogger.exception(e)

Independent instances (e.g. one per test):
    from hlogger import HLogger

    with HLogger(log_dir="logs", output="file") as log:
        log.debug_object({"x": 1})

Log file:
    <log_dir>/hLogger.log when log_dir is given, otherwise
    <app data>/<app name>/logs/hLogger.log. With no application identity the
    file sink is silently disabled and the console keeps working.
"""

__version__ = "0.1.0"

from .severity import Severity, OutputRoute, SourceLocation
from .config import LoggerConfig
from .callsite import CallSite, capture_call_site
from .timer import Stopwatch, format_elapsed
from .monitor import MemoryMonitor
from .memory import get_memory_usage_mb, get_traced_memory_mb
from .core import HLogger
from .instances import (
    get_logger,
    logger,
    info,
    log,
    debug,
    debug_object,
    warning,
    error,
    exception,
    critical,
    assembly_info,
    log_memory_usage,
    start_timer,
    stop_timer,
    start_memory_threshold,
    stop_memory_threshold,
    set_log_level,
    set_include_source_location,
    set_log_output,
)

__all__ = [
    # Version
    "__version__",
    # Levels and routing
    "Severity",
    "OutputRoute",
    "SourceLocation",
    # Setup
    "LoggerConfig",
    "HLogger",
    "get_logger",
    "logger",
    # Building blocks
    "CallSite",
    "capture_call_site",
    "Stopwatch",
    "format_elapsed",
    "MemoryMonitor",
    "get_memory_usage_mb",
    "get_traced_memory_mb",
    # Emission
    "info",
    "log",
    "debug",
    "debug_object",
    "warning",
    "error",
    "exception",
    "critical",
    "assembly_info",
    "log_memory_usage",
    # Timer
    "start_timer",
    "stop_timer",
    # Memory monitor
    "start_memory_threshold",
    "stop_memory_threshold",
    # Configuration
    "set_log_level",
    "set_include_source_location",
    "set_log_output",
]
