"""
Process-wide logger with lazy initialization.

Usage:
    import hlogger

    # Option 1: Free functions on the default logger (created on first call)
    hlogger.info("Hello")
    hlogger.set_log_level(hlogger.Severity.WARNING)

    # Option 2: Pre-configured proxy
    from hlogger import logger
    logger.warning("Careful")

    # Option 3: Explicit setup with custom config
    log = get_logger(log_dir="logs", level="debug", force_reconfigure=True)
"""
import threading

from .core import HLogger

_configured_logger = None
_configure_lock = threading.Lock()


def get_logger(force_reconfigure: bool = False, **settings) -> HLogger:
    """
    Get or create the process-wide HLogger.

    On first call, configures the logger with provided settings (falling back
    to HLOGGER_* environment variables). Subsequent calls return the same
    instance unless force_reconfigure=True, which closes the old one.

    Args:
        force_reconfigure: If True, replace the existing logger
        **settings: level, output, source_location, tag, app_name, log_dir,
            filename, colorize

    Returns:
        The shared HLogger
    """
    global _configured_logger

    with _configure_lock:
        if _configured_logger is None or force_reconfigure:
            if _configured_logger is not None:
                _configured_logger.close()
            _configured_logger = HLogger(**settings)
        return _configured_logger


class _LazyLogger:
    """
    Proxy that initializes the logger on first use.

    This allows importing `logger` without triggering setup until
    an actual log call is made.
    """

    def __getattr__(self, name):
        return getattr(get_logger(), name)


# Won't configure until first log call
logger = _LazyLogger()


def info(message) -> None:
    get_logger().info(message)


def log(message) -> None:
    get_logger().log(message)


def debug(message) -> None:
    get_logger().debug(message)


def debug_object(value, label=None) -> None:
    get_logger().debug_object(value, label)


def warning(message) -> None:
    get_logger().warning(message)


def error(message) -> None:
    get_logger().error(message)


def exception(err) -> None:
    get_logger().exception(err)


def critical(message) -> None:
    get_logger().critical(message)


def assembly_info() -> None:
    get_logger().assembly_info()


def log_memory_usage(source: str = "rss") -> None:
    get_logger().log_memory_usage(source)


def start_timer() -> None:
    get_logger().start_timer()


def stop_timer(operation: str) -> None:
    get_logger().stop_timer(operation)


def start_memory_threshold(threshold_mb: int) -> None:
    get_logger().start_memory_threshold(threshold_mb)


def stop_memory_threshold() -> None:
    get_logger().stop_memory_threshold()


def set_log_level(level) -> None:
    get_logger().set_log_level(level)


def set_include_source_location(policy) -> None:
    get_logger().set_include_source_location(policy)


def set_log_output(route) -> None:
    get_logger().set_log_output(route)
