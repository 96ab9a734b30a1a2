"""
HLogger: leveled logging to the console and a log file.

Usage:
    from hlogger import HLogger, Severity

    log = HLogger(log_dir="logs", level=Severity.DEBUG)
    log.info("Service started")
    log.debug_object({"user": 1, "roles": ["admin"]}, "payload")

    log.start_timer()
    run_job()
    log.stop_timer("run_job")      # [hLogger] DEBUG     run_job took 12.3ms

    log.start_memory_threshold(512)
    ...
    log.stop_memory_threshold()

Every call is filtered first: a record at severity S is written only when
S passes the configured level (see Severity.allows) and the output route
enables the sink. A filtered call has no effect at all.

Logging never raises to the caller: file errors are dropped after a single
console notice, and loguru catches anything else in its handlers.
"""
import dataclasses
import json
import pprint
import threading
import traceback
import uuid
from typing import Optional, Tuple

import psutil

from .callsite import capture_call_site
from .config import LoggerConfig, component_identity
from .memory import MEMORY_SOURCES, read_memory_mb
from .monitor import MemoryMonitor
from .severity import OutputRoute, Severity, SourceLocation
from .sinks import Entry, SinkWriter
from .timer import Stopwatch, format_elapsed

MESSAGE_WIDTH = 50
CONSOLE_BLOCK_INDENT = "\t" * 3
FILE_BLOCK_INDENT = "\t" * 6


def safe_str(value) -> str:
    """
    Text for a caller-supplied value that never raises.

    Falls back to repr() when __str__ fails, then to a placeholder naming
    the type (deep nesting can make both raise RecursionError).
    """
    try:
        return str(value)
    except Exception:
        pass
    try:
        return repr(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


def _to_jsonable(obj):
    """json.dumps fallback for values it can't serialize natively."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    if hasattr(obj, "__dict__") and not isinstance(obj, type):
        return vars(obj)
    return safe_str(obj)


def render_object(value) -> str:
    """Indented structured text for debug_object()."""
    try:
        return json.dumps(value, indent=2, ensure_ascii=False, default=_to_jsonable)
    except Exception:
        # Non-string keys, circular references, nesting too deep...
        pass
    try:
        return pprint.pformat(value, indent=2)
    except Exception:
        return safe_str(value)


def _indent(text: str, prefix: str) -> str:
    return "\n".join(prefix + line for line in text.split("\n"))


class HLogger:
    """
    A logger instance with its own configuration, sinks, timer and memory monitor.

    Args:
        config: Ready-made configuration. When omitted, one is built from
            `settings` and HLOGGER_* environment variables.
        **settings: Any LoggerConfig.from_env argument (level, output,
            source_location, tag, app_name, log_dir, filename, colorize)
    """

    def __init__(self, config: Optional[LoggerConfig] = None, **settings):
        self.config = config or LoggerConfig.from_env(**settings)
        self.id = uuid.uuid4().hex[:8]

        # One lock for every sink: each logical call is written as a unit
        self._lock = threading.Lock()
        self._sinks = SinkWriter(self.config, self.id)
        self._stopwatch = Stopwatch()
        self._monitor = MemoryMonitor(self._report_memory_threshold)
        self._sinks.install()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self) -> None:
        """Stop the memory monitor and detach from loguru."""
        self._monitor.stop()
        self._sinks.uninstall()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_log_level(self, level) -> None:
        """Only records at `level` or above are written (default: ALL)."""
        self.config.level = Severity.parse(level)

    def set_include_source_location(self, policy) -> None:
        """Append the caller's location to file records (default: INCLUDE)."""
        self.config.source_location = SourceLocation.parse(policy)

    def set_log_output(self, route) -> None:
        """Choose the active sinks (default: BOTH)."""
        self.config.output = OutputRoute.parse(route)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _routes(self, severity: Severity) -> Tuple[bool, bool]:
        """(console, file) enabled for a record at `severity`."""
        config = self.config
        if not severity.allows(config.level):
            return False, False
        output = config.output
        return output.console, output.file

    def _file_text(self, text: str, call_site=None) -> str:
        if self.config.source_location is not SourceLocation.INCLUDE:
            return text
        if call_site is None:
            call_site = capture_call_site()
        return f"{text:<{MESSAGE_WIDTH}} | {call_site}"

    def _dispatch(self, *entries: Entry) -> None:
        with self._lock:
            for entry in entries:
                if entry.console is None and entry.file is None:
                    continue
                self._sinks.emit(entry)

    def _message(self, severity: Severity, message, style: str = None, call_site=None) -> None:
        to_console, to_file = self._routes(severity)
        if not (to_console or to_file):
            return
        text = safe_str(message)
        self._dispatch(Entry(
            style=style or severity.name,
            console=text if to_console else None,
            file=self._file_text(text, call_site) if to_file else None,
        ))

    # ------------------------------------------------------------------
    # Emission API
    # ------------------------------------------------------------------

    def info(self, message) -> None:
        self._message(Severity.INFO, message)

    def log(self, message) -> None:
        self._message(Severity.LOG, message)

    def debug(self, message) -> None:
        self._message(Severity.DEBUG, message)

    def warning(self, message) -> None:
        self._message(Severity.WARNING, message)

    def error(self, message) -> None:
        self._message(Severity.ERROR, message)

    def critical(self, message) -> None:
        self._message(Severity.CRITICAL, message)

    def exception(self, err) -> None:
        """
        Log an exception and, when it carries one, its traceback.

        `err` is usually an exception. Any other object is read for `message`
        and `trace` attributes, falling back to its text.

        The console gets the traceback as a raw block under the message; the
        file gets it as a second Exception record.
        """
        to_console, to_file = self._routes(Severity.EXCEPTION)
        if not (to_console or to_file):
            return

        trace = None
        if isinstance(err, BaseException):
            detail = safe_str(err)
            message = f"{type(err).__name__}: {detail}" if detail else type(err).__name__
            if err.__traceback__ is not None:
                trace = "".join(traceback.format_tb(err.__traceback__))
        else:
            try:
                message, trace = getattr(err, "message", err), getattr(err, "trace", None)
            except Exception:
                message, trace = err, None
            message = safe_str(message)
        if trace:
            trace = _indent(safe_str(trace).rstrip("\n"), "\t")

        entries = [Entry(
            style="EXCEPTION",
            console=message if to_console else None,
            file=self._file_text(message) if to_file else None,
        )]
        if trace:
            entries.append(Entry(
                style="EXCEPTION",
                console=trace if to_console else None,
                file=trace if to_file else None,
                console_raw=True,
            ))
        self._dispatch(*entries)

    def debug_object(self, value, label: Optional[str] = None) -> None:
        """
        Dump a structured value at DEBUG level.

        The first line names the value ("label (TypeName)" or just "TypeName"),
        followed by its indented JSON rendering.
        """
        to_console, to_file = self._routes(Severity.DEBUG)
        if not (to_console or to_file):
            return

        type_name = type(value).__name__
        title = f"{safe_str(label)} ({type_name})" if label else type_name
        body = render_object(value)
        self._dispatch(
            Entry(
                style="DEBUG",
                console=title if to_console else None,
                file=self._file_text(title) if to_file else None,
            ),
            Entry(
                style="DEBUG",
                console=_indent(body, CONSOLE_BLOCK_INDENT) if to_console else None,
                file=_indent(body, FILE_BLOCK_INDENT) if to_file else None,
                console_raw=True,
                file_raw=True,
            ),
        )

    def assembly_info(self) -> None:
        """Write the calling package's name and version to the console (INFO level)."""
        to_console, _ = self._routes(Severity.INFO)
        if not to_console:
            return
        identity = component_identity(capture_call_site().module)
        self._dispatch(Entry(style="ASSEMBLY", console=identity))

    def log_memory_usage(self, source: str = "rss") -> None:
        """
        Log memory usage at DEBUG level.

        Args:
            source: "rss" for the process's resident memory, "traced" for
                memory held by Python objects (starts tracemalloc)

        Raises:
            ValueError: unknown source
        """
        if source not in MEMORY_SOURCES:
            raise ValueError(f"Invalid memory source: {source}. Must be: rss or traced")
        to_console, to_file = self._routes(Severity.DEBUG)
        if not (to_console or to_file):
            return
        try:
            usage = read_memory_mb(source)
        except psutil.Error:
            return
        prefix = "Traced memory usage" if source == "traced" else "Memory usage"
        self._message(Severity.DEBUG, f"{prefix}: {usage:.2f}MB")

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    def start_timer(self) -> None:
        """Restart the shared stopwatch from zero."""
        self._stopwatch.restart()

    def stop_timer(self, operation: str) -> None:
        """
        Log the time since the last start_timer() at DEBUG level.

        The stopwatch keeps running; a second stop_timer() without a new
        start_timer() reports the cumulative time.
        """
        elapsed = self._stopwatch.elapsed()
        self._message(Severity.DEBUG, f"{operation} took {format_elapsed(elapsed)}")

    # ------------------------------------------------------------------
    # Memory monitor
    # ------------------------------------------------------------------

    def start_memory_threshold(self, threshold_mb: int) -> None:
        """Start alerting when process memory exceeds `threshold_mb`. No-op if running."""
        self._monitor.start(threshold_mb)

    def stop_memory_threshold(self) -> None:
        """Stop the memory monitor and wait for its thread. No-op if not running."""
        self._monitor.stop()

    @property
    def memory_monitor_running(self) -> bool:
        return self._monitor.running

    def _report_memory_threshold(self, threshold_mb: int, usage_mb: float) -> None:
        # Gated like a DEBUG record, styled as CRITICAL
        self._message(
            Severity.DEBUG,
            f"Memory usage exceeds threshold ({threshold_mb}mb): {usage_mb:.2f}MB",
            style="CRITICAL",
            call_site=f"in thread {threading.current_thread().name}",
        )
