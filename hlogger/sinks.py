"""
Console and file sinks on top of loguru.

Every HLogger binds its records with its own id and installs two loguru
handlers filtered on that id:
- console: colored text written to the current sys.stdout
- file: plain text appended to the log file, opened and closed per record

Output example (console):
    [hLogger] WARNING   Disk almost full

Output example (file):
    [hLogger] 2026-02-02 10:30:00 | Warning    | Disk almost full                                   | at app.main() in app.py:12

Serialization of concurrent callers is done by the owning HLogger, which holds
one lock around all the records of a logical call. The sinks themselves do
not lock.
"""
import sys
import threading
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from .config import LoggerConfig

LABEL_WIDTH = 10

# loguru markup per console style
CONSOLE_STYLES = {
    "INFO": ("<green>", "</green>"),
    "LOG": ("<blue>", "</blue>"),
    "DEBUG": ("<magenta>", "</magenta>"),
    "WARNING": ("<yellow>", "</yellow>"),
    "ERROR": ("<red>", "</red>"),
    "EXCEPTION": ("<red>", "</red>"),
    "CRITICAL": ("<yellow><RED><bold>", "</bold></RED></yellow>"),
    "ASSEMBLY": ("<cyan>", "</cyan>"),
}

# loguru level used for each style; LOG and EXCEPTION are registered on import
LOGURU_LEVELS = {
    "INFO": "INFO",
    "LOG": "LOG",
    "DEBUG": "DEBUG",
    "WARNING": "WARNING",
    "ERROR": "ERROR",
    "EXCEPTION": "EXCEPTION",
    "CRITICAL": "CRITICAL",
    "ASSEMBLY": "INFO",
}

_CUSTOM_LEVELS = {"LOG": 21, "EXCEPTION": 45}

# Module-level tracking for the one-time loguru setup
_setup_lock = threading.Lock()
_default_handler_removed = False


def _register_levels() -> None:
    for name, no in _CUSTOM_LEVELS.items():
        try:
            logger.level(name)
        except ValueError:
            logger.level(name, no=no)


def _remove_default_handler() -> None:
    """Drop loguru's stderr handler (only once) so records aren't printed twice."""
    global _default_handler_removed
    with _setup_lock:
        if _default_handler_removed:
            return
        try:
            logger.remove(0)
        except ValueError:
            # Already removed by the application
            pass
        _default_handler_removed = True


with _setup_lock:
    _register_levels()


@dataclass
class Entry:
    """
    One record of a logical log call.

    `console` / `file` hold the text for each sink, or None to skip that sink.
    Raw text is written as-is, without tag, label or timestamp.
    """

    style: str
    console: Optional[str] = None
    file: Optional[str] = None
    console_raw: bool = False
    file_raw: bool = False


def _console_formatter(record) -> str:
    """
    Format a record for colored console output.

    Output example:
    [hLogger] INFO      Service started
    """
    extra = record["extra"]
    if extra["hl_console_raw"]:
        return "{extra[hl_console]}\n"
    opening, closing = CONSOLE_STYLES[extra["hl_style"]]
    return (
        "{extra[hl_tag]} "
        f"{opening}{{extra[hl_label]}}{closing}"
        "{extra[hl_pad]}{extra[hl_console]}\n"
    )


def _file_formatter(record) -> str:
    """
    Format a record for the log file.

    Output example:
    [hLogger] 2026-02-02 10:30:00 | Info       | Service started
    """
    if record["extra"]["hl_file_raw"]:
        return "{extra[hl_file]}\n"
    return "{extra[hl_tag]} {time:YYYY-MM-DD HH:mm:ss} | {extra[hl_name]} | {extra[hl_file]}\n"


class SinkWriter:
    """
    Owns the loguru handlers of one HLogger.

    Args:
        config: Shared config object; read on every write so setter calls
            take effect for the next record
        owner_id: Value bound as extra["hlogger"] on this logger's records
    """

    def __init__(self, config: LoggerConfig, owner_id: str):
        self.config = config
        self.owner_id = owner_id
        self._log = logger.bind(hlogger=owner_id)
        self._handler_ids: list = []
        self._file_error_reported = False

    def install(self) -> None:
        """Add the console and file handlers to loguru."""
        if self._handler_ids:
            return
        _remove_default_handler()
        self._handler_ids = [
            logger.add(
                self._write_console,
                format=_console_formatter,
                filter=self._owns_console_record,
                colorize=self.config.colorize,
                level=0,
            ),
            logger.add(
                self._write_file,
                format=_file_formatter,
                filter=self._owns_file_record,
                colorize=False,
                level=0,
            ),
        ]

    def uninstall(self) -> None:
        for handler_id in self._handler_ids:
            try:
                logger.remove(handler_id)
            except ValueError:
                # Removed from outside, e.g. a global logger.remove()
                pass
        self._handler_ids = []

    def _owns_console_record(self, record) -> bool:
        extra = record["extra"]
        return extra.get("hlogger") == self.owner_id and extra.get("hl_console") is not None

    def _owns_file_record(self, record) -> bool:
        extra = record["extra"]
        return extra.get("hlogger") == self.owner_id and extra.get("hl_file") is not None

    def emit(self, entry: Entry) -> None:
        """Hand one entry to loguru. Caller must hold the HLogger lock."""
        label = entry.style
        self._log.bind(
            hl_tag=f"[{self.config.tag}]",
            hl_style=entry.style,
            hl_label=label,
            hl_pad=" " * max(LABEL_WIDTH - len(label), 0),
            hl_name=entry.style.capitalize().ljust(LABEL_WIDTH),
            hl_console=entry.console,
            hl_file=entry.file,
            hl_console_raw=entry.console_raw,
            hl_file_raw=entry.file_raw,
        ).log(LOGURU_LEVELS[entry.style], entry.file if entry.file is not None else entry.console)

    def _write_console(self, message) -> None:
        stream = sys.stdout
        stream.write(message)
        stream.flush()

    def _write_file(self, message) -> None:
        """Append one formatted record to the log file, closing it afterwards."""
        path = self.config.log_file_path()
        if path is None:
            # No application identity and no log_dir: file logging is off
            return
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "a", encoding="utf-8") as f:
                f.write(message)
                f.flush()
        except OSError as exc:
            self._report_file_error(path, exc)
        else:
            self._file_error_reported = False

    def _report_file_error(self, path, exc: OSError) -> None:
        """Tell the console once that file logging is failing, then stay quiet."""
        if self._file_error_reported or not self.config.output.console:
            return
        self._file_error_reported = True
        self._write_console(f"[{self.config.tag}] Cannot write log file {path}: {exc}\n")
