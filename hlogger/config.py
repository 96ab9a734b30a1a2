"""
Logger configuration.

Settings are resolved in this order: explicit arguments, environment
variables, defaults.

Environment variables:
    HLOGGER_LEVEL: all, info, log, debug, warning, error, exception, critical, none (default: all)
    HLOGGER_OUTPUT: disabled, console, file, both (default: both)
    HLOGGER_SOURCE_LOCATION: include/omit or yes/no (default: include)
    HLOGGER_TAG: prefix written before every record (default: hLogger)
    HLOGGER_APP_NAME: application identity used for the log directory
    HLOGGER_LOG_DIR: directory for the log file, bypasses the app-data lookup
    HLOGGER_FILENAME: log file name (default: hLogger.log)
    HLOGGER_COLORIZE: true/false - ANSI colors on the console (default: true)
"""
import os
import sys
from dataclasses import dataclass
from importlib import metadata
from pathlib import Path
from typing import Optional

from .severity import OutputRoute, Severity, SourceLocation

DEFAULT_TAG = "hLogger"
DEFAULT_FILENAME = "hLogger.log"


@dataclass
class LoggerConfig:
    """Mutable per-logger settings. Fields are replaced whole by the setters."""

    level: Severity = Severity.ALL
    output: OutputRoute = OutputRoute.BOTH
    source_location: SourceLocation = SourceLocation.INCLUDE
    tag: str = DEFAULT_TAG
    app_name: Optional[str] = None
    log_dir: Optional[str] = None
    filename: str = DEFAULT_FILENAME
    colorize: bool = True

    @classmethod
    def from_env(
        cls,
        level=None,
        output=None,
        source_location=None,
        tag: str = None,
        app_name: str = None,
        log_dir: str = None,
        filename: str = None,
        colorize: bool = None,
    ) -> "LoggerConfig":
        """Build a config from arguments, falling back to HLOGGER_* variables."""
        if colorize is None:
            colorize = os.getenv("HLOGGER_COLORIZE", "true").lower() not in ("false", "0", "no")
        return cls(
            level=Severity.parse(level if level is not None else os.getenv("HLOGGER_LEVEL", "all")),
            output=OutputRoute.parse(output if output is not None else os.getenv("HLOGGER_OUTPUT", "both")),
            source_location=SourceLocation.parse(
                source_location if source_location is not None
                else os.getenv("HLOGGER_SOURCE_LOCATION", "include")
            ),
            tag=tag or os.getenv("HLOGGER_TAG", DEFAULT_TAG),
            app_name=app_name or os.getenv("HLOGGER_APP_NAME") or None,
            log_dir=log_dir or os.getenv("HLOGGER_LOG_DIR") or None,
            filename=filename or os.getenv("HLOGGER_FILENAME", DEFAULT_FILENAME),
            colorize=colorize,
        )

    def log_file_path(self) -> Optional[Path]:
        """
        Resolve where the log file lives, or None when file logging is unavailable.

        An explicit log_dir wins. Otherwise the file goes under
        <app data>/<app name>/logs/, which needs an application identity.
        """
        if self.log_dir:
            return Path(self.log_dir) / self.filename
        name = self.app_name or resolve_app_name()
        if not name:
            return None
        return app_data_dir() / name / "logs" / self.filename


def resolve_app_name() -> Optional[str]:
    """Identify the running application from its __main__ module."""
    main = sys.modules.get("__main__")
    main_file = getattr(main, "__file__", None)
    if not main_file:
        # Interactive session or embedded interpreter
        return None
    path = Path(main_file)
    if path.stem == "__main__":
        # python -m package
        return path.parent.name or None
    return path.stem or None


def component_identity(module_name: str) -> str:
    """
    Name and installed version of the package a module belongs to.

    Example: "myapp 1.2.0", or "myapp (version unknown)" when the package
    isn't installed as a distribution.
    """
    package = module_name.split(".")[0] if module_name else ""
    if not package or package == "__main__":
        package = resolve_app_name() or "__main__"
    candidates = metadata.packages_distributions().get(package, []) + [package]
    for dist in candidates:
        try:
            return f"{package} {metadata.version(dist)}"
        except metadata.PackageNotFoundError:
            continue
    return f"{package} (version unknown)"


def app_data_dir() -> Path:
    """Per-user application data directory for the current platform."""
    if sys.platform.startswith("win"):
        appdata = os.getenv("APPDATA")
        if appdata:
            return Path(appdata)
        return Path.home() / "AppData" / "Roaming"
    return Path(os.getenv("XDG_CONFIG_HOME") or Path.home() / ".config")
