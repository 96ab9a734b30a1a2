"""
Severity levels and output routing.

Severity is ordered from least to most important. ALL and NONE only make
sense as thresholds: ALL lets everything through, NONE suppresses everything.
"""
from enum import Enum, IntEnum


class Severity(IntEnum):
    """Ordered log levels. Higher value means more important."""

    ALL = 0
    INFO = 1
    LOG = 2
    DEBUG = 3
    WARNING = 4
    ERROR = 5
    EXCEPTION = 6
    CRITICAL = 7
    NONE = 8

    @property
    def label(self) -> str:
        """Name as written to the log file, e.g. "Warning"."""
        return self.name.capitalize()

    def allows(self, threshold: "Severity") -> bool:
        """Check whether a record at this severity passes `threshold`."""
        if threshold is Severity.NONE:
            return False
        return threshold is Severity.ALL or self >= threshold

    @classmethod
    def parse(cls, value) -> "Severity":
        """
        Accept a Severity, its int value, or a case-insensitive name.

        Raises:
            ValueError: unknown level name
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            valid = ", ".join(member.name for member in cls)
            raise ValueError(f"Invalid log level: {value}. Must be one of: {valid}") from None


class OutputRoute(Enum):
    """Which sinks are active."""

    DISABLED = "disabled"
    CONSOLE = "console"
    FILE = "file"
    BOTH = "both"

    @property
    def console(self) -> bool:
        return self in (OutputRoute.CONSOLE, OutputRoute.BOTH)

    @property
    def file(self) -> bool:
        return self in (OutputRoute.FILE, OutputRoute.BOTH)

    @classmethod
    def parse(cls, value) -> "OutputRoute":
        if isinstance(value, cls):
            return value
        name = str(value).strip().lower()
        aliases = {
            "stdout": "console",
            "none": "disabled",
            "off": "disabled",
        }
        try:
            return cls(aliases.get(name, name))
        except ValueError:
            raise ValueError(
                f"Invalid log output: {value}. Must be: disabled, console, file, or both"
            ) from None


class SourceLocation(Enum):
    """Whether the call site is appended to file records."""

    OMIT = "omit"
    INCLUDE = "include"

    @classmethod
    def parse(cls, value) -> "SourceLocation":
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.INCLUDE if value else cls.OMIT
        name = str(value).strip().lower()
        if name in ("include", "yes", "true", "1", "on"):
            return cls.INCLUDE
        if name in ("omit", "no", "false", "0", "off"):
            return cls.OMIT
        raise ValueError(f"Invalid source location policy: {value}. Must be: include or omit")
