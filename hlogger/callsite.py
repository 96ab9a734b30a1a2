"""
Call-site capture.

Walks the stack up to the first frame that does not belong to this package,
which is the code that called the logging function. Free functions, the lazy
proxy and HLogger methods all resolve to the same caller this way.
"""
import os
import sys
from typing import NamedTuple

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


class CallSite(NamedTuple):
    module: str
    function: str
    filename: str
    lineno: int

    def __str__(self) -> str:
        if not self.filename:
            return "unknown"
        return f"at {self.module}.{self.function}() in {self.filename}:{self.lineno}"


UNKNOWN_CALL_SITE = CallSite("", "", "", 0)


def _is_internal(filename: str) -> bool:
    return os.path.dirname(os.path.abspath(filename)) == _PACKAGE_DIR


def capture_call_site() -> CallSite:
    """Return the location of the nearest caller outside hlogger."""
    try:
        frame = sys._getframe(1)
    except ValueError:
        return UNKNOWN_CALL_SITE

    while frame is not None and _is_internal(frame.f_code.co_filename):
        frame = frame.f_back
    if frame is None:
        return UNKNOWN_CALL_SITE

    code = frame.f_code
    return CallSite(
        module=frame.f_globals.get("__name__", "?"),
        function=code.co_name,
        filename=code.co_filename,
        lineno=frame.f_lineno,
    )
