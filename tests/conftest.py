"""Shared fixtures for hlogger tests."""
import pytest

from hlogger import HLogger
from hlogger import instances


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep HLOGGER_* variables from the outer environment out of the tests."""
    for name in (
        "HLOGGER_LEVEL",
        "HLOGGER_OUTPUT",
        "HLOGGER_SOURCE_LOCATION",
        "HLOGGER_TAG",
        "HLOGGER_APP_NAME",
        "HLOGGER_LOG_DIR",
        "HLOGGER_FILENAME",
        "HLOGGER_COLORIZE",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def log_file(tmp_path):
    return tmp_path / "hLogger.log"


@pytest.fixture
def make_logger(tmp_path):
    """Create HLogger instances writing to tmp_path, closed after the test."""
    created = []

    def factory(**settings):
        settings.setdefault("log_dir", str(tmp_path))
        settings.setdefault("colorize", False)
        log = HLogger(**settings)
        created.append(log)
        return log

    yield factory

    for log in created:
        log.close()


@pytest.fixture
def default_logger(tmp_path):
    """Configure the process-wide logger for one test, then drop it."""
    log = instances.get_logger(force_reconfigure=True, log_dir=str(tmp_path), colorize=False)
    yield log
    log.close()
    instances._configured_logger = None
