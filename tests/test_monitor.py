"""Tests for the background memory threshold monitor."""
import threading
import time

from hlogger import MemoryMonitor, OutputRoute


def _wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestMemoryMonitor:
    """Tests for MemoryMonitor with a fake memory reading."""

    def test_reports_when_over_threshold(self):
        """Test that on_exceed receives threshold and usage."""
        alerts = []
        monitor = MemoryMonitor(lambda threshold, usage: alerts.append((threshold, usage)),
                                read_usage=lambda: 200.0)

        monitor.start(100)
        try:
            assert _wait_for(lambda: alerts)
        finally:
            monitor.stop()

        assert alerts[0] == (100, 200.0)

    def test_cooldown_limits_repeats(self):
        """Test that one alert is followed by a quiet period."""
        alerts = []
        monitor = MemoryMonitor(lambda threshold, usage: alerts.append(usage),
                                read_usage=lambda: 200.0, cooldown=1.0)

        monitor.start(100)
        time.sleep(0.3)
        monitor.stop()

        assert len(alerts) == 1

    def test_silent_under_threshold(self):
        """Test that polling continues without alerts below the threshold."""
        alerts = []
        reads = []

        def read_usage():
            reads.append(1)
            return 10.0

        monitor = MemoryMonitor(lambda threshold, usage: alerts.append(usage), read_usage=read_usage)
        monitor.start(100)
        time.sleep(0.1)
        monitor.stop()

        assert len(reads) > 1
        assert alerts == []

    def test_stop_interrupts_cooldown(self):
        """Test that stop returns promptly even during the cooldown wait."""
        monitor = MemoryMonitor(lambda threshold, usage: None,
                                read_usage=lambda: 200.0, cooldown=30.0)
        monitor.start(100)
        time.sleep(0.05)

        started = time.monotonic()
        monitor.stop()

        assert time.monotonic() - started < 2.0
        assert not monitor.running

    def test_start_twice_keeps_one_worker(self):
        """Test that start while running is a no-op."""
        monitor = MemoryMonitor(lambda threshold, usage: None, read_usage=lambda: 0.0)

        monitor.start(100)
        worker = monitor._worker
        monitor.start(5)
        try:
            assert monitor._worker is worker
            assert monitor.threshold_mb == 100
        finally:
            monitor.stop()

    def test_stop_when_idle_is_noop(self):
        """Test that stop without start neither raises nor hangs."""
        monitor = MemoryMonitor(lambda threshold, usage: None)

        monitor.stop()
        monitor.stop()

        assert not monitor.running

    def test_restart_after_stop(self):
        """Test that a stopped monitor can be started again with a fresh worker."""
        monitor = MemoryMonitor(lambda threshold, usage: None, read_usage=lambda: 0.0)

        monitor.start(100)
        first = monitor._worker
        monitor.stop()
        monitor.start(100)
        try:
            assert monitor.running
            assert monitor._worker is not first
        finally:
            monitor.stop()

    def test_stop_from_another_thread(self):
        """Test that a different thread can stop the monitor."""
        monitor = MemoryMonitor(lambda threshold, usage: None, read_usage=lambda: 0.0)
        monitor.start(100)

        stopper = threading.Thread(target=monitor.stop)
        stopper.start()
        stopper.join(timeout=2.0)

        assert not stopper.is_alive()
        assert not monitor.running

    def test_stop_from_callback_during_external_stop(self):
        """Test that on_exceed calling stop() while another thread stops doesn't hang."""
        monitor = None
        finished = threading.Event()

        def on_exceed(threshold, usage):
            # Wait until the other thread has cleared the handles and is joining
            _wait_for(lambda: not monitor.running)
            monitor.stop()
            finished.set()

        monitor = MemoryMonitor(on_exceed, read_usage=lambda: 200.0)
        monitor.start(100)
        time.sleep(0.05)

        stopper = threading.Thread(target=monitor.stop)
        stopper.start()
        stopper.join(timeout=3.0)

        assert not stopper.is_alive()
        assert finished.is_set()
        assert not monitor.running

    def test_failed_reading_keeps_polling(self):
        """Test that an exception in read_usage doesn't kill the worker."""
        calls = []

        def read_usage():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("transient")
            return 200.0

        alerts = []
        monitor = MemoryMonitor(lambda threshold, usage: alerts.append(usage), read_usage=read_usage)
        monitor.start(100)
        try:
            assert _wait_for(lambda: alerts)
        finally:
            monitor.stop()


class TestLoggerMemoryThreshold:
    """Tests for start/stop_memory_threshold on HLogger."""

    def test_exceeding_threshold_is_logged(self, make_logger, log_file, capsys):
        """Test that a 1MB threshold produces a CRITICAL-styled record."""
        log = make_logger()
        ballast = bytearray(8 * 1024 * 1024)

        log.start_memory_threshold(1)
        time.sleep(1.2)
        started = time.monotonic()
        log.stop_memory_threshold()
        stop_duration = time.monotonic() - started
        log.stop_memory_threshold()

        assert len(ballast) > 0
        assert stop_duration < 2.0
        out = capsys.readouterr().out
        assert "[hLogger] CRITICAL  Memory usage exceeds threshold (1mb): " in out
        text = log_file.read_text()
        assert "| Critical   | Memory usage exceeds threshold (1mb): " in text
        assert "in thread hlogger-memory-monitor" in text

    def test_stop_when_never_started(self, make_logger):
        """Test that stopping an idle monitor is a safe no-op."""
        log = make_logger()

        log.stop_memory_threshold()

        assert not log.memory_monitor_running

    def test_polls_while_output_suppressed(self, make_logger, log_file, capsys):
        """Test that the monitor runs but writes nothing while output is disabled."""
        log = make_logger(output=OutputRoute.DISABLED)

        log.start_memory_threshold(1)
        time.sleep(0.1)
        assert log.memory_monitor_running
        log.set_log_output(OutputRoute.BOTH)
        time.sleep(1.2)
        log.stop_memory_threshold()

        assert "Memory usage exceeds threshold" in capsys.readouterr().out

    def test_close_stops_monitor(self, make_logger):
        """Test that closing the logger stops its monitor."""
        log = make_logger()
        log.start_memory_threshold(1)

        log.close()

        assert not log.memory_monitor_running
