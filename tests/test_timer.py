"""
Tests for the phase timer
"""

import pytest

from callreach.timer import Timer


class TestTimer:
    """Test named timing counters"""

    def setup_method(self):
        """Set up test fixtures"""
        self.timer = Timer()

    def test_start_stop_accumulates(self):
        self.timer.start("phase")
        self.timer.stop("phase")
        self.timer.start("phase")
        self.timer.stop("phase")

        data = self.timer.snapshot()["phase"]
        assert data.count == 2
        assert data.elapsed >= 0.0

    def test_stop_without_start_is_ignored(self):
        self.timer.stop("never")
        assert "never" not in self.timer.snapshot()

    def test_measure_records_on_error(self):
        with pytest.raises(RuntimeError):
            with self.timer.measure("failing"):
                raise RuntimeError("boom")
        assert self.timer.snapshot()["failing"].count == 1

    def test_record_and_average(self):
        self.timer.record("io", 0.5)
        self.timer.record("io", 1.5)
        data = self.timer.snapshot()["io"]
        assert data.elapsed == pytest.approx(2.0)
        assert data.average == pytest.approx(1.0)

    def test_reset(self):
        self.timer.record("a", 1.0)
        self.timer.record("b", 1.0)
        self.timer.reset("a")
        assert list(self.timer.snapshot()) == ["b"]
        self.timer.reset()
        assert self.timer.snapshot() == {}

    def test_disabled_timer_records_nothing(self):
        timer = Timer(enabled=False)
        timer.start("x")
        timer.stop("x")
        with timer.measure("y"):
            pass
        assert timer.snapshot() == {}

    def test_report_format(self):
        self.timer.record("build_graph", 0.25)
        report = self.timer.format_report()
        lines = report.splitlines()

        assert lines[0].startswith("Timer Report - ")
        assert lines[2].startswith("Timer Name")
        row = next(line for line in lines if line.startswith("build_graph"))
        assert row.split("|")[1].strip() == "1"
        assert row.split("|")[2].strip() == "250.00"

    def test_write_report(self, tmp_path):
        self.timer.record("phase", 0.001)
        output = tmp_path / "nested" / "timing.txt"
        self.timer.write_report(str(output))
        assert "phase" in output.read_text()

    def test_empty_timer_writes_nothing(self, tmp_path):
        output = tmp_path / "timing.txt"
        self.timer.write_report(str(output))
        assert not output.exists()
