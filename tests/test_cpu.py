"""Tests for CPU collectors and the usage estimator."""

import logging
import random

import pytest

from bsdmon.cpu import (
    FreeBSDCpuCollector,
    LinuxCpuCollector,
    estimate_usage,
    parse_stat_line,
    sum_cp_times,
)
from bsdmon.errors import CollectError, ParseError
from bsdmon.models import CpuTimeSample

PROC_STAT = (
    "cpu  4705 356 584 3699176 23060 0 277 0 0 0\n"
    "cpu0 1393 280 329 924395 8519 0 165 0 0 0\n"
    "intr 1462898 28 9 0 0\n"
)


class FakeReader:
    """Stands in for SysctlReader with canned values."""

    def __init__(self, values):
        self.values = values
        self.calls = []

    def read_long_array(self, name):
        self.calls.append(name)
        value = self.values[name]
        if isinstance(value, Exception):
            raise value
        return list(value)


class TestParseStatLine:
    """Tests for parsing the aggregate /proc/stat line."""

    def test_parses_first_four_counters(self):
        """Test user, nice, system and idle are extracted."""
        sample = parse_stat_line(PROC_STAT.splitlines()[0])

        assert sample == CpuTimeSample(user=4705, nice=356, system=584, idle=3699176)
        assert not sample.has_interrupt

    def test_exactly_four_counters(self):
        """Test an old-style line with only four fields is accepted."""
        sample = parse_stat_line("cpu  1 2 3 4\n")
        assert sample.total == 10

    def test_missing_idle_raises_parse_error(self):
        """Test a line missing the idle field fails instead of guessing."""
        with pytest.raises(ParseError):
            parse_stat_line("cpu  4705 356 584\n")

    def test_non_numeric_field_raises_parse_error(self):
        """Test parsing stops at a non-integer field."""
        with pytest.raises(ParseError):
            parse_stat_line("cpu  4705 356 abc 3699176\n")

    def test_negative_field_raises_parse_error(self):
        """Test counters must be unsigned."""
        with pytest.raises(ParseError):
            parse_stat_line("cpu  4705 -356 584 3699176\n")

    def test_non_ascii_digit_raises_parse_error(self):
        """Test Unicode digits such as superscripts are not accepted as counters."""
        with pytest.raises(ParseError):
            parse_stat_line("cpu  4705 356 584 \u00b2\n")

    def test_wrong_prefix_raises_parse_error(self):
        """Test the line must start with the aggregate cpu prefix."""
        with pytest.raises(ParseError):
            parse_stat_line("cpu0 1393 280 329 924395\n")

    def test_empty_line_raises_parse_error(self):
        """Test an empty file is rejected."""
        with pytest.raises(ParseError):
            parse_stat_line("")


class TestLinuxCpuCollector:
    """Tests for LinuxCpuCollector."""

    def test_sample_reads_first_line(self, tmp_path):
        """Test the collector reads only the aggregate line of the file."""
        stat = tmp_path / "stat"
        stat.write_text(PROC_STAT)

        sample = LinuxCpuCollector(str(stat)).sample()

        assert sample.user == 4705
        assert sample.idle == 3699176

    def test_missing_file_raises_collect_error(self, tmp_path):
        """Test an unreadable stat file is a collection failure."""
        collector = LinuxCpuCollector(str(tmp_path / "missing"))

        with pytest.raises(CollectError):
            collector.sample()

    def test_non_ascii_file_raises_parse_error(self, tmp_path):
        """Test undecodable bytes surface as ParseError, not UnicodeDecodeError."""
        stat = tmp_path / "stat"
        stat.write_bytes(b"cpu  1 2 3 \xff\n")

        with pytest.raises(ParseError):
            LinuxCpuCollector(str(stat)).sample()

    def test_malformed_file_raises_parse_error(self, tmp_path):
        """Test a truncated cpu line surfaces as ParseError."""
        stat = tmp_path / "stat"
        stat.write_text("cpu  1 2 3\n")

        with pytest.raises(ParseError):
            LinuxCpuCollector(str(stat)).sample()


class TestFreeBSDCpuCollector:
    """Tests for FreeBSDCpuCollector and kern.cp_times aggregation."""

    def test_sums_buckets_across_cores(self):
        """Test each bucket is summed over all cores."""
        ticks = [
            10, 1, 5, 2, 100,  # cpu0: user nice sys intr idle
            20, 0, 7, 3, 90,  # cpu1
        ]
        sample = FreeBSDCpuCollector(FakeReader({"kern.cp_times": ticks})).sample()

        assert sample == CpuTimeSample(user=30, nice=1, system=12, idle=190, interrupt=5)
        assert sample.has_interrupt

    def test_reads_cp_times_node(self):
        """Test the collector queries kern.cp_times."""
        reader = FakeReader({"kern.cp_times": [1, 2, 3, 4, 5]})
        FreeBSDCpuCollector(reader).sample()
        assert reader.calls == ["kern.cp_times"]

    def test_ignores_partial_stride(self):
        """Test trailing values that do not fill a whole core are ignored."""
        sample = sum_cp_times([1, 1, 1, 1, 1, 9, 9])
        assert sample.total == 5

    def test_zero_cores_raises_collect_error(self):
        """Test an empty tick array is a collection failure."""
        with pytest.raises(CollectError):
            FreeBSDCpuCollector(FakeReader({"kern.cp_times": []})).sample()

    def test_sysctl_failure_propagates(self):
        """Test a failing sysctl read surfaces as CollectError."""
        reader = FakeReader({"kern.cp_times": CollectError("sysctl failed")})
        with pytest.raises(CollectError):
            FreeBSDCpuCollector(reader).sample()


class TestEstimateUsage:
    """Tests for the two-sample CPU usage estimator."""

    def test_identical_samples_give_zero(self):
        """Test zero elapsed ticks yields 0.0 without dividing by zero."""
        sample = CpuTimeSample(user=100, nice=0, system=50, idle=850)
        assert estimate_usage(sample, sample) == 0.0

    def test_half_busy(self):
        """Test a simple 50% interval."""
        prev = CpuTimeSample(user=100, nice=0, system=0, idle=100)
        curr = CpuTimeSample(user=150, nice=0, system=0, idle=150)

        assert estimate_usage(prev, curr) == 50.0

    def test_all_active_gives_hundred(self):
        """Test an interval with no idle ticks is 100%."""
        prev = CpuTimeSample(user=100, nice=10, system=10, idle=500)
        curr = CpuTimeSample(user=140, nice=20, system=30, idle=500)

        assert estimate_usage(prev, curr) == 100.0

    def test_fractional_percentage(self):
        """Test the result keeps fractional precision."""
        prev = CpuTimeSample(user=0, nice=0, system=0, idle=0)
        curr = CpuTimeSample(user=1, nice=0, system=0, idle=2)

        assert estimate_usage(prev, curr) == pytest.approx(33.3333, rel=1e-4)

    def test_interrupt_counts_as_active(self):
        """Test interrupt ticks are active time when the sample carries them."""
        prev = CpuTimeSample(user=0, nice=0, system=0, idle=0, interrupt=0)
        curr = CpuTimeSample(user=10, nice=0, system=10, idle=60, interrupt=20)

        assert estimate_usage(prev, curr) == 40.0

    def test_counter_reset_clamps_to_zero(self, caplog):
        """Test counters going backwards report 0% and log a warning."""
        prev = CpuTimeSample(user=1000, nice=0, system=500, idle=9000)
        curr = CpuTimeSample(user=10, nice=0, system=5, idle=90)

        with caplog.at_level(logging.WARNING, logger="bsdmon.cpu"):
            assert estimate_usage(prev, curr) == 0.0
        assert "went backwards" in caplog.text

    def test_active_reset_with_idle_growth_clamps_to_zero(self):
        """Test a reset active counter is not reported as negative usage."""
        prev = CpuTimeSample(user=1000, nice=0, system=0, idle=0)
        curr = CpuTimeSample(user=0, nice=0, system=0, idle=2000)

        assert estimate_usage(prev, curr) == 0.0

    def test_result_always_in_range(self):
        """Test randomized monotonic sample pairs stay within [0, 100]."""
        rng = random.Random(1234)
        for _ in range(500):
            prev = CpuTimeSample(
                user=rng.randrange(10**9),
                nice=rng.randrange(10**6),
                system=rng.randrange(10**9),
                idle=rng.randrange(10**10),
                interrupt=rng.choice([None, rng.randrange(10**6)]),
            )
            curr = CpuTimeSample(
                user=prev.user + rng.randrange(1000),
                nice=prev.nice + rng.randrange(10),
                system=prev.system + rng.randrange(1000),
                idle=prev.idle + rng.randrange(4000),
                interrupt=None if prev.interrupt is None else prev.interrupt + rng.randrange(50),
            )
            assert 0.0 <= estimate_usage(prev, curr) <= 100.0
