"""Availability derived from consecutive status history timestamps."""

import datetime
from types import SimpleNamespace

from statuspage.core.enums import ServiceStatus
from statuspage.services.uptime import compute_availability

START = datetime.datetime(2026, 1, 1, tzinfo=datetime.timezone.utc)
END = START + datetime.timedelta(hours=10)


def _entry(hours: float, status: ServiceStatus, duration: int = 0):
    return SimpleNamespace(recorded_at=START + datetime.timedelta(hours=hours), status=status, duration=duration)


class TestComputeAvailability:
    def test_no_history_is_fully_available(self):
        assert compute_availability([], START, END) == 100.0

    def test_single_outage_interval(self):
        entries = [_entry(2, ServiceStatus.MAJOR_OUTAGE), _entry(3, ServiceStatus.OPERATIONAL)]
        assert compute_availability(entries, START, END) == 90.0

    def test_ongoing_outage_runs_until_now(self):
        entries = [_entry(5, ServiceStatus.PARTIAL_OUTAGE)]
        assert compute_availability(entries, START, END) == 50.0

    def test_status_before_window_carries_in(self):
        entries = [_entry(-5, ServiceStatus.DEGRADED_PERFORMANCE), _entry(1, ServiceStatus.OPERATIONAL)]
        assert compute_availability(entries, START, END) == 90.0

    def test_stored_duration_is_ignored(self):
        entries = [_entry(2, ServiceStatus.MAJOR_OUTAGE, duration=9999), _entry(3, ServiceStatus.OPERATIONAL)]
        assert compute_availability(entries, START, END) == 90.0

    def test_entries_after_now_are_ignored(self):
        entries = [_entry(12, ServiceStatus.MAJOR_OUTAGE)]
        assert compute_availability(entries, START, END) == 100.0

    def test_empty_window(self):
        assert compute_availability([_entry(0, ServiceStatus.MAJOR_OUTAGE)], END, END) == 100.0

    def test_naive_timestamps_from_sqlite(self):
        entries = [
            SimpleNamespace(recorded_at=datetime.datetime(2026, 1, 1, 2), status=ServiceStatus.MAJOR_OUTAGE),
            SimpleNamespace(recorded_at=datetime.datetime(2026, 1, 1, 3), status=ServiceStatus.OPERATIONAL),
        ]
        assert compute_availability(entries, START, END) == 90.0
