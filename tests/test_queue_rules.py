from datetime import date, datetime, time, timedelta, timezone

import pytest

from carequeue.core.clock import Clock
from carequeue.models.queue import ALLOWED_TRANSITIONS, QueueRules, QueueStatus, parse_status
from carequeue.schemas.queue import QueueEntry
from carequeue.services.queue_assembler import compute_stats, order_queue


def make_entry(pk, status, at=None, waiting=0):
    return QueueEntry(
        id=pk,
        appointment_id=f"APT{pk}",
        appointment_date=date(2026, 3, 2),
        appointment_time=at,
        status=status,
        appointment_type="scheduled" if at else "walk-in",
        priority_order=QueueRules.priority_order(status),
        waiting_time_minutes=waiting,
    )


@pytest.mark.parametrize("status,expected", [
    ("in-progress", 1),
    ("scheduled", 2),
    ("completed", 3),
    ("no-show", 4),
    ("emergency", 4),
    ("cancelled", 4),
    (None, 4),
])
def test_priority_order(status, expected):
    assert QueueRules.priority_order(status) == expected


def test_appointment_type_walk_in_when_no_time():
    assert QueueRules.appointment_type(None, "emergency case") == "walk-in"


def test_appointment_type_emergency_marker_is_case_insensitive():
    assert QueueRules.appointment_type(time(9, 0), "Patient brought in: EMERGENCY") == "emergency"
    assert QueueRules.appointment_type(time(9, 0), "routine follow-up") == "scheduled"
    assert QueueRules.appointment_type(time(9, 0), None) == "scheduled"


def test_explicit_type_wins_over_notes():
    assert QueueRules.appointment_type(time(9, 0), "not an emergency", explicit_type="scheduled") == "scheduled"
    assert QueueRules.appointment_type(None, None, explicit_type="emergency") == "emergency"


def test_waiting_minutes_floors_and_clamps():
    now = datetime(2026, 3, 2, 10, 30)
    assert QueueRules.waiting_minutes(now - timedelta(minutes=5, seconds=59), now) == 5
    assert QueueRules.waiting_minutes(now + timedelta(minutes=3), now) == 0
    assert QueueRules.waiting_minutes(None, now) == 0


def test_waiting_minutes_is_monotonic():
    created = datetime(2026, 3, 2, 8, 0)
    samples = [created + timedelta(seconds=s) for s in range(0, 7200, 37)]
    values = [QueueRules.waiting_minutes(created, t) for t in samples]
    assert values == sorted(values)


def test_transition_table():
    assert QueueRules.can_transition(QueueStatus.SCHEDULED, QueueStatus.IN_PROGRESS)
    assert QueueRules.can_transition(QueueStatus.SCHEDULED, QueueStatus.NO_SHOW)
    assert QueueRules.can_transition(QueueStatus.SCHEDULED, QueueStatus.EMERGENCY)
    assert QueueRules.can_transition(QueueStatus.IN_PROGRESS, QueueStatus.COMPLETED)
    assert QueueRules.can_transition(QueueStatus.EMERGENCY, QueueStatus.IN_PROGRESS)
    assert QueueRules.can_transition(QueueStatus.EMERGENCY, QueueStatus.COMPLETED)

    assert not QueueRules.can_transition(QueueStatus.COMPLETED, QueueStatus.SCHEDULED)
    assert not QueueRules.can_transition(QueueStatus.IN_PROGRESS, QueueStatus.SCHEDULED)
    assert not QueueRules.can_transition(QueueStatus.NO_SHOW, QueueStatus.IN_PROGRESS)


def test_same_state_is_always_allowed():
    for status in QueueStatus:
        assert QueueRules.can_transition(status, status)


def test_terminal_states():
    assert QueueRules.is_terminal(QueueStatus.COMPLETED)
    assert QueueRules.is_terminal(QueueStatus.NO_SHOW)
    assert not QueueRules.is_terminal(QueueStatus.SCHEDULED)
    assert set(ALLOWED_TRANSITIONS) == set(QueueStatus)


def test_parse_status():
    assert parse_status("in-progress") is QueueStatus.IN_PROGRESS
    assert parse_status("in_progress") is None
    assert parse_status(None) is None


def test_order_puts_emergency_first_then_priority_then_time():
    a = make_entry(1, "scheduled", time(9, 0))
    b = make_entry(2, "in-progress", time(9, 30))
    c = make_entry(3, "emergency", time(10, 0))
    d = make_entry(4, "completed", time(8, 0))
    e = make_entry(5, "no-show", time(7, 0))

    ordered = order_queue([a, b, c, d, e])

    assert [x.id for x in ordered] == [3, 2, 1, 4, 5]


def test_order_puts_missing_times_last_within_group():
    walk_in = make_entry(1, "scheduled", None)
    late = make_entry(2, "scheduled", time(11, 0))
    early = make_entry(3, "scheduled", time(9, 0))

    assert [x.id for x in order_queue([walk_in, late, early])] == [3, 2, 1]


def test_order_is_stable_for_ties():
    first = make_entry(1, "scheduled", None)
    second = make_entry(2, "scheduled", None)
    third = make_entry(3, "scheduled", None)

    assert [x.id for x in order_queue([first, second, third])] == [1, 2, 3]
    assert [x.id for x in order_queue([third, first, second])] == [3, 1, 2]


def test_order_is_deterministic():
    entries = [
        make_entry(1, "scheduled", time(9, 0)),
        make_entry(2, "emergency", None),
        make_entry(3, "in-progress", time(8, 15)),
        make_entry(4, "completed", time(7, 45)),
    ]
    first = [x.id for x in order_queue(entries)]
    for _ in range(5):
        assert [x.id for x in order_queue(entries)] == first


def test_stats_are_consistent():
    queue = [
        make_entry(1, "scheduled", time(9, 0), waiting=10),
        make_entry(2, "in-progress", time(9, 30), waiting=20),
        make_entry(3, "completed", time(8, 0), waiting=40),
        make_entry(4, "emergency", None, waiting=5),
        make_entry(5, "no-show", None, waiting=0),
    ]
    stats = compute_stats(queue)

    assert stats.total == len(queue)
    assert stats.waiting == 1
    assert stats.in_consultation == 1
    assert stats.completed == 1
    assert stats.emergency == 1
    assert stats.waiting + stats.in_consultation + stats.completed <= stats.total
    assert stats.average_wait_minutes == 15


def test_stats_for_empty_queue():
    stats = compute_stats([])
    assert stats.total == 0
    assert stats.average_wait_minutes == 0


def test_system_clock_is_timezone_aware():
    now = Clock().now()

    assert now.tzinfo is not None
    assert now.utcoffset() is not None
    assert Clock().today() == Clock().now().date()


def test_fixed_clock_reports_its_date():
    clock = Clock(datetime(2026, 3, 2, 23, 45, tzinfo=timezone.utc))

    assert clock.today() == date(2026, 3, 2)
    assert Clock(datetime(2026, 3, 2, 9, 0)).now().tzinfo is not None


def test_waiting_minutes_across_offsets():
    created = datetime(2026, 3, 2, 8, 0, tzinfo=timezone.utc)
    now = datetime(2026, 3, 2, 14, 0, tzinfo=timezone(timedelta(hours=5, minutes=30)))

    assert QueueRules.waiting_minutes(created, now) == 30
