"""
Unit tests for the spaced repetition scheduler.

Tests:
- Interval ladder with weak-topic pull-back
- Ebbinghaus retention monotonicity
- Urgency buckets
- Schedule eligibility, ordering and due filtering
"""

from datetime import timedelta

import pytest

from prep_engine.core.errors import InvalidInputError
from prep_engine.core.models import Urgency
from prep_engine.study.spaced_repetition import (
    SpacedRepetitionScheduler,
    determine_urgency,
    interval_index,
    memory_strength,
    next_review_date,
    retention_probability,
    revision_duration,
)


@pytest.fixture
def scheduler(clock):
    return SpacedRepetitionScheduler(clock)


class TestIntervals:
    """Tests for the review ladder."""

    @pytest.mark.parametrize(
        "review_number,accuracy,expected_days",
        [
            (0, 90, 1),
            (1, 90, 3),
            (2, 90, 7),
            (3, 90, 15),
            (5, 90, 60),
            (12, 90, 60),  # capped at the last step
            (3, 70, 7),  # one step back below 75%
            (3, 55, 3),  # two steps back below 60%
            (1, 40, 1),  # never below the first step
        ],
    )
    def test_next_review_date(self, now, review_number, accuracy, expected_days):
        assert next_review_date(now, review_number, accuracy) == now + timedelta(
            days=expected_days
        )

    def test_interval_index_rejects_bad_accuracy(self):
        with pytest.raises(InvalidInputError):
            interval_index(1, 120)


class TestRetention:
    """Tests for the forgetting curve."""

    def test_memory_strength(self):
        assert memory_strength(90, 3) == pytest.approx(5 + 9 + 6)

    def test_fresh_review_is_full_retention(self):
        assert retention_probability(0, 50, 0) == pytest.approx(100.0)

    def test_strictly_decreasing_in_days(self):
        values = [retention_probability(d, 80, 2) for d in range(0, 60)]
        assert all(a > b for a, b in zip(values, values[1:]))

    def test_strictly_increasing_in_accuracy(self):
        values = [retention_probability(10, acc, 2) for acc in range(0, 101, 5)]
        assert all(a < b for a, b in zip(values, values[1:]))

    def test_rejects_negative_days(self):
        with pytest.raises(InvalidInputError):
            retention_probability(-1, 80, 2)


class TestUrgency:
    @pytest.mark.parametrize(
        "retention,days,expected",
        [
            (20, 1, Urgency.CRITICAL),
            (90, 31, Urgency.CRITICAL),
            (45, 1, Urgency.HIGH),
            (90, 16, Urgency.HIGH),
            (65, 1, Urgency.MEDIUM),
            (90, 8, Urgency.MEDIUM),
            (90, 7, Urgency.LOW),
        ],
    )
    def test_buckets(self, retention, days, expected):
        assert determine_urgency(retention, days) == expected

    def test_revision_duration(self):
        assert revision_duration(20, 10) == 30
        assert revision_duration(45, 10) == 20
        assert revision_duration(60, 10) == 15
        assert revision_duration(90, 10) == 10
        assert revision_duration(90, 80) == 5


class TestScheduler:
    """Tests for schedule generation."""

    def test_forty_day_old_topic_is_critical(self, scheduler, make_record, now):
        record = make_record(accuracy=90, attempts=35, last_practiced=now - timedelta(days=40))

        entry = scheduler.entry_for(record, now)

        assert entry.review_number == 3
        assert entry.days_since_review == 40
        # S = 20, R = 100 * e^-2
        assert entry.retention_probability == pytest.approx(13.53, abs=0.01)
        assert entry.urgency == Urgency.CRITICAL

    def test_unpracticed_topic_assumed_thirty_days_old(self, scheduler, make_record, now):
        entry = scheduler.entry_for(make_record(accuracy=80, attempts=6), now)

        assert entry.days_since_review == 30
        assert entry.last_reviewed == now - timedelta(days=30)

    def test_skips_topics_with_too_few_attempts(self, scheduler, make_record):
        records = [make_record(topic="A", accuracy=80, attempts=4)]

        assert scheduler.schedule(records) == []

    def test_sorted_by_urgency_then_retention(self, scheduler, make_record, now):
        records = [
            make_record(topic="Fresh", accuracy=95, attempts=20, last_practiced=now),
            make_record(
                topic="Old", accuracy=80, attempts=20, last_practiced=now - timedelta(days=45)
            ),
            make_record(
                topic="Mid", accuracy=80, attempts=20, last_practiced=now - timedelta(days=10)
            ),
            make_record(
                topic="Older", accuracy=60, attempts=20, last_practiced=now - timedelta(days=45)
            ),
        ]

        entries = scheduler.schedule(records)

        assert [e.key.topic for e in entries] == ["Older", "Old", "Mid", "Fresh"]
        assert entries[0].urgency == Urgency.CRITICAL
        assert entries[-1].urgency == Urgency.LOW

    def test_due_today(self, scheduler, make_record, now):
        records = [
            make_record(topic="Due", accuracy=90, attempts=5, last_practiced=now - timedelta(days=2)),
            make_record(topic="Later", accuracy=90, attempts=5, last_practiced=now),
        ]

        due = scheduler.due_today(scheduler.schedule(records))

        assert [e.key.topic for e in due] == ["Due"]
