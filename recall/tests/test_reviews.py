import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
from django.db import DatabaseError, OperationalError

from recall.data.models import CardSchedule, DailyAggregate, ReviewHistoryEntry, StudyStreak
from recall.domain.errors import Conflict, InvalidInput, NotFound, StorageFailure
from recall.services import (
    daily_activity,
    due_cards,
    get_streak,
    initialize_schedule,
    remove_card_schedule,
    submit_review,
)

pytestmark = pytest.mark.django_db


def snapshot(card_id):
    s = CardSchedule.objects.get(card_id=card_id)
    return (s.ease_factor, s.interval_days, s.repetitions, s.next_due_at, s.last_reviewed_at)


# Lifecycle

def test_initialize_schedule_creates_defaults(user_id, now):
    card_id = uuid.uuid4()
    state = initialize_schedule(user_id, card_id, now=now)

    row = CardSchedule.objects.get(card_id=card_id)
    assert row.user_id == user_id
    assert (row.ease_factor, row.interval_days, row.repetitions, row.box_number) == (2.5, 1, 0, 1)
    assert row.next_due_at == now + timedelta(days=1)
    assert row.last_reviewed_at is None
    assert state.next_due_at == row.next_due_at


def test_initialize_schedule_twice_conflicts(user_id, new_card, now):
    with pytest.raises(Conflict):
        initialize_schedule(user_id, new_card, now=now)
    assert CardSchedule.objects.filter(card_id=new_card).count() == 1


def test_initialize_schedule_rejects_malformed_ids(user_id):
    with pytest.raises(InvalidInput):
        initialize_schedule(user_id, "not-a-uuid")


# Review transaction

def test_submit_review_applies_all_four_writes(user_id, new_card, now):
    state = submit_review(user_id, new_card, 4, 45, now=now)

    assert (state.ease_factor, state.interval_days, state.repetitions) == (2.5, 1, 1)
    row = CardSchedule.objects.get(card_id=new_card)
    assert row.repetitions == 1
    assert row.box_number == 2
    assert row.last_reviewed_at == now
    assert row.next_due_at == now + timedelta(days=1)

    entry = ReviewHistoryEntry.objects.get(card_id=new_card)
    assert entry.user_id == user_id
    assert entry.quality == 4
    assert entry.was_correct is True
    assert (entry.ease_factor_before, entry.ease_factor_after) == (2.5, 2.5)
    assert (entry.interval_before, entry.interval_after) == (1, 1)
    assert (entry.box_before, entry.box_after) == (1, 2)
    assert entry.response_time_seconds == 45
    assert entry.reviewed_at == now

    agg = DailyAggregate.objects.get(user_id=user_id, date=now.date())
    assert agg.cards_reviewed == 1
    assert agg.total_answers == 1
    assert agg.correct_answers == 1
    assert agg.cards_learned == 1
    assert agg.study_time_minutes == 1

    streak = StudyStreak.objects.get(user_id=user_id)
    assert (streak.current_streak, streak.longest_streak) == (1, 1)
    assert streak.last_study_date == now.date()


def test_incorrect_review_counts_answer_but_not_correct(user_id, new_card, now):
    submit_review(user_id, new_card, 1, None, now=now)

    agg = DailyAggregate.objects.get(user_id=user_id, date=now.date())
    assert agg.total_answers == 1
    assert agg.correct_answers == 0
    assert agg.cards_learned == 0
    assert agg.study_time_minutes == 0
    assert ReviewHistoryEntry.objects.get(card_id=new_card).was_correct is False


def test_same_day_reviews_share_one_aggregate_row(user_id, new_card, now):
    other = uuid.uuid4()
    initialize_schedule(user_id, other, now=now)

    submit_review(user_id, new_card, 5, 61, now=now)
    submit_review(user_id, new_card, 2, 10, now=now + timedelta(minutes=5))
    submit_review(user_id, other, 3, 120, now=now + timedelta(minutes=9))

    agg = DailyAggregate.objects.get(user_id=user_id, date=now.date())
    assert agg.cards_reviewed == 3
    assert agg.total_answers == 3
    assert agg.correct_answers == 2
    # first passing review of each card
    assert agg.cards_learned == 2
    # 61s -> 2, 10s -> 1, 120s -> 2
    assert agg.study_time_minutes == 5
    assert StudyStreak.objects.get(user_id=user_id).current_streak == 1


def test_streak_grows_across_consecutive_days(user_id, new_card, now):
    submit_review(user_id, new_card, 5, now=now)
    submit_review(user_id, new_card, 5, now=now + timedelta(days=1))
    submit_review(user_id, new_card, 5, now=now + timedelta(days=2))

    streak = get_streak(user_id)
    assert (streak.current_streak, streak.longest_streak) == (3, 3)

    submit_review(user_id, new_card, 5, now=now + timedelta(days=6))
    streak = get_streak(user_id)
    assert (streak.current_streak, streak.longest_streak) == (1, 3)
    assert DailyAggregate.objects.filter(user_id=user_id).count() == 4


def test_review_sequence_reaches_six_day_interval(user_id, new_card, now):
    first = submit_review(user_id, new_card, 4, now=now)
    second = submit_review(user_id, new_card, 4, now=now + timedelta(days=1))
    third = submit_review(user_id, new_card, 5, now=now + timedelta(days=7))

    assert first.interval_days == 1
    assert second.interval_days == 6
    assert third.interval_days == 16
    assert third.ease_factor == pytest.approx(2.6)


def test_review_of_missing_card_leaves_aggregates_untouched(user_id, now):
    with pytest.raises(NotFound):
        submit_review(user_id, uuid.uuid4(), 4, 30, now=now)

    assert not DailyAggregate.objects.filter(user_id=user_id).exists()
    assert not StudyStreak.objects.filter(user_id=user_id).exists()
    assert not ReviewHistoryEntry.objects.exists()


def test_review_of_another_users_card_is_not_found(user_id, new_card, now):
    before = snapshot(new_card)
    with pytest.raises(NotFound):
        submit_review(uuid.uuid4(), new_card, 4, now=now)
    assert snapshot(new_card) == before


@pytest.mark.parametrize("quality, latency", [(6, None), (-1, None), (3, -5), (3, 2.5)])
def test_invalid_input_changes_nothing(user_id, new_card, now, quality, latency):
    before = snapshot(new_card)
    with pytest.raises(InvalidInput):
        submit_review(user_id, new_card, quality, latency, now=now)

    assert snapshot(new_card) == before
    assert not ReviewHistoryEntry.objects.exists()
    assert not DailyAggregate.objects.exists()


def test_storage_failure_rolls_back_every_write(user_id, new_card, now, monkeypatch):
    def broken(*args, **kwargs):
        raise DatabaseError("disk full")

    monkeypatch.setattr("recall.services.reviews.record_daily_activity", broken)
    before = snapshot(new_card)

    with pytest.raises(StorageFailure) as exc_info:
        submit_review(user_id, new_card, 5, 30, now=now)

    assert isinstance(exc_info.value.__cause__, DatabaseError)
    assert snapshot(new_card) == before
    assert not ReviewHistoryEntry.objects.exists()
    assert not DailyAggregate.objects.exists()
    assert not StudyStreak.objects.exists()


def test_streak_write_failure_rolls_back_schedule(user_id, new_card, now, monkeypatch):
    def broken(*args, **kwargs):
        raise DatabaseError("constraint violated")

    monkeypatch.setattr("recall.services.reviews.save_streak", broken)
    before = snapshot(new_card)

    with pytest.raises(StorageFailure):
        submit_review(user_id, new_card, 5, now=now)

    assert snapshot(new_card) == before
    assert not ReviewHistoryEntry.objects.exists()
    assert not DailyAggregate.objects.exists()


def test_locked_schedule_is_reported_as_conflict(user_id, new_card, now, monkeypatch):
    def locked(*args, **kwargs):
        raise OperationalError("could not obtain lock on row in relation")

    monkeypatch.setattr("recall.services.reviews.lock_schedule", locked)

    with pytest.raises(Conflict):
        submit_review(user_id, new_card, 4, now=now)
    assert not ReviewHistoryEntry.objects.exists()
    assert not StudyStreak.objects.exists()


def test_broken_connection_while_locking_is_storage_failure(user_id, new_card, now, monkeypatch):
    def disconnected(*args, **kwargs):
        raise DatabaseError("server closed the connection unexpectedly")

    monkeypatch.setattr("recall.services.reviews.lock_schedule", disconnected)
    before = snapshot(new_card)

    with pytest.raises(StorageFailure):
        submit_review(user_id, new_card, 4, now=now)
    assert snapshot(new_card) == before
    assert not ReviewHistoryEntry.objects.exists()
    assert not DailyAggregate.objects.exists()


def test_operational_error_other_than_locking_is_storage_failure(user_id, new_card, now, monkeypatch):
    def missing(*args, **kwargs):
        raise OperationalError("no such table: recall_card_schedule")

    monkeypatch.setattr("recall.services.reviews.lock_schedule", missing)

    with pytest.raises(StorageFailure):
        submit_review(user_id, new_card, 4, now=now)
    assert not StudyStreak.objects.exists()


# Card deletion cascade

def test_remove_card_schedule_keeps_user_aggregates(user_id, new_card, now):
    submit_review(user_id, new_card, 4, 30, now=now)
    submit_review(user_id, new_card, 4, 30, now=now + timedelta(days=1))

    assert remove_card_schedule(user_id, new_card) == 2

    assert not CardSchedule.objects.filter(card_id=new_card).exists()
    assert not ReviewHistoryEntry.objects.filter(card_id=new_card).exists()
    assert DailyAggregate.objects.filter(user_id=user_id).count() == 2
    assert StudyStreak.objects.filter(user_id=user_id).exists()

    with pytest.raises(NotFound):
        remove_card_schedule(user_id, new_card)


def test_remove_card_schedule_requires_owner(user_id, new_card):
    with pytest.raises(NotFound):
        remove_card_schedule(uuid.uuid4(), new_card)
    assert CardSchedule.objects.filter(card_id=new_card).exists()


# Read side

def test_due_cards_ordered_most_overdue_first(user_id, now):
    early, late = uuid.uuid4(), uuid.uuid4()
    tied = sorted([uuid.uuid4(), uuid.uuid4()])
    future = uuid.uuid4()

    initialize_schedule(user_id, late, now=now - timedelta(days=2))
    initialize_schedule(user_id, early, now=now - timedelta(days=5))
    for card_id in reversed(tied):
        initialize_schedule(user_id, card_id, now=now - timedelta(days=3))
    initialize_schedule(user_id, future, now=now)
    initialize_schedule(uuid.uuid4(), uuid.uuid4(), now=now - timedelta(days=9))

    due = due_cards(user_id, now)

    assert [d.card_id for d in due] == [early, *tied, late]
    assert due[0].schedule.next_due_at == now - timedelta(days=4)
    assert [d.card_id for d in due_cards(user_id, now, limit=2)] == [early, tied[0]]


def test_due_cards_boundary_is_inclusive(user_id, new_card, now):
    due_at = now + timedelta(days=1)
    assert [d.card_id for d in due_cards(user_id, due_at)] == [new_card]
    assert due_cards(user_id, due_at - timedelta(seconds=1)) == []


def test_due_cards_reflects_reviews(user_id, new_card, now):
    submit_review(user_id, new_card, 0, now=now)
    assert [d.card_id for d in due_cards(user_id, now + timedelta(days=1))] == [new_card]

    submit_review(user_id, new_card, 5, now=now + timedelta(days=1))
    assert due_cards(user_id, now + timedelta(days=1, hours=1)) == []


def test_due_cards_rejects_naive_timestamp(user_id):
    with pytest.raises(InvalidInput):
        due_cards(user_id, datetime(2026, 1, 1))


def test_get_streak_without_reviews_is_not_found(user_id):
    with pytest.raises(NotFound):
        get_streak(user_id)


def test_daily_activity_returns_inclusive_range(user_id, new_card, now):
    for offset in range(4):
        submit_review(user_id, new_card, 4, 30, now=now + timedelta(days=offset))

    rows = daily_activity(
        user_id,
        (now + timedelta(days=1)).date(),
        (now + timedelta(days=2)).date(),
    )
    assert [r.date for r in rows] == [
        (now + timedelta(days=1)).date(),
        (now + timedelta(days=2)).date(),
    ]

    with pytest.raises(InvalidInput):
        daily_activity(user_id, now.date(), (now - timedelta(days=1)).date())


@pytest.mark.parametrize("as_of", ["2026-01-01T00:00:00Z", date(2026, 1, 1), 1767225600])
def test_due_cards_rejects_non_datetime_as_of(user_id, as_of):
    with pytest.raises(InvalidInput):
        due_cards(user_id, as_of)


@pytest.mark.parametrize("value", [None, "2026-03-28", datetime(2026, 3, 28, tzinfo=timezone.utc)])
def test_daily_activity_rejects_non_date_bounds(user_id, value):
    with pytest.raises(InvalidInput):
        daily_activity(user_id, value, date(2026, 3, 29))
    with pytest.raises(InvalidInput):
        daily_activity(user_id, date(2026, 3, 27), value)


def test_submit_review_rejects_string_timestamp(user_id, new_card):
    before = snapshot(new_card)
    with pytest.raises(InvalidInput):
        submit_review(user_id, new_card, 4, now="2026-03-28T12:00:00Z")
    assert snapshot(new_card) == before
    assert not ReviewHistoryEntry.objects.exists()


def test_initialize_schedule_rejects_date_as_timestamp(user_id):
    with pytest.raises(InvalidInput):
        initialize_schedule(user_id, uuid.uuid4(), now=date(2026, 3, 28))
    assert not CardSchedule.objects.exists()


# Learned cards

def test_card_that_failed_first_counts_as_learned_once(user_id, new_card, now):
    submit_review(user_id, new_card, 1, now=now)
    submit_review(user_id, new_card, 4, now=now + timedelta(minutes=1))
    # relapse and recovery of an already learned card
    submit_review(user_id, new_card, 0, now=now + timedelta(minutes=2))
    submit_review(user_id, new_card, 5, now=now + timedelta(minutes=3))

    agg = DailyAggregate.objects.get(user_id=user_id, date=now.date())
    assert agg.total_answers == 4
    assert agg.correct_answers == 2
    assert agg.cards_learned == 1


def test_learned_card_relearned_next_day_is_not_counted_again(user_id, new_card, now):
    submit_review(user_id, new_card, 4, now=now)
    submit_review(user_id, new_card, 2, now=now + timedelta(days=1))
    submit_review(user_id, new_card, 4, now=now + timedelta(days=2))

    learned = dict(DailyAggregate.objects.filter(user_id=user_id)
                   .values_list("date", "cards_learned"))
    assert learned == {
        now.date(): 1,
        (now + timedelta(days=1)).date(): 0,
        (now + timedelta(days=2)).date(): 0,
    }
