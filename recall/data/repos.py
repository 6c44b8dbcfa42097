from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, IntegrityError, OperationalError, transaction
from django.db.models import F
from .models import CardSchedule, DailyAggregate, ReviewHistoryEntry, StudyStreak

SCHEDULE_FIELDS = [
    "ease_factor", "interval_days", "repetitions", "box_number",
    "next_due_at", "last_reviewed_at", "updated_at",
]

# lock_not_available (NOWAIT), deadlock_detected, serialization_failure
LOCK_SQLSTATES = {"55P03", "40P01", "40001"}
# lock wait timeout, deadlock, NOWAIT
LOCK_MYSQL_ERRNOS = {1205, 1213, 3572}
LOCK_MESSAGES = ("database is locked", "database table is locked", "could not obtain lock")

def is_lock_contention(exc):
    """
    True when a database error means another transaction holds the rows
    we need, as opposed to a broken connection, a missing table, etc.
    """
    if not isinstance(exc, OperationalError):
        return False
    driver_exc = exc.__cause__ or exc
    code = getattr(driver_exc, "sqlstate", None) or getattr(driver_exc, "pgcode", None)
    if code in LOCK_SQLSTATES:
        return True
    args = getattr(driver_exc, "args", ())
    if args and args[0] in LOCK_MYSQL_ERRNOS:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in LOCK_MESSAGES)

def create_schedule(user_id, card_id, state, using=DEFAULT_DB_ALIAS):
    """
    Insert the schedule row for a new card.
    Raises IntegrityError if the card already has one.
    """
    with transaction.atomic(using=using):
        sched = CardSchedule(user_id=user_id, card_id=card_id)
        sched.apply_state(state)
        sched.save(using=using, force_insert=True)
    return sched

def lock_schedule(user_id, card_id, using=DEFAULT_DB_ALIAS):
    """
    Fetch the user's schedule row and lock it until the enclosing
    transaction ends. With RECALL_LOCK_NOWAIT a concurrent holder makes
    this raise DatabaseError instead of waiting.
    """
    return (CardSchedule.objects.using(using)
            .select_for_update(nowait=settings.RECALL_LOCK_NOWAIT)
            .get(user_id=user_id, card_id=card_id))

def save_schedule(sched, state, using=DEFAULT_DB_ALIAS):
    sched.apply_state(state)
    sched.save(using=using, update_fields=SCHEDULE_FIELDS)
    return sched

def append_history(user_id, card_id, quality, was_correct, before, after,
                   response_time_seconds, reviewed_at, using=DEFAULT_DB_ALIAS):
    return ReviewHistoryEntry.objects.using(using).create(
        user_id=user_id, card_id=card_id, quality=quality, was_correct=was_correct,
        ease_factor_before=before.ease_factor, ease_factor_after=after.ease_factor,
        interval_before=before.interval_days, interval_after=after.interval_days,
        box_before=before.box_number, box_after=after.box_number,
        response_time_seconds=response_time_seconds, reviewed_at=reviewed_at,
    )

def has_passed_before(user_id, card_id, using=DEFAULT_DB_ALIAS):
    return (ReviewHistoryEntry.objects.using(using)
            .filter(user_id=user_id, card_id=card_id, was_correct=True)
            .exists())

def record_daily_activity(user_id, day, correct, learned, minutes, using=DEFAULT_DB_ALIAS):
    """
    Add one answered review to the (user, day) aggregate.
    Increments happen in SQL so concurrent reviews never overwrite each other.
    """
    qs = DailyAggregate.objects.using(using).filter(user_id=user_id, date=day)
    increments = dict(
        cards_reviewed=F("cards_reviewed") + 1,
        total_answers=F("total_answers") + 1,
        correct_answers=F("correct_answers") + int(correct),
        cards_learned=F("cards_learned") + int(learned),
        study_time_minutes=F("study_time_minutes") + minutes,
    )
    if qs.update(**increments):
        return
    try:
        with transaction.atomic(using=using):
            DailyAggregate.objects.using(using).create(
                user_id=user_id, date=day,
                cards_reviewed=1, total_answers=1,
                correct_answers=int(correct), cards_learned=int(learned),
                study_time_minutes=minutes,
            )
    except IntegrityError:
        # Another review inserted today's row first
        qs.update(**increments)

def lock_streak(user_id, using=DEFAULT_DB_ALIAS):
    """Fetch (creating if missing) the user's streak row, locked for update."""
    streak, _ = (StudyStreak.objects.using(using)
                 .select_for_update()
                 .get_or_create(user_id=user_id))
    return streak

def save_streak(streak, state, using=DEFAULT_DB_ALIAS):
    streak.apply_state(state)
    streak.save(using=using)
    return streak

def get_streak(user_id, using=DEFAULT_DB_ALIAS):
    return StudyStreak.objects.using(using).get(user_id=user_id)

def delete_card_schedule(user_id, card_id, using=DEFAULT_DB_ALIAS):
    """
    Delete the card's schedule and its review history.
    Returns (schedules_deleted, history_deleted).
    """
    schedules, _ = (CardSchedule.objects.using(using)
                    .filter(user_id=user_id, card_id=card_id).delete())
    if not schedules:
        return 0, 0
    history, _ = (ReviewHistoryEntry.objects.using(using)
                  .filter(user_id=user_id, card_id=card_id).delete())
    return schedules, history

def due_schedules(user_id, as_of, limit=None, using=DEFAULT_DB_ALIAS):
    qs = (CardSchedule.objects.using(using)
          .filter(user_id=user_id, next_due_at__lte=as_of)
          .order_by("next_due_at", "card_id"))
    if limit is not None:
        qs = qs[:limit]
    return list(qs)

def daily_aggregates(user_id, start, end, using=DEFAULT_DB_ALIAS):
    return list(DailyAggregate.objects.using(using)
                .filter(user_id=user_id, date__gte=start, date__lte=end)
                .order_by("date"))
