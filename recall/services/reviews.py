import math

from django.db import DEFAULT_DB_ALIAS, DatabaseError, IntegrityError, transaction
from django.utils import timezone
import structlog
from ..config import SECONDS_PER_MINUTE
from ..data.models import CardSchedule
from ..data.repos import (
    append_history,
    create_schedule,
    delete_card_schedule,
    has_passed_before,
    is_lock_contention,
    lock_schedule,
    lock_streak,
    record_daily_activity,
    save_schedule,
    save_streak,
)
from ..domain.errors import Conflict, InvalidInput, NotFound, StorageFailure
from ..domain.logic import initial_schedule, is_correct, schedule_next, validate_quality
from ..domain.streaks import advance_streak
from ..utils.ids import as_uuid
from ..utils.time import require_aware, study_day, to_utc_iso

logger = structlog.get_logger()

def validate_latency(latency_seconds):
    if latency_seconds is None:
        return None
    if isinstance(latency_seconds, bool) or not isinstance(latency_seconds, int):
        raise InvalidInput(f"latency_seconds must be an integer, got {latency_seconds!r}")
    if latency_seconds < 0:
        raise InvalidInput(f"latency_seconds must not be negative, got {latency_seconds}")
    return latency_seconds

def study_minutes(latency_seconds):
    if not latency_seconds:
        return 0
    return math.ceil(latency_seconds / SECONDS_PER_MINUTE)

def submit_review(user_id, card_id, quality, latency_seconds=None, *,
                  now=None, using=DEFAULT_DB_ALIAS):
    """
    Record one recall attempt and reschedule the card.

    The schedule update, the history entry, the user's daily aggregate and
    the user's streak are written in a single transaction: either all four
    change or none do. The card's schedule row stays locked until commit,
    so a second review of the same card either waits or fails with
    Conflict (see RECALL_LOCK_NOWAIT).

    Returns the card's new ScheduleState.
    """
    user_id = as_uuid(user_id, "user_id")
    card_id = as_uuid(card_id, "card_id")
    logger.info("review_received",
        user_id=str(user_id),
        card_id=str(card_id),
        quality=quality,
        latency_seconds=latency_seconds,
    )

    quality = validate_quality(quality)
    latency_seconds = validate_latency(latency_seconds)
    now = require_aware(timezone.now() if now is None else now, "now")
    today = study_day(now)
    correct = is_correct(quality)

    try:
        with transaction.atomic(using=using):
            # Serialize schedule update per (user, card)
            try:
                sched = lock_schedule(user_id, card_id, using=using)
            except CardSchedule.DoesNotExist:
                raise NotFound(
                    f"card {card_id} has no schedule owned by user {user_id}"
                ) from None

            prior = sched.to_state()
            nxt = schedule_next(prior, quality, now)
            # First pass of a card that has never passed before
            learned = (
                correct
                and prior.repetitions == 0
                and not has_passed_before(user_id, card_id, using=using)
            )

            streak = lock_streak(user_id, using=using)
            streak_next = advance_streak(streak.to_state(), today)

            save_schedule(sched, nxt, using=using)
            append_history(
                user_id, card_id, int(quality), correct, prior, nxt,
                latency_seconds, now, using=using,
            )
            record_daily_activity(
                user_id, today, correct, learned, study_minutes(latency_seconds),
                using=using,
            )
            save_streak(streak, streak_next, using=using)
    except DatabaseError as exc:
        if is_lock_contention(exc):
            logger.warning("review_conflict",
                user_id=str(user_id),
                card_id=str(card_id),
                error=str(exc),
            )
            raise Conflict(f"card {card_id} is being reviewed concurrently") from exc
        logger.error("review_storage_failure",
            user_id=str(user_id),
            card_id=str(card_id),
            error=str(exc),
        )
        raise StorageFailure("review could not be saved; nothing was changed") from exc

    logger.info("review_scheduled",
        user_id=str(user_id),
        card_id=str(card_id),
        quality=int(quality),
        correct=correct,
        ease_factor=nxt.ease_factor,
        interval_days=nxt.interval_days,
        repetitions=nxt.repetitions,
        next_due_utc=to_utc_iso(nxt.next_due_at),
        current_streak=streak_next.current_streak,
    )
    return nxt

def initialize_schedule(user_id, card_id, *, now=None, using=DEFAULT_DB_ALIAS):
    """Create the default schedule for a newly created card."""
    user_id = as_uuid(user_id, "user_id")
    card_id = as_uuid(card_id, "card_id")
    state = initial_schedule(timezone.now() if now is None else now)

    try:
        create_schedule(user_id, card_id, state, using=using)
    except IntegrityError as exc:
        raise Conflict(f"card {card_id} already has a schedule") from exc
    except DatabaseError as exc:
        raise StorageFailure("schedule could not be created") from exc

    logger.info("schedule_initialized",
        user_id=str(user_id),
        card_id=str(card_id),
        next_due_utc=to_utc_iso(state.next_due_at),
    )
    return state

def remove_card_schedule(user_id, card_id, *, using=DEFAULT_DB_ALIAS):
    """
    Cascade for card deletion: drop the schedule and the card's review
    history. Daily aggregates and the streak belong to the user and stay.
    """
    user_id = as_uuid(user_id, "user_id")
    card_id = as_uuid(card_id, "card_id")

    try:
        with transaction.atomic(using=using):
            schedules, history = delete_card_schedule(user_id, card_id, using=using)
    except DatabaseError as exc:
        raise StorageFailure("schedule could not be removed") from exc

    if not schedules:
        raise NotFound(f"card {card_id} has no schedule owned by user {user_id}")

    logger.info("schedule_removed",
        user_id=str(user_id),
        card_id=str(card_id),
        history_deleted=history,
    )
    return history
