from django.db import DEFAULT_DB_ALIAS
from django.utils import timezone
from ..data.models import StudyStreak
from ..data.repos import daily_aggregates, due_schedules, get_streak as get_streak_row
from ..domain.errors import InvalidInput, NotFound
from ..domain.state import DueCard
from ..utils.ids import as_uuid
from ..utils.time import require_aware, require_date

def due_cards(user_id, as_of=None, *, limit=None, using=DEFAULT_DB_ALIAS):
    """
    Cards of ``user_id`` due at or before ``as_of`` (default: now), most
    overdue first. Ties are broken by card id so the order is stable.
    """
    user_id = as_uuid(user_id, "user_id")
    as_of = require_aware(timezone.now() if as_of is None else as_of, "as_of")
    if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 1):
        raise InvalidInput(f"limit must be a positive integer, got {limit!r}")

    return [
        DueCard(card_id=sched.card_id, schedule=sched.to_state())
        for sched in due_schedules(user_id, as_of, limit=limit, using=using)
    ]

def get_streak(user_id, *, using=DEFAULT_DB_ALIAS):
    user_id = as_uuid(user_id, "user_id")
    try:
        return get_streak_row(user_id, using=using).to_state()
    except StudyStreak.DoesNotExist:
        raise NotFound(f"user {user_id} has no study streak yet") from None

def daily_activity(user_id, start, end, *, using=DEFAULT_DB_ALIAS):
    """Daily aggregates for the inclusive UTC date range, oldest first."""
    user_id = as_uuid(user_id, "user_id")
    start = require_date(start, "start")
    end = require_date(end, "end")
    if start > end:
        raise InvalidInput("start must not be after end")
    return daily_aggregates(user_id, start, end, using=using)
