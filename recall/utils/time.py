from datetime import date, datetime, timedelta, timezone as dt_tz

from ..domain.errors import InvalidInput

# All day boundaries (due dates, streaks, daily aggregates) are UTC days.
STUDY_TZ = dt_tz.utc

def require_aware(dt, field="timestamp"):
    if not isinstance(dt, datetime) or dt.tzinfo is None or dt.utcoffset() is None:
        raise InvalidInput(f"{field} must be a timezone-aware datetime, got {dt!r}")
    return dt.astimezone(STUDY_TZ)

def require_date(value, field="date"):
    # datetime is a date subclass but does not compare with plain dates
    if not isinstance(value, date) or isinstance(value, datetime):
        raise InvalidInput(f"{field} must be a date, got {value!r}")
    return value

def add_days(dt, days):
    return dt.astimezone(STUDY_TZ) + timedelta(days=days)

def study_day(dt):
    return dt.astimezone(STUDY_TZ).date()

def to_utc_iso(dt):
    return dt.astimezone(STUDY_TZ).isoformat()
