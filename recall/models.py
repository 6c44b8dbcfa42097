from .data.models import (  # noqa: F401
    CardSchedule,
    DailyAggregate,
    ReviewHistoryEntry,
    StudyStreak,
)
