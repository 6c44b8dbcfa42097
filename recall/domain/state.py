from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..config import DEFAULT_EASE_FACTOR, DEFAULT_INTERVAL_DAYS, MIN_BOX


@dataclass(frozen=True)
class ScheduleState:
    next_due_at: datetime
    ease_factor: float = DEFAULT_EASE_FACTOR
    interval_days: int = DEFAULT_INTERVAL_DAYS
    repetitions: int = 0
    box_number: int = MIN_BOX
    last_reviewed_at: Optional[datetime] = None


@dataclass(frozen=True)
class StreakState:
    current_streak: int = 0
    longest_streak: int = 0
    last_study_date: Optional[date] = None


@dataclass(frozen=True)
class DueCard:
    card_id: object
    schedule: ScheduleState
