from datetime import timedelta

import structlog

from .state import StreakState

logger = structlog.get_logger()

def advance_streak(streak: StreakState, today) -> StreakState:
    """Count ``today`` as a study day.

    Safe to call for every review: a second call on the same day changes
    nothing.
    """
    last = streak.last_study_date
    current = streak.current_streak
    last_study_date = today

    if last is None:
        current = 1
    elif last == today:
        pass
    elif last == today - timedelta(days=1):
        current += 1
    elif last > today:
        logger.warning("streak_clock_skew",
            last_study_date=last.isoformat(),
            today=today.isoformat(),
        )
        last_study_date = last
    else:
        current = 1

    return StreakState(
        current_streak=current,
        longest_streak=max(streak.longest_streak, current),
        last_study_date=last_study_date,
    )
