import math

from .enums import Quality
from .errors import InvalidInput
from .state import ScheduleState
from ..config import (
    EASE_PRECISION,
    FIXED_INTERVALS,
    MAX_BOX,
    MAX_QUALITY,
    MIN_BOX,
    MIN_EASE_FACTOR,
    MIN_QUALITY,
    PASSING_QUALITY,
)
from ..utils.time import add_days, require_aware

def validate_quality(quality) -> Quality:
    # bool is an int subclass but never a rating
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidInput(f"quality must be an integer, got {quality!r}")
    if not MIN_QUALITY <= quality <= MAX_QUALITY:
        raise InvalidInput(
            f"quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}"
        )
    return Quality(quality)

def is_correct(quality: int) -> bool:
    return quality >= PASSING_QUALITY

def next_ease_factor(ease_factor: float, quality: int) -> float:
    miss = MAX_QUALITY - quality
    delta = 0.1 - miss * (0.08 + miss * 0.02)
    return max(MIN_EASE_FACTOR, round(ease_factor + delta, EASE_PRECISION))

def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))

def next_interval(repetitions: int, interval_days: int, ease_factor: float) -> int:
    if repetitions in FIXED_INTERVALS:
        return FIXED_INTERVALS[repetitions]
    # A corrupted interval of 0 must not schedule the card for "now" forever
    return max(1, round_half_up(interval_days * ease_factor))

def next_box(box_number: int, correct: bool) -> int:
    if not correct:
        return MIN_BOX
    return min(MAX_BOX, max(MIN_BOX, box_number) + 1)

def schedule_next(prior: ScheduleState, quality: int, now) -> ScheduleState:
    """Apply one SM-2 step to ``prior`` for a recall rated ``quality``.

    The ease factor is updated for every rating, including failed ones, so a
    card that keeps lapsing grows its intervals more slowly after it is
    relearned. Failed recalls restart the repetition count at zero with a
    one day interval.
    """
    quality = validate_quality(quality)
    now = require_aware(now, "now")

    correct = is_correct(quality)
    ease = next_ease_factor(prior.ease_factor, quality)

    if correct:
        repetitions = prior.repetitions + 1
        interval = next_interval(repetitions, prior.interval_days, ease)
    else:
        repetitions = 0
        interval = 1

    return ScheduleState(
        ease_factor=ease,
        interval_days=interval,
        repetitions=repetitions,
        box_number=next_box(prior.box_number, correct),
        next_due_at=add_days(now, interval),
        last_reviewed_at=now,
    )

def initial_schedule(now) -> ScheduleState:
    now = require_aware(now, "now")
    return ScheduleState(next_due_at=add_days(now, FIXED_INTERVALS[1]))
