from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from ..config import DEFAULT_EASE_FACTOR, DEFAULT_INTERVAL_DAYS, MIN_BOX, MIN_EASE_FACTOR
from ..domain.state import ScheduleState, StreakState

class CardSchedule(models.Model):
    user_id = models.UUIDField()
    card_id = models.UUIDField(unique=True)
    ease_factor = models.FloatField(default=DEFAULT_EASE_FACTOR)
    interval_days = models.PositiveIntegerField(default=DEFAULT_INTERVAL_DAYS)
    repetitions = models.PositiveIntegerField(default=0)
    box_number = models.PositiveSmallIntegerField(default=MIN_BOX)
    next_due_at = models.DateTimeField()  # UTC
    last_reviewed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["user_id", "next_due_at"], name="card_schedule_user_due_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(ease_factor__gte=MIN_EASE_FACTOR),
                name="card_schedule_ease_floor",
            ),
            models.CheckConstraint(
                condition=Q(interval_days__gte=1),
                name="card_schedule_interval_positive",
            ),
        ]

    def to_state(self):
        return ScheduleState(
            ease_factor=self.ease_factor,
            interval_days=self.interval_days,
            repetitions=self.repetitions,
            box_number=self.box_number,
            next_due_at=self.next_due_at,
            last_reviewed_at=self.last_reviewed_at,
        )

    def apply_state(self, state):
        self.ease_factor = state.ease_factor
        self.interval_days = state.interval_days
        self.repetitions = state.repetitions
        self.box_number = state.box_number
        self.next_due_at = state.next_due_at
        self.last_reviewed_at = state.last_reviewed_at

class ReviewHistoryEntry(models.Model):
    user_id = models.UUIDField()
    card_id = models.UUIDField()
    quality = models.SmallIntegerField()
    was_correct = models.BooleanField()
    ease_factor_before = models.FloatField()
    ease_factor_after = models.FloatField()
    interval_before = models.PositiveIntegerField()
    interval_after = models.PositiveIntegerField()
    box_before = models.PositiveSmallIntegerField()
    box_after = models.PositiveSmallIntegerField()
    response_time_seconds = models.PositiveIntegerField(null=True, blank=True)
    reviewed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["user_id", "reviewed_at"], name="review_history_user_time_idx"),
            models.Index(fields=["card_id", "reviewed_at"], name="review_history_card_time_idx"),
        ]

class DailyAggregate(models.Model):
    user_id = models.UUIDField()
    date = models.DateField()  # UTC day
    cards_reviewed = models.PositiveIntegerField(default=0)
    cards_learned = models.PositiveIntegerField(default=0)
    correct_answers = models.PositiveIntegerField(default=0)
    total_answers = models.PositiveIntegerField(default=0)
    study_time_minutes = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user_id", "date"], name="daily_aggregate_user_day"
            ),
        ]

class StudyStreak(models.Model):
    user_id = models.UUIDField(unique=True)
    current_streak = models.PositiveIntegerField(default=0)
    longest_streak = models.PositiveIntegerField(default=0)
    last_study_date = models.DateField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=Q(longest_streak__gte=F("current_streak")),
                name="study_streak_longest_covers_current",
            ),
        ]

    def to_state(self):
        return StreakState(
            current_streak=self.current_streak,
            longest_streak=self.longest_streak,
            last_study_date=self.last_study_date,
        )

    def apply_state(self, state):
        self.current_streak = state.current_streak
        self.longest_streak = state.longest_streak
        self.last_study_date = state.last_study_date
