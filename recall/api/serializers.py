from rest_framework import serializers

from ..config import MAX_QUALITY, MIN_QUALITY
from ..utils.time import to_utc_iso

class ReviewInSerializer(serializers.Serializer):
    user_id = serializers.UUIDField()
    card_id = serializers.UUIDField()
    quality = serializers.IntegerField(min_value=MIN_QUALITY, max_value=MAX_QUALITY)
    latency_seconds = serializers.IntegerField(min_value=0, required=False, allow_null=True)

class DueQuerySerializer(serializers.Serializer):
    as_of = serializers.DateTimeField(required=False)  # ISO-8601
    limit = serializers.IntegerField(min_value=1, required=False)

class DailyStatsQuerySerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()

    def validate(self, attrs):
        if attrs["start"] > attrs["end"]:
            raise serializers.ValidationError("start must not be after end")
        return attrs

def schedule_payload(state):
    return {
        "ease_factor": state.ease_factor,
        "interval_days": state.interval_days,
        "repetitions": state.repetitions,
        "box_number": state.box_number,
        "next_due_at_utc": to_utc_iso(state.next_due_at),
        "last_reviewed_at_utc": (
            to_utc_iso(state.last_reviewed_at) if state.last_reviewed_at else None
        ),
    }

class DailyAggregateSerializer(serializers.Serializer):
    date = serializers.DateField()
    cards_reviewed = serializers.IntegerField()
    cards_learned = serializers.IntegerField()
    correct_answers = serializers.IntegerField()
    total_answers = serializers.IntegerField()
    study_time_minutes = serializers.IntegerField()
