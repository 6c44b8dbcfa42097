from django.utils import timezone
from rest_framework import views, status
from rest_framework.response import Response
import structlog
import uuid
from ..domain.enums import QUALITY_LABELS
from ..services import (
    daily_activity,
    due_cards,
    get_streak,
    initialize_schedule,
    remove_card_schedule,
    submit_review,
)
from ..utils.time import to_utc_iso
from .serializers import (
    DailyAggregateSerializer,
    DailyStatsQuerySerializer,
    DueQuerySerializer,
    ReviewInSerializer,
    schedule_payload,
)

base_logger = structlog.get_logger()


def bind_request_logger():
    # Create a unique request_id
    return base_logger.bind(request_id=str(uuid.uuid4()))


class ReviewView(views.APIView):
    def post(self, request):
        logger = bind_request_logger()

        s = ReviewInSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        user_id = s.validated_data["user_id"]
        card_id = s.validated_data["card_id"]
        quality = s.validated_data["quality"]
        latency = s.validated_data.get("latency_seconds")

        state = submit_review(user_id, card_id, quality, latency)

        logger.info(
            "review_api_response",
            user_id=str(user_id),
            card_id=str(card_id),
            quality=quality,
            interval_days=state.interval_days,
            next_due_utc=to_utc_iso(state.next_due_at),
            status=status.HTTP_200_OK,
        )

        payload = schedule_payload(state)
        payload["quality_label"] = QUALITY_LABELS[quality]
        return Response(payload, status=status.HTTP_200_OK)


class DueCardsView(views.APIView):
    def get(self, request, user_id):
        logger = bind_request_logger()

        qs = DueQuerySerializer(data=request.query_params)
        qs.is_valid(raise_exception=True)
        as_of = qs.validated_data.get("as_of") or timezone.now()
        limit = qs.validated_data.get("limit")

        results = due_cards(user_id, as_of, limit=limit)

        logger.info(
            "due_cards_api_response",
            user_id=str(user_id),
            as_of_utc=to_utc_iso(as_of),
            card_count=len(results),
        )

        return Response(
            {
                "user_id": str(user_id),
                "as_of_utc": to_utc_iso(as_of),
                "cards": [
                    {"card_id": str(due.card_id), **schedule_payload(due.schedule)}
                    for due in results
                ],
            }
        )


class CardScheduleView(views.APIView):
    """Hooks for the card CRUD layer: create and cascade-delete a schedule."""

    def post(self, request, user_id, card_id):
        logger = bind_request_logger()
        state = initialize_schedule(user_id, card_id)
        logger.info("schedule_api_created", user_id=str(user_id), card_id=str(card_id))
        return Response(
            {"card_id": str(card_id), **schedule_payload(state)},
            status=status.HTTP_201_CREATED,
        )

    def delete(self, request, user_id, card_id):
        logger = bind_request_logger()
        history = remove_card_schedule(user_id, card_id)
        logger.info(
            "schedule_api_deleted",
            user_id=str(user_id),
            card_id=str(card_id),
            history_deleted=history,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


class StreakView(views.APIView):
    def get(self, request, user_id):
        logger = bind_request_logger()

        streak = get_streak(user_id)

        logger.info(
            "streak_api_response",
            user_id=str(user_id),
            current_streak=streak.current_streak,
            longest_streak=streak.longest_streak,
        )

        return Response(
            {
                "user_id": str(user_id),
                "current_streak": streak.current_streak,
                "longest_streak": streak.longest_streak,
                "last_study_date": (
                    streak.last_study_date.isoformat() if streak.last_study_date else None
                ),
            }
        )


class DailyStatsView(views.APIView):
    def get(self, request, user_id):
        logger = bind_request_logger()

        qs = DailyStatsQuerySerializer(data=request.query_params)
        qs.is_valid(raise_exception=True)
        start, end = qs.validated_data["start"], qs.validated_data["end"]

        rows = daily_activity(user_id, start, end)

        logger.info(
            "daily_stats_api_response",
            user_id=str(user_id),
            start=start.isoformat(),
            end=end.isoformat(),
            day_count=len(rows),
        )

        return Response(
            {
                "user_id": str(user_id),
                "days": DailyAggregateSerializer(rows, many=True).data,
            }
        )
