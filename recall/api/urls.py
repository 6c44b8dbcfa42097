from django.urls import path
from .views import CardScheduleView, DailyStatsView, DueCardsView, ReviewView, StreakView

urlpatterns = [
    path("reviews", ReviewView.as_view(), name="review"),
    path("users/<uuid:user_id>/due-cards", DueCardsView.as_view(), name="due-cards"),
    path(
        "users/<uuid:user_id>/cards/<uuid:card_id>/schedule",
        CardScheduleView.as_view(),
        name="card-schedule",
    ),
    path("users/<uuid:user_id>/streak", StreakView.as_view(), name="streak"),
    path("users/<uuid:user_id>/daily-stats", DailyStatsView.as_view(), name="daily-stats"),
]
