from .queries import daily_activity, due_cards, get_streak
from .reviews import initialize_schedule, remove_card_schedule, submit_review

__all__ = [
    "daily_activity",
    "due_cards",
    "get_streak",
    "initialize_schedule",
    "remove_card_schedule",
    "submit_review",
]
