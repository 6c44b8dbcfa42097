import uuid
from datetime import datetime, timezone

import pytest

from recall.services import initialize_schedule


@pytest.fixture
def user_id():
    return uuid.uuid4()


@pytest.fixture
def now():
    # Last weekend of March: DST starts in Europe, UTC days are unaffected
    return datetime(2026, 3, 28, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def new_card(db, user_id, now):
    card_id = uuid.uuid4()
    initialize_schedule(user_id, card_id, now=now)
    return card_id
