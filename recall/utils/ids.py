import uuid

from ..domain.errors import InvalidInput

def as_uuid(value, field="id"):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise InvalidInput(f"{field} must be a UUID, got {value!r}") from None
