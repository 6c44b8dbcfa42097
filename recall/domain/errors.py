class ReviewError(Exception):
    """Base class for failures that abort a review submission."""

    code = "review_error"
    status_code = 500

    def __init__(self, detail=None):
        self.detail = detail or self.__class__.__doc__
        super().__init__(self.detail)


class InvalidInput(ReviewError):
    """Input rejected; the caller must correct it."""

    code = "invalid_input"
    status_code = 400


class NotFound(ReviewError):
    """No schedule or streak exists for this user."""

    code = "not_found"
    status_code = 404


class Conflict(ReviewError):
    """Card schedule is being modified concurrently."""

    code = "conflict"
    status_code = 409


class StorageFailure(ReviewError):
    """Storage error; no changes were applied."""

    code = "storage_failure"
    status_code = 500
