from rest_framework.response import Response
from rest_framework.views import exception_handler
import structlog

from ..domain.errors import ReviewError

logger = structlog.get_logger()

def review_exception_handler(exc, context):
    """Render ReviewError subclasses; everything else goes to DRF's handler."""
    if not isinstance(exc, ReviewError):
        return exception_handler(exc, context)

    view = context.get("view")
    logger.info("review_error_response",
        view=type(view).__name__ if view else None,
        error=exc.code,
        detail=exc.detail,
        status=exc.status_code,
    )
    return Response({"error": exc.code, "detail": exc.detail}, status=exc.status_code)
