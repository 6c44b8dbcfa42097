import logging

import structlog

def resolve_level(level):
    """Numeric level for a name like "info"; unknown names fall back to INFO."""
    numeric = logging.getLevelName(str(level).upper())
    return numeric if isinstance(numeric, int) else logging.INFO

def configure_structlog(level="INFO", debug=False):
    """Route structlog events through stdlib-level filtering with UTC timestamps."""
    renderer = structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(resolve_level(level)),
        # capture_logs() in tests needs uncached loggers
        cache_logger_on_first_use=False,
    )
