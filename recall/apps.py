from django.apps import AppConfig
from django.conf import settings


class RecallConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "recall"
    verbose_name = "Spaced repetition scheduling"

    def ready(self):
        from .utils.logs import configure_structlog

        configure_structlog(level=settings.RECALL_LOG_LEVEL, debug=settings.DEBUG)
