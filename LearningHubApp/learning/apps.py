"""Learning app configuration (registers signal handlers)."""

from django.apps import AppConfig

class LearningConfig(AppConfig):
    """AppConfig for the learning domain (assignments, submissions, grades)."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "LearningHubApp.learning"

    def ready(self):
        """Import signal handlers to connect Django model signals."""
        from LearningHubApp.learning import signals  # noqa: F401
