"""Core app configuration and startup checks (domain settings sanity)."""

from django.apps import AppConfig
from django.core.checks import register, Error


def check_learninghub_settings(app_configs, **kwargs) -> list[Error]:
    """Validate the LEARNINGHUB settings block used by the domain services."""
    from django.conf import settings

    conf = getattr(settings, "LEARNINGHUB", None)
    if not isinstance(conf, dict):
        return [Error("LEARNINGHUB settings dict is missing.", id="core.E001")]
    errors = []
    key_length = conf.get("ENROLLMENT_KEY_LENGTH")
    if not isinstance(key_length, int) or key_length < 4:
        errors.append(Error("ENROLLMENT_KEY_LENGTH must be an integer >= 4.", id="core.E002"))
    max_score = conf.get("DEFAULT_MAX_SCORE")
    if not isinstance(max_score, int) or max_score <= 0:
        errors.append(Error("DEFAULT_MAX_SCORE must be a positive integer.", id="core.E003"))
    page_size = conf.get("SUBMISSIONS_PAGE_SIZE")
    max_page_size = conf.get("SUBMISSIONS_MAX_PAGE_SIZE")
    if not (isinstance(page_size, int) and isinstance(max_page_size, int) and 0 < page_size <= max_page_size):
        errors.append(Error("Submission page sizes must satisfy 0 < SIZE <= MAX_SIZE.", id="core.E004"))
    return errors


class CoreConfig(AppConfig):
    """AppConfig registering a system check for the LEARNINGHUB settings block."""
    default_auto_field = "django.db.models.BigAutoField"
    name = "LearningHubApp.core"

    def ready(self):
        """Register the settings check with Django's check framework."""
        register(check_learninghub_settings)
