from typing import Any

from django.conf import settings

DEFAULTS: dict[str, Any] = {
    "ENROLLMENT_KEY_LENGTH": 8,
    "DEFAULT_MAX_SCORE": 100,
    "SUBMISSIONS_PAGE_SIZE": 20,
    "SUBMISSIONS_MAX_PAGE_SIZE": 100,
}


def get_setting(name: str) -> Any:
    """Read a LEARNINGHUB setting, falling back to the built-in default."""
    return getattr(settings, "LEARNINGHUB", {}).get(name, DEFAULTS[name])
