import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _env_list(name: str, default: str = "") -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    secret_key: str = os.getenv("DJANGO_SECRET_KEY", "dev-insecure-learninghub-key")
    debug: bool = _env_bool("DJANGO_DEBUG")
    allowed_hosts: list[str] = field(default_factory=lambda: _env_list("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1"))
    db_engine: str = os.getenv("DB_ENGINE", "django.db.backends.sqlite3")
    db_name: str = os.getenv("DB_NAME", "learninghub.sqlite3")
    db_host: str = os.getenv("DB_HOST", "")
    db_port: str = os.getenv("DB_PORT", "")
    db_user: str = os.getenv("DB_USER", "")
    db_password: str = os.getenv("DB_PASSWORD", "")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    enrollment_key_length: int = int(os.getenv("ENROLLMENT_KEY_LENGTH", "8"))
    submission_rate: str = os.getenv("SUBMISSION_RATE", "10/hour")

settings = Settings()
