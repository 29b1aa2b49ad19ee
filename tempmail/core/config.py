import os
from functools import lru_cache

from tempmail.mail.addresses import parse_mail_domains


def _get_bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    """Simple settings loaded from environment.

    Uses dotenv if present (optional) and falls back to sensible defaults.
    """

    def __init__(self) -> None:
        # Attempt to load .env if python-dotenv is available
        try:
            from dotenv import load_dotenv  # type: ignore

            load_dotenv()
        except Exception:
            pass

        self.DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./tempmail.db")
        self.REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.API_KEY: str = os.getenv("API_KEY", "dev-local-key")
        self.MAIL_DOMAINS: list[str] = parse_mail_domains(
            os.getenv("MAIL_DOMAINS") or os.getenv("MAIL_DOMAIN")
        )
        self.RESEND_API_KEY: str = os.getenv("RESEND_API_KEY") or os.getenv("RESEND_TOKEN") or ""
        self.MAX_RAW_MESSAGE_BYTES: int = int(os.getenv("MAX_RAW_MESSAGE_BYTES", str(10 * 1024 * 1024)))
        self.AUTO_CREATE_SCHEMA: bool = _get_bool_env("AUTO_CREATE_SCHEMA", True)
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
        self.PORT: int = int(os.getenv("PORT", "8000"))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
