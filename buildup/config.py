import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Force-load .env (reload-safe)
BASE_DIR = Path(__file__).resolve().parent.parent
load_dotenv(dotenv_path=BASE_DIR / ".env")


@dataclass(frozen=True)
class Settings:
    database_url: str
    key_id: str
    key_secret: str = field(repr=False)
    jwt_secret: str = field(repr=False)
    webhook_secret: Optional[str] = field(default=None, repr=False)
    jwt_expire_days: int = 7
    provider_timeout: float = 10.0
    log_level: str = "INFO"


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"{name} is not set. Check your .env file.")
    return value


@lru_cache
def get_settings() -> Settings:
    """Read the environment once per process."""
    return Settings(
        database_url=_require("DATABASE_URL"),
        key_id=os.getenv("KEY_ID", ""),
        key_secret=_require("KEY_SECRET"),
        jwt_secret=_require("JWT_SECRET"),
        webhook_secret=os.getenv("RAZORPAY_WEBHOOK_SECRET") or None,
        jwt_expire_days=int(os.getenv("JWT_EXPIRE_DAYS", "7")),
        provider_timeout=float(os.getenv("RAZORPAY_TIMEOUT", "10")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
