"""
Configuration management with environment variable support.

All settings can be overridden via environment variables.
Automatically loads .env file if present.
"""

import os
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo
from dotenv import load_dotenv

# Load .env file from project root (one level up from lightsync/)
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Logging configuration
LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = os.getenv("LOG_LEVEL", "INFO")

# User store (flat JSON file, list of user records)
USERS_FILE: str = os.getenv("USERS_FILE", "users.json")

# Token authentication
JWT_SECRET: str | None = os.getenv("JWT_SECRET")
JWT_ALGORITHM: str = "HS256"
JWT_EXPIRE_HOURS: int = int(os.getenv("JWT_EXPIRE_HOURS", "2"))

# Password hashing cost factor
BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

# Brightness used when a user has none stored (0-255)
DEFAULT_BRIGHTNESS: int = 255

# IANA zone for time-of-day (empty = server local time)
TIMEZONE: str | None = os.getenv("TIMEZONE") or None

# Comma-separated list of allowed CORS origins
CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")


def get_timezone() -> ZoneInfo | None:
    """
    Resolve TIMEZONE into a tzinfo.

    Returns:
        ZoneInfo for the configured zone, or None for server local time

    Raises:
        ValueError: If TIMEZONE names an unknown zone
    """
    if not TIMEZONE:
        return None

    try:
        return ZoneInfo(TIMEZONE)
    except Exception as e:
        raise ValueError(f"Invalid TIMEZONE '{TIMEZONE}': {e}") from e


def parse_cors_origins() -> list[str]:
    """
    Parse CORS_ORIGINS environment variable into a list of origins.

    Format: "https://a.example,https://b.example" or "*"

    Returns:
        List of origin strings (never empty)
    """
    origins = [o.strip() for o in CORS_ORIGINS.split(",") if o.strip()]
    return origins or ["*"]
