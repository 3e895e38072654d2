"""
Security and Key Generation Utilities
"""

import os
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

# Configuration
DAEMON_KEY_EXPIRE_MINUTES = int(os.getenv("DAEMON_KEY_EXPIRE_MINUTES", "720"))

# Prepended to keys managed internally so they never collide with user API keys
INTERNAL_KEY_IDENTIFIER = "i_"
DAEMON_SECRET_LENGTH = 40

_SECRET_ALPHABET = string.ascii_letters + string.digits


def utcnow() -> datetime:
    """Timezone-aware current UTC time"""
    return datetime.now(timezone.utc)


def generate_daemon_secret() -> str:
    """Generate a random daemon key secret"""
    random_part = "".join(
        secrets.choice(_SECRET_ALPHABET) for _ in range(DAEMON_SECRET_LENGTH)
    )
    return f"{INTERNAL_KEY_IDENTIFIER}{random_part}"


def daemon_key_expiry(now: Optional[datetime] = None) -> datetime:
    """Expiry timestamp for a key issued at `now`"""
    now = now or utcnow()
    return now + timedelta(minutes=DAEMON_KEY_EXPIRE_MINUTES)


def as_utc(value: datetime) -> datetime:
    """
    Treat naive datetimes as UTC
    SQLite hands back naive values even for timezone-aware columns
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def seconds_until(expires_at: datetime, now: datetime) -> float:
    """Signed seconds from `now` until `expires_at`; positive means still valid"""
    return (as_utc(expires_at) - as_utc(now)).total_seconds()


def mask_secret(secret: str) -> str:
    """Shorten a secret for log output"""
    return f"{secret[:8]}..."
