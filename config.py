import logging
import os
import secrets
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent

load_dotenv(BASE_DIR / ".env")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
TEMPLATES_DIR = Path(os.getenv("TEMPLATES_DIR", BASE_DIR / "templates"))


def session_secret_key() -> str:
    """
    Secret used to sign the session cookie.

    Falls back to a random per-process key when SESSION_SECRET_KEY is unset,
    which is fine for development only.
    """
    key = os.getenv("SESSION_SECRET_KEY")
    if key:
        return key
    logger.warning(
        "SESSION_SECRET_KEY not set in .env. Using a temporary key for this process."
    )
    return secrets.token_urlsafe(32)
