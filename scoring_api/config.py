# scoring_api/config.py
from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _get_env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, str(default))
    try:
        return float(raw)
    except ValueError:
        return default


# -------------------------
# Tournament backend (rosters in, results out). OPTIONAL
# -------------------------
CTMS_API_BASE_URL: str = _get_env("CTMS_API_BASE_URL", "http://localhost:5000/api")
CTMS_API_TOKEN: str = _get_env("CTMS_API_TOKEN")

# If 0, matches run on request-supplied or demo rosters and results stay local
CTMS_ENABLED: bool = _get_env("CTMS_ENABLED", "0") == "1"

HTTP_TIMEOUT_SECONDS: int = _get_env_int("HTTP_TIMEOUT_SECONDS", 12)


# -------------------------
# Sessions
# -------------------------
SESSION_TTL_SECONDS: int = _get_env_int("SESSION_TTL_SECONDS", 6 * 3600)

# Pacing delay before deferred transitions (innings switch). 0 = immediate
TRANSITION_DELAY_SECONDS: float = _get_env_float("TRANSITION_DELAY_SECONDS", 0.0)


LOG_LEVEL: str = _get_env("LOG_LEVEL", "INFO").upper()


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def validate_config() -> None:
    if not CTMS_API_BASE_URL.startswith("http"):
        raise RuntimeError("CTMS_API_BASE_URL must start with http/https")

    # If enabled, enforce token
    if CTMS_ENABLED:
        if not CTMS_API_TOKEN or CTMS_API_TOKEN in {"DUMMY_TOKEN", "PASTE_YOUR_TOKEN_HERE"}:
            raise RuntimeError("CTMS_API_TOKEN missing/placeholder but CTMS_ENABLED=1")

    if SESSION_TTL_SECONDS <= 0:
        raise RuntimeError("SESSION_TTL_SECONDS must be positive")

    if HTTP_TIMEOUT_SECONDS <= 0:
        raise RuntimeError("HTTP_TIMEOUT_SECONDS must be positive")

    if TRANSITION_DELAY_SECONDS < 0:
        raise RuntimeError("TRANSITION_DELAY_SECONDS must not be negative")
