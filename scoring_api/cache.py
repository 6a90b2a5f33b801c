# scoring_api/cache.py
from __future__ import annotations

import threading
import time
from typing import Any, Dict, Optional, Tuple

# In-memory TTL store for live match sessions (single-instance deploys)
# key -> (expires_at_epoch, value)
_cache: Dict[str, Tuple[float, Any]] = {}
_lock = threading.Lock()


def make_key(namespace: str, key: str) -> str:
    """
    Enforce namespaced keys to avoid collisions.
    Example:
      make_key("match-session", "a1b2") -> "match-session:a1b2"
    """
    namespace = str(namespace).strip()
    key = str(key).strip()
    if not namespace or not key:
        raise ValueError("Cache namespace and key must be non-empty")
    return f"{namespace}:{key}"


def get(key: str, *, touch_ttl_seconds: Optional[int] = None) -> Optional[Any]:
    """
    Returns the live value or None. With touch_ttl_seconds the expiry is
    pushed out, so active sessions stay alive.
    """
    with _lock:
        item = _cache.get(key)
        if not item:
            return None

        expires_at, value = item
        now = time.time()
        if now > expires_at:
            _cache.pop(key, None)
            return None

        if touch_ttl_seconds and touch_ttl_seconds > 0:
            _cache[key] = (now + touch_ttl_seconds, value)
        return value


def set(key: str, value: Any, ttl_seconds: int = 60) -> None:
    if ttl_seconds <= 0:
        # Do not cache if TTL is invalid
        return
    with _lock:
        _cache[key] = (time.time() + ttl_seconds, value)


def delete(key: str) -> bool:
    with _lock:
        return _cache.pop(key, None) is not None


def clear() -> None:
    with _lock:
        _cache.clear()
