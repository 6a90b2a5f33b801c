# scoring_api/ctms_client.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from scoring_api.config import (
    CTMS_API_BASE_URL,
    CTMS_API_TOKEN,
    CTMS_ENABLED,
    HTTP_TIMEOUT_SECONDS,
)
from scoring_api.demo import demo_roster
from scoring_api.models import MatchResult, RosterPlayer

logger = logging.getLogger(__name__)


class CtmsClientError(Exception):
    """Raised when the tournament backend call fails or is misconfigured."""
    pass


def _url(path: str) -> str:
    return f"{CTMS_API_BASE_URL.rstrip('/')}/{path.lstrip('/')}"


def _headers() -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {CTMS_API_TOKEN}",
        "Content-Type": "application/json",
    }


def _check_enabled() -> None:
    if not CTMS_ENABLED:
        raise CtmsClientError("Tournament backend is disabled (set CTMS_ENABLED=1 to enable).")
    if not CTMS_API_TOKEN:
        raise CtmsClientError("CTMS_API_TOKEN is not configured")


def _decode(resp: requests.Response) -> Any:
    if resp.status_code != 200:
        raise CtmsClientError(f"HTTP {resp.status_code}: {resp.text}")
    try:
        return resp.json()
    except ValueError as e:
        raise CtmsClientError(f"Invalid JSON response: {e}") from e


def get_json(path: str, params: Optional[Dict[str, Any]] = None) -> Any:
    _check_enabled()
    try:
        resp = requests.get(_url(path), params=params, headers=_headers(), timeout=HTTP_TIMEOUT_SECONDS)
    except requests.RequestException as e:
        raise CtmsClientError(f"Network error: {e}") from e
    return _decode(resp)


def put_json(path: str, payload: Dict[str, Any]) -> Any:
    _check_enabled()
    try:
        resp = requests.put(_url(path), json=payload, headers=_headers(), timeout=HTTP_TIMEOUT_SECONDS)
    except requests.RequestException as e:
        raise CtmsClientError(f"Network error: {e}") from e
    return _decode(resp)


# -----------------------
# Rosters
# -----------------------
def fetch_team_roster(team_id: int) -> List[RosterPlayer]:
    data = get_json(f"teams/{team_id}")
    players = data.get("players") or []
    if not players:
        raise CtmsClientError(f"Team {team_id} has no players")
    return [RosterPlayer.from_dict(p) for p in players]


def load_roster(team_id: Optional[int], side: int) -> List[RosterPlayer]:
    """
    Backend roster when enabled and reachable, demo roster otherwise.
    side (1 or 2) picks which demo squad to fall back to.
    """
    if team_id is not None and CTMS_ENABLED:
        try:
            return fetch_team_roster(team_id)
        except (CtmsClientError, ValueError) as e:
            logger.warning("Roster fetch failed for team %s, using demo squad: %s", team_id, e)
    return demo_roster(side)


# -----------------------
# Results
# -----------------------
def publish_result(match_id: str, result: MatchResult) -> Any:
    payload = {
        "match_status": "completed",
        "result": result.to_dict(),
    }
    logger.info("Publishing result for match %s: %s", match_id, result.summary)
    return put_json(f"matches/{match_id}", payload)
