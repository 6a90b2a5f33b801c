# main.py (live match scoring)
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from scoring_api import ledger
from scoring_api.cache import delete as cache_delete, get as cache_get, make_key as cache_key, set as cache_set
from scoring_api.config import (
    CTMS_ENABLED,
    SESSION_TTL_SECONDS,
    configure_logging,
    validate_config,
)
from scoring_api.ctms_client import CtmsClientError, load_roster, publish_result
from scoring_api.errors import (
    AllOutError,
    InvalidLineupError,
    InvalidSelectionError,
    MatchCompletedError,
    NoStrikerError,
    PendingInputError,
    ScoringError,
)
from scoring_api.lifecycle import new_match
from scoring_api.models import MatchResult, RosterPlayer
from scoring_api.session import MatchSession

logger = logging.getLogger(__name__)

SESSION_NAMESPACE = "match-session"

# -----------------------
# App
# -----------------------
app = FastAPI(
    title="Cricket Live Scoring API",
    version="0.1.0",
    description="Ball-by-ball live scoring engine: toss, innings, extras, free hits, undo and results",
)


@app.on_event("startup")
def on_startup():
    configure_logging()
    validate_config()


@app.get("/health")
def health_check():
    return {"status": "ok", "time": datetime.utcnow().isoformat() + "Z"}


# -----------------------
# Helpers
# -----------------------
def _report_result(match_id: str, result: MatchResult) -> None:
    if not CTMS_ENABLED:
        return
    try:
        publish_result(match_id, result)
    except CtmsClientError as e:
        # Result stays readable from /result; the backend can be retried by the caller
        logger.warning("Could not publish result for %s: %s", match_id, e)


def _get_session(match_id: str) -> MatchSession:
    session = cache_get(cache_key(SESSION_NAMESPACE, match_id), touch_ttl_seconds=SESSION_TTL_SECONDS)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Match not found: {match_id}")
    return session


def _call(fn, *args):
    """Runs a session operation, mapping engine errors to HTTP errors."""
    try:
        return fn(*args)
    except (MatchCompletedError, PendingInputError, NoStrikerError, AllOutError) as e:
        raise HTTPException(status_code=409, detail=str(e))
    except (InvalidSelectionError, InvalidLineupError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ScoringError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _state_response(session: MatchSession, match=None, **extra: Any) -> Dict[str, Any]:
    m = match if match is not None else session.state()
    resp: Dict[str, Any] = {"match_id": session.match_id, "state": m.to_dict()}
    resp.update(extra)
    return resp


def _delivery_response(session: MatchSession, outcome) -> Dict[str, Any]:
    match, delivery = outcome
    return _state_response(session, match, delivery=delivery.to_dict() if delivery else None)


# -----------------------
# Match sessions
# -----------------------
class PlayerIn(BaseModel):
    player_id: int
    name: str
    role: Literal["batsman", "bowler", "all-rounder", "wicketkeeper"] = "batsman"
    batting_style: Optional[str] = None
    bowling_style: Optional[str] = None


class CreateMatchRequest(BaseModel):
    team1: str = Field(..., description="First team name")
    team2: str = Field(..., description="Second team name")
    team1_id: Optional[int] = Field(None, description="Backend team id (roster fetch)")
    team2_id: Optional[int] = Field(None, description="Backend team id (roster fetch)")
    team1_players: List[PlayerIn] = Field(default_factory=list)
    team2_players: List[PlayerIn] = Field(default_factory=list)
    venue: str = ""
    tournament: str = ""
    match_id: Optional[str] = Field(None, description="Backend match id; generated if omitted")


def _roster(players: List[PlayerIn], team_id: Optional[int], side: int) -> List[RosterPlayer]:
    if players:
        return [RosterPlayer(**p.model_dump()) for p in players]
    return load_roster(team_id, side)


@app.post("/api/matches")
def create_match(req: CreateMatchRequest):
    try:
        match = new_match(
            req.team1,
            req.team2,
            _roster(req.team1_players, req.team1_id, 1),
            _roster(req.team2_players, req.team2_id, 2),
            venue=req.venue,
            tournament=req.tournament,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    match_id = (req.match_id or "").strip() or uuid.uuid4().hex
    key = cache_key(SESSION_NAMESPACE, match_id)
    if cache_get(key) is not None:
        raise HTTPException(status_code=409, detail=f"Match already in progress: {match_id}")

    session = MatchSession(match_id, match, on_result=_report_result)
    cache_set(key, session, ttl_seconds=SESSION_TTL_SECONDS)
    logger.info("Created match %s: %s vs %s", match_id, match.team1.name, match.team2.name)
    return _state_response(session)


@app.get("/api/matches/{match_id}")
def get_match(match_id: str):
    return _state_response(_get_session(match_id))


@app.delete("/api/matches/{match_id}")
def delete_match(match_id: str):
    if not cache_delete(cache_key(SESSION_NAMESPACE, match_id)):
        raise HTTPException(status_code=404, detail=f"Match not found: {match_id}")
    return {"match_id": match_id, "deleted": True}


@app.get("/api/matches/{match_id}/ledger")
def get_ledger(match_id: str, innings: Optional[int] = None, last: Optional[int] = None, this_over: bool = False):
    """
    Ball-by-ball ledger, oldest first.
    last=N returns the N most recent deliveries (newest first); this_over=true
    only the over in progress.
    """
    m = _get_session(match_id).state()
    if this_over:
        deliveries = ledger.current_over(m)
    elif last is not None:
        deliveries = ledger.recent(m, last)
    else:
        deliveries = ledger.innings_deliveries(m, innings) if innings is not None else list(m.ledger)
    return {"match_id": match_id, "count": len(deliveries), "deliveries": [d.to_dict() for d in deliveries]}


@app.get("/api/matches/{match_id}/result")
def get_result(match_id: str):
    session = _get_session(match_id)
    try:
        return {"match_id": match_id, "result": session.result().to_dict()}
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.post("/api/matches/{match_id}/publish")
def publish(match_id: str):
    """Re-sends the result to the tournament backend (e.g. after a failed automatic publish)."""
    session = _get_session(match_id)
    try:
        result = session.result()
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))

    try:
        publish_result(match_id, result)
    except CtmsClientError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"match_id": match_id, "published": True, "result": result.to_dict()}


# -----------------------
# Toss + lineup
# -----------------------
class TossCallRequest(BaseModel):
    caller: str = Field(..., description="Team making the call")
    call: Literal["heads", "tails"]


class TossDecisionRequest(BaseModel):
    decision: Literal["bat", "bowl"]


class LineupRequest(BaseModel):
    striker_id: int
    non_striker_id: int
    bowler_id: int


@app.post("/api/matches/{match_id}/toss/call")
def toss_call(match_id: str, req: TossCallRequest):
    session = _get_session(match_id)
    return _state_response(session, _call(session.call_toss, req.caller, req.call))


@app.post("/api/matches/{match_id}/toss/flip")
def toss_flip(match_id: str):
    session = _get_session(match_id)
    return _state_response(session, _call(session.flip_toss))


@app.post("/api/matches/{match_id}/toss/decision")
def toss_decision(match_id: str, req: TossDecisionRequest):
    session = _get_session(match_id)
    return _state_response(session, _call(session.choose_toss_decision, req.decision))


@app.post("/api/matches/{match_id}/lineup")
def lineup(match_id: str, req: LineupRequest):
    session = _get_session(match_id)
    return _state_response(
        session, _call(session.select_lineup, req.striker_id, req.non_striker_id, req.bowler_id)
    )


# -----------------------
# Scoring
# -----------------------
class RunRequest(BaseModel):
    runs: Literal[0, 1, 2, 3, 4, 6]


class ExtraRequest(BaseModel):
    kind: Literal["wide", "noball", "bye", "legbye"]


@app.post("/api/matches/{match_id}/run")
def score_run(match_id: str, req: RunRequest):
    session = _get_session(match_id)
    return _delivery_response(session, _call(session.record_run, req.runs))


@app.post("/api/matches/{match_id}/extra")
def score_extra(match_id: str, req: ExtraRequest):
    session = _get_session(match_id)
    return _delivery_response(session, _call(session.record_extra, req.kind))


@app.post("/api/matches/{match_id}/wicket")
def score_wicket(match_id: str):
    session = _get_session(match_id)
    return _delivery_response(session, _call(session.record_wicket))


# -----------------------
# Rotation
# -----------------------
class PlayerChoice(BaseModel):
    player_id: int


@app.post("/api/matches/{match_id}/swap-strike")
def swap_strike(match_id: str):
    session = _get_session(match_id)
    return _state_response(session, _call(session.swap_strike))


@app.post("/api/matches/{match_id}/batsman")
def new_batsman(match_id: str, req: PlayerChoice):
    session = _get_session(match_id)
    return _state_response(session, _call(session.select_new_batsman, req.player_id))


@app.post("/api/matches/{match_id}/bowler")
def new_bowler(match_id: str, req: PlayerChoice):
    session = _get_session(match_id)
    return _state_response(session, _call(session.select_new_bowler, req.player_id))


@app.post("/api/matches/{match_id}/bowler/keep")
def keep_bowler(match_id: str):
    session = _get_session(match_id)
    return _state_response(session, _call(session.keep_current_bowler))


@app.post("/api/matches/{match_id}/end-over")
def end_over(match_id: str):
    session = _get_session(match_id)
    return _state_response(session, _call(session.end_over))


# -----------------------
# Innings end + undo
# -----------------------
class EndInningsRequest(BaseModel):
    confirm: bool = Field(False, description="Must be true: ends the innings early")


@app.post("/api/matches/{match_id}/end-innings")
def end_innings(match_id: str, req: EndInningsRequest):
    if not req.confirm:
        raise HTTPException(status_code=400, detail="Ending an innings early requires confirm=true")
    session = _get_session(match_id)
    return _state_response(session, _call(session.declare_innings))


@app.post("/api/matches/{match_id}/undo")
def undo(match_id: str):
    session = _get_session(match_id)
    return _state_response(session, _call(session.undo))
