# scoring_api/lifecycle.py
from __future__ import annotations

import copy
import logging
import random
from typing import Any, Iterable, List, Optional, Union

from scoring_api.errors import InvalidLineupError, MatchCompletedError
from scoring_api.models import (
    MAX_WICKETS,
    Batsman,
    Bowler,
    Match,
    MatchResult,
    RosterPlayer,
    TeamInnings,
)

logger = logging.getLogger(__name__)

RosterLike = Iterable[Union[RosterPlayer, dict]]

TOSS_CALLS = ("heads", "tails")
TOSS_DECISIONS = ("bat", "bowl")


def _to_roster(players: RosterLike) -> List[RosterPlayer]:
    out: List[RosterPlayer] = []
    for p in players:
        out.append(p if isinstance(p, RosterPlayer) else RosterPlayer.from_dict(p))
    return out


def _require_phase(match: Match, *phases: str) -> None:
    if match.match_completed:
        raise MatchCompletedError("Match is already completed")
    if match.phase not in phases:
        raise ValueError(f"Not allowed in phase {match.phase} (expected {', '.join(phases)})")


# -----------------------
# Setup + toss
# -----------------------
def new_match(
    team1: str,
    team2: str,
    roster1: RosterLike,
    roster2: RosterLike,
    *,
    venue: str = "",
    tournament: str = "",
) -> Match:
    """
    Creates a Match waiting for the toss.
    Venue and tournament are display-only.
    """
    t1 = (team1 or "").strip()
    t2 = (team2 or "").strip()
    if not t1 or not t2:
        raise ValueError("Both team names are required")
    if t1 == t2:
        raise ValueError("team1 and team2 must be different")

    return Match(
        team1=TeamInnings(name=t1, players=_to_roster(roster1), is_batting=True),
        team2=TeamInnings(name=t2, players=_to_roster(roster2), is_batting=False),
        venue=venue,
        tournament=tournament,
    )


def call_toss(match: Match, caller: str, call: str) -> Match:
    _require_phase(match, "PRE_TOSS", "TOSS_CALLED")
    call = (call or "").strip().lower()
    if call not in TOSS_CALLS:
        raise ValueError(f"Toss call must be heads or tails, got: {call!r}")
    match.team(caller)

    new = copy.deepcopy(match)
    new.toss_caller = caller
    new.toss_call = call
    new.phase = "TOSS_CALLED"
    return new


def _draw_toss(rng: Optional[Any] = None) -> str:
    """
    Uniform heads/tails, independent of the call.
    OS entropy when available, else the module-level generator.
    """
    if rng is None:
        try:
            value = random.SystemRandom().random()
        except NotImplementedError:
            value = random.random()
    else:
        value = rng.random()
    return "heads" if value >= 0.5 else "tails"


def flip_toss(match: Match, rng: Optional[Any] = None) -> Match:
    _require_phase(match, "TOSS_CALLED")

    new = copy.deepcopy(match)
    new.toss_result = _draw_toss(rng)
    if new.toss_result == new.toss_call:
        new.toss_winner = new.toss_caller
    else:
        new.toss_winner = new.other_team(new.toss_caller).name
    new.phase = "TOSS_RESOLVED"

    new.add_event(
        "toss",
        f"{new.toss_caller} called {new.toss_call}, it is {new.toss_result}. {new.toss_winner} wins the toss.",
    )
    logger.info("Toss: %s, winner %s", new.toss_result, new.toss_winner)
    return new


def choose_toss_decision(match: Match, decision: str) -> Match:
    _require_phase(match, "TOSS_RESOLVED")
    decision = (decision or "").strip().lower()
    if decision not in TOSS_DECISIONS:
        raise ValueError(f"Toss decision must be bat or bowl, got: {decision!r}")

    new = copy.deepcopy(match)
    winner = new.team(new.toss_winner)
    loser = new.other_team(new.toss_winner)
    winner.is_batting = decision == "bat"
    loser.is_batting = not winner.is_batting

    new.toss_decision = decision
    new.phase = "TEAM_SELECTION"
    new.add_event("toss", f"{new.toss_winner} won the toss and chose to {decision} first")
    return new


# -----------------------
# Team selection
# -----------------------
def select_lineup(match: Match, striker_id: int, non_striker_id: int, bowler_id: int) -> Match:
    """
    Opening pair + opening bowler for the innings about to start.

    Rules:
    - two distinct players from the batting roster (first one takes strike)
    - one bowler/all-rounder from the bowling roster
    """
    _require_phase(match, "TEAM_SELECTION")

    if striker_id is None or non_striker_id is None or bowler_id is None:
        raise InvalidLineupError("Two opening batsmen and an opening bowler are required")
    if striker_id == non_striker_id:
        raise InvalidLineupError("Please select two different batsmen")

    batting = match.batting_team
    bowling = match.bowling_team

    b1 = batting.player(striker_id)
    b2 = batting.player(non_striker_id)
    if b1 is None or b2 is None:
        raise InvalidLineupError(f"Opening batsmen must belong to {batting.name}")

    bowler = bowling.player(bowler_id)
    if bowler is None or not bowler.can_bowl:
        raise InvalidLineupError(f"Opening bowler must be a bowler or all-rounder from {bowling.name}")

    new = copy.deepcopy(match)
    new.batsmen = [
        Batsman(id=b1.player_id, name=b1.name, is_on_strike=True),
        Batsman(id=b2.player_id, name=b2.name, is_on_strike=False),
    ]
    new.bowler = Bowler(id=bowler.player_id, name=bowler.name)
    new.pending = []
    new.phase = "IN_PROGRESS"

    new.add_event("innings_start", f"{batting.name} will bat. Openers: {b1.name} and {b2.name}")
    new.add_event("innings_start", f"Opening bowler: {bowler.name}")
    logger.info("Innings %s started: %s batting", new.current_innings, batting.name)
    return new


# -----------------------
# Innings transitions (in-place on an owned Match)
# -----------------------
def mark_all_out(match: Match) -> None:
    """Blocks further deliveries until end_innings runs."""
    team = match.batting_team
    match.phase = "INNINGS_BREAK"
    match.pending = ["INNINGS_END"]
    match.add_event("all_out", f"All out! {team.name} scored {team.score}/{team.wickets}")
    logger.info("All out: %s %s/%s", team.name, team.score, team.wickets)


def close_innings(match: Match) -> None:
    batting = match.batting_team
    bowling = match.bowling_team

    if match.current_innings == 1:
        match.target = batting.score + 1
        match.add_event(
            "innings_end",
            f"First innings over! {batting.name}: {batting.score}/{batting.wickets}. "
            f"{bowling.name} needs {match.target} runs to win",
        )
        logger.info("Innings 1 closed at %s/%s, target %s", batting.score, batting.wickets, match.target)

        match.team1.is_batting = not match.team1.is_batting
        match.team2.is_batting = not match.team2.is_batting
        match.batsmen = []
        match.bowler = None
        match.is_free_hit = False
        match.pending = []
        match.current_innings = 2
        match.phase = "TEAM_SELECTION"
        return

    # Second innings closed short of the target: side batting first wins
    _finish(match, winner=bowling, margin_type="runs", margin=match.target - batting.score - 1)


def finish_chase(match: Match) -> None:
    """Target reached. No-op if the match is already complete."""
    if match.match_completed:
        return
    batting = match.batting_team
    _finish(match, winner=batting, margin_type="wickets", margin=MAX_WICKETS - batting.wickets)


def _finish(match: Match, *, winner: TeamInnings, margin_type: str, margin: int) -> None:
    match.match_completed = True
    match.winning_team = winner.name
    match.margin_type = margin_type
    match.result_margin = margin
    match.pending = []
    match.phase = "COMPLETE"

    result = match_result(match)
    match.add_event("result", f"MATCH RESULT: {result.summary}!")
    logger.info("Match complete: %s", result.summary)


# -----------------------
# Public transitions
# -----------------------
def end_innings(match: Match) -> Match:
    _require_phase(match, "IN_PROGRESS", "INNINGS_BREAK")
    new = copy.deepcopy(match)
    close_innings(new)
    return new


def complete_match(match: Match) -> Match:
    """Idempotent: a completed match is returned unchanged."""
    if match.match_completed:
        return match
    if match.current_innings != 2:
        raise ValueError("Only a second-innings chase can complete the match")
    new = copy.deepcopy(match)
    finish_chase(new)
    return new


def declare_innings(match: Match) -> Match:
    """
    Manual/early termination. Confirmation is the caller's concern.

    - innings 1: same as end_innings (target = score + 1)
    - innings 2: the side batting first wins by runs (a chase that reached
      the target has already completed the match)
    """
    _require_phase(match, "IN_PROGRESS", "INNINGS_BREAK")
    batting = match.batting_team

    new = copy.deepcopy(match)
    new.add_event("declaration", f"{batting.name} innings ended at {batting.score}/{batting.wickets}")
    close_innings(new)
    return new


def match_result(match: Match) -> MatchResult:
    if not match.match_completed or match.margin_type is None:
        raise ValueError("Match is not complete")

    # batting-first side listed first
    second = match.batting_team
    first = match.bowling_team
    return MatchResult(
        winning_team=match.winning_team,
        margin_type=match.margin_type,
        margin_value=match.result_margin,
        final_scores=[
            {"team": t.name, "runs": t.score, "wickets": t.wickets, "overs": t.overs_text}
            for t in (first, second)
        ],
    )
