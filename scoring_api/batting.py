# scoring_api/batting.py
from __future__ import annotations

import copy
import logging
from typing import List

from scoring_api.errors import AllOutError, InvalidSelectionError, MatchCompletedError
from scoring_api.models import Batsman, Match, RosterPlayer

logger = logging.getLogger(__name__)


def rotate_strike(match: Match) -> bool:
    """
    In-place strike swap. Toggles is_on_strike for every not-out batsman.
    No-op (returns False) with fewer than two batsmen at the crease.
    """
    active = match.not_out_batsmen
    if len(active) < 2:
        return False
    for b in active:
        b.is_on_strike = not b.is_on_strike
    return True


def swap_strike(match: Match) -> Match:
    if match.match_completed:
        raise MatchCompletedError("Match is already completed")
    new = copy.deepcopy(match)
    rotate_strike(new)
    return new


def available_batsmen(match: Match) -> List[RosterPlayer]:
    """
    Batting-side roster players who have not batted yet this innings.

    Dismissed players are never readmitted and the batsmen at the crease
    are excluded.
    """
    used = {b.id for b in match.batsmen}
    return [p for p in match.batting_team.players if p.player_id not in used]


def select_new_batsman(match: Match, player_id: int) -> Match:
    """
    Brings a new batsman to the crease after a dismissal.

    Rules:
    - the new batsman always takes strike
    - only players from available_batsmen() are eligible
    - AllOutError when nobody is left (caller ends the innings instead)
    - only while an innings is in progress and a batsman's place is vacant
    """
    if match.match_completed:
        raise MatchCompletedError("Match is already completed")
    if match.phase == "INNINGS_BREAK":
        raise AllOutError(f"{match.batting_team.name} are all out; end the innings")
    if match.phase != "IN_PROGRESS":
        raise ValueError(f"Cannot select a batsman in phase {match.phase}")

    if len(match.not_out_batsmen) >= 2:
        raise InvalidSelectionError("Two batsmen are already at the crease")

    candidates = available_batsmen(match)
    if not candidates:
        raise AllOutError(f"No batsmen left for {match.batting_team.name}")

    player = next((p for p in candidates if p.player_id == player_id), None)
    if player is None:
        raise InvalidSelectionError(f"Player {player_id} is not an eligible batsman")

    new = copy.deepcopy(match)
    for b in new.batsmen:
        b.is_on_strike = False
    new.batsmen.append(Batsman(id=player.player_id, name=player.name, is_on_strike=True))

    if "NEW_BATSMAN" in new.pending:
        new.pending.remove("NEW_BATSMAN")

    new.add_event("new_batsman", f"New batsman {player.name} comes to the crease at the striker's end.")
    logger.info("New batsman %s for %s", player.name, new.batting_team.name)
    return new
