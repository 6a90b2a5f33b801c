# scoring_api/bowling.py
from __future__ import annotations

import copy
import logging
from typing import List

from scoring_api.batting import rotate_strike
from scoring_api.errors import InvalidSelectionError, MatchCompletedError
from scoring_api.ledger import innings_deliveries
from scoring_api.models import Bowler, Match, RosterPlayer

logger = logging.getLogger(__name__)


def available_bowlers(match: Match) -> List[RosterPlayer]:
    """Bowlers/all-rounders on the bowling side, minus the bowler who just finished."""
    current_id = match.bowler.id if match.bowler else None
    return [
        p for p in match.bowling_team.players
        if p.can_bowl and p.player_id != current_id
    ]


def is_hat_trick(match: Match, bowler_name: str) -> bool:
    """
    True when the two ledger entries immediately before the current delivery
    (this innings) are both wickets credited to the same bowler.
    Call before the current delivery is appended.
    """
    previous = innings_deliveries(match)[-2:]
    return len(previous) == 2 and all(
        d.is_wicket and d.bowler_name == bowler_name for d in previous
    )


def complete_over(match: Match, *, request_bowler_change: bool = True) -> None:
    """
    In-place over completion on a Match the caller already owns.

    Resets the over-ball buffer, increments overs, clears a pending free hit
    and exchanges ends. A bowler change is then requested unless the caller
    opts out or nobody else can bowl.
    """
    team = match.batting_team
    team.overs += 1
    team.balls_in_current_over = 0
    match.is_free_hit = False
    rotate_strike(match)

    match.add_event(
        "over_complete",
        f"Over complete! {team.name} are {team.score}/{team.wickets} after {team.overs} overs.",
    )
    logger.info("Over %s complete: %s %s/%s", team.overs, team.name, team.score, team.wickets)

    if not request_bowler_change:
        return

    if available_bowlers(match):
        if "NEW_BOWLER" not in match.pending:
            match.pending.append("NEW_BOWLER")
    else:
        name = match.bowler.name if match.bowler else "The bowler"
        match.add_event("no_bowling_change", f"No bowling change. {name} continues.")


def _require_in_play(match: Match, action: str) -> None:
    if match.match_completed:
        raise MatchCompletedError("Match is already completed")
    if match.phase != "IN_PROGRESS":
        raise ValueError(f"Cannot {action} in phase {match.phase}")


def end_over_early(match: Match) -> Match:
    """
    Manually closes the current over before six legal balls.
    Rejected when no legal ball has been bowled in it yet.
    """
    _require_in_play(match, "end an over")
    if match.batting_team.balls_in_current_over == 0:
        raise ValueError("No balls have been bowled in this over yet")

    new = copy.deepcopy(match)
    complete_over(new)
    return new


def select_new_bowler(match: Match, player_id: int) -> Match:
    """
    Bowling change at the end of an over. The new Bowler starts from zero.
    With no eligible candidate the current bowler simply continues.
    """
    _require_in_play(match, "change the bowler")

    candidates = available_bowlers(match)
    new = copy.deepcopy(match)

    if not candidates:
        if "NEW_BOWLER" in new.pending:
            new.pending.remove("NEW_BOWLER")
        name = new.bowler.name if new.bowler else "The bowler"
        new.add_event("no_bowling_change", f"No bowling change. {name} continues.")
        logger.warning("No eligible bowler for %s; keeping %s", new.bowling_team.name, name)
        return new

    if "NEW_BOWLER" not in match.pending:
        raise InvalidSelectionError("No bowling change is due")

    player = next((p for p in candidates if p.player_id == player_id), None)
    if player is None:
        raise InvalidSelectionError(f"Player {player_id} is not an eligible bowler")

    new.bowler = Bowler(id=player.player_id, name=player.name)
    new.pending.remove("NEW_BOWLER")

    new.add_event("bowling_change", f"Change of bowling. {player.name} comes into the attack.")
    logger.info("Bowling change: %s", player.name)
    return new


def keep_current_bowler(match: Match) -> Match:
    _require_in_play(match, "keep the bowler")
    if "NEW_BOWLER" not in match.pending:
        raise InvalidSelectionError("No bowling change is due")

    new = copy.deepcopy(match)
    new.pending.remove("NEW_BOWLER")
    name = new.bowler.name if new.bowler else "The bowler"
    new.add_event("no_bowling_change", f"No bowling change. {name} continues.")
    return new
