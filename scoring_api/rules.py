# scoring_api/rules.py
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from scoring_api.batting import available_batsmen, rotate_strike
from scoring_api.bowling import complete_over, is_hat_trick
from scoring_api.errors import MatchCompletedError, NoStrikerError, PendingInputError
from scoring_api.ledger import append_delivery
from scoring_api.lifecycle import finish_chase, mark_all_out
from scoring_api.models import BALLS_PER_OVER, MAX_WICKETS, Batsman, Delivery, Match

logger = logging.getLogger(__name__)

VALID_RUNS = (0, 1, 2, 3, 4, 6)


@dataclass(frozen=True)
class ExtraRule:
    runs: int
    legal: bool  # counts toward the over
    charged_to_bowler: bool
    sets_free_hit: bool
    credits_batsman: bool


EXTRA_RULES: Dict[str, ExtraRule] = {
    "wide": ExtraRule(runs=1, legal=False, charged_to_bowler=True, sets_free_hit=False, credits_batsman=False),
    "noball": ExtraRule(runs=1, legal=False, charged_to_bowler=True, sets_free_hit=True, credits_batsman=False),
    "bye": ExtraRule(runs=1, legal=True, charged_to_bowler=False, sets_free_hit=False, credits_batsman=True),
    "legbye": ExtraRule(runs=1, legal=True, charged_to_bowler=False, sets_free_hit=False, credits_batsman=False),
}


def _require_striker(match: Match) -> Batsman:
    if match.match_completed:
        raise MatchCompletedError("Match is already completed")
    striker = match.striker
    if striker is None:
        raise NoStrikerError("No batsman on strike! Select a new batsman first.")
    if match.pending:
        raise PendingInputError(match.pending[0])
    if match.phase != "IN_PROGRESS" or match.bowler is None:
        raise PendingInputError(match.phase, f"Cannot score in phase {match.phase}")
    return striker


def _after_delivery(match: Match, counted: bool) -> None:
    """
    Completion checks, in order; at most one fires:
    1) second-innings target reached -> match complete
    2) sixth counted ball of the over -> over complete
    """
    team = match.batting_team
    if match.current_innings == 2 and team.score >= match.target:
        finish_chase(match)
        return
    if counted and team.balls_in_current_over >= BALLS_PER_OVER:
        complete_over(match)


# -----------------------
# Runs off the bat
# -----------------------
def record_run(match: Match, runs: int) -> Tuple[Match, Delivery]:
    """
    Rules:
    - a free-hit delivery does not add to ball counts and is consumed here
    - strike changes on odd runs, free hit or not
    """
    if runs not in VALID_RUNS:
        raise ValueError(f"Invalid runs: {runs} (expected one of {VALID_RUNS})")
    _require_striker(match)

    new = copy.deepcopy(match)
    team = new.batting_team
    bowler = new.bowler
    striker = new.striker

    free_hit = new.is_free_hit
    counted = not free_hit

    team.score += runs
    striker.runs += runs
    bowler.runs_conceded += runs
    if counted:
        team.balls_in_current_over += 1
        bowler.balls_bowled += 1
        striker.balls_faced += 1
    if runs == 4:
        striker.fours += 1
    elif runs == 6:
        striker.sixes += 1

    delivery = append_delivery(
        new,
        prior=match,
        batsman_name=striker.name,
        runs_off_bat=runs,
        is_legal=counted,
        is_free_hit=free_hit,
    )
    logger.debug("%s to %s: %s run(s), %s", bowler.name, striker.name, runs, delivery.score_text)

    if free_hit:
        new.is_free_hit = False
        new.add_event("free_hit", "Free hit completed.")

    if runs % 2 == 1:
        rotate_strike(new)

    _after_delivery(new, counted)
    return new, delivery


# -----------------------
# Extras
# -----------------------
def record_extra(match: Match, kind: str) -> Tuple[Match, Delivery]:
    """
    wide/noball: not legal, charged to the bowler (noball sets a free hit)
    bye/legbye: legal, not charged to the bowler (bye credits the striker)

    A delivery bowled as a free hit always counts toward the over, whatever
    its kind, and consumes the free hit.
    """
    rule = EXTRA_RULES.get(kind)
    if rule is None:
        raise ValueError(f"Invalid extra: {kind} (expected one of {', '.join(EXTRA_RULES)})")
    _require_striker(match)

    new = copy.deepcopy(match)
    team = new.batting_team
    bowler = new.bowler
    striker = new.striker

    free_hit = new.is_free_hit
    counted = rule.legal or free_hit

    team.score += rule.runs
    if rule.credits_batsman:
        striker.runs += rule.runs
        striker.balls_faced += 1
    if counted:
        team.balls_in_current_over += 1
        bowler.balls_bowled += 1
    if rule.charged_to_bowler:
        bowler.runs_conceded += rule.runs

    delivery = append_delivery(
        new,
        prior=match,
        batsman_name=striker.name,
        extra_runs=rule.runs,
        extra_type=kind,
        is_legal=counted,
        is_free_hit=free_hit,
    )
    logger.debug("%s: %s, %s", bowler.name, kind, delivery.score_text)

    if free_hit:
        new.is_free_hit = False
        new.add_event("free_hit", "Free hit completed.")
    if rule.sets_free_hit:
        new.is_free_hit = True
        new.add_event("free_hit", f"No ball! {bowler.name} oversteps, free hit coming up!")

    _after_delivery(new, counted)
    return new, delivery


# -----------------------
# Wickets
# -----------------------
def record_wicket(match: Match) -> Tuple[Match, Optional[Delivery]]:
    """
    Dismisses the striker.

    On a free hit the call is suppressed (no delivery, no wicket). Run-outs
    are not modelled separately.
    """
    _require_striker(match)

    if match.is_free_hit:
        new = copy.deepcopy(match)
        new.add_event(
            "free_hit",
            "No wicket! It's a free hit delivery. Only a run out can dismiss the batsman.",
        )
        logger.warning("Wicket ignored on a free hit")
        return new, None

    new = copy.deepcopy(match)
    team = new.batting_team
    bowler = new.bowler
    striker = new.striker

    hat_trick = is_hat_trick(new, bowler.name)

    team.wickets += 1
    team.balls_in_current_over += 1
    bowler.balls_bowled += 1
    bowler.wickets_taken += 1
    striker.is_out = True
    striker.is_on_strike = False

    delivery = append_delivery(
        new,
        prior=match,
        batsman_name=striker.name,
        is_wicket=True,
        is_hat_trick=hat_trick,
    )

    if hat_trick:
        new.add_event("hat_trick", f"HAT-TRICK! {bowler.name} takes a hat-trick! {striker.name} is the third victim!")
        logger.info("Hat-trick for %s", bowler.name)
    else:
        new.add_event(
            "wicket",
            f"WICKET! {bowler.name} gets {striker.name} out! {team.name} are {delivery.score_text}",
        )

    over_done = team.balls_in_current_over >= BALLS_PER_OVER
    if team.wickets >= MAX_WICKETS or not available_batsmen(new):
        if over_done:
            complete_over(new, request_bowler_change=False)
        mark_all_out(new)
    else:
        new.pending.append("NEW_BATSMAN")
        if over_done:
            complete_over(new)

    return new, delivery
