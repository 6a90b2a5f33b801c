# scoring_api/ledger.py
from __future__ import annotations

from typing import List, Optional

from scoring_api.models import Delivery, ExtraType, Match


def append_delivery(
    match: Match,
    *,
    prior: Match,
    batsman_name: str,
    runs_off_bat: int = 0,
    extra_runs: int = 0,
    extra_type: ExtraType = "none",
    is_wicket: bool = False,
    is_legal: bool = True,
    is_free_hit: bool = False,
    is_hat_trick: bool = False,
) -> Delivery:
    """
    Appends one Delivery to match.ledger, snapshotting the score as it stands
    after the delivery's aggregates were applied.

    Over/ball numbers are taken from the batting side's counters at that
    moment, so a counted sixth ball reads as X.6 before the over closes.
    """
    team = match.batting_team
    delivery = Delivery(
        innings=match.current_innings,
        over_number=team.overs,
        ball_number_in_over=team.balls_in_current_over,
        bowler_name=match.bowler.name if match.bowler else "",
        batsman_name=batsman_name,
        runs_off_bat=runs_off_bat,
        extra_runs=extra_runs,
        extra_type=extra_type,
        is_wicket=is_wicket,
        is_legal=is_legal,
        is_free_hit=is_free_hit,
        is_hat_trick=is_hat_trick,
        resulting_score=team.score,
        resulting_wickets=team.wickets,
        prior=prior,
    )
    match.ledger.append(delivery)
    return delivery


def last_delivery(match: Match) -> Optional[Delivery]:
    return match.ledger[-1] if match.ledger else None


def recent(match: Match, n: int) -> List[Delivery]:
    """Most recent n deliveries, newest first."""
    if n <= 0:
        return []
    return list(reversed(match.ledger[-n:]))


def innings_deliveries(match: Match, innings: Optional[int] = None) -> List[Delivery]:
    innings = match.current_innings if innings is None else innings
    return [d for d in match.ledger if d.innings == innings]


def current_over(match: Match) -> List[Delivery]:
    """Deliveries (legal or not) bowled in the over that is in progress."""
    overs = match.batting_team.overs
    return [d for d in innings_deliveries(match) if d.over_number == overs]
