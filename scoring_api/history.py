# scoring_api/history.py
from __future__ import annotations

import logging

from scoring_api.errors import MatchCompletedError
from scoring_api.ledger import last_delivery
from scoring_api.models import Match

logger = logging.getLogger(__name__)


def can_undo(match: Match) -> bool:
    last = last_delivery(match)
    return (
        not match.match_completed
        and last is not None
        and last.prior is not None
        and last.innings == match.current_innings
    )


def undo_last(match: Match) -> Match:
    """
    Pops the most recent delivery and returns the Match exactly as it was
    before that delivery (aggregates, counters, strike, free hit, dismissal).

    Selections made after the delivery (new batsman, bowling change) are
    reverted with it. Deliveries from a closed innings are not undone.
    """
    if match.match_completed:
        raise MatchCompletedError("Cannot undo actions in a completed match")

    if not can_undo(match):
        logger.info("Nothing to undo in innings %s", match.current_innings)
        return match

    last = match.ledger[-1]
    logger.info(
        "Undo %s.%s (%s to %s)",
        last.over_number,
        last.ball_number_in_over,
        last.bowler_name,
        last.batsman_name,
    )
    return last.prior
