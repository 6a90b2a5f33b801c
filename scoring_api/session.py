# scoring_api/session.py
from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Tuple

from scoring_api import batting, bowling, history, lifecycle, rules
from scoring_api.config import TRANSITION_DELAY_SECONDS
from scoring_api.errors import PendingInputError
from scoring_api.models import Delivery, Match, MatchResult
from scoring_api.scheduler import ScheduledTask, TransitionScheduler

logger = logging.getLogger(__name__)

ResultListener = Callable[[str, MatchResult], None]


class MatchSession:
    """
    Owns one Match value and serializes every operation on it.

    Engine functions return new Match values; the session swaps them in.
    The innings switch after an all-out is a deferred task: until it runs,
    other operations (undo aside) raise PendingInputError.
    """

    def __init__(
        self,
        match_id: str,
        match: Match,
        *,
        transition_delay: float = TRANSITION_DELAY_SECONDS,
        clock: Optional[Callable[[], float]] = None,
        on_result: Optional[ResultListener] = None,
    ) -> None:
        self.match_id = match_id
        self.match = match
        self.transition_delay = transition_delay
        self.scheduler = TransitionScheduler(clock)
        self.on_result = on_result
        self._lock = threading.Lock()
        self._innings_task: Optional[ScheduledTask] = None
        self._result_reported = False
        self._unreported: Optional[MatchResult] = None

    # -----------------------
    # Internals
    # -----------------------
    def _run_deferred(self) -> None:
        self.scheduler.run_due()
        if self.scheduler.has_pending:
            raise PendingInputError("INNINGS_END", "Innings transition pending")

    def _switch_innings(self) -> None:
        self._innings_task = None
        self.match = lifecycle.end_innings(self.match)
        self._after_change()

    def _after_change(self) -> None:
        m = self.match
        if "INNINGS_END" in m.pending and self._innings_task is None:
            self._innings_task = self.scheduler.schedule(
                "end_innings", self._switch_innings, self.transition_delay
            )
            self.scheduler.run_due()
            return

        if m.match_completed and not self._result_reported:
            self._result_reported = True
            self._unreported = lifecycle.match_result(m)

    def _report_result(self) -> None:
        """Hands a fresh result to on_result. Called with the lock released."""
        with self._lock:
            result, self._unreported = self._unreported, None
        if result is not None and self.on_result is not None:
            self.on_result(self.match_id, result)

    def _apply(self, fn: Callable[..., Match], *args) -> Match:
        with self._lock:
            self._run_deferred()
            self.match = fn(self.match, *args)
            self._after_change()
            match = self.match
        self._report_result()
        return match

    def _score(self, fn: Callable[..., Tuple[Match, Optional[Delivery]]], *args) -> Tuple[Match, Optional[Delivery]]:
        with self._lock:
            self._run_deferred()
            self.match, delivery = fn(self.match, *args)
            self._after_change()
            match = self.match
        self._report_result()
        return match, delivery

    # -----------------------
    # Reads
    # -----------------------
    def state(self) -> Match:
        with self._lock:
            self.scheduler.run_due()
            match = self.match
        self._report_result()
        return match

    def deliveries(self) -> List[Delivery]:
        return list(self.state().ledger)

    def result(self) -> MatchResult:
        return lifecycle.match_result(self.state())

    # -----------------------
    # Toss + selection
    # -----------------------
    def call_toss(self, caller: str, call: str) -> Match:
        return self._apply(lifecycle.call_toss, caller, call)

    def flip_toss(self, rng=None) -> Match:
        return self._apply(lifecycle.flip_toss, rng)

    def choose_toss_decision(self, decision: str) -> Match:
        return self._apply(lifecycle.choose_toss_decision, decision)

    def select_lineup(self, striker_id: int, non_striker_id: int, bowler_id: int) -> Match:
        return self._apply(lifecycle.select_lineup, striker_id, non_striker_id, bowler_id)

    # -----------------------
    # Scoring
    # -----------------------
    def record_run(self, runs: int) -> Tuple[Match, Optional[Delivery]]:
        return self._score(rules.record_run, runs)

    def record_extra(self, kind: str) -> Tuple[Match, Optional[Delivery]]:
        return self._score(rules.record_extra, kind)

    def record_wicket(self) -> Tuple[Match, Optional[Delivery]]:
        return self._score(rules.record_wicket)

    # -----------------------
    # Rotation
    # -----------------------
    def swap_strike(self) -> Match:
        return self._apply(batting.swap_strike)

    def select_new_batsman(self, player_id: int) -> Match:
        return self._apply(batting.select_new_batsman, player_id)

    def select_new_bowler(self, player_id: int) -> Match:
        return self._apply(bowling.select_new_bowler, player_id)

    def keep_current_bowler(self) -> Match:
        return self._apply(bowling.keep_current_bowler)

    def end_over(self) -> Match:
        return self._apply(bowling.end_over_early)

    # -----------------------
    # Lifecycle
    # -----------------------
    def declare_innings(self) -> Match:
        return self._apply(lifecycle.declare_innings)

    def undo(self) -> Match:
        """Cancels a pending innings switch, then reverts the last delivery."""
        with self._lock:
            if self.scheduler.cancel_all():
                logger.info("Cancelled pending innings transition for %s", self.match_id)
            self._innings_task = None
            self.match = history.undo_last(self.match)
            return self.match
