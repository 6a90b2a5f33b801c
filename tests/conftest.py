from __future__ import annotations

from typing import Iterable, List, Union

import pytest

from scoring_api import batting, bowling, rules
from scoring_api.lifecycle import call_toss, choose_toss_decision, flip_toss, new_match, select_lineup
from scoring_api.models import Match, RosterPlayer

Event = Union[int, str]


class FixedRng:
    """Stands in for random.Random in toss tests."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_squad(start_id: int, prefix: str) -> List[RosterPlayer]:
    """Eleven players: 5 batsmen, a keeper, 2 all-rounders, 3 bowlers."""
    roles = ["batsman"] * 5 + ["wicketkeeper"] + ["all-rounder"] * 2 + ["bowler"] * 3
    return [
        RosterPlayer(player_id=start_id + i, name=f"{prefix} Player {i + 1}", role=role)
        for i, role in enumerate(roles)
    ]


def first_bowler_id(squad: Iterable[RosterPlayer]) -> int:
    return next(p.player_id for p in squad if p.can_bowl)


def start_match(team_a: List[RosterPlayer], team_b: List[RosterPlayer]) -> Match:
    """Team A wins the toss, bats first; openers are A's first two players."""
    m = new_match("Team A", "Team B", team_a, team_b, venue="Eden Park", tournament="Test Cup")
    m = call_toss(m, "Team A", "heads")
    m = flip_toss(m, rng=FixedRng(0.9))
    m = choose_toss_decision(m, "bat")
    return select_lineup(m, team_a[0].player_id, team_a[1].player_id, first_bowler_id(team_b))


def resolve_pending(m: Match) -> Match:
    """Answers NEW_BATSMAN/NEW_BOWLER with the first eligible player."""
    if "NEW_BATSMAN" in m.pending:
        m = batting.select_new_batsman(m, batting.available_batsmen(m)[0].player_id)
    if "NEW_BOWLER" in m.pending:
        m = bowling.select_new_bowler(m, bowling.available_bowlers(m)[0].player_id)
    return m


def play(m: Match, events: Iterable[Event]) -> Match:
    """
    Bowls a scripted sequence: ints are runs off the bat, "W" a wicket,
    "wd"/"nb"/"b"/"lb" extras. Pending selections are answered automatically.
    """
    extras = {"wd": "wide", "nb": "noball", "b": "bye", "lb": "legbye"}
    for ev in events:
        if m.match_completed or "INNINGS_END" in m.pending:
            break
        if ev == "W":
            m, _ = rules.record_wicket(m)
        elif ev in extras:
            m, _ = rules.record_extra(m, extras[ev])
        else:
            m, _ = rules.record_run(m, int(ev))
        m = resolve_pending(m)
    return m


@pytest.fixture
def squad_a() -> List[RosterPlayer]:
    return make_squad(100, "A")


@pytest.fixture
def squad_b() -> List[RosterPlayer]:
    return make_squad(200, "B")


@pytest.fixture
def live_match(squad_a, squad_b) -> Match:
    return start_match(squad_a, squad_b)
