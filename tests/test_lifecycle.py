from __future__ import annotations

import pytest

from scoring_api import lifecycle
from scoring_api.errors import InvalidLineupError, MatchCompletedError
from scoring_api.lifecycle import (
    call_toss,
    choose_toss_decision,
    complete_match,
    declare_innings,
    end_innings,
    flip_toss,
    match_result,
    new_match,
    select_lineup,
)

from conftest import FixedRng, first_bowler_id, play


def _open_second_innings(m):
    batting, bowling = m.batting_team, m.bowling_team
    return select_lineup(m, batting.players[0].player_id, batting.players[1].player_id,
                         first_bowler_id(bowling.players))


class TestToss:
    def test_new_match_waits_for_toss(self, squad_a, squad_b):
        m = new_match("Team A", "Team B", squad_a, squad_b, venue="Lord's")
        assert m.phase == "PRE_TOSS"
        assert m.team1.is_batting != m.team2.is_batting
        assert m.venue == "Lord's"

    def test_team_names_must_differ(self, squad_a, squad_b):
        with pytest.raises(ValueError):
            new_match("Team A", "Team A", squad_a, squad_b)

    def test_roster_dicts_are_accepted(self):
        rows = [{"player_id": 1, "player_name": "X", "role": "Bowler"}, {"id": 2, "name": "Y"}]
        m = new_match("A", "B", rows, rows)
        assert m.team1.players[0].role == "bowler"
        assert m.team1.players[1].name == "Y"

    def test_correct_call_wins(self, squad_a, squad_b):
        m = call_toss(new_match("Team A", "Team B", squad_a, squad_b), "Team B", "heads")
        m = flip_toss(m, rng=FixedRng(0.75))
        assert m.toss_result == "heads"
        assert m.toss_winner == "Team B"
        assert m.phase == "TOSS_RESOLVED"

    def test_wrong_call_loses(self, squad_a, squad_b):
        m = call_toss(new_match("Team A", "Team B", squad_a, squad_b), "Team B", "heads")
        m = flip_toss(m, rng=FixedRng(0.25))
        assert m.toss_result == "tails"
        assert m.toss_winner == "Team A"

    def test_unseeded_flip_picks_a_side(self, squad_a, squad_b):
        m = call_toss(new_match("Team A", "Team B", squad_a, squad_b), "Team A", "tails")
        m = flip_toss(m)
        assert m.toss_result in ("heads", "tails")
        assert m.toss_winner in ("Team A", "Team B")

    def test_invalid_call_and_caller(self, squad_a, squad_b):
        m = new_match("Team A", "Team B", squad_a, squad_b)
        with pytest.raises(ValueError):
            call_toss(m, "Team A", "edge")
        with pytest.raises(ValueError):
            call_toss(m, "Team C", "heads")

    def test_flip_before_call_rejected(self, squad_a, squad_b):
        with pytest.raises(ValueError):
            flip_toss(new_match("Team A", "Team B", squad_a, squad_b))

    @pytest.mark.parametrize("decision,batting", [("bat", "Team A"), ("bowl", "Team B")])
    def test_decision_sets_batting_side(self, squad_a, squad_b, decision, batting):
        m = call_toss(new_match("Team A", "Team B", squad_a, squad_b), "Team A", "heads")
        m = flip_toss(m, rng=FixedRng(0.9))
        m = choose_toss_decision(m, decision)
        assert m.batting_team.name == batting
        assert m.team1.is_batting != m.team2.is_batting
        assert m.phase == "TEAM_SELECTION"


class TestLineup:
    @pytest.fixture
    def ready(self, squad_a, squad_b):
        m = call_toss(new_match("Team A", "Team B", squad_a, squad_b), "Team A", "heads")
        m = flip_toss(m, rng=FixedRng(0.9))
        return choose_toss_decision(m, "bat")

    def test_valid_lineup(self, ready, squad_a, squad_b):
        m = select_lineup(ready, squad_a[0].player_id, squad_a[1].player_id, first_bowler_id(squad_b))
        assert m.phase == "IN_PROGRESS"
        assert m.striker.id == squad_a[0].player_id
        assert [b.is_on_strike for b in m.batsmen] == [True, False]
        assert m.bowler.id == first_bowler_id(squad_b)

    def test_duplicate_batsmen(self, ready, squad_a, squad_b):
        with pytest.raises(InvalidLineupError):
            select_lineup(ready, squad_a[0].player_id, squad_a[0].player_id, first_bowler_id(squad_b))

    def test_missing_selection(self, ready, squad_a, squad_b):
        with pytest.raises(InvalidLineupError):
            select_lineup(ready, squad_a[0].player_id, None, first_bowler_id(squad_b))

    def test_batsman_from_wrong_team(self, ready, squad_a, squad_b):
        with pytest.raises(InvalidLineupError):
            select_lineup(ready, squad_a[0].player_id, squad_b[0].player_id, first_bowler_id(squad_b))

    def test_bowler_must_be_able_to_bowl(self, ready, squad_a, squad_b):
        with pytest.raises(InvalidLineupError):
            select_lineup(ready, squad_a[0].player_id, squad_a[1].player_id, squad_b[0].player_id)


class TestInningsTransitions:
    def test_end_first_innings_sets_target_and_swaps(self, live_match):
        m = play(live_match, [4, 1, "wd", "W"])
        m = end_innings(m)

        assert m.target == 7
        assert m.current_innings == 2
        assert m.batting_team.name == "Team B"
        assert m.team1.is_batting != m.team2.is_batting
        assert m.batsmen == []
        assert m.bowler is None
        assert not m.is_free_hit
        assert m.phase == "TEAM_SELECTION"

    def test_second_innings_all_out_first_side_wins_by_runs(self, live_match):
        m = end_innings(play(live_match, [6, 6, 6]))
        m = _open_second_innings(m)
        m = play(m, [4, 4] + ["W"] * 10)
        assert m.pending == ["INNINGS_END"]

        m = end_innings(m)
        assert m.match_completed
        assert m.winning_team == "Team A"
        assert m.margin_type == "runs"
        assert m.result_margin == 19 - 8 - 1

    def test_complete_match_is_idempotent(self, live_match):
        m = _open_second_innings(end_innings(live_match))
        m = play(m, [1])
        assert m.match_completed
        assert complete_match(m) is m

    def test_complete_match_only_in_second_innings(self, live_match):
        with pytest.raises(ValueError):
            complete_match(live_match)

    def test_declare_first_innings(self, live_match):
        m = declare_innings(play(live_match, [2, 2]))
        assert m.target == 5
        assert m.current_innings == 2

    def test_declare_second_innings(self, live_match):
        m = _open_second_innings(end_innings(play(live_match, [6, 6])))
        m = declare_innings(play(m, [4]))
        assert m.match_completed
        assert m.winning_team == "Team A"
        assert m.result_margin == 13 - 4 - 1

    def test_mutations_rejected_after_completion(self, live_match):
        m = _open_second_innings(end_innings(live_match))
        m = play(m, [2])
        with pytest.raises(MatchCompletedError):
            end_innings(m)
        with pytest.raises(MatchCompletedError):
            declare_innings(m)

    def test_result_requires_completion(self, live_match):
        with pytest.raises(ValueError):
            match_result(live_match)


class TestScenarios:
    """Full T20 matches between two eleven-player sides."""

    def _first_innings_150_for_6(self, live_match):
        m = play(live_match, ["W"] * 6 + [4] * 37 + [2])
        assert (m.batting_team.score, m.batting_team.wickets) == (150, 6)
        m = end_innings(m)
        assert m.target == 151
        return _open_second_innings(m)

    def test_chase_wins_by_wickets(self, live_match):
        m = self._first_innings_150_for_6(live_match)
        script = [0] * 30 + ["W"] + [0] * 12 + ["W"] + [0] * 12 + ["W"] + [0] * 12 + ["W"] + [4] * 37 + [1, 1, 1]
        m = play(m, script)

        team_b = m.team("Team B")
        assert m.match_completed
        assert (team_b.score, team_b.wickets) == (151, 4)
        assert team_b.overs_text == "18.2"

        result = match_result(m)
        assert result.winning_team == "Team B"
        assert result.margin_type == "wickets"
        assert result.margin_value == 6
        assert result.final_scores[0] == {"team": "Team A", "runs": 150, "wickets": 6, "overs": "7.2"}
        assert result.summary == "Team B wins by 6 wickets"

    def test_defence_wins_by_runs(self, live_match):
        m = self._first_innings_150_for_6(live_match)
        script = ["W"] * 8 + [4] * 35 + [0] * 77
        m = play(m, script)

        team_b = m.team("Team B")
        assert (team_b.score, team_b.wickets, team_b.overs) == (140, 8, 20)
        assert not m.match_completed

        m = end_innings(m)
        result = match_result(m)
        assert result.winning_team == "Team A"
        assert result.margin_type == "runs"
        assert result.margin_value == 10


def test_toss_falls_back_when_os_entropy_is_missing(monkeypatch, squad_a, squad_b):
    class NoEntropy:
        def random(self):
            raise NotImplementedError

    monkeypatch.setattr(lifecycle.random, "SystemRandom", NoEntropy)
    monkeypatch.setattr(lifecycle.random, "random", lambda: 0.1)

    m = call_toss(new_match("Team A", "Team B", squad_a, squad_b), "Team A", "heads")
    m = flip_toss(m)
    assert m.toss_result == "tails"
    assert m.toss_winner == "Team B"
