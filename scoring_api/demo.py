# scoring_api/demo.py
from __future__ import annotations

from typing import Dict, List

from scoring_api.models import RosterPlayer


def create_demo_rosters() -> Dict[int, List[RosterPlayer]]:
    """
    Two seven-player squads for demos and for when the roster provider is
    unavailable. Mock only.
    """
    return {
        1: [
            RosterPlayer(1, "David Warner", "batsman", "Left-handed"),
            RosterPlayer(2, "Rohit Sharma", "batsman", "Right-handed"),
            RosterPlayer(3, "Virat Kohli", "batsman", "Right-handed"),
            RosterPlayer(4, "Ben Stokes", "all-rounder", "Left-handed", "Fast"),
            RosterPlayer(5, "MS Dhoni", "wicketkeeper", "Right-handed"),
            RosterPlayer(6, "Jasprit Bumrah", "bowler", "Right-handed", "Fast"),
            RosterPlayer(7, "Rashid Khan", "bowler", "Right-handed", "Leg-spin"),
        ],
        2: [
            RosterPlayer(8, "Babar Azam", "batsman", "Right-handed"),
            RosterPlayer(9, "Kane Williamson", "batsman", "Right-handed"),
            RosterPlayer(10, "Steve Smith", "batsman", "Right-handed"),
            RosterPlayer(11, "Shakib Al Hasan", "all-rounder", "Left-handed", "Left-arm spin"),
            RosterPlayer(12, "Jos Buttler", "wicketkeeper", "Right-handed"),
            RosterPlayer(13, "Trent Boult", "bowler", "Right-handed", "Fast"),
            RosterPlayer(14, "Yuzvendra Chahal", "bowler", "Right-handed", "Leg-spin"),
        ],
    }


def demo_roster(side: int) -> List[RosterPlayer]:
    rosters = create_demo_rosters()
    if side not in rosters:
        raise ValueError("side must be 1 or 2")
    return rosters[side]
