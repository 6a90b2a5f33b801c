from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional


# -----------------------------
# Literal vocabularies
# -----------------------------
PlayerRole = Literal["batsman", "bowler", "all-rounder", "wicketkeeper"]
TossCall = Literal["heads", "tails"]
TossDecision = Literal["bat", "bowl"]
ExtraKind = Literal["wide", "noball", "bye", "legbye"]
ExtraType = Literal["none", "wide", "noball", "bye", "legbye"]
MarginType = Literal["runs", "wickets"]

MatchPhase = Literal[
    "PRE_TOSS",
    "TOSS_CALLED",
    "TOSS_RESOLVED",
    "TEAM_SELECTION",
    "IN_PROGRESS",
    "INNINGS_BREAK",
    "COMPLETE",
]

# Typed "next action required" markers
PendingInput = Literal["NEW_BATSMAN", "NEW_BOWLER", "INNINGS_END"]

BOWLING_ROLES = ("bowler", "all-rounder")
MAX_WICKETS = 10
BALLS_PER_OVER = 6


# -----------------------------
# Roster (input from the roster provider)
# -----------------------------
@dataclass(frozen=True)
class RosterPlayer:
    player_id: int
    name: str
    role: PlayerRole = "batsman"
    batting_style: Optional[str] = None
    bowling_style: Optional[str] = None

    @property
    def can_bowl(self) -> bool:
        return self.role in BOWLING_ROLES

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "RosterPlayer":
        """
        Accepts both the backend's snake_case rows (player_id, player_name)
        and the short form (id, name).
        """
        pid = raw.get("player_id", raw.get("id"))
        name = raw.get("player_name", raw.get("name"))
        if pid is None or not name:
            raise ValueError(f"Roster entry needs an id and a name: {raw}")
        return cls(
            player_id=int(pid),
            name=str(name).strip(),
            role=(raw.get("role") or "batsman").strip().lower(),
            batting_style=raw.get("batting_style"),
            bowling_style=raw.get("bowling_style"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "role": self.role,
            "batting_style": self.batting_style,
            "bowling_style": self.bowling_style,
        }


# -----------------------------
# Per-innings entities
# -----------------------------
@dataclass
class TeamInnings:
    name: str
    players: List[RosterPlayer] = field(default_factory=list)
    score: int = 0
    wickets: int = 0
    overs: int = 0  # completed overs
    balls_in_current_over: int = 0  # 0..5 between operations
    is_batting: bool = False

    @property
    def overs_text(self) -> str:
        return f"{self.overs}.{self.balls_in_current_over}"

    def player(self, player_id: int) -> Optional[RosterPlayer]:
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "score": self.score,
            "wickets": self.wickets,
            "overs": self.overs,
            "balls_in_current_over": self.balls_in_current_over,
            "overs_text": self.overs_text,
            "is_batting": self.is_batting,
            "players": [p.to_dict() for p in self.players],
        }


@dataclass
class Batsman:
    id: int
    name: str
    runs: int = 0
    balls_faced: int = 0
    fours: int = 0
    sixes: int = 0
    is_out: bool = False
    is_on_strike: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "runs": self.runs,
            "balls_faced": self.balls_faced,
            "fours": self.fours,
            "sixes": self.sixes,
            "is_out": self.is_out,
            "is_on_strike": self.is_on_strike,
        }


@dataclass
class Bowler:
    """Current bowler only. Replaced wholesale on a bowling change."""
    id: int
    name: str
    balls_bowled: int = 0
    runs_conceded: int = 0
    wickets_taken: int = 0

    @property
    def overs_text(self) -> str:
        return f"{self.balls_bowled // 6}.{self.balls_bowled % 6}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "balls_bowled": self.balls_bowled,
            "runs_conceded": self.runs_conceded,
            "wickets_taken": self.wickets_taken,
            "overs_text": self.overs_text,
        }


# -----------------------------
# Ledger entry
# -----------------------------
@dataclass(frozen=True)
class Delivery:
    """
    One ledger entry. Immutable once appended.

    `prior` is the Match value as it was before this delivery was applied.
    It backs undo and is neither compared nor serialized. Deliveries are
    shared (not copied) when a Match is deep-copied.
    """
    innings: int
    over_number: int
    ball_number_in_over: int
    bowler_name: str
    batsman_name: str
    runs_off_bat: int = 0
    extra_runs: int = 0
    extra_type: ExtraType = "none"
    is_wicket: bool = False
    is_legal: bool = True
    is_free_hit: bool = False
    is_hat_trick: bool = False
    resulting_score: int = 0
    resulting_wickets: int = 0
    prior: Optional["Match"] = field(default=None, compare=False, repr=False)

    def __deepcopy__(self, memo: Dict[int, Any]) -> "Delivery":
        return self

    @property
    def total_runs(self) -> int:
        return self.runs_off_bat + self.extra_runs

    @property
    def score_text(self) -> str:
        return f"{self.resulting_score}/{self.resulting_wickets}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "innings": self.innings,
            "over": self.over_number,
            "ball": self.ball_number_in_over,
            "bowler": self.bowler_name,
            "batsman": self.batsman_name,
            "runs_off_bat": self.runs_off_bat,
            "extra_runs": self.extra_runs,
            "extra_type": self.extra_type,
            "is_wicket": self.is_wicket,
            "is_legal": self.is_legal,
            "is_free_hit": self.is_free_hit,
            "is_hat_trick": self.is_hat_trick,
            "score": self.score_text,
        }


@dataclass(frozen=True)
class MatchEvent:
    """Informational status line (toss, free hit, over complete, ...)."""
    kind: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind, "message": self.message}


# -----------------------------
# Root aggregate
# -----------------------------
@dataclass
class Match:
    team1: TeamInnings
    team2: TeamInnings
    venue: str = ""
    tournament: str = ""

    phase: MatchPhase = "PRE_TOSS"
    pending: List[PendingInput] = field(default_factory=list)
    current_innings: int = 1

    toss_caller: str = ""
    toss_call: Optional[TossCall] = None
    toss_result: Optional[TossCall] = None
    toss_winner: str = ""
    toss_decision: Optional[TossDecision] = None

    target: int = 0
    is_free_hit: bool = False
    match_completed: bool = False
    winning_team: str = ""
    margin_type: Optional[MarginType] = None
    result_margin: int = 0

    batsmen: List[Batsman] = field(default_factory=list)
    bowler: Optional[Bowler] = None
    ledger: List[Delivery] = field(default_factory=list)
    events: List[MatchEvent] = field(default_factory=list)

    @property
    def batting_team(self) -> TeamInnings:
        return self.team1 if self.team1.is_batting else self.team2

    @property
    def bowling_team(self) -> TeamInnings:
        return self.team2 if self.team1.is_batting else self.team1

    @property
    def striker(self) -> Optional[Batsman]:
        for b in self.batsmen:
            if b.is_on_strike and not b.is_out:
                return b
        return None

    @property
    def not_out_batsmen(self) -> List[Batsman]:
        return [b for b in self.batsmen if not b.is_out]

    def team(self, name: str) -> TeamInnings:
        if name == self.team1.name:
            return self.team1
        if name == self.team2.name:
            return self.team2
        raise ValueError(f"Unknown team: {name}")

    def other_team(self, name: str) -> TeamInnings:
        return self.team2 if self.team(name) is self.team1 else self.team1

    def add_event(self, kind: str, message: str) -> None:
        self.events.append(MatchEvent(kind=kind, message=message))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase,
            "pending": list(self.pending),
            "current_innings": self.current_innings,
            "venue": self.venue,
            "tournament": self.tournament,
            "team1": self.team1.to_dict(),
            "team2": self.team2.to_dict(),
            "toss": {
                "caller": self.toss_caller,
                "call": self.toss_call,
                "result": self.toss_result,
                "winner": self.toss_winner,
                "decision": self.toss_decision,
            },
            "target": self.target,
            "is_free_hit": self.is_free_hit,
            "match_completed": self.match_completed,
            "winning_team": self.winning_team,
            "margin_type": self.margin_type,
            "result_margin": self.result_margin,
            "batsmen": [b.to_dict() for b in self.batsmen],
            "bowler": self.bowler.to_dict() if self.bowler else None,
            "deliveries": len(self.ledger),
            "events": [e.to_dict() for e in self.events[-10:]],
        }


# -----------------------------
# Terminal output
# -----------------------------
@dataclass(frozen=True)
class MatchResult:
    winning_team: str
    margin_type: MarginType
    margin_value: int
    final_scores: List[Dict[str, Any]]

    @property
    def summary(self) -> str:
        unit = self.margin_type if self.margin_value != 1 else self.margin_type[:-1]
        return f"{self.winning_team} wins by {self.margin_value} {unit}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "winning_team": self.winning_team,
            "margin_type": self.margin_type,
            "margin_value": self.margin_value,
            "final_scores": [dict(s) for s in self.final_scores],
            "summary": self.summary,
        }
