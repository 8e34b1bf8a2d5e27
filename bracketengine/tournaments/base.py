"""
Bracket engine abstractions — shared types for every tournament format.

The match graph is an append-only, id-addressed collection of BracketMatch
records.  Cross references (advances_to / drops_to) are match ids resolved
through a lookup table, never object pointers, so the whole graph can be
copied, persisted and reloaded without fix-ups.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal

TournamentFormat = Literal["single_elimination", "double_elimination", "swiss"]
BracketSide = Literal["winners", "losers", "grand_finals", "grand_finals_reset"]
MatchStatus = Literal["pending", "bye", "completed", "skipped"]
TournamentStatus = Literal["registration_closed", "in_progress", "completed"]

ELIMINATION_FORMATS: tuple[TournamentFormat, ...] = ("single_elimination", "double_elimination")
GRAND_FINALS_SIDES: tuple[BracketSide, ...] = ("grand_finals", "grand_finals_reset")

# Display order of bracket sides; None (Swiss) sorts first.
SIDE_ORDER: dict[BracketSide | None, int] = {
    None: 0,
    "winners": 1,
    "losers": 2,
    "grand_finals": 3,
    "grand_finals_reset": 4,
}


@dataclass(frozen=True)
class Participant:
    """A registered entrant.  Owned by registration; the engine only reads it."""

    id: str
    seed: int                 # 1-based; seed 1 = top seed
    checked_in: bool = True

    def __repr__(self) -> str:
        return f"Participant({self.id!r}, seed={self.seed})"


@dataclass
class BracketMatch:
    """One game slot in the match graph."""

    id: str                                  # e.g. "R1-M1", "W2-M1", "L3-M2", "GF", "S4-M2"
    round: int                               # 1-based, per side
    position: int                            # 0-based within round
    bracket_side: BracketSide | None = None  # None for Swiss
    participant_a: str | None = None
    participant_b: str | None = None
    status: MatchStatus = "pending"
    winner: str | None = None
    loser: str | None = None
    advances_to: str | None = None           # match id the winner fills a slot in
    drops_to: str | None = None              # match id the loser fills a slot in
    forced_rematch: bool = False             # Swiss last-resort pairing

    @property
    def participants(self) -> list[str]:
        return [p for p in (self.participant_a, self.participant_b) if p is not None]

    @property
    def is_ready(self) -> bool:
        """True when the match can be played: pending with both slots filled."""
        return (
            self.status == "pending"
            and self.participant_a is not None
            and self.participant_b is not None
        )

    @property
    def is_resolved(self) -> bool:
        return self.status in ("completed", "bye", "skipped")

    @property
    def is_draw(self) -> bool:
        return self.status == "completed" and self.winner is None

    def has_empty_slot(self) -> bool:
        return self.participant_a is None or self.participant_b is None

    def place(self, participant: str) -> None:
        """Fill the first empty slot (A, then B)."""
        if self.participant_a is None:
            self.participant_a = participant
        elif self.participant_b is None:
            self.participant_b = participant
        else:
            raise ValueError(
                f"Match {self.id} already has two participants; cannot place {participant!r}"
            )

    def opponent_of(self, participant: str) -> str | None:
        if participant == self.participant_a:
            return self.participant_b
        if participant == self.participant_b:
            return self.participant_a
        return None


@dataclass(frozen=True)
class SwissRules:
    """Scoring and length of a Swiss event.  Passed explicitly into every call."""

    num_rounds: int = 5
    points_for_win: float = 1.0
    points_for_draw: float = 0.5
    points_for_loss: float = 0.0
    points_for_bye: float = 1.0


@dataclass
class SwissStanding:
    """Derived record for one Swiss participant, recomputed from matches."""

    participant: str
    seed: int
    points: float = 0.0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    byes: int = 0
    buchholz: float = 0.0
    sonneborn_berger: float = 0.0
    opponents: set[str] = field(default_factory=set)

    @property
    def matches_played(self) -> int:
        return self.wins + self.losses + self.draws

    @property
    def sort_key(self) -> tuple[float, float, float, int]:
        """Points, Buchholz, Sonneborn–Berger descending; seed breaks the rest."""
        return (-self.points, -self.buchholz, -self.sonneborn_berger, self.seed)


@dataclass(frozen=True)
class Placement:
    participant: str
    rank: int   # 1-based


@dataclass
class TournamentSettings:
    """The external tournament entity, as far as the engine needs to read it."""

    tournament_id: str
    format: TournamentFormat
    name: str = ""
    min_participants: int = 2
    max_participants: int = 256
    rules: SwissRules = field(default_factory=SwissRules)
    status: TournamentStatus = "registration_closed"

    @property
    def display_name(self) -> str:
        return self.name or self.tournament_id


def next_power_of_two(n: int) -> int:
    return 1 << math.ceil(math.log2(max(n, 2)))


def match_index(matches: list[BracketMatch]) -> dict[str, BracketMatch]:
    """Build the id → match lookup table for a graph."""
    return {m.id: m for m in matches}


def display_sort_key(match: BracketMatch) -> tuple[int, int, int]:
    return (SIDE_ORDER[match.bracket_side], match.round, match.position)
