"""
Tournament event dataclasses — the shared language between the simulation
runner and any consumer (CLI display, tests).

All events are frozen and can be serialised with dataclasses.asdict().
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from bracketengine.tournaments.base import (
    BracketMatch,
    Placement,
    SwissStanding,
    TournamentFormat,
)


@dataclass(frozen=True)
class TournamentStartEvent:
    """Fired once, after the bracket (or Swiss round 1) has been generated."""

    tournament_id: str
    tournament_name: str
    format: TournamentFormat
    participant_ids: list[str]          # seed order
    total_matches: int                  # matches generated up front
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class RoundStartEvent:
    """
    Fired before a batch of matches is played.  For Swiss this is a Swiss
    round; for elimination formats it is every match playable right now.
    """

    round_num: int
    # Each pairing: (match_id, participant_a, participant_b)
    # None as participant_b means participant_a has a bye.
    pairings: list[tuple[str, str, str | None]]
    swiss: bool = False


@dataclass(frozen=True)
class MatchCompleteEvent:
    match: BracketMatch
    advanced_ids: list[str]             # downstream matches that changed
    eliminated: list[str]


@dataclass(frozen=True)
class RoundCompleteEvent:
    round_num: int
    results: list[BracketMatch]
    standings: list[SwissStanding]      # empty for elimination formats


@dataclass(frozen=True)
class TournamentCompleteEvent:
    tournament_id: str
    champion: str | None
    placements: list[Placement]
    standings: list[SwissStanding]      # final Swiss standings, else empty
    timestamp: datetime = field(default_factory=datetime.now)


# Union type for type-safe pattern matching in consumers
TournamentEvent = (
    TournamentStartEvent
    | RoundStartEvent
    | MatchCompleteEvent
    | RoundCompleteEvent
    | TournamentCompleteEvent
)
