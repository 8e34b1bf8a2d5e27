"""
Tournament bracket engine.

create_orchestrator() is the single entry point for wiring an engine to a
store.  The orchestrator dispatches on TournamentFormat.

To add a new format:
  1. Create bracketengine/tournaments/<name>.py with a generator function
  2. Add it to the TournamentFormat literal and to the orchestrator's match
"""

from __future__ import annotations

import random

from bracketengine.tournaments.base import (
    BracketMatch,
    BracketSide,
    MatchStatus,
    Participant,
    Placement,
    SwissRules,
    SwissStanding,
    TournamentFormat,
    TournamentSettings,
)
from bracketengine.tournaments.double_elimination import generate_double_elimination
from bracketengine.tournaments.errors import (
    AlreadyCompleted,
    BracketAlreadyGenerated,
    BracketError,
    InsufficientParticipants,
    InvalidWinner,
    MatchNotFound,
    MatchNotReady,
    RoundNotComplete,
    TooManyParticipants,
    TournamentFinished,
    TournamentNotFound,
    UnsupportedForFormat,
)
from bracketengine.tournaments.orchestrator import TournamentOrchestrator
from bracketengine.tournaments.results import MatchResultProcessor, ResultOutcome
from bracketengine.tournaments.single_elimination import generate_single_elimination
from bracketengine.tournaments.store import InMemoryStore, TournamentStore
from bracketengine.tournaments.swiss import compute_standings, pair_first_round, pair_next_round

__all__ = [
    # Base types
    "BracketMatch",
    "BracketSide",
    "MatchStatus",
    "Participant",
    "Placement",
    "SwissRules",
    "SwissStanding",
    "TournamentFormat",
    "TournamentSettings",
    # Errors
    "BracketError",
    "InsufficientParticipants",
    "TooManyParticipants",
    "UnsupportedForFormat",
    "AlreadyCompleted",
    "InvalidWinner",
    "MatchNotReady",
    "RoundNotComplete",
    "TournamentFinished",
    "BracketAlreadyGenerated",
    "TournamentNotFound",
    "MatchNotFound",
    # Engine
    "generate_single_elimination",
    "generate_double_elimination",
    "compute_standings",
    "pair_first_round",
    "pair_next_round",
    "MatchResultProcessor",
    "ResultOutcome",
    "TournamentOrchestrator",
    "TournamentStore",
    "InMemoryStore",
    # Factory
    "create_orchestrator",
]


def create_orchestrator(
    store: TournamentStore | None = None,
    random_seed: int | None = None,
) -> TournamentOrchestrator:
    """
    Wire a TournamentOrchestrator.

    Args:
        store:       persistence collaborator; defaults to a fresh InMemoryStore.
        random_seed: seeds Swiss round-1 shuffling for reproducible pairings.
    """
    return TournamentOrchestrator(
        store if store is not None else InMemoryStore(),
        rng=random.Random(random_seed),
    )
