"""
Persistence collaborator.

The engine never owns storage; it talks to a TournamentStore.  Anything that
satisfies the protocol works (an ORM repository, an HTTP client, …).
InMemoryStore is the reference implementation used by the CLI and the tests.

Stores hand out copies: the engine mutates what it loads freely and only a
save_matches() call makes a change visible.
"""

from __future__ import annotations

import copy
import logging
from typing import Protocol

from bracketengine.tournaments.base import (
    BracketMatch,
    Participant,
    TournamentSettings,
)
from bracketengine.tournaments.errors import TournamentNotFound

logger = logging.getLogger(__name__)


class TournamentStore(Protocol):
    def load_tournament(self, tournament_id: str) -> TournamentSettings: ...

    def save_tournament(self, settings: TournamentSettings) -> None: ...

    def list_eligible_participants(self, tournament_id: str) -> list[Participant]:
        """Checked-in participants, seed-ordered."""
        ...

    def save_participants(self, tournament_id: str, participants: list[Participant]) -> None:
        """Replace the eligible roster with the one a bracket was generated from."""
        ...

    def load_matches(self, tournament_id: str) -> list[BracketMatch]: ...

    def save_matches(self, tournament_id: str, matches: list[BracketMatch]) -> None:
        """Insert new matches and update existing ones (keyed by match id)."""
        ...

    def record_placement(self, tournament_id: str, participant: str, rank: int) -> None: ...

    def record_elimination(self, tournament_id: str, participant: str, match_id: str | None) -> None: ...


class InMemoryStore:
    """Dict-backed TournamentStore."""

    def __init__(self) -> None:
        self._tournaments: dict[str, TournamentSettings] = {}
        self._registrations: dict[str, list[Participant]] = {}
        self._matches: dict[str, dict[str, BracketMatch]] = {}
        self.placements: dict[str, dict[str, int]] = {}
        self.eliminations: dict[str, dict[str, str | None]] = {}

    # ------------------------------------------------------------------ #
    # Registration side (outside the engine's interface)                   #
    # ------------------------------------------------------------------ #

    def add_tournament(
        self, settings: TournamentSettings, participants: list[Participant]
    ) -> None:
        """Register a tournament and its roster.  No-shows are eliminated up front."""
        self._tournaments[settings.tournament_id] = copy.deepcopy(settings)
        self._registrations[settings.tournament_id] = list(participants)
        self._matches.setdefault(settings.tournament_id, {})
        for p in participants:
            if not p.checked_in:
                self.record_elimination(settings.tournament_id, p.id, None)

    # ------------------------------------------------------------------ #
    # TournamentStore                                                      #
    # ------------------------------------------------------------------ #

    def load_tournament(self, tournament_id: str) -> TournamentSettings:
        return copy.deepcopy(self._require(tournament_id))

    def save_tournament(self, settings: TournamentSettings) -> None:
        self._tournaments[settings.tournament_id] = copy.deepcopy(settings)

    def list_eligible_participants(self, tournament_id: str) -> list[Participant]:
        self._require(tournament_id)
        return sorted(
            (p for p in self._registrations.get(tournament_id, []) if p.checked_in),
            key=lambda p: p.seed,
        )

    def save_participants(self, tournament_id: str, participants: list[Participant]) -> None:
        self._require(tournament_id)
        self._registrations[tournament_id] = list(participants)
        logger.debug("Saved roster of %d for %s", len(participants), tournament_id)

    def load_matches(self, tournament_id: str) -> list[BracketMatch]:
        self._require(tournament_id)
        return copy.deepcopy(list(self._matches.get(tournament_id, {}).values()))

    def save_matches(self, tournament_id: str, matches: list[BracketMatch]) -> None:
        self._require(tournament_id)
        stored = self._matches.setdefault(tournament_id, {})
        for m in matches:
            stored[m.id] = copy.deepcopy(m)
        logger.debug("Saved %d match(es) for %s", len(matches), tournament_id)

    def record_placement(self, tournament_id: str, participant: str, rank: int) -> None:
        self.placements.setdefault(tournament_id, {})[participant] = rank

    def record_elimination(self, tournament_id: str, participant: str, match_id: str | None) -> None:
        self.eliminations.setdefault(tournament_id, {})[participant] = match_id

    def _require(self, tournament_id: str) -> TournamentSettings:
        try:
            return self._tournaments[tournament_id]
        except KeyError:
            raise TournamentNotFound(tournament_id) from None
