"""
Bracket engine errors.

Every failure is local and synchronous: the operation that raised left the
stored match graph exactly as it was, and retrying is the caller's job.
"""

from __future__ import annotations

from typing import Any

from bracketengine.tournaments.base import Placement


class BracketError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InsufficientParticipants(BracketError):
    """Fewer eligible participants than the format (or tournament) requires."""

    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            f"At least {required} participants are required, got {available}",
            {"required": required, "available": available},
        )
        self.required = required
        self.available = available


class TooManyParticipants(BracketError):
    def __init__(self, maximum: int, available: int) -> None:
        super().__init__(
            f"At most {maximum} participants are allowed, got {available}",
            {"maximum": maximum, "available": available},
        )


class UnsupportedForFormat(BracketError):
    def __init__(self, operation: str, format: str) -> None:
        super().__init__(
            f"{operation} is not supported for {format} tournaments",
            {"operation": operation, "format": format},
        )


class AlreadyCompleted(BracketError):
    """A result was reported for a match that is no longer pending."""

    def __init__(self, match_id: str, status: str) -> None:
        super().__init__(
            f"Match {match_id} is not pending (status: {status})",
            {"match_id": match_id, "status": status},
        )
        self.match_id = match_id


class InvalidWinner(BracketError):
    def __init__(self, match_id: str, winner: str, participants: list[str]) -> None:
        super().__init__(
            f"{winner!r} is not a participant of match {match_id}",
            {"match_id": match_id, "winner": winner, "participants": participants},
        )


class MatchNotReady(BracketError):
    """The match is pending but still waits for an incoming participant."""

    def __init__(self, match_id: str) -> None:
        super().__init__(f"Match {match_id} does not have two participants yet", {"match_id": match_id})


class RoundNotComplete(BracketError):
    def __init__(self, round_num: int, outstanding: list[str]) -> None:
        super().__init__(
            f"Round {round_num} still has {len(outstanding)} unresolved match(es)",
            {"round": round_num, "outstanding": outstanding},
        )
        self.outstanding = outstanding


class TournamentFinished(BracketError):
    """
    Terminal signal rather than a failure: the configured number of Swiss
    rounds has been played and final placements were computed.
    """

    def __init__(self, tournament_id: str, placements: list[Placement]) -> None:
        super().__init__(
            f"Tournament {tournament_id} is finished",
            {"tournament_id": tournament_id, "placements": len(placements)},
        )
        self.tournament_id = tournament_id
        self.placements = placements


class BracketAlreadyGenerated(BracketError):
    def __init__(self, tournament_id: str) -> None:
        super().__init__(
            f"Tournament {tournament_id} already has a bracket", {"tournament_id": tournament_id}
        )


class TournamentNotFound(BracketError):
    def __init__(self, tournament_id: str) -> None:
        super().__init__(f"Unknown tournament: {tournament_id!r}", {"tournament_id": tournament_id})


class MatchNotFound(BracketError):
    def __init__(self, match_id: str) -> None:
        super().__init__(f"Unknown match: {match_id!r}", {"match_id": match_id})
