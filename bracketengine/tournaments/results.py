"""
Match result processing — the state machine over the match graph.

Per match:   pending → completed          (result reported)
             pending → bye                (one or zero participants, nothing to play)
             pending → skipped            (grand-finals reset not needed)
Every state other than pending is terminal.

Applying a result routes the winner along advances_to and the loser along
drops_to, then resolves any downstream match that can no longer receive a
second participant (all of its feeders are settled) as a bye.  Byes cascade
the same way completed matches do: the sole participant is the winner.

The processor mutates the match list it was given.  Callers that need
all-or-nothing semantics hand it a copy and persist only on success.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from bracketengine.tournaments.base import (
    GRAND_FINALS_SIDES,
    BracketMatch,
    BracketSide,
    Placement,
    TournamentFormat,
    match_index,
)
from bracketengine.tournaments.errors import (
    AlreadyCompleted,
    InvalidWinner,
    MatchNotFound,
    MatchNotReady,
    UnsupportedForFormat,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultOutcome:
    """What a single result application changed."""

    updated_match: BracketMatch
    advanced_matches: list[BracketMatch] = field(default_factory=list)
    tournament_complete: bool = False
    placements: list[Placement] = field(default_factory=list)
    eliminated: list[str] = field(default_factory=list)
    round_complete: bool = False


class MatchResultProcessor:
    """Applies results and byes to one tournament's match graph."""

    def __init__(self, matches: list[BracketMatch], format: TournamentFormat) -> None:
        self.format = format
        self._matches = matches
        self._by_id = match_index(matches)
        self._feeders: dict[str, list[str]] = {}
        for m in matches:
            for target in (m.advances_to, m.drops_to):
                if target is not None:
                    self._feeders.setdefault(target, []).append(m.id)

    # ------------------------------------------------------------------ #
    # Public interface                                                     #
    # ------------------------------------------------------------------ #

    @property
    def matches(self) -> list[BracketMatch]:
        return self._matches

    def get(self, match_id: str) -> BracketMatch:
        try:
            return self._by_id[match_id]
        except KeyError:
            raise MatchNotFound(match_id) from None

    def resolve_byes(self) -> list[BracketMatch]:
        """
        Advance every seeded bye and cascade.  Call once, right after the
        bracket has been generated.  Returns the matches that changed.
        """
        changed: dict[str, BracketMatch] = {}
        seeded = [m for m in self._matches if m.status == "bye" and not self._feeders.get(m.id)]
        # Deliver every seeded bye before checking anything downstream, so a
        # target is never judged starved while a sibling bye is still in flight
        for m in seeded:
            changed[m.id] = m
            if m.participant_a is not None and m.advances_to is not None:
                self._deliver(m.participant_a, m.advances_to, changed)
        for m in seeded:
            self._after_resolution(m, changed)
        return list(changed.values())

    def report_result(self, match_id: str, winner: str) -> ResultOutcome:
        match = self.get(match_id)
        if match.status != "pending":
            raise AlreadyCompleted(match_id, match.status)
        if winner not in match.participants:
            raise InvalidWinner(match_id, winner, match.participants)
        loser = match.opponent_of(winner)
        if loser is None:
            raise MatchNotReady(match_id)

        match.status = "completed"
        match.winner = winner
        match.loser = loser
        logger.info("Match %s completed: %s beat %s", match.id, winner, loser)

        changed: dict[str, BracketMatch] = {}

        if match.bracket_side == "grand_finals":
            return self._complete_grand_finals(match, winner, loser, changed)

        if match.advances_to is not None:
            self._deliver(winner, match.advances_to, changed)

        eliminated: list[str] = []
        if match.drops_to is not None and match.bracket_side not in GRAND_FINALS_SIDES:
            self._deliver(loser, match.drops_to, changed)
        elif self.format != "swiss":
            eliminated.append(loser)
            logger.info("%s eliminated in match %s", loser, match.id)

        self._after_resolution(match, changed)

        if self._is_final(match):
            placements = [Placement(winner, 1), Placement(loser, 2)]
            logger.info("Tournament complete: champion %s, runner-up %s", winner, loser)
            return ResultOutcome(
                updated_match=match,
                advanced_matches=list(changed.values()),
                tournament_complete=True,
                placements=placements,
                eliminated=eliminated,
                round_complete=True,
            )

        return ResultOutcome(
            updated_match=match,
            advanced_matches=list(changed.values()),
            eliminated=eliminated,
            round_complete=is_round_complete(self._matches, match.round, match.bracket_side),
        )

    def record_draw(self, match_id: str) -> ResultOutcome:
        """Complete a Swiss match with no winner."""
        if self.format != "swiss":
            raise UnsupportedForFormat("record_draw", self.format)
        match = self.get(match_id)
        if match.status != "pending":
            raise AlreadyCompleted(match_id, match.status)
        if not match.is_ready:
            raise MatchNotReady(match_id)

        match.status = "completed"
        match.winner = None
        match.loser = None
        logger.info("Match %s drawn: %s vs %s", match.id, match.participant_a, match.participant_b)
        return ResultOutcome(
            updated_match=match,
            round_complete=is_round_complete(self._matches, match.round, match.bracket_side),
        )

    def prior_losses(self, participant: str, *, excluding: str | None = None) -> int:
        return sum(
            1
            for m in self._matches
            if m.status == "completed" and m.loser == participant and m.id != excluding
        )

    # ------------------------------------------------------------------ #
    # Internal helpers                                                     #
    # ------------------------------------------------------------------ #

    def _complete_grand_finals(
        self,
        match: BracketMatch,
        winner: str,
        loser: str,
        changed: dict[str, BracketMatch],
    ) -> ResultOutcome:
        reset = self.get(match.advances_to) if match.advances_to else None

        if self.prior_losses(winner, excluding=match.id) == 0 or reset is None:
            # Winners-bracket representative held on: no reset needed
            if reset is not None:
                reset.status = "skipped"
                changed[reset.id] = reset
                logger.info("Grand finals won by %s from the winners bracket; reset skipped", winner)
            return ResultOutcome(
                updated_match=match,
                advanced_matches=list(changed.values()),
                tournament_complete=True,
                placements=[Placement(winner, 1), Placement(loser, 2)],
                eliminated=[loser],
                round_complete=True,
            )

        # Losers-bracket representative won: both now have one loss
        self._deliver(winner, reset.id, changed)
        self._deliver(loser, reset.id, changed)
        logger.info("Grand finals won by %s from the losers bracket; bracket reset", winner)
        return ResultOutcome(
            updated_match=match,
            advanced_matches=list(changed.values()),
            round_complete=True,
        )

    def _is_final(self, m: BracketMatch) -> bool:
        match self.format:
            case "single_elimination":
                return m.advances_to is None
            case "double_elimination":
                return m.bracket_side == "grand_finals_reset"
            case _:
                return False

    def _deliver(self, participant: str, target_id: str, changed: dict[str, BracketMatch]) -> None:
        target = self.get(target_id)
        target.place(participant)
        changed[target.id] = target
        logger.debug("%s placed into match %s", participant, target.id)

    def _after_resolution(self, match: BracketMatch, changed: dict[str, BracketMatch]) -> None:
        """Resolve downstream matches that can no longer be filled."""
        for target_id in (match.advances_to, match.drops_to):
            if target_id is not None:
                self._resolve_if_starved(self.get(target_id), changed)

    def _resolve_if_starved(self, match: BracketMatch, changed: dict[str, BracketMatch]) -> None:
        if match.status != "pending" or not match.has_empty_slot():
            return
        if match.bracket_side == "grand_finals_reset":
            return
        feeders = self._feeders.get(match.id, [])
        if not feeders or not all(self._by_id[f].is_resolved for f in feeders):
            return

        if match.participant_a is None:
            match.participant_a, match.participant_b = match.participant_b, None
        match.status = "bye"
        changed[match.id] = match
        if match.participant_a is None:
            logger.debug("Match %s has no participants left; empty bye", match.id)
        else:
            logger.debug("Match %s resolved as a bye for %s", match.id, match.participant_a)
            if match.advances_to is not None:
                self._deliver(match.participant_a, match.advances_to, changed)
        self._after_resolution(match, changed)


def is_round_complete(
    matches: list[BracketMatch],
    round_num: int,
    bracket_side: BracketSide | None = None,
) -> bool:
    """True iff every match of the round (on that side) is resolved."""
    in_round = [m for m in matches if m.round == round_num and m.bracket_side == bracket_side]
    return bool(in_round) and all(m.is_resolved for m in in_round)


def outstanding_matches(matches: list[BracketMatch], round_num: int) -> list[str]:
    return [m.id for m in matches if m.round == round_num and not m.is_resolved]
