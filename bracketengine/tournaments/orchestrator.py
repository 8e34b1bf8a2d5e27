"""
TournamentOrchestrator — the façade the API layer talks to.

Each operation loads a private copy of the tournament's match graph from the
store, applies one transition, and saves the changed matches only after the
transition succeeded.  Mutating operations are serialized per tournament, so
two concurrent reports for the same match cannot both pass the pending check.
"""

from __future__ import annotations

import logging
import random
import threading
from collections import defaultdict

from bracketengine.tournaments.base import (
    ELIMINATION_FORMATS,
    BracketMatch,
    BracketSide,
    Participant,
    Placement,
    SwissRules,
    SwissStanding,
    TournamentFormat,
    TournamentSettings,
    display_sort_key,
)
from bracketengine.tournaments.double_elimination import generate_double_elimination
from bracketengine.tournaments.errors import (
    BracketAlreadyGenerated,
    InsufficientParticipants,
    RoundNotComplete,
    TooManyParticipants,
    TournamentFinished,
    UnsupportedForFormat,
)
from bracketengine.tournaments.results import (
    MatchResultProcessor,
    ResultOutcome,
    is_round_complete,
    outstanding_matches,
)
from bracketengine.tournaments.single_elimination import generate_single_elimination
from bracketengine.tournaments.store import TournamentStore
from bracketengine.tournaments.swiss import (
    compute_standings,
    pair_first_round,
    pair_next_round,
)

logger = logging.getLogger(__name__)

MIN_PARTICIPANTS = 2


class TournamentOrchestrator:
    """Coordinates generation, result application and Swiss rounds per format."""

    def __init__(self, store: TournamentStore, rng: random.Random | None = None) -> None:
        self.store = store
        self.rng = rng or random.Random()
        self._locks: defaultdict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------ #
    # Generation                                                           #
    # ------------------------------------------------------------------ #

    def generate_bracket(
        self,
        tournament_id: str,
        format: TournamentFormat | None = None,
        participants: list[Participant] | None = None,
        rules: SwissRules | None = None,
    ) -> list[BracketMatch]:
        """
        Create the initial match graph (elimination) or round 1 (Swiss).

        participants defaults to the store's eligible list; it must already be
        seed-ordered.  An explicit list replaces the stored roster once the
        bracket is saved.  Raises InsufficientParticipants, TooManyParticipants or
        BracketAlreadyGenerated without touching the store.
        """
        with self._lock(tournament_id):
            settings = self.store.load_tournament(tournament_id)
            if format is not None:
                settings.format = format
            if rules is not None:
                settings.rules = rules

            if self.store.load_matches(tournament_id):
                raise BracketAlreadyGenerated(tournament_id)

            explicit_roster = participants is not None
            if participants is None:
                participants = self.store.list_eligible_participants(tournament_id)
            required = max(MIN_PARTICIPANTS, settings.min_participants)
            if len(participants) < required:
                raise InsufficientParticipants(required=required, available=len(participants))
            if len(participants) > settings.max_participants:
                raise TooManyParticipants(settings.max_participants, len(participants))

            seed_list = [p.id for p in participants]
            match settings.format:
                case "single_elimination":
                    matches = generate_single_elimination(seed_list)
                case "double_elimination":
                    matches = generate_double_elimination(seed_list)
                case "swiss":
                    matches = pair_first_round(participants, self.rng)
                case _:
                    raise UnsupportedForFormat("generate_bracket", settings.format)

            MatchResultProcessor(matches, settings.format).resolve_byes()

            settings.status = "in_progress"
            if explicit_roster:
                # Later Swiss rounds and standings read the roster back from the store
                self.store.save_participants(tournament_id, participants)
            self.store.save_matches(tournament_id, matches)
            self.store.save_tournament(settings)
            logger.info(
                "Bracket generated for %s (%s): %d participants, %d matches",
                tournament_id, settings.format, len(participants), len(matches),
            )
            return matches

    # ------------------------------------------------------------------ #
    # Results                                                              #
    # ------------------------------------------------------------------ #

    def report_match_result(self, tournament_id: str, match_id: str, winner: str) -> ResultOutcome:
        with self._lock(tournament_id):
            settings = self.store.load_tournament(tournament_id)
            processor = MatchResultProcessor(self.store.load_matches(tournament_id), settings.format)
            outcome = processor.report_result(match_id, winner)
            self._persist(settings, outcome)
            return outcome

    def record_draw(self, tournament_id: str, match_id: str) -> ResultOutcome:
        with self._lock(tournament_id):
            settings = self.store.load_tournament(tournament_id)
            if settings.format != "swiss":
                raise UnsupportedForFormat("record_draw", settings.format)
            processor = MatchResultProcessor(self.store.load_matches(tournament_id), settings.format)
            outcome = processor.record_draw(match_id)
            self._persist(settings, outcome)
            return outcome

    # ------------------------------------------------------------------ #
    # Swiss                                                                #
    # ------------------------------------------------------------------ #

    def get_standings(self, tournament_id: str) -> list[SwissStanding]:
        settings = self.store.load_tournament(tournament_id)
        if settings.format != "swiss":
            raise UnsupportedForFormat("get_standings", settings.format)
        return compute_standings(
            self.store.list_eligible_participants(tournament_id),
            self.store.load_matches(tournament_id),
            settings.rules,
        )

    def is_round_complete(self, tournament_id: str, round_num: int) -> bool:
        settings = self.store.load_tournament(tournament_id)
        matches = self.store.load_matches(tournament_id)
        if settings.format == "swiss":
            return is_round_complete(matches, round_num)
        # Elimination rounds are numbered per side; all sides must be done
        sides = {m.bracket_side for m in matches if m.round == round_num}
        return bool(sides) and all(is_round_complete(matches, round_num, side) for side in sides)

    def current_round(self, tournament_id: str) -> int:
        return max((m.round for m in self.store.load_matches(tournament_id)), default=0)

    def generate_next_swiss_round(self, tournament_id: str) -> list[BracketMatch]:
        """
        Pair the next Swiss round.

        Raises RoundNotComplete while the current round has unresolved
        matches, and TournamentFinished (after recording final placements)
        once the configured number of rounds has been played.
        """
        with self._lock(tournament_id):
            settings = self.store.load_tournament(tournament_id)
            if settings.format != "swiss":
                raise UnsupportedForFormat("generate_next_swiss_round", settings.format)

            matches = self.store.load_matches(tournament_id)
            current = max((m.round for m in matches), default=0)
            if current and not is_round_complete(matches, current):
                raise RoundNotComplete(current, outstanding_matches(matches, current))

            participants = self.store.list_eligible_participants(tournament_id)
            standings = compute_standings(participants, matches, settings.rules)

            if current >= settings.rules.num_rounds:
                placements = [Placement(s.participant, rank) for rank, s in enumerate(standings, 1)]
                if settings.status != "completed":
                    for placement in placements:
                        self.store.record_placement(tournament_id, placement.participant, placement.rank)
                    settings.status = "completed"
                    self.store.save_tournament(settings)
                    logger.info(
                        "Swiss tournament %s finished after %d rounds; winner %s",
                        tournament_id, current, placements[0].participant if placements else None,
                    )
                raise TournamentFinished(tournament_id, placements)

            new_round = pair_next_round(standings, current + 1)
            self.store.save_matches(tournament_id, new_round)
            logger.info("Swiss round %d paired for %s: %d matches", current + 1, tournament_id, len(new_round))
            return new_round

    # ------------------------------------------------------------------ #
    # Read side                                                            #
    # ------------------------------------------------------------------ #

    def get_bracket(self, tournament_id: str) -> dict[tuple[BracketSide | None, int], list[BracketMatch]]:
        """Matches grouped by (side, round) in display order."""
        grouped: dict[tuple[BracketSide | None, int], list[BracketMatch]] = {}
        for m in sorted(self.store.load_matches(tournament_id), key=display_sort_key):
            grouped.setdefault((m.bracket_side, m.round), []).append(m)
        return grouped

    def get_settings(self, tournament_id: str) -> TournamentSettings:
        return self.store.load_tournament(tournament_id)

    # ------------------------------------------------------------------ #
    # Internal helpers                                                     #
    # ------------------------------------------------------------------ #

    def _persist(self, settings: TournamentSettings, outcome: ResultOutcome) -> None:
        tournament_id = settings.tournament_id
        self.store.save_matches(tournament_id, [outcome.updated_match, *outcome.advanced_matches])
        for participant in outcome.eliminated:
            self.store.record_elimination(tournament_id, participant, outcome.updated_match.id)
        if outcome.tournament_complete and settings.format in ELIMINATION_FORMATS:
            for placement in outcome.placements:
                self.store.record_placement(tournament_id, placement.participant, placement.rank)
            settings.status = "completed"
            self.store.save_tournament(settings)

    def _lock(self, tournament_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks[tournament_id]
