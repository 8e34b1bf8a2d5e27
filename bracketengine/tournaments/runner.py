"""
Simulation runner — plays a generated tournament to the end through the
orchestrator, deciding each match with a WinnerPicker, and yields
TournamentEvents as play progresses.

Used by the CLI to demo a configured tournament and by the tests to drive
whole brackets without hand-writing every result.

Winner policies:
    "seed"      — higher seed (lower number) wins.
    "coin_flip" — random winner.
Swiss matches may additionally end drawn with probability draw_rate.
"""

from __future__ import annotations

import logging
import random
from typing import Callable, Iterator, Literal

from bracketengine.tournaments.base import BracketMatch, display_sort_key
from bracketengine.tournaments.errors import TournamentFinished
from bracketengine.tournaments.events import (
    MatchCompleteEvent,
    RoundCompleteEvent,
    RoundStartEvent,
    TournamentCompleteEvent,
    TournamentEvent,
    TournamentStartEvent,
)
from bracketengine.tournaments.orchestrator import TournamentOrchestrator

logger = logging.getLogger(__name__)

WinnerPolicy = Literal["seed", "coin_flip"]

# (match, draw_allowed) -> winning participant id, or None for a draw
WinnerPicker = Callable[[BracketMatch, bool], str | None]


def make_winner_picker(
    policy: WinnerPolicy,
    seeds: dict[str, int],
    rng: random.Random,
    draw_rate: float = 0.0,
) -> WinnerPicker:
    """Build a WinnerPicker for one of the named policies."""

    def pick(m: BracketMatch, draw_allowed: bool) -> str | None:
        a, b = m.participant_a, m.participant_b
        if a is None or b is None:
            raise ValueError(f"Match {m.id} does not have two participants to pick from")
        if draw_allowed and draw_rate and rng.random() < draw_rate:
            return None
        match policy:
            case "seed":
                return min(a, b, key=lambda p: seeds.get(p, 0))
            case "coin_flip":
                return rng.choice([a, b])
            case _:
                raise ValueError(f"Unknown winner policy: {policy!r}. Valid policies: seed, coin_flip")

    return pick


def simulate_tournament(
    orchestrator: TournamentOrchestrator,
    tournament_id: str,
    pick_winner: WinnerPicker,
) -> Iterator[TournamentEvent]:
    """
    Run a tournament to completion, generating its bracket first if needed.

    Yields:
        TournamentStartEvent    — once
        RoundStartEvent         — once per Swiss round / elimination wave
        MatchCompleteEvent      — once per reported result
        RoundCompleteEvent      — once per Swiss round / elimination wave
        TournamentCompleteEvent — once, last
    """
    settings = orchestrator.get_settings(tournament_id)
    matches = orchestrator.store.load_matches(tournament_id)
    if not matches:
        matches = orchestrator.generate_bracket(tournament_id)

    participants = orchestrator.store.list_eligible_participants(tournament_id)
    yield TournamentStartEvent(
        tournament_id=tournament_id,
        tournament_name=settings.display_name,
        format=settings.format,
        participant_ids=[p.id for p in participants],
        total_matches=len(matches),
    )

    if settings.format == "swiss":
        yield from _run_swiss(orchestrator, tournament_id, pick_winner)
    else:
        yield from _run_elimination(orchestrator, tournament_id, pick_winner)


def _run_elimination(
    orchestrator: TournamentOrchestrator,
    tournament_id: str,
    pick_winner: WinnerPicker,
) -> Iterator[TournamentEvent]:
    wave = 0
    while True:
        matches = sorted(orchestrator.store.load_matches(tournament_id), key=display_sort_key)
        ready = [m for m in matches if m.is_ready]
        if not ready:
            raise RuntimeError(f"Tournament {tournament_id} stalled: no playable matches left")

        wave += 1
        logger.debug("Tournament %s wave %d: %d playable match(es)", tournament_id, wave, len(ready))
        pairings = [(m.id, m.participant_a, m.participant_b) for m in ready]
        if wave == 1:
            # Show seeded byes alongside the first playable matches
            pairings = [
                (m.id, m.participant_a, None)
                for m in matches
                if m.status == "bye" and m.participant_a is not None and m.round == 1
            ] + pairings
        yield RoundStartEvent(round_num=wave, pairings=pairings)

        results: list[BracketMatch] = []
        for m in ready:
            winner = pick_winner(m, False)
            if winner is None:
                # Elimination never draws; fall back to the higher seed slot
                winner = m.participant_a
            outcome = orchestrator.report_match_result(tournament_id, m.id, winner)
            results.append(outcome.updated_match)
            yield MatchCompleteEvent(
                match=outcome.updated_match,
                advanced_ids=[a.id for a in outcome.advanced_matches],
                eliminated=outcome.eliminated,
            )
            if outcome.tournament_complete:
                yield RoundCompleteEvent(round_num=wave, results=results, standings=[])
                yield TournamentCompleteEvent(
                    tournament_id=tournament_id,
                    champion=outcome.placements[0].participant,
                    placements=outcome.placements,
                    standings=[],
                )
                return

        yield RoundCompleteEvent(round_num=wave, results=results, standings=[])


def _run_swiss(
    orchestrator: TournamentOrchestrator,
    tournament_id: str,
    pick_winner: WinnerPicker,
) -> Iterator[TournamentEvent]:
    round_num = orchestrator.current_round(tournament_id)
    while True:
        round_matches = sorted(
            (m for m in orchestrator.store.load_matches(tournament_id) if m.round == round_num),
            key=lambda m: m.position,
        )
        yield RoundStartEvent(
            round_num=round_num,
            pairings=[(m.id, m.participant_a, m.participant_b) for m in round_matches],
            swiss=True,
        )

        results: list[BracketMatch] = []
        for m in round_matches:
            if not m.is_ready:
                continue
            winner = pick_winner(m, True)
            if winner is None:
                outcome = orchestrator.record_draw(tournament_id, m.id)
            else:
                outcome = orchestrator.report_match_result(tournament_id, m.id, winner)
            results.append(outcome.updated_match)
            yield MatchCompleteEvent(match=outcome.updated_match, advanced_ids=[], eliminated=[])

        yield RoundCompleteEvent(
            round_num=round_num,
            results=results,
            standings=orchestrator.get_standings(tournament_id),
        )

        try:
            orchestrator.generate_next_swiss_round(tournament_id)
        except TournamentFinished as finished:
            yield TournamentCompleteEvent(
                tournament_id=tournament_id,
                champion=finished.placements[0].participant if finished.placements else None,
                placements=finished.placements,
                standings=orchestrator.get_standings(tournament_id),
            )
            return
        round_num += 1
