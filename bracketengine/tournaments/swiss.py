"""
Swiss system — standings and pairing.

Standings are never stored: they are recomputed from the completed matches
every time they are needed, so a corrected result is reflected everywhere.

Ranking is points, then Buchholz (sum of opponents' points), then
Sonneborn–Berger (points of beaten opponents plus half the points of drawn
opponents), all descending.  Anything still tied keeps seed order.

Pairing processes the ranked list top-down.  Each unpaired participant meets
the nearest unpaired participant below them they have not played yet, which
naturally prefers their own score group and then the next lower ones.  When
the greedy pass would force a rematch, a bounded backtracking search looks
for a rematch-free pairing in the same preference order; only if none is
found is the rematch rule relaxed and the match flagged forced_rematch.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable

from bracketengine.tournaments.base import (
    BracketMatch,
    Participant,
    SwissRules,
    SwissStanding,
)
from bracketengine.tournaments.errors import InsufficientParticipants

logger = logging.getLogger(__name__)

# Upper bound on backtracking steps before falling back to the greedy pairing
SEARCH_BUDGET = 20_000


# --------------------------------------------------------------------------- #
# Standings                                                                    #
# --------------------------------------------------------------------------- #

def compute_standings(
    participants: list[Participant],
    matches: Iterable[BracketMatch],
    rules: SwissRules,
) -> list[SwissStanding]:
    """Recompute every participant's record and tie-breaks, ranked."""
    table = {p.id: SwissStanding(participant=p.id, seed=p.seed) for p in participants}
    beaten: dict[str, list[str]] = {p.id: [] for p in participants}
    drawn: dict[str, list[str]] = {p.id: [] for p in participants}

    for m in matches:
        if m.status == "bye" and m.participant_a in table:
            entry = table[m.participant_a]
            entry.wins += 1
            entry.byes += 1
            entry.points += rules.points_for_bye
            continue
        if m.status != "completed":
            continue
        a, b = m.participant_a, m.participant_b
        if a not in table or b not in table:
            logger.warning("Match %s references an unknown participant; ignored", m.id)
            continue
        table[a].opponents.add(b)
        table[b].opponents.add(a)
        if m.winner is None:
            for p, o in ((a, b), (b, a)):
                table[p].draws += 1
                table[p].points += rules.points_for_draw
                drawn[p].append(o)
        else:
            table[m.winner].wins += 1
            table[m.winner].points += rules.points_for_win
            table[m.loser].losses += 1
            table[m.loser].points += rules.points_for_loss
            beaten[m.winner].append(m.loser)

    # Tie-breaks need final point totals
    for entry in table.values():
        entry.buchholz = sum(table[o].points for o in entry.opponents)
        entry.sonneborn_berger = (
            sum(table[o].points for o in beaten[entry.participant])
            + 0.5 * sum(table[o].points for o in drawn[entry.participant])
        )

    return rank_standings(table.values())


def rank_standings(standings: Iterable[SwissStanding]) -> list[SwissStanding]:
    return sorted(standings, key=lambda s: s.sort_key)


# --------------------------------------------------------------------------- #
# Pairing                                                                      #
# --------------------------------------------------------------------------- #

def pair_first_round(
    participants: list[Participant],
    rng: random.Random,
) -> list[BracketMatch]:
    """Round 1: a shuffled roster split into consecutive pairs."""
    if len(participants) < 2:
        raise InsufficientParticipants(required=2, available=len(participants))
    roster = [p.id for p in participants]
    rng.shuffle(roster)
    pairs = [(roster[i], roster[i + 1]) for i in range(0, len(roster) - 1, 2)]
    leftover = roster[-1] if len(roster) % 2 else None
    return _build_round(1, pairs, leftover, forced=set())


def pair_next_round(standings: list[SwissStanding], round_num: int) -> list[BracketMatch]:
    """
    Pair round `round_num` from ranked standings.

    Returns the new matches.  At most one participant gets a bye, and only
    when the roster is odd.
    """
    ranked = [s.participant for s in standings]
    opponents = {s.participant: s.opponents for s in standings}

    pairs, leftover, forced = _greedy_pairing(ranked, opponents)
    if forced:
        searched = _search_pairing(ranked, opponents)
        if searched is not None:
            pairs, leftover = searched
            forced = set()

    for a, b in pairs:
        if (a, b) in forced:
            logger.warning("Round %d: forced rematch %s vs %s, no other pairing available", round_num, a, b)
    if leftover is not None:
        logger.info("Round %d: bye for %s", round_num, leftover)

    return _build_round(round_num, pairs, leftover, forced)


def _greedy_pairing(
    ranked: list[str],
    opponents: dict[str, set[str]],
) -> tuple[list[tuple[str, str]], str | None, set[tuple[str, str]]]:
    paired: set[str] = set()
    pairs: list[tuple[str, str]] = []
    forced: set[tuple[str, str]] = set()

    for i, p in enumerate(ranked):
        if p in paired:
            continue
        below = [q for q in ranked[i + 1:] if q not in paired]
        if not below:
            break
        # Forward scan covers the own score group first, then lower groups
        partner = next((q for q in below if q not in opponents[p]), None)
        if partner is None:
            partner = below[0]
            forced.add((p, partner))
        paired.update((p, partner))
        pairs.append((p, partner))

    unpaired = [p for p in ranked if p not in paired]
    return pairs, (unpaired[0] if unpaired else None), forced


class _BudgetExhausted(Exception):
    pass


def _search_pairing(
    ranked: list[str],
    opponents: dict[str, set[str]],
    budget: int = SEARCH_BUDGET,
) -> tuple[list[tuple[str, str]], str | None] | None:
    """Backtracking search for a rematch-free pairing in greedy order."""
    steps = 0

    def search(remaining: list[str]) -> tuple[list[tuple[str, str]], str | None] | None:
        nonlocal steps
        steps += 1
        if steps > budget:
            raise _BudgetExhausted
        if not remaining:
            return [], None
        if len(remaining) == 1:
            return [], remaining[0]
        head, rest = remaining[0], remaining[1:]
        for j, candidate in enumerate(rest):
            if candidate in opponents[head]:
                continue
            found = search(rest[:j] + rest[j + 1:])
            if found is not None:
                pairs, leftover = found
                return [(head, candidate)] + pairs, leftover
        return None

    try:
        return search(ranked)
    except _BudgetExhausted:
        logger.debug("Rematch-free pairing search gave up after %d steps", budget)
        return None


def _build_round(
    round_num: int,
    pairs: list[tuple[str, str]],
    leftover: str | None,
    forced: set[tuple[str, str]],
) -> list[BracketMatch]:
    matches = [
        BracketMatch(
            id=swiss_match_id(round_num, i),
            round=round_num,
            position=i,
            participant_a=a,
            participant_b=b,
            forced_rematch=(a, b) in forced,
        )
        for i, (a, b) in enumerate(pairs)
    ]
    if leftover is not None:
        matches.append(
            BracketMatch(
                id=swiss_match_id(round_num, len(pairs)),
                round=round_num,
                position=len(pairs),
                participant_a=leftover,
                status="bye",
            )
        )
    return matches


def swiss_match_id(round_num: int, position: int) -> str:
    return f"S{round_num}-M{position + 1}"
