"""
Single-elimination bracket generation.

Rules:
- Bracket size is the next power of two >= N.  The missing slots are byes.
- Round 1 follows standard bracket seeding (1 vs S, S/2 vs S/2+1, …) so that
  byes land on the top seeds and seeds 1 and 2 can only meet in the final.
- Later rounds start empty; they are filled as earlier matches resolve.
- Match i of round r advances to match i // 2 of round r + 1.

Byes are only *marked* here.  Advancing a bye participant into round 2 is the
result processor's job (see results.resolve_byes).
"""

from __future__ import annotations

import logging
import math

from bracketengine.tournaments.base import (
    BracketMatch,
    BracketSide,
    next_power_of_two,
)
from bracketengine.tournaments.errors import InsufficientParticipants

logger = logging.getLogger(__name__)


def generate_single_elimination(
    seed_list: list[str],
    *,
    bracket_side: BracketSide | None = None,
    id_prefix: str = "R",
) -> list[BracketMatch]:
    """
    Build a balanced bracket from a seed-ordered list of participant ids.

    Args:
        seed_list:    participant ids, index 0 = top seed.
        bracket_side: tag for every match ("winners" when used inside a
                      double-elimination bracket, None otherwise).
        id_prefix:    first character(s) of the match ids ("R" → "R1-M1").

    Returns:
        A flat list of matches ordered by (round, position), with
        advances_to wired inside the bracket.  The final's advances_to is
        left unset for the caller.
    """
    n = len(seed_list)
    if n < 2:
        raise InsufficientParticipants(required=2, available=n)
    if len(set(seed_list)) != n:
        raise ValueError("Seed list contains duplicate participant ids")

    size = next_power_of_two(n)
    total_rounds = int(math.log2(size))
    slots = _seeded_slots(seed_list, size)

    matches: list[BracketMatch] = []
    rounds: list[list[BracketMatch]] = []

    first_round: list[BracketMatch] = []
    for i in range(0, size, 2):
        a, b = slots[i], slots[i + 1]
        if a is None:
            # Keep the present participant in slot A
            a, b = b, a
        first_round.append(
            BracketMatch(
                id=match_id(id_prefix, 1, i // 2),
                round=1,
                position=i // 2,
                bracket_side=bracket_side,
                participant_a=a,
                participant_b=b,
                status="pending" if b is not None else "bye",
            )
        )
    rounds.append(first_round)

    for round_num in range(2, total_rounds + 1):
        count = len(rounds[-1]) // 2
        rounds.append([
            BracketMatch(
                id=match_id(id_prefix, round_num, i),
                round=round_num,
                position=i,
                bracket_side=bracket_side,
            )
            for i in range(count)
        ])

    # Same-structure tree: match i feeds match i // 2 of the next round
    for current, following in zip(rounds, rounds[1:]):
        for i, m in enumerate(current):
            m.advances_to = following[i // 2].id

    for round_matches in rounds:
        matches.extend(round_matches)

    logger.info(
        "Generated single-elimination bracket: %d participants, size %d, %d rounds, %d byes",
        n, size, total_rounds, size - n,
    )
    return matches


def match_id(prefix: str, round_num: int, position: int) -> str:
    return f"{prefix}{round_num}-M{position + 1}"


def bracket_order(size: int) -> list[int]:
    """
    Standard bracket seed order for a power-of-two size.

    bracket_order(8) == [1, 8, 4, 5, 2, 7, 3, 6]
    """
    order = [1]
    while len(order) < size:
        mirror = 2 * len(order) + 1
        order = [s for seed in order for s in (seed, mirror - seed)]
    return order


def round_label(round_num: int, position: int, matches_in_round: int) -> str:
    """Return a human-readable name for a single-elimination match."""
    if matches_in_round == 1:
        return "F"     # Final
    if matches_in_round == 2:
        return f"SF-{position + 1}"   # Semi-final
    if matches_in_round == 4:
        return f"QF-{position + 1}"   # Quarter-final
    return f"R{round_num}-M{position + 1}"


def _seeded_slots(seed_list: list[str], size: int) -> list[str | None]:
    # Seeds above N are the byes, so they always face the top seeds
    return [
        seed_list[seed - 1] if seed <= len(seed_list) else None
        for seed in bracket_order(size)
    ]
