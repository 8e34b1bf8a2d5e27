"""
Double-elimination bracket generation.

Structure (W = winners rounds = log2(bracket size)):
- Winners bracket: a single-elimination bracket tagged "winners".
- Losers bracket: 2 × (W − 1) rounds.  Round 1 takes the winners-round-1
  losers in pairs.  After that rounds alternate: even rounds are drop-down
  rounds (previous losers winners meet freshly dropped winners-bracket
  losers, same match count), odd rounds are progression rounds (previous
  losers winners play each other, match count halves).
- Grand finals, then a grand-finals reset that is only played when the
  losers-bracket finalist wins the grand final.

With a two-slot bracket (W = 1) the recurrence is empty, so a single losers
match stands between the winners-final loser and the grand final.

Generation builds every match first and then links them, because drops point
across brackets.
"""

from __future__ import annotations

import logging

from bracketengine.tournaments.base import BracketMatch
from bracketengine.tournaments.single_elimination import (
    generate_single_elimination,
    match_id,
)

logger = logging.getLogger(__name__)

GRAND_FINALS_ID = "GF"
GRAND_FINALS_RESET_ID = "GF-R"


def generate_double_elimination(seed_list: list[str]) -> list[BracketMatch]:
    """Build and link the full double-elimination match graph."""
    winners = generate_single_elimination(seed_list, bracket_side="winners", id_prefix="W")
    winners_rounds = _group_by_round(winners)
    w = len(winners_rounds)

    losers_rounds = _build_losers_rounds(w, bracket_size=len(winners_rounds[0]) * 2)

    grand_finals = BracketMatch(
        id=GRAND_FINALS_ID,
        round=w + 1,
        position=0,
        bracket_side="grand_finals",
    )
    reset = BracketMatch(
        id=GRAND_FINALS_RESET_ID,
        round=w + 2,
        position=0,
        bracket_side="grand_finals_reset",
    )

    link_double_elimination(winners_rounds, losers_rounds, grand_finals, reset)

    matches = list(winners)
    for round_matches in losers_rounds:
        matches.extend(round_matches)
    matches.extend([grand_finals, reset])

    logger.info(
        "Generated double-elimination bracket: %d participants, %d winners rounds, "
        "%d losers rounds, %d matches",
        len(seed_list), w, len(losers_rounds), len(matches),
    )
    return matches


def losers_round_count(winners_rounds: int) -> int:
    if winners_rounds < 2:
        return 1
    return 2 * (winners_rounds - 1)


def _build_losers_rounds(winners_rounds: int, bracket_size: int) -> list[list[BracketMatch]]:
    total = losers_round_count(winners_rounds)
    rounds: list[list[BracketMatch]] = []
    count = max(bracket_size // 4, 1)
    for round_num in range(1, total + 1):
        if round_num > 1 and round_num % 2 == 1:
            count //= 2   # progression round
        rounds.append([
            BracketMatch(
                id=match_id("L", round_num, i),
                round=round_num,
                position=i,
                bracket_side="losers",
            )
            for i in range(count)
        ])
    return rounds


def link_double_elimination(
    winners_rounds: list[list[BracketMatch]],
    losers_rounds: list[list[BracketMatch]],
    grand_finals: BracketMatch,
    reset: BracketMatch,
) -> None:
    """
    Wire advances_to / drops_to edges across the three brackets.

    - Winners match i of round r advances to match i // 2 of round r + 1
      (already set by the single-elimination generator); the winners final
      advances to the grand final.
    - Winners round 1 losers drop into losers round 1, match i // 2.
      Winners round r > 1 losers drop into losers round 2 × (r − 1), match
      i mod (matches in that round).
    - Losers odd rounds advance slot-for-slot into the following drop-down
      round; losers even rounds advance to match i // 2 of the following
      progression round; the losers final advances to the grand final.
    - The grand final's winner advances to the reset match.
    """
    winners_rounds[-1][0].advances_to = grand_finals.id

    for round_num, round_matches in enumerate(winners_rounds, 1):
        if round_num == 1:
            for i, m in enumerate(round_matches):
                m.drops_to = losers_rounds[0][i // 2].id
            continue
        target_round = losers_rounds[2 * (round_num - 1) - 1]
        for i, m in enumerate(round_matches):
            m.drops_to = target_round[i % len(target_round)].id

    for index, round_matches in enumerate(losers_rounds):
        round_num = index + 1
        if index == len(losers_rounds) - 1:
            for m in round_matches:
                m.advances_to = grand_finals.id
            continue
        following = losers_rounds[index + 1]
        for i, m in enumerate(round_matches):
            if round_num % 2 == 1:
                m.advances_to = following[i].id
            else:
                m.advances_to = following[i // 2].id

    grand_finals.advances_to = reset.id


def _group_by_round(matches: list[BracketMatch]) -> list[list[BracketMatch]]:
    rounds: dict[int, list[BracketMatch]] = {}
    for m in matches:
        rounds.setdefault(m.round, []).append(m)
    return [sorted(rounds[r], key=lambda m: m.position) for r in sorted(rounds)]
