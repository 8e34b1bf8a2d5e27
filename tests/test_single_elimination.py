"""
Tests for single-elimination generation — bracket size, bye placement,
round structure and advancement wiring.
"""

from __future__ import annotations

import math

import pytest

from bracketengine.tournaments import InsufficientParticipants
from bracketengine.tournaments.base import next_power_of_two
from bracketengine.tournaments.single_elimination import (
    bracket_order,
    generate_single_elimination,
    round_label,
)


# --------------------------------------------------------------------------- #
# Helpers                                                                      #
# --------------------------------------------------------------------------- #

NAMES = [
    "alpha", "bravo", "charlie", "delta",
    "echo", "foxtrot", "golf", "hotel",
    "india", "juliet", "kilo", "lima",
    "mike", "november", "oscar", "papa",
]


def seed_list(n: int) -> list[str]:
    return [NAMES[i] if i < len(NAMES) else f"p{i + 1}" for i in range(n)]


def by_round(matches):
    rounds = {}
    for m in matches:
        rounds.setdefault(m.round, []).append(m)
    return rounds


# --------------------------------------------------------------------------- #
# Bracket shape                                                                #
# --------------------------------------------------------------------------- #

class TestBracketShape:
    def test_next_power_of_two(self):
        assert next_power_of_two(2) == 2
        assert next_power_of_two(3) == 4
        assert next_power_of_two(4) == 4
        assert next_power_of_two(5) == 8
        assert next_power_of_two(8) == 8
        assert next_power_of_two(9) == 16

    def test_bracket_order_eight(self):
        assert bracket_order(8) == [1, 8, 4, 5, 2, 7, 3, 6]

    def test_bracket_order_is_a_permutation(self):
        for size in (2, 4, 8, 16, 32):
            assert sorted(bracket_order(size)) == list(range(1, size + 1))

    @pytest.mark.parametrize("n", range(2, 34))
    def test_round_one_size_and_byes(self, n):
        matches = generate_single_elimination(seed_list(n))
        size = next_power_of_two(n)
        rounds = by_round(matches)

        assert len(rounds[1]) == size // 2
        assert sum(1 for m in rounds[1] if m.status == "bye") == size - n
        assert len(rounds) == int(math.log2(size))
        assert len(matches) == size - 1

    @pytest.mark.parametrize("n", range(2, 34))
    def test_byes_go_to_top_seeds(self, n):
        seeds = seed_list(n)
        matches = generate_single_elimination(seeds)
        byes = {m.participant_a for m in matches if m.status == "bye"}
        size = next_power_of_two(n)
        assert byes == set(seeds[: size - n])

    def test_five_participants(self):
        seeds = seed_list(5)
        rounds = by_round(generate_single_elimination(seeds))
        assert [len(rounds[r]) for r in (1, 2, 3)] == [4, 2, 1]
        byes = [m for m in rounds[1] if m.status == "bye"]
        assert {m.participant_a for m in byes} == {"alpha", "bravo", "charlie"}
        playable = [m for m in rounds[1] if m.status == "pending"]
        assert len(playable) == 1
        assert {playable[0].participant_a, playable[0].participant_b} == {"delta", "echo"}

    def test_two_participants_single_pending_match(self):
        matches = generate_single_elimination(["alpha", "bravo"])
        assert len(matches) == 1
        final = matches[0]
        assert final.id == "R1-M1"
        assert final.status == "pending"
        assert (final.participant_a, final.participant_b) == ("alpha", "bravo")
        assert final.advances_to is None

    def test_later_rounds_start_empty(self):
        matches = generate_single_elimination(seed_list(8))
        for m in matches:
            if m.round > 1:
                assert m.participant_a is None
                assert m.participant_b is None
                assert m.status == "pending"

    def test_bye_has_single_participant_in_slot_a(self):
        matches = generate_single_elimination(seed_list(6))
        for m in matches:
            if m.status == "bye":
                assert m.participant_a is not None
                assert m.participant_b is None
                assert m.winner is None and m.loser is None


# --------------------------------------------------------------------------- #
# Advancement wiring                                                           #
# --------------------------------------------------------------------------- #

class TestAdvancement:
    def test_match_i_feeds_match_i_over_two(self):
        matches = generate_single_elimination(seed_list(8))
        index = {m.id: m for m in matches}
        for m in matches:
            if m.advances_to is None:
                continue
            target = index[m.advances_to]
            assert target.round == m.round + 1
            assert target.position == m.position // 2

    def test_only_the_final_has_no_target(self):
        matches = generate_single_elimination(seed_list(16))
        finals = [m for m in matches if m.advances_to is None]
        assert len(finals) == 1
        assert finals[0].round == 4

    def test_every_target_has_two_feeders(self):
        matches = generate_single_elimination(seed_list(13))
        feeders = {}
        for m in matches:
            if m.advances_to:
                feeders[m.advances_to] = feeders.get(m.advances_to, 0) + 1
        assert all(count == 2 for count in feeders.values())

    def test_top_two_seeds_meet_only_in_final(self):
        matches = generate_single_elimination(seed_list(8))
        first = {m.participant_a: m for m in matches if m.round == 1}
        index = {m.id: m for m in matches}
        semi_of_alpha = index[first["alpha"].advances_to]
        semi_of_bravo = index[first["bravo"].advances_to]
        assert semi_of_alpha.id != semi_of_bravo.id

    def test_bracket_side_and_prefix(self):
        matches = generate_single_elimination(seed_list(4), bracket_side="winners", id_prefix="W")
        assert all(m.bracket_side == "winners" for m in matches)
        assert [m.id for m in matches] == ["W1-M1", "W1-M2", "W2-M1"]


# --------------------------------------------------------------------------- #
# Validation                                                                   #
# --------------------------------------------------------------------------- #

class TestValidation:
    def test_single_participant_raises(self):
        with pytest.raises(InsufficientParticipants):
            generate_single_elimination(["alpha"])

    def test_empty_raises(self):
        with pytest.raises(InsufficientParticipants):
            generate_single_elimination([])

    def test_duplicate_ids_raise(self):
        with pytest.raises(ValueError, match="duplicate"):
            generate_single_elimination(["alpha", "bravo", "alpha"])


class TestRoundLabel:
    def test_labels(self):
        assert round_label(3, 0, 1) == "F"
        assert round_label(2, 1, 2) == "SF-2"
        assert round_label(1, 3, 4) == "QF-4"
        assert round_label(1, 5, 8) == "R1-M6"
