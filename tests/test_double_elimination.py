"""
Tests for double-elimination generation and play — losers-bracket shape,
drop wiring, bye cascades and the grand-finals reset.
"""

from __future__ import annotations

import unittest

import pytest

from bracketengine.tournaments import InsufficientParticipants, MatchResultProcessor
from bracketengine.tournaments.double_elimination import (
    GRAND_FINALS_ID,
    GRAND_FINALS_RESET_ID,
    generate_double_elimination,
    losers_round_count,
)


# --------------------------------------------------------------------------- #
# Helpers                                                                      #
# --------------------------------------------------------------------------- #

def seed_list(n: int) -> list[str]:
    return [f"s{i + 1}" for i in range(n)]


def side(matches, name):
    return [m for m in matches if m.bracket_side == name]


def rounds_of(matches):
    out = {}
    for m in matches:
        out.setdefault(m.round, []).append(m)
    return out


def processor(n: int) -> MatchResultProcessor:
    p = MatchResultProcessor(generate_double_elimination(seed_list(n)), "double_elimination")
    p.resolve_byes()
    return p


# --------------------------------------------------------------------------- #
# Structure                                                                    #
# --------------------------------------------------------------------------- #

class TestStructure:
    def test_losers_round_count(self):
        assert losers_round_count(1) == 1
        assert losers_round_count(2) == 2
        assert losers_round_count(3) == 4
        assert losers_round_count(4) == 6

    def test_eight_participants_shape(self):
        matches = generate_double_elimination(seed_list(8))
        winners = rounds_of(side(matches, "winners"))
        losers = rounds_of(side(matches, "losers"))
        assert [len(winners[r]) for r in sorted(winners)] == [4, 2, 1]
        assert [len(losers[r]) for r in sorted(losers)] == [2, 2, 1, 1]
        assert len(side(matches, "grand_finals")) == 1
        assert len(side(matches, "grand_finals_reset")) == 1

    @pytest.mark.parametrize("n", [2, 3, 4, 5, 8, 11, 16, 23, 32])
    def test_every_winners_match_drops_into_losers(self, n):
        matches = generate_double_elimination(seed_list(n))
        index = {m.id: m for m in matches}
        for m in side(matches, "winners"):
            assert m.drops_to is not None
            assert index[m.drops_to].bracket_side == "losers"

    @pytest.mark.parametrize("n", [4, 8, 16, 32])
    def test_every_losers_match_has_two_feeders(self, n):
        matches = generate_double_elimination(seed_list(n))
        feeders = {}
        for m in matches:
            for target in (m.advances_to, m.drops_to):
                if target:
                    feeders[target] = feeders.get(target, 0) + 1
        for m in side(matches, "losers"):
            assert feeders[m.id] == 2, m.id

    def test_finals_wiring(self):
        matches = generate_double_elimination(seed_list(8))
        index = {m.id: m for m in matches}
        winners_final = max(side(matches, "winners"), key=lambda m: m.round)
        losers_final = max(side(matches, "losers"), key=lambda m: m.round)
        assert winners_final.advances_to == GRAND_FINALS_ID
        assert losers_final.advances_to == GRAND_FINALS_ID
        assert winners_final.drops_to == losers_final.id
        assert index[GRAND_FINALS_ID].advances_to == GRAND_FINALS_RESET_ID
        assert index[GRAND_FINALS_RESET_ID].advances_to is None

    def test_round_one_losers_pair_up(self):
        matches = generate_double_elimination(seed_list(8))
        first = sorted((m for m in side(matches, "winners") if m.round == 1), key=lambda m: m.position)
        assert [m.drops_to for m in first] == ["L1-M1", "L1-M1", "L1-M2", "L1-M2"]

    def test_later_winners_losers_meet_losers_survivors(self):
        matches = generate_double_elimination(seed_list(8))
        second = sorted((m for m in side(matches, "winners") if m.round == 2), key=lambda m: m.position)
        assert [m.drops_to for m in second] == ["L2-M1", "L2-M2"]

    def test_too_few_participants(self):
        with pytest.raises(InsufficientParticipants):
            generate_double_elimination(["s1"])


# --------------------------------------------------------------------------- #
# Play                                                                         #
# --------------------------------------------------------------------------- #

class TestFourPlayerPlay(unittest.TestCase):
    """Seeds s1..s4: W1-M1 is s1 vs s4, W1-M2 is s2 vs s3."""

    def setUp(self):
        self.p = processor(4)
        self.p.report_result("W1-M1", "s1")
        self.p.report_result("W1-M2", "s2")
        self.p.report_result("L1-M1", "s3")
        self.p.report_result("W2-M1", "s1")
        self.p.report_result("L2-M1", "s2")

    def test_losers_bracket_feeds_grand_finals(self):
        gf = self.p.get(GRAND_FINALS_ID)
        assert gf.participants == ["s1", "s2"]
        assert gf.is_ready

    def test_winners_side_victory_skips_reset(self):
        outcome = self.p.report_result(GRAND_FINALS_ID, "s1")
        assert outcome.tournament_complete
        assert [(pl.participant, pl.rank) for pl in outcome.placements] == [("s1", 1), ("s2", 2)]
        assert self.p.get(GRAND_FINALS_RESET_ID).status == "skipped"
        completed = [m for m in self.p.matches if m.status == "completed"]
        assert len(completed) == 2 * 4 - 2

    def test_losers_side_victory_forces_reset(self):
        outcome = self.p.report_result(GRAND_FINALS_ID, "s2")
        self.assertFalse(outcome.tournament_complete)
        reset = self.p.get(GRAND_FINALS_RESET_ID)
        self.assertEqual(reset.participants, ["s2", "s1"])
        self.assertTrue(reset.is_ready)

        final = self.p.report_result(GRAND_FINALS_RESET_ID, "s2")
        self.assertTrue(final.tournament_complete)
        self.assertEqual(final.placements[0].participant, "s2")
        self.assertEqual(final.eliminated, ["s1"])
        completed = [m for m in self.p.matches if m.status == "completed"]
        self.assertEqual(len(completed), 2 * 4 - 1)

    def test_losers_are_eliminated_in_losers_bracket(self):
        self.assertEqual(self.p.get("L1-M1").loser, "s4")
        self.assertEqual(self.p.get("L2-M1").loser, "s3")


class TestByeCascade(unittest.TestCase):
    """Five seeds in an eight-slot bracket: s1, s2, s3 start with byes."""

    def setUp(self):
        self.p = processor(5)

    def test_seeded_byes_advance(self):
        w2 = sorted((m for m in self.p.matches if m.id.startswith("W2")), key=lambda m: m.position)
        self.assertEqual(w2[0].participant_a, "s1")
        self.assertEqual(w2[1].participants, ["s2", "s3"])
        self.assertTrue(w2[1].is_ready)

    def test_losers_match_with_two_bye_feeders_is_empty(self):
        empty = self.p.get("L1-M2")
        self.assertEqual(empty.status, "bye")
        self.assertEqual(empty.participants, [])

    def test_only_playable_loser_advances_by_bye(self):
        self.p.report_result("W1-M2", "s4")
        l1 = self.p.get("L1-M1")
        self.assertEqual(l1.status, "bye")
        self.assertEqual(l1.participant_a, "s5")
        self.assertIn("s5", self.p.get("L2-M1").participants)

    def test_drop_against_empty_survivor_becomes_bye(self):
        self.p.report_result("W1-M2", "s4")
        self.p.report_result("W2-M2", "s2")
        l2 = self.p.get("L2-M2")
        self.assertEqual(l2.status, "bye")
        self.assertEqual(l2.participant_a, "s3")

    def test_plays_through_to_a_champion(self):
        self.p.report_result("W1-M2", "s4")
        self.p.report_result("W2-M1", "s1")
        self.p.report_result("W2-M2", "s2")
        self.p.report_result("L2-M1", "s4")
        self.p.report_result("L3-M1", "s4")
        self.p.report_result("W3-M1", "s1")
        self.p.report_result("L4-M1", "s2")
        outcome = self.p.report_result(GRAND_FINALS_ID, "s1")
        self.assertTrue(outcome.tournament_complete)
        completed = [m for m in self.p.matches if m.status == "completed"]
        self.assertEqual(len(completed), 2 * 5 - 2)


class TestTwoPlayers(unittest.TestCase):
    def test_loser_reaches_grand_finals_through_a_bye(self):
        p = processor(2)
        p.report_result("W1-M1", "s1")
        self.assertEqual(p.get("L1-M1").status, "bye")
        gf = p.get(GRAND_FINALS_ID)
        self.assertEqual(gf.participants, ["s1", "s2"])
        outcome = p.report_result(GRAND_FINALS_ID, "s2")
        self.assertFalse(outcome.tournament_complete)
        final = p.report_result(GRAND_FINALS_RESET_ID, "s1")
        self.assertTrue(final.tournament_complete)
        self.assertEqual(final.placements[1].participant, "s2")
