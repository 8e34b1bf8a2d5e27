"""
Tests for MatchResultProcessor — result validation, advancement, byes and
round completion on single-elimination graphs.
"""

from __future__ import annotations

import copy
import unittest

import pytest

from bracketengine.tournaments import (
    AlreadyCompleted,
    InvalidWinner,
    MatchNotFound,
    MatchNotReady,
    MatchResultProcessor,
    UnsupportedForFormat,
    generate_double_elimination,
    generate_single_elimination,
)
from bracketengine.tournaments.base import BracketMatch
from bracketengine.tournaments.results import is_round_complete, outstanding_matches


def single(n: int) -> MatchResultProcessor:
    names = ["alpha", "bravo", "charlie", "delta", "echo", "foxtrot", "golf", "hotel"]
    p = MatchResultProcessor(generate_single_elimination(names[:n]), "single_elimination")
    p.resolve_byes()
    return p


# --------------------------------------------------------------------------- #
# Byes                                                                         #
# --------------------------------------------------------------------------- #

class TestResolveByes:
    def test_bye_participants_reach_round_two(self):
        p = single(5)
        r2 = sorted((m for m in p.matches if m.round == 2), key=lambda m: m.position)
        # alpha's bye meets the delta/echo winner; bravo and charlie both had byes
        assert r2[0].participants == ["alpha"]
        assert r2[1].participants == ["bravo", "charlie"]
        assert r2[1].is_ready

    def test_no_byes_changes_nothing(self):
        p = MatchResultProcessor(generate_single_elimination(["a", "b", "c", "d"]), "single_elimination")
        assert p.resolve_byes() == []

    def test_three_participants(self):
        p = single(3)
        final = p.get("R2-M1")
        assert final.participant_a == "alpha"
        assert final.participant_b is None
        assert not final.is_ready


# --------------------------------------------------------------------------- #
# Reporting                                                                    #
# --------------------------------------------------------------------------- #

class TestReportResult(unittest.TestCase):
    def setUp(self):
        # R1: alpha-delta, bravo-charlie
        self.p = single(4)

    def test_winner_advances_and_loser_is_eliminated(self):
        outcome = self.p.report_result("R1-M1", "alpha")
        self.assertEqual(outcome.updated_match.status, "completed")
        self.assertEqual(outcome.updated_match.winner, "alpha")
        self.assertEqual(outcome.updated_match.loser, "delta")
        self.assertEqual(outcome.eliminated, ["delta"])
        self.assertEqual([m.id for m in outcome.advanced_matches], ["R2-M1"])
        self.assertEqual(self.p.get("R2-M1").participant_a, "alpha")
        self.assertFalse(outcome.round_complete)
        self.assertFalse(outcome.tournament_complete)

    def test_second_result_completes_the_round(self):
        self.p.report_result("R1-M1", "alpha")
        outcome = self.p.report_result("R1-M2", "charlie")
        self.assertTrue(outcome.round_complete)
        self.assertEqual(self.p.get("R2-M1").participants, ["alpha", "charlie"])

    def test_final_produces_placements(self):
        self.p.report_result("R1-M1", "delta")
        self.p.report_result("R1-M2", "bravo")
        outcome = self.p.report_result("R2-M1", "bravo")
        self.assertTrue(outcome.tournament_complete)
        self.assertEqual(
            [(pl.participant, pl.rank) for pl in outcome.placements],
            [("bravo", 1), ("delta", 2)],
        )

    def test_reporting_twice_fails(self):
        self.p.report_result("R1-M1", "alpha")
        before = copy.deepcopy(self.p.matches)
        with self.assertRaises(AlreadyCompleted):
            self.p.report_result("R1-M1", "alpha")
        with self.assertRaises(AlreadyCompleted):
            self.p.report_result("R1-M1", "delta")
        self.assertEqual(self.p.matches, before)

    def test_reporting_twice_keeps_drop_target(self):
        p = MatchResultProcessor(
            generate_double_elimination(["alpha", "bravo", "charlie", "delta"]), "double_elimination"
        )
        p.resolve_byes()
        p.report_result("W1-M1", "alpha")
        before = copy.deepcopy(p.matches)
        with self.assertRaises(AlreadyCompleted):
            p.report_result("W1-M1", "alpha")
        self.assertEqual(p.matches, before)
        self.assertEqual(p.get("L1-M1").participants, ["delta"])

    def test_winner_must_be_a_participant(self):
        with self.assertRaises(InvalidWinner):
            self.p.report_result("R1-M1", "bravo")
        self.assertEqual(self.p.get("R1-M1").status, "pending")

    def test_half_filled_match_is_not_ready(self):
        self.p.report_result("R1-M1", "alpha")
        with self.assertRaises(MatchNotReady):
            self.p.report_result("R2-M1", "alpha")

    def test_invalid_winner_checked_before_readiness(self):
        self.p.report_result("R1-M1", "alpha")
        with self.assertRaises(InvalidWinner):
            self.p.report_result("R2-M1", "bravo")

    def test_unknown_match(self):
        with self.assertRaises(MatchNotFound):
            self.p.report_result("R9-M9", "alpha")

    def test_bye_cannot_be_reported(self):
        p = single(3)
        with self.assertRaises(AlreadyCompleted):
            p.report_result("R1-M1", "alpha")

    def test_draws_are_swiss_only(self):
        with self.assertRaises(UnsupportedForFormat):
            self.p.record_draw("R1-M1")


class TestSwissProcessing:
    def make(self):
        matches = [
            BracketMatch(id="S1-M1", round=1, position=0, participant_a="a", participant_b="b"),
            BracketMatch(id="S1-M2", round=1, position=1, participant_a="c", status="bye"),
        ]
        return MatchResultProcessor(matches, "swiss")

    def test_result_eliminates_nobody(self):
        outcome = self.make().report_result("S1-M1", "b")
        assert outcome.eliminated == []
        assert outcome.round_complete
        assert not outcome.tournament_complete

    def test_record_draw(self):
        p = self.make()
        outcome = p.record_draw("S1-M1")
        assert outcome.updated_match.is_draw
        assert outcome.updated_match.winner is None
        with pytest.raises(AlreadyCompleted):
            p.record_draw("S1-M1")


# --------------------------------------------------------------------------- #
# Round helpers                                                                #
# --------------------------------------------------------------------------- #

class TestRoundHelpers:
    def test_round_complete_counts_byes(self):
        p = single(5)
        assert not is_round_complete(p.matches, 1)
        assert outstanding_matches(p.matches, 1) == ["R1-M2"]
        p.report_result("R1-M2", "delta")
        assert is_round_complete(p.matches, 1)
        assert outstanding_matches(p.matches, 1) == []

    def test_unknown_round_is_not_complete(self):
        assert not is_round_complete(single(4).matches, 7)

    def test_prior_losses(self):
        p = single(4)
        p.report_result("R1-M1", "alpha")
        assert p.prior_losses("delta") == 1
        assert p.prior_losses("alpha") == 0
        assert p.prior_losses("delta", excluding="R1-M1") == 0
