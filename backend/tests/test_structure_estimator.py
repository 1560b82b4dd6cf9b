"""
Tests for the Structure Estimator: bracket shape previews.
"""

from heatdraw.services.structure_estimator import (
    TournamentStructure,
    describe_heat,
    estimate,
)


class TestFallback:
    def test_zero_competitors(self):
        s = estimate(0, 4, "elimination")
        assert (s.total_rounds, s.total_heats, s.heats_per_round, s.heat_size) == (1, 1, [1], 4)

    def test_negative_heat_size(self):
        s = estimate(10, -2, "repechage")
        assert s.heats_per_round == [1]
        assert s.heat_size == 4


class TestElimination:
    def test_sixteen_in_fours(self):
        # 4 heats -> 8 qualifiers -> 2 heats -> 4 qualifiers fit one heat -> final
        s = estimate(16, 4, "elimination")
        assert s.heats_per_round == [4, 2, 1]
        assert s.total_rounds == 3
        assert s.total_heats == 7
        assert s.heat_size == 4

    def test_single_heat_field_still_has_final(self):
        s = estimate(4, 4, "elimination")
        assert s.heats_per_round == [1, 1]

    def test_thirty_two_in_sixes(self):
        # 6 heats -> 12 -> 2 heats -> 4 -> final
        s = estimate(32, 6, "elimination")
        assert s.heats_per_round == [6, 2, 1]

    def test_heat_size_two_stops_on_no_progress(self):
        s = estimate(8, 2, "elimination")
        assert s.heats_per_round == [4, 4, 1]

    def test_heat_size_one_terminates(self):
        s = estimate(3, 1, "elimination")
        assert s.total_rounds == 3
        assert s.heats_per_round[-1] == 1

    def test_default_mode_is_elimination(self):
        assert estimate(16, 4) == estimate(16, 4, "elimination")


class TestRepechage:
    def test_sixteen_in_fours(self):
        # 4 heats; 4 * (4 - 2) = 8 to repechage -> 2 heats;
        # 8 + 4 qualified > 4 -> 3 semi heats; final
        s = estimate(16, 4, "repechage")
        assert s.heats_per_round == [4, 2, 3, 1]
        assert s.total_heats == 10

    def test_no_repechage_round_for_heats_of_two(self):
        s = estimate(4, 2, "repechage")
        # 2 heats, nobody left for repechage, 4 qualified > 2 -> 2 semis
        assert s.heats_per_round == [2, 2, 1]

    def test_small_field_still_gets_semis(self):
        s = estimate(3, 3, "repechage")
        # 1 heat; 1 to repechage -> 1 heat; 2 + 2 qualified > 3 -> 2 semis
        assert s.heats_per_round == [1, 1, 2, 1]

    def test_large_heats_no_semis(self):
        s = estimate(6, 10, "repechage")
        # 1 heat; 8 to repechage -> 1 heat; 4 qualified <= 10
        assert s.heats_per_round == [1, 1, 1]


class TestDescribeHeat:
    def structure(self, rounds):
        return TournamentStructure(
            total_rounds=len(rounds),
            total_heats=sum(rounds),
            heats_per_round=list(rounds),
            heat_size=4,
        )

    def test_first_heat_of_four_round_bracket(self):
        info = describe_heat(1, 1, self.structure([4, 2, 3, 1]))
        assert info.round_name == "Round 1"
        assert info.heat_name == "Heat 1"
        assert not info.is_last_heat
        assert not info.is_last_round
        assert (info.next_round, info.next_heat) == (1, 2)

    def test_repechage_round_name(self):
        info = describe_heat(2, 2, self.structure([4, 2, 3, 1]))
        assert info.round_name == "REPÊCHAGE"
        assert info.is_last_heat
        assert (info.next_round, info.next_heat) == (3, 1)

    def test_semifinal_name(self):
        info = describe_heat(3, 1, self.structure([4, 2, 3, 1]))
        assert info.round_name == "DEMI-FINALE"

    def test_final_has_no_next(self):
        info = describe_heat(4, 1, self.structure([4, 2, 3, 1]))
        assert info.round_name == "FINALE"
        assert info.is_last_round
        assert info.is_last_heat
        assert info.next_round is None
        assert info.next_heat is None

    def test_two_round_bracket_has_no_repechage_name(self):
        structure = self.structure([2, 1])
        assert describe_heat(1, 1, structure).round_name == "DEMI-FINALE"
        assert describe_heat(2, 1, structure).round_name == "FINALE"

    def test_three_rounds_second_is_semifinal(self):
        # round 2 is both "second" and "second-to-last"; semifinal wins
        assert describe_heat(2, 1, self.structure([4, 2, 1])).round_name == "DEMI-FINALE"

    def test_single_round_keeps_generic_name(self):
        info = describe_heat(1, 1, self.structure([1]))
        assert info.round_name == "Round 1"
        assert info.next_round is None

    def test_round_outside_structure(self):
        info = describe_heat(9, 1, self.structure([2, 1]))
        assert info.round_name == "Round 9"
        assert info.is_last_heat
        assert (info.next_round, info.next_heat) == (10, 1)

    def test_works_on_estimate_output(self):
        structure = estimate(16, 4, "elimination")
        info = describe_heat(2, 2, structure)
        assert info.round_name == "DEMI-FINALE"
        assert (info.next_round, info.next_heat) == (3, 1)
