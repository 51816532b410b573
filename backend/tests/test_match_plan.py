"""
Tests for the symbolic match plan generators.
"""

from collections import Counter
from itertools import combinations

import pytest

from cricket_fixtures.services.match_plan import (
    GroupPositionRef,
    MatchWinnerRef,
    SwissEntrant,
    TeamRef,
    build_double_elimination_plans,
    build_double_round_robin_plans,
    build_round_robin_plans,
    build_single_elimination_plans,
    build_swiss_pairings,
    group_plans_by_round,
)


def _team_ids(plan):
    return tuple(p.team_id for p in plan.participants)


class TestRoundRobin:
    @pytest.mark.parametrize("n", [2, 4, 6, 8])
    def test_even_count_rounds_and_matches(self, n):
        plans = build_round_robin_plans(list(range(1, n + 1)))
        rounds = group_plans_by_round(plans)
        assert list(rounds) == list(range(1, n))
        assert all(len(r) == n // 2 for r in rounds.values())

    @pytest.mark.parametrize("n", [4, 5, 6, 7])
    def test_every_pair_exactly_once(self, n):
        plans = build_round_robin_plans(list(range(1, n + 1)))
        pairs = Counter(frozenset(_team_ids(p)) for p in plans)
        assert set(pairs) == {frozenset(c) for c in combinations(range(1, n + 1), 2)}
        assert set(pairs.values()) == {1}

    def test_odd_count_one_bye_per_round(self):
        teams = [1, 2, 3, 4, 5]
        rounds = group_plans_by_round(build_round_robin_plans(teams))
        assert len(rounds) == 5

        byes = Counter()
        for round_plans in rounds.values():
            assert len(round_plans) == 2
            playing = {t for p in round_plans for t in _team_ids(p)}
            sitting_out = set(teams) - playing
            assert len(sitting_out) == 1
            byes.update(sitting_out)
        assert byes == Counter({t: 1 for t in teams})

    def test_no_team_plays_twice_in_a_round(self):
        for round_plans in group_plans_by_round(build_round_robin_plans(list(range(1, 9)))).values():
            ids = [t for p in round_plans for t in _team_ids(p)]
            assert len(ids) == len(set(ids))

    def test_first_round_pairs_outside_in(self):
        plans = build_round_robin_plans([1, 2, 3, 4])
        assert [_team_ids(p) for p in plans if p.round_number == 1] == [(1, 4), (2, 3)]

    def test_accepts_participant_refs(self):
        refs = [GroupPositionRef(stage_group_id=7, position=i) for i in (1, 2, 3)]
        plans = build_round_robin_plans(refs)
        assert len(plans) == 3
        assert not any(p.is_concrete for p in plans)


class TestDoubleRoundRobin:
    def test_every_ordered_pair_once_in_mirrored_rounds(self):
        n = 6
        plans = build_double_round_robin_plans(list(range(1, n + 1)))
        assert len(plans) == n * (n - 1)

        round_of = {_team_ids(p): p.round_number for p in plans}
        assert len(round_of) == len(plans)

        for plan in plans:
            if plan.round_number >= n:
                continue
            home, away = _team_ids(plan)
            assert round_of[(away, home)] == plan.round_number + (n - 1)

    def test_second_half_swaps_home_and_away(self):
        plans = build_double_round_robin_plans([1, 2])
        assert [(p.round_number, _team_ids(p)) for p in plans] == [(1, (1, 2)), (2, (2, 1))]

    def test_odd_count_last_round_shares_a_number_with_first_mirrored_round(self):
        plans = build_double_round_robin_plans([1, 2, 3, 4, 5])
        rounds = group_plans_by_round(plans)
        assert len(plans) == 20
        assert list(rounds) == list(range(1, 10))
        # Teams 2 and 4 play twice in round 5
        assert [_team_ids(p) for p in rounds[5]] == [(1, 2), (4, 5), (5, 2), (4, 3)]


class TestSingleElimination:
    def test_eight_teams_bracket_shape(self):
        plans = build_single_elimination_plans(list(range(1, 9)))
        rounds = group_plans_by_round(plans)
        assert [len(r) for r in rounds.values()] == [4, 2, 1]
        assert rounds[1][0].participants == (TeamRef(1), TeamRef(2))

        final = rounds[3][0]
        assert final.participants == (MatchWinnerRef(round=2, slot=0), MatchWinnerRef(round=2, slot=1))

    def test_round_two_references_round_one_by_slot(self):
        rounds = group_plans_by_round(build_single_elimination_plans(list(range(1, 9))))
        assert rounds[2][0].participants == (MatchWinnerRef(round=1, slot=0), MatchWinnerRef(round=1, slot=1))
        assert rounds[2][1].participants == (MatchWinnerRef(round=1, slot=2), MatchWinnerRef(round=1, slot=3))

    def test_five_teams_trailing_seed_carried_through_byes(self):
        plans = build_single_elimination_plans([1, 2, 3, 4, 5])
        rounds = group_plans_by_round(plans)

        round_one_teams = {t.team_id for p in rounds[1] for t in p.participants}
        assert round_one_teams == {1, 2, 3, 4}
        assert len(plans) == 4

        # Seed 5 is carried forward as itself through each bye
        assert rounds[2][0].participants == (MatchWinnerRef(1, 0), MatchWinnerRef(1, 1))
        assert rounds[3][0].participants == (MatchWinnerRef(2, 0), TeamRef(5))

    @pytest.mark.parametrize("n", [2, 3, 5, 6, 7, 8, 13, 16])
    def test_n_teams_need_n_minus_one_matches(self, n):
        assert len(build_single_elimination_plans(list(range(1, n + 1)))) == n - 1

    def test_bye_carried_forward_counts_toward_next_round(self):
        # 11 teams: 5 matches plus a bye leave 6 entrants, so round 2 has 3 matches
        rounds = group_plans_by_round(build_single_elimination_plans(list(range(1, 12))))
        assert {r: len(p) for r, p in rounds.items()} == {1: 5, 2: 3, 3: 1, 4: 1}

    def test_winner_refs_only_point_backwards(self):
        plans = build_single_elimination_plans(list(range(1, 12)))
        rounds = group_plans_by_round(plans)
        for round_number, round_plans in rounds.items():
            for plan in round_plans:
                for ref in plan.participants:
                    if isinstance(ref, MatchWinnerRef):
                        assert ref.round < round_number
                        assert ref.slot < len(rounds[ref.round])

    def test_double_elimination_matches_single(self):
        teams = list(range(1, 7))
        assert build_double_elimination_plans(teams) == build_single_elimination_plans(teams)


class TestSwissPairing:
    def test_ranked_by_points_then_tie_breaks_then_team_id(self):
        entrants = [
            SwissEntrant(team_id=4, points=2),
            SwissEntrant(team_id=3, points=4),
            SwissEntrant(team_id=2, points=2, tie_break1=0.5),
            SwissEntrant(team_id=1, points=0),
        ]
        plans = build_swiss_pairings(entrants, round_number=2)
        assert [_team_ids(p) for p in plans] == [(3, 2), (4, 1)]
        assert all(p.round_number == 2 for p in plans)

    def test_avoids_rematch_when_possible(self):
        entrants = [
            SwissEntrant(team_id=1, points=4, opponent_team_ids={2}),
            SwissEntrant(team_id=2, points=4, opponent_team_ids={1}),
            SwissEntrant(team_id=3, points=2),
            SwissEntrant(team_id=4, points=2),
        ]
        assert [_team_ids(p) for p in build_swiss_pairings(entrants)] == [(1, 3), (2, 4)]

    def test_forced_rematch_when_everyone_was_played(self):
        # Known simplification: no backtracking, the next team is taken
        entrants = [
            SwissEntrant(team_id=1, points=2, opponent_team_ids={2}),
            SwissEntrant(team_id=2, points=0, opponent_team_ids={1}),
        ]
        assert [_team_ids(p) for p in build_swiss_pairings(entrants)] == [(1, 2)]

    def test_odd_count_last_team_sits_out(self):
        entrants = [SwissEntrant(team_id=i) for i in (1, 2, 3)]
        plans = build_swiss_pairings(entrants)
        assert [_team_ids(p) for p in plans] == [(1, 2)]

    def test_fewer_than_two_entrants_yield_nothing(self):
        assert build_swiss_pairings([SwissEntrant(team_id=1)]) == []

    def test_level_entrants_pair_by_team_id_whatever_the_input_order(self):
        entrants = [SwissEntrant(team_id=i) for i in (9, 3, 7, 1)]
        plans = build_swiss_pairings(entrants)
        assert [_team_ids(p) for p in plans] == [(1, 3), (7, 9)]
