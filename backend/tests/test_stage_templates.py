"""
Tests for tournament structure templates.
"""

import pytest
from sqlmodel import select

from cricket_fixtures.models import (
    FixtureChangeLog,
    FixtureRound,
    Match,
    TournamentStage,
    TournamentStageAdvancement,
    TournamentStageGroup,
    TournamentStageTeamEntry,
)
from cricket_fixtures.services.fixture_builder import auto_generate_fixtures
from cricket_fixtures.services.fixture_errors import (
    InvalidTeamSelection,
    InvalidTemplateConfiguration,
    NoTournamentTeams,
    TournamentNotFound,
)
from cricket_fixtures.services.stage_templates import (
    AdvancementSlot,
    build_group_advancement_slots,
    group_name,
    seed_tournament_template,
)
from tests.factories import make_teams, make_tournament, make_venue


def _stages(session, tournament_id):
    return session.exec(
        select(TournamentStage).where(TournamentStage.tournament_id == tournament_id).order_by(TournamentStage.sequence)
    ).all()


def _entries(session, stage_id):
    return session.exec(
        select(TournamentStageTeamEntry)
        .where(TournamentStageTeamEntry.stage_id == stage_id)
        .order_by(TournamentStageTeamEntry.seed)
    ).all()


class TestAdvancementSlots:
    def test_two_by_two_crosses_over(self):
        slots = build_group_advancement_slots(2, 2)
        assert [(s.group_index, s.position) for s in slots] == [(0, 1), (1, 2), (1, 1), (0, 2)]
        assert [s.slot for s in slots] == [1, 2, 3, 4]

    def test_position_major_otherwise(self):
        assert build_group_advancement_slots(3, 2) == [
            AdvancementSlot(0, 1, 1),
            AdvancementSlot(1, 1, 2),
            AdvancementSlot(2, 1, 3),
            AdvancementSlot(0, 2, 4),
            AdvancementSlot(1, 2, 5),
            AdvancementSlot(2, 2, 6),
        ]

    def test_group_names(self):
        assert [group_name(i) for i in (0, 1, 25)] == ["Group A", "Group B", "Group Z"]


class TestSeedTournamentTemplate:
    def test_straight_league(self, session):
        t = make_tournament(session)
        teams = make_teams(session, t, 4)
        session.commit()

        result = seed_tournament_template(session, t.id, "straight_league")
        assert result == {
            "tournament_id": t.id,
            "template": "straight_league",
            "team_count": 4,
            "stage_count": 1,
            "group_count": 0,
            "advancement_rule_count": 0,
        }

        (stage,) = _stages(session, t.id)
        assert (stage.name, stage.code, stage.format, stage.sequence) == (
            "League Stage",
            "LEAGUE",
            "single_round_robin",
            1,
        )
        assert [(e.team_id, e.seed) for e in _entries(session, stage.id)] == [
            (team.id, seed) for seed, team in enumerate(teams, start=1)
        ]

    def test_straight_knockout_with_selected_order(self, session):
        t = make_tournament(session)
        t1, t2, t3, _ = make_teams(session, t, 4)
        session.commit()

        result = seed_tournament_template(session, t.id, "straight_knockout", team_ids=[t3.id, t1.id, t2.id])
        assert result["team_count"] == 3

        (stage,) = _stages(session, t.id)
        assert (stage.stage_type, stage.format) == ("knockout", "single_elimination")
        assert [e.team_id for e in _entries(session, stage.id)] == [t3.id, t1.id, t2.id]

    def test_grouped_league_with_playoffs(self, session):
        t = make_tournament(session)
        teams = make_teams(session, t, 6)
        session.commit()

        result = seed_tournament_template(session, t.id, "grouped_league_with_playoffs")
        assert (result["stage_count"], result["group_count"], result["advancement_rule_count"]) == (2, 2, 4)

        group_stage, playoffs = _stages(session, t.id)
        assert playoffs.parent_stage_id == group_stage.id
        assert group_stage.qualification_slots == 4

        groups = session.exec(
            select(TournamentStageGroup).order_by(TournamentStageGroup.sequence)
        ).all()
        assert [(g.name, g.code, g.advancing_slots) for g in groups] == [("Group A", "G1", 2), ("Group B", "G2", 2)]

        by_group = {}
        for entry in _entries(session, group_stage.id):
            by_group.setdefault(entry.stage_group_id, []).append(entry.team_id)
        assert by_group == {
            groups[0].id: [teams[0].id, teams[2].id, teams[4].id],
            groups[1].id: [teams[1].id, teams[3].id, teams[5].id],
        }

        rules = session.exec(
            select(TournamentStageAdvancement).order_by(TournamentStageAdvancement.to_slot)
        ).all()
        assert [(r.from_stage_group_id, r.position_from, r.to_slot) for r in rules] == [
            (groups[0].id, 1, 1),
            (groups[1].id, 2, 2),
            (groups[1].id, 1, 3),
            (groups[0].id, 2, 4),
        ]
        assert {r.to_stage_id for r in rules} == {playoffs.id}

    def test_seeded_playoffs_generate_deferred_bracket(self, session):
        t = make_tournament(session)
        make_teams(session, t, 8)
        make_venue(session, t)
        session.commit()
        seed_tournament_template(session, t.id, "grouped_league_with_playoffs")
        _, playoffs = _stages(session, t.id)

        result = auto_generate_fixtures(session, t.id, playoffs.id)
        assert (result.created_match_count, result.created_round_count) == (3, 2)
        matches = session.exec(select(Match).where(Match.stage_id == playoffs.id)).all()
        assert all(m.team1_id is None and m.team2_id is None for m in matches)

    def test_reset_replaces_structure_and_detaches_matches(self, session):
        t = make_tournament(session)
        make_teams(session, t, 4)
        make_venue(session, t)
        session.commit()
        seed_tournament_template(session, t.id, "straight_knockout")
        (old_stage,) = _stages(session, t.id)
        auto_generate_fixtures(session, t.id, old_stage.id)

        seed_tournament_template(session, t.id, "straight_league")

        (stage,) = _stages(session, t.id)
        assert stage.code == "LEAGUE"
        assert stage.sequence == 1
        assert session.exec(select(FixtureRound)).all() == []

        matches = session.exec(select(Match)).all()
        assert len(matches) == 3
        assert all(m.stage_id is None and m.fixture_round_id is None for m in matches)
        assert all(log.stage_id is None for log in session.exec(select(FixtureChangeLog)).all())

    def test_append_keeps_existing_stages(self, session):
        t = make_tournament(session)
        make_teams(session, t, 4)
        session.commit()
        seed_tournament_template(session, t.id, "straight_league")

        seed_tournament_template(session, t.id, "straight_knockout", reset_existing=False)
        assert [(s.sequence, s.code) for s in _stages(session, t.id)] == [(1, "LEAGUE"), (2, "KNOCKOUT")]

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"template": "round_the_world"},
            {"template": "grouped_league_with_playoffs", "group_count": 1},
            {"template": "grouped_league_with_playoffs", "group_count": 27},
            {"template": "grouped_league_with_playoffs", "advancing_per_group": 0},
            {"template": "grouped_league_with_playoffs", "group_count": 3, "advancing_per_group": 2},
        ],
    )
    def test_invalid_configuration(self, session, kwargs):
        t = make_tournament(session)
        make_teams(session, t, 5)
        session.commit()

        with pytest.raises(InvalidTemplateConfiguration):
            seed_tournament_template(session, t.id, **kwargs)
        assert _stages(session, t.id) == []

    def test_single_team_selection_is_invalid(self, session):
        t = make_tournament(session)
        (t1, _) = make_teams(session, t, 2)
        session.commit()
        with pytest.raises(InvalidTemplateConfiguration):
            seed_tournament_template(session, t.id, "straight_league", team_ids=[t1.id])

    def test_unregistered_or_duplicate_teams(self, session):
        t = make_tournament(session)
        t1, t2 = make_teams(session, t, 2)
        session.commit()
        with pytest.raises(InvalidTeamSelection):
            seed_tournament_template(session, t.id, "straight_league", team_ids=[t1.id, t1.id])
        with pytest.raises(InvalidTeamSelection):
            seed_tournament_template(session, t.id, "straight_league", team_ids=[t1.id, 999])

    def test_no_registered_teams(self, session):
        t = make_tournament(session)
        session.commit()
        with pytest.raises(NoTournamentTeams):
            seed_tournament_template(session, t.id, "straight_league")

    def test_unknown_tournament(self, session):
        with pytest.raises(TournamentNotFound):
            seed_tournament_template(session, 404, "straight_league")
