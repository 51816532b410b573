"""
Tests for fixture listing and the tournament admin view.
"""

from datetime import datetime

import pytest

from cricket_fixtures.models import Match, MatchParticipantSource
from cricket_fixtures.services.fixture_errors import TournamentNotFound
from cricket_fixtures.services.fixture_queries import (
    classify_temporal_status,
    get_tournament_fixtures,
    get_tournament_view,
)
from cricket_fixtures.services.points_config import set_stage_points_config
from tests.factories import make_match, make_stage, make_teams, make_tournament, make_venue

NOW = datetime(2026, 6, 10, 12, 0)


def _match(**fields):
    return Match(tournament_id=1, match_date=datetime(2026, 6, 11, 9, 0), **fields)


class TestClassifyTemporalStatus:
    def test_live_flag_wins(self):
        assert classify_temporal_status(_match(is_live=True, winner_id=1), NOW) == "live"

    def test_any_outcome_is_past(self):
        assert classify_temporal_status(_match(winner_id=1), NOW) == "past"
        assert classify_temporal_status(_match(is_abandoned=True), NOW) == "past"

    def test_future_start_is_upcoming(self):
        assert classify_temporal_status(_match(), NOW) == "upcoming"

    def test_scheduled_start_preferred_over_match_date(self):
        m = _match(scheduled_start_at=datetime(2026, 6, 10, 9, 0))
        assert classify_temporal_status(m, NOW) == "live"

    def test_started_without_result_is_live(self):
        m = Match(tournament_id=1, match_date=datetime(2026, 6, 9, 9, 0))
        assert classify_temporal_status(m, NOW) == "live"


@pytest.fixture
def fixtures_setup(session):
    t = make_tournament(session)
    t1, t2, t3, t4 = make_teams(session, t, 4)
    stage = make_stage(session, t, [t1, t2, t3, t4])
    past = make_match(
        session, t, stage, t1, t2, fixture_status="published", winner=t1, match_date=datetime(2026, 6, 2, 10, 0)
    )
    upcoming = make_match(session, t, stage, t3, t4, fixture_status="published", match_date=datetime(2026, 6, 20, 10, 0))
    draft = make_match(session, t, stage, None, None, match_date=datetime(2026, 6, 25, 10, 0))
    session.add(MatchParticipantSource(match_id=draft.id, team_slot=1, source_type="match", source_match_id=past.id))
    session.add(MatchParticipantSource(match_id=draft.id, team_slot=2, source_type="match", source_match_id=upcoming.id))
    session.commit()
    return t, stage, past, upcoming, draft


class TestGetTournamentFixtures:
    def test_published_only_by_default(self, session, fixtures_setup):
        t, _, past, upcoming, _ = fixtures_setup
        fixtures = get_tournament_fixtures(session, t.id, now=NOW)
        assert [f["id"] for f in fixtures] == [past.id, upcoming.id]
        assert [f["temporal_status"] for f in fixtures] == ["past", "upcoming"]

    def test_include_draft_with_sources(self, session, fixtures_setup):
        t, _, past, upcoming, draft = fixtures_setup
        fixtures = get_tournament_fixtures(session, t.id, include_draft=True, now=NOW)
        assert [f["id"] for f in fixtures] == [past.id, upcoming.id, draft.id]

        deferred = fixtures[-1]
        assert deferred["fixture_status"] == "draft"
        assert [(s["team_slot"], s["source_match_id"]) for s in deferred["participant_sources"]] == [
            (1, past.id),
            (2, upcoming.id),
        ]
        assert fixtures[0]["participant_sources"] == []

    def test_status_filter(self, session, fixtures_setup):
        t, _, past, _, _ = fixtures_setup
        fixtures = get_tournament_fixtures(session, t.id, status="past", now=NOW)
        assert [f["id"] for f in fixtures] == [past.id]
        assert get_tournament_fixtures(session, t.id, status="live", now=NOW) == []

    def test_stage_filter(self, session, fixtures_setup):
        t, stage, _, _, _ = fixtures_setup
        assert len(get_tournament_fixtures(session, t.id, stage_id=stage.id, include_draft=True, now=NOW)) == 3
        assert get_tournament_fixtures(session, t.id, stage_id=stage.id + 100, now=NOW) == []

    def test_unknown_tournament(self, session):
        with pytest.raises(TournamentNotFound):
            get_tournament_fixtures(session, 404)


class TestGetTournamentView:
    def test_structure_and_counts(self, session, fixtures_setup):
        t, stage, _, _, _ = fixtures_setup
        venue = make_venue(session, t)
        session.commit()
        set_stage_points_config(session, stage.id, {"win_points": 4})

        view = get_tournament_view(session, t.id)

        assert view["tournament"]["id"] == t.id
        assert [s["id"] for s in view["stages"]] == [stage.id]
        assert view["stages"][0]["points_config"]["win_points"] == 4
        assert [e["seed"] for e in view["stages"][0]["team_entries"]] == [1, 2, 3, 4]
        assert view["stages"][0]["groups"] == []
        assert [team["short_name"] for team in view["teams"]] == ["T1", "T2", "T3", "T4"]
        assert [v["id"] for v in view["venues"]] == [venue.id]
        assert view["counts"] == {"total_match_count": 3, "published_match_count": 2, "draft_match_count": 1}

    def test_empty_tournament(self, session):
        t = make_tournament(session)
        session.commit()
        view = get_tournament_view(session, t.id)
        assert view["stages"] == [] and view["teams"] == [] and view["venues"] == []
        assert view["counts"]["total_match_count"] == 0
