"""
Tests for stage points configuration parsing and storage.
"""

import json

import pytest
from sqlmodel import select

from cricket_fixtures.models import FixtureChangeLog
from cricket_fixtures.services.fixture_errors import InvalidPointsConfig, StageNotFound
from cricket_fixtures.services.points_config import (
    DEFAULT_TIE_BREAKER_ORDER,
    StagePointsConfig,
    get_stage_points_config,
    parse_stage_points_config,
    set_stage_points_config,
    validate_points_config,
)
from tests.factories import make_stage, make_tournament


class TestParseStagePointsConfig:
    def test_missing_metadata_gives_defaults(self):
        config = parse_stage_points_config(None)
        assert config.win_points == 2
        assert config.tie_points == 1
        assert config.draw_points == 1
        assert config.abandoned_points == 1
        assert config.tie_breaker_order == DEFAULT_TIE_BREAKER_ORDER

    def test_partial_config_fills_defaults(self):
        config = parse_stage_points_config(json.dumps({"points_config": {"win_points": 4}}))
        assert config.win_points == 4
        assert config.tie_points == 1

    def test_malformed_json_gives_defaults(self):
        assert parse_stage_points_config("{not json") == StagePointsConfig()

    def test_invalid_stored_config_gives_defaults(self):
        stored = json.dumps({"points_config": {"win_points": -3}})
        assert parse_stage_points_config(stored) == StagePointsConfig()


class TestValidatePointsConfig:
    def test_negative_points_rejected(self):
        with pytest.raises(InvalidPointsConfig):
            validate_points_config({"tie_points": -1})

    def test_unknown_tie_breaker_rejected(self):
        with pytest.raises(InvalidPointsConfig):
            validate_points_config({"tie_breaker_order": ["points", "coin_toss"]})

    def test_empty_tie_breaker_order_means_default(self):
        config = validate_points_config({"tie_breaker_order": []})
        assert config.tie_breaker_order == DEFAULT_TIE_BREAKER_ORDER

    def test_custom_order_kept(self):
        config = validate_points_config({"tie_breaker_order": ["head_to_head", "points"]})
        assert config.tie_breaker_order == ["head_to_head", "points"]


class TestStoredPointsConfig:
    def test_set_preserves_other_metadata_and_logs(self, session):
        t = make_tournament(session)
        stage = make_stage(session, t)
        stage.metadata_json = json.dumps({"colour": "blue"})
        session.add(stage)
        session.commit()

        result = set_stage_points_config(session, stage.id, {"win_points": 3, "abandoned_points": 0})
        assert result["config"].win_points == 3

        metadata = json.loads(result["stage"].metadata_json)
        assert metadata["colour"] == "blue"
        assert metadata["points_config"]["abandoned_points"] == 0

        assert get_stage_points_config(session, stage.id).win_points == 3

        logs = session.exec(select(FixtureChangeLog)).all()
        assert [log.action for log in logs] == ["stage_points_config_updated"]
        assert logs[0].stage_id == stage.id

    def test_invalid_config_writes_nothing(self, session):
        t = make_tournament(session)
        stage = make_stage(session, t)
        session.commit()

        with pytest.raises(InvalidPointsConfig):
            set_stage_points_config(session, stage.id, {"win_points": -2})

        assert session.exec(select(FixtureChangeLog)).all() == []
        assert get_stage_points_config(session, stage.id) == StagePointsConfig()

    def test_unknown_stage(self, session):
        with pytest.raises(StageNotFound):
            get_stage_points_config(session, 999)
        with pytest.raises(StageNotFound):
            set_stage_points_config(session, 999, {})
