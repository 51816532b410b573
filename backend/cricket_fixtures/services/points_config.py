"""
Stage points configuration.

The config is stored serialized inside TournamentStage.metadata_json under the
"points_config" key, next to whatever other stage metadata exists. It is parsed
into StagePointsConfig once on read and validated once on write; nothing
outside this module touches the raw JSON.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator
from sqlmodel import Session

from cricket_fixtures.models.fixture_version import FixtureChangeLog
from cricket_fixtures.models.stage import TournamentStage
from cricket_fixtures.services.fixture_errors import InvalidPointsConfig, StageNotFound

logger = logging.getLogger(__name__)

POINTS_CONFIG_KEY = "points_config"

TIE_BREAKERS = ("points", "net_run_rate", "wins", "head_to_head", "seed")
DEFAULT_TIE_BREAKER_ORDER: List[str] = list(TIE_BREAKERS)


class StagePointsConfig(BaseModel):
    win_points: float = 2
    tie_points: float = 1
    draw_points: float = 1
    abandoned_points: float = 1
    tie_breaker_order: List[str] = Field(default_factory=lambda: list(DEFAULT_TIE_BREAKER_ORDER))

    @field_validator("win_points", "tie_points", "draw_points", "abandoned_points")
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError("points must be >= 0")
        return v

    @field_validator("tie_breaker_order")
    @classmethod
    def validate_tie_breakers(cls, v):
        unknown = [item for item in v if item not in TIE_BREAKERS]
        if unknown:
            raise ValueError(f"unknown tie breakers: {unknown}")
        # An empty chain means "use the default chain"
        return list(v) if v else list(DEFAULT_TIE_BREAKER_ORDER)


def _load_metadata(metadata_json: Optional[str]) -> Dict[str, Any]:
    """Parse stage metadata safely; anything unreadable is treated as empty."""
    if metadata_json:
        try:
            parsed = json.loads(metadata_json)
        except (json.JSONDecodeError, TypeError):
            return {}
        if isinstance(parsed, dict):
            return parsed
    return {}


def parse_stage_points_config(metadata_json: Optional[str]) -> StagePointsConfig:
    """
    Read the points config from stage metadata.

    Missing keys fall back to defaults. A stored config that no longer
    validates is logged and replaced by the defaults rather than failing the
    standings read.
    """
    raw = _load_metadata(metadata_json).get(POINTS_CONFIG_KEY)
    if not isinstance(raw, dict):
        return StagePointsConfig()
    try:
        return StagePointsConfig.model_validate(raw)
    except ValidationError:
        logger.warning("Ignoring invalid stored points config: %s", raw)
        return StagePointsConfig()


def validate_points_config(config: Any) -> StagePointsConfig:
    """Coerce caller input into a StagePointsConfig or raise InvalidPointsConfig."""
    if isinstance(config, StagePointsConfig):
        return config
    try:
        return StagePointsConfig.model_validate(config)
    except ValidationError as e:
        raise InvalidPointsConfig(f"Invalid points config: {e.errors()[0]['msg']}") from e


def get_stage_points_config(session: Session, stage_id: int) -> StagePointsConfig:
    stage = session.get(TournamentStage, stage_id)
    if not stage:
        raise StageNotFound(f"Stage {stage_id} not found")
    return parse_stage_points_config(stage.metadata_json)


def set_stage_points_config(session: Session, stage_id: int, config: Any) -> Dict[str, Any]:
    """
    Validate and store a stage's points config, preserving other metadata keys.

    Appends a stage_points_config_updated change-log entry in the same
    transaction. Returns {"stage": TournamentStage, "config": StagePointsConfig}.
    """
    parsed = validate_points_config(config)

    stage = session.get(TournamentStage, stage_id)
    if not stage:
        raise StageNotFound(f"Stage {stage_id} not found")

    metadata = _load_metadata(stage.metadata_json)
    metadata[POINTS_CONFIG_KEY] = parsed.model_dump()
    stage.metadata_json = json.dumps(metadata)
    session.add(stage)
    session.add(
        FixtureChangeLog(
            tournament_id=stage.tournament_id,
            stage_id=stage.id,
            action="stage_points_config_updated",
            payload=json.dumps(parsed.model_dump()),
        )
    )

    try:
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Failed to store points config for stage %s", stage_id)
        raise

    session.refresh(stage)
    logger.info("Stored points config for stage %s: %s", stage_id, parsed.model_dump())
    return {"stage": stage, "config": parsed}
