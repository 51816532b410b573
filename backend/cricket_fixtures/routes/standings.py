from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from cricket_fixtures.database import get_session
from cricket_fixtures.services.fixture_errors import FixtureBuilderError
from cricket_fixtures.services.points_config import get_stage_points_config, set_stage_points_config
from cricket_fixtures.services.standings_engine import get_tournament_standings

router = APIRouter()


class PointsConfigUpdate(BaseModel):
    win_points: Optional[float] = None
    tie_points: Optional[float] = None
    draw_points: Optional[float] = None
    abandoned_points: Optional[float] = None
    tie_breaker_order: Optional[List[str]] = None


@router.get("/tournaments/{tournament_id}/standings")
def tournament_standings(
    tournament_id: int,
    stage_id: Optional[int] = None,
    stage_group_id: Optional[int] = None,
    include_draft: bool = False,
    session: Session = Depends(get_session),
):
    """Ranked standings table computed from finalized matches"""
    try:
        return get_tournament_standings(
            session,
            tournament_id,
            stage_id=stage_id,
            stage_group_id=stage_group_id,
            include_draft=include_draft,
        )
    except FixtureBuilderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/stages/{stage_id}/points-config")
def read_points_config(stage_id: int, session: Session = Depends(get_session)):
    try:
        return get_stage_points_config(session, stage_id).model_dump()
    except FixtureBuilderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.put("/stages/{stage_id}/points-config")
def update_points_config(stage_id: int, data: PointsConfigUpdate, session: Session = Depends(get_session)):
    """Replace a stage's points config; omitted fields take their defaults"""
    try:
        result = set_stage_points_config(session, stage_id, data.model_dump(exclude_none=True))
    except FixtureBuilderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
    stage = result["stage"]
    return {
        "stage": {"id": stage.id, "tournament_id": stage.tournament_id, "name": stage.name},
        "config": result["config"].model_dump(),
    }
