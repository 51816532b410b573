from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlmodel import Session

from cricket_fixtures.database import get_session
from cricket_fixtures.services.fixture_errors import FixtureBuilderError
from cricket_fixtures.services.stage_templates import seed_tournament_template

router = APIRouter()


class TemplateRequest(BaseModel):
    template: str
    team_ids: Optional[List[int]] = None
    group_count: int = 2
    advancing_per_group: int = 2
    reset_existing: bool = True


@router.post("/tournaments/{tournament_id}/templates", status_code=201)
def seed_template(tournament_id: int, request: TemplateRequest, session: Session = Depends(get_session)):
    """Create the stage structure for a tournament template"""
    try:
        return seed_tournament_template(
            session,
            tournament_id,
            request.template,
            team_ids=request.team_ids,
            group_count=request.group_count,
            advancing_per_group=request.advancing_per_group,
            reset_existing=request.reset_existing,
        )
    except FixtureBuilderError as e:
        raise HTTPException(status_code=e.status_code, detail=e.to_detail())
