from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict
from sqlmodel import Session

from cricket_fixtures.database import get_session
from cricket_fixtures.services.fixture_builder import auto_generate_fixtures, auto_generate_next_swiss_round
from cricket_fixtures.services.fixture_drafts import (
    DraftFixtureMatchCreate,
    DraftFixtureMatchUpdate,
    create_draft_fixture_match,
    delete_draft_fixture_match,
    update_draft_fixture_match,
)
from cricket_fixtures.services.fixture_errors import FixtureBuilderError
from cricket_fixtures.services.fixture_publish import publish_fixture_matches
from cricket_fixtures.services.fixture_queries import get_tournament_fixtures, get_tournament_view
from cricket_fixtures.services.swiss_standings import refresh_swiss_round_standings

router = APIRouter()


class ParticipantSourceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    team_slot: int
    source_type: str
    source_match_id: Optional[int] = None
    source_stage_id: Optional[int] = None
    source_stage_group_id: Optional[int] = None
    source_position: Optional[int] = None
    source_team_id: Optional[int] = None


class FixtureMatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    stage_id: Optional[int] = None
    stage_group_id: Optional[int] = None
    fixture_round_id: Optional[int] = None
    stage_round: Optional[int] = None
    stage_sequence: Optional[int] = None
    team1_id: Optional[int] = None
    team2_id: Optional[int] = None
    match_date: datetime
    scheduled_start_at: Optional[datetime] = None
    scheduled_end_at: Optional[datetime] = None
    time_zone: str
    venue_id: Optional[int] = None
    notes: Optional[str] = None
    format: str
    overs_per_side: int
    fixture_status: str
    fixture_version: Optional[int] = None
    participant_sources: List[ParticipantSourceResponse] = []


class AutoGenerateRequest(BaseModel):
    stage_group_id: Optional[int] = None
    start_date: Optional[date] = None
    venue_ids: Optional[List[int]] = None
    overwrite_drafts: bool = False
    respect_existing_drafts: bool = True


class PublishRequest(BaseModel):
    match_ids: List[int]
    note: Optional[str] = None


def _http_error(e: FixtureBuilderError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.to_detail())


@router.get("/tournaments/{tournament_id}/view")
def tournament_view(tournament_id: int, session: Session = Depends(get_session)):
    """Tournament structure, teams, venues and fixture counts"""
    try:
        return get_tournament_view(session, tournament_id)
    except FixtureBuilderError as e:
        raise _http_error(e)


@router.get("/tournaments/{tournament_id}/fixtures")
def list_fixtures(
    tournament_id: int,
    stage_id: Optional[int] = None,
    include_draft: bool = False,
    status: str = Query("all", pattern="^(all|live|past|upcoming)$"),
    session: Session = Depends(get_session),
):
    """List fixtures with their derived temporal status"""
    try:
        return get_tournament_fixtures(
            session, tournament_id, stage_id=stage_id, include_draft=include_draft, status=status
        )
    except FixtureBuilderError as e:
        raise _http_error(e)


@router.post("/tournaments/{tournament_id}/fixtures/drafts", response_model=FixtureMatchResponse, status_code=201)
def create_draft(tournament_id: int, data: DraftFixtureMatchCreate, session: Session = Depends(get_session)):
    try:
        match = create_draft_fixture_match(session, tournament_id, data)
    except FixtureBuilderError as e:
        raise _http_error(e)
    return FixtureMatchResponse.model_validate(match)


@router.patch("/tournaments/{tournament_id}/fixtures/drafts/{match_id}", response_model=FixtureMatchResponse)
def update_draft(
    tournament_id: int, match_id: int, data: DraftFixtureMatchUpdate, session: Session = Depends(get_session)
):
    try:
        match = update_draft_fixture_match(session, tournament_id, match_id, data)
    except FixtureBuilderError as e:
        raise _http_error(e)
    return FixtureMatchResponse.model_validate(match)


@router.delete("/tournaments/{tournament_id}/fixtures/drafts/{match_id}")
def delete_draft(tournament_id: int, match_id: int, session: Session = Depends(get_session)):
    try:
        return delete_draft_fixture_match(session, tournament_id, match_id)
    except FixtureBuilderError as e:
        raise _http_error(e)


@router.post("/tournaments/{tournament_id}/stages/{stage_id}/fixtures/generate")
def generate_fixtures(
    tournament_id: int,
    stage_id: int,
    request: Optional[AutoGenerateRequest] = None,
    session: Session = Depends(get_session),
):
    """Auto-generate a draft fixture version for a stage"""
    request = request or AutoGenerateRequest()
    try:
        result = auto_generate_fixtures(
            session,
            tournament_id,
            stage_id,
            stage_group_id=request.stage_group_id,
            start_date=request.start_date,
            venue_ids=request.venue_ids,
            overwrite_drafts=request.overwrite_drafts,
            respect_existing_drafts=request.respect_existing_drafts,
        )
    except FixtureBuilderError as e:
        raise _http_error(e)
    return result.to_dict()


@router.post("/tournaments/{tournament_id}/stages/{stage_id}/swiss/next-round")
def generate_next_swiss_round(tournament_id: int, stage_id: int, session: Session = Depends(get_session)):
    try:
        result = auto_generate_next_swiss_round(session, tournament_id, stage_id)
    except FixtureBuilderError as e:
        raise _http_error(e)
    return {"fixture_version_id": result.fixture_version_id, "created_match_count": result.created_match_count}


@router.post("/tournaments/{tournament_id}/stages/{stage_id}/swiss/standings")
def refresh_swiss_standings(
    tournament_id: int,
    stage_id: int,
    include_draft: bool = False,
    session: Session = Depends(get_session),
):
    """Recompute the stored Swiss standings the next round is paired from"""
    try:
        return refresh_swiss_round_standings(session, tournament_id, stage_id, include_draft=include_draft)
    except FixtureBuilderError as e:
        raise _http_error(e)


@router.post("/tournaments/{tournament_id}/fixtures/publish")
def publish_fixtures(tournament_id: int, request: PublishRequest, session: Session = Depends(get_session)):
    """
    Publish draft fixtures as a new fixture version.

    All-or-nothing: unknown or already-published ids fail the whole request.
    """
    try:
        return publish_fixture_matches(session, tournament_id, request.match_ids, note=request.note)
    except FixtureBuilderError as e:
        raise _http_error(e)
