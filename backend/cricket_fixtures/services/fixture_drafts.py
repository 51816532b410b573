"""
Manual draft fixture CRUD.

A draft match is either concrete (team1_id/team2_id set, no participant
sources) or deferred (both team slots null, one MatchParticipantSource per
slot). Every mutation here keeps that invariant and is draft-only.
"""

import logging
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel
from sqlmodel import Session, select

from cricket_fixtures.models.fixture_version import FixtureChangeLog, FixtureVersionMatch
from cricket_fixtures.models.match import Match, MatchParticipantSource
from cricket_fixtures.services.fixture_errors import (
    FixtureMatchHasDependents,
    InvalidParticipantMode,
    InvalidParticipantSources,
    InvalidTeamSelection,
)
from cricket_fixtures.services.fixture_versioning import add_change_log, format_snapshot
from cricket_fixtures.utils.fixture_guards import (
    require_draft_match,
    require_stage,
    require_stage_group,
    require_tournament,
)

logger = logging.getLogger(__name__)

PARTICIPANT_MODES = ("concrete", "source")
SOURCE_TYPES = ("match", "position", "team")


# ============================================================================
# Input models
# ============================================================================


class ParticipantSourceInput(BaseModel):
    team_slot: int
    source_type: str
    source_match_id: Optional[int] = None
    source_stage_id: Optional[int] = None
    source_stage_group_id: Optional[int] = None
    source_position: Optional[int] = None
    source_team_id: Optional[int] = None


class DraftFixtureMatchCreate(BaseModel):
    stage_id: int
    stage_group_id: Optional[int] = None
    fixture_round_id: Optional[int] = None
    participant_mode: str = "concrete"
    team1_id: Optional[int] = None
    team2_id: Optional[int] = None
    participant_sources: Optional[List[ParticipantSourceInput]] = None
    venue_id: Optional[int] = None
    scheduled_start_at: Optional[datetime] = None
    scheduled_end_at: Optional[datetime] = None
    notes: Optional[str] = None


class DraftFixtureMatchUpdate(BaseModel):
    participant_mode: Optional[str] = None
    team1_id: Optional[int] = None
    team2_id: Optional[int] = None
    participant_sources: Optional[List[ParticipantSourceInput]] = None
    venue_id: Optional[int] = None
    scheduled_start_at: Optional[datetime] = None
    scheduled_end_at: Optional[datetime] = None
    notes: Optional[str] = None


# ============================================================================
# Validation
# ============================================================================


def _validate_source(session: Session, source: ParticipantSourceInput, tournament_id: int) -> None:
    if source.team_slot not in (1, 2):
        raise InvalidParticipantSources(f"team_slot must be 1 or 2, got {source.team_slot}")
    if source.source_type not in SOURCE_TYPES:
        raise InvalidParticipantSources(f"Unknown source_type '{source.source_type}'")

    if source.source_type == "match":
        if source.source_match_id is None:
            raise InvalidParticipantSources("A match source needs source_match_id")
        feeder = session.get(Match, source.source_match_id)
        if not feeder or feeder.tournament_id != tournament_id:
            raise InvalidParticipantSources(f"Source match {source.source_match_id} not found in tournament")
    elif source.source_type == "position":
        if source.source_position is None or source.source_position < 1:
            raise InvalidParticipantSources("A position source needs a source_position >= 1")
        if source.source_stage_id is None and source.source_stage_group_id is None:
            raise InvalidParticipantSources("A position source needs a source stage or group")
    elif source.source_team_id is None:
        raise InvalidParticipantSources("A team source needs source_team_id")


def ensure_participants(
    session: Session,
    tournament_id: int,
    mode: str,
    team1_id: Optional[int],
    team2_id: Optional[int],
    participant_sources: Optional[List[ParticipantSourceInput]],
) -> None:
    """
    Validate one side of the concrete/deferred invariant.

    concrete: two distinct team ids.
    source: exactly two well-formed sources covering slots 1 and 2.
    """
    if mode not in PARTICIPANT_MODES:
        raise InvalidParticipantMode(f"participant_mode must be one of {PARTICIPANT_MODES}, got '{mode}'")

    if mode == "concrete":
        if team1_id is None or team2_id is None or team1_id == team2_id:
            raise InvalidTeamSelection("Concrete fixtures need two distinct teams")
        return

    if not participant_sources or len(participant_sources) != 2:
        raise InvalidParticipantSources("Source fixtures need exactly two participant sources")
    if {s.team_slot for s in participant_sources} != {1, 2}:
        raise InvalidParticipantSources("Participant sources must cover team slots 1 and 2")
    for source in participant_sources:
        _validate_source(session, source, tournament_id)


def _add_sources(session: Session, match_id: int, sources: List[ParticipantSourceInput]) -> None:
    for source in sorted(sources, key=lambda s: s.team_slot):
        session.add(MatchParticipantSource(match_id=match_id, **source.model_dump()))


def _delete_sources(session: Session, match: Match) -> None:
    for source in session.exec(
        select(MatchParticipantSource).where(MatchParticipantSource.match_id == match.id)
    ).all():
        session.delete(source)
    session.flush()
    # Drop the loaded collection so the deleted rows are not cascaded back in
    session.expire(match, ["participant_sources"])


def _commit(session: Session, action: str, match_id: Optional[int]) -> None:
    try:
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Draft fixture %s failed for match %s", action, match_id)
        raise


# ============================================================================
# Operations
# ============================================================================


def create_draft_fixture_match(session: Session, tournament_id: int, data: DraftFixtureMatchCreate) -> Match:
    tournament = require_tournament(session, tournament_id)
    stage = require_stage(session, data.stage_id, tournament_id)
    require_stage_group(session, data.stage_group_id, stage.id)
    ensure_participants(
        session, tournament_id, data.participant_mode, data.team1_id, data.team2_id, data.participant_sources
    )

    concrete = data.participant_mode == "concrete"
    match = Match(
        tournament_id=tournament_id,
        stage_id=stage.id,
        stage_group_id=data.stage_group_id,
        fixture_round_id=data.fixture_round_id,
        team1_id=data.team1_id if concrete else None,
        team2_id=data.team2_id if concrete else None,
        match_date=data.scheduled_start_at or datetime.combine(tournament.start_date, datetime.min.time()),
        scheduled_start_at=data.scheduled_start_at,
        scheduled_end_at=data.scheduled_end_at,
        time_zone=tournament.time_zone,
        venue_id=data.venue_id,
        notes=data.notes,
        fixture_status="draft",
        **format_snapshot(session, stage, tournament),
    )
    session.add(match)
    session.flush()

    if not concrete:
        _add_sources(session, match.id, data.participant_sources)

    add_change_log(
        session,
        tournament_id,
        "fixture_match_created",
        payload={"participant_mode": data.participant_mode},
        stage_id=stage.id,
        match_id=match.id,
        fixture_round_id=data.fixture_round_id,
    )
    _commit(session, "create", match.id)
    session.refresh(match)
    logger.info("Created draft fixture %s (%s) in stage %s", match.id, data.participant_mode, stage.id)
    return match


def update_draft_fixture_match(
    session: Session, tournament_id: int, match_id: int, data: DraftFixtureMatchUpdate
) -> Match:
    """
    Patch a draft fixture.

    With participant_mode the participants are replaced wholesale: "source"
    clears team ids and toss fields, "concrete" drops any sources. Without a
    mode, team ids may only be patched on a match that is already concrete.
    """
    match = require_draft_match(session, match_id, tournament_id)
    fields_set = data.model_fields_set

    if data.participant_mode is not None:
        ensure_participants(
            session, tournament_id, data.participant_mode, data.team1_id, data.team2_id, data.participant_sources
        )
    elif data.team1_id is not None or data.team2_id is not None:
        if match.team1_id is None or match.team2_id is None:
            raise InvalidParticipantMode("Deferred fixtures need participant_mode to change participants")
        team1_id = data.team1_id if data.team1_id is not None else match.team1_id
        team2_id = data.team2_id if data.team2_id is not None else match.team2_id
        if team1_id == team2_id:
            raise InvalidTeamSelection("Concrete fixtures need two distinct teams")
        match.team1_id = team1_id
        match.team2_id = team2_id

    if data.venue_id is not None:
        match.venue_id = data.venue_id
    if "notes" in fields_set:
        match.notes = data.notes
    if "scheduled_start_at" in fields_set:
        match.scheduled_start_at = data.scheduled_start_at
        if data.scheduled_start_at is not None:
            match.match_date = data.scheduled_start_at
    if "scheduled_end_at" in fields_set:
        match.scheduled_end_at = data.scheduled_end_at

    if data.participant_mode is not None:
        _delete_sources(session, match)
        if data.participant_mode == "source":
            _add_sources(session, match.id, data.participant_sources)
            match.team1_id = None
            match.team2_id = None
            match.toss_winner_id = None
            match.toss_decision = None
        else:
            match.team1_id = data.team1_id
            match.team2_id = data.team2_id

    session.add(match)
    add_change_log(
        session,
        tournament_id,
        "fixture_match_updated",
        payload={"fields": sorted(fields_set)},
        stage_id=match.stage_id,
        match_id=match.id,
        fixture_round_id=match.fixture_round_id,
    )
    _commit(session, "update", match.id)
    session.refresh(match)
    return match


def delete_draft_match_rows(session: Session, match: Match) -> None:
    """
    Remove a draft match and its own rows. Does not commit.

    Its participant sources and version snapshots are deleted and change-log
    rows that reference it are detached. A match still feeding another
    match (a "match" participant source) cannot be deleted; remove or
    re-point the dependent first.
    """
    match_id = match.id
    dependents = session.exec(
        select(MatchParticipantSource.match_id).where(MatchParticipantSource.source_match_id == match_id)
    ).all()
    if dependents:
        raise FixtureMatchHasDependents(
            f"Match {match_id} feeds match(es) {sorted(set(dependents))}; delete or re-point them first"
        )

    _delete_sources(session, match)
    for snapshot in session.exec(
        select(FixtureVersionMatch).where(FixtureVersionMatch.match_id == match_id)
    ).all():
        session.delete(snapshot)
    for entry in session.exec(select(FixtureChangeLog).where(FixtureChangeLog.match_id == match_id)).all():
        entry.match_id = None
        session.add(entry)
    session.flush()

    session.delete(match)
    add_change_log(
        session,
        match.tournament_id,
        "fixture_match_deleted",
        payload={"deleted_match_id": match_id},
        stage_id=match.stage_id,
        fixture_round_id=match.fixture_round_id,
    )
    session.flush()


def delete_draft_fixture_match(session: Session, tournament_id: int, match_id: int) -> dict:
    match = require_draft_match(session, match_id, tournament_id)
    delete_draft_match_rows(session, match)
    _commit(session, "delete", match_id)
    logger.info("Deleted draft fixture %s from tournament %s", match_id, tournament_id)
    return {"id": match_id}
