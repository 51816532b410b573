"""
Fixture Builder - batch auto-generation of stage fixtures.

Pipeline (one transaction):
1. Resolve participants: stage entries in seed order, or for an elimination
   stage with no entries, its incoming advancement rules ordered by to_slot
2. Build a symbolic plan for the stage format (match_plan)
3. Allocate dates, venues and slots (schedule_allocator)
4. Persist: generation lock -> existing-draft recheck or overwrite -> FixtureVersion ->
   FixtureRound per round -> matches round by round -> participant sources
   -> FixtureVersionMatch snapshots -> change log -> release lock -> commit

MatchWinnerRef(round, slot) is resolved from a local (round, slot) -> match id
table filled as each earlier round is written. Rounds are written strictly in
ascending order so every reference points at an already-inserted match.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from cricket_fixtures.models.fixture_version import FixtureGenerationLock, FixtureRound, FixtureVersion
from cricket_fixtures.models.match import Match, MatchParticipantSource
from cricket_fixtures.models.stage import TournamentStage, TournamentStageAdvancement, TournamentStageTeamEntry
from cricket_fixtures.models.swiss_round_standing import SwissRoundStanding
from cricket_fixtures.models.tournament import Tournament
from cricket_fixtures.services.fixture_drafts import delete_draft_match_rows
from cricket_fixtures.services.fixture_errors import (
    FixtureGenerationInProgress,
    InsufficientTeams,
    SwissRoundNotReady,
)
from cricket_fixtures.services.fixture_versioning import (
    add_change_log,
    format_snapshot,
    next_fixture_version_number,
    snapshot_matches,
)
from cricket_fixtures.services.match_plan import (
    GroupPositionRef,
    MatchPlan,
    MatchWinnerRef,
    ParticipantRef,
    StageSlotRef,
    SwissEntrant,
    TeamRef,
    build_double_elimination_plans,
    build_double_round_robin_plans,
    build_round_robin_plans,
    build_single_elimination_plans,
    build_swiss_pairings,
    group_plans_by_round,
)
from cricket_fixtures.services.schedule_allocator import ScheduledSlot, allocate_schedule_times, load_tournament_venues
from cricket_fixtures.services.stage_format import ELIMINATION_FORMATS, StageFormat, normalize_stage_format
from cricket_fixtures.utils.fixture_guards import require_stage, require_stage_group, require_tournament
from cricket_fixtures.utils.sql import scalar_int

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    fixture_version_id: Optional[int]
    created_match_count: int = 0
    created_round_count: int = 0
    created_match_ids: List[int] = field(default_factory=list)
    skipped_reason: Optional[str] = None
    time_zone: Optional[str] = None

    def to_dict(self):
        return {
            "fixture_version_id": self.fixture_version_id,
            "created_match_count": self.created_match_count,
            "created_round_count": self.created_round_count,
            "created_match_ids": self.created_match_ids,
            "skipped_reason": self.skipped_reason,
            "time_zone": self.time_zone,
        }


# ============================================================================
# Participant resolution
# ============================================================================


def _seed_order_key(entry: TournamentStageTeamEntry) -> Tuple[bool, int, int]:
    # Unseeded entries go last, in insertion order
    return (entry.seed is None, entry.seed or 0, entry.id or 0)


def load_stage_entries(
    session: Session, stage_id: int, stage_group_id: Optional[int] = None
) -> List[TournamentStageTeamEntry]:
    query = select(TournamentStageTeamEntry).where(TournamentStageTeamEntry.stage_id == stage_id)
    if stage_group_id is not None:
        query = query.where(TournamentStageTeamEntry.stage_group_id == stage_group_id)
    return sorted(session.exec(query).all(), key=_seed_order_key)


def advancement_participants(session: Session, stage_id: int) -> List[ParticipantRef]:
    """First-round refs for a stage fed by StageAdvancement rules, ordered by to_slot."""
    rules = session.exec(
        select(TournamentStageAdvancement)
        .where(TournamentStageAdvancement.to_stage_id == stage_id)
        .order_by(TournamentStageAdvancement.to_slot, TournamentStageAdvancement.id)
    ).all()
    refs: List[ParticipantRef] = []
    for rule in rules:
        if rule.from_stage_group_id is not None:
            refs.append(
                GroupPositionRef(
                    stage_group_id=rule.from_stage_group_id,
                    position=rule.position_from,
                    stage_id=rule.from_stage_id,
                )
            )
        else:
            refs.append(StageSlotRef(stage_id=rule.from_stage_id, position=rule.position_from))
    return refs


def build_stage_plans(stage_format: StageFormat, participants: Sequence[ParticipantRef]) -> List[MatchPlan]:
    if stage_format == StageFormat.SINGLE_ROUND_ROBIN:
        return build_round_robin_plans(participants)
    if stage_format == StageFormat.DOUBLE_ROUND_ROBIN:
        return build_double_round_robin_plans(participants)
    if stage_format == StageFormat.SINGLE_ELIMINATION:
        return build_single_elimination_plans(participants)
    if stage_format == StageFormat.DOUBLE_ELIMINATION:
        return build_double_elimination_plans(participants)

    # Swiss: first round, everyone level with no history
    entrants = [SwissEntrant(team_id=p.team_id) for p in participants if isinstance(p, TeamRef)]
    return build_swiss_pairings(entrants, round_number=1)


# ============================================================================
# Persistence
# ============================================================================


def _acquire_generation_lock(session: Session, tournament_id: int, stage_id: int) -> FixtureGenerationLock:
    lock = FixtureGenerationLock(tournament_id=tournament_id, stage_id=stage_id)
    session.add(lock)
    try:
        session.flush()
    except IntegrityError as e:
        raise FixtureGenerationInProgress(
            f"Fixture generation already running for stage {stage_id}"
        ) from e
    return lock


def _stage_draft_matches(session: Session, tournament_id: int, stage_id: int) -> List[Match]:
    return session.exec(
        select(Match)
        .where(Match.tournament_id == tournament_id)
        .where(Match.stage_id == stage_id)
        .where(Match.fixture_status == "draft")
        .order_by(Match.id)
    ).all()


def _skipped_for_drafts(tournament: Tournament, stage: TournamentStage) -> GenerationResult:
    logger.info("Stage %s already has draft fixtures; skipping generation", stage.id)
    return GenerationResult(
        fixture_version_id=None,
        skipped_reason="draft_matches_exist",
        time_zone=tournament.time_zone,
    )


def _source_row(
    match_id: int, team_slot: int, ref: ParticipantRef, resolved: Dict[Tuple[int, int], int]
) -> MatchParticipantSource:
    if isinstance(ref, MatchWinnerRef):
        return MatchParticipantSource(
            match_id=match_id,
            team_slot=team_slot,
            source_type="match",
            source_match_id=resolved[(ref.round, ref.slot)],
        )
    if isinstance(ref, GroupPositionRef):
        return MatchParticipantSource(
            match_id=match_id,
            team_slot=team_slot,
            source_type="position",
            source_stage_id=ref.stage_id,
            source_stage_group_id=ref.stage_group_id,
            source_position=ref.position,
        )
    if isinstance(ref, StageSlotRef):
        return MatchParticipantSource(
            match_id=match_id,
            team_slot=team_slot,
            source_type="position",
            source_stage_id=ref.stage_id,
            source_position=ref.position,
        )
    return MatchParticipantSource(
        match_id=match_id,
        team_slot=team_slot,
        source_type="team",
        source_team_id=ref.team_id,
    )


def create_generated_matches(
    session: Session,
    tournament: Tournament,
    stage: TournamentStage,
    version: FixtureVersion,
    plans: Sequence[MatchPlan],
    schedule: Dict[int, ScheduledSlot],
    stage_group_id: Optional[int] = None,
    pairing_method: str = "auto",
) -> Tuple[List[Match], int]:
    """
    Insert rounds, matches and participant sources for a plan. Flushes, never commits.

    Returns (created matches in insertion order, number of rounds created).
    """
    snapshot = format_snapshot(session, stage, tournament)
    rounds = group_plans_by_round(plans)
    resolved: Dict[Tuple[int, int], int] = {}
    created: List[Match] = []

    for round_number, round_plans in rounds.items():
        fixture_round = FixtureRound(
            tournament_id=tournament.id,
            stage_id=stage.id,
            fixture_version_id=version.id,
            round_number=round_number,
            round_name=f"Round {round_number}",
            pairing_method=pairing_method,
        )
        session.add(fixture_round)
        session.flush()

        for slot, plan in enumerate(round_plans):
            scheduled = schedule.get(id(plan))
            concrete = plan.is_concrete
            team1, team2 = plan.participants
            match = Match(
                tournament_id=tournament.id,
                stage_id=stage.id,
                stage_group_id=stage_group_id,
                fixture_round_id=fixture_round.id,
                stage_round=round_number,
                stage_sequence=slot + 1,
                team1_id=team1.team_id if concrete else None,
                team2_id=team2.team_id if concrete else None,
                match_date=scheduled.start if scheduled else datetime.combine(tournament.start_date, datetime.min.time()),
                scheduled_start_at=scheduled.start if scheduled else None,
                scheduled_end_at=scheduled.end if scheduled else None,
                venue_id=scheduled.venue_id if scheduled else None,
                time_zone=tournament.time_zone,
                fixture_status="draft",
                **snapshot,
            )
            session.add(match)
            session.flush()

            if not concrete:
                for team_slot, ref in enumerate(plan.participants, start=1):
                    session.add(_source_row(match.id, team_slot, ref, resolved))

            resolved[(round_number, slot)] = match.id
            created.append(match)

    session.flush()
    return created, len(rounds)


def _persist_generation(
    session: Session,
    tournament: Tournament,
    stage: TournamentStage,
    plans: Sequence[MatchPlan],
    schedule: Dict[int, ScheduledSlot],
    action: str,
    payload: dict,
    stage_group_id: Optional[int] = None,
    pairing_method: str = "auto",
    overwrite_drafts: bool = False,
    respect_existing_drafts: bool = False,
) -> GenerationResult:
    failed_step = "lock"
    try:
        lock = _acquire_generation_lock(session, tournament.id, stage.id)

        # Checked again under the lock: drafts may have landed since planning
        if respect_existing_drafts and _stage_draft_matches(session, tournament.id, stage.id):
            session.rollback()
            return _skipped_for_drafts(tournament, stage)

        if overwrite_drafts:
            failed_step = "overwrite_drafts"
            drafts = _stage_draft_matches(session, tournament.id, stage.id)
            # Later rounds first, so no deleted match still feeds a remaining one
            for match in reversed(drafts):
                delete_draft_match_rows(session, match)
            logger.info("Overwrote %d draft fixtures in stage %s", len(drafts), stage.id)

        failed_step = "version"
        version = FixtureVersion(
            tournament_id=tournament.id,
            stage_id=stage.id,
            version_number=next_fixture_version_number(session, tournament.id),
            status="draft",
            label="Auto-generated draft",
        )
        session.add(version)
        session.flush()

        failed_step = "matches"
        matches, round_count = create_generated_matches(
            session,
            tournament,
            stage,
            version,
            plans,
            schedule,
            stage_group_id=stage_group_id,
            pairing_method=pairing_method,
        )
        snapshot_matches(session, version.id, matches)

        failed_step = "change_log"
        add_change_log(
            session,
            tournament.id,
            action,
            payload={**payload, "created_match_count": len(matches), "created_round_count": round_count},
            stage_id=stage.id,
            fixture_version_id=version.id,
        )

        session.delete(lock)
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Fixture generation failed for stage %s at step %s; rolled back", stage.id, failed_step)
        raise

    result = GenerationResult(
        fixture_version_id=version.id,
        created_match_count=len(matches),
        created_round_count=round_count,
        created_match_ids=[m.id for m in matches],
        time_zone=tournament.time_zone,
    )
    logger.info(
        "Generated %d fixtures in %d rounds for stage %s (version %s)",
        result.created_match_count,
        result.created_round_count,
        stage.id,
        version.version_number,
    )
    return result


# ============================================================================
# Entry points
# ============================================================================


def auto_generate_fixtures(
    session: Session,
    tournament_id: int,
    stage_id: int,
    stage_group_id: Optional[int] = None,
    start_date: Optional[date] = None,
    venue_ids: Optional[Sequence[int]] = None,
    overwrite_drafts: bool = False,
    respect_existing_drafts: bool = True,
) -> GenerationResult:
    """
    Generate a full draft fixture set for one stage (or one group of it).

    Existing stage drafts: overwrite_drafts deletes them first; otherwise
    with respect_existing_drafts (default) generation is skipped and the
    result carries skipped_reason="draft_matches_exist".
    """
    tournament = require_tournament(session, tournament_id)
    stage = require_stage(session, stage_id, tournament_id)
    require_stage_group(session, stage_group_id, stage.id)
    stage_format = normalize_stage_format(stage.format, stage.stage_type)

    entries = load_stage_entries(session, stage.id, stage_group_id)
    participants: List[ParticipantRef] = [TeamRef(team_id=e.team_id) for e in entries]
    if not participants and stage_format in ELIMINATION_FORMATS:
        participants = advancement_participants(session, stage.id)
    if len(participants) < 2:
        raise InsufficientTeams(f"Stage {stage.id} has {len(participants)} participants; at least 2 are required")

    respect_drafts = respect_existing_drafts and not overwrite_drafts
    if respect_drafts and _stage_draft_matches(session, tournament_id, stage.id):
        return _skipped_for_drafts(tournament, stage)

    plans = build_stage_plans(stage_format, participants)
    venues = load_tournament_venues(session, tournament_id, venue_ids)
    schedule = allocate_schedule_times(plans, venues, start_date or tournament.start_date)

    return _persist_generation(
        session,
        tournament,
        stage,
        plans,
        schedule,
        action="fixture_auto_generated",
        payload={"format": stage_format.value, "stage_group_id": stage_group_id},
        stage_group_id=stage_group_id,
        pairing_method="swiss" if stage_format == StageFormat.SWISS else "auto",
        overwrite_drafts=overwrite_drafts,
        respect_existing_drafts=respect_drafts,
    )


def _swiss_entrants(session: Session, tournament_id: int, stage_id: int) -> List[SwissEntrant]:
    rows = session.exec(
        select(SwissRoundStanding)
        .where(SwissRoundStanding.tournament_id == tournament_id)
        .where(SwissRoundStanding.stage_id == stage_id)
    ).all()
    if rows:
        return [
            SwissEntrant(
                team_id=row.team_id,
                points=row.points,
                tie_break1=row.tie_break1,
                tie_break2=row.tie_break2,
                tie_break3=row.tie_break3,
                opponent_team_ids=set(row.opponent_team_ids or []),
            )
            for row in rows
        ]
    return [SwissEntrant(team_id=entry.team_id) for entry in load_stage_entries(session, stage_id)]


def next_swiss_round_number(session: Session, stage_id: int) -> int:
    current = session.exec(select(func.max(Match.stage_round)).where(Match.stage_id == stage_id)).one()
    return scalar_int(current) + 1


def auto_generate_next_swiss_round(session: Session, tournament_id: int, stage_id: int) -> GenerationResult:
    """
    Pair the next Swiss round from the stored SwissRoundStanding rows.

    Without stored standings every stage entry starts level (first round).
    The round is numbered after the highest existing stage round and played
    round_number - 1 days after the tournament start date.
    """
    tournament = require_tournament(session, tournament_id)
    stage = require_stage(session, stage_id, tournament_id)
    if normalize_stage_format(stage.format, stage.stage_type) != StageFormat.SWISS:
        raise SwissRoundNotReady(f"Stage {stage_id} is not a swiss stage")

    entrants = _swiss_entrants(session, tournament_id, stage.id)
    if len(entrants) < 2:
        raise InsufficientTeams(f"Stage {stage.id} has {len(entrants)} swiss entrants; at least 2 are required")

    round_number = next_swiss_round_number(session, stage.id)
    pairings = build_swiss_pairings(entrants, round_number=round_number)
    if not pairings:
        raise SwissRoundNotReady(f"No pairings could be made for round {round_number}")

    venues = load_tournament_venues(session, tournament_id)
    schedule = allocate_schedule_times(
        pairings, venues, tournament.start_date + timedelta(days=round_number - 1)
    )

    return _persist_generation(
        session,
        tournament,
        stage,
        pairings,
        schedule,
        action="fixture_auto_generated_swiss_round",
        payload={"round_number": round_number},
        pairing_method="swiss",
    )
