"""
Read-side fixture queries: tournament fixture lists and the admin view.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import Session, select

from cricket_fixtures.models.match import Match, MatchParticipantSource
from cricket_fixtures.models.stage import (
    TournamentStage,
    TournamentStageAdvancement,
    TournamentStageGroup,
    TournamentStageTeamEntry,
)
from cricket_fixtures.models.team import Team
from cricket_fixtures.models.tournament import TournamentTeam, TournamentVenue
from cricket_fixtures.models.venue import Venue
from cricket_fixtures.services.points_config import parse_stage_points_config
from cricket_fixtures.services.standings_engine import is_finalized
from cricket_fixtures.utils.fixture_guards import require_tournament


def classify_temporal_status(match: Match, now: datetime) -> str:
    """
    live if flagged live; past once any outcome is recorded; upcoming while
    the scheduled start (or match date) is still ahead; otherwise live.
    """
    if match.is_live:
        return "live"
    if is_finalized(match):
        return "past"
    start = match.scheduled_start_at or match.match_date
    if start > now:
        return "upcoming"
    return "live"


def get_tournament_fixtures(
    session: Session,
    tournament_id: int,
    stage_id: Optional[int] = None,
    include_draft: bool = False,
    status: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Fixtures ordered by match date, each with its participant sources and a
    derived temporal_status. Only published fixtures unless include_draft.
    status filters on temporal_status ("all" or None keeps everything).
    """
    require_tournament(session, tournament_id)
    now = now or datetime.utcnow()

    query = select(Match).where(Match.tournament_id == tournament_id)
    if stage_id is not None:
        query = query.where(Match.stage_id == stage_id)
    if not include_draft:
        query = query.where(Match.fixture_status == "published")
    matches = session.exec(query.order_by(Match.match_date, Match.id)).all()

    sources_by_match: Dict[int, List[MatchParticipantSource]] = {}
    if matches:
        sources = session.exec(
            select(MatchParticipantSource)
            .where(MatchParticipantSource.match_id.in_([m.id for m in matches]))
            .order_by(MatchParticipantSource.team_slot)
        ).all()
        for source in sources:
            sources_by_match.setdefault(source.match_id, []).append(source)

    fixtures = []
    for match in matches:
        temporal_status = classify_temporal_status(match, now)
        if status and status != "all" and temporal_status != status:
            continue
        fixtures.append(
            {
                **match.model_dump(),
                "temporal_status": temporal_status,
                "participant_sources": [s.model_dump() for s in sources_by_match.get(match.id, [])],
            }
        )
    return fixtures


def get_tournament_view(session: Session, tournament_id: int) -> Dict[str, Any]:
    """Tournament with its stages (groups, entries, advancements), teams, venues and fixture counts."""
    tournament = require_tournament(session, tournament_id)

    stages = session.exec(
        select(TournamentStage)
        .where(TournamentStage.tournament_id == tournament_id)
        .order_by(TournamentStage.sequence)
    ).all()
    stage_ids = [s.id for s in stages]

    groups: Dict[int, List[TournamentStageGroup]] = {}
    entries: Dict[int, List[TournamentStageTeamEntry]] = {}
    outgoing: Dict[int, List[TournamentStageAdvancement]] = {}
    incoming: Dict[int, List[TournamentStageAdvancement]] = {}
    if stage_ids:
        for group in session.exec(
            select(TournamentStageGroup)
            .where(TournamentStageGroup.stage_id.in_(stage_ids))
            .order_by(TournamentStageGroup.sequence)
        ).all():
            groups.setdefault(group.stage_id, []).append(group)
        for entry in session.exec(
            select(TournamentStageTeamEntry)
            .where(TournamentStageTeamEntry.stage_id.in_(stage_ids))
            .order_by(TournamentStageTeamEntry.seed, TournamentStageTeamEntry.id)
        ).all():
            entries.setdefault(entry.stage_id, []).append(entry)
        for rule in session.exec(
            select(TournamentStageAdvancement)
            .where(
                TournamentStageAdvancement.from_stage_id.in_(stage_ids)
                | TournamentStageAdvancement.to_stage_id.in_(stage_ids)
            )
            .order_by(TournamentStageAdvancement.to_slot)
        ).all():
            outgoing.setdefault(rule.from_stage_id, []).append(rule)
            incoming.setdefault(rule.to_stage_id, []).append(rule)

    teams = session.exec(
        select(Team)
        .join(TournamentTeam, TournamentTeam.team_id == Team.id)
        .where(TournamentTeam.tournament_id == tournament_id)
        .order_by(TournamentTeam.id)
    ).all()
    venues = session.exec(
        select(Venue)
        .join(TournamentVenue, TournamentVenue.venue_id == Venue.id)
        .where(TournamentVenue.tournament_id == tournament_id)
        .order_by(Venue.id)
    ).all()

    statuses = session.exec(select(Match.fixture_status).where(Match.tournament_id == tournament_id)).all()
    published = sum(1 for s in statuses if s == "published")

    return {
        "tournament": tournament.model_dump(),
        "stages": [
            {
                **stage.model_dump(),
                "points_config": parse_stage_points_config(stage.metadata_json).model_dump(),
                "groups": [g.model_dump() for g in groups.get(stage.id, [])],
                "team_entries": [e.model_dump() for e in entries.get(stage.id, [])],
                "source_advancements": [a.model_dump() for a in outgoing.get(stage.id, [])],
                "target_advancements": [a.model_dump() for a in incoming.get(stage.id, [])],
            }
            for stage in stages
        ],
        "teams": [t.model_dump() for t in teams],
        "venues": [v.model_dump() for v in venues],
        "counts": {
            "total_match_count": len(statuses),
            "published_match_count": published,
            "draft_match_count": len(statuses) - published,
        },
    }
