"""
Fixture Guards

Reusable lookups that enforce ownership and lifecycle rules:
- Tournament / stage existence
- Stage and group ownership
- Draft-only match mutations
"""

from typing import Optional

from sqlmodel import Session

from cricket_fixtures.models.match import Match
from cricket_fixtures.models.stage import TournamentStage, TournamentStageGroup
from cricket_fixtures.models.tournament import Tournament
from cricket_fixtures.services.fixture_errors import (
    FixtureMatchNotDraft,
    FixtureMatchNotFound,
    InvalidStageGroup,
    StageNotFound,
    TournamentNotFound,
)


def require_tournament(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise TournamentNotFound(f"Tournament {tournament_id} not found")
    return tournament


def require_stage(session: Session, stage_id: int, tournament_id: int) -> TournamentStage:
    """Stage must exist and belong to the tournament."""
    stage = session.get(TournamentStage, stage_id)
    if not stage or stage.tournament_id != tournament_id:
        raise StageNotFound(f"Stage {stage_id} not found in tournament {tournament_id}")
    return stage


def require_stage_group(session: Session, stage_group_id: Optional[int], stage_id: int) -> Optional[TournamentStageGroup]:
    """None passes through; otherwise the group must belong to the stage."""
    if stage_group_id is None:
        return None
    group = session.get(TournamentStageGroup, stage_group_id)
    if not group or group.stage_id != stage_id:
        raise InvalidStageGroup(f"Group {stage_group_id} does not belong to stage {stage_id}")
    return group


def get_match_or_404(session: Session, match_id: int, tournament_id: int) -> Match:
    match = session.get(Match, match_id)
    if not match or match.tournament_id != tournament_id:
        raise FixtureMatchNotFound(f"Match {match_id} not found in tournament {tournament_id}")
    return match


def require_draft_match(session: Session, match_id: int, tournament_id: int) -> Match:
    """
    Require that a match is a draft fixture, otherwise raise.

    Raises:
        FixtureMatchNotFound: match missing or owned by another tournament
        FixtureMatchNotDraft: match already published
    """
    match = get_match_or_404(session, match_id, tournament_id)
    if match.fixture_status != "draft":
        raise FixtureMatchNotDraft(
            f"Cannot modify match {match_id} with fixture status '{match.fixture_status}'. "
            "Only draft fixtures can be modified."
        )
    return match
