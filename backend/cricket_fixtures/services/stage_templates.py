"""
Tournament structure templates.

- straight_league: one single round robin league stage
- straight_knockout: one single elimination stage
- grouped_league_with_playoffs: a grouped league stage (teams dealt into
  groups round-robin style) plus a knockout playoff stage linked through
  parent_stage_id and fed by StageAdvancement position rules

Seeds follow the order of the selected team ids.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlmodel import Session, select

from cricket_fixtures.models.fixture_version import (
    FixtureChangeLog,
    FixtureGenerationLock,
    FixtureRound,
    FixtureVersion,
)
from cricket_fixtures.models.match import Match, MatchParticipantSource
from cricket_fixtures.models.stage import (
    TournamentStage,
    TournamentStageAdvancement,
    TournamentStageGroup,
    TournamentStageTeamEntry,
)
from cricket_fixtures.models.swiss_round_standing import SwissRoundStanding
from cricket_fixtures.models.tournament import Tournament, TournamentTeam
from cricket_fixtures.services.fixture_errors import (
    InvalidTeamSelection,
    InvalidTemplateConfiguration,
    NoTournamentTeams,
)
from cricket_fixtures.utils.fixture_guards import require_tournament
from cricket_fixtures.utils.sql import scalar_int

logger = logging.getLogger(__name__)

TEMPLATES = ("straight_league", "straight_knockout", "grouped_league_with_playoffs")


@dataclass(frozen=True)
class AdvancementSlot:
    group_index: int
    position: int
    slot: int


def group_name(index: int) -> str:
    return f"Group {chr(ord('A') + index)}"


def build_group_advancement_slots(group_count: int, advancing_per_group: int) -> List[AdvancementSlot]:
    """
    Playoff slot for each (group, position).

    Two groups of two use the cross-over bracket A1, B2, B1, A2 so group
    winners meet the other group's runner-up. Everything else is
    position-major: all group winners first, then all runners-up, ...
    """
    if group_count == 2 and advancing_per_group == 2:
        return [
            AdvancementSlot(group_index=0, position=1, slot=1),
            AdvancementSlot(group_index=1, position=2, slot=2),
            AdvancementSlot(group_index=1, position=1, slot=3),
            AdvancementSlot(group_index=0, position=2, slot=4),
        ]

    slots = []
    for position in range(1, advancing_per_group + 1):
        for group_index in range(group_count):
            slots.append(AdvancementSlot(group_index=group_index, position=position, slot=len(slots) + 1))
    return slots


def reset_tournament_structure(session: Session, tournament_id: int) -> None:
    """
    Remove every stage of the tournament and what hangs off it. Does not commit.

    Matches survive, detached from their stage, group and round.
    """
    stage_ids = list(session.exec(select(TournamentStage.id).where(TournamentStage.tournament_id == tournament_id)).all())
    if not stage_ids:
        return
    group_ids = list(
        session.exec(select(TournamentStageGroup.id).where(TournamentStageGroup.stage_id.in_(stage_ids))).all()
    )
    round_ids = list(session.exec(select(FixtureRound.id).where(FixtureRound.stage_id.in_(stage_ids))).all())

    for match in session.exec(select(Match).where(Match.tournament_id == tournament_id)).all():
        match.stage_id = None
        match.stage_group_id = None
        match.stage_round = None
        match.stage_sequence = None
        match.fixture_round_id = None
        session.add(match)

    source_filter = MatchParticipantSource.source_stage_id.in_(stage_ids)
    if group_ids:
        source_filter = source_filter | MatchParticipantSource.source_stage_group_id.in_(group_ids)
    for source in session.exec(select(MatchParticipantSource).where(source_filter)).all():
        session.delete(source)

    for entry in session.exec(select(FixtureChangeLog).where(FixtureChangeLog.tournament_id == tournament_id)).all():
        if entry.stage_id in stage_ids or entry.fixture_round_id in round_ids:
            entry.stage_id = None
            entry.fixture_round_id = None
            session.add(entry)
    for version in session.exec(select(FixtureVersion).where(FixtureVersion.stage_id.in_(stage_ids))).all():
        version.stage_id = None
        session.add(version)

    for model, column in (
        (SwissRoundStanding, SwissRoundStanding.stage_id),
        (FixtureGenerationLock, FixtureGenerationLock.stage_id),
        (FixtureRound, FixtureRound.stage_id),
        (TournamentStageTeamEntry, TournamentStageTeamEntry.stage_id),
    ):
        for row in session.exec(select(model).where(column.in_(stage_ids))).all():
            session.delete(row)
    for rule in session.exec(
        select(TournamentStageAdvancement).where(
            TournamentStageAdvancement.from_stage_id.in_(stage_ids)
            | TournamentStageAdvancement.to_stage_id.in_(stage_ids)
        )
    ).all():
        session.delete(rule)
    session.flush()

    for group in session.exec(select(TournamentStageGroup).where(TournamentStageGroup.id.in_(group_ids))).all():
        session.delete(group)
    session.flush()

    # Playoff stages point at their parent; delete children first
    for stage in session.exec(
        select(TournamentStage).where(TournamentStage.id.in_(stage_ids)).order_by(TournamentStage.sequence.desc())
    ).all():
        session.delete(stage)
        session.flush()


def _add_stage(session: Session, tournament: Tournament, **fields) -> TournamentStage:
    stage = TournamentStage(
        tournament_id=tournament.id,
        status="upcoming",
        match_format_id=tournament.default_match_format_id,
        **fields,
    )
    session.add(stage)
    session.flush()
    return stage


def _add_entries(
    session: Session,
    tournament_id: int,
    stage: TournamentStage,
    team_ids: Sequence[int],
    groups: Optional[List[TournamentStageGroup]] = None,
) -> None:
    for index, team_id in enumerate(team_ids):
        session.add(
            TournamentStageTeamEntry(
                tournament_id=tournament_id,
                stage_id=stage.id,
                stage_group_id=groups[index % len(groups)].id if groups else None,
                team_id=team_id,
                seed=index + 1,
                entry_source="direct",
            )
        )


def seed_tournament_template(
    session: Session,
    tournament_id: int,
    template: str,
    team_ids: Optional[Sequence[int]] = None,
    group_count: int = 2,
    advancing_per_group: int = 2,
    reset_existing: bool = True,
) -> Dict:
    """
    Build the stage structure for a template from the tournament's teams.

    team_ids selects (and orders) a subset of the registered teams; empty or
    None means every registered team in registration order.
    """
    tournament = require_tournament(session, tournament_id)

    registered = list(
        session.exec(
            select(TournamentTeam.team_id)
            .where(TournamentTeam.tournament_id == tournament_id)
            .order_by(TournamentTeam.id)
        ).all()
    )
    if not registered:
        raise NoTournamentTeams(f"Tournament {tournament_id} has no registered teams")

    selected = list(team_ids) if team_ids else registered
    if len(set(selected)) != len(selected) or any(t not in registered for t in selected):
        raise InvalidTeamSelection("Selected teams must be distinct and registered to the tournament")

    if template not in TEMPLATES:
        raise InvalidTemplateConfiguration(f"Unknown template '{template}'")
    if template == "grouped_league_with_playoffs":
        if group_count < 2 or group_count > 26 or advancing_per_group < 1:
            raise InvalidTemplateConfiguration("Grouped templates need 2-26 groups and at least 1 advancing team")
        if group_count * advancing_per_group > len(selected):
            raise InvalidTemplateConfiguration(
                f"{group_count * advancing_per_group} advancing places exceed {len(selected)} teams"
            )
    if len(selected) < 2:
        raise InvalidTemplateConfiguration("Templates need at least 2 teams")

    stage_count = 0
    created_group_count = 0
    advancement_rule_count = 0

    try:
        if reset_existing:
            reset_tournament_structure(session, tournament_id)
        # Appended stages continue after the existing ones
        base = scalar_int(
            session.exec(
                select(func.max(TournamentStage.sequence)).where(TournamentStage.tournament_id == tournament_id)
            ).one()
        )

        if template == "straight_league":
            stage = _add_stage(
                session, tournament, sequence=base + 1, name="League Stage", code="LEAGUE",
                stage_type="league", format="single_round_robin",
            )
            _add_entries(session, tournament_id, stage, selected)
            stage_count = 1

        elif template == "straight_knockout":
            stage = _add_stage(
                session, tournament, sequence=base + 1, name="Knockout Stage", code="KNOCKOUT",
                stage_type="knockout", format="single_elimination",
            )
            _add_entries(session, tournament_id, stage, selected)
            stage_count = 1

        else:
            group_stage = _add_stage(
                session, tournament, sequence=base + 1, name="Group Stage", code="GROUP_STAGE",
                stage_type="league", format="single_round_robin",
                qualification_slots=group_count * advancing_per_group,
            )
            groups = []
            for index in range(group_count):
                group = TournamentStageGroup(
                    stage_id=group_stage.id,
                    name=group_name(index),
                    code=f"G{index + 1}",
                    sequence=index + 1,
                    advancing_slots=advancing_per_group,
                )
                session.add(group)
                groups.append(group)
            session.flush()
            _add_entries(session, tournament_id, group_stage, selected, groups)

            playoff_stage = _add_stage(
                session, tournament, sequence=base + 2, name="Playoffs", code="PLAYOFFS",
                stage_type="knockout", format="single_elimination", parent_stage_id=group_stage.id,
            )
            slots = build_group_advancement_slots(group_count, advancing_per_group)
            for rule in slots:
                session.add(
                    TournamentStageAdvancement(
                        from_stage_id=group_stage.id,
                        from_stage_group_id=groups[rule.group_index].id,
                        position_from=rule.position,
                        to_stage_id=playoff_stage.id,
                        to_slot=rule.slot,
                        qualification_type="position",
                    )
                )
            stage_count = 2
            created_group_count = group_count
            advancement_rule_count = len(slots)

        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Seeding template %s for tournament %s failed; rolled back", template, tournament_id)
        raise

    logger.info(
        "Seeded %s for tournament %s: %d stages, %d groups, %d teams",
        template,
        tournament_id,
        stage_count,
        created_group_count,
        len(selected),
    )
    return {
        "tournament_id": tournament_id,
        "template": template,
        "team_count": len(selected),
        "stage_count": stage_count,
        "group_count": created_group_count,
        "advancement_rule_count": advancement_rule_count,
    }
