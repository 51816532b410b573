"""
Swiss round standings: the stored ranking the next Swiss round pairs from.

Rows are rebuilt from the Standings Engine on every refresh:
points, tie_break1 = net run rate, tie_break2 = wins, tie_break3 = runs
scored, plus every opponent a team has been drawn against in the stage.
"""

import logging
from typing import Dict, Set

from sqlmodel import Session, select

from cricket_fixtures.models.fixture_version import FixtureRound
from cricket_fixtures.models.match import Match
from cricket_fixtures.models.swiss_round_standing import SwissRoundStanding
from cricket_fixtures.services.fixture_errors import SwissRoundNotReady
from cricket_fixtures.services.stage_format import StageFormat, normalize_stage_format
from cricket_fixtures.services.standings_engine import get_tournament_standings
from cricket_fixtures.utils.fixture_guards import require_stage, require_tournament

logger = logging.getLogger(__name__)


def stage_opponent_history(session: Session, stage_id: int) -> Dict[int, Set[int]]:
    """team_id -> opponents, from every concrete match in the stage (draft or published)."""
    history: Dict[int, Set[int]] = {}
    matches = session.exec(
        select(Match)
        .where(Match.stage_id == stage_id)
        .where(Match.team1_id.is_not(None))
        .where(Match.team2_id.is_not(None))
    ).all()
    for match in matches:
        history.setdefault(match.team1_id, set()).add(match.team2_id)
        history.setdefault(match.team2_id, set()).add(match.team1_id)
    return history


def refresh_swiss_round_standings(
    session: Session,
    tournament_id: int,
    stage_id: int,
    include_draft: bool = False,
) -> Dict:
    require_tournament(session, tournament_id)
    stage = require_stage(session, stage_id, tournament_id)
    if normalize_stage_format(stage.format, stage.stage_type) != StageFormat.SWISS:
        raise SwissRoundNotReady(f"Stage {stage_id} is not a swiss stage")

    standings = get_tournament_standings(session, tournament_id, stage_id=stage.id, include_draft=include_draft)
    history = stage_opponent_history(session, stage.id)
    latest_round = session.exec(
        select(FixtureRound)
        .where(FixtureRound.stage_id == stage.id)
        .order_by(FixtureRound.round_number.desc(), FixtureRound.id.desc())
    ).first()

    try:
        for row in session.exec(
            select(SwissRoundStanding)
            .where(SwissRoundStanding.tournament_id == tournament_id)
            .where(SwissRoundStanding.stage_id == stage.id)
        ).all():
            session.delete(row)
        session.flush()

        for row in standings["rows"]:
            session.add(
                SwissRoundStanding(
                    tournament_id=tournament_id,
                    stage_id=stage.id,
                    fixture_round_id=latest_round.id if latest_round else None,
                    team_id=row["team_id"],
                    points=row["points"],
                    tie_break1=row["net_run_rate"],
                    tie_break2=row["won"],
                    tie_break3=row["runs_scored"],
                    opponent_team_ids=sorted(history.get(row["team_id"], set())),
                )
            )
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Refreshing swiss standings for stage %s failed; rolled back", stage.id)
        raise

    logger.info("Refreshed %d swiss standings rows for stage %s", len(standings["rows"]), stage.id)
    return {
        "row_count": len(standings["rows"]),
        "fixture_round_id": latest_round.id if latest_round else None,
    }
