"""
Fixture version bookkeeping shared by generation, drafts and publish.

- Version numbers: max(version_number) + 1 per tournament, never reused
- Match snapshots for the FixtureVersionMatch audit trail
- Change-log entries
- Match format snapshot copied onto every new fixture
"""

import json
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import func
from sqlmodel import Session, select

from cricket_fixtures.models.fixture_version import FixtureChangeLog, FixtureVersion, FixtureVersionMatch
from cricket_fixtures.models.match import Match
from cricket_fixtures.models.match_format import MatchFormat
from cricket_fixtures.models.stage import TournamentStage
from cricket_fixtures.models.tournament import Tournament
from cricket_fixtures.utils.sql import scalar_int


def next_fixture_version_number(session: Session, tournament_id: int) -> int:
    """Next version number for the tournament (1 when none exist yet)."""
    current = session.exec(
        select(func.max(FixtureVersion.version_number)).where(FixtureVersion.tournament_id == tournament_id)
    ).one()
    return scalar_int(current) + 1


def match_snapshot(match: Match) -> str:
    return json.dumps(match.model_dump(mode="json"), sort_keys=True)


def snapshot_matches(session: Session, fixture_version_id: int, matches: Iterable[Match]) -> int:
    """Append one FixtureVersionMatch per match, sequence 1..n in the given order."""
    count = 0
    for sequence, match in enumerate(matches, start=1):
        session.add(
            FixtureVersionMatch(
                fixture_version_id=fixture_version_id,
                match_id=match.id,
                sequence=sequence,
                snapshot=match_snapshot(match),
            )
        )
        count += 1
    return count


def add_change_log(
    session: Session,
    tournament_id: int,
    action: str,
    payload: Optional[Dict[str, Any]] = None,
    stage_id: Optional[int] = None,
    match_id: Optional[int] = None,
    fixture_round_id: Optional[int] = None,
    fixture_version_id: Optional[int] = None,
    reason: Optional[str] = None,
) -> FixtureChangeLog:
    entry = FixtureChangeLog(
        tournament_id=tournament_id,
        stage_id=stage_id,
        match_id=match_id,
        fixture_round_id=fixture_round_id,
        fixture_version_id=fixture_version_id,
        action=action,
        payload=json.dumps(payload, default=str) if payload is not None else None,
        reason=reason,
    )
    session.add(entry)
    return entry


def format_snapshot(session: Session, stage: TournamentStage, tournament: Tournament) -> Dict[str, Any]:
    """
    Match format fields to copy onto a new fixture.

    Uses the stage's format, then the tournament default, then the
    20-over / 6-ball / 4-over / 11-player "Custom" defaults.
    """
    format_id = stage.match_format_id or tournament.default_match_format_id
    match_format = session.get(MatchFormat, format_id) if format_id else None
    if not match_format:
        return {
            "match_format_id": None,
            "format": "Custom",
            "overs_per_side": 20,
            "balls_per_over_snapshot": 6,
            "max_overs_per_bowler_snapshot": 4,
            "players_per_side": 11,
        }
    return {
        "match_format_id": match_format.id,
        "format": match_format.name,
        "overs_per_side": match_format.no_of_overs,
        "balls_per_over_snapshot": match_format.balls_per_over,
        "max_overs_per_bowler_snapshot": match_format.max_overs_per_bowler,
        "players_per_side": match_format.players_per_side,
    }
