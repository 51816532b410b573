"""
Row builders shared by the database-backed tests.

Every helper flushes (so ids are assigned) but never commits; tests commit
when the code under test needs to read through another session.
"""

from datetime import date, datetime
from typing import List, Optional, Sequence

from sqlmodel import Session

from cricket_fixtures.models import (
    Innings,
    Match,
    Team,
    Tournament,
    TournamentStage,
    TournamentStageGroup,
    TournamentStageTeamEntry,
    TournamentTeam,
    TournamentVenue,
    Venue,
)


def make_tournament(session: Session, name: str = "Test Cup") -> Tournament:
    t = Tournament(
        name=name,
        start_date=date(2026, 6, 1),
        end_date=date(2026, 6, 30),
        time_zone="Asia/Kolkata",
    )
    session.add(t)
    session.flush()
    return t


def make_teams(session: Session, tournament: Tournament, n: int) -> List[Team]:
    """Create n teams registered to the tournament, in registration order."""
    teams = []
    for i in range(1, n + 1):
        team = Team(name=f"Team {i}", short_name=f"T{i}")
        session.add(team)
        session.flush()
        session.add(TournamentTeam(tournament_id=tournament.id, team_id=team.id))
        teams.append(team)
    session.flush()
    return teams


def make_venue(
    session: Session,
    tournament: Optional[Tournament] = None,
    name: str = "Main Ground",
    opening_time: Optional[int] = 600,
) -> Venue:
    venue = Venue(name=name, opening_time=opening_time, closing_time=22 * 60)
    session.add(venue)
    session.flush()
    if tournament is not None:
        session.add(TournamentVenue(tournament_id=tournament.id, venue_id=venue.id))
        session.flush()
    return venue


def make_stage(
    session: Session,
    tournament: Tournament,
    teams: Sequence[Team] = (),
    sequence: int = 1,
    stage_type: str = "league",
    format: str = "single_round_robin",
    group: bool = False,
) -> TournamentStage:
    """Stage with the given teams entered in seed order (optionally all in one group)."""
    stage = TournamentStage(
        tournament_id=tournament.id,
        sequence=sequence,
        name=f"Stage {sequence}",
        code=f"S{sequence}",
        stage_type=stage_type,
        format=format,
    )
    session.add(stage)
    session.flush()

    group_id = None
    if group:
        stage_group = TournamentStageGroup(stage_id=stage.id, name="Group A", code="G1", sequence=1)
        session.add(stage_group)
        session.flush()
        group_id = stage_group.id

    for seed, team in enumerate(teams, start=1):
        session.add(
            TournamentStageTeamEntry(
                tournament_id=tournament.id,
                stage_id=stage.id,
                stage_group_id=group_id,
                team_id=team.id,
                seed=seed,
            )
        )
    session.flush()
    return stage


def make_match(
    session: Session,
    tournament: Tournament,
    stage: Optional[TournamentStage],
    team1: Optional[Team],
    team2: Optional[Team],
    fixture_status: str = "draft",
    winner: Optional[Team] = None,
    is_tied: bool = False,
    is_abandoned: bool = False,
    result: Optional[str] = None,
    match_date: datetime = datetime(2026, 6, 1, 10, 0),
) -> Match:
    match = Match(
        tournament_id=tournament.id,
        stage_id=stage.id if stage else None,
        team1_id=team1.id if team1 else None,
        team2_id=team2.id if team2 else None,
        match_date=match_date,
        scheduled_start_at=match_date,
        fixture_status=fixture_status,
        winner_id=winner.id if winner else None,
        is_tied=is_tied,
        is_abandoned=is_abandoned,
        is_completed=bool(winner or is_tied or result),
        result=result,
    )
    session.add(match)
    session.flush()
    return match


def add_innings(session: Session, match: Match, batting: Team, bowling: Team, runs: int, balls: int) -> Innings:
    innings = Innings(
        match_id=match.id,
        batting_team_id=batting.id,
        bowling_team_id=bowling.id,
        total_score=runs,
        balls_bowled=balls,
        is_completed=True,
    )
    session.add(innings)
    session.flush()
    return innings
