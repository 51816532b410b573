from datetime import datetime
from typing import List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel


class Match(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    stage_id: Optional[int] = Field(default=None, foreign_key="tournamentstage.id", index=True)
    stage_group_id: Optional[int] = Field(default=None, foreign_key="tournamentstagegroup.id")
    fixture_round_id: Optional[int] = Field(default=None, foreign_key="fixtureround.id")
    stage_round: Optional[int] = Field(default=None)
    stage_sequence: Optional[int] = Field(default=None)  # 1-based order within stage_round

    # Team slots: both set (concrete) or both null (deferred, see MatchParticipantSource)
    team1_id: Optional[int] = Field(default=None, foreign_key="team.id")
    team2_id: Optional[int] = Field(default=None, foreign_key="team.id")
    toss_winner_id: Optional[int] = Field(default=None, foreign_key="team.id")
    toss_decision: Optional[str] = Field(default=None)  # "bat" | "bowl"

    # Schedule
    match_date: datetime
    scheduled_start_at: Optional[datetime] = Field(default=None)
    scheduled_end_at: Optional[datetime] = Field(default=None)
    time_zone: str = Field(default="UTC")
    venue_id: Optional[int] = Field(default=None, foreign_key="venue.id")
    notes: Optional[str] = None

    # Format snapshot taken when the fixture is created
    match_format_id: Optional[int] = Field(default=None, foreign_key="matchformat.id")
    format: str = Field(default="Custom")
    overs_per_side: int = Field(default=20)
    balls_per_over_snapshot: int = Field(default=6)
    max_overs_per_bowler_snapshot: int = Field(default=4)
    players_per_side: int = Field(default=11)

    # Fixture lifecycle: "draft" -> "published" (no revert)
    fixture_status: str = Field(default="draft", index=True)
    fixture_version: Optional[int] = Field(default=None)
    published_at: Optional[datetime] = Field(default=None)

    # Outcome (owned by the scoring subsystem; read-only here)
    is_live: bool = Field(default=False)
    is_completed: bool = Field(default=False)
    is_abandoned: bool = Field(default=False)
    is_tied: bool = Field(default=False)
    winner_id: Optional[int] = Field(default=None, foreign_key="team.id")
    result: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)

    participant_sources: List["MatchParticipantSource"] = Relationship(
        back_populates="match",
        sa_relationship_kwargs={"foreign_keys": "MatchParticipantSource.match_id"},
    )


class MatchParticipantSource(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("match_id", "team_slot", name="uq_participant_source_slot"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: int = Field(foreign_key="match.id", index=True)
    team_slot: int  # 1 | 2
    source_type: str  # "match" | "position" | "team"
    source_match_id: Optional[int] = Field(default=None, foreign_key="match.id")
    source_stage_id: Optional[int] = Field(default=None, foreign_key="tournamentstage.id")
    source_stage_group_id: Optional[int] = Field(default=None, foreign_key="tournamentstagegroup.id")
    source_position: Optional[int] = Field(default=None)
    source_team_id: Optional[int] = Field(default=None, foreign_key="team.id")

    match: Match = Relationship(
        back_populates="participant_sources",
        sa_relationship_kwargs={"foreign_keys": "MatchParticipantSource.match_id"},
    )


class Innings(SQLModel, table=True):
    """Per-innings totals written by the scoring subsystem."""

    id: Optional[int] = Field(default=None, primary_key=True)
    match_id: int = Field(foreign_key="match.id", index=True)
    batting_team_id: int = Field(foreign_key="team.id")
    bowling_team_id: int = Field(foreign_key="team.id")
    total_score: int = Field(default=0)
    wickets: int = Field(default=0)
    balls_bowled: int = Field(default=0)
    extras: int = Field(default=0)
    is_completed: bool = Field(default=False)
