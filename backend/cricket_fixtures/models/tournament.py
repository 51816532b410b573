from datetime import date, datetime
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    start_date: date
    end_date: date
    time_zone: str = Field(default="UTC")
    default_match_format_id: Optional[int] = Field(default=None, foreign_key="matchformat.id")

    # Publish pointers (updated on every incremental publish)
    active_fixture_version: Optional[int] = Field(default=None)
    fixture_published_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)


class TournamentTeam(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "team_id", name="uq_tournament_team"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    team_id: int = Field(foreign_key="team.id")


class TournamentVenue(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "venue_id", name="uq_tournament_venue"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    venue_id: int = Field(foreign_key="venue.id")
