from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, SQLModel


class FixtureVersion(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "version_number", name="uq_fixture_version_number"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    stage_id: Optional[int] = Field(default=None, foreign_key="tournamentstage.id")  # null for tournament-wide publishes
    version_number: int
    status: str = Field(default="draft")  # "draft" | "published" | "archived"
    label: Optional[str] = None
    published_at: Optional[datetime] = Field(default=None)
    archived_at: Optional[datetime] = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class FixtureVersionMatch(SQLModel, table=True):
    """Append-only snapshot of a match at generation/publish time."""

    id: Optional[int] = Field(default=None, primary_key=True)
    fixture_version_id: int = Field(foreign_key="fixtureversion.id", index=True)
    match_id: int = Field(foreign_key="match.id", index=True)
    sequence: int
    snapshot: str = Field(default="{}")


class FixtureRound(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    stage_id: int = Field(foreign_key="tournamentstage.id")
    fixture_version_id: Optional[int] = Field(default=None, foreign_key="fixtureversion.id")
    round_number: int
    round_name: str
    pairing_method: str = Field(default="auto")  # "auto" | "manual" | "swiss"


class FixtureChangeLog(SQLModel, table=True):
    """Append-only audit event for fixture mutations."""

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    stage_id: Optional[int] = Field(default=None, foreign_key="tournamentstage.id")
    match_id: Optional[int] = Field(default=None, foreign_key="match.id")
    fixture_round_id: Optional[int] = Field(default=None, foreign_key="fixtureround.id")
    fixture_version_id: Optional[int] = Field(default=None, foreign_key="fixtureversion.id")
    action: str
    payload: Optional[str] = None
    reason: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class FixtureGenerationLock(SQLModel, table=True):
    """Held for the duration of one auto-generation transaction per stage."""

    __table_args__ = (SAUniqueConstraint("tournament_id", "stage_id", name="uq_fixture_generation_lock"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id")
    stage_id: int = Field(foreign_key="tournamentstage.id")
    acquired_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
