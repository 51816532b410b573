from datetime import datetime
from typing import List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel


class TournamentStage(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("tournament_id", "sequence", name="uq_tournament_stage_sequence"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    sequence: int
    name: str
    code: str
    stage_type: str = Field(default="league")  # "league" | "knockout" | "swiss" | "playoff"
    format: str = Field(default="single_round_robin")  # free text, see services.stage_format
    status: str = Field(default="upcoming")
    qualification_slots: int = Field(default=0)
    match_format_id: Optional[int] = Field(default=None, foreign_key="matchformat.id")
    parent_stage_id: Optional[int] = Field(default=None, foreign_key="tournamentstage.id")

    # Serialized stage metadata; points config lives under "points_config"
    metadata_json: Optional[str] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    groups: List["TournamentStageGroup"] = Relationship(back_populates="stage")
    team_entries: List["TournamentStageTeamEntry"] = Relationship(back_populates="stage")


class TournamentStageGroup(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    stage_id: int = Field(foreign_key="tournamentstage.id", index=True)
    name: str  # "Group A"
    code: str  # "G1"
    sequence: int
    advancing_slots: int = Field(default=0)

    stage: TournamentStage = Relationship(back_populates="groups")


class TournamentStageTeamEntry(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("stage_id", "team_id", name="uq_stage_team_entry"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    stage_id: int = Field(foreign_key="tournamentstage.id", index=True)
    stage_group_id: Optional[int] = Field(default=None, foreign_key="tournamentstagegroup.id")
    team_id: int = Field(foreign_key="team.id")
    seed: Optional[int] = Field(default=None)  # 1-based, 1 = top seed
    entry_source: str = Field(default="direct")  # "direct" | "qualified"
    is_qualified: bool = Field(default=False)
    is_eliminated: bool = Field(default=False)

    stage: TournamentStage = Relationship(back_populates="team_entries")


class TournamentStageAdvancement(SQLModel, table=True):
    """Declarative promotion rule: group/stage position -> slot in a later stage."""

    id: Optional[int] = Field(default=None, primary_key=True)
    from_stage_id: int = Field(foreign_key="tournamentstage.id", index=True)
    from_stage_group_id: Optional[int] = Field(default=None, foreign_key="tournamentstagegroup.id")
    position_from: int
    to_stage_id: int = Field(foreign_key="tournamentstage.id", index=True)
    to_slot: int
    qualification_type: str = Field(default="position")  # "position" | "knockout_winner"
