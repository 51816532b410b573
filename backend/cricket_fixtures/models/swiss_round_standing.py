from typing import List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, SQLModel


class SwissRoundStanding(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id", index=True)
    stage_id: int = Field(foreign_key="tournamentstage.id", index=True)
    fixture_round_id: Optional[int] = Field(default=None, foreign_key="fixtureround.id")
    team_id: int = Field(foreign_key="team.id")
    points: float = Field(default=0)
    tie_break1: float = Field(default=0)  # net run rate
    tie_break2: float = Field(default=0)  # wins
    tie_break3: float = Field(default=0)  # runs scored
    opponent_team_ids: Optional[List[int]] = Field(default=None, sa_column=Column(JSON))
