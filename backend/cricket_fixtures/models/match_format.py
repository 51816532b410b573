from typing import Optional

from sqlmodel import Field, SQLModel


class MatchFormat(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str  # "T20", "ODI", ...
    no_of_overs: int = Field(default=20)
    balls_per_over: int = Field(default=6)
    max_overs_per_bowler: int = Field(default=4)
    players_per_side: int = Field(default=11)
