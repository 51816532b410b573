from typing import Optional

from sqlmodel import Field, SQLModel


class Venue(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    location: Optional[str] = None
    # Minutes since midnight (e.g. 540 = 09:00)
    opening_time: Optional[int] = Field(default=None)
    closing_time: Optional[int] = Field(default=None)
