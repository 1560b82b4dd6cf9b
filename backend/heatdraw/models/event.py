from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from heatdraw.models.heat import Heat


class Event(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("name", name="uq_event_name"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str  # Competition name; first part of every heat id
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Relationships
    heats: List["Heat"] = Relationship(back_populates="event")
