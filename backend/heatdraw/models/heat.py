from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import JSON, UniqueConstraint as SAUniqueConstraint
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from heatdraw.models.event import Event
    from heatdraw.models.heat_entry import HeatEntry
    from heatdraw.models.heat_slot_mapping import HeatSlotMapping


class Heat(SQLModel, table=True):
    __table_args__ = (
        SAUniqueConstraint("event_id", "division", "round", "heat_number", name="uq_heat_division_round_number"),
    )

    # Deterministic slug: {event}_{division}_R{round}_H{heat}
    id: str = Field(primary_key=True)
    event_id: int = Field(foreign_key="event.id", index=True)
    competition: str
    division: str = Field(index=True)
    round: int
    heat_number: int
    heat_size: int  # Number of slots in this heat
    status: str = Field(default="waiting")  # "waiting" until the runtime picks it up
    color_order: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Relationships
    event: "Event" = Relationship(back_populates="heats")
    entries: List["HeatEntry"] = Relationship(back_populates="heat")
    slot_mappings: List["HeatSlotMapping"] = Relationship(back_populates="heat")
