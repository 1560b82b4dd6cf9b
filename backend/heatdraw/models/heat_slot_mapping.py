from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from heatdraw.models.heat import Heat


class HeatSlotMapping(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("heat_id", "position", name="uq_heat_slot_mapping_position"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    heat_id: str = Field(foreign_key="heat.id", index=True)
    position: int

    # Upstream result that fills this slot: "Qualifié R1-H2 P1" -> (1, 2, 1)
    placeholder: Optional[str] = Field(default=None)
    source_round: Optional[int] = Field(default=None)
    source_heat: Optional[int] = Field(default=None)
    source_position: Optional[int] = Field(default=None)

    heat: "Heat" = Relationship(back_populates="slot_mappings")
