from typing import TYPE_CHECKING, Optional

from sqlalchemy import UniqueConstraint as SAUniqueConstraint
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from heatdraw.models.heat import Heat


class HeatEntry(SQLModel, table=True):
    __table_args__ = (SAUniqueConstraint("heat_id", "position", name="uq_heat_entry_position"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    heat_id: str = Field(foreign_key="heat.id", index=True)
    position: int  # 1-based lane
    # Null while the slot still waits on an upstream result
    competitor_id: Optional[int] = Field(default=None)
    seed: Optional[int] = Field(default=None)
    color: Optional[str] = Field(default=None)  # Null past the sixth lane

    heat: "Heat" = Relationship(back_populates="entries")
