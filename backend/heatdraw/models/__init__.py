from heatdraw.models.event import Event
from heatdraw.models.heat import Heat
from heatdraw.models.heat_entry import HeatEntry
from heatdraw.models.heat_slot_mapping import HeatSlotMapping

__all__ = [
    "Event",
    "Heat",
    "HeatEntry",
    "HeatSlotMapping",
]
