"""
Heat Store: persistence for generated heat draws.

Writes the heat, entry and slot-mapping rows of a GeneratedDraw in one
transaction, keyed by the deterministic heat id. Re-generating a division
replaces its heats only when asked to (overwrite=True).
"""
import logging
from typing import Dict, List, Optional

from sqlmodel import Session, select

from heatdraw.models.heat import Heat
from heatdraw.models.heat_entry import HeatEntry
from heatdraw.models.heat_slot_mapping import HeatSlotMapping
from heatdraw.services.bracket_generator import GeneratedDraw

logger = logging.getLogger(__name__)


class HeatStoreConflictError(Exception):
    """Raised when stored heats would be overwritten without overwrite=True"""

    pass


def _division_heat_ids(session: Session, event_id: int, division: str) -> List[str]:
    return list(
        session.exec(
            select(Heat.id).where(Heat.event_id == event_id, Heat.division == division)
        ).all()
    )


def delete_planned_heats(session: Session, event_id: int, division: str, commit: bool = True) -> List[str]:
    """
    Delete all heats of one event division with their entries and slot mappings.

    Returns the deleted heat ids (empty if there was nothing to delete).
    """
    heat_ids = _division_heat_ids(session, event_id, division)
    if not heat_ids:
        return []

    for model in (HeatEntry, HeatSlotMapping):
        for row in session.exec(select(model).where(model.heat_id.in_(heat_ids))).all():
            session.delete(row)
    session.flush()

    for heat in session.exec(select(Heat).where(Heat.id.in_(heat_ids))).all():
        session.delete(heat)
    session.flush()

    if commit:
        session.commit()

    logger.info(f"Deleted {len(heat_ids)} planned heats for event {event_id} division '{division}'")
    return heat_ids


def save_generated_draw(session: Session, draw: GeneratedDraw, overwrite: bool = False) -> int:
    """
    Persist a generated draw.

    Raises:
        HeatStoreConflictError: the division already has heats and overwrite
            is False, or a heat id is already taken by another event or division

    Returns:
        Number of heats written
    """
    existing = _division_heat_ids(session, draw.event_id, draw.division)
    if existing and not overwrite:
        raise HeatStoreConflictError(
            f"{len(existing)} heats already exist for event {draw.event_id} division "
            f"'{draw.division}'; pass overwrite to replace them"
        )
    if existing:
        delete_planned_heats(session, draw.event_id, draw.division, commit=False)

    new_ids = [h.id for h in draw.heats]
    taken = session.exec(select(Heat.id).where(Heat.id.in_(new_ids))).all()
    if taken:
        session.rollback()
        raise HeatStoreConflictError(f"Heat ids already used by another event or division: {sorted(taken)}")

    for row in draw.heats:
        session.add(Heat(**row.as_dict()))
    # Heats before their dependents
    session.flush()

    for entry in draw.entries:
        session.add(HeatEntry(**entry.as_dict()))
    for mapping in draw.slot_mappings:
        session.add(HeatSlotMapping(**mapping.as_dict()))
    session.commit()

    logger.info(
        f"Stored {len(draw.heats)} heats, {len(draw.entries)} entries for event {draw.event_id} "
        f"division '{draw.division}' (overwrite={overwrite})"
    )
    return len(draw.heats)


def load_event_heats(session: Session, event_id: int, division: Optional[str] = None) -> List[Dict]:
    """Stored heats of an event, ordered by division, round and heat number."""
    query = select(Heat).where(Heat.event_id == event_id)
    if division is not None:
        query = query.where(Heat.division == division)
    heats = session.exec(query.order_by(Heat.division, Heat.round, Heat.heat_number)).all()

    result: List[Dict] = []
    for heat in heats:
        result.append({
            "id": heat.id,
            "event_id": heat.event_id,
            "competition": heat.competition,
            "division": heat.division,
            "round": heat.round,
            "heat_number": heat.heat_number,
            "heat_size": heat.heat_size,
            "status": heat.status,
            "color_order": list(heat.color_order or []),
            "entries": [
                {
                    "position": e.position,
                    "competitor_id": e.competitor_id,
                    "seed": e.seed,
                    "color": e.color,
                }
                for e in sorted(heat.entries, key=lambda e: e.position)
            ],
            "slot_mappings": [
                {
                    "position": m.position,
                    "placeholder": m.placeholder,
                    "source_round": m.source_round,
                    "source_heat": m.source_heat,
                    "source_position": m.source_position,
                }
                for m in sorted(heat.slot_mappings, key=lambda m: m.position)
            ],
        })
    return result
