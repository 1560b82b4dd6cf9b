from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlmodel import Session

from heatdraw.database import get_session
from heatdraw.models.event import Event
from heatdraw.services.bracket_generator import (
    Competitor,
    ConfigurationError,
    GeneratedDraw,
    GenerationConfig,
    RepechageConfig,
    SeedContinuityError,
    generate,
)
from heatdraw.services.heat_store import (
    HeatStoreConflictError,
    delete_planned_heats,
    load_event_heats,
    save_generated_draw,
)

router = APIRouter()


class CompetitorIn(BaseModel):
    seed: int
    name: str
    competitor_id: Optional[int] = None


class RepechageIn(BaseModel):
    enabled: bool = False
    adv_main_per_heat: int = 2
    to_rep_per_heat: int = 2
    adv_rep_per_heat: int = 2


class HeatDrawRequest(BaseModel):
    division: str
    heat_size: int
    competitors: List[CompetitorIn]
    repechage: Optional[RepechageIn] = None


class HeatDrawGenerateRequest(HeatDrawRequest):
    overwrite: bool = False


def _get_event(session: Session, event_id: int) -> Event:
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


def _build_draw(event: Event, request: HeatDrawRequest) -> GeneratedDraw:
    """Run the generator; input errors become 422 with the generator's message."""
    config = GenerationConfig(
        event_name=event.name,
        division=request.division,
        heat_size=request.heat_size,
        event_id=event.id,
        repechage=RepechageConfig(**request.repechage.model_dump()) if request.repechage else None,
    )
    competitors = [Competitor(**c.model_dump()) for c in request.competitors]
    try:
        return generate(competitors, config)
    except (ConfigurationError, SeedContinuityError) as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.post("/events/{event_id}/heats/preview")
def preview_heats(event_id: int, request: HeatDrawRequest, session: Session = Depends(get_session)):
    """Generate the heat draw without storing it"""
    event = _get_event(session, event_id)
    return _build_draw(event, request).as_dict()


@router.post("/events/{event_id}/heats/generate", status_code=201)
def generate_heats(event_id: int, request: HeatDrawGenerateRequest, session: Session = Depends(get_session)):
    """
    Generate and store the heat draw for one division.

    Existing heats of the division are only replaced when overwrite is true;
    otherwise the request fails with 409.
    """
    event = _get_event(session, event_id)
    draw = _build_draw(event, request)

    try:
        written = save_generated_draw(session, draw, overwrite=request.overwrite)
    except HeatStoreConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return {**draw.as_dict(), "heats_written": written}


@router.get("/events/{event_id}/heats")
def list_heats(
    event_id: int,
    division: Optional[str] = Query(default=None),
    session: Session = Depends(get_session),
):
    """Stored heats for an event, optionally for one division"""
    _get_event(session, event_id)
    return load_event_heats(session, event_id, division)


@router.delete("/events/{event_id}/heats")
def delete_heats(
    event_id: int,
    division: str = Query(...),
    session: Session = Depends(get_session),
):
    """Delete the planned heats of one division"""
    _get_event(session, event_id)
    deleted = delete_planned_heats(session, event_id, division)
    return {"deleted": deleted, "count": len(deleted)}
