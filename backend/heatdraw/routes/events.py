from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session, select

from heatdraw.database import get_session
from heatdraw.models.event import Event

router = APIRouter()


class EventCreate(BaseModel):
    name: str
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip()


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    notes: Optional[str] = None
    created_at: datetime


@router.get("/events", response_model=List[EventResponse])
def list_events(session: Session = Depends(get_session)):
    """Get all events"""
    return session.exec(select(Event).order_by(Event.id)).all()


@router.post("/events", response_model=EventResponse, status_code=201)
def create_event(event_data: EventCreate, session: Session = Depends(get_session)):
    """Create a new event"""
    existing = session.exec(select(Event).where(Event.name == event_data.name)).first()
    if existing:
        raise HTTPException(status_code=409, detail=f"Event with name '{event_data.name}' already exists")

    event = Event(**event_data.model_dump())
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@router.get("/events/{event_id}", response_model=EventResponse)
def get_event(event_id: int, session: Session = Depends(get_session)):
    """Get a single event"""
    event = session.get(Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event
