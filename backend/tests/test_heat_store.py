"""
Tests for heat draw persistence (overwrite / conflict semantics).
"""

import pytest
from sqlmodel import Session, select

from heatdraw.models.event import Event
from heatdraw.models.heat import Heat
from heatdraw.models.heat_entry import HeatEntry
from heatdraw.models.heat_slot_mapping import HeatSlotMapping
from heatdraw.services.bracket_generator import Competitor, GenerationConfig, generate
from heatdraw.services.heat_store import (
    HeatStoreConflictError,
    delete_planned_heats,
    load_event_heats,
    save_generated_draw,
)


@pytest.fixture
def event(session: Session) -> Event:
    event = Event(name="Summer Classic")
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


def make_draw(event: Event, count: int, heat_size: int, division: str = "Open"):
    competitors = [Competitor(seed=s, name=f"Surfer {s}") for s in range(1, count + 1)]
    config = GenerationConfig(event_name=event.name, division=division, heat_size=heat_size, event_id=event.id)
    return generate(competitors, config)


def count_rows(session: Session, model) -> int:
    return len(session.exec(select(model)).all())


def test_save_writes_all_rows(session: Session, event: Event):
    draw = make_draw(event, 8, 4)

    written = save_generated_draw(session, draw)

    assert written == 3
    assert count_rows(session, Heat) == 3
    assert count_rows(session, HeatEntry) == 12
    assert count_rows(session, HeatSlotMapping) == 12

    final = session.get(Heat, "summer_classic_open_R2_H1")
    assert final.heat_size == 4
    assert final.status == "waiting"
    assert final.color_order == ["RED", "WHITE", "YELLOW", "BLUE"]


def test_save_without_overwrite_conflicts(session: Session, event: Event):
    save_generated_draw(session, make_draw(event, 8, 4))

    with pytest.raises(HeatStoreConflictError, match="already exist"):
        save_generated_draw(session, make_draw(event, 5, 4))

    assert count_rows(session, Heat) == 3


def test_overwrite_replaces_division(session: Session, event: Event):
    save_generated_draw(session, make_draw(event, 8, 4))

    written = save_generated_draw(session, make_draw(event, 5, 4), overwrite=True)

    assert written == 3
    heats = load_event_heats(session, event.id, "Open")
    assert [(h["round"], h["heat_size"]) for h in heats] == [(1, 4), (1, 1), (2, 3)]
    assert count_rows(session, HeatEntry) == 8


def test_divisions_are_independent(session: Session, event: Event):
    save_generated_draw(session, make_draw(event, 8, 4, division="Open"))
    save_generated_draw(session, make_draw(event, 4, 2, division="Juniors"))

    assert len(load_event_heats(session, event.id)) == 6
    assert len(load_event_heats(session, event.id, "Juniors")) == 3


def test_heat_id_clash_across_divisions(session: Session, event: Event):
    save_generated_draw(session, make_draw(event, 4, 4, division="Open Men"))

    # different division text, same slug
    with pytest.raises(HeatStoreConflictError, match="another event or division"):
        save_generated_draw(session, make_draw(event, 4, 4, division="open  men"))


def test_load_orders_entries_and_mappings(session: Session, event: Event):
    save_generated_draw(session, make_draw(event, 4, 2))

    heats = load_event_heats(session, event.id, "Open")
    first, final = heats[0], heats[-1]

    assert first["id"] == "summer_classic_open_R1_H1"
    assert [e["seed"] for e in first["entries"]] == [1, 2]
    assert [e["color"] for e in first["entries"]] == ["RED", "WHITE"]
    assert [m["placeholder"] for m in final["slot_mappings"]] == [
        "Vainqueur R1-H1 P1",
        "Vainqueur R1-H2 P1",
    ]
    assert [e["competitor_id"] for e in final["entries"]] == [None, None]


def test_delete_planned_heats(session: Session, event: Event):
    save_generated_draw(session, make_draw(event, 8, 4))

    deleted = delete_planned_heats(session, event.id, "Open")

    assert sorted(deleted) == [
        "summer_classic_open_R1_H1",
        "summer_classic_open_R1_H2",
        "summer_classic_open_R2_H1",
    ]
    assert count_rows(session, Heat) == 0
    assert count_rows(session, HeatEntry) == 0
    assert count_rows(session, HeatSlotMapping) == 0


def test_delete_nothing(session: Session, event: Event):
    assert delete_planned_heats(session, event.id, "Open") == []


def test_heat_id_clash_across_events(session: Session, event: Event):
    save_generated_draw(session, make_draw(event, 4, 4))

    other = Event(name="Summer Classic!")
    session.add(other)
    session.commit()
    session.refresh(other)

    with pytest.raises(HeatStoreConflictError, match="another event or division"):
        save_generated_draw(session, make_draw(other, 4, 4))


def test_created_at_is_timezone_aware_on_insert(session: Session):
    event = Event(name="Winter Series")
    assert event.created_at.tzinfo is not None

    session.add(event)
    session.commit()
    session.refresh(event)

    assert event.created_at is not None


def test_created_at_read_back_after_save(session: Session, event: Event):
    save_generated_draw(session, make_draw(event, 4, 2))
    session.expire_all()

    heats = session.exec(select(Heat).where(Heat.event_id == event.id)).all()

    assert len(heats) == 3
    assert all(h.created_at is not None for h in heats)
    assert session.get(Event, event.id).created_at is not None
