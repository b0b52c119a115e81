# studybuddy/api/routes_schedule.py
import datetime as dt
import uuid
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select

from studybuddy.models.schedule import ScheduleEvent
from studybuddy.services.db import get_session

router = APIRouter()


class EventReq(BaseModel):
    title: str = Field(..., min_length=1, max_length=256)
    description: Optional[str] = None
    date: dt.date
    time: dt.time
    type: Literal["class", "exam", "assignment", "study"] = "class"
    ownerId: Optional[str] = Field(None, max_length=128)


def _row_to_dict(e: ScheduleEvent) -> Dict[str, Any]:
    return {
        "id": str(e.id),
        "owner_id": e.owner_id,
        "title": e.title,
        "description": e.description,
        "date": e.date.isoformat(),
        "time": e.time.strftime("%H:%M"),
        "type": e.type,
    }


@router.get("")
def list_events(ownerId: Optional[str] = None, type: Optional[str] = None) -> List[Dict[str, Any]]:
    with get_session() as s:
        stmt = select(ScheduleEvent).order_by(ScheduleEvent.date, ScheduleEvent.time)
        if ownerId:
            stmt = stmt.filter(ScheduleEvent.owner_id == ownerId)
        if type:
            stmt = stmt.filter(ScheduleEvent.type == type)
        return [_row_to_dict(e) for e in s.execute(stmt).scalars().all()]


@router.post("", status_code=201)
def create_event(body: EventReq) -> Dict[str, Any]:
    with get_session() as s:
        e = ScheduleEvent(
            owner_id=body.ownerId,
            title=body.title.strip(),
            description=body.description,
            date=body.date,
            time=body.time,
            type=body.type,
        )
        s.add(e)
        s.commit()
        s.refresh(e)
        return _row_to_dict(e)


@router.delete("/{event_id}", status_code=204)
def delete_event(event_id: uuid.UUID):
    with get_session() as s:
        e = s.get(ScheduleEvent, event_id)
        if not e:
            raise HTTPException(status_code=404, detail="Event not found")
        s.delete(e)
        s.commit()
