from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from schelper.database import get_db
from schelper.models.class_data import ClassData
from schelper.schemas.calendar import CalendarEventOut, CalendarEventProps
from schelper.utils.class_store import class_query
from schelper.utils.timeslots import CALENDAR_WEEKDAY, is_valid_clock

router = APIRouter(prefix="/calendar", tags=["Calendar"])


def class_to_event(c: ClassData) -> Optional[CalendarEventOut]:
    """
    One weekly recurring event per class; None when the class has no meeting
    days or no valid start/end.
    """
    p = c.properties
    if p is None or not p.days:
        return None
    if not (is_valid_clock(p.start_time) and is_valid_clock(p.end_time)):
        return None

    return CalendarEventOut(
        id=str(c.id),
        title=c.title or f"{c.course_subject} {c.course_num}".strip(),
        daysOfWeek=[CALENDAR_WEEKDAY[d] for d in p.days if d in CALENDAR_WEEKDAY],
        startTime=p.start_time,
        endTime=p.end_time,
        extendedProps=CalendarEventProps(
            combinedClassId=c.id,
            room=p.room or "",
            instructor=p.instructor_name or p.instructor_email or "",
            tags=p.tag_names,
        ),
    )


@router.get("/events", response_model=list[CalendarEventOut])
def list_events(
    db: Session = Depends(get_db),
    tags: Optional[List[str]] = Query(None, description="show only classes carrying any of these tags"),
    session: Optional[str] = Query(None),
):
    events = []
    for c in class_query(db, tags=tags, session=session).all():
        ev = class_to_event(c)
        if ev is not None:
            events.append(ev)
    return events
