from typing import List
from pydantic import BaseModel


class CalendarEventProps(BaseModel):
    combinedClassId: int
    room: str = ""
    instructor: str = ""
    tags: List[str] = []


class CalendarEventOut(BaseModel):
    """Recurring event in the shape FullCalendar's EventInput expects."""

    id: str
    title: str
    daysOfWeek: List[int]   # 0 = Sunday
    startTime: str          # "HH:MM"
    endTime: str
    display: str = "auto"
    extendedProps: CalendarEventProps
