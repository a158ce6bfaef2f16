"""
Room / instructor conflict detection.

A class that meets on several days is expanded into one session per day.
Sessions are sorted by (day, start) and swept once: for every anchor we walk
forward over later sessions of the same day while they start before the
anchor ends. Anything in that window overlaps the anchor in time, so it is a
conflict if it also shares a room or an instructor. The walk stops at the first
session starting at or after the anchor's end, since every later session on
that day starts even later.

Cost is O(n log n + k) where k is the number of overlapping pairs visited.
"""
from typing import Iterable, List, NamedTuple, Optional, Sequence

from schelper.utils.timeslots import DAY_INDEX, clock_to_minutes, minutes_to_clock


class Session(NamedTuple):
    class_id: int
    day: str
    start: int  # minutes since midnight
    end: int
    room: str
    instructor_email: str
    instructor_name: str


class Conflict(NamedTuple):
    first: Session
    second: Session
    reasons: tuple  # ("room",), ("instructor",) or both

    @property
    def day(self) -> str:
        return self.first.day

    @property
    def overlap_start(self) -> str:
        return minutes_to_clock(max(self.first.start, self.second.start))

    @property
    def overlap_end(self) -> str:
        return minutes_to_clock(min(self.first.end, self.second.end))


def _norm(s: Optional[str]) -> str:
    return (s or "").strip().casefold()


def expand_sessions(properties: Iterable) -> List[Session]:
    """
    ClassProperty-like objects (class_id, days, start_time, end_time, room,
    instructor_email, instructor_name) -> one Session per meeting day.
    Rows without days or with missing / inverted times are dropped.
    """
    out = []
    for p in properties:
        start = clock_to_minutes(p.start_time)
        end = clock_to_minutes(p.end_time)
        if start is None or end is None or end <= start:
            continue
        for day in p.days or []:
            if day not in DAY_INDEX:
                continue
            out.append(Session(
                class_id=p.class_id,
                day=day,
                start=start,
                end=end,
                room=p.room or "",
                instructor_email=p.instructor_email or "",
                instructor_name=p.instructor_name or "",
            ))
    return out


def same_room(a: Session, b: Session, ignored_rooms: Sequence[str] = ()) -> bool:
    ra, rb = _norm(a.room), _norm(b.room)
    if not ra or ra != rb:
        return False
    return ra not in {_norm(r) for r in ignored_rooms}


def same_instructor(a: Session, b: Session) -> bool:
    ea, eb = _norm(a.instructor_email), _norm(b.instructor_email)
    if ea and eb:
        return ea == eb
    na, nb = _norm(a.instructor_name), _norm(b.instructor_name)
    return bool(na) and na == nb


def find_conflicts(sessions: Iterable[Session], ignored_rooms: Sequence[str] = ()) -> List[Conflict]:
    ordered = sorted(sessions, key=lambda s: (DAY_INDEX[s.day], s.start, s.end, s.class_id))

    conflicts = []
    for i, anchor in enumerate(ordered):
        j = i + 1
        while j < len(ordered):
            other = ordered[j]
            j += 1
            if other.day != anchor.day or other.start >= anchor.end:
                break
            if other.class_id == anchor.class_id:
                continue

            reasons = []
            if same_room(anchor, other, ignored_rooms):
                reasons.append("room")
            if same_instructor(anchor, other):
                reasons.append("instructor")
            if reasons:
                conflicts.append(Conflict(anchor, other, tuple(reasons)))

    return conflicts


def conflicts_for_class(conflicts: Iterable[Conflict], class_id: int) -> List[Conflict]:
    return [c for c in conflicts if class_id in (c.first.class_id, c.second.class_id)]
