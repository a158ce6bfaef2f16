"""
Shared DB helpers for classes: loading, tag resolution, ORM -> schema and the
conflict check over whatever is currently stored.
"""
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session, selectinload

from schelper.config import settings
from schelper.models.class_data import ClassData
from schelper.models.class_property import ClassProperty
from schelper.models.tag import Tag
from schelper.schemas.school_class import (
    ClassDataOut, ClassPropertyOut, CombinedClassOut, ConflictClassOut, ConflictOut,
)
from schelper.utils.conflict import Conflict, expand_sessions, find_conflicts

logger = logging.getLogger("schelper.classes")


def class_query(db: Session, tags: Optional[List[str]] = None, session: Optional[str] = None):
    q = db.query(ClassData).options(
        selectinload(ClassData.properties).selectinload(ClassProperty.tags)
    )
    if session:
        q = q.filter(ClassData.session == session)
    if tags:
        q = q.filter(ClassData.properties.has(ClassProperty.tags.any(Tag.name.in_(tags))))
    return q.order_by(ClassData.id.asc())


def get_class_or_none(db: Session, class_id: int) -> Optional[ClassData]:
    return class_query(db).filter(ClassData.id == class_id).first()


def get_or_create_tags(db: Session, names: Iterable[str]) -> List[Tag]:
    names = list(dict.fromkeys(names))
    if not names:
        return []
    existing = {t.name: t for t in db.query(Tag).filter(Tag.name.in_(names)).all()}
    out = []
    for name in names:
        tag = existing.get(name)
        if tag is None:
            tag = Tag(name=name)
            db.add(tag)
            existing[name] = tag
            logger.info("Created tag %s", name)
        out.append(tag)
    return out


def apply_property_fields(db: Session, prop: ClassProperty, data: dict):
    """Copy a dict of ClassProperty fields onto the row; "tags" is a list of names."""
    data = dict(data)
    tag_names = data.pop("tags", None)
    for k, v in data.items():
        setattr(prop, k, v)
    if tag_names is not None:
        prop.tags = get_or_create_tags(db, tag_names)


def to_combined_out(c: ClassData) -> CombinedClassOut:
    p = c.properties
    props = ClassPropertyOut()
    if p is not None:
        props = ClassPropertyOut(
            class_status=p.class_status or "",
            start_time=p.start_time or "",
            end_time=p.end_time or "",
            room=p.room or "",
            facility_id=p.facility_id or "",
            days=list(p.days or []),
            instructor_email=p.instructor_email or "",
            instructor_name=p.instructor_name or "",
            total_enrolled=p.total_enrolled,
            total_waitlisted=p.total_waitlisted,
            tags=p.tag_names,
        )
    return CombinedClassOut(
        id=c.id,
        class_data=ClassDataOut(
            id=c.id,
            catalog_num=c.catalog_num or "",
            class_num=c.class_num,
            session=c.session or "",
            course_subject=c.course_subject or "",
            course_num=c.course_num or "",
            section=c.section or "",
            title=c.title or "",
            location=c.location or "",
            enrollment_cap=c.enrollment_cap,
            waitlist_cap=c.waitlist_cap,
        ),
        class_properties=props,
    )


# ---------- conflicts ----------

def detect_conflicts(classes: Iterable[ClassData]) -> List[Conflict]:
    props = [c.properties for c in classes if c.properties is not None]
    return find_conflicts(expand_sessions(props), settings.IGNORED_CONFLICT_ROOMS)


def _conflict_class_out(c: ClassData) -> ConflictClassOut:
    p = c.properties
    return ConflictClassOut(
        id=c.id,
        title=c.title or "",
        course=f"{c.course_subject or ''} {c.course_num or ''}".strip(),
        section=c.section or "",
        start_time=p.start_time or "",
        end_time=p.end_time or "",
        room=p.room or "",
        instructor_name=p.instructor_name or "",
        instructor_email=p.instructor_email or "",
    )


def conflicts_to_out(conflicts: Iterable[Conflict], classes: Iterable[ClassData]) -> List[ConflictOut]:
    by_id: Dict[int, ClassData] = {c.id: c for c in classes}
    return [
        ConflictOut(
            day=cf.day,
            overlap_start=cf.overlap_start,
            overlap_end=cf.overlap_end,
            reasons=list(cf.reasons),
            class1=_conflict_class_out(by_id[cf.first.class_id]),
            class2=_conflict_class_out(by_id[cf.second.class_id]),
        )
        for cf in conflicts
    ]


def current_conflicts(db: Session, tags: Optional[List[str]] = None) -> List[ConflictOut]:
    classes = class_query(db, tags=tags).all()
    return conflicts_to_out(detect_conflicts(classes), classes)
