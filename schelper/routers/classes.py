from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from schelper.database import get_db
from schelper.models.class_data import ClassData
from schelper.models.class_property import ClassProperty
from schelper.models.tag import Tag
from schelper.schemas.school_class import (
    CombinedClassIn, CombinedClassOut, CombinedClassUpdate, CombinedClassUpdateOut, ConflictOut,
)
from schelper.schemas.tag import TagLinkOut
from schelper.utils.auth import get_current_user
from schelper.utils.class_store import (
    apply_property_fields, class_query, conflicts_to_out, detect_conflicts,
    get_class_or_none, to_combined_out,
)
from schelper.utils.conflict import conflicts_for_class
from schelper.utils.excel_export import (
    ROSTER_HEADERS, XLSX_MEDIA_TYPE, class_to_roster_row, make_filename, rows_to_xlsx_bytes,
)
from schelper.utils.timeslots import clock_to_minutes

import logging
logger = logging.getLogger("schelper.classes")


router = APIRouter(prefix="/classes", tags=["Classes"])


def _get_or_404(db: Session, class_id: int) -> ClassData:
    c = get_class_or_none(db, class_id)
    if not c:
        raise HTTPException(status_code=404, detail="Class not found")
    return c


def _commit(db: Session):
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity error: %s", e.orig)
        raise HTTPException(status_code=400, detail="Class # already exists for this session")


def _class_conflicts(db: Session, class_id: int) -> List[ConflictOut]:
    classes = class_query(db).all()
    mine = conflicts_for_class(detect_conflicts(classes), class_id)
    return conflicts_to_out(mine, classes)


@router.get("", response_model=list[CombinedClassOut])
def list_classes(
    db: Session = Depends(get_db),
    tags: Optional[List[str]] = Query(None, description="only classes carrying any of these tags"),
    session: Optional[str] = Query(None, description="e.g. 'Regular Academic Session'"),
):
    return [to_combined_out(c) for c in class_query(db, tags=tags, session=session).all()]


@router.get("/export")
def export_classes(
    db: Session = Depends(get_db),
    tags: Optional[List[str]] = Query(None),
    session: Optional[str] = Query(None),
):
    """
    Download the classes as a roster .xlsx (same columns the importer reads).
    """
    classes = class_query(db, tags=tags, session=session).all()
    rows = [class_to_roster_row(c) for c in classes]
    xlsx_bytes = rows_to_xlsx_bytes(rows, sheet_name="Classes", headers=ROSTER_HEADERS)
    filename = make_filename("classes")

    logger.info("Exported %d classes", len(rows))
    return StreamingResponse(
        iter([xlsx_bytes]),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{class_id}", response_model=CombinedClassOut)
def get_class(class_id: int, db: Session = Depends(get_db)):
    return to_combined_out(_get_or_404(db, class_id))


@router.post("", response_model=CombinedClassOut, status_code=201)
def create_class(
    body: CombinedClassIn,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    c = ClassData(**body.class_data.model_dump())
    db.add(c)
    try:
        db.flush()
    except IntegrityError as e:
        db.rollback()
        logger.warning("Integrity error: %s", e.orig)
        raise HTTPException(status_code=400, detail="Class # already exists for this session")

    prop = ClassProperty(class_id=c.id)
    apply_property_fields(db, prop, body.class_properties.model_dump())
    db.add(prop)
    _commit(db)

    logger.info("Class %s (%s) created by %s", c.id, c.class_num, user.username)
    return to_combined_out(_get_or_404(db, c.id))


@router.put("/{class_id}", response_model=CombinedClassUpdateOut)
def update_class(
    class_id: int,
    body: CombinedClassUpdate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    c = _get_or_404(db, class_id)

    if body.class_data is not None:
        for k, v in body.class_data.model_dump(exclude_unset=True).items():
            if k == "class_num" and v is None:
                continue
            setattr(c, k, v)

    if body.class_properties is not None:
        prop = c.properties
        if prop is None:
            prop = ClassProperty(class_id=c.id)
            db.add(prop)
        data = body.class_properties.model_dump(exclude_unset=True)
        # null means "leave as is" for the list fields
        for k in ("days", "tags"):
            if k in data and data[k] is None:
                data.pop(k)
        apply_property_fields(db, prop, data)

        start, end = clock_to_minutes(prop.start_time), clock_to_minutes(prop.end_time)
        if start is not None and end is not None and end <= start:
            db.rollback()
            raise HTTPException(status_code=422, detail="end_time must be after start_time")

    _commit(db)

    # re-run conflict detection for the edited class
    conflicts = _class_conflicts(db, class_id)
    if conflicts:
        logger.info("Class %s has %d conflict(s) after update", class_id, len(conflicts))

    return CombinedClassUpdateOut(item=to_combined_out(_get_or_404(db, class_id)), conflicts=conflicts)


@router.delete("/{class_id}")
def delete_class(
    class_id: int,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    c = _get_or_404(db, class_id)
    db.delete(c)
    db.commit()
    logger.info("Class %s deleted by %s", class_id, user.username)
    return {"detail": "deleted"}


@router.get("/{class_id}/conflicts", response_model=list[ConflictOut])
def get_class_conflicts(class_id: int, db: Session = Depends(get_db)):
    _get_or_404(db, class_id)
    return _class_conflicts(db, class_id)


# ---------- tag links ----------

def _tag_or_404(db: Session, name: str) -> Tag:
    tag = db.query(Tag).filter(Tag.name == name.strip()).first()
    if not tag:
        raise HTTPException(status_code=404, detail="Tag not found")
    return tag


def _properties_or_new(db: Session, c: ClassData) -> ClassProperty:
    if c.properties is None:
        c.properties = ClassProperty(class_id=c.id, days=[])
        db.add(c.properties)
    return c.properties


@router.post("/{class_id}/tags/{tag_name}", response_model=TagLinkOut)
def link_tag(
    class_id: int,
    tag_name: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    c = _get_or_404(db, class_id)
    tag = _tag_or_404(db, tag_name)
    prop = _properties_or_new(db, c)
    if tag not in prop.tags:
        prop.tags.append(tag)
    db.commit()
    return TagLinkOut(class_id=class_id, tags=prop.tag_names)


@router.delete("/{class_id}/tags/{tag_name}", response_model=TagLinkOut)
def unlink_tag(
    class_id: int,
    tag_name: str,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    c = _get_or_404(db, class_id)
    tag = _tag_or_404(db, tag_name)
    prop = _properties_or_new(db, c)
    if tag in prop.tags:
        prop.tags.remove(tag)
    db.commit()
    return TagLinkOut(class_id=class_id, tags=prop.tag_names)


@router.delete("/{class_id}/tags", response_model=TagLinkOut)
def unlink_all_tags_from_class(
    class_id: int,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    c = _get_or_404(db, class_id)
    prop = _properties_or_new(db, c)
    prop.tags = []
    db.commit()
    return TagLinkOut(class_id=class_id, tags=[])
