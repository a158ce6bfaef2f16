from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from schelper.config import settings
from schelper.database import get_db
from schelper.models.class_data import ClassData
from schelper.models.class_property import ClassProperty
from schelper.schemas.import_sheet import ImportPreviewOut, ImportResultOut
from schelper.utils.auth import get_current_user
from schelper.utils.class_store import apply_property_fields, class_query, detect_conflicts
from schelper.utils.roster_import import ParsedRoster, RosterParseError, load_roster

import logging
logger = logging.getLogger("schelper.import")


router = APIRouter(prefix="/import", tags=["Import"])

ALLOWED_EXTENSIONS = (".xlsx", ".xls", ".csv")


def _parse_upload(file: UploadFile) -> ParsedRoster:
    name = (file.filename or "").lower()
    if not name.endswith(ALLOWED_EXTENSIONS):
        raise HTTPException(status_code=400, detail="Upload a .xlsx, .xls or .csv file")
    try:
        return load_roster(file.file, name, settings.IMPORT_HEADER_SEARCH_ROWS)
    except RosterParseError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _split_selection(values: Optional[List[str]]) -> Optional[set]:
    """Form field may come as repeated values or one comma-separated string."""
    if not values:
        return None
    out = set()
    for v in values:
        out.update(x.strip() for x in v.split(",") if x.strip())
    return out or None


@router.post("/preview", response_model=ImportPreviewOut)
def preview_import(file: UploadFile = File(...)):
    """
    Parse the roster and return what would be imported. Nothing is saved.
    """
    parsed = _parse_upload(file)
    return ImportPreviewOut(
        items=parsed.items,
        total=len(parsed.items),
        skipped_cancelled=parsed.skipped_cancelled,
        skipped_malformed=parsed.skipped_malformed,
    )


@router.post("", response_model=ImportResultOut)
def import_classes(
    file: UploadFile = File(...),
    class_nums: Optional[List[str]] = Form(None),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    """
    Upsert classes from a roster, keyed by (Class #, Session).
    class_nums limits the import to the selected rows.
    """
    parsed = _parse_upload(file)
    selected = _split_selection(class_nums)

    inserted = 0
    updated = 0
    skipped_unselected = 0

    try:
        for item in parsed.items:
            data = item.class_data.model_dump()
            if selected is not None and data["class_num"] not in selected:
                skipped_unselected += 1
                continue

            c = (
                db.query(ClassData)
                .filter(ClassData.class_num == data["class_num"], ClassData.session == data["session"])
                .first()
            )
            if c is None:
                c = ClassData(**data)
                db.add(c)
                db.flush()
                inserted += 1
            else:
                for k, v in data.items():
                    setattr(c, k, v)
                updated += 1

            prop = c.properties
            if prop is None:
                prop = ClassProperty(class_id=c.id)
                db.add(prop)
                c.properties = prop
            apply_property_fields(db, prop, item.class_properties.model_dump())
            db.flush()

        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Import of %s failed", file.filename)
        raise

    conflicts = detect_conflicts(class_query(db).all())

    logger.info(
        "Import %s by %s: %d inserted, %d updated, %d conflicts",
        file.filename, user.username, inserted, updated, len(conflicts),
    )
    return ImportResultOut(
        message="Import completed!",
        inserted=inserted,
        updated=updated,
        skipped_cancelled=parsed.skipped_cancelled,
        skipped_malformed=parsed.skipped_malformed,
        skipped_unselected=skipped_unselected,
        conflicts=len(conflicts),
    )
