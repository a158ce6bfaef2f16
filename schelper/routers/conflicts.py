from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from schelper.database import get_db
from schelper.schemas.school_class import ConflictOut
from schelper.utils.class_store import current_conflicts

import logging
logger = logging.getLogger("schelper.conflicts")


router = APIRouter(prefix="/conflicts", tags=["Conflicts"])


@router.get("", response_model=list[ConflictOut])
def list_conflicts(
    db: Session = Depends(get_db),
    tags: Optional[List[str]] = Query(None, description="only check classes carrying any of these tags"),
):
    """
    Every pair of class sessions that overlap in time on the same day and share
    a room or an instructor.
    """
    conflicts = current_conflicts(db, tags=tags)
    logger.debug("Conflict check (tags=%s): %d found", tags, len(conflicts))
    return conflicts
