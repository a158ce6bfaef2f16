from typing import List
from pydantic import BaseModel

from schelper.schemas.school_class import CombinedClassIn


class ImportPreviewOut(BaseModel):
    items: List[CombinedClassIn]
    total: int
    skipped_cancelled: int
    skipped_malformed: int


class ImportResultOut(BaseModel):
    message: str
    inserted: int
    updated: int
    skipped_cancelled: int
    skipped_malformed: int
    skipped_unselected: int
    conflicts: int
