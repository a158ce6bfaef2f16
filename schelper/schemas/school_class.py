from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from schelper.utils.timeslots import clock_to_minutes, is_valid_clock, minutes_to_clock, normalize_days


def _check_clock(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if v == "":
        return v
    if not is_valid_clock(v):
        raise ValueError(f"time must be HH:MM (24h), got '{v}'")
    return minutes_to_clock(clock_to_minutes(v))


def _check_days(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    return normalize_days(v)


def _check_tags(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    # trim + dedupe, keep order
    return list(dict.fromkeys(t.strip() for t in v if t and t.strip()))


def _check_time_order(start: Optional[str], end: Optional[str]):
    s, e = clock_to_minutes(start), clock_to_minutes(end)
    if s is not None and e is not None and e <= s:
        raise ValueError("end_time must be after start_time")


# ---------- class data (fixed identifiers) ----------

class ClassDataBase(BaseModel):
    # lengths follow the classes table columns
    catalog_num: str = Field("", max_length=50)
    class_num: str = Field(..., max_length=50)
    session: str = Field("", max_length=100)
    course_subject: str = Field("", max_length=50)
    course_num: str = Field("", max_length=50)
    section: str = Field("", max_length=50)
    title: str = Field("", max_length=255)
    location: str = Field("", max_length=100)
    enrollment_cap: Optional[int] = None
    waitlist_cap: Optional[int] = None

    @field_validator("class_num")
    @classmethod
    def _class_num_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("class_num is required")
        return v


class ClassDataIn(ClassDataBase):
    pass


class ClassDataUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    catalog_num: Optional[str] = Field(None, max_length=50)
    class_num: Optional[str] = Field(None, max_length=50)
    session: Optional[str] = Field(None, max_length=100)
    course_subject: Optional[str] = Field(None, max_length=50)
    course_num: Optional[str] = Field(None, max_length=50)
    section: Optional[str] = Field(None, max_length=50)
    title: Optional[str] = Field(None, max_length=255)
    location: Optional[str] = Field(None, max_length=100)
    enrollment_cap: Optional[int] = None
    waitlist_cap: Optional[int] = None

    @field_validator("class_num")
    @classmethod
    def _class_num_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("class_num cannot be blank")
        return v.strip() if v else v


class ClassDataOut(ClassDataBase):
    id: int
    model_config = ConfigDict(from_attributes=True)


# ---------- class properties (editable) ----------

class ClassPropertyIn(BaseModel):
    class_status: str = ""
    start_time: str = ""
    end_time: str = ""
    room: str = ""
    facility_id: str = ""
    days: List[str] = Field(default_factory=list, description="e.g. ['Mon','Wed']")
    instructor_email: str = ""
    instructor_name: str = ""
    total_enrolled: Optional[int] = None
    total_waitlisted: Optional[int] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("start_time", "end_time")
    @classmethod
    def _validate_clock(cls, v):
        return _check_clock(v)

    @field_validator("days")
    @classmethod
    def _validate_days(cls, v):
        return _check_days(v)

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, v):
        return _check_tags(v)

    @model_validator(mode="after")
    def _validate_time_order(self):
        _check_time_order(self.start_time, self.end_time)
        return self


class ClassPropertyUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    class_status: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    room: Optional[str] = None
    facility_id: Optional[str] = None
    days: Optional[List[str]] = None
    instructor_email: Optional[str] = None
    instructor_name: Optional[str] = None
    total_enrolled: Optional[int] = None
    total_waitlisted: Optional[int] = None
    tags: Optional[List[str]] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def _validate_clock(cls, v):
        return _check_clock(v)

    @field_validator("days")
    @classmethod
    def _validate_days(cls, v):
        return _check_days(v)

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, v):
        return _check_tags(v)


class ClassPropertyOut(BaseModel):
    class_status: str = ""
    start_time: str = ""
    end_time: str = ""
    room: str = ""
    facility_id: str = ""
    days: List[str] = []
    instructor_email: str = ""
    instructor_name: str = ""
    total_enrolled: Optional[int] = None
    total_waitlisted: Optional[int] = None
    tags: List[str] = []


# ---------- combined ----------

class CombinedClassIn(BaseModel):
    class_data: ClassDataIn
    class_properties: ClassPropertyIn = Field(default_factory=ClassPropertyIn)


class CombinedClassUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    class_data: Optional[ClassDataUpdate] = None
    class_properties: Optional[ClassPropertyUpdate] = None


class CombinedClassOut(BaseModel):
    id: int
    class_data: ClassDataOut
    class_properties: ClassPropertyOut


# ---------- conflicts ----------

class ConflictClassOut(BaseModel):
    id: int
    title: str = ""
    course: str = ""
    section: str = ""
    start_time: str = ""
    end_time: str = ""
    room: str = ""
    instructor_name: str = ""
    instructor_email: str = ""


class ConflictOut(BaseModel):
    day: str
    overlap_start: str
    overlap_end: str
    reasons: List[str]
    class1: ConflictClassOut
    class2: ConflictClassOut


class CombinedClassUpdateOut(BaseModel):
    item: CombinedClassOut
    conflicts: List[ConflictOut]
