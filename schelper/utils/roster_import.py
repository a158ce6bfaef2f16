"""
Roster spreadsheet -> CombinedClassIn rows.

The registrar export has a title row above the header, so the header is found
by looking for the "Class #" cell instead of assuming a fixed offset.
"""
import logging
import re
from typing import BinaryIO, List, NamedTuple, Optional

import pandas as pd
from pydantic import ValidationError

from schelper.schemas.school_class import ClassDataIn, ClassPropertyIn, CombinedClassIn
from schelper.utils.timeslots import ROSTER_DAY_COLUMNS, to_24h

logger = logging.getLogger("schelper.import")

HEADER_MARKER = "Class #"
CANCELLED_STATUS = "cancelled section"
MAX_CSV_COLUMNS = 200

CLASS_TEXT_COLUMNS = {
    "Catalog #": "catalog_num",
    "Class #": "class_num",
    "Session": "session",
    "Course": "course_subject",
    "Num": "course_num",
    "Section": "section",
    "Title": "title",
    "Location": "location",
}
CLASS_INT_COLUMNS = {
    "Enr Cpcty": "enrollment_cap",
    "Wait Cap": "waitlist_cap",
}
PROPERTY_TEXT_COLUMNS = {
    "Class Stat": "class_status",
    "Room": "room",
    "Facility ID": "facility_id",
    "Instructor Email": "instructor_email",
    "Instructor Name": "instructor_name",
}
PROPERTY_INT_COLUMNS = {
    "Tot Enrl": "total_enrolled",
    "Wait Tot": "total_waitlisted",
}


class RosterParseError(ValueError):
    pass


class ParsedRoster(NamedTuple):
    items: List[CombinedClassIn]
    skipped_cancelled: int
    skipped_malformed: int


def to_str(v) -> Optional[str]:
    if v is None:
        return None
    if not isinstance(v, str) and pd.isna(v):
        return None
    # numeric cells: 12345.0 -> "12345"
    if isinstance(v, float) and v.is_integer():
        v = int(v)
    s = str(v).strip()
    return None if s == "" or s.lower() == "nan" else s


def to_int(v) -> Optional[int]:
    s = to_str(v)
    if s is None:
        return None
    try:
        return int(float(s))
    except ValueError:
        return None


def level_tag(course_num: Optional[str]) -> Optional[str]:
    """
    "101" -> "100level", "340L" -> "300level", "512" / "7" / "" -> None
    """
    m = re.match(r"^\d+", (course_num or "").strip())
    if not m:
        return None
    level = int(m.group(0)) // 100
    if 1 <= level <= 4:
        return f"{level}00level"
    return None


def read_roster_frame(fileobj: BinaryIO, filename: str = "") -> pd.DataFrame:
    """Raw sheet, no header applied. CSV by extension, Excel otherwise (first sheet)."""
    name = (filename or "").lower()
    try:
        if name.endswith(".csv"):
            # title rows make the csv ragged: fix the width, then drop the unused columns
            df = pd.read_csv(
                fileobj, header=None, names=range(MAX_CSV_COLUMNS), dtype=object,
                encoding="utf-8-sig",
            )
            return df.dropna(axis=1, how="all")
        return pd.read_excel(fileobj, header=None, dtype=object)
    except Exception as e:
        raise RosterParseError(f"Cannot read spreadsheet: {e}") from e


def find_header_row(df_raw: pd.DataFrame, search_rows: int = 30) -> int:
    for i in range(min(search_rows, len(df_raw))):
        row = [to_str(c) for c in df_raw.iloc[i].tolist()]
        if HEADER_MARKER in row:
            return i
    return -1


def apply_header(df_raw: pd.DataFrame, search_rows: int = 30) -> pd.DataFrame:
    header_i = find_header_row(df_raw, search_rows)
    if header_i == -1:
        raise RosterParseError(f"Cannot find header row ('{HEADER_MARKER}' column) in spreadsheet")

    header = [to_str(c) or f"_col{i}" for i, c in enumerate(df_raw.iloc[header_i].tolist())]
    df = df_raw.iloc[header_i + 1:].copy()
    df.columns = header
    return df.reset_index(drop=True)


def parse_row(row: dict) -> CombinedClassIn:
    """
    One roster row -> CombinedClassIn.
    Raises ValueError / ValidationError for malformed rows.
    """
    class_data = {}
    props = {"days": [], "tags": []}

    for col, field in CLASS_TEXT_COLUMNS.items():
        v = to_str(row.get(col))
        if v is not None:
            class_data[field] = v
    for col, field in CLASS_INT_COLUMNS.items():
        class_data[field] = to_int(row.get(col))

    for col, field in PROPERTY_TEXT_COLUMNS.items():
        v = to_str(row.get(col))
        if v is not None:
            props[field] = v
    for col, field in PROPERTY_INT_COLUMNS.items():
        props[field] = to_int(row.get(col))

    props["start_time"] = to_24h(row.get("Start") if to_str(row.get("Start")) else None)
    props["end_time"] = to_24h(row.get("End") if to_str(row.get("End")) else None)

    for col, day in ROSTER_DAY_COLUMNS.items():
        if to_str(row.get(col)):
            props["days"].append(day)

    tag = level_tag(class_data.get("course_num"))
    if tag:
        props["tags"].append(tag)

    return CombinedClassIn(
        class_data=ClassDataIn(**class_data),
        class_properties=ClassPropertyIn(**props),
    )


def parse_roster(df: pd.DataFrame) -> ParsedRoster:
    items = []
    skipped_cancelled = 0
    skipped_malformed = 0

    for i, row in enumerate(df.to_dict(orient="records")):
        if not any(to_str(v) for v in row.values()):
            continue  # blank line

        status = (to_str(row.get("Class Stat")) or "").lower()
        if status == CANCELLED_STATUS:
            skipped_cancelled += 1
            continue

        try:
            items.append(parse_row(row))
        except (ValueError, ValidationError) as e:
            skipped_malformed += 1
            logger.warning("Skipping malformed roster row %d: %s", i + 1, str(e).splitlines()[0])

    return ParsedRoster(items, skipped_cancelled, skipped_malformed)


def load_roster(fileobj: BinaryIO, filename: str = "", search_rows: int = 30) -> ParsedRoster:
    df = apply_header(read_roster_frame(fileobj, filename), search_rows)
    parsed = parse_roster(df)
    logger.info(
        "Parsed roster %s: %d classes, %d cancelled, %d malformed",
        filename or "<upload>", len(parsed.items), parsed.skipped_cancelled, parsed.skipped_malformed,
    )
    return parsed
