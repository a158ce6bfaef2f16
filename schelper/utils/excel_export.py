from typing import Any, Dict, List, Optional
from io import BytesIO
from datetime import datetime

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.styles import Font, Alignment

from schelper.utils.timeslots import ROSTER_DAY_COLUMNS

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# column order used for roster exports; matches the import headers
ROSTER_HEADERS = [
    "Class #", "Session", "Catalog #", "Course", "Num", "Section", "Title",
    "Class Stat", *ROSTER_DAY_COLUMNS, "Start", "End",
    "Room", "Facility ID", "Location", "Instructor Name", "Instructor Email",
    "Enr Cpcty", "Tot Enrl", "Wait Cap", "Wait Tot", "Tags",
]


def rows_to_xlsx_bytes(
    rows: List[Dict[str, Any]],
    sheet_name: str = "Classes",
    headers: Optional[List[str]] = None,
) -> bytes:
    """
    rows: list of dict, each dict is a row.
    headers: column order; defaults to the keys of the first row.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name[:31]

    headers = headers or (list(rows[0].keys()) if rows else [])
    if not headers:
        ws.append(["No data"])
        buf = BytesIO()
        wb.save(buf)
        return buf.getvalue()

    ws.append(headers)

    header_font = Font(bold=True)
    for col_idx in range(1, len(headers) + 1):
        cell = ws.cell(row=1, column=col_idx)
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center")
    ws.freeze_panes = "A2"

    for r in rows:
        ws.append([r.get(h) for h in headers])

    # autosize columns
    for col_idx, h in enumerate(headers, start=1):
        max_len = len(str(h))
        for row_idx in range(2, ws.max_row + 1):
            v = ws.cell(row=row_idx, column=col_idx).value
            if v is None:
                continue
            max_len = max(max_len, len(str(v)))
        ws.column_dimensions[get_column_letter(col_idx)].width = min(max_len + 2, 60)

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()


def class_to_roster_row(c) -> Dict[str, Any]:
    """ClassData (with .properties loaded) -> one export row keyed by ROSTER_HEADERS."""
    p = c.properties
    days = set(p.days or []) if p else set()
    return {
        "Class #": c.class_num,
        "Session": c.session,
        "Catalog #": c.catalog_num,
        "Course": c.course_subject,
        "Num": c.course_num,
        "Section": c.section,
        "Title": c.title,
        "Class Stat": p.class_status if p else None,
        **{col: "Y" if day in days else None for col, day in ROSTER_DAY_COLUMNS.items()},
        "Start": p.start_time if p else None,
        "End": p.end_time if p else None,
        "Room": p.room if p else None,
        "Facility ID": p.facility_id if p else None,
        "Location": c.location,
        "Instructor Name": p.instructor_name if p else None,
        "Instructor Email": p.instructor_email if p else None,
        "Enr Cpcty": c.enrollment_cap,
        "Tot Enrl": p.total_enrolled if p else None,
        "Wait Cap": c.waitlist_cap,
        "Wait Tot": p.total_waitlisted if p else None,
        "Tags": ", ".join(p.tag_names) if p else None,
    }


def make_filename(prefix: str = "classes") -> str:
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{ts}.xlsx"
