from io import BytesIO

import pandas as pd
import pytest

from roster_fixtures import roster_csv, roster_xlsx
from schelper.utils.roster_import import (
    RosterParseError, apply_header, level_tag, load_roster, parse_roster, to_int, to_str,
)


def by_num(parsed):
    return {item.class_data.class_num: item for item in parsed.items}


def test_load_xlsx_roster():
    parsed = load_roster(BytesIO(roster_xlsx()), "spring.xlsx")

    assert parsed.skipped_cancelled == 1
    assert parsed.skipped_malformed == 1
    classes = by_num(parsed)
    assert sorted(classes) == ["10001", "10002", "10003", "10006"]

    prog1 = classes["10001"]
    assert prog1.class_data.session == "Regular Academic Session"
    assert prog1.class_data.course_subject == "CMPSC"
    assert prog1.class_data.catalog_num == "000123"
    assert prog1.class_data.enrollment_cap == 40
    assert prog1.class_properties.days == ["Mon", "Wed", "Fri"]
    assert prog1.class_properties.start_time == "09:05"
    assert prog1.class_properties.end_time == "09:55"
    assert prog1.class_properties.room == "WSC 201"
    assert prog1.class_properties.instructor_email == "ada@psu.edu"
    assert prog1.class_properties.total_enrolled == 35
    assert prog1.class_properties.tags == ["100level"]


def test_pm_times_and_thursday_column():
    la = by_num(load_roster(BytesIO(roster_xlsx()), "spring.xlsx"))["10003"]
    assert la.class_properties.days == ["Tue", "Thu"]
    assert la.class_properties.start_time == "13:35"
    assert la.class_properties.end_time == "14:50"
    assert la.class_properties.tags == ["200level"]


def test_spreadsheet_time_cells_and_no_graduate_level_tag():
    seminar = by_num(load_roster(BytesIO(roster_xlsx()), "spring.xlsx"))["10006"]
    assert seminar.class_properties.start_time == "15:00"
    assert seminar.class_properties.end_time == "16:15"
    assert seminar.class_properties.tags == []


def test_csv_roster_matches_xlsx():
    from_csv = by_num(load_roster(BytesIO(roster_csv()), "spring.csv"))
    from_xlsx = by_num(load_roster(BytesIO(roster_xlsx()), "spring.xlsx"))
    assert sorted(from_csv) == sorted(from_xlsx)
    for num, item in from_xlsx.items():
        assert from_csv[num].class_properties.days == item.class_properties.days
        assert from_csv[num].class_properties.start_time == item.class_properties.start_time


def test_csv_with_quoted_commas_and_title_rows():
    text = (
        "Spring roster\nGenerated by registrar,,\n"
        "Class #,Title,M,W,Start,End\n"
        "20001,\"Writing, Research\",Y,,9:00 AM,9:50 AM\n"
    )
    parsed = load_roster(BytesIO(text.encode("utf-8")), "roster.csv")
    [item] = parsed.items
    assert item.class_data.title == "Writing, Research"
    assert item.class_properties.days == ["Mon"]
    assert item.class_properties.start_time == "09:00"


def test_missing_header_is_rejected():
    df = pd.DataFrame([["just", "some"], ["random", "cells"]], dtype=object)
    with pytest.raises(RosterParseError):
        apply_header(df)


def test_unreadable_file_is_rejected():
    with pytest.raises(RosterParseError):
        load_roster(BytesIO(b"not a spreadsheet"), "broken.xlsx")


def test_row_without_class_number_is_malformed():
    df = pd.DataFrame(
        [["Class #", "Title", "Start", "End"], [None, "Orphan", "9:00 AM", "10:00 AM"]],
        dtype=object,
    )
    parsed = parse_roster(apply_header(df))
    assert parsed.items == []
    assert parsed.skipped_malformed == 1


def test_end_before_start_is_malformed():
    df = pd.DataFrame(
        [["Class #", "Start", "End"], ["1", "10:00 AM", "9:00 AM"]],
        dtype=object,
    )
    assert parse_roster(apply_header(df)).skipped_malformed == 1


def test_blank_rows_are_ignored():
    df = pd.DataFrame(
        [["Class #", "Title"], [None, None], ["7", "Kept"]],
        dtype=object,
    )
    parsed = parse_roster(apply_header(df))
    assert [i.class_data.class_num for i in parsed.items] == ["7"]
    assert parsed.skipped_malformed == 0


@pytest.mark.parametrize("num, tag", [
    ("101", "100level"),
    ("240", "200level"),
    ("340L", "300level"),
    ("499", "400level"),
    ("580", None),
    ("15", None),
    ("", None),
    ("H", None),
])
def test_level_tag(num, tag):
    assert level_tag(num) == tag


def test_cell_helpers():
    assert to_str(10001.0) == "10001"
    assert to_str(float("nan")) is None
    assert to_str("  ") is None
    assert to_int("40") == 40
    assert to_int("n/a") is None
