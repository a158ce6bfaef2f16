from io import BytesIO

from openpyxl import load_workbook

from conftest import make_class
from schelper.models.class_data import ClassData
from schelper.utils.roster_import import load_roster


def test_create_and_get_class(client, create_class):
    created = create_class("10001", tags=["core", "core ", ""])
    assert created["class_data"]["class_num"] == "10001"
    assert created["class_properties"]["days"] == ["Mon"]
    assert created["class_properties"]["tags"] == ["core"]

    resp = client.get(f"/classes/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == created


def test_create_normalizes_days_and_times(client, auth_headers):
    body = make_class("10001", days=["Fri", "mon", "Fri"], start="9:05", end="9:55")
    resp = client.post("/classes", json=body, headers=auth_headers)
    assert resp.status_code == 201
    props = resp.json()["class_properties"]
    assert props["days"] == ["Mon", "Fri"]
    assert props["start_time"] == "09:05"


def test_create_rejects_bad_input(client, auth_headers):
    bad_time = make_class("1", start="9am")
    assert client.post("/classes", json=bad_time, headers=auth_headers).status_code == 422

    inverted = make_class("1", start="11:00", end="10:00")
    assert client.post("/classes", json=inverted, headers=auth_headers).status_code == 422

    bad_day = make_class("1", days=["Someday"])
    assert client.post("/classes", json=bad_day, headers=auth_headers).status_code == 422

    blank_num = make_class("  ")
    assert client.post("/classes", json=blank_num, headers=auth_headers).status_code == 422


def test_full_session_name_fits_column(client, create_class, auth_headers):
    session = "Regular Academic Session"
    assert ClassData.__table__.c.session.type.length >= len(session)
    created = create_class("10001", session=session)
    assert created["class_data"]["session"] == session

    resp = client.get("/classes", params={"session": session})
    assert [c["id"] for c in resp.json()] == [created["id"]]


def test_overlong_identifiers_are_rejected(client, auth_headers):
    body = make_class("10001", session="S" * 101)
    assert client.post("/classes", json=body, headers=auth_headers).status_code == 422

    created = client.post("/classes", json=make_class("10002"), headers=auth_headers).json()
    resp = client.put(
        f"/classes/{created['id']}",
        json={"class_data": {"section": "X" * 51}},
        headers=auth_headers,
    )
    assert resp.status_code == 422


def test_duplicate_class_num_in_session(client, create_class, auth_headers):
    create_class("10001")
    resp = client.post("/classes", json=make_class("10001"), headers=auth_headers)
    assert resp.status_code == 400

    # same number in another session is fine
    create_class("10001", session="Summer")


def test_get_missing_class(client):
    assert client.get("/classes/999").status_code == 404


def test_list_filters_by_tag_and_session(client, create_class):
    create_class("1", tags=["100level"])
    create_class("2", tags=["200level"])
    create_class("3", tags=["100level", "lab"], session="Summer")

    assert [c["class_data"]["class_num"] for c in client.get("/classes").json()] == ["1", "2", "3"]

    resp = client.get("/classes", params={"tags": ["100level"]})
    assert [c["class_data"]["class_num"] for c in resp.json()] == ["1", "3"]

    resp = client.get("/classes", params={"tags": ["200level", "lab"]})
    assert [c["class_data"]["class_num"] for c in resp.json()] == ["2", "3"]

    resp = client.get("/classes", params={"session": "Summer"})
    assert [c["class_data"]["class_num"] for c in resp.json()] == ["3"]


def test_update_properties_returns_conflicts(client, create_class, auth_headers):
    a = create_class("1", room="A", instructor_email="a@x")
    b = create_class("2", room="B", start="11:00", end="12:00", instructor_email="b@x")

    resp = client.put(
        f"/classes/{b['id']}",
        json={"class_properties": {"start_time": "09:30", "end_time": "10:30", "room": "A"}},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["item"]["class_properties"]["room"] == "A"
    assert body["item"]["class_properties"]["days"] == ["Mon"]
    assert len(body["conflicts"]) == 1
    conflict = body["conflicts"][0]
    assert {conflict["class1"]["id"], conflict["class2"]["id"]} == {a["id"], b["id"]}
    assert conflict["reasons"] == ["room"]
    assert conflict["overlap_start"] == "09:30"
    assert conflict["overlap_end"] == "10:00"


def test_update_class_data_and_tags(client, create_class, auth_headers):
    c = create_class("1", tags=["old"])
    resp = client.put(
        f"/classes/{c['id']}",
        json={"class_data": {"title": "Renamed"}, "class_properties": {"tags": ["new", "old"]}},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    item = resp.json()["item"]
    assert item["class_data"]["title"] == "Renamed"
    assert item["class_properties"]["tags"] == ["new", "old"]


def test_update_rejects_inverted_times(client, create_class, auth_headers):
    c = create_class("1", start="09:00", end="10:00")
    resp = client.put(
        f"/classes/{c['id']}",
        json={"class_properties": {"start_time": "10:30"}},
        headers=auth_headers,
    )
    assert resp.status_code == 422
    assert client.get(f"/classes/{c['id']}").json()["class_properties"]["start_time"] == "09:00"


def test_update_rejects_unknown_fields(client, create_class, auth_headers):
    c = create_class("1")
    resp = client.put(f"/classes/{c['id']}", json={"class_properties": {"colour": "red"}}, headers=auth_headers)
    assert resp.status_code == 422


def test_delete_class(client, create_class, auth_headers):
    c = create_class("1", tags=["core"])
    assert client.delete(f"/classes/{c['id']}", headers=auth_headers).status_code == 200
    assert client.get(f"/classes/{c['id']}").status_code == 404
    assert client.get("/tags/map").json() == {}
    assert client.delete(f"/classes/{c['id']}", headers=auth_headers).status_code == 404


def test_class_conflicts_endpoint(client, create_class):
    a = create_class("1", room="A")
    create_class("2", room="A", start="09:45", end="10:45", instructor_email="other@x")
    lone = create_class("3", room="Z", days=["Tue"], instructor_email="z@x")

    assert len(client.get(f"/classes/{a['id']}/conflicts").json()) == 1
    assert client.get(f"/classes/{lone['id']}/conflicts").json() == []
    assert client.get("/classes/999/conflicts").status_code == 404


def test_export_xlsx(client, create_class):
    create_class("10001", days=["Mon", "Thu"], tags=["core"])
    resp = client.get("/classes/export")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )

    ws = load_workbook(BytesIO(resp.content)).active
    header = [c.value for c in ws[1]]
    row = dict(zip(header, [c.value for c in ws[2]]))
    assert row["Class #"] == "10001"
    assert row["M"] == "Y"
    assert row["R"] == "Y"
    assert row["T"] is None
    assert row["Tags"] == "core"


def test_export_keeps_weekend_days_for_reimport(client, create_class):
    create_class("10001", days=["Sat", "Sun"])
    resp = client.get("/classes/export")

    ws = load_workbook(BytesIO(resp.content)).active
    row = dict(zip([c.value for c in ws[1]], [c.value for c in ws[2]]))
    assert (row["S"], row["U"], row["M"]) == ("Y", "Y", None)

    parsed = load_roster(BytesIO(resp.content), "classes.xlsx")
    assert parsed.items[0].class_properties.days == ["Sat", "Sun"]
