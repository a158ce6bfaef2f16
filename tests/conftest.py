import os

# must be set before schelper.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_TO_FILE"] = "0"

import pytest
from fastapi.testclient import TestClient

from schelper.database import Base, SessionLocal, engine
from schelper.main import app


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth_headers(client):
    client.post("/auth/register", json={"username": "scheduler", "password": "s3cret-pass"})
    resp = client.post("/auth/login", data={"username": "scheduler", "password": "s3cret-pass"})
    token = resp.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}


def make_class(
    class_num,
    title="Intro",
    days=("Mon",),
    start="09:00",
    end="10:00",
    room="ROOM 1",
    instructor_email="a@psu.edu",
    instructor_name="A Person",
    tags=(),
    session="Regular Academic Session",
):
    return {
        "class_data": {
            "class_num": class_num,
            "session": session,
            "course_subject": "CMPSC",
            "course_num": "131",
            "section": "001",
            "title": title,
        },
        "class_properties": {
            "start_time": start,
            "end_time": end,
            "days": list(days),
            "room": room,
            "instructor_email": instructor_email,
            "instructor_name": instructor_name,
            "tags": list(tags),
        },
    }


@pytest.fixture
def create_class(client, auth_headers):
    def _create(class_num, **kwargs):
        resp = client.post("/classes", json=make_class(class_num, **kwargs), headers=auth_headers)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _create
