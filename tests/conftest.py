"""Shared fixtures: a throwaway SQLite database and API clients bound to it."""

from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

import server.database as database
from server import app
from brain.schemas import DailyPlan, GenerateStudyTasksOutput, StudyTask


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = str(tmp_path / "exambridge-test.db")
    monkeypatch.setattr(database, "DB_PATH", path)
    database.init_db()
    return path


@pytest.fixture
def db(db_path):
    conn = database.get_db()
    yield conn
    conn.close()


@pytest.fixture
def client(db_path):
    with TestClient(app) as c:
        yield c


def register(client, email="student@example.com", name="Student", password="secret123"):
    response = client.post("/auth/register", json={"name": name, "email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["user"]


@pytest.fixture
def auth_client(client):
    """Client carrying the session cookie of a freshly registered user."""
    register(client)
    return client


@pytest.fixture
def other_client(db_path):
    """A second, independently logged-in user."""
    c = TestClient(app)
    register(c, email="other@example.com", name="Other")
    return c


def fake_task_generator(data):
    """Stands in for the model: two tasks per requested date."""
    return GenerateStudyTasksOutput(study_days=[
        DailyPlan(date=d, tasks=[
            StudyTask(description=f"Review {data.topic} notes"),
            StudyTask(description=f"Do 10 {data.topic} practice problems"),
        ])
        for d in data.study_dates
    ])


@pytest.fixture
def fake_tasks(monkeypatch):
    monkeypatch.setattr("plans.service.generate_study_tasks_for_topic", fake_task_generator)
    return fake_task_generator


@pytest.fixture
def plan_body():
    return {
        "test_name": "SAT",
        "test_date": (date.today() + timedelta(days=14)).isoformat(),
        "available_study_days": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"],
        "topics": [
            {"topic": "Algebra", "difficulty": "Easy"},
            {"topic": "Geometry", "difficulty": "Hard"},
        ],
    }
