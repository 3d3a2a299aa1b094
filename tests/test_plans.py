"""Tests for plan generation, storage and the plans routes."""

import sqlite3
from datetime import date, timedelta

import anthropic
import httpx
import pytest

from brain.client import AIResponseError, AIUnavailableError
from plans import service
from plans.allocator import NoAvailableStudyDays
from plans.schemas import GeneratePlanRequest
from conftest import fake_task_generator, register

TODAY = date(2024, 1, 1)  # a Monday


def _request(**overrides):
    body = {
        "test_name": "SAT",
        "test_date": "2024-01-08",
        "available_study_days": ["monday", "Wednesday", "FRIDAY"],
        "topics": [
            {"topic": "Geometry", "difficulty": "Hard"},
            {"topic": "Algebra", "difficulty": "Easy"},
        ],
    }
    body.update(overrides)
    return GeneratePlanRequest.model_validate(body)


def _user_id(db):
    cursor = db.execute(
        "INSERT INTO users (name, email, password_hash) VALUES ('S', 's@example.com', '')"
    )
    db.commit()
    return cursor.lastrowid


# ─── service ─────────────────────────────────────────────────

def test_weekday_names_are_normalized():
    assert _request().available_study_days == ["Monday", "Wednesday", "Friday"]


def test_unknown_weekday_rejected():
    with pytest.raises(ValueError):
        _request(available_study_days=["Funday"])


def test_generate_and_save_persists_every_day(db):
    user_id = _user_id(db)
    calls = []

    def generator(data):
        calls.append(data)
        return fake_task_generator(data)

    plan_id = service.generate_and_save_study_plan(db, user_id, _request(), today=TODAY, task_generator=generator)

    assert [c.topic for c in calls] == ["Geometry", "Algebra"]
    assert calls[0].study_dates == ["2024-01-01", "2024-01-03", "2024-01-05"]
    assert calls[1].study_dates == ["2024-01-08"]
    assert calls[0].expert_resources is None

    plan = service.load_plan(db, user_id, plan_id)
    assert [d["date"] for d in plan["days"]] == ["2024-01-01", "2024-01-03", "2024-01-05", "2024-01-08"]
    assert plan["days"][0]["tasks"][0]["topic_title"] == "Geometry"
    assert plan["days"][-1]["tasks"][0]["topic_title"] == "Algebra"
    assert all(not t["completed"] for d in plan["days"] for t in d["tasks"])
    assert plan["task_count"] == 8
    assert plan["available_study_days"] == ["Monday", "Wednesday", "Friday"]


def test_expert_resources_passed_to_generator(db):
    user_id = _user_id(db)
    db.execute(
        "INSERT INTO resources (id, category, title, url, description, type) VALUES (?, ?, ?, ?, ?, ?)",
        ("sat-1", "SAT", "Khan", "https://www.khanacademy.org/test-prep/digital-sat", "Official prep", "practice"),
    )
    db.execute(
        "INSERT INTO resources (id, category, title, url, description, type) VALUES (?, ?, ?, ?, ?, ?)",
        ("sat-bad", "SAT", "Broken", "not a url", "", "guide"),
    )
    db.commit()
    seen = []

    def generator(data):
        seen.append(data.expert_resources)
        return fake_task_generator(data)

    service.generate_and_save_study_plan(db, user_id, _request(), today=TODAY, task_generator=generator)

    assert len(seen[0]) == 1
    assert str(seen[0][0].url).startswith("https://www.khanacademy.org")


def test_allocation_error_raised_before_any_ai_call(db):
    user_id = _user_id(db)

    def generator(data):
        raise AssertionError("generator should not be called")

    with pytest.raises(NoAvailableStudyDays):
        service.generate_and_save_study_plan(
            db, user_id, _request(test_date="2024-01-02", available_study_days=["Sunday"]),
            today=TODAY, task_generator=generator,
        )
    assert db.execute("SELECT COUNT(*) FROM tests").fetchone()[0] == 0


def test_failed_generation_writes_nothing(db):
    user_id = _user_id(db)
    calls = []

    def generator(data):
        calls.append(data.topic)
        if len(calls) == 2:
            raise AIResponseError("AI failed to generate study tasks.")
        return fake_task_generator(data)

    with pytest.raises(AIResponseError):
        service.generate_and_save_study_plan(db, user_id, _request(), today=TODAY, task_generator=generator)

    assert db.execute("SELECT COUNT(*) FROM tests").fetchone()[0] == 0
    assert db.execute("SELECT COUNT(*) FROM plan_tasks").fetchone()[0] == 0


def test_regenerating_with_same_id_replaces_days(db):
    user_id = _user_id(db)
    plan_id = service.generate_and_save_study_plan(
        db, user_id, _request(), today=TODAY, task_generator=fake_task_generator
    )
    service.generate_and_save_study_plan(
        db, user_id,
        _request(test_id=plan_id, topics=[{"topic": "Reading", "difficulty": "Medium"}]),
        today=TODAY, task_generator=fake_task_generator,
    )

    plan = service.load_plan(db, user_id, plan_id)
    assert {t["topic_title"] for d in plan["days"] for t in d["tasks"]} == {"Reading"}
    assert len(plan["days"]) == 4
    assert db.execute("SELECT COUNT(*) FROM tests").fetchone()[0] == 1


def test_failed_batch_rolls_back(db):
    user_id = _user_id(db)
    plan_days = [
        {"date": "2024-01-01", "tasks": [{"topic_title": "Geometry", "description": "ok"}]},
        {"date": "2024-01-03", "tasks": [{"topic_title": "Geometry", "description": None}]},
    ]
    with pytest.raises(sqlite3.IntegrityError):
        service.save_plan_batch(db, user_id, "plan-x", _request(), plan_days)

    assert db.execute("SELECT COUNT(*) FROM tests").fetchone()[0] == 0
    assert db.execute("SELECT COUNT(*) FROM plan_days").fetchone()[0] == 0


def test_load_plan_of_someone_else_is_not_found(db):
    owner = _user_id(db)
    plan_id = service.generate_and_save_study_plan(
        db, owner, _request(), today=TODAY, task_generator=fake_task_generator
    )
    with pytest.raises(service.PlanNotFound):
        service.load_plan(db, owner + 1, plan_id)


def test_foreign_test_id_rejected_before_any_ai_call(db):
    owner = _user_id(db)
    plan_id = service.generate_and_save_study_plan(
        db, owner, _request(), today=TODAY, task_generator=fake_task_generator
    )
    intruder = db.execute(
        "INSERT INTO users (name, email, password_hash) VALUES ('I', 'i@example.com', '')"
    ).lastrowid
    db.commit()
    calls = []

    def generator(data):
        calls.append(data.topic)
        return fake_task_generator(data)

    with pytest.raises(service.PlanNotFound):
        service.generate_and_save_study_plan(
            db, intruder, _request(test_id=plan_id), today=TODAY, task_generator=generator
        )
    assert calls == []


def test_batch_write_still_checks_owner(db):
    owner = _user_id(db)
    plan_id = service.generate_and_save_study_plan(
        db, owner, _request(), today=TODAY, task_generator=fake_task_generator
    )
    with pytest.raises(service.PlanNotFound):
        service.save_plan_batch(db, owner + 1, plan_id, _request(), [])
    assert len(service.load_plan(db, owner, plan_id)["days"]) == 4


# ─── routes ──────────────────────────────────────────────────

def test_preview_returns_allocation(auth_client, plan_body):
    response = auth_client.post("/plans/preview", json=plan_body)

    assert response.status_code == 200
    data = response.json()
    assert len(data["study_dates"]) == 15
    assert [s["topic"] for s in data["schedules"]] == ["Geometry", "Algebra"]
    assert [len(s["dates"]) for s in data["schedules"]] == [10, 5]


def test_preview_rejects_past_test_date(auth_client, plan_body):
    plan_body["test_date"] = date.today().isoformat()
    response = auth_client.post("/plans/preview", json=plan_body)
    assert response.status_code == 400
    assert response.json()["detail"] == "Test date must be in the future."


def test_preview_rejects_unknown_weekday(auth_client, plan_body):
    plan_body["available_study_days"] = ["Caturday"]
    assert auth_client.post("/plans/preview", json=plan_body).status_code == 422


def test_plans_require_login(client, plan_body):
    assert client.post("/plans", json=plan_body).status_code == 401
    assert client.get("/plans").status_code == 401


def test_generate_list_view_complete_delete(auth_client, plan_body, fake_tasks):
    response = auth_client.post("/plans", json=plan_body)
    assert response.status_code == 200, response.text
    plan_id = response.json()["plan_id"]

    plans = auth_client.get("/plans").json()
    assert [p["id"] for p in plans] == [plan_id]
    assert plans[0]["exam_type"] == "SAT"
    assert plans[0]["task_count"] == 30

    plan = auth_client.get(f"/plans/{plan_id}").json()
    dates = [d["date"] for d in plan["days"]]
    assert dates == sorted(dates)
    assert dates[0] == date.today().isoformat()
    task_id = plan["days"][0]["tasks"][0]["id"]

    done = auth_client.patch(f"/plans/{plan_id}/tasks/{task_id}/done")
    assert done.json() == {"message": "Task marked as done!"}
    assert auth_client.get("/plans").json()[0]["done_count"] == 1

    undone = auth_client.patch(f"/plans/{plan_id}/tasks/{task_id}/undone")
    assert undone.json() == {"message": "Task marked as pending"}
    assert auth_client.get("/plans").json()[0]["done_count"] == 0

    assert auth_client.delete(f"/plans/{plan_id}").json() == {"message": "Plan deleted"}
    assert auth_client.get(f"/plans/{plan_id}").status_code == 404
    assert auth_client.get("/plans").json() == []


def test_generate_with_no_study_days_is_bad_request(auth_client, plan_body, fake_tasks):
    plan_body["test_date"] = (date.today() + timedelta(days=1)).isoformat()
    tomorrow = date.today() + timedelta(days=1)
    missing = [n for i, n in enumerate(
        ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
    ) if i not in (date.today().weekday(), tomorrow.weekday())]
    plan_body["available_study_days"] = missing[:1]

    response = auth_client.post("/plans", json=plan_body)
    assert response.status_code == 400
    assert response.json()["detail"] == "No available study days found between now and the test date."


def test_generate_ai_failure_is_bad_gateway(auth_client, plan_body, monkeypatch):
    def broken(data):
        raise AIResponseError("AI failed to generate study tasks.")

    monkeypatch.setattr("plans.service.generate_study_tasks_for_topic", broken)
    response = auth_client.post("/plans", json=plan_body)
    assert response.status_code == 502
    assert auth_client.get("/plans").json() == []


def test_generate_without_api_key(auth_client, plan_body, monkeypatch):
    def unavailable(data):
        raise AIUnavailableError("ANTHROPIC_API_KEY is not set")

    monkeypatch.setattr("plans.service.generate_study_tasks_for_topic", unavailable)
    response = auth_client.post("/plans", json=plan_body)
    assert response.status_code == 400
    assert response.json()["detail"] == "AI features require an API key"


def test_generate_unexpected_error_is_500(auth_client, plan_body, monkeypatch):
    def crash(data):
        raise KeyError("boom")

    monkeypatch.setattr("plans.service.generate_study_tasks_for_topic", crash)
    response = auth_client.post("/plans", json=plan_body)
    assert response.status_code == 500
    assert "Could not generate study plan" in response.json()["detail"]


def test_other_users_cannot_touch_a_plan(auth_client, other_client, plan_body, fake_tasks):
    plan_id = auth_client.post("/plans", json=plan_body).json()["plan_id"]
    task_id = auth_client.get(f"/plans/{plan_id}").json()["days"][0]["tasks"][0]["id"]

    assert other_client.get(f"/plans/{plan_id}").status_code == 404
    assert other_client.patch(f"/plans/{plan_id}/tasks/{task_id}/done").status_code == 404
    assert other_client.delete(f"/plans/{plan_id}").status_code == 404

    plan_body["test_id"] = plan_id
    assert other_client.post("/plans", json=plan_body).status_code == 404
    assert auth_client.get(f"/plans/{plan_id}").status_code == 200


def test_unknown_task_is_not_found(auth_client, plan_body, fake_tasks):
    plan_id = auth_client.post("/plans", json=plan_body).json()["plan_id"]
    response = auth_client.patch(f"/plans/{plan_id}/tasks/999999/done")
    assert response.status_code == 404
    assert response.json()["detail"] == "Task not found"


def test_plans_listed_newest_first(auth_client, plan_body, fake_tasks):
    first = auth_client.post("/plans", json=plan_body).json()["plan_id"]
    plan_body["test_name"] = "ACT"
    second = auth_client.post("/plans", json=plan_body).json()["plan_id"]

    assert [p["id"] for p in auth_client.get("/plans").json()] == [second, first]


def test_second_user_sees_only_own_plans(client, plan_body, fake_tasks):
    register(client)
    client.post("/plans", json=plan_body)
    client.cookies.clear()
    register(client, email="fresh@example.com")

    assert client.get("/plans").json() == []


def test_foreign_plan_id_costs_no_ai_calls(auth_client, other_client, plan_body, monkeypatch):
    calls = []

    def generator(data):
        calls.append(data.topic)
        return fake_task_generator(data)

    monkeypatch.setattr("plans.service.generate_study_tasks_for_topic", generator)
    plan_id = auth_client.post("/plans", json=plan_body).json()["plan_id"]
    calls.clear()

    plan_body["test_id"] = plan_id
    response = other_client.post("/plans", json=plan_body)

    assert response.status_code == 404
    assert calls == []


def test_generate_api_error_is_bad_gateway(auth_client, plan_body, monkeypatch):
    def overloaded(data):
        raise anthropic.APITimeoutError(request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))

    monkeypatch.setattr("plans.service.generate_study_tasks_for_topic", overloaded)
    response = auth_client.post("/plans", json=plan_body)

    assert response.status_code == 502
    assert "temporarily overloaded" in response.json()["detail"]
