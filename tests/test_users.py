"""Tests for user stats and the performance summary."""


def test_stats_missing_until_set(auth_client):
    assert auth_client.get("/users/me/stats").status_code == 404

    body = {"weak_topics": ["Circles"], "mastery_level": "Intermediate", "test_date": "2030-05-01"}
    assert auth_client.put("/users/me/stats", json=body).status_code == 200
    assert auth_client.get("/users/me/stats").json() == body


def test_seed_stats(auth_client):
    response = auth_client.post("/users/me/stats/seed")
    assert response.status_code == 200
    assert response.json()["success"] is True

    stats = auth_client.get("/users/me/stats").json()
    assert stats["weak_topics"] == ["Right triangles and trigonometry", "Nonlinear equations"]
    assert stats["mastery_level"] == "Beginner"


def test_performance_without_plans(auth_client):
    response = auth_client.get("/users/me/performance")
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": None}


def test_performance_summarizes_latest_plan(auth_client, plan_body, fake_tasks):
    plan_id = auth_client.post("/plans", json=plan_body).json()["plan_id"]
    plan = auth_client.get(f"/plans/{plan_id}").json()
    # first day belongs to Geometry (Hard); finish both of its tasks
    for task in plan["days"][0]["tasks"]:
        auth_client.patch(f"/plans/{plan_id}/tasks/{task['id']}/done")

    data = auth_client.get("/users/me/performance").json()["data"]

    assert data["exam_type"] == "SAT"
    difficulty = {d["name"]: d for d in data["difficulty"]}
    assert [d["name"] for d in data["difficulty"]] == ["Easy", "Medium", "Hard"]
    assert difficulty["Hard"] == {"name": "Hard", "completed": 2, "remaining": 18}
    assert difficulty["Easy"] == {"name": "Easy", "completed": 0, "remaining": 10}
    assert difficulty["Medium"] == {"name": "Medium", "completed": 0, "remaining": 0}

    domains = {d["name"]: d["completion"] for d in data["domains"]}
    assert domains == {"Geometry": 10, "Algebra": 0}
