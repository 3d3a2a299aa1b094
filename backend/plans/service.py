"""Plan generation: allocate study days, ask the AI for tasks, persist in one batch."""
from __future__ import annotations

import json
import logging
import secrets
from datetime import date
from typing import Callable, Optional

from pydantic import ValidationError

from brain.schemas import ExpertResource, GenerateStudyTasksInput, GenerateStudyTasksOutput
from brain.study_tasks import generate_study_tasks_for_topic
from plans.allocator import Topic, allocate_study_days
from plans.schemas import GeneratePlanRequest
from resources.catalog import resources_for_category

logger = logging.getLogger(__name__)

TaskGenerator = Callable[[GenerateStudyTasksInput], GenerateStudyTasksOutput]


class PlanNotFound(LookupError):
    pass


def new_plan_id() -> str:
    return secrets.token_hex(10)


def _expert_resources(rows: list[dict]) -> list[ExpertResource]:
    resources = []
    for row in rows:
        try:
            resources.append(ExpertResource(url=row["url"], description=row.get("description") or "", type=row["type"]))
        except ValidationError:
            logger.warning("Skipping resource %s: invalid url %r", row.get("id"), row.get("url"))
    return resources


def _check_plan_owner(db, user_id: int, plan_id: str):
    """Raise PlanNotFound when plan_id exists but belongs to someone else."""
    row = db.execute("SELECT user_id FROM tests WHERE id = ?", (plan_id,)).fetchone()
    if row and row["user_id"] != user_id:
        raise PlanNotFound(plan_id)


def save_plan_batch(db, user_id: int, plan_id: str, request: GeneratePlanRequest, plan_days: list[dict]):
    """Write the test row, its days and their tasks atomically.

    An existing plan with the same id (owned by the same user) has its days
    replaced.
    """
    topics_json = json.dumps([t.model_dump(mode="json") for t in request.topics])
    days_json = json.dumps(request.available_study_days)

    with db:
        _check_plan_owner(db, user_id, plan_id)
        existing = db.execute("SELECT 1 FROM tests WHERE id = ?", (plan_id,)).fetchone()
        if existing:
            db.execute("DELETE FROM plan_days WHERE test_id = ?", (plan_id,))
            db.execute(
                """UPDATE tests SET test_name = ?, test_date = ?, available_study_days = ?, topics = ?
                   WHERE id = ?""",
                (request.test_name, request.test_date.isoformat(), days_json, topics_json, plan_id),
            )
        else:
            db.execute(
                """INSERT INTO tests (id, user_id, test_name, test_date, available_study_days, topics)
                   VALUES (?, ?, ?, ?, ?, ?)""",
                (plan_id, user_id, request.test_name, request.test_date.isoformat(), days_json, topics_json),
            )

        for day in plan_days:
            cursor = db.execute(
                "INSERT INTO plan_days (test_id, day_date) VALUES (?, ?)", (plan_id, day["date"])
            )
            day_id = cursor.lastrowid
            db.executemany(
                """INSERT INTO plan_tasks (plan_day_id, test_id, topic_title, description, sort_order, completed)
                   VALUES (?, ?, ?, ?, ?, 0)""",
                [(day_id, plan_id, t["topic_title"], t["description"], i) for i, t in enumerate(day["tasks"])],
            )


def generate_and_save_study_plan(
    db,
    user_id: int,
    request: GeneratePlanRequest,
    today: Optional[date] = None,
    task_generator: Optional[TaskGenerator] = None,
) -> str:
    """Build and store a study plan, returning its id.

    Ownership of a reused test_id (PlanNotFound) and allocation errors
    (ScheduleError) surface before any AI call is made.
    """
    if request.test_id:
        _check_plan_owner(db, user_id, request.test_id)

    today = today or date.today()
    task_generator = task_generator or generate_study_tasks_for_topic
    topics = [Topic(name=t.topic, difficulty=t.difficulty) for t in request.topics]
    schedules = allocate_study_days(today, request.test_date, request.available_study_days, topics)

    logger.info("Querying resources for examType: %s", request.test_name)
    expert_resources = _expert_resources(resources_for_category(db, request.test_name))
    logger.info("Found %d resources.", len(expert_resources))

    plan_days = []
    for schedule in schedules:
        output = task_generator(GenerateStudyTasksInput(
            topic=schedule.topic,
            exam_type=request.test_name,
            study_dates=schedule.date_strings(),
            expert_resources=expert_resources or None,
        ))
        for day in output.study_days:
            plan_days.append({
                "date": day.date,
                "tasks": [{"topic_title": schedule.topic, "description": t.description} for t in day.tasks],
            })

    plan_id = request.test_id or new_plan_id()
    save_plan_batch(db, user_id, plan_id, request, plan_days)
    logger.info("Saved plan %s with %d day(s) for user %s", plan_id, len(plan_days), user_id)
    return plan_id


def _summary(db, row) -> dict:
    counts = db.execute(
        "SELECT COUNT(*) AS total, COALESCE(SUM(completed), 0) AS done FROM plan_tasks WHERE test_id = ?",
        (row["id"],),
    ).fetchone()
    return {
        "id": row["id"],
        "test_name": row["test_name"],
        "exam_type": row["test_name"] or "Untitled Plan",
        "test_date": row["test_date"],
        "created_at": row["created_at"],
        "task_count": counts["total"],
        "done_count": counts["done"],
    }


def list_plans(db, user_id: int) -> list[dict]:
    rows = db.execute(
        "SELECT * FROM tests WHERE user_id = ? ORDER BY created_at DESC, rowid DESC", (user_id,)
    ).fetchall()
    return [_summary(db, row) for row in rows]


def load_plan(db, user_id: int, plan_id: str) -> dict:
    row = db.execute(
        "SELECT * FROM tests WHERE id = ? AND user_id = ?", (plan_id, user_id)
    ).fetchone()
    if not row:
        raise PlanNotFound(plan_id)

    day_rows = db.execute(
        "SELECT * FROM plan_days WHERE test_id = ? ORDER BY day_date, id", (plan_id,)
    ).fetchall()
    task_rows = db.execute(
        "SELECT * FROM plan_tasks WHERE test_id = ? ORDER BY plan_day_id, sort_order, id", (plan_id,)
    ).fetchall()

    tasks_by_day: dict[int, list[dict]] = {}
    for t in task_rows:
        tasks_by_day.setdefault(t["plan_day_id"], []).append({
            "id": t["id"],
            "topic_title": t["topic_title"],
            "description": t["description"],
            "completed": bool(t["completed"]),
        })

    plan = _summary(db, row)
    plan["available_study_days"] = json.loads(row["available_study_days"] or "[]")
    plan["topics"] = json.loads(row["topics"] or "[]")
    plan["days"] = [
        {"id": d["id"], "date": d["day_date"], "tasks": tasks_by_day.get(d["id"], [])}
        for d in day_rows
    ]
    return plan


def set_task_completed(db, user_id: int, plan_id: str, task_id: int, completed: bool):
    cursor = db.execute(
        """UPDATE plan_tasks SET completed = ?
           WHERE id = ? AND test_id = (SELECT id FROM tests WHERE id = ? AND user_id = ?)""",
        (1 if completed else 0, task_id, plan_id, user_id),
    )
    db.commit()
    if cursor.rowcount == 0:
        raise PlanNotFound(plan_id)


def delete_plan(db, user_id: int, plan_id: str):
    cursor = db.execute("DELETE FROM tests WHERE id = ? AND user_id = ?", (plan_id, user_id))
    db.commit()
    if cursor.rowcount == 0:
        raise PlanNotFound(plan_id)
