"""User profile routes: adaptive-learning stats + performance summary."""

import json
from datetime import date, timedelta
from fastapi import APIRouter, Depends, HTTPException
from server.database import get_db
from auth.utils import get_current_user
from plans.allocator import PRIORITY_ORDER
from users.schemas import (
    UserStats, PerformanceResponse, PerformanceSummary, DifficultyProgress, TopicProgress,
)

router = APIRouter()

SAMPLE_WEAK_TOPICS = ["Right triangles and trigonometry", "Nonlinear equations"]


def load_user_stats(db, user_id: int):
    """Return the user's UserStats or None when nothing has been recorded."""
    row = db.execute("SELECT * FROM user_stats WHERE user_id = ?", (user_id,)).fetchone()
    if not row:
        return None
    return UserStats(
        weak_topics=json.loads(row["weak_topics"] or "[]"),
        mastery_level=row["mastery_level"],
        test_date=row["test_date"],
    )


def _save_user_stats(db, user_id: int, stats: UserStats):
    db.execute(
        """INSERT OR REPLACE INTO user_stats (user_id, weak_topics, mastery_level, test_date, updated_at)
           VALUES (?, ?, ?, ?, datetime('now'))""",
        (user_id, json.dumps(stats.weak_topics), stats.mastery_level, stats.test_date),
    )
    db.commit()


@router.get("/users/me/stats", response_model=UserStats)
def get_stats(current_user: dict = Depends(get_current_user)):
    db = get_db()
    try:
        stats = load_user_stats(db, current_user["id"])
    finally:
        db.close()
    if stats is None:
        raise HTTPException(status_code=404, detail="No stats recorded for this user")
    return stats


@router.put("/users/me/stats", response_model=UserStats)
def put_stats(body: UserStats, current_user: dict = Depends(get_current_user)):
    db = get_db()
    try:
        _save_user_stats(db, current_user["id"], body)
    finally:
        db.close()
    return body


@router.post("/users/me/stats/seed")
def seed_stats(current_user: dict = Depends(get_current_user)):
    """Write a sample stats record, handy for trying out adaptive plans."""
    stats = UserStats(
        weak_topics=SAMPLE_WEAK_TOPICS,
        mastery_level="Beginner",
        test_date=(date.today() + timedelta(days=30)).isoformat(),
    )
    db = get_db()
    try:
        _save_user_stats(db, current_user["id"], stats)
    finally:
        db.close()
    return {
        "success": True,
        "message": f"Sample stats for user {current_user['id']} have been created.",
        "stats": stats.model_dump(),
    }


@router.get("/users/me/performance", response_model=PerformanceResponse)
def get_performance(current_user: dict = Depends(get_current_user)):
    """Progress on the user's most recent plan, split by difficulty and topic."""
    db = get_db()
    try:
        test = db.execute(
            "SELECT * FROM tests WHERE user_id = ? ORDER BY created_at DESC, rowid DESC LIMIT 1",
            (current_user["id"],),
        ).fetchone()
        if not test:
            return PerformanceResponse(data=None)
        task_rows = db.execute(
            "SELECT topic_title, completed FROM plan_tasks WHERE test_id = ?", (test["id"],)
        ).fetchall()
    finally:
        db.close()

    topic_difficulty = {t["topic"]: t["difficulty"] for t in json.loads(test["topics"] or "[]")}
    by_difficulty = {d.value: DifficultyProgress(name=d.value) for d in reversed(PRIORITY_ORDER)}
    per_topic: dict[str, list[int]] = {}

    for row in task_rows:
        done = bool(row["completed"])
        counts = per_topic.setdefault(row["topic_title"], [0, 0])
        counts[0] += int(done)
        counts[1] += 1
        bucket = by_difficulty.get(topic_difficulty.get(row["topic_title"]))
        if bucket is None:
            continue
        if done:
            bucket.completed += 1
        else:
            bucket.remaining += 1

    domains = [
        TopicProgress(name=name, completion=round(100 * done / total))
        for name, (done, total) in per_topic.items()
    ]
    return PerformanceResponse(data=PerformanceSummary(
        exam_type=test["test_name"] or "Untitled Plan",
        difficulty=list(by_difficulty.values()),
        domains=domains,
    ))
