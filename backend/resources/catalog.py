"""Resource catalog: exam categories, bundled seed data, resource lookups."""
from __future__ import annotations

import json
import logging
import os

from server.config import DATA_DIR

logger = logging.getLogger(__name__)

EXAM_CATEGORIES = [
    "SAT",
    "ACT",
    "AP Classes",
]

# Matches the `category` field of resources_data.json
AP_CLASSES = [
    "AP Physics 1",
    "AP Physics C: Mechanics",
    "AP Physics C: Electricity & Magnetism",
    "AP Chemistry",
    "AP Calculus BC",
    "AP Biology",
    "AP U.S. History",
    "AP English Literature",
    "AP World History",
    "AP Statistics",
    "AP Computer Science A",
    "AP Microeconomics",
    "AP Macroeconomics",
]


def _read_json(filename: str) -> dict:
    with open(os.path.join(DATA_DIR, filename), "r", encoding="utf-8") as f:
        return json.load(f)


def load_resources_data() -> list[dict]:
    return _read_json("resources_data.json").get("resources", [])


def load_syllabus_data() -> dict:
    return _read_json("syllabus_data.json")


def resources_for_category(db, category: str) -> list[dict]:
    rows = db.execute(
        "SELECT * FROM resources WHERE category = ? ORDER BY id", (category,)
    ).fetchall()
    return [dict(r) for r in rows]


def seed_resources(db, resources: list[dict]) -> int:
    """Upsert resources keyed by their own id; entries without an id are skipped.

    Written in one transaction so a failed seed leaves the table untouched.
    """
    rows = []
    for resource in resources:
        if not resource.get("id"):
            logger.warning("Skipping resource with no id: %s", resource)
            continue
        rows.append((
            resource["id"],
            resource["category"],
            resource.get("title"),
            resource["url"],
            resource.get("description", ""),
            resource.get("type", "guide"),
        ))

    with db:
        db.executemany(
            """INSERT OR REPLACE INTO resources (id, category, title, url, description, type)
               VALUES (?, ?, ?, ?, ?, ?)""",
            rows,
        )
    logger.info("Seeded %d resources", len(rows))
    return len(rows)
