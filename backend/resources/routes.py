"""Resource library routes."""

from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from server.database import get_db
from auth.utils import get_current_user
from resources.catalog import (
    EXAM_CATEGORIES, AP_CLASSES, load_resources_data, resources_for_category, seed_resources,
)
from resources.schemas import ResourceResponse, CategoriesResponse, SeedResponse

router = APIRouter()


@router.get("/resources/categories", response_model=CategoriesResponse)
def get_categories():
    return CategoriesResponse(exam_categories=EXAM_CATEGORIES, ap_classes=AP_CLASSES)


@router.get("/resources", response_model=List[ResourceResponse])
def list_resources(category: Optional[str] = None, current_user: dict = Depends(get_current_user)):
    db = get_db()
    try:
        if category:
            rows = resources_for_category(db, category)
        else:
            rows = [dict(r) for r in db.execute("SELECT * FROM resources ORDER BY category, id").fetchall()]
    finally:
        db.close()
    return [ResourceResponse(**r) for r in rows]


@router.post("/resources/seed", response_model=SeedResponse)
def seed(current_user: dict = Depends(get_current_user)):
    """Load the bundled resource library into the database (idempotent)."""
    resources = load_resources_data()
    if not resources:
        raise HTTPException(status_code=500, detail="No resources found in resources_data.json")

    db = get_db()
    try:
        count = seed_resources(db, resources)
    finally:
        db.close()
    return SeedResponse(success=True, count=count, message="Success! The database has been seeded.")
