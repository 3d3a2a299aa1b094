"""Study plan routes: preview allocation, generate, list, view, complete tasks."""

import logging
from datetime import date
from typing import List

import anthropic
from fastapi import APIRouter, Depends, HTTPException
from server.database import get_db
from auth.utils import get_current_user
from brain.client import AIUnavailableError, AIResponseError
from plans.allocator import ScheduleError, Topic, split_study_dates, working_study_dates
from plans.schemas import (
    PlanWindow, GeneratePlanRequest, GeneratePlanResponse, PreviewResponse,
    PlanSummaryResponse, PlanDetailResponse,
)
from plans import service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/plans/preview", response_model=PreviewResponse)
def preview_plan(body: PlanWindow, current_user: dict = Depends(get_current_user)):
    """Day allocation only. No AI call, nothing stored."""
    today = date.today()
    topics = [Topic(name=t.topic, difficulty=t.difficulty) for t in body.topics]
    try:
        study_dates = working_study_dates(today, body.test_date, body.available_study_days)
        schedules = split_study_dates(study_dates, topics)
    except ScheduleError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return PreviewResponse(
        study_dates=[d.isoformat() for d in study_dates],
        schedules=[{"topic": s.topic, "dates": s.date_strings()} for s in schedules],
    )


@router.post("/plans", response_model=GeneratePlanResponse)
def generate_plan(body: GeneratePlanRequest, current_user: dict = Depends(get_current_user)):
    db = get_db()
    try:
        plan_id = service.generate_and_save_study_plan(db, current_user["id"], body)
    except ScheduleError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except AIUnavailableError:
        raise HTTPException(status_code=400, detail="AI features require an API key")
    except AIResponseError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except anthropic.APIError:
        logger.exception("AI call failed in generate_plan for user %s", current_user["id"])
        raise HTTPException(
            status_code=502,
            detail="The AI failed to generate study tasks. The model may be temporarily overloaded. "
                   "Please try again in a moment.",
        )
    except service.PlanNotFound:
        raise HTTPException(status_code=404, detail="Plan not found")
    except Exception:
        logger.exception("ERROR in generate_plan for user %s", current_user["id"])
        raise HTTPException(
            status_code=500,
            detail="An unexpected server error occurred. Could not generate study plan.",
        )
    finally:
        db.close()
    return GeneratePlanResponse(success=True, plan_id=plan_id)


@router.get("/plans", response_model=List[PlanSummaryResponse])
def get_plans(current_user: dict = Depends(get_current_user)):
    db = get_db()
    try:
        return service.list_plans(db, current_user["id"])
    finally:
        db.close()


@router.get("/plans/{plan_id}", response_model=PlanDetailResponse)
def get_plan(plan_id: str, current_user: dict = Depends(get_current_user)):
    db = get_db()
    try:
        return service.load_plan(db, current_user["id"], plan_id)
    except service.PlanNotFound:
        raise HTTPException(status_code=404, detail="Plan not found")
    finally:
        db.close()


def _set_completed(plan_id: str, task_id: int, user_id: int, completed: bool):
    db = get_db()
    try:
        service.set_task_completed(db, user_id, plan_id, task_id, completed)
    except service.PlanNotFound:
        raise HTTPException(status_code=404, detail="Task not found")
    finally:
        db.close()


@router.patch("/plans/{plan_id}/tasks/{task_id}/done")
def mark_task_done(plan_id: str, task_id: int, current_user: dict = Depends(get_current_user)):
    _set_completed(plan_id, task_id, current_user["id"], True)
    return {"message": "Task marked as done!"}


@router.patch("/plans/{plan_id}/tasks/{task_id}/undone")
def mark_task_undone(plan_id: str, task_id: int, current_user: dict = Depends(get_current_user)):
    _set_completed(plan_id, task_id, current_user["id"], False)
    return {"message": "Task marked as pending"}


@router.delete("/plans/{plan_id}")
def delete_plan(plan_id: str, current_user: dict = Depends(get_current_user)):
    db = get_db()
    try:
        service.delete_plan(db, current_user["id"], plan_id)
    except service.PlanNotFound:
        raise HTTPException(status_code=404, detail="Plan not found")
    finally:
        db.close()
    return {"message": "Plan deleted"}
