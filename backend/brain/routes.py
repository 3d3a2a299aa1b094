"""Brain routes: study path roadmap, syllabus upload, resource rationale, study session."""

import logging
from datetime import date
from typing import List, Optional

import anthropic
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from server.config import MAX_UPLOAD_BYTES
from server.database import get_db
from auth.utils import get_current_user
from brain.client import AIUnavailableError, AIResponseError
from brain.rationale import explain_resource_matching_rationale
from brain.schemas import (
    StudyPathRequest, WeeklyStudyPathModule, RationaleRequest, RationaleResponse,
    StudySessionRequest, StudySession,
)
from brain.session import generate_study_session
from brain.study_path import analyze_syllabus_and_match_resources
from brain.syllabus_parser import extract_syllabus_text
from resources.catalog import load_syllabus_data, resources_for_category
from users.routes import load_user_stats

logger = logging.getLogger(__name__)

router = APIRouter()

SESSION_FAILED = (
    "The AI failed to generate a study session. The model may be temporarily "
    "overloaded. Please try again in a moment."
)
RATIONALE_FAILED = "The AI failed to explain this resource. Please try again in a moment."


def _run_study_path(body: StudyPathRequest, user_id: int) -> list[dict]:
    db = get_db()
    try:
        resources = resources_for_category(db, body.exam_type)
        stats = load_user_stats(db, user_id)
    finally:
        db.close()

    try:
        return analyze_syllabus_and_match_resources(body, resources, stats, load_syllabus_data())
    except AIUnavailableError:
        raise HTTPException(status_code=400, detail="AI features require an API key")


@router.post("/study-path", response_model=List[WeeklyStudyPathModule])
def study_path(body: StudyPathRequest, current_user: dict = Depends(get_current_user)):
    return _run_study_path(body, current_user["id"])


@router.post("/study-path/upload", response_model=List[WeeklyStudyPathModule])
async def study_path_from_pdf(
    exam_type: str = Form(...),
    test_date: Optional[date] = Form(default=None),
    custom_instructions: Optional[str] = Form(default=None),
    file: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
):
    # One byte over the limit is enough to reject
    content = await file.read(MAX_UPLOAD_BYTES + 1)
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"Syllabus PDF is larger than the {MAX_UPLOAD_BYTES} byte limit",
        )

    # PDF parsing and the AI call are blocking; keep them off the event loop
    try:
        syllabus_text = await run_in_threadpool(extract_syllabus_text, content)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    body = StudyPathRequest(
        exam_type=exam_type,
        syllabus_text=syllabus_text,
        test_date=test_date,
        custom_instructions=custom_instructions,
    )
    return await run_in_threadpool(_run_study_path, body, current_user["id"])


@router.post("/explain-rationale", response_model=RationaleResponse)
def explain_rationale(body: RationaleRequest, current_user: dict = Depends(get_current_user)):
    try:
        return explain_resource_matching_rationale(body)
    except AIUnavailableError:
        raise HTTPException(status_code=400, detail="AI features require an API key")
    except AIResponseError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except anthropic.APIError:
        logger.exception("AI call failed in explain_rationale for user %s", current_user["id"])
        raise HTTPException(status_code=502, detail=RATIONALE_FAILED)


@router.post("/study-session", response_model=StudySession)
def study_session(body: StudySessionRequest, current_user: dict = Depends(get_current_user)):
    try:
        return generate_study_session(body)
    except AIUnavailableError:
        raise HTTPException(status_code=400, detail="AI features require an API key")
    except AIResponseError:
        raise HTTPException(status_code=502, detail=SESSION_FAILED)
    except anthropic.APIError:
        logger.exception("AI call failed in study_session for user %s", current_user["id"])
        raise HTTPException(status_code=502, detail=SESSION_FAILED)
