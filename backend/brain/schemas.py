"""AI flow schemas: inputs we send, outputs we accept back from the model."""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, HttpUrl, conlist


# ─── Study tasks (per topic) ─────────────────────────────────

class ExpertResource(BaseModel):
    url: HttpUrl
    description: str
    type: str


class GenerateStudyTasksInput(BaseModel):
    topic: str
    exam_type: str
    study_dates: list[str]  # YYYY-MM-DD
    expert_resources: Optional[list[ExpertResource]] = None


class StudyTask(BaseModel):
    description: str = Field(min_length=1)


class DailyPlan(BaseModel):
    date: str
    tasks: list[StudyTask]


class GenerateStudyTasksOutput(BaseModel):
    study_days: list[DailyPlan]


# ─── Study path (syllabus analysis) ──────────────────────────

class StudyPathRequest(BaseModel):
    exam_type: str
    syllabus_text: Optional[str] = None
    test_date: Optional[date] = None
    custom_instructions: Optional[str] = None


class StudyPathModule(BaseModel):
    topic: str
    description: str
    link: str


class WeeklyStudyPathModule(BaseModel):
    week: str
    modules: list[StudyPathModule]


# ─── Resource rationale ──────────────────────────────────────

class RationaleRequest(BaseModel):
    topic: str
    resource_link: str


class RationaleResponse(BaseModel):
    rationale: str


# ─── Study session ───────────────────────────────────────────

class StudySessionRequest(BaseModel):
    topic: str
    exam: str
    minutes: int = Field(default=30, ge=5, le=240)


class PracticeQuestion(BaseModel):
    q: str
    options: conlist(str, min_length=4, max_length=4)
    answer: int = Field(ge=0, le=3)
    explanation: str


class StudySession(BaseModel):
    notes: str
    questions: conlist(PracticeQuestion, min_length=3, max_length=3)
