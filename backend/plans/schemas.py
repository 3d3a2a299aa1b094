"""Study plan schemas."""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from plans.allocator import Difficulty, WEEKDAY_NAMES


class TopicInput(BaseModel):
    topic: str = Field(min_length=1)
    difficulty: Difficulty


class PlanWindow(BaseModel):
    test_date: date
    available_study_days: list[str] = Field(min_length=1)
    topics: list[TopicInput] = Field(default_factory=list)

    @field_validator("available_study_days")
    @classmethod
    def _known_weekdays(cls, days: list[str]) -> list[str]:
        known = {name.lower(): name for name in WEEKDAY_NAMES}
        normalized = []
        for day in days:
            name = known.get(day.strip().lower())
            if name is None:
                raise ValueError(f"Unknown weekday: {day!r}")
            normalized.append(name)
        return normalized


class GeneratePlanRequest(PlanWindow):
    test_id: Optional[str] = None
    test_name: str = Field(min_length=1)


class TopicScheduleResponse(BaseModel):
    topic: str
    dates: list[str]


class PreviewResponse(BaseModel):
    study_dates: list[str]
    schedules: list[TopicScheduleResponse]


class GeneratePlanResponse(BaseModel):
    success: bool
    plan_id: str


class PlanTaskResponse(BaseModel):
    id: int
    topic_title: str
    description: str
    completed: bool


class PlanDayResponse(BaseModel):
    id: int
    date: str
    tasks: list[PlanTaskResponse]


class PlanSummaryResponse(BaseModel):
    id: str
    test_name: str
    exam_type: str
    test_date: str
    created_at: Optional[str] = None
    task_count: int = 0
    done_count: int = 0


class PlanDetailResponse(PlanSummaryResponse):
    available_study_days: list[str]
    topics: list[TopicInput]
    days: list[PlanDayResponse]
