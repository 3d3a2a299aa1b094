"""User schemas."""

from pydantic import BaseModel, Field
from typing import Optional


class UserResponse(BaseModel):
    id: int
    name: str
    email: str


class UserStats(BaseModel):
    weak_topics: list[str] = Field(default_factory=list)
    mastery_level: Optional[str] = None
    test_date: Optional[str] = None


class DifficultyProgress(BaseModel):
    name: str
    completed: int = 0
    remaining: int = 0


class TopicProgress(BaseModel):
    name: str
    completion: int  # percent of tasks completed, 0-100


class PerformanceSummary(BaseModel):
    exam_type: str
    difficulty: list[DifficultyProgress]
    domains: list[TopicProgress]


class PerformanceResponse(BaseModel):
    success: bool = True
    data: Optional[PerformanceSummary] = None
