"""Resource schemas."""

from pydantic import BaseModel
from typing import Optional


class ResourceResponse(BaseModel):
    id: str
    category: str
    title: Optional[str] = None
    url: str
    description: str = ""
    type: str


class CategoriesResponse(BaseModel):
    exam_categories: list[str]
    ap_classes: list[str]


class SeedResponse(BaseModel):
    success: bool
    count: int
    message: str
