from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class CourseCreate(CamelModel):
    code: str = Field(..., min_length=1, max_length=20)
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None


class CourseOut(CamelModel):
    id: int
    code: str
    name: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
