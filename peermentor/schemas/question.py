from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from .base import CamelModel

Priority = Literal["low", "medium", "high"]


class QuestionCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    course_id: Optional[int] = None
    tags: List[str] = []
    priority: Priority = "medium"


class QuestionUpdate(CamelModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    course_id: Optional[int] = None
    tags: Optional[List[str]] = None
    priority: Optional[Priority] = None
    status: Optional[Literal["open", "answered"]] = None


class QuestionOut(CamelModel):
    id: int
    mentee_id: int
    title: str
    description: Optional[str] = None
    course_id: Optional[int] = None
    course_name: Optional[str] = None
    tags: List[str] = []
    priority: str
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    mentee_first_name: Optional[str] = None
    mentee_last_name: Optional[str] = None


class AnswerRequest(CamelModel):
    answer: str = Field(..., min_length=1)
    offer_session: bool = False


class AnswerResponse(CamelModel):
    message: str
    session_offered: bool
    session_id: Optional[int] = None
