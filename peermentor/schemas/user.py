from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import CamelModel


class UserOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    role: str
    approved: bool
    bio: Optional[str] = None
    course_ids: List[int] = []
    created_at: Optional[datetime] = None


class MentorCoursesUpdate(CamelModel):
    course_ids: List[int]


class StudentOut(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    created_at: Optional[datetime] = None
    total_sessions: int = 0


class Pagination(CamelModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class StudentPage(CamelModel):
    students: List[StudentOut]
    pagination: Pagination


class MentorSummary(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    bio: Optional[str] = None
    course_ids: List[int] = []
    total_sessions: int = 0


class MatchRequest(CamelModel):
    course_id: Optional[int] = None
    tags: List[str] = []


class MatchResponse(CamelModel):
    mentors: List[MentorSummary]
    matching_tags: List[str]
    total_found: int


class ProfileUpdate(CamelModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    bio: Optional[str] = None


class MentorApplication(CamelModel):
    bio: Optional[str] = None
    course_ids: List[int] = []
