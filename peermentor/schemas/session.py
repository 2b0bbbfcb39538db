from datetime import datetime
from typing import Optional

from .base import CamelModel


# ======================
# SESSION REQUEST MODELS
# ======================

class SessionRequestCreate(CamelModel):
    mentor_id: int
    course_id: Optional[int] = None
    description: Optional[str] = None
    preferred_time: Optional[datetime] = None


class SessionAccept(CamelModel):
    # Optional here so a missing value surfaces as MissingField, not a 422.
    scheduled_time: Optional[datetime] = None


class SessionEnd(CamelModel):
    summary: Optional[str] = None


# ======================
# SESSION RESPONSE MODELS
# ======================

class SessionResponse(CamelModel):
    id: int
    mentee_id: int
    mentor_id: Optional[int] = None
    course_id: Optional[int] = None
    description: Optional[str] = None
    preferred_time: Optional[datetime] = None
    scheduled_time: Optional[datetime] = None
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    status: str
    duration: Optional[int] = None
    summary: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SessionActionResponse(CamelModel):
    message: str
    session: SessionResponse


class ActiveSessionResponse(SessionResponse):
    course_name: Optional[str] = None
    user_role: str
    other_user: Optional[str] = None
    mentee_name: Optional[str] = None
    mentor_name: Optional[str] = None
    remaining_minutes: Optional[int] = None


class SessionLogResponse(SessionResponse):
    course_name: Optional[str] = None
    user_role: str
    other_user: Optional[str] = None


class PendingSessionResponse(SessionResponse):
    course_name: Optional[str] = None
    mentee_name: Optional[str] = None
