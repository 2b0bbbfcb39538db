# peermentor/schemas/__init__.py

# Auth schemas
from .auth import Token, TokenData, LoginRequest, RegisterRequest

# User schemas
from .user import (
    UserOut,
    MentorCoursesUpdate,
    ProfileUpdate,
    MentorApplication,
    StudentOut,
    StudentPage,
    MentorSummary,
    MatchRequest,
    MatchResponse,
)

# Course schemas
from .course import CourseCreate, CourseOut

__all__ = [
    "Token",
    "TokenData",
    "LoginRequest",
    "RegisterRequest",
    "UserOut",
    "MentorCoursesUpdate",
    "ProfileUpdate",
    "MentorApplication",
    "StudentOut",
    "StudentPage",
    "MentorSummary",
    "MatchRequest",
    "MatchResponse",
    "CourseCreate",
    "CourseOut",
]
