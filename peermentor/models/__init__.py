# peermentor/models/__init__.py
# Import models in dependency order
from .user import User
from .course import Course, MentorCourse
from .session import Session, SessionLog
from .question import Question
from .notification import Notification

__all__ = [
    "User",
    "Course",
    "MentorCourse",
    "Session",
    "SessionLog",
    "Question",
    "Notification",
]
