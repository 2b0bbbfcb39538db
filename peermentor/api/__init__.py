# peermentor/api/__init__.py
# This file makes the api directory a Python package.

from . import admin
from . import auth
from . import course
from . import matching
from . import notification
from . import question
from . import session
from . import users

__all__ = [
    "admin",
    "auth",
    "course",
    "matching",
    "notification",
    "question",
    "session",
    "users",
]
