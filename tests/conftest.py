"""Pytest bootstrap for project imports and a throwaway database."""

from pathlib import Path
import itertools
import os
import sys

# Settings are read at import time; point them at an in-memory database.
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("EMAIL_NOTIFICATIONS_ENABLED", "false")

# Ensure project root is on sys.path so `import peermentor` works
PROJECT_ROOT = Path(__file__).resolve().parents[1]
project_root_str = str(PROJECT_ROOT)
if project_root_str not in sys.path:
    sys.path.insert(0, project_root_str)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from peermentor import models
from peermentor.database import Base
from peermentor.models.user import ROLE_MENTEE, ROLE_MENTOR

_emails = itertools.count(1)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_user(db_session):
    def _make(role=ROLE_MENTEE, *, approved=True, first_name="Test", last_name="User", email=None):
        user = models.User(
            first_name=first_name,
            last_name=last_name,
            email=email or f"user{next(_emails)}@test.edu",
            password_hash="hash",
            role=role,
            approved=approved,
            is_active=True,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def mentee(make_user):
    return make_user(ROLE_MENTEE, first_name="Mia", last_name="Mentee")


@pytest.fixture
def mentor(make_user):
    return make_user(ROLE_MENTOR, first_name="Max", last_name="Mentor")


@pytest.fixture
def make_course(db_session):
    def _make(code="CS101", name="Intro to Programming"):
        course = models.Course(code=code, name=name)
        db_session.add(course)
        db_session.commit()
        db_session.refresh(course)
        return course
    return _make
