# peermentor/services/lifecycle.py
"""
Session Lifecycle Manager

Closed state machine for one mentee/mentor pairing:

    [none] --request/offer--> requested --accept--> active --end--> completed

Every transition validates all of its preconditions before writing anything,
commits its own unit of work, and hands back the notifications it wants sent
as a list of effects. Callers dispatch those effects after the commit, so a
failing notification can never undo a state change.

The "one active session per user" rule is enforced in layers. Accepting
row-locks both parties' users rows so activations sharing a user run one at a
time. A precondition read then produces a readable error, and a conditional
UPDATE refuses to activate a row while a conflicting active row exists for
either party in either role. Partial unique indexes on the sessions table
back this up for same-role duplicates.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, aliased

from peermentor.config import settings
from peermentor.models.session import (
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_REQUESTED,
    Session as SessionModel,
    SessionLog,
)
from peermentor.models.user import ROLE_MENTOR, User

logger = logging.getLogger(__name__)


# =====================================
# ERRORS
# =====================================

class LifecycleError(Exception):
    """Base class for every rejected transition."""
    kind = "LifecycleError"
    default_message = "Session transition rejected"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFound(LifecycleError):
    kind = "NotFound"
    default_message = "Session not found"


class Forbidden(LifecycleError):
    kind = "Forbidden"
    default_message = "Not authorized for this session"


class InvalidState(LifecycleError):
    kind = "InvalidState"
    default_message = "Session is not in a state that allows this action"


class InvalidTarget(LifecycleError):
    kind = "InvalidTarget"
    default_message = "Invalid or unapproved mentor"


class MissingField(LifecycleError):
    kind = "MissingField"

    def __init__(self, field_name: str):
        self.field = field_name
        super().__init__(f"{field_name} is required")


class ConflictActiveSession(LifecycleError):
    kind = "ConflictActiveSession"
    default_message = "An active session already exists for this user"


# =====================================
# RESULTS
# =====================================

@dataclass
class NotificationEffect:
    """A notification to create once the transition has committed."""
    user_id: int
    event_type: str
    title: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TransitionResult:
    session: SessionModel
    effects: List[NotificationEffect] = field(default_factory=list)


# =====================================
# TIME HELPERS
# =====================================

def utcnow() -> datetime:
    """Naive UTC timestamp, the form TIMESTAMP columns hand back."""
    return datetime.now(UTC).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(UTC).replace(tzinfo=None)
    return value


def compute_duration_minutes(started_at: Optional[datetime], ended_at: Optional[datetime]) -> int:
    """Whole minutes between start and end, floored, never negative."""
    if started_at is None or ended_at is None:
        return 0
    elapsed = (to_naive_utc(ended_at) - to_naive_utc(started_at)).total_seconds()
    return max(0, math.floor(elapsed / 60))


def remaining_minutes(session: SessionModel, now: Optional[datetime] = None) -> Optional[int]:
    """
    Countdown shown to clients for an active session.

    Informational only: the server does not end sessions when this hits zero.
    """
    if session.status != STATUS_ACTIVE or session.started_at is None:
        return None
    planned = session.duration if session.duration is not None else settings.DEFAULT_SESSION_DURATION_MINUTES
    elapsed = compute_duration_minutes(session.started_at, now or utcnow())
    return max(0, planned - elapsed)


# =====================================
# AUTHORIZATION PREDICATES
# =====================================

def can_accept(caller_id: int, session: SessionModel) -> bool:
    """Only the mentor the session is addressed to may accept it."""
    return session.mentor_id is not None and session.mentor_id == caller_id


def can_end(caller_id: int, session: SessionModel) -> bool:
    """Only the mentee may end a session."""
    return session.mentee_id == caller_id


# =====================================
# QUERIES
# =====================================

def find_active_session(
    db: Session,
    user_id: int,
    *,
    exclude_session_id: Optional[int] = None,
) -> Optional[SessionModel]:
    """Active session where the user is either party, if any."""
    query = db.query(SessionModel).filter(
        SessionModel.status == STATUS_ACTIVE,
        or_(SessionModel.mentee_id == user_id, SessionModel.mentor_id == user_id),
    )
    if exclude_session_id is not None:
        query = query.filter(SessionModel.id != exclude_session_id)
    return query.first()


def _get_for_update(db: Session, session_id: int) -> Optional[SessionModel]:
    return db.query(SessionModel).filter(
        SessionModel.id == session_id
    ).with_for_update().first()


def _lock_parties(db: Session, user_ids) -> List[int]:
    """
    Row-lock the users rows of both parties, lowest id first.

    Two activations that share a user, in either role, queue up here, so the
    NOT EXISTS check of the later one sees the earlier one's commit.
    """
    ids = sorted({uid for uid in user_ids if uid is not None})
    db.query(User.id).filter(User.id.in_(ids)).order_by(User.id).with_for_update().all()
    return ids


# =====================================
# TRANSITIONS
# =====================================

def request_session(
    db: Session,
    *,
    mentee_id: int,
    mentor_id: int,
    description: Optional[str] = None,
    course_id: Optional[int] = None,
    preferred_time: Optional[datetime] = None,
) -> TransitionResult:
    """
    Create a session in ``requested`` state.

    A mentee may have several pending requests but only one active session,
    so only the active check gates a new request.

    Raises:
        InvalidTarget: mentor missing, not a mentor, unapproved, or the mentee themself
        ConflictActiveSession: the mentee already holds an active session
    """
    mentor = db.query(User).filter(User.id == mentor_id).first()
    if not mentor or mentor.role != ROLE_MENTOR or not mentor.approved:
        raise InvalidTarget()
    if mentor.id == mentee_id:
        raise InvalidTarget("Cannot request a session with yourself")

    if find_active_session(db, mentee_id) is not None:
        raise ConflictActiveSession(
            "You already have an active session. Please complete it before requesting a new one."
        )

    session = SessionModel(
        mentee_id=mentee_id,
        mentor_id=mentor_id,
        course_id=course_id,
        description=description,
        preferred_time=to_naive_utc(preferred_time),
        status=STATUS_REQUESTED,
        duration=settings.DEFAULT_SESSION_DURATION_MINUTES,
    )
    db.add(session)
    db.commit()
    db.refresh(session)

    logger.info(
        "Session %s requested (mentee_id=%s, mentor_id=%s)",
        session.id, mentee_id, mentor_id,
    )
    return TransitionResult(session=session)


def offer_session(
    db: Session,
    *,
    mentee_id: int,
    mentor_id: int,
    description: str,
    course_id: Optional[int] = None,
) -> TransitionResult:
    """Mentor-initiated ``requested`` session, created when answering a question."""
    session = SessionModel(
        mentee_id=mentee_id,
        mentor_id=mentor_id,
        course_id=course_id,
        description=description,
        status=STATUS_REQUESTED,
        duration=settings.DEFAULT_SESSION_DURATION_MINUTES,
    )
    db.add(session)
    db.commit()
    db.refresh(session)

    logger.info(
        "Session %s offered (mentee_id=%s, mentor_id=%s)",
        session.id, mentee_id, mentor_id,
    )
    return TransitionResult(session=session)


def _activate_if_clear(db: Session, session: SessionModel, start: datetime, now: datetime) -> int:
    """
    Move the row to ``active`` only while it is still ``requested`` and
    neither party holds another active session. Returns the rows updated.
    """
    other = aliased(SessionModel)
    parties = [session.mentee_id, session.mentor_id]
    conflicting = db.query(other.id).filter(
        other.status == STATUS_ACTIVE,
        other.id != session.id,
        or_(other.mentee_id.in_(parties), other.mentor_id.in_(parties)),
    ).exists()

    return db.query(SessionModel).filter(
        SessionModel.id == session.id,
        SessionModel.status == STATUS_REQUESTED,
        ~conflicting,
    ).update(
        {
            SessionModel.status: STATUS_ACTIVE,
            SessionModel.scheduled_time: start,
            SessionModel.started_at: start,
            SessionModel.updated_at: now,
        },
        synchronize_session=False,
    )


def _failed_activation_error(db: Session, session_id: int) -> LifecycleError:
    current = db.query(SessionModel).filter(SessionModel.id == session_id).first()
    if current is None:
        return NotFound()
    if current.status != STATUS_REQUESTED:
        return InvalidState("Session is not in requested status")
    return ConflictActiveSession("A participant already has an active session.")


def accept_session(
    db: Session,
    *,
    session_id: int,
    mentor_id: int,
    scheduled_time: Optional[datetime],
) -> TransitionResult:
    """
    Accept a requested session and start its clock at ``scheduled_time``.

    Raises:
        NotFound, MissingField, Forbidden, InvalidState, ConflictActiveSession
    """
    session = _get_for_update(db, session_id)
    if session is None:
        raise NotFound()
    if scheduled_time is None:
        raise MissingField("scheduledTime")
    if not can_accept(mentor_id, session):
        raise Forbidden("Unauthorized to accept this session")
    if session.status != STATUS_REQUESTED:
        raise InvalidState("Session is not in requested status")

    _lock_parties(db, [session.mentee_id, session.mentor_id])

    if find_active_session(db, mentor_id, exclude_session_id=session.id) is not None:
        raise ConflictActiveSession(
            "You already have an active session. Please complete it before accepting a new one."
        )
    if find_active_session(db, session.mentee_id, exclude_session_id=session.id) is not None:
        raise ConflictActiveSession("The student already has an active session.")

    start = to_naive_utc(scheduled_time)
    try:
        updated = _activate_if_clear(db, session, start, utcnow())
        if updated == 1:
            db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("Concurrent activation rejected for session %s", session_id)
        raise ConflictActiveSession("A participant already has an active session.")

    if updated != 1:
        db.rollback()
        raise _failed_activation_error(db, session_id)

    db.refresh(session)
    logger.info(
        "Session %s accepted by mentor %s (starts %s)",
        session.id, mentor_id, start.isoformat(),
    )

    effect = NotificationEffect(
        user_id=session.mentee_id,
        event_type="session_scheduled",
        title="Session Scheduled",
        message=(
            f"Your mentor has scheduled the session for {start:%Y-%m-%d %H:%M} UTC. "
            "Please be active at that time."
        ),
        data={"sessionId": session.id, "mentorId": session.mentor_id},
    )
    return TransitionResult(session=session, effects=[effect])


def end_session(
    db: Session,
    *,
    session_id: int,
    mentee_id: int,
    summary: Optional[str] = None,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """
    Complete an active session and append its log row.

    The recorded duration is the wall-clock time since ``started_at``, not
    the planned duration. Ending twice fails with ``InvalidState``.

    Raises:
        NotFound, Forbidden, InvalidState
    """
    session = _get_for_update(db, session_id)
    if session is None:
        raise NotFound()
    if not can_end(mentee_id, session):
        raise Forbidden("Only the student can end the session")
    if session.status != STATUS_ACTIVE:
        raise InvalidState("Session is not active")

    ended_at = to_naive_utc(now) or utcnow()
    duration = compute_duration_minutes(session.started_at, ended_at)

    try:
        updated = db.query(SessionModel).filter(
            SessionModel.id == session.id,
            SessionModel.status == STATUS_ACTIVE,
        ).update(
            {
                SessionModel.status: STATUS_COMPLETED,
                SessionModel.ended_at: ended_at,
                SessionModel.summary: summary or "",
                SessionModel.duration: duration,
                SessionModel.updated_at: ended_at,
            },
            synchronize_session=False,
        )
        if updated != 1:
            db.rollback()
            raise InvalidState("Session is not active")

        db.add(SessionLog(
            session_id=session.id,
            mentee_id=session.mentee_id,
            mentor_id=session.mentor_id,
            course_id=session.course_id,
            duration=duration,
            date=ended_at,
        ))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise InvalidState("Session has already been ended")

    db.refresh(session)
    logger.info("Session %s completed after %s minute(s)", session.id, duration)
    return TransitionResult(session=session)
