# peermentor/api/session.py
"""
Session API

Thin HTTP layer over the session lifecycle service: request, accept and end
transitions plus the read-only projections the dashboard polls.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from peermentor.database import get_db
from peermentor.models.session import (
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_REQUESTED,
    Session as SessionModel,
)
from peermentor.models.user import User
from peermentor.schemas.session import (
    ActiveSessionResponse,
    PendingSessionResponse,
    SessionAccept,
    SessionActionResponse,
    SessionEnd,
    SessionLogResponse,
    SessionRequestCreate,
    SessionResponse,
)
from peermentor.services import lifecycle, notification_service
from peermentor.utils.security import get_current_user, require_mentor

router = APIRouter(prefix="/sessions", tags=["sessions"])

STATUS_CODE_BY_KIND = {
    lifecycle.NotFound.kind: 404,
    lifecycle.Forbidden.kind: 403,
    lifecycle.InvalidState.kind: 409,
    lifecycle.InvalidTarget.kind: 400,
    lifecycle.MissingField.kind: 400,
    lifecycle.ConflictActiveSession.kind: 409,
}


# ======================
# HELPER FUNCTIONS
# ======================
def lifecycle_http_error(exc: lifecycle.LifecycleError) -> HTTPException:
    """Translate a rejected transition into a client-facing error."""
    return HTTPException(
        status_code=STATUS_CODE_BY_KIND.get(exc.kind, 400),
        detail={"error": exc.kind, "message": exc.message},
    )


def _name(user: Optional[User]) -> Optional[str]:
    return user.full_name if user else None


def _other_user(session: SessionModel, current_user_id: int) -> Optional[str]:
    if session.mentee_id == current_user_id:
        return _name(session.mentor)
    return _name(session.mentee)


def _user_role(session: SessionModel, current_user_id: int) -> str:
    return "mentee" if session.mentee_id == current_user_id else "mentor"


def _course_name(session: SessionModel) -> Optional[str]:
    return session.course.name if session.course else None


# ======================
# TRANSITIONS
# ======================
@router.post("/request", response_model=SessionActionResponse, status_code=201)
def request_session(
    payload: SessionRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Request a mentorship session with an approved mentor."""
    try:
        result = lifecycle.request_session(
            db,
            mentee_id=current_user.id,
            mentor_id=payload.mentor_id,
            description=payload.description,
            course_id=payload.course_id,
            preferred_time=payload.preferred_time,
        )
    except lifecycle.LifecycleError as exc:
        raise lifecycle_http_error(exc)

    notification_service.dispatch_effects(db, result.effects)
    return SessionActionResponse(
        message="Session requested successfully",
        session=SessionResponse.model_validate(result.session),
    )


@router.post("/{session_id}/accept", response_model=SessionActionResponse)
def accept_session(
    session_id: int,
    payload: SessionAccept,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Accept a requested session; the clock starts at the scheduled time."""
    try:
        result = lifecycle.accept_session(
            db,
            session_id=session_id,
            mentor_id=current_user.id,
            scheduled_time=payload.scheduled_time,
        )
    except lifecycle.LifecycleError as exc:
        raise lifecycle_http_error(exc)

    notification_service.dispatch_effects(db, result.effects)
    return SessionActionResponse(
        message="Session accepted and scheduled successfully",
        session=SessionResponse.model_validate(result.session),
    )


@router.post("/{session_id}/end", response_model=SessionActionResponse)
def end_session(
    session_id: int,
    payload: Optional[SessionEnd] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """End an active session. Only the mentee may do this."""
    try:
        result = lifecycle.end_session(
            db,
            session_id=session_id,
            mentee_id=current_user.id,
            summary=payload.summary if payload else None,
        )
    except lifecycle.LifecycleError as exc:
        raise lifecycle_http_error(exc)

    notification_service.dispatch_effects(db, result.effects)
    return SessionActionResponse(
        message="Session ended successfully",
        session=SessionResponse.model_validate(result.session),
    )


# ======================
# READ MODELS
# ======================
@router.get("/active", response_model=List[ActiveSessionResponse])
def get_active_sessions(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    sessions = db.query(SessionModel).filter(
        or_(SessionModel.mentee_id == current_user.id, SessionModel.mentor_id == current_user.id),
        SessionModel.status == STATUS_ACTIVE,
    ).order_by(SessionModel.started_at.desc()).all()

    now = lifecycle.utcnow()
    return [
        ActiveSessionResponse(
            **SessionResponse.model_validate(s).model_dump(),
            course_name=_course_name(s),
            user_role=_user_role(s, current_user.id),
            other_user=_other_user(s, current_user.id),
            mentee_name=_name(s.mentee),
            mentor_name=_name(s.mentor),
            remaining_minutes=lifecycle.remaining_minutes(s, now),
        )
        for s in sessions
    ]


@router.get("/logs", response_model=List[SessionLogResponse])
def get_session_logs(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Completed sessions for the current user, most recent first."""
    sessions = db.query(SessionModel).filter(
        or_(SessionModel.mentee_id == current_user.id, SessionModel.mentor_id == current_user.id),
        SessionModel.status == STATUS_COMPLETED,
    ).order_by(
        SessionModel.ended_at.desc(),
        SessionModel.id.desc(),
    ).offset(offset).limit(limit).all()

    results = []
    for s in sessions:
        base = SessionResponse.model_validate(s).model_dump()
        if s.log is not None:
            base["duration"] = s.log.duration
        results.append(SessionLogResponse(
            **base,
            course_name=_course_name(s),
            user_role=_user_role(s, current_user.id),
            other_user=_other_user(s, current_user.id),
        ))
    return results


@router.get("/pending", response_model=List[PendingSessionResponse])
def get_pending_sessions(
    current_user: User = Depends(require_mentor),
    db: Session = Depends(get_db)
):
    """Requests waiting on the current mentor."""
    sessions = db.query(SessionModel).filter(
        SessionModel.mentor_id == current_user.id,
        SessionModel.status == STATUS_REQUESTED,
    ).order_by(
        SessionModel.created_at.desc(),
        SessionModel.id.desc(),
    ).all()

    return [
        PendingSessionResponse(
            **SessionResponse.model_validate(s).model_dump(),
            course_name=_course_name(s),
            mentee_name=_name(s.mentee),
        )
        for s in sessions
    ]
