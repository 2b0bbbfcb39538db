from __future__ import annotations

from datetime import datetime, timedelta

import pytest

# Skip suite when FastAPI dependency is not present in local environment.
pytest.importorskip("fastapi")

from fastapi import HTTPException

from peermentor import models
from peermentor.api.session import (
    accept_session,
    end_session,
    get_active_sessions,
    get_pending_sessions,
    get_session_logs,
    lifecycle_http_error,
    request_session,
)
from peermentor.models.user import ROLE_MENTEE, ROLE_MENTOR
from peermentor.schemas.session import SessionAccept, SessionEnd, SessionRequestCreate
from peermentor.services import lifecycle, notification_service
from peermentor.utils.security import require_mentor

START = datetime(2026, 3, 2, 10, 0, 0)


def _request(db, mentee, mentor, **extra):
    payload = SessionRequestCreate(mentor_id=mentor.id, **extra)
    return request_session(payload=payload, current_user=mentee, db=db)


def _accept(db, mentor, session_id, when=START):
    return accept_session(
        session_id=session_id,
        payload=SessionAccept(scheduled_time=when),
        current_user=mentor,
        db=db,
    )


def test_request_route_returns_requested_session(db_session, mentee, mentor):
    response = _request(db_session, mentee, mentor, description="Graphs")

    assert response.message == "Session requested successfully"
    assert response.session.status == "requested"
    assert response.session.mentor_id == mentor.id
    body = response.model_dump(by_alias=True)
    assert body["session"]["menteeId"] == mentee.id
    assert body["session"]["duration"] == 45


def test_request_payload_accepts_camel_case():
    payload = SessionRequestCreate.model_validate(
        {"mentorId": 7, "courseId": 3, "preferredTime": "2026-03-02T10:00:00Z"}
    )
    assert payload.mentor_id == 7
    assert payload.course_id == 3
    assert payload.preferred_time.year == 2026


def test_request_unknown_mentor_maps_to_400(db_session, mentee):
    payload = SessionRequestCreate(mentor_id=999)
    with pytest.raises(HTTPException) as exc:
        request_session(payload=payload, current_user=mentee, db=db_session)

    assert exc.value.status_code == 400
    assert exc.value.detail["error"] == "InvalidTarget"


def test_accept_without_scheduled_time_maps_to_400(db_session, mentee, mentor):
    created = _request(db_session, mentee, mentor)

    with pytest.raises(HTTPException) as exc:
        accept_session(
            session_id=created.session.id,
            payload=SessionAccept(),
            current_user=mentor,
            db=db_session,
        )

    assert exc.value.status_code == 400
    assert exc.value.detail == {"error": "MissingField", "message": "scheduledTime is required"}


def test_accept_by_other_user_maps_to_403(db_session, mentee, mentor, make_user):
    created = _request(db_session, mentee, mentor)
    stranger = make_user(ROLE_MENTOR)

    with pytest.raises(HTTPException) as exc:
        _accept(db_session, stranger, created.session.id)
    assert exc.value.status_code == 403


def test_accept_notifies_mentee(db_session, mentee, mentor):
    created = _request(db_session, mentee, mentor)

    response = _accept(db_session, mentor, created.session.id)

    assert response.session.status == "active"
    assert response.session.started_at == START
    notifications = notification_service.list_user_notifications(db_session, user_id=mentee.id)
    assert len(notifications) == 1
    assert notifications[0].event_type == "session_scheduled"
    assert notifications[0].data["sessionId"] == created.session.id


def test_accept_succeeds_when_notification_write_fails(db_session, mentee, mentor, monkeypatch):
    created = _request(db_session, mentee, mentor)

    def _boom(*args, **kwargs):
        raise RuntimeError("notifications table unavailable")

    monkeypatch.setattr(notification_service, "create_notification", _boom)

    response = _accept(db_session, mentor, created.session.id)

    assert response.session.status == "active"
    assert db_session.query(models.Notification).count() == 0


def test_accept_conflict_maps_to_409(db_session, mentee, mentor, make_user):
    first = _request(db_session, mentee, mentor)
    _accept(db_session, mentor, first.session.id)

    second_mentee = make_user(ROLE_MENTEE)
    second = _request(db_session, second_mentee, mentor)

    with pytest.raises(HTTPException) as exc:
        _accept(db_session, mentor, second.session.id)
    assert exc.value.status_code == 409
    assert exc.value.detail["error"] == "ConflictActiveSession"


def test_end_route_twice_maps_to_409(db_session, mentee, mentor):
    created = _request(db_session, mentee, mentor)
    _accept(db_session, mentor, created.session.id, when=lifecycle.utcnow())

    ended = end_session(
        session_id=created.session.id,
        payload=SessionEnd(summary="Done"),
        current_user=mentee,
        db=db_session,
    )
    assert ended.session.status == "completed"
    assert ended.session.summary == "Done"

    with pytest.raises(HTTPException) as exc:
        end_session(session_id=created.session.id, payload=None, current_user=mentee, db=db_session)
    assert exc.value.status_code == 409
    assert exc.value.detail["error"] == "InvalidState"


def test_end_by_mentor_maps_to_403(db_session, mentee, mentor):
    created = _request(db_session, mentee, mentor)
    _accept(db_session, mentor, created.session.id)

    with pytest.raises(HTTPException) as exc:
        end_session(session_id=created.session.id, payload=None, current_user=mentor, db=db_session)
    assert exc.value.status_code == 403


@pytest.mark.parametrize(
    "error, status_code",
    [
        (lifecycle.NotFound(), 404),
        (lifecycle.Forbidden(), 403),
        (lifecycle.InvalidState(), 409),
        (lifecycle.InvalidTarget(), 400),
        (lifecycle.MissingField("scheduledTime"), 400),
        (lifecycle.ConflictActiveSession(), 409),
    ],
)
def test_lifecycle_error_status_codes(error, status_code):
    http_error = lifecycle_http_error(error)
    assert http_error.status_code == status_code
    assert http_error.detail["error"] == error.kind


def test_active_sessions_read_model(db_session, mentee, mentor, make_course):
    course = make_course()
    created = _request(db_session, mentee, mentor, course_id=course.id)
    _accept(db_session, mentor, created.session.id, when=lifecycle.utcnow())

    as_mentee = get_active_sessions(current_user=mentee, db=db_session)
    assert len(as_mentee) == 1
    item = as_mentee[0]
    assert item.user_role == "mentee"
    assert item.other_user == "Max Mentor"
    assert item.course_name == course.name
    assert 0 <= item.remaining_minutes <= 45

    as_mentor = get_active_sessions(current_user=mentor, db=db_session)
    assert as_mentor[0].user_role == "mentor"
    assert as_mentor[0].other_user == "Mia Mentee"


def test_logs_read_model_uses_logged_duration(db_session, mentee, mentor):
    created = _request(db_session, mentee, mentor)
    _accept(db_session, mentor, created.session.id, when=lifecycle.utcnow() - timedelta(minutes=20, seconds=5))
    end_session(session_id=created.session.id, payload=None, current_user=mentee, db=db_session)

    logs = get_session_logs(limit=10, offset=0, current_user=mentor, db=db_session)

    assert len(logs) == 1
    assert logs[0].status == "completed"
    assert logs[0].duration == 20
    assert logs[0].user_role == "mentor"
    assert get_active_sessions(current_user=mentee, db=db_session) == []


def test_pending_sessions_for_mentor(db_session, mentee, mentor, make_user):
    _request(db_session, mentee, mentor)
    other_mentor = make_user(ROLE_MENTOR)
    _request(db_session, mentee, other_mentor)

    pending = get_pending_sessions(current_user=mentor, db=db_session)

    assert len(pending) == 1
    assert pending[0].mentee_name == "Mia Mentee"
    assert pending[0].status == "requested"


def test_pending_sessions_require_mentor(mentee):
    with pytest.raises(HTTPException) as exc:
        require_mentor(current_user=mentee)
    assert exc.value.status_code == 403
