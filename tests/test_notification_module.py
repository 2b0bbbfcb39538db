from __future__ import annotations

import pytest

# Skip suite when FastAPI dependency is not present in local environment.
pytest.importorskip("fastapi")

from fastapi import HTTPException

from peermentor.api.notification import (
    get_my_notifications,
    get_unread_count,
    mark_all_notifications_read,
    mark_notification_read,
)
from peermentor.services import notification_service


def _notify(db, user, message):
    notification = notification_service.create_notification(
        db,
        user_id=user.id,
        event_type="new_question",
        title="New Question in CS101",
        message=message,
        data={"questionId": 3},
    )
    db.commit()
    return notification


def test_notification_api_read_flow(db_session, mentor):
    first = _notify(db_session, mentor, "First question")
    second = _notify(db_session, mentor, "Second question")
    second.is_read = True
    db_session.commit()

    unread = get_my_notifications(
        unread_only=True,
        limit=50,
        current_user=mentor,
        db=db_session,
    )
    assert len(unread) == 1
    assert unread[0]["id"] == first.id
    assert unread[0]["type"] == "new_question"
    assert unread[0]["isRead"] is False
    assert unread[0]["data"] == {"questionId": 3}

    count_before = get_unread_count(current_user=mentor, db=db_session)
    assert count_before["unread_count"] == 1

    marked = mark_notification_read(
        notification_id=first.id,
        current_user=mentor,
        db=db_session,
    )
    assert marked["id"] == first.id

    count_after = get_unread_count(current_user=mentor, db=db_session)
    assert count_after["unread_count"] == 0

    _notify(db_session, mentor, "Third question")

    all_marked = mark_all_notifications_read(current_user=mentor, db=db_session)
    assert all_marked["updated"] == 1

    final_count = get_unread_count(current_user=mentor, db=db_session)
    assert final_count["unread_count"] == 0


def test_my_notifications_are_scoped_to_user(db_session, mentee, mentor):
    _notify(db_session, mentor, "For the mentor")

    assert get_my_notifications(unread_only=False, limit=20, current_user=mentee, db=db_session) == []


def test_mark_notification_read_404(db_session, mentee):
    with pytest.raises(HTTPException) as exc_info:
        mark_notification_read(notification_id=99999, current_user=mentee, db=db_session)
    assert exc_info.value.status_code == 404
