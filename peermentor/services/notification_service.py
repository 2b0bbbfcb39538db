from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from peermentor import models
from peermentor.models.notification import Notification
from peermentor.services.lifecycle import NotificationEffect
from peermentor.utils.email import is_email_enabled, send_email

logger = logging.getLogger(__name__)


EMAIL_SUBJECT_BY_EVENT = {
    "new_question": "A new question was posted in your course",
    "question_answered": "Your question was answered",
    "session_scheduled": "Your mentoring session was scheduled",
}


def list_user_notifications(
    db: Session,
    *,
    user_id: int,
    unread_only: bool = False,
    limit: int = 20,
) -> List[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return query.order_by(
        Notification.created_at.desc(),
        Notification.id.desc(),
    ).limit(limit).all()


def mark_notification_read(
    db: Session,
    *,
    user_id: int,
    notification_id: int,
) -> Optional[Notification]:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.user_id == user_id,
    ).first()
    if not notification:
        return None
    notification.is_read = True
    db.commit()
    return notification


def mark_all_notifications_read(db: Session, *, user_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False),
    ).update({"is_read": True}, synchronize_session=False)
    db.commit()
    return int(updated)


def get_unread_count(db: Session, *, user_id: int) -> int:
    return db.query(Notification).filter(
        Notification.user_id == user_id,
        Notification.is_read.is_(False),
    ).count()


def create_notification(
    db: Session,
    *,
    user_id: int,
    event_type: str,
    title: str,
    message: str,
    data: Optional[Dict[str, Any]] = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        event_type=event_type,
        title=title,
        message=message,
        data=data or {},
    )
    db.add(notification)
    db.flush()
    return notification


def dispatch_effects(db: Session, effects: Iterable[NotificationEffect]) -> List[Notification]:
    """
    Persist notifications produced by a committed transition.

    Each effect is committed on its own. A failure is logged and skipped;
    it never propagates to the caller.
    """
    created = []
    for effect in effects:
        try:
            notification = create_notification(
                db,
                user_id=effect.user_id,
                event_type=effect.event_type,
                title=effect.title,
                message=effect.message,
                data=effect.data,
            )
            db.commit()
        except Exception as exc:
            db.rollback()
            logger.warning(
                "Notification dispatch failed (user_id=%s, type=%s): %s",
                effect.user_id,
                effect.event_type,
                exc,
            )
            continue
        created.append(notification)
        dispatch_email_for_notification(db, notification)
    return created


def _send_notification_email(to_email: str, subject: str, body_text: str, *, notification_id: Optional[int], user_id: Optional[int]) -> None:
    """Send SMTP mail in a background thread so API latency stays low."""
    try:
        sent = send_email(
            to_email=to_email,
            subject=subject,
            body_text=body_text,
        )
    except Exception as exc:
        logger.warning(
            "Notification email failed (user_id=%s, notification_id=%s): %s",
            user_id,
            notification_id,
            exc,
        )
        return
    if not sent:
        logger.info(
            "Notification email not sent (user_id=%s, notification_id=%s)",
            user_id,
            notification_id,
        )


def dispatch_email_for_notification(db: Session, notification: Notification) -> bool:
    """
    Best-effort email delivery for a committed notification.
    This function never raises and should not impact request success.
    """
    try:
        if not is_email_enabled():
            return False

        recipient = db.query(models.User).filter(
            models.User.id == notification.user_id
        ).first()
        if not recipient or not recipient.email:
            return False

        subject = EMAIL_SUBJECT_BY_EVENT.get(
            notification.event_type,
            notification.title or "New notification",
        )
        recipient_name = (recipient.first_name or "there").strip() or "there"
        body_text = (
            f"Hi {recipient_name},\n\n"
            f"{notification.title}\n"
            f"{notification.message}\n\n"
            "Sign in to PeerMentor to view details."
        )

        worker = threading.Thread(
            target=_send_notification_email,
            args=(
                recipient.email,
                subject,
                body_text,
            ),
            kwargs={
                "notification_id": getattr(notification, "id", None),
                "user_id": notification.user_id,
            },
            daemon=True,
        )
        worker.start()
        return True
    except Exception as exc:
        logger.warning(
            "Notification email dispatch failed (notification_id=%s): %s",
            getattr(notification, "id", None),
            exc,
        )
        return False
