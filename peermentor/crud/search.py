from typing import List, Optional, Tuple

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from peermentor import models
from peermentor.models.session import STATUS_COMPLETED
from peermentor.models.user import ROLE_MENTEE, ROLE_MENTOR


def find_mentors(
    db: Session,
    *,
    course_id: Optional[int] = None,
    limit: int = 10,
    offset: int = 0,
) -> List[Tuple[models.User, int]]:
    """Approved mentors with their completed-session count, busiest first."""
    completed = func.count(models.Session.id)
    query = db.query(models.User, completed.label("total_sessions")).outerjoin(
        models.Session,
        and_(
            models.Session.mentor_id == models.User.id,
            models.Session.status == STATUS_COMPLETED,
        ),
    ).filter(
        models.User.role == ROLE_MENTOR,
        models.User.approved.is_(True),
        models.User.is_active.is_(True),
    )

    if course_id is not None:
        teaches = db.query(models.MentorCourse.user_id).filter(
            models.MentorCourse.course_id == course_id
        )
        query = query.filter(models.User.id.in_(teaches))

    rows = query.group_by(models.User.id).order_by(
        completed.desc(),
        models.User.id,
    ).offset(offset).limit(limit).all()
    return [(user, int(total)) for user, total in rows]


def list_students(
    db: Session,
    *,
    search: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
) -> Tuple[List[Tuple[models.User, int]], int]:
    """Mentees with their session counts, plus the unpaginated total."""
    base = db.query(models.User).filter(models.User.role == ROLE_MENTEE)
    if search:
        like = f"%{search}%"
        base = base.filter(or_(
            models.User.first_name.ilike(like),
            models.User.last_name.ilike(like),
            models.User.email.ilike(like),
        ))
    total = base.count()

    session_count = func.count(func.distinct(models.Session.id))
    rows = base.add_columns(session_count.label("total_sessions")).outerjoin(
        models.Session, models.Session.mentee_id == models.User.id
    ).group_by(models.User.id).order_by(
        models.User.created_at.desc(),
        models.User.id.desc(),
    ).offset(offset).limit(limit).all()
    return [(user, int(count)) for user, count in rows], total
