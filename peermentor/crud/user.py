from typing import Iterable, Optional

from sqlalchemy.orm import Session

from peermentor import models
from peermentor.models.user import ROLE_MENTOR
from peermentor.utils.security import get_password_hash


def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email.strip().lower()).first()


def create_user(
    db: Session,
    *,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    role: str,
    bio: Optional[str] = None,
) -> models.User:
    db_user = models.User(
        first_name=first_name,
        last_name=last_name,
        email=email.strip().lower(),
        password_hash=get_password_hash(password),
        role=role,
        # Mentors wait for an admin; everyone else is usable immediately.
        approved=role != ROLE_MENTOR,
        bio=bio,
        is_active=True,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def set_mentor_courses(db: Session, user: models.User, course_ids: Iterable[int]) -> models.User:
    """Replace the set of courses a mentor teaches."""
    wanted = set(course_ids)
    user.mentor_courses = [mc for mc in user.mentor_courses if mc.course_id in wanted]
    existing = {mc.course_id for mc in user.mentor_courses}
    for course_id in sorted(wanted - existing):
        user.mentor_courses.append(models.MentorCourse(course_id=course_id))
    db.commit()
    db.refresh(user)
    return user
