import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import Iterable, Optional, Set

from peermentor import models
from peermentor.crud import search as search_crud
from peermentor.crud import user as user_crud
from peermentor.database import get_db
from peermentor.models.user import ROLE_ADMIN, ROLE_MENTEE, ROLE_MENTOR
from peermentor.schemas import (
    MentorApplication,
    MentorCoursesUpdate,
    ProfileUpdate,
    StudentOut,
    StudentPage,
    UserOut,
)
from peermentor.schemas.user import Pagination
from peermentor.utils.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def _require_courses(db: Session, course_ids: Iterable[int]) -> Set[int]:
    wanted = set(course_ids)
    found = {
        cid for (cid,) in db.query(models.Course.id).filter(models.Course.id.in_(wanted)).all()
    }
    missing = sorted(wanted - found)
    if missing:
        raise HTTPException(status_code=404, detail=f"Unknown course id(s): {missing}")
    return wanted


@router.get("/me", response_model=UserOut)
def get_me(current_user: models.User = Depends(get_current_user)):
    return UserOut.model_validate(current_user)


@router.put("/me/courses", response_model=UserOut)
def update_my_courses(
    payload: MentorCoursesUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Replace the list of courses the current mentor teaches."""
    if current_user.role != ROLE_MENTOR:
        raise HTTPException(status_code=403, detail="Only mentors can set courses")

    wanted = _require_courses(db, payload.course_ids)
    user = user_crud.set_mentor_courses(db, current_user, wanted)
    return UserOut.model_validate(user)


@router.post("/mentors/apply")
def apply_as_mentor(
    payload: MentorApplication,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """A mentee asks to become a mentor; the account joins the approval queue."""
    if current_user.role != ROLE_MENTEE:
        raise HTTPException(status_code=400, detail="Only students can apply to become mentors")

    wanted = _require_courses(db, payload.course_ids)
    current_user.role = ROLE_MENTOR
    current_user.approved = False
    if payload.bio is not None:
        current_user.bio = payload.bio
    user = user_crud.set_mentor_courses(db, current_user, wanted)

    logger.info("User %s applied to become a mentor", user.id)
    return {
        "message": "Mentor application submitted successfully",
        "role": user.role,
        "approved": user.approved,
    }


@router.get("/students", response_model=StudentPage)
def list_students(
    search: Optional[str] = Query(None, description="Search by name or email"),
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    rows, total = search_crud.list_students(db, search=search, limit=limit, offset=offset)
    students = [
        StudentOut(
            id=u.id,
            first_name=u.first_name,
            last_name=u.last_name,
            email=u.email,
            created_at=u.created_at,
            total_sessions=count,
        )
        for u, count in rows
    ]
    return StudentPage(
        students=students,
        pagination=Pagination(
            total=total,
            limit=limit,
            offset=offset,
            has_more=offset + limit < total,
        ),
    )


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user = user_crud.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return UserOut.model_validate(user)


@router.put("/{user_id}", response_model=UserOut)
def update_profile(
    user_id: int,
    payload: ProfileUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Owners edit their own profile; admins may edit anyone's."""
    if current_user.id != user_id and current_user.role != ROLE_ADMIN:
        raise HTTPException(status_code=403, detail="Unauthorized to update this profile")

    user = user_crud.get_user(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    changes = payload.model_dump(exclude_unset=True)
    # Names keep their current value when sent as null; bio may be cleared.
    for key in ("first_name", "last_name"):
        if changes.get(key) is not None:
            setattr(user, key, changes[key])
    if "bio" in changes:
        user.bio = changes["bio"]

    db.commit()
    db.refresh(user)
    return UserOut.model_validate(user)
