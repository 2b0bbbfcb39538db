# peermentor/api/admin.py
"""
Admin API

Dashboard counters and the mentor approval queue. Rejecting a mentor
removes the account.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import desc
from sqlalchemy.orm import Session

from peermentor.database import get_db
from peermentor.models.session import Session as SessionModel
from peermentor.models.user import ROLE_MENTEE, ROLE_MENTOR, User
from peermentor.utils.security import require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


class MentorApproval(BaseModel):
    approved: bool


# ─────────────────────────────────────────
# GET /admin/stats - Dashboard overview
# ─────────────────────────────────────────
@router.get("/stats")
def get_dashboard_stats(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    mentors = db.query(User).filter(User.role == ROLE_MENTOR).count()
    mentees = db.query(User).filter(User.role == ROLE_MENTEE).count()
    pending = db.query(User).filter(User.role == ROLE_MENTOR, User.approved.is_(False)).count()
    sessions = db.query(SessionModel).count()

    return {
        "mentors": mentors,
        "mentees": mentees,
        "pendingMentors": pending,
        "sessions": sessions,
    }


# ─────────────────────────────────────────
# GET /admin/mentors/pending - Approval queue
# ─────────────────────────────────────────
@router.get("/mentors/pending")
def get_pending_mentors(
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    mentors = db.query(User).filter(
        User.role == ROLE_MENTOR,
        User.approved.is_(False),
    ).order_by(desc(User.created_at), desc(User.id)).all()

    return [
        {
            "id": u.id,
            "firstName": u.first_name,
            "lastName": u.last_name,
            "email": u.email,
            "bio": u.bio,
            "courseIds": u.course_ids,
            "createdAt": u.created_at.isoformat() if u.created_at else None,
        }
        for u in mentors
    ]


# ─────────────────────────────────────────
# POST /admin/mentors/{id}/approve - Approve or reject
# ─────────────────────────────────────────
@router.post("/mentors/{user_id}/approve")
def approve_mentor(
    user_id: int,
    payload: MentorApproval,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.role != ROLE_MENTOR:
        raise HTTPException(status_code=400, detail="User is not a mentor")

    if payload.approved:
        user.approved = True
        db.commit()
        logger.info("Mentor %s approved by admin %s", user_id, admin.id)
        return {"message": "Mentor approved successfully"}

    db.delete(user)
    db.commit()
    logger.info("Mentor %s rejected and removed by admin %s", user_id, admin.id)
    return {"message": "Mentor rejected and removed"}
