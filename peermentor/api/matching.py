from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from peermentor import models
from peermentor.crud import search as search_crud
from peermentor.database import get_db
from peermentor.schemas import MatchRequest, MatchResponse, MentorSummary
from peermentor.utils.security import get_current_user

router = APIRouter(prefix="/matching", tags=["Matching"])


def _summary(user: models.User, total_sessions: int) -> MentorSummary:
    return MentorSummary(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        bio=user.bio,
        course_ids=user.course_ids,
        total_sessions=total_sessions,
    )


@router.post("/mentors", response_model=MatchResponse)
def recommend_mentors(
    payload: MatchRequest,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Mentors for a course, most experienced first."""
    rows = search_crud.find_mentors(db, course_id=payload.course_id, limit=10)
    mentors = [_summary(u, total) for u, total in rows]
    return MatchResponse(
        mentors=mentors,
        matching_tags=payload.tags,
        total_found=len(mentors),
    )


@router.get("/mentors/all", response_model=List[MentorSummary])
def list_mentors(
    course: Optional[int] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    rows = search_crud.find_mentors(db, course_id=course, limit=limit, offset=offset)
    return [_summary(u, total) for u, total in rows]
