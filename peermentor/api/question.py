# peermentor/api/question.py
"""
Questions API

Mentees post questions; mentors answer them and can offer a session in the
same step. Course mentors are notified of new questions.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import case
from sqlalchemy.orm import Session

from peermentor import models
from peermentor.database import get_db
from peermentor.models.question import QUESTION_ANSWERED, QUESTION_OPEN
from peermentor.models.user import ROLE_MENTEE, ROLE_MENTOR
from peermentor.schemas.question import (
    AnswerRequest,
    AnswerResponse,
    QuestionCreate,
    QuestionOut,
    QuestionUpdate,
)
from peermentor.services import lifecycle, notification_service
from peermentor.utils.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/questions", tags=["Questions"])

PRIORITY_ORDER = case(
    (models.Question.priority == "high", 0),
    (models.Question.priority == "medium", 1),
    else_=2,
)


# ======================
# HELPER FUNCTIONS
# ======================
def _question_out(question: models.Question) -> QuestionOut:
    return QuestionOut(
        id=question.id,
        mentee_id=question.mentee_id,
        title=question.title,
        description=question.description,
        course_id=question.course_id,
        course_name=question.course.name if question.course else None,
        tags=list(question.tags or []),
        priority=question.priority,
        status=question.status,
        created_at=question.created_at,
        updated_at=question.updated_at,
        mentee_first_name=question.mentee.first_name if question.mentee else None,
        mentee_last_name=question.mentee.last_name if question.mentee else None,
    )


def _get_question_or_404(db: Session, question_id: int) -> models.Question:
    question = db.query(models.Question).filter(models.Question.id == question_id).first()
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    return question


def _new_question_effects(db: Session, question: models.Question) -> List[lifecycle.NotificationEffect]:
    """One notification per approved mentor teaching the question's course."""
    course = db.query(models.Course).filter(models.Course.id == question.course_id).first()
    course_name = course.name if course else "a course"

    mentors = db.query(models.User).join(
        models.MentorCourse, models.MentorCourse.user_id == models.User.id
    ).filter(
        models.MentorCourse.course_id == question.course_id,
        models.User.role == ROLE_MENTOR,
        models.User.approved.is_(True),
        models.User.id != question.mentee_id,
    ).all()

    return [
        lifecycle.NotificationEffect(
            user_id=mentor.id,
            event_type="new_question",
            title=f"New Question in {course_name}",
            message=f'A new question "{question.title}" has been posted in {course_name}.',
            data={"questionId": question.id, "courseId": question.course_id},
        )
        for mentor in mentors
    ]


# ======================
# CRUD
# ======================
@router.post("/", response_model=QuestionOut, status_code=201)
def create_question(
    payload: QuestionCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if current_user.role != ROLE_MENTEE:
        raise HTTPException(status_code=403, detail="Only students can post questions")

    if payload.course_id is not None:
        course = db.query(models.Course).filter(models.Course.id == payload.course_id).first()
        if not course:
            raise HTTPException(status_code=404, detail="Course not found")

    question = models.Question(
        mentee_id=current_user.id,
        title=payload.title,
        description=payload.description,
        course_id=payload.course_id,
        tags=payload.tags,
        priority=payload.priority,
        status=QUESTION_OPEN,
    )
    db.add(question)
    db.commit()
    db.refresh(question)

    if question.course_id is not None:
        try:
            effects = _new_question_effects(db, question)
        except Exception as exc:
            # Don't fail the request if notifications fail
            logger.warning("Mentor lookup for question %s failed: %s", question.id, exc)
            effects = []
        notification_service.dispatch_effects(db, effects)

    return _question_out(question)


@router.get("/", response_model=List[QuestionOut])
def list_questions(
    course: Optional[int] = Query(None),
    status: Optional[str] = Query(None),
    mentee_id: Optional[int] = Query(None, alias="menteeId"),
    tag: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    query = db.query(models.Question)
    if course is not None:
        query = query.filter(models.Question.course_id == course)
    if status:
        query = query.filter(models.Question.status == status)
    if mentee_id is not None:
        query = query.filter(models.Question.mentee_id == mentee_id)
    query = query.order_by(models.Question.created_at.desc(), models.Question.id.desc())

    if tag:
        # Tags are JSON on SQLite and ARRAY on Postgres; match in Python.
        matching = [q for q in query.all() if tag in (q.tags or [])]
        questions = matching[offset:offset + limit]
    else:
        questions = query.offset(offset).limit(limit).all()

    return [_question_out(q) for q in questions]


@router.get("/for-mentor/{mentor_id}", response_model=List[QuestionOut])
def get_questions_for_mentor(
    mentor_id: int,
    limit: int = Query(20, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """Open questions in the courses a mentor teaches, most urgent first."""
    mentor = db.query(models.User).filter(
        models.User.id == mentor_id,
        models.User.role == ROLE_MENTOR,
    ).first()
    if not mentor:
        raise HTTPException(status_code=404, detail="Mentor not found")

    course_ids = mentor.course_ids
    if not course_ids:
        return []

    questions = db.query(models.Question).filter(
        models.Question.status == QUESTION_OPEN,
        models.Question.course_id.in_(course_ids),
    ).order_by(
        PRIORITY_ORDER,
        models.Question.created_at.desc(),
        models.Question.id.desc(),
    ).offset(offset).limit(limit).all()

    return [_question_out(q) for q in questions]


@router.get("/{question_id}", response_model=QuestionOut)
def get_question(question_id: int, db: Session = Depends(get_db)):
    return _question_out(_get_question_or_404(db, question_id))


@router.put("/{question_id}", response_model=QuestionOut)
def update_question(
    question_id: int,
    payload: QuestionUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    question = _get_question_or_404(db, question_id)
    if question.mentee_id != current_user.id:
        raise HTTPException(status_code=403, detail="Unauthorized to update this question")

    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(question, key, value)
    db.commit()
    db.refresh(question)
    return _question_out(question)


@router.delete("/{question_id}")
def delete_question(
    question_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    question = _get_question_or_404(db, question_id)
    if question.mentee_id != current_user.id:
        raise HTTPException(status_code=403, detail="Unauthorized to delete this question")

    db.delete(question)
    db.commit()
    return {"message": "Question deleted successfully"}


# ======================
# ANSWER (optionally offers a session)
# ======================
@router.post("/{question_id}/answer", response_model=AnswerResponse)
def answer_question(
    question_id: int,
    payload: AnswerRequest,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    if current_user.role != ROLE_MENTOR or not current_user.approved:
        raise HTTPException(status_code=403, detail="Only approved mentors can answer questions")

    question = _get_question_or_404(db, question_id)
    question.status = QUESTION_ANSWERED

    session_id = None
    if payload.offer_session:
        # Commits the status change together with the new session row.
        result = lifecycle.offer_session(
            db,
            mentee_id=question.mentee_id,
            mentor_id=current_user.id,
            description=f"Session offered for question: {question.title}",
            course_id=question.course_id,
        )
        session_id = result.session.id
    else:
        db.commit()

    notification_service.dispatch_effects(db, [
        lifecycle.NotificationEffect(
            user_id=question.mentee_id,
            event_type="question_answered",
            title="Your question was answered!",
            message=payload.answer,
            data={
                "questionId": question.id,
                "mentorId": current_user.id,
                "sessionId": session_id,
                "offerSession": payload.offer_session,
            },
        )
    ])

    return AnswerResponse(
        message="Question answered successfully",
        session_offered=payload.offer_session,
        session_id=session_id,
    )
