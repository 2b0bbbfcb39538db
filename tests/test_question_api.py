from __future__ import annotations

import pytest

pytest.importorskip("fastapi")

from fastapi import HTTPException

from peermentor import models
from peermentor.api.question import (
    answer_question,
    create_question,
    delete_question,
    get_question,
    get_questions_for_mentor,
    list_questions,
    update_question,
)
from peermentor.models.session import STATUS_REQUESTED
from peermentor.models.user import ROLE_MENTEE, ROLE_MENTOR
from peermentor.schemas.question import AnswerRequest, QuestionCreate, QuestionUpdate


def _teach(db, mentor, course):
    db.add(models.MentorCourse(user_id=mentor.id, course_id=course.id))
    db.commit()


def _ask(db, mentee, course=None, title="How do pointers work?", **extra):
    payload = QuestionCreate(
        title=title,
        course_id=course.id if course else None,
        **extra,
    )
    return create_question(payload=payload, current_user=mentee, db=db)


def test_create_question_notifies_course_mentors(db_session, mentee, mentor, make_user, make_course):
    course = make_course()
    _teach(db_session, mentor, course)
    unapproved = make_user(ROLE_MENTOR, approved=False)
    _teach(db_session, unapproved, course)

    question = _ask(db_session, mentee, course, tags=["c", "memory"], priority="high")

    assert question.status == "open"
    assert question.course_name == course.name
    assert question.tags == ["c", "memory"]

    notes = db_session.query(models.Notification).all()
    assert [n.user_id for n in notes] == [mentor.id]
    assert notes[0].event_type == "new_question"
    assert notes[0].data == {"questionId": question.id, "courseId": course.id}


def test_only_mentees_post_questions(db_session, mentor):
    with pytest.raises(HTTPException) as exc:
        _ask(db_session, mentor)
    assert exc.value.status_code == 403


def test_unknown_course_is_404(db_session, mentee):
    payload = QuestionCreate(title="Lost", course_id=404)
    with pytest.raises(HTTPException) as exc:
        create_question(payload=payload, current_user=mentee, db=db_session)
    assert exc.value.status_code == 404


def test_list_questions_filters(db_session, mentee, make_user, make_course):
    course = make_course()
    other = make_user(ROLE_MENTEE)
    _ask(db_session, mentee, course, title="Loops", tags=["python"])
    _ask(db_session, other, course, title="Sorting", tags=["java"])

    by_tag = list_questions(
        course=None, status=None, mentee_id=None, tag="python", limit=20, offset=0, db=db_session
    )
    assert [q.title for q in by_tag] == ["Loops"]

    by_mentee = list_questions(
        course=course.id, status="open", mentee_id=other.id, tag=None, limit=20, offset=0, db=db_session
    )
    assert [q.title for q in by_mentee] == ["Sorting"]


def test_questions_for_mentor_ordered_by_priority(db_session, mentee, mentor, make_course):
    course = make_course()
    unrelated = make_course(code="MA200", name="Linear Algebra")
    _teach(db_session, mentor, course)
    _ask(db_session, mentee, course, title="Low one", priority="low")
    _ask(db_session, mentee, course, title="High one", priority="high")
    _ask(db_session, mentee, unrelated, title="Elsewhere", priority="high")

    questions = get_questions_for_mentor(mentor_id=mentor.id, limit=20, offset=0, db=db_session)

    assert [q.title for q in questions] == ["High one", "Low one"]


def test_update_and_delete_are_owner_only(db_session, mentee, make_user):
    question = _ask(db_session, mentee)
    intruder = make_user(ROLE_MENTEE)

    with pytest.raises(HTTPException) as exc:
        update_question(question_id=question.id, payload=QuestionUpdate(title="Mine"), current_user=intruder, db=db_session)
    assert exc.value.status_code == 403

    updated = update_question(
        question_id=question.id, payload=QuestionUpdate(priority="high"), current_user=mentee, db=db_session
    )
    assert updated.priority == "high"

    with pytest.raises(HTTPException):
        delete_question(question_id=question.id, current_user=intruder, db=db_session)

    assert delete_question(question_id=question.id, current_user=mentee, db=db_session)["message"]
    with pytest.raises(HTTPException) as exc:
        get_question(question_id=question.id, db=db_session)
    assert exc.value.status_code == 404


def test_answer_with_offer_creates_requested_session(db_session, mentee, mentor, make_course):
    course = make_course()
    question = _ask(db_session, mentee, course)

    response = answer_question(
        question_id=question.id,
        payload=AnswerRequest(answer="Let's walk through it", offer_session=True),
        current_user=mentor,
        db=db_session,
    )

    assert response.session_offered is True
    session = db_session.query(models.Session).filter(models.Session.id == response.session_id).one()
    assert session.status == STATUS_REQUESTED
    assert session.mentee_id == mentee.id
    assert session.mentor_id == mentor.id
    assert session.course_id == course.id

    assert get_question(question_id=question.id, db=db_session).status == "answered"
    note = db_session.query(models.Notification).filter(models.Notification.user_id == mentee.id).one()
    assert note.event_type == "question_answered"
    assert note.data["sessionId"] == session.id


def test_answer_without_offer(db_session, mentee, mentor):
    question = _ask(db_session, mentee)

    response = answer_question(
        question_id=question.id,
        payload=AnswerRequest(answer="Read chapter 4"),
        current_user=mentor,
        db=db_session,
    )

    assert response.session_offered is False
    assert response.session_id is None
    assert db_session.query(models.Session).count() == 0


def test_unapproved_mentor_cannot_answer(db_session, mentee, make_user):
    question = _ask(db_session, mentee)
    pending = make_user(ROLE_MENTOR, approved=False)

    with pytest.raises(HTTPException) as exc:
        answer_question(
            question_id=question.id,
            payload=AnswerRequest(answer="Hi"),
            current_user=pending,
            db=db_session,
        )
    assert exc.value.status_code == 403
