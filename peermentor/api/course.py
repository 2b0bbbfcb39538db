from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from peermentor import models
from peermentor.database import get_db
from peermentor.schemas import CourseCreate, CourseOut
from peermentor.utils.security import require_admin

router = APIRouter(prefix="/courses", tags=["Courses"])


@router.get("/", response_model=List[CourseOut])
def list_courses(db: Session = Depends(get_db)):
    courses = db.query(models.Course).order_by(models.Course.code).all()
    return [CourseOut.model_validate(c) for c in courses]


@router.post("/", response_model=CourseOut, status_code=201)
def create_course(
    payload: CourseCreate,
    admin: models.User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    code = payload.code.strip().upper()
    if db.query(models.Course).filter(models.Course.code == code).first():
        raise HTTPException(status_code=400, detail="Course code already exists")

    course = models.Course(code=code, name=payload.name.strip(), description=payload.description)
    db.add(course)
    db.commit()
    db.refresh(course)
    return CourseOut.model_validate(course)
