from sqlalchemy import Column, ForeignKey, Integer, String, Text, TIMESTAMP, UniqueConstraint, func
from sqlalchemy.orm import relationship
from peermentor.database import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(20), unique=True, nullable=False, index=True)
    name = Column(String(150), nullable=False)
    description = Column(Text)
    created_at = Column(TIMESTAMP, server_default=func.now())

    mentor_courses = relationship("MentorCourse", back_populates="course", cascade="all, delete-orphan")
    sessions = relationship("Session", back_populates="course")


class MentorCourse(Base):
    """Course a mentor has declared they can teach."""
    __tablename__ = "mentor_courses"
    __table_args__ = (
        UniqueConstraint("user_id", "course_id", name="uq_mentor_course"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())

    user = relationship("User", back_populates="mentor_courses")
    course = relationship("Course", back_populates="mentor_courses")
