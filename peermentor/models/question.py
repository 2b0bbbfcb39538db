from sqlalchemy import ARRAY, JSON, Column, ForeignKey, Integer, String, Text, TIMESTAMP, func
from sqlalchemy.orm import relationship
from peermentor.database import Base

QUESTION_OPEN = "open"
QUESTION_ANSWERED = "answered"
PRIORITIES = ("low", "medium", "high")


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    mentee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True, index=True)
    # SQLite (used by tests) does not support ARRAY; store as JSON there.
    tags = Column(ARRAY(String).with_variant(JSON, "sqlite"), default=list)
    priority = Column(String(10), nullable=False, default="medium")
    status = Column(String(20), nullable=False, default=QUESTION_OPEN, index=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    mentee = relationship("User", back_populates="questions")
    course = relationship("Course")
