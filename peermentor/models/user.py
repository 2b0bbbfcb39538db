from sqlalchemy import Boolean, Column, Integer, String, Text, TIMESTAMP, func
from sqlalchemy.orm import relationship
from peermentor.database import Base

ROLE_MENTEE = "mentee"
ROLE_MENTOR = "mentor"
ROLE_ADMIN = "admin"


# ---------------- USER (AUTH TABLE) ----------------
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, index=True)
    # Mentors need admin approval before they can be booked.
    approved = Column(Boolean, default=False, nullable=False)
    bio = Column(Text)
    is_active = Column(Boolean, default=True)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, onupdate=func.now())

    mentee_sessions = relationship("Session", foreign_keys="Session.mentee_id", back_populates="mentee", passive_deletes=True)
    mentor_sessions = relationship("Session", foreign_keys="Session.mentor_id", back_populates="mentor", passive_deletes=True)
    mentor_courses = relationship("MentorCourse", back_populates="user", cascade="all, delete-orphan")
    questions = relationship("Question", back_populates="mentee", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def course_ids(self):
        return [mc.course_id for mc in self.mentor_courses]
