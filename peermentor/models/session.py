# peermentor/models/session.py
from sqlalchemy import Column, Index, Integer, String, Text, ForeignKey, TIMESTAMP, func, text
from sqlalchemy.orm import relationship
from peermentor.database import Base

STATUS_REQUESTED = "requested"
STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"
SESSION_STATUSES = (STATUS_REQUESTED, STATUS_ACTIVE, STATUS_COMPLETED)

_ACTIVE_ONLY = text("status = 'active'")


class Session(Base):
    __tablename__ = "sessions"
    # A user may hold at most one active session on each side of the pairing.
    __table_args__ = (
        Index(
            "uq_sessions_active_mentee",
            "mentee_id",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
        Index(
            "uq_sessions_active_mentor",
            "mentor_id",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    mentee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    mentor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    description = Column(Text)
    preferred_time = Column(TIMESTAMP)
    scheduled_time = Column(TIMESTAMP)
    started_at = Column(TIMESTAMP)
    ended_at = Column(TIMESTAMP)
    status = Column(String(20), nullable=False, default=STATUS_REQUESTED, index=True)
    duration = Column(Integer, default=45)
    summary = Column(Text)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    # Relationships
    mentee = relationship("User", foreign_keys=[mentee_id], back_populates="mentee_sessions")
    mentor = relationship("User", foreign_keys=[mentor_id], back_populates="mentor_sessions")
    course = relationship("Course", back_populates="sessions")
    log = relationship("SessionLog", back_populates="session", uselist=False)


class SessionLog(Base):
    """Completion record written once per ended session. Never updated."""
    __tablename__ = "logs"

    id = Column(Integer, primary_key=True, index=True)
    session_id = Column(Integer, ForeignKey("sessions.id", ondelete="CASCADE"), unique=True, nullable=False)
    mentee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    mentor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="SET NULL"), nullable=True)
    duration = Column(Integer, nullable=False, default=0)
    date = Column(TIMESTAMP, nullable=False)

    session = relationship("Session", back_populates="log")
