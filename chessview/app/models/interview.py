"""
Interview and InterviewMessage - one mock interview session and its append-only message log
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from chessview.app.core.config import STATUS_IN_PROGRESS
from chessview.app.db.base import Base


class Interview(Base):
    __tablename__ = "interviews"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    resume_id = Column(Integer, ForeignKey("resumes.id"), nullable=True)

    target_role = Column(String(255), nullable=False)
    experience_level = Column(String(50), nullable=False)
    interviewer_character = Column(String(20), nullable=False)  # pawn, knight, bishop, rook, queen, king

    started_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    ended_at = Column(DateTime, nullable=True)  # set iff status leaves in_progress
    status = Column(String(20), nullable=False, default=STATUS_IN_PROGRESS)


class InterviewMessage(Base):
    __tablename__ = "interview_messages"

    id = Column(Integer, primary_key=True, index=True)
    interview_id = Column(Integer, ForeignKey("interviews.id"), nullable=False, index=True)

    sender = Column(String(10), nullable=False)  # user, ai
    content = Column(Text, nullable=False)
    sent_at = Column(DateTime, nullable=False, default=datetime.utcnow)
