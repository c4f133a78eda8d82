"""
User - identity record. Password hash is empty for Google sign-in users.
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from chessview.app.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False, default="")

    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    profile_picture_url = Column(String(1024), nullable=True)
    google_id = Column(String(255), unique=True, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    @property
    def display_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or self.username
