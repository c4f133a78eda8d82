"""
Resume - uploaded file per user plus optional parsed content (serialized JSON, filled in by the parse job)
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from chessview.app.db.base import Base
from chessview.app.utils.json_field import ParsedContent, decode_parsed_content


class Resume(Base):
    __tablename__ = "resumes"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    file_name = Column(String(255), nullable=False)  # original upload name
    file_url = Column(String(512), nullable=False)  # e.g. /uploads/resumes/<uuid>.pdf
    uploaded_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    parsed_content = Column(Text, nullable=True)

    @property
    def parsed(self) -> ParsedContent:
        return decode_parsed_content(self.parsed_content, context=f"resume_id={self.id}")
