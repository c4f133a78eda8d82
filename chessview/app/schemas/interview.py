"""
Resume / interview / message schemas
"""
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from chessview.app.models.resume import Resume


class ResumeResponse(BaseModel):
    id: int
    user_id: int
    file_name: str
    file_url: str
    uploaded_at: datetime
    parsed_content: Any = None
    parsed_content_state: Literal["absent", "ok", "corrupt"] = "absent"

    @classmethod
    def from_model(cls, resume: Resume) -> "ResumeResponse":
        parsed = resume.parsed
        return cls(
            id=resume.id,
            user_id=resume.user_id,
            file_name=resume.file_name,
            file_url=resume.file_url,
            uploaded_at=resume.uploaded_at,
            parsed_content=parsed.value if parsed.is_present else None,
            parsed_content_state=parsed.state,
        )


class InterviewCreate(BaseModel):
    target_role: str = Field(min_length=1, max_length=255)
    experience_level: str = Field(min_length=1, max_length=50)
    interviewer_character: str = Field(min_length=1, max_length=20)
    resume_id: Optional[int] = None


class InterviewResponse(BaseModel):
    id: int
    user_id: int
    resume_id: Optional[int] = None
    target_role: str
    experience_level: str
    interviewer_character: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    status: Literal["in_progress", "completed", "cancelled"]

    class Config:
        from_attributes = True


class MessageCreate(BaseModel):
    content: str = Field(min_length=1)


class MessageResponse(BaseModel):
    id: int
    interview_id: int
    sender: Literal["user", "ai"]
    content: str
    sent_at: datetime

    class Config:
        from_attributes = True


class MessageExchangeResponse(BaseModel):
    user_message: MessageResponse
    ai_message: MessageResponse
