"""
Interview lifecycle - create (with seeded greeting), end, cancel, list.

Status machine: in_progress -> completed | cancelled. Both are terminal.
Ending or cancelling an interview that is no longer in progress is always a
TerminalStateError, no matter how often it is repeated.
"""
from datetime import datetime

from chessview.app.core.config import (
    GREETING_TEMPLATE,
    PERSONAS,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
)
from chessview.app.core.exceptions import NotFoundError, TerminalStateError, ValidationError
from chessview.app.core.logging_config import get_logger
from chessview.app.models.interview import Interview, InterviewMessage
from chessview.app.models.user import User
from chessview.app.services.ownership import require_owner
from chessview.app.services.storage import Storage

logger = get_logger("services.interview")


def build_greeting(persona: str, target_role: str) -> str:
    return GREETING_TEMPLATE.format(persona=persona, role=target_role)


class InterviewService:
    def __init__(self, storage: Storage):
        self.storage = storage

    def create_interview(
        self,
        owner: User,
        target_role: str,
        experience_level: str,
        persona: str,
        resume_id: int | None = None,
    ) -> Interview:
        target_role = (target_role or "").strip()
        experience_level = (experience_level or "").strip()
        persona = (persona or "").strip().lower()

        errors = []
        if not target_role:
            errors.append({"field": "target_role", "message": "Target role is required"})
        if not experience_level:
            errors.append({"field": "experience_level", "message": "Experience level is required"})
        if persona not in PERSONAS:
            errors.append({
                "field": "interviewer_character",
                "message": f"Must be one of: {', '.join(PERSONAS)}",
            })
        if errors:
            raise ValidationError("Invalid input data", errors=errors)

        if resume_id is not None:
            require_owner(self.storage.get_resume(resume_id), owner, "resume")

        interview = self.storage.create_interview_with_greeting(
            user_id=owner.id,
            target_role=target_role,
            experience_level=experience_level,
            interviewer_character=persona,
            greeting=build_greeting(persona, target_role),
            resume_id=resume_id,
        )
        logger.info(
            "Interview created interview_id=%s user_id=%s role=%s level=%s persona=%s resume_id=%s",
            interview.id,
            owner.id,
            target_role,
            experience_level,
            persona,
            resume_id,
        )
        return interview

    def get_interview(self, interview_id: int, actor: User) -> Interview:
        return require_owner(self.storage.get_interview(interview_id), actor, "interview")

    def list_interviews(self, owner: User) -> list[Interview]:
        return self.storage.get_interviews_by_user(owner.id)

    def get_messages(self, interview_id: int, actor: User) -> list[InterviewMessage]:
        interview = self.get_interview(interview_id, actor)
        return self.storage.get_interview_messages(interview.id)

    def end_interview(self, interview_id: int, actor: User) -> Interview:
        return self._finish(interview_id, actor, STATUS_COMPLETED)

    def cancel_interview(self, interview_id: int, actor: User) -> Interview:
        return self._finish(interview_id, actor, STATUS_CANCELLED)

    def _finish(self, interview_id: int, actor: User, status: str) -> Interview:
        interview = self.get_interview(interview_id, actor)
        if interview.status != STATUS_IN_PROGRESS:
            logger.info(
                "Interview transition rejected interview_id=%s status=%s requested=%s",
                interview.id,
                interview.status,
                status,
            )
            raise TerminalStateError(f"Interview is already {interview.status}")
        updated = self.storage.update_interview_status(interview.id, status, ended_at=datetime.utcnow())
        if updated is None:
            raise NotFoundError("Interview not found")
        logger.info("Interview %s interview_id=%s user_id=%s", status, updated.id, actor.id)
        return updated
