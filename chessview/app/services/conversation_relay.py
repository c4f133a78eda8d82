"""
Conversation relay - one candidate turn in, one interviewer reply out.

The candidate message is committed before the completion call, so a crash
mid-turn leaves a user message without a reply, never the reverse. A failed
completion call is replaced by FALLBACK_REPLY; the conversation never stalls.
Concurrent posts on the same interview are not serialized.
"""
import json
from dataclasses import dataclass

from chessview.app.core.config import (
    FALLBACK_REPLY,
    SENDER_AI,
    SENDER_USER,
    STATUS_IN_PROGRESS,
    settings,
)
from chessview.app.core.exceptions import ExternalServiceError, TerminalStateError, ValidationError
from chessview.app.core.logging_config import get_logger
from chessview.app.models.interview import Interview, InterviewMessage
from chessview.app.models.resume import Resume
from chessview.app.models.user import User
from chessview.app.services.completion_client import CompletionClient
from chessview.app.services.ownership import require_owner
from chessview.app.services.storage import Storage

logger = get_logger("services.relay")

SYSTEM_PROMPT = """You are an AI interviewer for a {role} position. You embody the personality of a chess {persona} piece.
The candidate's experience level is {level}.
{resume_context}
Ask relevant technical questions based on the role and experience level.
Keep responses concise (2-3 sentences max).
Be professional but incorporate subtle chess metaphors or references when appropriate."""


@dataclass
class RelayResult:
    user_message: InterviewMessage
    ai_message: InterviewMessage


def build_resume_context(resume: Resume | None, max_chars: int | None = None) -> str:
    """Short context line from a resume's parsed content; empty when absent or unreadable."""
    if resume is None:
        return ""
    parsed = resume.parsed
    if not parsed.is_present or parsed.value in (None, "", {}, []):
        return ""
    limit = max_chars or settings.resume_context_max_chars
    summary = json.dumps(parsed.value, ensure_ascii=False, default=str)
    if len(summary) > limit:
        summary = summary[:limit] + "..."
    return f"The user's resume shows the following information: {summary}"


def build_system_prompt(persona: str, role: str, level: str, resume_context: str = "") -> str:
    return SYSTEM_PROMPT.format(role=role, persona=persona, level=level, resume_context=resume_context)


def history_to_chat(messages: list[InterviewMessage]) -> list[dict[str, str]]:
    return [
        {"role": "user" if m.sender == SENDER_USER else "assistant", "content": m.content}
        for m in messages
    ]


class ConversationRelay:
    def __init__(self, storage: Storage, completion_client: CompletionClient):
        self.storage = storage
        self.completion_client = completion_client

    def post_message(self, interview_id: int, actor: User, content: str) -> RelayResult:
        interview = require_owner(self.storage.get_interview(interview_id), actor, "interview")
        if interview.status != STATUS_IN_PROGRESS:
            raise TerminalStateError("Cannot send messages to a completed or cancelled interview")
        content = (content or "").strip()
        if not content:
            raise ValidationError(
                "Invalid input data",
                errors=[{"field": "content", "message": "Message content is required"}],
            )

        user_message = self.storage.create_interview_message(interview.id, SENDER_USER, content)
        history = self.storage.get_interview_messages(interview.id)

        resume = self.storage.get_resume(interview.resume_id) if interview.resume_id else None
        request_messages = self.build_request(interview, history, build_resume_context(resume))

        reply = self._complete(interview, request_messages)
        ai_message = self.storage.create_interview_message(interview.id, SENDER_AI, reply)
        logger.info(
            "Relay turn stored interview_id=%s user_message_id=%s ai_message_id=%s history=%d",
            interview.id,
            user_message.id,
            ai_message.id,
            len(history),
        )
        return RelayResult(user_message=user_message, ai_message=ai_message)

    def build_request(
        self, interview: Interview, history: list[InterviewMessage], resume_context: str = ""
    ) -> list[dict[str, str]]:
        system = {
            "role": "system",
            "content": build_system_prompt(
                interview.interviewer_character,
                interview.target_role,
                interview.experience_level,
                resume_context,
            ),
        }
        return [system, *history_to_chat(history)]

    def _complete(self, interview: Interview, request_messages: list[dict[str, str]]) -> str:
        try:
            return self.completion_client.complete(request_messages)
        except ExternalServiceError as e:
            logger.warning(
                "Completion unavailable, using fallback reply interview_id=%s reason=%s",
                interview.id,
                e.message,
            )
            return FALLBACK_REPLY
