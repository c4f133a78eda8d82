"""
Interview endpoints - lifecycle and conversation
"""
from fastapi import APIRouter, Depends, status

from chessview.app.core.config import EXPERIENCE_LEVELS, JOB_ROLES, PERSONAS
from chessview.app.core.dependencies import get_conversation_relay, get_current_user, get_interview_service
from chessview.app.core.logging_config import get_logger
from chessview.app.models.user import User
from chessview.app.schemas.interview import (
    InterviewCreate,
    InterviewResponse,
    MessageCreate,
    MessageExchangeResponse,
    MessageResponse,
)
from chessview.app.services.conversation_relay import ConversationRelay
from chessview.app.services.interview_service import InterviewService

logger = get_logger("api.interviews")
router = APIRouter()


@router.post("", response_model=InterviewResponse, status_code=status.HTTP_201_CREATED)
def create_interview(
    payload: InterviewCreate,
    service: InterviewService = Depends(get_interview_service),
    current_user: User = Depends(get_current_user),
):
    """
    Start an interview. The opening interviewer message is stored with it;
    fetch GET /interviews/{id}/messages to read it.
    """
    return service.create_interview(
        owner=current_user,
        target_role=payload.target_role,
        experience_level=payload.experience_level,
        persona=payload.interviewer_character,
        resume_id=payload.resume_id,
    )


@router.get("", response_model=list[InterviewResponse])
def list_interviews(
    service: InterviewService = Depends(get_interview_service),
    current_user: User = Depends(get_current_user),
):
    """Current user's interviews, most recent first."""
    return service.list_interviews(current_user)


@router.get("/options")
def interview_options():
    """Personas, role catalogue and experience levels for the create form."""
    return {
        "personas": list(PERSONAS),
        "roles": JOB_ROLES,
        "experience_levels": list(EXPERIENCE_LEVELS),
    }


@router.get("/{interview_id}", response_model=InterviewResponse)
def get_interview(
    interview_id: int,
    service: InterviewService = Depends(get_interview_service),
    current_user: User = Depends(get_current_user),
):
    return service.get_interview(interview_id, current_user)


@router.patch("/{interview_id}/end", response_model=InterviewResponse)
def end_interview(
    interview_id: int,
    service: InterviewService = Depends(get_interview_service),
    current_user: User = Depends(get_current_user),
):
    """Mark the interview completed. 409 if it is already completed or cancelled."""
    return service.end_interview(interview_id, current_user)


@router.patch("/{interview_id}/cancel", response_model=InterviewResponse)
def cancel_interview(
    interview_id: int,
    service: InterviewService = Depends(get_interview_service),
    current_user: User = Depends(get_current_user),
):
    """Mark the interview cancelled. 409 if it is already completed or cancelled."""
    return service.cancel_interview(interview_id, current_user)


@router.get("/{interview_id}/messages", response_model=list[MessageResponse])
def get_messages(
    interview_id: int,
    service: InterviewService = Depends(get_interview_service),
    current_user: User = Depends(get_current_user),
):
    return service.get_messages(interview_id, current_user)


@router.post("/{interview_id}/messages", response_model=MessageExchangeResponse, status_code=status.HTTP_201_CREATED)
def post_message(
    interview_id: int,
    payload: MessageCreate,
    relay: ConversationRelay = Depends(get_conversation_relay),
    current_user: User = Depends(get_current_user),
):
    """Send a candidate answer; returns it together with the interviewer's reply."""
    result = relay.post_message(interview_id, current_user, payload.content)
    return MessageExchangeResponse(
        user_message=MessageResponse.model_validate(result.user_message),
        ai_message=MessageResponse.model_validate(result.ai_message),
    )
