"""
Dependency injection utilities
"""
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from chessview.app.core.config import settings
from chessview.app.db.session import SessionLocal
from chessview.app.models.user import User
from chessview.app.services.completion_client import CompletionClient
from chessview.app.services.conversation_relay import ConversationRelay
from chessview.app.services.google_identity import GoogleTokenVerifier
from chessview.app.services.interview_service import InterviewService
from chessview.app.services.storage import Storage
from chessview.app.tasks.resume_parse import ResumeParseJobs

security = HTTPBearer(auto_error=False)


def get_db() -> Session:
    """Get database session"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_storage(db: Session = Depends(get_db)) -> Storage:
    return Storage(db)


def get_completion_client(request: Request) -> CompletionClient:
    """Process-wide client created in the app lifespan."""
    return request.app.state.completion_client


def get_resume_jobs(request: Request) -> ResumeParseJobs:
    return request.app.state.resume_jobs


def get_google_verifier(request: Request) -> GoogleTokenVerifier:
    return request.app.state.google_verifier


def get_interview_service(storage: Storage = Depends(get_storage)) -> InterviewService:
    return InterviewService(storage)


def get_conversation_relay(
    storage: Storage = Depends(get_storage),
    completion_client: CompletionClient = Depends(get_completion_client),
) -> ConversationRelay:
    return ConversationRelay(storage, completion_client)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    storage: Storage = Depends(get_storage),
) -> User:
    """Get current authenticated user from JWT"""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    token = credentials.credentials
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm]
        )
        user_id: str = payload.get("sub")
        if not user_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token",
            )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user = storage.get_user(int(user_id))
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )
    return user


def require_export_admin(current_user: User = Depends(get_current_user)) -> User:
    """Only the configured admin user may export the full dataset."""
    if current_user.id != settings.export_admin_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to perform this action",
        )
    return current_user
