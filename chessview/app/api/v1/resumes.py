"""
Resume endpoints - upload (starts background parse), list, get
"""
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from chessview.app.core.config import settings
from chessview.app.core.dependencies import get_current_user, get_resume_jobs, get_storage
from chessview.app.core.logging_config import get_logger
from chessview.app.models.user import User
from chessview.app.schemas.interview import ResumeResponse
from chessview.app.services.resume_service import ResumeService
from chessview.app.services.storage import Storage
from chessview.app.tasks.resume_parse import ResumeParseJobs

logger = get_logger("api.resumes")
router = APIRouter()


@router.post("", response_model=ResumeResponse, status_code=status.HTTP_201_CREATED)
async def upload_resume(
    file: UploadFile = File(...),
    storage: Storage = Depends(get_storage),
    jobs: ResumeParseJobs = Depends(get_resume_jobs),
    current_user: User = Depends(get_current_user),
):
    """
    Upload a resume file (PDF, DOC, DOCX, TXT).
    Parsed content is filled in asynchronously; poll GET /resumes/{id}.
    """
    contents = await file.read()
    if len(contents) > settings.max_upload_bytes:
        logger.warning("Resume upload rejected - too large user_id=%s bytes=%d", current_user.id, len(contents))
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail="File too large")

    resume, file_path = ResumeService(storage).create_resume(current_user, file.filename or "", contents)
    jobs.submit(resume.id, file_path)
    return ResumeResponse.from_model(resume)


@router.get("", response_model=list[ResumeResponse])
def list_resumes(
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    """Current user's resumes, newest first."""
    return [ResumeResponse.from_model(r) for r in ResumeService(storage).list_resumes(current_user)]


@router.get("/{resume_id}", response_model=ResumeResponse)
def get_resume(
    resume_id: int,
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    return ResumeResponse.from_model(ResumeService(storage).get_resume(resume_id, current_user))
