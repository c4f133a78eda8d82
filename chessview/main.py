"""
FastAPI application entry point
"""
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from chessview.app.api.v1 import auth, export, interviews, resumes
from chessview.app.core.config import settings
from chessview.app.core.exceptions import ChessViewError, chessview_error_handler
from chessview.app.core.logging_config import get_logger, setup_logging
from chessview.app.db import session as db_session
from chessview.app.db.base import Base
from chessview.app.services.completion_client import CompletionClient
from chessview.app.services.google_identity import GoogleTokenVerifier
from chessview.app.services.resume_parser import ResumeParser
from chessview.app.tasks.resume_parse import ResumeParseJobs

# Import models so they register with Base.metadata
import chessview.app.models  # noqa: F401

setup_logging()
logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=db_session.engine)
    completion_client = CompletionClient.from_settings(settings)
    if not completion_client.configured:
        logger.warning("openai_api_key not set - interviewer replies will use the fallback message")
    app.state.completion_client = completion_client
    app.state.resume_jobs = ResumeParseJobs(db_session.SessionLocal, ResumeParser(completion_client))
    app.state.google_verifier = GoogleTokenVerifier.from_settings(settings)
    if not settings.google_client_id:
        logger.warning("google_client_id not set - Google sign-in is disabled")
    logger.info("%s %s started", settings.app_name, settings.app_version)
    try:
        yield
    finally:
        app.state.resume_jobs.shutdown(wait=False)


# Initialize FastAPI app
app = FastAPI(
    title="ChessView API",
    description="Mock interview API with chess-piece interviewers",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ChessViewError, chessview_error_handler)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(resumes.router, prefix="/api/resumes", tags=["resumes"])
app.include_router(interviews.router, prefix="/api/interviews", tags=["interviews"])
app.include_router(export.router, prefix="/api/export", tags=["export"])

# Serve uploaded resumes (create dir if missing)
upload_path = Path(settings.upload_dir)
upload_path.mkdir(parents=True, exist_ok=True)
app.mount(f"/{settings.upload_dir}", StaticFiles(directory=settings.upload_dir), name="resumes")


@app.get("/")
def read_root():
    """Root endpoint"""
    return {"message": "ChessView API", "version": settings.app_version}


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
