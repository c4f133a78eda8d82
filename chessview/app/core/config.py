"""
Application configuration settings.
Loads from .env file first (overrides shell env for local dev), then pydantic reads from environment.
Production: set env vars in the platform (Docker, K8s, etc.); .env is optional.

All backend-related configs and constants are centralized here.
"""
from pathlib import Path

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env path: chessview/.env (absolute path, works regardless of cwd)
_BASE_DIR = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = (_BASE_DIR / ".env").resolve()

if _ENV_FILE.exists():
    load_dotenv(_ENV_FILE, override=True)


class Settings(BaseSettings):
    """Application settings. Source: env vars (after dotenv load)."""

    # App
    app_name: str = "ChessView"
    app_version: str = "1.0.0"
    port: int = 8001

    # Database
    database_url: str = "sqlite:///./chessview.db"

    # Auth
    secret_key: str = "your-secret-key-change-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Upload & storage
    upload_dir: str = "uploads/resumes"
    max_upload_bytes: int = 5 * 1024 * 1024

    # Export
    export_dir: str = "exports"
    export_admin_user_id: int = 1

    # OpenAI
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"
    openai_timeout_seconds: float = 20.0
    openai_max_tokens: int = 250

    # Resume enrichment
    resume_context_max_chars: int = 1500
    resume_parse_workers: int = 2
    resume_parse_max_attempts: int = 3
    resume_parse_retry_delay_seconds: float = 2.0

    # Google sign-in (OAuth client id the ID tokens are issued for)
    google_client_id: str = ""

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


# --- Constants (non-env, business config) ---

# Interviewer personas (chess pieces)
PERSONAS: tuple[str, ...] = ("pawn", "knight", "bishop", "rook", "queen", "king")

# Role catalogue shown by the client; target_role stays free text
JOB_ROLES: dict[str, str] = {
    "frontend": "Frontend Developer",
    "backend": "Backend Developer",
    "fullstack": "Full Stack Developer",
    "data": "Data Scientist",
    "devops": "DevOps Engineer",
    "mobile": "Mobile Developer",
    "qa": "QA Engineer",
    "manager": "Engineering Manager",
}

EXPERIENCE_LEVELS: tuple[str, ...] = ("beginner", "intermediate", "advanced")

# Interview status machine: in_progress -> completed | cancelled
STATUS_IN_PROGRESS: str = "in_progress"
STATUS_COMPLETED: str = "completed"
STATUS_CANCELLED: str = "cancelled"

SENDER_USER: str = "user"
SENDER_AI: str = "ai"

GREETING_TEMPLATE: str = (
    "Hello! I'm your {persona} interviewer. Welcome to ChessView. "
    "Let's start with a brief introduction. Could you tell me a bit about "
    "yourself and your background in {role}?"
)

FALLBACK_REPLY: str = (
    "I apologize, but I'm having trouble forming a response. "
    "Let's continue our interview. Could you tell me more about your experience?"
)

NO_INTERVIEWS_TO_EXPORT: str = "No interviews found matching the criteria"
NO_MESSAGES_TO_EXPORT: str = "No messages found for this interview"

# Resume upload
ALLOWED_RESUME_EXTENSIONS: tuple[str, ...] = (".pdf", ".doc", ".docx", ".txt")
