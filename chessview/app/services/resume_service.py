"""
Resume service - upload storage, ownership-checked reads, parse job hand-off.
"""
import uuid
from pathlib import Path

from chessview.app.core.config import ALLOWED_RESUME_EXTENSIONS, settings
from chessview.app.core.exceptions import StorageError, ValidationError
from chessview.app.core.logging_config import get_logger
from chessview.app.models.resume import Resume
from chessview.app.models.user import User
from chessview.app.services.ownership import require_owner
from chessview.app.services.storage import Storage

logger = get_logger("services.resume")


def validate_upload(filename: str | None, size: int) -> str:
    """Return the lowercased suffix of an acceptable upload, else raise ValidationError."""
    suffix = Path(filename or "").suffix.lower()
    if suffix not in ALLOWED_RESUME_EXTENSIONS:
        raise ValidationError(
            "Invalid file type",
            errors=[{"field": "file", "message": f"Allowed: {', '.join(ALLOWED_RESUME_EXTENSIONS)}"}],
        )
    if size == 0:
        raise ValidationError("Empty file", errors=[{"field": "file", "message": "File is empty"}])
    return suffix


def save_upload(contents: bytes, suffix: str, upload_dir: str | None = None) -> tuple[Path, str]:
    """Write the file under upload_dir with a uuid name. Returns (path on disk, public url)."""
    directory = upload_dir or settings.upload_dir
    upload_path = Path(directory)
    upload_path.mkdir(parents=True, exist_ok=True)
    unique_name = f"{uuid.uuid4()}{suffix}"
    file_path = upload_path / unique_name
    try:
        file_path.write_bytes(contents)
    except OSError as e:
        logger.exception("Failed to store resume upload path=%s", file_path)
        raise StorageError("Failed to store uploaded file") from e
    return file_path, f"/{directory.strip('/')}/{unique_name}"


class ResumeService:
    def __init__(self, storage: Storage):
        self.storage = storage

    def create_resume(self, owner: User, original_name: str, contents: bytes, upload_dir: str | None = None) -> tuple[Resume, Path]:
        suffix = validate_upload(original_name, len(contents))
        file_path, file_url = save_upload(contents, suffix, upload_dir)
        try:
            resume = self.storage.create_resume(owner.id, original_name, file_url)
        except StorageError:
            file_path.unlink(missing_ok=True)
            logger.warning("Removed upload after failed resume insert path=%s", file_path)
            raise
        logger.info(
            "Resume stored user_id=%s resume_id=%s filename=%s bytes=%d",
            owner.id,
            resume.id,
            original_name,
            len(contents),
        )
        return resume, file_path

    def list_resumes(self, owner: User) -> list[Resume]:
        return self.storage.get_resumes_by_user(owner.id)

    def get_resume(self, resume_id: int, actor: User) -> Resume:
        return require_owner(self.storage.get_resume(resume_id), actor, "resume")
