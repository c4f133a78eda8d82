"""
Export endpoints - CSV/JSON snapshots returned as downloads, or {"message"} when nothing matched
"""
from datetime import date, datetime, time, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from chessview.app.core.config import settings
from chessview.app.core.dependencies import get_current_user, get_db, get_storage, require_export_admin
from chessview.app.core.exceptions import ForbiddenError, ValidationError
from chessview.app.core.logging_config import get_logger
from chessview.app.models.user import User
from chessview.app.services.export_service import ExportResult, ExportService
from chessview.app.services.ownership import require_owner
from chessview.app.services.storage import Storage

logger = get_logger("api.export")
router = APIRouter()


def _parse_bound(raw: str | None, field: str, end_of_day: bool = False) -> datetime | None:
    """ISO date or datetime -> naive UTC datetime. A bare end date covers the whole day."""
    if not raw:
        return None
    raw = raw.strip()
    try:
        if len(raw) == 10:
            d = date.fromisoformat(raw)
            return datetime.combine(d, time.max if end_of_day else time.min)
        value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(
            "Invalid input data",
            errors=[{"field": field, "message": "Expected ISO date (YYYY-MM-DD) or datetime"}],
        )
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def _respond(result: ExportResult, download_name: str, media_type: str):
    if result.has_file:
        return FileResponse(result.path, media_type=media_type, filename=download_name)
    return {"message": result.message}


def _today() -> str:
    return datetime.utcnow().date().isoformat()


@router.get("/interviews")
def export_interviews(
    owner: int | None = None,
    start: str | None = None,
    end: str | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Interviews as CSV. Regular users always export their own interviews; the export
    admin may pass any `owner`, or none for all users.
    """
    is_admin = current_user.id == settings.export_admin_user_id
    if owner is not None and owner != current_user.id and not is_admin:
        raise ForbiddenError("Not authorized to export another user's interviews")
    user_id = owner if is_admin else current_user.id

    start_dt = _parse_bound(start, "start")
    end_dt = _parse_bound(end, "end", end_of_day=True)
    if start_dt and end_dt and start_dt > end_dt:
        raise ValidationError("Invalid input data", errors=[{"field": "start", "message": "start is after end"}])

    result = ExportService(db, settings.export_dir).export_interviews_csv(user_id, start_dt, end_dt)
    logger.info("Interview export requested user_id=%s owner=%s file=%s", current_user.id, user_id, result.has_file)
    return _respond(result, f"interview_export_{_today()}.csv", "text/csv")


@router.get("/interviews/{interview_id}/messages")
def export_interview_messages(
    interview_id: int,
    db: Session = Depends(get_db),
    storage: Storage = Depends(get_storage),
    current_user: User = Depends(get_current_user),
):
    require_owner(storage.get_interview(interview_id), current_user, "interview")
    result = ExportService(db, settings.export_dir).export_interview_messages_csv(interview_id)
    return _respond(result, f"interview_{interview_id}_messages_{_today()}.csv", "text/csv")


@router.get("/all")
def export_all(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_export_admin),
):
    """Full dataset as JSON. Export admin only."""
    result = ExportService(db, settings.export_dir).export_all_json()
    logger.info("Full export requested user_id=%s", current_user.id)
    return _respond(result, f"chessview_export_{_today()}.json", "application/json")
