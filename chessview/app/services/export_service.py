"""
Export snapshots - interviews (CSV), one interview's messages (CSV), full dataset (JSON).

Each call writes a new timestamped file under the export directory and returns its path,
or a "nothing to export" message when the result set is empty.

CSV field rule (one header row from the first record's columns):
    None      -> empty field
    datetime  -> ISO-8601, unquoted
    dict/list -> JSON, quoted, embedded quotes doubled
    other     -> str(value), quoted, embedded quotes doubled
"""
import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

from sqlalchemy.orm import Session

from chessview.app.core.config import NO_INTERVIEWS_TO_EXPORT, NO_MESSAGES_TO_EXPORT
from chessview.app.core.exceptions import NotFoundError, StorageError
from chessview.app.core.logging_config import get_logger
from chessview.app.models.interview import Interview, InterviewMessage
from chessview.app.models.resume import Resume
from chessview.app.models.user import User

logger = get_logger("services.export")

# Never leaves the database
USER_EXPORT_EXCLUDE = frozenset({"hashed_password"})


@dataclass
class ExportResult:
    path: Path | None = None
    message: str | None = None

    @property
    def has_file(self) -> bool:
        return self.path is not None


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def csv_field(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (dict, list)):
        return _quote(json.dumps(value, default=str))
    return _quote(str(value))


def row_to_csv(row: dict[str, Any]) -> str:
    return ",".join(csv_field(v) for v in row.values())


def model_to_row(record, exclude: Iterable[str] = ()) -> dict[str, Any]:
    """Column name -> value, in table column order."""
    skip = set(exclude)
    return {
        c.name: getattr(record, c.key)
        for c in record.__mapper__.columns
        if c.name not in skip
    }


def _json_ready(row: dict[str, Any]) -> dict[str, Any]:
    return {k: (v.isoformat() if isinstance(v, datetime) else v) for k, v in row.items()}


def export_timestamp() -> str:
    return datetime.utcnow().isoformat(timespec="microseconds").replace(":", "-")


class ExportService:
    def __init__(self, db: Session, export_dir: str | Path):
        self.db = db
        self.export_dir = Path(export_dir)

    def _ensure_dir(self) -> Path:
        self.export_dir.mkdir(parents=True, exist_ok=True)
        return self.export_dir

    def _write_csv(self, filename: str, rows: list[dict[str, Any]]) -> Path:
        path = self._ensure_dir() / filename
        lines = [",".join(rows[0].keys())] + [row_to_csv(r) for r in rows]
        try:
            path.write_text("\n".join(lines), encoding="utf-8")
        except OSError as e:
            logger.exception("Export write failed path=%s", path)
            raise StorageError("Failed to write export file") from e
        return path

    def export_interviews_csv(
        self,
        user_id: int | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> ExportResult:
        """Interviews, optionally filtered by owner and inclusive started_at bounds, newest first."""
        query = self.db.query(Interview)
        if user_id is not None:
            query = query.filter(Interview.user_id == user_id)
        if start is not None:
            query = query.filter(Interview.started_at >= start)
        if end is not None:
            query = query.filter(Interview.started_at <= end)
        interviews = query.order_by(Interview.started_at.desc(), Interview.id.desc()).all()

        if not interviews:
            logger.info("Interview export empty user_id=%s start=%s end=%s", user_id, start, end)
            return ExportResult(message=NO_INTERVIEWS_TO_EXPORT)

        path = self._write_csv(
            f"interviews_export_{export_timestamp()}.csv",
            [model_to_row(i) for i in interviews],
        )
        logger.info("Interviews exported user_id=%s rows=%d path=%s", user_id, len(interviews), path)
        return ExportResult(path=path)

    def export_interview_messages_csv(self, interview_id: int) -> ExportResult:
        """Messages of one interview, oldest first. Ownership is checked by the caller."""
        if self.db.query(Interview.id).filter(Interview.id == interview_id).first() is None:
            raise NotFoundError("Interview not found")
        messages = (
            self.db.query(InterviewMessage)
            .filter(InterviewMessage.interview_id == interview_id)
            .order_by(InterviewMessage.sent_at.asc(), InterviewMessage.id.asc())
            .all()
        )
        if not messages:
            return ExportResult(message=NO_MESSAGES_TO_EXPORT)

        path = self._write_csv(
            f"interview_{interview_id}_messages_{export_timestamp()}.csv",
            [model_to_row(m) for m in messages],
        )
        logger.info("Interview messages exported interview_id=%s rows=%d path=%s", interview_id, len(messages), path)
        return ExportResult(path=path)

    def export_all_json(self) -> ExportResult:
        """Every user, resume, interview and message in one JSON envelope."""
        users = [model_to_row(u, exclude=USER_EXPORT_EXCLUDE) for u in self.db.query(User).order_by(User.id).all()]
        resumes = []
        for r in self.db.query(Resume).order_by(Resume.id).all():
            row = model_to_row(r)
            parsed = r.parsed
            if parsed.is_present:
                row["parsed_content"] = parsed.value
            resumes.append(row)
        interviews = [model_to_row(i) for i in self.db.query(Interview).order_by(Interview.id).all()]
        messages = [
            model_to_row(m)
            for m in self.db.query(InterviewMessage).order_by(InterviewMessage.id).all()
        ]

        export_data = {
            "exportDate": datetime.utcnow().isoformat(),
            "data": {
                "users": [_json_ready(r) for r in users],
                "resumes": [_json_ready(r) for r in resumes],
                "interviews": [_json_ready(r) for r in interviews],
                "messages": [_json_ready(r) for r in messages],
            },
        }
        path = self._ensure_dir() / f"chessview_export_{export_timestamp()}.json"
        try:
            path.write_text(json.dumps(export_data, indent=2, default=str), encoding="utf-8")
        except OSError as e:
            logger.exception("Export write failed path=%s", path)
            raise StorageError("Failed to write export file") from e
        logger.info(
            "Full export written users=%d resumes=%d interviews=%d messages=%d path=%s",
            len(users),
            len(resumes),
            len(interviews),
            len(messages),
            path,
        )
        return ExportResult(path=path)
