"""Tests for CSV/JSON export (service and /api/export endpoints)"""
import csv
import io
import json
from datetime import datetime

import pytest

from chessview.app.core.config import NO_INTERVIEWS_TO_EXPORT, NO_MESSAGES_TO_EXPORT
from chessview.app.core.exceptions import NotFoundError
from chessview.app.models.resume import Resume
from chessview.app.services.export_service import ExportService, csv_field, export_timestamp
from chessview.app.services.interview_service import InterviewService


def _rows(path):
    return list(csv.reader(io.StringIO(path.read_text(encoding="utf-8"))))


@pytest.fixture
def exporter(db_session, tmp_path):
    return ExportService(db_session, tmp_path / "exports")


def _interview_at(storage, db_session, user, when, role="backend"):
    interview = InterviewService(storage).create_interview(user, role, "intermediate", "rook")
    interview.started_at = when
    db_session.commit()
    return interview


def test_csv_field_rules():
    assert csv_field(None) == ""
    assert csv_field(datetime(2026, 1, 2, 3, 4, 5)) == "2026-01-02T03:04:05"
    assert csv_field(7) == '"7"'
    assert csv_field('say "hi"') == '"say ""hi"""'
    assert csv_field({"a": [1]}) == '"{""a"": [1]}"'


def test_export_timestamp_is_filename_safe():
    assert ":" not in export_timestamp()


def test_interviews_csv_round_trips_through_csv_reader(storage, db_session, test_user, exporter):
    interview = InterviewService(storage).create_interview(test_user, 'Backend, "Go"', "intermediate", "knight")
    result = exporter.export_interviews_csv()
    assert result.has_file
    assert result.path.name.startswith("interviews_export_")

    rows = _rows(result.path)
    assert rows[0] == [
        "id", "user_id", "resume_id", "target_role", "experience_level",
        "interviewer_character", "started_at", "ended_at", "status",
    ]
    record = dict(zip(rows[0], rows[1]))
    assert record["id"] == str(interview.id)
    assert record["target_role"] == 'Backend, "Go"'
    assert record["resume_id"] == ""
    assert record["ended_at"] == ""
    assert record["started_at"] == interview.started_at.isoformat()
    assert record["status"] == "in_progress"


def test_interviews_csv_empty_gives_message(exporter, test_user):
    result = exporter.export_interviews_csv(user_id=test_user.id)
    assert not result.has_file
    assert result.message == NO_INTERVIEWS_TO_EXPORT


def test_interviews_csv_filters_owner_and_inclusive_range(storage, db_session, test_user, other_user, exporter):
    early = _interview_at(storage, db_session, test_user, datetime(2026, 1, 10, 0, 0, 0))
    late = _interview_at(storage, db_session, test_user, datetime(2026, 1, 12, 0, 0, 0))
    _interview_at(storage, db_session, test_user, datetime(2026, 1, 15))
    _interview_at(storage, db_session, other_user, datetime(2026, 1, 11))

    result = exporter.export_interviews_csv(
        user_id=test_user.id, start=datetime(2026, 1, 10), end=datetime(2026, 1, 12)
    )
    rows = _rows(result.path)
    assert [r[0] for r in rows[1:]] == [str(late.id), str(early.id)]


def test_messages_csv_in_send_order(storage, test_user, exporter):
    interview = InterviewService(storage).create_interview(test_user, "backend", "beginner", "pawn")
    storage.create_interview_message(interview.id, "user", "line one\nline two")
    storage.create_interview_message(interview.id, "ai", "ok")

    result = exporter.export_interview_messages_csv(interview.id)
    assert result.path.name.startswith(f"interview_{interview.id}_messages_")
    rows = _rows(result.path)
    assert rows[0] == ["id", "interview_id", "sender", "content", "sent_at"]
    assert [r[2] for r in rows[1:]] == ["ai", "user", "ai"]
    assert rows[2][3] == "line one\nline two"


def test_messages_csv_missing_interview(exporter, test_user):
    with pytest.raises(NotFoundError):
        exporter.export_interview_messages_csv(404)


def test_messages_csv_empty_gives_message(storage, db_session, test_user, exporter):
    interview = InterviewService(storage).create_interview(test_user, "backend", "beginner", "pawn")
    for m in storage.get_interview_messages(interview.id):
        db_session.delete(m)
    db_session.commit()
    result = exporter.export_interview_messages_csv(interview.id)
    assert result.message == NO_MESSAGES_TO_EXPORT


def test_full_json_export(storage, db_session, test_user, exporter):
    parsed = storage.create_resume(test_user.id, "a.pdf", "/u/a.pdf")
    storage.update_resume_parsed_content(parsed.id, {"skills": ["Go"]})
    corrupt = storage.create_resume(test_user.id, "b.pdf", "/u/b.pdf")
    db_session.query(Resume).filter(Resume.id == corrupt.id).update({Resume.parsed_content: "{oops"})
    db_session.commit()
    InterviewService(storage).create_interview(test_user, "backend", "beginner", "pawn")

    result = exporter.export_all_json()
    assert result.path.name.startswith("chessview_export_")
    dump = json.loads(result.path.read_text(encoding="utf-8"))
    assert set(dump) == {"exportDate", "data"}
    data = dump["data"]
    assert set(data) == {"users", "resumes", "interviews", "messages"}
    assert "hashed_password" not in data["users"][0]
    assert data["users"][0]["email"] == test_user.email

    by_id = {r["id"]: r for r in data["resumes"]}
    assert by_id[parsed.id]["parsed_content"] == {"skills": ["Go"]}
    assert by_id[corrupt.id]["parsed_content"] == "{oops"
    assert len(data["interviews"]) == 1
    assert data["messages"][0]["sender"] == "ai"


# --- API ---

def test_api_export_interviews_download(client, auth_headers, storage, test_user):
    InterviewService(storage).create_interview(test_user, "backend", "beginner", "pawn")
    r = client.get("/api/export/interviews", headers=auth_headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert "attachment" in r.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(r.text)))
    assert len(rows) == 2


def test_api_export_interviews_empty_message(client, other_headers):
    r = client.get("/api/export/interviews", headers=other_headers)
    assert r.status_code == 200
    assert r.json() == {"message": NO_INTERVIEWS_TO_EXPORT}


def test_api_export_foreign_owner_forbidden_for_regular_user(client, other_headers, test_user):
    r = client.get(f"/api/export/interviews?owner={test_user.id}", headers=other_headers)
    assert r.status_code == 403


def test_api_admin_exports_other_owner(client, auth_headers, storage, other_user):
    InterviewService(storage).create_interview(other_user, "qa", "beginner", "king")
    r = client.get(f"/api/export/interviews?owner={other_user.id}", headers=auth_headers)
    assert r.status_code == 200
    rows = list(csv.reader(io.StringIO(r.text)))
    assert rows[1][1] == str(other_user.id)


def test_api_export_bare_end_date_covers_whole_day(client, auth_headers, storage, db_session, test_user):
    _interview_at(storage, db_session, test_user, datetime(2026, 3, 1, 18, 30))
    r = client.get("/api/export/interviews?start=2026-03-01&end=2026-03-01", headers=auth_headers)
    assert r.headers["content-type"].startswith("text/csv")
    r = client.get("/api/export/interviews?start=2026-03-02", headers=auth_headers)
    assert r.json() == {"message": NO_INTERVIEWS_TO_EXPORT}


def test_api_export_invalid_dates(client, auth_headers):
    assert client.get("/api/export/interviews?start=yesterday", headers=auth_headers).status_code == 422
    r = client.get("/api/export/interviews?start=2026-02-01&end=2026-01-01", headers=auth_headers)
    assert r.status_code == 422


def test_api_export_messages_ownership(client, auth_headers, other_headers, storage, test_user):
    interview = InterviewService(storage).create_interview(test_user, "backend", "beginner", "pawn")
    assert client.get(f"/api/export/interviews/{interview.id}/messages", headers=other_headers).status_code == 403
    assert client.get("/api/export/interviews/999/messages", headers=auth_headers).status_code == 404
    r = client.get(f"/api/export/interviews/{interview.id}/messages", headers=auth_headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")


def test_api_export_all_admin_only(client, auth_headers, other_headers):
    assert client.get("/api/export/all", headers=other_headers).status_code == 403
    r = client.get("/api/export/all", headers=auth_headers)
    assert r.status_code == 200
    assert "users" in r.json()["data"]
