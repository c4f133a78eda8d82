"""Tests for /api/interviews lifecycle endpoints"""
import pytest

from chessview.app.core.exceptions import ForbiddenError, NotFoundError, TerminalStateError, ValidationError
from chessview.app.models.interview import InterviewMessage
from chessview.app.services.interview_service import InterviewService


def _create(client, headers, **overrides):
    body = {
        "target_role": "backend",
        "experience_level": "intermediate",
        "interviewer_character": "rook",
        **overrides,
    }
    return client.post("/api/interviews", headers=headers, json=body)


def test_create_interview_requires_auth(client):
    r = client.post(
        "/api/interviews",
        json={"target_role": "backend", "experience_level": "beginner", "interviewer_character": "pawn"},
    )
    assert r.status_code == 401


def test_create_interview_seeds_greeting(client, auth_headers):
    """Scenario: new interview is in progress with exactly one ai message naming role and persona."""
    r = _create(client, auth_headers)
    assert r.status_code == 201
    interview = r.json()
    assert interview["status"] == "in_progress"
    assert interview["ended_at"] is None

    msgs = client.get(f"/api/interviews/{interview['id']}/messages", headers=auth_headers).json()
    assert len(msgs) == 1
    assert msgs[0]["sender"] == "ai"
    assert "backend" in msgs[0]["content"]
    assert "rook" in msgs[0]["content"]


def test_create_interview_rejects_unknown_persona(client, auth_headers):
    r = _create(client, auth_headers, interviewer_character="dragon")
    assert r.status_code == 422
    body = r.json()
    assert body["code"] == "validation_error"
    assert body["errors"][0]["field"] == "interviewer_character"


def test_create_interview_with_foreign_resume_forbidden(client, auth_headers, storage, other_user):
    resume = storage.create_resume(other_user.id, "cv.pdf", "/u/cv.pdf")
    r = _create(client, auth_headers, resume_id=resume.id)
    assert r.status_code == 403


def test_create_interview_with_missing_resume_not_found(client, auth_headers):
    r = _create(client, auth_headers, resume_id=9999)
    assert r.status_code == 404


def test_create_interview_with_own_resume(client, auth_headers, storage, test_user):
    resume = storage.create_resume(test_user.id, "cv.pdf", "/u/cv.pdf")
    r = _create(client, auth_headers, resume_id=resume.id)
    assert r.status_code == 201
    assert r.json()["resume_id"] == resume.id


def test_list_interviews_most_recent_first(client, auth_headers, other_headers):
    first = _create(client, auth_headers, target_role="frontend").json()
    second = _create(client, auth_headers, target_role="devops").json()
    _create(client, other_headers)
    r = client.get("/api/interviews", headers=auth_headers)
    assert r.status_code == 200
    assert [i["id"] for i in r.json()] == [second["id"], first["id"]]


def test_get_interview_of_other_user_forbidden(client, auth_headers, other_headers):
    interview = _create(client, other_headers).json()
    assert client.get(f"/api/interviews/{interview['id']}", headers=auth_headers).status_code == 403
    assert client.get(f"/api/interviews/{interview['id']}/messages", headers=auth_headers).status_code == 403


def test_get_missing_interview_not_found(client, auth_headers):
    assert client.get("/api/interviews/424242", headers=auth_headers).status_code == 404


def test_end_interview_sets_completed_and_end_time(client, auth_headers):
    interview = _create(client, auth_headers).json()
    r = client.patch(f"/api/interviews/{interview['id']}/end", headers=auth_headers)
    assert r.status_code == 200
    data = r.json()
    assert data["status"] == "completed"
    assert data["ended_at"] is not None
    assert data["ended_at"] >= data["started_at"]


def test_end_completed_interview_always_rejected(client, auth_headers):
    """Repeated end calls on a completed interview give 409 every time and never change it."""
    interview = _create(client, auth_headers).json()
    ended = client.patch(f"/api/interviews/{interview['id']}/end", headers=auth_headers).json()
    for _ in range(3):
        r = client.patch(f"/api/interviews/{interview['id']}/end", headers=auth_headers)
        assert r.status_code == 409
        assert r.json()["code"] == "terminal_state"
    again = client.get(f"/api/interviews/{interview['id']}", headers=auth_headers).json()
    assert again["ended_at"] == ended["ended_at"]
    assert again["status"] == "completed"


def test_cancel_then_end_rejected(client, auth_headers):
    interview = _create(client, auth_headers).json()
    r = client.patch(f"/api/interviews/{interview['id']}/cancel", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["status"] == "cancelled"
    assert r.json()["ended_at"] is not None
    assert client.patch(f"/api/interviews/{interview['id']}/end", headers=auth_headers).status_code == 409


def test_end_other_users_interview_forbidden(client, auth_headers, other_headers):
    interview = _create(client, other_headers).json()
    r = client.patch(f"/api/interviews/{interview['id']}/end", headers=auth_headers)
    assert r.status_code == 403


# --- service level ---

def test_service_status_end_time_invariant(storage, test_user):
    service = InterviewService(storage)
    a = service.create_interview(test_user, "backend", "beginner", "pawn")
    b = service.create_interview(test_user, "data", "advanced", "queen")
    service.end_interview(a.id, test_user)
    service.cancel_interview(b.id, test_user)
    c = service.create_interview(test_user, "qa", "beginner", "king")
    for interview in service.list_interviews(test_user):
        if interview.status == "in_progress":
            assert interview.ended_at is None
        else:
            assert interview.ended_at is not None
            assert interview.ended_at >= interview.started_at
    assert c.status == "in_progress"


def test_service_first_message_is_ai(storage, test_user, db_session):
    service = InterviewService(storage)
    for persona in ("pawn", "knight", "bishop", "rook", "queen", "king"):
        interview = service.create_interview(test_user, "fullstack", "intermediate", persona)
        first = (
            db_session.query(InterviewMessage)
            .filter(InterviewMessage.interview_id == interview.id)
            .order_by(InterviewMessage.sent_at, InterviewMessage.id)
            .first()
        )
        assert first.sender == "ai"
        assert persona in first.content


def test_service_persona_is_normalized(storage, test_user):
    interview = InterviewService(storage).create_interview(test_user, "backend", "beginner", " Knight ")
    assert interview.interviewer_character == "knight"


def test_service_errors(storage, test_user, other_user):
    service = InterviewService(storage)
    with pytest.raises(ValidationError) as exc:
        service.create_interview(test_user, "", "", "pawn")
    assert {e["field"] for e in exc.value.errors} == {"target_role", "experience_level"}

    with pytest.raises(NotFoundError):
        service.end_interview(999, test_user)

    interview = service.create_interview(other_user, "backend", "beginner", "pawn")
    with pytest.raises(ForbiddenError):
        service.end_interview(interview.id, test_user)

    service.end_interview(interview.id, other_user)
    with pytest.raises(TerminalStateError):
        service.end_interview(interview.id, other_user)


def test_interview_options(client):
    data = client.get("/api/interviews/options").json()
    assert data["personas"] == ["pawn", "knight", "bishop", "rook", "queen", "king"]
    assert data["roles"]["backend"] == "Backend Developer"
    assert "advanced" in data["experience_levels"]
