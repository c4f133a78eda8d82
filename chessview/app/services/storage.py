"""
Storage - record access layer over users, resumes, interviews and interview messages.
Single writer of the database; routes and services never add/commit models themselves.

Reads degrade to None / [] on a database error (logged). Writes roll back and raise StorageError.
Creates insert, then re-fetch by the generated id; a missing re-fetch is a StorageError.
"""
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chessview.app.core.config import SENDER_AI, STATUS_IN_PROGRESS
from chessview.app.core.exceptions import StorageError
from chessview.app.core.logging_config import get_logger
from chessview.app.models.interview import Interview, InterviewMessage
from chessview.app.models.resume import Resume
from chessview.app.models.user import User
from chessview.app.utils.json_field import encode_parsed_content

logger = get_logger("services.storage")


class Storage:
    def __init__(self, db: Session):
        self.db = db

    # --- internals ---

    def _first(self, query, what: str):
        try:
            return query.first()
        except SQLAlchemyError as e:
            logger.warning("Read failed %s error=%s", what, e)
            self.db.rollback()
            return None

    def _all(self, query, what: str) -> list:
        try:
            return query.all()
        except SQLAlchemyError as e:
            logger.warning("Read failed %s error=%s", what, e)
            self.db.rollback()
            return []

    def _commit(self, what: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Write failed %s", what)
            raise StorageError(f"Failed to write {what}") from e

    def _refetch(self, getter, record_id: int, entity: str):
        record = getter(record_id)
        if record is None:
            logger.error("Created %s id=%s could not be re-fetched", entity, record_id)
            raise StorageError(f"Failed to retrieve created {entity}")
        return record

    # --- users ---

    def get_user(self, user_id: int) -> User | None:
        return self._first(self.db.query(User).filter(User.id == user_id), f"user id={user_id}")

    def get_user_by_username(self, username: str) -> User | None:
        return self._first(self.db.query(User).filter(User.username == username), "user by username")

    def get_user_by_email(self, email: str) -> User | None:
        return self._first(self.db.query(User).filter(User.email == email), "user by email")

    def get_user_by_google_id(self, google_id: str) -> User | None:
        return self._first(self.db.query(User).filter(User.google_id == google_id), "user by google id")

    def create_user(
        self,
        username: str,
        email: str,
        hashed_password: str = "",
        first_name: str | None = None,
        last_name: str | None = None,
        profile_picture_url: str | None = None,
        google_id: str | None = None,
    ) -> User:
        user = User(
            username=username,
            email=email,
            hashed_password=hashed_password or "",
            first_name=first_name,
            last_name=last_name,
            profile_picture_url=profile_picture_url,
            google_id=google_id,
        )
        self.db.add(user)
        self._commit("user")
        return self._refetch(self.get_user, user.id, "user")

    def link_google_account(self, user_id: int, google_id: str, profile_picture_url: str | None = None) -> User:
        """Attach a Google identity to an existing user (the only permitted user update)."""
        user = self.get_user(user_id)
        if user is None:
            raise StorageError("Failed to retrieve user for google link")
        user.google_id = google_id
        if profile_picture_url and not user.profile_picture_url:
            user.profile_picture_url = profile_picture_url
        self._commit("user google link")
        return self._refetch(self.get_user, user_id, "user")

    # --- resumes ---

    def get_resume(self, resume_id: int) -> Resume | None:
        return self._first(self.db.query(Resume).filter(Resume.id == resume_id), f"resume id={resume_id}")

    def get_resumes_by_user(self, user_id: int) -> list[Resume]:
        return self._all(
            self.db.query(Resume)
            .filter(Resume.user_id == user_id)
            .order_by(Resume.uploaded_at.desc(), Resume.id.desc()),
            f"resumes user_id={user_id}",
        )

    def create_resume(self, user_id: int, file_name: str, file_url: str) -> Resume:
        resume = Resume(
            user_id=user_id,
            file_name=file_name,
            file_url=file_url,
            uploaded_at=datetime.utcnow(),
            parsed_content=None,
        )
        self.db.add(resume)
        self._commit("resume")
        return self._refetch(self.get_resume, resume.id, "resume")

    def update_resume_parsed_content(self, resume_id: int, parsed_content: Any) -> Resume | None:
        """Store parsed content as serialized JSON. Returns the row, or None if it does not exist."""
        self._write_parsed_content(resume_id, parsed_content, only_if_empty=False)
        return self.get_resume(resume_id)

    def fill_resume_parsed_content(self, resume_id: int, parsed_content: Any) -> bool:
        """Store parsed content only while the column is still NULL. True if this call wrote it."""
        return self._write_parsed_content(resume_id, parsed_content, only_if_empty=True) > 0

    def _write_parsed_content(self, resume_id: int, parsed_content: Any, only_if_empty: bool) -> int:
        query = self.db.query(Resume).filter(Resume.id == resume_id)
        if only_if_empty:
            query = query.filter(Resume.parsed_content.is_(None))
        try:
            updated = query.update(
                {Resume.parsed_content: encode_parsed_content(parsed_content)},
                synchronize_session=False,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Write failed resume parsed content id=%s", resume_id)
            raise StorageError("Failed to write resume parsed content") from e
        self._commit("resume parsed content")
        if not updated:
            logger.info("Resume parsed content not updated id=%s only_if_empty=%s", resume_id, only_if_empty)
        return updated

    # --- interviews ---

    def get_interview(self, interview_id: int) -> Interview | None:
        return self._first(
            self.db.query(Interview).filter(Interview.id == interview_id), f"interview id={interview_id}"
        )

    def get_interviews_by_user(self, user_id: int) -> list[Interview]:
        return self._all(
            self.db.query(Interview)
            .filter(Interview.user_id == user_id)
            .order_by(Interview.started_at.desc(), Interview.id.desc()),
            f"interviews user_id={user_id}",
        )

    def create_interview_with_greeting(
        self,
        user_id: int,
        target_role: str,
        experience_level: str,
        interviewer_character: str,
        greeting: str,
        resume_id: int | None = None,
    ) -> Interview:
        """Insert the interview and its opening ai message in one transaction."""
        now = datetime.utcnow()
        interview = Interview(
            user_id=user_id,
            resume_id=resume_id,
            target_role=target_role,
            experience_level=experience_level,
            interviewer_character=interviewer_character,
            started_at=now,
            status=STATUS_IN_PROGRESS,
        )
        try:
            self.db.add(interview)
            self.db.flush()
            self.db.add(
                InterviewMessage(
                    interview_id=interview.id,
                    sender=SENDER_AI,
                    content=greeting,
                    sent_at=now,
                )
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Write failed interview user_id=%s", user_id)
            raise StorageError("Failed to write interview") from e
        self._commit("interview")
        return self._refetch(self.get_interview, interview.id, "interview")

    def update_interview_status(
        self, interview_id: int, status: str, ended_at: datetime | None = None
    ) -> Interview | None:
        interview = self.get_interview(interview_id)
        if interview is None:
            return None
        interview.status = status
        if ended_at is not None:
            interview.ended_at = ended_at
        self._commit("interview status")
        self.db.refresh(interview)
        return interview

    # --- messages ---

    def get_interview_messages(self, interview_id: int) -> list[InterviewMessage]:
        return self._all(
            self.db.query(InterviewMessage)
            .filter(InterviewMessage.interview_id == interview_id)
            .order_by(InterviewMessage.sent_at.asc(), InterviewMessage.id.asc()),
            f"messages interview_id={interview_id}",
        )

    def get_interview_message(self, message_id: int) -> InterviewMessage | None:
        return self._first(
            self.db.query(InterviewMessage).filter(InterviewMessage.id == message_id), f"message id={message_id}"
        )

    def create_interview_message(self, interview_id: int, sender: str, content: str) -> InterviewMessage:
        message = InterviewMessage(
            interview_id=interview_id,
            sender=sender,
            content=content,
            sent_at=datetime.utcnow(),
        )
        self.db.add(message)
        self._commit("interview message")
        return self._refetch(self.get_interview_message, message.id, "message")
