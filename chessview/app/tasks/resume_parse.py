"""
Background resume parsing.

Jobs run on an executor created at startup. Each job opens its own DB session,
retries failed attempts, and writes parsed_content only while it is still NULL,
so a resume is enriched exactly once even if the job is submitted twice.
Pending jobs can be cancelled; a running job stops before its next attempt.
"""
import threading
import time
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable

from sqlalchemy.orm import Session

from chessview.app.core.config import settings
from chessview.app.core.logging_config import get_logger
from chessview.app.services.resume_parser import ResumeParser
from chessview.app.services.storage import Storage

logger = get_logger("tasks.resume_parse")


class ResumeParseJobs:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        parser: ResumeParser,
        executor: Executor | None = None,
        max_attempts: int | None = None,
        retry_delay: float | None = None,
    ):
        self.session_factory = session_factory
        self.parser = parser
        self.executor = executor or ThreadPoolExecutor(
            max_workers=settings.resume_parse_workers, thread_name_prefix="resume-parse"
        )
        self.max_attempts = max_attempts or settings.resume_parse_max_attempts
        self.retry_delay = settings.resume_parse_retry_delay_seconds if retry_delay is None else retry_delay
        self._futures: dict[int, Future] = {}
        self._cancelled: set[int] = set()
        self._lock = threading.Lock()

    def submit(self, resume_id: int, file_path: str | Path) -> Future:
        with self._lock:
            self._cancelled.discard(resume_id)
        future = self.executor.submit(self._run, resume_id, Path(file_path))
        with self._lock:
            self._futures[resume_id] = future
        future.add_done_callback(lambda f, rid=resume_id: self._forget(rid, f))
        logger.info("Resume parse job submitted resume_id=%s path=%s", resume_id, file_path)
        return future

    def cancel(self, resume_id: int) -> bool:
        """Cancel a pending job, or stop a running one before its next attempt."""
        with self._lock:
            future = self._futures.get(resume_id)
            if future is None:
                return False
            self._cancelled.add(resume_id)
        cancelled = future.cancel()
        logger.info("Resume parse job cancel requested resume_id=%s cancelled_before_start=%s", resume_id, cancelled)
        return True

    def shutdown(self, wait: bool = False) -> None:
        self.executor.shutdown(wait=wait, cancel_futures=True)

    def _forget(self, resume_id: int, future: Future) -> None:
        with self._lock:
            if self._futures.get(resume_id) is future:
                self._futures.pop(resume_id, None)
                self._cancelled.discard(resume_id)

    def _is_cancelled(self, resume_id: int) -> bool:
        with self._lock:
            return resume_id in self._cancelled

    def _run(self, resume_id: int, file_path: Path) -> bool:
        """Returns True if this job wrote the parsed content."""
        for attempt in range(1, self.max_attempts + 1):
            if self._is_cancelled(resume_id):
                logger.info("Resume parse job cancelled resume_id=%s attempt=%d", resume_id, attempt)
                return False
            try:
                return self._attempt(resume_id, file_path)
            except Exception as e:
                logger.warning(
                    "Resume parse attempt failed resume_id=%s attempt=%d/%d error=%s",
                    resume_id,
                    attempt,
                    self.max_attempts,
                    e,
                )
                if attempt < self.max_attempts and self.retry_delay:
                    time.sleep(self.retry_delay)
        logger.error("Resume parse job gave up resume_id=%s attempts=%d", resume_id, self.max_attempts)
        return False

    def _attempt(self, resume_id: int, file_path: Path) -> bool:
        db = self.session_factory()
        try:
            storage = Storage(db)
            resume = storage.get_resume(resume_id)
            if resume is None:
                logger.warning("Resume parse skipped - resume missing resume_id=%s", resume_id)
                return False
            if resume.parsed_content is not None:
                logger.info("Resume parse skipped - already parsed resume_id=%s", resume_id)
                return False
            owner = storage.get_user(resume.user_id)
            content = self.parser.parse(file_path, owner)
            wrote = storage.fill_resume_parsed_content(resume_id, content)
            logger.info("Resume parse job finished resume_id=%s wrote=%s", resume_id, wrote)
            return wrote
        finally:
            db.close()
