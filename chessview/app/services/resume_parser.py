"""
Resume parsing - text extraction (pdfplumber) + LLM structuring into a small JSON object.
When the completion service is unavailable, a basic record from the owning user is returned.
"""
import json
from pathlib import Path
from typing import Any

import pdfplumber

from chessview.app.core.exceptions import ExternalServiceError
from chessview.app.core.logging_config import get_logger
from chessview.app.models.user import User
from chessview.app.services.completion_client import CompletionClient

logger = get_logger("services.resume_parser")

RESUME_TEXT_MAX_CHARS = 6000
SUMMARY_EXCERPT_CHARS = 400

PARSE_PROMPT = """Extract the following information from this resume:
1. name
2. email
3. phone
4. skills (as an array of strings)
5. experience (as an array of objects with company, title, duration and description)
6. education (as an array of objects with institution, degree and graduationDate)

Format the response as a JSON object with exactly those keys. Use empty values when missing.

Here's the resume text:
{resume_text}
"""


def extract_text_from_pdf(file_path: str | Path) -> str:
    """Extract raw text from PDF using pdfplumber."""
    text_parts = []
    with pdfplumber.open(file_path) as pdf:
        for page in pdf.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
    return "\n".join(text_parts)


def extract_resume_text(file_path: str | Path) -> str:
    """Plain text of a resume file. Word documents are not read."""
    path = Path(file_path)
    suffix = path.suffix.lower()
    if suffix == ".pdf":
        return extract_text_from_pdf(path)
    if suffix == ".txt":
        return path.read_text(encoding="utf-8", errors="replace")
    return ""


class ResumeParser:
    def __init__(self, completion_client: CompletionClient):
        self.completion_client = completion_client

    def parse(self, file_path: str | Path, owner: User | None = None) -> dict[str, Any]:
        try:
            text = extract_resume_text(file_path).strip()
        except Exception as e:
            # Unreadable files never become readable on retry
            logger.warning("Resume text extraction failed, using basic record path=%s error=%s", file_path, e)
            return self.basic_record("", owner)
        if text:
            try:
                return self._parse_with_llm(text)
            except ExternalServiceError as e:
                logger.info("LLM resume parse unavailable, using basic record path=%s reason=%s", file_path, e.message)
        return self.basic_record(text, owner)

    def _parse_with_llm(self, text: str) -> dict[str, Any]:
        content = self.completion_client.complete(
            [{"role": "user", "content": PARSE_PROMPT.format(resume_text=text[:RESUME_TEXT_MAX_CHARS])}],
            max_tokens=1200,
            json_mode=True,
        )
        try:
            data = json.loads(content)
        except ValueError as e:
            raise ExternalServiceError("Resume parse returned invalid JSON") from e
        if not isinstance(data, dict):
            raise ExternalServiceError("Resume parse returned non-object JSON")
        return data

    @staticmethod
    def basic_record(text: str, owner: User | None) -> dict[str, Any]:
        return {
            "name": owner.display_name if owner else "",
            "email": owner.email if owner else "",
            "skills": [],
            "experience": [],
            "education": [],
            "summary": text[:SUMMARY_EXCERPT_CHARS],
        }
