"""
Serialized-JSON column helpers.

Decoding never raises: a stored value that is not valid JSON is reported as
state="corrupt" with the raw text kept, so "not parsed yet" and "unreadable"
stay distinguishable without failing the read.
"""
import json
from dataclasses import dataclass
from typing import Any, Literal

from chessview.app.core.logging_config import get_logger

logger = get_logger("utils.json_field")

ParseState = Literal["absent", "ok", "corrupt"]


@dataclass(frozen=True)
class ParsedContent:
    state: ParseState
    value: Any = None
    raw: str | None = None

    @property
    def is_present(self) -> bool:
        return self.state == "ok"


def decode_parsed_content(raw: str | None, context: str = "") -> ParsedContent:
    if raw is None or raw == "":
        return ParsedContent(state="absent")
    try:
        return ParsedContent(state="ok", value=json.loads(raw), raw=raw)
    except (TypeError, ValueError) as e:
        logger.warning("Failed to parse stored JSON %s error=%s", context, e)
        return ParsedContent(state="corrupt", raw=raw)


def encode_parsed_content(value: Any) -> str:
    return json.dumps(value, default=str)
