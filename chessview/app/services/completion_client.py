"""Chat completion client (OpenAI). Constructed once at startup and injected where needed."""
from openai import OpenAI, OpenAIError

from chessview.app.core.config import Settings
from chessview.app.core.exceptions import ExternalServiceError
from chessview.app.core.logging_config import get_logger

logger = get_logger("services.completion")


class CompletionClient:
    """Thin wrapper over chat.completions with a hard timeout. Every failure is an ExternalServiceError."""

    def __init__(
        self,
        api_key: str,
        model: str,
        timeout: float,
        max_tokens: int,
        client: OpenAI | None = None,
    ):
        self.model = model
        self.max_tokens = max_tokens
        self._client = client
        if self._client is None and api_key:
            self._client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompletionClient":
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout=settings.openai_timeout_seconds,
            max_tokens=settings.openai_max_tokens,
        )

    @property
    def configured(self) -> bool:
        return self._client is not None

    def complete(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        json_mode: bool = False,
    ) -> str:
        if self._client is None:
            raise ExternalServiceError("Completion service not configured")
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens or self.max_tokens,
                **kwargs,
            )
        except OpenAIError as e:
            logger.warning("Completion call failed model=%s error=%s", self.model, e)
            raise ExternalServiceError("Completion call failed") from e
        try:
            content = resp.choices[0].message.content
        except (AttributeError, IndexError, TypeError) as e:
            logger.warning("Completion response malformed model=%s error=%s", self.model, e)
            raise ExternalServiceError("Malformed completion response") from e
        content = (content or "").strip()
        if not content:
            raise ExternalServiceError("Empty completion response")
        return content
