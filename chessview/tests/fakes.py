"""Test doubles shared by conftest and test modules."""
from concurrent.futures import Executor, Future

from chessview.app.core.exceptions import ExternalServiceError, UnauthorizedError


class FakeCompletionClient:
    """Stands in for CompletionClient: returns canned replies or fails like an outage."""

    def __init__(self, replies=None, fail=False):
        self.replies = list(replies or [])
        self.fail = fail
        self.calls = []

    @property
    def configured(self) -> bool:
        return not self.fail

    def complete(self, messages, max_tokens=None, json_mode=False):
        self.calls.append(messages)
        if self.fail:
            raise ExternalServiceError("Completion service not configured")
        if self.replies:
            return self.replies.pop(0)
        return "Checkmate aside, tell me about a system you designed."


class InlineExecutor(Executor):
    """Runs submitted jobs immediately on the calling thread."""

    def submit(self, fn, /, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class FakeGoogleVerifier:
    """Stands in for GoogleTokenVerifier: known tokens map to identities, anything else is rejected."""

    def __init__(self, identities=None):
        self.identities = dict(identities or {})

    def verify(self, token):
        identity = self.identities.get(token)
        if identity is None:
            raise UnauthorizedError("Invalid Google ID token")
        return identity
