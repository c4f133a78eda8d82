"""
Google sign-in - server-side verification of Google ID tokens.

Identity fields (Google id, email, names, picture) come only from the verified
token claims; nothing the client sends alongside the token is trusted.
"""
from dataclasses import dataclass

from google.auth.exceptions import GoogleAuthError
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token

from chessview.app.core.config import Settings
from chessview.app.core.exceptions import UnauthorizedError
from chessview.app.core.logging_config import get_logger

logger = get_logger("services.google_identity")


@dataclass(frozen=True)
class GoogleIdentity:
    google_id: str
    email: str
    email_verified: bool = False
    first_name: str | None = None
    last_name: str | None = None
    profile_picture_url: str | None = None


class GoogleTokenVerifier:
    def __init__(self, client_id: str, request: google_requests.Request | None = None):
        self.client_id = client_id
        self._request = request or google_requests.Request()

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleTokenVerifier":
        return cls(client_id=settings.google_client_id)

    def verify(self, token: str) -> GoogleIdentity:
        if not self.client_id:
            raise UnauthorizedError("Google sign-in is not configured")
        try:
            claims = google_id_token.verify_oauth2_token(token, self._request, audience=self.client_id)
        except (ValueError, GoogleAuthError) as e:
            logger.warning("Google ID token rejected error=%s", e)
            raise UnauthorizedError("Invalid Google ID token") from e

        if not claims.get("sub") or not claims.get("email"):
            logger.warning("Google ID token missing sub/email claims")
            raise UnauthorizedError("Invalid Google ID token")
        return GoogleIdentity(
            google_id=str(claims["sub"]),
            email=claims["email"],
            email_verified=bool(claims.get("email_verified")),
            first_name=claims.get("given_name"),
            last_name=claims.get("family_name"),
            profile_picture_url=claims.get("picture"),
        )
