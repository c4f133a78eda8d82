"""
Authentication service business logic
"""
import secrets
from datetime import timedelta

from chessview.app.core.config import settings
from chessview.app.core.logging_config import get_logger
from chessview.app.core.security import create_access_token, get_password_hash, verify_password
from chessview.app.models.user import User
from chessview.app.schemas.user import UserLogin, UserRegister
from chessview.app.services.google_identity import GoogleIdentity
from chessview.app.services.storage import Storage

logger = get_logger("services.auth")


def issue_token(user: User) -> str:
    return create_access_token(
        data={"sub": str(user.id), "email": user.email},
        expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
    )


class AuthService:
    """Service for authentication operations"""

    @staticmethod
    def register_user(storage: Storage, user_data: UserRegister):
        """Register a new user"""
        if storage.get_user_by_email(user_data.email):
            return {"success": False, "message": "User with this email already exists"}
        if storage.get_user_by_username(user_data.username):
            return {"success": False, "message": "Username already taken"}

        user = storage.create_user(
            username=user_data.username,
            email=user_data.email,
            hashed_password=get_password_hash(user_data.password),
            first_name=user_data.first_name,
            last_name=user_data.last_name,
        )
        return {
            "success": True,
            "user": user,
            "message": "User registered successfully",
            "access_token": issue_token(user),
            "token_type": "bearer",
        }

    @staticmethod
    def login_user(storage: Storage, login_data: UserLogin):
        """Authenticate user and return access token"""
        user = storage.get_user_by_email(login_data.email)
        if not user or not verify_password(login_data.password, user.hashed_password):
            return {"success": False, "message": "Invalid email or password"}
        return {
            "success": True,
            "access_token": issue_token(user),
            "token_type": "bearer",
            "user": user,
            "message": "Login successful",
        }

    @staticmethod
    def google_sign_in(storage: Storage, identity: GoogleIdentity):
        """
        Sign in a verified Google identity. Find by Google id, else link the Google id
        to the user with the same email, else create a passwordless user with a
        generated username. Linking and creating require a Google-verified email.
        """
        user = storage.get_user_by_google_id(identity.google_id)
        if user is None:
            if not identity.email_verified:
                logger.warning("Google sign-in refused - email not verified google_id=%s", identity.google_id)
                return {"success": False, "message": "Google account email is not verified"}
            existing = storage.get_user_by_email(identity.email)
            if existing is not None and existing.google_id:
                logger.warning("Google sign-in refused - email linked to another Google account user_id=%s", existing.id)
                return {"success": False, "message": "Email is linked to a different Google account"}
            if existing is not None:
                user = storage.link_google_account(existing.id, identity.google_id, identity.profile_picture_url)
                logger.info("Linked Google account user_id=%s", user.id)
            else:
                user = storage.create_user(
                    username=_generate_username(storage, identity.email),
                    email=identity.email,
                    hashed_password="",
                    first_name=identity.first_name,
                    last_name=identity.last_name,
                    profile_picture_url=identity.profile_picture_url,
                    google_id=identity.google_id,
                )
                logger.info("Created user from Google sign-in user_id=%s", user.id)
        return {
            "success": True,
            "access_token": issue_token(user),
            "token_type": "bearer",
            "user": user,
            "message": "Login successful",
        }


def _generate_username(storage: Storage, email: str) -> str:
    base = (email.split("@")[0] or "player")[:80]
    candidate = base
    while storage.get_user_by_username(candidate) is not None:
        candidate = f"{base}{secrets.randbelow(10000)}"
    return candidate
