"""
Authentication endpoints - register, login, Google sign-in, logout, current user
"""
from fastapi import APIRouter, Depends, HTTPException, status

from chessview.app.core.dependencies import get_current_user, get_google_verifier, get_storage
from chessview.app.core.exceptions import UnauthorizedError
from chessview.app.core.logging_config import get_logger
from chessview.app.models.user import User
from chessview.app.schemas.user import GoogleAuth, TokenResponse, UserLogin, UserRegister, UserResponse
from chessview.app.services.auth_service import AuthService
from chessview.app.services.google_identity import GoogleTokenVerifier
from chessview.app.services.storage import Storage

logger = get_logger("api.auth")
router = APIRouter()


def _token_response(result: dict) -> TokenResponse:
    return TokenResponse(
        access_token=result["access_token"],
        token_type=result["token_type"],
        user=UserResponse.model_validate(result["user"]),
        message=result["message"],
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, storage: Storage = Depends(get_storage)):
    """
    Register a new user account. Returns an access token (user is logged in after register).

    - **username**: unique handle
    - **email**: unique email address
    - **password**: password
    """
    logger.info("Registration attempt for email=%s", user_data.email)
    result = AuthService.register_user(storage, user_data)
    if not result["success"]:
        logger.warning("Registration failed email=%s reason=%s", user_data.email, result["message"])
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result["message"])
    logger.info("User registered successfully user_id=%s", result["user"].id)
    return _token_response(result)


@router.post("/login", response_model=TokenResponse)
def login(login_data: UserLogin, storage: Storage = Depends(get_storage)):
    """Login user and get access token"""
    logger.info("Login attempt for email=%s", login_data.email)
    result = AuthService.login_user(storage, login_data)
    if not result["success"]:
        logger.warning("Login failed email=%s reason=%s", login_data.email, result["message"])
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result["message"],
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.info("User logged in successfully user_id=%s", result["user"].id)
    return _token_response(result)


@router.post("/google", response_model=TokenResponse)
def google_sign_in(
    data: GoogleAuth,
    storage: Storage = Depends(get_storage),
    verifier: GoogleTokenVerifier = Depends(get_google_verifier),
):
    """Sign in with a Google ID token; creates or links the user on first login."""
    identity = verifier.verify(data.id_token)
    result = AuthService.google_sign_in(storage, identity)
    if not result["success"]:
        raise UnauthorizedError(result["message"])
    return _token_response(result)


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; the client discards its token."""
    logger.info("User logged out user_id=%s", current_user.id)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
