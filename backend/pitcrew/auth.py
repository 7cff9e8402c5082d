"""
Firebase authentication for FastAPI.

Verifies Firebase ID tokens and extracts user information. Routes depend on
``require_user``, which only verifies tokens when ``auth_enabled`` is set.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth

from pitcrew.config import get_settings
from pitcrew.firebase import get_firebase_app
from pitcrew.logging_config import get_logger

logger = get_logger(__name__)

security = HTTPBearer(auto_error=False)


class AuthenticatedUser:
    """Represents an authenticated user from Firebase."""

    def __init__(self, uid: str, email: str | None, name: str | None):
        self.uid = uid
        self.email = email
        self.name = name

    def __repr__(self):
        return f"AuthenticatedUser(uid={self.uid}, email={self.email})"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(token: str) -> AuthenticatedUser:
    """
    Verify a Firebase ID token.

    Raises:
        HTTPException: If token is invalid or expired.
    """
    try:
        decoded_token = auth.verify_id_token(token, app=get_firebase_app())
    except auth.ExpiredIdTokenError:
        logger.warning("Expired Firebase token")
        raise _unauthorized("Token has expired")
    except auth.InvalidIdTokenError:
        logger.warning("Invalid Firebase token")
        raise _unauthorized("Invalid authentication token")
    except Exception as e:
        logger.error(f"Authentication error: {e}")
        raise _unauthorized("Authentication failed")

    user = AuthenticatedUser(
        uid=decoded_token["uid"],
        email=decoded_token.get("email"),
        name=decoded_token.get("name"),
    )
    logger.debug(f"Authenticated user: {user.uid} ({user.email})")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthenticatedUser:
    if not credentials:
        raise _unauthorized("Not authenticated")
    return verify_token(credentials.credentials)


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthenticatedUser | None:
    """
    Optional authentication - returns None if no token provided or the
    token does not verify.
    """
    if not credentials:
        return None
    try:
        return verify_token(credentials.credentials)
    except HTTPException:
        return None


async def require_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthenticatedUser | None:
    """Router-level guard. A no-op unless ``auth_enabled`` is set."""
    if not get_settings().auth_enabled:
        return None
    return await get_current_user(credentials)
