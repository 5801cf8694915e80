from typing import Any

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError
from sqlmodel import Session

from app.core.exceptions import AuthenticationError, AuthorizationError
from app.core.security import create_access_token, decode_token
from app.database import get_session
from app.models.user import User

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so optional-auth routes can treat the caller as anonymous.
bearer_scheme = HTTPBearer(auto_error=False)


def issue_token(user: User) -> str:
    """
    Sign a token carrying the identity and role claims of `user`.
    """
    return create_access_token(
        {
            "id": user.id,
            "username": user.username,
            "email": user.email,
            "role": user.role,
        }
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify an access token.

    Raises:
        AuthenticationError: if the token is expired or otherwise invalid.
    """
    try:
        return decode_token(token)
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError:
        raise AuthenticationError("Invalid token")


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the current user from the bearer token.

    Flow:
      1. No Authorization header => anonymous => return None.
      2. Decode JWT => extract the 'id' claim.
      3. Load the user row; the role is taken from the DB, not the token.

    Raises:
        AuthenticationError: malformed token, missing claims, unknown user.
    """
    if credentials is None:
        return None

    payload = decode_access_token(credentials.credentials)
    user_id = payload.get("id")
    if not isinstance(user_id, int):
        raise AuthenticationError("Invalid token")

    user = session.get(User, user_id)
    if user is None:
        raise AuthenticationError("Invalid token")
    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication.

    Raises:
        AuthenticationError: if no bearer token was sent.
    """
    if user is None:
        raise AuthenticationError("No token, authorization denied")
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """
    Enforce admin role.

    Raises:
        AuthorizationError: if role is not admin.
    """
    if user.role != "admin":
        raise AuthorizationError("Access denied. Admin only.")
    return user
