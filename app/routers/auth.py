# app/routers/auth.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.user_repo import UserRepository
from app.schemas.user import (
    AuthResponse,
    LoginRequest,
    ProfileResponse,
    ProfileUpdate,
    ProfileUpdateResponse,
    RegisterRequest,
    UserProfileRead,
    UserRead,
)
from app.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])

repo = UserRepository()
cart_repo = CartRepository()
service = UserService(repo, cart_repo)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    session: Session = Depends(get_session),
):
    """
    Create a customer account and return a bearer token.

    The account starts with an empty active cart.
    """
    user, token = service.register(session, payload)
    return AuthResponse(
        message="User created successfully",
        token=token,
        user=UserRead.model_validate(user, from_attributes=True),
    )


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    session: Session = Depends(get_session),
):
    user, token = service.login(session, payload)
    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserRead.model_validate(user, from_attributes=True),
    )


# -------- Self profile --------


@router.get("/profile", response_model=ProfileResponse)
def read_profile(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.

    Auth:
      - Requires a valid bearer token.
    """
    user = service.get_profile(current_user)
    return ProfileResponse(user=UserProfileRead.model_validate(user, from_attributes=True))


@router.put("/profile", response_model=ProfileUpdateResponse)
def update_profile(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Update the authenticated user's profile (partial update).

    Currently, only `username` is editable.
    """
    user = service.update_profile(session, current_user, payload)
    return ProfileUpdateResponse(
        message="Profile updated successfully",
        user=UserRead.model_validate(user, from_attributes=True),
    )
