# app/services/user_service.py
import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.auth import issue_token
from app.core.exceptions import AuthenticationError, ConflictError
from app.core.security import hash_password, verify_password
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.user_repo import UserRepository
from app.schemas.user import LoginRequest, ProfileUpdate, RegisterRequest

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for accounts.

    Responsibilities:
      - registration (user + first active cart in one transaction)
      - credential check and token issuing
      - self profile read / update
    """

    def __init__(self, repo: UserRepository, cart_repo: CartRepository):
        self.repo = repo
        self.cart_repo = cart_repo

    # ----- Auth -----

    def register(self, session: Session, payload: RegisterRequest) -> tuple[User, str]:
        """
        Create an account and its active cart, return (user, token).

        Raises:
            ConflictError: email or username already in use.
        """
        existing = self.repo.find_by_email_or_username(
            session, payload.email, payload.username
        )
        if existing is not None:
            if existing.email == payload.email:
                raise ConflictError("Email already registered")
            raise ConflictError("Username already taken")

        user = User(
            username=payload.username,
            email=payload.email,
            password_hash=hash_password(payload.password),
            role="customer",
        )
        try:
            user = self.repo.add(session, user)
            self.cart_repo.create_active(session, user.id)
            session.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            session.rollback()
            raise ConflictError("Email or username already registered")
        except Exception:
            session.rollback()
            raise

        session.refresh(user)
        logger.info("Registered user %s (id=%s)", user.username, user.id)
        return user, issue_token(user)

    def login(self, session: Session, payload: LoginRequest) -> tuple[User, str]:
        """
        Verify credentials, return (user, token).

        Unknown email and wrong password produce the same error.
        """
        user = self.repo.get_by_email(session, payload.email)
        if user is None or not verify_password(payload.password, user.password_hash):
            raise AuthenticationError("Invalid credentials")

        user.updated_at = datetime.now(timezone.utc)
        user = self.repo.update(session, user)
        return user, issue_token(user)

    # ----- Self profile -----

    def get_profile(self, current_user: User) -> User:
        """Return the current authenticated user."""
        return current_user

    def update_profile(
        self,
        session: Session,
        current_user: User,
        payload: ProfileUpdate,
    ) -> User:
        """
        Partial update for profile edits.
        Currently, only `username` is editable.
        """
        if payload.username is not None and payload.username != current_user.username:
            if self.repo.username_taken(session, payload.username, exclude_user_id=current_user.id):
                raise ConflictError("Username already taken")
            current_user.username = payload.username

        current_user.updated_at = datetime.now(timezone.utc)
        return self.repo.update(session, current_user)
