from sqlalchemy import or_
from sqlmodel import Session, select

from app.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic

    NOTE:
      - `add` only flushes: registration also creates a cart and the
        service commits both together.
    """

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by unique email, or None if not found."""
        stmt = select(User).where(User.email == email)
        return session.exec(stmt).first()

    def find_by_email_or_username(
        self,
        session: Session,
        email: str,
        username: str,
    ) -> User | None:
        stmt = select(User).where(or_(User.email == email, User.username == username))
        return session.exec(stmt).first()

    def username_taken(
        self,
        session: Session,
        username: str,
        exclude_user_id: int | None = None,
    ) -> bool:
        stmt = select(User.id).where(User.username == username)
        if exclude_user_id is not None:
            stmt = stmt.where(User.id != exclude_user_id)
        return session.exec(stmt).first() is not None

    def add(self, session: Session, user: User) -> User:
        """Insert a new User without committing; id is populated."""
        session.add(user)
        session.flush()
        session.refresh(user)
        return user

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
