from datetime import datetime, timezone

from sqlalchemy import CheckConstraint
from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Registered shop account.

    Role:
      - "customer" | "admin"
      - anonymous visitors have no row and no token.

    Users are never hard-deleted: orders and reviews keep pointing at them.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('customer', 'admin')", name="ck_users_role"),
    )

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    username: str = Field(
        max_length=50,
        unique=True,
        index=True,
        description="Public handle, letters/digits/underscore",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Login identifier, stored lower-cased",
    )

    password_hash: str = Field(
        description="bcrypt hash (salt included)",
    )

    # Application role
    role: str = Field(
        default="customer",
        index=True,
        description="Application role: customer | admin",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last profile change or login (UTC)",
    )
