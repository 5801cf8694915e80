from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, UniqueConstraint
from sqlmodel import SQLModel, Field


class Review(SQLModel, table=True):
    """
    Product review, one per (product, user).
    """

    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("product_id", "user_id", name="uq_reviews_product_user"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating"),
    )

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    product_id: int = Field(
        foreign_key="products.id",
        index=True,
    )

    user_id: int = Field(
        foreign_key="users.id",
        index=True,
    )

    rating: int = Field(
        description="1..5 stars",
    )

    comment: str | None = Field(
        default=None,
        max_length=1000,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
