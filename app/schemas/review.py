from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.common import Pagination, clean_text


class ReviewWrite(SQLModel):
    """
    Payload for creating or updating a review.
    """

    model_config = ConfigDict(extra="forbid")

    rating: int = Field(ge=1, le=5)
    comment: str | None = Field(default=None, max_length=1000)

    @field_validator("comment")
    @classmethod
    def normalize_comment(cls, v: str | None) -> str | None:
        return clean_text(v)


class ReviewRead(SQLModel):
    id: int
    product_id: int
    user_id: int
    username: str
    rating: int
    comment: str | None
    created_at: datetime


class ReviewListResponse(SQLModel):
    reviews: list[ReviewRead]
    pagination: Pagination
    # star value (1..5) -> count; JSON keys are "1".."5"
    rating_distribution: dict[int, int]


class ReviewResponse(SQLModel):
    message: str
    review: ReviewRead
