from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.common import Pagination, clean_text
from app.schemas.review import ReviewRead

# Allow-listed sort columns
SortField = Literal["price", "created_at", "name", "stock_quantity"]
SortOrder = Literal["ASC", "DESC"]


def _check_url(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    if not v:
        return None
    if not (v.startswith("http://") or v.startswith("https://")):
        raise ValueError("Must be a valid URL")
    return v


class ProductCreate(SQLModel):
    """
    Payload for creating a product (admin).
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    price: float = Field(ge=0)
    stock_quantity: int = Field(ge=0)
    category: str | None = Field(default=None, max_length=100)
    image_url: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Product name is required")
        return v

    @field_validator("description", "category")
    @classmethod
    def normalize_text(cls, v: str | None) -> str | None:
        return clean_text(v)

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: str | None) -> str | None:
        return _check_url(v)


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional; at least one must be sent.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    price: float | None = Field(default=None, ge=0)
    stock_quantity: int | None = Field(default=None, ge=0)
    category: str | None = Field(default=None, max_length=100)
    image_url: str | None = None

    @field_validator("name", "price", "stock_quantity")
    @classmethod
    def reject_null(cls, v):
        # Omit a field to keep it; these columns cannot be cleared
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Product name cannot be empty")
        return v

    @field_validator("description", "category")
    @classmethod
    def normalize_text(cls, v: str | None) -> str | None:
        return clean_text(v)

    @field_validator("image_url")
    @classmethod
    def validate_image_url(cls, v: str | None) -> str | None:
        return _check_url(v)


class ProductFilters(SQLModel):
    """
    Catalog query: parameterized filters plus an allow-listed sort.
    """

    category: str | None = None
    min_price: float | None = Field(default=None, ge=0)
    max_price: float | None = Field(default=None, ge=0)
    search: str | None = None
    sort_by: SortField = "created_at"
    order: SortOrder = "DESC"
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)


class ProductRead(SQLModel):
    """
    Product representation for clients; price is a 2-decimal string.
    """

    id: int
    name: str
    description: str | None
    price: str
    stock_quantity: int
    category: str | None
    image_url: str | None
    created_at: datetime
    updated_at: datetime


class ProductWithRating(ProductRead):
    avg_rating: float
    review_count: int


class ProductDetail(ProductWithRating):
    recent_reviews: list[ReviewRead]


class ProductListResponse(SQLModel):
    products: list[ProductWithRating]
    pagination: Pagination


class ProductSearchItem(SQLModel):
    id: int
    name: str
    price: str
    image_url: str | None


class ProductSearchResponse(SQLModel):
    products: list[ProductSearchItem]


class CategoryCount(SQLModel):
    category: str
    count: int


class CategoriesResponse(SQLModel):
    categories: list[CategoryCount]


class ProductResponse(SQLModel):
    message: str
    product: ProductRead
