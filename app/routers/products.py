# app/routers/products.py
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.repositories.review_repo import ReviewRepository
from app.schemas.common import MessageResponse
from app.schemas.product import (
    CategoriesResponse,
    ProductCreate,
    ProductDetail,
    ProductFilters,
    ProductListResponse,
    ProductResponse,
    ProductSearchResponse,
    ProductUpdate,
    SortField,
)
from app.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
review_repo = ReviewRepository()
service = ProductService(repo, review_repo)


def product_filters(
    category: str | None = None,
    min_price: float | None = Query(default=None, alias="minPrice", ge=0),
    max_price: float | None = Query(default=None, alias="maxPrice", ge=0),
    search: str | None = None,
    sort_by: SortField = Query(default="created_at", alias="sortBy"),
    order: str = "DESC",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> ProductFilters:
    """
    Collect catalog query parameters.

    `order` is case-insensitive; anything but ASC sorts descending.
    """
    return ProductFilters(
        category=(category or "").strip() or None,
        min_price=min_price,
        max_price=max_price,
        search=(search or "").strip() or None,
        sort_by=sort_by,
        order="ASC" if order.upper() == "ASC" else "DESC",
        page=page,
        limit=limit,
    )


# -------- Public endpoints --------


@router.get("", response_model=ProductListResponse)
def list_products(
    filters: ProductFilters = Depends(product_filters),
    session: Session = Depends(get_session),
):
    """
    List products with filters, sorting and pagination.

    - Public endpoint.
    - Each product carries avg_rating and review_count.
    """
    return service.list_products(session, filters)


@router.get("/search", response_model=ProductSearchResponse)
def search_products(
    q: str | None = None,
    session: Session = Depends(get_session),
):
    """
    Quick search over name and description (max 10 results).

    Queries shorter than two characters return an empty list.
    """
    return service.search(session, q)


@router.get("/categories", response_model=CategoriesResponse)
def list_categories(session: Session = Depends(get_session)):
    return service.categories(session)


@router.get("/{product_id}", response_model=ProductDetail)
def get_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    """
    Get a single product by id, with rating aggregate and newest reviews.

    - Public endpoint.
    """
    return service.get_product(session, product_id)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a product (admin only).
    """
    product = service.create_product(session, payload)
    return ProductResponse(message="Product created successfully", product=product)


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Partially update a product (admin only).
    """
    product = service.update_product(session, product_id, payload)
    return ProductResponse(message="Product updated successfully", product=product)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    """
    Delete a product (admin only).

    Refused while the product is in an active cart or part of an order.
    """
    service.delete_product(session, product_id)
    return MessageResponse(message="Product deleted successfully")
