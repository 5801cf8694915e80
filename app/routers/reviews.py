# app/routers/reviews.py
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.product_repo import ProductRepository
from app.repositories.review_repo import ReviewRepository
from app.schemas.common import MessageResponse
from app.schemas.review import ReviewListResponse, ReviewResponse, ReviewWrite
from app.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["Reviews"])

repo = ReviewRepository()
product_repo = ProductRepository()
service = ReviewService(repo, product_repo)


@router.get("/products/{product_id}", response_model=ReviewListResponse)
def list_product_reviews(
    product_id: int,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    session: Session = Depends(get_session),
):
    """
    Reviews of a product, newest first, with the star distribution.

    - Public endpoint.
    """
    return service.list_reviews(session, product_id, page=page, limit=limit)


@router.post(
    "/products/{product_id}",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_review(
    product_id: int,
    payload: ReviewWrite,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Review a product.

    Requires a delivered order containing the product; one review per user.
    """
    review = service.create_review(session, current_user, product_id, payload)
    return ReviewResponse(message="Review created successfully", review=review)


@router.put("/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: int,
    payload: ReviewWrite,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    review = service.update_review(session, current_user, review_id, payload)
    return ReviewResponse(message="Review updated successfully", review=review)


@router.delete("/{review_id}", response_model=MessageResponse)
def delete_review(
    review_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Delete a review. Authors delete their own; admins may delete any.
    """
    service.delete_review(session, current_user, review_id)
    return MessageResponse(message="Review deleted successfully")
