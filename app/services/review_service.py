# app/services/review_service.py
from sqlmodel import Session

from app.core.exceptions import AuthorizationError, ConflictError, NotFoundError
from app.models.review import Review
from app.models.user import User
from app.repositories.product_repo import ProductRepository
from app.repositories.review_repo import ReviewRepository
from app.schemas.common import Pagination
from app.schemas.review import ReviewListResponse, ReviewRead, ReviewWrite
from app.services.pricing import paginate, total_pages


class ReviewService:
    """
    Business logic for product reviews.

    Rules:
      - only buyers with a delivered order containing the product may review
      - one review per (product, user)
      - authors edit their own reviews; authors or admins delete them
    """

    def __init__(self, repo: ReviewRepository, product_repo: ProductRepository):
        self.repo = repo
        self.product_repo = product_repo

    def _ensure_product(self, session: Session, product_id: int) -> None:
        if self.product_repo.get_by_id(session, product_id) is None:
            raise NotFoundError("Product not found")

    def _get_or_404(self, session: Session, review_id: int) -> Review:
        review = self.repo.get_by_id(session, review_id)
        if review is None:
            raise NotFoundError("Review not found")
        return review

    def _to_read(self, session: Session, review: Review) -> ReviewRead:
        return ReviewRead(
            **review.model_dump(),
            username=self.repo.username_for(session, review.user_id),
        )

    def list_reviews(
        self,
        session: Session,
        product_id: int,
        page: int = 1,
        limit: int = 10,
    ) -> ReviewListResponse:
        self._ensure_product(session, product_id)

        skip, limit = paginate(page, limit)
        rows = self.repo.list_for_product(session, product_id, skip, limit)
        total = self.repo.count_for_product(session, product_id)

        counts = self.repo.distribution(session, product_id)
        distribution = {star: counts.get(star, 0) for star in range(1, 6)}

        return ReviewListResponse(
            reviews=[ReviewRead(**r.model_dump(), username=name) for r, name in rows],
            pagination=Pagination(
                page=page,
                limit=limit,
                total=total,
                total_pages=total_pages(total, limit),
            ),
            rating_distribution=distribution,
        )

    def create_review(
        self,
        session: Session,
        user: User,
        product_id: int,
        payload: ReviewWrite,
    ) -> ReviewRead:
        """
        Raises:
            NotFoundError: unknown product.
            AuthorizationError: no delivered purchase of the product.
            ConflictError: the user already reviewed the product.
        """
        self._ensure_product(session, product_id)

        if not self.repo.has_delivered_purchase(session, user.id, product_id):
            raise AuthorizationError(
                "You must purchase and receive this product before reviewing"
            )

        if self.repo.get_for_user_product(session, user.id, product_id) is not None:
            raise ConflictError("You have already reviewed this product")

        review = self.repo.create(
            session,
            Review(
                product_id=product_id,
                user_id=user.id,
                rating=payload.rating,
                comment=payload.comment,
            ),
        )
        return self._to_read(session, review)

    def update_review(
        self,
        session: Session,
        user: User,
        review_id: int,
        payload: ReviewWrite,
    ) -> ReviewRead:
        review = self._get_or_404(session, review_id)
        if review.user_id != user.id:
            raise AuthorizationError("You can only edit your own reviews")

        review.rating = payload.rating
        review.comment = payload.comment
        review = self.repo.update(session, review)
        return self._to_read(session, review)

    def delete_review(self, session: Session, user: User, review_id: int) -> None:
        review = self._get_or_404(session, review_id)
        if review.user_id != user.id and user.role != "admin":
            raise AuthorizationError("You can only delete your own reviews")
        self.repo.delete(session, review)
