# app/repositories/review_repo.py
from sqlalchemy import delete, func
from sqlmodel import Session, select

from app.models.cart import CartItem
from app.models.order import Order
from app.models.review import Review
from app.models.user import User


class ReviewRepository:
    """
    Data access layer for product reviews.
    """

    def get_by_id(self, session: Session, review_id: int) -> Review | None:
        return session.get(Review, review_id)

    def get_for_user_product(
        self,
        session: Session,
        user_id: int,
        product_id: int,
    ) -> Review | None:
        stmt = select(Review).where(
            Review.user_id == user_id, Review.product_id == product_id
        )
        return session.exec(stmt).first()

    def has_delivered_purchase(
        self,
        session: Session,
        user_id: int,
        product_id: int,
    ) -> bool:
        """True if one of the user's delivered orders contains the product."""
        stmt = (
            select(Order.id)
            .join(CartItem, CartItem.cart_id == Order.cart_id)
            .where(
                Order.user_id == user_id,
                Order.status == "delivered",
                CartItem.product_id == product_id,
            )
        )
        return session.exec(stmt).first() is not None

    def list_for_product(
        self,
        session: Session,
        product_id: int,
        skip: int = 0,
        limit: int = 10,
    ) -> list[tuple[Review, str]]:
        """(review, author username) pairs, newest first."""
        stmt = (
            select(Review, User.username)
            .join(User, User.id == Review.user_id)
            .where(Review.product_id == product_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def count_for_product(self, session: Session, product_id: int) -> int:
        stmt = select(func.count()).select_from(Review).where(Review.product_id == product_id)
        return int(session.exec(stmt).one() or 0)

    def distribution(self, session: Session, product_id: int) -> dict[int, int]:
        """rating -> count, only for ratings that occur."""
        stmt = (
            select(Review.rating, func.count(Review.id))
            .where(Review.product_id == product_id)
            .group_by(Review.rating)
        )
        return {int(rating): int(cnt) for rating, cnt in session.exec(stmt).all()}

    def username_for(self, session: Session, user_id: int) -> str:
        return session.exec(select(User.username).where(User.id == user_id)).one()

    def create(self, session: Session, review: Review) -> Review:
        session.add(review)
        session.commit()
        session.refresh(review)
        return review

    def update(self, session: Session, review: Review) -> Review:
        session.add(review)
        session.commit()
        session.refresh(review)
        return review

    def delete(self, session: Session, review: Review) -> None:
        session.delete(review)
        session.commit()

    def delete_for_product(self, session: Session, product_id: int) -> None:
        """Remove all reviews of a product; the caller commits."""
        session.exec(delete(Review).where(Review.product_id == product_id))  # type: ignore[call-overload]
