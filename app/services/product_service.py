# app/services/product_service.py
import logging
from datetime import datetime, timezone

from sqlmodel import Session

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models.product import Product
from app.repositories.product_repo import ProductRepository
from app.repositories.review_repo import ReviewRepository
from app.schemas.common import Pagination
from app.schemas.product import (
    CategoriesResponse,
    CategoryCount,
    ProductCreate,
    ProductDetail,
    ProductFilters,
    ProductListResponse,
    ProductRead,
    ProductSearchItem,
    ProductSearchResponse,
    ProductUpdate,
    ProductWithRating,
)
from app.schemas.review import ReviewRead
from app.services.pricing import format_price, paginate, total_pages

logger = logging.getLogger(__name__)

# Number of newest reviews embedded in the product detail
RECENT_REVIEWS_LIMIT = 5

# Shortest query the quick search will run
MIN_SEARCH_LENGTH = 2


def to_product_read(product: Product) -> ProductRead:
    return ProductRead(
        id=product.id,
        name=product.name,
        description=product.description,
        price=format_price(product.price),
        stock_quantity=product.stock_quantity,
        category=product.category,
        image_url=product.image_url,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


class ProductService:
    """
    Business logic for the product catalog.

    Responsibilities:
      - filtered / sorted / paginated listing with rating aggregates
      - quick search and category listing
      - admin-only create / update / delete (enforced at router via require_admin)
    """

    def __init__(self, repo: ProductRepository, review_repo: ReviewRepository):
        self.repo = repo
        self.review_repo = review_repo

    # ----- Helpers -----

    def _get_or_404(self, session: Session, product_id: int) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    # ----- Public reads -----

    def list_products(self, session: Session, filters: ProductFilters) -> ProductListResponse:
        skip, limit = paginate(filters.page, filters.limit)
        products, total = self.repo.list_filtered(session, filters, skip, limit)

        ratings = self.repo.rating_stats(session, [p.id for p in products])

        items: list[ProductWithRating] = []
        for p in products:
            avg, count = ratings.get(p.id, (0.0, 0))
            items.append(
                ProductWithRating(
                    **to_product_read(p).model_dump(),
                    avg_rating=round(avg, 2),
                    review_count=count,
                )
            )

        return ProductListResponse(
            products=items,
            pagination=Pagination(
                page=filters.page,
                limit=limit,
                total=total,
                total_pages=total_pages(total, limit),
            ),
        )

    def search(self, session: Session, q: str | None) -> ProductSearchResponse:
        """
        Quick name/description search; short queries return nothing.
        """
        q = (q or "").strip()
        if len(q) < MIN_SEARCH_LENGTH:
            return ProductSearchResponse(products=[])

        products = self.repo.search(session, q)
        return ProductSearchResponse(
            products=[
                ProductSearchItem(
                    id=p.id,
                    name=p.name,
                    price=format_price(p.price),
                    image_url=p.image_url,
                )
                for p in products
            ]
        )

    def categories(self, session: Session) -> CategoriesResponse:
        rows = self.repo.categories(session)
        return CategoriesResponse(
            categories=[CategoryCount(category=c, count=n) for c, n in rows]
        )

    def get_product(self, session: Session, product_id: int) -> ProductDetail:
        product = self._get_or_404(session, product_id)

        avg, count = self.repo.rating_stats(session, [product.id]).get(product.id, (0.0, 0))
        recent = self.review_repo.list_for_product(
            session, product.id, skip=0, limit=RECENT_REVIEWS_LIMIT
        )

        return ProductDetail(
            **to_product_read(product).model_dump(),
            avg_rating=round(avg, 2),
            review_count=count,
            recent_reviews=[
                ReviewRead(**review.model_dump(), username=username)
                for review, username in recent
            ],
        )

    # ----- Admin operations -----

    def create_product(self, session: Session, payload: ProductCreate) -> ProductRead:
        product = Product(**payload.model_dump())
        product = self.repo.create(session, product)
        logger.info("Created product %s (id=%s)", product.name, product.id)
        return to_product_read(product)

    def update_product(
        self,
        session: Session,
        product_id: int,
        payload: ProductUpdate,
    ) -> ProductRead:
        """
        Partial update; only fields present in the body are written.

        Raises:
            NotFoundError: unknown product.
            ValidationError: body carries no field to update.
        """
        product = self._get_or_404(session, product_id)

        data = payload.model_dump(exclude_unset=True)
        if not data:
            raise ValidationError("No valid fields to update")

        for key, value in data.items():
            setattr(product, key, value)
        product.updated_at = datetime.now(timezone.utc)

        product = self.repo.update(session, product)
        return to_product_read(product)

    def delete_product(self, session: Session, product_id: int) -> None:
        """
        Delete a product and its reviews.

        Refused while the product sits in an active cart or belongs to an
        order, since order lines are read from the ordered cart.
        """
        product = self._get_or_404(session, product_id)

        if self.repo.in_active_cart(session, product.id):
            raise ConflictError("Cannot delete product that is in active carts")
        if self.repo.in_any_order(session, product.id):
            raise ConflictError("Cannot delete product that has been ordered")

        self.review_repo.delete_for_product(session, product.id)
        self.repo.delete(session, product)
        logger.info("Deleted product id=%s", product_id)
