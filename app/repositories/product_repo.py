from sqlalchemy import func, or_, update
from sqlmodel import Session, select

from app.models.cart import Cart, CartItem
from app.models.order import Order
from app.models.product import Product
from app.models.review import Review
from app.schemas.product import ProductFilters

# Allow-list mapping of sortable fields to columns
SORT_COLUMNS = {
    "price": Product.price,
    "created_at": Product.created_at,
    "name": Product.name,
    "stock_quantity": Product.stock_quantity,
}


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    - Stock adjustments do not commit; they run inside the order
      transaction.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    @staticmethod
    def _filter_conditions(filters: ProductFilters) -> list:
        conditions = []
        if filters.category:
            conditions.append(Product.category == filters.category)
        if filters.min_price is not None:
            conditions.append(Product.price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Product.price <= filters.max_price)
        if filters.search:
            pattern = f"%{filters.search}%"
            conditions.append(
                or_(Product.name.ilike(pattern), Product.description.ilike(pattern))
            )
        return conditions

    def list_filtered(
        self,
        session: Session,
        filters: ProductFilters,
        skip: int,
        limit: int,
    ) -> tuple[list[Product], int]:
        """
        Return one page of products matching the filters, plus the total
        number of matches.
        """
        conditions = self._filter_conditions(filters)

        sort_column = SORT_COLUMNS.get(filters.sort_by, Product.created_at)
        ordering = sort_column.asc() if filters.order == "ASC" else sort_column.desc()

        stmt = (
            select(Product)
            .where(*conditions)
            .order_by(ordering, Product.id.asc())
            .offset(skip)
            .limit(limit)
        )
        count_stmt = select(func.count()).select_from(Product).where(*conditions)

        products = list(session.exec(stmt).all())
        total = int(session.exec(count_stmt).one() or 0)
        return products, total

    def search(self, session: Session, q: str, limit: int = 10) -> list[Product]:
        pattern = f"%{q}%"
        stmt = (
            select(Product)
            .where(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
            .order_by(Product.id)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def categories(self, session: Session) -> list[tuple[str, int]]:
        count = func.count(Product.id)
        stmt = (
            select(Product.category, count)
            .where(Product.category.is_not(None))
            .group_by(Product.category)
            .order_by(count.desc(), Product.category)
        )
        return list(session.exec(stmt).all())

    def rating_stats(
        self,
        session: Session,
        product_ids: list[int],
    ) -> dict[int, tuple[float, int]]:
        """product_id -> (average rating, review count) for reviewed products."""
        if not product_ids:
            return {}
        stmt = (
            select(Review.product_id, func.avg(Review.rating), func.count(Review.id))
            .where(Review.product_id.in_(product_ids))
            .group_by(Review.product_id)
        )
        return {
            pid: (float(avg or 0), int(cnt or 0))
            for pid, avg, cnt in session.exec(stmt).all()
        }

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()

    # ----- Reference checks -----

    def in_active_cart(self, session: Session, product_id: int) -> bool:
        stmt = (
            select(CartItem.id)
            .join(Cart, Cart.id == CartItem.cart_id)
            .where(CartItem.product_id == product_id, Cart.status == "active")
        )
        return session.exec(stmt).first() is not None

    def in_any_order(self, session: Session, product_id: int) -> bool:
        stmt = (
            select(CartItem.id)
            .join(Order, Order.cart_id == CartItem.cart_id)
            .where(CartItem.product_id == product_id)
        )
        return session.exec(stmt).first() is not None

    # ----- Stock -----

    def decrement_stock(self, session: Session, product_id: int, quantity: int) -> bool:
        """
        Atomically take `quantity` units out of stock.

        Returns False (and changes nothing) when fewer than `quantity`
        units are left at the moment the UPDATE runs.
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.stock_quantity >= quantity)
            .values(stock_quantity=Product.stock_quantity - quantity)
        )
        result = session.exec(stmt)  # type: ignore[call-overload]
        return result.rowcount == 1

    def restore_stock(self, session: Session, product_id: int, quantity: int) -> None:
        stmt = (
            update(Product)
            .where(Product.id == product_id)
            .values(stock_quantity=Product.stock_quantity + quantity)
        )
        session.exec(stmt)  # type: ignore[call-overload]
