# bookstore/services/order_service.py
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import case, func, select
from sqlalchemy.orm import Session

from bookstore.data.database import transaction
from bookstore.data.models.address import AddressModel
from bookstore.data.models.book import BookModel
from bookstore.data.models.order import OrderModel
from bookstore.data.models.order_item import OrderItemModel
from bookstore.data.models.user import UserModel
from bookstore.domain.enums import OrderStatus
from bookstore.domain.errors import InsufficientStockError, InvalidStateError, NotFoundError, ValidationError
from bookstore.domain.schemas import OrderCreate
from bookstore.repos.order_repo import OrderRepo, order_loader_options
from bookstore.services.notification_service import NotificationService
from bookstore.utils.logging import get_logger
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, apply_sort, paginate

logger = get_logger(__name__)

SORTABLE_FIELDS = ("created_at", "total_amount")


def address_snapshot(address: AddressModel) -> str:
    parts = [address.specific_address, address.ward, address.city]
    return ", ".join(p for p in parts if p)


def day_bounds(start_date: Optional[date], end_date: Optional[date]):
    """Inclusive calendar-day range as UTC datetimes."""
    start = datetime.combine(start_date, time.min, tzinfo=timezone.utc) if start_date else None
    end = datetime.combine(end_date + timedelta(days=1), time.min, tzinfo=timezone.utc) if end_date else None
    return start, end


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    payment = order.payment
    return {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "total_amount": order.total_amount,
        "address_snapshot": order.address_snapshot,
        "phone_snapshot": order.phone_snapshot,
        "created_at": order.created_at,
        "items": [
            {
                "book_id": i.book_id,
                "book_title": i.book.title,
                "book_image": i.book.cover_url,
                "price_at_time": i.price_at_time,
                "quantity": i.quantity,
                "sub_total": i.sub_total,
            }
            for i in order.items
        ],
        "payment": (
            {
                "id": payment.id,
                "status": payment.status,
                "method": payment.method,
                "amount": payment.amount,
                "paid_at": payment.paid_at,
            }
            if payment
            else None
        ),
    }


class OrderService:
    """
    Order domain: placement, cancellation, status and reporting.
    Stock moves together with the order rows in a single transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)
        self.notification_service = NotificationService()

    def _get(self, order_id: int) -> OrderModel:
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError("Order not found")
        return order

    def _query(
        self,
        user_id: Optional[int] = None,
        status: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ):
        stmt = select(OrderModel).options(*order_loader_options())

        if user_id is not None:
            stmt = stmt.where(OrderModel.user_id == user_id)
        if status:
            stmt = stmt.where(OrderModel.status == status)

        start, end = day_bounds(start_date, end_date)
        if start:
            stmt = stmt.where(OrderModel.created_at >= start)
        if end:
            stmt = stmt.where(OrderModel.created_at < end)

        return apply_sort(
            stmt, OrderModel, sort_by, sort_order, SORTABLE_FIELDS, default="created_at", default_order="desc"
        )

    #commands
    def create_order(self, payload: OrderCreate) -> Dict[str, Any]:
        """
        Use Case: placing an order.

        1. Checks the user and that the address is theirs
        2. Snapshots address and phone
        3. Per line: book exists, quantity valid, enough stock
        4. Decrements stock, bumps sold count, stores price snapshots
        Any failure rolls back every line.
        """
        user = self.db.get(UserModel, payload.user_id)
        if not user:
            raise NotFoundError("User not found")

        address = self.db.get(AddressModel, payload.address_id)
        if not address or address.user_id != user.id:
            raise NotFoundError("Address not found")

        if not payload.items:
            raise ValidationError("Order must contain at least one item")

        with transaction(self.db):
            total = Decimal("0.00")
            lines = []

            # repeated book ids are independent lines; each sees the previous decrement
            for line in payload.items:
                book = self.db.get(BookModel, line.book_id)
                if not book:
                    raise NotFoundError(f"Book {line.book_id} not found")

                if line.quantity <= 0:
                    raise ValidationError(f"Quantity for book {line.book_id} must be greater than 0")

                if line.quantity > book.stock_quantity:
                    logger.warning(
                        f"Order for user {user.id} rejected: book {book.id} "
                        f"requested {line.quantity}, in stock {book.stock_quantity}"
                    )
                    raise InsufficientStockError(
                        f"Not enough stock for '{book.title}'. Available: {book.stock_quantity}"
                    )

                sub_total = book.price * line.quantity
                total += sub_total

                # evaluated by the store; a stale read trips ck_book_stock_non_negative on flush
                book.stock_quantity = BookModel.stock_quantity - line.quantity
                book.sold_number = BookModel.sold_number + line.quantity
                self.db.flush()

                lines.append(
                    OrderItemModel(
                        book=book,
                        price_at_time=book.price,
                        quantity=line.quantity,
                        sub_total=sub_total,
                    )
                )

            order = self.repo.create_order(
                OrderModel(
                    user_id=user.id,
                    status=OrderStatus.PENDING.value,
                    total_amount=total,
                    address_snapshot=address_snapshot(address),
                    phone_snapshot=payload.phone,
                    items=lines,
                )
            )

        logger.info(f"Order {order.id} placed by user {user.id}, {len(lines)} lines, total {total}")

        self.notification_service.send_order_placed(user.id, order.id)

        return order_to_dict(order)

    def cancel_order(self, order_id: int) -> Dict[str, Any]:
        order = self._get(order_id)

        if order.status != OrderStatus.PENDING.value:
            logger.warning(f"Cancel rejected for order {order_id} in status {order.status}")
            raise InvalidStateError(f"Only pending orders can be canceled (current status: {order.status})")

        with transaction(self.db):
            for item in order.items:
                item.book.stock_quantity = BookModel.stock_quantity + item.quantity
                item.book.sold_number = case(
                    (BookModel.sold_number > item.quantity, BookModel.sold_number - item.quantity),
                    else_=0,
                )
                self.db.flush()
            self.repo.update_order_status(order, OrderStatus.CANCELED.value)

        logger.info(f"Order {order_id} canceled, stock restored for {len(order.items)} lines")

        self.notification_service.send_order_canceled(order.user_id, order.id)

        return order_to_dict(order)

    def update_status(self, order_id: int, status: OrderStatus) -> Dict[str, Any]:
        order = self._get(order_id)
        previous = order.status

        with transaction(self.db):
            self.repo.update_order_status(order, status.value)

        logger.info(f"Order {order_id} status {previous} -> {status.value}")
        return order_to_dict(order)

    #query
    def get_order(self, order_id: int) -> Dict[str, Any]:
        return order_to_dict(self._get(order_id))

    def get_owner_id(self, order_id: int) -> int:
        return self._get(order_id).user_id

    def list_orders(self, **filters) -> List[Dict[str, Any]]:
        orders = self.db.execute(self._query(**filters)).scalars().unique().all()
        return [order_to_dict(o) for o in orders]

    def paginate_orders(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT, **filters):
        orders, meta = paginate(self.db, self._query(**filters), page, limit)
        return [order_to_dict(o) for o in orders], meta

    def get_user_orders(self, user_id: int) -> List[Dict[str, Any]]:
        if not self.db.get(UserModel, user_id):
            raise NotFoundError("User not found")
        return self.list_orders(user_id=user_id)

    def statistics(self, user_id: Optional[int] = None) -> Dict[str, Any]:
        def count(status=None):
            stmt = select(func.count()).select_from(OrderModel)
            if status:
                stmt = stmt.where(OrderModel.status == status)
            if user_id is not None:
                stmt = stmt.where(OrderModel.user_id == user_id)
            return self.db.execute(stmt).scalar_one()

        revenue_stmt = select(func.coalesce(func.sum(OrderModel.total_amount), 0)).where(
            OrderModel.status == OrderStatus.COMPLETED.value
        )
        if user_id is not None:
            revenue_stmt = revenue_stmt.where(OrderModel.user_id == user_id)

        return {
            "total_orders": count(),
            "pending_orders": count(OrderStatus.PENDING.value),
            "completed_orders": count(OrderStatus.COMPLETED.value),
            "total_revenue": Decimal(str(self.db.execute(revenue_stmt).scalar_one())),
        }
