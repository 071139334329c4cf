# bookstore/services/payment_service.py
import random
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from bookstore.data.database import transaction
from bookstore.data.models.payment import PaymentModel
from bookstore.domain.enums import OrderStatus, PaymentMethod, PaymentStatus
from bookstore.domain.errors import ConflictError, InvalidStateError, NotFoundError, ValidationError
from bookstore.domain.schemas import PaymentCreate
from bookstore.repos.order_repo import OrderRepo
from bookstore.services.notification_service import NotificationService
from bookstore.services.order_service import day_bounds
from bookstore.utils.logging import get_logger
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, apply_sort, paginate
from bookstore.utils.settings import PAYMENT_SUCCESS_RATE

logger = get_logger(__name__)

SORTABLE_FIELDS = ("paid_at", "amount", "created_at")


class PaymentGateway:
    """
    Simulated card / QR processor: approves a payment with the configured
    probability. Swapped for a deterministic one in tests.
    """

    def __init__(self, success_rate: float = PAYMENT_SUCCESS_RATE):
        self.success_rate = success_rate

    def charge(self, payment: PaymentModel) -> bool:
        return random.random() < self.success_rate


def payment_to_dict(payment: PaymentModel) -> Dict[str, Any]:
    order = payment.order
    return {
        "id": payment.id,
        "order_id": payment.order_id,
        "status": payment.status,
        "method": payment.method,
        "amount": payment.amount,
        "paid_at": payment.paid_at,
        "created_at": payment.created_at,
        "order": {
            "id": order.id,
            "user_id": order.user_id,
            "status": order.status,
            "total_amount": order.total_amount,
        },
    }


class PaymentService:
    def __init__(self, db: Session, gateway: Optional[PaymentGateway] = None):
        self.db = db
        self.orders = OrderRepo(db)
        self.gateway = gateway or PaymentGateway()
        self.notification_service = NotificationService()

    def _get(self, payment_id: int) -> PaymentModel:
        payment = self.db.execute(
            select(PaymentModel).where(PaymentModel.id == payment_id).options(selectinload(PaymentModel.order))
        ).scalar_one_or_none()
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    def _query(
        self,
        order_id: Optional[int] = None,
        status: Optional[str] = None,
        method: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ):
        stmt = select(PaymentModel).options(selectinload(PaymentModel.order))

        if order_id is not None:
            stmt = stmt.where(PaymentModel.order_id == order_id)
        if status:
            stmt = stmt.where(PaymentModel.status == status)
        if method:
            stmt = stmt.where(PaymentModel.method == method)

        start, end = day_bounds(start_date, end_date)
        if start:
            stmt = stmt.where(PaymentModel.paid_at >= start)
        if end:
            stmt = stmt.where(PaymentModel.paid_at < end)

        return apply_sort(
            stmt, PaymentModel, sort_by, sort_order, SORTABLE_FIELDS, default="paid_at", default_order="desc"
        )

    def _mark_paid(self, payment: PaymentModel):
        payment.status = PaymentStatus.PAID.value
        payment.paid_at = datetime.now(timezone.utc)
        # the order completes in the same transaction as its payment
        payment.order.status = OrderStatus.COMPLETED.value

    #commands
    def create_payment(self, payload: PaymentCreate) -> Dict[str, Any]:
        order = self.orders.get_order(payload.order_id)
        if not order:
            raise NotFoundError("Order not found")

        if order.payment is not None:
            logger.warning(f"Duplicate payment rejected for order {order.id}")
            raise ConflictError("Payment already exists for this order")

        if payload.amount != order.total_amount:
            logger.warning(
                f"Payment for order {order.id} rejected: amount {payload.amount} != total {order.total_amount}"
            )
            raise ValidationError(
                f"Payment amount {payload.amount} does not match order total {order.total_amount}"
            )

        with transaction(self.db):
            payment = PaymentModel(
                order=order,
                status=PaymentStatus.PROCESSING.value,
                method=payload.method.value,
                amount=payload.amount,
            )
            self.db.add(payment)
            self.db.flush()

        logger.info(f"Payment {payment.id} ({payment.method}) created for order {order.id}")
        return payment_to_dict(payment)

    def update_status(self, payment_id: int, status: PaymentStatus) -> Dict[str, Any]:
        payment = self._get(payment_id)

        with transaction(self.db):
            if status == PaymentStatus.PAID:
                self._mark_paid(payment)
            else:
                payment.status = status.value

        logger.info(f"Payment {payment_id} status -> {payment.status}")

        if payment.status == PaymentStatus.PAID.value:
            self.notification_service.send_payment_confirmed(payment.order.user_id, payment.order_id, payment.id)

        return payment_to_dict(payment)

    def process_payment(self, payment_id: int) -> Dict[str, Any]:
        payment = self._get(payment_id)

        if payment.status != PaymentStatus.PROCESSING.value:
            raise InvalidStateError(f"Payment is already {payment.status}")

        approved = self.gateway.charge(payment)
        logger.info(f"Gateway {'approved' if approved else 'declined'} payment {payment_id}")

        if approved:
            return self.update_status(payment_id, PaymentStatus.PAID)

        with transaction(self.db):
            payment.status = PaymentStatus.FAILED.value

        return payment_to_dict(payment)

    #query
    def get_payment(self, payment_id: int) -> Dict[str, Any]:
        return payment_to_dict(self._get(payment_id))

    def get_owner_id(self, payment_id: int) -> int:
        return self._get(payment_id).order.user_id

    def get_by_order(self, order_id: int) -> Dict[str, Any]:
        payment = self.db.execute(
            select(PaymentModel).where(PaymentModel.order_id == order_id).options(selectinload(PaymentModel.order))
        ).scalar_one_or_none()
        if not payment:
            raise NotFoundError("Payment not found for this order")
        return payment_to_dict(payment)

    def list_payments(self, **filters) -> List[Dict[str, Any]]:
        payments = self.db.execute(self._query(**filters)).scalars().all()
        return [payment_to_dict(p) for p in payments]

    def paginate_payments(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT, **filters):
        payments, meta = paginate(self.db, self._query(**filters), page, limit)
        return [payment_to_dict(p) for p in payments], meta

    def statistics(self) -> Dict[str, Any]:
        counts = dict(
            self.db.execute(select(PaymentModel.status, func.count()).group_by(PaymentModel.status)).all()
        )

        revenue_by_method = {m.value: Decimal("0.00") for m in PaymentMethod}
        rows = self.db.execute(
            select(PaymentModel.method, func.sum(PaymentModel.amount))
            .where(PaymentModel.status == PaymentStatus.PAID.value)
            .group_by(PaymentModel.method)
        ).all()
        for method, amount in rows:
            revenue_by_method[method] = Decimal(str(amount or 0))

        return {
            "total_payments": sum(counts.values()),
            "processing_payments": counts.get(PaymentStatus.PROCESSING.value, 0),
            "paid_payments": counts.get(PaymentStatus.PAID.value, 0),
            "failed_payments": counts.get(PaymentStatus.FAILED.value, 0),
            "total_revenue": sum(revenue_by_method.values(), Decimal("0.00")),
            "revenue_by_method": revenue_by_method,
        }
