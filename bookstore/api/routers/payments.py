# bookstore/api/routers/payments.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bookstore.api.deps import ensure_owns_user, get_current_principal, get_payment_gateway, require_admin
from bookstore.api.responses import envelope, paginated
from bookstore.data.database import get_db
from bookstore.domain.enums import PaymentMethod, PaymentStatus, SortOrder
from bookstore.domain.schemas import (
    ApiResponse,
    PaginatedResponse,
    PaymentCreate,
    PaymentOut,
    PaymentStatistics,
    PaymentStatusUpdate,
)
from bookstore.services.identity import Principal
from bookstore.services.order_service import OrderService
from bookstore.services.payment_service import PaymentGateway, PaymentService
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT

router = APIRouter(prefix="/api/payments", tags=["payments"])


def get_service(db: Session = Depends(get_db), gateway: PaymentGateway = Depends(get_payment_gateway)):
    return PaymentService(db, gateway)


@router.get("/", response_model=ApiResponse[List[PaymentOut]], dependencies=[Depends(require_admin)])
def list_payments(
    order_id: Optional[int] = None,
    status: Optional[PaymentStatus] = None,
    method: Optional[PaymentMethod] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    svc: PaymentService = Depends(get_service),
):
    payments = svc.list_payments(
        order_id=order_id,
        status=status.value if status else None,
        method=method.value if method else None,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return envelope(payments)


@router.get("/pagination/list", response_model=PaginatedResponse[PaymentOut], dependencies=[Depends(require_admin)])
def paginate_payments(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    order_id: Optional[int] = None,
    status: Optional[PaymentStatus] = None,
    method: Optional[PaymentMethod] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    svc: PaymentService = Depends(get_service),
):
    payments, meta = svc.paginate_payments(
        page,
        limit,
        order_id=order_id,
        status=status.value if status else None,
        method=method.value if method else None,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return paginated(payments, meta)


@router.get(
    "/stats/statistics", response_model=ApiResponse[PaymentStatistics], dependencies=[Depends(require_admin)]
)
def payment_statistics(svc: PaymentService = Depends(get_service)):
    return envelope(svc.statistics())


@router.get("/order/{order_id}", response_model=ApiResponse[PaymentOut])
def payment_by_order(
    order_id: int,
    principal: Principal = Depends(get_current_principal),
    svc: PaymentService = Depends(get_service),
    db: Session = Depends(get_db),
):
    ensure_owns_user(principal, OrderService(db).get_owner_id(order_id))
    return envelope(svc.get_by_order(order_id))


@router.get("/{payment_id}", response_model=ApiResponse[PaymentOut])
def get_payment(
    payment_id: int,
    principal: Principal = Depends(get_current_principal),
    svc: PaymentService = Depends(get_service),
):
    ensure_owns_user(principal, svc.get_owner_id(payment_id))
    return envelope(svc.get_payment(payment_id))


@router.post("/", response_model=ApiResponse[PaymentOut], status_code=201)
def create_payment(
    payload: PaymentCreate,
    principal: Principal = Depends(get_current_principal),
    svc: PaymentService = Depends(get_service),
    db: Session = Depends(get_db),
):
    ensure_owns_user(principal, OrderService(db).get_owner_id(payload.order_id))
    return envelope(svc.create_payment(payload), "Payment created successfully")


@router.put("/{payment_id}/status", response_model=ApiResponse[PaymentOut], dependencies=[Depends(require_admin)])
def update_payment_status(
    payment_id: int,
    payload: PaymentStatusUpdate,
    svc: PaymentService = Depends(get_service),
):
    return envelope(svc.update_status(payment_id, payload.status), "Payment status updated")


@router.put("/{payment_id}/process", response_model=ApiResponse[PaymentOut])
def process_payment(
    payment_id: int,
    principal: Principal = Depends(get_current_principal),
    svc: PaymentService = Depends(get_service),
):
    ensure_owns_user(principal, svc.get_owner_id(payment_id))
    payment = svc.process_payment(payment_id)
    message = "Payment processed successfully" if payment["status"] == PaymentStatus.PAID.value else "Payment failed"
    return envelope(payment, message)
