# bookstore/api/routers/orders.py
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bookstore.api.deps import ensure_owns_user, get_current_principal, require_admin
from bookstore.api.responses import envelope, paginated
from bookstore.data.database import get_db
from bookstore.domain.enums import OrderStatus, SortOrder
from bookstore.domain.schemas import (
    ApiResponse,
    OrderCreate,
    OrderOut,
    OrderStatistics,
    OrderStatusUpdate,
    PaginatedResponse,
)
from bookstore.services.identity import Principal
from bookstore.services.order_service import OrderService
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT

router = APIRouter(prefix="/api/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.get("/", response_model=ApiResponse[List[OrderOut]], dependencies=[Depends(require_admin)])
def list_orders(
    user_id: Optional[int] = None,
    status: Optional[OrderStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    db: Session = Depends(get_db),
):
    orders = get_service(db).list_orders(
        user_id=user_id,
        status=status.value if status else None,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return envelope(orders)


@router.get("/pagination/list", response_model=PaginatedResponse[OrderOut], dependencies=[Depends(require_admin)])
def paginate_orders(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    user_id: Optional[int] = None,
    status: Optional[OrderStatus] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    db: Session = Depends(get_db),
):
    orders, meta = get_service(db).paginate_orders(
        page,
        limit,
        user_id=user_id,
        status=status.value if status else None,
        start_date=start_date,
        end_date=end_date,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return paginated(orders, meta)


@router.get("/stats/statistics", response_model=ApiResponse[OrderStatistics], dependencies=[Depends(require_admin)])
def order_statistics(user_id: Optional[int] = None, db: Session = Depends(get_db)):
    return envelope(get_service(db).statistics(user_id))


@router.get("/user/{user_id}", response_model=ApiResponse[List[OrderOut]])
def user_orders(user_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    ensure_owns_user(principal, user_id)
    return envelope(get_service(db).get_user_orders(user_id))


@router.get("/{order_id}", response_model=ApiResponse[OrderOut])
def get_order(order_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    svc = get_service(db)
    ensure_owns_user(principal, svc.get_owner_id(order_id))
    return envelope(svc.get_order(order_id))


@router.post("/", response_model=ApiResponse[OrderOut], status_code=201)
def create_order(
    payload: OrderCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ensure_owns_user(principal, payload.user_id)
    return envelope(get_service(db).create_order(payload), "Order created successfully")


@router.put("/{order_id}/status", response_model=ApiResponse[OrderOut], dependencies=[Depends(require_admin)])
def update_order_status(order_id: int, payload: OrderStatusUpdate, db: Session = Depends(get_db)):
    return envelope(get_service(db).update_status(order_id, payload.status), "Order status updated")


@router.put("/{order_id}/cancel", response_model=ApiResponse[OrderOut])
def cancel_order(order_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    svc = get_service(db)
    ensure_owns_user(principal, svc.get_owner_id(order_id))
    return envelope(svc.cancel_order(order_id), "Order canceled successfully")
