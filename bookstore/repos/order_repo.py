# bookstore/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from bookstore.data.models.book import BookModel
from bookstore.data.models.order import OrderModel
from bookstore.data.models.order_item import OrderItemModel


def order_loader_options():
    return (
        selectinload(OrderModel.items).selectinload(OrderItemModel.book).selectinload(BookModel.images),
        selectinload(OrderModel.payment),
    )


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.execute(
            select(OrderModel).where(OrderModel.id == order_id).options(*order_loader_options())
        ).scalar_one_or_none()

    def update_order_status(self, order: OrderModel, status: str) -> OrderModel:
        order.status = status
        self.db.flush()
        return order
