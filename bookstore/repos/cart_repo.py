# bookstore/repos/cart_repo.py
from sqlalchemy import delete, select
from sqlalchemy.orm import Session, selectinload

from bookstore.data.models.book import BookModel
from bookstore.data.models.cart import CartModel
from bookstore.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_by_user(self, user_id: int) -> CartModel | None:
        return self.db.execute(
            select(CartModel)
            .where(CartModel.user_id == user_id)
            .options(selectinload(CartModel.items).selectinload(CartItemModel.book).selectinload(BookModel.images))
        ).scalar_one_or_none()

    def create_cart(self, cart: CartModel) -> CartModel:
        self.db.add(cart)
        self.db.flush()
        return cart

    def get_cart_item(self, cart_id: int, book_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.cart_id == cart_id,
                CartItemModel.book_id == book_id,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, item: CartItemModel):
        self.db.delete(item)
        self.db.flush()

    def clear_items(self, cart_id: int) -> int:
        result = self.db.execute(delete(CartItemModel).where(CartItemModel.cart_id == cart_id))
        return result.rowcount

    def refresh(self, cart: CartModel):
        # reload items after bulk / item-level changes
        self.db.expire(cart, ["items"])
