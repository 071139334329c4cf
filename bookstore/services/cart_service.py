from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from bookstore.data.database import transaction
from bookstore.data.models.book import BookModel
from bookstore.data.models.cart import CartModel
from bookstore.data.models.cart_item import CartItemModel
from bookstore.data.models.user import UserModel
from bookstore.domain.errors import InsufficientStockError, NotFoundError
from bookstore.repos.cart_repo import CartRepo
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    One cart per user, created lazily.
    commands (add, update, remove, clear) change the items,
    query (get) only reads and formats.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)

    def _format(self, cart: CartModel) -> Dict[str, Any]:
        items = []
        total_items = 0
        total_price = Decimal("0.00")

        for i in cart.items:
            sub_total = i.book.price * i.quantity
            total_items += i.quantity
            # unselected items still count towards the cart total
            total_price += sub_total
            items.append(
                {
                    "cart_id": cart.id,
                    "book_id": i.book_id,
                    "book_title": i.book.title,
                    "book_price": i.book.price,
                    "book_image": i.book.cover_url,
                    "quantity": i.quantity,
                    "is_selected": i.is_selected,
                    "added_at": i.added_at,
                    "sub_total": sub_total,
                }
            )

        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "items": items,
            "total_items": total_items,
            "total_price": total_price,
        }

    def _get_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if not cart:
            raise NotFoundError("Cart not found")
        return cart

    def _get_book(self, book_id: int) -> BookModel:
        book = self.db.get(BookModel, book_id)
        if not book:
            raise NotFoundError("Book not found")
        return book

    def _check_stock(self, book: BookModel, quantity: int):
        if quantity > book.stock_quantity:
            logger.warning(f"Book {book.id}: requested {quantity}, only {book.stock_quantity} in stock")
            raise InsufficientStockError(f"Not enough stock. Available: {book.stock_quantity}")

    def _reload(self, cart: CartModel) -> Dict[str, Any]:
        self.repo.refresh(cart)
        return self._format(self.repo.get_cart_by_user(cart.user_id))

    #query
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        return self._format(self._get_cart(user_id))

    #commands
    def get_or_create_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return self._format(cart)

        if not self.db.get(UserModel, user_id):
            raise NotFoundError("User not found")

        # unique user_id: a concurrent create surfaces as ConflictError
        with transaction(self.db):
            cart = self.repo.create_cart(CartModel(user_id=user_id))

        logger.info(f"Created cart {cart.id} for user {user_id}")
        return self._format(self.repo.get_cart_by_user(user_id))

    def add_item(self, user_id: int, book_id: int, quantity: int, is_selected: bool = True) -> Dict[str, Any]:
        self.get_or_create_cart(user_id)
        cart = self._get_cart(user_id)

        book = self._get_book(book_id)
        self._check_stock(book, quantity)

        with transaction(self.db):
            existing_item = self.repo.get_cart_item(cart.id, book_id)

            if existing_item:
                logger.info(
                    f"Book {book_id} already in cart {cart.id}, quantity "
                    f"{existing_item.quantity} -> {existing_item.quantity + quantity}"
                )
                existing_item.quantity += quantity
                existing_item.is_selected = is_selected
            else:
                logger.info(f"Adding book {book_id} x{quantity} to cart {cart.id}")
                self.repo.add_cart_item(
                    CartItemModel(
                        cart_id=cart.id,
                        book_id=book_id,
                        quantity=quantity,
                        is_selected=is_selected,
                    )
                )

        return self._reload(cart)

    def update_item(
        self,
        user_id: int,
        book_id: int,
        quantity: Optional[int] = None,
        is_selected: Optional[bool] = None,
    ) -> Dict[str, Any]:
        cart = self._get_cart(user_id)

        item = self.repo.get_cart_item(cart.id, book_id)
        if not item:
            raise NotFoundError("Item not found in cart")

        with transaction(self.db):
            if quantity is not None and quantity <= 0:
                logger.info(f"Quantity {quantity} for book {book_id}, removing it from cart {cart.id}")
                self.repo.delete_cart_item(item)
            else:
                if quantity is not None:
                    self._check_stock(self._get_book(book_id), quantity)
                    item.quantity = quantity
                if is_selected is not None:
                    item.is_selected = is_selected
                logger.info(f"Cart {cart.id} item {book_id} updated")

        return self._reload(cart)

    def remove_item(self, user_id: int, book_id: int) -> Dict[str, Any]:
        cart = self._get_cart(user_id)

        item = self.repo.get_cart_item(cart.id, book_id)
        if not item:
            raise NotFoundError("Item not found in cart")

        with transaction(self.db):
            self.repo.delete_cart_item(item)

        logger.info(f"Book {book_id} removed from cart {cart.id}")
        return self._reload(cart)

    def clear_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self._get_cart(user_id)

        with transaction(self.db):
            removed = self.repo.clear_items(cart.id)

        logger.info(f"Cart {cart.id} cleared, {removed} items removed")
        return self._reload(cart)
