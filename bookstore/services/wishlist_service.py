# bookstore/services/wishlist_service.py
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from bookstore.data.database import transaction
from bookstore.data.models.book import BookModel
from bookstore.data.models.user import UserModel
from bookstore.data.models.wishlist import WishlistModel
from bookstore.domain.errors import ConflictError, NotFoundError
from bookstore.services.book_service import book_brief
from bookstore.utils.logging import get_logger
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, paginate

logger = get_logger(__name__)


def wishlist_to_dict(entry: WishlistModel) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "book_id": entry.book_id,
        "created_at": entry.created_at,
        "book": book_brief(entry.book),
    }


class WishlistService:
    def __init__(self, db: Session):
        self.db = db

    def _find(self, user_id: int, book_id: int) -> WishlistModel | None:
        return self.db.execute(
            select(WishlistModel).where(WishlistModel.user_id == user_id, WishlistModel.book_id == book_id)
        ).scalar_one_or_none()

    def _get(self, wishlist_id: int) -> WishlistModel:
        entry = self.db.get(WishlistModel, wishlist_id)
        if not entry:
            raise NotFoundError("Wishlist item not found")
        return entry

    def _query(self, user_id: Optional[int] = None, book_id: Optional[int] = None):
        stmt = select(WishlistModel).options(
            selectinload(WishlistModel.book).selectinload(BookModel.images)
        )
        if user_id is not None:
            stmt = stmt.where(WishlistModel.user_id == user_id)
        if book_id is not None:
            stmt = stmt.where(WishlistModel.book_id == book_id)
        return stmt.order_by(WishlistModel.created_at.desc(), WishlistModel.id.desc())

    #query
    def list_wishlists(self, **filters) -> List[Dict[str, Any]]:
        return [wishlist_to_dict(w) for w in self.db.execute(self._query(**filters)).scalars().all()]

    def paginate_wishlists(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT, **filters):
        entries, meta = paginate(self.db, self._query(**filters), page, limit)
        return [wishlist_to_dict(w) for w in entries], meta

    def get_wishlist(self, wishlist_id: int) -> Dict[str, Any]:
        return wishlist_to_dict(self._get(wishlist_id))

    def get_owner_id(self, wishlist_id: int) -> int:
        return self._get(wishlist_id).user_id

    def get_user_wishlist(self, user_id: int) -> List[Dict[str, Any]]:
        if not self.db.get(UserModel, user_id):
            raise NotFoundError("User not found")
        return self.list_wishlists(user_id=user_id)

    def check(self, user_id: int, book_id: int) -> Dict[str, Any]:
        entry = self._find(user_id, book_id)
        return {"in_wishlist": entry is not None, "wishlist_id": entry.id if entry else None}

    #commands
    def add(self, user_id: int, book_id: int) -> Dict[str, Any]:
        if not self.db.get(UserModel, user_id):
            raise NotFoundError("User not found")
        if not self.db.get(BookModel, book_id):
            raise NotFoundError("Book not found")

        if self._find(user_id, book_id):
            logger.warning(f"Book {book_id} already in wishlist of user {user_id}")
            raise ConflictError("Book is already in wishlist")

        with transaction(self.db):
            entry = WishlistModel(user_id=user_id, book_id=book_id)
            self.db.add(entry)
            self.db.flush()

        logger.info(f"Book {book_id} added to wishlist of user {user_id}")
        return wishlist_to_dict(entry)

    def remove(self, wishlist_id: int):
        entry = self._get(wishlist_id)

        with transaction(self.db, deleting=True):
            self.db.delete(entry)

        logger.info(f"Wishlist item {wishlist_id} removed")

    def remove_book(self, user_id: int, book_id: int):
        entry = self._find(user_id, book_id)
        if not entry:
            raise NotFoundError("Book is not in wishlist")

        with transaction(self.db, deleting=True):
            self.db.delete(entry)

        logger.info(f"Book {book_id} removed from wishlist of user {user_id}")
