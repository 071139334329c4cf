# bookstore/repos/book_repo.py
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from bookstore.data.models.author import AuthorBookModel, AuthorModel
from bookstore.data.models.book import BookModel
from bookstore.data.models.genre import GenreModel
from bookstore.data.models.order_item import OrderItemModel


def book_loader_options():
    return (
        selectinload(BookModel.genre),
        selectinload(BookModel.images),
        selectinload(BookModel.author_links).selectinload(AuthorBookModel.author),
    )


class BookRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_book(self, book_id: int) -> BookModel | None:
        return self.db.execute(
            select(BookModel).where(BookModel.id == book_id).options(*book_loader_options())
        ).scalar_one_or_none()

    def create_book(self, book: BookModel) -> BookModel:
        self.db.add(book)
        self.db.flush()
        return book

    def delete_book(self, book: BookModel):
        self.db.delete(book)
        self.db.flush()

    def get_genre(self, genre_id: int) -> GenreModel | None:
        return self.db.get(GenreModel, genre_id)

    def get_authors(self, author_ids: list[int]) -> dict[int, AuthorModel]:
        if not author_ids:
            return {}
        authors = self.db.execute(select(AuthorModel).where(AuthorModel.id.in_(author_ids))).scalars().all()
        return {a.id: a for a in authors}

    def count_order_items(self, book_id: int) -> int:
        return self.db.execute(
            select(func.count()).select_from(OrderItemModel).where(OrderItemModel.book_id == book_id)
        ).scalar_one()
