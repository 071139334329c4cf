# bookstore/services/book_service.py
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from bookstore.data.database import transaction
from bookstore.data.models.author import AuthorBookModel, AuthorModel
from bookstore.data.models.book import BookImageModel, BookModel
from bookstore.data.models.genre import GenreModel
from bookstore.domain.errors import ConflictError, NotFoundError, ValidationError
from bookstore.domain.schemas import BookCreate, BookUpdate
from bookstore.repos.book_repo import BookRepo, book_loader_options
from bookstore.utils.logging import get_logger
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, apply_sort, paginate

logger = get_logger(__name__)

SORTABLE_FIELDS = ("title", "price", "sold_number", "pub_time")


def book_brief(book: BookModel) -> Dict[str, Any]:
    return {
        "id": book.id,
        "title": book.title,
        "price": book.price,
        "image": book.cover_url,
    }


def book_to_dict(book: BookModel) -> Dict[str, Any]:
    return {
        "id": book.id,
        "title": book.title,
        "price": book.price,
        "description": book.description,
        "stock_quantity": book.stock_quantity,
        "sold_number": book.sold_number,
        "pub_time": book.pub_time,
        "genre": {"id": book.genre.id, "name": book.genre.name} if book.genre else None,
        "authors": [{"id": a.id, "name": a.name} for a in book.authors],
        "images": [img.url for img in book.images],
        "created_at": book.created_at,
    }


class BookService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = BookRepo(db)

    def _query(
        self,
        search: Optional[str] = None,
        title: Optional[str] = None,
        author: Optional[str] = None,
        genre: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ):
        stmt = select(BookModel).options(*book_loader_options())

        def by_author(name):
            return BookModel.author_links.any(AuthorBookModel.author.has(AuthorModel.name.contains(name)))

        # search wins over the narrower title / author filters
        if search:
            stmt = stmt.where(
                or_(
                    BookModel.title.contains(search),
                    by_author(search),
                    BookModel.genre.has(GenreModel.name.contains(search)),
                )
            )
        else:
            if title:
                stmt = stmt.where(BookModel.title.contains(title))
            if author:
                stmt = stmt.where(by_author(author))

        if genre:
            stmt = stmt.where(BookModel.genre.has(GenreModel.name == genre))

        return apply_sort(stmt, BookModel, sort_by, sort_order, SORTABLE_FIELDS, default="title")

    def _resolve_links(self, genre_id: Optional[int], author_ids: Optional[List[int]]):
        """
        Looks up the genre and authors a book points to.
        Unknown ids are reported all at once.
        """
        errors = []

        genre = None
        if genre_id is not None:
            genre = self.repo.get_genre(genre_id)
            if genre is None:
                errors.append(f"Genre {genre_id} does not exist")

        authors = []
        if author_ids is not None:
            unique_ids = list(dict.fromkeys(author_ids))
            found = self.repo.get_authors(unique_ids)
            missing = [a for a in unique_ids if a not in found]
            if missing:
                errors.append(f"Authors do not exist: {', '.join(str(a) for a in missing)}")
            authors = [found[a] for a in unique_ids if a in found]

        if errors:
            logger.warning(f"Book rejected, unknown references: {errors}")
            raise ValidationError("Invalid genre or author references", errors=errors)

        return genre, authors

    #query
    def list_books(self, **filters) -> List[Dict[str, Any]]:
        books = self.db.execute(self._query(**filters)).scalars().unique().all()
        return [book_to_dict(b) for b in books]

    def paginate_books(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT, **filters):
        books, meta = paginate(self.db, self._query(**filters), page, limit)
        return [book_to_dict(b) for b in books], meta

    def get_book(self, book_id: int) -> Dict[str, Any]:
        book = self.repo.get_book(book_id)
        if not book:
            raise NotFoundError("Book not found")
        return book_to_dict(book)

    #commands
    def create_book(self, payload: BookCreate) -> Dict[str, Any]:
        genre, authors = self._resolve_links(payload.genre_id, payload.author_ids)

        with transaction(self.db):
            book = self.repo.create_book(
                BookModel(
                    title=payload.title,
                    price=payload.price,
                    description=payload.description,
                    stock_quantity=payload.stock_quantity,
                    sold_number=0,
                    pub_time=payload.pub_time,
                    genre=genre,
                    images=[BookImageModel(url=str(url)) for url in payload.images],
                    author_links=[AuthorBookModel(author=a) for a in authors],
                )
            )

        logger.info(f"Book {book.id} '{book.title}' created")
        return book_to_dict(book)

    def update_book(self, book_id: int, payload: BookUpdate) -> Dict[str, Any]:
        book = self.repo.get_book(book_id)
        if not book:
            raise NotFoundError("Book not found")

        data = payload.model_dump(exclude_unset=True)
        genre, authors = self._resolve_links(data.get("genre_id"), data.get("author_ids"))

        with transaction(self.db):
            for field in ("title", "price", "description", "stock_quantity", "sold_number", "pub_time"):
                if field in data and data[field] is not None:
                    setattr(book, field, data[field])

            if "genre_id" in data:
                book.genre = genre

            # links and images are replaced as a whole when given
            if data.get("author_ids") is not None:
                current = {link.author_id: link for link in book.author_links}
                book.author_links = [current.get(a.id) or AuthorBookModel(author=a) for a in authors]

            if data.get("images") is not None:
                book.images = [BookImageModel(url=str(url)) for url in payload.images]

            self.db.flush()

        logger.info(f"Book {book.id} updated: {sorted(data)}")
        return book_to_dict(book)

    def delete_book(self, book_id: int):
        book = self.repo.get_book(book_id)
        if not book:
            raise NotFoundError("Book not found")

        if self.repo.count_order_items(book_id):
            logger.warning(f"Book {book_id} delete rejected, it appears in orders")
            raise ConflictError("Book has been ordered and cannot be deleted")

        with transaction(self.db, deleting=True):
            self.repo.delete_book(book)

        logger.info(f"Book {book_id} deleted")
