# bookstore/api/routers/books.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bookstore.api.deps import require_admin
from bookstore.api.responses import envelope, paginated
from bookstore.data.database import get_db
from bookstore.domain.enums import SortOrder
from bookstore.domain.schemas import ApiResponse, BookCreate, BookOut, BookUpdate, PaginatedResponse
from bookstore.services.book_service import BookService
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT

router = APIRouter(prefix="/api/books", tags=["books"])


@router.get("/", response_model=ApiResponse[List[BookOut]])
def list_books(
    search: Optional[str] = None,
    title: Optional[str] = None,
    author: Optional[str] = None,
    genre: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    db: Session = Depends(get_db),
):
    books = BookService(db).list_books(
        search=search, title=title, author=author, genre=genre, sort_by=sort_by, sort_order=sort_order
    )
    return envelope(books)


@router.get("/pagination/list", response_model=PaginatedResponse[BookOut])
def paginate_books(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    search: Optional[str] = None,
    title: Optional[str] = None,
    author: Optional[str] = None,
    genre: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    db: Session = Depends(get_db),
):
    books, meta = BookService(db).paginate_books(
        page, limit, search=search, title=title, author=author, genre=genre, sort_by=sort_by, sort_order=sort_order
    )
    return paginated(books, meta)


@router.get("/{book_id}", response_model=ApiResponse[BookOut])
def get_book(book_id: int, db: Session = Depends(get_db)):
    return envelope(BookService(db).get_book(book_id))


@router.post("/", response_model=ApiResponse[BookOut], status_code=201, dependencies=[Depends(require_admin)])
def create_book(payload: BookCreate, db: Session = Depends(get_db)):
    return envelope(BookService(db).create_book(payload), "Book created successfully")


@router.put("/{book_id}", response_model=ApiResponse[BookOut], dependencies=[Depends(require_admin)])
def update_book(book_id: int, payload: BookUpdate, db: Session = Depends(get_db)):
    return envelope(BookService(db).update_book(book_id, payload), "Book updated successfully")


@router.delete("/{book_id}", response_model=ApiResponse[None], dependencies=[Depends(require_admin)])
def delete_book(book_id: int, db: Session = Depends(get_db)):
    BookService(db).delete_book(book_id)
    return envelope(None, "Book deleted successfully")
