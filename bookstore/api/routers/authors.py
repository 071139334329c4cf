# bookstore/api/routers/authors.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bookstore.api.deps import ensure_owns_author, get_current_principal, require_admin
from bookstore.api.responses import envelope, paginated
from bookstore.data.database import get_db
from bookstore.domain.enums import SortOrder
from bookstore.domain.schemas import ApiResponse, AuthorCreate, AuthorOut, AuthorUpdate, PaginatedResponse
from bookstore.services.author_service import AuthorService
from bookstore.services.identity import Principal
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT

router = APIRouter(prefix="/api/authors", tags=["authors"])


@router.get("/", response_model=ApiResponse[List[AuthorOut]])
def list_authors(
    search: Optional[str] = None,
    name: Optional[str] = None,
    email: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    db: Session = Depends(get_db),
):
    authors = AuthorService(db).list_authors(
        search=search, name=name, email=email, sort_by=sort_by, sort_order=sort_order
    )
    return envelope(authors)


@router.get("/pagination/list", response_model=PaginatedResponse[AuthorOut])
def paginate_authors(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    search: Optional[str] = None,
    name: Optional[str] = None,
    email: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    db: Session = Depends(get_db),
):
    authors, meta = AuthorService(db).paginate_authors(
        page, limit, search=search, name=name, email=email, sort_by=sort_by, sort_order=sort_order
    )
    return paginated(authors, meta)


@router.get("/{author_id}", response_model=ApiResponse[AuthorOut])
def get_author(author_id: int, db: Session = Depends(get_db)):
    return envelope(AuthorService(db).get_author(author_id))


@router.post("/", response_model=ApiResponse[AuthorOut], status_code=201, dependencies=[Depends(require_admin)])
def create_author(payload: AuthorCreate, db: Session = Depends(get_db)):
    return envelope(AuthorService(db).create_author(payload), "Author created successfully")


@router.put("/{author_id}", response_model=ApiResponse[AuthorOut])
def update_author(
    author_id: int,
    payload: AuthorUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ensure_owns_author(principal, author_id)
    return envelope(AuthorService(db).update_author(author_id, payload.name), "Author updated successfully")


@router.delete("/{author_id}", response_model=ApiResponse[None], dependencies=[Depends(require_admin)])
def delete_author(author_id: int, db: Session = Depends(get_db)):
    AuthorService(db).delete_author(author_id)
    return envelope(None, "Author deleted successfully")
