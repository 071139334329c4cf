# bookstore/api/routers/genres.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bookstore.api.deps import require_admin
from bookstore.api.responses import envelope, paginated
from bookstore.data.database import get_db
from bookstore.domain.enums import SortOrder
from bookstore.domain.schemas import ApiResponse, GenreCreate, GenreOut, GenreUpdate, PaginatedResponse
from bookstore.services.genre_service import GenreService
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT

router = APIRouter(prefix="/api/genres", tags=["genres"])


@router.get("/", response_model=ApiResponse[List[GenreOut]])
def list_genres(
    name: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    db: Session = Depends(get_db),
):
    return envelope(GenreService(db).list_genres(name=name, sort_by=sort_by, sort_order=sort_order))


@router.get("/pagination/list", response_model=PaginatedResponse[GenreOut])
def paginate_genres(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    name: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    db: Session = Depends(get_db),
):
    genres, meta = GenreService(db).paginate_genres(page, limit, name=name, sort_by=sort_by, sort_order=sort_order)
    return paginated(genres, meta)


@router.get("/{genre_id}", response_model=ApiResponse[GenreOut])
def get_genre(genre_id: int, db: Session = Depends(get_db)):
    return envelope(GenreService(db).get_genre(genre_id))


@router.post("/", response_model=ApiResponse[GenreOut], status_code=201, dependencies=[Depends(require_admin)])
def create_genre(payload: GenreCreate, db: Session = Depends(get_db)):
    return envelope(GenreService(db).create_genre(payload.name), "Genre created successfully")


@router.put("/{genre_id}", response_model=ApiResponse[GenreOut], dependencies=[Depends(require_admin)])
def update_genre(genre_id: int, payload: GenreUpdate, db: Session = Depends(get_db)):
    return envelope(GenreService(db).update_genre(genre_id, payload.name), "Genre updated successfully")


@router.delete("/{genre_id}", response_model=ApiResponse[None], dependencies=[Depends(require_admin)])
def delete_genre(genre_id: int, db: Session = Depends(get_db)):
    GenreService(db).delete_genre(genre_id)
    return envelope(None, "Genre deleted successfully")
