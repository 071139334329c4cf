# bookstore/services/genre_service.py
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bookstore.data.database import transaction
from bookstore.data.models.book import BookModel
from bookstore.data.models.genre import GenreModel
from bookstore.domain.errors import ConflictError, NotFoundError
from bookstore.utils.logging import get_logger
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, apply_sort, paginate

logger = get_logger(__name__)


def genre_to_dict(genre: GenreModel) -> Dict[str, Any]:
    return {"id": genre.id, "name": genre.name}


class GenreService:
    def __init__(self, db: Session):
        self.db = db

    def _query(self, name: Optional[str] = None, sort_by: Optional[str] = None, sort_order: Optional[str] = None):
        stmt = select(GenreModel)
        if name:
            stmt = stmt.where(GenreModel.name.contains(name))
        return apply_sort(stmt, GenreModel, sort_by, sort_order, ("name",), default="name")

    def _get(self, genre_id: int) -> GenreModel:
        genre = self.db.get(GenreModel, genre_id)
        if not genre:
            raise NotFoundError("Genre not found")
        return genre

    def _ensure_name_free(self, name: str, genre_id: int | None = None):
        existing = self.db.execute(select(GenreModel).where(GenreModel.name == name)).scalar_one_or_none()
        if existing and existing.id != genre_id:
            raise ConflictError(f"Genre '{name}' already exists")

    #query
    def list_genres(self, **filters) -> List[Dict[str, Any]]:
        return [genre_to_dict(g) for g in self.db.execute(self._query(**filters)).scalars().all()]

    def paginate_genres(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT, **filters):
        genres, meta = paginate(self.db, self._query(**filters), page, limit)
        return [genre_to_dict(g) for g in genres], meta

    def get_genre(self, genre_id: int) -> Dict[str, Any]:
        return genre_to_dict(self._get(genre_id))

    #commands
    def create_genre(self, name: str) -> Dict[str, Any]:
        name = name.strip()
        self._ensure_name_free(name)

        with transaction(self.db):
            genre = GenreModel(name=name)
            self.db.add(genre)
            self.db.flush()

        logger.info(f"Genre {genre.id} '{genre.name}' created")
        return genre_to_dict(genre)

    def update_genre(self, genre_id: int, name: str) -> Dict[str, Any]:
        genre = self._get(genre_id)
        name = name.strip()
        self._ensure_name_free(name, genre_id)

        with transaction(self.db):
            genre.name = name

        logger.info(f"Genre {genre_id} renamed to '{name}'")
        return genre_to_dict(genre)

    def delete_genre(self, genre_id: int):
        genre = self._get(genre_id)

        in_use = self.db.execute(
            select(func.count()).select_from(BookModel).where(BookModel.genre_id == genre_id)
        ).scalar_one()
        if in_use:
            logger.warning(f"Genre {genre_id} delete rejected, used by {in_use} books")
            raise ConflictError("Genre is used by books and cannot be deleted")

        with transaction(self.db, deleting=True):
            self.db.delete(genre)

        logger.info(f"Genre {genre_id} deleted")
