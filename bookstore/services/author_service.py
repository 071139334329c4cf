# bookstore/services/author_service.py
from typing import Any, Dict, List, Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from bookstore.data.database import transaction
from bookstore.data.models.authentication import AuthenticationModel
from bookstore.data.models.author import AuthorBookModel, AuthorModel
from bookstore.data.models.book import BookModel
from bookstore.domain.enums import Role
from bookstore.domain.errors import ConflictError, NotFoundError
from bookstore.domain.schemas import AuthorCreate
from bookstore.repos.user_repo import AuthRepo
from bookstore.services.book_service import book_brief
from bookstore.services.identity import create_profile
from bookstore.utils.logging import get_logger
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, apply_sort, paginate
from bookstore.utils.security import hash_password

logger = get_logger(__name__)

SORTABLE_FIELDS = ("name", "created_at")


def author_to_dict(author: AuthorModel) -> Dict[str, Any]:
    return {
        "id": author.id,
        "name": author.name,
        "email": author.authentication.email,
        "created_at": author.created_at,
        "books": [book_brief(link.book) for link in author.book_links],
    }


def _loader_options():
    return (
        selectinload(AuthorModel.authentication),
        selectinload(AuthorModel.book_links).selectinload(AuthorBookModel.book).selectinload(BookModel.images),
    )


class AuthorService:
    def __init__(self, db: Session):
        self.db = db
        self.auth_repo = AuthRepo(db)

    def _query(
        self,
        search: Optional[str] = None,
        name: Optional[str] = None,
        email: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ):
        stmt = select(AuthorModel).join(AuthorModel.authentication).options(*_loader_options())

        if search:
            stmt = stmt.where(
                or_(
                    AuthorModel.name.contains(search),
                    AuthenticationModel.email.contains(search),
                )
            )
        else:
            if name:
                stmt = stmt.where(AuthorModel.name.contains(name))
            if email:
                stmt = stmt.where(AuthenticationModel.email.contains(email))

        return apply_sort(stmt, AuthorModel, sort_by, sort_order, SORTABLE_FIELDS, default="name")

    def _get(self, author_id: int) -> AuthorModel:
        author = self.db.execute(
            select(AuthorModel).where(AuthorModel.id == author_id).options(*_loader_options())
        ).scalar_one_or_none()
        if not author:
            raise NotFoundError("Author not found")
        return author

    #query
    def list_authors(self, **filters) -> List[Dict[str, Any]]:
        authors = self.db.execute(self._query(**filters)).scalars().unique().all()
        return [author_to_dict(a) for a in authors]

    def paginate_authors(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT, **filters):
        authors, meta = paginate(self.db, self._query(**filters), page, limit)
        return [author_to_dict(a) for a in authors], meta

    def get_author(self, author_id: int) -> Dict[str, Any]:
        return author_to_dict(self._get(author_id))

    #commands
    def create_author(self, payload: AuthorCreate) -> Dict[str, Any]:
        """
        Admin-side author creation: credential + author profile, one transaction.
        """
        if self.auth_repo.get_by_email(payload.email):
            logger.warning(f"Author creation rejected, email {payload.email} already exists")
            raise ConflictError("Email already exists")

        with transaction(self.db):
            auth = self.auth_repo.create(
                AuthenticationModel(
                    email=payload.email,
                    password_hash=hash_password(payload.password),
                    role=Role.AUTHOR.value,
                )
            )
            author = create_profile(self.db, auth, {"name": payload.name})
            self.db.flush()

        logger.info(f"Author {author.id} created for account {auth.id}")
        return self.get_author(author.id)

    def update_author(self, author_id: int, name: Optional[str]) -> Dict[str, Any]:
        author = self._get(author_id)

        if name is not None:
            with transaction(self.db):
                author.name = name
            logger.info(f"Author {author_id} renamed to '{name}'")

        return author_to_dict(author)

    def delete_author(self, author_id: int):
        author = self._get(author_id)

        if author.book_links:
            logger.warning(f"Author {author_id} delete rejected, credited on {len(author.book_links)} books")
            raise ConflictError("Author is linked to books and cannot be deleted")

        auth = author.authentication
        # the credential cascade removes the author row first
        with transaction(self.db, deleting=True):
            self.db.delete(auth)

        logger.info(f"Author {author_id} and account {auth.id} deleted")
