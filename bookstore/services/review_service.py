# bookstore/services/review_service.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from bookstore.data.database import transaction
from bookstore.data.models.book import BookModel
from bookstore.data.models.review import ReviewModel
from bookstore.data.models.user import UserModel
from bookstore.domain.errors import ConflictError, NotFoundError, ValidationError
from bookstore.domain.schemas import ReviewCreate, ReviewUpdate
from bookstore.utils.logging import get_logger
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, apply_sort, paginate

logger = get_logger(__name__)

SORTABLE_FIELDS = ("created_at", "updated_at", "rating")


def _check_rating(rating: int):
    if rating < 1 or rating > 5:
        raise ValidationError("Rating must be between 1 and 5")


def review_to_dict(review: ReviewModel) -> Dict[str, Any]:
    return {
        "id": review.id,
        "user_id": review.user_id,
        "user_name": review.user.name,
        "book_id": review.book_id,
        "book_title": review.book.title,
        "rating": review.rating,
        "comment": review.comment,
        "created_at": review.created_at,
        "updated_at": review.updated_at,
    }


class ReviewService:
    def __init__(self, db: Session):
        self.db = db

    def _get(self, review_id: int) -> ReviewModel:
        review = self.db.get(ReviewModel, review_id)
        if not review:
            raise NotFoundError("Review not found")
        return review

    def _query(
        self,
        user_id: Optional[int] = None,
        book_id: Optional[int] = None,
        rating: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ):
        stmt = select(ReviewModel).options(selectinload(ReviewModel.user), selectinload(ReviewModel.book))

        if user_id is not None:
            stmt = stmt.where(ReviewModel.user_id == user_id)
        if book_id is not None:
            stmt = stmt.where(ReviewModel.book_id == book_id)
        if rating is not None:
            stmt = stmt.where(ReviewModel.rating == rating)

        return apply_sort(
            stmt, ReviewModel, sort_by, sort_order, SORTABLE_FIELDS, default="created_at", default_order="desc"
        )

    #query
    def list_reviews(self, **filters) -> List[Dict[str, Any]]:
        return [review_to_dict(r) for r in self.db.execute(self._query(**filters)).scalars().all()]

    def paginate_reviews(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT, **filters):
        reviews, meta = paginate(self.db, self._query(**filters), page, limit)
        return [review_to_dict(r) for r in reviews], meta

    def get_review(self, review_id: int) -> Dict[str, Any]:
        return review_to_dict(self._get(review_id))

    def get_owner_id(self, review_id: int) -> int:
        return self._get(review_id).user_id

    def get_book_reviews(self, book_id: int) -> List[Dict[str, Any]]:
        if not self.db.get(BookModel, book_id):
            raise NotFoundError("Book not found")
        return self.list_reviews(book_id=book_id)

    def get_user_reviews(self, user_id: int) -> List[Dict[str, Any]]:
        if not self.db.get(UserModel, user_id):
            raise NotFoundError("User not found")
        return self.list_reviews(user_id=user_id)

    def rating_summary(self, book_id: int) -> Dict[str, Any]:
        if not self.db.get(BookModel, book_id):
            raise NotFoundError("Book not found")

        rows = self.db.execute(
            select(ReviewModel.rating, func.count())
            .where(ReviewModel.book_id == book_id)
            .group_by(ReviewModel.rating)
        ).all()

        distribution = {star: 0 for star in range(1, 6)}
        for rating, count in rows:
            distribution[rating] = count

        total = sum(distribution.values())
        average = sum(star * n for star, n in distribution.items()) / total if total else 0.0

        return {
            "average_rating": round(average, 1),
            "total_reviews": total,
            "rating_distribution": distribution,
        }

    #commands
    def create_review(self, payload: ReviewCreate) -> Dict[str, Any]:
        _check_rating(payload.rating)

        if not self.db.get(UserModel, payload.user_id):
            raise NotFoundError("User not found")
        if not self.db.get(BookModel, payload.book_id):
            raise NotFoundError("Book not found")

        existing = self.db.execute(
            select(ReviewModel).where(
                ReviewModel.user_id == payload.user_id,
                ReviewModel.book_id == payload.book_id,
            )
        ).scalar_one_or_none()
        if existing:
            logger.warning(f"User {payload.user_id} already reviewed book {payload.book_id}")
            raise ConflictError("You have already reviewed this book")

        with transaction(self.db):
            review = ReviewModel(
                user_id=payload.user_id,
                book_id=payload.book_id,
                rating=payload.rating,
                comment=payload.comment,
            )
            self.db.add(review)
            self.db.flush()

        logger.info(f"Review {review.id} ({review.rating}/5) by user {review.user_id} on book {review.book_id}")
        return review_to_dict(review)

    def update_review(self, review_id: int, payload: ReviewUpdate) -> Dict[str, Any]:
        review = self._get(review_id)
        data = payload.model_dump(exclude_unset=True)

        if data.get("rating") is not None:
            _check_rating(data["rating"])

        with transaction(self.db):
            if data.get("rating") is not None:
                review.rating = data["rating"]
            if "comment" in data:
                review.comment = data["comment"]
            review.updated_at = datetime.now(timezone.utc)

        logger.info(f"Review {review_id} updated")
        return review_to_dict(review)

    def delete_review(self, review_id: int):
        review = self._get(review_id)

        with transaction(self.db, deleting=True):
            self.db.delete(review)

        logger.info(f"Review {review_id} deleted")
