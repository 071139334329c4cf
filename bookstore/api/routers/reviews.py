# bookstore/api/routers/reviews.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bookstore.api.deps import ensure_owns_user, get_current_principal
from bookstore.api.responses import envelope, paginated
from bookstore.data.database import get_db
from bookstore.domain.enums import SortOrder
from bookstore.domain.schemas import (
    ApiResponse,
    PaginatedResponse,
    RatingSummary,
    ReviewCreate,
    ReviewOut,
    ReviewUpdate,
)
from bookstore.services.identity import Principal
from bookstore.services.review_service import ReviewService
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.get("/", response_model=ApiResponse[List[ReviewOut]])
def list_reviews(
    user_id: Optional[int] = None,
    book_id: Optional[int] = None,
    rating: Optional[int] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    db: Session = Depends(get_db),
):
    reviews = ReviewService(db).list_reviews(
        user_id=user_id, book_id=book_id, rating=rating, sort_by=sort_by, sort_order=sort_order
    )
    return envelope(reviews)


@router.get("/pagination/list", response_model=PaginatedResponse[ReviewOut])
def paginate_reviews(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    user_id: Optional[int] = None,
    book_id: Optional[int] = None,
    rating: Optional[int] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    db: Session = Depends(get_db),
):
    reviews, meta = ReviewService(db).paginate_reviews(
        page, limit, user_id=user_id, book_id=book_id, rating=rating, sort_by=sort_by, sort_order=sort_order
    )
    return paginated(reviews, meta)


@router.get("/book/{book_id}", response_model=ApiResponse[List[ReviewOut]])
def book_reviews(book_id: int, db: Session = Depends(get_db)):
    return envelope(ReviewService(db).get_book_reviews(book_id))


@router.get("/book/{book_id}/summary", response_model=ApiResponse[RatingSummary])
def book_rating_summary(book_id: int, db: Session = Depends(get_db)):
    return envelope(ReviewService(db).rating_summary(book_id))


@router.get("/user/{user_id}", response_model=ApiResponse[List[ReviewOut]])
def user_reviews(user_id: int, db: Session = Depends(get_db)):
    return envelope(ReviewService(db).get_user_reviews(user_id))


@router.get("/{review_id}", response_model=ApiResponse[ReviewOut])
def get_review(review_id: int, db: Session = Depends(get_db)):
    return envelope(ReviewService(db).get_review(review_id))


@router.post("/", response_model=ApiResponse[ReviewOut], status_code=201)
def create_review(
    payload: ReviewCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ensure_owns_user(principal, payload.user_id)
    return envelope(ReviewService(db).create_review(payload), "Review created successfully")


@router.put("/{review_id}", response_model=ApiResponse[ReviewOut])
def update_review(
    review_id: int,
    payload: ReviewUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    svc = ReviewService(db)
    ensure_owns_user(principal, svc.get_owner_id(review_id))
    return envelope(svc.update_review(review_id, payload), "Review updated successfully")


@router.delete("/{review_id}", response_model=ApiResponse[None])
def delete_review(review_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    svc = ReviewService(db)
    ensure_owns_user(principal, svc.get_owner_id(review_id))
    svc.delete_review(review_id)
    return envelope(None, "Review deleted successfully")
