# bookstore/api/routers/wishlists.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bookstore.api.deps import ensure_owns_user, get_current_principal, require_admin
from bookstore.api.responses import envelope, paginated
from bookstore.data.database import get_db
from bookstore.domain.schemas import ApiResponse, PaginatedResponse, WishlistCheck, WishlistCreate, WishlistOut
from bookstore.services.identity import Principal
from bookstore.services.wishlist_service import WishlistService
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT

router = APIRouter(prefix="/api/wishlists", tags=["wishlists"])


@router.get("/", response_model=ApiResponse[List[WishlistOut]], dependencies=[Depends(require_admin)])
def list_wishlists(user_id: Optional[int] = None, book_id: Optional[int] = None, db: Session = Depends(get_db)):
    return envelope(WishlistService(db).list_wishlists(user_id=user_id, book_id=book_id))


@router.get("/pagination/list", response_model=PaginatedResponse[WishlistOut], dependencies=[Depends(require_admin)])
def paginate_wishlists(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    user_id: Optional[int] = None,
    book_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    entries, meta = WishlistService(db).paginate_wishlists(page, limit, user_id=user_id, book_id=book_id)
    return paginated(entries, meta)


@router.get("/user/{user_id}", response_model=ApiResponse[List[WishlistOut]])
def user_wishlist(user_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    ensure_owns_user(principal, user_id)
    return envelope(WishlistService(db).get_user_wishlist(user_id))


@router.get("/check/in-wishlist", response_model=ApiResponse[WishlistCheck])
def check_in_wishlist(
    user_id: int,
    book_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ensure_owns_user(principal, user_id)
    return envelope(WishlistService(db).check(user_id, book_id))


@router.get("/{wishlist_id}", response_model=ApiResponse[WishlistOut])
def get_wishlist(wishlist_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    svc = WishlistService(db)
    ensure_owns_user(principal, svc.get_owner_id(wishlist_id))
    return envelope(svc.get_wishlist(wishlist_id))


@router.post("/", response_model=ApiResponse[WishlistOut], status_code=201)
def add_to_wishlist(
    payload: WishlistCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ensure_owns_user(principal, payload.user_id)
    return envelope(WishlistService(db).add(payload.user_id, payload.book_id), "Book added to wishlist")


@router.delete("/{wishlist_id}", response_model=ApiResponse[None])
def remove_from_wishlist(
    wishlist_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    svc = WishlistService(db)
    ensure_owns_user(principal, svc.get_owner_id(wishlist_id))
    svc.remove(wishlist_id)
    return envelope(None, "Book removed from wishlist")


@router.delete("/", response_model=ApiResponse[None])
def remove_book_from_wishlist(
    user_id: int,
    book_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ensure_owns_user(principal, user_id)
    WishlistService(db).remove_book(user_id, book_id)
    return envelope(None, "Book removed from wishlist")
