# bookstore/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookstore.api.deps import ensure_owns_user, get_current_principal
from bookstore.api.responses import envelope
from bookstore.data.database import get_db
from bookstore.domain.schemas import ApiResponse, CartItemIn, CartItemUpdate, CartOut
from bookstore.services.cart_service import CartService
from bookstore.services.identity import Principal

router = APIRouter(prefix="/api/carts", tags=["carts"])


def get_service(user_id: int, principal: Principal, db: Session) -> CartService:
    ensure_owns_user(principal, user_id)
    return CartService(db)


@router.get("/{user_id}", response_model=ApiResponse[CartOut])
def get_cart(user_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    svc = get_service(user_id, principal, db)
    return envelope(svc.get_or_create_cart(user_id))


@router.post("/{user_id}/items", response_model=ApiResponse[CartOut])
def add_item(
    user_id: int,
    payload: CartItemIn,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(user_id, principal, db)
    cart = svc.add_item(user_id, payload.book_id, payload.quantity, payload.is_selected)
    return envelope(cart, "Item added to cart")


@router.put("/{user_id}/items/{book_id}", response_model=ApiResponse[CartOut])
def update_item(
    user_id: int,
    book_id: int,
    payload: CartItemUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(user_id, principal, db)
    cart = svc.update_item(user_id, book_id, quantity=payload.quantity, is_selected=payload.is_selected)
    return envelope(cart, "Cart item updated")


@router.delete("/{user_id}/items/{book_id}", response_model=ApiResponse[CartOut])
def remove_item(
    user_id: int,
    book_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    svc = get_service(user_id, principal, db)
    return envelope(svc.remove_item(user_id, book_id), "Item removed from cart")


@router.delete("/{user_id}/clear", response_model=ApiResponse[CartOut])
def clear_cart(user_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    svc = get_service(user_id, principal, db)
    return envelope(svc.clear_cart(user_id), "Cart cleared")
