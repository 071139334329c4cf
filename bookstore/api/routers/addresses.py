# bookstore/api/routers/addresses.py
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookstore.api.deps import ensure_owns_user, get_current_principal, require_admin
from bookstore.api.responses import envelope
from bookstore.data.database import get_db
from bookstore.domain.schemas import AddressCreate, AddressOut, AddressUpdate, ApiResponse
from bookstore.services.address_service import AddressService
from bookstore.services.identity import Principal

router = APIRouter(prefix="/api/addresses", tags=["addresses"])


@router.get("/", response_model=ApiResponse[List[AddressOut]], dependencies=[Depends(require_admin)])
def list_addresses(
    user_id: Optional[int] = None,
    city: Optional[str] = None,
    ward: Optional[str] = None,
    db: Session = Depends(get_db),
):
    return envelope(AddressService(db).list_addresses(user_id=user_id, city=city, ward=ward))


@router.get("/user/{user_id}", response_model=ApiResponse[List[AddressOut]])
def user_addresses(user_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    ensure_owns_user(principal, user_id)
    return envelope(AddressService(db).get_user_addresses(user_id))


@router.get("/{address_id}", response_model=ApiResponse[AddressOut])
def get_address(address_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    svc = AddressService(db)
    ensure_owns_user(principal, svc.get_owner_id(address_id))
    return envelope(svc.get_address(address_id))


@router.post("/", response_model=ApiResponse[AddressOut], status_code=201)
def create_address(
    payload: AddressCreate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ensure_owns_user(principal, payload.user_id)
    return envelope(AddressService(db).create_address(payload), "Address created successfully")


@router.put("/{address_id}", response_model=ApiResponse[AddressOut])
def update_address(
    address_id: int,
    payload: AddressUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    svc = AddressService(db)
    ensure_owns_user(principal, svc.get_owner_id(address_id))
    return envelope(svc.update_address(address_id, payload), "Address updated successfully")


@router.delete("/{address_id}", response_model=ApiResponse[None])
def delete_address(address_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    svc = AddressService(db)
    ensure_owns_user(principal, svc.get_owner_id(address_id))
    svc.delete_address(address_id)
    return envelope(None, "Address deleted successfully")
