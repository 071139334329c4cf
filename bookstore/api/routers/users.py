# bookstore/api/routers/users.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bookstore.api.deps import ensure_owns_user, get_current_principal, require_admin, require_roles
from bookstore.api.responses import envelope, paginated
from bookstore.data.database import get_db
from bookstore.domain.enums import Gender, Role, SortOrder
from bookstore.domain.schemas import ApiResponse, PaginatedResponse, UserCreate, UserOut, UserUpdate
from bookstore.services.identity import Principal
from bookstore.services.user_service import UserService
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/", response_model=ApiResponse[List[UserOut]], dependencies=[Depends(require_admin)])
def list_users(
    search: Optional[str] = None,
    name: Optional[str] = None,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    gender: Optional[Gender] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    db: Session = Depends(get_db),
):
    users = UserService(db).list_users(
        search=search,
        name=name,
        email=email,
        phone=phone,
        gender=gender.value if gender else None,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return envelope(users)


@router.get("/pagination/list", response_model=PaginatedResponse[UserOut], dependencies=[Depends(require_admin)])
def paginate_users(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    search: Optional[str] = None,
    gender: Optional[Gender] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[SortOrder] = None,
    db: Session = Depends(get_db),
):
    users, meta = UserService(db).paginate_users(
        page,
        limit,
        search=search,
        gender=gender.value if gender else None,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return paginated(users, meta)


@router.get("/profile", response_model=ApiResponse[UserOut])
def my_profile(principal: Principal = Depends(require_roles(Role.USER)), db: Session = Depends(get_db)):
    return envelope(UserService(db).get_user(principal.profile_id))


@router.get("/{user_id}", response_model=ApiResponse[UserOut])
def get_user(user_id: int, principal: Principal = Depends(get_current_principal), db: Session = Depends(get_db)):
    ensure_owns_user(principal, user_id)
    return envelope(UserService(db).get_user(user_id))


@router.post("/", response_model=ApiResponse[UserOut], status_code=201, dependencies=[Depends(require_admin)])
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    return envelope(UserService(db).create_user(payload), "User created successfully")


@router.put("/{user_id}", response_model=ApiResponse[UserOut])
def update_user(
    user_id: int,
    payload: UserUpdate,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    ensure_owns_user(principal, user_id)
    return envelope(UserService(db).update_user(user_id, payload), "User updated successfully")


@router.delete("/{user_id}", response_model=ApiResponse[None], dependencies=[Depends(require_admin)])
def delete_user(user_id: int, db: Session = Depends(get_db)):
    UserService(db).delete_user(user_id)
    return envelope(None, "User deleted successfully")
