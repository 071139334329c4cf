# bookstore/services/user_service.py
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from bookstore.data.database import transaction
from bookstore.data.models.authentication import AuthenticationModel
from bookstore.data.models.order import OrderModel
from bookstore.data.models.user import UserModel
from bookstore.domain.enums import Role
from bookstore.domain.errors import ConflictError, NotFoundError
from bookstore.domain.schemas import UserCreate, UserUpdate
from bookstore.repos.user_repo import AuthRepo, UserRepo
from bookstore.services.identity import create_profile
from bookstore.utils.logging import get_logger
from bookstore.utils.pagination import DEFAULT_LIMIT, DEFAULT_PAGE, apply_sort, paginate
from bookstore.utils.security import hash_password

logger = get_logger(__name__)

SORTABLE_FIELDS = ("name", "register_date", "birth_date")


def address_to_dict(address) -> Dict[str, Any]:
    return {
        "id": address.id,
        "user_id": address.user_id,
        "city": address.city,
        "ward": address.ward,
        "specific_address": address.specific_address,
    }


def user_to_dict(user: UserModel) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.authentication.email,
        "name": user.name,
        "phone": user.phone,
        "gender": user.gender,
        "birth_date": user.birth_date,
        "register_date": user.register_date,
        "addresses": [address_to_dict(a) for a in user.addresses],
    }


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)
        self.auth_repo = AuthRepo(db)

    def _query(
        self,
        search: Optional[str] = None,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        gender: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ):
        stmt = (
            select(UserModel)
            .join(UserModel.authentication)
            .options(selectinload(UserModel.authentication), selectinload(UserModel.addresses))
        )

        if search:
            stmt = stmt.where(
                or_(
                    UserModel.name.contains(search),
                    UserModel.phone.contains(search),
                    AuthenticationModel.email.contains(search),
                )
            )
        else:
            if name:
                stmt = stmt.where(UserModel.name.contains(name))
            if email:
                stmt = stmt.where(AuthenticationModel.email.contains(email))
            if phone:
                stmt = stmt.where(UserModel.phone.contains(phone))

        if gender:
            stmt = stmt.where(UserModel.gender == gender)

        return apply_sort(
            stmt, UserModel, sort_by, sort_order, SORTABLE_FIELDS, default="register_date", default_order="desc"
        )

    def _get(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    #query
    def list_users(self, **filters) -> List[Dict[str, Any]]:
        users = self.db.execute(self._query(**filters)).scalars().unique().all()
        return [user_to_dict(u) for u in users]

    def paginate_users(self, page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT, **filters):
        users, meta = paginate(self.db, self._query(**filters), page, limit)
        return [user_to_dict(u) for u in users], meta

    def get_user(self, user_id: int) -> Dict[str, Any]:
        return user_to_dict(self._get(user_id))

    #commands
    def create_user(self, payload: UserCreate) -> Dict[str, Any]:
        """
        Admin-side user creation. Same rows as a self registration:
        credential, user profile and an empty cart.
        """
        if self.auth_repo.get_by_email(payload.email):
            logger.warning(f"User creation rejected, email {payload.email} already exists")
            raise ConflictError("Email already exists")

        with transaction(self.db):
            auth = self.auth_repo.create(
                AuthenticationModel(
                    email=payload.email,
                    password_hash=hash_password(payload.password),
                    role=Role.USER.value,
                )
            )
            user = create_profile(self.db, auth, payload.model_dump())
            self.db.flush()

        logger.info(f"User {user.id} created for account {auth.id}")
        return self.get_user(user.id)

    def update_user(self, user_id: int, payload: UserUpdate) -> Dict[str, Any]:
        user = self._get(user_id)
        data = payload.model_dump(exclude_unset=True)

        with transaction(self.db):
            if data.get("name") is not None:
                user.name = data["name"]
            if "phone" in data:
                user.phone = data["phone"] or None
            if "gender" in data:
                user.gender = data["gender"].value if data["gender"] else None
            if "birth_date" in data:
                user.birth_date = data["birth_date"]

        logger.info(f"User {user_id} updated: {sorted(data)}")
        return user_to_dict(user)

    def delete_user(self, user_id: int):
        user = self._get(user_id)

        orders = self.db.execute(
            select(func.count()).select_from(OrderModel).where(OrderModel.user_id == user_id)
        ).scalar_one()
        if orders:
            logger.warning(f"User {user_id} delete rejected, {orders} orders reference it")
            raise ConflictError("User has orders and cannot be deleted")

        auth = user.authentication
        # user row (with addresses, cart, wishlist, reviews) first, then its credential
        with transaction(self.db, deleting=True):
            self.db.delete(auth)

        logger.info(f"User {user_id} and account {auth.id} deleted")
