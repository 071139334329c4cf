# bookstore/repos/user_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from bookstore.data.models.authentication import AuthenticationModel
from bookstore.data.models.user import UserModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.execute(
            select(UserModel)
            .where(UserModel.id == user_id)
            .options(selectinload(UserModel.authentication), selectinload(UserModel.addresses))
        ).scalar_one_or_none()


class AuthRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, auth_id: int) -> AuthenticationModel | None:
        return self.db.get(AuthenticationModel, auth_id)

    def get_by_email(self, email: str) -> AuthenticationModel | None:
        return self.db.execute(
            select(AuthenticationModel).where(AuthenticationModel.email == email)
        ).scalar_one_or_none()

    def create(self, auth: AuthenticationModel) -> AuthenticationModel:
        self.db.add(auth)
        self.db.flush()
        return auth
