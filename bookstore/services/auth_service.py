# bookstore/services/auth_service.py
from typing import Any, Dict

from sqlalchemy.orm import Session

from bookstore.data.database import transaction
from bookstore.data.models.authentication import AuthenticationModel
from bookstore.domain.errors import (
    ConflictError,
    IncorrectPasswordError,
    InvalidCredentialsError,
    NotFoundError,
)
from bookstore.domain.schemas import RegisterIn
from bookstore.repos.user_repo import AuthRepo
from bookstore.services.identity import build_profile, create_profile
from bookstore.utils.logging import get_logger
from bookstore.utils.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)

logger = get_logger(__name__)


class AuthService:
    """
    Credentials and sessions:
    register / login issue a token together with the role profile,
    verify_token only checks the signature and expiry.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = AuthRepo(db)

    def _session(self, auth: AuthenticationModel) -> Dict[str, Any]:
        return {
            "token": create_access_token(auth.id, auth.email, auth.role),
            "profile": build_profile(auth),
        }

    #commands
    def register(self, payload: RegisterIn) -> Dict[str, Any]:
        if self.repo.get_by_email(payload.email):
            logger.warning(f"Registration rejected, email {payload.email} already exists")
            raise ConflictError("Email already exists")

        with transaction(self.db):
            auth = self.repo.create(
                AuthenticationModel(
                    email=payload.email,
                    password_hash=hash_password(payload.password),
                    role=payload.role.value,
                )
            )
            create_profile(self.db, auth, payload.model_dump())

        logger.info(f"Registered {auth.role} account {auth.id} ({auth.email})")
        return self._session(auth)

    def login(self, email: str, password: str) -> Dict[str, Any]:
        auth = self.repo.get_by_email(email)
        # same error for unknown email and wrong password
        if not auth or not verify_password(password, auth.password_hash):
            logger.warning(f"Failed login for {email}")
            raise InvalidCredentialsError()

        logger.info(f"Account {auth.id} logged in")
        return self._session(auth)

    def change_password(self, auth_id: int, current_password: str, new_password: str):
        auth = self.repo.get(auth_id)
        if not auth:
            raise NotFoundError("Account not found")

        if not verify_password(current_password, auth.password_hash):
            logger.warning(f"Password change rejected for account {auth_id}")
            raise IncorrectPasswordError()

        with transaction(self.db):
            auth.password_hash = hash_password(new_password)

        logger.info(f"Password changed for account {auth_id}")

    #query
    @staticmethod
    def verify_token(token: str) -> Dict[str, Any]:
        return decode_access_token(token)

    def get_profile(self, auth_id: int):
        auth = self.repo.get(auth_id)
        if not auth:
            raise NotFoundError("Account not found")
        return build_profile(auth)
