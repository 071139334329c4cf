# bookstore/api/deps.py
from typing import Optional

from fastapi import Cookie, Depends, Header, Request
from sqlalchemy.orm import Session

from bookstore.data.database import get_db
from bookstore.domain.enums import Role
from bookstore.domain.errors import ForbiddenError, InvalidTokenError
from bookstore.services.identity import Principal, load_principal
from bookstore.services.payment_service import PaymentGateway
from bookstore.services.rate_limiter import RateLimiter
from bookstore.utils.security import decode_access_token

_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter


def get_payment_gateway() -> PaymentGateway:
    return PaymentGateway()


def rate_limit(scope: str):
    def dependency(request: Request, limiter: RateLimiter = Depends(get_rate_limiter)):
        client_id = request.client.host if request.client else "unknown"
        limiter.check(scope, client_id)

    return dependency


def get_token_claims(
    authorization: Optional[str] = Header(default=None),
    token: Optional[str] = Cookie(default=None),
) -> dict:
    # header wins over cookie
    if authorization and authorization.lower().startswith("bearer "):
        raw = authorization.split(" ", 1)[1].strip()
    else:
        raw = token

    if not raw:
        raise InvalidTokenError("Access denied. No token provided.")
    return decode_access_token(raw)


def get_current_principal(claims: dict = Depends(get_token_claims), db: Session = Depends(get_db)) -> Principal:
    return load_principal(db, claims)


def require_roles(*roles: Role):
    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in roles:
            raise ForbiddenError()
        return principal

    return dependency


require_admin = require_roles(Role.ADMIN)


def ensure_owns_user(principal: Principal, user_id: int):
    if not principal.owns_user(user_id):
        raise ForbiddenError("You can only access your own resources")


def ensure_owns_author(principal: Principal, author_id: int):
    if not principal.owns_author(author_id):
        raise ForbiddenError("You can only access your own resources")
