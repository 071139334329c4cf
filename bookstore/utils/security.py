# bookstore/utils/security.py
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext

from bookstore.domain.errors import InvalidTokenError
from bookstore.utils.settings import (
    BCRYPT_ROUNDS,
    JWT_ALGORITHM,
    JWT_EXPIRES_SECONDS,
    JWT_SECRET,
)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(auth_id: int, email: str, role: str, expires_in: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(auth_id),
        "email": email,
        "role": role,
        "iat": now,
        "exp": now + timedelta(seconds=expires_in if expires_in is not None else JWT_EXPIRES_SECONDS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Returns {auth_id, email, role}. Bad signature, expiry and malformed
    payloads all surface as InvalidTokenError.
    """
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise InvalidTokenError("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError("Invalid or expired token") from e

    try:
        return {
            "auth_id": int(payload["sub"]),
            "email": payload["email"],
            "role": payload["role"],
        }
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidTokenError("Invalid token payload") from e
