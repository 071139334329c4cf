# bookstore/services/identity.py
"""
One credential row, three possible profiles. The role is resolved once here
into a UserProfile / AuthorProfile / AdminProfile variant, so callers work
with a Principal instead of branching on role strings.
"""
from dataclasses import dataclass

from sqlalchemy.orm import Session

from bookstore.data.models.admin import AdminModel
from bookstore.data.models.authentication import AuthenticationModel
from bookstore.data.models.author import AuthorModel
from bookstore.data.models.cart import CartModel
from bookstore.data.models.user import UserModel
from bookstore.domain.enums import Role
from bookstore.domain.errors import InvalidTokenError, NotFoundError
from bookstore.domain.schemas import AddressOut, AdminProfile, AuthorProfile, UserProfile


# =====================================================
# PROFILE FACTORIES (registration)
# =====================================================
def _create_user_profile(db: Session, auth: AuthenticationModel, data: dict):
    user = UserModel(
        authentication=auth,
        name=data["name"],
        phone=data.get("phone") or None,
        gender=data["gender"].value if data.get("gender") else None,
        birth_date=data.get("birth_date"),
    )
    # every user starts with an empty cart
    user.cart = CartModel()
    db.add(user)
    return user


def _create_author_profile(db: Session, auth: AuthenticationModel, data: dict):
    author = AuthorModel(authentication=auth, name=data["name"])
    db.add(author)
    return author


def _create_admin_profile(db: Session, auth: AuthenticationModel, data: dict):
    admin = AdminModel(authentication=auth)
    db.add(admin)
    return admin


PROFILE_FACTORIES = {
    Role.USER: _create_user_profile,
    Role.AUTHOR: _create_author_profile,
    Role.ADMIN: _create_admin_profile,
}


def create_profile(db: Session, auth: AuthenticationModel, data: dict):
    return PROFILE_FACTORIES[Role(auth.role)](db, auth, data)


# =====================================================
# PROFILE RESOLUTION
# =====================================================
def _user_profile(auth: AuthenticationModel):
    user = auth.user
    if user is None:
        return None
    return UserProfile(
        id=user.id,
        auth_id=auth.id,
        email=auth.email,
        name=user.name,
        phone=user.phone,
        gender=user.gender,
        birth_date=user.birth_date,
        register_date=user.register_date,
        addresses=[AddressOut.model_validate(a) for a in user.addresses],
    )


def _author_profile(auth: AuthenticationModel):
    author = auth.author
    if author is None:
        return None
    return AuthorProfile(
        id=author.id,
        auth_id=auth.id,
        email=auth.email,
        name=author.name,
        created_at=author.created_at,
    )


def _admin_profile(auth: AuthenticationModel):
    admin = auth.admin
    if admin is None:
        return None
    return AdminProfile(id=admin.id, auth_id=auth.id, email=auth.email)


PROFILE_RESOLVERS = {
    Role.USER: _user_profile,
    Role.AUTHOR: _author_profile,
    Role.ADMIN: _admin_profile,
}


def build_profile(auth: AuthenticationModel):
    profile = PROFILE_RESOLVERS[Role(auth.role)](auth)
    if profile is None:
        raise NotFoundError("Profile not found")
    return profile


# =====================================================
# PRINCIPAL (authenticated caller)
# =====================================================
@dataclass(frozen=True)
class Principal:
    auth_id: int
    email: str
    role: Role
    profile_id: int

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def owns_user(self, user_id: int) -> bool:
        return self.is_admin or (self.role == Role.USER and self.profile_id == user_id)

    def owns_author(self, author_id: int) -> bool:
        return self.is_admin or (self.role == Role.AUTHOR and self.profile_id == author_id)


def load_principal(db: Session, claims: dict) -> Principal:
    """
    Token claims -> Principal. The profile id always comes from the stored
    credential, never from the token itself.
    """
    auth = db.get(AuthenticationModel, claims["auth_id"])
    if auth is None or auth.role != claims["role"]:
        raise InvalidTokenError("Token does not match any account")

    try:
        profile = build_profile(auth)
    except NotFoundError as e:
        raise InvalidTokenError("Token does not match any account") from e

    return Principal(
        auth_id=auth.id,
        email=auth.email,
        role=Role(auth.role),
        profile_id=profile.id,
    )
