# bookstore/domain/schemas.py
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, EmailStr, Field, HttpUrl, field_validator

from bookstore.domain.enums import Gender, OrderStatus, PaymentMethod, PaymentStatus, Role

T = TypeVar("T")

_PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")
_PHONE_PATTERN = re.compile(r"^[+]*[(]{0,1}[0-9]{1,4}[)]{0,1}[-\s\./0-9]*$")


def _check_password(value: str) -> str:
    if not _PASSWORD_PATTERN.match(value):
        raise ValueError("Password must contain a lowercase letter, an uppercase letter and a digit")
    return value


def _check_phone(value: Optional[str]) -> Optional[str]:
    if value is not None and not _PHONE_PATTERN.match(value):
        raise ValueError("Invalid phone number")
    return value


# =====================================================
# ENVELOPE
# =====================================================
class PaginationMeta(BaseModel):
    current_page: int
    total_pages: int
    total_items: int
    has_next: bool
    has_prev: bool
    page_size: int


class ApiResponse(BaseModel, Generic[T]):
    """Standard response envelope."""

    success: bool = True
    message: str = "Success"
    data: Optional[T] = None
    errors: Optional[List[str]] = None


class PaginatedResponse(ApiResponse[List[T]], Generic[T]):
    pagination: PaginationMeta


class MessageOut(BaseModel):
    message: str


# =====================================================
# AUTH / PROFILES
# =====================================================
class RegisterIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    role: Role = Role.USER
    phone: Optional[str] = Field(None, max_length=20)
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None

    @field_validator("password")
    @classmethod
    def check_password(cls, value):
        return _check_password(value)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value):
        return _check_phone(value)


class LoginIn(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ChangePasswordIn(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=255)

    @field_validator("new_password")
    @classmethod
    def check_password(cls, value):
        return _check_password(value)


class AddressOut(BaseModel):
    id: int
    user_id: int
    city: str
    ward: str
    specific_address: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserProfile(BaseModel):
    role: Literal["user"] = "user"
    id: int
    auth_id: int
    email: str
    name: str
    phone: Optional[str] = None
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    register_date: Optional[datetime] = None
    addresses: List[AddressOut] = []


class AuthorProfile(BaseModel):
    role: Literal["author"] = "author"
    id: int
    auth_id: int
    email: str
    name: str
    created_at: Optional[datetime] = None


class AdminProfile(BaseModel):
    role: Literal["admin"] = "admin"
    id: int
    auth_id: int
    email: str
    name: str = "Administrator"


Profile = Annotated[Union[UserProfile, AuthorProfile, AdminProfile], Field(discriminator="role")]


class AuthOut(BaseModel):
    token: str
    profile: Profile


# =====================================================
# USERS
# =====================================================
class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None

    @field_validator("password")
    @classmethod
    def check_password(cls, value):
        return _check_password(value)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value):
        return _check_phone(value)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=20)
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value):
        return _check_phone(value)


class UserOut(BaseModel):
    id: int
    email: str
    name: str
    phone: Optional[str] = None
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    register_date: datetime
    addresses: List[AddressOut] = []


# =====================================================
# ADDRESSES
# =====================================================
class AddressCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    city: str = Field(..., min_length=1, max_length=255)
    ward: str = Field(..., min_length=1, max_length=255)
    specific_address: Optional[str] = Field(None, max_length=255)


class AddressUpdate(BaseModel):
    city: Optional[str] = Field(None, min_length=1, max_length=255)
    ward: Optional[str] = Field(None, min_length=1, max_length=255)
    specific_address: Optional[str] = Field(None, max_length=255)


# =====================================================
# CATALOG
# =====================================================
class GenreCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class GenreUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class GenreOut(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class AuthorBrief(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class BookBrief(BaseModel):
    id: int
    title: str
    price: Decimal
    image: Optional[str] = None


class AuthorCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)

    @field_validator("password")
    @classmethod
    def check_password(cls, value):
        return _check_password(value)


class AuthorUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)


class AuthorOut(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime
    books: List[BookBrief] = []


class BookCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = Field(None, max_length=1000)
    stock_quantity: int = Field(..., ge=0)
    pub_time: Optional[date] = None
    genre_id: Optional[int] = None
    author_ids: List[int] = []
    images: List[HttpUrl] = []


class BookUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    description: Optional[str] = Field(None, max_length=1000)
    stock_quantity: Optional[int] = Field(None, ge=0)
    sold_number: Optional[int] = Field(None, ge=0)
    pub_time: Optional[date] = None
    genre_id: Optional[int] = None
    author_ids: Optional[List[int]] = None
    images: Optional[List[HttpUrl]] = None


class BookOut(BaseModel):
    id: int
    title: str
    price: Decimal
    description: Optional[str] = None
    stock_quantity: int
    sold_number: int
    pub_time: Optional[date] = None
    genre: Optional[GenreOut] = None
    authors: List[AuthorBrief] = []
    images: List[str] = []
    created_at: datetime


# =====================================================
# CART
# =====================================================
class CartItemIn(BaseModel):
    """Adding a book to the cart."""

    book_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    is_selected: bool = True


class CartItemUpdate(BaseModel):
    """quantity <= 0 removes the item."""

    quantity: Optional[int] = None
    is_selected: Optional[bool] = None


class CartItemOut(BaseModel):
    cart_id: int
    book_id: int
    book_title: str
    book_price: Decimal
    book_image: Optional[str] = None
    quantity: int
    is_selected: bool
    added_at: datetime
    sub_total: Decimal


class CartOut(BaseModel):
    cart_id: int
    user_id: int
    items: List[CartItemOut]
    total_items: int
    total_price: Decimal


# =====================================================
# ORDERS
# =====================================================
class OrderItemIn(BaseModel):
    book_id: int
    quantity: int


class OrderCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    address_id: int = Field(..., gt=0)
    phone: str = Field(..., min_length=1, max_length=20)
    items: List[OrderItemIn]

    @field_validator("phone")
    @classmethod
    def check_phone(cls, value):
        return _check_phone(value)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemOut(BaseModel):
    book_id: int
    book_title: str
    book_image: Optional[str] = None
    price_at_time: Decimal
    quantity: int
    sub_total: Decimal


class PaymentBrief(BaseModel):
    id: int
    status: PaymentStatus
    method: PaymentMethod
    amount: Decimal
    paid_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    user_id: int
    status: OrderStatus
    total_amount: Decimal
    address_snapshot: str
    phone_snapshot: str
    created_at: datetime
    items: List[OrderItemOut]
    payment: Optional[PaymentBrief] = None


class OrderStatistics(BaseModel):
    total_orders: int
    total_revenue: Decimal
    pending_orders: int
    completed_orders: int


# =====================================================
# PAYMENTS
# =====================================================
class PaymentCreate(BaseModel):
    order_id: int = Field(..., gt=0)
    method: PaymentMethod
    amount: Decimal = Field(..., gt=0)


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus


class OrderBrief(BaseModel):
    id: int
    user_id: int
    status: OrderStatus
    total_amount: Decimal

    model_config = ConfigDict(from_attributes=True)


class PaymentOut(BaseModel):
    id: int
    order_id: int
    status: PaymentStatus
    method: PaymentMethod
    amount: Decimal
    paid_at: Optional[datetime] = None
    created_at: datetime
    order: OrderBrief

    model_config = ConfigDict(from_attributes=True)


class PaymentStatistics(BaseModel):
    total_payments: int
    total_revenue: Decimal
    processing_payments: int
    paid_payments: int
    failed_payments: int
    revenue_by_method: dict[PaymentMethod, Decimal]


# =====================================================
# REVIEWS / WISHLISTS
# =====================================================
class ReviewCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    book_id: int = Field(..., gt=0)
    rating: int
    comment: Optional[str] = Field(None, max_length=1000)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = None
    comment: Optional[str] = Field(None, max_length=1000)


class ReviewOut(BaseModel):
    id: int
    user_id: int
    user_name: str
    book_id: int
    book_title: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class RatingSummary(BaseModel):
    average_rating: float
    total_reviews: int
    rating_distribution: dict[int, int]


class WishlistCreate(BaseModel):
    user_id: int = Field(..., gt=0)
    book_id: int = Field(..., gt=0)


class WishlistOut(BaseModel):
    id: int
    user_id: int
    book_id: int
    created_at: datetime
    book: BookBrief


class WishlistCheck(BaseModel):
    in_wishlist: bool
    wishlist_id: Optional[int] = None
