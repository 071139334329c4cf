# bookstore/domain/enums.py
from enum import Enum


class Role(str, Enum):
    USER = "user"
    AUTHOR = "author"
    ADMIN = "admin"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"  # reserved, nothing moves an order here
    COMPLETED = "completed"
    CANCELED = "canceled"


class PaymentStatus(str, Enum):
    PROCESSING = "processing"
    PAID = "paid"
    FAILED = "failed"


class PaymentMethod(str, Enum):
    QR_CODE = "qr_code"
    CREDIT_CARD = "credit_card"
    COD = "cod"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"
