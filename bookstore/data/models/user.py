from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from bookstore.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    auth_id = Column(Integer, ForeignKey("authentications.id", ondelete="CASCADE"), nullable=False, unique=True)

    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    gender = Column(String(10), nullable=True)
    birth_date = Column(Date, nullable=True)
    register_date = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    authentication = relationship("AuthenticationModel", back_populates="user")

    addresses = relationship("AddressModel", back_populates="user", cascade="all, delete-orphan")
    cart = relationship("CartModel", back_populates="user", uselist=False, cascade="all, delete-orphan")
    wishlists = relationship("WishlistModel", back_populates="user", cascade="all, delete-orphan")
    reviews = relationship("ReviewModel", back_populates="user", cascade="all, delete-orphan")

    # order history outlives catalog changes; the FK blocks deleting a user who ordered
    orders = relationship("OrderModel", back_populates="user", passive_deletes="all")
