from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from bookstore.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False, default="pending")  # pending, processing, completed, canceled
    total_amount = Column(Numeric(14, 2), nullable=False)

    # copied at creation so later address edits do not rewrite history
    address_snapshot = Column(String(500), nullable=False)
    phone_snapshot = Column(String(20), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    user = relationship("UserModel", back_populates="orders")
    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )
    payment = relationship("PaymentModel", back_populates="order", uselist=False, cascade="all, delete-orphan")
