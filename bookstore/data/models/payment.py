from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from bookstore.data.database import Base


class PaymentModel(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    # unique: at most one payment per order
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True)

    status = Column(String(20), nullable=False, default="processing")  # processing, paid, failed
    method = Column(String(20), nullable=False)  # qr_code, credit_card, cod
    amount = Column(Numeric(14, 2), nullable=False)

    paid_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    order = relationship("OrderModel", back_populates="payment")
